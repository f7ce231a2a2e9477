from __future__ import annotations

from typing import Optional, Set

from .pedigree_graph import PedigreeGraph
from .pedigree_store import TieredCache

# Values closer to zero than this are reported as exactly 0.0
ZERO_EPSILON = 1e-12


def normalize_fraction(value: float) -> float:
    """
    Drop floating-point noise left over from summing halvings.
    """
    if abs(value) < ZERO_EPSILON:
        return 0.0
    return value


class BloodCalculator:
    """
    Blood fraction of an ancestor's lineage present in a descendant.

    f(d, a) = 1                                 if d == a
            = 0.5 * f(sire(d), a) + 0.5 * f(dam(d), a)
            = 0                                 if d or a is unknown / absent
            = 0                                 if d is already on the active path

    IMPORTANT: the two arguments are not interchangeable.
    f(child, parent) == 0.5 but f(parent, child) == 0.0.

    Results are full precision; rounding and near-zero cleanup are left to
    callers (see normalize_fraction).
    """

    def __init__(self, graph: PedigreeGraph, cache: Optional[TieredCache] = None) -> None:
        self.graph = graph
        self.cache = cache if cache is not None else TieredCache()
        self.calls = 0   # top-level invocations only

    def compute_fraction(
        self,
        descendant: str,
        ancestor: str,
        guard: Optional[Set[str]] = None,
    ) -> float:
        """
        Fraction of `ancestor`'s blood carried by `descendant`, in [0, 1].

        `guard` holds the ids currently being expanded on this call path. Leave
        it as None for a top-level call; a fresh set is created so sibling
        top-level calls never share cycle state.
        """
        if guard is None:
            self.calls += 1
            guard = set()
        return self._fraction(descendant, ancestor, guard)

    def _fraction(self, descendant: str, ancestor: str, guard: Set[str]) -> float:
        key = (descendant, ancestor)

        cached = self.cache.get(key)
        if cached is not None:
            return cached

        node = self.graph.get(descendant)
        if node is None or ancestor not in self.graph:
            value = 0.0
        elif descendant == ancestor:
            value = 1.0
        elif descendant in guard:
            # Looped back onto the active path; not cached, it is path-dependent.
            return 0.0
        else:
            guard.add(descendant)
            try:
                value = (
                    0.5 * self._fraction(node.sire_id, ancestor, guard)
                    + 0.5 * self._fraction(node.dam_id, ancestor, guard)
                )
            finally:
                guard.discard(descendant)

        self.cache.put(key, value)
        return value
