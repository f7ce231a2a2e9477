from __future__ import annotations

from typing import Dict, Iterable, Iterator, List, Optional, Tuple

from .birthyear_utils import population_sort_key
from .models import Individual, is_sentinel


ChildrenIndex = Dict[str, List[str]]


class PedigreeGraph:
    """
    Read-only pedigree built once from loaded records.

    Holds:
      - id -> Individual (single authoritative mapping)
      - parent id -> [child ids], derived after load

    Sentinel ids and ids missing from the population never resolve; lookups
    against them return None / empty.
    """

    def __init__(self, individuals: Dict[str, Individual], children: ChildrenIndex) -> None:
        self._individuals = individuals
        self._children = children

    # ------------------------------------------------------------------
    # Construction
    # ------------------------------------------------------------------

    @classmethod
    def build(cls, individuals: Optional[Iterable[Individual]]) -> "PedigreeGraph":
        """
        Build the graph from loaded individuals.

        - None is rejected (no record source at all).
        - An empty iterable gives an empty graph.
        - Duplicate ids: the last record wins.
        - Children are indexed under real parent ids only; the parent does
          not have to be present in the population.
        """
        if individuals is None:
            raise ValueError("individuals must not be None")

        by_id: Dict[str, Individual] = {}
        for ind in individuals:
            by_id[ind.id] = ind

        children: ChildrenIndex = {}
        for ind in by_id.values():
            for pid in ind.parents:
                if is_sentinel(pid):
                    continue
                children.setdefault(pid, []).append(ind.id)

        return cls(by_id, children)

    # ------------------------------------------------------------------
    # Lookups
    # ------------------------------------------------------------------

    def get(self, individual_id: Optional[str]) -> Optional[Individual]:
        if is_sentinel(individual_id):
            return None
        return self._individuals.get(individual_id)  # type: ignore[arg-type]

    def children_of(self, individual_id: str) -> Tuple[str, ...]:
        return tuple(self._children.get(individual_id, ()))

    def all_ids(self) -> List[str]:
        return list(self._individuals)

    def population(self) -> List[str]:
        """
        All ids ordered by birth year, then id (unknown years first).
        """
        ordered = sorted(self._individuals.values(), key=population_sort_key)
        return [ind.id for ind in ordered]

    def display_name(self, individual_id: str) -> str:
        ind = self.get(individual_id)
        if ind is None:
            return individual_id
        return ind.display_name

    def __contains__(self, individual_id: object) -> bool:
        if not isinstance(individual_id, str) or is_sentinel(individual_id):
            return False
        return individual_id in self._individuals

    def __len__(self) -> int:
        return len(self._individuals)

    def __iter__(self) -> Iterator[Individual]:
        return iter(self._individuals.values())
