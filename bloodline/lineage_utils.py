from __future__ import annotations

from collections import deque
from typing import Iterable, Optional, Set

from .pedigree_graph import PedigreeGraph


def collect_ancestors(
    graph: PedigreeGraph,
    individual_id: str,
    into: Optional[Set[str]] = None,
) -> Set[str]:
    """
    Every individual reachable by following sire/dam edges from individual_id.

    The visited set is checked before recursing (insert-if-new, recurse only
    on a successful insert), which both dedupes shared ancestors and stops
    on cyclic parent data. Sentinels and ids missing from the graph end the
    walk and are never inserted.

    If `into` is given, results are added to it (and it is returned).
    """
    visited: Set[str] = into if into is not None else set()

    def walk(hid: str) -> None:
        node = graph.get(hid)
        if node is None:
            return
        for pid in node.parents:
            if pid in visited or pid not in graph:
                continue
            visited.add(pid)
            walk(pid)

    walk(individual_id)
    return visited


def collect_descendants(
    graph: PedigreeGraph,
    individual_id: str,
    into: Optional[Set[str]] = None,
) -> Set[str]:
    """
    Every individual reachable by following child edges from individual_id.

    Breadth-first from a queue seeded with individual_id; same insert-if-new
    guard as collect_ancestors, so malformed (cyclic) children links terminate.
    """
    visited: Set[str] = into if into is not None else set()

    q = deque([individual_id])
    while q:
        cur = q.popleft()
        for child in graph.children_of(cur):
            if child not in visited:
                visited.add(child)
                q.append(child)

    return visited


def ancestors_of(graph: PedigreeGraph, ids: Iterable[str]) -> Set[str]:
    """
    Union of collect_ancestors over every id (relevance set for file B).
    """
    out: Set[str] = set()
    for hid in ids:
        collect_ancestors(graph, hid, out)
    return out


def descendants_of(graph: PedigreeGraph, ids: Iterable[str]) -> Set[str]:
    """
    Union of collect_descendants over every id (relevance set for file A).
    """
    out: Set[str] = set()
    for hid in ids:
        collect_descendants(graph, hid, out)
    return out
