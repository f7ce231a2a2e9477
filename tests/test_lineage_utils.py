from __future__ import annotations

from bloodline.lineage_utils import (
    ancestors_of,
    collect_ancestors,
    collect_descendants,
    descendants_of,
)
from bloodline.models import Individual, UNKNOWN_DAM, UNKNOWN_SIRE
from bloodline.pedigree_graph import PedigreeGraph


def _ind(hid: str, sire: str = UNKNOWN_SIRE, dam: str = UNKNOWN_DAM) -> Individual:
    return Individual(id=hid, name=hid, sire_id=sire, dam_id=dam)


def _graph() -> PedigreeGraph:
    #   G1   G2
    #    \  /
    #     P1   P2 (dam GHOST, not in population)
    #      \  /
    #       K
    return PedigreeGraph.build([
        _ind("G1"),
        _ind("G2"),
        _ind("P1", sire="G1", dam="G2"),
        _ind("P2", dam="GHOST"),
        _ind("K", sire="P1", dam="P2"),
        _ind("LONER"),
    ])


def test_collect_ancestors_skips_sentinels_and_absent_ids() -> None:
    g = _graph()
    assert collect_ancestors(g, "K") == {"P1", "P2", "G1", "G2"}
    assert collect_ancestors(g, "G1") == set()
    assert collect_ancestors(g, "NOT_THERE") == set()


def test_collect_descendants_breadth_first_closure() -> None:
    g = _graph()
    assert collect_descendants(g, "G1") == {"P1", "K"}
    assert collect_descendants(g, "K") == set()
    assert collect_descendants(g, "LONER") == set()


def test_collectors_terminate_on_cycles() -> None:
    g = PedigreeGraph.build([_ind("A", sire="B"), _ind("B", sire="A")])
    assert collect_ancestors(g, "A") == {"A", "B"}
    assert collect_descendants(g, "A") == {"A", "B"}


def test_union_over_targets() -> None:
    g = _graph()
    assert ancestors_of(g, ["P1", "P2"]) == {"G1", "G2"}
    assert descendants_of(g, ["G2", "P2"]) == {"P1", "K"}
    assert ancestors_of(g, []) == set()


def test_collect_into_existing_set() -> None:
    g = _graph()
    acc = {"X"}
    out = collect_ancestors(g, "P1", acc)
    assert out is acc
    assert acc == {"X", "G1", "G2"}
