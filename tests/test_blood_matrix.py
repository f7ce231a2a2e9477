from __future__ import annotations

from typing import List, Optional, Set, Tuple

from bloodline.blood_matrix import (
    BloodTable,
    ancestor_vector,
    blood_matrix,
    compute_blood_tables,
    descendant_vector,
)
from bloodline.lineage_utils import collect_descendants
from bloodline.models import Individual, UNKNOWN_DAM, UNKNOWN_SIRE
from bloodline.pedigree_graph import PedigreeGraph
from bloodline.pedigree_scoring import BloodCalculator


class CountingCalculator(BloodCalculator):
    """Records every top-level (descendant, ancestor) request."""

    def __init__(self, graph: PedigreeGraph) -> None:
        super().__init__(graph)
        self.requests: List[Tuple[str, str]] = []

    def compute_fraction(self, descendant: str, ancestor: str, guard: Optional[Set[str]] = None) -> float:
        if guard is None:
            self.requests.append((descendant, ancestor))
        return super().compute_fraction(descendant, ancestor, guard)


def _ind(hid: str, year: int, sire: str = UNKNOWN_SIRE, dam: str = UNKNOWN_DAM) -> Individual:
    return Individual(id=hid, name=hid, birth_year=year, birth_year_text=str(year), sire_id=sire, dam_id=dam)


def _graph() -> PedigreeGraph:
    # A(1990) -> B(1995) -> C(2000); M(1992) is dam of C; U(1980) unrelated
    return PedigreeGraph.build([
        _ind("A", 1990),
        _ind("M", 1992),
        _ind("B", 1995, sire="A"),
        _ind("C", 2000, sire="B", dam="M"),
        _ind("U", 1980),
    ])


def test_descendant_vector_gates_non_descendants() -> None:
    g = _graph()
    calc = CountingCalculator(g)
    pop = g.population()
    relevant = collect_descendants(g, "A")

    table = descendant_vector(calc, pop, "A", relevant)

    assert table.row_ids == ["U", "A", "M", "B", "C"]
    assert table.col_ids == ["A"]
    assert table.column("A") == [0.0, 0.0, 0.0, 0.5, 0.25]
    # only descendants reached the calculator
    assert sorted(d for d, _ in calc.requests) == ["B", "C"]
    assert calc.calls == 2
    for member in pop:
        if member not in relevant:
            assert table.cell(member, "A") == 0.0


def test_ancestor_vector_is_vertical_and_gated() -> None:
    g = _graph()
    calc = CountingCalculator(g)
    pop = g.population()

    table = ancestor_vector(calc, pop, "C", {"A", "B", "M"})

    assert table.row_ids == pop
    assert table.col_ids == ["C"]
    assert table.cell("B", "C") == 0.5
    assert table.cell("M", "C") == 0.5
    assert table.cell("A", "C") == 0.25
    assert table.cell("C", "C") == 0.0   # C is not its own ancestor: gated
    assert table.cell("U", "C") == 0.0
    assert all(d == "C" for d, _ in calc.requests)
    assert len(calc.requests) == 3
    assert calc.calls == 3


def test_blood_matrix_argument_order_follows_transpose() -> None:
    g = _graph()
    calc = BloodCalculator(g)

    plain = blood_matrix(calc, ["C"], ["A"], transpose=False, need=lambda r, c: True)
    assert plain.row_ids == ["C"] and plain.col_ids == ["A"]
    assert plain.values == [[0.25]]   # f(descendant=C, ancestor=A)

    # emitted rows are the logical columns; the descendant stays C
    flipped = blood_matrix(calc, ["C"], ["A"], transpose=True, need=lambda r, c: True)
    assert flipped.row_ids == ["A"] and flipped.col_ids == ["C"]
    assert flipped.values == [[0.25]]

    reverse = blood_matrix(calc, ["A"], ["C"], transpose=False, need=lambda r, c: True)
    assert reverse.values == [[0.0]]  # f(descendant=A, ancestor=C)


def test_blood_matrix_need_sees_logical_order() -> None:
    g = _graph()
    calc = CountingCalculator(g)
    seen: List[Tuple[str, str]] = []

    def need(row: str, col: str) -> bool:
        seen.append((row, col))
        return False

    table = blood_matrix(calc, ["C", "B"], ["A"], transpose=True, need=need)

    assert sorted(seen) == [("B", "A"), ("C", "A")]
    assert table.values == [[0.0, 0.0]]
    assert calc.requests == []
    assert calc.calls == 0


def test_compute_blood_tables_single_target() -> None:
    g = _graph()
    calc = BloodCalculator(g)
    file_a, file_b = compute_blood_tables(g, calc, ["B"])

    assert file_a.col_ids == ["B"] and file_b.col_ids == ["B"]
    assert file_a.cell("C", "B") == 0.5
    assert file_a.cell("A", "B") == 0.0
    assert file_b.cell("A", "B") == 0.5
    assert file_b.cell("C", "B") == 0.0


def test_compute_blood_tables_multi_target_layout() -> None:
    g = _graph()
    calc = CountingCalculator(g)
    file_a, file_b = compute_blood_tables(g, calc, ["M", "A"])

    pop = g.population()
    # file A: rows = population, cols = sorted targets
    assert file_a.row_ids == pop
    assert file_a.col_ids == ["A", "M"]
    assert file_a.cell("C", "A") == 0.25
    assert file_a.cell("C", "M") == 0.5
    assert file_a.cell("B", "M") == 0.0

    # file B: logical targets x population, emitted transposed
    assert file_b.row_ids == pop
    assert file_b.col_ids == ["A", "M"]
    # neither target has ancestors, so nothing in file B needed computing
    assert all(v == 0.0 for row in file_b.values for v in row)

    # file A only asked about descendants of A or M
    assert {d for d, _ in calc.requests} == {"B", "C"}
    # B and C against each of A and M; file B made no calls
    assert calc.calls == 4


def test_transposed_table() -> None:
    t = BloodTable(row_ids=["r1", "r2"], col_ids=["c1"], values=[[0.5], [0.25]])
    tt = t.transposed()
    assert tt.row_ids == ["c1"]
    assert tt.col_ids == ["r1", "r2"]
    assert tt.values == [[0.5, 0.25]]

    empty = BloodTable(row_ids=[], col_ids=["c1", "c2"], values=[])
    assert empty.transposed().values == [[], []]


def test_compute_blood_tables_is_silent_unless_asked(capsys) -> None:
    g = _graph()
    compute_blood_tables(g, BloodCalculator(g), ["B"])
    assert capsys.readouterr().out == ""

    compute_blood_tables(g, BloodCalculator(g), ["B"], progress=True)
    lines = capsys.readouterr().out.splitlines()
    assert "[A] (5/5)  C [2000]  [calc: 50.00000%]" in lines
    assert "[B] (1/5)  U [1980]  [skip: 0.00000%]" in lines
