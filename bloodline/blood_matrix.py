from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import Callable, Collection, List, Sequence, Tuple

from .lineage_utils import ancestors_of, descendants_of
from .pedigree_graph import PedigreeGraph
from .pedigree_scoring import BloodCalculator, normalize_fraction


NeedFn = Callable[[str, str], bool]


# ---------------------------------------------------------------------------
# Result table
# ---------------------------------------------------------------------------

@dataclass
class BloodTable:
    """
    Rectangular result: values[i][j] belongs to (row_ids[i], col_ids[j]).
    """
    row_ids: List[str]
    col_ids: List[str]
    values: List[List[float]] = field(default_factory=list)

    def transposed(self) -> "BloodTable":
        cols = [list(c) for c in zip(*self.values)]
        if not self.row_ids:
            cols = [[] for _ in self.col_ids]
        return BloodTable(row_ids=list(self.col_ids), col_ids=list(self.row_ids), values=cols)

    def cell(self, row_id: str, col_id: str) -> float:
        return self.values[self.row_ids.index(row_id)][self.col_ids.index(col_id)]

    def column(self, col_id: str) -> List[float]:
        j = self.col_ids.index(col_id)
        return [row[j] for row in self.values]


# ---------------------------------------------------------------------------
# Progress output
# ---------------------------------------------------------------------------

def _pct_truncated(value: float) -> float:
    """
    Percentage truncated (not rounded) to 5 decimals.
    """
    return math.floor(value * 1_000_000.0) / 10_000.0


def _progress_line(tag: str, idx: int, total: int, label: str, computed: bool, value: float) -> str:
    kind = "calc" if computed else "skip"
    return f"[{tag}] ({idx}/{total})  {label}  [{kind}: {_pct_truncated(value):.5f}%]"


# ---------------------------------------------------------------------------
# Single-target vectors
# ---------------------------------------------------------------------------

def descendant_vector(
    calc: BloodCalculator,
    population: Sequence[str],
    target: str,
    relevant: Collection[str],
    *,
    progress: bool = False,
) -> BloodTable:
    """
    File A, one target: target's blood in every population member.

    Members outside `relevant` (the target's descendants) are 0.0 and the
    calculator is not called for them.
    """
    values: List[List[float]] = []
    total = len(population)

    for idx, member in enumerate(population, start=1):
        need = member in relevant
        v = normalize_fraction(calc.compute_fraction(member, target)) if need else 0.0
        values.append([v])
        if progress:
            print(_progress_line("A", idx, total, calc.graph.display_name(member), need, v))

    return BloodTable(row_ids=list(population), col_ids=[target], values=values)


def ancestor_vector(
    calc: BloodCalculator,
    population: Sequence[str],
    target: str,
    relevant: Collection[str],
    *,
    progress: bool = False,
) -> BloodTable:
    """
    File B, one target: every population member's blood in the target.

    Laid out vertically like file A (rows = population, one target column).
    Candidates outside `relevant` (the target's ancestors) are 0.0.
    """
    values: List[List[float]] = []
    total = len(population)

    for idx, candidate in enumerate(population, start=1):
        need = candidate in relevant
        v = normalize_fraction(calc.compute_fraction(target, candidate)) if need else 0.0
        values.append([v])
        if progress:
            print(_progress_line("B", idx, total, calc.graph.display_name(candidate), need, v))

    return BloodTable(row_ids=list(population), col_ids=[target], values=values)


# ---------------------------------------------------------------------------
# Multi-target matrix
# ---------------------------------------------------------------------------

def blood_matrix(
    calc: BloodCalculator,
    row_ids: Sequence[str],
    col_ids: Sequence[str],
    *,
    transpose: bool,
    need: NeedFn,
    progress: bool = False,
) -> BloodTable:
    """
    Fill a logical rows x cols table, emitting it transposed if asked.

    - need(row, col) is always called in logical (untransposed) order.
    - The logical row is always the descendant and the logical column the
      ancestor. With transpose=True the emitted rows are the logical columns,
      so emitted cell (r, c) holds f(descendant=c, ancestor=r).
    - Cells where need() is False are 0.0 without a calculator call.
    """
    out_rows = list(col_ids) if transpose else list(row_ids)
    out_cols = list(row_ids) if transpose else list(col_ids)

    values: List[List[float]] = []
    total = len(out_rows)

    for idx, rk in enumerate(out_rows, start=1):
        if progress:
            print(f"[Matrix] ({idx}/{total})  {calc.graph.display_name(rk)}")

        row: List[float] = []
        for ck in out_cols:
            logical_row, logical_col = (ck, rk) if transpose else (rk, ck)
            v = 0.0
            if need(logical_row, logical_col):
                v = normalize_fraction(calc.compute_fraction(logical_row, logical_col))
            row.append(v)
        values.append(row)

    return BloodTable(row_ids=out_rows, col_ids=out_cols, values=values)


# ---------------------------------------------------------------------------
# Main entry point
# ---------------------------------------------------------------------------

def compute_blood_tables(
    graph: PedigreeGraph,
    calc: BloodCalculator,
    targets: Sequence[str],
    *,
    progress: bool = False,
) -> Tuple[BloodTable, BloodTable]:
    """
    Compute file A and file B for the given targets.

    File A: rows = population (birth year, then id), columns = targets;
            target's blood present in each member.
    File B: member's blood present in each target. Logically targets x
            population, emitted transposed (rows = population).

    Relevance sets are the union over all targets and live only for this call.
    """
    target_ids = sorted(set(targets))
    if not target_ids:
        raise ValueError("at least one target is required")

    population = graph.population()
    set_desc = descendants_of(graph, target_ids)
    set_anc = ancestors_of(graph, target_ids)

    if len(target_ids) == 1:
        target = target_ids[0]
        file_a = descendant_vector(calc, population, target, set_desc, progress=progress)
        file_b = ancestor_vector(calc, population, target, set_anc, progress=progress)
        return file_a, file_b

    file_a = blood_matrix(
        calc,
        population,
        target_ids,
        transpose=False,
        need=lambda row, col: row in set_desc,
        progress=progress,
    )
    file_b = blood_matrix(
        calc,
        target_ids,
        population,
        transpose=True,
        need=lambda row, col: col in set_anc,
        progress=progress,
    )
    return file_a, file_b
