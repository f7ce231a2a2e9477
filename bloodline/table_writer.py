from __future__ import annotations

import csv
from pathlib import Path
from typing import List

from .blood_matrix import BloodTable
from .pedigree_graph import PedigreeGraph

HEADER_CORNER = "HorseName"
VALUE_FORMAT = "{:.8f}"


def file_a_name(label: str) -> str:
    return f"blood_of_{label}_in_all_horses.csv"


def file_b_name(label: str) -> str:
    return f"blood_of_all_horses_in_{label}.csv"


def table_rows(graph: PedigreeGraph, table: BloodTable) -> List[List[str]]:
    """
    Header row of display names, then one row per table row:
    display name followed by the 8-decimal values.
    """
    rows: List[List[str]] = [[HEADER_CORNER] + [graph.display_name(c) for c in table.col_ids]]
    for rid, values in zip(table.row_ids, table.values):
        rows.append([graph.display_name(rid)] + [VALUE_FORMAT.format(v) for v in values])
    return rows


def write_table_csv(path: Path, graph: PedigreeGraph, table: BloodTable) -> Path:
    """
    Write one result table as CSV.

    Written to a temporary file first and moved into place, so a failed run
    never leaves a half-written table behind. OSError propagates.
    """
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)

    tmp_path = path.with_suffix(path.suffix + ".tmp")
    with tmp_path.open("w", encoding="utf-8", newline="") as f:
        writer = csv.writer(f, lineterminator="\n")
        writer.writerows(table_rows(graph, table))

    tmp_path.replace(path)
    return path
