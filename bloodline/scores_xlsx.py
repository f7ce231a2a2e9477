from __future__ import annotations

from pathlib import Path
from typing import Mapping

from openpyxl import Workbook, load_workbook
from openpyxl.worksheet.worksheet import Worksheet

from .blood_matrix import BloodTable
from .pedigree_graph import PedigreeGraph
from .table_writer import HEADER_CORNER


def _replace_sheet(wb: Workbook, sheet_name: str) -> Worksheet:
    """
    Return an empty sheet called sheet_name, dropping any previous one so a
    rerun never mixes old and new values.
    """
    if sheet_name in wb.sheetnames:
        wb.remove(wb[sheet_name])
    return wb.create_sheet(title=sheet_name)


def _write_headers(ws: Worksheet, headers: list[str]) -> None:
    for col_idx, h in enumerate(headers, start=1):
        ws.cell(row=1, column=col_idx, value=h)


def _write_table(ws: Worksheet, graph: PedigreeGraph, table: BloodTable) -> None:
    _write_headers(ws, [HEADER_CORNER] + [graph.display_name(c) for c in table.col_ids])

    for r, (rid, values) in enumerate(zip(table.row_ids, table.values), start=2):
        ws.cell(row=r, column=1, value=graph.display_name(rid))
        for c, v in enumerate(values, start=2):
            ws.cell(row=r, column=c, value=float(v))


def write_tables_xlsx(
    *,
    xlsx_path: Path,
    graph: PedigreeGraph,
    tables: Mapping[str, BloodTable],
) -> None:
    """
    Write result tables into one workbook, one sheet per entry of `tables`.

    Behavior:
      - If the file doesn't exist: create it.
      - If it exists: other sheets are kept, same-named sheets are replaced.
      - Cells hold full floats; Excel formatting is left to the reader.
    """
    xlsx_path = Path(xlsx_path)
    existed = xlsx_path.exists()

    wb = load_workbook(xlsx_path) if existed else Workbook()

    for sheet_name, table in tables.items():
        ws = _replace_sheet(wb, sheet_name)
        _write_table(ws, graph, table)

    # Remove default "Sheet" if it's empty and we created the workbook
    if not existed and "Sheet" in wb.sheetnames and "Sheet" not in tables:
        default_ws = wb["Sheet"]
        if default_ws.max_row == 1 and default_ws.max_column == 1 and default_ws["A1"].value is None:
            wb.remove(default_ws)

    xlsx_path.parent.mkdir(parents=True, exist_ok=True)
    wb.save(xlsx_path)
