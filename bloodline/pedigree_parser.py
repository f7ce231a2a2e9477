from __future__ import annotations

import csv
from pathlib import Path
from typing import Iterable, Iterator, List

from .birthyear_utils import parse_birth_year
from .models import Individual, RecordsReadError, UNKNOWN_DAM, UNKNOWN_SIRE


# Column positions in bloodline.csv
COL_ID = 0
COL_SIRE = 1
COL_DAM = 2
COL_YEAR = 5
COL_NAME = 8
MIN_FIELDS = 9

# Records exported by spreadsheet tools often carry a BOM
DEFAULT_ENCODING = "utf-8-sig"


# ---------------------------------------------------------------------------
# Internal helpers
# ---------------------------------------------------------------------------

def _split_rows(lines: Iterable[str]) -> Iterator[List[str]]:
    """
    Quote-aware split of data lines (header already consumed).

    Blank lines are skipped. A field wrapped in double quotes may contain
    commas; the quotes themselves are dropped.
    """
    for line in lines:
        line = line.rstrip("\r\n")
        if not line:
            continue
        yield next(csv.reader([line]))


def individual_from_row(row: List[str]) -> Individual:
    """
    Build one Individual from a split record row (at least MIN_FIELDS long).

    Empty sire/dam fields become the role-specific unknown sentinels.
    """
    year_text = row[COL_YEAR]
    return Individual(
        id=row[COL_ID],
        name=row[COL_NAME],
        birth_year=parse_birth_year(year_text),
        birth_year_text=year_text,
        sire_id=row[COL_SIRE] or UNKNOWN_SIRE,
        dam_id=row[COL_DAM] or UNKNOWN_DAM,
    )


# ---------------------------------------------------------------------------
# Main entry points
# ---------------------------------------------------------------------------

def parse_individuals(lines: Iterable[str]) -> List[Individual]:
    """
    Parse record lines (first line is the header and is skipped).

    Rows with fewer than MIN_FIELDS fields are skipped silently.
    """
    it = iter(lines)
    next(it, None)  # header

    out: List[Individual] = []
    for row in _split_rows(it):
        if len(row) < MIN_FIELDS:
            continue
        out.append(individual_from_row(row))
    return out


def load_individuals(path: Path, encoding: str = DEFAULT_ENCODING) -> List[Individual]:
    """
    Read every individual from a bloodline records file.

    Raises FileNotFoundError / OSError when the file cannot be read and
    RecordsReadError when it does not decode with `encoding`; the CLI treats
    both as fatal.
    """
    path = Path(path)
    try:
        with path.open("r", encoding=encoding, newline="") as f:
            individuals = parse_individuals(f)
    except UnicodeDecodeError as e:
        raise RecordsReadError(
            f"cannot decode {path} as {encoding} "
            f"(byte 0x{e.object[e.start]:02x} at offset {e.start} of the read chunk); "
            f"try --encoding"
        ) from e
    except LookupError as e:
        raise RecordsReadError(f"unknown records encoding: {encoding}") from e

    unique = len({ind.id for ind in individuals})
    print(f"[load] {len(individuals)} rows, horses={unique}")
    return individuals
