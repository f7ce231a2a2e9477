# bloodline/birthyear_utils.py
from __future__ import annotations

import re
from typing import Optional

from .models import Individual


_LEADING_INT_RE = re.compile(r"^\s*([+-]?\d+)")


def parse_birth_year(text: Optional[str]) -> Optional[int]:
    """
    Parse the birth-year field of a record.

    - Empty / missing -> None (unknown year).
    - Leading integer is taken even when followed by junk ("1990?" -> 1990),
      matching how the records have always been read.
    - Anything without a leading integer -> None.
    """
    if not text:
        return None
    m = _LEADING_INT_RE.match(text)
    if m is None:
        return None
    return int(m.group(1))


def population_sort_key(individual: Individual) -> tuple[int, int, str]:
    """
    Birth year ascending, then id. Unknown years sort before every known year.
    """
    if individual.birth_year is None:
        return (0, 0, individual.id)
    return (1, individual.birth_year, individual.id)


def year_in_range(birth_year: Optional[int], lo: int, hi: int) -> bool:
    if birth_year is None:
        return False
    if lo > hi:
        lo, hi = hi, lo
    return lo <= birth_year <= hi
