from __future__ import annotations

import re
import sys
from dataclasses import dataclass
from typing import List, Sequence, Tuple, Union

from .birthyear_utils import year_in_range
from .pedigree_graph import PedigreeGraph


_RANGE_RE = re.compile(r"^(\d{4})-(\d{4})$")
_YEAR_RE = re.compile(r"^(\d{4})$")
_NON_ALNUM_RE = re.compile(r"[^0-9A-Za-z]")


# ---------------------------------------------------------------------------
# Tokens
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class YearRange:
    lo: int
    hi: int

    @property
    def text(self) -> str:
        return f"{self.lo}-{self.hi}"


@dataclass(frozen=True)
class Year:
    year: int

    @property
    def text(self) -> str:
        return str(self.year)


@dataclass(frozen=True)
class IdToken:
    individual_id: str

    @property
    def text(self) -> str:
        return self.individual_id


QueryToken = Union[YearRange, Year, IdToken]


def parse_token(tok: str) -> QueryToken:
    """
    Classify one trimmed token.

      "1990-1992" -> YearRange(1990, 1992)  (bounds normalized, smaller first)
      "1990"      -> Year(1990)
      anything else -> IdToken
    """
    m = _RANGE_RE.match(tok)
    if m:
        y1, y2 = int(m.group(1)), int(m.group(2))
        if y1 > y2:
            y1, y2 = y2, y1
        return YearRange(y1, y2)

    m = _YEAR_RE.match(tok)
    if m:
        return Year(int(m.group(1)))

    return IdToken(tok)


def parse_query(raw: str | None) -> List[QueryToken]:
    """
    Comma-separated query -> tokens. Whitespace is trimmed, empty tokens dropped.
    """
    if not raw:
        return []
    return [parse_token(t.strip()) for t in raw.split(",") if t.strip()]


def query_label(tokens: Sequence[QueryToken]) -> str:
    """
    File-name-safe label: token texts joined by "_", every non-alphanumeric
    character replaced by "_".
    """
    joined = "_".join(t.text for t in tokens)
    return _NON_ALNUM_RE.sub("_", joined)


# ---------------------------------------------------------------------------
# Resolution
# ---------------------------------------------------------------------------

def resolve_targets(
    graph: PedigreeGraph,
    tokens: Sequence[QueryToken],
) -> Tuple[List[str], List[str]]:
    """
    Resolve query tokens to individual ids.

    Returns (sorted unique target ids, ids that were not found).
    Unknown birth years never match a year or range. Missing ids are
    reported on stderr and skipped.
    """
    targets: set[str] = set()
    missing: List[str] = []

    for tok in tokens:
        if isinstance(tok, YearRange):
            targets.update(
                ind.id for ind in graph if year_in_range(ind.birth_year, tok.lo, tok.hi)
            )
        elif isinstance(tok, Year):
            targets.update(ind.id for ind in graph if ind.birth_year == tok.year)
        else:
            if tok.individual_id in graph:
                targets.add(tok.individual_id)
            else:
                print(f'[main] WARNING: PrimaryKey "{tok.individual_id}" not found - skip', file=sys.stderr)
                missing.append(tok.individual_id)

    return sorted(targets), missing
