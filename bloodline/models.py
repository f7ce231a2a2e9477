from __future__ import annotations

from dataclasses import dataclass
from typing import Optional


# ---------------------------------------------------------------------------
# Unknown-parent sentinels
# ---------------------------------------------------------------------------

# One sentinel per parent role. Neither ever resolves to a real individual.
UNKNOWN_SIRE = "UNKNOWN_SIRE"
UNKNOWN_DAM = "UNKNOWN_DAM"

SENTINELS = frozenset({UNKNOWN_SIRE, UNKNOWN_DAM})


def is_sentinel(individual_id: Optional[str]) -> bool:
    return individual_id is None or individual_id in SENTINELS


# ---------------------------------------------------------------------------
# Errors
# ---------------------------------------------------------------------------

class BloodlineError(Exception):
    """Base class for errors raised by the bloodline package."""


class CacheOpenError(BloodlineError):
    """The durable memoization store could not be opened."""


class RecordsReadError(BloodlineError):
    """The records file could not be decoded."""


class EmptyTargetsError(BloodlineError):
    """A target query resolved to zero individuals."""


# ---------------------------------------------------------------------------
# Pedigree representation
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class Individual:
    """
    One horse in the pedigree, as loaded from the records file.

    Parent ids are either real individual ids or one of the two sentinels
    (UNKNOWN_SIRE / UNKNOWN_DAM). A real parent id is not guaranteed to be
    present in the population; the graph treats such parents as unknown.
    """
    id: str                            # primary key, e.g. "H000123"
    name: str
    birth_year: Optional[int] = None   # None = unknown / unparsable
    birth_year_text: str = ""          # year field exactly as read
    sire_id: str = UNKNOWN_SIRE
    dam_id: str = UNKNOWN_DAM

    @property
    def display_name(self) -> str:
        """
        Label used in table headers and progress output: "Name [Year]".
        """
        return f"{self.name} [{self.birth_year_text}]"

    @property
    def parents(self) -> tuple[str, str]:
        return self.sire_id, self.dam_id
