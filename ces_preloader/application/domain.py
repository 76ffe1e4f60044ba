"""
This module defines the core domain models for the application.

These classes represent the pure, technology-agnostic entities and data
structures that the application's business logic operates on, together
with the ports the infrastructure layer implements.
"""

import dataclasses
import enum
from pathlib import Path

from abc import ABC, abstractmethod
from typing import Dict, List, Mapping, Optional

from .exceptions import ConstructionError

# Before 2009 the archives have a different structure.
MIN_YEAR = 2009
SUPPORTED_YEARS = tuple(range(MIN_YEAR, 2022))

MICRODATA_PREFIX = "MICRODADOS_CADASTRO"


# --- Domain Models ---

class Microdata(enum.Enum):
    """A microdata table shipped inside the yearly archives."""

    CURSOS = "CURSOS"

    @property
    def token(self) -> str:
        """The substring identifying this table's entry in the archive."""
        return self.value

    @property
    def stem(self) -> str:
        """The base name of the persisted extract."""
        return self.value.lower()

    def original_md5(self, year: int) -> Optional[str]:
        return _ORIGINAL_MD5[self].get(year)


# MD5 of the untouched archive entries, as published by INEP.
_ORIGINAL_MD5: Dict[Microdata, Dict[int, str]] = {
    Microdata.CURSOS: {
        2009: "677421fb8ad9442370175cbadae05b77",
        2010: "8ea106ef7dc41a27a43b9f246cfd3ffd",
        2011: "f626dd6d17e8f31f78ddf90f680ace48",
        2012: "f896c4a4e2b10adcf846d91486ab0ce8",
        2013: "2bbfbe1a9afe1fe5d0d7384901ae3b7e",
        2014: "bf70eb93a2a5cce0e0a48295c4834c20",
        2015: "b5bd1b6b10b4f66f359deed4ac48cb80",
        2016: "a9475f5f6815a5befb8bc91b8e2c7b1c",
        2017: "af97168b2d83b0e4b6c1572e619c183b",
        2018: "b852881daa9328e4ff3f3a2c6115ba51",
        2019: "f80ea1eddafae4780728e6fb26aa549f",
        2020: "a84c1efeedd8bcec4848ec8217b92b98",
        2021: "05d78ff911cea316cd65f08b0e93e83d",
    },
}

# (table, year) -> expected lowercase hex digest
DigestTable = Mapping[Microdata, Mapping[int, str]]


def builtin_digests() -> DigestTable:
    """Return a copy of the digest table shipped with the package."""
    return {table: dict(years) for table, years in _ORIGINAL_MD5.items()}


@dataclasses.dataclass(frozen=True)
class Ces:
    """
    A handle on the Censo da Educação Superior for a single year.

    Construction is cheap and performs no I/O; it only checks that the
    year is one whose archive layout this package understands.
    """

    year: int

    def __post_init__(self):
        if isinstance(self.year, bool) or not isinstance(self.year, int):
            raise ConstructionError(
                f"Year must be an integer, got {self.year!r}."
            )
        if self.year < MIN_YEAR:
            raise ConstructionError(
                f"Years before {MIN_YEAR} are not supported, got {self.year}."
            )

    @classmethod
    def all(cls) -> List["Ces"]:
        """Get one Ces for every supported year."""
        return [cls(year) for year in SUPPORTED_YEARS]


class PipelineStage(enum.Enum):
    """The sequential stages of one year's pipeline."""

    CHECKING = "checking the local extract"
    FETCHING = "downloading the archive"
    EXTRACTING = "extracting the archive entry"
    VERIFYING = "verifying the checksum"
    NORMALIZING = "re-encoding the text"
    PERSISTING = "writing the extract"


class OutcomeStatus(enum.Enum):
    CACHED = "cached"
    DOWNLOADED = "downloaded"
    FAILED = "failed"


@dataclasses.dataclass(frozen=True)
class YearOutcome:
    """The result of running the pipeline for one year."""

    year: int
    status: OutcomeStatus
    stage: Optional[PipelineStage] = None
    error: Optional[Exception] = None

    @property
    def ok(self) -> bool:
        return self.status is not OutcomeStatus.FAILED


@dataclasses.dataclass(frozen=True)
class FleetReport:
    """The collected outcomes of a fleet run, keyed by year."""

    outcomes: Dict[int, YearOutcome]

    @property
    def failures(self) -> Dict[int, YearOutcome]:
        return {
            year: outcome
            for year, outcome in self.outcomes.items()
            if not outcome.ok
        }

    @property
    def succeeded(self) -> Dict[int, YearOutcome]:
        return {
            year: outcome
            for year, outcome in self.outcomes.items()
            if outcome.ok
        }

    @property
    def ok(self) -> bool:
        return not self.failures


# --- Ports (Interfaces) ---

class Fetcher(ABC):
    """A port for any source of yearly archives."""

    @abstractmethod
    def url(self, ces: Ces) -> str:
        """Builds the location of the archive for a year."""
        pass

    @abstractmethod
    async def fetch(self, ces: Ces) -> bytes:
        """
        Downloads the archive for a year.
        Raises FetchError on any transport or HTTP failure.
        """
        pass


class Selector(ABC):
    """A port for taking a single table out of an archive."""

    @abstractmethod
    async def extract(self, ces: Ces, raw: bytes, table: Microdata) -> bytes:
        """
        Returns the raw bytes of the table's entry.
        Raises SelectionError if the archive is unreadable or lacks it.
        """
        pass


class Verifier(ABC):
    """A port for checking extracted bytes against a pinned digest."""

    @abstractmethod
    async def verify(self, entry: bytes, table: Microdata, year: int):
        """
        Verifies the integrity of an extracted entry.
        Raises VerificationError on a missing reference or a mismatch.
        """
        pass


class Store(ABC):
    """A port for the persisted, re-encoded extracts."""

    @abstractmethod
    def path_for(self, table: Microdata, year: int) -> Path:
        """The deterministic location of an extract."""
        pass

    @abstractmethod
    async def exists(self, table: Microdata, year: int) -> bool:
        """Whether the extract is already materialized."""
        pass

    @abstractmethod
    async def write(self, table: Microdata, year: int, text: str) -> Path:
        """Persists an extract so it appears atomically at its path."""
        pass
