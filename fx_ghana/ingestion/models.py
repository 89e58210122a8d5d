"""Data models shared across ingestion modules."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path

from fx_ghana.errors import ExtractionError


@dataclass(frozen=True, slots=True)
class RatePair:
    """Buying/selling quote pair as printed on the rate sheet."""

    buying: float
    selling: float


@dataclass(frozen=True, slots=True)
class CurrencyObservation:
    """One extracted (currency, buying, selling) fact tied to an ingestion run."""

    label: str
    code: str
    rate: RatePair
    observed_at: datetime


@dataclass(frozen=True, slots=True)
class TextFragment:
    """A run of text and where ``pypdf`` rendered it on the page."""

    text: str
    x: float = 0.0
    y: float = 0.0


@dataclass(frozen=True, slots=True)
class TextRow:
    """Fragments sharing a baseline, ordered left to right."""

    y: float
    fragments: tuple[TextFragment, ...]


@dataclass(slots=True)
class ExtractionResult:
    """Observations found in a document plus any non-fatal token failures."""

    observations: list[CurrencyObservation] = field(default_factory=list)
    errors: list[ExtractionError] = field(default_factory=list)


@dataclass(slots=True)
class FreshnessState:
    """What the coordinator knows about the remote document this process lifetime."""

    last_known_document_modified_at: datetime | None = None
    updated_today: bool = False


@dataclass(frozen=True, slots=True)
class FetchOutcome:
    """Result of downloading the rate document into the local cache."""

    path: Path
    last_modified: datetime | None
    is_new_for_today: bool
    size: int


__all__ = [
    "CurrencyObservation",
    "ExtractionResult",
    "FetchOutcome",
    "FreshnessState",
    "RatePair",
    "TextFragment",
    "TextRow",
]
