"""Store interface consumed by the ingestion coordinator and the HTTP layer."""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import datetime

from fx_ghana.ingestion.models import CurrencyObservation


@dataclass(frozen=True, slots=True)
class StoredRate:
    """A persisted observation; rows are append-only and never updated."""

    id: int
    currency: str
    buying: float
    selling: float
    created_at: datetime
    updated_at: datetime

    def to_dict(self) -> dict[str, object]:
        return {
            "id": self.id,
            "currency": self.currency,
            "buying": self.buying,
            "selling": self.selling,
            "created_at": self.created_at.isoformat(),
            "updated_at": self.updated_at.isoformat(),
        }


class RateStore(ABC):
    """Append-only log of rate observations."""

    @abstractmethod
    def insert(self, observation: CurrencyObservation) -> StoredRate:
        """Append ``observation``; raises :class:`~fx_ghana.errors.PersistError`."""

    @abstractmethod
    def latest(self, code: str) -> StoredRate:
        """Return the newest row for ``code`` or raise ``RateNotFoundError``."""

    @abstractmethod
    def all(self) -> list[StoredRate]:
        """Return every stored row in insertion order."""

    def close(self) -> None:  # pragma: no cover - optional cleanup hook
        """Stores may override to release connections/resources."""

    def __enter__(self) -> "RateStore":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()


__all__ = ["RateStore", "StoredRate"]
