"""Public interface for the fx_ghana package."""

from __future__ import annotations

from importlib import metadata as importlib_metadata
from typing import TYPE_CHECKING, Any, Dict, List

import requests

from fx_ghana.config import Settings
from fx_ghana.coordinator import CoordinatorState, CycleReport, UpdateCoordinator
from fx_ghana.db.base_store import RateStore, StoredRate
from fx_ghana.db.rate_store import SQLAlchemyRateStore
from fx_ghana.errors import (
    ExtractionError,
    FetchError,
    FxGhanaError,
    ParseError,
    PersistError,
    RateNotFoundError,
)
from fx_ghana.ingestion.document import DocumentFetcher
from fx_ghana.scheduler import HourlyScheduler

if TYPE_CHECKING:  # pragma: no cover - import only for static analyzers
    from fastapi import FastAPI

__all__ = [
    "__version__",
    "CoordinatorState",
    "CycleReport",
    "DocumentFetcher",
    "ExtractionError",
    "FetchError",
    "FxGhana",
    "FxGhanaError",
    "HourlyScheduler",
    "ParseError",
    "PersistError",
    "RateNotFoundError",
    "RateStore",
    "SQLAlchemyRateStore",
    "Settings",
    "StoredRate",
    "UpdateCoordinator",
]

try:
    __version__ = importlib_metadata.version("fx-ghana")
except importlib_metadata.PackageNotFoundError:  # pragma: no cover - fallback for local runs
    __version__ = "0.1.0"


class FxGhana:
    """Package facade that wires settings, store, fetcher and coordinator."""

    __slots__ = ("settings", "store", "fetcher", "coordinator")

    __version__ = __version__

    def __init__(
        self,
        settings: Settings | None = None,
        *,
        store: RateStore | None = None,
        session: requests.Session | None = None,
    ) -> None:
        """Build the ingestion stack.

        ``settings`` defaults to :meth:`Settings.from_env`. A custom ``store``
        replaces the SQLite database at ``settings.db_path``; ``session`` lets
        callers share or stub the HTTP session used for downloads.
        """

        self.settings = settings or Settings.from_env()
        self.store = store or SQLAlchemyRateStore(db_path=self.settings.db_path)
        self.fetcher = DocumentFetcher(
            self.settings.document_url,
            self.settings.cache_path,
            timeout=self.settings.fetch_timeout,
            max_attempts=self.settings.fetch_attempts,
            backoff_seconds=self.settings.fetch_backoff,
            session=session,
        )
        self.coordinator = UpdateCoordinator(
            self.fetcher, self.store, self.settings.symbol_table
        )

    def update(self) -> CycleReport:
        """Run a manual ingestion cycle, bypassing the daily gate."""

        return self.coordinator.run_cycle(manual=True)

    def rate(self, currency: str | None = None) -> Dict[str, Any]:
        """Return the latest stored rate for ``currency`` (default from settings)."""

        code = (currency or self.settings.default_currency).upper()
        return self.store.latest(code).to_dict()

    def history(self, currency: str | None = None) -> List[Dict[str, Any]]:
        """Return every stored rate, optionally restricted to one currency."""

        rows = self.store.all()
        if currency is not None:
            rows = [row for row in rows if row.currency == currency.upper()]
        return [row.to_dict() for row in rows]

    def scheduler(self, *, run_immediately: bool = False) -> HourlyScheduler:
        return HourlyScheduler(
            self.coordinator,
            self.settings.tick_seconds,
            run_immediately=run_immediately,
        )

    def create_app(self, *, with_scheduler: bool = True) -> "FastAPI":
        """Return the FastAPI app serving this instance's store and coordinator."""

        from fx_ghana.service import create_app

        return create_app(
            self.coordinator,
            self.store,
            scheduler=self.scheduler() if with_scheduler else None,
            default_currency=self.settings.default_currency,
        )

    def close(self) -> None:
        self.store.close()

    def __enter__(self) -> "FxGhana":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()
