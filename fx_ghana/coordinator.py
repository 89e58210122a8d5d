"""Daily update state machine: fetch, read rows, extract and persist."""

from __future__ import annotations

import threading
from dataclasses import asdict, dataclass, replace
from datetime import date, datetime
from enum import Enum
from typing import Any, Callable, Mapping

from fx_ghana.db.base_store import RateStore
from fx_ghana.errors import FetchError, ParseError, PersistError
from fx_ghana.ingestion.document import DocumentFetcher
from fx_ghana.ingestion.models import FetchOutcome, FreshnessState
from fx_ghana.ingestion.pdf_rows import PDFRowReader
from fx_ghana.ingestion.rates import RateExtractor
from fx_ghana.utils.logger import get_logger

LOGGER = get_logger(__name__)


class CoordinatorState(str, Enum):
    IDLE = "idle"
    INGESTING = "ingesting"
    COOLDOWN = "cooldown"


@dataclass(slots=True)
class CycleReport:
    """What a single trigger did."""

    trigger: str
    ran: bool
    skipped_reason: str | None = None
    fetched: bool = False
    is_new_for_today: bool = False
    observations: int = 0
    extraction_errors: int = 0
    persisted: int = 0
    persist_failures: int = 0
    error: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


class UpdateCoordinator:
    """Gate automatic ingestion to once per day and serialise all runs.

    The recurring timer goes through :meth:`tick`, which resets the daily gate
    once per date during the midnight hour and then runs only if today's update has not completed.
    Manual triggers call :meth:`run_cycle` and bypass the gate. Whatever the
    trigger, a request arriving while an ingestion is running is skipped.
    """

    def __init__(
        self,
        fetcher: DocumentFetcher,
        store: RateStore,
        symbol_table: Mapping[str, str],
        *,
        row_reader: PDFRowReader | None = None,
        extractor: RateExtractor | None = None,
        clock: Callable[[], datetime] = datetime.now,
    ) -> None:
        self.fetcher = fetcher
        self.store = store
        self.symbol_table = dict(symbol_table)
        self.row_reader = row_reader or PDFRowReader()
        self.extractor = extractor or RateExtractor(clock=clock)
        self._clock = clock
        self._lock = threading.Lock()
        self._state = CoordinatorState.IDLE
        self._freshness = FreshnessState()
        self._gate_reset_on: date | None = None

    @property
    def state(self) -> CoordinatorState:
        with self._lock:
            return self._state

    @property
    def freshness(self) -> FreshnessState:
        """Return a copy of the current freshness state."""

        with self._lock:
            return replace(self._freshness)

    def tick(self, now: datetime | None = None) -> CycleReport:
        """Handle one recurring timer tick."""

        now = now or self._clock()
        if now.hour == 0:
            reset = False
            with self._lock:
                if self._gate_reset_on != now.date():
                    self._gate_reset_on = now.date()
                    self._freshness.updated_today = False
                    if self._state is CoordinatorState.COOLDOWN:
                        self._state = CoordinatorState.IDLE
                    reset = True
            if reset:
                LOGGER.info("Midnight tick; daily update gate reset for %s", now.date())
        return self.run_cycle(manual=False)

    def run_cycle(self, *, manual: bool = True) -> CycleReport:
        trigger = "manual" if manual else "timer"
        with self._lock:
            if self._state is CoordinatorState.INGESTING:
                LOGGER.info("Ignoring %s trigger; an update is already running", trigger)
                return CycleReport(trigger=trigger, ran=False, skipped_reason="in-progress")
            if not manual and self._freshness.updated_today:
                LOGGER.info("Rates already updated today; skipping %s trigger", trigger)
                return CycleReport(trigger=trigger, ran=False, skipped_reason="already-updated")
            self._state = CoordinatorState.INGESTING
            snapshot = replace(self._freshness)

        report = CycleReport(trigger=trigger, ran=True)
        outcome: FetchOutcome | None = None
        try:
            outcome = self._ingest(snapshot, report)
        finally:
            with self._lock:
                if outcome is not None:
                    self._freshness.updated_today = True
                    if outcome.last_modified is not None:
                        self._freshness.last_known_document_modified_at = outcome.last_modified
                self._state = (
                    CoordinatorState.COOLDOWN
                    if self._freshness.updated_today
                    else CoordinatorState.IDLE
                )
        LOGGER.info(
            "Rate update (%s) finished: %s observations, %s stored, %s failed",
            trigger,
            report.observations,
            report.persisted,
            report.persist_failures,
        )
        return report

    def _ingest(self, freshness: FreshnessState, report: CycleReport) -> FetchOutcome | None:
        """Run one pass; returns ``None`` when the document could not be used."""

        try:
            outcome = self.fetcher.fetch(freshness)
        except FetchError as exc:
            LOGGER.error("Rate update aborted, fetch failed: %s", exc)
            report.error = str(exc)
            return None
        report.fetched = True
        report.is_new_for_today = outcome.is_new_for_today

        try:
            lines = self.row_reader.read_lines(outcome.path)
        except ParseError as exc:
            LOGGER.error("Rate update aborted, document unreadable: %s", exc)
            report.error = str(exc)
            return None

        extraction = self.extractor.scan(lines, self.symbol_table)
        report.observations = len(extraction.observations)
        report.extraction_errors = len(extraction.errors)
        for observation in extraction.observations:
            try:
                self.store.insert(observation)
            except PersistError as exc:
                LOGGER.error("Failed to store %s rate: %s", observation.code, exc)
                report.persist_failures += 1
            else:
                report.persisted += 1
        return outcome


__all__ = ["CoordinatorState", "CycleReport", "UpdateCoordinator"]
