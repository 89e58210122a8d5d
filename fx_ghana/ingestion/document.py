"""Download the Stanbic daily forex PDF and judge whether it was published today."""

from __future__ import annotations

import os
import tempfile
import time
from datetime import date, datetime
from email.utils import parsedate_to_datetime
from pathlib import Path
from typing import Callable

import requests

from fx_ghana.config import DEFAULT_CACHE_PATH, STANBIC_FOREX_PDF_URL
from fx_ghana.errors import FetchError
from fx_ghana.ingestion.models import FetchOutcome, FreshnessState
from fx_ghana.utils.logger import get_logger

LOGGER = get_logger(__name__)


def parse_last_modified(value: str | None) -> datetime | None:
    """Parse an RFC-1123 ``Last-Modified`` header.

    Returns ``None`` when the header is absent or unparsable so callers treat
    the document's freshness as unknown instead of failing the fetch.
    """

    if not value or not value.strip():
        return None
    try:
        return parsedate_to_datetime(value.strip())
    except (TypeError, ValueError, IndexError):
        LOGGER.warning("Ignoring unparsable Last-Modified header %r", value)
        return None


def same_calendar_date(moment: datetime | None, today: date) -> bool:
    """Compare ``moment``'s year/month/day, as written, against ``today``.

    Time-of-day and UTC offset are ignored: a document stamped late in the
    evening GMT may count as "today" or "yesterday" depending on where the
    service runs. That coarseness is accepted.
    """

    if moment is None:
        return False
    return (moment.year, moment.month, moment.day) == (today.year, today.month, today.day)


class DocumentFetcher:
    """Fetch the rate PDF and overwrite the local cached copy on every call."""

    def __init__(
        self,
        url: str = STANBIC_FOREX_PDF_URL,
        cache_path: str | Path = DEFAULT_CACHE_PATH,
        *,
        timeout: float = 30.0,
        max_attempts: int = 1,
        backoff_seconds: float = 2.0,
        session: requests.Session | None = None,
        today: Callable[[], date] = date.today,
    ) -> None:
        if max_attempts < 1:
            raise ValueError("max_attempts must be at least 1")
        self.url = url
        self.cache_path = Path(cache_path)
        self.timeout = timeout
        self.max_attempts = max_attempts
        self.backoff_seconds = backoff_seconds
        self.session = session or requests.Session()
        self._today = today

    def fetch(self, freshness: FreshnessState | None = None) -> FetchOutcome:
        """Download the document, refresh the cache and report its freshness.

        The cache file is rewritten even when the remote copy is already known
        to be today's and today's ingestion has run; ``is_new_for_today`` is
        informational only.
        """

        last_exc: FetchError | None = None
        for attempt in range(1, self.max_attempts + 1):
            try:
                return self._fetch_once(freshness)
            except FetchError as exc:
                last_exc = exc
                if attempt < self.max_attempts:
                    delay = self.backoff_seconds * attempt
                    LOGGER.warning(
                        "Fetch attempt %s/%s failed (%s); retrying in %.1fs",
                        attempt,
                        self.max_attempts,
                        exc.reason,
                        delay,
                    )
                    time.sleep(delay)
        assert last_exc is not None
        raise last_exc

    def _fetch_once(self, freshness: FreshnessState | None) -> FetchOutcome:
        LOGGER.info("Downloading rate document from %s", self.url)
        try:
            response = self.session.get(self.url, timeout=self.timeout, stream=True)
        except requests.RequestException as exc:
            raise FetchError(self.url, f"request failed: {exc}") from exc

        try:
            try:
                response.raise_for_status()
            except requests.HTTPError as exc:
                raise FetchError(self.url, f"HTTP {response.status_code}") from exc

            last_modified = parse_last_modified(response.headers.get("Last-Modified"))
            is_new = same_calendar_date(last_modified, self._today())
            if is_new:
                LOGGER.info("Remote document was published today (%s)", last_modified)
                if freshness is not None and freshness.updated_today:
                    LOGGER.info("Already updated today; refreshing cached copy regardless")

            try:
                body = response.content
            except requests.RequestException as exc:
                raise FetchError(self.url, f"reading body failed: {exc}") from exc
        finally:
            response.close()

        self._write_cache(body)
        return FetchOutcome(
            path=self.cache_path,
            last_modified=last_modified,
            is_new_for_today=is_new,
            size=len(body),
        )

    def _write_cache(self, body: bytes) -> None:
        directory = self.cache_path.parent
        try:
            directory.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(
                dir=directory, prefix=f".{self.cache_path.name}.", suffix=".tmp"
            )
            try:
                with os.fdopen(fd, "wb") as handle:
                    handle.write(body)
                os.replace(tmp_name, self.cache_path)
            except BaseException:
                Path(tmp_name).unlink(missing_ok=True)
                raise
        except OSError as exc:
            raise FetchError(self.url, f"writing {self.cache_path} failed: {exc}") from exc
        LOGGER.info("Cached %s bytes at %s", len(body), self.cache_path)


__all__ = ["DocumentFetcher", "parse_last_modified", "same_calendar_date"]
