"""Error taxonomy shared by the ingestion pipeline and the rate store."""

from __future__ import annotations


class FxGhanaError(Exception):
    """Base class for every error raised by :mod:`fx_ghana`."""


class FetchError(FxGhanaError):
    """The remote rate document could not be retrieved or cached."""

    def __init__(self, url: str, reason: str) -> None:
        self.url = url
        self.reason = reason
        super().__init__(f"Unable to fetch {url}: {reason}")


class ParseError(FxGhanaError):
    """The cached document could not be opened as a PDF page/text model."""

    def __init__(self, path: str, reason: str) -> None:
        self.path = path
        self.reason = reason
        super().__init__(f"Unable to read {path}: {reason}")


class ExtractionError(FxGhanaError):
    """A numeric token next to a matched label could not be parsed.

    Non-fatal: the affected field is recorded as ``0.0`` and the error is
    reported alongside the extracted observations.
    """

    def __init__(self, label: str, field: str, token: str | None, row: str) -> None:
        self.label = label
        self.field = field
        self.token = token
        self.row = row
        shown = "<missing>" if token is None else repr(token)
        super().__init__(f"Invalid {field} rate {shown} for {label!r} in row {row!r}")


class PersistError(FxGhanaError):
    """A rate observation could not be written to the store."""


class RateNotFoundError(FxGhanaError, LookupError):
    """No stored rate exists for the requested currency code."""

    def __init__(self, code: str) -> None:
        self.code = code
        super().__init__(f"No stored rate for currency {code!r}")


__all__ = [
    "ExtractionError",
    "FetchError",
    "FxGhanaError",
    "ParseError",
    "PersistError",
    "RateNotFoundError",
]
