"""Extract buying/selling pairs that follow a currency label in row text."""

from __future__ import annotations

import re
from datetime import datetime
from typing import Callable, Iterable, Mapping

from fx_ghana.errors import ExtractionError
from fx_ghana.ingestion.models import CurrencyObservation, ExtractionResult, RatePair
from fx_ghana.utils.logger import get_logger

LOGGER = get_logger(__name__)

_NUMBER_PATTERN = re.compile(r"[0-9]+(?:\.[0-9]+)?")


class RateExtractor:
    """Scan flattened rows for symbol-table labels.

    For a row containing ``label`` the text after its first occurrence is split
    on whitespace; the first token is the buying rate and the second the
    selling rate. A missing or non-numeric token becomes ``0.0`` and is
    reported as an :class:`~fx_ghana.errors.ExtractionError` rather than
    dropping the row.
    """

    def __init__(self, clock: Callable[[], datetime] = datetime.now) -> None:
        self._clock = clock

    def extract(
        self, rows: Iterable[str], symbol_table: Mapping[str, str]
    ) -> list[CurrencyObservation]:
        return self.scan(rows, symbol_table).observations

    def scan(self, rows: Iterable[str], symbol_table: Mapping[str, str]) -> ExtractionResult:
        result = ExtractionResult()
        observed_at = self._clock()
        for row in rows:
            for label, code in symbol_table.items():
                if label not in row:
                    continue
                observation = self._observe(row, label, code, observed_at, result.errors)
                result.observations.append(observation)
        for error in result.errors:
            LOGGER.warning("%s", error)
        return result

    def _observe(
        self,
        row: str,
        label: str,
        code: str,
        observed_at: datetime,
        errors: list[ExtractionError],
    ) -> CurrencyObservation:
        remainder = row[row.index(label) + len(label) :]
        tokens = remainder.split()
        buying = self._parse_token(tokens, 0, "buying", label, row, errors)
        selling = self._parse_token(tokens, 1, "selling", label, row, errors)
        return CurrencyObservation(
            label=label,
            code=code,
            rate=RatePair(buying=buying, selling=selling),
            observed_at=observed_at,
        )

    @staticmethod
    def _parse_token(
        tokens: list[str],
        position: int,
        field: str,
        label: str,
        row: str,
        errors: list[ExtractionError],
    ) -> float:
        token = tokens[position] if position < len(tokens) else None
        if token is None or not _NUMBER_PATTERN.fullmatch(token):
            errors.append(ExtractionError(label, field, token, row))
            return 0.0
        return float(token)


__all__ = ["RateExtractor"]
