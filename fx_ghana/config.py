"""Runtime configuration sourced from ``FX_GHANA_*`` environment variables."""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Final, Mapping

from fx_ghana.db import DEFAULT_SQLITE_DB_PATH

STANBIC_FOREX_PDF_URL: Final[str] = (
    "https://www.stanbicbank.com.gh/static_file/ghana/"
    "Downloadable%20Files/Rates/Daily_Forex_Rates.pdf"
)
DEFAULT_CACHE_PATH: Final[Path] = Path("Daily_Forex_Rates.pdf")

# Document phrase -> normalized code. Extend via ``FX_GHANA_SYMBOLS``.
DEFAULT_SYMBOL_TABLE: Final[dict[str, str]] = {
    "United States Dollars": "USD",
}


def parse_symbol_table(raw: str) -> dict[str, str]:
    """Parse ``"Label=CODE;Other Label=XYZ"`` into a symbol table."""

    table: dict[str, str] = {}
    for entry in raw.split(";"):
        if not entry.strip():
            continue
        label, sep, code = entry.partition("=")
        if not sep or not label.strip() or not code.strip():
            raise ValueError(f"Invalid symbol table entry {entry!r}; expected 'Label=CODE'")
        table[label.strip()] = code.strip().upper()
    if not table:
        raise ValueError("Symbol table must contain at least one entry")
    return table


def _env_number(env: Mapping[str, str], name: str, default: float, cast: type) -> float:
    raw = env.get(name)
    if raw is None or not raw.strip():
        return cast(default)
    try:
        value = cast(raw)
    except ValueError as exc:
        raise ValueError(f"{name} must be a number, got {raw!r}") from exc
    if value <= 0:
        raise ValueError(f"{name} must be positive, got {raw!r}")
    return value


@dataclass(frozen=True)
class Settings:
    """Everything needed to wire the fetcher, store, coordinator and service."""

    document_url: str = STANBIC_FOREX_PDF_URL
    cache_path: Path = DEFAULT_CACHE_PATH
    db_path: Path = DEFAULT_SQLITE_DB_PATH
    fetch_timeout: float = 30.0
    fetch_attempts: int = 1
    fetch_backoff: float = 2.0
    tick_seconds: float = 3600.0
    symbol_table: Mapping[str, str] = field(default_factory=lambda: dict(DEFAULT_SYMBOL_TABLE))
    default_currency: str = "USD"
    log_level: str = "INFO"

    @classmethod
    def from_env(cls, env: Mapping[str, str] | None = None) -> "Settings":
        """Build settings from ``env`` (defaults to :data:`os.environ`)."""

        env = os.environ if env is None else env
        symbols = env.get("FX_GHANA_SYMBOLS")
        return cls(
            document_url=env.get("FX_GHANA_DOCUMENT_URL", STANBIC_FOREX_PDF_URL),
            cache_path=Path(env.get("FX_GHANA_CACHE_PATH", str(DEFAULT_CACHE_PATH))),
            db_path=Path(env.get("FX_GHANA_DB_PATH", str(DEFAULT_SQLITE_DB_PATH))),
            fetch_timeout=_env_number(env, "FX_GHANA_FETCH_TIMEOUT", 30.0, float),
            fetch_attempts=int(_env_number(env, "FX_GHANA_FETCH_ATTEMPTS", 1, int)),
            fetch_backoff=_env_number(env, "FX_GHANA_FETCH_BACKOFF", 2.0, float),
            tick_seconds=_env_number(env, "FX_GHANA_TICK_SECONDS", 3600.0, float),
            symbol_table=(
                parse_symbol_table(symbols) if symbols else dict(DEFAULT_SYMBOL_TABLE)
            ),
            default_currency=env.get("FX_GHANA_DEFAULT_CURRENCY", "USD").upper(),
            log_level=env.get("FX_GHANA_LOG_LEVEL", "INFO").upper(),
        )


__all__ = [
    "DEFAULT_CACHE_PATH",
    "DEFAULT_SYMBOL_TABLE",
    "STANBIC_FOREX_PDF_URL",
    "Settings",
    "parse_symbol_table",
]
