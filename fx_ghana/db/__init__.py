"""Helpers for locating the rate database."""

from __future__ import annotations

from pathlib import Path
from typing import Final

__all__ = ["DEFAULT_SQLITE_DB_PATH", "sqlite_url"]

# Resolved against the working directory, alongside the cached rate sheet.
DEFAULT_SQLITE_DB_PATH: Final[Path] = Path("finance.db")


def sqlite_url(db_path: str | Path) -> str:
    """Return the SQLAlchemy URL for an on-disk SQLite database."""

    return f"sqlite:///{Path(db_path).expanduser().resolve().as_posix()}"
