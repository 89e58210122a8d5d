"""Allow ``python -m fx_ghana``."""

from __future__ import annotations

from fx_ghana.cli import main

if __name__ == "__main__":  # pragma: no cover - thin wrapper
    raise SystemExit(main())
