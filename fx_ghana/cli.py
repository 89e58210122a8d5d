"""Command line entry point: run updates, inspect stored rates, or serve HTTP."""

from __future__ import annotations

import argparse
import json
from dataclasses import replace
from pathlib import Path
from typing import Sequence

from fx_ghana import FxGhana
from fx_ghana.config import Settings
from fx_ghana.errors import RateNotFoundError
from fx_ghana.utils.logger import get_logger, set_log_level

LOGGER = get_logger(__name__)

__all__ = ["parse_args", "main"]


def parse_args(argv: Sequence[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(prog="fx-ghana", description=__doc__)
    parser.add_argument("--db", dest="db_path", help="SQLite database path (FX_GHANA_DB_PATH)")
    parser.add_argument(
        "--cache",
        dest="cache_path",
        help="Where the downloaded PDF is cached (FX_GHANA_CACHE_PATH)",
    )
    parser.add_argument("--log-level", dest="log_level", help="Logging level, e.g. DEBUG")
    subparsers = parser.add_subparsers(dest="command", required=True)

    subparsers.add_parser("update", help="Download the rate sheet and store today's rates")

    latest = subparsers.add_parser("latest", help="Print the latest stored rate")
    latest.add_argument("--currency", help="Currency code (defaults to FX_GHANA_DEFAULT_CURRENCY)")

    history = subparsers.add_parser("history", help="Print every stored rate")
    history.add_argument("--currency", help="Only show rows for this currency code")

    serve = subparsers.add_parser("serve", help="Serve the HTTP API with the hourly scheduler")
    serve.add_argument("--host", default="0.0.0.0")
    serve.add_argument("--port", type=int, default=8080)
    serve.add_argument(
        "--no-scheduler",
        dest="scheduler",
        action="store_false",
        help="Do not run the hourly background update",
    )
    return parser.parse_args(argv)


def _settings_from_args(args: argparse.Namespace) -> Settings:
    settings = Settings.from_env()
    overrides: dict[str, object] = {}
    if args.db_path:
        overrides["db_path"] = Path(args.db_path)
    if args.cache_path:
        overrides["cache_path"] = Path(args.cache_path)
    if args.log_level:
        overrides["log_level"] = args.log_level.upper()
    return replace(settings, **overrides) if overrides else settings


def main(argv: Sequence[str] | None = None) -> int:
    args = parse_args(argv)
    settings = _settings_from_args(args)
    set_log_level(settings.log_level)

    if args.command == "serve":
        import uvicorn

        fx = FxGhana(settings)
        LOGGER.info("Serving on %s:%s", args.host, args.port)
        try:
            uvicorn.run(fx.create_app(with_scheduler=args.scheduler), host=args.host, port=args.port)
        finally:
            fx.close()
        return 0

    with FxGhana(settings) as fx:
        if args.command == "update":
            report = fx.update()
            print(json.dumps(report.to_dict(), indent=2))
            return 0 if report.error is None and not report.persist_failures else 1
        if args.command == "latest":
            try:
                print(json.dumps(fx.rate(args.currency), indent=2))
            except RateNotFoundError as exc:
                LOGGER.error("%s", exc)
                return 1
            return 0
        print(json.dumps(fx.history(args.currency), indent=2))
        return 0


if __name__ == "__main__":  # pragma: no cover - CLI entry point
    raise SystemExit(main())
