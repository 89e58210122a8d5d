import tempfile
import unittest
from datetime import datetime
from pathlib import Path

from sqlalchemy.exc import SQLAlchemyError

from fx_ghana.db import sqlite_url
from fx_ghana.db.base_store import StoredRate
from fx_ghana.db.rate_store import SQLAlchemyRateStore
from fx_ghana.errors import PersistError, RateNotFoundError
from fx_ghana.ingestion.models import CurrencyObservation, RatePair


def _observation(code: str, buying: float, selling: float, hour: int = 9) -> CurrencyObservation:
    return CurrencyObservation(
        label=f"{code} label",
        code=code,
        rate=RatePair(buying=buying, selling=selling),
        observed_at=datetime(2026, 10, 19, hour, 0),
    )


class _FailingSession:
    def __enter__(self) -> "_FailingSession":
        return self

    def __exit__(self, *exc_info) -> None:
        return None

    def add(self, _row) -> None:
        return None

    def commit(self) -> None:
        raise SQLAlchemyError("database is locked")


class SQLAlchemyRateStoreTests(unittest.TestCase):
    def setUp(self) -> None:
        self.temp_dir = tempfile.TemporaryDirectory()
        self.db_path = Path(self.temp_dir.name) / "finance.db"
        self.store = SQLAlchemyRateStore(db_path=self.db_path)

    def tearDown(self) -> None:
        self.store.close()
        self.temp_dir.cleanup()

    def test_insert_returns_stored_row_with_increasing_ids(self) -> None:
        first = self.store.insert(_observation("USD", 10.95, 11.05))
        second = self.store.insert(_observation("USD", 10.97, 11.07))

        self.assertIsInstance(first, StoredRate)
        self.assertGreater(second.id, first.id)
        self.assertEqual(first.currency, "USD")
        self.assertEqual((first.buying, first.selling), (10.95, 11.05))
        self.assertEqual(first.created_at, datetime(2026, 10, 19, 9, 0))
        self.assertEqual(first.updated_at, first.created_at)

    def test_latest_is_highest_id_for_code(self) -> None:
        self.store.insert(_observation("USD", 10.95, 11.05, hour=10))
        newest_usd = self.store.insert(_observation("USD", 10.80, 10.90, hour=8))
        self.store.insert(_observation("EUR", 12.7, 12.85))

        latest = self.store.latest("USD")

        self.assertEqual(latest.id, newest_usd.id)
        self.assertEqual(latest.buying, 10.80)

    def test_latest_raises_when_code_unknown(self) -> None:
        self.store.insert(_observation("USD", 10.95, 11.05))

        with self.assertRaises(RateNotFoundError) as ctx:
            self.store.latest("GBP")

        self.assertEqual(ctx.exception.code, "GBP")
        self.assertIsInstance(ctx.exception, LookupError)

    def test_all_returns_rows_in_insertion_order(self) -> None:
        self.store.insert(_observation("USD", 1, 2))
        self.store.insert(_observation("EUR", 3, 4))
        self.store.insert(_observation("USD", 5, 6))

        rows = self.store.all()

        self.assertEqual([(row.currency, row.buying) for row in rows], [
            ("USD", 1.0),
            ("EUR", 3.0),
            ("USD", 5.0),
        ])

    def test_rows_survive_reopening_the_database(self) -> None:
        self.store.insert(_observation("USD", 10.95, 11.05))
        self.store.close()

        with SQLAlchemyRateStore(sqlite_url(self.db_path)) as reopened:
            self.assertEqual(reopened.latest("USD").selling, 11.05)

    def test_insert_wraps_database_errors(self) -> None:
        self.store._SessionFactory = _FailingSession  # type: ignore[assignment]

        with self.assertRaises(PersistError) as ctx:
            self.store.insert(_observation("USD", 10.95, 11.05))

        self.assertIn("database is locked", str(ctx.exception))
        self.assertIsInstance(ctx.exception.__cause__, SQLAlchemyError)


class StoredRateTests(unittest.TestCase):
    def test_to_dict_serialises_timestamps(self) -> None:
        stamp = datetime(2026, 10, 19, 9, 30)
        rate = StoredRate(
            id=7, currency="USD", buying=10.95, selling=11.05, created_at=stamp, updated_at=stamp
        )

        self.assertEqual(
            rate.to_dict(),
            {
                "id": 7,
                "currency": "USD",
                "buying": 10.95,
                "selling": 11.05,
                "created_at": "2026-10-19T09:30:00",
                "updated_at": "2026-10-19T09:30:00",
            },
        )


if __name__ == "__main__":
    unittest.main()
