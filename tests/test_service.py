from __future__ import annotations

from datetime import datetime
from pathlib import Path

import pytest
from fastapi.testclient import TestClient

from fx_ghana.coordinator import CycleReport
from fx_ghana.db.rate_store import SQLAlchemyRateStore
from fx_ghana.ingestion.models import CurrencyObservation, RatePair
from fx_ghana.service import create_app


class _DummyCoordinator:
    def __init__(self) -> None:
        self.calls: list[bool] = []

    def run_cycle(self, *, manual: bool = True) -> CycleReport:
        self.calls.append(manual)
        return CycleReport(trigger="manual", ran=True, fetched=True, observations=1, persisted=1)


class _DummyScheduler:
    def __init__(self, *, busy_stops: int = 0) -> None:
        self.events: list[str] = []
        self.busy_stops = busy_stops

    def start(self) -> None:
        self.events.append("start")

    def stop(self, timeout: float | None = None) -> bool:
        self.events.append(f"stop({timeout})")
        if self.busy_stops:
            self.busy_stops -= 1
            return False
        return True


@pytest.fixture()
def store(tmp_path: Path):
    rate_store = SQLAlchemyRateStore(db_path=tmp_path / "finance.db")
    yield rate_store
    rate_store.close()


def _observe(store: SQLAlchemyRateStore, code: str, buying: float, selling: float) -> None:
    store.insert(
        CurrencyObservation(
            label=code,
            code=code,
            rate=RatePair(buying, selling),
            observed_at=datetime(2026, 10, 19, 9, 0),
        )
    )


def test_get_rates_returns_latest_usd_with_cors(store) -> None:
    _observe(store, "USD", 10.90, 11.00)
    _observe(store, "USD", 10.95, 11.05)
    client = TestClient(create_app(_DummyCoordinator(), store))

    response = client.get("/getRates")

    assert response.status_code == 200
    assert response.headers["access-control-allow-origin"] == "*"
    body = response.json()
    assert (body["currency"], body["buying"], body["selling"]) == ("USD", 10.95, 11.05)
    assert body["created_at"] == "2026-10-19T09:00:00"


def test_get_rates_accepts_currency_query(store) -> None:
    _observe(store, "USD", 10.95, 11.05)
    _observe(store, "EUR", 12.70, 12.85)
    client = TestClient(create_app(_DummyCoordinator(), store))

    response = client.get("/getRates", params={"currency": "eur"})

    assert response.json()["currency"] == "EUR"


def test_get_rates_returns_404_when_nothing_stored(store) -> None:
    client = TestClient(create_app(_DummyCoordinator(), store))

    response = client.get("/getRates")

    assert response.status_code == 404
    assert "USD" in response.json()["detail"]


def test_get_rates_from_db_lists_everything(store) -> None:
    _observe(store, "USD", 10.95, 11.05)
    _observe(store, "EUR", 12.70, 12.85)
    client = TestClient(create_app(_DummyCoordinator(), store))

    response = client.get("/getRatesFromDB")

    assert response.status_code == 200
    assert [row["currency"] for row in response.json()] == ["USD", "EUR"]


def test_perform_rate_update_triggers_manual_cycle(store) -> None:
    coordinator = _DummyCoordinator()
    client = TestClient(create_app(coordinator, store))

    response = client.post("/performRateUpdate")
    client.get("/performRateUpdate")

    assert response.status_code == 200
    assert response.json()["persisted"] == 1
    assert response.json()["ran"] is True
    assert coordinator.calls == [True, True]


def test_lifespan_starts_and_stops_scheduler(store) -> None:
    scheduler = _DummyScheduler()
    app = create_app(_DummyCoordinator(), store, scheduler=scheduler)

    with TestClient(app) as client:
        assert scheduler.events == ["start"]
        client.get("/getRatesFromDB")

    assert scheduler.events == ["start", "stop(5)"]


def test_lifespan_waits_for_running_update_on_shutdown(store) -> None:
    scheduler = _DummyScheduler(busy_stops=1)
    app = create_app(_DummyCoordinator(), store, scheduler=scheduler)

    with TestClient(app):
        pass

    assert scheduler.events == ["start", "stop(5)", "stop(None)"]
