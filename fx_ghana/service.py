"""HTTP surface: latest rate, full history and manual update trigger."""

from __future__ import annotations

from contextlib import asynccontextmanager
from typing import AsyncIterator

from fastapi import FastAPI, HTTPException, Query, Response

from fx_ghana.coordinator import UpdateCoordinator
from fx_ghana.db.base_store import RateStore
from fx_ghana.errors import RateNotFoundError
from fx_ghana.scheduler import HourlyScheduler
from fx_ghana.utils.logger import get_logger

LOGGER = get_logger(__name__)


def create_app(
    coordinator: UpdateCoordinator,
    store: RateStore,
    *,
    scheduler: HourlyScheduler | None = None,
    default_currency: str = "USD",
) -> FastAPI:
    """Build the FastAPI app; ``scheduler`` is started/stopped with the app lifespan."""

    @asynccontextmanager
    async def lifespan(_app: FastAPI) -> AsyncIterator[None]:
        if scheduler is not None:
            scheduler.start()
        try:
            yield
        finally:
            if scheduler is not None and not scheduler.stop(timeout=5):
                # The store is closed after shutdown; wait out the in-flight update.
                scheduler.stop()

    app = FastAPI(title="Stanbic Ghana FX rates", lifespan=lifespan)

    # Sync handlers: FastAPI runs them in its threadpool, off the event loop.
    @app.get("/getRates")
    def get_rates(
        response: Response,
        currency: str = Query(default=default_currency),
    ) -> dict:
        response.headers["Access-Control-Allow-Origin"] = "*"
        try:
            return store.latest(currency.upper()).to_dict()
        except RateNotFoundError as exc:
            LOGGER.warning("error getting rate: %s", exc)
            raise HTTPException(
                status_code=404,
                detail=str(exc),
                headers={"Access-Control-Allow-Origin": "*"},
            ) from exc

    @app.get("/getRatesFromDB")
    def get_rates_from_db() -> list[dict]:
        return [rate.to_dict() for rate in store.all()]

    @app.api_route("/performRateUpdate", methods=["GET", "POST"])
    def perform_rate_update() -> dict:
        return coordinator.run_cycle(manual=True).to_dict()

    return app


__all__ = ["create_app"]
