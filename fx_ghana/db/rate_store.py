"""SQLAlchemy implementation of the append-only ``rates`` table."""

from __future__ import annotations

from datetime import datetime
from pathlib import Path
from typing import cast

from sqlalchemy import Column, DateTime, Float, Integer, String, create_engine, select
from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import DeclarativeBase, Session, sessionmaker

from fx_ghana.db import DEFAULT_SQLITE_DB_PATH, sqlite_url
from fx_ghana.db.base_store import RateStore, StoredRate
from fx_ghana.errors import PersistError, RateNotFoundError
from fx_ghana.ingestion.models import CurrencyObservation
from fx_ghana.utils.logger import get_logger

LOGGER = get_logger(__name__)


class Base(DeclarativeBase):
    pass


class _Rate(Base):
    __tablename__ = "rates"

    id = Column(Integer, primary_key=True, autoincrement=True)
    currency = Column(String, nullable=False, index=True)
    buying = Column(Float, nullable=False)
    selling = Column(Float, nullable=False)
    created_at = Column(DateTime, nullable=False)
    updated_at = Column(DateTime, nullable=False)


def _to_stored(model: _Rate) -> StoredRate:
    return StoredRate(
        id=cast(int, model.id),
        currency=cast(str, model.currency),
        buying=cast(float, model.buying),
        selling=cast(float, model.selling),
        created_at=cast(datetime, model.created_at),
        updated_at=cast(datetime, model.updated_at),
    )


class SQLAlchemyRateStore(RateStore):
    """Rate store backed by any SQLAlchemy URL (SQLite by default)."""

    def __init__(self, url: str | None = None, *, db_path: str | Path | None = None) -> None:
        if url is None:
            self.db_path: Path | None = Path(db_path or DEFAULT_SQLITE_DB_PATH)
            url = sqlite_url(self.db_path)
        else:
            self.db_path = None
        self.url = url
        connect_args = {"check_same_thread": False} if url.startswith("sqlite") else {}
        self.engine: Engine = create_engine(url, echo=False, future=True, connect_args=connect_args)
        Base.metadata.create_all(self.engine)
        self._SessionFactory: sessionmaker[Session] = sessionmaker(
            bind=self.engine, expire_on_commit=False, future=True
        )

    def insert(self, observation: CurrencyObservation) -> StoredRate:
        timestamp = observation.observed_at
        row = _Rate(
            currency=observation.code,
            buying=observation.rate.buying,
            selling=observation.rate.selling,
            created_at=timestamp,
            updated_at=timestamp,
        )
        try:
            with self._SessionFactory() as session:
                session.add(row)
                session.commit()
        except SQLAlchemyError as exc:
            raise PersistError(
                f"Unable to store {observation.code} rate observed at {timestamp}: {exc}"
            ) from exc
        stored = _to_stored(row)
        LOGGER.info(
            "Stored %s rate #%s (buying=%s, selling=%s)",
            stored.currency,
            stored.id,
            stored.buying,
            stored.selling,
        )
        return stored

    def latest(self, code: str) -> StoredRate:
        with self._SessionFactory() as session:
            stmt = select(_Rate).where(_Rate.currency == code).order_by(_Rate.id.desc()).limit(1)
            model = session.execute(stmt).scalars().first()
        if model is None:
            raise RateNotFoundError(code)
        return _to_stored(model)

    def all(self) -> list[StoredRate]:
        with self._SessionFactory() as session:
            result = session.execute(select(_Rate).order_by(_Rate.id))
            return [_to_stored(model) for model in result.scalars()]

    def close(self) -> None:
        self.engine.dispose()


__all__ = ["SQLAlchemyRateStore"]
