from __future__ import annotations

import logging
from contextlib import contextmanager
from datetime import datetime
from functools import lru_cache
from pathlib import Path
from typing import Iterable, Iterator, Optional

from sqlalchemy import create_engine, func, insert, select
from sqlalchemy.engine import Engine, make_url
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from models.records import Base, TemperatureSample
from services.errors import StoreError
from settings import get_settings

logger = logging.getLogger(__name__)


class TemperatureStore:
    """Process-wide handle on the relational table of temperature samples.

    The handle is inert until :meth:`open` builds the engine and creates the
    schema; :meth:`close` disposes of the connection pool. Every query runs
    in its own short-lived session and any driver failure surfaces as
    :class:`StoreError`.
    """

    def __init__(self, url: str, echo: bool = False) -> None:
        self.url = url
        self._echo = echo
        self._engine: Optional[Engine] = None
        self._sessions: Optional[sessionmaker[Session]] = None

    @property
    def is_open(self) -> bool:
        return self._engine is not None

    def open(self) -> None:
        if self._engine is not None:
            return
        try:
            engine = self._build_engine()
            Base.metadata.create_all(engine)
        except SQLAlchemyError as exc:
            raise StoreError(f"Unable to open store at {self.url!r}.") from exc
        self._engine = engine
        self._sessions = sessionmaker(bind=engine, expire_on_commit=False)
        logger.info("Temperature store opened", extra={"database": self.url})

    def close(self) -> None:
        if self._engine is None:
            return
        self._engine.dispose()
        self._engine = None
        self._sessions = None
        logger.info("Temperature store closed", extra={"database": self.url})

    def has_samples_since(self, start: datetime) -> bool:
        with self._session() as session:
            found = session.scalar(
                select(TemperatureSample.id)
                .where(TemperatureSample.timestamp >= start)
                .limit(1)
            )
        return found is not None

    def count_between(self, start: datetime, end: datetime) -> int:
        """Count samples with ``start <= timestamp < end``."""
        with self._session() as session:
            total = session.scalar(
                select(func.count(TemperatureSample.id)).where(
                    TemperatureSample.timestamp >= start,
                    TemperatureSample.timestamp < end,
                )
            )
        return int(total or 0)

    def bulk_insert(self, rows: Iterable[tuple[datetime, float]]) -> int:
        """Insert ``(timestamp, value)`` pairs in a single transaction."""
        payload = [{"timestamp": timestamp, "value": value} for timestamp, value in rows]
        if not payload:
            return 0
        with self._session() as session:
            with session.begin():
                session.execute(insert(TemperatureSample), payload)
        return len(payload)

    def add_sample(self, value: float, timestamp: Optional[datetime] = None) -> TemperatureSample:
        sample = TemperatureSample(value=value)
        if timestamp is not None:
            sample.timestamp = timestamp
        with self._session() as session:
            with session.begin():
                session.add(sample)
        return sample

    def fetch_between(self, start: datetime, end: datetime) -> list[TemperatureSample]:
        """Samples with ``start <= timestamp < end`` in ascending time order."""
        with self._session() as session:
            result = session.scalars(
                select(TemperatureSample)
                .where(
                    TemperatureSample.timestamp >= start,
                    TemperatureSample.timestamp < end,
                )
                .order_by(TemperatureSample.timestamp.asc(), TemperatureSample.id.asc())
            )
            return list(result)

    def fetch_latest(self, limit: int) -> list[TemperatureSample]:
        """The ``limit`` most recent samples, newest first."""
        with self._session() as session:
            result = session.scalars(
                select(TemperatureSample)
                .order_by(TemperatureSample.timestamp.desc(), TemperatureSample.id.desc())
                .limit(limit)
            )
            return list(result)

    @contextmanager
    def _session(self) -> Iterator[Session]:
        if self._sessions is None:
            raise StoreError("Temperature store is not open.")
        session = self._sessions()
        try:
            yield session
        except SQLAlchemyError as exc:
            session.rollback()
            raise StoreError("Temperature store operation failed.") from exc
        finally:
            session.close()

    def _build_engine(self) -> Engine:
        url = make_url(self.url)
        if url.get_backend_name() != "sqlite":
            return create_engine(url, echo=self._echo, pool_pre_ping=True)

        database = url.database
        if database and database != ":memory:":
            Path(database).parent.mkdir(parents=True, exist_ok=True)
            return create_engine(
                url, echo=self._echo, connect_args={"check_same_thread": False}
            )

        # In-memory databases live as long as their single connection.
        return create_engine(
            url,
            echo=self._echo,
            connect_args={"check_same_thread": False},
            poolclass=StaticPool,
        )


@lru_cache
def build_default_store(url: Optional[str] = None) -> TemperatureStore:
    settings = get_settings()
    database_url = settings.database_url if url is None else url
    return TemperatureStore(url=database_url)
