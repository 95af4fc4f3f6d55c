"""Domain models shared across services."""

from __future__ import annotations

from datetime import datetime

from sqlalchemy import DateTime, Float, Integer
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column


class Base(DeclarativeBase):
    pass


class TemperatureSample(Base):
    """A single temperature reading.

    Samples are append-only: the core never updates or deletes them. The
    timestamp is a naive local time; when a caller does not supply one the
    store stamps the row with the current local time.
    """

    __tablename__ = "temperature_samples"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    value: Mapped[float] = mapped_column(Float, nullable=False)
    timestamp: Mapped[datetime] = mapped_column(
        DateTime, nullable=False, default=datetime.now, index=True
    )

    def __repr__(self) -> str:
        return (
            f"TemperatureSample(id={self.id!r}, value={self.value!r}, "
            f"timestamp={self.timestamp!r})"
        )
