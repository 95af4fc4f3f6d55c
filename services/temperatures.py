"""Request-scoped temperature operations over the sample store."""

from __future__ import annotations

import logging
from datetime import date
from functools import lru_cache
from typing import Optional

from app.schemas import DayReadings, Sample, Stats
from datastore.sql_store import TemperatureStore, build_default_store
from services.aggregator import Aggregator, day_bounds
from services.errors import NotFoundError, ValidationError
from settings import get_settings

logger = logging.getLogger(__name__)


class TemperatureService:
    """Reads and appends samples; every call is an independent store query."""

    def __init__(
        self,
        store: TemperatureStore,
        aggregator: Aggregator,
        recent_limit: int = 100,
    ) -> None:
        self.store = store
        self.aggregator = aggregator
        self.recent_limit = recent_limit

    def compute_stats(self, day: date) -> Stats:
        start, end = day_bounds(day)
        samples = self.store.fetch_between(start, end)
        summary = self.aggregator.aggregate(samples)
        if not summary.count:
            raise NotFoundError(f"No temperature data found for {day.isoformat()}.")

        return Stats(
            day=day,
            count=summary.count,
            average=summary.average,
            min_value=summary.min_value,
            max_value=summary.max_value,
            first_record=Sample.model_validate(summary.first_record),
            last_record=Sample.model_validate(summary.last_record),
        )

    def list_for_date(self, day: date) -> DayReadings:
        start, end = day_bounds(day)
        samples = [Sample.model_validate(sample) for sample in self.store.fetch_between(start, end)]
        return DayReadings(day=day, count=len(samples), data=samples)

    def list_recent(self, limit: Optional[int] = None) -> list[Sample]:
        """Return the ``limit`` most recent samples in ascending time order."""
        effective = self.recent_limit if limit is None else limit
        if effective < 1:
            raise ValidationError("limit must be a positive integer.")

        newest_first = self.store.fetch_latest(effective)
        return [Sample.model_validate(sample) for sample in reversed(newest_first)]

    def add_sample(self, value: Optional[float]) -> Sample:
        if value is None:
            raise ValidationError("Temperature value is required.")

        created = self.store.add_sample(value)
        logger.info("Sample recorded", extra={"sample_id": created.id, "value": value})
        return Sample.model_validate(created)


@lru_cache
def build_default_service() -> TemperatureService:
    """Factory that wires the service with the default store."""
    settings = get_settings()
    return TemperatureService(
        store=build_default_store(),
        aggregator=Aggregator(),
        recent_limit=settings.recent_limit,
    )
