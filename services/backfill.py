"""Synthetic backfill of the previous day's per-minute samples."""

from __future__ import annotations

import logging
import random
from datetime import date, datetime, timedelta
from typing import Callable, Iterator, Optional

from datastore.sql_store import TemperatureStore
from services.aggregator import day_bounds
from services.errors import StoreError

logger = logging.getLogger(__name__)

MINUTES_PER_DAY = 24 * 60
MIN_SYNTHETIC_VALUE = 40.0
MAX_SYNTHETIC_VALUE = 60.0


class BackfillGenerator:
    """Makes sure yesterday holds a full day of per-minute samples.

    The generator only checks whether *any* sample exists at or after
    yesterday's midnight. A day that was partially inserted, or a store that
    already holds samples from today, is treated as filled.
    """

    def __init__(
        self,
        store: TemperatureStore,
        today: Optional[Callable[[], date]] = None,
        rng: Optional[random.Random] = None,
    ) -> None:
        self.store = store
        self._today = today or date.today
        self._rng = rng or random.Random()

    def ensure_yesterday_filled(self) -> int:
        """Insert a synthetic day if needed; return the number of rows written.

        Store failures are logged and swallowed so that startup can proceed
        without backfilled data.
        """
        yesterday = self._today() - timedelta(days=1)
        start, end = day_bounds(yesterday)
        extra = {"day": yesterday.isoformat()}

        try:
            if self.store.has_samples_since(start):
                self._warn_if_incomplete(start, end, extra)
                logger.info("Backfill skipped; samples already present", extra=extra)
                return 0
            inserted = self.store.bulk_insert(self.generate(start))
        except StoreError:
            logger.exception("Backfill failed; continuing without synthetic data", extra=extra)
            return 0

        logger.info("Backfill complete", extra={**extra, "inserted": inserted})
        return inserted

    def generate(self, start: datetime) -> Iterator[tuple[datetime, float]]:
        """Yield one ``(timestamp, value)`` pair per minute from ``start``."""
        for minute in range(MINUTES_PER_DAY):
            value = round(self._rng.uniform(MIN_SYNTHETIC_VALUE, MAX_SYNTHETIC_VALUE), 1)
            yield start + timedelta(minutes=minute), value

    def _warn_if_incomplete(self, start: datetime, end: datetime, extra: dict) -> None:
        row_count = self.store.count_between(start, end)
        if row_count < MINUTES_PER_DAY:
            logger.warning(
                "Previous day is incomplete but will not be backfilled",
                extra={**extra, "row_count": row_count},
            )
