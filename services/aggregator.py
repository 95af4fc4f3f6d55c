"""Aggregation logic for temperature samples."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime, time, timedelta
from typing import Iterable, Optional

from models.records import TemperatureSample


def day_bounds(day: date) -> tuple[datetime, datetime]:
    """Return the local ``[start, end)`` interval covering ``day``.

    The end is the following midnight, so samples stamped anywhere in the
    final second of the day (sub-second parts included) still belong to it.
    """
    start = datetime.combine(day, time.min)
    return start, start + timedelta(days=1)


@dataclass
class AggregationSummary:
    """Computed statistics for one day's worth of samples."""

    count: int = 0
    average: Optional[float] = None
    min_value: Optional[float] = None
    max_value: Optional[float] = None
    first_record: Optional[TemperatureSample] = None
    last_record: Optional[TemperatureSample] = None


class Aggregator:
    """Pure aggregation component that can be unit tested in isolation."""

    def aggregate(self, samples: Iterable[TemperatureSample]) -> AggregationSummary:
        summary = AggregationSummary()
        total = 0.0

        for sample in samples:
            summary.count += 1
            value = sample.value
            total += value

            if summary.min_value is None or value < summary.min_value:
                summary.min_value = value
            if summary.max_value is None or value > summary.max_value:
                summary.max_value = value

            # Ties keep the earliest-seen sample as first and the latest-seen as last.
            if summary.first_record is None or sample.timestamp < summary.first_record.timestamp:
                summary.first_record = sample
            if summary.last_record is None or sample.timestamp >= summary.last_record.timestamp:
                summary.last_record = sample

        if summary.count:
            summary.average = round(total / summary.count, 1)

        return summary
