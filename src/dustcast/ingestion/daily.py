"""Aggregation of hourly air-quality samples into daily records."""

from collections.abc import Iterable, Sequence
from datetime import date

import structlog

from dustcast.models import DailyRecord, HourlyRecord
from dustcast.numeric import round_int

log = structlog.get_logger()


class DailyAggregator:
    """Builds daily averages and maxima from hourly samples."""

    def group_by_date(self, hourly: Iterable[HourlyRecord]) -> dict[date, list[HourlyRecord]]:
        by_date: dict[date, list[HourlyRecord]] = {}
        for record in hourly:
            by_date.setdefault(record.timestamp.date(), []).append(record)
        return by_date

    def aggregate(self, hourly: Iterable[HourlyRecord]) -> list[DailyRecord]:
        """Collapse hourly samples into date-ascending daily records.

        Averages and maxima are rounded to whole µg/m³. Days where every PM
        sample is missing are dropped; a pollutant missing for a whole day
        that still has the other one is reported as 0.

        Args:
            hourly: Hourly samples in any order

        Returns:
            One record per day with at least one PM sample
        """
        hourly = list(hourly)
        log.info("aggregating_daily", input_records=len(hourly))

        daily = []
        for day, samples in sorted(self.group_by_date(hourly).items()):
            pm25 = [s.pm25 for s in samples if s.pm25 is not None]
            pm10 = [s.pm10 for s in samples if s.pm10 is not None]
            if not pm25 and not pm10:
                continue

            daily.append(
                DailyRecord(
                    date=day,
                    pm25_avg=_avg(pm25),
                    pm25_max=round_int(max(pm25)) if pm25 else 0,
                    pm10_avg=_avg(pm10),
                    pm10_max=round_int(max(pm10)) if pm10 else 0,
                )
            )

        log.info("daily_aggregated", output_records=len(daily))
        return daily

    def split_history(
        self, daily: Sequence[DailyRecord], today: date
    ) -> tuple[list[DailyRecord], list[DailyRecord]]:
        """Split into (history before ``today``, forecast from ``today`` on)."""
        ordered = sorted(daily, key=lambda d: d.date)
        history = [d for d in ordered if d.date < today]
        forecast = [d for d in ordered if d.date >= today]
        return history, forecast


def _avg(values: list[float]) -> int:
    return round_int(sum(values) / len(values)) if values else 0
