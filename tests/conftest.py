"""Shared fixtures and builders for DustCast tests."""

from datetime import date, datetime, timedelta

import pytest

from dustcast.grading import Grade
from dustcast.models import DailyRecord, Pm25Range, VisualAnalysisResult, VisualMetrics


def make_day(day: date, pm25: float, pm10: float | None = None) -> DailyRecord:
    pm10_value = pm25 * 2 if pm10 is None else pm10
    return DailyRecord(
        date=day,
        pm25_avg=pm25,
        pm25_max=pm25 + 10,
        pm10_avg=pm10_value,
        pm10_max=pm10_value + 20,
    )


def make_history(
    pm25_values: list[float],
    pm10_values: list[float] | None = None,
    start: date = date(2025, 4, 10),
) -> list[DailyRecord]:
    pm10s = pm10_values or [v * 2 for v in pm25_values]
    return [
        make_day(start + timedelta(days=i), pm25, pm10)
        for i, (pm25, pm10) in enumerate(zip(pm25_values, pm10s, strict=True))
    ]


def make_analysis(
    haziness: float, confidence: float, station_id: str = "cam"
) -> VisualAnalysisResult:
    return VisualAnalysisResult(
        station_id=station_id,
        timestamp=datetime(2025, 4, 14, 9, 0),
        metrics=VisualMetrics(
            contrast=0.5,
            edge_density=0.3,
            color_shift=0.1,
            brightness=140,
            brightness_uniformity=0.5,
            haziness=haziness,
        ),
        visibility_grade=Grade.MODERATE,
        estimated_pm25_range=Pm25Range(min=15, max=35),
        confidence=confidence,
    )


@pytest.fixture
def rising_history() -> list[DailyRecord]:
    """Five days of steadily worsening PM2.5 (PM10 is double)."""
    return make_history([20, 22, 25, 30, 40])
