"""Tests for the forecast engine."""

from datetime import date, datetime, timedelta

import pytest

from conftest import make_analysis, make_day, make_history
from dustcast.engine import ForecastEngine
from dustcast.factors import HolidayCalendar, IndustrialFactorModel
from dustcast.factors.holidays import Holiday
from dustcast.grading import Grade, Pollutant
from dustcast.models import DailyRecord, HourlyRecord, Trend, WeatherObservation

# Tuesday in April: no holiday, neutral season and weekday
NEUTRAL_DATE = date(2025, 4, 15)

# Stability score 0.5 gives a weather factor of exactly 1.0
NEUTRAL_WEATHER = WeatherObservation(
    wind_speed=1.0,
    humidity=50,
    cloud_cover=50,
    pressure_msl=1013,
    surface_pressure=1000,
)


@pytest.fixture
def engine() -> ForecastEngine:
    return ForecastEngine()


@pytest.fixture
def baseline() -> DailyRecord:
    return make_day(NEUTRAL_DATE, 40, 80)


class TestPredict:
    def test_no_baseline(self, engine: ForecastEngine, rising_history: list[DailyRecord]) -> None:
        assert engine.predict(None, history=rising_history) is None

    def test_short_history_uses_baseline_only(
        self, engine: ForecastEngine, baseline: DailyRecord
    ) -> None:
        result = engine.predict(baseline, history=make_history([20, 25]))

        assert result is not None
        assert result.smoothed_pollutants == []
        assert result.blend.ratio == 0.0
        assert result.blend.insufficient_data is True
        # Missing weather falls back to defaults: unstable air, factor 0.7
        assert result.total_factor == 0.7
        assert result.predicted_pm25 == 28
        assert result.predicted_pm10 == 56
        assert result.tomorrow_grade == Grade.MODERATE
        assert result.trend == Trend.WORSENING
        assert result.message.endswith("(corrections: unstable atmosphere (good dispersion))")

    def test_blended_prediction(
        self, engine: ForecastEngine, baseline: DailyRecord, rising_history: list[DailyRecord]
    ) -> None:
        result = engine.predict(baseline, history=rising_history, weather=NEUTRAL_WEATHER)

        assert result is not None
        assert result.total_factor == 1.0
        assert result.blend.ratio == pytest.approx(0.5319, abs=1e-3)
        assert result.smoothed_pollutants == [Pollutant.PM25, Pollutant.PM10]
        # Smoother 32 and baseline 40 blended at ~0.53
        assert result.predicted_pm25 == 36
        assert result.predicted_pm10 == 71
        assert result.tomorrow_grade == Grade.BAD
        assert "Please limit outdoor activity." in result.message
        assert "corrections" not in result.message

    def test_today_drives_trend(
        self, engine: ForecastEngine, baseline: DailyRecord, rising_history: list[DailyRecord]
    ) -> None:
        today = make_day(NEUTRAL_DATE - timedelta(days=1), 37, 74)
        result = engine.predict(
            baseline, history=rising_history[:-1], today=today, weather=NEUTRAL_WEATHER
        )

        assert result is not None
        assert result.trend == Trend.STABLE
        assert result.message.startswith("Particulate levels tomorrow are expected to be similar")

    def test_improving_trend(self, engine: ForecastEngine) -> None:
        baseline = make_day(NEUTRAL_DATE, 10, 20)
        today = make_day(NEUTRAL_DATE - timedelta(days=1), 60, 120)
        result = engine.predict(baseline, today=today, weather=NEUTRAL_WEATHER)

        assert result is not None
        assert result.trend == Trend.IMPROVING
        assert result.tomorrow_grade == Grade.GOOD

    def test_total_factor_clamped(self, engine: ForecastEngine) -> None:
        # January westerly plus stagnant air and a co-pollutant surge
        baseline = make_day(date(2025, 1, 14), 40, 80)
        weather = WeatherObservation(
            wind_direction=270,
            wind_speed=1.0,
            humidity=90,
            cloud_cover=10,
            pressure_msl=1030,
            surface_pressure=1015,
        )
        start = datetime(2025, 1, 13)
        hourly = [
            HourlyRecord(timestamp=start + timedelta(hours=i), no2=10 if i < 6 else 30)
            for i in range(12)
        ]

        result = engine.predict(baseline, weather=weather, hourly=hourly)

        assert result is not None
        assert result.total_factor == 3.0
        assert result.predicted_pm25 == 120
        assert result.predicted_pm10 == 240
        assert result.tomorrow_grade == Grade.VERY_BAD

    def test_total_factor_floor(self) -> None:
        # Summer southerly gale on a plant shutdown day, washed out by heavy rain
        shutdown = HolidayCalendar(
            fixed=(Holiday(name="Plant Shutdown", start=(7, 14), end=(7, 16), factory_rate=0.2),),
        )
        engine = ForecastEngine(industrial=IndustrialFactorModel(shutdown))
        baseline = make_day(date(2025, 7, 15), 40, 80)
        weather = WeatherObservation(
            wind_direction=180,
            wind_speed=8,
            precipitation_probability=80,
            precipitation=10,
        )
        start = datetime(2025, 7, 14)
        hourly = [
            HourlyRecord(timestamp=start + timedelta(hours=i), no2=30 if i < 6 else 10)
            for i in range(12)
        ]

        result = engine.predict(baseline, weather=weather, hourly=hourly)

        assert result is not None
        assert result.industrial.combined_factor == 0.1
        assert result.weather.combined_factor == 0.3
        assert result.total_factor == 0.2
        assert result.predicted_pm25 == 8
        assert result.predicted_pm10 == 16
        assert result.tomorrow_grade == Grade.GOOD

    def test_visual_factor_applied(self, engine: ForecastEngine, baseline: DailyRecord) -> None:
        result = engine.predict(
            baseline, weather=NEUTRAL_WEATHER, analyses=[make_analysis(1.0, 0.9)]
        )

        assert result is not None
        assert result.visual is not None
        assert result.visual.combined_factor == 1.12
        assert result.total_factor == 1.12
        assert result.predicted_pm25 == 45
        assert "heavy haze or fog detected" in result.message

    def test_no_analyses_means_no_visual(
        self, engine: ForecastEngine, baseline: DailyRecord
    ) -> None:
        result = engine.predict(baseline, weather=NEUTRAL_WEATHER)
        assert result is not None
        assert result.visual is None

    def test_pollutant_without_history_keeps_baseline(
        self, engine: ForecastEngine, baseline: DailyRecord
    ) -> None:
        history = make_history([20, 22, 25, 30, 40], [0, 0, 0, 0, 0])
        result = engine.predict(baseline, history=history, weather=NEUTRAL_WEATHER)

        assert result is not None
        assert result.smoothed_pollutants == [Pollutant.PM25]
        assert result.predicted_pm25 == 36
        assert result.predicted_pm10 == 80

    def test_same_inputs_same_result(
        self, engine: ForecastEngine, baseline: DailyRecord, rising_history: list[DailyRecord]
    ) -> None:
        analyses = [make_analysis(0.6, 0.8)]
        first = engine.predict(
            baseline, history=rising_history, weather=NEUTRAL_WEATHER, analyses=analyses
        )
        second = engine.predict(
            baseline, history=rising_history, weather=NEUTRAL_WEATHER, analyses=analyses
        )
        assert first == second

    def test_predictions_never_negative(self, engine: ForecastEngine) -> None:
        history = make_history([90, 60, 30, 5, 1])
        baseline = make_day(NEUTRAL_DATE, 0, 0)
        result = engine.predict(baseline, history=history)

        assert result is not None
        assert result.predicted_pm25 >= 0
        assert result.predicted_pm10 >= 0


class TestEvaluate:
    def test_delegates_to_evaluator(
        self, engine: ForecastEngine, rising_history: list[DailyRecord]
    ) -> None:
        result = engine.evaluate(rising_history)
        assert result is not None
        assert result.sample_days == 5

    def test_short_history(self, engine: ForecastEngine) -> None:
        assert engine.evaluate(make_history([10, 12])) is None
