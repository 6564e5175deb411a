"""Tests for the weather correction factor."""

from datetime import datetime, timedelta

import pytest

from dustcast.factors.weather import WeatherFactorModel
from dustcast.models import HourlyRecord, WeatherObservation


@pytest.fixture
def model() -> WeatherFactorModel:
    return WeatherFactorModel()


def hourly_series(older_no2: float, newer_no2: float, hours: int = 12) -> list[HourlyRecord]:
    start = datetime(2025, 4, 14, 0)
    half = hours // 2
    return [
        HourlyRecord(
            timestamp=start + timedelta(hours=i),
            no2=older_no2 if i < half else newer_no2,
        )
        for i in range(hours)
    ]


STAGNANT = WeatherObservation(
    wind_speed=1.0,
    humidity=90,
    cloud_cover=10,
    pressure_msl=1030,
    surface_pressure=1015,
)


class TestPrecipitation:
    @pytest.mark.parametrize(
        ("probability", "amount", "expected"),
        [
            (80, 10, 0.4),
            (80, 3, 0.6),
            (60, 0, 0.8),
            (80, 0.5, 0.8),
            (30, 10, 1.0),
            (None, None, 1.0),
        ],
    )
    def test_washout_levels(
        self, model: WeatherFactorModel, probability: float, amount: float, expected: float
    ) -> None:
        weather = WeatherObservation(precipitation_probability=probability, precipitation=amount)
        assert model.precipitation_factor(weather)[0] == expected


class TestStability:
    def test_defaults_are_unstable(self, model: WeatherFactorModel) -> None:
        factor, description = model.stability_factor(WeatherObservation())
        assert factor == 0.7
        assert description == "unstable atmosphere (good dispersion)"

    def test_stagnant_air_maxes_out(self, model: WeatherFactorModel) -> None:
        assert model.stability_score(STAGNANT) == pytest.approx(1.0)
        factor, description = model.stability_factor(STAGNANT)
        assert factor == 1.3
        assert description == "very stable atmosphere (pollutants stagnating)"

    def test_score_never_negative(self, model: WeatherFactorModel) -> None:
        windy = WeatherObservation(wind_speed=12, cloud_cover=95)
        assert model.stability_score(windy) == 0.0


class TestHumidity:
    @pytest.mark.parametrize(
        ("humidity", "expected"), [(50, 1.0), (70, 1.0), (80, 1.2), (86, 1.3), (None, 1.0)]
    )
    def test_humidity_levels(
        self, model: WeatherFactorModel, humidity: float, expected: float
    ) -> None:
        assert model.humidity_factor(WeatherObservation(humidity=humidity))[0] == expected


class TestLeadingIndicator:
    def test_too_few_samples(self, model: WeatherFactorModel) -> None:
        factor, description, insufficient = model.leading_indicator_factor(hourly_series(10, 30, 5))
        assert factor == 1.0
        assert description == "insufficient data"
        assert insufficient is True

    def test_surge(self, model: WeatherFactorModel) -> None:
        factor, _, insufficient = model.leading_indicator_factor(hourly_series(10, 30))
        assert factor == 1.2
        assert insufficient is False

    def test_rising(self, model: WeatherFactorModel) -> None:
        assert model.leading_indicator_factor(hourly_series(10, 18))[0] == 1.1

    def test_falling(self, model: WeatherFactorModel) -> None:
        assert model.leading_indicator_factor(hourly_series(30, 10))[0] == 0.9

    def test_zero_baseline_is_steady(self, model: WeatherFactorModel) -> None:
        factor, description, _ = model.leading_indicator_factor(hourly_series(0, 50))
        assert factor == 1.0
        assert description == "co-pollutants steady"

    def test_only_last_day_considered(self, model: WeatherFactorModel) -> None:
        # Six old hours of very high NO2 fall outside the 24-hour window
        old = hourly_series(500, 500, 6)
        recent = hourly_series(10, 10, 24)
        assert model.leading_indicator_factor(old + recent)[0] == 1.0


class TestCalculate:
    def test_lower_clamp(self, model: WeatherFactorModel) -> None:
        rain = WeatherObservation(precipitation_probability=80, precipitation=10)
        result = model.calculate(rain, hourly_series(30, 10))

        assert result.combined_factor == 0.3
        assert "heavy rain expected (strong washout)" in result.summary

    def test_upper_clamp(self, model: WeatherFactorModel) -> None:
        result = model.calculate(STAGNANT, hourly_series(10, 30))
        assert result.combined_factor == 2.0

    def test_missing_weather_uses_defaults(self, model: WeatherFactorModel) -> None:
        result = model.calculate(None)

        assert result.combined_factor == 0.7
        assert result.leading_indicator_insufficient is True
        assert result.summary == "unstable atmosphere (good dispersion)"

    def test_neutral_conditions(self, model: WeatherFactorModel) -> None:
        weather = WeatherObservation(
            wind_speed=1.0, humidity=50, cloud_cover=50, pressure_msl=1013, surface_pressure=1000
        )
        result = model.calculate(weather)

        assert result.combined_factor == 1.0
        assert result.summary == "no special weather correction"

    def test_combined_always_in_range(self, model: WeatherFactorModel) -> None:
        for wind in (0.5, 2, 5, 9):
            for humidity in (20, 80, 95):
                for probability in (0, 60, 90):
                    weather = WeatherObservation(
                        wind_speed=wind,
                        humidity=humidity,
                        precipitation_probability=probability,
                        precipitation=8,
                    )
                    for hourly in (hourly_series(10, 40), hourly_series(40, 10)):
                        assert 0.3 <= model.calculate(weather, hourly).combined_factor <= 2.0
