"""Meteorological correction factors.

Components:
1. Precipitation washout
2. Atmospheric stability (stagnation / inversion)
3. Hygroscopic growth of particles in humid air
4. NO2/SO2/CO trend as a leading indicator of PM
"""

from collections.abc import Iterable, Sequence

import structlog

from dustcast.models import HourlyRecord, WeatherFactorResult, WeatherObservation
from dustcast.numeric import clamp, round_half_up

log = structlog.get_logger()

MIN_FACTOR = 0.3
MAX_FACTOR = 2.0

# Neutral values substituted for missing observations
DEFAULT_WIND_SPEED = 3.0
DEFAULT_HUMIDITY = 50.0
DEFAULT_CLOUD_COVER = 50.0
DEFAULT_PRESSURE = 1013.0

LEADING_WINDOW_HOURS = 24
MIN_LEADING_SAMPLES = 6
# Weight of each co-pollutant's relative change in the leading-indicator score
LEADING_WEIGHTS = {"no2": 0.5, "so2": 0.3, "co": 0.2}

NO_CORRECTION = "no special weather correction"


class WeatherFactorModel:
    """Multiplicative correction from forecast weather and co-pollutant trends."""

    def precipitation_factor(self, weather: WeatherObservation) -> tuple[float, str]:
        probability = weather.precipitation_probability or 0.0
        amount = weather.precipitation or 0.0

        if probability > 70 and amount > 5:
            return 0.4, "heavy rain expected (strong washout)"
        if probability > 70 and amount > 1:
            return 0.6, "rain expected (washout)"
        if probability > 50:
            return 0.8, "chance of rain (light washout)"
        return 1.0, "no precipitation"

    def stability_score(self, weather: WeatherObservation) -> float:
        """0 is unstable (good mixing), 1 is very stable (pollutants trapped)."""
        wind_speed = _or_default(weather.wind_speed, DEFAULT_WIND_SPEED)
        humidity = _or_default(weather.humidity, DEFAULT_HUMIDITY)
        cloud_cover = _or_default(weather.cloud_cover, DEFAULT_CLOUD_COVER)
        pressure_msl = _or_default(weather.pressure_msl, DEFAULT_PRESSURE)
        surface_pressure = _or_default(weather.surface_pressure, DEFAULT_PRESSURE)

        score = 0.0

        if wind_speed < 1.5:
            score += 0.35
        elif wind_speed < 3:
            score += 0.2
        elif wind_speed > 7:
            score -= 0.1

        if humidity > 85:
            score += 0.2
        elif humidity > 75:
            score += 0.1

        # Clear skies allow radiative cooling and a surface inversion
        if cloud_cover < 20:
            score += 0.2
        elif cloud_cover > 80:
            score -= 0.05

        pressure_diff = pressure_msl - surface_pressure
        if pressure_diff > 10:
            score += 0.15
        elif pressure_diff > 5:
            score += 0.1

        # High pressure brings subsidence inversions
        if pressure_msl > 1025:
            score += 0.1
        elif pressure_msl > 1020:
            score += 0.05

        return clamp(score, 0.0, 1.0)

    def stability_factor(self, weather: WeatherObservation) -> tuple[float, str]:
        score = self.stability_score(weather)
        factor = 0.7 + score * 0.6

        if score > 0.6:
            description = "very stable atmosphere (pollutants stagnating)"
        elif score > 0.3:
            description = "moderately stable atmosphere"
        else:
            description = "unstable atmosphere (good dispersion)"

        return round_half_up(factor, 2), description

    def humidity_factor(self, weather: WeatherObservation) -> tuple[float, str]:
        humidity = _or_default(weather.humidity, DEFAULT_HUMIDITY)

        if humidity > 85:
            return 1.3, "high humidity (particle swelling)"
        if humidity > 70:
            return round_half_up(1.0 + (humidity - 70) * 0.02, 2), "somewhat humid"
        return 1.0, "normal humidity"

    def leading_indicator_factor(
        self, hourly: Sequence[HourlyRecord]
    ) -> tuple[float, str, bool]:
        """Compare the older and newer halves of the last 24 hourly samples.

        Returns:
            (factor, description, insufficient_data)
        """
        recent = list(hourly[-LEADING_WINDOW_HOURS:])
        if len(recent) < MIN_LEADING_SAMPLES:
            return 1.0, "insufficient data", True

        half = len(recent) // 2
        older, newer = recent[:half], recent[half:]

        score = 0.0
        for pollutant, weight in LEADING_WEIGHTS.items():
            old = _mean(getattr(h, pollutant) for h in older)
            new = _mean(getattr(h, pollutant) for h in newer)
            change = (new - old) / old if old > 0 else 0.0
            score += change * weight

        if score > 0.6:
            return 1.2, "co-pollutant surge (PM rise signal)", False
        if score > 0.3:
            return 1.1, "co-pollutants rising", False
        if score < -0.2:
            return 0.9, "co-pollutants falling (clearing signal)", False
        return 1.0, "co-pollutants steady", False

    def calculate(
        self,
        weather: WeatherObservation | None = None,
        hourly: Sequence[HourlyRecord] = (),
    ) -> WeatherFactorResult:
        """Combine the four weather sub-factors, clamped to [0.3, 2.0].

        Args:
            weather: Forecast-time observation; None means every field is missing
            hourly: Recent hourly samples, oldest first, for the leading indicator
        """
        observation = weather or WeatherObservation()
        precipitation, precipitation_desc = self.precipitation_factor(observation)
        stability, stability_desc = self.stability_factor(observation)
        humidity, humidity_desc = self.humidity_factor(observation)
        leading, leading_desc, insufficient = self.leading_indicator_factor(hourly)

        combined = clamp(precipitation * stability * humidity * leading, MIN_FACTOR, MAX_FACTOR)

        notes = []
        if precipitation < 0.9:
            notes.append(precipitation_desc)
        if stability > 1.15 or stability < 0.85:
            notes.append(stability_desc)
        if humidity > 1.1:
            notes.append(humidity_desc)
        if leading > 1.05 or leading < 0.95:
            notes.append(leading_desc)

        if insufficient:
            log.warning("leading_indicator_insufficient", samples=len(hourly))

        return WeatherFactorResult(
            combined_factor=round_half_up(combined, 2),
            precipitation_factor=precipitation,
            precipitation_description=precipitation_desc,
            stability_factor=stability,
            stability_description=stability_desc,
            humidity_factor=humidity,
            humidity_description=humidity_desc,
            leading_indicator_factor=leading,
            leading_indicator_description=leading_desc,
            leading_indicator_insufficient=insufficient,
            summary=", ".join(notes) if notes else NO_CORRECTION,
        )


def _or_default(value: float | None, default: float) -> float:
    return default if value is None else value


def _mean(values: Iterable[float | None]) -> float:
    present = [v for v in values if v is not None]
    return sum(present) / len(present) if present else 0.0
