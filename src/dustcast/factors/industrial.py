"""Industrial-activity correction for transboundary pollution.

Components:
1. Weekday factory cycle, lagged because emissions take 1-2 days to arrive
2. Holiday closures of upwind factories
3. Seasonal heating (coal burning peaks in winter)
4. Wind direction and speed governing transport toward the city
"""

from datetime import date, timedelta

import structlog

from dustcast.factors.holidays import DEFAULT_CALENDAR, HolidayCalendar
from dustcast.models import IndustrialFactorResult
from dustcast.numeric import round_half_up

log = structlog.get_logger()

# Factory utilization by weekday (date.weekday(): Monday is 0)
WEEKDAY_FACTORY_RATE = {
    0: 1.0,
    1: 1.0,
    2: 1.0,
    3: 1.0,
    4: 0.9,  # Friday wind-down
    5: 0.6,
    6: 0.4,  # Sunday minimum
}
# Share of the arriving pollution emitted the day before the target date
LAG_YESTERDAY_SHARE = 0.6
LAG_TODAY_SHARE = 0.4

SEASONAL_FACTOR = {
    1: 1.3,  # peak coal heating
    2: 1.25,
    3: 1.15,  # yellow dust + tail of heating season
    4: 1.0,
    5: 0.85,
    6: 0.75,
    7: 0.7,
    8: 0.7,
    9: 0.8,
    10: 0.95,
    11: 1.1,  # heating starts
    12: 1.25,
}

DEFAULT_WIND_SPEED = 3.0
NO_CORRECTION = "no special correction"


class IndustrialFactorModel:
    """Multiplicative correction from upwind industrial activity."""

    def __init__(self, calendar: HolidayCalendar = DEFAULT_CALENDAR) -> None:
        self.calendar = calendar

    def weekday_rate(self, target: date) -> float:
        today_rate = WEEKDAY_FACTORY_RATE[target.weekday()]
        yesterday_rate = WEEKDAY_FACTORY_RATE[(target - timedelta(days=1)).weekday()]
        return yesterday_rate * LAG_YESTERDAY_SHARE + today_rate * LAG_TODAY_SHARE

    def holiday_factor(self, target: date) -> tuple[float, str | None]:
        holiday = self.calendar.lookup(target)
        if holiday is None:
            return 1.0, None
        return holiday.factory_rate, holiday.name

    def seasonal_factor(self, target: date) -> float:
        return SEASONAL_FACTOR.get(target.month, 1.0)

    def wind_factor(
        self, direction: float | None, speed: float | None = None
    ) -> tuple[float, str]:
        """Transport factor from wind direction (degrees) and speed (m/s).

        Westerlies carry industrial plumes straight across; easterly and
        southerly winds bring clean maritime air. Speed then decides whether
        transport, stagnation or dispersion dominates.
        """
        if direction is None:
            return 1.0, "no wind direction data"

        heading = direction % 360
        wind_speed = DEFAULT_WIND_SPEED if speed is None else speed

        if 240 <= heading <= 300:
            base = 1.3
            description = "westerly (high transboundary influence)"
        elif 300 < heading <= 340:
            base = 1.15
            description = "northwesterly (moderate transboundary influence)"
        elif 210 <= heading < 240:
            base = 1.15
            description = "southwesterly (moderate transboundary influence)"
        elif heading > 340 or heading < 30:
            base = 1.05
            description = "northerly (low transboundary influence)"
        else:
            base = 0.85
            if 30 <= heading < 150:
                description = "easterly (maritime air)"
            else:
                description = "southerly (maritime air)"

        if base > 1.1:
            if 3 <= wind_speed <= 7:
                speed_multiplier = 1.15  # optimal transport
            elif wind_speed < 2:
                speed_multiplier = 0.9  # slow transport, pollution stays local
            elif wind_speed > 10:
                speed_multiplier = 0.7  # dispersion dominates
            else:
                speed_multiplier = 1.0
        else:
            if wind_speed < 2:
                speed_multiplier = 1.2  # local stagnation accumulates
            elif wind_speed > 7:
                speed_multiplier = 0.8
            else:
                speed_multiplier = 1.0

        if wind_speed < 2:
            description += ", light wind"
        elif wind_speed > 7:
            description += ", strong wind"

        return round_half_up(base * speed_multiplier, 2), description

    def calculate(
        self,
        target: date,
        wind_direction: float | None = None,
        wind_speed: float | None = None,
    ) -> IndustrialFactorResult:
        """Combine all industrial sub-factors for ``target``.

        Args:
            target: The forecast date
            wind_direction: Degrees clockwise from north, None when unknown
            wind_speed: m/s; defaults to 3 when only the direction is known

        Returns:
            Combined factor with its breakdown and a short summary
        """
        weekday = self.weekday_rate(target)
        seasonal = self.seasonal_factor(target)
        holiday, holiday_name = self.holiday_factor(target)
        wind, wind_description = self.wind_factor(wind_direction, wind_speed)

        weekday_component = 0.85 + weekday * 0.15
        combined = seasonal * wind * holiday * weekday_component

        notes = []
        if seasonal > 1.1:
            notes.append("winter heating influence")
        elif seasonal < 0.8:
            notes.append("summer clean air flow")
        if wind > 1.1 or wind < 0.9:
            notes.append(wind_description)
        if holiday_name:
            notes.append(f"{holiday_name} holiday (reduced factory output)")
        if weekday < 0.5:
            notes.append("weekend factory slowdown")

        result = IndustrialFactorResult(
            combined_factor=round_half_up(combined, 2),
            weekday_rate=round_half_up(weekday, 2),
            seasonal_factor=seasonal,
            wind_factor=wind,
            wind_description=wind_description,
            holiday_name=holiday_name,
            holiday_factor=holiday,
            summary=", ".join(notes) if notes else NO_CORRECTION,
        )
        log.debug(
            "industrial_factor",
            target=target.isoformat(),
            combined=result.combined_factor,
            holiday=holiday_name,
        )
        return result
