"""Holiday calendar for upwind industrial regions.

Lunar holidays move every year, so their Gregorian windows are kept as
literal per-year tables rather than computed. Extend a calendar with
``HolidayCalendar.with_lunar_dates`` when a new year is needed.
"""

from collections.abc import Mapping
from datetime import date

from pydantic import BaseModel, ConfigDict, Field

# (month, day) pair; holiday windows never wrap across a year boundary
MonthDay = tuple[int, int]


class Holiday(BaseModel):
    """A multi-day holiday window and the factory activity it leaves running."""

    model_config = ConfigDict(frozen=True)

    name: str
    start: MonthDay
    end: MonthDay
    factory_rate: float = Field(ge=0, le=1)

    def contains(self, day: date) -> bool:
        return self.start <= (day.month, day.day) <= self.end


class LunarHoliday(BaseModel):
    """A holiday whose Gregorian window is looked up per year."""

    model_config = ConfigDict(frozen=True)

    name: str
    factory_rate: float = Field(ge=0, le=1)
    windows: dict[int, tuple[MonthDay, MonthDay]]


# Spring Festival: lunar new year plus the surrounding week of closures
SPRING_FESTIVAL = LunarHoliday(
    name="Spring Festival",
    factory_rate=0.2,
    windows={
        2024: ((2, 3), (2, 17)),
        2025: ((1, 22), (2, 5)),
        2026: ((2, 10), (2, 24)),
        2027: ((1, 30), (2, 13)),
        2028: ((1, 19), (2, 2)),
        2029: ((2, 6), (2, 20)),
        2030: ((1, 26), (2, 9)),
    },
)

# Dragon Boat Festival: lunar 5/5
DRAGON_BOAT = LunarHoliday(
    name="Dragon Boat Festival",
    factory_rate=0.6,
    windows={
        2024: ((6, 8), (6, 10)),
        2025: ((5, 29), (5, 31)),
        2026: ((6, 17), (6, 19)),
        2027: ((6, 6), (6, 8)),
        2028: ((5, 26), (5, 28)),
        2029: ((6, 13), (6, 15)),
        2030: ((6, 3), (6, 5)),
    },
)

# Mid-Autumn Festival: lunar 8/15
MID_AUTUMN = LunarHoliday(
    name="Mid-Autumn Festival",
    factory_rate=0.5,
    windows={
        2024: ((9, 15), (9, 17)),
        2025: ((10, 4), (10, 6)),
        2026: ((9, 23), (9, 25)),
        2027: ((9, 12), (9, 14)),
        2028: ((10, 1), (10, 3)),
        2029: ((9, 21), (9, 23)),
        2030: ((9, 11), (9, 13)),
    },
)

NATIONAL_DAY = Holiday(name="National Day", start=(10, 1), end=(10, 7), factory_rate=0.3)
LABOR_DAY = Holiday(name="Labor Day", start=(5, 1), end=(5, 5), factory_rate=0.5)
QINGMING = Holiday(name="Qingming", start=(4, 4), end=(4, 6), factory_rate=0.6)


class HolidayCalendar:
    """Ordered holiday table. The first holiday containing a date wins."""

    def __init__(
        self,
        spring_festival: LunarHoliday = SPRING_FESTIVAL,
        fixed: tuple[Holiday, ...] = (NATIONAL_DAY, LABOR_DAY, QINGMING),
        lunar: tuple[LunarHoliday, ...] = (DRAGON_BOAT, MID_AUTUMN),
    ) -> None:
        self._spring_festival = spring_festival
        self._fixed = fixed
        self._lunar = lunar

    def holidays_for(self, year: int) -> list[Holiday]:
        """All holidays of ``year`` in match order.

        Spring Festival leads, then the fixed solar holidays, then the
        remaining lunar ones. Lunar holidays without a table entry for the
        year are left out.
        """
        holidays = []
        spring = self._as_holiday(self._spring_festival, year)
        if spring is not None:
            holidays.append(spring)
        holidays.extend(self._fixed)
        for lunar in self._lunar:
            holiday = self._as_holiday(lunar, year)
            if holiday is not None:
                holidays.append(holiday)
        return holidays

    def lookup(self, day: date) -> Holiday | None:
        for holiday in self.holidays_for(day.year):
            if holiday.contains(day):
                return holiday
        return None

    def covered_years(self) -> set[int]:
        years = set(self._spring_festival.windows)
        for lunar in self._lunar:
            years &= set(lunar.windows)
        return years

    def with_lunar_dates(
        self, name: str, windows: Mapping[int, tuple[MonthDay, MonthDay]]
    ) -> "HolidayCalendar":
        """Return a copy of this calendar with extra years added to one lunar holiday."""

        def extend(holiday: LunarHoliday) -> LunarHoliday:
            if holiday.name != name:
                return holiday
            return holiday.model_copy(update={"windows": {**holiday.windows, **windows}})

        known = {self._spring_festival.name} | {h.name for h in self._lunar}
        if name not in known:
            raise KeyError(f"Unknown lunar holiday: {name}. Valid: {sorted(known)}")

        return HolidayCalendar(
            spring_festival=extend(self._spring_festival),
            fixed=self._fixed,
            lunar=tuple(extend(h) for h in self._lunar),
        )

    @staticmethod
    def _as_holiday(lunar: LunarHoliday, year: int) -> Holiday | None:
        window = lunar.windows.get(year)
        if window is None:
            return None
        start, end = window
        return Holiday(name=lunar.name, start=start, end=end, factory_rate=lunar.factory_rate)


DEFAULT_CALENDAR = HolidayCalendar()
