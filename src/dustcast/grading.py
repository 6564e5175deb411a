"""Air-quality grades and the concentration thresholds that produce them."""

from enum import Enum


class Grade(str, Enum):
    """Ordinal air-quality category."""

    GOOD = "good"
    MODERATE = "moderate"
    BAD = "bad"
    VERY_BAD = "veryBad"

    @property
    def rank(self) -> int:
        return _GRADE_RANK[self]

    @property
    def label(self) -> str:
        return _GRADE_LABEL[self]


class Pollutant(str, Enum):
    PM25 = "pm25"
    PM10 = "pm10"


_GRADE_RANK = {
    Grade.GOOD: 0,
    Grade.MODERATE: 1,
    Grade.BAD: 2,
    Grade.VERY_BAD: 3,
}

_GRADE_LABEL = {
    Grade.GOOD: "Good",
    Grade.MODERATE: "Moderate",
    Grade.BAD: "Bad",
    Grade.VERY_BAD: "Very bad",
}

# Upper bound (inclusive, µg/m³) of each grade; anything above the last is VERY_BAD
PM25_THRESHOLDS: list[tuple[Grade, float]] = [
    (Grade.GOOD, 15),
    (Grade.MODERATE, 35),
    (Grade.BAD, 75),
]

PM10_THRESHOLDS: list[tuple[Grade, float]] = [
    (Grade.GOOD, 30),
    (Grade.MODERATE, 80),
    (Grade.BAD, 150),
]


def grade_for(value: float | None, pollutant: Pollutant) -> Grade:
    """Map a concentration to its grade.

    Missing or negative readings are treated as GOOD so a sensor outage never
    escalates a warning on its own.
    """
    if value is None or value < 0:
        return Grade.GOOD

    thresholds = PM25_THRESHOLDS if pollutant == Pollutant.PM25 else PM10_THRESHOLDS
    for grade, upper in thresholds:
        if value <= upper:
            return grade
    return Grade.VERY_BAD


def overall_grade(pm25_grade: Grade, pm10_grade: Grade) -> Grade:
    """The worse of the two grades; PM2.5 wins ties."""
    return pm25_grade if pm25_grade.rank >= pm10_grade.rank else pm10_grade
