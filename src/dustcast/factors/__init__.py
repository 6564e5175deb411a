"""Multiplicative correction models applied to the blended forecast."""

from dustcast.factors.holidays import DEFAULT_CALENDAR, HolidayCalendar
from dustcast.factors.industrial import IndustrialFactorModel
from dustcast.factors.visual import VisualFactorModel
from dustcast.factors.weather import WeatherFactorModel

__all__ = [
    "DEFAULT_CALENDAR",
    "HolidayCalendar",
    "IndustrialFactorModel",
    "VisualFactorModel",
    "WeatherFactorModel",
]
