"""DustCast: next-day particulate-matter forecast correction engine."""

from dustcast.engine import ForecastEngine

__all__ = ["ForecastEngine"]
__version__ = "0.1.0"
