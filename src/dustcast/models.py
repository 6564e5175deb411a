"""Data models for the DustCast forecast engine."""

from datetime import date, datetime
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field, computed_field, model_validator

from dustcast.grading import Grade, Pollutant, grade_for
from dustcast.grading import overall_grade as worse_grade


class Trend(str, Enum):
    """Direction of tomorrow's PM2.5 relative to today."""

    IMPROVING = "improving"
    STABLE = "stable"
    WORSENING = "worsening"


class HourlyRecord(BaseModel):
    """Single hourly air-quality sample. Any pollutant may be missing."""

    timestamp: datetime
    pm25: float | None = None
    pm10: float | None = None
    no2: float | None = None
    so2: float | None = None
    co: float | None = None


class DailyRecord(BaseModel):
    """Daily PM averages and maxima. Grades are derived from the averages."""

    model_config = ConfigDict(frozen=True)

    date: date
    pm25_avg: float
    pm25_max: float
    pm10_avg: float
    pm10_max: float

    @computed_field  # type: ignore[prop-decorator]
    @property
    def pm25_grade(self) -> Grade:
        return grade_for(self.pm25_avg, Pollutant.PM25)

    @computed_field  # type: ignore[prop-decorator]
    @property
    def pm10_grade(self) -> Grade:
        return grade_for(self.pm10_avg, Pollutant.PM10)

    @computed_field  # type: ignore[prop-decorator]
    @property
    def overall_grade(self) -> Grade:
        return worse_grade(self.pm25_grade, self.pm10_grade)

    def average(self, pollutant: Pollutant) -> float:
        return self.pm25_avg if pollutant == Pollutant.PM25 else self.pm10_avg


class WeatherObservation(BaseModel):
    """Weather snapshot for the forecast location. Every field is optional."""

    model_config = ConfigDict(frozen=True)

    wind_direction: float | None = None
    wind_speed: float | None = Field(default=None, ge=0)
    temperature: float | None = Field(default=None, ge=-60, le=60)
    humidity: float | None = Field(default=None, ge=0, le=100)
    precipitation: float | None = Field(default=None, ge=0)
    precipitation_probability: float | None = Field(default=None, ge=0, le=100)
    pressure_msl: float | None = Field(default=None, gt=0)
    surface_pressure: float | None = Field(default=None, gt=0)
    cloud_cover: float | None = Field(default=None, ge=0, le=100)


class VisualMetrics(BaseModel):
    """Haze-related metrics extracted from one camera snapshot."""

    model_config = ConfigDict(frozen=True)

    contrast: float = Field(ge=0, le=1)
    edge_density: float = Field(ge=0, le=1)
    color_shift: float = Field(ge=0, le=1)
    brightness: float = Field(ge=0, le=255)
    brightness_uniformity: float = Field(ge=0, le=1)
    haziness: float = Field(ge=0, le=1)


class Pm25Range(BaseModel):
    model_config = ConfigDict(frozen=True)

    min: float = Field(ge=0)
    max: float = Field(ge=0)


class VisualAnalysisResult(BaseModel):
    """Analysis of a single camera snapshot."""

    model_config = ConfigDict(frozen=True)

    station_id: str
    station_name: str = ""
    timestamp: datetime
    metrics: VisualMetrics
    visibility_grade: Grade
    estimated_pm25_range: Pm25Range
    confidence: float = Field(ge=0, le=1)


class CameraStation(BaseModel):
    """Road camera near an air-quality monitoring site."""

    model_config = ConfigDict(frozen=True)

    id: str
    name: str
    lat: float = Field(ge=-90, le=90)
    lon: float = Field(ge=-180, le=180)
    road_name: str | None = None
    source: str = "mock"


class PixelBuffer(BaseModel):
    """Decoded RGBA snapshot, row-major, four bytes per pixel."""

    model_config = ConfigDict(frozen=True)

    width: int = Field(ge=1)
    height: int = Field(ge=1)
    pixels: bytes

    @model_validator(mode="after")
    def _check_length(self) -> "PixelBuffer":
        expected = self.width * self.height * 4
        if len(self.pixels) < expected:
            raise ValueError(
                f"pixel buffer holds {len(self.pixels)} bytes, "
                f"{self.width}x{self.height} RGBA needs {expected}"
            )
        return self


class Estimate(BaseModel):
    """A computed value and the number of samples it was derived from."""

    model_config = ConfigDict(frozen=True)

    value: float
    samples: int = Field(ge=0)


class InsufficientData(BaseModel):
    """Explicit marker that too few samples were available to compute a value."""

    model_config = ConfigDict(frozen=True)

    reason: str
    samples: int = Field(ge=0)


class BlendDecision(BaseModel):
    """Weight given to the smoother prediction versus the baseline forecast."""

    model_config = ConfigDict(frozen=True)

    ratio: float = Field(ge=0, le=1)
    comparison_days: int = Field(ge=0)
    insufficient_data: bool = False


class IndustrialFactorResult(BaseModel):
    model_config = ConfigDict(frozen=True)

    combined_factor: float
    weekday_rate: float
    seasonal_factor: float
    wind_factor: float
    wind_description: str
    holiday_name: str | None = None
    holiday_factor: float = 1.0
    summary: str


class WeatherFactorResult(BaseModel):
    model_config = ConfigDict(frozen=True)

    combined_factor: float = Field(ge=0.3, le=2.0)
    precipitation_factor: float
    precipitation_description: str
    stability_factor: float
    stability_description: str
    humidity_factor: float
    humidity_description: str
    leading_indicator_factor: float
    leading_indicator_description: str
    leading_indicator_insufficient: bool = False
    summary: str


class VisualFactorResult(BaseModel):
    model_config = ConfigDict(frozen=True)

    combined_factor: float = Field(ge=0.9, le=1.15)
    haziness: float = Field(ge=0, le=1)
    camera_count: int = Field(ge=0)
    summary: str
    analyses: list[VisualAnalysisResult] = Field(default_factory=list)


class PredictionResult(BaseModel):
    """Next-day forecast with the breakdown of every correction applied."""

    model_config = ConfigDict(frozen=True)

    tomorrow_grade: Grade
    trend: Trend
    predicted_pm25: int = Field(ge=0)
    predicted_pm10: int = Field(ge=0)
    message: str
    total_factor: float = Field(ge=0.2, le=3.0)
    blend: BlendDecision
    smoothed_pollutants: list[Pollutant] = Field(default_factory=list)
    industrial: IndustrialFactorResult
    weather: WeatherFactorResult
    visual: VisualFactorResult | None = None


class AccuracyResult(BaseModel):
    """Backtested accuracy of the smoother, as percentages."""

    model_config = ConfigDict(frozen=True)

    pm25_accuracy: int = Field(ge=0, le=100)
    pm10_accuracy: int = Field(ge=0, le=100)
    overall_accuracy: int = Field(ge=0, le=100)
    grade_match_rate: int = Field(ge=0, le=100)
    sample_days: int = Field(ge=0)


class ForecastScenario(BaseModel):
    """Everything the engine needs for one city, as loaded by the CLI."""

    city: str = "seoul"
    history: list[DailyRecord] = Field(default_factory=list)
    today: DailyRecord | None = None
    baseline: DailyRecord | None = None
    weather: WeatherObservation | None = None
    hourly: list[HourlyRecord] = Field(default_factory=list)
    analyses: list[VisualAnalysisResult] = Field(default_factory=list)
