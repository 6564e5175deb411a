"""Forecast engine: blended next-day prediction refined by correction factors."""

from collections.abc import Sequence

import structlog

from dustcast.factors.industrial import NO_CORRECTION as NO_INDUSTRIAL_CORRECTION
from dustcast.factors.industrial import IndustrialFactorModel
from dustcast.factors.visual import NO_DATA as NO_VISUAL_DATA
from dustcast.factors.visual import VisualFactorModel
from dustcast.factors.weather import NO_CORRECTION as NO_WEATHER_CORRECTION
from dustcast.factors.weather import WeatherFactorModel
from dustcast.forecast.backtest import AccuracyEvaluator
from dustcast.forecast.blend import MIN_SMOOTHER_SAMPLES, BlendSelector
from dustcast.forecast.smoother import RobustSmoother
from dustcast.grading import Grade, Pollutant, grade_for, overall_grade
from dustcast.models import (
    AccuracyResult,
    BlendDecision,
    DailyRecord,
    HourlyRecord,
    InsufficientData,
    PredictionResult,
    Trend,
    VisualAnalysisResult,
    WeatherObservation,
)
from dustcast.numeric import clamp, round_half_up, round_int

log = structlog.get_logger()

MIN_HISTORY_DAYS = 3
MIN_TOTAL_FACTOR = 0.2
MAX_TOTAL_FACTOR = 3.0
# PM2.5 change (µg/m³) versus today that counts as a trend
TREND_THRESHOLD = 5

TREND_MESSAGES = {
    Trend.WORSENING: (
        "Particulate levels are expected to rise tomorrow compared to today. "
        "Wearing a mask outdoors is recommended."
    ),
    Trend.IMPROVING: (
        "Particulate levels are expected to fall tomorrow compared to today. "
        "It should be a good day to air out your home."
    ),
    Trend.STABLE: "Particulate levels tomorrow are expected to be similar to today.",
}
OUTDOOR_WARNING = " Please limit outdoor activity."


class ForecastEngine:
    """Produces next-day PM forecasts and scores the smoother's track record.

    Pipeline:
    1. Blend the robust smoother with the baseline forecast (adaptive ratio)
    2. Apply industrial, weather and visual correction factors
    3. Clamp the combined multiplier and grade the result
    """

    def __init__(
        self,
        smoother: RobustSmoother | None = None,
        blend_selector: BlendSelector | None = None,
        industrial: IndustrialFactorModel | None = None,
        weather: WeatherFactorModel | None = None,
        visual: VisualFactorModel | None = None,
        evaluator: AccuracyEvaluator | None = None,
    ) -> None:
        self.smoother = smoother or RobustSmoother()
        self.blend_selector = blend_selector or BlendSelector(self.smoother)
        self.industrial = industrial or IndustrialFactorModel()
        self.weather = weather or WeatherFactorModel()
        self.visual = visual or VisualFactorModel()
        self.evaluator = evaluator or AccuracyEvaluator(self.smoother)

    def predict(
        self,
        baseline: DailyRecord | None,
        history: Sequence[DailyRecord] = (),
        today: DailyRecord | None = None,
        weather: WeatherObservation | None = None,
        hourly: Sequence[HourlyRecord] = (),
        analyses: Sequence[VisualAnalysisResult] = (),
    ) -> PredictionResult | None:
        """Forecast tomorrow's PM2.5/PM10.

        Args:
            baseline: External next-day forecast; its date is the forecast date
            history: Past daily records (any order)
            today: Today's record so far, used as the newest smoother input
            weather: Weather observation for the weather and wind factors
            hourly: Recent hourly samples for the co-pollutant leading indicator
            analyses: Camera haze analyses; empty means no visual correction

        Returns:
            Prediction with its factor breakdown, or None without a baseline
        """
        if baseline is None:
            log.warning("prediction_skipped", reason="no baseline forecast")
            return None

        predicted = {p: baseline.average(p) for p in Pollutant}
        smoothed: list[Pollutant] = []

        if len(history) >= MIN_HISTORY_DAYS:
            blend = self.blend_selector.select(history, baseline)
            for pollutant in Pollutant:
                values = self.blend_selector.recent_values(history, today, pollutant)
                estimate = self.smoother.estimate(values, MIN_SMOOTHER_SAMPLES)
                if isinstance(estimate, InsufficientData):
                    log.info(
                        "smoother_skipped", pollutant=pollutant.value, reason=estimate.reason
                    )
                    continue
                predicted[pollutant] = self.blend_selector.blend(
                    estimate.value, baseline.average(pollutant), blend.ratio
                )
                smoothed.append(pollutant)
        else:
            log.info("smoother_skipped", history_days=len(history), required=MIN_HISTORY_DAYS)
            blend = BlendDecision(ratio=0.0, comparison_days=0, insufficient_data=True)

        industrial = self.industrial.calculate(
            baseline.date,
            weather.wind_direction if weather else None,
            weather.wind_speed if weather else None,
        )
        weather_result = self.weather.calculate(weather, hourly)
        visual = self.visual.calculate(analyses) if analyses else None

        total_factor = clamp(
            industrial.combined_factor
            * weather_result.combined_factor
            * (visual.combined_factor if visual else 1.0),
            MIN_TOTAL_FACTOR,
            MAX_TOTAL_FACTOR,
        )

        pm25 = max(0, round_int(predicted[Pollutant.PM25] * total_factor))
        pm10 = max(0, round_int(predicted[Pollutant.PM10] * total_factor))

        trend = self._trend(pm25, today)
        tomorrow_grade = overall_grade(
            grade_for(pm25, Pollutant.PM25), grade_for(pm10, Pollutant.PM10)
        )

        corrections = []
        if industrial.summary != NO_INDUSTRIAL_CORRECTION:
            corrections.append(industrial.summary)
        if weather_result.summary != NO_WEATHER_CORRECTION:
            corrections.append(weather_result.summary)
        if visual and visual.summary != NO_VISUAL_DATA:
            corrections.append(visual.summary)

        result = PredictionResult(
            tomorrow_grade=tomorrow_grade,
            trend=trend,
            predicted_pm25=pm25,
            predicted_pm10=pm10,
            message=self._message(trend, tomorrow_grade, corrections),
            total_factor=round_half_up(total_factor, 3),
            blend=blend,
            smoothed_pollutants=smoothed,
            industrial=industrial,
            weather=weather_result,
            visual=visual,
        )
        log.info(
            "prediction_made",
            date=baseline.date.isoformat(),
            predicted_pm25=pm25,
            predicted_pm10=pm10,
            total_factor=result.total_factor,
            blend_ratio=round(blend.ratio, 3),
            grade=tomorrow_grade.value,
        )
        return result

    def evaluate(self, history: Sequence[DailyRecord]) -> AccuracyResult | None:
        return self.evaluator.evaluate(history)

    def _trend(self, predicted_pm25: int, today: DailyRecord | None) -> Trend:
        diff = predicted_pm25 - (today.pm25_avg if today else 0)
        if diff > TREND_THRESHOLD:
            return Trend.WORSENING
        if diff < -TREND_THRESHOLD:
            return Trend.IMPROVING
        return Trend.STABLE

    def _message(self, trend: Trend, grade: Grade, corrections: list[str]) -> str:
        message = TREND_MESSAGES[trend]
        if grade in (Grade.BAD, Grade.VERY_BAD):
            message += OUTDOOR_WARNING
        if corrections:
            message += f" (corrections: {' / '.join(corrections)})"
        return message
