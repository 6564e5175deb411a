"""Backtest the smoother against history to grade its recent accuracy."""

from collections.abc import Sequence

import structlog

from dustcast.forecast.smoother import DEFAULT_TREND_WEIGHT, RobustSmoother
from dustcast.grading import Pollutant, grade_for
from dustcast.models import AccuracyResult, DailyRecord
from dustcast.numeric import clamp, round_int

log = structlog.get_logger()

# Normalization range per pollutant: the lower edge of the "very bad" grade
ERROR_RANGE = {
    Pollutant.PM25: 75.0,
    Pollutant.PM10: 150.0,
}
DEFAULT_DECAY = 0.85
WINDOW_DAYS = 5
MIN_HISTORY_DAYS = 3
MIN_WINDOW_SAMPLES = 2
# First day that has enough earlier days to be predicted
MIN_TEST_INDEX = 2


class AccuracyEvaluator:
    """Replays the smoother over past days and scores it.

    Every day from the third onward is predicted from up to ``window_days``
    preceding days. Errors are normalized by a fixed per-pollutant range and
    weighted by ``decay ** age`` so the most recent days dominate the score.
    """

    def __init__(
        self,
        smoother: RobustSmoother | None = None,
        window_days: int = WINDOW_DAYS,
        decay: float = DEFAULT_DECAY,
        trend_weight: float = DEFAULT_TREND_WEIGHT,
    ) -> None:
        self._smoother = smoother or RobustSmoother(trend_weight=trend_weight)
        self.window_days = window_days
        self.decay = decay
        self.trend_weight = trend_weight

    def evaluate(self, history: Sequence[DailyRecord]) -> AccuracyResult | None:
        """Score the smoother over ``history``.

        Returns:
            Accuracy percentages, or None with fewer than three days of history
        """
        ordered = sorted(history, key=lambda d: d.date)
        if len(ordered) < MIN_HISTORY_DAYS:
            log.info("accuracy_skipped", days=len(ordered), required=MIN_HISTORY_DAYS)
            return None

        errors: dict[Pollutant, list[tuple[float, float]]] = {p: [] for p in Pollutant}
        grade_matches = 0
        comparisons = 0

        for i in range(MIN_TEST_INDEX, len(ordered)):
            actual = ordered[i]
            window = ordered[max(0, i - self.window_days) : i]
            day_weight = self.decay ** (len(ordered) - 1 - i)

            for pollutant in Pollutant:
                values = [v for v in (d.average(pollutant) for d in window) if v >= 0]
                if len(values) < MIN_WINDOW_SAMPLES:
                    continue

                predicted = self._smoother.predict_next(values, self.trend_weight)
                error = abs(predicted - actual.average(pollutant)) / ERROR_RANGE[pollutant]
                errors[pollutant].append((error, day_weight))

                if pollutant == Pollutant.PM25:
                    comparisons += 1
                    if grade_for(predicted, Pollutant.PM25) == actual.pm25_grade:
                        grade_matches += 1

        if not errors[Pollutant.PM25] and not errors[Pollutant.PM10]:
            log.info("accuracy_skipped", days=len(ordered), reason="no evaluable days")
            return None

        pm25_accuracy = self._accuracy(errors[Pollutant.PM25])
        pm10_accuracy = self._accuracy(errors[Pollutant.PM10])
        result = AccuracyResult(
            pm25_accuracy=pm25_accuracy,
            pm10_accuracy=pm10_accuracy,
            overall_accuracy=round_int((pm25_accuracy + pm10_accuracy) / 2),
            grade_match_rate=round_int(grade_matches / comparisons * 100) if comparisons else 0,
            sample_days=len(ordered),
        )
        log.info(
            "accuracy_evaluated",
            overall=result.overall_accuracy,
            grade_match_rate=result.grade_match_rate,
            sample_days=result.sample_days,
        )
        return result

    def _accuracy(self, weighted_errors: list[tuple[float, float]]) -> int:
        if not weighted_errors:
            mean_error = 0.0
        else:
            total_weight = sum(w for _, w in weighted_errors)
            mean_error = sum(e * w for e, w in weighted_errors) / total_weight
        return round_int(clamp(1 - mean_error, 0.0, 1.0) * 100)
