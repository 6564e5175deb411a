"""Adaptive blending of the smoother prediction with a baseline forecast."""

from collections.abc import Sequence

import structlog

from dustcast.forecast.smoother import RobustSmoother
from dustcast.grading import Pollutant
from dustcast.models import BlendDecision, DailyRecord
from dustcast.numeric import clamp, round_int

log = structlog.get_logger()

DEFAULT_RATIO = 0.6
MIN_RATIO = 0.3
MAX_RATIO = 0.8
ERROR_EPSILON = 0.01
COMPARISON_DAYS = 3
WINDOW_DAYS = 5
MIN_WINDOW_SAMPLES = 2
# A day needs at least this many earlier days before it can be backtested
MIN_TEST_INDEX = 2
# Positive-valued days needed in the trailing window before the smoother is trusted at all
MIN_SMOOTHER_SAMPLES = 3


class BlendSelector:
    """Chooses how much to trust the smoother versus the external baseline.

    Each source is weighted by the inverse of its recent absolute error, so
    whichever has been closer to reality lately earns more of the blend. The
    ratio stays inside [min_ratio, max_ratio] so neither source is dropped.
    """

    def __init__(
        self,
        smoother: RobustSmoother | None = None,
        default_ratio: float = DEFAULT_RATIO,
        min_ratio: float = MIN_RATIO,
        max_ratio: float = MAX_RATIO,
        epsilon: float = ERROR_EPSILON,
        comparison_days: int = COMPARISON_DAYS,
        window_days: int = WINDOW_DAYS,
    ) -> None:
        self._smoother = smoother or RobustSmoother()
        self.default_ratio = default_ratio
        self.min_ratio = min_ratio
        self.max_ratio = max_ratio
        self.epsilon = epsilon
        self.comparison_days = comparison_days
        self.window_days = window_days

    def select(self, history: Sequence[DailyRecord], baseline: DailyRecord) -> BlendDecision:
        """Derive the blend ratio from the last few days of PM2.5 history.

        Args:
            history: Past daily records, any order
            baseline: External next-day forecast being blended against

        Returns:
            The ratio given to the smoother, flagged when too few days could be compared
        """
        ordered = sorted(history, key=lambda d: d.date)
        smoother_error = 0.0
        baseline_error = 0.0
        compared = 0

        first_test = max(0, len(ordered) - self.comparison_days)
        for idx in range(first_test, len(ordered)):
            if idx < MIN_TEST_INDEX:
                continue
            window = [
                d.pm25_avg for d in ordered[max(0, idx - self.window_days) : idx] if d.pm25_avg > 0
            ]
            if len(window) < MIN_WINDOW_SAMPLES:
                continue

            actual = ordered[idx].pm25_avg
            smoother_error += abs(self._smoother.predict_next(window) - actual)
            baseline_error += abs(baseline.pm25_avg - actual)
            compared += 1

        if compared < self.comparison_days:
            log.debug("blend_default_ratio", compared=compared, required=self.comparison_days)
            return BlendDecision(
                ratio=self.default_ratio, comparison_days=compared, insufficient_data=True
            )

        smoother_weight = 1 / (smoother_error / compared + self.epsilon)
        baseline_weight = 1 / (baseline_error / compared + self.epsilon)
        ratio = clamp(
            smoother_weight / (smoother_weight + baseline_weight), self.min_ratio, self.max_ratio
        )
        log.debug(
            "blend_ratio_selected",
            ratio=round(ratio, 3),
            smoother_error=smoother_error / compared,
            baseline_error=baseline_error / compared,
        )
        return BlendDecision(ratio=ratio, comparison_days=compared)

    def recent_values(
        self,
        history: Sequence[DailyRecord],
        today: DailyRecord | None,
        pollutant: Pollutant,
    ) -> list[float]:
        """Positive daily averages from the trailing window, oldest first.

        The window is the last ``window_days`` days, with today's record taking
        the newest slot when it is known.
        """
        ordered = sorted(history, key=lambda d: d.date)
        if today is not None:
            recent = [*ordered[max(0, len(ordered) - (self.window_days - 1)) :], today]
        else:
            recent = ordered[max(0, len(ordered) - self.window_days) :]
        return [v for v in (d.average(pollutant) for d in recent) if v > 0]

    def blend(self, smoother_value: float, baseline_value: float, ratio: float) -> int:
        return round_int(smoother_value * ratio + baseline_value * (1 - ratio))
