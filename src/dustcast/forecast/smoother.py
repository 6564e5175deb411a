"""Outlier-robust next-day smoother: IQR clipping, WMA and a Theil-Sen trend."""

from collections.abc import Sequence

import structlog

from dustcast.models import Estimate, InsufficientData
from dustcast.numeric import clamp, round_int

log = structlog.get_logger()

DEFAULT_TREND_WEIGHT = 0.3
IQR_MULTIPLIER = 1.5
MIN_CLIP_SAMPLES = 4


class RobustSmoother:
    """Predicts the next daily average from a short, oldest-first history.

    The Theil-Sen slope shrugs off single-day spikes such as a dust storm that
    would drag an ordinary least-squares trend, and IQR clipping bounds how far
    the same spike can pull the weighted average.
    """

    def __init__(self, trend_weight: float = DEFAULT_TREND_WEIGHT) -> None:
        self.trend_weight = trend_weight

    def clip_outliers(self, values: Sequence[float]) -> list[float]:
        """Clamp values to [Q1 - 1.5·IQR, Q3 + 1.5·IQR] when there are 4+ points."""
        if len(values) < MIN_CLIP_SAMPLES:
            return list(values)

        ordered = sorted(values)
        q1 = ordered[int(len(ordered) * 0.25)]
        q3 = ordered[int(len(ordered) * 0.75)]
        iqr = q3 - q1
        lower = q1 - IQR_MULTIPLIER * iqr
        upper = q3 + IQR_MULTIPLIER * iqr
        return [clamp(v, lower, upper) for v in values]

    def weighted_moving_average(self, values: Sequence[float]) -> float:
        """Linearly weighted mean; the newest value carries the largest weight."""
        if not values:
            return 0.0
        if len(values) == 1:
            return float(values[0])

        weighted_sum = 0.0
        weight_total = 0
        for i, value in enumerate(values):
            weighted_sum += value * (i + 1)
            weight_total += i + 1
        return weighted_sum / weight_total

    def theil_sen_slope(self, values: Sequence[float]) -> float:
        """Median of the slopes between every pair of points."""
        if len(values) < 2:
            return 0.0

        slopes = sorted(
            (values[j] - values[i]) / (j - i)
            for i in range(len(values))
            for j in range(i + 1, len(values))
        )
        mid = len(slopes) // 2
        if len(slopes) % 2 == 0:
            return (slopes[mid - 1] + slopes[mid]) / 2
        return slopes[mid]

    def predict_next(self, values: Sequence[float], trend_weight: float | None = None) -> int:
        """Forecast the value following ``values`` (oldest first), never below zero."""
        weight = self.trend_weight if trend_weight is None else trend_weight
        clipped = self.clip_outliers(values)
        wma = self.weighted_moving_average(clipped)
        slope = self.theil_sen_slope(clipped)
        return max(0, round_int(wma + slope * weight))

    def estimate(
        self, values: Sequence[float], min_samples: int = 1
    ) -> Estimate | InsufficientData:
        """Like ``predict_next`` but tags a too-short history explicitly."""
        if len(values) < min_samples:
            log.debug("smoother_insufficient_data", samples=len(values), required=min_samples)
            return InsufficientData(
                reason=f"need {min_samples} samples, got {len(values)}",
                samples=len(values),
            )
        return Estimate(value=self.predict_next(values), samples=len(values))
