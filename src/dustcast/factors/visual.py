"""Camera-derived correction factor.

Aggregates per-camera haze analyses into a small multiplicative correction.
Visual evidence is a supporting signal only, so its influence is damped and
the result is held to [0.9, 1.15].
"""

from collections.abc import Sequence

import structlog

from dustcast.models import VisualAnalysisResult, VisualFactorResult
from dustcast.numeric import clamp, round_half_up

log = structlog.get_logger()

MIN_CONFIDENCE = 0.4
INFLUENCE = 0.3
MIN_FACTOR = 0.9
MAX_FACTOR = 1.15
# Haziness at which cameras agree with the model prediction (raw factor 1.0)
NEUTRAL_HAZE = 0.3

NO_DATA = "no data"


class VisualFactorModel:
    """Confidence-weighted haze across cameras, mapped to a bounded factor."""

    def __init__(
        self, min_confidence: float = MIN_CONFIDENCE, influence: float = INFLUENCE
    ) -> None:
        self.min_confidence = min_confidence
        self.influence = influence

    def haze_to_factor(self, haziness: float) -> float:
        """Undamped factor: 0.0 -> 0.85, 0.3 -> 1.0, 1.0 -> 1.4."""
        if haziness < NEUTRAL_HAZE:
            return 0.85 + (haziness / NEUTRAL_HAZE) * 0.15
        return 1.0 + ((haziness - NEUTRAL_HAZE) / (1 - NEUTRAL_HAZE)) * 0.4

    def calculate(self, analyses: Sequence[VisualAnalysisResult]) -> VisualFactorResult:
        reliable = [a for a in analyses if a.confidence >= self.min_confidence]

        if not reliable:
            log.info("visual_factor_no_data", cameras=len(analyses))
            return VisualFactorResult(
                combined_factor=1.0,
                haziness=0.0,
                camera_count=0,
                summary=NO_DATA,
                analyses=list(analyses),
            )

        total_weight = sum(a.confidence for a in reliable)
        haziness = sum(a.metrics.haziness * a.confidence for a in reliable) / total_weight

        raw = self.haze_to_factor(haziness)
        factor = clamp(1.0 + (raw - 1.0) * self.influence, MIN_FACTOR, MAX_FACTOR)

        if haziness < 0.3:
            summary = "camera visibility clear"
        elif haziness < 0.5:
            summary = "slight haze detected"
        elif haziness < 0.7:
            summary = "distinct haze detected"
        else:
            summary = "heavy haze or fog detected"

        log.debug("visual_factor", cameras=len(reliable), haziness=round(haziness, 3))
        return VisualFactorResult(
            combined_factor=round_half_up(factor, 2),
            haziness=round_half_up(haziness, 2),
            camera_count=len(reliable),
            summary=summary,
            analyses=list(analyses),
        )
