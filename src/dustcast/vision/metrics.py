"""Haze metrics extracted from a decoded camera snapshot.

Metrics:
1. Brightness: mean BT.601 luminance
2. Contrast: RMS contrast (luminance std / 128)
3. Brightness uniformity: 1 - contrast
4. Color shift: blue bias relative to the red/green average
5. Edge density: share of sampled pixels with a strong luminance gradient
6. Haziness: weighted composite of the above
"""

from datetime import datetime

import numpy as np
import structlog

from dustcast.grading import Grade
from dustcast.models import (
    CameraStation,
    PixelBuffer,
    Pm25Range,
    VisualAnalysisResult,
    VisualMetrics,
)
from dustcast.numeric import clamp, round_half_up

log = structlog.get_logger()

EDGE_STRIDE = 2
EDGE_THRESHOLD = 15.0
# Pixels this dark in red/green carry no usable color information
MIN_RG_LEVEL = 10.0
COLOR_SHIFT_GAIN = 5.0

HAZE_WEIGHTS = {
    "low_contrast": 0.30,
    "few_edges": 0.30,
    "color_shift": 0.20,
    "uniformity": 0.20,
}

# Upper haziness bound (exclusive) for each visibility grade, with its PM2.5 estimate
HAZE_BANDS: list[tuple[float, Grade, Pm25Range]] = [
    (0.3, Grade.GOOD, Pm25Range(min=0, max=15)),
    (0.5, Grade.MODERATE, Pm25Range(min=15, max=35)),
    (0.7, Grade.BAD, Pm25Range(min=35, max=75)),
]
HEAVY_HAZE = (Grade.VERY_BAD, Pm25Range(min=75, max=150))


def _luminance(rgb: np.ndarray) -> np.ndarray:
    return 0.299 * rgb[..., 0] + 0.587 * rgb[..., 1] + 0.114 * rgb[..., 2]


def analyze_image_metrics(buffer: PixelBuffer) -> VisualMetrics:
    """Extract haze metrics from an RGBA snapshot."""
    rgb = _rgb(buffer)
    lum = _luminance(rgb)
    total_pixels = buffer.width * buffer.height

    brightness = float(lum.mean())
    contrast = min(1.0, float(np.sqrt(((lum - brightness) ** 2).mean())) / 128)
    uniformity = 1 - contrast

    rg_avg = (rgb[..., 0] + rgb[..., 1]) / 2
    usable = rg_avg > MIN_RG_LEVEL
    blue_excess = np.maximum(0.0, rgb[..., 2] - rg_avg)
    shift_sum = float((blue_excess[usable] / rg_avg[usable]).sum())
    color_shift = min(1.0, shift_sum / total_pixels * COLOR_SHIFT_GAIN)

    edge_density = _edge_density(lum)

    haziness = clamp(
        (1 - contrast) * HAZE_WEIGHTS["low_contrast"]
        + (1 - edge_density) * HAZE_WEIGHTS["few_edges"]
        + color_shift * HAZE_WEIGHTS["color_shift"]
        + uniformity * HAZE_WEIGHTS["uniformity"],
        0.0,
        1.0,
    )

    return VisualMetrics(
        contrast=round_half_up(contrast, 2),
        edge_density=round_half_up(edge_density, 2),
        color_shift=round_half_up(color_shift, 2),
        brightness=round_half_up(brightness),
        brightness_uniformity=round_half_up(uniformity, 2),
        haziness=round_half_up(haziness, 2),
    )


def calculate_confidence(metrics: VisualMetrics) -> float:
    """How far a snapshot can be trusted, given lighting and camera state."""
    confidence = 1.0
    if metrics.brightness < 40:
        confidence = 0.2  # night
    elif metrics.brightness < 70:
        confidence = 0.5  # dawn / dusk
    elif metrics.brightness > 230:
        confidence = 0.3  # overexposed
    if metrics.edge_density < 0.05:
        confidence *= 0.5  # lens blocked or camera broken
    return round_half_up(confidence, 2)


def haze_to_visibility_grade(haziness: float) -> Grade:
    for upper, grade, _ in HAZE_BANDS:
        if haziness < upper:
            return grade
    return HEAVY_HAZE[0]


def haze_to_estimated_pm25(haziness: float) -> Pm25Range:
    for upper, _, pm_range in HAZE_BANDS:
        if haziness < upper:
            return pm_range
    return HEAVY_HAZE[1]


def analyze_snapshot(
    station: CameraStation,
    buffer: PixelBuffer,
    timestamp: datetime | None = None,
) -> VisualAnalysisResult:
    """Build a full analysis result for one camera snapshot."""
    metrics = analyze_image_metrics(buffer)
    confidence = calculate_confidence(metrics)
    log.debug(
        "snapshot_analyzed",
        station=station.id,
        haziness=metrics.haziness,
        confidence=confidence,
    )
    return VisualAnalysisResult(
        station_id=station.id,
        station_name=station.name,
        timestamp=timestamp or datetime.now(),
        metrics=metrics,
        visibility_grade=haze_to_visibility_grade(metrics.haziness),
        estimated_pm25_range=haze_to_estimated_pm25(metrics.haziness),
        confidence=confidence,
    )


def _rgb(buffer: PixelBuffer) -> np.ndarray:
    expected = buffer.width * buffer.height * 4
    rgba = np.frombuffer(buffer.pixels, dtype=np.uint8, count=expected)
    return rgba.reshape(buffer.height, buffer.width, 4)[..., :3].astype(np.float64)


def _edge_density(lum: np.ndarray) -> float:
    """Share of interior pixels, sampled every other row and column, on an edge."""
    height, width = lum.shape
    rows = np.arange(1, height - 1, EDGE_STRIDE)
    cols = np.arange(1, width - 1, EDGE_STRIDE)
    sampled = len(rows) * len(cols)
    if sampled == 0:
        return 0.0

    gx = np.abs(lum[np.ix_(rows, cols + 1)] - lum[np.ix_(rows, cols - 1)])
    gy = np.abs(lum[np.ix_(rows + 1, cols)] - lum[np.ix_(rows - 1, cols)])
    edges = int(np.count_nonzero(gx + gy > EDGE_THRESHOLD))
    return min(1.0, edges / sampled)
