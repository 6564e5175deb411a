"""Camera snapshot analysis."""

from dustcast.vision.metrics import analyze_image_metrics, analyze_snapshot, calculate_confidence

__all__ = ["analyze_image_metrics", "analyze_snapshot", "calculate_confidence"]
