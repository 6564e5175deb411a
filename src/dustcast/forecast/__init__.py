"""Trend smoothing, baseline blending and backtesting."""

from dustcast.forecast.backtest import AccuracyEvaluator
from dustcast.forecast.blend import BlendSelector
from dustcast.forecast.smoother import RobustSmoother

__all__ = ["AccuracyEvaluator", "BlendSelector", "RobustSmoother"]
