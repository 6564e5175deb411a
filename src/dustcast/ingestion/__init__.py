"""Preparation of collaborator-supplied data for the forecast engine."""

from dustcast.ingestion.cameras import CameraSimulator, has_camera_support, stations_for
from dustcast.ingestion.daily import DailyAggregator

__all__ = ["CameraSimulator", "DailyAggregator", "has_camera_support", "stations_for"]
