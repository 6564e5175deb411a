"""Road camera registry and simulated haze analyses."""

import random
from datetime import datetime

import structlog

from dustcast.models import CameraStation, VisualAnalysisResult, VisualMetrics
from dustcast.numeric import clamp, round_half_up
from dustcast.vision.metrics import haze_to_estimated_pm25, haze_to_visibility_grade

log = structlog.get_logger()

# Cameras near Seoul monitoring sites; other cities have no camera coverage yet
CAMERA_STATIONS: dict[str, list[CameraStation]] = {
    "seoul": [
        CameraStation(
            id="seoul-gangnam-01",
            name="Gangnam-daero (Sinnonhyeon Stn.)",
            lat=37.5045,
            lon=127.025,
            road_name="Gangnam-daero",
        ),
        CameraStation(
            id="seoul-jongno-01",
            name="Jongno (Gwanghwamun)",
            lat=37.5717,
            lon=126.9768,
            road_name="Sejong-daero",
        ),
        CameraStation(
            id="seoul-yeongdeungpo-01",
            name="Yeongdeungpo (Yeoui-daero)",
            lat=37.5219,
            lon=126.9245,
            road_name="Yeoui-daero",
        ),
        CameraStation(
            id="seoul-songpa-01",
            name="Songpa (Olympic-daero)",
            lat=37.5145,
            lon=127.1059,
            road_name="Olympic-daero",
        ),
        CameraStation(
            id="seoul-mapo-01",
            name="Mapo (Mapo-daero)",
            lat=37.5397,
            lon=126.9458,
            road_name="Mapo-daero",
        ),
        CameraStation(
            id="seoul-nowon-01",
            name="Nowon (Dongil-ro)",
            lat=37.6543,
            lon=127.0568,
            road_name="Dongil-ro",
        ),
    ],
}

DEFAULT_PM25 = 25.0
SIMULATED_CONFIDENCE = 0.75


def stations_for(city: str) -> list[CameraStation]:
    return list(CAMERA_STATIONS.get(city, []))


def has_camera_support(city: str) -> bool:
    return bool(CAMERA_STATIONS.get(city))


class CameraSimulator:
    """Simulates camera haze analyses consistent with the current PM2.5 level."""

    def __init__(self, seed: int | None = None) -> None:
        self._rng = random.Random(seed)

    def simulate(
        self,
        station: CameraStation,
        current_pm25: float | None = None,
        timestamp: datetime | None = None,
    ) -> VisualAnalysisResult:
        """Generate a plausible analysis for one station.

        Haziness follows the PM2.5 grade band with ±0.05 jitter, and the other
        metrics are derived from it the way a real hazy frame behaves. The
        snapshot time defaults to now.
        """
        pm25 = DEFAULT_PM25 if current_pm25 is None else current_pm25
        jitter = (self._rng.random() - 0.5) * 0.1

        if pm25 < 15:
            base = 0.15
        elif pm25 < 35:
            base = 0.35
        elif pm25 < 75:
            base = 0.55
        else:
            base = 0.75
        haziness = clamp(base + jitter, 0.0, 1.0)

        metrics = VisualMetrics(
            contrast=round_half_up((1 - haziness) * 0.8, 2),
            edge_density=round_half_up((1 - haziness) * 0.6, 2),
            color_shift=round_half_up(haziness * 0.5, 2),
            brightness=round_half_up(120 + haziness * 60),
            brightness_uniformity=round_half_up(haziness * 0.7, 2),
            haziness=round_half_up(haziness, 2),
        )

        return VisualAnalysisResult(
            station_id=station.id,
            station_name=station.name,
            timestamp=timestamp or datetime.now(),
            metrics=metrics,
            visibility_grade=haze_to_visibility_grade(haziness),
            estimated_pm25_range=haze_to_estimated_pm25(haziness),
            confidence=SIMULATED_CONFIDENCE,
        )

    def simulate_city(
        self,
        city: str,
        current_pm25: float | None = None,
        timestamp: datetime | None = None,
    ) -> list[VisualAnalysisResult]:
        stations = stations_for(city)
        taken = timestamp or datetime.now()
        log.info("simulating_cameras", city=city, stations=len(stations))
        return [self.simulate(station, current_pm25, taken) for station in stations]
