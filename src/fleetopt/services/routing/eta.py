"""Travel-time estimation blending a speed/traffic model with observed history.

Observed travel times are kept in memory only, keyed by rounded origin and
destination coordinates. The history lives as long as the predictor instance;
the process-wide instance returned by :func:`get_eta_predictor` is shared by
the solver and the API so that recorded observations inform later solves.
"""

from __future__ import annotations

import logging
import threading
from collections import deque
from datetime import datetime
from functools import lru_cache
from typing import Deque, Dict, Optional

from ...config import settings
from ...exceptions import InputValidationError
from ...models.domain import Coordinate
from ..geospatial import distance_km

logger = logging.getLogger(__name__)

MORNING_PEAK_HOURS = range(7, 10)
EVENING_PEAK_HOURS = range(17, 20)
MORNING_PEAK_MULTIPLIER = 1.5
EVENING_PEAK_MULTIPLIER = 1.4


def traffic_multiplier(hour: int) -> float:
    if hour in MORNING_PEAK_HOURS:
        return MORNING_PEAK_MULTIPLIER
    if hour in EVENING_PEAK_HOURS:
        return EVENING_PEAK_MULTIPLIER
    return 1.0


class ETAPredictor:
    def __init__(
        self,
        *,
        average_speed_kmh: float | None = None,
        history_size: int | None = None,
        key_precision: int | None = None,
    ) -> None:
        self.average_speed_kmh = average_speed_kmh or settings.average_speed_kmh
        self.history_size = history_size or settings.eta_history_size
        self.key_precision = key_precision if key_precision is not None else settings.eta_key_precision
        self._history: Dict[str, Deque[float]] = {}
        self._lock = threading.Lock()

    def route_key(self, origin: Coordinate, destination: Coordinate) -> str:
        p = self.key_precision
        return (
            f"{round(origin.lat, p)},{round(origin.lng, p)}"
            f"-{round(destination.lat, p)},{round(destination.lng, p)}"
        )

    def model_minutes(self, origin: Coordinate, destination: Coordinate, time_of_day: datetime) -> float:
        """Speed model estimate with the peak-hour multiplier applied."""
        base_minutes = distance_km(origin, destination) / self.average_speed_kmh * 60.0
        return base_minutes * traffic_multiplier(time_of_day.hour)

    def predict_eta(
        self,
        origin: Coordinate,
        destination: Coordinate,
        vehicle_type: Optional[str],
        time_of_day: datetime,
    ) -> float:
        """Estimated travel minutes from ``origin`` to ``destination``.

        ``vehicle_type`` is part of the contract for per-class speed profiles but
        does not affect the estimate yet.
        """
        adjusted = self.model_minutes(origin, destination, time_of_day)
        key = self.route_key(origin, destination)
        with self._lock:
            samples = self._history.get(key)
            historical_mean = sum(samples) / len(samples) if samples else None
        if historical_mean is None:
            return adjusted
        return (adjusted + historical_mean) / 2.0

    def update_historical_data(self, origin: Coordinate, destination: Coordinate, actual_minutes: float) -> None:
        if actual_minutes < 0:
            raise InputValidationError(errors=[f"actual travel time must be >= 0, got {actual_minutes}"])
        key = self.route_key(origin, destination)
        with self._lock:
            samples = self._history.get(key)
            if samples is None:
                samples = deque(maxlen=self.history_size)
                self._history[key] = samples
            samples.append(float(actual_minutes))
        logger.debug("Recorded %.1f min for %s", actual_minutes, key)

    def history(self, origin: Coordinate, destination: Coordinate) -> list[float]:
        with self._lock:
            return list(self._history.get(self.route_key(origin, destination), ()))

    def clear(self) -> None:
        with self._lock:
            self._history.clear()


@lru_cache(maxsize=1)
def get_eta_predictor() -> ETAPredictor:
    return ETAPredictor()
