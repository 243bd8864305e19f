"""Scalarized costs for assignments, routes and whole solutions."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Iterable, Sequence

from ...config import settings
from ...models.domain import Order, TimeWindow, Vehicle
from ..geospatial import distance_km
from .models import ConstraintViolation, RoutePlan


@dataclass(slots=True, frozen=True)
class CostWeights:
    """Scalarization constants. Changing them changes how solutions are ranked."""

    pickup_distance: float = settings.cost_pickup_distance_weight
    time_window: float = settings.cost_time_window_weight
    utilization: float = settings.cost_utilization_weight
    route_distance: float = settings.cost_route_distance_weight
    route_duration: float = settings.cost_route_duration_weight
    violation_penalty: float = settings.cost_violation_penalty


class CostModel:
    def __init__(self, weights: CostWeights | None = None) -> None:
        self.weights = weights or CostWeights()

    @staticmethod
    def time_window_penalty(window: TimeWindow, estimated_arrival: datetime, *, enabled: bool = True) -> float:
        """Minutes early or late relative to ``window``."""
        if not enabled:
            return 0.0
        return window.deviation_minutes(estimated_arrival)

    def assignment_cost(
        self,
        vehicle: Vehicle,
        order: Order,
        estimated_arrival: datetime,
        *,
        time_windows: bool = True,
    ) -> float:
        pickup_distance = distance_km(vehicle.location, order.pickup_location)
        penalty = self.time_window_penalty(order.pickup_window, estimated_arrival, enabled=time_windows)
        utilization = order.load.weight / vehicle.max_weight
        return (
            self.weights.pickup_distance * pickup_distance
            + self.weights.time_window * penalty
            + self.weights.utilization * (1 - utilization)
        )

    def route_cost(self, route: RoutePlan) -> float:
        return (
            self.weights.route_distance * route.total_distance_km
            + self.weights.route_duration * route.total_duration_min
        )

    def solution_cost(self, routes: Iterable[RoutePlan], violations: Sequence[ConstraintViolation]) -> float:
        return sum(self.route_cost(route) for route in routes) + self.weights.violation_penalty * len(violations)
