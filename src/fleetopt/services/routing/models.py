"""Routing domain models."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Dict, List, Optional

from ...models.domain import BreakType, Coordinate, TimeWindow


class WaypointType(str, Enum):
    PICKUP = "pickup"
    DELIVERY = "delivery"


class ViolationType(str, Enum):
    """Violation kinds. The solver emits time_window, driving_hours and unassignable;
    the other kinds are reserved in the result schema. Capacity and height
    problems surface as unassignable orders instead.
    """

    TIME_WINDOW = "time_window"
    WEIGHT_CAPACITY = "weight_capacity"
    HEIGHT_RESTRICTION = "height_restriction"
    DRIVING_HOURS = "driving_hours"
    BREAK_REQUIREMENT = "break_requirement"
    UNASSIGNABLE = "unassignable"


class Severity(str, Enum):
    WARNING = "warning"
    ERROR = "error"


@dataclass(slots=True)
class Waypoint:
    sequence: int
    order_id: str
    location: Coordinate
    address: str
    type: WaypointType
    time_window: TimeWindow
    service_minutes: float
    estimated_arrival: Optional[datetime] = None
    estimated_departure: Optional[datetime] = None


@dataclass(slots=True)
class Break:
    location: Coordinate
    start_time: datetime
    end_time: datetime
    duration_minutes: float
    type: BreakType
    name: str = "Scheduled break"


@dataclass(slots=True)
class FuelStop:
    location: Coordinate
    name: str
    estimated_arrival: datetime
    estimated_duration_minutes: float
    fuel_required_litres: float


@dataclass(slots=True)
class RoutePlan:
    vehicle_id: str
    driver_id: str = ""
    waypoints: List[Waypoint] = field(default_factory=list)
    total_distance_km: float = 0.0
    total_duration_min: float = 0.0
    driving_minutes: float = 0.0
    breaks: List[Break] = field(default_factory=list)
    fuel_stops: List[FuelStop] = field(default_factory=list)

    def order_ids(self) -> list[str]:
        """Order ids in first-visit sequence."""
        seen: dict[str, None] = {}
        for waypoint in self.waypoints:
            seen.setdefault(waypoint.order_id, None)
        return list(seen)

    def renumber(self) -> None:
        for sequence, waypoint in enumerate(self.waypoints, start=1):
            waypoint.sequence = sequence


@dataclass(slots=True)
class ConstraintViolation:
    type: ViolationType
    severity: Severity
    message: str
    order_id: Optional[str] = None
    vehicle_id: Optional[str] = None


@dataclass(slots=True)
class RouteOptimizationResult:
    assignments: Dict[str, str] = field(default_factory=dict)
    routes: Dict[str, RoutePlan] = field(default_factory=dict)
    total_distance_km: float = 0.0
    total_duration_min: float = 0.0
    total_cost: float = 0.0
    route_cost: float = 0.0
    violations: List[ConstraintViolation] = field(default_factory=list)
    iterations: int = 0
    metadata: dict = field(default_factory=dict)

    def unassigned_order_ids(self) -> list[str]:
        return [
            violation.order_id
            for violation in self.violations
            if violation.type is ViolationType.UNASSIGNABLE and violation.order_id
        ]
