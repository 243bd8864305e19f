"""Domain models for the orders, fleet and planning constraints handed to the solver."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime
from enum import Enum
from typing import Optional, Sequence

from ..config import settings


class Priority(str, Enum):
    LOW = "low"
    NORMAL = "normal"
    HIGH = "high"
    URGENT = "urgent"

    @property
    def rank(self) -> int:
        return _PRIORITY_RANK[self]


_PRIORITY_RANK = {
    Priority.URGENT: 4,
    Priority.HIGH: 3,
    Priority.NORMAL: 2,
    Priority.LOW: 1,
}


class VehicleStatus(str, Enum):
    AVAILABLE = "available"
    IN_USE = "in_use"
    MAINTENANCE = "maintenance"
    OUT_OF_SERVICE = "out_of_service"


class FuelType(str, Enum):
    DIESEL = "diesel"
    PETROL = "petrol"
    ELECTRIC = "electric"
    HYBRID = "hybrid"


class DriverStatus(str, Enum):
    AVAILABLE = "available"
    ON_DUTY = "on_duty"
    ON_BREAK = "on_break"
    OFF_DUTY = "off_duty"


class BreakType(str, Enum):
    DAILY_BREAK = "daily_break"
    WEEKLY_BREAK = "weekly_break"
    DRIVING_BREAK = "driving_break"


@dataclass(slots=True, frozen=True)
class Coordinate:
    lat: float
    lng: float


@dataclass(slots=True)
class Address:
    """A geocoded address. Geocoding happens upstream; the location is already resolved."""

    line1: str
    location: Coordinate
    city: Optional[str] = None
    postcode: Optional[str] = None


@dataclass(slots=True, frozen=True)
class TimeWindow:
    start: datetime
    end: datetime

    def deviation_minutes(self, moment: datetime) -> float:
        """Minutes early before ``start`` or late after ``end``; zero inside the window."""
        if moment < self.start:
            return (self.start - moment).total_seconds() / 60.0
        if moment > self.end:
            return (moment - self.end).total_seconds() / 60.0
        return 0.0


@dataclass(slots=True)
class LoadDetails:
    weight: float
    volume: Optional[float] = None
    height: Optional[float] = None
    length: Optional[float] = None
    width: Optional[float] = None
    hazmat_classes: tuple[str, ...] = ()


@dataclass(slots=True)
class Order:
    """A pickup-and-delivery request. Immutable for the duration of a solve."""

    order_id: str
    consignor: Address
    consignee: Address
    pickup_window: TimeWindow
    delivery_window: TimeWindow
    load: LoadDetails
    priority: Priority = Priority.NORMAL

    @property
    def pickup_location(self) -> Coordinate:
        return self.consignor.location

    @property
    def delivery_location(self) -> Coordinate:
        return self.consignee.location


@dataclass(slots=True)
class Vehicle:
    vehicle_id: str
    registration: str
    max_weight: float
    max_height: float
    max_length: float
    max_width: float
    location: Coordinate
    status: VehicleStatus = VehicleStatus.AVAILABLE
    hazmat_classes: frozenset[str] = frozenset()
    fuel_type: FuelType = FuelType.DIESEL


@dataclass(slots=True)
class Driver:
    """Driver snapshot. Accepted by the solver but not algorithmically assigned."""

    driver_id: str
    name: str
    location: Coordinate
    status: DriverStatus = DriverStatus.AVAILABLE
    licence_expiry: Optional[date] = None
    medical_expiry: Optional[date] = None
    max_driving_hours: float = settings.max_driving_hours
    current_driving_hours: float = 0.0


@dataclass(slots=True)
class BreakRule:
    type: BreakType
    duration_minutes: float
    frequency_hours: float


@dataclass(slots=True)
class VehicleRestriction:
    """Per-vehicle override; unset fields fall back to the vehicle record."""

    vehicle_id: str
    max_weight: Optional[float] = None
    max_height: Optional[float] = None
    hazmat_classes: Optional[frozenset[str]] = None
    lez_compliant: Optional[bool] = None


@dataclass(slots=True)
class RouteConstraints:
    max_driving_hours: float = settings.max_driving_hours
    break_rules: list[BreakRule] = field(default_factory=list)
    vehicle_restrictions: list[VehicleRestriction] = field(default_factory=list)
    time_windows: bool = True
    adr_restrictions: bool = True
    lez_compliance: bool = False
    low_emission_zones: list[Sequence[tuple[float, float]]] = field(default_factory=list)

    def restriction_for(self, vehicle_id: str) -> Optional[VehicleRestriction]:
        for restriction in self.vehicle_restrictions:
            if restriction.vehicle_id == vehicle_id:
                return restriction
        return None
