"""Routing request/response schemas."""

from __future__ import annotations

from datetime import date, datetime
from typing import Dict, List, Optional

from pydantic import BaseModel, Field

from ..models.domain import BreakType, DriverStatus, FuelType, Priority, VehicleStatus


class CoordinateModel(BaseModel):
    lat: float
    lng: float


class AddressModel(BaseModel):
    line1: str
    location: CoordinateModel
    city: Optional[str] = None
    postcode: Optional[str] = None


class TimeWindowModel(BaseModel):
    start: datetime
    end: datetime


class LoadDetailsModel(BaseModel):
    weight: float
    volume: Optional[float] = None
    height: Optional[float] = None
    length: Optional[float] = None
    width: Optional[float] = None
    hazmat_classes: List[str] = Field(default_factory=list)


class OrderModel(BaseModel):
    order_id: str
    consignor: AddressModel
    consignee: AddressModel
    pickup_window: TimeWindowModel
    delivery_window: TimeWindowModel
    load: LoadDetailsModel
    priority: Priority = Priority.NORMAL


class VehicleModel(BaseModel):
    vehicle_id: str
    registration: str
    max_weight: float
    max_height: float
    max_length: float
    max_width: float
    location: CoordinateModel
    status: VehicleStatus = VehicleStatus.AVAILABLE
    hazmat_classes: List[str] = Field(default_factory=list)
    fuel_type: FuelType = FuelType.DIESEL


class DriverModel(BaseModel):
    driver_id: str
    name: str
    location: CoordinateModel
    status: DriverStatus = DriverStatus.AVAILABLE
    licence_expiry: Optional[date] = None
    medical_expiry: Optional[date] = None
    max_driving_hours: Optional[float] = Field(None, gt=0)
    current_driving_hours: float = Field(0.0, ge=0)


class BreakRuleModel(BaseModel):
    type: BreakType
    duration_minutes: float = Field(..., ge=0)
    frequency_hours: float = Field(..., gt=0)


class VehicleRestrictionModel(BaseModel):
    vehicle_id: str
    max_weight: Optional[float] = Field(None, gt=0)
    max_height: Optional[float] = Field(None, gt=0)
    hazmat_classes: Optional[List[str]] = None
    lez_compliant: Optional[bool] = None


class RoutingConstraints(BaseModel):
    max_driving_hours: Optional[float] = Field(None, gt=0)
    break_rules: List[BreakRuleModel] = Field(default_factory=list)
    vehicle_restrictions: List[VehicleRestrictionModel] = Field(default_factory=list)
    time_windows: bool = True
    adr_restrictions: bool = True
    lez_compliance: bool = False
    low_emission_zones: List[List[CoordinateModel]] = Field(
        default_factory=list,
        description="Polygons as rings of coordinates.",
    )


class SolverOptions(BaseModel):
    seed: Optional[int] = Field(default=None, description="Seed for a reproducible destroy step.")
    iterations: Optional[int] = Field(default=None, ge=0)
    time_limit_seconds: Optional[float] = Field(default=None, ge=0)
    start_time: Optional[datetime] = Field(
        default=None,
        description="Planning start; defaults to the earliest pickup window start.",
    )


class RoutingRequest(BaseModel):
    orders: List[OrderModel] = Field(default_factory=list)
    vehicles: List[VehicleModel] = Field(default_factory=list)
    drivers: List[DriverModel] = Field(default_factory=list)
    constraints: Optional[RoutingConstraints] = None
    options: Optional[SolverOptions] = None
    persist: bool = False
    run_label: Optional[str] = Field(default=None, description="Friendly name for persisted outputs.")


class WaypointModel(BaseModel):
    sequence: int
    order_id: str
    location: CoordinateModel
    address: str
    type: str
    time_window: TimeWindowModel
    service_minutes: float
    estimated_arrival: Optional[datetime] = None
    estimated_departure: Optional[datetime] = None


class BreakModel(BaseModel):
    location: CoordinateModel
    start_time: datetime
    end_time: datetime
    duration_minutes: float
    type: str
    name: str


class RoutePlanModel(BaseModel):
    vehicle_id: str
    driver_id: str
    total_distance_km: float
    total_duration_min: float
    driving_minutes: float
    waypoints: List[WaypointModel]
    breaks: List[BreakModel]
    fuel_stops: List[dict]


class ConstraintViolationModel(BaseModel):
    type: str
    severity: str
    message: str
    order_id: Optional[str] = None
    vehicle_id: Optional[str] = None


class RoutingResponse(BaseModel):
    assignments: Dict[str, str]
    routes: Dict[str, RoutePlanModel]
    total_distance_km: float
    total_duration_min: float
    total_cost: float
    route_cost: float
    violations: List[ConstraintViolationModel]
    iterations: int
    metadata: dict
