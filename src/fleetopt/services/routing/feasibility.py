"""Vehicle/order compatibility checks applied before any cost is computed."""

from __future__ import annotations

from dataclasses import dataclass

from ...models.domain import FuelType, Order, RouteConstraints, Vehicle, VehicleStatus
from ..geospatial import in_any_zone

_LEZ_COMPLIANT_FUELS = {FuelType.ELECTRIC, FuelType.HYBRID}


@dataclass(slots=True, frozen=True)
class EffectiveLimits:
    max_weight: float
    max_height: float
    hazmat_classes: frozenset[str]
    lez_compliant: bool


def effective_limits(vehicle: Vehicle, constraints: RouteConstraints | None = None) -> EffectiveLimits:
    """Vehicle limits after applying any per-vehicle restriction override."""
    restriction = constraints.restriction_for(vehicle.vehicle_id) if constraints else None
    max_weight = vehicle.max_weight
    max_height = vehicle.max_height
    hazmat_classes = frozenset(vehicle.hazmat_classes)
    lez_compliant = vehicle.fuel_type in _LEZ_COMPLIANT_FUELS
    if restriction is not None:
        if restriction.max_weight is not None:
            max_weight = min(max_weight, restriction.max_weight)
        if restriction.max_height is not None:
            max_height = min(max_height, restriction.max_height)
        if restriction.hazmat_classes is not None:
            hazmat_classes = frozenset(restriction.hazmat_classes)
        if restriction.lez_compliant is not None:
            lez_compliant = restriction.lez_compliant
    return EffectiveLimits(
        max_weight=max_weight,
        max_height=max_height,
        hazmat_classes=hazmat_classes,
        lez_compliant=lez_compliant,
    )


def infeasibility_reasons(
    order: Order,
    vehicle: Vehicle,
    constraints: RouteConstraints | None = None,
) -> list[str]:
    """Return why ``vehicle`` cannot carry ``order``; an empty list means feasible.

    Length and width are modelled on the vehicle but not checked.
    """
    limits = effective_limits(vehicle, constraints)
    reasons: list[str] = []

    if vehicle.status is not VehicleStatus.AVAILABLE:
        reasons.append(f"vehicle status is {vehicle.status.value}")
    if order.load.weight > limits.max_weight:
        reasons.append(f"weight {order.load.weight} exceeds {limits.max_weight}")
    if order.load.height is not None and order.load.height > limits.max_height:
        reasons.append(f"height {order.load.height} exceeds {limits.max_height}")

    enforce_hazmat = constraints.adr_restrictions if constraints else True
    if enforce_hazmat and order.load.hazmat_classes:
        missing = sorted(set(order.load.hazmat_classes) - limits.hazmat_classes)
        if missing:
            reasons.append(f"missing hazmat classes {', '.join(missing)}")

    if constraints and constraints.lez_compliance and constraints.low_emission_zones and not limits.lez_compliant:
        touches_zone = in_any_zone(order.pickup_location, constraints.low_emission_zones) or in_any_zone(
            order.delivery_location, constraints.low_emission_zones
        )
        if touches_zone:
            reasons.append("stop inside a low-emission zone")

    return reasons


def is_feasible(order: Order, vehicle: Vehicle, constraints: RouteConstraints | None = None) -> bool:
    return not infeasibility_reasons(order, vehicle, constraints)
