from datetime import datetime

from src.fleetopt.models.domain import (
    Address,
    Coordinate,
    FuelType,
    LoadDetails,
    Order,
    RouteConstraints,
    TimeWindow,
    Vehicle,
    VehicleRestriction,
    VehicleStatus,
)
from src.fleetopt.services.routing.feasibility import effective_limits, infeasibility_reasons, is_feasible

DAY = TimeWindow(start=datetime(2025, 3, 3, 8, 0), end=datetime(2025, 3, 3, 18, 0))
ZONE = [(53.0, -2.1), (53.0, -1.9), (53.2, -1.9), (53.2, -2.1)]


def _order(weight: float = 500.0, height: float | None = None, hazmat: tuple[str, ...] = (), pickup=(53.1, -2.0)) -> Order:
    return Order(
        order_id="O1",
        consignor=Address(line1="Depot Road", location=Coordinate(*pickup)),
        consignee=Address(line1="High Street", location=Coordinate(53.5, -2.5)),
        pickup_window=DAY,
        delivery_window=DAY,
        load=LoadDetails(weight=weight, height=height, hazmat_classes=hazmat),
    )


def _vehicle(
    max_weight: float = 1000.0,
    max_height: float = 4.0,
    hazmat: frozenset[str] = frozenset(),
    status: VehicleStatus = VehicleStatus.AVAILABLE,
    fuel_type: FuelType = FuelType.DIESEL,
) -> Vehicle:
    return Vehicle(
        vehicle_id="V1",
        registration="AB12 CDE",
        max_weight=max_weight,
        max_height=max_height,
        max_length=12.0,
        max_width=2.5,
        location=Coordinate(53.0, -2.0),
        status=status,
        hazmat_classes=hazmat,
        fuel_type=fuel_type,
    )


def test_weight_at_capacity_is_feasible():
    assert is_feasible(_order(weight=1000.0), _vehicle())
    assert not is_feasible(_order(weight=1000.1), _vehicle())


def test_height_only_checked_when_present():
    assert is_feasible(_order(height=None), _vehicle(max_height=2.0))
    assert not is_feasible(_order(height=4.5), _vehicle(max_height=4.0))


def test_hazmat_classes_must_be_covered():
    order = _order(hazmat=("3", "8"))

    assert not is_feasible(order, _vehicle(hazmat=frozenset({"3"})))
    assert is_feasible(order, _vehicle(hazmat=frozenset({"3", "8", "9"})))
    assert "missing hazmat classes 8" in infeasibility_reasons(order, _vehicle(hazmat=frozenset({"3"})))


def test_hazmat_ignored_without_adr_restrictions():
    order = _order(hazmat=("3",))
    assert is_feasible(order, _vehicle(), RouteConstraints(adr_restrictions=False))


def test_unavailable_vehicle_is_rejected():
    for status in (VehicleStatus.IN_USE, VehicleStatus.MAINTENANCE, VehicleStatus.OUT_OF_SERVICE):
        assert not is_feasible(_order(), _vehicle(status=status))


def test_reasons_are_collected():
    reasons = infeasibility_reasons(_order(weight=5000.0, height=5.0), _vehicle(status=VehicleStatus.MAINTENANCE))
    assert len(reasons) == 3


def test_restriction_overrides_vehicle_limits():
    constraints = RouteConstraints(
        vehicle_restrictions=[VehicleRestriction(vehicle_id="V1", max_weight=400.0, hazmat_classes=frozenset({"3"}))]
    )

    limits = effective_limits(_vehicle(), constraints)

    assert limits.max_weight == 400.0
    assert limits.hazmat_classes == frozenset({"3"})
    assert not is_feasible(_order(weight=500.0), _vehicle(), constraints)
    assert is_feasible(_order(weight=300.0, hazmat=("3",)), _vehicle(), constraints)


def test_restriction_never_raises_capacity():
    constraints = RouteConstraints(vehicle_restrictions=[VehicleRestriction(vehicle_id="V1", max_weight=5000.0)])
    assert effective_limits(_vehicle(), constraints).max_weight == 1000.0


def test_low_emission_zone_requires_compliant_vehicle():
    constraints = RouteConstraints(lez_compliance=True, low_emission_zones=[ZONE])
    order = _order(pickup=(53.1, -2.0))

    assert not is_feasible(order, _vehicle(fuel_type=FuelType.DIESEL), constraints)
    assert is_feasible(order, _vehicle(fuel_type=FuelType.ELECTRIC), constraints)
    assert is_feasible(order, _vehicle(fuel_type=FuelType.HYBRID), constraints)


def test_low_emission_zone_override_and_toggle():
    order = _order(pickup=(53.1, -2.0))
    overridden = RouteConstraints(
        lez_compliance=True,
        low_emission_zones=[ZONE],
        vehicle_restrictions=[VehicleRestriction(vehicle_id="V1", lez_compliant=True)],
    )

    assert is_feasible(order, _vehicle(), overridden)
    assert is_feasible(order, _vehicle(), RouteConstraints(lez_compliance=False, low_emission_zones=[ZONE]))
    assert is_feasible(_order(pickup=(53.3, -2.0)), _vehicle(), RouteConstraints(lez_compliance=True, low_emission_zones=[ZONE]))
