from datetime import datetime

from src.fleetopt.models.domain import Address, Coordinate, LoadDetails, Order, RouteConstraints, TimeWindow, Vehicle
from src.fleetopt.services.routing.context import PlanningContext
from src.fleetopt.services.routing.cost import CostModel
from src.fleetopt.services.routing.eta import ETAPredictor
from src.fleetopt.services.routing.local_search import respects_precedence, reverse_segment, two_opt
from src.fleetopt.services.routing.models import RoutePlan, Waypoint, WaypointType

START = datetime(2025, 3, 3, 10, 0)
DAY = TimeWindow(start=START, end=datetime(2025, 3, 3, 22, 0))


def _order(order_id: str, pickup: tuple[float, float], delivery: tuple[float, float]) -> Order:
    return Order(
        order_id=order_id,
        consignor=Address(line1=f"{order_id} pickup", location=Coordinate(*pickup)),
        consignee=Address(line1=f"{order_id} delivery", location=Coordinate(*delivery)),
        pickup_window=DAY,
        delivery_window=DAY,
        load=LoadDetails(weight=100.0),
    )


def _vehicle() -> Vehicle:
    return Vehicle(
        vehicle_id="V1",
        registration="AB12 CDE",
        max_weight=1000.0,
        max_height=4.0,
        max_length=12.0,
        max_width=2.5,
        location=Coordinate(53.0, -2.0),
    )


def _context(orders: list[Order]) -> PlanningContext:
    return PlanningContext(
        orders=orders,
        vehicles=[_vehicle()],
        constraints=RouteConstraints(time_windows=False),
        start_time=START,
        cost_model=CostModel(),
        eta_predictor=ETAPredictor(),
        service_minutes=30.0,
    )


def _stop(order: Order, kind: WaypointType) -> Waypoint:
    pickup = kind is WaypointType.PICKUP
    return Waypoint(
        sequence=0,
        order_id=order.order_id,
        location=order.pickup_location if pickup else order.delivery_location,
        address=order.consignor.line1 if pickup else order.consignee.line1,
        type=kind,
        time_window=order.pickup_window if pickup else order.delivery_window,
        service_minutes=30.0,
    )


def _zigzag() -> tuple[PlanningContext, RoutePlan]:
    first = _order("A", (53.0, -2.0), (53.5, -2.0))
    second = _order("B", (53.01, -2.0), (53.49, -2.0))
    route = RoutePlan(
        vehicle_id="V1",
        waypoints=[
            _stop(first, WaypointType.PICKUP),
            _stop(first, WaypointType.DELIVERY),
            _stop(second, WaypointType.PICKUP),
            _stop(second, WaypointType.DELIVERY),
        ],
    )
    return _context([first, second]), route


def test_respects_precedence():
    order = _order("A", (53.0, -2.0), (53.5, -2.0))
    pickup, delivery = _stop(order, WaypointType.PICKUP), _stop(order, WaypointType.DELIVERY)

    assert respects_precedence([pickup, delivery])
    assert not respects_precedence([delivery, pickup])
    assert respects_precedence([])


def test_reverse_segment_returns_copy():
    items = ["a", "b", "c", "d", "e"]
    assert reverse_segment(items, 1, 3) == ["a", "d", "c", "b", "e"]
    assert items == ["a", "b", "c", "d", "e"]


def test_two_opt_shortens_zigzag_route():
    context, route = _zigzag()
    before = context.route_cost(route)
    distance_before = route.total_distance_km

    two_opt(route, context.route_cost)

    assert context.route_cost(route) < before
    assert route.total_distance_km < distance_before
    assert respects_precedence(route.waypoints)
    assert [waypoint.sequence for waypoint in route.waypoints] == [1, 2, 3, 4]


def test_two_opt_leaves_optimal_route_alone():
    order = _order("A", (53.0, -2.0), (53.5, -2.0))
    context = _context([order])
    route = RoutePlan(vehicle_id="V1", waypoints=[_stop(order, WaypointType.PICKUP), _stop(order, WaypointType.DELIVERY)])

    two_opt(route, context.route_cost)

    assert [waypoint.type for waypoint in route.waypoints] == [WaypointType.PICKUP, WaypointType.DELIVERY]
    assert route.waypoints[0].estimated_arrival == START
    assert route.total_duration_min > 0


def test_two_opt_never_increases_cost():
    context, route = _zigzag()
    two_opt(route, context.route_cost)
    settled = context.route_cost(route)

    two_opt(route, context.route_cost)

    assert context.route_cost(route) <= settled
