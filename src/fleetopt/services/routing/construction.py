"""Greedy sequential best-fit construction."""

from __future__ import annotations

import logging
import math
from typing import Mapping, Optional, Sequence

from ...models.domain import Order, Vehicle
from .context import PlanningContext
from .feasibility import effective_limits
from .local_search import two_opt
from .models import RouteOptimizationResult, RoutePlan, Waypoint, WaypointType

logger = logging.getLogger(__name__)


def sort_orders(orders: Sequence[Order]) -> list[Order]:
    """Priority descending, then earliest pickup window; input order breaks remaining ties."""
    return sorted(orders, key=lambda order: (-order.priority.rank, order.pickup_window.start))


class GreedyConstructor:
    def __init__(self, context: PlanningContext) -> None:
        self.context = context

    def _assigned_weight(self, route: Optional[RoutePlan]) -> float:
        if route is None:
            return 0.0
        return sum(order.load.weight for order in self.context.orders_in(route.order_ids()))

    def find_best_vehicle(self, order: Order, routes: Mapping[str, RoutePlan]) -> Optional[Vehicle]:
        """Cheapest feasible vehicle with room for the order; the first one wins ties."""
        context = self.context
        best_vehicle: Optional[Vehicle] = None
        min_cost = math.inf
        for vehicle in context.feasible_vehicles(order):
            route = routes.get(vehicle.vehicle_id)
            capacity = effective_limits(vehicle, context.constraints).max_weight
            if self._assigned_weight(route) + order.load.weight > capacity:
                continue
            arrival = context.estimated_pickup_arrival(vehicle, order, route)
            cost = context.cost_model.assignment_cost(
                vehicle, order, arrival, time_windows=context.constraints.time_windows
            )
            if cost < min_cost:
                min_cost = cost
                best_vehicle = vehicle
        return best_vehicle

    def add_order_to_route(self, route: RoutePlan, order: Order) -> None:
        next_sequence = len(route.waypoints) + 1
        service_minutes = self.context.service_minutes
        route.waypoints.append(
            Waypoint(
                sequence=next_sequence,
                order_id=order.order_id,
                location=order.pickup_location,
                address=order.consignor.line1,
                type=WaypointType.PICKUP,
                time_window=order.pickup_window,
                service_minutes=service_minutes,
            )
        )
        route.waypoints.append(
            Waypoint(
                sequence=next_sequence + 1,
                order_id=order.order_id,
                location=order.delivery_location,
                address=order.consignee.line1,
                type=WaypointType.DELIVERY,
                time_window=order.delivery_window,
                service_minutes=service_minutes,
            )
        )
        self.context.schedule_route(route)

    def place(self, solution: RouteOptimizationResult, order: Order) -> bool:
        """Assign ``order`` to its best vehicle in ``solution``; False if none can take it."""
        vehicle = self.find_best_vehicle(order, solution.routes)
        if vehicle is None:
            return False
        solution.assignments[order.order_id] = vehicle.vehicle_id
        route = solution.routes.get(vehicle.vehicle_id)
        if route is None:
            route = RoutePlan(vehicle_id=vehicle.vehicle_id)
            solution.routes[vehicle.vehicle_id] = route
        self.add_order_to_route(route, order)
        return True

    def build(self) -> RouteOptimizationResult:
        context = self.context
        solution = RouteOptimizationResult()
        for order in sort_orders(context.orders):
            if not self.place(solution, order):
                context.record_unassignable(order)

        for route in solution.routes.values():
            two_opt(route, context.route_cost)

        context.evaluate(solution)
        logger.info(
            "Greedy construction placed %d/%d orders on %d routes (cost %.2f)",
            len(solution.assignments),
            len(context.orders),
            len(solution.routes),
            solution.total_cost,
        )
        return solution
