"""Shared planning state: route scheduling and solution evaluation."""

from __future__ import annotations

import logging
from datetime import datetime, timedelta
from typing import Iterable, Optional, Sequence

from ...models.domain import BreakType, Coordinate, Order, RouteConstraints, Vehicle
from ..geospatial import distance_km
from .cost import CostModel
from .eta import ETAPredictor
from .feasibility import infeasibility_reasons
from .models import Break, ConstraintViolation, RouteOptimizationResult, RoutePlan, Severity, ViolationType

logger = logging.getLogger(__name__)


class PlanningContext:
    """Everything a construction or improvement step needs to place and score orders.

    Routes start at ``start_time`` from the vehicle's current location. Leg travel
    minutes come from the ETA predictor, so recorded history shapes the schedule.
    A vehicle arriving before a window opens waits for it.
    """

    def __init__(
        self,
        *,
        orders: Sequence[Order],
        vehicles: Sequence[Vehicle],
        constraints: RouteConstraints,
        start_time: datetime,
        cost_model: CostModel,
        eta_predictor: ETAPredictor,
        service_minutes: float,
    ) -> None:
        self.orders = list(orders)
        self.orders_by_id = {order.order_id: order for order in self.orders}
        self.vehicles = list(vehicles)
        self.vehicles_by_id = {vehicle.vehicle_id: vehicle for vehicle in self.vehicles}
        self.constraints = constraints
        self.start_time = start_time
        self.cost_model = cost_model
        self.eta_predictor = eta_predictor
        self.service_minutes = service_minutes
        self.unassignable: dict[str, ConstraintViolation] = {}
        driving_rules = [
            rule
            for rule in constraints.break_rules
            if rule.type is BreakType.DRIVING_BREAK and rule.frequency_hours > 0
        ]
        self._break_rule = min(driving_rules, key=lambda rule: rule.frequency_hours) if driving_rules else None

    def feasible_vehicles(self, order: Order) -> list[Vehicle]:
        return [vehicle for vehicle in self.vehicles if not infeasibility_reasons(order, vehicle, self.constraints)]

    def record_unassignable(self, order: Order) -> ConstraintViolation:
        violation = self.unassignable.get(order.order_id)
        if violation is None:
            for vehicle in self.vehicles:
                logger.debug(
                    "Vehicle %s rejected for order %s: %s",
                    vehicle.vehicle_id,
                    order.order_id,
                    ", ".join(infeasibility_reasons(order, vehicle, self.constraints)),
                )
            violation = ConstraintViolation(
                type=ViolationType.UNASSIGNABLE,
                severity=Severity.ERROR,
                message=f"No suitable vehicle found for order {order.order_id}",
                order_id=order.order_id,
            )
            self.unassignable[order.order_id] = violation
            logger.warning(violation.message)
        return violation

    def availability(self, route: Optional[RoutePlan], vehicle: Vehicle) -> tuple[Coordinate, datetime]:
        """Where and when ``vehicle`` is free to start its next order."""
        if route is None or not route.waypoints:
            return vehicle.location, self.start_time
        last = route.waypoints[-1]
        return last.location, last.estimated_departure or self.start_time

    def estimated_pickup_arrival(self, vehicle: Vehicle, order: Order, route: Optional[RoutePlan]) -> datetime:
        position, free_at = self.availability(route, vehicle)
        minutes = self.eta_predictor.predict_eta(position, order.pickup_location, vehicle.fuel_type.value, free_at)
        return free_at + timedelta(minutes=minutes)

    def schedule_route(self, route: RoutePlan) -> list[ConstraintViolation]:
        """Recompute distance, duration, stop times and breaks; return route-level violations."""
        vehicle = self.vehicles_by_id[route.vehicle_id]
        enforce_windows = self.constraints.time_windows
        violations: list[ConstraintViolation] = []

        position = vehicle.location
        clock = self.start_time
        total_distance = 0.0
        driving = 0.0
        since_break = 0.0
        breaks: list[Break] = []

        for waypoint in route.waypoints:
            leg_minutes = self.eta_predictor.predict_eta(
                position, waypoint.location, vehicle.fuel_type.value, clock
            )
            total_distance += distance_km(position, waypoint.location)
            clock += timedelta(minutes=leg_minutes)
            driving += leg_minutes
            since_break += leg_minutes

            rule = self._break_rule
            while rule is not None and since_break >= rule.frequency_hours * 60.0:
                end = clock + timedelta(minutes=rule.duration_minutes)
                breaks.append(
                    Break(
                        location=waypoint.location,
                        start_time=clock,
                        end_time=end,
                        duration_minutes=rule.duration_minutes,
                        type=rule.type,
                    )
                )
                clock = end
                since_break -= rule.frequency_hours * 60.0

            waypoint.estimated_arrival = clock
            service_start = clock
            if enforce_windows:
                if clock < waypoint.time_window.start:
                    service_start = waypoint.time_window.start
                elif clock > waypoint.time_window.end:
                    late = waypoint.time_window.deviation_minutes(clock)
                    violations.append(
                        ConstraintViolation(
                            type=ViolationType.TIME_WINDOW,
                            severity=Severity.WARNING,
                            message=(
                                f"{waypoint.type.value.capitalize()} for order {waypoint.order_id} "
                                f"arrives {late:.0f} min after its window closes"
                            ),
                            order_id=waypoint.order_id,
                            vehicle_id=route.vehicle_id,
                        )
                    )
            waypoint.estimated_departure = service_start + timedelta(minutes=waypoint.service_minutes)
            clock = waypoint.estimated_departure
            position = waypoint.location

        route.total_distance_km = total_distance
        route.total_duration_min = (clock - self.start_time).total_seconds() / 60.0
        route.driving_minutes = driving
        route.breaks = breaks

        if driving > self.constraints.max_driving_hours * 60.0:
            violations.append(
                ConstraintViolation(
                    type=ViolationType.DRIVING_HOURS,
                    severity=Severity.WARNING,
                    message=(
                        f"Vehicle {route.vehicle_id} drives {driving / 60.0:.1f} h, "
                        f"limit is {self.constraints.max_driving_hours:.1f} h"
                    ),
                    vehicle_id=route.vehicle_id,
                )
            )
        return violations

    def route_cost(self, route: RoutePlan) -> float:
        self.schedule_route(route)
        return self.cost_model.route_cost(route)

    def evaluate(self, solution: RouteOptimizationResult) -> RouteOptimizationResult:
        """Reschedule every route and refresh violations and totals in place."""
        violations = [
            self.record_unassignable(order) for order in self.orders if order.order_id not in solution.assignments
        ]
        for route in solution.routes.values():
            violations.extend(self.schedule_route(route))
        solution.violations = violations
        solution.total_distance_km = sum(route.total_distance_km for route in solution.routes.values())
        solution.total_duration_min = sum(route.total_duration_min for route in solution.routes.values())
        solution.route_cost = sum(self.cost_model.route_cost(route) for route in solution.routes.values())
        solution.total_cost = self.cost_model.solution_cost(solution.routes.values(), violations)
        return solution

    def solution_cost(self, solution: RouteOptimizationResult) -> float:
        return self.cost_model.solution_cost(solution.routes.values(), solution.violations)

    def orders_in(self, order_ids: Iterable[str]) -> list[Order]:
        return [self.orders_by_id[order_id] for order_id in order_ids if order_id in self.orders_by_id]
