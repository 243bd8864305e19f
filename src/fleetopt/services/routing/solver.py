"""VRPTW solver: greedy construction, ALNS improvement, 2-opt polish."""

from __future__ import annotations

import copy
import logging
import random
import threading
from collections import Counter
from datetime import datetime
from typing import Sequence

from ...config import settings
from ...exceptions import InputValidationError
from ...models.domain import Coordinate, Driver, Order, RouteConstraints, Vehicle
from .alns import ALNSImprover
from .construction import GreedyConstructor
from .context import PlanningContext
from .cost import CostModel, CostWeights
from .eta import ETAPredictor, get_eta_predictor
from .local_search import two_opt
from .models import RouteOptimizationResult

logger = logging.getLogger(__name__)


def check_coordinate(label: str, location: Coordinate, errors: list[str]) -> None:
    if not -90.0 <= location.lat <= 90.0 or not -180.0 <= location.lng <= 180.0:
        errors.append(f"{label} has invalid coordinates ({location.lat}, {location.lng})")


def _check_duplicates(kind: str, ids: Sequence[str], errors: list[str]) -> None:
    for identifier, count in Counter(ids).items():
        if count > 1:
            errors.append(f"duplicate {kind} id '{identifier}'")


def validate_inputs(orders: Sequence[Order], vehicles: Sequence[Vehicle], drivers: Sequence[Driver]) -> None:
    """Fail fast on records that would make cost computations meaningless."""
    errors: list[str] = []

    _check_duplicates("order", [order.order_id for order in orders], errors)
    _check_duplicates("vehicle", [vehicle.vehicle_id for vehicle in vehicles], errors)
    _check_duplicates("driver", [driver.driver_id for driver in drivers], errors)

    moments = [
        moment
        for order in orders
        for window in (order.pickup_window, order.delivery_window)
        for moment in (window.start, window.end)
    ]
    # aware and naive datetimes cannot be compared
    mixed_timezones = len({moment.tzinfo is None for moment in moments}) > 1
    if mixed_timezones:
        errors.append("time windows mix timezone-aware and naive datetimes")

    for order in orders:
        label = f"order {order.order_id}"
        if order.load.weight <= 0:
            errors.append(f"{label} weight must be > 0")
        if not mixed_timezones:
            if order.pickup_window.start > order.pickup_window.end:
                errors.append(f"{label} pickup window starts after it ends")
            if order.delivery_window.start > order.delivery_window.end:
                errors.append(f"{label} delivery window starts after it ends")
        check_coordinate(f"{label} pickup", order.pickup_location, errors)
        check_coordinate(f"{label} delivery", order.delivery_location, errors)

    for vehicle in vehicles:
        if vehicle.max_weight <= 0:
            errors.append(f"vehicle {vehicle.vehicle_id} max weight must be > 0")
        check_coordinate(f"vehicle {vehicle.vehicle_id}", vehicle.location, errors)

    if errors:
        raise InputValidationError(errors=errors)


class VRPTWSolver:
    """Assign orders to vehicles and plan each vehicle's stop sequence.

    The result never costs more than the greedy starting point. Drivers are
    validated but not assigned; every route carries an empty driver id.
    """

    def __init__(
        self,
        *,
        cost_weights: CostWeights | None = None,
        eta_predictor: ETAPredictor | None = None,
        iterations: int | None = None,
        destroy_fraction: float | None = None,
        time_limit_seconds: float | None = None,
        seed: int | None = None,
        rng: random.Random | None = None,
        service_minutes: float | None = None,
        cancel_event: threading.Event | None = None,
    ) -> None:
        self.cost_model = CostModel(cost_weights)
        self.eta_predictor = eta_predictor or get_eta_predictor()
        self.iterations = iterations
        self.destroy_fraction = destroy_fraction
        self.time_limit_seconds = time_limit_seconds
        if rng is None:
            rng = random.Random(seed if seed is not None else settings.solver_random_seed)
        self.rng = rng
        self.service_minutes = service_minutes if service_minutes is not None else settings.service_time_minutes
        self.cancel_event = cancel_event

    def _context(
        self,
        orders: Sequence[Order],
        vehicles: Sequence[Vehicle],
        constraints: RouteConstraints,
        start_time: datetime | None,
    ) -> PlanningContext:
        earliest = min(order.pickup_window.start for order in orders)
        if start_time is None:
            start_time = earliest
        elif (start_time.tzinfo is None) != (earliest.tzinfo is None):
            raise InputValidationError(errors=["start time and time windows mix timezone-aware and naive datetimes"])
        return PlanningContext(
            orders=orders,
            vehicles=vehicles,
            constraints=constraints,
            start_time=start_time,
            cost_model=self.cost_model,
            eta_predictor=self.eta_predictor,
            service_minutes=self.service_minutes,
        )

    def solve_greedy(
        self,
        orders: Sequence[Order],
        vehicles: Sequence[Vehicle],
        drivers: Sequence[Driver],
        constraints: RouteConstraints | None = None,
        *,
        start_time: datetime | None = None,
    ) -> RouteOptimizationResult:
        """Construction only, without the improvement loop."""
        validate_inputs(orders, vehicles, drivers)
        if not orders:
            return RouteOptimizationResult()
        context = self._context(orders, vehicles, constraints or RouteConstraints(), start_time)
        return GreedyConstructor(context).build()

    def solve(
        self,
        orders: Sequence[Order],
        vehicles: Sequence[Vehicle],
        drivers: Sequence[Driver],
        constraints: RouteConstraints | None = None,
        *,
        start_time: datetime | None = None,
    ) -> RouteOptimizationResult:
        validate_inputs(orders, vehicles, drivers)
        if not orders:
            logger.info("No orders to plan; returning an empty solution")
            return RouteOptimizationResult(metadata={"status": "empty"})

        constraints = constraints or RouteConstraints()
        context = self._context(orders, vehicles, constraints, start_time)
        logger.info(
            "Solving VRPTW for %d orders, %d vehicles, %d drivers", len(orders), len(vehicles), len(drivers)
        )

        constructor = GreedyConstructor(context)
        greedy = constructor.build()

        improver = ALNSImprover(
            context,
            constructor,
            iterations=self.iterations,
            destroy_fraction=self.destroy_fraction,
            time_limit_seconds=self.time_limit_seconds,
            rng=self.rng,
            cancel_event=self.cancel_event,
        )
        best = improver.improve(greedy)

        polished = copy.deepcopy(best)
        for route in polished.routes.values():
            two_opt(route, context.route_cost)
        context.evaluate(polished)
        # 2-opt ranks by route cost only; keep it when the full objective agrees
        result = polished if polished.total_cost <= best.total_cost else best

        result.metadata.update(
            {
                "status": "complete",
                "greedy_cost": greedy.total_cost,
                "start_time": context.start_time.isoformat(),
                "driver_assignment": "not_assigned",
            }
        )
        logger.info(
            "VRPTW solved: %d/%d orders assigned, %d violations, cost %.2f (greedy %.2f)",
            len(result.assignments),
            len(orders),
            len(result.violations),
            result.total_cost,
            greedy.total_cost,
        )
        return result
