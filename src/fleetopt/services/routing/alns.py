"""Destroy/repair improvement loop (adaptive large-neighbourhood search)."""

from __future__ import annotations

import copy
import logging
import math
import random
import threading
import time
from typing import Callable, Optional

from ...config import settings
from .construction import GreedyConstructor, sort_orders
from .context import PlanningContext
from .local_search import two_opt
from .models import RouteOptimizationResult

logger = logging.getLogger(__name__)

IMPROVEMENT_EPSILON = 1e-9


class ALNSImprover:
    """Random-removal destroy, greedy repair, random-walk acceptance.

    Every repaired solution becomes the next current solution; the cheapest one
    seen (starting with the initial solution) is returned. The loop ends after
    ``iterations`` rounds, when ``time_limit_seconds`` elapses, or when
    ``cancel_event`` is set, whichever happens first.
    """

    def __init__(
        self,
        context: PlanningContext,
        constructor: GreedyConstructor,
        *,
        iterations: int | None = None,
        destroy_fraction: float | None = None,
        time_limit_seconds: float | None = None,
        rng: random.Random | None = None,
        cancel_event: threading.Event | None = None,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.context = context
        self.constructor = constructor
        self.iterations = iterations if iterations is not None else settings.alns_iterations
        self.destroy_fraction = destroy_fraction if destroy_fraction is not None else settings.alns_destroy_fraction
        self.time_limit_seconds = (
            time_limit_seconds if time_limit_seconds is not None else settings.solver_time_limit_seconds
        )
        self.rng = rng or random.Random(settings.solver_random_seed)
        self.cancel_event = cancel_event
        self._clock = clock

    def destroy(self, solution: RouteOptimizationResult) -> list[str]:
        """Unassign floor(total orders x fraction) random orders, strip their stops and reschedule what is left."""
        count = math.floor(len(self.context.orders) * self.destroy_fraction)
        assigned = [order.order_id for order in self.context.orders if order.order_id in solution.assignments]
        removed = self.rng.sample(assigned, min(count, len(assigned)))
        if not removed:
            return []

        removed_set = set(removed)
        affected = {solution.assignments.pop(order_id) for order_id in removed}
        for vehicle_id in affected:
            route = solution.routes[vehicle_id]
            route.waypoints = [waypoint for waypoint in route.waypoints if waypoint.order_id not in removed_set]
            if route.waypoints:
                route.renumber()
                self.context.schedule_route(route)
            else:
                del solution.routes[vehicle_id]
        return removed

    def repair(self, solution: RouteOptimizationResult) -> set[str]:
        """Reinsert every unassigned order; returns the vehicle ids whose routes grew."""
        touched: set[str] = set()
        pending = [order for order in self.context.orders if order.order_id not in solution.assignments]
        for order in sort_orders(pending):
            if self.constructor.place(solution, order):
                touched.add(solution.assignments[order.order_id])
        for vehicle_id in touched:
            two_opt(solution.routes[vehicle_id], self.context.route_cost)
        return touched

    def _stop_reason(self, started: float) -> Optional[str]:
        if self.cancel_event is not None and self.cancel_event.is_set():
            return "cancelled"
        if self.time_limit_seconds and self._clock() - started >= self.time_limit_seconds:
            return "time_limit"
        return None

    def improve(self, initial: RouteOptimizationResult) -> RouteOptimizationResult:
        context = self.context
        best = copy.deepcopy(initial)
        best_cost = context.solution_cost(best)
        current = copy.deepcopy(initial)
        started = self._clock()
        completed = 0
        improvements = 0
        stop_reason = "iterations"

        for iteration in range(self.iterations):
            reason = self._stop_reason(started)
            if reason is not None:
                stop_reason = reason
                logger.warning("ALNS stopped after %d iterations (%s)", completed, reason)
                break

            candidate = copy.deepcopy(current)
            self.destroy(candidate)
            self.repair(candidate)
            context.evaluate(candidate)

            if candidate.total_cost < best_cost - IMPROVEMENT_EPSILON:
                logger.debug(
                    "Iteration %d improved cost %.2f -> %.2f", iteration + 1, best_cost, candidate.total_cost
                )
                best = copy.deepcopy(candidate)
                best_cost = candidate.total_cost
                improvements += 1

            current = candidate
            completed = iteration + 1

        best.iterations = completed
        best.metadata.update(
            {
                "alns_iterations": completed,
                "alns_improvements": improvements,
                "alns_stop_reason": stop_reason,
                "alns_elapsed_seconds": round(self._clock() - started, 3),
            }
        )
        return best
