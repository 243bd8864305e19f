"""Intra-route 2-opt improvement."""

from __future__ import annotations

from typing import Callable, List, Sequence

from .models import RoutePlan, Waypoint, WaypointType

IMPROVEMENT_EPSILON = 1e-9


def respects_precedence(waypoints: Sequence[Waypoint]) -> bool:
    """True when every delivery comes after the pickup of the same order."""
    picked: set[str] = set()
    for waypoint in waypoints:
        if waypoint.type is WaypointType.PICKUP:
            picked.add(waypoint.order_id)
        elif waypoint.order_id not in picked:
            return False
    return True


def reverse_segment(waypoints: Sequence[Waypoint], i: int, j: int) -> List[Waypoint]:
    """Return a copy of ``waypoints`` with positions i..j (inclusive) reversed."""
    return list(waypoints[:i]) + list(reversed(waypoints[i : j + 1])) + list(waypoints[j + 1 :])


def two_opt(route: RoutePlan, evaluate: Callable[[RoutePlan], float]) -> RoutePlan:
    """Improve ``route`` in place until a full pass finds no improving reversal.

    ``evaluate`` must reschedule the route it is given and return its cost.
    Reversals that would put a delivery before its pickup are skipped.
    """
    if len(route.waypoints) < 3:
        evaluate(route)
        route.renumber()
        return route

    best_cost = evaluate(route)
    count = len(route.waypoints)
    improved = True
    while improved:
        improved = False
        for i in range(count - 1):
            for j in range(i + 1, count):
                current = route.waypoints
                candidate = reverse_segment(current, i, j)
                if not respects_precedence(candidate):
                    continue
                route.waypoints = candidate
                cost = evaluate(route)
                if cost < best_cost - IMPROVEMENT_EPSILON:
                    best_cost = cost
                    improved = True
                else:
                    route.waypoints = current

    # leave the stop times consistent with the final order
    evaluate(route)
    route.renumber()
    return route
