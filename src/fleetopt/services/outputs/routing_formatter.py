"""Serializers for routing outputs."""

from __future__ import annotations

import csv
import io
from datetime import datetime
from typing import Optional

from ...models.domain import Coordinate, TimeWindow
from ..routing.models import Break, RouteOptimizationResult, RoutePlan, Waypoint


def _iso(moment: Optional[datetime]) -> Optional[str]:
    return moment.isoformat() if moment else None


def _coordinate(location: Coordinate) -> dict:
    return {"lat": location.lat, "lng": location.lng}


def _window(window: TimeWindow) -> dict:
    return {"start": window.start.isoformat(), "end": window.end.isoformat()}


def _waypoint(waypoint: Waypoint) -> dict:
    return {
        "sequence": waypoint.sequence,
        "order_id": waypoint.order_id,
        "location": _coordinate(waypoint.location),
        "address": waypoint.address,
        "type": waypoint.type.value,
        "time_window": _window(waypoint.time_window),
        "service_minutes": waypoint.service_minutes,
        "estimated_arrival": _iso(waypoint.estimated_arrival),
        "estimated_departure": _iso(waypoint.estimated_departure),
    }


def _break(entry: Break) -> dict:
    return {
        "location": _coordinate(entry.location),
        "start_time": entry.start_time.isoformat(),
        "end_time": entry.end_time.isoformat(),
        "duration_minutes": entry.duration_minutes,
        "type": entry.type.value,
        "name": entry.name,
    }


def route_plan_to_json(plan: RoutePlan) -> dict:
    return {
        "vehicle_id": plan.vehicle_id,
        "driver_id": plan.driver_id,
        "total_distance_km": plan.total_distance_km,
        "total_duration_min": plan.total_duration_min,
        "driving_minutes": plan.driving_minutes,
        "waypoints": [_waypoint(waypoint) for waypoint in plan.waypoints],
        "breaks": [_break(entry) for entry in plan.breaks],
        "fuel_stops": [
            {
                "location": _coordinate(stop.location),
                "name": stop.name,
                "estimated_arrival": stop.estimated_arrival.isoformat(),
                "estimated_duration_minutes": stop.estimated_duration_minutes,
                "fuel_required_litres": stop.fuel_required_litres,
            }
            for stop in plan.fuel_stops
        ],
    }


def routing_result_to_json(result: RouteOptimizationResult) -> dict:
    return {
        "assignments": dict(result.assignments),
        "routes": {vehicle_id: route_plan_to_json(plan) for vehicle_id, plan in result.routes.items()},
        "total_distance_km": result.total_distance_km,
        "total_duration_min": result.total_duration_min,
        "total_cost": result.total_cost,
        "route_cost": result.route_cost,
        "violations": [
            {
                "type": violation.type.value,
                "severity": violation.severity.value,
                "message": violation.message,
                "order_id": violation.order_id,
                "vehicle_id": violation.vehicle_id,
            }
            for violation in result.violations
        ],
        "iterations": result.iterations,
        "metadata": result.metadata,
    }


def routing_result_to_csv(result: RouteOptimizationResult) -> str:
    buffer = io.StringIO()
    fieldnames = [
        "vehicle_id",
        "sequence",
        "order_id",
        "type",
        "address",
        "lat",
        "lng",
        "estimated_arrival",
        "estimated_departure",
        "total_distance_km",
        "total_duration_min",
    ]
    writer = csv.DictWriter(buffer, fieldnames=fieldnames)
    writer.writeheader()
    for vehicle_id, plan in result.routes.items():
        for waypoint in plan.waypoints:
            writer.writerow(
                {
                    "vehicle_id": vehicle_id,
                    "sequence": waypoint.sequence,
                    "order_id": waypoint.order_id,
                    "type": waypoint.type.value,
                    "address": waypoint.address,
                    "lat": waypoint.location.lat,
                    "lng": waypoint.location.lng,
                    "estimated_arrival": _iso(waypoint.estimated_arrival),
                    "estimated_departure": _iso(waypoint.estimated_departure),
                    "total_distance_km": plan.total_distance_km,
                    "total_duration_min": plan.total_duration_min,
                }
            )
    return buffer.getvalue()
