"""Routing orchestration service."""

from __future__ import annotations

import logging

from ...exceptions import InputValidationError
from ...models.domain import (
    Address,
    BreakRule,
    Coordinate,
    Driver,
    LoadDetails,
    Order,
    RouteConstraints,
    TimeWindow,
    Vehicle,
    VehicleRestriction,
)
from ...persistence.filesystem import FileStorage
from ...schemas.eta import (
    ETAObservationRequest,
    ETAObservationResponse,
    ETAPredictionRequest,
    ETAPredictionResponse,
)
from ...schemas.routing import (
    AddressModel,
    CoordinateModel,
    DriverModel,
    OrderModel,
    RoutingConstraints,
    RoutingRequest,
    RoutingResponse,
    TimeWindowModel,
    VehicleModel,
)
from ..outputs.routing_formatter import routing_result_to_json
from .eta import get_eta_predictor
from .models import RouteOptimizationResult
from .solver import VRPTWSolver, check_coordinate

logger = logging.getLogger(__name__)


def _coordinate(model: CoordinateModel) -> Coordinate:
    return Coordinate(lat=model.lat, lng=model.lng)


def _address(model: AddressModel) -> Address:
    return Address(
        line1=model.line1,
        location=_coordinate(model.location),
        city=model.city,
        postcode=model.postcode,
    )


def _window(model: TimeWindowModel) -> TimeWindow:
    return TimeWindow(start=model.start, end=model.end)


def _order(model: OrderModel) -> Order:
    load = model.load
    return Order(
        order_id=model.order_id,
        consignor=_address(model.consignor),
        consignee=_address(model.consignee),
        pickup_window=_window(model.pickup_window),
        delivery_window=_window(model.delivery_window),
        load=LoadDetails(
            weight=load.weight,
            volume=load.volume,
            height=load.height,
            length=load.length,
            width=load.width,
            hazmat_classes=tuple(load.hazmat_classes),
        ),
        priority=model.priority,
    )


def _vehicle(model: VehicleModel) -> Vehicle:
    return Vehicle(
        vehicle_id=model.vehicle_id,
        registration=model.registration,
        max_weight=model.max_weight,
        max_height=model.max_height,
        max_length=model.max_length,
        max_width=model.max_width,
        location=_coordinate(model.location),
        status=model.status,
        hazmat_classes=frozenset(model.hazmat_classes),
        fuel_type=model.fuel_type,
    )


def _driver(model: DriverModel) -> Driver:
    driver = Driver(
        driver_id=model.driver_id,
        name=model.name,
        location=_coordinate(model.location),
        status=model.status,
        licence_expiry=model.licence_expiry,
        medical_expiry=model.medical_expiry,
        current_driving_hours=model.current_driving_hours,
    )
    if model.max_driving_hours is not None:
        driver.max_driving_hours = model.max_driving_hours
    return driver


def _build_constraints(model: RoutingConstraints | None) -> RouteConstraints:
    base = RouteConstraints()
    if model is None:
        return base
    return RouteConstraints(
        max_driving_hours=model.max_driving_hours
        if model.max_driving_hours is not None
        else base.max_driving_hours,
        break_rules=[
            BreakRule(type=rule.type, duration_minutes=rule.duration_minutes, frequency_hours=rule.frequency_hours)
            for rule in model.break_rules
        ],
        vehicle_restrictions=[
            VehicleRestriction(
                vehicle_id=item.vehicle_id,
                max_weight=item.max_weight,
                max_height=item.max_height,
                hazmat_classes=frozenset(item.hazmat_classes) if item.hazmat_classes is not None else None,
                lez_compliant=item.lez_compliant,
            )
            for item in model.vehicle_restrictions
        ],
        time_windows=model.time_windows,
        adr_restrictions=model.adr_restrictions,
        lez_compliance=model.lez_compliance,
        low_emission_zones=[[(point.lat, point.lng) for point in zone] for zone in model.low_emission_zones],
    )


def _persist(result: RouteOptimizationResult) -> None:
    storage = FileStorage()
    outputs = storage.write_result(storage.make_run_directory(prefix="solve"), result)
    result.metadata["output_dir"] = str(outputs.directory)
    logger.info("Persisted solve outputs to %s", outputs.directory)


def optimize_routes(payload: RoutingRequest) -> RoutingResponse:
    options = payload.options
    solver = VRPTWSolver(
        iterations=options.iterations if options else None,
        time_limit_seconds=options.time_limit_seconds if options else None,
        seed=options.seed if options else None,
    )
    result = solver.solve(
        [_order(model) for model in payload.orders],
        [_vehicle(model) for model in payload.vehicles],
        [_driver(model) for model in payload.drivers],
        _build_constraints(payload.constraints),
        start_time=options.start_time if options else None,
    )
    if payload.run_label:
        result.metadata["run_label"] = payload.run_label
    if payload.persist:
        _persist(result)
    return RoutingResponse.model_validate(routing_result_to_json(result))


def _leg(origin_model: CoordinateModel, destination_model: CoordinateModel) -> tuple[Coordinate, Coordinate]:
    origin, destination = _coordinate(origin_model), _coordinate(destination_model)
    errors: list[str] = []
    check_coordinate("origin", origin, errors)
    check_coordinate("destination", destination, errors)
    if errors:
        raise InputValidationError(errors=errors)
    return origin, destination


def predict_travel_time(payload: ETAPredictionRequest) -> ETAPredictionResponse:
    predictor = get_eta_predictor()
    origin, destination = _leg(payload.origin, payload.destination)
    minutes = predictor.predict_eta(origin, destination, payload.vehicle_type, payload.time_of_day)
    return ETAPredictionResponse(
        minutes=minutes,
        route_key=predictor.route_key(origin, destination),
        historical_samples=len(predictor.history(origin, destination)),
    )


def record_travel_time(payload: ETAObservationRequest) -> ETAObservationResponse:
    predictor = get_eta_predictor()
    origin, destination = _leg(payload.origin, payload.destination)
    predictor.update_historical_data(origin, destination, payload.actual_minutes)
    return ETAObservationResponse(
        route_key=predictor.route_key(origin, destination),
        historical_samples=len(predictor.history(origin, destination)),
    )
