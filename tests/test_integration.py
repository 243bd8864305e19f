from pathlib import Path

import pytest
from fastapi.testclient import TestClient

from src.fleetopt.main import create_app
from src.fleetopt.services.routing.eta import get_eta_predictor


def _order(order_id: str, weight: float, lat: float = 53.0) -> dict:
    return {
        "order_id": order_id,
        "consignor": {"line1": f"{order_id} pickup", "location": {"lat": lat, "lng": -2.0}},
        "consignee": {"line1": f"{order_id} delivery", "location": {"lat": lat + 0.2, "lng": -2.0}},
        "pickup_window": {"start": "2025-03-03T08:00:00", "end": "2025-03-03T12:00:00"},
        "delivery_window": {"start": "2025-03-03T08:00:00", "end": "2025-03-03T20:00:00"},
        "load": {"weight": weight},
    }


def _vehicle(vehicle_id: str, lat: float = 53.0) -> dict:
    return {
        "vehicle_id": vehicle_id,
        "registration": f"REG-{vehicle_id}",
        "max_weight": 1000.0,
        "max_height": 4.0,
        "max_length": 12.0,
        "max_width": 2.5,
        "location": {"lat": lat, "lng": -2.0},
        "fuel_type": "electric",
    }


@pytest.fixture
def api_client(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> TestClient:
    from src.fleetopt.persistence.filesystem import FileStorage
    from src.fleetopt.services.routing import service as routing_service

    monkeypatch.setattr(routing_service, "FileStorage", lambda: FileStorage(root=tmp_path))
    get_eta_predictor().clear()
    yield TestClient(create_app())
    get_eta_predictor().clear()


def test_health_endpoints(api_client: TestClient):
    assert api_client.get("/api/health").json() == {"status": "ok"}
    solver = api_client.get("/api/health/solver").json()
    assert solver["service"] == "solver"
    assert "alns_iterations" in solver
    assert api_client.get("/").json()["status"] == "running"


def test_optimize_endpoint(api_client: TestClient, tmp_path: Path):
    payload = {
        "orders": [_order("O1", 400.0), _order("O2", 400.0, lat=53.1), _order("O3", 900.0, lat=53.05)],
        "vehicles": [_vehicle("V1"), _vehicle("V2", lat=53.1)],
        "drivers": [{"driver_id": "D1", "name": "Alex", "location": {"lat": 53.0, "lng": -2.0}}],
        "options": {"seed": 11, "iterations": 10},
        "persist": True,
    }

    response = api_client.post("/api/routes/optimize", json=payload)

    assert response.status_code == 200
    body = response.json()
    assert set(body["assignments"]) | {v["order_id"] for v in body["violations"] if v["type"] == "unassignable"} == {
        "O1",
        "O2",
        "O3",
    }
    for route in body["routes"].values():
        assert route["driver_id"] == ""
        assert [waypoint["sequence"] for waypoint in route["waypoints"]] == list(range(1, len(route["waypoints"]) + 1))
    assert body["total_cost"] <= body["metadata"]["greedy_cost"]
    assert (tmp_path / "outputs").exists()


def test_optimize_endpoint_rejects_invalid_records(api_client: TestClient):
    payload = {"orders": [_order("O1", 400.0), _order("O1", 300.0)], "vehicles": [_vehicle("V1")]}

    response = api_client.post("/api/routes/optimize", json=payload)

    assert response.status_code == 400
    assert "duplicate order id 'O1'" in response.json()["detail"]


def test_optimize_endpoint_rejects_malformed_body(api_client: TestClient):
    response = api_client.post("/api/routes/optimize", json={"orders": [{"order_id": "O1"}]})
    assert response.status_code == 422


def test_optimize_endpoint_with_no_orders(api_client: TestClient):
    response = api_client.post("/api/routes/optimize", json={"orders": [], "vehicles": [_vehicle("V1")]})

    assert response.status_code == 200
    body = response.json()
    assert body["assignments"] == {}
    assert body["metadata"]["status"] == "empty"


def test_eta_endpoints(api_client: TestClient):
    leg = {"origin": {"lat": 53.0, "lng": -2.0}, "destination": {"lat": 53.2, "lng": -2.0}}

    first = api_client.post("/api/eta/predict", json={**leg, "time_of_day": "2025-03-03T08:15:00"})
    recorded = api_client.post("/api/eta/observations", json={**leg, "actual_minutes": 20.0})
    second = api_client.post("/api/eta/predict", json={**leg, "time_of_day": "2025-03-03T08:15:00"})

    assert first.status_code == 200
    assert recorded.status_code == 201
    assert recorded.json()["historical_samples"] == 1
    assert second.json()["minutes"] == pytest.approx((first.json()["minutes"] + 20.0) / 2)


def test_eta_observation_rejects_negative_minutes(api_client: TestClient):
    leg = {"origin": {"lat": 53.0, "lng": -2.0}, "destination": {"lat": 53.2, "lng": -2.0}}
    response = api_client.post("/api/eta/observations", json={**leg, "actual_minutes": -3})
    assert response.status_code == 422


def test_eta_prediction_rejects_out_of_range_coordinates(api_client: TestClient):
    payload = {
        "origin": {"lat": 95.0, "lng": -2.0},
        "destination": {"lat": 53.2, "lng": -2.0},
        "time_of_day": "2025-03-03T08:15:00",
    }

    response = api_client.post("/api/eta/predict", json=payload)

    assert response.status_code == 400
    assert "origin has invalid coordinates" in response.json()["detail"]
