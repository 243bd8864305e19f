import pytest

from src.fleetopt.models.domain import Coordinate
from src.fleetopt.services.geospatial import distance_km, haversine_km, in_any_zone, point_in_polygon

MANCHESTER = (53.4808, -2.2426)
LIVERPOOL = (53.4084, -2.9916)


def test_haversine_known_distance():
    # Manchester to Liverpool is roughly 50 km as the crow flies
    assert haversine_km(*MANCHESTER, *LIVERPOOL) == pytest.approx(50.3, abs=0.5)


def test_haversine_zero_for_same_point():
    assert haversine_km(*MANCHESTER, *MANCHESTER) == 0.0


@pytest.mark.parametrize(
    "a, b",
    [
        (MANCHESTER, LIVERPOOL),
        ((0.0, 0.0), (0.0, 179.9)),
        ((-33.86, 151.21), (51.5, -0.12)),
        ((89.9, 10.0), (-89.9, -170.0)),
    ],
)
def test_haversine_is_symmetric(a, b):
    assert haversine_km(*a, *b) == haversine_km(*b, *a)


def test_distance_km_uses_coordinates():
    origin = Coordinate(lat=MANCHESTER[0], lng=MANCHESTER[1])
    destination = Coordinate(lat=LIVERPOOL[0], lng=LIVERPOOL[1])
    assert distance_km(origin, destination) == haversine_km(*MANCHESTER, *LIVERPOOL)


def test_point_in_polygon_and_zones():
    zone = [(53.0, -2.1), (53.0, -1.9), (53.2, -1.9), (53.2, -2.1)]

    assert point_in_polygon(53.1, -2.0, zone)
    assert not point_in_polygon(53.3, -2.0, zone)
    assert in_any_zone(Coordinate(lat=53.1, lng=-2.0), [zone])
    assert not in_any_zone(Coordinate(lat=53.1, lng=-2.0), [])
