"""
Tests for hex geometry: pixel projection, distance, neighbours and map shapes.
"""

import math

import pytest

from hexgrid import (
    axial_distance,
    axial_to_pixel,
    get_hex_neighbors,
    hex_distance,
    hexagon,
    is_adjacent,
    parse_tile_id,
    tile_id,
)
from models import HexCoordinate


class TestAxialToPixel:

    def test_origin(self) -> None:
        assert axial_to_pixel(0, 0) == (0.0, 0.0)

    def test_unit_steps(self) -> None:
        x, y = axial_to_pixel(1, 0, size=1)
        assert x == pytest.approx(math.sqrt(3))
        assert y == pytest.approx(0)

        x, y = axial_to_pixel(0, 1, size=1)
        assert x == pytest.approx(math.sqrt(3) / 2)
        assert y == pytest.approx(1.5)

    def test_scales_with_size(self) -> None:
        x1, y1 = axial_to_pixel(2, -3, size=1)
        x40, y40 = axial_to_pixel(2, -3, size=40)
        assert x40 == pytest.approx(40 * x1)
        assert y40 == pytest.approx(40 * y1)


class TestDistance:

    def test_same_hex(self) -> None:
        a = HexCoordinate(3, -1)
        assert hex_distance(a, a) == 0

    def test_symmetric(self) -> None:
        a, b = HexCoordinate(-2, 5), HexCoordinate(4, -1)
        assert hex_distance(a, b) == hex_distance(b, a)

    def test_ring_one_neighbours(self) -> None:
        center = HexCoordinate(2, -3)
        for q, r in get_hex_neighbors(center.q, center.r):
            assert hex_distance(center, HexCoordinate(q, r)) == 1

    def test_known_distances(self) -> None:
        assert axial_distance(0, 0, 3, 0) == 3
        assert axial_distance(0, 0, 2, 2) == 4
        assert axial_distance(0, 0, 3, -3) == 3
        assert axial_distance(-1, 2, 1, -2) == 4

    def test_coordinate_helper_matches(self) -> None:
        a, b = HexCoordinate(1, 1), HexCoordinate(-2, 0)
        assert a.distance_to(b) == axial_distance(1, 1, -2, 0)


def test_get_hex_neighbors():
    neighbors = get_hex_neighbors(5, 5)
    expected = [(6, 5), (6, 4), (5, 4), (4, 5), (4, 6), (5, 6)]
    assert set(neighbors) == set(expected)


def test_is_adjacent():
    assert is_adjacent((0, 0), (1, -1))
    assert not is_adjacent((0, 0), (0, 0))
    assert not is_adjacent((0, 0), (1, 1))


@pytest.mark.parametrize("radius,count", [(0, 1), (1, 7), (2, 19), (8, 217)])
def test_hexagon_size(radius, count):
    coords = list(hexagon(radius))
    assert len(coords) == count
    assert len(set(coords)) == count
    for q, r in coords:
        assert axial_distance(0, 0, q, r) <= radius


def test_tile_id_round_trip():
    assert tile_id(-3, 4) == "-3,4"
    assert parse_tile_id("-3,4") == (-3, 4)
    with pytest.raises(ValueError):
        parse_tile_id("nonsense")


def test_cube_invariant():
    c = HexCoordinate(4, -7)
    assert c.q + c.r + c.s == 0
    assert c.tile_id == "4,-7"
