"""
Hex geometry for the world map.

Axial coordinates (q, r) with the derived cube coordinate s = -q - r.
Pointy-top layout: pixel x grows with q, pixel y grows with r.
"""

import math
from typing import Iterator, List, Tuple

# 6 directions: (1,0), (1,-1), (0,-1), (-1,0), (-1,1), (0,1)
HEX_DIRECTIONS: List[Tuple[int, int]] = [(1, 0), (1, -1), (0, -1), (-1, 0), (-1, 1), (0, 1)]


def axial_to_pixel(q: int, r: int, size: float = 40) -> Tuple[float, float]:
    """
    Convert axial coordinates to the pixel centre of a hex.

    Args:
        q, r: Axial coordinates
        size: Hex radius in pixels

    Returns:
        (x, y) pixel position
    """
    x = size * (math.sqrt(3) * q + math.sqrt(3) / 2 * r)
    y = size * (3 / 2 * r)
    return x, y


def hex_distance(a, b) -> int:
    """
    Number of steps between two hexes.

    Both arguments need q, r and s attributes satisfying q + r + s == 0.
    """
    return (abs(a.q - b.q) + abs(a.r - b.r) + abs(a.s - b.s)) // 2


def axial_distance(q1: int, r1: int, q2: int, r2: int) -> int:
    """Distance between two hexes given as bare axial coordinates."""
    s1, s2 = -q1 - r1, -q2 - r2
    return (abs(q1 - q2) + abs(r1 - r2) + abs(s1 - s2)) // 2


def get_hex_neighbors(q: int, r: int) -> List[Tuple[int, int]]:
    """Get the 6 neighbouring axial coordinates of (q, r)."""
    return [(q + dq, r + dr) for dq, dr in HEX_DIRECTIONS]


def is_adjacent(current: Tuple[int, int], target: Tuple[int, int]) -> bool:
    """Check if target hex is adjacent to current hex in axial coordinates."""
    return axial_distance(current[0], current[1], target[0], target[1]) == 1


def hexagon(radius: int) -> Iterator[Tuple[int, int]]:
    """Yield every axial coordinate of a hexagon-shaped map centred on the origin."""
    for q in range(-radius, radius + 1):
        r1 = max(-radius, -q - radius)
        r2 = min(radius, -q + radius)
        for r in range(r1, r2 + 1):
            yield q, r


def tile_id(q: int, r: int) -> str:
    """Tile ids are the axial pair written as "q,r"."""
    return f"{q},{r}"


def parse_tile_id(value: str) -> Tuple[int, int]:
    """Inverse of tile_id. Raises ValueError on malformed ids."""
    q_text, r_text = value.split(',')
    return int(q_text), int(r_text)
