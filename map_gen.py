"""
Map generation for the world hex map.

Builds a hexagon of provinces in axial coordinates, assigns each a biome from
a seeded pseudo-noise field, and provides the capital/territory helpers used
when nations are placed.
"""

import random
from typing import Dict, List, Optional, Tuple

import numpy as np

from config import get_config
from definitions import get_biome
from hexgrid import hexagon, tile_id
from models import HexCoordinate, MapTile, Resources

CAPITAL_DEFENSE_BONUS = 50

# Biome bands over the noise value, checked in order
BIOME_BANDS: List[Tuple[str, float, str]] = [
    ('>', 0.6, 'mountain'),
    ('>', 0.3, 'forest'),
    ('<', -0.6, 'desert'),
    ('<', -0.3, 'ocean'),  # Small lakes
]


def noise_field(coords: List[Tuple[int, int]], rng: random.Random, jitter: float = 0.2) -> np.ndarray:
    """
    Evaluate sin(q/2)·cos(r/2) + uniform(0, jitter) for every coordinate.

    Args:
        coords: Axial (q, r) pairs
        rng: Random source for the jitter term (one draw per coordinate, in order)
        jitter: Upper bound of the jitter term

    Returns:
        Array of noise values aligned with coords
    """
    if not coords:
        return np.zeros(0)
    axial = np.array(coords, dtype=float)
    offsets = np.array([rng.random() * jitter for _ in coords])
    return np.sin(axial[:, 0] * 0.5) * np.cos(axial[:, 1] * 0.5) + offsets


def classify_biome(noise: float) -> str:
    """Threshold a noise value into a biome band."""
    for op, threshold, biome in BIOME_BANDS:
        if (op == '>' and noise > threshold) or (op == '<' and noise < threshold):
            return biome
    return 'plains'


def tile_bonus(biome: str) -> Resources:
    """Per-turn resources a province pays to its owner."""
    return Resources(
        food=10 if biome == 'plains' else 0,
        oil=20 if biome == 'desert' else 0,
        money=50 if biome == 'city' else 5,
    )


def make_tile(q: int, r: int, biome: str, name: Optional[str] = None) -> MapTile:
    """Create an unowned province whose bonuses follow its biome."""
    biome_def = get_biome(biome)
    tid = tile_id(q, r)
    return MapTile(
        id=tid,
        coords=HexCoordinate(q, r),
        biome=biome,
        name=name or f"Province {tid}",
        resource_bonus=tile_bonus(biome),
        defense_bonus=biome_def.defense,
        movement_cost=biome_def.move_cost,
    )


def generate_hex_map(radius: Optional[int] = None, rng: Optional[random.Random] = None) -> Dict[str, MapTile]:
    """
    Generate a hexagon-shaped map of the given radius.

    Tiles within one step of the origin (|q| < 2 and |r| < 2) are always plains.

    Args:
        radius: Map radius in hexes (default: map_radius from config)
        rng: Random source for biome jitter (default: unseeded)

    Returns:
        Dictionary mapping tile id "q,r" to MapTile
    """
    if radius is None:
        radius = get_config()['map_radius']
    rng = rng or random.Random()
    coords = list(hexagon(radius))
    values = noise_field(coords, rng)

    map_data: Dict[str, MapTile] = {}
    for (q, r), value in zip(coords, values):
        biome = classify_biome(float(value))
        # Force center to be plains
        if abs(q) < 2 and abs(r) < 2:
            biome = 'plains'
        tile = make_tile(q, r, biome)
        map_data[tile.id] = tile
    return map_data


def convert_to_capital(tile: MapTile, nation_id: str, nation_name: str) -> None:
    """Turn a province into a nation's capital city."""
    city = get_biome('city')
    tile.owner_id = nation_id
    tile.biome = 'city'
    tile.name = f"{nation_name} Capital"
    tile.defense_bonus = CAPITAL_DEFENSE_BONUS
    tile.movement_cost = city.move_cost
    tile.resource_bonus = tile_bonus('city')


def annex_around(map_data: Dict[str, MapTile], center: HexCoordinate, nation_id: str, radius: int = 2) -> List[str]:
    """
    Give every unowned tile within radius of center to a nation.

    Returns:
        Ids of the annexed tiles
    """
    annexed = []
    for tile in map_data.values():
        if tile.owner_id is None and tile.coords.distance_to(center) <= radius:
            tile.owner_id = nation_id
            annexed.append(tile.id)
    return annexed


def get_map_stats(map_data: Dict[str, MapTile]) -> Dict[str, int]:
    """Count tiles per biome."""
    counts: Dict[str, int] = {}
    for tile in map_data.values():
        counts[tile.biome] = counts.get(tile.biome, 0) + 1
    return counts
