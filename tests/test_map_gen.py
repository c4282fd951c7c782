"""
Test suite for world map generation: map shape, biome bands, tile bonuses
and the capital/territory helpers used when nations are placed.
"""

import math
import random
from unittest.mock import patch

import numpy as np
import pytest

from conftest import FixedRandom
from definitions import BIOMES
from map_gen import (
    annex_around,
    classify_biome,
    convert_to_capital,
    generate_hex_map,
    get_map_stats,
    make_tile,
    noise_field,
    tile_bonus,
)
from models import HexCoordinate


class TestGenerateHexMap:

    def test_radius_eight_has_217_tiles(self):
        map_data = generate_hex_map(8, random.Random(1))
        assert len(map_data) == 217
        for tid, tile in map_data.items():
            assert tid == f"{tile.coords.q},{tile.coords.r}"
            assert tile.owner_id is None
            assert tile.biome in BIOMES

    def test_default_radius_comes_from_config(self):
        assert len(generate_hex_map(rng=random.Random(1))) == 217
        with patch('map_gen.get_config', return_value={'map_radius': 2}):
            assert len(generate_hex_map(rng=random.Random(1))) == 19

    def test_center_is_plains(self):
        map_data = generate_hex_map(8, random.Random(5))
        for q in (-1, 0, 1):
            for r in (-1, 0, 1):
                assert map_data[f"{q},{r}"].biome == 'plains'

    def test_same_seed_same_map(self):
        assert generate_hex_map(6, random.Random(99)) == generate_hex_map(6, random.Random(99))

    def test_bonuses_follow_biome(self):
        for tile in generate_hex_map(8, random.Random(3)).values():
            assert tile.defense_bonus == BIOMES[tile.biome].defense
            assert tile.movement_cost == BIOMES[tile.biome].move_cost
            assert tile.resource_bonus == tile_bonus(tile.biome)

    def test_map_stats(self):
        map_data = generate_hex_map(4, random.Random(2))
        stats = get_map_stats(map_data)
        assert sum(stats.values()) == len(map_data) == 61
        assert stats['plains'] >= 9


class TestNoise:

    def test_noise_formula(self):
        coords = [(0, 0), (2, 0), (2, 4)]
        values = noise_field(coords, FixedRandom(0.5))
        assert values[0] == pytest.approx(0.1)
        assert values[1] == pytest.approx(math.sin(1.0) + 0.1)
        assert values[2] == pytest.approx(math.sin(1.0) * math.cos(2.0) + 0.1)

    def test_empty(self):
        assert noise_field([], random.Random()).shape == (0,)

    def test_jitter_bounds(self):
        coords = [(q, r) for q in range(-3, 4) for r in range(-3, 4)]
        base = np.array([math.sin(q * 0.5) * math.cos(r * 0.5) for q, r in coords])
        offsets = noise_field(coords, random.Random(11)) - base
        assert offsets.min() >= 0
        assert offsets.max() < 0.2

    @pytest.mark.parametrize("noise,biome", [
        (0.7, 'mountain'),
        (0.6, 'forest'),
        (0.31, 'forest'),
        (0.3, 'plains'),
        (0.0, 'plains'),
        (-0.3, 'plains'),
        (-0.4, 'ocean'),
        (-0.6, 'ocean'),
        (-0.7, 'desert'),
    ])
    def test_classify(self, noise, biome):
        assert classify_biome(noise) == biome


class TestTiles:

    def test_make_tile(self):
        tile = make_tile(2, -1, 'mountain')
        assert tile.id == '2,-1'
        assert tile.name == 'Province 2,-1'
        assert tile.defense_bonus == 50
        assert tile.movement_cost == 4
        assert tile.resource_bonus.money == 5

    def test_tile_bonus(self):
        assert tile_bonus('plains').food == 10
        assert tile_bonus('desert').oil == 20
        assert tile_bonus('city').money == 50
        assert tile_bonus('forest').food == 0

    def test_convert_to_capital(self):
        tile = make_tile(0, 0, 'desert')
        convert_to_capital(tile, 'c_4', 'Atlantis')
        assert tile.owner_id == 'c_4'
        assert tile.biome == 'city'
        assert tile.name == 'Atlantis Capital'
        assert tile.defense_bonus == 50
        assert tile.movement_cost == 1
        assert tile.resource_bonus.money == 50
        assert tile.resource_bonus.oil == 0

    def test_annex_around_skips_owned(self):
        map_data = generate_hex_map(3, random.Random(0))
        map_data['1,0'].owner_id = 'c_9'
        annexed = annex_around(map_data, HexCoordinate(0, 0), 'c_1', radius=1)
        assert len(annexed) == 6
        assert '1,0' not in annexed
        assert map_data['1,0'].owner_id == 'c_9'
        assert map_data['0,1'].owner_id == 'c_1'
        assert map_data['2,0'].owner_id is None
