"""Tests for the static catalog."""

import pytest

from definitions import (
    BIOMES,
    BUILDINGS,
    GENERAL_NAMES,
    NATION_NAMES,
    TECH_TREE,
    UNITS,
    empty_counts,
    get_biome,
    get_tech,
    get_unit,
    is_tech_available,
    is_unit_unlocked,
)
from models import Resources, UnknownEntityError


class TestTables:
    def test_biomes(self):
        assert set(BIOMES) == {'plains', 'forest', 'desert', 'mountain', 'snow', 'ocean', 'city'}
        assert get_biome('mountain').defense == 50
        assert get_biome('mountain').move_cost == 4
        assert get_biome('ocean').move_cost == 99

    def test_units(self):
        assert len(UNITS) == 11
        soldier = get_unit('soldier')
        assert soldier.category == 'infantry'
        assert soldier.terrain_multiplier('forest') == 1.5
        assert soldier.terrain_multiplier('plains') == 1.0
        assert get_unit('jet').tech_required == 'adv_aviation'

    def test_building_resources_are_resource_fields(self):
        names = set(Resources().as_dict())
        for building in BUILDINGS.values():
            assert set(building.output) <= names
            assert set(building.upkeep) <= names

    def test_tech_prerequisites_exist(self):
        for tech in TECH_TREE.values():
            for prereq in tech.prerequisites:
                assert prereq in TECH_TREE

    def test_unlocking_tech_matches_unit_requirement(self):
        for tech in TECH_TREE.values():
            for unit_id in tech.effects.unlock_units:
                assert get_unit(unit_id).tech_required == tech.id

    def test_name_pools(self):
        assert len(NATION_NAMES) == 10
        assert len(GENERAL_NAMES) == 10

    def test_tables_are_read_only(self):
        with pytest.raises(TypeError):
            UNITS['soldier'] = None  # type: ignore[index]


class TestLookups:
    def test_unknown_ids(self):
        with pytest.raises(UnknownEntityError):
            get_unit('dragon')
        with pytest.raises(UnknownEntityError):
            get_tech('magic')

    def test_tech_availability(self):
        assert is_tech_available('basic_eco', [])
        assert not is_tech_available('basic_eco', ['basic_eco'])
        assert not is_tech_available('ind_automation', [])
        assert is_tech_available('ind_automation', ['basic_eco'])
        assert not is_tech_available('ai_research', ['basic_eco', 'ind_automation', 'missile_tech'])

    def test_unit_unlocks(self):
        assert is_unit_unlocked('soldier', [])
        assert not is_unit_unlocked('sam', ['basic_eco'])
        assert is_unit_unlocked('sam', ['missile_tech'])

    def test_empty_counts(self):
        counts = empty_counts(UNITS)
        assert set(counts) == set(UNITS)
        assert sum(counts.values()) == 0
