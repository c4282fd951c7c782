"""Tests for the data model layer."""

import pytest

from models import (
    Army, GameMessage, GeneralStatus, HexCoordinate, MessageCategory, Nation,
    RelationStatus, Resources, UnknownEntityError,
)


class TestHexCoordinate:
    def test_cube_coordinate(self):
        c = HexCoordinate(3, -5)
        assert c.s == 2
        assert c.q + c.r + c.s == 0

    def test_tile_id(self):
        assert HexCoordinate(-1, 4).tile_id == "-1,4"

    def test_frozen(self):
        c = HexCoordinate(0, 0)
        with pytest.raises(AttributeError):
            c.q = 1  # type: ignore[misc]

    def test_hashable(self):
        assert len({HexCoordinate(1, 2), HexCoordinate(1, 2), HexCoordinate(2, 1)}) == 2


class TestResources:
    def test_add(self):
        stock = Resources(money=100, food=10)
        stock.add(Resources(money=-150, oil=5))
        assert stock == Resources(money=-50, food=10, oil=5)

    def test_as_dict(self):
        assert set(Resources().as_dict()) == {
            'money', 'food', 'oil', 'energy', 'population', 'research_points'}


class TestArmy:
    def test_total_units(self):
        army = Army(id='army_1', owner_id='c_0', general_id='gen_1', location='0,0',
                    units={'soldier': 20, 'tank': 3}, movement_points=2, max_movement=2)
        assert army.total_units() == 23


class TestNation:
    def test_defaults(self):
        nation = Nation(id='c_0', name='Test')
        assert nation.armies == []
        assert nation.current_research is None
        assert not nation.is_player

    def test_has_tech(self):
        nation = Nation(id='c_0', name='Test', researched_techs=['basic_eco'])
        assert nation.has_tech('basic_eco')
        assert not nation.has_tech('nuclear_tech')

    def test_remove_army(self):
        nation = Nation(id='c_0', name='Test', armies=['army_1', 'army_2'])
        nation.remove_army('army_1')
        assert nation.armies == ['army_2']


def test_enum_values():
    assert GeneralStatus.DEAD.value == "dead"
    assert RelationStatus.WAR.value == "war"
    assert MessageCategory.SPY.value == "spy"


def test_message_defaults():
    message = GameMessage(id='msg_1', turn=1, title='Hello', body='World')
    assert message.category == MessageCategory.INFO
    assert not message.read


def test_unknown_entity_is_key_error():
    with pytest.raises(KeyError):
        raise UnknownEntityError("Unknown nation: c_99")
