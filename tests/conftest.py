"""Shared test fixtures and helpers."""

import random

import pytest

from hexgrid import hexagon
from map_gen import make_tile
from models import Army, General, GeneralStatus, Nation, Resources
from state import GameState, initialize_game


class FixedRandom(random.Random):
    """Random source whose rolls are pinned, for exact combat and espionage outcomes."""

    def __init__(self, value=0.5):
        super().__init__(0)
        self.value = value

    def random(self):
        return self.value


# --- Fixtures ---


@pytest.fixture
def game():
    """Fresh generated world (seed=42)."""
    return initialize_game(seed=42)


@pytest.fixture
def rng():
    """Deterministic RNG seeded at 42."""
    return random.Random(42)


@pytest.fixture
def scenario():
    """Small hand-built world, see make_scenario_state."""
    return make_scenario_state()


# --- Helper functions ---


def make_nation(nation_id, money=100000, population=1000000, **kwargs):
    """Nation with an empty economy unless told otherwise."""
    return Nation(
        id=nation_id,
        name=kwargs.pop('name', nation_id.upper()),
        resources=Resources(money=money, population=population),
        **kwargs,
    )


def make_scenario_state():
    """
    Radius-2 plains world with two nations.

    c_0 (player) owns "0,0", has 50 soldiers and 10 tanks in reserve and an
    available general gen_x (logistics 3, so 2 movement points).
    c_1 owns "2,0" and "2,-1" and has an available general gen_y.
    Every other tile is unowned.
    """
    state = GameState(player_nation_id='c_0')
    for q, r in hexagon(2):
        tile = make_tile(q, r, 'plains')
        state.map_data[tile.id] = tile

    c0 = make_nation('c_0', is_player=True, units={'soldier': 50, 'tank': 10}, generals=['gen_x'])
    c1 = make_nation('c_1', units={'soldier': 50}, generals=['gen_y'])
    state.nations = {'c_0': c0, 'c_1': c1}
    c0.intelligence['c_1'] = 10
    c1.intelligence['c_0'] = 10

    state.generals['gen_x'] = General(id='gen_x', name='Hawk 7', owner_id='c_0',
                                      strategy=2, bravery=2, logistics=3)
    state.generals['gen_y'] = General(id='gen_y', name='Viper 3', owner_id='c_1',
                                      strategy=2, bravery=2, logistics=3)

    state.map_data['0,0'].owner_id = 'c_0'
    state.map_data['2,0'].owner_id = 'c_1'
    state.map_data['2,-1'].owner_id = 'c_1'
    return state


def place_army(state, army_id, owner_id, general_id, location, units, movement=2):
    """Put an army straight onto the map, bypassing CreateArmy."""
    army = Army(id=army_id, owner_id=owner_id, general_id=general_id, location=location,
                units=dict(units), movement_points=movement, max_movement=movement,
                name=f"{army_id} corps")
    state.armies[army_id] = army
    state.nations[owner_id].armies.append(army_id)
    state.generals[general_id].status = GeneralStatus.ASSIGNED
    return army
