"""
Orders and the state-transition engine.

Every command a player or AI can issue is an immutable Order dataclass.
apply_order(state, order) validates it against the current snapshot and
returns the next snapshot; the input snapshot is never mutated.

Failures come in three kinds:
- OrderValidationError: a precondition is not met (insufficient money, illegal
  move). apply_order swallows it and returns the input state unchanged.
- IllegalOrderError: the order would corrupt the world (more units than in
  reserve, a general that is not available). Propagates to the caller.
- UnknownEntityError: the order names an id that does not exist. Propagates,
  except for MoveArmy which treats it as an illegal move.
"""

import dataclasses
import logging
import math
import random
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Optional

from config import get_config
from definitions import GENERAL_NAMES, get_building, get_tech, get_unit, is_tech_available, is_unit_unlocked
from diplomacy import DiplomaticActionType, SpyMission, enter_war, perform_diplomatic_action, send_spy
from models import Army, General, GeneralStatus, IllegalOrderError, OrderValidationError
from resolution import apply_battle_outcome, resolve_battle
from state import GameState, check_move, is_hostile_tile
from upkeep import perform_upkeep

logger = logging.getLogger(__name__)


class Order:
    """Base class of every order."""
    pass


@dataclass(frozen=True)
class AdvanceTurn(Order):
    pass


@dataclass(frozen=True)
class BuildBuilding(Order):
    nation_id: str
    building_id: str
    amount: int = 1


@dataclass(frozen=True)
class RecruitUnit(Order):
    nation_id: str
    unit_id: str
    amount: int = 1


@dataclass(frozen=True)
class RecruitGeneral(Order):
    nation_id: str


@dataclass(frozen=True)
class CreateArmy(Order):
    nation_id: str
    general_id: str
    units: Dict[str, int] = field(default_factory=dict)
    location: str = ''


@dataclass(frozen=True)
class MoveArmy(Order):
    army_id: str
    target_tile_id: str


@dataclass(frozen=True)
class StartResearch(Order):
    nation_id: str
    tech_id: str


@dataclass(frozen=True)
class SelectTile(Order):
    tile_id: Optional[str]


@dataclass(frozen=True)
class SelectArmy(Order):
    army_id: Optional[str]


@dataclass(frozen=True)
class SelectNation(Order):
    nation_id: Optional[str]


@dataclass(frozen=True)
class DismissMessage(Order):
    message_id: str


@dataclass(frozen=True)
class OpenModal(Order):
    content: Optional[str]


@dataclass(frozen=True)
class CloseModal(Order):
    pass


@dataclass(frozen=True)
class DiplomacyAction(Order):
    source_id: str
    target_id: str
    action: DiplomaticActionType


@dataclass(frozen=True)
class SendSpy(Order):
    source_id: str
    target_id: str
    mission: SpyMission


# --- World-mutating handlers: receive a private clone ---------------------------

def _advance_turn(state: GameState, order: AdvanceTurn, rng: random.Random, cfg: Dict[str, Any]) -> None:
    perform_upkeep(state, cfg)


def _charge(state: GameState, nation_id: str, cost: float, what: str) -> None:
    nation = state.get_nation(nation_id)
    if nation.resources.money < cost:
        raise OrderValidationError(
            f"Nation {nation_id} has insufficient money for {what} (has {nation.resources.money}, needs {cost})")
    nation.resources.money -= cost


def _require_positive(amount: int) -> None:
    if amount <= 0:
        raise IllegalOrderError(f"Amount must be positive, got {amount}")


def _build_building(state: GameState, order: BuildBuilding, rng: random.Random, cfg: Dict[str, Any]) -> None:
    _require_positive(order.amount)
    building = get_building(order.building_id)
    _charge(state, order.nation_id, building.cost * order.amount, f"{order.amount} {building.id}")
    buildings = state.nations[order.nation_id].buildings
    buildings[building.id] = buildings.get(building.id, 0) + order.amount


def _recruit_unit(state: GameState, order: RecruitUnit, rng: random.Random, cfg: Dict[str, Any]) -> None:
    _require_positive(order.amount)
    unit = get_unit(order.unit_id)
    nation = state.get_nation(order.nation_id)
    if not is_unit_unlocked(unit.id, nation.researched_techs):
        raise OrderValidationError(f"Nation {nation.id} has not researched {unit.tech_required} for {unit.id}")
    _charge(state, nation.id, unit.cost * order.amount, f"{order.amount} {unit.id}")
    nation.units[unit.id] = nation.units.get(unit.id, 0) + order.amount


def _recruit_general(state: GameState, order: RecruitGeneral, rng: random.Random, cfg: Dict[str, Any]) -> None:
    _charge(state, order.nation_id, cfg['general_cost'], 'a general')
    low, high = cfg['general_stat_min'], cfg['general_stat_max']
    general = General(
        id=state.new_id('gen'),
        name=f"{rng.choice(GENERAL_NAMES)} {rng.randrange(100)}",
        owner_id=order.nation_id,
        strategy=rng.randint(low, high),
        bravery=rng.randint(low, high),
        logistics=rng.randint(low, high),
    )
    state.generals[general.id] = general
    state.nations[order.nation_id].generals.append(general.id)
    logger.info("Nation %s recruited general %s", order.nation_id, general.id)


def _create_army(state: GameState, order: CreateArmy, rng: random.Random, cfg: Dict[str, Any]) -> None:
    nation = state.get_nation(order.nation_id)
    general = state.get_general(order.general_id)
    tile = state.get_tile(order.location)

    if tile.owner_id != nation.id:
        raise OrderValidationError(f"Nation {nation.id} can only form armies on its own territory, not {tile.id}")
    if general.id not in nation.generals:
        raise IllegalOrderError(f"General {general.id} does not serve nation {nation.id}")
    if general.status != GeneralStatus.AVAILABLE:
        raise IllegalOrderError(f"General {general.id} is {general.status.value}, not available")

    units = {}
    for unit_id, count in order.units.items():
        get_unit(unit_id)
        if count < 0:
            raise IllegalOrderError(f"Negative count {count} for {unit_id}")
        if count > nation.units.get(unit_id, 0):
            raise IllegalOrderError(
                f"Not enough {unit_id} in reserve (has {nation.units.get(unit_id, 0)}, requested {count})")
        if count > 0:
            units[unit_id] = count
    if not units:
        raise IllegalOrderError("An army needs at least one unit")

    # Deduct units from reserves
    for unit_id, count in units.items():
        nation.units[unit_id] -= count

    movement = cfg['army_base_movement'] + math.floor(general.logistics / cfg['logistics_per_movement'])
    army = Army(
        id=state.new_id('army'),
        owner_id=nation.id,
        general_id=general.id,
        location=order.location,
        units=units,
        movement_points=movement,
        max_movement=movement,
        name=f"{general.name}'s Corps",
    )
    state.armies[army.id] = army
    nation.armies.append(army.id)
    general.status = GeneralStatus.ASSIGNED
    logger.info("Nation %s formed %s at %s", nation.id, army.id, army.location)


def _move_army(state: GameState, order: MoveArmy, rng: random.Random, cfg: Dict[str, Any]) -> None:
    army = state.armies.get(order.army_id)
    target = state.map_data.get(order.target_tile_id)
    if army is None or target is None:
        raise OrderValidationError(f"No army {order.army_id} or tile {order.target_tile_id}")

    reason = check_move(state, army, target)
    if reason:
        raise OrderValidationError(reason)

    if is_hostile_tile(army, target):
        enemy = next((a for a in state.armies_at(target.id) if a.owner_id != army.owner_id), None)
        enter_war(state, army.owner_id, target.owner_id)
        result = resolve_battle(army, enemy, target, state, rng, cfg)
        apply_battle_outcome(state, result, army, enemy, target)
        state.current_battle_result = result
        state.modal_open = True
        state.modal_content = 'battle_result'
        return

    # Friendly or empty move
    army.location = target.id
    army.movement_points -= target.movement_cost
    if target.owner_id is None:
        target.owner_id = army.owner_id  # Claim empty land


def _start_research(state: GameState, order: StartResearch, rng: random.Random, cfg: Dict[str, Any]) -> None:
    nation = state.get_nation(order.nation_id)
    tech = get_tech(order.tech_id)
    if not is_tech_available(tech.id, nation.researched_techs):
        raise OrderValidationError(f"Nation {nation.id} cannot research {tech.id} yet")
    nation.current_research = tech.id
    nation.research_progress = 0


def _diplomacy_action(state: GameState, order: DiplomacyAction, rng: random.Random, cfg: Dict[str, Any]) -> None:
    perform_diplomatic_action(state, order.source_id, order.target_id, order.action, cfg)


def _send_spy(state: GameState, order: SendSpy, rng: random.Random, cfg: Dict[str, Any]) -> None:
    send_spy(state, order.source_id, order.target_id, order.mission, rng, cfg)


WORLD_HANDLERS: Dict[type, Callable[..., None]] = {
    AdvanceTurn: _advance_turn,
    BuildBuilding: _build_building,
    RecruitUnit: _recruit_unit,
    RecruitGeneral: _recruit_general,
    CreateArmy: _create_army,
    MoveArmy: _move_army,
    StartResearch: _start_research,
    DiplomacyAction: _diplomacy_action,
    SendSpy: _send_spy,
}


# --- Presentation handlers: shallow replacement, entity collections shared -------

def _select_tile(state: GameState, order: SelectTile) -> GameState:
    return dataclasses.replace(state, selected_tile_id=order.tile_id, selected_army_id=None)


def _select_army(state: GameState, order: SelectArmy) -> GameState:
    return dataclasses.replace(state, selected_army_id=order.army_id)


def _select_nation(state: GameState, order: SelectNation) -> GameState:
    return dataclasses.replace(state, selected_nation_id=order.nation_id)


def _dismiss_message(state: GameState, order: DismissMessage) -> GameState:
    return dataclasses.replace(state, messages=[m for m in state.messages if m.id != order.message_id])


def _open_modal(state: GameState, order: OpenModal) -> GameState:
    return dataclasses.replace(state, modal_open=True, modal_content=order.content)


def _close_modal(state: GameState, order: CloseModal) -> GameState:
    return dataclasses.replace(state, modal_open=False)


VIEW_HANDLERS: Dict[type, Callable[[GameState, Any], GameState]] = {
    SelectTile: _select_tile,
    SelectArmy: _select_army,
    SelectNation: _select_nation,
    DismissMessage: _dismiss_message,
    OpenModal: _open_modal,
    CloseModal: _close_modal,
}


def apply_order(state: GameState, order: Order, rng: Optional[random.Random] = None,
                config: Optional[Dict[str, Any]] = None) -> GameState:
    """
    Apply one order and return the next snapshot.

    Args:
        state: Current snapshot (never mutated)
        order: Order to apply
        rng: Random source for recruitment, combat and espionage rolls
        config: Balance constants (default: loaded config)

    Returns:
        A new GameState, or `state` itself when a precondition is not met

    Raises:
        IllegalOrderError: If the order would break a world invariant
        UnknownEntityError: If the order names a nonexistent id
        TypeError: If the order type is not recognised
    """
    order_type = type(order)
    if order_type in VIEW_HANDLERS:
        return VIEW_HANDLERS[order_type](state, order)

    handler = WORLD_HANDLERS.get(order_type)
    if handler is None:
        raise TypeError(f"Unknown order: {order!r}")

    next_state = state.clone()
    try:
        handler(next_state, order, rng or random.Random(), get_config(config))
    except OrderValidationError as e:
        logger.debug("Rejected %s: %s", order_type.__name__, e)
        return state
    return next_state
