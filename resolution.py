"""
Battle resolution between an attacking army and a defending army or garrison.

Attacker power sums attack × count × terrain multiplier per unit type, scaled
by the attacking general's bravery. Defender power is the tile's fortification
term plus either the defending army's defense (scaled by its general's
strategy) or a flat militia. The attacker needs a clear margin to win;
ties go to the defender. Losses are rolled per unit type.
"""

import logging
import math
import random
from typing import Any, Dict, Optional, Tuple

from config import get_config
from definitions import get_unit
from models import Army, BattleResult, GeneralStatus, MapTile, MessageCategory
from state import GameState

logger = logging.getLogger(__name__)


class BattleError(Exception):
    """Exception raised when a battle is requested between invalid parties."""
    pass


def clamp(value: float, low: float, high: float) -> float:
    return min(max(value, low), high)


def army_power(army: Army, tile: MapTile, state: GameState, attacking: bool,
               config: Optional[Dict[str, Any]] = None) -> float:
    """
    Combat power of an army on a tile.

    Uses attack values and the general's bravery when attacking, defense
    values and the general's strategy when defending. A missing general
    gives no leadership bonus.
    """
    cfg = get_config(config)
    general = state.generals.get(army.general_id)
    if general is None:
        leadership = 1.0
    else:
        stat = general.bravery if attacking else general.strategy
        leadership = 1 + stat * cfg['general_stat_bonus']

    power = 0.0
    for unit_id, count in army.units.items():
        unit = get_unit(unit_id)
        base = unit.attack if attacking else unit.defense
        power += base * count * unit.terrain_multiplier(tile.biome) * leadership
    return power


def defense_power(defender: Optional[Army], tile: MapTile, state: GameState,
                  config: Optional[Dict[str, Any]] = None) -> float:
    """Tile fortification plus the defending army, or a militia when there is none."""
    cfg = get_config(config)
    power = tile.defense_bonus * cfg['tile_defense_weight']
    if defender is not None:
        power += army_power(defender, tile, state, attacking=False, config=cfg)
    else:
        power += cfg['militia_power']
    return power


def attacker_wins(attacker_power: float, defender_power: float, margin: float = 1.1) -> bool:
    """The attacker must exceed the defender by the margin; ties go to the defender."""
    return attacker_power > defender_power * margin


def loss_ratios(attacker_power: float, defender_power: float,
                config: Optional[Dict[str, Any]] = None) -> Tuple[float, float]:
    """
    Maximum fraction of each unit type lost by attacker and defender.

    Returns:
        (attacker_ratio, defender_ratio); the defender can be wiped out entirely
    """
    cfg = get_config(config)
    scale = cfg['loss_scale']
    attacker_ratio = clamp(defender_power / (attacker_power + 1) * scale,
                           cfg['attacker_loss_min'], cfg['attacker_loss_max'])
    defender_ratio = clamp(attacker_power / (defender_power + 1) * scale,
                           cfg['defender_loss_min'], cfg['defender_loss_max'])
    return attacker_ratio, defender_ratio


def apply_losses(army: Army, ratio: float, rng: random.Random) -> Dict[str, int]:
    """
    Remove ceil(count × ratio × uniform(0, 1)) units of each type.

    Returns:
        Units lost per type
    """
    losses = {}
    for unit_id, count in army.units.items():
        loss = min(count, math.ceil(count * ratio * rng.random()))
        army.units[unit_id] = count - loss
        losses[unit_id] = loss
    return losses


def _format_losses(losses: Dict[str, int]) -> str:
    lost = [f"{count} {unit_id}" for unit_id, count in losses.items() if count > 0]
    return ', '.join(lost) if lost else 'none'


def resolve_battle(attacker: Army, defender: Optional[Army], tile: MapTile, state: GameState,
                   rng: Optional[random.Random] = None,
                   config: Optional[Dict[str, Any]] = None) -> BattleResult:
    """
    Resolve a battle for a tile, mutating both armies' unit counts.

    Args:
        attacker: Army moving into the tile
        defender: Enemy army on the tile, or None for a garrison fight
        tile: Contested tile
        state: Game state owning both armies
        rng: Random source for the loss rolls
        config: Balance constants (default: loaded config)

    Returns:
        BattleResult with powers, per-type losses and the narrative log

    Raises:
        BattleError: If the attacker would fight its own nation
    """
    cfg = get_config(config)
    rng = rng or random.Random()
    defender_owner_id = defender.owner_id if defender is not None else tile.owner_id
    if defender_owner_id is None or defender_owner_id == attacker.owner_id:
        raise BattleError(f"Army {attacker.id} has no enemy at {tile.id}")

    attacker_nation = state.get_nation(attacker.owner_id)
    defender_nation = state.nations.get(defender_owner_id)
    defender_name = defender_nation.name if defender_nation else 'Rebels'

    details = [
        f"Battle at {tile.name} ({tile.biome})",
        f"Attacker: {attacker.name or attacker.id} ({attacker_nation.name})",
        f"Defender: {(defender.name or defender.id) if defender else 'Garrison'} ({defender_name})",
    ]

    att_power = army_power(attacker, tile, state, attacking=True, config=cfg)
    def_power = defense_power(defender, tile, state, config=cfg)
    details.append(f"Attacker Power: {math.floor(att_power)} | Defender Power: {math.floor(def_power)}")

    att_ratio, def_ratio = loss_ratios(att_power, def_power, cfg)
    attacker_losses = apply_losses(attacker, att_ratio, rng)
    defender_losses = apply_losses(defender, def_ratio, rng) if defender is not None else {}
    details.append(f"Attacker losses: {_format_losses(attacker_losses)}")
    if defender is not None:
        details.append(f"Defender losses: {_format_losses(defender_losses)}")

    won = attacker_wins(att_power, def_power, cfg['attack_margin'])
    if won:
        details.append(f"{attacker_nation.name} is victorious!")
    else:
        details.append(f"{attacker_nation.name} was repelled.")

    logger.info("Battle at %s: %s (%.1f) vs %s (%.1f), attacker %s",
                tile.id, attacker.id, att_power, defender.id if defender else 'garrison',
                def_power, 'won' if won else 'lost')

    return BattleResult(
        winner_id=attacker.owner_id if won else defender_owner_id,
        loser_id=defender_owner_id if won else attacker.owner_id,
        attacker_army_id=attacker.id,
        defender_army_id=defender.id if defender else None,
        location=tile.id,
        attacker_power=att_power,
        defender_power=def_power,
        attacker_won=won,
        attacker_losses=attacker_losses,
        defender_losses=defender_losses,
        details=details,
    )


def apply_battle_outcome(state: GameState, result: BattleResult, attacker: Army,
                         defender: Optional[Army], tile: MapTile) -> None:
    """
    Apply a battle's consequences to the world.

    - Armies reduced to zero units are removed and their generals die
    - A beaten defending army that still has units is routed (removed, general injured)
    - On victory the tile changes hands and the attacker moves in
    - The attacker's movement is spent either way
    """
    attacker_alive = attacker.total_units() > 0
    if not attacker_alive:
        state.remove_army(attacker.id, GeneralStatus.DEAD)

    if defender is not None and defender.id in state.armies:
        if defender.total_units() == 0:
            state.remove_army(defender.id, GeneralStatus.DEAD)
        elif result.attacker_won:
            state.remove_army(defender.id, GeneralStatus.INJURED)

    if result.attacker_won:
        tile.owner_id = attacker.owner_id
        if attacker_alive:
            attacker.location = tile.id
    if attacker_alive:
        attacker.movement_points = 0

    if state.player_nation_id in (result.winner_id, result.loser_id):
        outcome = 'Victory' if result.winner_id == state.player_nation_id else 'Defeat'
        state.add_message(f"{outcome} at {tile.name}", result.details[-1], MessageCategory.WAR)

