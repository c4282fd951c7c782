"""
Upkeep: per-turn economy and the end-of-turn tick.

calculate_income derives a nation's resource delta for one turn:
- Resource bonus of every owned tile (money/food/oil)
- Output of every building type owned, times its count
- Population tax on money
- Money upkeep of reserve units
- Army upkeep at a premium rate, plus food per unit and oil per non-infantry unit

perform_upkeep applies that delta to every nation, advances research,
rolls the calendar, and refreshes army movement.
"""

import logging
from typing import Any, Dict, Optional

from config import get_config
from definitions import get_building, get_tech, get_unit
from models import MessageCategory, Nation, Resources
from state import GameState

logger = logging.getLogger(__name__)

TILE_BONUS_RESOURCES = ('money', 'food', 'oil')


def calculate_income(nation: Nation, state: GameState, config: Optional[Dict[str, Any]] = None) -> Resources:
    """
    Calculate a nation's resource delta for one turn.

    Stockpiles are not clamped; money, food and oil may go negative.

    Args:
        nation: Nation to calculate income for
        state: Current game state (tiles and armies)
        config: Balance constants (default: loaded config)

    Returns:
        Full Resources record, zero for untouched resources
    """
    cfg = get_config(config)
    income = Resources()

    # Base production from owned tiles
    for tile in state.map_data.values():
        if tile.owner_id == nation.id:
            for resource in TILE_BONUS_RESOURCES:
                setattr(income, resource, getattr(income, resource) + getattr(tile.resource_bonus, resource))

    # Buildings
    for building_id, count in nation.buildings.items():
        if count <= 0:
            continue
        for resource, amount in get_building(building_id).output.items():
            setattr(income, resource, getattr(income, resource) + amount * count)

    # Population tax
    income.money += nation.resources.population * cfg['population_tax_rate']

    # Reserve unit upkeep
    for unit_id, count in nation.units.items():
        income.money -= get_unit(unit_id).upkeep * count

    # Deployed units cost more and consume supplies
    for army_id in nation.armies:
        army = state.armies.get(army_id)
        if army is None:
            continue
        for unit_id, count in army.units.items():
            unit = get_unit(unit_id)
            income.money -= unit.upkeep * count * cfg['army_upkeep_multiplier']
            income.food -= count * cfg['army_food_per_unit']
            if unit.category != 'infantry':
                income.oil -= count * cfg['army_oil_per_unit']

    return income


def advance_calendar(state: GameState) -> None:
    """Advance the turn counter and the month, rolling the year after December."""
    state.turn += 1
    state.month += 1
    if state.month > 12:
        state.month = 1
        state.year += 1


def advance_research(nation: Nation, income: Resources, state: GameState,
                     config: Optional[Dict[str, Any]] = None) -> Optional[str]:
    """
    Accrue research points into the nation's current project.

    Returns:
        Id of the technology completed this turn, if any
    """
    cfg = get_config(config)
    if not nation.current_research:
        return None

    labs = nation.buildings.get('lab', 0)
    nation.research_progress += income.research_points + labs * cfg['lab_research_bonus']
    tech = get_tech(nation.current_research)
    if nation.research_progress < tech.cost:
        return None

    nation.researched_techs.append(tech.id)
    nation.current_research = None
    nation.research_progress = 0
    logger.info("Nation %s researched %s", nation.id, tech.id)
    if nation.is_player:
        state.add_message('Tech Unlocked', f"Researched {tech.name}", MessageCategory.INFO)
    return tech.id


def perform_upkeep(state: GameState, config: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
    """
    Run the end-of-turn tick on a state the caller owns.

    Args:
        state: Game state to mutate (a clone, never a caller's snapshot)
        config: Balance constants (default: loaded config)

    Returns:
        Dictionary with results: {'incomes': {nation_id: Resources}, 'completed_research': {nation_id: tech_id}}
    """
    results: Dict[str, Any] = {'incomes': {}, 'completed_research': {}}
    advance_calendar(state)

    for nation in state.nations.values():
        income = calculate_income(nation, state, config)
        nation.resources.money += income.money
        nation.resources.food += income.food
        nation.resources.oil += income.oil
        results['incomes'][nation.id] = income

        completed = advance_research(nation, income, state, config)
        if completed:
            results['completed_research'][nation.id] = completed

    # Reset army movement
    for army in state.armies.values():
        army.movement_points = army.max_movement

    logger.info("Advanced to turn %d (%04d-%02d)", state.turn, state.year, state.month)
    return results
