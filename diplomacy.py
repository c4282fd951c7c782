"""
Diplomacy and espionage between nations.

Relations are directed: relations[a][b] is how a views b. Opinion changes
are applied to the target's view of the actor only. Mutual statuses (war,
alliance, trade partnership) are written to both directions at once.
"""

import logging
import math
import random
from enum import Enum
from typing import Any, Dict, List, Optional

from config import get_config
from definitions import TECH_TREE, get_unit, is_tech_available
from models import (
    IllegalOrderError, MessageCategory, Nation, OrderValidationError,
    Relation, RelationStatus,
)
from state import GameState

logger = logging.getLogger(__name__)


class DiplomaticActionType(Enum):
    IMPROVE_RELATIONS = "improve_relations"
    TRADE_AGREEMENT = "trade_agreement"
    ALLIANCE_OFFER = "alliance_offer"
    DECLARE_WAR = "declare_war"
    SEND_AID = "send_aid"
    DEMAND_TRIBUTE = "demand_tribute"


class SpyMission(Enum):
    GATHER_INTEL = "gather_intel"
    SABOTAGE_INDUSTRY = "sabotage_industry"
    STEAL_TECH = "steal_tech"
    INCITE_UNREST = "incite_unrest"


def adjust_opinion(relation: Relation, amount: int) -> None:
    """Shift opinion within -100..100 and re-derive a non-binding status from it."""
    relation.opinion = max(-100, min(100, relation.opinion + amount))
    if relation.status in (RelationStatus.WAR, RelationStatus.ALLIANCE):
        return
    if relation.opinion >= 50:
        relation.status = RelationStatus.FRIENDLY
    elif relation.opinion <= -50:
        relation.status = RelationStatus.HOSTILE
    else:
        relation.status = RelationStatus.NEUTRAL


def set_mutual_status(state: GameState, a_id: str, b_id: str, status: RelationStatus) -> None:
    for source, target in ((a_id, b_id), (b_id, a_id)):
        state.ensure_relation(source, target).status = status


def enter_war(state: GameState, a_id: str, b_id: str) -> bool:
    """
    Put two nations at war with each other.

    Returns:
        True if they were not already at war
    """
    already = state.get_relation(a_id, b_id).status == RelationStatus.WAR
    set_mutual_status(state, a_id, b_id, RelationStatus.WAR)
    for source, target in ((a_id, b_id), (b_id, a_id)):
        relation = state.ensure_relation(source, target)
        relation.is_trade_partner = False
        relation.ceasefire_turns = None
    if not already:
        logger.info("%s and %s are now at war", a_id, b_id)
    return not already


def military_strength(nation: Nation, state: GameState) -> float:
    """Attack value of reserves plus every fielded army."""
    strength = 0.0
    for unit_id, count in nation.units.items():
        strength += get_unit(unit_id).attack * count
    for army_id in nation.armies:
        army = state.armies.get(army_id)
        if army is None:
            continue
        for unit_id, count in army.units.items():
            strength += get_unit(unit_id).attack * count
    return strength


def _charge(nation: Nation, amount: float, what: str) -> None:
    if nation.resources.money < amount:
        raise OrderValidationError(
            f"Nation {nation.id} has insufficient money for {what} (has {nation.resources.money}, needs {amount})")
    nation.resources.money -= amount


def _parties(state: GameState, source_id: str, target_id: str):
    if source_id == target_id:
        raise IllegalOrderError(f"Nation {source_id} cannot target itself")
    return state.get_nation(source_id), state.get_nation(target_id)


def _notify(state: GameState, nation_ids: List[str], title: str, body: str,
            category: MessageCategory) -> None:
    if state.player_nation_id in nation_ids:
        state.add_message(title, body, category)


def perform_diplomatic_action(state: GameState, source_id: str, target_id: str,
                              action: DiplomaticActionType,
                              config: Optional[Dict[str, Any]] = None) -> str:
    """
    Resolve one diplomatic action on a state the caller owns.

    Args:
        state: Game state to mutate
        source_id: Acting nation
        target_id: Nation acted upon
        action: Diplomatic action type
        config: Balance constants (default: loaded config)

    Returns:
        Description of what happened

    Raises:
        OrderValidationError: If the action's preconditions are not met
        IllegalOrderError: If a nation targets itself
    """
    cfg = get_config(config)
    source, target = _parties(state, source_id, target_id)
    outgoing = state.ensure_relation(source_id, target_id)
    view = state.ensure_relation(target_id, source_id)  # How the target sees the actor
    at_war = outgoing.status == RelationStatus.WAR or view.status == RelationStatus.WAR

    if action == DiplomaticActionType.IMPROVE_RELATIONS:
        _charge(source, cfg['diplomacy_cost'], 'improving relations')
        adjust_opinion(view, 10)
        summary = f"{target.name} now views {source.name} at {view.opinion}"

    elif action == DiplomaticActionType.SEND_AID:
        _charge(source, cfg['aid_amount'], 'sending aid')
        target.resources.money += cfg['aid_amount']
        adjust_opinion(view, 15)
        summary = f"{source.name} sent {cfg['aid_amount']} in aid to {target.name}"

    elif action == DiplomaticActionType.TRADE_AGREEMENT:
        if at_war or view.opinion < cfg['trade_opinion_required']:
            raise OrderValidationError(f"{target.name} refuses a trade agreement with {source.name}")
        outgoing.is_trade_partner = True
        view.is_trade_partner = True
        summary = f"{source.name} and {target.name} signed a trade agreement"

    elif action == DiplomaticActionType.ALLIANCE_OFFER:
        if at_war or view.opinion < cfg['alliance_opinion_required']:
            raise OrderValidationError(f"{target.name} rejects an alliance with {source.name}")
        set_mutual_status(state, source_id, target_id, RelationStatus.ALLIANCE)
        summary = f"{source.name} and {target.name} formed an alliance"

    elif action == DiplomaticActionType.DECLARE_WAR:
        if not enter_war(state, source_id, target_id):
            raise OrderValidationError(f"{source.name} is already at war with {target.name}")
        adjust_opinion(view, -50)
        summary = f"{source.name} declared war on {target.name}"
        _notify(state, [source_id, target_id], 'War Declared', summary, MessageCategory.WAR)
        return summary

    elif action == DiplomaticActionType.DEMAND_TRIBUTE:
        adjust_opinion(view, -20)
        if military_strength(source, state) >= military_strength(target, state) * cfg['tribute_strength_ratio']:
            tribute = math.floor(max(0, target.resources.money) * cfg['tribute_rate'])
            target.resources.money -= tribute
            source.resources.money += tribute
            summary = f"{target.name} paid {tribute} in tribute to {source.name}"
        else:
            summary = f"{target.name} refused to pay tribute to {source.name}"

    else:
        raise IllegalOrderError(f"Unknown diplomatic action: {action}")

    _notify(state, [source_id, target_id], 'Diplomacy', summary, MessageCategory.INFO)
    return summary


def _steal_candidates(source: Nation, target: Nation) -> List[str]:
    return sorted(
        tech_id for tech_id in target.researched_techs
        if tech_id in TECH_TREE and is_tech_available(tech_id, source.researched_techs)
    )


def send_spy(state: GameState, source_id: str, target_id: str, mission: SpyMission,
             rng: Optional[random.Random] = None,
             config: Optional[Dict[str, Any]] = None) -> bool:
    """
    Run an espionage mission on a state the caller owns.

    Args:
        state: Game state to mutate
        source_id: Nation sending the spy
        target_id: Nation spied upon
        mission: Mission type
        rng: Random source for the success roll
        config: Balance constants (default: loaded config)

    Returns:
        True if the mission succeeded

    Raises:
        OrderValidationError: If the source cannot pay for the mission
    """
    cfg = get_config(config)
    rng = rng or random.Random()
    source, target = _parties(state, source_id, target_id)
    _charge(source, cfg['spy_costs'][mission.value], mission.value)

    success = rng.random() < cfg['spy_success'][mission.value]
    if not success:
        adjust_opinion(state.ensure_relation(target_id, source_id), -15)
        report = f"Our agent was caught in {target.name}"
    elif mission == SpyMission.GATHER_INTEL:
        level = min(100, source.intelligence.get(target_id, 0) + cfg['intel_gain'])
        source.intelligence[target_id] = level
        report = f"Intelligence on {target.name} is now {level}%"
    elif mission == SpyMission.SABOTAGE_INDUSTRY:
        if target.buildings.get('factory', 0) > 0:
            target.buildings['factory'] -= 1
            report = f"A factory in {target.name} was destroyed"
        else:
            report = f"{target.name} has no factories to sabotage"
    elif mission == SpyMission.STEAL_TECH:
        candidates = _steal_candidates(source, target)
        if candidates:
            stolen = rng.choice(candidates)
            source.researched_techs.append(stolen)
            if source.current_research == stolen:
                source.current_research = None
                source.research_progress = 0
            report = f"Stole {TECH_TREE[stolen].name} from {target.name}"
        else:
            report = f"{target.name} has nothing we can use"
    else:
        lost = math.floor(target.resources.population * cfg['unrest_population_loss'])
        target.resources.population -= lost
        report = f"Unrest in {target.name} cost {lost} population"

    logger.info("Spy mission %s from %s to %s: %s", mission.value, source_id, target_id,
                'success' if success else 'failure')
    if source_id == state.player_nation_id:
        state.add_message('Spy Report', report, MessageCategory.SPY)
    return success


def observed_value(value: float, intel_level: int) -> str:
    """
    How precisely a nation sees another's number at a given intel level.

    >= 90 exact, >= 50 a +/-20% range, >= 20 a vague band, otherwise unknown.
    """
    if intel_level >= 90:
        return f"{value:,.0f}"
    if intel_level >= 50:
        return f"{math.floor(value * 0.8):,} - {math.ceil(value * 1.2):,}"
    if intel_level >= 20:
        if value == 0:
            return "None"
        if value < 100:
            return "Low"
        if value < 1000:
            return "Medium"
        return "High"
    return "???"
