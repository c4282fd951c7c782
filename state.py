"""
Game state management for the grand-strategy core.

GameState is the aggregate root: turn/date counters, the nation, map, army,
general and relation collections, the message feed, and the transient
selection/modal fields read by the presentation layer. It also hosts the
world generator's nation seeding (initialize_game) and an invariant checker.
"""

from __future__ import annotations

import copy
import logging
import math
import random
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from config import get_config
from definitions import BUILDINGS, NATION_NAMES, UNITS, empty_counts
from hexgrid import get_hex_neighbors, tile_id
from map_gen import annex_around, convert_to_capital, generate_hex_map
from models import (
    AIPersonality, Army, BattleResult, GameMessage, General, GeneralStatus,
    HexCoordinate, MapTile, MessageCategory, Nation, Relation, Resources,
    UnknownEntityError,
)

logger = logging.getLogger(__name__)

# Capital positions, one per nation in NATION_NAMES order
START_POSITIONS = [
    (0, 0),
    (5, -5), (-5, 5), (5, 0), (-5, 0),
    (0, 5), (0, -5), (3, 3), (-3, -3), (3, -3),
]

STARTING_BUILDINGS = {'farm': 5, 'factory': 2, 'oil_well': 1, 'power_plant': 1, 'lab': 0, 'barracks': 1, 'bunker': 0}
STARTING_UNITS = {'soldier': 50, 'tank': 10, 'artillery': 5}


@dataclass
class GameState:
    """
    Complete world snapshot.

    Orders never mutate a snapshot handed to them; they clone it (or build a
    shallow replacement for UI-only changes) and return the new one.
    """
    turn: int = 1
    year: int = 2027
    month: int = 1
    player_nation_id: str = ''
    nations: Dict[str, Nation] = field(default_factory=dict)
    map_data: Dict[str, MapTile] = field(default_factory=dict)
    armies: Dict[str, Army] = field(default_factory=dict)
    generals: Dict[str, General] = field(default_factory=dict)
    relations: Dict[str, Dict[str, Relation]] = field(default_factory=dict)
    messages: List[GameMessage] = field(default_factory=list)

    # Presentation state
    selected_tile_id: Optional[str] = None
    selected_army_id: Optional[str] = None
    selected_nation_id: Optional[str] = None
    modal_open: bool = False
    modal_content: Optional[str] = None  # 'battle_result', 'event', 'army_manager'
    current_battle_result: Optional[BattleResult] = None

    id_counter: int = 0

    def clone(self) -> GameState:
        """Independent deep copy for a world-mutating order."""
        return copy.deepcopy(self)

    def new_id(self, prefix: str) -> str:
        """Next unused entity id with the given prefix, e.g. army_4."""
        taken = set(self.armies) | set(self.generals) | {m.id for m in self.messages}
        while True:
            self.id_counter += 1
            candidate = f"{prefix}_{self.id_counter}"
            if candidate not in taken:
                return candidate

    # --- Lookups -------------------------------------------------------------

    def get_nation(self, nation_id: str) -> Nation:
        if nation_id not in self.nations:
            raise UnknownEntityError(f"Unknown nation: {nation_id}")
        return self.nations[nation_id]

    def get_tile(self, tid: str) -> MapTile:
        if tid not in self.map_data:
            raise UnknownEntityError(f"Unknown tile: {tid}")
        return self.map_data[tid]

    def get_army(self, army_id: str) -> Army:
        if army_id not in self.armies:
            raise UnknownEntityError(f"Unknown army: {army_id}")
        return self.armies[army_id]

    def get_general(self, general_id: str) -> General:
        if general_id not in self.generals:
            raise UnknownEntityError(f"Unknown general: {general_id}")
        return self.generals[general_id]

    def get_relation(self, source_id: str, target_id: str) -> Relation:
        """How source views target; a pair never touched reads as a fresh neutral relation."""
        self.get_nation(source_id)
        self.get_nation(target_id)
        stored = self.relations.get(source_id, {}).get(target_id)
        if stored is None:
            return Relation(source_id=source_id, target_id=target_id)
        return stored

    def ensure_relation(self, source_id: str, target_id: str) -> Relation:
        """Stored relation record for a pair, created neutral if missing. Only call on clones."""
        self.get_nation(source_id)
        self.get_nation(target_id)
        per_source = self.relations.setdefault(source_id, {})
        if target_id not in per_source:
            per_source[target_id] = Relation(source_id=source_id, target_id=target_id)
        return per_source[target_id]

    @property
    def player_nation(self) -> Nation:
        return self.get_nation(self.player_nation_id)

    def armies_at(self, tid: str) -> List[Army]:
        return [army for army in self.armies.values() if army.location == tid]

    def owned_tiles(self, nation_id: str) -> List[MapTile]:
        return [tile for tile in self.map_data.values() if tile.owner_id == nation_id]

    def unread_messages(self) -> List[GameMessage]:
        return [m for m in self.messages if not m.read]

    # --- Mutation helpers (used on clones only) ------------------------------

    def add_message(self, title: str, body: str,
                    category: MessageCategory = MessageCategory.INFO) -> GameMessage:
        message = GameMessage(id=self.new_id('msg'), turn=self.turn, title=title, body=body, category=category)
        self.messages.append(message)
        return message

    def remove_army(self, army_id: str, general_status: GeneralStatus) -> None:
        """Delete an army, drop it from its nation's roster, and set its general's status."""
        army = self.armies.pop(army_id)
        if army.owner_id in self.nations:
            self.nations[army.owner_id].remove_army(army_id)
        general = self.generals.get(army.general_id)
        if general is not None:
            general.status = general_status
        logger.info("Army %s of %s removed, general %s now %s",
                    army_id, army.owner_id, army.general_id, general_status.value)


def is_hostile_tile(army: Army, tile: MapTile) -> bool:
    """Entering a tile owned by another nation starts a battle."""
    return tile.owner_id is not None and tile.owner_id != army.owner_id


def check_move(state: GameState, army: Army, target: MapTile) -> Optional[str]:
    """
    Check whether an army may step onto a tile right now.

    Returns:
        None when the move is legal, otherwise the reason it is not
    """
    if army.movement_points <= 0:
        return f"Army {army.id} has no movement points left"
    current = state.get_tile(army.location)
    if current.coords.distance_to(target.coords) != 1:
        return f"Tile {target.id} is not adjacent to {current.id}"
    if is_hostile_tile(army, target):
        # Combat consumes the remaining movement, terrain cost does not apply
        return None
    if army.movement_points < target.movement_cost:
        return (f"Army {army.id} needs {target.movement_cost} movement points "
                f"to enter {target.id}, has {army.movement_points}")
    return None


def valid_move_targets(state: GameState, army_id: str) -> List[str]:
    """Ids of tiles the army can move into (or attack) this turn."""
    army = state.get_army(army_id)
    current = state.get_tile(army.location)
    targets = []
    for q, r in get_hex_neighbors(current.coords.q, current.coords.r):
        tid = tile_id(q, r)
        tile = state.map_data.get(tid)
        if tile is not None and check_move(state, army, tile) is None:
            targets.append(tid)
    return targets


def create_nation(index: int, name: str, flag: str, pop: int, is_player: bool,
                  rng: random.Random) -> Nation:
    """
    Create a nation whose stockpiles scale with its population.

    Args:
        index: Position in NATION_NAMES, used for the id and colour
        name, flag: Display metadata
        pop: Population in thousands
        is_player: Whether the human controls this nation
        rng: Random source for the AI personality

    Returns:
        New Nation instance
    """
    economy_scale = max(0.1, pop / 1000000)
    buildings = empty_counts(BUILDINGS)
    buildings.update(STARTING_BUILDINGS)
    units = empty_counts(UNITS)
    units.update(STARTING_UNITS)
    personality = AIPersonality.AGGRESSIVE if rng.random() > 0.5 else AIPersonality.ECONOMIST
    return Nation(
        id=f"c_{index}",
        name=name,
        flag=flag,
        is_player=is_player,
        color=f"hsl({index * 360 // 10}, 70%, 40%)",
        ai_personality=personality,
        resources=Resources(
            money=math.floor(10000 * economy_scale),
            food=math.floor(5000 * economy_scale),
            oil=math.floor(1000 * economy_scale),
            energy=math.floor(2000 * economy_scale),
            population=pop * 1000,
            research_points=0,
        ),
        buildings=buildings,
        units=units,
    )


def initialize_game(player_index: int = 0, seed: Optional[int] = None,
                    rng: Optional[random.Random] = None,
                    config: Optional[Dict[str, Any]] = None) -> GameState:
    """
    Initialize a new world: map, nations, territories and relations.

    Each nation gets a capital at a fixed start position and annexes every
    unowned tile within two steps of it. Nations later in the list only get
    what earlier ones left.

    Args:
        player_index: Index into NATION_NAMES of the human's nation
        seed: Seed for a fresh random source (ignored when rng is given)
        rng: Random source for map jitter and AI personalities
        config: Balance constants (default: loaded config)

    Returns:
        New GameState instance ready for play

    Raises:
        ValueError: If player_index does not name one of the seeded nations
    """
    nation_count = min(len(NATION_NAMES), len(START_POSITIONS))
    if not 0 <= player_index < nation_count:
        raise ValueError(f"player_index must be in 0..{nation_count - 1}, got {player_index}")

    cfg = get_config(config)
    rng = rng or random.Random(seed)
    map_data = generate_hex_map(cfg['map_radius'], rng)

    state = GameState(
        year=cfg['initial_year'],
        player_nation_id=f"c_{player_index}",
        map_data=map_data,
    )

    for index, (name, flag, pop) in enumerate(NATION_NAMES[:len(START_POSITIONS)]):
        nation = create_nation(index, name, flag, pop, index == player_index, rng)
        q, r = START_POSITIONS[index]
        capital = map_data.get(tile_id(q, r))
        if capital is not None:
            convert_to_capital(capital, nation.id, name)
        annex_around(map_data, HexCoordinate(q, r), nation.id)
        state.nations[nation.id] = nation

    for source in state.nations.values():
        state.relations[source.id] = {}
        for target_id in state.nations:
            if target_id == source.id:
                continue
            state.relations[source.id][target_id] = Relation(source_id=source.id, target_id=target_id)
            source.intelligence[target_id] = cfg['starting_intel']

    state.add_message(
        'Global Conflict Imminent',
        f"The year is {state.year}. Resources are scarce. "
        f"Command your armies to secure territories on the map.",
    )
    logger.info("Initialized world with %d tiles and %d nations", len(map_data), len(state.nations))
    return state


def validate_state(state: GameState) -> List[str]:
    """
    Check the world-state invariants.

    Returns:
        Human-readable descriptions of every violation (empty when consistent)
    """
    problems = []
    for tid, tile in state.map_data.items():
        c = tile.coords
        if c.q + c.r + c.s != 0:
            problems.append(f"Tile {tid} breaks q + r + s == 0")
        if tid != c.tile_id:
            problems.append(f"Tile {tid} has coordinates {c.tile_id}")
        if tile.owner_id is not None and tile.owner_id not in state.nations:
            problems.append(f"Tile {tid} owned by unknown nation {tile.owner_id}")

    for nation in state.nations.values():
        for army_id in nation.armies:
            if army_id not in state.armies:
                problems.append(f"Nation {nation.id} lists missing army {army_id}")
        for general_id in nation.generals:
            if general_id not in state.generals:
                problems.append(f"Nation {nation.id} lists missing general {general_id}")

    for army in state.armies.values():
        if army.location not in state.map_data:
            problems.append(f"Army {army.id} is at unknown tile {army.location}")
        if army.owner_id not in state.nations or army.id not in state.nations[army.owner_id].armies:
            problems.append(f"Army {army.id} is not on its owner's roster")
        if any(count < 0 for count in army.units.values()):
            problems.append(f"Army {army.id} has a negative unit count")
        general = state.generals.get(army.general_id)
        if general is None:
            problems.append(f"Army {army.id} has unknown general {army.general_id}")
        elif general.status != GeneralStatus.ASSIGNED:
            problems.append(f"Army {army.id} general {general.id} is {general.status.value}")

    for problem in problems:
        logger.warning(problem)
    return problems


def get_game_summary(state: GameState) -> Dict[str, Any]:
    """
    Get a summary of the current game state for presentation layers.

    Args:
        state: Current game state

    Returns:
        Dictionary with game summary information
    """
    return {
        'turn': state.turn,
        'year': state.year,
        'month': state.month,
        'player_nation_id': state.player_nation_id,
        'unread_messages': len(state.unread_messages()),
        'nations': [
            {
                'id': nation.id,
                'name': nation.name,
                'resources': nation.resources.as_dict(),
                'tiles': len(state.owned_tiles(nation.id)),
                'armies': len(nation.armies),
                'generals': len(nation.generals),
                'researched_techs': list(nation.researched_techs),
                'current_research': nation.current_research,
            }
            for nation in state.nations.values()
        ],
        'map_size': len(state.map_data),
    }
