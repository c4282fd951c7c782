# Models for world-state entities: tiles, nations, generals, armies, relations

from dataclasses import dataclass, field, fields
from enum import Enum
from typing import Dict, List, Optional

from hexgrid import hex_distance, tile_id


class UnknownEntityError(KeyError):
    """Raised when a nation, tile, army, general or catalog id does not exist."""
    pass


class OrderValidationError(Exception):
    """An order's preconditions are not met; the state is left unchanged."""
    pass


class IllegalOrderError(Exception):
    """An order would break a world-state invariant."""
    pass


class GeneralStatus(Enum):
    AVAILABLE = "available"
    ASSIGNED = "assigned"
    INJURED = "injured"
    DEAD = "dead"


class RelationStatus(Enum):
    WAR = "war"
    HOSTILE = "hostile"
    NEUTRAL = "neutral"
    FRIENDLY = "friendly"
    ALLIANCE = "alliance"


class MessageCategory(Enum):
    INFO = "info"
    WAR = "war"
    ECONOMY = "economy"
    ALERT = "alert"
    SPY = "spy"


class AIPersonality(Enum):
    AGGRESSIVE = "aggressive"
    ECONOMIST = "economist"
    DIPLOMAT = "diplomat"


@dataclass(frozen=True)
class HexCoordinate:
    """Axial hex coordinate; s is derived so q + r + s == 0 always holds."""
    q: int
    r: int

    @property
    def s(self) -> int:
        """Third cube coordinate (q + r + s = 0)."""
        return -self.q - self.r

    @property
    def tile_id(self) -> str:
        return tile_id(self.q, self.r)

    def distance_to(self, other: 'HexCoordinate') -> int:
        return hex_distance(self, other)


@dataclass
class Resources:
    """A nation stockpile, or a per-turn delta when used as income."""
    money: float = 0
    food: float = 0
    oil: float = 0
    energy: float = 0
    population: float = 0
    research_points: float = 0

    def add(self, other: 'Resources') -> None:
        """Add another record field by field (no clamping, stockpiles may go negative)."""
        for f in fields(self):
            setattr(self, f.name, getattr(self, f.name) + getattr(other, f.name))

    def as_dict(self) -> Dict[str, float]:
        return {f.name: getattr(self, f.name) for f in fields(self)}


@dataclass
class MapTile:
    """One hexagonal province of the world map."""
    id: str  # "q,r"
    coords: HexCoordinate
    biome: str  # Key into definitions.BIOMES
    name: str
    owner_id: Optional[str] = None
    resource_bonus: Resources = field(default_factory=Resources)  # Paid to the owner each turn
    defense_bonus: int = 0  # Percentage, feeds combat power
    movement_cost: int = 1  # Movement points to enter


@dataclass
class General:
    """
    A commander owned by exactly one nation.

    Status moves available -> assigned when given an army, and
    assigned -> dead (army wiped out) or assigned -> injured (army routed).
    """
    id: str
    name: str
    owner_id: str
    strategy: int  # Boosts defense
    bravery: int  # Boosts attack
    logistics: int  # Boosts movement
    portrait: str = '🎖️'
    level: int = 1
    xp: int = 0
    traits: List[str] = field(default_factory=list)
    status: GeneralStatus = GeneralStatus.AVAILABLE


@dataclass
class Army:
    """A mobile group of units under one general, occupying one tile."""
    id: str
    owner_id: str
    general_id: str
    location: str  # Tile id "q,r"
    units: Dict[str, int]
    movement_points: int
    max_movement: int
    name: str = ''

    def total_units(self) -> int:
        return sum(self.units.values())


@dataclass
class Relation:
    """How source views target. A->B and B->A are separate records."""
    source_id: str
    target_id: str
    status: RelationStatus = RelationStatus.NEUTRAL
    opinion: int = 0  # -100 to 100
    ceasefire_turns: Optional[int] = None
    is_trade_partner: bool = False


@dataclass(frozen=True)
class GameMessage:
    """An entry of the player's message feed."""
    id: str
    turn: int
    title: str
    body: str
    category: MessageCategory = MessageCategory.INFO
    read: bool = False


@dataclass
class BattleResult:
    """Outcome of one battle; details is the narrative shown to the player."""
    winner_id: str
    loser_id: str
    attacker_army_id: str
    defender_army_id: Optional[str]
    location: str
    attacker_power: float
    defender_power: float
    attacker_won: bool
    attacker_losses: Dict[str, int] = field(default_factory=dict)
    defender_losses: Dict[str, int] = field(default_factory=dict)
    details: List[str] = field(default_factory=list)


@dataclass
class Nation:
    """
    A player- or AI-controlled country.

    `units` holds reserves not yet assigned to an army; `armies` and
    `generals` hold ids into the global collections of the GameState.
    """
    id: str
    name: str
    is_player: bool = False
    color: str = '#888888'
    flag: str = ''
    resources: Resources = field(default_factory=Resources)
    buildings: Dict[str, int] = field(default_factory=dict)
    units: Dict[str, int] = field(default_factory=dict)
    armies: List[str] = field(default_factory=list)
    generals: List[str] = field(default_factory=list)
    researched_techs: List[str] = field(default_factory=list)
    current_research: Optional[str] = None
    research_progress: float = 0
    intelligence: Dict[str, int] = field(default_factory=dict)  # 0-100 per other nation
    ai_personality: Optional[AIPersonality] = None

    def has_tech(self, tech_id: str) -> bool:
        return tech_id in self.researched_techs

    def remove_army(self, army_id: str) -> None:
        self.armies = [a for a in self.armies if a != army_id]
