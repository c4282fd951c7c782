"""Static definitions for biomes, buildings, units and the technology tree.

These tables are loaded once at import time and never mutated. The engine
reads them through the lookup helpers at the bottom of the module, which
raise UnknownEntityError for ids that are not in the catalog.

Resource keys in building output/upkeep and tech multipliers use the field
names of models.Resources (money, food, oil, energy, population,
research_points).
"""

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Dict, Iterable, Mapping, Optional, Tuple

from models import UnknownEntityError


@dataclass(frozen=True)
class BiomeDef:
    id: str
    defense: int  # Percentage defense bonus of the tile
    move_cost: int  # Movement points to enter
    color: str
    symbol: str = ''


@dataclass(frozen=True)
class BuildingDef:
    id: str
    name: str
    description: str
    cost: int  # Money
    output: Mapping[str, float] = field(default_factory=dict)
    upkeep: Mapping[str, float] = field(default_factory=dict)


@dataclass(frozen=True)
class UnitDef:
    id: str
    name: str
    category: str  # infantry, armor, air, navy, missile, defense
    cost: int
    upkeep: int  # Money per turn
    attack: int
    defense: int
    movement: int
    tech_required: Optional[str] = None
    terrain_bonuses: Mapping[str, float] = field(default_factory=dict)  # Multiplier per biome

    def terrain_multiplier(self, biome: str) -> float:
        return self.terrain_bonuses.get(biome, 1.0)


@dataclass(frozen=True)
class TechEffects:
    resource_multiplier: Mapping[str, float] = field(default_factory=dict)
    unlock_units: Tuple[str, ...] = ()
    unlock_buildings: Tuple[str, ...] = ()


@dataclass(frozen=True)
class TechDef:
    id: str
    name: str
    description: str
    cost: int  # Research points
    prerequisites: Tuple[str, ...]
    effects: TechEffects
    x: int = 0  # Layout hints for the tech tree view
    y: int = 0


def _frozen(items: Iterable) -> Mapping:
    return MappingProxyType({item.id: item for item in items})


# ── BIOMES ─────────────────────────────────────────────────────────────────────

BIOMES: Mapping[str, BiomeDef] = _frozen([
    BiomeDef('plains', defense=0, move_cost=1, color='#4d7c43'),
    BiomeDef('forest', defense=20, move_cost=2, color='#2d4c25', symbol='🌲'),
    BiomeDef('desert', defense=-10, move_cost=2, color='#c2b280', symbol='🌵'),
    BiomeDef('mountain', defense=50, move_cost=4, color='#5b5b5b', symbol='🏔️'),
    BiomeDef('snow', defense=10, move_cost=3, color='#e5e7eb', symbol='❄️'),
    BiomeDef('ocean', defense=0, move_cost=99, color='#1e3a8a', symbol='🌊'),
    BiomeDef('city', defense=40, move_cost=1, color='#374151', symbol='🏙️'),
])

# ── BUILDINGS ──────────────────────────────────────────────────────────────────

BUILDINGS: Mapping[str, BuildingDef] = _frozen([
    BuildingDef('farm', 'Industrial Farm', 'Produces food for your population.',
                cost=1000, output={'food': 500}, upkeep={'money': 50, 'energy': 10}),
    BuildingDef('factory', 'Civilian Factory', 'Generates tax revenue and industrial goods.',
                cost=5000, output={'money': 200}, upkeep={'energy': 50, 'oil': 10}),
    BuildingDef('oil_well', 'Oil Rig', 'Extracts crude oil from the earth.',
                cost=8000, output={'oil': 100}, upkeep={'money': 100, 'energy': 20}),
    BuildingDef('power_plant', 'Nuclear Plant', 'Generates massive amounts of energy.',
                cost=15000, output={'energy': 1000}, upkeep={'money': 500}),
    BuildingDef('lab', 'Research Lab', 'Generates research points for technology.',
                cost=10000, output={'research_points': 50}, upkeep={'money': 1000, 'energy': 100}),
    BuildingDef('barracks', 'Military Base', 'Increases max unit capacity and defense.',
                cost=3000, upkeep={'money': 200, 'food': 100, 'energy': 50}),
    BuildingDef('bunker', 'Defense Bunker', 'Provides massive defense bonuses to the province.',
                cost=5000, upkeep={'money': 100, 'energy': 10}),
])

# ── UNITS ──────────────────────────────────────────────────────────────────────

UNITS: Mapping[str, UnitDef] = _frozen([
    UnitDef('soldier', 'Infantry Division', 'infantry', cost=100, upkeep=10,
            attack=5, defense=10, movement=1,
            terrain_bonuses={'forest': 1.5, 'city': 1.5}),
    UnitDef('tank', 'Main Battle Tank', 'armor', cost=1500, upkeep=100,
            attack=60, defense=40, movement=2,
            terrain_bonuses={'plains': 1.2, 'desert': 1.2, 'mountain': 0.5}),
    UnitDef('artillery', 'Mobile Artillery', 'armor', cost=2000, upkeep=150,
            attack=80, defense=10, movement=1),
    UnitDef('helicopter', 'Attack Helicopter', 'air', cost=5000, upkeep=300,
            attack=90, defense=30, movement=4, tech_required='adv_aviation'),
    UnitDef('jet', 'F-35 Fighter', 'air', cost=12000, upkeep=500,
            attack=150, defense=80, movement=10, tech_required='adv_aviation'),
    UnitDef('bomber', 'Stealth Bomber', 'air', cost=25000, upkeep=1000,
            attack=400, defense=50, movement=8, tech_required='stealth_tech'),
    UnitDef('destroyer', 'Guided Missile Destroyer', 'navy', cost=25000, upkeep=1000,
            attack=200, defense=200, movement=3),
    UnitDef('sub', 'Attack Submarine', 'navy', cost=30000, upkeep=1200,
            attack=250, defense=100, movement=3, tech_required='naval_dominance'),
    UnitDef('carrier', 'Aircraft Carrier', 'navy', cost=150000, upkeep=5000,
            attack=500, defense=500, movement=2, tech_required='naval_dominance'),
    UnitDef('sam', 'S-400 Missile System', 'defense', cost=10000, upkeep=400,
            attack=100, defense=200, movement=1, tech_required='missile_tech'),
    UnitDef('nuke', 'ICBM', 'missile', cost=1000000, upkeep=5000,
            attack=9999, defense=0, movement=100, tech_required='nuclear_tech'),
])

# ── TECH TREE ──────────────────────────────────────────────────────────────────

TECH_TREE: Mapping[str, TechDef] = _frozen([
    TechDef('basic_eco', 'Market Economy', 'Improves tax generation by 10%.', 500, (),
            TechEffects(resource_multiplier={'money': 1.1}), x=10, y=50),
    TechDef('ind_automation', 'Industrial Automation', 'Factories produce 20% more revenue.', 1500,
            ('basic_eco',), TechEffects(resource_multiplier={'money': 1.2}), x=30, y=30),
    TechDef('adv_farming', 'GMO Crops', 'Farms produce 50% more food.', 1000,
            ('basic_eco',), TechEffects(resource_multiplier={'food': 1.5}), x=30, y=70),
    TechDef('adv_aviation', 'Advanced Aviation', 'Unlocks modern fighter jets and helicopters.', 2000,
            ('ind_automation',), TechEffects(unlock_units=('jet', 'helicopter')), x=50, y=20),
    TechDef('missile_tech', 'Rocketry', 'Unlocks Long Range Missile Systems.', 3000,
            ('ind_automation',), TechEffects(unlock_units=('sam',)), x=50, y=40),
    TechDef('stealth_tech', 'Stealth Composites', 'Unlocks Stealth Bombers.', 8000,
            ('adv_aviation',), TechEffects(unlock_units=('bomber',)), x=70, y=20),
    TechDef('naval_dominance', 'Blue Water Navy', 'Unlocks Carriers and Submarines.', 5000,
            ('ind_automation',), TechEffects(unlock_units=('carrier', 'sub')), x=50, y=60),
    TechDef('ai_research', 'Artificial Intelligence', 'Boosts research speed by 25%.', 10000,
            ('missile_tech', 'naval_dominance'),
            TechEffects(resource_multiplier={'research_points': 1.25}), x=70, y=50),
    TechDef('nuclear_tech', 'Nuclear Fission', 'Unlocks the ultimate deterrent.', 50000,
            ('ai_research', 'stealth_tech'), TechEffects(unlock_units=('nuke',)), x=90, y=50),
])

# ── NAME POOLS ─────────────────────────────────────────────────────────────────

# Call-signs for recruited generals, suffixed with a number
GENERAL_NAMES: Tuple[str, ...] = (
    "Wolf", "Hawk", "Viper", "Bear", "Fox", "Eagle", "Lion", "Tiger", "Shark", "Cobra",
)

# (name, flag, population in thousands)
NATION_NAMES: Tuple[Tuple[str, str, int], ...] = (
    ("United States", "🇺🇸", 330000),
    ("China", "🇨🇳", 1400000),
    ("Russia", "🇷🇺", 144000),
    ("Germany", "🇩🇪", 83000),
    ("United Kingdom", "🇬🇧", 67000),
    ("France", "🇫🇷", 65000),
    ("Japan", "🇯🇵", 126000),
    ("India", "🇮🇳", 1380000),
    ("Brazil", "🇧🇷", 212000),
    ("Italy", "🇮🇹", 60000),
)


# ── LOOKUPS ────────────────────────────────────────────────────────────────────

def _lookup(table: Mapping, key: str, kind: str):
    try:
        return table[key]
    except KeyError:
        raise UnknownEntityError(f"Unknown {kind}: {key}") from None


def get_biome(biome_id: str) -> BiomeDef:
    return _lookup(BIOMES, biome_id, 'biome')


def get_building(building_id: str) -> BuildingDef:
    return _lookup(BUILDINGS, building_id, 'building')


def get_unit(unit_id: str) -> UnitDef:
    return _lookup(UNITS, unit_id, 'unit')


def get_tech(tech_id: str) -> TechDef:
    return _lookup(TECH_TREE, tech_id, 'technology')


def is_tech_available(tech_id: str, researched: Iterable[str]) -> bool:
    """A tech is selectable when every prerequisite is researched and it is not itself researched."""
    done = set(researched)
    tech = get_tech(tech_id)
    return tech_id not in done and all(p in done for p in tech.prerequisites)


def is_unit_unlocked(unit_id: str, researched: Iterable[str]) -> bool:
    unit = get_unit(unit_id)
    return unit.tech_required is None or unit.tech_required in set(researched)


def empty_counts(table: Mapping) -> Dict[str, int]:
    """A zero count for every id of a catalog table."""
    return {key: 0 for key in table}
