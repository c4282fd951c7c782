"""
Configuration loading for the grand-strategy core.

Balance constants live in config.json next to this module. Every key has a
built-in default so the engine behaves identically when the file is missing.
"""

import copy
import json
import os
from typing import Any, Dict, Optional

CONFIG_PATH = os.path.join(os.path.dirname(__file__), 'config.json')

DEFAULTS: Dict[str, Any] = {
    'map_radius': 8,
    'initial_year': 2027,
    'starting_intel': 10,
    'general_cost': 5000,
    'general_stat_min': 1,
    'general_stat_max': 5,
    'population_tax_rate': 0.001,
    'army_upkeep_multiplier': 1.5,
    'army_food_per_unit': 0.2,
    'army_oil_per_unit': 0.8,
    'lab_research_bonus': 50,
    'attack_margin': 1.1,
    'loss_scale': 0.3,
    'attacker_loss_min': 0.05,
    'attacker_loss_max': 0.5,
    'defender_loss_min': 0.05,
    'defender_loss_max': 1.0,
    'militia_power': 50,
    'tile_defense_weight': 10,
    'general_stat_bonus': 0.05,
    'army_base_movement': 2,
    'logistics_per_movement': 5,
    'diplomacy_cost': 1000,
    'aid_amount': 1000,
    'trade_opinion_required': 25,
    'alliance_opinion_required': 75,
    'tribute_rate': 0.1,
    'tribute_strength_ratio': 2.0,
    'spy_costs': {
        'gather_intel': 2000,
        'sabotage_industry': 5000,
        'steal_tech': 8000,
        'incite_unrest': 4000,
    },
    'spy_success': {
        'gather_intel': 0.8,
        'sabotage_industry': 0.5,
        'steal_tech': 0.35,
        'incite_unrest': 0.5,
    },
    'intel_gain': 25,
    'unrest_population_loss': 0.02,
}


def load_config(path: Optional[str] = None) -> Dict[str, Any]:
    """
    Load balance constants, overlaying the JSON file on the defaults.

    Args:
        path: Path to a JSON config file (default: config.json beside this module)

    Returns:
        Dictionary with every key of DEFAULTS present
    """
    config = copy.deepcopy(DEFAULTS)
    try:
        with open(path or CONFIG_PATH, 'r') as f:
            overrides = json.load(f)
    except (FileNotFoundError, json.JSONDecodeError):
        # Use defaults if config file is missing or invalid
        return config

    for key, value in overrides.items():
        if key not in config:
            continue
        if isinstance(config[key], dict) and isinstance(value, dict):
            config[key].update(value)
        else:
            config[key] = value
    return config


CONFIG = load_config()


def get_config(config: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
    """Return the given config, or the module-level loaded one."""
    return CONFIG if config is None else config
