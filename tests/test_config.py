import json
import os

from config import CONFIG, DEFAULTS, get_config, load_config

ROOT = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))


def test_shipped_config_matches_defaults():
    assert CONFIG == DEFAULTS


def test_missing_file_uses_defaults(tmp_path):
    assert load_config(str(tmp_path / 'nope.json')) == DEFAULTS


def test_malformed_file_uses_defaults(tmp_path):
    path = tmp_path / 'config.json'
    path.write_text('{not json')
    assert load_config(str(path)) == DEFAULTS


def test_overrides(tmp_path):
    path = tmp_path / 'config.json'
    path.write_text(json.dumps({
        'attack_margin': 1.5,
        'spy_costs': {'gather_intel': 10},
        'no_such_key': True,
    }))
    config = load_config(str(path))
    assert config['attack_margin'] == 1.5
    assert config['spy_costs']['gather_intel'] == 10
    assert config['spy_costs']['steal_tech'] == DEFAULTS['spy_costs']['steal_tech']
    assert 'no_such_key' not in config


def test_defaults_not_mutated(tmp_path):
    path = tmp_path / 'config.json'
    path.write_text(json.dumps({'spy_costs': {'gather_intel': 10}}))
    load_config(str(path))
    assert DEFAULTS['spy_costs']['gather_intel'] == 2000


def test_get_config():
    custom = {'attack_margin': 2.0}
    assert get_config(custom) is custom
    assert get_config() is CONFIG


def test_every_default_is_read_by_the_engine():
    sources = ''
    for module in ('diplomacy', 'map_gen', 'orders', 'resolution', 'state', 'upkeep'):
        with open(os.path.join(ROOT, f'{module}.py')) as f:
            sources += f.read()
    unused = [key for key in DEFAULTS if f"'{key}'" not in sources]
    assert unused == []
