import json

import pytest

from kinchart.config import DEFAULT_CONFIG, LayoutConfig, config_from_dict, load_config


def test_defaults_match_chart_dimensions():
    assert DEFAULT_CONFIG.node_width == 220
    assert DEFAULT_CONFIG.member_stride == 245
    assert DEFAULT_CONFIG.rank_height == 290
    assert DEFAULT_CONFIG.cluster_width(3) == 3 * 220 + 2 * 25


def test_config_from_dict_coerces_numbers():
    config, rules = config_from_dict({"config": {"node_width": "180", "ordering_sweeps": 3.0}})
    assert config.node_width == 180.0
    assert config.ordering_sweeps == 3
    assert isinstance(config.ordering_sweeps, int)
    assert rules.center_parent


def test_rules_must_be_booleans():
    with pytest.raises(ValueError):
        config_from_dict({"rules": {"show_orphans": "no"}})
    _, rules = config_from_dict({"rules": {"show_orphans": False}})
    assert rules.show_orphans is False


def test_unknown_keys_are_rejected():
    with pytest.raises(ValueError):
        config_from_dict({"config": {"node_depth": 4}})
    with pytest.raises(ValueError):
        config_from_dict({"theme": {}})


def test_node_size_must_be_positive():
    with pytest.raises(ValueError):
        config_from_dict({"config": {"node_height": 0}})


def test_load_config(tmp_path):
    path = tmp_path / "layout.json"
    path.write_text(json.dumps({"config": {"margin": 10}}))
    config, _ = load_config(path)
    assert config == LayoutConfig(margin=10.0)
