import json
import math

import pytest

from geoforce import (
    ConfigurationError,
    LayoutConfig,
    SimulationOptions,
    get_layout_config,
    set_layout_config,
)
from geoforce.config import decay_for_ticks


def test_default_decay_reaches_alpha_min_in_300_ticks():
    decay = SimulationOptions().resolved_alpha_decay()
    assert decay == pytest.approx(0.0228, abs=1e-4)
    assert (1.0 - decay) ** 300 == pytest.approx(0.001)


def test_explicit_decay_wins():
    assert SimulationOptions(alpha_decay=0.05).resolved_alpha_decay() == 0.05


def test_zero_alpha_min_decays_immediately():
    assert decay_for_ticks(0.0) == 1.0
    with pytest.raises(ConfigurationError):
        decay_for_ticks(0.001, ticks=0)


def test_from_mapping_builds_nested_options():
    config = LayoutConfig.from_mapping(
        {
            "partition_links": True,
            "charge": {"strength": -80.0, "distance_max": math.inf},
            "anchored_link": {"distance": 120.0, "strength": 0.2},
            "simulation": {"velocity_decay": 0.5, "seed": 9},
        }
    )
    assert config.partition_links
    assert config.charge.strength == -80.0
    assert config.anchored_link.distance == 120.0
    assert config.simulation.seed == 9
    assert config.collide.padding == 1.5


@pytest.mark.parametrize(
    "data",
    [
        {"charge": {"strenght": -10}},
        {"unknown": 1},
        {"simulation": {"velocity_decay": 2.0}},
        {"restart_alpha": 3.0},
        {"collide": "on"},
    ],
)
def test_from_mapping_rejects_bad_options(data):
    with pytest.raises(ConfigurationError):
        LayoutConfig.from_mapping(data)


def test_from_file_round_trips_to_dict(tmp_path):
    path = tmp_path / "layout.json"
    path.write_text(json.dumps({"default_radius": 8, "position": {"strength": 0.3}}), encoding="utf-8")
    config = LayoutConfig.from_file(path)
    data = config.to_dict()
    assert data["default_radius"] == 8
    assert data["position"] == {"enabled": True, "strength": 0.3}


def test_default_config_is_copied():
    first = get_layout_config()
    first.charge.strength = -999.0
    assert get_layout_config().charge.strength == -30.0


def test_set_layout_config_replaces_default():
    original = get_layout_config()
    try:
        set_layout_config(LayoutConfig(default_radius=4.0))
        assert get_layout_config().default_radius == 4.0
    finally:
        set_layout_config(original)
    with pytest.raises(ConfigurationError):
        set_layout_config(LayoutConfig(default_radius=-1.0))
