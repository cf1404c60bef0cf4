"""
Tests for configuration, validation and presets.
"""

import logging
import pytest

from pipes_lib.core.types import ColorRGB
from pipes_lib.params import (
    PipeConfig,
    PoolConfig,
    get_preset,
    list_presets,
    validate_pipe_config,
    validate_pool_config,
    pipe_config_warnings,
    require_valid,
)


def test_defaults_are_valid():
    is_valid, errors = validate_pipe_config(PipeConfig())
    assert is_valid, errors

    is_valid, errors = validate_pool_config(PoolConfig())
    assert is_valid, errors


def test_clearance_is_widest_piece():
    assert PipeConfig(pipe_radius=0.5, turn_sphere_radius=0.7).clearance == 0.7
    assert PipeConfig(pipe_radius=0.9, turn_sphere_radius=0.7).clearance == 0.9


def test_target_active_count_respects_cap():
    assert PoolConfig(desired_active_pipe_count=9, max_pipes_on_screen=7).target_active_count == 7
    assert PoolConfig(desired_active_pipe_count=2, max_pipes_on_screen=7).target_active_count == 2


@pytest.mark.parametrize("overrides", [
    {"maximum_pipe_turns": -1},
    {"minimum_stretch_distance": -1.0},
    {"minimum_stretch_distance": 1.0},
    {"maximum_stretch_distance": 0.0, "minimum_stretch_distance": 0.0},
    {"turn_frequency": 0},
    {"speed": 0.0},
    {"pipe_radius": 0.0},
    {"turn_sphere_radius": -0.1},
    {"boundary_size": (10.0, -1.0, 10.0)},
    {"boundary_size": (10.0, 10.0)},
    {"start_position": (100.0, 0.0, 0.0)},
    {"initial_direction": (1.0, 1.0, 0.0)},
    {"max_blocked_turns": 0},
    {"darkness_threshold": 1.5},
])
def test_invalid_pipe_configs(overrides):
    is_valid, errors = validate_pipe_config(PipeConfig(**overrides))
    assert not is_valid
    assert errors


def test_min_stretch_above_max_reports_both_values():
    config = PipeConfig(minimum_stretch_distance=8.0, maximum_stretch_distance=4.0)
    is_valid, errors = validate_pipe_config(config)

    assert not is_valid
    assert any("8.0" in e and "4.0" in e for e in errors)


def test_stretch_must_clear_the_pipe_thickness():
    # default clearance is 0.7, so stretches must be longer than 1.4
    is_valid, errors = validate_pipe_config(PipeConfig(minimum_stretch_distance=1.4))
    assert not is_valid
    assert any("twice the pipe clearance" in e for e in errors)

    is_valid, _ = validate_pipe_config(PipeConfig(minimum_stretch_distance=1.5))
    assert is_valid


def test_zero_turn_budget_is_allowed():
    is_valid, _ = validate_pipe_config(PipeConfig(maximum_pipe_turns=0))
    assert is_valid


def test_pool_checks_its_own_boundary_for_the_template():
    # template start lies outside the pool's smaller box
    config = PoolConfig(
        boundary_size=(10.0, 10.0, 10.0),
        pipe=PipeConfig(start_position=(8.0, 0.0, 0.0), maximum_stretch_distance=4.0),
    )
    is_valid, errors = validate_pool_config(config)

    assert not is_valid
    assert any(e.startswith("pipe.start_position") for e in errors)


@pytest.mark.parametrize("overrides", [
    {"desired_active_pipe_count": -1},
    {"max_pipes_on_screen": 0},
    {"min_pipe_turns": 0},
    {"min_pipe_turns": 20, "max_pipe_turns": 10},
    {"pipe_speed": 0.0},
    {"history_limit": -1},
    {"start_attempts": 0},
])
def test_invalid_pool_configs(overrides):
    is_valid, errors = validate_pool_config(PoolConfig(**overrides))
    assert not is_valid
    assert errors


def test_require_valid_raises_with_every_problem():
    config = PipeConfig(speed=0.0, pipe_radius=0.0)
    with pytest.raises(ValueError) as excinfo:
        require_valid(config)

    message = str(excinfo.value)
    assert "Invalid PipeConfig (2 problems)" in message
    assert "speed" in message and "pipe_radius" in message


def test_warnings_are_logged_not_raised(caplog):
    config = PipeConfig(
        pipe_radius=0.5,
        turn_sphere_radius=0.3,
        minimum_stretch_distance=3.0,
        maximum_stretch_distance=100.0,
    )
    warnings = pipe_config_warnings(config)
    assert len(warnings) == 2

    with caplog.at_level(logging.WARNING, logger="pipes_lib.params.validation"):
        require_valid(config)
    assert len(caplog.records) == 2


def test_pipe_config_round_trip_keeps_color():
    config = PipeConfig(pipe_color=ColorRGB(0.2, 0.4, 0.6), boundary_size=(10.0, 20.0, 30.0))
    restored = PipeConfig.from_dict(config.to_dict())

    assert restored == config
    assert isinstance(restored.boundary_size, tuple)


def test_pool_config_from_partial_dict():
    config = PoolConfig.from_dict({"desired_active_pipe_count": 3, "pipe": {"turn_frequency": 2}})

    assert config.desired_active_pipe_count == 3
    assert config.max_pipes_on_screen == 7
    assert config.pipe.turn_frequency == 2
    assert config.pipe.pipe_radius == 0.5


def test_with_overrides_returns_a_copy():
    base = PipeConfig()
    changed = base.with_overrides(speed=4.0)

    assert changed.speed == 4.0
    assert base.speed == 1.0


@pytest.mark.parametrize("name", ["classic", "dense", "sparse_debug"])
def test_presets_are_valid(name):
    is_valid, errors = validate_pool_config(get_preset(name))
    assert is_valid, errors


def test_list_presets():
    assert set(list_presets()) == {"classic", "dense", "sparse_debug"}


def test_unknown_preset():
    with pytest.raises(ValueError, match="Unknown preset"):
        get_preset("spaghetti")
