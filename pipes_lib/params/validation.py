"""Parameter validation with bounds checking.

Hard errors make a configuration unusable and are raised by `require_valid`
before any grower starts. Soft warnings only get logged.
"""

import logging
from typing import List, Tuple, Union
from .config import PipeConfig, PoolConfig

logger = logging.getLogger(__name__)


PIPE_PARAM_BOUNDS = {
    "maximum_pipe_turns": (0, None, "turns"),
    "minimum_stretch_distance": (0.0, None, "length"),
    "maximum_stretch_distance": (0.0, None, "length"),
    "turn_frequency": (1, None, "segments"),
    "max_blocked_turns": (1, None, "turns"),
    "darkness_threshold": (0.0, 1.0, "ratio"),
}

POOL_PARAM_BOUNDS = {
    "desired_active_pipe_count": (0, None, "pipes"),
    "max_pipes_on_screen": (1, None, "pipes"),
    "min_pipe_turns": (1, None, "turns"),
    "max_pipe_turns": (1, None, "turns"),
    "start_attempts": (1, None, "attempts"),
}


def _check_bounds(config, bounds: dict) -> List[str]:
    errors = []
    for param_name, (min_val, max_val, unit) in bounds.items():
        value = getattr(config, param_name)
        if min_val is not None and value < min_val:
            errors.append(f"{param_name} = {value} {unit} is below minimum {min_val} {unit}")
        elif max_val is not None and value > max_val:
            errors.append(f"{param_name} = {value} {unit} exceeds maximum {max_val} {unit}")
    return errors


def _check_positive(config, names) -> List[str]:
    return [
        f"{name} must be > 0, got {getattr(config, name)}"
        for name in names
        if not getattr(config, name) > 0
    ]


def _check_extents(name: str, size) -> List[str]:
    if len(size) != 3:
        return [f"{name} must have three extents, got {len(size)}"]
    if any(not s > 0 for s in size):
        return [f"{name} extents must all be > 0, got {tuple(size)}"]
    return []


def validate_pipe_config(config: PipeConfig) -> Tuple[bool, List[str]]:
    """
    Validate a PipeConfig.

    Parameters
    ----------
    config : PipeConfig
        Configuration to validate

    Returns
    -------
    is_valid : bool
        True if the configuration can be grown
    errors : list of str
        Every hard problem found
    """
    errors = _check_bounds(config, PIPE_PARAM_BOUNDS)
    errors += _check_positive(
        config, ("speed", "pipe_radius", "turn_sphere_radius", "maximum_stretch_distance"),
    )
    errors += _check_extents("boundary_size", config.boundary_size)

    if config.minimum_stretch_distance > config.maximum_stretch_distance:
        errors.append(
            f"minimum_stretch_distance ({config.minimum_stretch_distance}) must not exceed "
            f"maximum_stretch_distance ({config.maximum_stretch_distance})"
        )

    if config.minimum_stretch_distance <= 2 * config.clearance:
        errors.append(
            f"minimum_stretch_distance ({config.minimum_stretch_distance}) must exceed "
            f"twice the pipe clearance ({config.clearance})"
        )

    if len(config.start_position) != 3:
        errors.append("start_position must have three coordinates")
    elif not errors:
        half = [s / 2 for s in config.boundary_size]
        if any(abs(c) > h for c, h in zip(config.start_position, half)):
            errors.append(
                f"start_position {tuple(config.start_position)} lies outside the boundary "
                f"{tuple(config.boundary_size)}"
            )

    d = config.initial_direction
    if len(d) != 3 or sorted(abs(c) for c in d) != [0, 0, 1]:
        errors.append(f"initial_direction must be an axis-aligned unit vector, got {tuple(d)}")

    return len(errors) == 0, errors


def pipe_config_warnings(config: PipeConfig) -> List[str]:
    """Soft problems that do not block growth."""
    warnings = []

    if config.turn_sphere_radius < config.pipe_radius:
        warnings.append(
            f"turn_sphere_radius ({config.turn_sphere_radius}) is smaller than "
            f"pipe_radius ({config.pipe_radius}); joints will look pinched"
        )

    if config.maximum_stretch_distance > max(config.boundary_size):
        warnings.append(
            f"maximum_stretch_distance ({config.maximum_stretch_distance}) exceeds the largest "
            f"boundary extent ({max(config.boundary_size)})"
        )

    return warnings


def validate_pool_config(config: PoolConfig) -> Tuple[bool, List[str]]:
    """Validate a PoolConfig together with its pipe template."""
    errors = _check_bounds(config, POOL_PARAM_BOUNDS)
    errors += _check_positive(config, ("pipe_speed",))
    errors += _check_extents("boundary_size", config.boundary_size)

    if config.min_pipe_turns > config.max_pipe_turns:
        errors.append(
            f"min_pipe_turns ({config.min_pipe_turns}) must not exceed "
            f"max_pipe_turns ({config.max_pipe_turns})"
        )

    if config.history_limit is not None and config.history_limit < 0:
        errors.append(f"history_limit must be >= 0 or None, got {config.history_limit}")

    template = config.pipe.with_overrides(
        boundary_size=tuple(config.boundary_size),
        speed=config.pipe_speed,
    ) if not errors else config.pipe
    _, pipe_errors = validate_pipe_config(template)
    errors += [f"pipe.{e}" for e in pipe_errors]

    return len(errors) == 0, errors


def require_valid(config: Union[PipeConfig, PoolConfig]) -> None:
    """
    Raise ValueError listing every problem if `config` is invalid.

    Soft warnings are logged and do not raise.
    """
    if isinstance(config, PoolConfig):
        is_valid, errors = validate_pool_config(config)
        pipe_config = config.pipe
    else:
        is_valid, errors = validate_pipe_config(config)
        pipe_config = config

    if not is_valid:
        raise ValueError(
            f"Invalid {type(config).__name__} ({len(errors)} problems): " + "; ".join(errors)
        )

    for warning in pipe_config_warnings(pipe_config):
        logger.warning(warning)
