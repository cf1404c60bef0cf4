"""Configuration, presets and validation for pipe growth."""

from .config import PipeConfig, PoolConfig

from .presets import (
    classic,
    dense,
    sparse_debug,
    get_preset,
    list_presets,
    PRESETS,
)

from .validation import (
    validate_pipe_config,
    validate_pool_config,
    pipe_config_warnings,
    require_valid,
    PIPE_PARAM_BOUNDS,
    POOL_PARAM_BOUNDS,
)

__all__ = [
    "PipeConfig",
    "PoolConfig",
    # Presets
    "classic",
    "dense",
    "sparse_debug",
    "get_preset",
    "list_presets",
    "PRESETS",
    # Validation
    "validate_pipe_config",
    "validate_pool_config",
    "pipe_config_warnings",
    "require_valid",
    "PIPE_PARAM_BOUNDS",
    "POOL_PARAM_BOUNDS",
]
