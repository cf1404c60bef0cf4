"""Named configuration presets for pipe pools."""

from .config import PipeConfig, PoolConfig


def classic() -> PoolConfig:
    """
    The screensaver look: one pipe at a time in a wide, flat room.

    Characteristics:
    - Long runs between scheduled turns
    - Hundreds of turns per pipe
    """
    return PoolConfig(
        desired_active_pipe_count=1,
        max_pipes_on_screen=7,
        min_pipe_turns=100,
        max_pipe_turns=200,
        pipe_speed=1.0,
        boundary_size=(60.0, 30.0, 60.0),
        pipe=PipeConfig(
            minimum_stretch_distance=3.0,
            maximum_stretch_distance=10.0,
            pipe_radius=0.5,
            turn_sphere_radius=0.7,
            turn_frequency=5,
        ),
    )


def dense() -> PoolConfig:
    """Several thinner pipes competing for a smaller volume."""
    return PoolConfig(
        desired_active_pipe_count=5,
        max_pipes_on_screen=7,
        min_pipe_turns=40,
        max_pipe_turns=80,
        pipe_speed=4.0,
        boundary_size=(40.0, 24.0, 40.0),
        history_limit=32,
        pipe=PipeConfig(
            minimum_stretch_distance=2.0,
            maximum_stretch_distance=6.0,
            pipe_radius=0.3,
            turn_sphere_radius=0.45,
            turn_frequency=3,
        ),
    )


def sparse_debug() -> PoolConfig:
    """Few short, fast pipes for debugging and tests."""
    return PoolConfig(
        desired_active_pipe_count=2,
        max_pipes_on_screen=2,
        min_pipe_turns=3,
        max_pipe_turns=6,
        pipe_speed=1000.0,
        boundary_size=(40.0, 40.0, 40.0),
        history_limit=8,
        pipe=PipeConfig(
            minimum_stretch_distance=3.0,
            maximum_stretch_distance=5.0,
            turn_frequency=2,
            max_blocked_turns=8,
        ),
    )


PRESETS = {
    "classic": classic,
    "dense": dense,
    "sparse_debug": sparse_debug,
}


def get_preset(name: str) -> PoolConfig:
    """
    Get a configuration preset by name.

    Raises
    ------
    ValueError
        If preset name is not recognized
    """
    if name not in PRESETS:
        available = ", ".join(PRESETS.keys())
        raise ValueError(f"Unknown preset '{name}'. Available: {available}")

    return PRESETS[name]()


def list_presets() -> list:
    """List all available preset names."""
    return list(PRESETS.keys())
