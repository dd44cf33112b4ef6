from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class EngineConfig:
    """Limits and pacing for one replacement run.

    ``growth_factor`` and ``growth_floor`` are a hand-tuned heuristic: a run is
    aborted once its content is both larger than ``growth_factor`` times the
    input and larger than ``growth_floor`` characters.
    """

    growth_factor: int = 4
    growth_floor: int = 1000
    yield_interval: float = 0.001

    def __post_init__(self) -> None:
        if self.growth_factor <= 0:
            raise ValueError("growth_factor must be positive")
        if self.growth_floor < 0:
            raise ValueError("growth_floor must be non-negative")
        if self.yield_interval < 0:
            raise ValueError("yield_interval must be non-negative")


DEFAULT_CONFIG = EngineConfig()
