from __future__ import annotations

from replacer.config import DEFAULT_CONFIG, EngineConfig


def exceeds_growth(
    current_length: int,
    original_length: int,
    *,
    factor: int = DEFAULT_CONFIG.growth_factor,
    floor: int = DEFAULT_CONFIG.growth_floor,
) -> bool:
    """Whether content has grown too much relative to the run's input.

    Both bounds must be exceeded; the absolute floor keeps tiny inputs from
    tripping the relative bound.
    """

    return current_length > factor * original_length and current_length > floor


def exceeds_configured_growth(current_length: int, original_length: int, config: EngineConfig) -> bool:
    return exceeds_growth(
        current_length,
        original_length,
        factor=config.growth_factor,
        floor=config.growth_floor,
    )
