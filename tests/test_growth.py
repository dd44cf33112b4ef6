import pytest

from replacer.config import EngineConfig
from replacer.growth import exceeds_configured_growth, exceeds_growth


@pytest.mark.parametrize(
    "current, original, expected",
    [
        (4800, 1200, False),
        (4801, 1200, True),
        (50, 10, False),
        (1000, 3, False),
        (1001, 3, True),
        (8001, 2000, True),
    ],
)
def test_growth_requires_both_relative_and_absolute_bounds(current, original, expected):
    assert exceeds_growth(current, original) is expected


def test_growth_uses_configured_limits():
    config = EngineConfig(growth_factor=2, growth_floor=10)

    assert exceeds_configured_growth(21, 10, config)
    assert not exceeds_configured_growth(20, 10, config)


def test_engine_config_validates_limits():
    with pytest.raises(ValueError):
        EngineConfig(growth_factor=0)
    with pytest.raises(ValueError):
        EngineConfig(yield_interval=-1)
