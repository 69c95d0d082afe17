import pytest

from config import COMPACT, DEFAULT, SPACIOUS, LayoutConfiguration


def test_defaults():
    config = LayoutConfiguration()
    assert config == DEFAULT
    assert (
        config.base_spacing,
        config.spouse_spacing,
        config.vertical_spacing,
        config.min_spacing,
        config.expansion_factor,
    ) == (150.0, 120.0, 200.0, 100.0, 1.2)


def test_presets():
    assert COMPACT.min_spacing == 60.0
    assert COMPACT.expansion_factor == 1.1
    assert SPACIOUS.base_spacing == 240.0
    assert SPACIOUS.vertical_spacing == 250.0


@pytest.mark.parametrize(
    "options",
    [
        {"base_spacing": 0},
        {"min_spacing": -10},
        {"vertical_spacing": "wide"},
        {"expansion_factor": 1.0},
        {"expansion_factor": 0.5},
    ],
)
def test_invalid_values_are_rejected(options):
    with pytest.raises(ValueError):
        LayoutConfiguration(**options)


def test_from_mapping_accepts_camel_and_snake_case():
    config = LayoutConfiguration.from_mapping(
        {"baseSpacing": 200, "spouse_spacing": "110", "unknown": 1}
    )
    assert config.base_spacing == 200.0
    assert config.spouse_spacing == 110.0
    assert config.vertical_spacing == DEFAULT.vertical_spacing


def test_configuration_is_frozen():
    with pytest.raises(AttributeError):
        DEFAULT.base_spacing = 10.0
