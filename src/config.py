"""Layout spacing configuration."""

from dataclasses import dataclass, fields
from typing import Any, Mapping


@dataclass(frozen=True)
class LayoutConfiguration:
    """
    Spacing options for a layout run, in abstract layout units.

    `min_spacing <= spouse_spacing <= base_spacing` is expected but not
    enforced; callers are responsible for sane values.
    """

    base_spacing: float = 150.0
    spouse_spacing: float = 120.0
    vertical_spacing: float = 200.0
    min_spacing: float = 100.0
    expansion_factor: float = 1.2

    def __post_init__(self):
        for f in fields(self):
            value = getattr(self, f.name)
            if not isinstance(value, (int, float)) or value <= 0:
                raise ValueError(f"{f.name} must be a positive number, got {value!r}")
        if self.expansion_factor <= 1.0:
            raise ValueError(
                f"expansion_factor must be greater than 1.0, got {self.expansion_factor!r}"
            )

    @classmethod
    def from_mapping(cls, options: Mapping[str, Any]) -> "LayoutConfiguration":
        """
        Build a configuration from a mapping such as a decoded JSON object.

        Accepts snake_case or camelCase keys ("baseSpacing"); missing keys keep
        their defaults and unknown keys are ignored.
        """
        values = {}
        for f in fields(cls):
            head, *rest = f.name.split("_")
            camel = head + "".join(part.capitalize() for part in rest)
            for key in (f.name, camel):
                if key in options:
                    values[f.name] = float(options[key])
                    break
        return cls(**values)


DEFAULT = LayoutConfiguration()

COMPACT = LayoutConfiguration(
    base_spacing=120.0,
    spouse_spacing=100.0,
    vertical_spacing=150.0,
    min_spacing=60.0,
    expansion_factor=1.1,
)

SPACIOUS = LayoutConfiguration(
    base_spacing=240.0,
    spouse_spacing=200.0,
    vertical_spacing=250.0,
    min_spacing=100.0,
    expansion_factor=1.2,
)
