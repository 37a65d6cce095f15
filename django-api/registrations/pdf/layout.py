"""Per-template-family calibration for locating and stamping signatures.

The values below match the stock liability waiver. A template records the
family it belongs to, and ``WAIVER_LAYOUTS`` in settings can override any
field per family.
"""

from dataclasses import dataclass, field, fields, replace
from typing import Any, Self

from django.conf import settings


@dataclass(frozen=True)
class AxisScale:
    horizontal: float
    vertical: float


@dataclass(frozen=True)
class DateLine:
    """Geometry of the underline run that marks where the signing date goes."""

    text: str = "_" * 18
    x: float = 31.52
    y: float = 42.89
    width: float = 9.17
    tolerance: float = 0.1

    def matches(self, text: str, x: float, y: float, width: float | None) -> bool:
        if text != self.text or width is None:
            return False
        return (
            abs(x - self.x) <= self.tolerance
            and abs(y - self.y) <= self.tolerance
            and abs(width - self.width) <= self.tolerance
        )


@dataclass(frozen=True)
class TemplateLayout:
    signature_text: str = "signature"
    signature_prefix: str = "signa"
    date_line: DateLine | None = field(default_factory=DateLine)
    signature_scale: AxisScale = AxisScale(horizontal=2.0, vertical=2.0)
    date_scale: AxisScale = AxisScale(horizontal=2.7, vertical=2.05)
    image_scale: float = 0.35
    date_font_size: float = 12.0
    name_font_size: float = 12.0
    guardian_gap: float = 11.0
    participant_gap: float = 31.0
    font_name: str = "helv"

    @classmethod
    def from_settings(cls, family: str = "default") -> Self:
        overrides = getattr(settings, "WAIVER_LAYOUTS", {}).get(family, {})
        return cls.from_dict(overrides)

    @classmethod
    def from_dict(cls, overrides: dict[str, Any]) -> Self:
        layout = cls()
        known = {f.name for f in fields(cls)}
        values: dict[str, Any] = {}
        for key, value in overrides.items():
            if key not in known:
                raise ValueError(f"Unknown waiver layout setting: {key}")
            if key == "date_line":
                value = DateLine(**value) if value is not None else None
            elif key in ("signature_scale", "date_scale"):
                value = AxisScale(**value)
            values[key] = value
        return replace(layout, **values)
