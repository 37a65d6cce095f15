"""Text-layer to render-space coordinate mapping.

Render space is the page's point space with the origin at the bottom-left
and y growing upward.
"""

from dataclasses import dataclass

from registrations.pdf.anchors import Anchor
from registrations.pdf.layout import AxisScale


@dataclass(frozen=True)
class RenderPoint:
    x: float
    y: float
    page: int


def to_render_space(anchor: Anchor, page_width: float, page_height: float, scale: AxisScale) -> RenderPoint:
    return RenderPoint(
        x=(anchor.x / 100) * scale.horizontal * page_width,
        y=page_height - (anchor.y / 100) * scale.vertical * page_height,
        page=anchor.page,
    )
