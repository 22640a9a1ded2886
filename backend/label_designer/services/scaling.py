# backend/label_designer/services/scaling.py
"""
Viewport scaling and canvas bounds.

The scale is a pure function of canvas dimensions and viewport bounds.
Rendering and hit-testing both go through these functions so they never
drift apart.
"""

from dataclasses import dataclass

from label_designer.config import get_settings
from label_designer.models.fields import Size
from label_designer.models.template import CanvasDimensions


@dataclass(frozen=True)
class Viewport:
    """Maximum on-screen area available to the canvas."""

    max_width: float
    max_height: float

    @classmethod
    def from_settings(cls) -> "Viewport":
        settings = get_settings()
        return cls(max_width=settings.viewport_max_width, max_height=settings.viewport_max_height)


def compute_scale(canvas: CanvasDimensions, viewport: Viewport) -> float:
    """Uniform fit-to-viewport factor, never enlarging: min(1, vw/cw, vh/ch)."""
    return min(1.0, viewport.max_width / canvas.width, viewport.max_height / canvas.height)


def to_canvas(x: float, y: float, scale: float) -> tuple[float, float]:
    """Viewport point -> canvas point."""
    return x / scale, y / scale


def to_viewport(x: float, y: float, scale: float) -> tuple[float, float]:
    """Canvas point -> viewport point."""
    return x * scale, y * scale


def clamp_position(x: float, y: float, size: Size, canvas: CanvasDimensions) -> tuple[float, float]:
    """
    Clamps a top-left corner so the box stays inside the canvas.

    Each axis is clamped independently to [0, canvas - size]. A box larger
    than the canvas is pinned to the origin on that axis.
    """
    max_x = max(0.0, canvas.width - size.width)
    max_y = max(0.0, canvas.height - size.height)
    return min(max(x, 0.0), max_x), min(max(y, 0.0), max_y)


def snap(value: float, grid_size: int) -> float:
    """Nearest grid line."""
    return float(round(value / grid_size) * grid_size)
