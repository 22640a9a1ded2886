# backend/label_designer/models/visual.py
"""
Visual tree produced by the canvas renderer.

Coordinates are canvas pixels; the single viewport transform is carried by
``CanvasTree.scale`` and applied to the whole tree by whoever draws it.
"""

from dataclasses import dataclass, field

from PIL import Image

from label_designer.models.fields import Border, FieldStyle
from label_designer.models.label_types import FieldType, RenderMode


@dataclass(frozen=True)
class Box:
    x: float
    y: float
    width: float
    height: float

    @property
    def right(self) -> float:
        return self.x + self.width

    @property
    def bottom(self) -> float:
        return self.y + self.height

    def contains(self, x: float, y: float) -> bool:
        """Inclusive bounding-box hit test."""
        return self.x <= x <= self.right and self.y <= y <= self.bottom


@dataclass
class FieldNode:
    """Base node: one rendered field."""

    field_id: str
    field_type: FieldType
    box: Box
    style: FieldStyle


@dataclass
class TextNode(FieldNode):
    lines: list[str]
    font_size: int
    clipped: bool = False


@dataclass
class CodeImageNode(FieldNode):
    """Barcode/QR raster, resized to the field box."""

    image: Image.Image
    payload: str
    symbology: str


@dataclass
class PlaceholderNode(FieldNode):
    """Stand-in box (image fields, failed or pending codes)."""

    text: str


@dataclass
class RuleNode(FieldNode):
    color: str
    thickness: float = 1.0


@dataclass
class RectangleNode(FieldNode):
    border: Border | None
    background_color: str | None


@dataclass
class SelectionChrome:
    """Outline and floating tag around the selected field (design mode only)."""

    field_id: str
    box: Box
    tag: str


@dataclass
class CanvasTree:
    """Root of a rendered label."""

    width: float
    height: float
    scale: float
    mode: RenderMode
    show_grid: bool = False
    grid_size: int | None = None
    nodes: list[FieldNode] = field(default_factory=list)
    selection: SelectionChrome | None = None

    @property
    def viewport_width(self) -> float:
        return self.width * self.scale

    @property
    def viewport_height(self) -> float:
        return self.height * self.scale

    def node_for(self, field_id: str) -> FieldNode | None:
        for node in self.nodes:
            if node.field_id == field_id:
                return node
        return None
