# backend/label_designer/services/drag_controller.py
"""
Pointer-driven selection and dragging.

Two states: IDLE and DRAGGING. Pointer coordinates are viewport pixels
relative to the canvas top-left; they are mapped into canvas space with
the same scale the renderer uses. Every committed position is clamped
into the canvas, and commits go through the session's update_field.
"""

import logging
from enum import Enum
from typing import TYPE_CHECKING

from label_designer.models.fields import BaseField, Position
from label_designer.models.label_types import RenderMode
from label_designer.services.renderer import field_box
from label_designer.services.scaling import clamp_position, snap, to_canvas

if TYPE_CHECKING:
    from label_designer.services.designer_session import DesignerSession

logger = logging.getLogger(__name__)


class DragState(str, Enum):
    IDLE = "idle"
    DRAGGING = "dragging"


class DragController:
    """Selection/drag state machine owned by a designer session."""

    def __init__(self, session: "DesignerSession"):
        self._session = session
        self.state = DragState.IDLE
        self.field_id: str | None = None
        self.offset: tuple[float, float] | None = None  # Pointer minus field corner, canvas px
        self._moved = False

    @property
    def is_dragging(self) -> bool:
        return self.state == DragState.DRAGGING

    def hit_test(self, x: float, y: float) -> BaseField | None:
        """Topmost enabled field whose box contains the viewport point."""
        canvas_x, canvas_y = to_canvas(x, y, self._session.scale)
        for field in reversed(self._session.template.fields):
            if field.enabled and field_box(field).contains(canvas_x, canvas_y):
                return field
        return None

    def pointer_down(self, x: float, y: float) -> str | None:
        """
        IDLE -> DRAGGING on a field (and select it); clears selection on empty canvas.

        Returns:
            Id of the grabbed field, None if nothing was grabbed
        """
        if self._session.mode != RenderMode.DESIGN:
            return None

        self.release()
        field = self.hit_test(x, y)
        if field is None:
            self._session.select(None)
            return None

        self._session.select(field.id)
        canvas_x, canvas_y = to_canvas(x, y, self._session.scale)
        self.state = DragState.DRAGGING
        self.field_id = field.id
        self.offset = (canvas_x - field.position.x, canvas_y - field.position.y)
        self._moved = False
        return field.id

    def pointer_move(self, x: float, y: float) -> Position | None:
        """
        Moves the grabbed field to the pointer, clamped to the canvas.

        Returns:
            Committed position, None when not dragging
        """
        if not self.is_dragging or self.field_id is None or self.offset is None:
            return None

        template = self._session.template
        if not template.has_field(self.field_id):
            # Field removed mid-drag
            self.release()
            return None

        field = template.get_field(self.field_id)
        canvas_x, canvas_y = to_canvas(x, y, self._session.scale)
        new_x = canvas_x - self.offset[0]
        new_y = canvas_y - self.offset[1]

        if self._session.snap_to_grid:
            new_x = snap(new_x, self._session.grid_size)
            new_y = snap(new_y, self._session.grid_size)

        new_x, new_y = clamp_position(new_x, new_y, field.size, self._session.canvas)
        if (new_x, new_y) == (field.position.x, field.position.y):
            return field.position

        if not self._moved:
            # Whole gesture is one undo step
            self._session.checkpoint()
            self._moved = True

        updated = self._session.update_field(
            self.field_id,
            {"position": {"x": new_x, "y": new_y}},
            track_history=False,
        )
        return updated.position

    def pointer_up(self) -> None:
        self.release()

    def pointer_leave(self) -> None:
        self.release()

    def release(self) -> None:
        """DRAGGING -> IDLE."""
        if self.is_dragging and self._moved:
            logger.debug(f"Field {self.field_id} dropped")
        self.state = DragState.IDLE
        self.field_id = None
        self.offset = None
        self._moved = False
