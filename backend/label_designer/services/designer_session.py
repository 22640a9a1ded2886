# backend/label_designer/services/designer_session.py
"""
Designer session: the single owner of the template being edited.

The renderer and the drag controller only read the template and propose
changes through update_field; nothing else replaces the field list.
"""

import asyncio
import logging
from typing import Any

from label_designer.config import Settings, get_settings
from label_designer.exceptions import FieldUpdateError, ValidationError
from label_designer.models.fields import (
    BaseField,
    Position,
    TemplateField,
    create_field,
    new_field_id,
    update_field,
)
from label_designer.models.label_types import FieldType, LabelSize, Orientation, RenderMode
from label_designer.models.template import COPY_SUFFIX, CanvasDimensions, Template
from label_designer.models.visual import CanvasTree
from label_designer.repositories.template_repository import TemplateRepository
from label_designer.services import error_messages
from label_designer.services.binding import BoundRecord
from label_designer.services.code_regenerator import CodeRegenerator
from label_designer.services.drag_controller import DragController
from label_designer.services.error_messages import FriendlyError
from label_designer.services.renderer import CanvasRenderer

logger = logging.getLogger(__name__)


class DesignerSession:
    """
    Editing session of one label template.

    Provides:
    - Field CRUD (add / update / remove / duplicate)
    - Template metadata (name, size, orientation)
    - Selection, dragging, design/preview mode
    - Undo/redo of field-list edits
    - Validation gate and save through the template repository
    """

    def __init__(
        self,
        template: Template | None = None,
        repository: TemplateRepository | None = None,
        renderer: CanvasRenderer | None = None,
        settings: Settings | None = None,
    ):
        self.settings = settings or get_settings()
        self.template = template or Template()
        self.repository = repository
        self.renderer = renderer or CanvasRenderer()

        self.mode = RenderMode.DESIGN
        self.selected_field_id: str | None = None
        self.bound_record: BoundRecord | None = None

        self.snap_to_grid = self.settings.snap_to_grid
        self.grid_size = self.settings.grid_size
        self.show_grid = self.settings.show_grid

        self.drag = DragController(self)
        self.regenerator = CodeRegenerator(self.renderer.generate_code, self.renderer.code_signature)

        self.history_limit = self.settings.history_limit
        self._undo: list[Template] = []
        self._redo: list[Template] = []

    # === Read access ===

    @property
    def fields(self) -> list[TemplateField]:
        return list(self.template.fields)

    @property
    def canvas(self) -> CanvasDimensions:
        return self.template.canvas

    @property
    def scale(self) -> float:
        return self.renderer.scale_for(self.canvas)

    def get_field(self, field_id: str) -> TemplateField:
        return self.template.get_field(field_id)

    @property
    def selected_field(self) -> TemplateField | None:
        if self.selected_field_id is None:
            return None
        return self.template.get_field(self.selected_field_id)

    # === History ===

    def checkpoint(self) -> None:
        """Remembers the current template as an undo step."""
        self._undo.append(self.template)
        if len(self._undo) > self.history_limit:
            del self._undo[: len(self._undo) - self.history_limit]
        self._redo.clear()

    @property
    def can_undo(self) -> bool:
        return bool(self._undo)

    @property
    def can_redo(self) -> bool:
        return bool(self._redo)

    def undo(self) -> bool:
        if not self._undo:
            return False
        self.drag.release()
        self._redo.append(self.template)
        self.template = self._undo.pop()
        self._drop_stale_selection()
        return True

    def redo(self) -> bool:
        if not self._redo:
            return False
        self.drag.release()
        self._undo.append(self.template)
        self.template = self._redo.pop()
        self._drop_stale_selection()
        return True

    def _drop_stale_selection(self) -> None:
        if self.selected_field_id and not self.template.has_field(self.selected_field_id):
            self.selected_field_id = None

    def _replace_fields(self, fields: list[TemplateField], track_history: bool = True) -> None:
        if track_history:
            self.checkpoint()
        self.template = self.template.model_copy(update={"fields": fields})

    def _unique_id(self, field_type: FieldType | str) -> str:
        field_id = new_field_id(field_type)
        while self.template.has_field(field_id):
            field_id = new_field_id(field_type)
        return field_id

    # === Field CRUD ===

    def add_field(self, field_type: FieldType | str, **attrs: Any) -> TemplateField:
        """
        Adds a field with type defaults on top of the others and selects it.

        Args:
            field_type: Kind of field
            **attrs: Overrides passed to create_field (label, position, size, binding, ...)

        Raises:
            FieldUpdateError: On invalid attributes or an id already in use
        """
        field_id = attrs.pop("field_id", None)
        if field_id is not None and self.template.has_field(field_id):
            raise FieldUpdateError(f"Field id already in use: {field_id}")

        field = create_field(field_type, field_id=field_id or self._unique_id(field_type), **attrs)
        self._replace_fields([*self.template.fields, field])
        if self.mode == RenderMode.DESIGN:
            self.selected_field_id = field.id

        logger.debug(f"Added {field.type} field {field.id}")
        return field

    def update_field(
        self,
        field_id: str,
        changes: dict[str, Any],
        track_history: bool = True,
    ) -> TemplateField:
        """
        Partially updates a field (nested position/size/style/data are merged).

        Raises:
            FieldNotFoundError: Unknown field id
            FieldUpdateError: id/type change or invalid values
        """
        index = self.template.index_of(field_id)
        updated = update_field(self.template.fields[index], changes)

        fields = list(self.template.fields)
        fields[index] = updated
        self._replace_fields(fields, track_history=track_history)
        return updated

    def remove_field(self, field_id: str) -> TemplateField:
        """
        Removes a field.

        Raises:
            FieldNotFoundError: Unknown field id
        """
        index = self.template.index_of(field_id)
        fields = list(self.template.fields)
        removed = fields.pop(index)
        self._replace_fields(fields)

        if self.selected_field_id == field_id:
            self.selected_field_id = None
        if self.drag.field_id == field_id:
            self.drag.release()
        self.regenerator.discard(field_id)

        logger.debug(f"Removed field {field_id}")
        return removed

    def duplicate_field(self, field_id: str) -> TemplateField:
        """
        Clones a field: new id, label with a copy suffix, position shifted by
        the duplicate offset. Everything else is identical, including the
        bound value: the copy is pinned to the source's semantic id.

        Raises:
            FieldNotFoundError: Unknown field id
        """
        source = self.template.get_field(field_id)
        offset = self.settings.duplicate_offset
        clone = source.model_copy(
            update={
                "id": self._unique_id(source.type),
                "label": f"{source.label}{COPY_SUFFIX}",
                "binding": source.semantic_id,
                "position": Position(x=source.position.x + offset, y=source.position.y + offset),
            },
            deep=True,
        )
        self._replace_fields([*self.template.fields, clone])
        if self.mode == RenderMode.DESIGN:
            self.selected_field_id = clone.id
        return clone

    # === Template metadata ===

    def set_template_meta(
        self,
        name: str | None = None,
        label_size: LabelSize | str | None = None,
        orientation: Orientation | str | None = None,
    ) -> Template:
        """
        Updates name, size and/or orientation.

        Existing fields keep their stored position and size even if the new
        canvas no longer contains them.
        """
        update: dict[str, Any] = {}
        if name is not None:
            if not name.strip():
                raise FieldUpdateError("Template name cannot be empty")
            update["name"] = name
        try:
            if label_size is not None:
                update["label_size"] = LabelSize(label_size)
            if orientation is not None:
                update["orientation"] = Orientation(orientation)
        except ValueError as e:
            raise FieldUpdateError(str(e)) from e

        if update:
            self.checkpoint()
            self.template = self.template.model_copy(update=update)
            logger.info(
                f"Template meta: {self.template.name!r} {self.template.label_size.value} "
                f"{self.template.orientation.value}"
            )
        return self.template

    # === Selection / mode ===

    def select(self, field_id: str | None) -> None:
        """
        Sets (or clears with None) the selected field. No-op in preview mode.

        Raises:
            FieldNotFoundError: Unknown field id
        """
        if self.mode != RenderMode.DESIGN:
            self.selected_field_id = None
            return
        if field_id is not None:
            self.template.index_of(field_id)
        self.selected_field_id = field_id

    def set_mode(self, mode: RenderMode | str) -> None:
        """Switches design/preview; preview cancels in-flight code generation."""
        mode = RenderMode(mode)
        if mode == self.mode:
            return

        self.mode = mode
        if mode == RenderMode.PREVIEW:
            self.regenerator.cancel_all()
            self.drag.release()
            self.selected_field_id = None
        logger.info(f"Designer mode: {mode.value}")

    def bind_record(self, record: BoundRecord | None) -> None:
        """Sets the record rendered in place of sample values."""
        self.bound_record = record

    # === Rendering ===

    def render(self, record: BoundRecord | None = None) -> CanvasTree:
        """
        Renders the template.

        In design mode inside a running event loop, barcode/QR images come
        from background regeneration (changed fields are rescheduled).
        Otherwise codes are generated synchronously, so preview output is
        exactly what gets exported.
        """
        if record is None:
            record = self.bound_record

        code_slots = None
        if self.mode == RenderMode.DESIGN:
            try:
                asyncio.get_running_loop()
            except RuntimeError:
                pass
            else:
                self.regenerator.refresh(self.template.fields, record)
                code_slots = self.regenerator.slots

        return self.renderer.render_template(
            self.template,
            record=record,
            selected_field_id=self.selected_field_id,
            mode=self.mode,
            code_slots=code_slots,
            show_grid=self.show_grid,
        )

    # === Validation / persistence ===

    def validation_errors(self, record: BoundRecord | None = None) -> list[FriendlyError]:
        """
        Reasons the template cannot be saved, in order:
        (a) no enabled field, (b) required fields without a value,
        (c) barcode/QR fields without their payload. Never modifies the template.
        """
        errors: list[FriendlyError] = []
        resolver = self.renderer.resolver

        if not self.template.enabled_fields:
            errors.append(error_messages.NO_ENABLED_FIELDS)

        for field in self.template.enabled_fields:
            if field.required and self._binds_value(field) and not resolver.has_default(field, record):
                errors.append(error_messages.required_field_unresolved(field))

        for field in self.template.fields:
            if field.field_type.is_code and field.data is None:
                errors.append(error_messages.missing_code_payload(field))

        return errors

    @staticmethod
    def _binds_value(field: BaseField) -> bool:
        return field.field_type in (FieldType.TEXT, FieldType.BARCODE, FieldType.QR_CODE)

    def validate(self, record: BoundRecord | None = None) -> None:
        """
        Raises:
            ValidationError: With every reason, if the template cannot be saved
        """
        errors = self.validation_errors(record)
        if errors:
            raise ValidationError([error.message for error in errors])

    async def save(self) -> Template:
        """
        Validates and saves the template (create or update).

        Repository errors are passed through unchanged.

        Raises:
            ValidationError: If validation fails (nothing is sent)
            RuntimeError: If the session has no repository
        """
        self.validate()
        if self.repository is None:
            raise RuntimeError("No template repository configured")

        payload = self.template.to_payload()
        if self.template.id is None:
            saved = await self.repository.create_template(payload)
        else:
            saved = await self.repository.update_template(self.template.id, payload)

        self.template = saved
        logger.info(
            f"Template saved: {saved.name!r}, {len(saved.fields)} fields",
            extra={"template_id": saved.id},
        )
        return saved

    def load(self, template: Template) -> None:
        """Replaces the field list and metadata wholesale (catalogue load)."""
        self.regenerator.cancel_all()
        self.drag.release()
        self.template = template
        self.selected_field_id = None
        self._undo.clear()
        self._redo.clear()
        logger.info(f"Template loaded: {template.name!r}, {len(template.fields)} fields")

    def close(self) -> None:
        """Unmount: cancels background work."""
        self.regenerator.cancel_all()
        self.drag.release()
