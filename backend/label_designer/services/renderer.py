# backend/label_designer/services/renderer.py
"""
Canvas renderer: lays out the enabled fields of a template inside the
fixed physical canvas and produces a visual tree.

- One uniform scale for the whole canvas: min(1, vw/cw, vh/ch)
- Paint order = list order (later fields on top)
- Disabled fields are skipped entirely
- Barcode/QR failures are contained to the field (placeholder box)
- Preview mode carries no selection chrome and no grid
"""

import logging
from collections.abc import Iterable, Mapping, Sequence

from PIL import Image

from label_designer.config import LABEL, get_settings
from label_designer.exceptions import EncodingError
from label_designer.models.fields import BarcodeData, BaseField, QRCodeData
from label_designer.models.label_types import FieldType, FontWeight, RenderMode
from label_designer.models.template import CanvasDimensions, Template
from label_designer.models.visual import (
    Box,
    CanvasTree,
    CodeImageNode,
    FieldNode,
    PlaceholderNode,
    RectangleNode,
    RuleNode,
    SelectionChrome,
    TextNode,
)
from label_designer.services.barcode_generator import BarcodeGenerator, GeneratedCode
from label_designer.services.binding import BoundRecord, DataBindingResolver
from label_designer.services.code_regenerator import CodeSlot
from label_designer.services.qr_generator import QRCodeGenerator, compose_tracking_url
from label_designer.services.scaling import Viewport, compute_scale
from label_designer.services.text_layout import get_font, layout_text

logger = logging.getLogger(__name__)

PLACEHOLDER_TEXT: dict[FieldType, str] = {
    FieldType.BARCODE: "Barcode",
    FieldType.QR_CODE: "QR Code",
}


def field_box(field: BaseField) -> Box:
    return Box(
        x=field.position.x,
        y=field.position.y,
        width=field.size.width,
        height=field.size.height,
    )


class CanvasRenderer:
    """Renders label fields bound to a record (or to sample values)."""

    def __init__(
        self,
        resolver: DataBindingResolver | None = None,
        barcode_generator: BarcodeGenerator | None = None,
        qr_generator: QRCodeGenerator | None = None,
        viewport: Viewport | None = None,
        tracking_base_url: str | None = None,
        grid_size: int | None = None,
    ):
        settings = get_settings()
        self.resolver = resolver or DataBindingResolver()
        self.barcode_generator = barcode_generator or BarcodeGenerator()
        self.qr_generator = qr_generator or QRCodeGenerator()
        self.viewport = viewport or Viewport.from_settings()
        self.tracking_base_url = (
            tracking_base_url if tracking_base_url is not None else settings.tracking_base_url
        )
        self.grid_size = grid_size or settings.grid_size

    def scale_for(self, canvas: CanvasDimensions) -> float:
        return compute_scale(canvas, self.viewport)

    def render(
        self,
        fields: Sequence[BaseField],
        canvas: CanvasDimensions,
        record: BoundRecord | None = None,
        selected_field_id: str | None = None,
        mode: RenderMode = RenderMode.DESIGN,
        code_slots: Mapping[str, CodeSlot] | None = None,
        show_grid: bool = False,
    ) -> CanvasTree:
        """
        Renders fields into a visual tree.

        Args:
            fields: Fields in paint order
            canvas: Effective canvas dimensions
            record: Bound shipment (sample values when None)
            selected_field_id: Field to outline (design mode only)
            mode: design or preview
            code_slots: Pre-generated barcode/QR images by field id; when None
                codes are generated synchronously
            show_grid: Grid overlay (design mode only)

        Returns:
            CanvasTree
        """
        design = mode == RenderMode.DESIGN
        tree = CanvasTree(
            width=canvas.width,
            height=canvas.height,
            scale=self.scale_for(canvas),
            mode=mode,
            show_grid=design and show_grid,
            grid_size=self.grid_size if design and show_grid else None,
        )

        for field in fields:
            if not field.enabled:
                continue
            tree.nodes.append(self._render_field(field, record, code_slots))

            if design and field.id == selected_field_id:
                tree.selection = SelectionChrome(
                    field_id=field.id,
                    box=field_box(field),
                    tag=field.label,
                )

        return tree

    def render_template(
        self,
        template: Template,
        record: BoundRecord | None = None,
        selected_field_id: str | None = None,
        mode: RenderMode = RenderMode.DESIGN,
        code_slots: Mapping[str, CodeSlot] | None = None,
        show_grid: bool = False,
    ) -> CanvasTree:
        return self.render(
            template.fields,
            template.canvas,
            record=record,
            selected_field_id=selected_field_id,
            mode=mode,
            code_slots=code_slots,
            show_grid=show_grid,
        )

    def render_batch(self, template: Template, records: Iterable[BoundRecord]) -> list[CanvasTree]:
        """One preview tree per record (bulk label generation)."""
        trees = [self.render_template(template, record, mode=RenderMode.PREVIEW) for record in records]
        logger.info(f"Rendered {len(trees)} labels from template {template.name!r}")
        return trees

    # === Codes ===

    def code_payload(self, field: BaseField, record: BoundRecord | None = None) -> str:
        """Value the field's symbol encodes (tracking URL for tracking QR codes)."""
        value = self.resolver.resolve(field, record)
        if self._uses_tracking_url(field):
            return compose_tracking_url(value, self.tracking_base_url)
        return value

    def code_signature(self, field: BaseField, record: BoundRecord | None = None) -> tuple:
        """Everything the generated image depends on."""
        data = field.data.model_dump_json() if field.data is not None else None  # type: ignore[attr-defined]
        return (field.type, data, self.code_payload(field, record))  # type: ignore[attr-defined]

    def generate_code(self, field: BaseField, record: BoundRecord | None = None) -> GeneratedCode:
        """
        Generates the barcode/QR image of a code field.

        Raises:
            EncodingError: If the symbology rejects the resolved value
        """
        value = self.resolver.resolve(field, record)
        data = field.data  # type: ignore[attr-defined]

        if field.field_type == FieldType.BARCODE:
            return self.barcode_generator.generate(value, data or BarcodeData())

        if field.field_type == FieldType.QR_CODE:
            if self._uses_tracking_url(field):
                return self.qr_generator.generate_tracking(value, self.tracking_base_url, data)
            return self.qr_generator.generate(value, data or QRCodeData())

        raise ValueError(f"Field {field.id} of type {field.type} has no code")  # type: ignore[attr-defined]

    def _uses_tracking_url(self, field: BaseField) -> bool:
        data = field.data  # type: ignore[attr-defined]
        return field.field_type == FieldType.QR_CODE and data is not None and data.include_tracking_url

    # === Field nodes ===

    def _render_field(
        self,
        field: BaseField,
        record: BoundRecord | None,
        code_slots: Mapping[str, CodeSlot] | None,
    ) -> FieldNode:
        box = field_box(field)
        field_type = field.field_type

        if field_type == FieldType.TEXT:
            return self._render_text(field, box, record)

        if field_type.is_code:
            return self._render_code(field, box, record, code_slots)

        if field_type == FieldType.LINE:
            return RuleNode(
                field_id=field.id,
                field_type=field_type,
                box=box,
                style=field.style,
                color=field.style.color or LABEL.COLOR_BLACK,
                thickness=1.0,
            )

        if field_type == FieldType.RECTANGLE:
            return RectangleNode(
                field_id=field.id,
                field_type=field_type,
                box=box,
                style=field.style,
                border=field.style.border,
                background_color=field.style.background_color,
            )

        # Image assets are resolved outside the renderer
        return PlaceholderNode(
            field_id=field.id,
            field_type=field_type,
            box=box,
            style=field.style,
            text=field.label,
        )

    def _render_text(self, field: BaseField, box: Box, record: BoundRecord | None) -> TextNode:
        style = field.style
        font_size = style.font_size or LABEL.DEFAULT_FONT_SIZE
        font = get_font(
            style.font_family or LABEL.DEFAULT_FONT_FAMILY,
            font_size,
            style.font_weight == FontWeight.BOLD,
        )
        layout = layout_text(
            self.resolver.resolve(field, record),
            font,
            font_size,
            box.width,
            box.height,
        )
        return TextNode(
            field_id=field.id,
            field_type=field.field_type,
            box=box,
            style=style,
            lines=layout.lines,
            font_size=font_size,
            clipped=layout.clipped,
        )

    def _render_code(
        self,
        field: BaseField,
        box: Box,
        record: BoundRecord | None,
        code_slots: Mapping[str, CodeSlot] | None,
    ) -> FieldNode:
        result: GeneratedCode | None = None

        if code_slots is None:
            try:
                result = self.generate_code(field, record)
            except EncodingError as e:
                logger.warning(
                    f"Code placeholder for field {field.id}: {e}",
                    extra={"field_id": field.id, "symbology": e.symbology},
                )
        else:
            slot = code_slots.get(field.id)
            if slot is not None:
                result = slot.result

        if result is None:
            return PlaceholderNode(
                field_id=field.id,
                field_type=field.field_type,
                box=box,
                style=field.style,
                text=PLACEHOLDER_TEXT[field.field_type],
            )

        # NEAREST keeps bar edges sharp
        image = result.image.resize(
            (max(1, round(box.width)), max(1, round(box.height))),
            Image.Resampling.NEAREST,
        )
        return CodeImageNode(
            field_id=field.id,
            field_type=field.field_type,
            box=box,
            style=field.style,
            image=image,
            payload=result.payload,
            symbology=result.symbology,
        )
