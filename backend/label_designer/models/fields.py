# backend/label_designer/models/fields.py
"""
Label field model.

A field is one positionable element of a label template. The ``data``
payload is a tagged union keyed by ``type``: barcode fields carry
``BarcodeData``, QR fields carry ``QRCodeData``, every other type carries
no payload. Mismatched payloads are rejected when the field is built or
updated, never at render time.

Attribute names are snake_case in Python and camelCase on the wire
(``fontSize``, ``displayValue``, ``includeTrackingURL``).
"""

from collections.abc import Mapping
from typing import Annotated, Any, Literal, Union
from uuid import uuid4

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter
from pydantic import ValidationError as PydanticValidationError
from pydantic.alias_generators import to_camel

from label_designer.config import LABEL
from label_designer.exceptions import FieldUpdateError
from label_designer.models.label_types import (
    BarcodeFormat,
    BorderStyle,
    ErrorCorrectionLevel,
    FieldType,
    FontWeight,
    TextAlign,
)


class _Model(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="forbid",
    )


# === Geometry ===


class Position(_Model):
    """Top-left corner in canvas pixels."""

    x: float = Field(description="Distance from the left edge")
    y: float = Field(description="Distance from the top edge")


class Size(_Model):
    """Field box in canvas pixels."""

    width: float = Field(gt=0, description="Width")
    height: float = Field(gt=0, description="Height")


# === Style ===


class Border(_Model):
    width: float = Field(default=1.0, ge=0, description="Stroke width")
    style: BorderStyle = Field(default=BorderStyle.SOLID, description="Stroke pattern")
    color: str = Field(default=LABEL.COLOR_BLACK, description="Stroke colour")


class FieldStyle(_Model):
    """Optional typography and box styling."""

    font_family: str | None = Field(default=None, description="Font family")
    font_size: int | None = Field(
        default=None,
        ge=LABEL.FONT_SIZE_MIN,
        le=LABEL.FONT_SIZE_MAX,
        description="Font size in px",
    )
    font_weight: FontWeight | None = Field(default=None, description="normal | bold")
    color: str | None = Field(default=None, description="Foreground colour")
    background_color: str | None = Field(default=None, description="Box fill")
    text_align: TextAlign | None = Field(default=None, description="left | center | right")
    border: Border | None = Field(default=None, description="Box border")


# === Type-specific payloads ===


class BarcodeData(_Model):
    format: BarcodeFormat = Field(default=BarcodeFormat.CODE128, description="Symbology")
    width: int = Field(
        default=2,
        ge=LABEL.BARCODE_WIDTH_MIN,
        le=LABEL.BARCODE_WIDTH_MAX,
        description="Bar width multiplier",
    )
    display_value: bool = Field(default=True, description="Print the value under the bars")


class QRCodeData(_Model):
    error_correction_level: ErrorCorrectionLevel = Field(
        default=ErrorCorrectionLevel.M, description="L | M | Q | H"
    )
    include_tracking_url: bool = Field(
        default=False,
        alias="includeTrackingURL",
        description="Encode the tracking URL instead of the bare value",
    )


# === Fields ===


class BaseField(_Model):
    """Attributes shared by every field type."""

    id: str = Field(min_length=1, description="Unique within the template")
    label: str = Field(min_length=1, description="Human-readable name")
    enabled: bool = Field(default=True, description="Disabled fields are not rendered")
    required: bool = Field(default=False, description="Checked before save")
    binding: str | None = Field(
        default=None, description="Semantic id of the bound value (defaults to id)"
    )
    position: Position
    size: Size
    style: FieldStyle = Field(default_factory=FieldStyle)

    @property
    def field_type(self) -> FieldType:
        return FieldType(self.type)  # type: ignore[attr-defined]

    @property
    def semantic_id(self) -> str:
        """Key used to look the field's value up in a bound record."""
        return self.binding or self.id


class TextField(BaseField):
    type: Literal["text"] = "text"
    data: None = None


class BarcodeField(BaseField):
    type: Literal["barcode"] = "barcode"
    data: BarcodeData | None = None


class QRCodeField(BaseField):
    type: Literal["qr_code"] = "qr_code"
    data: QRCodeData | None = None


class ImageField(BaseField):
    type: Literal["image"] = "image"
    data: None = None


class LineField(BaseField):
    type: Literal["line"] = "line"
    data: None = None


class RectangleField(BaseField):
    type: Literal["rectangle"] = "rectangle"
    data: None = None


TemplateField = Annotated[
    Union[TextField, BarcodeField, QRCodeField, ImageField, LineField, RectangleField],
    Field(discriminator="type"),
]

FIELD_ADAPTER: TypeAdapter[TemplateField] = TypeAdapter(TemplateField)

PAYLOAD_CLASSES: dict[FieldType, type[_Model]] = {
    FieldType.BARCODE: BarcodeData,
    FieldType.QR_CODE: QRCodeData,
}

DEFAULT_LABELS: dict[FieldType, str] = {
    FieldType.TEXT: "Text",
    FieldType.BARCODE: "Barcode",
    FieldType.QR_CODE: "QR Code",
    FieldType.IMAGE: "Image",
    FieldType.LINE: "Line",
    FieldType.RECTANGLE: "Rectangle",
}

# Code fields encode the tracking number unless rebound
DEFAULT_BINDINGS: dict[FieldType, str] = {
    FieldType.BARCODE: "tracking_number",
    FieldType.QR_CODE: "tracking_number",
}

_NESTED_KEYS = ("position", "size", "style", "data")


def new_field_id(field_type: FieldType | str) -> str:
    """Opaque unique id, e.g. ``barcode-3f2a9c1e``."""
    return f"{FieldType(field_type).value}-{uuid4().hex[:8]}"


def _default_style(field_type: FieldType) -> dict[str, Any]:
    if field_type == FieldType.TEXT:
        return {
            "fontFamily": LABEL.DEFAULT_FONT_FAMILY,
            "fontSize": LABEL.DEFAULT_FONT_SIZE,
            "fontWeight": FontWeight.NORMAL,
            "color": LABEL.COLOR_BLACK,
            "textAlign": TextAlign.LEFT,
        }
    if field_type == FieldType.RECTANGLE:
        return {"border": {"width": 1.0, "style": BorderStyle.SOLID, "color": LABEL.COLOR_BLACK}}
    return {"color": LABEL.COLOR_BLACK}


def validate_field(raw: Mapping[str, Any]) -> TemplateField:
    """
    Build a field from a raw mapping (wire or Python attribute names).

    Raises:
        FieldUpdateError: If the mapping does not describe a valid field
    """
    try:
        return FIELD_ADAPTER.validate_python(raw)
    except PydanticValidationError as e:
        raise FieldUpdateError(f"Invalid field: {e}") from e


def create_field(
    field_type: FieldType | str,
    field_id: str | None = None,
    label: str | None = None,
    position: Position | Mapping[str, float] | None = None,
    size: Size | Mapping[str, float] | None = None,
    binding: str | None = None,
    **attrs: Any,
) -> TemplateField:
    """
    Create a field with type-specific defaults.

    Args:
        field_type: Kind of field
        field_id: Explicit id (generated when omitted)
        label: Display name (defaults to the type name)
        position: Top-left corner (defaults to the canvas origin)
        size: Box size (defaults per type, e.g. barcode 200x50, QR 100x100)
        binding: Semantic id of the bound value
        **attrs: Any other field attribute (style, data, enabled, required)

    Returns:
        The new field

    Raises:
        FieldUpdateError: If the attributes do not fit the field type
    """
    try:
        field_type = FieldType(field_type)
    except ValueError as e:
        raise FieldUpdateError(f"Unknown field type: {field_type!r}") from e

    width, height = LABEL.DEFAULT_FIELD_SIZES[field_type.value]
    raw: dict[str, Any] = {
        "id": field_id or new_field_id(field_type),
        "type": field_type.value,
        "label": label or DEFAULT_LABELS[field_type],
        "position": position if position is not None else {"x": 0.0, "y": 0.0},
        "size": size if size is not None else {"width": width, "height": height},
        "style": _default_style(field_type),
        "binding": binding or DEFAULT_BINDINGS.get(field_type),
    }

    payload_cls = PAYLOAD_CLASSES.get(field_type)
    if payload_cls is not None:
        raw["data"] = payload_cls()

    raw.update(attrs)
    return validate_field(raw)


def _as_dict(value: Any) -> Any:
    if isinstance(value, BaseModel):
        return value.model_dump(by_alias=True, exclude_unset=True)
    return value


def _alias_keys(model_cls: type[BaseModel], changes: Mapping[str, Any]) -> dict[str, Any]:
    """Rewrite Python attribute names to wire aliases; reject unknown keys."""
    lookup: dict[str, str] = {}
    for name, info in model_cls.model_fields.items():
        alias = info.alias or name
        lookup[name] = alias
        lookup[alias] = alias

    result: dict[str, Any] = {}
    for key, value in changes.items():
        if key not in lookup:
            raise FieldUpdateError(f"Unknown attribute {key!r} for {model_cls.__name__}")
        result[lookup[key]] = value
    return result


def _merge_nested(
    field: BaseField,
    key: str,
    current: Any,
    change: Any,
) -> Any:
    change = _as_dict(change)
    if not isinstance(change, Mapping):
        return change

    nested_cls: type[BaseModel] | None = {
        "position": Position,
        "size": Size,
        "style": FieldStyle,
        "data": PAYLOAD_CLASSES.get(field.field_type),
    }[key]
    if nested_cls is None:
        # No payload for this type; let validation reject it
        return change

    change = _alias_keys(nested_cls, change)

    if key == "style" and isinstance(change.get("border"), (Mapping, BaseModel)):
        border_change = _alias_keys(Border, _as_dict(change["border"]))
        current_border = current.get("border") if isinstance(current, Mapping) else None
        if isinstance(current_border, Mapping):
            border_change = {**current_border, **border_change}
        change["border"] = border_change

    if isinstance(current, Mapping):
        return {**current, **change}
    return change


def update_field(field: BaseField, changes: Mapping[str, Any]) -> TemplateField:
    """
    Pure partial update of a field.

    Top-level keys are replaced; ``position``, ``size``, ``style`` and
    ``data`` are merged independently, so changing ``style.color`` keeps
    ``style.font_size``.

    Args:
        field: Field to update
        changes: Partial attributes (Python or wire names)

    Returns:
        A new field; the input is not modified

    Raises:
        FieldUpdateError: On id/type change, unknown attribute or invalid value
    """
    if not changes:
        return field

    changes = _alias_keys(type(field), changes)

    for key in ("id", "type"):
        if key in changes and changes[key] != getattr(field, key):
            raise FieldUpdateError(f"Field {key} cannot be changed ({field.id})")

    base = field.model_dump(by_alias=True)
    for key, value in changes.items():
        if key in _NESTED_KEYS and value is not None:
            base[key] = _merge_nested(field, key, base.get(key), value)
        else:
            base[key] = value

    return validate_field(base)
