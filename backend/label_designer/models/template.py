# backend/label_designer/models/template.py
"""
Label template: named collection of fields plus physical size and orientation.

``Template.to_payload()`` is the contract with the persistence layer and
round-trips losslessly through ``Template.from_payload()``.
"""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic import ValidationError as PydanticValidationError
from pydantic.alias_generators import to_camel

from label_designer.config import LABEL
from label_designer.exceptions import FieldNotFoundError, FieldUpdateError
from label_designer.models.fields import TemplateField
from label_designer.models.label_types import LabelSize, Orientation

# Appended to the name/label of duplicated templates and fields
COPY_SUFFIX = " (Copy)"


class CanvasDimensions(BaseModel):
    """Effective drawing surface in canvas pixels."""

    model_config = ConfigDict(frozen=True)

    width: float = Field(gt=0)
    height: float = Field(gt=0)

    @classmethod
    def for_label(cls, label_size: LabelSize, orientation: Orientation) -> "CanvasDimensions":
        """Label size in pixels, width and height swapped for landscape."""
        width_mm, height_mm = label_size.dimensions_mm
        width = LABEL.mm_to_pixels(width_mm)
        height = LABEL.mm_to_pixels(height_mm)
        if orientation == Orientation.LANDSCAPE:
            width, height = height, width
        return cls(width=width, height=height)


class Template(BaseModel):
    """Named, reusable label design."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="forbid",
    )

    id: str | None = Field(default=None, description="Persistence id (None until saved)")
    name: str = Field(default="New Template", description="Template name")
    label_size: LabelSize = Field(default=LabelSize.SIZE_4x6, description="Physical size")
    orientation: Orientation = Field(default=Orientation.PORTRAIT, description="Orientation")
    fields: list[TemplateField] = Field(
        default_factory=list, description="Fields in paint order (last on top)"
    )

    @field_validator("fields")
    @classmethod
    def _unique_ids(cls, fields: list[TemplateField]) -> list[TemplateField]:
        seen: set[str] = set()
        for field in fields:
            if field.id in seen:
                raise ValueError(f"Duplicate field id: {field.id}")
            seen.add(field.id)
        return fields

    @property
    def canvas(self) -> CanvasDimensions:
        return CanvasDimensions.for_label(self.label_size, self.orientation)

    @property
    def enabled_fields(self) -> list[TemplateField]:
        return [field for field in self.fields if field.enabled]

    def index_of(self, field_id: str) -> int:
        for index, field in enumerate(self.fields):
            if field.id == field_id:
                return index
        raise FieldNotFoundError(field_id)

    def get_field(self, field_id: str) -> TemplateField:
        return self.fields[self.index_of(field_id)]

    def has_field(self, field_id: str) -> bool:
        return any(field.id == field_id for field in self.fields)

    # === Serialization ===

    def to_payload(self) -> dict[str, Any]:
        """JSON-compatible dict in wire (camelCase) form."""
        return self.model_dump(mode="json", by_alias=True)

    @classmethod
    def from_payload(cls, payload: dict[str, Any]) -> "Template":
        """
        Build a template from its wire form.

        Raises:
            FieldUpdateError: If the payload is not a valid template
        """
        try:
            return cls.model_validate(payload)
        except PydanticValidationError as e:
            raise FieldUpdateError(f"Invalid template: {e}") from e

    def to_json(self, indent: int | None = 2) -> str:
        """Export for download/sharing."""
        return self.model_dump_json(by_alias=True, indent=indent)

    @classmethod
    def from_json(cls, text: str | bytes) -> "Template":
        """
        Import an exported template.

        Raises:
            FieldUpdateError: If the document is not a valid template
        """
        try:
            return cls.model_validate_json(text)
        except PydanticValidationError as e:
            raise FieldUpdateError(f"Invalid template file: {e}") from e
