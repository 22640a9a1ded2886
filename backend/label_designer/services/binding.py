# backend/label_designer/services/binding.py
"""
Data binding: field semantic id -> display value.

Fallback chain: bound record attribute -> fixed sample value -> field label.
Resolution never raises for a missing or partial record.
"""

import logging
from collections.abc import Mapping
from datetime import date, datetime
from typing import Any

from label_designer.config import get_settings
from label_designer.models.fields import BaseField
from label_designer.models.records import ShipmentRecord

logger = logging.getLogger(__name__)

BoundRecord = ShipmentRecord | Mapping[str, Any]

# Deterministic values used when no record is bound (design mode)
SAMPLE_VALUES: dict[str, str] = {
    "tracking_number": "TRK123456789",
    "sender": "John Doe\nCamerPulse Logistics\n123 Main St, Douala\n+237 600 000 000",
    "receiver": "Jane Smith\n456 Oak Ave, Yaoundé\n+237 699 000 000",
    "service_level": "Express Delivery",
    "status": "In Transit",
    "weight": "2.5 kg",
    "dimensions": "30×20×15 cm",
    "estimated_delivery": "15/01/2024",
    "package_description": "Documents",
}

# Sub-parts of an address block, in print order
PARTY_PARTS = ("name", "company", "address", "phone", "email")


def _get(obj: Any, key: str) -> Any:
    """Attribute or mapping lookup that tolerates anything."""
    if obj is None:
        return None
    if isinstance(obj, Mapping):
        return obj.get(key)
    return getattr(obj, key, None)


def _dig(record: Any, *path: str) -> Any:
    value = record
    for key in path:
        value = _get(value, key)
        if value is None:
            return None
    return value


def _is_blank(value: Any) -> bool:
    return value is None or (isinstance(value, str) and not value.strip())


def _format_number(value: Any) -> str:
    if isinstance(value, float):
        return f"{value:g}"
    return str(value).strip()


class DataBindingResolver:
    """Resolves display values for fields, with or without a bound record."""

    def __init__(self, date_format: str | None = None):
        self.date_format = date_format or get_settings().date_format

    def resolve(self, field: BaseField, record: BoundRecord | None = None) -> str:
        """
        Display value for a field.

        Args:
            field: Field to resolve
            record: Bound shipment (optional)

        Returns:
            Non-empty display string
        """
        if record is not None:
            value = self.from_record(field.semantic_id, record)
            if value:
                return value

        sample = SAMPLE_VALUES.get(field.semantic_id)
        if sample is not None:
            return sample

        return field.label

    def has_default(self, field: BaseField, record: BoundRecord | None = None) -> bool:
        """True when a record or sample value exists (label fallback excluded)."""
        if record is not None and self.from_record(field.semantic_id, record):
            return True
        return field.semantic_id in SAMPLE_VALUES

    def from_record(self, semantic_id: str, record: BoundRecord) -> str | None:
        """
        Formatted record value for a semantic id, or None when absent.

        Never raises: malformed parts are treated as absent.
        """
        try:
            return self._from_record(semantic_id, record)
        except (TypeError, ValueError, AttributeError) as e:
            logger.debug(f"Unusable record value for {semantic_id}: {e}")
            return None

    def _from_record(self, semantic_id: str, record: BoundRecord) -> str | None:
        if semantic_id in ("sender", "receiver"):
            return self._format_party(_get(record, semantic_id))

        if semantic_id == "weight":
            weight = _dig(record, "package", "weight")
            if _is_blank(weight):
                weight = _get(record, "weight")
            return self._format_weight(weight)

        if semantic_id == "dimensions":
            dimensions = _dig(record, "package", "dimensions")
            if dimensions is None:
                dimensions = _get(record, "dimensions")
            return self._format_dimensions(dimensions)

        if semantic_id == "estimated_delivery":
            value = _dig(record, "shipping", "estimated_delivery")
            if _is_blank(value):
                value = _get(record, "estimated_delivery")
            return self._format_date(value)

        if semantic_id == "service_level":
            value = _dig(record, "shipping", "service_level")
            if _is_blank(value):
                value = _get(record, "service_level")
            return None if _is_blank(value) else str(value).strip()

        if semantic_id == "package_description":
            value = _dig(record, "package", "description")
            return None if _is_blank(value) else str(value).strip()

        value = _get(record, semantic_id)
        if _is_blank(value) or isinstance(value, (Mapping, list, tuple)):
            return None
        if hasattr(value, "model_dump"):
            return None
        return str(value).strip()

    def _format_party(self, party: Any) -> str | None:
        """Non-empty sub-parts joined with line breaks."""
        if party is None:
            return None
        if isinstance(party, str):
            return party.strip() or None

        parts = [str(_get(party, key)).strip() for key in PARTY_PARTS if not _is_blank(_get(party, key))]
        return "\n".join(parts) or None

    def _format_weight(self, weight: Any) -> str | None:
        if _is_blank(weight):
            return None
        if isinstance(weight, str):
            text = weight.strip()
            if text.lower().endswith("kg"):
                text = text[:-2].strip()
            return f"{text} kg" if text else None
        return f"{_format_number(weight)} kg"

    def _format_dimensions(self, dimensions: Any) -> str | None:
        if dimensions is None:
            return None
        if isinstance(dimensions, str):
            return dimensions.strip() or None

        values = [_get(dimensions, key) for key in ("length", "width", "height")]
        if any(_is_blank(v) for v in values):
            return None
        return "×".join(_format_number(v) for v in values) + " cm"

    def _format_date(self, value: Any) -> str | None:
        if _is_blank(value):
            return None
        if isinstance(value, (date, datetime)):
            return value.strftime(self.date_format)

        text = str(value).strip()
        try:
            parsed = datetime.fromisoformat(text)
        except ValueError:
            # Not ISO: keep the text as supplied
            return text
        return parsed.strftime(self.date_format)
