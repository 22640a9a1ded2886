"""Tests for the label field model: creation defaults and partial updates."""

import pytest

from label_designer.exceptions import FieldUpdateError
from label_designer.models.fields import (
    BarcodeData,
    BarcodeField,
    QRCodeData,
    TextField,
    create_field,
    update_field,
    validate_field,
)
from label_designer.models.label_types import BarcodeFormat, ErrorCorrectionLevel, FieldType


@pytest.fixture
def text_field():
    return create_field(FieldType.TEXT, field_id="sender", label="Sender")


@pytest.fixture
def barcode_field():
    return create_field("barcode", field_id="tracking-barcode")


class TestCreateField:
    def test_barcode_defaults(self, barcode_field):
        assert isinstance(barcode_field, BarcodeField)
        assert barcode_field.data == BarcodeData()
        assert barcode_field.data.format == BarcodeFormat.CODE128
        assert barcode_field.data.width == 2
        assert barcode_field.data.display_value is True
        assert barcode_field.binding == "tracking_number"
        assert (barcode_field.size.width, barcode_field.size.height) == (200, 50)

    def test_qr_defaults(self):
        field = create_field("qr_code")

        assert field.data == QRCodeData()
        assert field.data.error_correction_level == ErrorCorrectionLevel.M
        assert field.data.include_tracking_url is False
        assert (field.size.width, field.size.height) == (100, 100)

    def test_generated_id_has_type_prefix(self):
        field = create_field("text")
        assert field.id.startswith("text-")
        assert create_field("text").id != field.id

    def test_text_style_defaults(self, text_field):
        assert isinstance(text_field, TextField)
        assert text_field.style.font_size == 14
        assert text_field.style.font_family == "Arial"
        assert text_field.data is None

    def test_rectangle_has_border(self):
        field = create_field("rectangle")
        assert field.style.border is not None
        assert field.style.border.width == 1

    def test_unknown_type_rejected(self):
        with pytest.raises(FieldUpdateError):
            create_field("hologram")

    def test_payload_must_match_type(self):
        """A text field cannot carry barcode settings."""
        with pytest.raises(FieldUpdateError):
            create_field("text", data={"format": "CODE128"})

    def test_qr_rejects_barcode_payload(self):
        with pytest.raises(FieldUpdateError):
            create_field("qr_code", data={"format": "EAN13"})

    def test_semantic_id_prefers_binding(self, text_field):
        assert text_field.semantic_id == "sender"

        bound = create_field("text", field_id="from-block", binding="sender")
        assert bound.semantic_id == "sender"

    def test_validate_field_from_wire_form(self):
        field = validate_field(
            {
                "id": "qr-1",
                "type": "qr_code",
                "label": "Track",
                "position": {"x": 5, "y": 6},
                "size": {"width": 80, "height": 80},
                "style": {"fontSize": 12},
                "data": {"errorCorrectionLevel": "H", "includeTrackingURL": True},
            }
        )

        assert field.data.error_correction_level == ErrorCorrectionLevel.H
        assert field.data.include_tracking_url is True
        assert field.style.font_size == 12


class TestUpdateField:
    def test_style_merge_keeps_other_keys(self, text_field):
        updated = update_field(text_field, {"style": {"color": "#FF0000"}})

        assert updated.style.color == "#FF0000"
        assert updated.style.font_size == 14
        assert updated.style.font_family == "Arial"

    def test_update_is_pure(self, text_field):
        update_field(text_field, {"label": "Other", "style": {"fontSize": 20}})

        assert text_field.label == "Sender"
        assert text_field.style.font_size == 14

    def test_wire_and_python_names(self, text_field):
        assert update_field(text_field, {"style": {"fontSize": 20}}).style.font_size == 20
        assert update_field(text_field, {"style": {"font_size": 22}}).style.font_size == 22

    def test_font_size_range(self, text_field):
        with pytest.raises(FieldUpdateError):
            update_field(text_field, {"style": {"fontSize": 80}})
        with pytest.raises(FieldUpdateError):
            update_field(text_field, {"style": {"fontSize": 5}})

    def test_position_partial(self, text_field):
        moved = update_field(text_field, {"position": {"x": 50}})

        assert moved.position.x == 50
        assert moved.position.y == text_field.position.y

    def test_id_change_rejected(self, text_field):
        with pytest.raises(FieldUpdateError):
            update_field(text_field, {"id": "other"})

    def test_same_id_allowed(self, text_field):
        assert update_field(text_field, {"id": "sender"}).id == "sender"

    def test_type_change_rejected(self, text_field):
        with pytest.raises(FieldUpdateError):
            update_field(text_field, {"type": "barcode"})

    def test_unknown_attribute_rejected(self, text_field):
        with pytest.raises(FieldUpdateError):
            update_field(text_field, {"colour": "red"})

    def test_barcode_data_merge(self, barcode_field):
        updated = update_field(barcode_field, {"data": {"width": 4}})

        assert updated.data.width == 4
        assert updated.data.format == BarcodeFormat.CODE128

    def test_barcode_width_range(self, barcode_field):
        with pytest.raises(FieldUpdateError):
            update_field(barcode_field, {"data": {"width": 6}})

    def test_qr_tracking_flag_by_alias(self):
        field = create_field("qr_code")
        updated = update_field(field, {"data": {"includeTrackingURL": True}})

        assert updated.data.include_tracking_url is True
        assert updated.data.error_correction_level == ErrorCorrectionLevel.M

    def test_text_field_rejects_payload(self, text_field):
        with pytest.raises(FieldUpdateError):
            update_field(text_field, {"data": {"format": "CODE128"}})

    def test_border_merge(self):
        rectangle = create_field("rectangle")
        updated = update_field(rectangle, {"style": {"border": {"width": 3}}})

        assert updated.style.border.width == 3
        assert updated.style.border.color == rectangle.style.border.color

    def test_zero_size_rejected(self, text_field):
        with pytest.raises(FieldUpdateError):
            update_field(text_field, {"size": {"width": 0}})

    def test_empty_changes_return_same_field(self, text_field):
        assert update_field(text_field, {}) is text_field
