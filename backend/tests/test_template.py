"""Tests for the template model and its persistence payload."""

import pytest
from pydantic import ValidationError as PydanticValidationError

from label_designer.exceptions import FieldNotFoundError, FieldUpdateError
from label_designer.models.fields import create_field
from label_designer.models.label_types import LabelSize, Orientation
from label_designer.models.template import CanvasDimensions, Template


@pytest.fixture
def template():
    return Template(
        name="Express",
        label_size=LabelSize.SIZE_4x6,
        fields=[
            create_field("text", field_id="sender", style={"fontSize": 12, "color": "#333333"}),
            create_field("barcode", field_id="bc", data={"format": "EAN13", "width": 3}),
            create_field("qr_code", field_id="qr", data={"includeTrackingURL": True}),
            create_field("rectangle", field_id="frame", enabled=False),
        ],
    )


class TestCanvas:
    def test_4x6_portrait(self):
        canvas = CanvasDimensions.for_label(LabelSize.SIZE_4x6, Orientation.PORTRAIT)
        assert (canvas.width, canvas.height) == (384, 576)

    def test_landscape_swaps(self):
        canvas = CanvasDimensions.for_label(LabelSize.SIZE_4x6, Orientation.LANDSCAPE)
        assert (canvas.width, canvas.height) == (576, 384)

    def test_a4(self):
        canvas = CanvasDimensions.for_label(LabelSize.A4, Orientation.PORTRAIT)
        assert (canvas.width, canvas.height) == (794, 1123)

    def test_template_canvas_follows_meta(self, template):
        assert template.canvas == CanvasDimensions(width=384, height=576)
        landscape = template.model_copy(update={"orientation": Orientation.LANDSCAPE})
        assert landscape.canvas == CanvasDimensions(width=576, height=384)


class TestTemplate:
    def test_defaults(self):
        template = Template()

        assert template.id is None
        assert template.name == "New Template"
        assert template.label_size == LabelSize.SIZE_4x6
        assert template.orientation == Orientation.PORTRAIT
        assert template.fields == []

    def test_duplicate_ids_rejected(self):
        with pytest.raises(PydanticValidationError):
            Template(fields=[create_field("text", field_id="a"), create_field("line", field_id="a")])

    def test_enabled_fields(self, template):
        assert [f.id for f in template.enabled_fields] == ["sender", "bc", "qr"]

    def test_get_field(self, template):
        assert template.get_field("bc").data.width == 3
        assert template.index_of("qr") == 2
        assert template.has_field("frame")
        assert not template.has_field("missing")

    def test_unknown_field(self, template):
        with pytest.raises(FieldNotFoundError) as exc_info:
            template.get_field("missing")

        assert isinstance(exc_info.value, KeyError)
        assert "missing" in str(exc_info.value)


class TestPayload:
    def test_round_trip(self, template):
        restored = Template.from_payload(template.to_payload())
        assert restored == template

    def test_wire_names(self, template):
        payload = template.to_payload()

        assert payload["labelSize"] == "4x6"
        assert payload["fields"][0]["style"]["fontSize"] == 12
        assert payload["fields"][1]["data"]["displayValue"] is True
        assert payload["fields"][2]["data"]["includeTrackingURL"] is True
        assert payload["fields"][2]["data"]["errorCorrectionLevel"] == "M"
        assert payload["fields"][3]["type"] == "rectangle"

    def test_json_round_trip(self, template):
        restored = Template.from_json(template.to_json())
        assert restored == template

    def test_invalid_payload(self, template):
        payload = template.to_payload()
        payload["fields"][0]["type"] = "hologram"

        with pytest.raises(FieldUpdateError):
            Template.from_payload(payload)

    def test_invalid_json(self):
        with pytest.raises(FieldUpdateError):
            Template.from_json('{"labelSize": "B7"}')
