"""Tests for shipment list import."""

import io

import openpyxl
import pytest

from label_designer.models.fields import create_field
from label_designer.services.binding import DataBindingResolver
from label_designer.services.shipment_csv import ShipmentCSVParser, column_target

CSV_COMMA = """Tracking Number,Sender Name,Sender Address,Receiver Name,Receiver Address,Weight,Description,Service
CP001,Alice,12 Rue Joss,Paul,Bastos,2.5,Phone case,Express
CP002,Alice,12 Rue Joss,Marie,Akwa,1,Documents,Standard
"""


@pytest.fixture
def parser():
    return ShipmentCSVParser()


class TestColumnTarget:
    @pytest.mark.parametrize(
        "header, target",
        [
            ("Tracking Number", ("tracking_number",)),
            ("tracking", ("tracking_number",)),
            ("Sender Address", ("sender", "address")),
            ("Shipper", ("sender", "name")),
            ("Recipient Phone", ("receiver", "phone")),
            ("Consignee Tel", ("receiver", "phone")),
            ("Weight (kg)", ("package", "weight")),
            ("Length", ("package", "dimensions", "length")),
            ("Contents", ("package", "description")),
            ("Service Level", ("shipping", "service_level")),
            ("Estimated Delivery", ("shipping", "estimated_delivery")),
            ("Status", ("status",)),
            ("Notes", None),
            ("", None),
        ],
    )
    def test_mapping(self, header, target):
        assert column_target(header) == target


class TestShipmentCSVParser:
    def test_comma_csv(self, parser):
        result = parser.parse(CSV_COMMA.encode("utf-8"))

        assert result.count == 2
        first = result.records[0]
        assert first.tracking_number == "CP001"
        assert first.sender.name == "Alice"
        assert first.receiver.address == "Bastos"
        assert first.package.description == "Phone case"
        assert first.shipping.service_level == "Express"

    def test_records_bind_to_fields(self, parser):
        record = parser.parse(CSV_COMMA.encode("utf-8")).records[0]
        resolver = DataBindingResolver()

        assert resolver.resolve(create_field("text", binding="sender"), record) == "Alice\n12 Rue Joss"
        assert resolver.resolve(create_field("text", binding="weight"), record) == "2.5 kg"

    def test_semicolon_cp1251(self, parser):
        content = "Трек;Tracking;Receiver;Length;Width;Height\nx;CP9;Иван;30,5;20;15\n"
        result = parser.parse(content.encode("cp1251"))

        record = result.records[0]
        assert record.tracking_number == "CP9"
        assert record.receiver.name == "Иван"
        assert record.package.dimensions.length == 30.5
        assert result.unmapped_columns == ["Трек"]

    def test_rows_without_values_skipped(self, parser):
        content = "Tracking,Notes\nCP1,first\n,only notes\nCP2,\n"
        result = parser.parse(content.encode("utf-8"))

        assert [r.tracking_number for r in result.records] == ["CP1", "CP2"]
        assert result.skipped_rows == 1

    def test_unknown_columns_only(self, parser):
        with pytest.raises(ValueError):
            parser.parse(b"foo,bar\n1,2\n")

    def test_empty_file(self, parser):
        with pytest.raises(ValueError):
            parser.parse(b"")

    def test_utf8_bom(self, parser):
        result = parser.parse("\ufeffTracking\nCP1\n".encode("utf-8"))
        assert result.records[0].tracking_number == "CP1"

    def test_excel(self, parser):
        workbook = openpyxl.Workbook()
        sheet = workbook.active
        sheet.append(["Tracking", "Recipient", "Weight"])
        sheet.append(["CP5", "Marie", 3])
        buffer = io.BytesIO()
        workbook.save(buffer)

        result = parser.parse(buffer.getvalue(), filename="shipments.xlsx")

        assert result.count == 1
        assert result.records[0].receiver.name == "Marie"
        assert result.records[0].package.weight == "3"

    def test_broken_excel(self, parser):
        with pytest.raises(ValueError):
            parser.parse(b"not a workbook", filename="shipments.xlsx")
