"""
Import of shipment records from CSV/Excel files.

Rows become ShipmentRecord objects that can be bound to a template for
preview or bulk label rendering.
"""

import csv
import io
import logging
import re
from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Any

import openpyxl
from pydantic import ValidationError as PydanticValidationError

from label_designer.models.records import ShipmentRecord
from label_designer.services.binding import PARTY_PARTS

logger = logging.getLogger(__name__)

SENDER_WORDS = ("sender", "shipper")
RECEIVER_WORDS = ("receiver", "recipient", "consignee")
DIMENSION_PARTS = ("length", "width", "height")


@dataclass
class ParsedShipments:
    """Parse result."""

    records: list[ShipmentRecord]
    count: int
    skipped_rows: int = 0
    unmapped_columns: list[str] = field(default_factory=list)


def _normalize_header(header: Any) -> str:
    text = str(header or "").replace("\ufeff", "").strip().lower()
    return re.sub(r"[\s\-./]+", "_", text)


def column_target(header: Any) -> tuple[str, ...] | None:
    """
    Record path a column header maps to.

    Examples:
        "Tracking Number" -> ("tracking_number",)
        "Sender Address"  -> ("sender", "address")
        "Recipient"       -> ("receiver", "name")
        "Weight (kg)"     -> ("package", "weight")
    """
    key = _normalize_header(header)
    if not key:
        return None

    party = None
    if any(word in key for word in SENDER_WORDS):
        party = "sender"
    elif any(word in key for word in RECEIVER_WORDS):
        party = "receiver"

    if party:
        for part in PARTY_PARTS:
            if part in key:
                return (party, part)
        if "tel" in key or "mobile" in key:
            return (party, "phone")
        return (party, "name")

    if "track" in key:
        return ("tracking_number",)
    if "weight" in key:
        return ("package", "weight")
    for part in DIMENSION_PARTS:
        if key.startswith(part):
            return ("package", "dimensions", part)
    if "description" in key or "contents" in key:
        return ("package", "description")
    if "service" in key:
        return ("shipping", "service_level")
    if "delivery" in key or key == "eta":
        return ("shipping", "estimated_delivery")
    if "status" in key:
        return ("status",)
    return None


def _to_number(value: str) -> float | None:
    try:
        return float(value.replace(",", "."))
    except ValueError:
        return None


class ShipmentCSVParser:
    """
    Parser of shipment lists.

    Supports:
    - CSV with different delimiters (;, ,, tab)
    - utf-8 / cp1251 / latin-1 files
    - Excel (.xlsx) workbooks, first sheet
    - First row as header, columns matched by name
    """

    def parse(self, file_bytes: bytes, filename: str = "shipments.csv") -> ParsedShipments:
        """
        Parse a shipment file.

        Args:
            file_bytes: File content
            filename: File name (format is chosen by extension)

        Returns:
            ParsedShipments

        Raises:
            ValueError: If the file is empty or has no recognizable columns
        """
        extension = filename.lower().split(".")[-1] if "." in filename else "csv"
        if extension in ("xlsx", "xlsm"):
            rows = self._read_excel(file_bytes)
        else:
            rows = self._read_csv(file_bytes)

        if not rows:
            raise ValueError("File contains no data")

        header, *body = rows
        targets = [column_target(cell) for cell in header]
        if not any(targets):
            raise ValueError("No shipment columns found in the header row")

        unmapped = [str(cell) for cell, target in zip(header, targets) if target is None and cell]
        if unmapped:
            logger.info(f"Ignored columns: {', '.join(unmapped)}")

        records: list[ShipmentRecord] = []
        skipped = 0
        for row_idx, row in enumerate(body, start=2):
            record = self._build_record(row, targets, row_idx)
            if record is None:
                skipped += 1
                continue
            records.append(record)

        logger.info(f"Parsed {len(records)} shipments ({skipped} rows skipped)")
        return ParsedShipments(
            records=records,
            count=len(records),
            skipped_rows=skipped,
            unmapped_columns=unmapped,
        )

    def _build_record(
        self,
        row: list[str],
        targets: list[tuple[str, ...] | None],
        row_idx: int,
    ) -> ShipmentRecord | None:
        data: dict[str, Any] = {}
        for cell, target in zip(row, targets):
            value = cell.strip() if isinstance(cell, str) else cell
            if target is None or value in (None, ""):
                continue
            if target[-1] in DIMENSION_PARTS:
                value = _to_number(value)
                if value is None:
                    continue

            node = data
            for key in target[:-1]:
                node = node.setdefault(key, {})
            node[target[-1]] = value

        if not data:
            return None

        try:
            return ShipmentRecord.model_validate(data)
        except PydanticValidationError as e:
            logger.warning(f"Row {row_idx} skipped: {e.error_count()} invalid values")
            return None

    def _read_csv(self, file_bytes: bytes) -> list[list[str]]:
        content = None
        for encoding in ["utf-8-sig", "cp1251", "latin-1"]:
            try:
                content = file_bytes.decode(encoding)
                break
            except UnicodeDecodeError:
                continue

        if content is None:
            raise ValueError("Could not detect file encoding")

        reader = csv.reader(io.StringIO(content), delimiter=self._detect_delimiter(content))
        return [row for row in reader if any(cell.strip() for cell in row)]

    def _read_excel(self, file_bytes: bytes) -> list[list[str]]:
        try:
            workbook = openpyxl.load_workbook(io.BytesIO(file_bytes), read_only=True, data_only=True)
        except Exception as e:
            raise ValueError(f"Could not read Excel file: {e}") from e

        try:
            sheet = workbook.active
            if sheet is None:
                raise ValueError("Excel file has no sheets")
            rows = [
                [self._cell_text(value) for value in row]
                for row in sheet.iter_rows(values_only=True)
            ]
        finally:
            workbook.close()

        return [row for row in rows if any(cell.strip() for cell in row)]

    @staticmethod
    def _cell_text(value: Any) -> str:
        if value is None:
            return ""
        if isinstance(value, datetime):
            return value.date().isoformat()
        if isinstance(value, date):
            return value.isoformat()
        return str(value)

    def _detect_delimiter(self, content: str) -> str:
        """Most frequent candidate in the first lines."""
        sample = content[:2000]
        delimiters = {
            ";": sample.count(";"),
            ",": sample.count(","),
            "\t": sample.count("\t"),
        }
        return max(delimiters, key=delimiters.get)
