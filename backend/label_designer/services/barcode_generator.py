"""
Linear barcode generator (CODE128, CODE39, EAN-13, EAN-8, UPC-A).

Produces deterministic rasters: the same value and options always yield
byte-identical PNG output, so a template renders the same in every
session and in preview/print.
"""

from dataclasses import dataclass, field
from io import BytesIO

import barcode
from barcode.errors import BarcodeError
from barcode.writer import ImageWriter
from PIL import Image

from label_designer.config import LABEL
from label_designer.exceptions import EncodingError
from label_designer.models.fields import BarcodeData
from label_designer.models.label_types import BarcodeFormat

# python-barcode class names per symbology
BARCODE_CLASSES: dict[BarcodeFormat, str] = {
    BarcodeFormat.CODE128: "code128",
    BarcodeFormat.CODE39: "code39",
    BarcodeFormat.EAN13: "ean13",
    BarcodeFormat.EAN8: "ean8",
    BarcodeFormat.UPC: "upca",
}

# Digits without / with the check digit
NUMERIC_LENGTHS: dict[BarcodeFormat, tuple[int, int]] = {
    BarcodeFormat.EAN13: (12, 13),
    BarcodeFormat.EAN8: (7, 8),
    BarcodeFormat.UPC: (11, 12),
}

CODE39_CHARSET = frozenset("0123456789ABCDEFGHIJKLMNOPQRSTUVWXYZ-. $/+%")


@dataclass
class GeneratedCode:
    """Result of a barcode/QR generation."""

    image: Image.Image
    payload: str  # Encoded value
    symbology: str  # "CODE128", "EAN13", "QR", ...
    png: bytes = field(repr=False, default=b"")

    @property
    def width_pixels(self) -> int:
        return self.image.width

    @property
    def height_pixels(self) -> int:
        return self.image.height


def to_png(image: Image.Image) -> bytes:
    buffer = BytesIO()
    image.save(buffer, format="PNG")
    return buffer.getvalue()


def gtin_check_digit(digits: str) -> int:
    """GS1 mod-10 check digit for EAN/UPC bodies."""
    total = 0
    for position, digit in enumerate(reversed(digits)):
        total += int(digit) * (3 if position % 2 == 0 else 1)
    return (10 - total % 10) % 10


class BarcodeGenerator:
    """
    Generator of linear barcodes.

    Supports:
    - CODE128 for any ASCII value (tracking numbers)
    - CODE39 for upper-case alphanumerics
    - EAN-13, EAN-8, UPC-A for GTIN numbers (check digit optional, verified if given)
    """

    def __init__(self, dpi: int = LABEL.CODE_DPI):
        """
        Args:
            dpi: Raster resolution (203 DPI for thermal printers)
        """
        self.dpi = dpi

    def generate(self, data: str, options: BarcodeData | None = None) -> GeneratedCode:
        """
        Generates a barcode.

        Args:
            data: Value to encode
            options: Format, bar width and display_value flag

        Returns:
            GeneratedCode with the raster

        Raises:
            EncodingError: If the format rejects the value
        """
        options = options or BarcodeData()
        symbology = options.format.value
        value = self._prepare(data, options.format)

        writer = ImageWriter()
        writer_options = {
            "module_width": self.module_width_mm(options.width),
            "module_height": LABEL.BARCODE_HEIGHT_MM,
            "quiet_zone": LABEL.BARCODE_QUIET_ZONE_MM,
            "font_size": 10,
            "text_distance": 1.5,
            # Human-readable line only; never changes the encoded bars
            "write_text": options.display_value,
            "dpi": self.dpi,
            "background": "white",
            "foreground": "black",
        }

        try:
            barcode_class = barcode.get_barcode_class(BARCODE_CLASSES[options.format])
            symbol = barcode_class(value, writer=writer)
            image = symbol.render(writer_options=writer_options)
        except (BarcodeError, ValueError) as e:
            raise EncodingError(symbology, data, str(e)) from e

        image = image.convert("RGB")
        return GeneratedCode(
            image=image,
            payload=data,
            symbology=symbology,
            png=to_png(image),
        )

    def module_width_mm(self, width: int) -> float:
        """
        Module width in mm for a bar width multiplier.

        Always a whole number of printer dots. The writer truncates pixel
        sizes, so a hundredth of a dot is added to keep float error from
        rounding a module down by one dot (or to zero).
        """
        dots = LABEL.BARCODE_MODULE_DOTS * width + 0.01
        return dots * 25.4 / self.dpi

    def _prepare(self, data: str, barcode_format: BarcodeFormat) -> str:
        """Validates the value for the symbology and returns what the encoder gets."""
        symbology = barcode_format.value
        if data is None or not str(data).strip():
            raise EncodingError(symbology, data or "", "empty value")
        value = str(data).strip()

        if barcode_format in NUMERIC_LENGTHS:
            body_length, full_length = NUMERIC_LENGTHS[barcode_format]
            if not value.isdigit():
                raise EncodingError(symbology, data, "only digits are allowed")
            if len(value) not in (body_length, full_length):
                raise EncodingError(
                    symbology,
                    data,
                    f"expected {body_length} or {full_length} digits, got {len(value)}",
                )
            body = value[:body_length]
            if len(value) == full_length and int(value[-1]) != gtin_check_digit(body):
                raise EncodingError(symbology, data, "invalid check digit")
            # Encoder appends the check digit itself
            return body

        if barcode_format == BarcodeFormat.CODE39:
            value = value.upper()
            invalid = sorted(set(value) - CODE39_CHARSET)
            if invalid:
                raise EncodingError(symbology, data, f"unsupported characters: {''.join(invalid)}")
            return value

        if not value.isascii():
            raise EncodingError(symbology, data, "only ASCII characters are allowed")
        return value
