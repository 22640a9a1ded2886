# backend/label_designer/models/label_types.py
"""
Enumerations shared by the label field model, renderer and session.
"""

from enum import Enum


class FieldType(str, Enum):
    """Kind of positionable element on a label."""

    TEXT = "text"
    BARCODE = "barcode"
    QR_CODE = "qr_code"
    IMAGE = "image"
    LINE = "line"
    RECTANGLE = "rectangle"

    @property
    def is_code(self) -> bool:
        """Barcode and QR fields carry an encoded symbol."""
        return self in (FieldType.BARCODE, FieldType.QR_CODE)


class BarcodeFormat(str, Enum):
    """Linear barcode symbologies."""

    CODE128 = "CODE128"
    CODE39 = "CODE39"
    EAN13 = "EAN13"
    EAN8 = "EAN8"
    UPC = "UPC"


class ErrorCorrectionLevel(str, Enum):
    """QR error correction levels."""

    L = "L"  # ~7%
    M = "M"  # ~15%
    Q = "Q"  # ~25%
    H = "H"  # ~30%


class FontWeight(str, Enum):
    NORMAL = "normal"
    BOLD = "bold"


class TextAlign(str, Enum):
    LEFT = "left"
    CENTER = "center"
    RIGHT = "right"


class BorderStyle(str, Enum):
    SOLID = "solid"
    DASHED = "dashed"
    DOTTED = "dotted"


class Orientation(str, Enum):
    PORTRAIT = "portrait"
    LANDSCAPE = "landscape"


class RenderMode(str, Enum):
    """Design mode shows editing chrome, preview mode matches the printed label."""

    DESIGN = "design"
    PREVIEW = "preview"


class LabelSize(str, Enum):
    """Physical label/paper sizes."""

    A4 = "A4"
    A5 = "A5"
    A6 = "A6"
    LETTER = "LETTER"
    SIZE_4x6 = "4x6"
    SIZE_4x4 = "4x4"
    SIZE_100x150 = "100x150"

    @property
    def dimensions_mm(self) -> tuple[float, float]:
        """(width, height) in mm, portrait."""
        sizes = {
            "A4": (210.0, 297.0),
            "A5": (148.0, 210.0),
            "A6": (105.0, 148.0),
            "LETTER": (215.9, 279.4),
            "4x6": (101.6, 152.4),
            "4x4": (101.6, 101.6),
            "100x150": (100.0, 150.0),
        }
        return sizes[self.value]
