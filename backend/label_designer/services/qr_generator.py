"""
QR code generator.

Wraps the qrcode library with fixed box size/border so output is
deterministic, and composes tracking URLs for tracking QR codes.
"""

import qrcode
from qrcode.constants import ERROR_CORRECT_H, ERROR_CORRECT_L, ERROR_CORRECT_M, ERROR_CORRECT_Q
from qrcode.exceptions import DataOverflowError

from label_designer.config import LABEL, get_settings
from label_designer.exceptions import EncodingError
from label_designer.models.fields import QRCodeData
from label_designer.models.label_types import ErrorCorrectionLevel
from label_designer.services.barcode_generator import GeneratedCode, to_png

ERROR_CORRECTION: dict[ErrorCorrectionLevel, int] = {
    ErrorCorrectionLevel.L: ERROR_CORRECT_L,
    ErrorCorrectionLevel.M: ERROR_CORRECT_M,
    ErrorCorrectionLevel.Q: ERROR_CORRECT_Q,
    ErrorCorrectionLevel.H: ERROR_CORRECT_H,
}

SYMBOLOGY = "QR"


def compose_tracking_url(tracking_number: str, base_url: str | None = None) -> str:
    """``base_url + tracking_number``; the configured tracking base when omitted."""
    if base_url is None:
        base_url = get_settings().tracking_base_url
    return f"{base_url}{tracking_number}"


class QRCodeGenerator:
    """Generator of QR codes."""

    def __init__(self, box_size: int = LABEL.QR_BOX_SIZE, border: int = LABEL.QR_BORDER):
        """
        Args:
            box_size: Pixels per module
            border: Quiet zone in modules
        """
        self.box_size = box_size
        self.border = border

    def generate(self, data: str, options: QRCodeData | None = None) -> GeneratedCode:
        """
        Generates a QR code.

        Args:
            data: Value to encode
            options: Error correction level

        Returns:
            GeneratedCode with the raster

        Raises:
            EncodingError: If the value is empty or does not fit a QR symbol
        """
        options = options or QRCodeData()
        if data is None or not str(data).strip():
            raise EncodingError(SYMBOLOGY, data or "", "empty value")

        qr = qrcode.QRCode(
            version=None,
            error_correction=ERROR_CORRECTION[options.error_correction_level],
            box_size=self.box_size,
            border=self.border,
        )
        try:
            qr.add_data(data)
            qr.make(fit=True)
        except (DataOverflowError, ValueError) as e:
            raise EncodingError(SYMBOLOGY, data, str(e) or "data too long") from e

        image = qr.make_image(fill_color="black", back_color="white").get_image().convert("RGB")
        return GeneratedCode(
            image=image,
            payload=data,
            symbology=SYMBOLOGY,
            png=to_png(image),
        )

    def generate_tracking(
        self,
        tracking_number: str,
        base_url: str | None = None,
        options: QRCodeData | None = None,
    ) -> GeneratedCode:
        """
        QR code of a tracking URL.

        Args:
            tracking_number: Shipment tracking number
            base_url: URL prefix (settings.tracking_base_url when None)
            options: Error correction level

        Raises:
            EncodingError: If the tracking number is empty or the URL does not fit
        """
        if tracking_number is None or not str(tracking_number).strip():
            raise EncodingError(SYMBOLOGY, tracking_number or "", "empty tracking number")
        return self.generate(compose_tracking_url(tracking_number, base_url), options)
