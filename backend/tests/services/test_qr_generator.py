"""Tests for the QR code generator and tracking URLs."""

import pytest

from label_designer.config import get_settings
from label_designer.exceptions import EncodingError
from label_designer.models.fields import QRCodeData
from label_designer.models.label_types import ErrorCorrectionLevel
from label_designer.services.qr_generator import QRCodeGenerator, compose_tracking_url


@pytest.fixture
def generator():
    return QRCodeGenerator()


class TestTrackingUrl:
    def test_explicit_base(self):
        assert compose_tracking_url("TRK1", "https://track.example/t/") == "https://track.example/t/TRK1"

    def test_configured_base(self):
        assert compose_tracking_url("TRK1") == f"{get_settings().tracking_base_url}TRK1"


class TestQRCodeGenerator:
    def test_generate(self, generator):
        result = generator.generate("TRK123456789")

        assert result.symbology == "QR"
        assert result.payload == "TRK123456789"
        assert result.width_pixels == result.height_pixels

    def test_deterministic(self, generator):
        options = QRCodeData(error_correction_level=ErrorCorrectionLevel.Q)

        first = generator.generate("CP000111222", options)
        second = QRCodeGenerator().generate("CP000111222", options)

        assert first.png == second.png

    def test_tracking_payload(self, generator):
        result = generator.generate_tracking("TRK123456789", "https://track.example/t/")
        assert result.payload == "https://track.example/t/TRK123456789"

    def test_higher_correction_needs_more_modules(self, generator):
        data = "https://track.example/t/" + "X" * 80

        low = generator.generate(data, QRCodeData(error_correction_level=ErrorCorrectionLevel.L))
        high = generator.generate(data, QRCodeData(error_correction_level=ErrorCorrectionLevel.H))

        assert high.width_pixels > low.width_pixels

    def test_empty_value(self, generator):
        with pytest.raises(EncodingError):
            generator.generate("")

    def test_empty_tracking_number(self, generator):
        with pytest.raises(EncodingError):
            generator.generate_tracking("")

    def test_overflow(self, generator):
        with pytest.raises(EncodingError) as exc_info:
            generator.generate("A" * 8000)

        assert exc_info.value.symbology == "QR"
