"""
Label designer configuration.

All settings live here (single source of truth).
"""

from functools import lru_cache
from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class LabelSettings:
    """
    Fixed constants of the label canvas.

    Canvas units are CSS pixels (96 DPI); barcode/QR rasters are produced
    at thermal printer resolution and scaled into their field box.
    """

    # Canvas resolution (screen pixels)
    CANVAS_DPI: int = 96

    # Code raster resolution (thermal printers)
    CODE_DPI: int = 203

    # Typography limits
    FONT_SIZE_MIN: int = 6
    FONT_SIZE_MAX: int = 72
    DEFAULT_FONT_FAMILY: str = "Arial"
    DEFAULT_FONT_SIZE: int = 14
    LINE_SPACING: float = 1.2
    TEXT_PADDING: int = 4

    # Barcode bar width multiplier
    BARCODE_WIDTH_MIN: int = 1
    BARCODE_WIDTH_MAX: int = 5

    # Printer dots per barcode module at width=1 (0.25 mm at 203 DPI)
    BARCODE_MODULE_DOTS: int = 2
    BARCODE_HEIGHT_MM: float = 15.0
    BARCODE_QUIET_ZONE_MM: float = 2.5

    # QR raster
    QR_BOX_SIZE: int = 10
    QR_BORDER: int = 4

    COLOR_BLACK: str = "#000000"
    COLOR_WHITE: str = "#FFFFFF"

    # Default (width, height) in canvas pixels per field type
    DEFAULT_FIELD_SIZES: dict[str, tuple[float, float]] = {
        "text": (120.0, 30.0),
        "barcode": (200.0, 50.0),
        "qr_code": (100.0, 100.0),
        "image": (100.0, 100.0),
        "line": (200.0, 2.0),
        "rectangle": (150.0, 100.0),
    }

    @classmethod
    def mm_to_pixels(cls, mm: float, dpi: int | None = None) -> int:
        """Millimetres to pixels (canvas DPI unless given)."""
        return round(mm * (dpi or cls.CANVAS_DPI) / 25.4)

    @classmethod
    def pixels_to_mm(cls, pixels: float, dpi: int | None = None) -> float:
        """Pixels to millimetres (canvas DPI unless given)."""
        return pixels * 25.4 / (dpi or cls.CANVAS_DPI)


class Settings(BaseSettings):
    """
    Runtime settings from environment variables.

    Loaded from a .env file or the process environment.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # === Application ===
    app_name: str = "Label Designer"
    debug: bool = False

    # === Tracking ===
    tracking_base_url: str = Field(default="https://camerpulse.cm/track/")

    # === Viewport ===
    viewport_max_width: float = Field(default=800.0, gt=0)
    viewport_max_height: float = Field(default=600.0, gt=0)

    # === Editing ===
    snap_to_grid: bool = False
    grid_size: int = Field(default=10, gt=0)
    show_grid: bool = True
    history_limit: int = Field(default=50, ge=0)
    duplicate_offset: float = 20.0

    # === Formatting ===
    date_format: str = "%d/%m/%Y"

    # === Logging ===
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "INFO"


@lru_cache
def get_settings() -> Settings:
    """
    Application settings (singleton).

    Cached so the .env file is read once.
    """
    return Settings()


# Label constants exported for convenience
LABEL = LabelSettings()
