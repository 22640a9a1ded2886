# backend/label_designer/services/text_layout.py
"""
Text fitting for text fields: wrap within the field width, clip to the
field height. Widths are measured with Pillow font metrics.
"""

from dataclasses import dataclass
from functools import lru_cache

from PIL import ImageFont

from label_designer.config import LABEL

Font = ImageFont.FreeTypeFont | ImageFont.ImageFont

# Font family -> (regular, bold) font files
FONT_FILES: dict[str, tuple[str, str]] = {
    "arial": ("arial.ttf", "arialbd.ttf"),
    "helvetica": ("Helvetica.ttf", "Helvetica-Bold.ttf"),
    "times new roman": ("times.ttf", "timesbd.ttf"),
    "courier new": ("cour.ttf", "courbd.ttf"),
    "roboto": ("Roboto-Regular.ttf", "Roboto-Bold.ttf"),
    "open sans": ("OpenSans-Regular.ttf", "OpenSans-Bold.ttf"),
}

# Tried after the requested family (Linux containers)
FALLBACK_FONT_FILES: list[tuple[str, str]] = [
    ("DejaVuSans.ttf", "DejaVuSans-Bold.ttf"),
    ("/usr/share/fonts/truetype/dejavu/DejaVuSans.ttf", "/usr/share/fonts/truetype/dejavu/DejaVuSans-Bold.ttf"),
    ("LiberationSans-Regular.ttf", "LiberationSans-Bold.ttf"),
]

ELLIPSIS = "..."


@dataclass
class TextLayout:
    lines: list[str]
    line_height: float
    clipped: bool


@lru_cache(maxsize=64)
def get_font(family: str | None, size: int, bold: bool = False) -> Font:
    """Font for a family/size/weight, falling back to the bundled default."""
    candidates: list[tuple[str, str]] = []
    if family and family.lower() in FONT_FILES:
        candidates.append(FONT_FILES[family.lower()])
    candidates.extend(FALLBACK_FONT_FILES)

    for regular, bold_file in candidates:
        try:
            return ImageFont.truetype(bold_file if bold else regular, size)
        except OSError:
            continue
    return ImageFont.load_default(size)


def text_width(text: str, font: Font) -> float:
    return font.getlength(text)


def truncate_text(text: str, max_width: float, font: Font, force_ellipsis: bool = False) -> str:
    """Cuts text to the given width, ending with an ellipsis."""
    if not force_ellipsis and text_width(text, font) <= max_width:
        return text

    while text:
        candidate = text.rstrip() + ELLIPSIS
        if text_width(candidate, font) <= max_width:
            return candidate
        text = text[:-1]

    return ELLIPSIS


def _break_word(word: str, max_width: float, font: Font) -> list[str]:
    pieces: list[str] = []
    current = ""
    for char in word:
        if current and text_width(current + char, font) > max_width:
            pieces.append(current)
            current = char
        else:
            current += char
    if current:
        pieces.append(current)
    return pieces


def wrap_text(text: str, max_width: float, font: Font) -> list[str]:
    """
    Greedy word wrap. Explicit line breaks are kept; words wider than the
    line are broken by character.
    """
    lines: list[str] = []
    for paragraph in text.split("\n"):
        words = paragraph.split()
        if not words:
            lines.append("")
            continue

        current = ""
        for word in words:
            candidate = f"{current} {word}" if current else word
            if text_width(candidate, font) <= max_width:
                current = candidate
                continue

            if current:
                lines.append(current)
            if text_width(word, font) <= max_width:
                current = word
            else:
                *full, current = _break_word(word, max_width, font)
                lines.extend(full)
        lines.append(current)
    return lines


def layout_text(
    text: str,
    font: Font,
    font_size: int,
    box_width: float,
    box_height: float,
    padding: float = LABEL.TEXT_PADDING,
) -> TextLayout:
    """
    Wraps text into a box and clips the lines that do not fit.

    At least one line is always kept; a clipped last line ends with an ellipsis.
    """
    available_width = max(1.0, box_width - 2 * padding)
    line_height = font_size * LABEL.LINE_SPACING
    max_lines = max(1, int((box_height - 2 * padding) // line_height))

    lines = wrap_text(text, available_width, font)
    if len(lines) <= max_lines:
        return TextLayout(lines=lines, line_height=line_height, clipped=False)

    kept = lines[:max_lines]
    kept[-1] = truncate_text(kept[-1], available_width, font, force_ellipsis=True)
    return TextLayout(lines=kept, line_height=line_height, clipped=True)
