"""Tests for text wrapping and clipping."""

import pytest

from label_designer.services.text_layout import (
    ELLIPSIS,
    get_font,
    layout_text,
    text_width,
    truncate_text,
    wrap_text,
)

LONG_TEXT = "Fragile handle with care keep dry this side up do not stack more than three boxes"


@pytest.fixture
def font():
    return get_font("Arial", 14)


class TestWrapText:
    def test_lines_fit_width(self, font):
        lines = wrap_text(LONG_TEXT, 100, font)

        assert len(lines) > 1
        assert all(text_width(line, font) <= 100 for line in lines)
        assert " ".join(lines) == LONG_TEXT

    def test_explicit_breaks_kept(self, font):
        assert wrap_text("Alice\nDouala", 300, font) == ["Alice", "Douala"]

    def test_long_word_broken(self, font):
        lines = wrap_text("X" * 60, 50, font)

        assert len(lines) > 1
        assert "".join(lines) == "X" * 60


class TestLayoutText:
    def test_fits(self, font):
        layout = layout_text("Short", font, 14, 120, 30)

        assert layout.lines == ["Short"]
        assert layout.clipped is False
        assert layout.line_height == pytest.approx(16.8)

    def test_clipped_with_ellipsis(self, font):
        layout = layout_text(LONG_TEXT, font, 14, 100, 60)

        assert layout.clipped is True
        assert len(layout.lines) == 3
        assert layout.lines[-1].endswith(ELLIPSIS)
        assert text_width(layout.lines[-1], font) <= 92

    def test_at_least_one_line(self, font):
        layout = layout_text(LONG_TEXT, font, 14, 100, 5)
        assert len(layout.lines) == 1


class TestTruncate:
    def test_short_text_unchanged(self, font):
        assert truncate_text("OK", 100, font) == "OK"

    def test_long_text_cut(self, font):
        cut = truncate_text(LONG_TEXT, 80, font)

        assert cut.endswith(ELLIPSIS)
        assert text_width(cut, font) <= 80
