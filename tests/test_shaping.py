"""Tests for icequery/shaping.py - width measurement and transliteration."""

from __future__ import annotations

import sys

import pytest
from icequery.exceptions import ShapingProviderError
from icequery.shaping import TextShaper, TextShaping, load_text_shaper


class TestTextShaper:
    """Tests for TextShaper."""

    def test_plain_width_counts_code_points(self):
        assert TextShaper().display_width("名前", TextShaping.PLAIN_WIDTH) == 2

    def test_custom_width_counts_cells(self):
        assert TextShaper().display_width("名前", TextShaping.CUSTOM_ENCODING) == 4
        assert TextShaper().display_width("Zürich", TextShaping.CUSTOM_ENCODING) == 6

    def test_no_transliterator(self):
        shaper = TextShaper()
        assert not shaper.can_transliterate
        assert shaper.transliterate("Zürich") is None

    def test_ascii_passes_through(self):
        calls = []
        shaper = TextShaper(lambda text: calls.append(text) or text)
        assert shaper.transliterate("plain") == "plain"
        assert calls == []


class TestLoadTextShaper:
    """Tests for load_text_shaper."""

    def test_without_ascii(self):
        assert not load_text_shaper(need_ascii=False).can_transliterate

    def test_with_unidecode(self):
        shaper = load_text_shaper(need_ascii=True)
        assert shaper.transliterate("Ærøskøbing") == "AEroskobing"

    def test_unmapped_characters_become_question_marks(self):
        shaper = load_text_shaper(need_ascii=True)
        assert shaper.transliterate("build\U0001F600box") == "build?box"

    def test_missing_strict(self, mocker):
        mocker.patch.dict(sys.modules, {"unidecode": None})
        with pytest.raises(ShapingProviderError):
            load_text_shaper(need_ascii=True)

    def test_missing_lenient(self, mocker, caplog):
        mocker.patch.dict(sys.modules, {"unidecode": None})
        shaper = load_text_shaper(need_ascii=True, strict=False)
        assert not shaper.can_transliterate
        assert "unavailable" in caplog.text
