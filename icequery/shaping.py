"""Display width measurement and ASCII transliteration for table cells."""

from __future__ import annotations

import logging
from collections.abc import Callable
from enum import Enum

from rich.cells import cell_len

from .exceptions import ShapingProviderError

logger = logging.getLogger("icequery")


class TextShaping(Enum):
    """How a column's text is measured and transliterated."""

    PLAIN_WIDTH = "plain"
    CUSTOM_ENCODING = "custom"


class TextShaper:
    """Measures cell text and optionally folds it to 7-bit ASCII.

    A shaper without a transliterator is still usable for measuring;
    transliterate() then reports every cell as unavailable.
    """

    def __init__(self, transliterator: Callable[[str], str] | None = None):
        self._transliterator = transliterator

    @property
    def can_transliterate(self) -> bool:
        return self._transliterator is not None

    def display_width(self, text: str, shaping: TextShaping) -> int:
        """Return the number of terminal cells text occupies."""
        if shaping is TextShaping.PLAIN_WIDTH:
            return len(text)
        return cell_len(text)

    def transliterate(self, text: str) -> str | None:
        """Return an ASCII rendition of text, or None if unavailable."""
        if self._transliterator is None:
            return None
        if text.isascii():
            return text
        try:
            return self._transliterator(text)
        except ValueError as e:
            logger.debug("Cannot transliterate %r: %s", text, e)
            return None


def _unidecode_ascii(text: str) -> str:
    """Transliterate text; characters without a mapping become "?"."""
    from unidecode import unidecode

    return unidecode(text, errors="replace", replace_str="?")


def load_text_shaper(*, need_ascii: bool, strict: bool = True) -> TextShaper:
    """Create the shaper for a run.

    Args:
        need_ascii: Whether ASCII transliteration will be requested
        strict: Fail instead of degrading when transliteration is missing

    Raises:
        ShapingProviderError: need_ascii and strict, but Unidecode is unusable
    """
    if not need_ascii:
        return TextShaper()
    try:
        import unidecode  # noqa: F401
    except ImportError as e:
        if strict:
            raise ShapingProviderError(f"ASCII transliteration unavailable: {e}") from e
        logger.warning("ASCII transliteration unavailable, printing text unchanged")
        return TextShaper()
    return TextShaper(_unidecode_ascii)
