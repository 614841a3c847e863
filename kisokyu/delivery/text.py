"""
Text normalization shared by the verifier and the reason scorer.

Bank items mix hiragana, katakana and full-width characters for the same
word (しんなー / シンナー). Matching runs against one folded form.
"""

from __future__ import annotations

import re
import unicodedata

_WHITESPACE = re.compile(r"\s+")

# Katakana ァ..ヶ map onto hiragana ぁ..ゖ at a fixed offset
_KATAKANA_START = 0x30A1
_KATAKANA_END = 0x30F6
_KANA_OFFSET = 0x60


def katakana_to_hiragana(text: str) -> str:
    """Fold katakana into hiragana, leaving the prolonged sound mark alone."""
    return "".join(
        chr(ord(ch) - _KANA_OFFSET) if _KATAKANA_START <= ord(ch) <= _KATAKANA_END else ch
        for ch in text
    )


def normalize_text(text: str | None) -> str:
    """NFKC, katakana folded to hiragana, lowercase, single spaces."""
    if not text:
        return ""
    folded = katakana_to_hiragana(unicodedata.normalize("NFKC", text))
    return _WHITESPACE.sub(" ", folded).strip().lower()
