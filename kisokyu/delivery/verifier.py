"""
Answer Verifier.

Resolves the canonical answer for an item and judges a submission.

A few bank statements carry a literal answer that disagrees with the text
on closer reading. ``OVERRIDES`` is a static correction table evaluated in
order against the normalized item text; the first matching rule wins and
the literal stored answer is the fallback.
"""

from __future__ import annotations

import re
from dataclasses import dataclass

from .question_bank import SKIP, Answer, SessionItem
from .text import normalize_text


@dataclass(frozen=True)
class AnswerOverride:
    """One (matcher, override) rule of the correction table."""

    name: str
    pattern: re.Pattern[str]
    answer: Answer

    def matches(self, normalized_text: str) -> bool:
        return self.pattern.search(normalized_text) is not None


# Patterns are written against normalize_text() output (hiragana, single spaces)
OVERRIDES: tuple[AnswerOverride, ...] = (
    AnswerOverride(
        name="thinner_windows_open",
        pattern=re.compile(r"しんなー.*まどを あけます"),
        answer=Answer.MARU,
    ),
    AnswerOverride(
        name="thinner_windows_closed",
        pattern=re.compile(r"しんなー.*まどを しめます"),
        answer=Answer.BATSU,
    ),
)


class AnswerVerifier:
    """Canonical answer lookup and judging. Stateless."""

    def __init__(self, overrides: tuple[AnswerOverride, ...] = OVERRIDES):
        self.overrides = overrides

    def matching_override(self, item: SessionItem) -> AnswerOverride | None:
        """First override rule matching the item text, if any."""
        normalized = normalize_text(item.text)
        for rule in self.overrides:
            if rule.matches(normalized):
                return rule
        return None

    def canonical_answer(self, item: SessionItem) -> Answer:
        """Answer treated as authoritative for judging."""
        rule = self.matching_override(item)
        return rule.answer if rule else item.answer

    def judge(self, submitted: Answer | str, item: SessionItem) -> bool:
        """
        Judge a submitted answer.

        Raises:
            ValueError: For a skip or an unknown answer value
        """
        if submitted == SKIP:
            raise ValueError("A skip is committed without judging")
        return Answer(submitted) == self.canonical_answer(item)
