"""
Session results aggregation.

Reduces a finished session's answer log to the figures shown on the
results screen:
- correct / incorrect / skipped counts
- the wrong list (for review) and the skip list
- accuracy over judged answers and mean justification score
"""

from __future__ import annotations

from collections import Counter
from collections.abc import Sequence
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from .scheduler import AnswerRecord


@dataclass
class SessionSummary:
    """End-of-session report."""

    session_stamp: str
    total: int
    correct: int
    incorrect: int
    skipped: int
    wrong: list[AnswerRecord] = field(default_factory=list)
    skips: list[AnswerRecord] = field(default_factory=list)
    reason_scores: Counter = field(default_factory=Counter)

    @property
    def judged(self) -> int:
        return self.correct + self.incorrect

    @property
    def accuracy_percent(self) -> float:
        return self.correct * 100.0 / self.judged if self.judged else 0.0

    @property
    def avg_reason_score(self) -> float:
        scored = sum(self.reason_scores.values())
        if not scored:
            return 0.0
        return sum(score * n for score, n in self.reason_scores.items()) / scored


def summarize(session_stamp: str, records: Sequence[AnswerRecord]) -> SessionSummary:
    """Aggregate an answer log into a SessionSummary."""
    wrong = [r for r in records if r.correct is False]
    skips = [r for r in records if r.correct is None]
    correct = sum(1 for r in records if r.correct is True)

    return SessionSummary(
        session_stamp=session_stamp,
        total=len(records),
        correct=correct,
        incorrect=len(wrong),
        skipped=len(skips),
        wrong=wrong,
        skips=skips,
        reason_scores=Counter(r.reason_score for r in records if r.correct is not None),
    )
