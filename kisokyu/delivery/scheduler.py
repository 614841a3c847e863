"""
Adaptive Session Scheduler.

Implements:
- Session composition: 15 mastery-weighted bank draws + 5 fresh template
  variants, shuffled together
- The per-item state machine:

      unanswered -> answered(verdict) -> committed -> advance
      unanswered -> skipped (committed immediately) -> advance

- Mastery update and durable logging after every committed answer

All session state lives in an explicit QuizSession passed to every
operation. Randomness and time are injected so sessions are reproducible.
"""

from __future__ import annotations

import random
import string
import time
from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import datetime

from loguru import logger

from .background import BackgroundWriter
from .generator import TemplateGenerator
from .mastery import MasteryMap, MasteryPersistence, MasteryStore, update_mastery
from .question_bank import (
    SKIP,
    Answer,
    Confidence,
    QuestionBank,
    SessionItem,
    Tag,
    mastery_key,
    question_id,
)
from .reason_scorer import score_justification, tag_for
from .sampler import sample_by_weight
from .telemetry import SessionSummary, summarize
from .verifier import AnswerVerifier


class SessionStateError(RuntimeError):
    """Raised when an operation does not fit the session's current state."""


# =============================================================================
# Records
# =============================================================================


@dataclass(frozen=True)
class AnsweredItem:
    """An answered but not yet committed item."""

    item: SessionItem
    submitted: Answer
    canonical: Answer
    correct: bool


@dataclass(frozen=True)
class AnswerRecord:
    """One committed entry of the session log."""

    session_stamp: str
    item: SessionItem
    user_answer: str | None
    correct: bool | None
    justification: str
    confidence: Confidence
    tag: Tag
    reason_score: int
    created_at: datetime = field(default_factory=datetime.now)

    def to_log_row(self) -> dict:
        """Flat row for the durable log."""
        return {
            "session_stamp": self.session_stamp,
            "question_id": question_id(self.item),
            "base_id": mastery_key(self.item),
            "user_answer": self.user_answer,
            "correct": self.correct,
            "reason": self.justification,
            "confidence": self.confidence.value,
            "tag": self.tag.value,
            "reason_score": self.reason_score,
            "created_at": self.created_at,
        }


# =============================================================================
# Session Context
# =============================================================================


@dataclass
class QuizSession:
    """Mutable state of one session."""

    stamp: str
    items: list[SessionItem]
    mastery: MasteryMap
    index: int = 0
    records: list[AnswerRecord] = field(default_factory=list)
    pending: AnsweredItem | None = None

    @property
    def total(self) -> int:
        return len(self.items)

    @property
    def is_complete(self) -> bool:
        return self.index >= len(self.items)

    @property
    def current_item(self) -> SessionItem | None:
        if self.is_complete:
            return None
        return self.items[self.index]

    @property
    def progress(self) -> tuple[int, int]:
        """(1-based position of the current item, total)."""
        return min(self.index + 1, self.total), self.total


# =============================================================================
# Composition
# =============================================================================


@dataclass
class SessionConfig:
    """Configuration for session composition."""

    bank_draw: int = 15
    template_draw: int = 5

    @property
    def session_size(self) -> int:
        return self.bank_draw + self.template_draw


_STAMP_ALPHABET = string.digits + string.ascii_lowercase


def _base36(n: int) -> str:
    if n == 0:
        return "0"
    digits = []
    while n:
        n, rem = divmod(n, 36)
        digits.append(_STAMP_ALPHABET[rem])
    return "".join(reversed(digits))


def new_session_stamp(rng: random.Random, clock: Callable[[], float] = time.time) -> str:
    """Opaque session id: base36 milliseconds plus six random characters."""
    suffix = "".join(rng.choice(_STAMP_ALPHABET) for _ in range(6))
    return f"{_base36(int(clock() * 1000))}-{suffix}"


class SessionComposer:
    """
    Builds the item sequence for a session.

    Bank items are drawn by mastery weight, template items are generated
    fresh, and the combined list is shuffled into presentation order.
    """

    def __init__(
        self,
        bank: QuestionBank,
        rng: random.Random,
        config: SessionConfig | None = None,
        clock: Callable[[], float] = time.time,
    ):
        """
        Initialize the composer.

        Args:
            bank: Static question bank and template pairs
            rng: Injected random source shared by sampling, generation and shuffle
            config: Draw sizes (uses defaults if None)
            clock: Seconds since the epoch
        """
        self.bank = bank
        self.rng = rng
        self.config = config or SessionConfig()
        self.clock = clock
        self.generator = TemplateGenerator(bank.templates, rng, clock)

    def compose(self, mastery: MasteryMap) -> list[SessionItem]:
        """Draw and shuffle the items for one session."""
        sampled: list[SessionItem] = list(
            sample_by_weight(self.bank.get_all(), mastery, self.config.bank_draw, self.rng, key=mastery_key)
        )
        generated: list[SessionItem] = list(self.generator.generate(self.config.template_draw))

        items = sampled + generated
        self.rng.shuffle(items)

        logger.debug(f"Composed {len(sampled)} bank + {len(generated)} generated = {len(items)} items")
        return items


# =============================================================================
# Scheduler
# =============================================================================


class QuizScheduler:
    """
    Runs sessions: start/reset, answer, commit.

    Persistence (mastery save, log append) is dispatched through the
    background writer and never awaited.
    """

    def __init__(
        self,
        composer: SessionComposer,
        persistence: MasteryPersistence,
        writer: BackgroundWriter,
        verifier: AnswerVerifier | None = None,
    ):
        """
        Initialize the scheduler.

        Args:
            composer: SessionComposer building item sequences
            persistence: Store for mastery boxes and the answer log
            writer: Background writer for fire-and-forget persistence
            verifier: AnswerVerifier (creates default if None)
        """
        self.composer = composer
        self.persistence = persistence
        self.writer = writer
        self.verifier = verifier or AnswerVerifier()
        self.mastery_store = MasteryStore(persistence, writer)

    def start(self, mastery: MasteryMap | None = None) -> QuizSession:
        """
        Start a brand-new session.

        Args:
            mastery: In-process mastery map to carry over; loaded from the
                store when None

        Returns:
            Fresh QuizSession (new stamp, new draws, empty log)
        """
        if mastery is None:
            mastery = self.mastery_store.load()

        items = self.composer.compose(mastery)
        session = QuizSession(
            stamp=new_session_stamp(self.composer.rng, self.composer.clock),
            items=items,
            mastery=mastery,
        )

        logger.info(f"Session {session.stamp} started: {session.total} items, {len(mastery)} tracked")
        return session

    def reset(self, session: QuizSession) -> QuizSession:
        """Discard a session and start another with the same mastery map."""
        return self.start(mastery=session.mastery)

    def answer(
        self,
        session: QuizSession,
        submitted: Answer | str,
    ) -> AnsweredItem | AnswerRecord | None:
        """
        Submit an answer for the current item.

        Returns:
            AnsweredItem awaiting commit; the committed AnswerRecord for a
            skip; None when ignored (an answer is already pending or the
            session is complete)
        """
        item = session.current_item
        if item is None or session.pending is not None:
            logger.debug(f"Ignoring answer {submitted!r} in session {session.stamp}")
            return None

        if submitted == SKIP:
            return self._commit(
                session,
                item,
                user_answer=SKIP,
                correct=None,
                justification="",
                confidence=Confidence.LOW,
            )

        submitted = Answer(submitted)
        session.pending = AnsweredItem(
            item=item,
            submitted=submitted,
            canonical=self.verifier.canonical_answer(item),
            correct=self.verifier.judge(submitted, item),
        )
        return session.pending

    def commit(
        self,
        session: QuizSession,
        justification: str = "",
        confidence: Confidence | str = Confidence.MEDIUM,
    ) -> AnswerRecord:
        """
        Finalize the pending answer, update mastery and advance.

        Raises:
            SessionStateError: If no answer is pending
        """
        pending = session.pending
        if pending is None:
            raise SessionStateError(f"Session {session.stamp} has no pending answer to commit")

        confidence = Confidence(confidence)
        record = self._commit(
            session,
            pending.item,
            user_answer=pending.submitted.value,
            correct=pending.correct,
            justification=justification,
            confidence=confidence,
        )

        update_mastery(session.mastery, mastery_key(pending.item), pending.correct, confidence)
        self.mastery_store.save(session.mastery)
        return record

    def _commit(
        self,
        session: QuizSession,
        item: SessionItem,
        user_answer: str | None,
        correct: bool | None,
        justification: str,
        confidence: Confidence,
    ) -> AnswerRecord:
        tag = tag_for(item)
        justification = (justification or "").strip()
        record = AnswerRecord(
            session_stamp=session.stamp,
            item=item,
            user_answer=user_answer,
            correct=correct,
            justification=justification,
            confidence=confidence,
            tag=tag,
            reason_score=score_justification(justification, tag),
            created_at=datetime.fromtimestamp(self.composer.clock()),
        )

        session.records.append(record)
        self.writer.submit("append_log_entries", self.persistence.append_log_entries, [record.to_log_row()])

        session.pending = None
        session.index += 1

        logger.debug(
            f"Committed {question_id(item)} in {session.stamp}: "
            f"answer={user_answer} correct={correct} score={record.reason_score}"
        )
        if session.is_complete:
            logger.info(f"Session {session.stamp} complete")
        return record

    def summarize(self, session: QuizSession) -> SessionSummary:
        """Aggregate the session log."""
        return summarize(session.stamp, session.records)
