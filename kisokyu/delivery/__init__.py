"""
Kisokyu delivery: adaptive true/false quiz engine.

Components:
- QuestionBank: JSON loading of bank questions and template pairs
- sample_by_weight: mastery-weighted draws without replacement
- TemplateGenerator: fresh true/false variants from template pairs
- AnswerVerifier: canonical answers with targeted overrides
- classify_tag / score_justification: topic tag and reason grading
- MasteryStore: fail-soft load and fire-and-forget save of mastery boxes
- StateStore: SQLite persistence
- QuizScheduler: session composition and the answer/commit state machine
"""

from .background import BackgroundWriter
from .generator import TemplateGenerator
from .mastery import MasteryStore, next_box, update_mastery
from .question_bank import (
    SKIP,
    Answer,
    Confidence,
    ItemKind,
    QuestionBank,
    QuestionItem,
    Tag,
    TemplateItem,
    TemplatePair,
    mastery_key,
)
from .reason_scorer import classify_tag, rationale_for, score_justification, tag_for
from .sampler import sample_by_weight, weight_for_box
from .scheduler import (
    AnsweredItem,
    AnswerRecord,
    QuizScheduler,
    QuizSession,
    SessionComposer,
    SessionConfig,
    SessionStateError,
)
from .state_store import LogEntry, SessionRecord, StateStore
from .telemetry import SessionSummary, summarize
from .verifier import AnswerVerifier

__all__ = [
    # Items
    "QuestionBank",
    "QuestionItem",
    "TemplatePair",
    "TemplateItem",
    "Answer",
    "Confidence",
    "Tag",
    "ItemKind",
    "SKIP",
    "mastery_key",
    # Sampling and generation
    "sample_by_weight",
    "weight_for_box",
    "TemplateGenerator",
    # Judging
    "AnswerVerifier",
    "classify_tag",
    "tag_for",
    "score_justification",
    "rationale_for",
    # Mastery and persistence
    "MasteryStore",
    "next_box",
    "update_mastery",
    "StateStore",
    "LogEntry",
    "SessionRecord",
    "BackgroundWriter",
    # Sessions
    "SessionComposer",
    "SessionConfig",
    "QuizScheduler",
    "QuizSession",
    "AnsweredItem",
    "AnswerRecord",
    "SessionStateError",
    "SessionSummary",
    "summarize",
]
