"""
Question Bank: static items and template pairs.

Loads and manages the quiz content from JSON:
- Question bank (stable integer ids, literal まる/ばつ answers, rationale)
- Template pairs (true/false phrasings sharing a base id and topic tag)

Bundled files live in ``kisokyu/delivery/data``; either file can be
overridden with a path (see ``config.Settings``).

Session items form an explicit sum type: ``QuestionItem | TemplateItem``,
discriminated by ``ItemKind``.
"""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Literal, Union

from loguru import logger
from pydantic import BaseModel, Field

DATA_DIR = Path(__file__).parent / "data"

# =============================================================================
# Enums
# =============================================================================


class Answer(str, Enum):
    """The two polar answers of a true/false item."""

    MARU = "maru"  # ただしい
    BATSU = "batsu"  # あやまり

    @property
    def label(self) -> str:
        return "ただしい" if self is Answer.MARU else "あやまり"


# Skip marker for a submitted answer
SKIP = "skip"


class Confidence(str, Enum):
    """Self-reported confidence after answering."""

    HIGH = "hi"
    MEDIUM = "md"
    LOW = "lo"


class Tag(str, Enum):
    """Coarse topic tag used to pick the justification keyword set."""

    SAFETY = "safety"
    TOOLING = "tooling"
    PROCEDURE = "procedure"

    @property
    def label(self) -> str:
        return _TAG_LABELS[self]


_TAG_LABELS = {
    Tag.SAFETY: "あんぜん",
    Tag.TOOLING: "どうぐ",
    Tag.PROCEDURE: "せこう",
}


class ItemKind(str, Enum):
    """Discriminant for SessionItem."""

    BANK = "bank"
    TEMPLATE = "template"


# =============================================================================
# Items
# =============================================================================


@dataclass(frozen=True)
class QuestionItem:
    """A fixed question from the static bank. Never mutated."""

    id: int
    text: str
    answer: Answer
    rationale: str | None = None
    kind: Literal[ItemKind.BANK] = field(default=ItemKind.BANK, init=False)


@dataclass(frozen=True)
class TemplatePair:
    """A true/false statement pair sharing a base item and topic."""

    base_id: int
    tag: Tag
    true_text: str
    false_text: str


@dataclass(frozen=True)
class TemplateItem:
    """
    A synthetic item generated from a TemplatePair for one session.

    The id is unique per generation event; ``base_id`` maps back into the
    shared mastery map.
    """

    id: str
    base_id: int
    text: str
    answer: Answer
    tag: Tag
    kind: Literal[ItemKind.TEMPLATE] = field(default=ItemKind.TEMPLATE, init=False)


SessionItem = Union[QuestionItem, TemplateItem]


def mastery_key(item: SessionItem) -> int:
    """Identity under which an item's mastery level is tracked."""
    if item.kind is ItemKind.BANK:
        return item.id
    if item.kind is ItemKind.TEMPLATE:
        return item.base_id
    raise TypeError(f"Unknown session item kind: {item.kind!r}")


def question_id(item: SessionItem) -> str:
    """Display/log identity (bank id as text, or the template id)."""
    return str(item.id)


# =============================================================================
# JSON rows
# =============================================================================


class QuestionRow(BaseModel):
    """One question bank row as stored in JSON."""

    id: int
    text: str = Field(min_length=1)
    answer: Answer
    rationale: str | None = None

    def to_item(self) -> QuestionItem:
        return QuestionItem(
            id=self.id,
            text=self.text,
            answer=self.answer,
            rationale=self.rationale or None,
        )


class TemplateRow(BaseModel):
    """One template pair row as stored in JSON."""

    base_id: int
    tag: Tag
    true_text: str = Field(min_length=1)
    false_text: str = Field(min_length=1)

    def to_pair(self) -> TemplatePair:
        return TemplatePair(
            base_id=self.base_id,
            tag=self.tag,
            true_text=self.true_text,
            false_text=self.false_text,
        )


# =============================================================================
# Question Bank
# =============================================================================


class QuestionBank:
    """
    The static question bank plus the template pair bank.

    Items keep their file order; the weighted sampler relies on that
    order being stable for reproducible draws.
    """

    DEFAULT_QUESTIONS_PATH = DATA_DIR / "question_bank.json"
    DEFAULT_TEMPLATES_PATH = DATA_DIR / "template_bank.json"

    def __init__(
        self,
        questions: list[QuestionItem] | None = None,
        templates: list[TemplatePair] | None = None,
    ):
        self._items: dict[int, QuestionItem] = {}
        self._templates: list[TemplatePair] = list(templates or [])

        for item in questions or []:
            if item.id in self._items:
                logger.warning(f"Duplicate question id {item.id} ignored")
                continue
            self._items[item.id] = item

    @classmethod
    def load(
        cls,
        questions_path: Path | None = None,
        templates_path: Path | None = None,
    ) -> QuestionBank:
        """
        Load the bank from JSON files.

        Args:
            questions_path: Question bank JSON (defaults to the bundled file)
            templates_path: Template pair JSON (defaults to the bundled file)

        Returns:
            QuestionBank instance
        """
        questions_path = questions_path or cls.DEFAULT_QUESTIONS_PATH
        templates_path = templates_path or cls.DEFAULT_TEMPLATES_PATH

        with open(questions_path, encoding="utf-8") as f:
            questions = [QuestionRow.model_validate(row).to_item() for row in json.load(f)]
        with open(templates_path, encoding="utf-8") as f:
            templates = [TemplateRow.model_validate(row).to_pair() for row in json.load(f)]

        bank = cls(questions, templates)
        logger.info(
            f"QuestionBank loaded: {bank.total_items} items, "
            f"{len(bank.templates)} template pairs"
        )
        return bank

    @property
    def total_items(self) -> int:
        return len(self._items)

    @property
    def templates(self) -> list[TemplatePair]:
        return list(self._templates)

    def get(self, item_id: int) -> QuestionItem | None:
        """Get a bank item by id."""
        return self._items.get(item_id)

    def get_all(self) -> list[QuestionItem]:
        """All bank items in file order."""
        return list(self._items.values())

    def __len__(self) -> int:
        return len(self._items)
