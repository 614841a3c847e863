"""
Reason Scorer: topic tags and justification scoring.

Items are tagged by ordered keyword groups (safety before tooling, the
first matching group wins, procedure is the default). A learner's
justification is graded 0/1/2 by how many of the tag's keywords it
contains. The score is advisory: it grades reflection quality for review
and analytics and never gates progression.

Also provides the per-item rationale shown after answering.
"""

from __future__ import annotations

import re
from dataclasses import dataclass

from .question_bank import Answer, ItemKind, SessionItem, Tag
from .text import normalize_text

# =============================================================================
# Tag classification
# =============================================================================

# Order is precedence: an item mentioning both a ladder and a roller is safety
TAG_RULES: tuple[tuple[Tag, re.Pattern[str]], ...] = (
    (
        Tag.SAFETY,
        re.compile(
            r"あんぜん|きゃたつ|てんばん|いのちづな|しょうかき|しょうかせん|しんなー"
            r"|かきげんきん|さいん|あごひも"
        ),
    ),
    (
        Tag.TOOLING,
        re.compile(
            r"ぱてべら|じべら|くしばけ|なでばけ|ろーらー|はさみ|かったー|めじゃー|みずいと"
            r"|かっとてーぷ|したじきてーぷ|しーらー|ぷらいまー"
        ),
    ),
)

DEFAULT_TAG = Tag.PROCEDURE

REASON_KEYWORDS: dict[Tag, tuple[str, ...]] = {
    Tag.SAFETY: ("あぶない", "きけん", "おちる", "てんとう", "やけど", "かんき"),
    Tag.TOOLING: ("どうぐ", "つかう", "のり", "きる", "ならす", "おさえる"),
    Tag.PROCEDURE: ("したじ", "じょいんと", "すんぽう", "ぴったり", "かわく", "こはん"),
}

SCORE_LABELS = {
    2: "◎ きーわーど かんせつ",
    1: "○ いちぶん ひっと",
    0: "△ みつからず",
}


def classify_tag(text: str) -> Tag:
    """Assign a topic tag to item text."""
    normalized = normalize_text(text)
    for tag, pattern in TAG_RULES:
        if pattern.search(normalized):
            return tag
    return DEFAULT_TAG


def tag_for(item: SessionItem) -> Tag:
    """Template items carry their pair's tag; bank items are classified."""
    if item.kind is ItemKind.TEMPLATE:
        return item.tag
    return classify_tag(item.text)


def keyword_hits(text: str, tag: Tag) -> list[str]:
    """Tag keywords found in the text."""
    normalized = normalize_text(text)
    return [kw for kw in REASON_KEYWORDS.get(tag, ()) if kw in normalized]


def score_justification(text: str | None, tag: Tag) -> int:
    """Score a justification: 0 hits -> 0, 1 hit -> 1, 2+ hits -> 2."""
    if not text or not text.strip():
        return 0
    hits = len(keyword_hits(text, tag))
    if hits >= 2:
        return 2
    return 1 if hits == 1 else 0


def score_label(score: int) -> str:
    return SCORE_LABELS.get(score, SCORE_LABELS[0])


# =============================================================================
# Rationale
# =============================================================================


@dataclass(frozen=True)
class RationaleRule:
    """A fallback rationale used when every pattern matches the item text."""

    patterns: tuple[re.Pattern[str], ...]
    reason: str

    def matches(self, normalized_text: str) -> bool:
        return all(p.search(normalized_text) for p in self.patterns)


def _rule(reason: str, *patterns: str) -> RationaleRule:
    return RationaleRule(tuple(re.compile(p) for p in patterns), reason)


RATIONALE_RULES: tuple[RationaleRule, ...] = (
    _rule("あぶないから", r"とびおり|てんばん"),
    _rule("おちる きけんを ふせぐから", r"あんぜんたい"),
    _rule("たいひ の じゃまに なるから", r"あんぜんつうろ"),
    _rule("かんきが ひつようだから", r"しんなー"),
    _rule("しょうか の じゃまに なるから", r"しょうかき|しょうかせん"),
    _rule("ひが でて あぶないから", r"かきげんきん|すとーぶ"),
    _rule("ビニールクロス も あるから", r"びにる|びにーる", r"つかわれません"),
    _rule("おりもの クロス も あるから", r"おりもの", r"つかわれません"),
    _rule("かわくと ちからが へるから", r"せっちゃくざい", r"かわりません|かわります"),
    _rule("したじ の つきを よくするから", r"しーらー|ぷらいまー"),
    _rule("きる のは はさみ や カッター だから", r"じべら", r"せつだん"),
    _rule("じょいんと は ローラー で おさえるから", r"ろーらー", r"つかいません"),
    _rule("よぶん を きって ぴったり に するから", r"すんぽうと おなじ おおきさ"),
    _rule("プラグ を ぬいて しらべるから", r"でんげんが こしょう", r"そのまま"),
    _rule("かべがみ は ふねん では ないから", r"ふねんざいりょう"),
    _rule("いりすみ は うちがわ だから", r"いりすみ.*そとがわ"),
    _rule("ですみ は そとがわ だから", r"ですみ.*うちがわ"),
    _rule("たてめ の ほう が つよいから", r"よこめのほうが ひっぱり"),
    _rule("あかるい いろ の ほうが ひろく みえるから", r"(くらい|こい)いろ", r"ひろく みせたい"),
)


def rationale_for(item: SessionItem, canonical: Answer | None = None) -> str:
    """
    Explanation shown after answering.

    Bank items use their curated rationale. Everything else falls back to
    the pattern rules, then to a generic sentence for the canonical answer.
    """
    if item.kind is ItemKind.BANK and item.rationale:
        return item.rationale

    normalized = normalize_text(item.text)
    for rule in RATIONALE_RULES:
        if rule.matches(normalized):
            return rule.reason

    answer = canonical or item.answer
    return "きほん に あっているから" if answer is Answer.MARU else "きほん に そわないから"
