"""
Leitner-box mastery tracking.

Each item identity (bank id, or a template item's base id) sits in a box
1..5; box 1 needs the most practice. After a judged answer:

- correct, high confidence: +2
- correct, otherwise:       +1
- incorrect:                -1

clamped to [1, 5]. Skips never move an item.

MasteryStore wraps the persistence collaborator: loading fails soft to an
empty map and saving is dispatched in the background.
"""

from __future__ import annotations

from typing import Protocol

from loguru import logger

from .background import BackgroundWriter
from .question_bank import Confidence
from .sampler import MIN_BOX, clamp_box, get_box

MasteryMap = dict[int, int]


class MasteryPersistence(Protocol):
    """Load/save contract of the external key-value store."""

    def load_mastery_map(self) -> MasteryMap:
        """Every stored (id, box) pair. Must not raise outward."""
        ...

    def save_mastery_map(self, mastery: MasteryMap) -> None:
        """Idempotent upsert of every entry."""
        ...

    def append_log_entries(self, rows: list[dict]) -> None:
        """Append-only analytics log."""
        ...


# =============================================================================
# Updater
# =============================================================================


def next_box(current: int, correct: bool, confidence: Confidence) -> int:
    """Box after one judged answer."""
    if correct:
        step = 2 if confidence is Confidence.HIGH else 1
        return clamp_box(current + step)
    return clamp_box(current - 1)


def update_mastery(
    mastery: MasteryMap,
    key: int,
    correct: bool,
    confidence: Confidence,
) -> int:
    """
    Apply one judged answer to the map in place.

    Returns:
        The new box for ``key``
    """
    current = get_box(mastery, key)
    new = next_box(current, correct, confidence)
    mastery[key] = new
    logger.debug(f"Mastery {key}: {current} -> {new} (correct={correct}, conf={confidence.value})")
    return new


# =============================================================================
# Store
# =============================================================================


class MasteryStore:
    """
    Mastery map persistence front.

    The map held by the running process is the source of truth between
    saves; saves are fire-and-forget through the writer.
    """

    def __init__(self, backend: MasteryPersistence, writer: BackgroundWriter):
        self.backend = backend
        self.writer = writer

    def load(self) -> MasteryMap:
        """Load the map; any failure yields an empty map."""
        try:
            raw = self.backend.load_mastery_map()
        except Exception as e:
            logger.warning(f"Mastery load failed, starting empty: {e}")
            return {}

        mastery: MasteryMap = {}
        for key, box in raw.items():
            try:
                mastery[int(key)] = clamp_box(int(box) if box else MIN_BOX)
            except (TypeError, ValueError):
                logger.warning(f"Skipping unreadable mastery entry {key!r}={box!r}")
        return mastery

    def save(self, mastery: MasteryMap) -> bool:
        """
        Persist every entry of the map in the background.

        Returns:
            True if the write was accepted for dispatch
        """
        snapshot = dict(mastery)
        return self.writer.submit("save_mastery_map", self.backend.save_mastery_map, snapshot)

    def flush(self) -> None:
        """Block until dispatched saves have run."""
        self.writer.flush()
