"""
Template Generator: fresh true/false variants per session.

Shuffles the template pair bank, takes the first n pairs and flips a fair
coin per pair to choose the true or the false phrasing.
"""

from __future__ import annotations

import itertools
import random
import time
from collections.abc import Callable, Sequence

from loguru import logger

from .question_bank import Answer, TemplateItem, TemplatePair

# Process-wide, so two generators called in the same millisecond still differ
_generation_seq = itertools.count(1)


class TemplateGenerator:
    """Builds TemplateItems from a bank of TemplatePairs."""

    def __init__(
        self,
        pairs: Sequence[TemplatePair],
        rng: random.Random,
        clock: Callable[[], float] = time.time,
    ):
        """
        Initialize the generator.

        Args:
            pairs: Template pair bank
            rng: Injected random source (shuffle and coin flips)
            clock: Seconds since the epoch, used in generated ids
        """
        self.pairs = list(pairs)
        self.rng = rng
        self.clock = clock

    def generate(self, n: int = 5) -> list[TemplateItem]:
        """
        Generate n template items (fewer if the bank is smaller).

        Returns:
            TemplateItems with ids unique per generation event
        """
        bank = list(self.pairs)
        self.rng.shuffle(bank)
        chosen = bank[: max(n, 0)]

        stamp_ms = int(self.clock() * 1000)
        seq = next(_generation_seq)

        items = []
        for i, pair in enumerate(chosen):
            make_true = self.rng.random() < 0.5
            items.append(
                TemplateItem(
                    id=f"tpl-{pair.base_id}-{stamp_ms}-{seq}-{i}",
                    base_id=pair.base_id,
                    text=pair.true_text if make_true else pair.false_text,
                    answer=Answer.MARU if make_true else Answer.BATSU,
                    tag=pair.tag,
                )
            )

        logger.debug(f"Generated {len(items)} template items (requested {n})")
        return items
