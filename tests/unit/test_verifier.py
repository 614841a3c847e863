"""
Unit tests for answer verification and overrides.

Run: pytest tests/unit/test_verifier.py -v
"""

import pytest

from kisokyu.delivery.question_bank import SKIP, Answer, QuestionItem, Tag, TemplateItem
from kisokyu.delivery.verifier import AnswerVerifier

OPEN_TEXT = "へやの なかで しんなーを つかうときは まどを あけます。"
CLOSED_TEXT = "へやの なかで シンナーを つかうときは まどを しめます。"


@pytest.fixture
def verifier():
    return AnswerVerifier()


class TestOverrides:
    """Each correction rule forces its answer."""

    def test_windows_open_is_maru_even_if_stored_batsu(self, verifier):
        item = QuestionItem(id=900, text=OPEN_TEXT, answer=Answer.BATSU)

        assert verifier.matching_override(item).name == "thinner_windows_open"
        assert verifier.canonical_answer(item) is Answer.MARU

    def test_windows_closed_is_batsu_even_if_stored_maru(self, verifier):
        item = QuestionItem(id=901, text=CLOSED_TEXT, answer=Answer.MARU)

        assert verifier.matching_override(item).name == "thinner_windows_closed"
        assert verifier.canonical_answer(item) is Answer.BATSU

    def test_override_applies_to_template_items(self, verifier):
        item = TemplateItem(
            id="tpl-46-0-1-0",
            base_id=46,
            text=CLOSED_TEXT,
            answer=Answer.MARU,
            tag=Tag.SAFETY,
        )
        assert verifier.canonical_answer(item) is Answer.BATSU

    def test_no_override_uses_stored_answer(self, verifier):
        item = QuestionItem(id=3, text="パテには、 なかぬりようも あります。", answer=Answer.MARU)

        assert verifier.matching_override(item) is None
        assert verifier.canonical_answer(item) is Answer.MARU

    def test_idempotent(self, verifier):
        item = QuestionItem(id=900, text=OPEN_TEXT, answer=Answer.BATSU)
        assert verifier.canonical_answer(item) == verifier.canonical_answer(item)

    def test_bank_thinner_items_are_consistent(self, verifier, full_bank):
        assert verifier.canonical_answer(full_bank.get(46)) is full_bank.get(46).answer
        assert verifier.canonical_answer(full_bank.get(72)) is full_bank.get(72).answer


class TestJudge:
    """Judging submissions."""

    def test_correct_and_incorrect(self, verifier):
        item = QuestionItem(id=4, text="パテには、 なかぬりようも あります。", answer=Answer.MARU)

        assert verifier.judge(Answer.MARU, item) is True
        assert verifier.judge("batsu", item) is False

    def test_judge_uses_override(self, verifier):
        item = QuestionItem(id=900, text=OPEN_TEXT, answer=Answer.BATSU)
        assert verifier.judge(Answer.MARU, item) is True

    def test_skip_is_not_judged(self, verifier):
        item = QuestionItem(id=4, text="x", answer=Answer.MARU)
        with pytest.raises(ValueError):
            verifier.judge(SKIP, item)

    def test_unknown_answer_rejected(self, verifier):
        item = QuestionItem(id=4, text="x", answer=Answer.MARU)
        with pytest.raises(ValueError):
            verifier.judge("maybe", item)
