"""
Unit tests for Leitner-box updates and the mastery store front.

Run: pytest tests/unit/test_mastery.py -v
"""

import pytest

from kisokyu.delivery.background import BackgroundWriter
from kisokyu.delivery.mastery import MasteryStore, next_box, update_mastery
from kisokyu.delivery.question_bank import Confidence


class TestNextBox:
    """Box transitions."""

    @pytest.mark.parametrize(
        "current,correct,confidence,expected",
        [
            (1, True, Confidence.HIGH, 3),
            (1, True, Confidence.MEDIUM, 2),
            (1, True, Confidence.LOW, 2),
            (4, True, Confidence.HIGH, 5),
            (5, True, Confidence.HIGH, 5),
            (5, False, Confidence.HIGH, 4),
            (1, False, Confidence.LOW, 1),
            (3, False, Confidence.MEDIUM, 2),
        ],
    )
    def test_transitions(self, current, correct, confidence, expected):
        assert next_box(current, correct, confidence) == expected


class TestUpdateMastery:
    """In-place map updates."""

    def test_absent_key_starts_at_one(self):
        mastery = {}
        assert update_mastery(mastery, 7, True, Confidence.HIGH) == 3
        assert mastery == {7: 3}

    def test_out_of_range_stored_value_is_clamped(self):
        mastery = {7: 12}
        assert update_mastery(mastery, 7, False, Confidence.MEDIUM) == 4

    def test_other_keys_untouched(self):
        mastery = {1: 2, 2: 4}
        update_mastery(mastery, 1, True, Confidence.MEDIUM)
        assert mastery == {1: 3, 2: 4}


class FailingBackend:
    def load_mastery_map(self):
        raise OSError("disk gone")

    def save_mastery_map(self, mastery):
        raise OSError("disk gone")

    def append_log_entries(self, rows):
        raise OSError("disk gone")


class DictBackend:
    def __init__(self, data=None):
        self.data = dict(data or {})

    def load_mastery_map(self):
        return dict(self.data)

    def save_mastery_map(self, mastery):
        self.data.update(mastery)

    def append_log_entries(self, rows):
        pass


class TestMasteryStore:
    """Fail-soft load, background save."""

    def test_load_failure_yields_empty_map(self, writer):
        assert MasteryStore(FailingBackend(), writer).load() == {}

    def test_load_normalizes_entries(self, writer):
        backend = DictBackend({"3": "4", 5: 9, 6: None, "bad": 2})
        assert MasteryStore(backend, writer).load() == {3: 4, 5: 5, 6: 1}

    def test_save_failure_does_not_raise(self, writer):
        store = MasteryStore(FailingBackend(), writer)

        assert store.save({1: 3}) is True
        assert writer.status.failed == 1

    def test_save_snapshots_the_map(self, writer):
        backend = DictBackend()
        store = MasteryStore(backend, writer)
        mastery = {1: 2}

        store.save(mastery)
        mastery[1] = 5

        assert backend.data == {1: 2}

    def test_save_through_threaded_writer(self):
        backend = DictBackend()
        w = BackgroundWriter()
        store = MasteryStore(backend, w)

        store.save({1: 4, 2: 2})
        store.flush()
        w.close()

        assert backend.data == {1: 4, 2: 2}
