"""
Unit tests for CLI command resource handling.

Commands are called as plain functions with StateStore replaced by a
recorder that fails on use.

Run: pytest tests/unit/test_quiz_cli.py -v
"""

import sqlite3

import pytest

from kisokyu.delivery import quiz_cli


class BrokenStore:
    """StateStore stand-in whose every query fails."""

    instances: list = []

    def __init__(self, db_path=None):
        self.closed = False
        BrokenStore.instances.append(self)

    def _fail(self, *args, **kwargs):
        raise sqlite3.OperationalError("disk I/O error")

    get_stats = get_box_distribution = get_session_history = _fail
    load_mastery_map = reset = restore = _fail

    def close(self):
        self.closed = True


@pytest.fixture
def broken_store(monkeypatch):
    BrokenStore.instances = []
    monkeypatch.setattr(quiz_cli, "StateStore", BrokenStore)
    return BrokenStore


class TestStoreIsClosedOnError:
    """Every command closes its store even when a query raises."""

    def test_stats(self, broken_store):
        with pytest.raises(sqlite3.OperationalError):
            quiz_cli.stats()
        assert broken_store.instances[0].closed

    def test_bank(self, broken_store):
        with pytest.raises(sqlite3.OperationalError):
            quiz_cli.bank(limit=0)
        assert broken_store.instances[0].closed

    def test_reset(self, broken_store):
        with pytest.raises(sqlite3.OperationalError):
            quiz_cli.reset(confirm=True)
        assert broken_store.instances[0].closed

    def test_restore(self, broken_store):
        with pytest.raises(sqlite3.OperationalError):
            quiz_cli.restore(backup_file=None)
        assert broken_store.instances[0].closed
