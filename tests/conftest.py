"""
Pytest Configuration and Fixtures.

This file configures pytest and provides shared fixtures for all tests.
"""
import random
import sys
from pathlib import Path

import pytest

# Add project root to path
PROJECT_ROOT = Path(__file__).parent.parent
sys.path.insert(0, str(PROJECT_ROOT))

from kisokyu.delivery.background import BackgroundWriter  # noqa: E402
from kisokyu.delivery.question_bank import (  # noqa: E402
    Answer,
    QuestionBank,
    QuestionItem,
    Tag,
    TemplatePair,
)
from kisokyu.delivery.state_store import StateStore  # noqa: E402

FIXED_NOW = 1_700_000_000.0


def pytest_configure(config):
    """Configure pytest markers."""
    config.addinivalue_line("markers", "unit: Unit tests")
    config.addinivalue_line("markers", "integration: Integration tests (local SQLite)")
    config.addinivalue_line("markers", "smoke: Smoke tests for CLI commands")
    config.addinivalue_line("markers", "slow: Slow tests")


def pytest_collection_modifyitems(config, items):
    """Automatically mark tests based on their location."""
    for item in items:
        # Mark based on test file location
        if "unit" in str(item.fspath):
            item.add_marker(pytest.mark.unit)
        elif "integration" in str(item.fspath):
            item.add_marker(pytest.mark.integration)
        elif "smoke" in str(item.fspath):
            item.add_marker(pytest.mark.smoke)


@pytest.fixture(scope="session")
def project_root():
    """Return the project root directory."""
    return PROJECT_ROOT


@pytest.fixture
def rng():
    """Seeded random source."""
    return random.Random(1234)


@pytest.fixture
def fixed_clock():
    """Clock frozen at a known instant."""
    return lambda: FIXED_NOW


@pytest.fixture
def store(tmp_path):
    """StateStore on a throwaway database."""
    s = StateStore(tmp_path / "state.db")
    yield s
    s.close()


@pytest.fixture
def writer():
    """Synchronous writer so persistence is visible immediately."""
    w = BackgroundWriter(inline=True)
    yield w
    w.close()


@pytest.fixture(scope="session")
def full_bank():
    """The bundled question and template banks."""
    return QuestionBank.load()


@pytest.fixture
def small_bank():
    """A tiny bank for deterministic tests."""
    questions = [
        QuestionItem(id=1, text="ぱてべらは かべがみを せつだんするときに つかう こうぐです。", answer=Answer.BATSU),
        QuestionItem(id=2, text="あんぜんつうろには、 ものを おいては いけません。", answer=Answer.MARU),
        QuestionItem(id=3, text="かべがみには むじのものは、 ありません。", answer=Answer.BATSU),
        QuestionItem(id=4, text="パテには、 なかぬりようも あります。", answer=Answer.MARU),
    ]
    templates = [
        TemplatePair(
            base_id=46,
            tag=Tag.SAFETY,
            true_text="へやの なかで しんなーを つかうときは まどを あけます。",
            false_text="へやの なかで しんなーを つかうときは まどを しめます。",
        ),
        TemplatePair(
            base_id=58,
            tag=Tag.TOOLING,
            true_text="ぱてべらは したじを たいらに するときに つかう こうぐです。",
            false_text="ぱてべらは かべがみを せつだんするときに つかう こうぐです。",
        ),
    ]
    return QuestionBank(questions, templates)
