"""
Pytest Configuration and Fixtures.

This file configures pytest and provides shared fixtures for all tests.
"""
import json
import random
import sys
from pathlib import Path

import pytest

# Add project root to path
PROJECT_ROOT = Path(__file__).parent.parent
sys.path.insert(0, str(PROJECT_ROOT))

from src.trainer.state_store import StateStore  # noqa: E402
from src.trainer.strategy_deck import StrategyIndex, StrategyTable  # noqa: E402


def pytest_configure(config):
    """Configure pytest markers."""
    config.addinivalue_line("markers", "unit: Unit tests")
    config.addinivalue_line("markers", "integration: Integration tests (temporary SQLite files)")
    config.addinivalue_line("markers", "smoke: Smoke tests for CLI commands")


def pytest_collection_modifyitems(config, items):
    """Automatically mark tests based on their location."""
    for item in items:
        if "unit" in str(item.fspath):
            item.add_marker(pytest.mark.unit)
        elif "integration" in str(item.fspath):
            item.add_marker(pytest.mark.integration)
        elif "smoke" in str(item.fspath):
            item.add_marker(pytest.mark.smoke)


def freqs(raise_: float = 0.0, call: float = 0.0, fold: float = 0.0) -> dict:
    return {"raise": raise_, "call": call, "fold": fold}


def make_table(strategies: dict) -> StrategyTable:
    """Build a StrategyTable from position -> hand -> {raise, call, fold}."""
    return StrategyTable.model_validate({"strategies": strategies})


def fixed_draw_rng(draw: float, seed: int = 7) -> random.Random:
    """
    A Random whose random() always returns `draw`.

    Only the instance attribute is replaced, so choice() still draws
    from the seeded generator.
    """
    rng = random.Random(seed)
    rng.random = lambda: draw
    return rng


@pytest.fixture(scope="session")
def project_root():
    """Return the project root directory."""
    return PROJECT_ROOT


@pytest.fixture
def strategy_data():
    """A small two-position strategy table."""
    return {
        "meta": {
            "format": "rfi_actions_v1",
            "ante": True,
            "stack_bb_label_seen": 50,
            "note": "test fixture",
        },
        "sizes": {
            "open_raise_bb": 2.0,
            "sb_raise_bb": 3.0,
            "all_in_label_seen_bb": 50,
        },
        "strategies": {
            "RFI_BTN": {
                "AA": freqs(raise_=1.0),
                "AKs": freqs(raise_=1.0),
                "72o": freqs(fold=1.0),
                "K9o": freqs(raise_=0.55, fold=0.45),
                "98s": freqs(raise_=0.5, fold=0.5),
                "Q5s": freqs(raise_=0.3, fold=0.7),
            },
            "RFI_CO": {
                "AA": freqs(raise_=1.0),
                "72o": freqs(fold=1.0),
                "A5o": freqs(raise_=0.6, fold=0.4),
            },
        },
    }


@pytest.fixture
def strategy_file(tmp_path, strategy_data):
    """The strategy table written to a JSON file."""
    path = tmp_path / "strategy.json"
    path.write_text(json.dumps(strategy_data), encoding="utf-8")
    return path


@pytest.fixture
def index(strategy_data):
    return StrategyIndex(StrategyTable.model_validate(strategy_data))


@pytest.fixture
def state_store(tmp_path):
    """A StateStore on a temporary SQLite file."""
    store = StateStore(tmp_path / "state.db")
    yield store
    store.close()
