"""
Pytest configuration and fixtures.
"""
import os
import sys

import pytest

# Add the parent directory to path so we can import the backend
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from backend.engine import CalculatorEngine
from backend.history import HistoryStore
from backend.storage import MemoryStore


@pytest.fixture
def store():
    """An empty in-memory key-value store."""
    return MemoryStore()


@pytest.fixture
def history(store):
    """History backed by the in-memory store."""
    return HistoryStore(store)


@pytest.fixture
def engine(history):
    """Calculator engine with a fresh state and empty history."""
    return CalculatorEngine(history)
