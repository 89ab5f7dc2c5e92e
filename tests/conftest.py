"""Pytest configuration and fixtures for test suite."""

import sys
from collections.abc import Callable, Sequence
from pathlib import Path
from typing import Any

import pytest

# Add src directory and shared test helpers to path for imports
SRC_PATH = Path(__file__).parent.parent / "src"
sys.path.insert(0, str(SRC_PATH))
sys.path.insert(0, str(Path(__file__).parent))

from ercluster.clustering import int_generator  # noqa: E402
from helpers import NameClassifier, Person  # noqa: E402


@pytest.fixture
def make_people() -> Callable[..., list[Person]]:
    """Factory for people with consecutive ids starting at 1."""

    def _factory(*names: str, start: int = 1) -> list[Person]:
        return [Person(start + i, name) for i, name in enumerate(names)]

    return _factory


@pytest.fixture
def name_classifier() -> NameClassifier:
    """Fresh name-equality classifier."""
    return NameClassifier()


@pytest.fixture
def id_generator() -> Callable[[Sequence[Any]], int]:
    """Counting cluster id generator starting at 0."""
    return int_generator()
