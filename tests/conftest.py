from __future__ import annotations

import sys
from pathlib import Path

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

import pytest

from anjali.concept_store import ConceptStore
from anjali.engine import ThinkingEngine
from anjali.session import AnjaliSession, SessionConfig
from anjali.storage import InMemoryStorage


@pytest.fixture
def storage():
    """Fresh in-memory substrate per test."""
    return InMemoryStorage()


@pytest.fixture
def store(storage):
    concept_store = ConceptStore(storage)
    concept_store.load()
    return concept_store


@pytest.fixture
def engine(storage):
    return ThinkingEngine(storage)


@pytest.fixture
def session(engine):
    """AnjaliSession over the shared in-memory engine."""
    return AnjaliSession(engine, SessionConfig())
