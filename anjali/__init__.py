"""Anjali decision core: answer, ask, or admit not knowing."""

from .base import (
    Answer,
    Clarify,
    ConceptRecord,
    Decision,
    IntentCategory,
    MemoryState,
    QueryAnalysis,
    RankedCandidate,
    Unknown,
    UnknownReason,
)
from .config import EngineConfig
from .engine import ThinkingEngine
from .storage import InMemoryStorage, JsonFileStorage, SQLiteStorage

__all__ = [
    "Answer",
    "Clarify",
    "ConceptRecord",
    "Decision",
    "EngineConfig",
    "InMemoryStorage",
    "IntentCategory",
    "JsonFileStorage",
    "MemoryState",
    "QueryAnalysis",
    "RankedCandidate",
    "SQLiteStorage",
    "ThinkingEngine",
    "Unknown",
    "UnknownReason",
]
