"""
Concept Store - Persistent collection of learned concepts

Owns the single MemoryState of a process: concept records, the bias index,
the volatile last-answer context and running statistics. Every mutation is
written straight through to the storage substrate.

Blob layout (UTF-8 JSON under a versioned key):

    {"version": 4,
     "concepts": [{"id", "topic", "intent", "signals", "answer",
                   "weight", "confidence", "bias"}, ...],
     "stats": {"learned", "answered", "rejected"}}
"""

from __future__ import annotations

import copy
import json
import logging
import math
import sqlite3
from collections import Counter
from dataclasses import replace
from typing import Any, Dict, List, Optional

import numpy as np

from .base import (
    ConceptRecord,
    IntentCategory,
    LastContext,
    MemoryState,
    MemoryStats,
)
from .storage import StorageBackend

logger = logging.getLogger(__name__)

SCHEMA_VERSION = 4
DEFAULT_STORAGE_KEY = "ANJALI_THINKING_MEMORY_V4"

WEIGHT_FLOOR = 1.0
CONFIDENCE_FLOOR = 1.0
BIAS_FLOOR = 0.5

_RECORD_FIELDS = ("id", "topic", "intent", "signals", "answer", "weight", "confidence", "bias")
_STAT_FIELDS = ("learned", "answered", "rejected")


class SchemaError(ValueError):
    """Persisted or supplied data does not match the concept schema."""


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool) and math.isfinite(value)


def _is_text(value: Any) -> bool:
    return isinstance(value, str) and bool(value.strip())


def validate_record(record: ConceptRecord) -> None:
    """Raise SchemaError unless ``record`` is a valid concept."""
    if not _is_text(record.id):
        raise SchemaError("concept id must be a non-empty string")
    if not isinstance(record.topic, str):
        raise SchemaError(f"{record.id}: topic must be a string")
    if not isinstance(record.intent, IntentCategory):
        raise SchemaError(f"{record.id}: unknown intent {record.intent!r}")
    if not record.signals or not all(_is_text(s) for s in record.signals):
        raise SchemaError(f"{record.id}: signals must be a non-empty list of tokens")
    if not isinstance(record.answer, str):
        raise SchemaError(f"{record.id}: answer must be text")
    if not (_is_number(record.weight) and record.weight >= WEIGHT_FLOOR):
        raise SchemaError(f"{record.id}: weight below {WEIGHT_FLOOR}")
    if not (_is_number(record.confidence) and record.confidence >= CONFIDENCE_FLOOR):
        raise SchemaError(f"{record.id}: confidence below {CONFIDENCE_FLOOR}")
    if not (_is_number(record.bias) and record.bias >= BIAS_FLOOR):
        raise SchemaError(f"{record.id}: bias below {BIAS_FLOOR}")


def _record_from_payload(item: Any) -> ConceptRecord:
    if not isinstance(item, dict) or set(item) != set(_RECORD_FIELDS):
        raise SchemaError(f"concept entry has wrong shape: {item!r:.80}")
    if not isinstance(item["intent"], str) or item["intent"] not in IntentCategory.__members__:
        raise SchemaError(f"unknown intent {item['intent']!r}")
    if not isinstance(item["signals"], list):
        raise SchemaError("signals must be a list")
    for name in ("weight", "confidence", "bias"):
        if not _is_number(item[name]):
            raise SchemaError(f"{name} must be a number")
    record = ConceptRecord.from_dict(item)
    validate_record(record)
    return record


def state_from_payload(payload: Any, *, topic_keyed: bool = True) -> MemoryState:
    """Strictly rebuild a MemoryState; any deviation raises SchemaError."""
    if not isinstance(payload, dict):
        raise SchemaError("memory blob is not an object")
    if payload.get("version") != SCHEMA_VERSION:
        raise SchemaError(f"unsupported schema version {payload.get('version')!r}")
    concepts = payload.get("concepts")
    stats = payload.get("stats")
    if not isinstance(concepts, list) or not isinstance(stats, dict):
        raise SchemaError("memory blob is missing 'concepts' or 'stats'")

    state = MemoryState()
    signatures = set()
    for item in concepts:
        record = _record_from_payload(item)
        if record.id in state.concepts:
            raise SchemaError(f"duplicate concept id {record.id}")
        if topic_keyed:
            if record.signature in signatures:
                raise SchemaError(f"duplicate topic/intent {record.signature}")
            signatures.add(record.signature)
        state.concepts[record.id] = record
        state.bias[record.id] = record.bias

    if set(stats) != set(_STAT_FIELDS):
        raise SchemaError("stats has wrong shape")
    for name in _STAT_FIELDS:
        value = stats[name]
        if not isinstance(value, int) or isinstance(value, bool) or value < 0:
            raise SchemaError(f"stats.{name} must be a non-negative integer")
    state.stats = MemoryStats(**{name: stats[name] for name in _STAT_FIELDS})
    return state


def state_to_payload(state: MemoryState) -> Dict[str, Any]:
    return {
        "version": SCHEMA_VERSION,
        "concepts": [record.to_dict() for record in state.concepts.values()],
        "stats": state.stats.to_dict(),
    }


class ConceptStore:
    """
    Single owner of the learned MemoryState.

    Readers get copies (``all``, ``get_by_id``, ``bias_table``, ``inspect``);
    all writes go through ``upsert``, ``remove``, ``apply_feedback`` and
    ``record_answer``, each followed by ``save``.

    Args:
        storage: Substrate providing get/put of blobs
        storage_key: Versioned key the memory blob lives under
        topic_keyed: Enforce at most one record per (topic, intent)
    """

    def __init__(
        self,
        storage: StorageBackend,
        storage_key: str = DEFAULT_STORAGE_KEY,
        topic_keyed: bool = True,
    ):
        self.storage = storage
        self.storage_key = storage_key
        self.topic_keyed = topic_keyed
        self._state = MemoryState()

    # ──────────────────────────────────────────────────────────────
    # Persistence
    # ──────────────────────────────────────────────────────────────

    def load(self) -> None:
        """Read the memory blob; anything unreadable resets to empty memory."""
        try:
            raw = self.storage.get(self.storage_key)
        except (OSError, sqlite3.Error) as e:
            logger.warning(f"Could not read '{self.storage_key}': {e} - starting with empty memory")
            self._state = MemoryState()
            return

        if raw is None:
            logger.info(f"No stored memory under '{self.storage_key}', starting fresh")
            self._state = MemoryState()
            return

        try:
            payload = json.loads(raw.decode("utf-8"))
            self._state = state_from_payload(payload, topic_keyed=self.topic_keyed)
        # JSONDecodeError, UnicodeDecodeError and SchemaError are ValueErrors
        except (ValueError, KeyError, TypeError) as e:
            logger.warning(f"Stored memory '{self.storage_key}' is corrupt ({e}), resetting to empty memory")
            self._state = MemoryState()
            return

        logger.info(f"Loaded {len(self._state.concepts)} concepts from '{self.storage_key}'")

    def save(self) -> bool:
        """
        Write the whole state back synchronously.

        Returns:
            False if the substrate refused or failed the write; the in-memory
            state stays authoritative either way.
        """
        data = json.dumps(state_to_payload(self._state), ensure_ascii=False).encode("utf-8")
        try:
            ok = self.storage.put(self.storage_key, data)
        except (OSError, sqlite3.Error) as e:
            logger.warning(f"Failed to persist memory to '{self.storage_key}': {e}")
            return False
        if not ok:
            logger.warning(f"Storage refused write of '{self.storage_key}'")
            return False
        return True

    # ──────────────────────────────────────────────────────────────
    # Reads
    # ──────────────────────────────────────────────────────────────

    def all(self) -> List[ConceptRecord]:
        """Copies of every record, in insertion order."""
        return [replace(r, signals=list(r.signals)) for r in self._state.concepts.values()]

    def get_by_id(self, concept_id: str) -> Optional[ConceptRecord]:
        record = self._state.concepts.get(concept_id)
        if record is None:
            return None
        return replace(record, signals=list(record.signals))

    def find_by_signature(self, topic: str, intent: IntentCategory) -> Optional[ConceptRecord]:
        for record in self._state.concepts.values():
            if record.topic == topic and record.intent == intent:
                return replace(record, signals=list(record.signals))
        return None

    def bias_table(self) -> Dict[str, float]:
        return dict(self._state.bias)

    @property
    def last_context(self) -> Optional[LastContext]:
        return copy.copy(self._state.last_context)

    def __len__(self) -> int:
        return len(self._state.concepts)

    def inspect(self) -> MemoryState:
        """Deep copy of the full state, never a live reference."""
        return copy.deepcopy(self._state)

    def get_stats(self) -> Dict[str, Any]:
        """Get concept store statistics."""
        records = list(self._state.concepts.values())
        confidences = [r.confidence for r in records]
        return {
            "total_concepts": len(confidences),
            "average_confidence": float(np.mean(confidences)) if confidences else 0.0,
            "by_intent": dict(Counter(r.intent.name for r in records)),
            **self._state.stats.to_dict(),
        }

    # ──────────────────────────────────────────────────────────────
    # Writes
    # ──────────────────────────────────────────────────────────────

    def upsert(self, record: ConceptRecord, *, accumulate_confidence: bool = False) -> ConceptRecord:
        """
        Insert ``record`` or update the record it collides with.

        A collision is the same id, or (when topic-keyed) the same
        (topic, intent). On update the existing id, topic and signals are
        kept; answer and weight are overwritten and confidence is replaced,
        or added to when ``accumulate_confidence`` is set.

        Raises:
            SchemaError: if ``record`` is not a valid concept.
        """
        validate_record(record)

        existing = self._state.concepts.get(record.id)
        if existing is None and self.topic_keyed:
            existing = next(
                (r for r in self._state.concepts.values() if r.signature == record.signature),
                None,
            )

        if existing is not None:
            existing.answer = record.answer
            existing.weight = record.weight
            if accumulate_confidence:
                existing.confidence += record.confidence
            else:
                existing.confidence = record.confidence
            stored = existing
            logger.debug(f"Updated concept {stored.id} (confidence={stored.confidence:.2f})")
        else:
            stored = replace(record, signals=list(record.signals))
            self._state.concepts[stored.id] = stored
            self._state.bias[stored.id] = stored.bias
            self._state.stats.learned += 1
            logger.debug(f"Inserted concept {stored.id} topic={stored.topic} intent={stored.intent.name}")

        self.save()
        return replace(stored, signals=list(stored.signals))

    def remove(self, concept_id: str) -> bool:
        if concept_id not in self._state.concepts:
            return False
        del self._state.concepts[concept_id]
        self._state.bias.pop(concept_id, None)
        context = self._state.last_context
        if context is not None and context.concept_id == concept_id:
            self._state.last_context = None
        self.save()
        return True

    def apply_feedback(
        self,
        concept_id: str,
        *,
        weight_delta: float,
        confidence_delta: float,
        bias_delta: float,
        rejected: bool = False,
    ) -> Optional[ConceptRecord]:
        """Shift weight/confidence/bias by the given deltas, clamped to their floors."""
        record = self._state.concepts.get(concept_id)
        if record is None:
            return None

        record.weight = max(WEIGHT_FLOOR, record.weight + weight_delta)
        record.confidence = max(CONFIDENCE_FLOOR, record.confidence + confidence_delta)
        record.bias = max(BIAS_FLOOR, record.bias + bias_delta)
        self._state.bias[concept_id] = record.bias
        if rejected:
            self._state.stats.rejected += 1

        self.save()
        return replace(record, signals=list(record.signals))

    def record_answer(self, concept: ConceptRecord) -> None:
        """Remember a successful answer as the follow-up context."""
        self._state.last_context = LastContext(
            topic=concept.topic,
            intent=concept.intent,
            concept_id=concept.id,
        )
        self._state.stats.answered += 1
        self.save()
