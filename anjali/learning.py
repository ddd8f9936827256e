"""
Learning / Feedback - the only code path that changes what the core knows

- teach: learn a question/answer pair, or strengthen the pair already
  stored under the same topic and intent.
- reinforce: shift weight, confidence and bias after the user judged an
  answer.
- ingest_admin / load_admin_knowledge: bulk-load {id, question, answer}
  triples authored in the administrative editor. Malformed triples are
  skipped one by one.
"""

from __future__ import annotations

import json
import logging
import re
import uuid
from dataclasses import replace
from typing import Any, Iterable, List, Optional

from .base import ConceptRecord
from .concept_store import ConceptStore
from .intake import Normalizer
from .scorer import ngrams
from .storage import StorageBackend

logger = logging.getLogger(__name__)

MIN_QUESTION_TOKENS = 2

TEACH_INITIAL_CONFIDENCE = 1.0
TEACH_CONFIDENCE_INCREMENT = 1.0
ADMIN_INITIAL_WEIGHT = 5.0
ADMIN_ID_PREFIX = "admin_"

# Editor fields may carry HTML; tags are dropped, their text kept.
_MARKUP = re.compile(r"<[^>]*>")

# reinforce(success=True) / reinforce(success=False)
SUCCESS_DELTAS = {"weight_delta": 1.5, "confidence_delta": 1.0, "bias_delta": 0.2}
FAILURE_DELTAS = {"weight_delta": -1.0, "confidence_delta": -0.5, "bias_delta": -0.1}


def _text(value: Any) -> Optional[str]:
    if isinstance(value, str) and value.strip():
        return value.strip()
    return None


def _plain(value: Any) -> Any:
    if isinstance(value, str):
        return _MARKUP.sub("", value).strip()
    return value


class Learner:
    """
    Mutates the concept store on behalf of teach and feedback calls.

    Args:
        store: The concept store (single writer)
        normalizer: Shared normalizer, so taught signals and queries agree
        bigram_signals: Also store adjacent-token bigrams as signals
            (useful with the signal-set scorer)
    """

    def __init__(self, store: ConceptStore, normalizer: Optional[Normalizer] = None, bigram_signals: bool = False):
        self.store = store
        self.normalizer = normalizer or Normalizer()
        self.bigram_signals = bigram_signals

    def build_record(
        self,
        question: Any,
        answer: Any,
        concept_id: Optional[str] = None,
        weight: float = 1.0,
    ) -> Optional[ConceptRecord]:
        """Analyse ``question`` into a new record, or None if it is too thin to learn."""
        answer_text = _text(answer)
        if answer_text is None:
            return None

        analysis = self.normalizer.analyse(question)
        if len(analysis.tokens) < MIN_QUESTION_TOKENS or not analysis.content_tokens:
            return None

        signals: List[str] = []
        for token in analysis.tokens:
            if token not in signals:
                signals.append(token)
        if self.bigram_signals:
            signals.extend(b for b in ngrams(analysis.tokens, 2) if b not in signals)

        return ConceptRecord(
            id=concept_id or f"concept_{uuid.uuid4().hex[:12]}",
            topic=self.normalizer.topic_signature(analysis.content_tokens),
            intent=analysis.intent,
            signals=signals,
            answer=answer_text,
            weight=weight,
            confidence=TEACH_INITIAL_CONFIDENCE,
        )

    def teach(self, question: Any, answer: Any) -> Optional[ConceptRecord]:
        """
        Learn a question/answer pair.

        Returns:
            The stored record, or None when the question has fewer than two
            meaningful tokens or the answer is empty.
        """
        record = self.build_record(question, answer)
        if record is None:
            logger.debug(f"Rejected teach input: {question!r:.60}")
            return None

        existing = self.store.find_by_signature(record.topic, record.intent)
        if existing is not None:
            update = replace(existing, answer=record.answer, confidence=TEACH_CONFIDENCE_INCREMENT)
            return self.store.upsert(update, accumulate_confidence=True)

        return self.store.upsert(record)

    def reinforce(self, concept_id: Any, success: bool) -> bool:
        """Apply user feedback; False if the concept is unknown."""
        if not isinstance(concept_id, str):
            return False
        deltas = SUCCESS_DELTAS if success else FAILURE_DELTAS
        updated = self.store.apply_feedback(concept_id, rejected=not success, **deltas)
        if updated is None:
            logger.debug(f"Feedback for unknown concept {concept_id}")
            return False
        return True

    def ingest_admin(self, triples: Iterable[Any]) -> int:
        """
        Load administrative triples; returns how many were accepted.

        Each triple is a mapping with ``id`` and either ``question``/``answer``
        or the editor's short ``q``/``a`` keys. Markup tags are stripped from
        both.
        """
        loaded = 0
        for item in triples:
            if not isinstance(item, dict):
                continue
            raw_id = _text(item.get("id"))
            question = _plain(item.get("question", item.get("q")))
            answer = _plain(item.get("answer", item.get("a")))
            if raw_id is None or _text(question) is None:
                continue

            concept_id = f"{ADMIN_ID_PREFIX}{raw_id}"
            record = self.build_record(question, answer, concept_id=concept_id, weight=ADMIN_INITIAL_WEIGHT)
            if record is None:
                continue

            existing = self.store.get_by_id(concept_id)
            if existing is None and self.store.topic_keyed:
                existing = self.store.find_by_signature(record.topic, record.intent)

            if existing is None:
                self.store.upsert(record)
            elif existing.answer != record.answer:
                self.store.upsert(replace(existing, answer=record.answer))
            loaded += 1

        logger.info(f"Admin knowledge: {loaded} concepts loaded")
        return loaded

    def load_admin_knowledge(self, storage: StorageBackend, key: str) -> int:
        """Read the editor's JSON list from ``storage`` and ingest it."""
        raw = storage.get(key)
        if raw is None:
            logger.info(f"No admin knowledge under '{key}'")
            return 0
        try:
            payload = json.loads(raw.decode("utf-8"))
        except ValueError as e:
            logger.warning(f"Admin knowledge under '{key}' is not valid JSON: {e}")
            return 0
        if not isinstance(payload, list):
            logger.warning(f"Admin knowledge under '{key}' is not a list")
            return 0
        return self.ingest_admin(payload)

