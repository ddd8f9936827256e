"""
ThinkingEngine - public entry points of the decision core

    raw text → Normalizer → IntentClassifier → Matcher (reads ConceptStore)
             → Resolver → (FollowUpResolver on a miss) → Decision

Usage:
    engine = ThinkingEngine(InMemoryStorage())
    engine.teach("संविधान कब बना", "1950")
    decision = engine.think("संविधान कब बना")   # Answer(text="1950", ...)
    engine.reinforce(decision.concept_id, success=True)

The host must serialise think/teach/reinforce calls per engine; nothing in
here is locked.
"""

from __future__ import annotations

import logging
from typing import Any, Optional

from .ambiguity_resolver import CascadeResolver, Resolver
from .base import Answer, Decision, MemoryState, Unknown, UnknownReason
from .concept_store import ConceptStore
from .config import EngineConfig
from .follow_up import FollowUpResolver
from .intake import Normalizer
from .learning import Learner
from .scorer import Matcher, Scorer, build_scorer
from .storage import StorageBackend

logger = logging.getLogger(__name__)


class ThinkingEngine:
    """
    Decide between Answer, Clarify and Unknown for free-text queries.

    Args:
        storage: Substrate holding the memory blob (and admin triples)
        config: Engine configuration
        scorer: Optional scorer overriding ``config.scorer``
        resolver: Optional resolver (defaults to the cascade policy)
        autoload: Load memory (and admin knowledge) on construction
    """

    def __init__(
        self,
        storage: StorageBackend,
        config: Optional[EngineConfig] = None,
        scorer: Optional[Scorer] = None,
        resolver: Optional[Resolver] = None,
        autoload: bool = True,
    ):
        self.config = config or EngineConfig()
        self.storage = storage
        self.normalizer = Normalizer()
        self.store = ConceptStore(
            storage,
            storage_key=self.config.storage_key,
            topic_keyed=self.config.topic_keyed,
        )
        self.matcher = Matcher(
            scorer or build_scorer(self.config.scorer, self.config.min_score),
            min_score=self.config.min_score,
        )
        self.resolver = resolver or CascadeResolver()
        self.follow_up = FollowUpResolver(
            self.store,
            max_content_tokens=self.config.follow_up_max_content_tokens,
            intent_aware=self.config.follow_up_intent_aware,
        )
        self.learner = Learner(self.store, self.normalizer, bigram_signals=self.config.bigram_signals)

        if autoload:
            self.load()

    def load(self) -> None:
        self.store.load()
        if self.config.load_admin_on_start:
            self.learner.load_admin_knowledge(self.storage, self.config.admin_key)

    def think(self, text: Any) -> Decision:
        """Decide how to respond to ``text``; never raises for bad input."""
        query = self.normalizer.analyse(text)
        if query.is_empty:
            return Unknown(UnknownReason.NOT_UNDERSTOOD)

        ranked = self.matcher.rank(query, self.store.all())
        decision = self.resolver.resolve(ranked, self.store.bias_table())
        logger.debug(
            f"think intent={query.intent.name} candidates={len(ranked)} "
            f"decision={type(decision).__name__}"
        )

        if isinstance(decision, Unknown):
            concept = self.follow_up.resolve(query)
            if concept is not None:
                logger.debug(f"Follow-up resolved to {concept.id}")
                decision = Answer(text=concept.answer, concept_id=concept.id, confidence=concept.confidence)

        if isinstance(decision, Answer):
            concept = self.store.get_by_id(decision.concept_id)
            if concept is not None:
                self.store.record_answer(concept)

        return decision

    def teach(self, question: Any, answer: Any) -> bool:
        return self.learner.teach(question, answer) is not None

    def reinforce(self, concept_id: Any, success: bool) -> bool:
        return self.learner.reinforce(concept_id, bool(success))

    def forget(self, concept_id: str) -> bool:
        return self.store.remove(concept_id)

    def inspect(self) -> MemoryState:
        return self.store.inspect()

    def describe(self, concept_id: str) -> str:
        """Human-readable label of a concept for clarification prompts."""
        concept = self.store.get_by_id(concept_id)
        if concept is None or not concept.topic:
            return concept_id
        return concept.topic.replace("_", " ")
