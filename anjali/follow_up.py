"""Reinterpret short elliptical queries against the last answered topic."""

from __future__ import annotations

import logging
from typing import FrozenSet, Optional

from .base import ConceptRecord, QueryAnalysis
from .concept_store import ConceptStore

logger = logging.getLogger(__name__)

# A follow-up names at most one content word; two or more carry a topic of their own.
FOLLOW_UP_MAX_CONTENT_TOKENS = 1

# Words that point back at the previous topic instead of naming a new one.
REFERENCE_TOKENS: FrozenSet[str] = frozenset({
    "उसका", "उसकी", "उसके", "उसे", "उस", "उसने",
    "इसका", "इसकी", "इसके", "इसे", "इस", "इसने",
    "उनका", "उनकी", "उनके", "उन्हें", "उन्होंने",
    "वहाँ", "वहां", "यहाँ", "यहां", "फिर",
})


class FollowUpResolver:
    """
    Resolve "और कब?"-style follow-ups to the previously answered concept.

    Only reads ``last_context``; the engine updates it after a successful
    answer. A content word that is neither a back-reference nor one of the
    context concept's signals names a different topic, and the follow-up is
    refused.
    """

    def __init__(
        self,
        store: ConceptStore,
        max_content_tokens: int = FOLLOW_UP_MAX_CONTENT_TOKENS,
        intent_aware: bool = True,
        reference_tokens: FrozenSet[str] = REFERENCE_TOKENS,
    ):
        self.store = store
        self.max_content_tokens = max_content_tokens
        self.intent_aware = intent_aware
        self.reference_tokens = frozenset(reference_tokens)

    def is_elliptical(self, query: QueryAnalysis) -> bool:
        return not query.is_empty and len(query.content_tokens) <= self.max_content_tokens

    def resolve(self, query: QueryAnalysis) -> Optional[ConceptRecord]:
        if not self.is_elliptical(query):
            return None

        context = self.store.last_context
        if context is None:
            return None
        if self.intent_aware and context.intent != query.intent:
            logger.debug(f"Follow-up intent {query.intent.name} differs from context {context.intent.name}")
            return None

        concept = self.store.get_by_id(context.concept_id)
        if concept is None:
            concept = self.store.find_by_signature(context.topic, context.intent)
        if concept is None:
            return None

        foreign = [
            token for token in query.content_tokens
            if token not in self.reference_tokens and token not in concept.signals
        ]
        if foreign:
            logger.debug(f"Follow-up names another topic ({', '.join(foreign)}), not {concept.id}")
            return None
        return concept
