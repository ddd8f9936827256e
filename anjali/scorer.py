"""
Scorer / Matcher - score stored concepts against a query and rank them

Two interchangeable scoring policies share one ranking step:

- IntentGatedScorer: token overlap weighted by role (content vs. question
  marker) plus a reinforcement term; concepts of another intent, or whose
  topic the query does not cover, score 0.
- SignalSetScorer: n-gram overlap (unigram 1, bigram 3, trigram 5)
  amplified by the concept's weight and learned bias, intent-blind.

Ranking drops zero scores, applies an absolute minimum score and orders by
score, then confidence, then insertion order.
"""

from __future__ import annotations

from typing import Iterable, List, Optional, Protocol, Sequence, Set

import numpy as np

from .base import ConceptRecord, QueryAnalysis, RankedCandidate

CONTENT_WEIGHT = 2.0
QUESTION_WEIGHT = 0.5
REINFORCEMENT_WEIGHT = 0.25

UNIGRAM_WEIGHT = 1.0
BIGRAM_WEIGHT = 3.0
TRIGRAM_WEIGHT = 5.0

# Below this a concept is "no match", not a weak candidate.
MIN_SCORE = 2.5

# Topic tokens a query must share with a multi-word topic.
MIN_TOPIC_HITS = 2


class Scorer(Protocol):
    def score(self, query: QueryAnalysis, concept: ConceptRecord) -> float:
        ...


def ngrams(tokens: Sequence[str], n: int) -> List[str]:
    return [" ".join(tokens[i:i + n]) for i in range(len(tokens) - n + 1)]


def support(query: QueryAnalysis, concept: ConceptRecord) -> float:
    """Fraction of the query's content tokens found among the concept's signals."""
    content = set(query.content_tokens)
    if not content:
        return 0.0
    return len(content & set(concept.signals)) / len(content)


class IntentGatedScorer:
    """
    Role-weighted token overlap, hard-gated on intent and topic coverage.

    A concept is only scored when the query covers its topic: every token of
    a one-word topic, otherwise at least ``min_topic_hits`` of the topic's
    tokens. The token part of the score (content plus question hits) must
    reach ``min_score`` on its own; the reinforcement term only orders
    eligible concepts and never makes a weak match eligible.
    """

    def __init__(
        self,
        content_weight: float = CONTENT_WEIGHT,
        question_weight: float = QUESTION_WEIGHT,
        reinforcement_weight: float = REINFORCEMENT_WEIGHT,
        min_topic_hits: int = MIN_TOPIC_HITS,
        min_score: float = MIN_SCORE,
    ):
        if question_weight >= content_weight:
            raise ValueError("question_weight must be lower than content_weight")
        self.content_weight = content_weight
        self.question_weight = question_weight
        self.reinforcement_weight = reinforcement_weight
        self.min_topic_hits = min_topic_hits
        self.min_score = min_score

    def covers_topic(self, query: QueryAnalysis, concept: ConceptRecord) -> bool:
        topic_tokens = set(t for t in concept.topic.split("_") if t) or set(concept.signals)
        hits = len(topic_tokens & set(query.content_tokens))
        return hits > 0 and hits >= min(self.min_topic_hits, len(topic_tokens))

    def score(self, query: QueryAnalysis, concept: ConceptRecord) -> float:
        if concept.intent != query.intent:
            return 0.0
        if not self.covers_topic(query, concept):
            return 0.0

        signals: Set[str] = set(concept.signals)
        content_hits = len(signals & set(query.content_tokens))
        question_hits = len(signals & set(query.question_tokens))
        token_score = content_hits * self.content_weight + question_hits * self.question_weight
        if token_score < self.min_score:
            return 0.0

        return token_score + concept.confidence * self.reinforcement_weight


class SignalSetScorer:
    """N-gram signal overlap scaled by weight and bias."""

    def score(self, query: QueryAnalysis, concept: ConceptRecord) -> float:
        tokens = query.tokens
        unigrams = set(tokens)
        bigrams = set(ngrams(tokens, 2))
        trigrams = set(ngrams(tokens, 3))

        raw = 0.0
        for signal in concept.signals:
            if signal in unigrams:
                raw += UNIGRAM_WEIGHT
            if signal in bigrams:
                raw += BIGRAM_WEIGHT
            if signal in trigrams:
                raw += TRIGRAM_WEIGHT

        if raw == 0.0:
            return 0.0
        return raw * concept.weight * concept.bias


class Matcher:
    """Score every concept and return the eligible ones in rank order."""

    def __init__(self, scorer: Optional[Scorer] = None, min_score: float = MIN_SCORE):
        self.scorer = scorer or IntentGatedScorer()
        self.min_score = min_score

    def rank(self, query: QueryAnalysis, concepts: Iterable[ConceptRecord]) -> List[RankedCandidate]:
        candidates = []
        for concept in concepts:
            value = float(self.scorer.score(query, concept))
            if value <= 0.0 or value < self.min_score:
                continue
            candidates.append(RankedCandidate(concept=concept, score=value, support=support(query, concept)))

        if len(candidates) < 2:
            return candidates

        scores = np.array([c.score for c in candidates])
        confidences = np.array([c.concept.confidence for c in candidates])
        positions = np.arange(len(candidates))
        # lexsort keys: last is primary
        order = np.lexsort((positions, -confidences, -scores))
        return [candidates[i] for i in order]


def build_scorer(name: str, min_score: float = MIN_SCORE) -> Scorer:
    if name == "intent_gated":
        return IntentGatedScorer(min_score=min_score)
    if name == "signal_set":
        return SignalSetScorer()
    raise ValueError(f"Unknown scorer '{name}'")
