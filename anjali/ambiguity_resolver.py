"""
Ambiguity Resolver - turn a ranked candidate list into one decision

Rules are tried in order and the first one that fires decides:

    1. no candidates                       → Unknown
    2. a single candidate                  → Answer(top)
    3. runner-up scores 0, top > 0         → Answer(top)
    4. top scores 0                        → Unknown
    5. top / second > 1.6                  → Answer(top)
    6. top support > 0.6 and > second's    → Answer(top)
    7. >= 3 candidates, top - third < 25%
       of top                              → Clarify(top 3)
    8. bias(top) > bias(second) * 1.3      → Answer(top)
    9. otherwise                           → Clarify(top 2)
"""

from __future__ import annotations

import logging
import math
from typing import Any, Mapping, Optional, Protocol, Sequence

from .base import Answer, Clarify, Decision, RankedCandidate, Unknown, UnknownReason

logger = logging.getLogger(__name__)

DOMINANCE_RATIO = 1.6
SUPPORT_THRESHOLD = 0.6
SPREAD_FRACTION = 0.25
BIAS_RATIO = 1.3

DEFAULT_BIAS = 1.0
BIAS_FLOOR = 0.5


class Resolver(Protocol):
    def resolve(self, ranked: Sequence[RankedCandidate], bias: Optional[Mapping[str, float]] = None) -> Decision:
        ...


def _finite(value: Any) -> float:
    if isinstance(value, (int, float)) and not isinstance(value, bool) and math.isfinite(value):
        return float(value)
    return 0.0


def _answer(candidate: RankedCandidate) -> Answer:
    concept = candidate.concept
    return Answer(text=concept.answer, concept_id=concept.id, confidence=concept.confidence)


class CascadeResolver:
    """Dominance, support, spread and learned-bias cascade."""

    def __init__(
        self,
        dominance_ratio: float = DOMINANCE_RATIO,
        support_threshold: float = SUPPORT_THRESHOLD,
        spread_fraction: float = SPREAD_FRACTION,
        bias_ratio: float = BIAS_RATIO,
    ):
        self.dominance_ratio = dominance_ratio
        self.support_threshold = support_threshold
        self.spread_fraction = spread_fraction
        self.bias_ratio = bias_ratio

    def _bias_for(self, bias: Mapping[str, float], concept_id: str) -> float:
        value = bias.get(concept_id, DEFAULT_BIAS)
        if not (isinstance(value, (int, float)) and not isinstance(value, bool) and math.isfinite(value)):
            value = DEFAULT_BIAS
        return max(BIAS_FLOOR, float(value))

    def resolve(self, ranked: Sequence[RankedCandidate], bias: Optional[Mapping[str, float]] = None) -> Decision:
        if not ranked:
            return Unknown(UnknownReason.NO_KNOWLEDGE)

        top = ranked[0]
        if len(ranked) == 1:
            return _answer(top)

        second = ranked[1]
        top_score = _finite(top.score)
        second_score = _finite(second.score)

        if second_score == 0 and top_score > 0:
            return _answer(top)

        if top_score == 0:
            return Unknown(UnknownReason.UNDECIDED)

        dominance = top_score / second_score
        if dominance > self.dominance_ratio:
            logger.debug(f"Dominance {dominance:.2f} decides for {top.concept.id}")
            return _answer(top)

        top_support = _finite(top.support)
        second_support = _finite(second.support)
        if top_support > self.support_threshold and top_support > second_support:
            logger.debug(f"Support {top_support:.2f} decides for {top.concept.id}")
            return _answer(top)

        if len(ranked) >= 3:
            third_score = _finite(ranked[2].score)
            spread = top_score - third_score
            if spread < top_score * self.spread_fraction:
                return Clarify(options=tuple(c.concept.id for c in ranked[:3]))

        table = bias or {}
        bias_top = self._bias_for(table, top.concept.id)
        bias_second = self._bias_for(table, second.concept.id)
        if bias_top > bias_second * self.bias_ratio:
            logger.debug(f"Bias {bias_top:.2f} vs {bias_second:.2f} decides for {top.concept.id}")
            return _answer(top)

        return Clarify(options=(top.concept.id, second.concept.id))


_default_resolver = CascadeResolver()


def resolve(ranked: Sequence[RankedCandidate], bias: Optional[Mapping[str, float]] = None) -> Decision:
    return _default_resolver.resolve(ranked, bias)
