"""
Tests for the answer / clarify / unknown cascade.
"""

from __future__ import annotations

import pytest

from anjali.ambiguity_resolver import CascadeResolver, resolve
from anjali.base import Answer, Clarify, ConceptRecord, IntentCategory, RankedCandidate, Unknown, UnknownReason


def candidate(concept_id, score, support=0.0, confidence=1.0):
    record = ConceptRecord(
        id=concept_id,
        topic=concept_id,
        intent=IntentCategory.GENERAL,
        signals=[concept_id],
        answer=f"answer {concept_id}",
        confidence=confidence,
    )
    return RankedCandidate(concept=record, score=score, support=support)


@pytest.fixture
def resolver():
    return CascadeResolver()


def test_no_candidates_is_unknown(resolver):
    assert resolver.resolve([]) == Unknown(UnknownReason.NO_KNOWLEDGE)


def test_single_candidate_is_answered(resolver):
    decision = resolver.resolve([candidate("a", 0.1, confidence=3.0)])

    assert decision == Answer(text="answer a", concept_id="a", confidence=3.0)


def test_zero_runner_up_is_answered(resolver):
    decision = resolver.resolve([candidate("a", 3.0), candidate("b", 0.0)])

    assert isinstance(decision, Answer)
    assert decision.concept_id == "a"


def test_all_zero_scores_are_undecided(resolver):
    decision = resolver.resolve([candidate("a", 0.0), candidate("b", 0.0)])

    assert decision == Unknown(UnknownReason.UNDECIDED)


def test_dominant_top_is_answered(resolver):
    decision = resolver.resolve([candidate("a", 100), candidate("b", 50)])

    assert isinstance(decision, Answer)
    assert decision.concept_id == "a"


def test_close_pair_asks(resolver):
    decision = resolver.resolve([candidate("a", 100), candidate("b", 70)])

    assert decision == Clarify(options=("a", "b"))


def test_close_pair_decided_by_bias(resolver):
    ranked = [candidate("a", 100), candidate("b", 70)]

    assert isinstance(resolver.resolve(ranked, {"a": 1.4, "b": 1.0}), Answer)
    # 1.2 is not more than 1.3 times 1.0
    assert isinstance(resolver.resolve(ranked, {"a": 1.2, "b": 1.0}), Clarify)


def test_high_support_is_answered(resolver):
    decision = resolver.resolve([candidate("a", 10, support=0.8), candidate("b", 9, support=0.5)])

    assert isinstance(decision, Answer)
    assert decision.concept_id == "a"


def test_equal_support_does_not_decide(resolver):
    decision = resolver.resolve([candidate("a", 10, support=0.8), candidate("b", 9, support=0.8)])

    assert decision == Clarify(options=("a", "b"))


def test_tight_three_way_spread_asks_with_three_options(resolver):
    decision = resolver.resolve([candidate("a", 10), candidate("b", 9), candidate("c", 8)])

    assert decision == Clarify(options=("a", "b", "c"))


def test_wide_three_way_spread_falls_through_to_pair(resolver):
    decision = resolver.resolve([candidate("a", 10), candidate("b", 9), candidate("c", 5)])

    assert decision == Clarify(options=("a", "b"))


def test_spread_check_precedes_bias(resolver):
    ranked = [candidate("a", 10), candidate("b", 9), candidate("c", 8)]

    assert isinstance(resolver.resolve(ranked, {"a": 5.0}), Clarify)


def test_malformed_bias_values_fall_back_to_default(resolver):
    ranked = [candidate("a", 100), candidate("b", 70)]

    assert isinstance(resolver.resolve(ranked, {"a": float("nan"), "b": "high"}), Clarify)
    # floor of 0.5 on the runner-up: 0.7 > 0.5 * 1.3
    assert isinstance(resolver.resolve(ranked, {"a": 0.7, "b": 0.1}), Answer)


def test_module_level_resolve_matches_default_policy():
    ranked = [candidate("a", 10), candidate("b", 9), candidate("c", 8)]

    assert resolve(ranked) == CascadeResolver().resolve(ranked)
