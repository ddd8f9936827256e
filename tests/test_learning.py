"""
Tests for teaching, feedback and administrative ingestion.
"""

from __future__ import annotations

import json

import pytest

from anjali.base import IntentCategory
from anjali.learning import ADMIN_INITIAL_WEIGHT, Learner
from anjali.storage import InMemoryStorage


@pytest.fixture
def learner(store):
    return Learner(store)


def test_teach_builds_record(learner):
    record = learner.teach("संविधान कब बना?", "1950")

    assert record.topic == "संविधान_बना"
    assert record.intent == IntentCategory.TIME
    assert record.signals == ["संविधान", "कब", "बना"]
    assert record.answer == "1950"
    assert record.confidence == 1.0
    assert record.id.startswith("concept_")


@pytest.mark.parametrize(
    "question, answer",
    [
        ("कब", "1950"),               # single token
        ("कब क्या", "1950"),          # only question words
        ("hello world", "1950"),      # nothing left after normalisation
        ("संविधान कब बना", "   "),    # empty answer
        (None, "1950"),
        ("संविधान कब बना", None),
    ],
)
def test_teach_rejects_thin_input(learner, store, question, answer):
    assert learner.teach(question, answer) is None
    assert len(store) == 0


def test_teaching_twice_strengthens_instead_of_duplicating(learner, store):
    first = learner.teach("संविधान कब बना", "1949")
    second = learner.teach("संविधान कब बना?", "1950")

    assert len(store.all()) == 1
    assert second.id == first.id
    assert second.answer == "1950"
    assert second.confidence > first.confidence


def test_reinforce_success(learner, store):
    record = learner.teach("संविधान कब बना", "1950")

    assert learner.reinforce(record.id, success=True)

    updated = store.get_by_id(record.id)
    assert updated.weight == pytest.approx(2.5)
    assert updated.confidence == pytest.approx(2.0)
    assert updated.bias == pytest.approx(1.2)
    assert store.get_stats()["rejected"] == 0


def test_reinforce_failure_is_clamped(learner, store):
    record = learner.teach("संविधान कब बना", "1950")

    for _ in range(8):
        assert learner.reinforce(record.id, success=False)

    updated = store.get_by_id(record.id)
    assert updated.weight == 1.0
    assert updated.confidence == 1.0
    assert updated.bias == pytest.approx(0.5)
    assert store.get_stats()["rejected"] == 8


def test_reinforce_unknown_concept(learner):
    assert learner.reinforce("missing", success=True) is False
    assert learner.reinforce(None, success=True) is False


def test_ingest_admin_skips_malformed_triples(learner, store):
    loaded = learner.ingest_admin([
        {"id": "1", "q": "भारत की राजधानी क्या है", "a": "नई दिल्ली"},
        {"id": "2", "question": "कब", "answer": "बहुत पहले"},
        {"q": "ताजमहल कहाँ है", "a": "आगरा"},
        {"id": "3", "question": "ताजमहल कहाँ है", "answer": ""},
        "not a triple",
    ])

    assert loaded == 1
    record = store.get_by_id("admin_1")
    assert record.answer == "नई दिल्ली"
    assert record.weight == ADMIN_INITIAL_WEIGHT
    assert record.intent == IntentCategory.DEFINITION


def test_ingest_admin_strips_markup(learner, store):
    loaded = learner.ingest_admin([
        {"id": "1", "q": "<p>भारत की राजधानी क्या है</p>", "a": " <b>नई दिल्ली</b> "},
        {"id": "2", "q": "ताजमहल कहाँ है", "a": "<br/>"},
    ])

    assert loaded == 1
    record = store.get_by_id("admin_1")
    assert record.answer == "नई दिल्ली"
    assert record.topic == "भारत_राजधानी"
    assert store.get_by_id("admin_2") is None


def test_reingest_keeps_learned_strength(learner, store):
    learner.ingest_admin([{"id": "1", "q": "भारत की राजधानी क्या है", "a": "दिल्ली"}])
    learner.reinforce("admin_1", success=True)

    learner.ingest_admin([{"id": "1", "q": "भारत की राजधानी क्या है", "a": "नई दिल्ली"}])

    record = store.get_by_id("admin_1")
    assert len(store) == 1
    assert record.answer == "नई दिल्ली"
    assert record.weight == pytest.approx(ADMIN_INITIAL_WEIGHT + 1.5)


def test_load_admin_knowledge(learner, store):
    storage = InMemoryStorage({
        "ADMIN": json.dumps([{"id": "t", "q": "ताजमहल कहाँ है", "a": "आगरा"}], ensure_ascii=False).encode("utf-8"),
        "BROKEN": b"{oops",
        "NOT_A_LIST": b'{"id": "t"}',
    })

    assert learner.load_admin_knowledge(storage, "MISSING") == 0
    assert learner.load_admin_knowledge(storage, "BROKEN") == 0
    assert learner.load_admin_knowledge(storage, "NOT_A_LIST") == 0
    assert learner.load_admin_knowledge(storage, "ADMIN") == 1
    assert store.get_by_id("admin_t").answer == "आगरा"


def test_bigram_signals(store):
    learner = Learner(store, bigram_signals=True)

    record = learner.teach("भारत की राजधानी क्या है", "नई दिल्ली")

    assert record.signals == ["भारत", "राजधानी", "क्या", "भारत राजधानी", "राजधानी क्या"]
