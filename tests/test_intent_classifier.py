import pytest

from anjali.base import IntentCategory
from anjali.intent_classifier import IntentClassifier


@pytest.fixture
def classifier():
    return IntentClassifier()


@pytest.mark.parametrize(
    "text, intent",
    [
        ("संविधान कब बना", IntentCategory.TIME),
        ("भारत किस वर्ष आज़ाद हुआ", IntentCategory.TIME),
        ("गीतांजली किसने लिखी", IntentCategory.PERSON),
        ("भारत के पहले प्रधानमंत्री कौन थे", IntentCategory.PERSON),
        ("आकाश नीला क्यों है", IntentCategory.REASON),
        ("वर्षा कैसे होती है", IntentCategory.METHOD),
        ("ताजमहल कहाँ है", IntentCategory.WHERE),
        ("जलियांवाला बाग में क्या हुआ", IntentCategory.EVENT),
        ("लोकतंत्र क्या है", IntentCategory.DEFINITION),
        ("भारत की राजधानी", IntentCategory.GENERAL),
    ],
)
def test_classify(classifier, text, intent):
    assert classifier.classify(text) == intent


def test_time_outranks_later_markers(classifier):
    assert classifier.classify("गांधी जी का जन्म कब और कहाँ हुआ") == IntentCategory.TIME


def test_markers_match_whole_tokens_only(classifier):
    # "कबीर" starts with "कब" but is a name, not a time question
    assert classifier.classify("कबीर कौन थे") == IntentCategory.PERSON


def test_match_reports_rule(classifier):
    found = classifier.match("ताजमहल कहाँ है")
    assert found is not None
    assert found.intent == IntentCategory.WHERE
    assert found.keyword == "कहाँ"


def test_classify_is_total(classifier):
    assert classifier.match("") is None
    assert classifier.classify(None) == IntentCategory.GENERAL
    assert classifier.classify(["कब"]) == IntentCategory.GENERAL


def test_every_intent_has_description(classifier):
    for intent in IntentCategory:
        assert classifier.get_intent_description(intent)
