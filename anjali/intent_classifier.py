"""
Intent Classifier - Map a normalised query to one intent category

Ordered keyword rules over the normalised text. The first rule that
matches wins, so rule order is the priority between categories:

    Query: "गांधी जी का जन्म कब और कहाँ हुआ"
    Rules checked: TIME → ... → WHERE
    Result: TIME

Absence of any marker yields GENERAL.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Any, Dict, List, Optional

from .base import IntentCategory


@dataclass
class IntentMatch:
    """Result of matching a query against the rule list"""
    intent: IntentCategory
    template: str                    # Template of the rule that fired
    keyword: str                     # Matched keyword / phrase


def _alternation(*phrases: str) -> str:
    """Whole-token alternation; whitespace delimited because \\b is unreliable on matras."""
    body = "|".join(re.escape(p) for p in phrases)
    return rf"(?:^|\s)({body})(?=\s|$)"


class IntentClassifier:
    """
    Classifies queries with an ordered list of containment rules.

    Total and side-effect free: anything that is not a string, or matches no
    rule, is GENERAL.
    """

    def __init__(self):
        self.rules = self._bootstrap_rules()
        for rule in self.rules:
            rule["compiled"] = re.compile(rule["regex"])

    def _bootstrap_rules(self) -> List[Dict[str, Any]]:
        """
        Rules in priority order.

        TIME comes first so that "कब" wins over every other marker in the
        same sentence; EVENT must precede DEFINITION because "क्या हुआ"
        contains the definition marker.
        """
        return [
            {
                "template": "[SUBJECT] कब ...",
                "regex": _alternation(
                    "कब", "कितने बजे", "किस वर्ष", "किस साल", "किस सन",
                    "किस दिन", "किस तारीख", "किस तिथि", "किस समय",
                ),
                "intent": IntentCategory.TIME,
                "examples": ["संविधान कब बना", "भारत किस वर्ष आज़ाद हुआ"],
            },
            {
                "template": "[SUBJECT] किसने / कौन ...",
                "regex": _alternation(
                    "कौन", "किसने", "किसको", "किसका", "किसकी", "किसके",
                ),
                "intent": IntentCategory.PERSON,
                "examples": ["भारत के पहले प्रधानमंत्री कौन थे", "गीतांजली किसने लिखी"],
            },
            {
                "template": "[SUBJECT] क्यों ...",
                "regex": _alternation("क्यों", "क्यूँ", "किसलिए", "किस कारण"),
                "intent": IntentCategory.REASON,
                "examples": ["आकाश नीला क्यों है"],
            },
            {
                "template": "[SUBJECT] कैसे ...",
                "regex": _alternation(
                    "कैसे", "किस प्रकार", "किस तरह", "किस तरीके",
                ),
                "intent": IntentCategory.METHOD,
                "examples": ["वर्षा कैसे होती है"],
            },
            {
                "template": "[SUBJECT] कहाँ ...",
                "regex": _alternation(
                    "कहाँ", "कहां", "किधर", "किस जगह", "किस स्थान",
                    "किस देश", "किस शहर", "किस राज्य",
                ),
                "intent": IntentCategory.WHERE,
                "examples": ["ताजमहल कहाँ है"],
            },
            {
                "template": "[SUBJECT] में क्या हुआ",
                "regex": _alternation("हुआ", "हुई", "हुए", "घटना", "घटी"),
                "intent": IntentCategory.EVENT,
                "examples": ["जलियांवाला बाग में क्या हुआ"],
            },
            {
                "template": "[SUBJECT] क्या है",
                "regex": _alternation(
                    "क्या", "अर्थ", "मतलब", "परिभाषा", "किसे कहते", "कौनसा", "कौनसी",
                ),
                "intent": IntentCategory.DEFINITION,
                "examples": ["प्रकाश संश्लेषण क्या है", "लोकतंत्र किसे कहते हैं"],
            },
        ]

    def match(self, normalized_text: Any) -> Optional[IntentMatch]:
        """Return the first rule that fires, or None."""
        if not isinstance(normalized_text, str) or not normalized_text:
            return None

        for rule in self.rules:
            found = rule["compiled"].search(normalized_text)
            if found:
                return IntentMatch(
                    intent=rule["intent"],
                    template=rule["template"],
                    keyword=found.group(1),
                )
        return None

    def classify(self, normalized_text: Any) -> IntentCategory:
        found = self.match(normalized_text)
        return found.intent if found else IntentCategory.GENERAL

    def get_intent_description(self, intent: IntentCategory) -> str:
        """Get human-readable description of intent."""
        descriptions = {
            IntentCategory.TIME: "Asking when something happened",
            IntentCategory.PERSON: "Asking who did or is something",
            IntentCategory.DEFINITION: "Asking what something is",
            IntentCategory.EVENT: "Asking what happened",
            IntentCategory.REASON: "Asking why something is the case",
            IntentCategory.METHOD: "Asking how something is done or works",
            IntentCategory.WHERE: "Asking where something is",
        }
        return descriptions.get(intent, "General query")
