"""
Response Renderer - turn a Decision into the text a host speaks or prints

No learning and no deciding here, only presentation. Every failure mode maps
to one fixed phrase, so a garbled or partial answer is never produced.
"""

from __future__ import annotations

import re
from typing import Callable, Optional, Sequence

from .base import Answer, Clarify, Decision, Unknown, UnknownReason

NOT_UNDERSTOOD_TEXT = "मुझे प्रश्न स्पष्ट नहीं मिला।"
NO_KNOWLEDGE_TEXT = "इस प्रश्न का उत्तर अभी मेरे पास नहीं है। आप चाहें तो मुझे सिखा सकते हैं।"
UNDECIDED_TEXT = "मैं इस प्रश्न पर निश्चित निर्णय नहीं ले सका।"
CLARIFY_PREFIX = "क्या आप इनमें से किसी के बारे में पूछ रहे हैं: "
CLARIFY_FALLBACK_TEXT = "क्या आप अपना प्रश्न थोड़ा और स्पष्ट कर सकते हैं?"
GIVE_UP_TEXT = "इसे अभी छोड़ते हैं।"

_UNKNOWN_TEXT = {
    UnknownReason.NOT_UNDERSTOOD: NOT_UNDERSTOOD_TEXT,
    UnknownReason.NO_KNOWLEDGE: NO_KNOWLEDGE_TEXT,
    UnknownReason.UNDECIDED: UNDECIDED_TEXT,
}

_MULTI_WHITESPACE = re.compile(r"\s+")


def _safe_text(value: str) -> str:
    return _MULTI_WHITESPACE.sub(" ", value).strip()


def build_clarify_text(labels: Sequence[str]) -> str:
    if not labels:
        return CLARIFY_FALLBACK_TEXT
    return CLARIFY_PREFIX + " या ".join(labels) + "?"


def render(decision: Decision, describe: Optional[Callable[[str], str]] = None) -> str:
    """
    Render ``decision`` as presentation text.

    Args:
        decision: Output of ThinkingEngine.think
        describe: Maps a concept id to a spoken label for clarification
            options (defaults to the raw id)
    """
    if isinstance(decision, Answer):
        text = _safe_text(decision.text)
        return text or NO_KNOWLEDGE_TEXT

    if isinstance(decision, Clarify):
        label = describe or (lambda concept_id: concept_id)
        return build_clarify_text([label(option) for option in decision.options])

    if isinstance(decision, Unknown):
        return _UNKNOWN_TEXT.get(decision.reason, NO_KNOWLEDGE_TEXT)

    return NO_KNOWLEDGE_TEXT
