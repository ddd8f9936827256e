"""Basic normalisation and tokenisation for noisy Devanagari utterances."""

from __future__ import annotations

import re
from typing import Any, FrozenSet, Iterable, List, Optional, Tuple

from .base import QueryAnalysis
from .intent_classifier import IntentClassifier

__all__ = [
    "FILLER_TOKENS",
    "MARKER_TOKENS",
    "Normalizer",
]


# Weak grammatical particles; never carry the topic of a question.
FILLER_TOKENS: FrozenSet[str] = frozenset({
    "का", "की", "के", "है", "हैं", "था", "थी", "थे", "से", "में", "ने", "को",
    "पर", "और", "तथा", "भी", "तो", "ही", "एक", "यह", "वह", "ये", "वो", "हो",
    "मुझे", "बताओ", "बताइए", "बताएं", "जी",
})

# Interrogative markers; kept even when shorter than the minimum length.
MARKER_TOKENS: FrozenSet[str] = frozenset({
    "कब", "कौन", "कौनसा", "कौनसी", "क्या", "क्यों", "क्यूँ", "कैसे", "कहाँ",
    "कहां", "किधर", "किसने", "किसको", "किसका", "किसकी", "किसके", "किसे",
    "किस", "कितना", "कितने", "कितनी", "किसलिए",
})

MIN_TOKEN_LENGTH = 2

# Anything outside the Devanagari block and whitespace is dropped; the danda
# marks sit inside the block and are treated as separators.
_OUT_OF_ALPHABET = re.compile(r"[^\u0900-\u097F\s]")
_DANDA = re.compile(r"[\u0964\u0965]")
_MULTI_WHITESPACE = re.compile(r"\s+")


def _collapse_whitespace(text: str) -> str:
    return _MULTI_WHITESPACE.sub(" ", text).strip()


def _drop_stutter(tokens: Iterable[str]) -> List[str]:
    """Remove immediate repeats ("कब कब") left by speech transcription."""
    result: List[str] = []
    for token in tokens:
        if result and result[-1] == token:
            continue
        result.append(token)
    return result


class Normalizer:
    """Turn raw utterances into token streams and query analyses."""

    def __init__(
        self,
        *,
        classifier: Optional[IntentClassifier] = None,
        filler_tokens: Iterable[str] = FILLER_TOKENS,
        marker_tokens: Iterable[str] = MARKER_TOKENS,
    ) -> None:
        self.classifier = classifier or IntentClassifier()
        self.filler_tokens = frozenset(filler_tokens)
        self.marker_tokens = frozenset(marker_tokens)

    def normalise(self, text: Any) -> str:
        if not isinstance(text, str):
            return ""
        text = text.lower()
        text = _DANDA.sub(" ", text)
        text = _OUT_OF_ALPHABET.sub("", text)
        return _collapse_whitespace(text)

    def tokenize(self, normalized_text: str) -> List[str]:
        tokens = []
        for fragment in normalized_text.split(" "):
            if not fragment or fragment in self.filler_tokens:
                continue
            if len(fragment) < MIN_TOKEN_LENGTH and fragment not in self.marker_tokens:
                continue
            tokens.append(fragment)
        return _drop_stutter(tokens)

    def split_markers(self, tokens: Iterable[str]) -> Tuple[List[str], List[str]]:
        """Return (question_tokens, content_tokens) preserving order."""
        question, content = [], []
        for token in tokens:
            (question if token in self.marker_tokens else content).append(token)
        return question, content

    def analyse(self, text: Any) -> QueryAnalysis:
        raw = text if isinstance(text, str) else ""
        normalized = self.normalise(text)
        tokens = self.tokenize(normalized)
        question, content = self.split_markers(tokens)
        return QueryAnalysis(
            raw_text=raw,
            normalized_text=normalized,
            tokens=tokens,
            intent=self.classifier.classify(normalized),
            question_tokens=question,
            content_tokens=content,
        )

    def topic_signature(self, content_tokens: Iterable[str]) -> str:
        """Content tokens in utterance order, first occurrence only, joined by ``_``."""
        seen = []
        for token in content_tokens:
            if token not in seen:
                seen.append(token)
        return "_".join(seen)
