"""Shared dataclasses and type definitions for the decision core."""

from __future__ import annotations

from dataclasses import dataclass, field, asdict
from enum import Enum
from typing import Any, Dict, List, Optional, Tuple, Union


class IntentCategory(Enum):
    """Coarse question type a query is asking for."""
    TIME = "time"                # कब
    PERSON = "person"            # कौन / किसने
    DEFINITION = "definition"    # क्या / अर्थ
    EVENT = "event"              # क्या हुआ / घटना
    REASON = "reason"            # क्यों
    METHOD = "method"            # कैसे
    WHERE = "where"              # कहाँ
    GENERAL = "general"          # no marker


class UnknownReason(Enum):
    """Why a query ended without an answer."""
    NOT_UNDERSTOOD = "not_understood"   # empty / non-text / nothing left after normalisation
    NO_KNOWLEDGE = "no_knowledge"       # valid query, no eligible candidate
    UNDECIDED = "undecided"             # candidates present but none with a usable score


@dataclass
class ConceptRecord:
    """A stored question-pattern-to-answer unit."""
    id: str
    topic: str                          # canonical signature of the content tokens
    intent: IntentCategory
    signals: List[str]                  # never empty
    answer: str
    weight: float = 1.0                 # relevance amplifier (>= 1)
    confidence: float = 1.0             # reinforcement counter (>= 1)
    bias: float = 1.0                   # learned preference multiplier (>= 0.5)

    @property
    def signature(self) -> Tuple[str, IntentCategory]:
        return (self.topic, self.intent)

    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        data["intent"] = self.intent.name
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ConceptRecord":
        return cls(
            id=data["id"],
            topic=data["topic"],
            intent=IntentCategory[data["intent"]],
            signals=list(data["signals"]),
            answer=data["answer"],
            weight=float(data["weight"]),
            confidence=float(data["confidence"]),
            bias=float(data["bias"]),
        )


@dataclass
class QueryAnalysis:
    """Normalised view of one utterance."""
    raw_text: str
    normalized_text: str
    tokens: List[str]
    intent: IntentCategory
    question_tokens: List[str] = field(default_factory=list)
    content_tokens: List[str] = field(default_factory=list)

    @property
    def is_empty(self) -> bool:
        return not self.tokens


@dataclass
class RankedCandidate:
    """One scored concept in a ranked list."""
    concept: ConceptRecord
    score: float
    support: float = 0.0                # fraction of query content tokens matched


@dataclass(frozen=True)
class Answer:
    text: str
    concept_id: str
    confidence: float


@dataclass(frozen=True)
class Clarify:
    options: Tuple[str, ...]            # 2-3 concept ids in rank order


@dataclass(frozen=True)
class Unknown:
    reason: UnknownReason = UnknownReason.NO_KNOWLEDGE


Decision = Union[Answer, Clarify, Unknown]


@dataclass
class LastContext:
    """Topic and intent of the last successfully answered query."""
    topic: str
    intent: IntentCategory
    concept_id: str


@dataclass
class MemoryStats:
    learned: int = 0
    answered: int = 0
    rejected: int = 0

    def to_dict(self) -> Dict[str, int]:
        return asdict(self)


@dataclass
class MemoryState:
    """
    Process-wide learned state.

    ``bias`` mirrors ``ConceptRecord.bias`` keyed by concept id; it is the
    table handed to the ambiguity resolver. ``last_context`` is volatile and
    is never persisted.
    """
    concepts: Dict[str, ConceptRecord] = field(default_factory=dict)
    bias: Dict[str, float] = field(default_factory=dict)
    last_context: Optional[LastContext] = None
    stats: MemoryStats = field(default_factory=MemoryStats)

    def concept_list(self) -> List[ConceptRecord]:
        return list(self.concepts.values())
