"""
Session management for a spoken or typed conversation with the core.

Sits between an input device (speech-to-text, a console, ...) and the
ThinkingEngine. Handles what the engine deliberately does not:

- emergency stop reflex
- splitting "X और Y" into several questions
- limiting repeated clarification requests
- gating feedback on an uninterrupted presentation of the answer
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Any, Dict, List, Optional

from .base import Answer, Clarify, Decision, Unknown
from .conversation_history import ConversationHistory
from .engine import ThinkingEngine
from .response_renderer import GIVE_UP_TEXT, render

STOP_COMMAND = "STOP"

# Whole words that stop the current presentation.
STOP_WORDS = frozenset({"रुको", "रुकिए", "रुक", "चुप", "बस", "मत"})
# Prefixes of those words, for one-word partial transcripts ("रु...").
STOP_PREFIXES = ("रु", "चु", "बस", "मत")
# Longest utterance a leading stop word still stops ("बस करो").
STOP_MAX_TOKENS = 2

_INTENT_SPLIT = re.compile(r"\s(?:और फिर|साथ ही|और|तथा|फिर)\s")


@dataclass
class SessionConfig:
    """Configuration for a conversation session."""

    min_input_length: int = 3
    max_clarify: int = 2
    max_intents: int = 3
    history_turns: int = 5
    learning_enabled: bool = True


@dataclass
class SessionResponse:
    """One spoken/printed reply."""

    text: str
    decision: Optional[Decision] = None
    concept_id: Optional[str] = None
    command: Optional[str] = None

    @property
    def is_clarify(self) -> bool:
        return isinstance(self.decision, Clarify)

    @property
    def is_fallback(self) -> bool:
        return isinstance(self.decision, Unknown)


def detect_command(text: str) -> Optional[str]:
    """
    Return STOP for stop utterances, else None.

    A stop word only counts as the first word of a short utterance
    ("बस करो"); in a longer one it starts a question ("बस अड्डा कहाँ है").
    """
    tokens = text.strip().lower().split()
    if not tokens:
        return None
    if all(token in STOP_WORDS for token in tokens):
        return STOP_COMMAND
    if tokens[0] in STOP_WORDS and len(tokens) <= STOP_MAX_TOKENS:
        return STOP_COMMAND
    if len(tokens) == 1 and tokens[0].startswith(STOP_PREFIXES):
        return STOP_COMMAND
    return None


def split_intents(text: str, max_intents: int = 3) -> List[str]:
    """Split a compound question on conjunctions, keeping at most ``max_intents`` parts."""
    parts = [part.strip() for part in _INTENT_SPLIT.split(text)]
    return [part for part in parts if part][:max_intents]


class AnjaliSession:
    """
    Turn-level orchestration around one ThinkingEngine.

    Usage:
        session = AnjaliSession(engine)
        for reply in session.process_message("संविधान कब बना"):
            speak(reply.text)
        session.presentation_finished(completed=True)
        session.upvote()
    """

    def __init__(self, engine: ThinkingEngine, config: Optional[SessionConfig] = None):
        self.engine = engine
        self.config = config or SessionConfig()
        self.conversation_history = ConversationHistory(max_turns=self.config.history_turns)

        self.clarify_count = 0
        self.last_spoken_text = ""
        self.last_concept_id: Optional[str] = None
        self.interrupted = False
        self._presentation_complete = False

    def process_message(self, content: Any) -> List[SessionResponse]:
        """
        Process one utterance and return the replies to present, in order.

        Returns an empty list for input that should be ignored (too short,
        or an echo of our own last reply picked up by the microphone).
        """
        if not isinstance(content, str):
            return []
        clean = content.strip()
        if len(clean) < self.config.min_input_length:
            return []
        if clean == self.last_spoken_text:
            return []

        command = detect_command(clean)
        if command is not None:
            self.interrupt()
            self.clarify_count = 0
            return [SessionResponse(text="", command=command)]

        self.interrupted = False
        self._presentation_complete = False
        self.last_concept_id = None

        responses: List[SessionResponse] = []
        for part in split_intents(clean, self.config.max_intents):
            decision = self.engine.think(part)

            if isinstance(decision, Clarify):
                self.clarify_count += 1
                if self.clarify_count > self.config.max_clarify:
                    self.clarify_count = 0
                    text = GIVE_UP_TEXT
                else:
                    text = render(decision, self.engine.describe)
                responses.append(self._record(part, text, decision))
                break

            self.clarify_count = 0
            responses.append(self._record(part, render(decision, self.engine.describe), decision))

        if responses:
            self.last_spoken_text = responses[-1].text
        return responses

    def _record(self, user_input: str, text: str, decision: Decision) -> SessionResponse:
        concept_id = decision.concept_id if isinstance(decision, Answer) else None
        if concept_id is not None:
            self.last_concept_id = concept_id

        kind = {Answer: "answer", Clarify: "clarify"}.get(type(decision), "unknown")
        self.conversation_history.add_turn(user_input, text, concept_id=concept_id, decision_kind=kind)
        return SessionResponse(text=text, decision=decision, concept_id=concept_id)

    # ──────────────────────────────────────────────────────────────
    # Presentation and feedback gating
    # ──────────────────────────────────────────────────────────────

    def interrupt(self) -> None:
        """The host cut the presentation short; this turn earns no feedback."""
        self.interrupted = True
        self._presentation_complete = False

    def presentation_finished(self, completed: bool = True) -> None:
        self._presentation_complete = bool(completed) and not self.interrupted

    def _feedback_target(self) -> Optional[str]:
        if not self.config.learning_enabled:
            return None
        if not self._presentation_complete or self.interrupted:
            return None
        return self.last_concept_id

    def upvote(self) -> bool:
        """Reinforce the last answer; True if feedback was applied."""
        target = self._feedback_target()
        if target is None:
            return False
        self.last_concept_id = None
        return self.engine.reinforce(target, success=True)

    def downvote(self) -> bool:
        """Weaken the last answer; True if feedback was applied."""
        target = self._feedback_target()
        if target is None:
            return False
        self.last_concept_id = None
        return self.engine.reinforce(target, success=False)

    def teach(self, question: str, answer: str) -> bool:
        if not self.config.learning_enabled:
            return False
        return self.engine.teach(question, answer)

    def get_stats(self) -> Dict[str, Any]:
        return {
            **self.engine.store.get_stats(),
            **self.conversation_history.get_stats(),
            "clarify_count": self.clarify_count,
        }
