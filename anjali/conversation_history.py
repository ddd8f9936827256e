"""
Conversation History - Sliding Window of recent turns

Temporary context only: it never becomes stored knowledge. The learned
memory lives in the ConceptStore; this keeps the last few exchanges for
the session statistics.
"""

from collections import deque
from dataclasses import dataclass
from datetime import datetime
from typing import Dict, Optional


@dataclass
class ConversationTurn:
    """A single turn in the conversation"""
    timestamp: datetime
    user_input: str
    bot_response: str
    concept_id: Optional[str] = None      # Concept that answered, if any
    decision_kind: str = "unknown"        # "answer", "clarify" or "unknown"


class ConversationHistory:
    """
    Sliding window buffer of recent conversation turns.

    Automatically evicts old turns to maintain bounded memory.
    """

    def __init__(self, max_turns: int = 5):
        self.max_turns = max_turns
        self.turns = deque(maxlen=max_turns)

    def add_turn(
        self,
        user_input: str,
        bot_response: str,
        concept_id: Optional[str] = None,
        decision_kind: str = "unknown",
    ):
        """Add a turn; inputs that are not text are ignored."""
        if not isinstance(user_input, str) or not isinstance(bot_response, str):
            return

        self.turns.append(ConversationTurn(
            timestamp=datetime.now(),
            user_input=user_input.strip(),
            bot_response=bot_response.strip(),
            concept_id=concept_id,
            decision_kind=decision_kind,
        ))

    def get_stats(self) -> Dict:
        answered = sum(1 for turn in self.turns if turn.decision_kind == "answer")
        return {
            "turn_count": len(self.turns),
            "answered_turns": answered,
            "window_size": self.max_turns,
        }
