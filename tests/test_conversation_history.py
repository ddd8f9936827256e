"""Tests for the sliding window of recent turns."""

from anjali.conversation_history import ConversationHistory


def test_window_evicts_old_turns():
    history = ConversationHistory(max_turns=2)

    history.add_turn("पहला प्रश्न", "पहला उत्तर")
    history.add_turn("दूसरा प्रश्न", "दूसरा उत्तर", concept_id="c2", decision_kind="answer")
    history.add_turn("तीसरा प्रश्न", "तीसरा उत्तर")

    assert [turn.user_input for turn in history.turns] == ["दूसरा प्रश्न", "तीसरा प्रश्न"]
    assert history.get_stats() == {"turn_count": 2, "answered_turns": 1, "window_size": 2}


def test_non_text_turns_are_ignored():
    history = ConversationHistory()

    history.add_turn(None, "उत्तर")

    assert len(history.turns) == 0
