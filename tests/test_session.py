import logging
from dataclasses import replace

import pytest

from bots.base import BotStrategy
from bots.bot_arena import play_hand
from guinote.game import InvalidPlay
from guinote.session import Action, ActionKind, GameSession, replay
from guinote.state import Phase


def test_same_seed_same_deal():
    assert GameSession(seed=5).state == GameSession(seed=5).state
    assert GameSession(seed=5).state.hands != GameSession(seed=6).state.hands


def test_replaying_actions_reproduces_state():
    session = GameSession(seed=9)
    play_hand(session, [BotStrategy(), BotStrategy()])
    session.next_hand()
    session.begin_play()

    rebuilt = replay(session.actions, seed=9)
    assert rebuilt.state == session.state
    assert rebuilt.history == session.history


def test_rejected_action_is_not_recorded():
    session = GameSession(seed=2)
    session.begin_play()
    wrong_seat = session.state.players[(session.state.current_player_index + 1) % 4]
    card = session.state.hands[(session.state.current_player_index + 1) % 4][0]
    before = session.state
    with pytest.raises(InvalidPlay):
        session.play_card(wrong_seat.id, card)
    assert session.state is before
    assert [action.kind for action in session.actions] == [ActionKind.BEGIN_PLAY]


def test_action_requires_player_and_card():
    session = GameSession(seed=2)
    session.begin_play()
    with pytest.raises(ValueError):
        session.apply(Action(ActionKind.PLAY_CARD))
    with pytest.raises(ValueError):
        session.apply(Action(ActionKind.PLAY_CARD, player_id="p3"))


def test_validation_hook_records_violations(monkeypatch, caplog):
    session = GameSession(seed=4, validate_states=True)
    monkeypatch.setattr(
        "guinote.session.apply_action",
        lambda state, action, rng=None: replace(state, phase=Phase.ARRASTRE),
    )
    with caplog.at_level(logging.ERROR):
        session.begin_play()
    assert session.violations
    assert any("Invalid phase transition" in violation for violation in session.violations)
    assert "Invariant violated" in caplog.text
    assert session.state.phase is Phase.ARRASTRE


def test_clean_hand_has_no_violations():
    session = GameSession(seed=13, validate_states=True)
    play_hand(session, [BotStrategy(), BotStrategy()])
    assert session.violations == []
    assert session.state.phase in (Phase.SCORING, Phase.GAME_OVER)
    assert session.hands_played == 1
