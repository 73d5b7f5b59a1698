import logging

from guinote.cards import Suit, card_from_id
from guinote.deck import build_deck
from guinote.rules_schema import DEFAULT_RULES, MatchConfig, RuleSet
from guinote.scoring import (
    apply_last_trick_bonus,
    apply_trick_scoring,
    calculate_hand_points,
    is_match_complete,
    match_winner,
    meld_value,
    update_match_score,
)
from guinote.state import MatchScore
from guinote.trick import Trick, TrickResult, resolve_trick


def completed_trick(*pairs):
    return resolve_trick([(player, card_from_id(card_id)) for player, card_id in pairs], Suit.OROS)


def test_trick_points_go_to_winning_team(state_builder):
    state = state_builder([[], [], [], []])
    result = completed_trick(("p0", "copas_4"), ("p3", "copas_1"), ("p2", "copas_3"), ("p1", "copas_12"))
    scored = apply_trick_scoring(state, result)

    assert result.winner_id == "p3"
    assert scored.teams[1].score == 25
    assert scored.teams[1].card_points == 25
    assert scored.teams[0].score == 0
    assert scored.collected_tricks[3] == (result.trick,)
    assert scored.trick_count == 1
    assert scored.last_trick_winner == "p3"
    assert scored.current_trick == Trick(leader="p3")
    assert scored.team_trick_piles[1] == (result.trick,)


def test_unknown_trick_winner_is_a_logged_no_op(state_builder, caplog):
    state = state_builder([[], [], [], []])
    trick = Trick(leader="ghost", plays=(("ghost", card_from_id("copas_1")),))
    with caplog.at_level(logging.WARNING):
        scored = apply_trick_scoring(state, TrickResult(winner_id="ghost", points=11, trick=trick))
    assert scored is state
    assert "ghost" in caplog.text


def test_last_trick_bonus(state_builder):
    state = state_builder([[], [], [], []], scores=(40, 30), card_points=(40, 30))
    bonus = apply_last_trick_bonus(state, 1)
    assert bonus.teams[1].score == 40
    assert bonus.teams[1].card_points == 40
    assert apply_last_trick_bonus(state, 5) is state


def test_hand_points_of_full_deck_is_120():
    deck = build_deck()
    players = ["p0", "p3", "p2", "p1"]
    tricks = [
        Trick(leader="p0", plays=tuple(zip(players, deck[start : start + 4])))
        for start in range(0, 40, 4)
    ]
    assert calculate_hand_points(tricks) == 120


def test_meld_values():
    assert meld_value(Suit.COPAS, Suit.OROS, DEFAULT_RULES) == 20
    assert meld_value(Suit.OROS, Suit.OROS, DEFAULT_RULES) == 40


def test_three_partidas_win_a_coto():
    score = MatchScore(partidas=(2, 1), cotos=(0, 0))
    score = update_match_score(score, 0, DEFAULT_RULES)
    assert score == MatchScore(partidas=(0, 0), cotos=(1, 0))
    assert not is_match_complete(score, DEFAULT_RULES)

    score = update_match_score(MatchScore(partidas=(0, 2), cotos=(1, 1)), 1, DEFAULT_RULES)
    assert score.cotos == (1, 2)
    assert match_winner(score, DEFAULT_RULES) == 1


def test_match_length_is_configurable():
    rules = RuleSet(match=MatchConfig(partidas_per_coto=1, cotos_per_match=1))
    score = update_match_score(MatchScore(), 0, rules)
    assert is_match_complete(score, rules)
