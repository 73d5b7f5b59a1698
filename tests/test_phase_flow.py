import pytest

from guinote.cards import card_from_id
from guinote.deck import build_deck
from guinote.game import (
    InvalidPhase,
    InvalidPlay,
    begin_play,
    can_declare_victory,
    continue_from_scoring,
    create_initial_game_state,
    determine_vueltas_winner,
    is_last_trick,
    make_players,
    play_card,
    should_start_vueltas,
)
from guinote.state import MatchScore, Phase
from guinote.service import trick_draws, ui_hints


def opening_state():
    return begin_play(create_initial_game_state(make_players(), 0, deck=build_deck()))


def test_first_trick_scores_and_refills_winner_first():
    state = opening_state()
    assert state.current_player.id == "p3"
    history = [state]
    for player_id, card_id in (("p3", "oros_1"), ("p2", "oros_4"), ("p1", "oros_7"), ("p0", "oros_12")):
        state = play_card(state, player_id, card_from_id(card_id))
        history.append(state)

    assert state.trick_count == 1
    assert state.last_trick_winner == "p3"
    assert state.teams[1].score == 15
    assert state.current_player.id == "p3"
    assert state.current_trick.is_empty()
    assert all(len(hand) == 6 for hand in state.hands)
    assert len(state.draw_pile) == 12
    draws = trick_draws(history[-2], state)
    assert [player for player, _ in draws] == ["p3", "p2", "p1", "p0"]
    assert draws[0][1] == card_from_id("espadas_6")
    assert state.cards_in_play() == 40

    hints = ui_hints(state, history)
    assert hints.pending_trick_winner == "p3"
    assert hints.pending_draws == draws
    assert ui_hints(state).pending_draws == ()


def test_turn_passes_counter_clockwise():
    state = play_card(opening_state(), "p3", card_from_id("copas_3"))
    assert state.current_player.id == "p2"
    assert ui_hints(state).is_empty()


def test_illegal_play_is_rejected_with_reason():
    state = opening_state()
    with pytest.raises(InvalidPlay, match="Not this player's turn"):
        play_card(state, "p0", card_from_id("oros_12"))
    with pytest.raises(InvalidPlay, match="not present in hand"):
        play_card(state, "p3", card_from_id("oros_12"))


def test_play_before_dealing_finishes_is_rejected():
    state = create_initial_game_state(make_players(), 0, deck=build_deck())
    with pytest.raises(InvalidPlay):
        play_card(state, "p3", card_from_id("oros_1"))


def test_vueltas_trigger(state_builder):
    state = state_builder(
        [[], [], [], []],
        phase=Phase.SCORING,
        scores=(95, 85),
        card_points=(60, 60),
        last_trick_winner="p1",
    )
    assert is_last_trick(state)
    assert should_start_vueltas(state)

    vueltas = continue_from_scoring(state, deck=build_deck())
    assert vueltas.phase is Phase.DEALING
    assert vueltas.is_vueltas
    assert vueltas.vueltas_baseline == (95, 85)
    assert vueltas.vueltas_card_baseline == (60, 60)
    assert [team.score for team in vueltas.teams] == [0, 0]
    assert vueltas.dealer_index == 1
    assert vueltas.effective_score(0) == 95


def test_no_vueltas_when_threshold_reached_or_already_vueltas(state_builder):
    assert not should_start_vueltas(state_builder([[], [], [], []], scores=(101, 20), card_points=(60, 20)))
    assert not should_start_vueltas(
        state_builder([[], [], [], []], scores=(50, 20), is_vueltas=True, vueltas_baseline=(40, 40))
    )
    assert not should_start_vueltas(state_builder([["copas_1"], [], [], []], scores=(50, 20)))


def test_threshold_without_card_minimum_leads_to_vueltas(state_builder):
    state = state_builder(
        [["bastos_4"], [], [], []],
        plays=[("p3", "bastos_2"), ("p2", "copas_4"), ("p1", "copas_5")],
        scores=(105, 40),
        card_points=(5, 100),
    )
    state = play_card(state, "p0", card_from_id("bastos_4"))

    assert state.phase is Phase.SCORING
    assert state.partida_winner is None
    assert state.teams[0].score == 115
    assert state.teams[0].card_points == 15
    assert should_start_vueltas(state)

    vueltas = continue_from_scoring(state, deck=build_deck())
    assert vueltas.is_vueltas
    assert vueltas.vueltas_baseline == (115, 40)
    assert vueltas.vueltas_card_baseline == (15, 100)


def vueltas_table(state_builder, **kwargs):
    options = dict(
        phase=Phase.ARRASTRE,
        current=0,
        plays=[("p3", "bastos_2"), ("p2", "bastos_1"), ("p1", "bastos_4")],
        is_vueltas=True,
        vueltas_baseline=(95, 85),
        vueltas_card_baseline=(40, 40),
    )
    options.update(kwargs)
    return state_builder(
        [["bastos_5", "copas_3"], ["copas_4"], ["copas_5"], ["copas_6"]],
        **options,
    )


def test_vueltas_ends_as_soon_as_threshold_is_reached(state_builder):
    state = play_card(vueltas_table(state_builder), "p0", card_from_id("bastos_5"))

    assert state.teams[0].score == 11
    assert state.effective_score(0) == 106
    assert state.phase is Phase.SCORING
    assert state.partida_winner == 0
    assert state.match_score == MatchScore(partidas=(1, 0), cotos=(0, 0))
    assert any(state.hands)


def test_vueltas_victory_requires_last_trick(state_builder):
    state = vueltas_table(state_builder, plays=[], scores=(10, 0), last_trick_winner="p1")
    assert not can_declare_victory(state, 0)
    state = vueltas_table(state_builder, plays=[], scores=(10, 0), last_trick_winner="p2")
    assert can_declare_victory(state, 0)
    assert not can_declare_victory(state, 1)


def test_vueltas_tie_goes_to_last_trick_team(state_builder):
    state = vueltas_table(state_builder, plays=[], scores=(5, 15), last_trick_winner="p1")
    assert state.effective_score(0) == state.effective_score(1) == 100
    assert determine_vueltas_winner(state) == 1


def test_final_partida_ends_the_match(state_builder):
    state = vueltas_table(state_builder, match_score=MatchScore(partidas=(2, 0), cotos=(1, 0)))
    state = play_card(state, "p0", card_from_id("bastos_5"))
    assert state.phase is Phase.GAME_OVER
    assert state.match_score.cotos == (2, 0)
    with pytest.raises(InvalidPhase):
        continue_from_scoring(state)


def test_new_partida_after_a_win_resets_scores(state_builder):
    won = play_card(vueltas_table(state_builder), "p0", card_from_id("bastos_5"))
    fresh = continue_from_scoring(won, deck=build_deck())
    assert not fresh.is_vueltas
    assert fresh.vueltas_baseline is None
    assert [team.score for team in fresh.teams] == [0, 0]
    assert fresh.match_score == won.match_score


def test_continue_requires_scoring_phase():
    with pytest.raises(InvalidPhase):
        continue_from_scoring(opening_state())
