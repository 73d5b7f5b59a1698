import pytest

from guinote.cards import card_from_id
from guinote.dealing import (
    counter_clockwise_order,
    deal_initial,
    draw_after_trick,
    next_player_index,
    post_trick_order,
)
from guinote.deck import build_deck
from guinote.game import InvalidPhase, begin_play, create_initial_game_state, make_players
from guinote.state import Phase, Player


def ids(cards):
    return [card.id for card in cards]


def test_counter_clockwise_order_from_dealer():
    assert counter_clockwise_order(0) == [3, 2, 1, 0]
    assert counter_clockwise_order(2) == [1, 0, 3, 2]
    assert counter_clockwise_order(2) == counter_clockwise_order(2)


def test_counter_clockwise_order_rejects_bad_dealer():
    with pytest.raises(ValueError):
        counter_clockwise_order(4)


def test_next_player_and_post_trick_order():
    assert next_player_index(0) == 3
    assert next_player_index(1) == 0
    assert post_trick_order(2) == [2, 1, 0, 3]


def test_initial_deal_uses_two_rounds_of_three():
    dealt = deal_initial(build_deck(), dealer_index=0)
    # Seat 3 is served first: oros 1-3, then copas 3-5 in the second round.
    assert ids(dealt.hands[3]) == ["oros_1", "oros_2", "oros_3", "copas_3", "copas_4", "copas_5"]
    assert ids(dealt.hands[0]) == ["oros_12", "copas_1", "copas_2", "espadas_2", "espadas_3", "espadas_4"]
    assert dealt.trump_card == card_from_id("espadas_5")
    assert len(dealt.draw_pile) == 16
    assert dealt.draw_pile[0] == dealt.trump_card
    assert dealt.draw_pile[-1] == card_from_id("espadas_6")


def test_post_trick_draws_winner_first_and_trump_last():
    hands = [[card_from_id(f"bastos_{rank}")] for rank in (1, 2, 3, 4)]
    pile = [card_from_id(cid) for cid in ("oros_5", "copas_1", "copas_2", "copas_3")]
    new_hands, new_pile, draws = draw_after_trick(hands, pile, winner_index=2, hand_size=2)

    assert new_pile == ()
    assert [(seat, card.id) for seat, card in draws] == [
        (2, "copas_3"),
        (1, "copas_2"),
        (0, "copas_1"),
        (3, "oros_5"),
    ]
    assert ids(new_hands[3]) == ["bastos_4", "oros_5"]


def test_create_initial_game_state():
    state = create_initial_game_state(make_players(), 0, deck=build_deck())
    assert state.phase is Phase.DEALING
    assert all(len(hand) == 6 for hand in state.hands)
    assert state.trump_suit.value == "espadas"
    assert state.current_player_index == 3
    assert state.cards_in_play() == 40
    assert not state.is_vueltas


def test_create_initial_game_state_requires_two_teams_of_two():
    players = make_players()
    with pytest.raises(ValueError):
        create_initial_game_state(players[:3])
    lopsided = players[:3] + (Player(id="p3", name="Player 4", team_id="team1"),)
    with pytest.raises(ValueError):
        create_initial_game_state(lopsided)


def test_begin_play_only_from_dealing():
    state = begin_play(create_initial_game_state(make_players(), 1, deck=build_deck()))
    assert state.phase is Phase.PLAYING
    with pytest.raises(InvalidPhase):
        begin_play(state)
