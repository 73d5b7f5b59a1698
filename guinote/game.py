"""Hand orchestration and phase transitions for Guiñote.

A hand moves ``dealing -> playing -> arrastre -> scoring``; from scoring the
driver calls :func:`continue_from_scoring` to deal the next hand (a vueltas
replay or a fresh partida) unless the match is over. Every function here
takes a ``GameState`` and returns a new one.
"""

from __future__ import annotations

import logging
from dataclasses import replace
from random import Random
from typing import List, Optional, Sequence, Tuple

from .cards import Card, Rank, Suit, has_meld
from .dealing import (
    NUM_PLAYERS,
    counter_clockwise_order,
    deal_initial,
    draw_after_trick,
    next_player_index,
)
from .deck import shuffle_deck
from .mechanics import illegal_reason
from .rules_schema import DEFAULT_RULES, RuleSet
from .scoring import (
    apply_last_trick_bonus,
    apply_trick_scoring,
    is_match_complete,
    meets_card_point_minimum,
    meld_value,
    update_match_score,
)
from .state import GameState, MatchScore, Meld, Phase, Player, Team
from .trick import Trick, resolve_trick

logger = logging.getLogger(__name__)

DEFAULT_TEAM_IDS = ("team1", "team2")


class GameRuleError(RuntimeError):
    """Base class for rejected actions."""


class InvalidPlay(GameRuleError):
    """Raised when an illegal card play is attempted."""


class InvalidMeld(GameRuleError):
    """Raised when meld declaration rules are violated."""


class InvalidExchange(GameRuleError):
    """Raised when the trump seven cannot be exchanged."""


class InvalidPhase(GameRuleError):
    """Raised when an action is attempted in the wrong phase."""


# Setup ---------------------------------------------------------------------


def make_players(names: Optional[Sequence[str]] = None) -> Tuple[Player, ...]:
    """Four players with partners sitting opposite each other (seats 0+2, 1+3)."""
    names = list(names) if names is not None else ["Player 1", "Player 2", "Player 3", "Player 4"]
    if len(names) != NUM_PLAYERS:
        raise ValueError(f"Game requires exactly {NUM_PLAYERS} players.")
    return tuple(
        Player(id=f"p{seat}", name=name, team_id=DEFAULT_TEAM_IDS[seat % 2], is_bot=seat != 0)
        for seat, name in enumerate(names)
    )


def build_teams(players: Sequence[Player]) -> Tuple[Team, ...]:
    team_ids: List[str] = []
    for player in players:
        if player.team_id not in team_ids:
            team_ids.append(player.team_id)
    if len(team_ids) != 2:
        raise ValueError(f"Game requires exactly 2 teams, got {len(team_ids)}.")
    teams = []
    for team_id in team_ids:
        members = tuple(player.id for player in players if player.team_id == team_id)
        if len(members) != 2:
            raise ValueError(f"Team {team_id} must have exactly 2 players, got {len(members)}.")
        teams.append(Team(id=team_id, player_ids=members))
    return tuple(teams)


def create_initial_game_state(
    players: Sequence[Player],
    dealer_index: int = 0,
    *,
    rng: Optional[Random] = None,
    deck: Optional[Sequence[Card]] = None,
    rules: Optional[RuleSet] = None,
    match_score: Optional[MatchScore] = None,
    vueltas_baseline: Optional[Tuple[int, int]] = None,
    vueltas_card_baseline: Optional[Tuple[int, int]] = None,
) -> GameState:
    """Shuffle (unless ``deck`` is given), deal and return a hand in the dealing phase."""
    players = tuple(players)
    if len(players) != NUM_PLAYERS:
        raise ValueError(f"Game requires exactly {NUM_PLAYERS} players.")
    if len({player.id for player in players}) != NUM_PLAYERS:
        raise ValueError("Player ids must be unique.")
    teams = build_teams(players)

    cards = list(deck) if deck is not None else shuffle_deck(rng)
    dealt = deal_initial(cards, dealer_index)
    first = counter_clockwise_order(dealer_index)[0]

    return GameState(
        phase=Phase.DEALING,
        players=players,
        teams=teams,
        draw_pile=dealt.draw_pile,
        hands=dealt.hands,
        current_trick=Trick(leader=players[first].id),
        trump_suit=dealt.trump_card.suit,
        trump_card=dealt.trump_card,
        current_player_index=first,
        dealer_index=dealer_index,
        collected_tricks=tuple(() for _ in players),
        is_vueltas=vueltas_baseline is not None,
        vueltas_baseline=vueltas_baseline,
        vueltas_card_baseline=vueltas_card_baseline,
        match_score=match_score or MatchScore(),
        rules=rules or DEFAULT_RULES,
    )


def begin_play(state: GameState) -> GameState:
    """Finish dealing and open play."""
    if state.phase is not Phase.DEALING:
        raise InvalidPhase(f"Cannot begin play from the {state.phase} phase.")
    return replace(state, phase=Phase.PLAYING)


# Hand status ---------------------------------------------------------------


def is_last_trick(state: GameState) -> bool:
    """True once the pile and every hand are empty."""
    return not state.draw_pile and all(len(hand) == 0 for hand in state.hands)


def should_start_vueltas(state: GameState) -> bool:
    """True when the first hand ran out with no team able to claim the partida.

    A team at or above the threshold without the card-point minimum cannot
    claim, so it does not prevent vueltas.
    """
    if state.is_vueltas or state.partida_winner is not None or not is_last_trick(state):
        return False
    return _threshold_winner(state) is None


def can_declare_victory(state: GameState, team_index: int) -> bool:
    """Whether a team may close a vueltas hand as partida winner right now."""
    if not state.is_vueltas or state.vueltas_baseline is None:
        return False
    last_team = state.last_trick_winner_team
    if state.rules.play.vueltas_victory_requires_last_trick and last_team != team_index:
        return False
    total = state.effective_score(team_index)
    other_total = state.effective_score(1 - team_index)
    if total < state.rules.scoring.winning_score:
        return False
    if not meets_card_point_minimum(state, team_index):
        return False
    return total > other_total or (total == other_total and last_team == team_index)


def determine_vueltas_winner(state: GameState) -> Optional[int]:
    """Winner of a vueltas hand that ran out of cards: higher total, ties to the last trick."""
    if not state.is_vueltas or state.vueltas_baseline is None:
        return None
    first, second = state.effective_score(0), state.effective_score(1)
    if first > second:
        return 0
    if second > first:
        return 1
    return state.last_trick_winner_team


def _claims_partida(state: GameState, team_index: int) -> bool:
    if state.effective_score(team_index) < state.rules.scoring.winning_score:
        return False
    if not meets_card_point_minimum(state, team_index):
        return False
    if state.is_vueltas:
        return can_declare_victory(state, team_index)
    return True


def _threshold_winner(state: GameState) -> Optional[int]:
    last_team = state.last_trick_winner_team
    contenders = sorted(
        range(len(state.teams)),
        key=lambda index: (index != last_team, -state.effective_score(index)),
    )
    for team_index in contenders:
        if _claims_partida(state, team_index):
            return team_index
    return None


def _end_partida(state: GameState, winner: int) -> GameState:
    match_score = update_match_score(state.match_score, winner, state.rules)
    over = is_match_complete(match_score, state.rules)
    logger.info(
        f"Partida won by {state.teams[winner].id} "
        f"({state.effective_score(winner)} pts); match score {match_score}"
    )
    return replace(
        state,
        phase=Phase.GAME_OVER if over else Phase.SCORING,
        partida_winner=winner,
        match_score=match_score,
    )


def _settle(state: GameState, hand_over: bool) -> GameState:
    winner = _threshold_winner(state)
    if winner is not None:
        return _end_partida(state, winner)
    if not hand_over:
        return state
    if state.is_vueltas:
        winner = determine_vueltas_winner(state)
        if winner is not None:
            return _end_partida(state, winner)
        logger.warning("Vueltas hand ended without a winner; another vueltas hand follows")
    else:
        logger.info(f"Hand over without a winner, scores {[team.score for team in state.teams]}; vueltas next")
    return replace(state, phase=Phase.SCORING, partida_winner=None)


# Actions -------------------------------------------------------------------


def play_card(state: GameState, player_id: str, card: Card) -> GameState:
    """Play a card; completes, scores and refills after the fourth card of a trick."""
    reason = illegal_reason(state, player_id, card)
    if reason is not None:
        raise InvalidPlay(reason)

    seat = state.player_index(player_id)
    assert seat is not None
    hands = list(state.hands)
    hands[seat] = tuple(held for held in hands[seat] if held != card)

    trick = state.current_trick
    if trick.is_empty() and trick.leader != player_id:
        trick = Trick(leader=player_id)
    trick = trick.with_play(player_id, card)

    state = replace(state, hands=tuple(hands), current_trick=trick)
    logger.debug(f"{player_id} played {card}")
    if not trick.is_full():
        return replace(state, current_player_index=next_player_index(seat))
    return _complete_trick(state)


def _complete_trick(state: GameState) -> GameState:
    result = resolve_trick(state.current_trick.plays, state.trump_suit)
    scored = apply_trick_scoring(state, result)
    if scored is state:
        return state

    winner_seat = scored.player_index(result.winner_id)
    assert winner_seat is not None
    scored = replace(scored, current_player_index=winner_seat)

    if scored.phase is Phase.PLAYING and scored.draw_pile:
        hands, pile, draws = draw_after_trick(scored.hands, scored.draw_pile, winner_seat)
        scored = replace(scored, hands=hands, draw_pile=pile)
        logger.debug(f"Post-trick draws: {[(scored.players[seat].id, str(card)) for seat, card in draws]}")
        if not pile:
            logger.debug("Draw pile exhausted; arrastre begins")
            scored = replace(scored, phase=Phase.ARRASTRE)

    hand_over = is_last_trick(scored)
    if hand_over:
        team_index = scored.team_index_of(result.winner_id)
        if team_index is not None:
            scored = apply_last_trick_bonus(scored, team_index)
    return _settle(scored, hand_over)


def meldable_suits(state: GameState, player_id: str) -> List[Suit]:
    """Suits the player could declare right now."""
    if _meld_blocker(state, player_id) is not None:
        return []
    team_index = state.team_index_of(player_id)
    assert team_index is not None
    team = state.teams[team_index]
    hand = state.hand_of(player_id)
    return [suit for suit in Suit if has_meld(hand, suit) and not team.has_melded(suit)]


def _meld_blocker(state: GameState, player_id: str) -> Optional[str]:
    if state.phase is not Phase.PLAYING:
        return f"Melds cannot be declared during the {state.phase} phase."
    if not state.current_trick.is_empty():
        return "Melds must be declared before the next card is played."
    team_index = state.team_index_of(player_id)
    if team_index is None:
        return f"Unknown player {player_id!r}."
    if state.last_trick_winner is None or state.last_trick_winner_team != team_index:
        return "Only the team that won the last trick may declare a meld."
    return None


def declare_meld(state: GameState, player_id: str, suit: Suit) -> GameState:
    """Declare Rey + Sota of ``suit`` for the player's team."""
    reason = _meld_blocker(state, player_id)
    if reason is not None:
        raise InvalidMeld(reason)
    if not has_meld(state.hand_of(player_id), suit):
        raise InvalidMeld(f"Player must hold Rey and Sota of {suit}.")
    team_index = state.team_index_of(player_id)
    assert team_index is not None
    team = state.teams[team_index]
    if team.has_melded(suit):
        raise InvalidMeld(f"Team {team.id} already declared {suit}.")

    points = meld_value(suit, state.trump_suit, state.rules)
    teams = list(state.teams)
    teams[team_index] = replace(
        team,
        score=team.score + points,
        melds=team.melds + (Meld(team_id=team.id, player_id=player_id, suit=suit, points=points),),
    )
    logger.debug(f"{player_id} declared {points} in {suit}")
    return _settle(replace(state, teams=tuple(teams)), hand_over=False)


def _exchange_blocker(state: GameState, player_id: str) -> Optional[str]:
    if not state.rules.play.allow_trump_seven_exchange:
        return "Exchanging the trump seven is disabled."
    if state.phase is not Phase.PLAYING:
        return f"The trump seven cannot be exchanged during the {state.phase} phase."
    seat = state.player_index(player_id)
    if seat is None:
        return f"Unknown player {player_id!r}."
    if seat != state.current_player_index:
        return "Not this player's turn."
    if not state.draw_pile or state.draw_pile[0] != state.trump_card:
        return "The trump card is no longer on the table."
    if state.trump_card.rank is Rank.SIETE:
        return "The shown trump is already the seven."
    if Card(state.trump_suit, Rank.SIETE) not in state.hands[seat]:
        return f"Player does not hold the seven of {state.trump_suit}."
    return None


def can_exchange_trump_seven(state: GameState, player_id: str) -> bool:
    return _exchange_blocker(state, player_id) is None


def exchange_trump_seven(state: GameState, player_id: str) -> GameState:
    """Swap the trump seven in hand for the trump card under the pile."""
    reason = _exchange_blocker(state, player_id)
    if reason is not None:
        raise InvalidExchange(reason)
    seat = state.player_index(player_id)
    assert seat is not None
    seven = Card(state.trump_suit, Rank.SIETE)
    hands = list(state.hands)
    hands[seat] = tuple(card for card in hands[seat] if card != seven) + (state.trump_card,)
    logger.debug(f"{player_id} exchanged {seven} for {state.trump_card}")
    return replace(
        state,
        hands=tuple(hands),
        draw_pile=(seven,) + state.draw_pile[1:],
        trump_card=seven,
    )


# Between hands -------------------------------------------------------------


def continue_from_scoring(
    state: GameState,
    *,
    rng: Optional[Random] = None,
    deck: Optional[Sequence[Card]] = None,
) -> GameState:
    """Deal the next hand: a fresh partida after a win, otherwise vueltas."""
    if state.phase is Phase.GAME_OVER:
        raise InvalidPhase("The match is over.")
    if state.phase is not Phase.SCORING:
        raise InvalidPhase(f"Cannot start a new hand from the {state.phase} phase.")

    baseline: Optional[Tuple[int, int]] = None
    card_baseline: Optional[Tuple[int, int]] = None
    if state.partida_winner is None:
        baseline = (state.effective_score(0), state.effective_score(1))
        card_baseline = (state.combined_card_points(0), state.combined_card_points(1))
        logger.info(f"Starting vueltas with baseline {baseline}")

    return create_initial_game_state(
        state.players,
        (state.dealer_index + 1) % NUM_PLAYERS,
        rng=rng,
        deck=deck,
        rules=state.rules,
        match_score=state.match_score,
        vueltas_baseline=baseline,
        vueltas_card_baseline=card_baseline,
    )
