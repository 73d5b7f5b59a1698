"""Legal move checks for Guiñote.

While cards are still being drawn any card may be played. Once the draw
pile is exhausted (arrastre) players must follow the led suit, beat the
best card of that suit when they can, and otherwise trump, over-trumping
when possible. Neither beating nor trumping is required while the
player's partner is already winning the trick.
"""

from __future__ import annotations

import logging
from typing import List, Optional, Sequence

from .cards import Card, Suit, card_strength
from .state import GameState, Phase
from .trick import Trick

logger = logging.getLogger(__name__)

PLAYABLE_PHASES = (Phase.PLAYING, Phase.ARRASTRE)


def arrastre_moves(
    hand: Sequence[Card],
    trick: Trick,
    trump: Suit,
    *,
    partner_winning: bool = False,
    partner_exempts_trumping: bool = True,
) -> List[Card]:
    """Return the subset of ``hand`` that may be played during arrastre."""
    cards = list(hand)
    led = trick.led_suit()
    if led is None:
        return cards

    in_led = [card for card in cards if card.suit is led]
    if in_led:
        if partner_winning:
            return in_led
        best_led = trick.best_of_suit(led)
        assert best_led is not None
        beating = [card for card in in_led if card_strength(card) > card_strength(best_led)]
        return beating or in_led

    trumps = [card for card in cards if card.suit is trump]
    if not trumps or (partner_winning and partner_exempts_trumping):
        return cards

    best_trump = trick.best_of_suit(trump)
    if best_trump is None:
        return trumps
    over_trumps = [card for card in trumps if card_strength(card) > card_strength(best_trump)]
    return over_trumps or trumps


def partner_is_winning(state: GameState, player_id: str) -> bool:
    trick = state.current_trick
    if trick.is_empty():
        return False
    winner, _ = trick.winning_play(state.trump_suit)
    if winner == player_id:
        return False
    player_team = state.team_index_of(player_id)
    winner_team = state.team_index_of(winner)
    if player_team is None or winner_team is None:
        logger.warning(f"Team lookup failed for {player_id} / {winner}; assuming partner is not winning")
        return False
    return player_team == winner_team


def illegal_reason(state: GameState, player_id: str, card: Card) -> Optional[str]:
    """Return why ``card`` cannot be played by ``player_id`` now, or None if it can."""
    if state.phase not in PLAYABLE_PHASES:
        return f"Cards cannot be played during the {state.phase} phase."
    seat = state.player_index(player_id)
    if seat is None:
        return f"Unknown player {player_id!r}."
    if seat != state.current_player_index:
        return "Not this player's turn."
    hand = state.hands[seat]
    if card not in hand:
        return f"Card {card} not present in hand."
    if state.phase is Phase.PLAYING:
        return None

    allowed = arrastre_moves(
        hand,
        state.current_trick,
        state.trump_suit,
        partner_winning=partner_is_winning(state, player_id),
        partner_exempts_trumping=state.rules.play.partner_exempts_trumping,
    )
    if card in allowed:
        return None

    led = state.current_trick.led_suit()
    if any(c.suit is led for c in hand):
        if card.suit is not led:
            return f"Must follow the led suit ({led})."
        return f"Must beat the best {led} card on the table."
    if card.suit is not state.trump_suit:
        return f"Must play a trump ({state.trump_suit})."
    return "Must over-trump when able."


def is_legal(state: GameState, player_id: str, card: Card) -> bool:
    return illegal_reason(state, player_id, card) is None


def legal_moves(state: GameState, player_id: str) -> List[Card]:
    """Cards in the player's hand that may be played now, in hand order."""
    return [card for card in state.hand_of(player_id) if is_legal(state, player_id, card)]
