"""Common bot strategy interfaces."""

from __future__ import annotations

from typing import Optional

from guinote.cards import Card, Suit
from guinote.game import can_exchange_trump_seven, meldable_suits
from guinote.mechanics import legal_moves
from guinote.state import GameState


class BotStrategy:
    """Base class for seat drivers: first legal card, melds and exchanges when able."""

    name: str = "FirstLegal"

    def on_hand_start(self, state: GameState, player_id: str) -> None:
        """Optional hook invoked at the start of each hand."""
        return None

    def choose_meld(self, state: GameState, player_id: str) -> Optional[Suit]:
        """Return a suit to declare now, or None."""
        suits = meldable_suits(state, player_id)
        if not suits:
            return None
        if state.trump_suit in suits:
            return state.trump_suit
        return suits[0]

    def wants_exchange(self, state: GameState, player_id: str) -> bool:
        """Whether to swap the trump seven for the shown trump card."""
        return can_exchange_trump_seven(state, player_id)

    def play_card(self, state: GameState, player_id: str) -> Card:
        legal = legal_moves(state, player_id)
        if not legal:
            raise RuntimeError("No legal plays available for bot.")
        return legal[0]
