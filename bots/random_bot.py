"""Random baseline bot."""

from __future__ import annotations

import random
from typing import Optional

from guinote.cards import Card, Suit
from guinote.game import meldable_suits
from guinote.mechanics import legal_moves
from guinote.state import GameState

from .base import BotStrategy


class RandomBot(BotStrategy):
    name = "Random"

    def __init__(self, seed: Optional[int] = None) -> None:
        self._rng = random.Random(seed)

    def choose_meld(self, state: GameState, player_id: str) -> Optional[Suit]:
        suits = meldable_suits(state, player_id)
        if not suits:
            return None
        return self._rng.choice(suits)

    def wants_exchange(self, state: GameState, player_id: str) -> bool:
        return super().wants_exchange(state, player_id) and self._rng.random() < 0.5

    def play_card(self, state: GameState, player_id: str) -> Card:
        legal = legal_moves(state, player_id)
        if not legal:
            raise RuntimeError("No legal plays available for bot.")
        return self._rng.choice(legal)
