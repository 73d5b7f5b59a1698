"""Trick representation and resolution."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Sequence, Tuple

from .cards import Card, Suit, beats, card_strength

TRICK_SIZE = 4

Play = Tuple[str, Card]


class TrickError(RuntimeError):
    """Raised when trick play breaks ordering constraints."""


@dataclass(frozen=True)
class Trick:
    leader: str
    plays: Tuple[Play, ...] = ()

    def is_empty(self) -> bool:
        return not self.plays

    def is_full(self) -> bool:
        return len(self.plays) == TRICK_SIZE

    def with_play(self, player: str, card: Card) -> Trick:
        if self.is_full():
            raise TrickError("Trick already complete.")
        if not self.plays and player != self.leader:
            raise TrickError("Only the leader can start the trick.")
        if any(existing == player for existing, _ in self.plays):
            raise TrickError(f"Player {player} already played to this trick.")
        return Trick(leader=self.leader, plays=self.plays + ((player, card),))

    def cards(self) -> Tuple[Card, ...]:
        return tuple(card for _, card in self.plays)

    def led_suit(self) -> Optional[Suit]:
        return self.plays[0][1].suit if self.plays else None

    def points(self) -> int:
        return sum(card.point_value() for _, card in self.plays)

    def winning_play(self, trump: Optional[Suit]) -> Play:
        """Return the play currently taking the trick (works on partial tricks)."""
        if not self.plays:
            raise TrickError("Cannot determine winner on empty trick.")
        led = self.led_suit()
        assert led is not None
        winning_player, winning_card = self.plays[0]
        for player, card in self.plays[1:]:
            if beats(card, winning_card, led, trump):
                winning_player, winning_card = player, card
        return winning_player, winning_card

    def best_of_suit(self, suit: Suit) -> Optional[Card]:
        """Highest card of ``suit`` played so far, if any."""
        matching = [card for _, card in self.plays if card.suit is suit]
        if not matching:
            return None
        return max(matching, key=card_strength)


@dataclass(frozen=True)
class TrickResult:
    winner_id: str
    points: int
    trick: Trick


def resolve_trick(plays: Sequence[Play], trump: Suit) -> TrickResult:
    """Resolve a completed 4-card trick into its winner and card points."""
    if len(plays) != TRICK_SIZE:
        raise TrickError(f"A trick needs {TRICK_SIZE} cards, got {len(plays)}.")
    trick = Trick(leader=plays[0][0], plays=tuple(plays))
    winner, _ = trick.winning_play(trump)
    return TrickResult(winner_id=winner, points=trick.points(), trick=trick)
