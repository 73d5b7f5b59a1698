"""Immutable game state models for Guiñote.

Every action returns a new ``GameState``; nothing here is mutated in place.
Per-player collections (hands, collected tricks) are tuples indexed by seat
and per-team values are tuples indexed by team position, so their ordering
is explicit and survives a round trip through ``guinote.codec``.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Optional, Tuple

from .cards import Card, Suit
from .rules_schema import DEFAULT_RULES, RuleSet
from .trick import Trick


class Phase(Enum):
    WAITING = "waiting"
    DEALING = "dealing"
    PLAYING = "playing"
    ARRASTRE = "arrastre"
    SCORING = "scoring"
    GAME_OVER = "gameOver"

    def __str__(self) -> str:
        return self.value


@dataclass(frozen=True)
class Player:
    id: str
    name: str
    team_id: str
    is_bot: bool = False


@dataclass(frozen=True)
class Meld:
    """A declared cante: Rey + Sota of one suit."""

    team_id: str
    player_id: str
    suit: Suit
    points: int


@dataclass(frozen=True)
class Team:
    id: str
    player_ids: Tuple[str, ...]
    score: int = 0
    card_points: int = 0
    melds: Tuple[Meld, ...] = ()

    def has_melded(self, suit: Suit) -> bool:
        return any(meld.suit is suit for meld in self.melds)


@dataclass(frozen=True)
class MatchScore:
    """Partidas won in the current coto and cotos won in the match, per team."""

    partidas: Tuple[int, int] = (0, 0)
    cotos: Tuple[int, int] = (0, 0)


@dataclass(frozen=True)
class GameState:
    phase: Phase
    players: Tuple[Player, ...]
    teams: Tuple[Team, ...]
    draw_pile: Tuple[Card, ...]
    hands: Tuple[Tuple[Card, ...], ...]
    current_trick: Trick
    trump_suit: Suit
    trump_card: Card
    current_player_index: int
    dealer_index: int
    trick_count: int = 0
    collected_tricks: Tuple[Tuple[Trick, ...], ...] = ((), (), (), ())
    last_trick_winner: Optional[str] = None
    last_trick: Optional[Trick] = None
    is_vueltas: bool = False
    vueltas_baseline: Optional[Tuple[int, int]] = None
    vueltas_card_baseline: Optional[Tuple[int, int]] = None
    match_score: MatchScore = field(default_factory=MatchScore)
    partida_winner: Optional[int] = None
    rules: RuleSet = DEFAULT_RULES

    # Lookups -------------------------------------------------------------

    @property
    def current_player(self) -> Player:
        return self.players[self.current_player_index]

    def player_index(self, player_id: str) -> Optional[int]:
        for index, player in enumerate(self.players):
            if player.id == player_id:
                return index
        return None

    def hand_of(self, player_id: str) -> Tuple[Card, ...]:
        index = self.player_index(player_id)
        if index is None:
            return ()
        return self.hands[index]

    def team_index_of(self, player_id: str) -> Optional[int]:
        for index, team in enumerate(self.teams):
            if player_id in team.player_ids:
                return index
        return None

    def partner_of(self, player_id: str) -> Optional[str]:
        team_index = self.team_index_of(player_id)
        if team_index is None:
            return None
        others = [pid for pid in self.teams[team_index].player_ids if pid != player_id]
        return others[0] if others else None

    @property
    def last_trick_winner_team(self) -> Optional[int]:
        if self.last_trick_winner is None:
            return None
        return self.team_index_of(self.last_trick_winner)

    # Derived views -------------------------------------------------------

    @property
    def team_trick_piles(self) -> Tuple[Tuple[Trick, ...], ...]:
        """Collected tricks grouped by team, in seat order within each team."""
        piles = []
        for team in self.teams:
            pile: list[Trick] = []
            for seat, player in enumerate(self.players):
                if player.id in team.player_ids:
                    pile.extend(self.collected_tricks[seat])
            piles.append(tuple(pile))
        return tuple(piles)

    def effective_score(self, team_index: int) -> int:
        """Score used against the winning threshold (baseline included during vueltas)."""
        score = self.teams[team_index].score
        if self.is_vueltas and self.vueltas_baseline is not None:
            score += self.vueltas_baseline[team_index]
        return score

    def combined_card_points(self, team_index: int) -> int:
        points = self.teams[team_index].card_points
        if self.is_vueltas and self.vueltas_card_baseline is not None:
            points += self.vueltas_card_baseline[team_index]
        return points

    def cards_in_play(self) -> int:
        collected = sum(len(trick.plays) for pile in self.collected_tricks for trick in pile)
        return len(self.draw_pile) + sum(len(hand) for hand in self.hands) + len(self.current_trick.plays) + collected
