"""Convenience service layer for UI and bot consumers."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional, Sequence, Tuple

from .cards import Card, Suit, card_label, deserialize_card, serialize_card
from .dealing import post_trick_order
from .game import can_exchange_trump_seven, meldable_suits
from .mechanics import legal_moves
from .session import ActionKind, GameSession
from .state import GameState
from .trick import Trick


@dataclass(frozen=True)
class UIHints:
    """Presentation-only projection: who took the last trick and what was drawn after it."""

    pending_trick_winner: Optional[str] = None
    pending_draws: Tuple[Tuple[str, Card], ...] = ()

    def is_empty(self) -> bool:
        return self.pending_trick_winner is None and not self.pending_draws


def trick_draws(before: GameState, after: GameState) -> Tuple[Tuple[str, Card], ...]:
    """Cards drawn when ``after`` completed the trick that was in progress in ``before``."""
    if after.trick_count != before.trick_count + 1 or after.last_trick_winner is None:
        return ()
    winner_seat = after.player_index(after.last_trick_winner)
    if winner_seat is None:
        return ()
    draws = []
    for seat in post_trick_order(winner_seat):
        held = set(before.hands[seat])
        draws.extend((after.players[seat].id, card) for card in after.hands[seat] if card not in held)
    return tuple(draws)


def ui_hints(state: GameState, history: Sequence[GameState] = ()) -> UIHints:
    """Derive animation hints from the authoritative state.

    Hints exist between the end of a trick and the first card of the next one.
    Draws are recovered from ``history`` (oldest first, ending at ``state``);
    without it only the trick winner is reported.
    """
    if state.trick_count == 0 or not state.current_trick.is_empty():
        return UIHints()
    draws: Tuple[Tuple[str, Card], ...] = ()
    for index in range(len(history) - 1, 0, -1):
        after, before = history[index], history[index - 1]
        if after.trick_count == state.trick_count and before.trick_count == state.trick_count - 1:
            draws = trick_draws(before, after)
            break
    return UIHints(pending_trick_winner=state.last_trick_winner, pending_draws=draws)


@dataclass
class TrickPlayView:
    player: str
    card: dict
    label: str


@dataclass
class TrickView:
    leader: str
    plays: list[TrickPlayView]


@dataclass
class TeamView:
    id: str
    player_ids: list[str]
    score: int
    card_points: int
    effective_score: int
    melds: list[dict]


@dataclass
class HintsView:
    pending_trick_winner: Optional[str] = None
    pending_draws: list[dict] = field(default_factory=list)


@dataclass
class TableView:
    phase: str
    perspective: str
    current_player: str
    dealer: str
    trump_suit: str
    trump_card: dict
    draw_pile_size: int
    hand: list[dict]
    hand_labels: list[str]
    legal_moves: list[dict]
    legal_move_labels: list[str]
    meldable_suits: list[str]
    can_exchange_seven: bool
    hand_sizes: dict[str, int]
    trick: Optional[TrickView]
    last_trick: Optional[TrickView]
    teams: list[TeamView]
    is_vueltas: bool
    vueltas_baseline: Optional[list[int]]
    match_score: dict
    partida_winner: Optional[str]
    hints: HintsView


def _trick_view(trick: Trick) -> TrickView:
    return TrickView(
        leader=trick.leader,
        plays=[TrickPlayView(player=p, card=serialize_card(c), label=card_label(c)) for p, c in trick.plays],
    )


class TableService:
    """Facade around GameSession for UI consumers."""

    def __init__(self, session: Optional[GameSession] = None) -> None:
        self.session = session or GameSession()
        self._acknowledged: Optional[tuple] = None

    @property
    def state(self) -> GameState:
        return self.session.state

    # Actions -----------------------------------------------------------

    def begin_play(self) -> TableView:
        self.session.begin_play()
        return self.get_table_view()

    def play_card(self, player_id: str, card_payload: dict) -> TableView:
        card = deserialize_card(card_payload)
        self.session.play_card(player_id, card)
        return self.get_table_view(player_id)

    def declare_meld(self, player_id: str, suit: str) -> TableView:
        self.session.declare_meld(player_id, Suit(suit))
        return self.get_table_view(player_id)

    def exchange_trump_seven(self, player_id: str) -> TableView:
        self.session.exchange_trump_seven(player_id)
        return self.get_table_view(player_id)

    def next_hand(self) -> TableView:
        self.session.next_hand()
        return self.get_table_view()

    # Hints -------------------------------------------------------------

    def _hint_key(self) -> tuple:
        hands_started = sum(1 for action in self.session.actions if action.kind is ActionKind.NEXT_HAND)
        return (hands_started, self.state.trick_count)

    def current_hints(self) -> UIHints:
        """Hints for the latest trick, hidden once acknowledged."""
        if self._acknowledged == self._hint_key():
            return UIHints()
        return ui_hints(self.state, self.session.history)

    def acknowledge_hints(self) -> None:
        self._acknowledged = self._hint_key()

    # Views -------------------------------------------------------------

    def get_table_view(self, perspective: Optional[str] = None) -> TableView:
        state = self.state
        player_id = perspective if perspective is not None else state.current_player.id
        if state.player_index(player_id) is None:
            raise KeyError(f"Unknown player {player_id!r}")

        hand = list(state.hand_of(player_id))
        moves: list[Card] = legal_moves(state, player_id) if state.current_player.id == player_id else []
        hints = self.current_hints()
        winner = state.partida_winner

        return TableView(
            phase=state.phase.value,
            perspective=player_id,
            current_player=state.current_player.id,
            dealer=state.players[state.dealer_index].id,
            trump_suit=state.trump_suit.value,
            trump_card=serialize_card(state.trump_card),
            draw_pile_size=len(state.draw_pile),
            hand=[serialize_card(card) for card in hand],
            hand_labels=[card_label(card) for card in hand],
            legal_moves=[serialize_card(card) for card in moves],
            legal_move_labels=[card_label(card) for card in moves],
            meldable_suits=[suit.value for suit in meldable_suits(state, player_id)],
            can_exchange_seven=can_exchange_trump_seven(state, player_id),
            hand_sizes={player.id: len(cards) for player, cards in zip(state.players, state.hands)},
            trick=None if state.current_trick.is_empty() else _trick_view(state.current_trick),
            last_trick=_trick_view(state.last_trick) if state.last_trick is not None else None,
            teams=[
                TeamView(
                    id=team.id,
                    player_ids=list(team.player_ids),
                    score=team.score,
                    card_points=team.card_points,
                    effective_score=state.effective_score(index),
                    melds=[{"suit": m.suit.value, "points": m.points, "player": m.player_id} for m in team.melds],
                )
                for index, team in enumerate(state.teams)
            ],
            is_vueltas=state.is_vueltas,
            vueltas_baseline=list(state.vueltas_baseline) if state.vueltas_baseline is not None else None,
            match_score={
                "partidas": list(state.match_score.partidas),
                "cotos": list(state.match_score.cotos),
            },
            partida_winner=state.teams[winner].id if winner is not None else None,
            hints=HintsView(
                pending_trick_winner=hints.pending_trick_winner,
                pending_draws=[{"player": p, "card": serialize_card(c)} for p, c in hints.pending_draws],
            ),
        )
