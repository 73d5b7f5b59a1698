"""Match sessions: a seeded game plus its action log.

A ``GameSession`` owns one match. Replaying the same actions from the same
seed reproduces the same states, which is what remote clients rely on to
detect divergence.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum
from random import Random
from typing import Iterable, List, Optional, Sequence

from .cards import Card, Suit, card_from_id
from .game import (
    begin_play,
    continue_from_scoring,
    create_initial_game_state,
    declare_meld,
    exchange_trump_seven,
    make_players,
    play_card,
)
from .rules_schema import DEFAULT_RULES, RuleSet
from .state import GameState, Phase, Player
from .validator import validate, validate_transition

logger = logging.getLogger(__name__)


class ActionKind(Enum):
    BEGIN_PLAY = "begin_play"
    PLAY_CARD = "play_card"
    DECLARE_MELD = "declare_meld"
    EXCHANGE_SEVEN = "exchange_seven"
    NEXT_HAND = "next_hand"


@dataclass(frozen=True)
class Action:
    kind: ActionKind
    player_id: Optional[str] = None
    card_id: Optional[str] = None
    suit: Optional[Suit] = None

    def card(self) -> Card:
        if self.card_id is None:
            raise ValueError(f"{self.kind.value} action carries no card.")
        return card_from_id(self.card_id)


def apply_action(state: GameState, action: Action, rng: Optional[Random] = None) -> GameState:
    """Dispatch one recorded action to the matching engine function."""
    if action.kind is ActionKind.BEGIN_PLAY:
        return begin_play(state)
    if action.kind is ActionKind.NEXT_HAND:
        return continue_from_scoring(state, rng=rng)
    if action.player_id is None:
        raise ValueError(f"{action.kind.value} action requires a player id.")
    if action.kind is ActionKind.PLAY_CARD:
        return play_card(state, action.player_id, action.card())
    if action.kind is ActionKind.DECLARE_MELD:
        if action.suit is None:
            raise ValueError("declare_meld action requires a suit.")
        return declare_meld(state, action.player_id, action.suit)
    if action.kind is ActionKind.EXCHANGE_SEVEN:
        return exchange_trump_seven(state, action.player_id)
    raise ValueError(f"Unknown action kind {action.kind!r}")


@dataclass
class GameSession:
    """Track one match: current state, state history and the accepted actions."""

    players: Sequence[Player] = field(default_factory=make_players)
    seed: Optional[int] = None
    dealer_index: int = 0
    rules: RuleSet = DEFAULT_RULES
    validate_states: bool = False
    rng: Random = field(init=False)
    state: GameState = field(init=False)
    history: List[GameState] = field(init=False)
    actions: List[Action] = field(default_factory=list)
    violations: List[str] = field(default_factory=list)

    def __post_init__(self) -> None:
        self.players = tuple(self.players)
        self.rng = Random(self.seed)
        self.state = create_initial_game_state(
            self.players, self.dealer_index, rng=self.rng, rules=self.rules
        )
        self.history = [self.state]
        logger.info(f"Session started (seed={self.seed}, dealer={self.dealer_index}, trump={self.state.trump_card})")

    # Actions -----------------------------------------------------------

    def apply(self, action: Action) -> GameState:
        """Apply an action; rule errors propagate and leave the session untouched."""
        new_state = apply_action(self.state, action, rng=self.rng)
        self._commit(action, new_state)
        return new_state

    def begin_play(self) -> GameState:
        return self.apply(Action(ActionKind.BEGIN_PLAY))

    def play_card(self, player_id: str, card: Card) -> GameState:
        return self.apply(Action(ActionKind.PLAY_CARD, player_id=player_id, card_id=card.id))

    def declare_meld(self, player_id: str, suit: Suit) -> GameState:
        return self.apply(Action(ActionKind.DECLARE_MELD, player_id=player_id, suit=suit))

    def exchange_trump_seven(self, player_id: str) -> GameState:
        return self.apply(Action(ActionKind.EXCHANGE_SEVEN, player_id=player_id))

    def next_hand(self) -> GameState:
        return self.apply(Action(ActionKind.NEXT_HAND))

    # Status ------------------------------------------------------------

    @property
    def is_over(self) -> bool:
        return self.state.phase is Phase.GAME_OVER

    @property
    def hands_played(self) -> int:
        return sum(
            1
            for state in self.history
            if state.phase in (Phase.SCORING, Phase.GAME_OVER)
        )

    # Internals ---------------------------------------------------------

    def _commit(self, action: Action, new_state: GameState) -> None:
        previous = self.state
        if self.validate_states:
            result = validate(new_state).extend(validate_transition(previous, new_state))
            for error in result.errors:
                logger.error(f"Invariant violated after {action.kind.value}: {error}")
                self.violations.append(error)
        self.state = new_state
        self.history.append(new_state)
        self.actions.append(action)
        if new_state.phase is not previous.phase:
            logger.info(f"Phase {previous.phase} -> {new_state.phase}")
        else:
            logger.debug(f"Applied {action.kind.value} by {action.player_id}")


def replay(
    actions: Iterable[Action],
    *,
    players: Optional[Sequence[Player]] = None,
    seed: Optional[int] = None,
    dealer_index: int = 0,
    rules: RuleSet = DEFAULT_RULES,
) -> GameSession:
    """Rebuild a session by applying ``actions`` from a fresh seeded start."""
    session = GameSession(
        players=players if players is not None else make_players(),
        seed=seed,
        dealer_index=dealer_index,
        rules=rules,
    )
    for action in actions:
        session.apply(action)
    return session
