"""Structural invariant checks for game states.

These checks are an oracle for tests and development builds. Nothing in the
engine's control flow consults them; a failure points at an engine defect.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, FrozenSet, List, Optional

from .cards import Card
from .dealing import HAND_SIZE, NUM_PLAYERS
from .deck import DECK_SIZE
from .state import GameState, Phase
from .trick import TRICK_SIZE

MAX_HAND_CARD_POINTS = 130

VALID_TRANSITIONS: Dict[Phase, FrozenSet[Phase]] = {
    Phase.WAITING: frozenset({Phase.DEALING}),
    Phase.DEALING: frozenset({Phase.PLAYING}),
    Phase.PLAYING: frozenset({Phase.ARRASTRE, Phase.SCORING, Phase.GAME_OVER}),
    Phase.ARRASTRE: frozenset({Phase.SCORING, Phase.GAME_OVER}),
    Phase.SCORING: frozenset({Phase.DEALING, Phase.GAME_OVER}),
    Phase.GAME_OVER: frozenset(),
}


@dataclass
class ValidationResult:
    errors: List[str] = field(default_factory=list)

    @property
    def is_valid(self) -> bool:
        return not self.errors

    def extend(self, other: "ValidationResult") -> "ValidationResult":
        return ValidationResult(errors=self.errors + other.errors)


def _all_cards(state: GameState) -> List[Card]:
    cards: List[Card] = list(state.draw_pile)
    for hand in state.hands:
        cards.extend(hand)
    cards.extend(state.current_trick.cards())
    for pile in state.collected_tricks:
        for trick in pile:
            cards.extend(trick.cards())
    return cards


def validate(state: GameState) -> ValidationResult:
    """Check card conservation, phase/pile consistency and table structure."""
    errors: List[str] = []

    if state.phase is not Phase.WAITING:
        cards = _all_cards(state)
        if len(cards) != DECK_SIZE:
            errors.append(f"Card count is {len(cards)}, expected {DECK_SIZE}.")
        seen = set()
        duplicates = sorted({card.id for card in cards if card in seen or seen.add(card)})
        if duplicates:
            errors.append(f"Duplicate cards: {', '.join(duplicates)}.")

    if state.phase is Phase.ARRASTRE and state.draw_pile:
        errors.append("Arrastre phase with a non-empty draw pile.")
    if state.phase is Phase.PLAYING and not state.draw_pile:
        errors.append("Playing phase with an empty draw pile.")

    if len(state.current_trick.plays) > TRICK_SIZE:
        errors.append(f"Current trick holds {len(state.current_trick.plays)} cards.")
    for seat, hand in enumerate(state.hands):
        if len(hand) > HAND_SIZE:
            errors.append(f"Seat {seat} holds {len(hand)} cards.")

    total_card_points = sum(team.card_points for team in state.teams)
    if total_card_points > MAX_HAND_CARD_POINTS:
        errors.append(f"Card points total {total_card_points} exceeds {MAX_HAND_CARD_POINTS}.")

    if len(state.players) != NUM_PLAYERS:
        errors.append(f"Expected {NUM_PLAYERS} players, got {len(state.players)}.")
    if len(state.teams) != 2:
        errors.append(f"Expected 2 teams, got {len(state.teams)}.")
    for team in state.teams:
        if len(team.player_ids) != 2:
            errors.append(f"Team {team.id} has {len(team.player_ids)} players.")
    if len(state.hands) != len(state.players):
        errors.append("Hands do not match the number of players.")

    if not 0 <= state.current_player_index < NUM_PLAYERS:
        errors.append(f"Current player index {state.current_player_index} out of range.")
    if not 0 <= state.dealer_index < NUM_PLAYERS:
        errors.append(f"Dealer index {state.dealer_index} out of range.")

    if state.trump_card.suit is not state.trump_suit:
        errors.append(f"Trump card {state.trump_card} does not match trump suit {state.trump_suit}.")

    return ValidationResult(errors=errors)


def validate_transition(previous: GameState, current: GameState) -> ValidationResult:
    """Check the phase edge and monotonic counters between consecutive states."""
    errors: List[str] = []
    new_hand = previous.phase is Phase.SCORING and current.phase is Phase.DEALING

    if previous.phase is not current.phase and current.phase not in VALID_TRANSITIONS[previous.phase]:
        errors.append(f"Invalid phase transition {previous.phase} -> {current.phase}.")

    if not new_hand:
        for before, after in zip(previous.teams, current.teams):
            if after.score < before.score:
                errors.append(f"Team {after.id} score decreased from {before.score} to {after.score}.")
            if after.card_points < before.card_points:
                errors.append(
                    f"Team {after.id} card points decreased from {before.card_points} to {after.card_points}."
                )
        if current.trick_count < previous.trick_count:
            errors.append(f"Trick count decreased from {previous.trick_count} to {current.trick_count}.")

    return ValidationResult(errors=errors)


def check_sequence(states: List[GameState]) -> ValidationResult:
    """Validate every state and every consecutive pair."""
    result = ValidationResult()
    previous: Optional[GameState] = None
    for state in states:
        result = result.extend(validate(state))
        if previous is not None:
            result = result.extend(validate_transition(previous, state))
        previous = state
    return result
