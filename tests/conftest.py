from dataclasses import replace
from typing import Optional, Sequence, Tuple

import pytest

from guinote.cards import Card, Rank, Suit, card_from_id
from guinote.game import build_teams, make_players
from guinote.rules_schema import DEFAULT_RULES
from guinote.state import GameState, Phase
from guinote.trick import Trick


def cards(*ids: str) -> Tuple[Card, ...]:
    return tuple(card_from_id(card_id) for card_id in ids)


def build_state(
    hands: Sequence[Sequence[str]],
    *,
    phase: Phase = Phase.ARRASTRE,
    trump: str = "oros",
    trump_card: Optional[str] = None,
    draw_pile: Sequence[str] = (),
    current: int = 0,
    plays: Sequence[Tuple[str, str]] = (),
    scores: Tuple[int, int] = (0, 0),
    card_points: Tuple[int, int] = (0, 0),
    rules=DEFAULT_RULES,
    **overrides,
) -> GameState:
    """Hand-built table for rule scenarios; card conservation is not enforced."""
    players = make_players()
    teams = tuple(
        replace(team, score=score, card_points=points)
        for team, score, points in zip(build_teams(players), scores, card_points)
    )
    trump_suit = Suit(trump)
    shown = card_from_id(trump_card) if trump_card else Card(trump_suit, Rank.DOS)
    leader = plays[0][0] if plays else players[current].id
    return GameState(
        phase=phase,
        players=players,
        teams=teams,
        draw_pile=cards(*draw_pile),
        hands=tuple(cards(*hand) for hand in hands),
        current_trick=Trick(leader=leader, plays=tuple((pid, card_from_id(cid)) for pid, cid in plays)),
        trump_suit=trump_suit,
        trump_card=shown,
        current_player_index=current,
        dealer_index=0,
        rules=rules,
        **overrides,
    )


@pytest.fixture
def state_builder():
    return build_state
