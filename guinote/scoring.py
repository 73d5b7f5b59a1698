"""Trick, hand and match scoring helpers for Guiñote."""

from __future__ import annotations

import logging
from dataclasses import replace
from typing import Iterable, Optional

from .cards import Suit
from .rules_schema import RuleSet
from .state import GameState, MatchScore
from .trick import Trick, TrickResult

logger = logging.getLogger(__name__)


def calculate_hand_points(tricks: Iterable[Trick]) -> int:
    """Card points contained in a pile of collected tricks."""
    return sum(trick.points() for trick in tricks)


def meld_value(suit: Suit, trump: Suit, rules: RuleSet) -> int:
    return rules.melds.trump_points if suit is trump else rules.melds.plain_points


def apply_trick_scoring(state: GameState, result: TrickResult) -> GameState:
    """Credit a completed trick to the winner's team and move it off the table."""
    seat = state.player_index(result.winner_id)
    team_index = state.team_index_of(result.winner_id)
    if seat is None or team_index is None:
        logger.warning(f"No team found for trick winner {result.winner_id!r}; trick left unscored")
        return state

    team = state.teams[team_index]
    teams = list(state.teams)
    teams[team_index] = replace(
        team,
        score=team.score + result.points,
        card_points=team.card_points + result.points,
    )

    collected = list(state.collected_tricks)
    collected[seat] = collected[seat] + (result.trick,)

    return replace(
        state,
        teams=tuple(teams),
        collected_tricks=tuple(collected),
        current_trick=Trick(leader=result.winner_id),
        trick_count=state.trick_count + 1,
        last_trick_winner=result.winner_id,
        last_trick=result.trick,
    )


def apply_last_trick_bonus(state: GameState, team_index: int) -> GameState:
    """Add the diez de últimas to the team that took the final trick."""
    if not 0 <= team_index < len(state.teams):
        logger.warning(f"Last-trick bonus for unknown team index {team_index}; ignored")
        return state
    bonus = state.rules.scoring.last_trick_bonus
    team = state.teams[team_index]
    teams = list(state.teams)
    teams[team_index] = replace(team, score=team.score + bonus, card_points=team.card_points + bonus)
    return replace(state, teams=tuple(teams))


def meets_card_point_minimum(state: GameState, team_index: int) -> bool:
    return state.combined_card_points(team_index) >= state.rules.scoring.minimum_card_points


# Match progression ---------------------------------------------------------


def update_match_score(match_score: MatchScore, winner_index: int, rules: RuleSet) -> MatchScore:
    """Award a partida; a completed coto resets both partida counters."""
    partidas = list(match_score.partidas)
    cotos = list(match_score.cotos)
    partidas[winner_index] += 1
    if partidas[winner_index] >= rules.match.partidas_per_coto:
        cotos[winner_index] += 1
        partidas = [0, 0]
    return MatchScore(partidas=(partidas[0], partidas[1]), cotos=(cotos[0], cotos[1]))


def match_winner(match_score: MatchScore, rules: RuleSet) -> Optional[int]:
    for index, cotos in enumerate(match_score.cotos):
        if cotos >= rules.match.cotos_per_match:
            return index
    return None


def is_match_complete(match_score: MatchScore, rules: RuleSet) -> bool:
    return match_winner(match_score, rules) is not None
