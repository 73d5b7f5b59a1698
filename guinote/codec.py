"""Persistence codec for ``GameState``.

Per-player and per-team fields are written as ordered lists of key/value
records (``player_id`` or ``team_id`` plus the value) so that key sets and
ordering are explicit on the wire. ``decode_state(encode_state(s)) == s``
holds for every state the engine produces.
"""

from __future__ import annotations

from typing import Annotated, Any, Dict, List, Mapping, Optional, Sequence, Tuple, Union

from pydantic import AfterValidator, BaseModel, ConfigDict, Field, model_validator

from .cards import Card, Suit, card_from_id
from .rules_schema import DEFAULT_RULES, RuleSet
from .state import GameState, MatchScore, Meld, Phase, Player, Team
from .trick import Trick

CODEC_VERSION = 1


def _check_card_id(value: str) -> str:
    card_from_id(value)
    return value


CardId = Annotated[str, AfterValidator(_check_card_id)]


class _Record(BaseModel):
    model_config = ConfigDict(frozen=True, extra="forbid")


class PlayRecord(_Record):
    player_id: str
    card: CardId


class TrickRecord(_Record):
    leader: str
    plays: List[PlayRecord] = Field(default_factory=list)


class PlayerRecord(_Record):
    id: str
    name: str
    team_id: str
    is_bot: bool = False


class MeldRecord(_Record):
    team_id: str
    player_id: str
    suit: Suit
    points: int


class TeamRecord(_Record):
    id: str
    player_ids: List[str]
    score: int = 0
    card_points: int = 0
    melds: List[MeldRecord] = Field(default_factory=list)


class HandRecord(_Record):
    player_id: str
    cards: List[CardId]


class CollectedRecord(_Record):
    player_id: str
    tricks: List[TrickRecord]


class TeamPileRecord(_Record):
    team_id: str
    tricks: List[TrickRecord]


class TeamValueRecord(_Record):
    team_id: str
    value: int


class MatchScoreRecord(_Record):
    partidas: List[TeamValueRecord]
    cotos: List[TeamValueRecord]


class StateRecord(_Record):
    version: int = CODEC_VERSION
    phase: Phase
    players: List[PlayerRecord]
    teams: List[TeamRecord]
    draw_pile: List[CardId]
    hands: List[HandRecord]
    current_trick: TrickRecord
    trump_suit: Suit
    trump_card: CardId
    current_player_index: int
    dealer_index: int
    trick_count: int = 0
    collected_tricks: List[CollectedRecord]
    # Derived from collected_tricks; written for readers, ignored on decode.
    team_trick_piles: List[TeamPileRecord] = Field(default_factory=list)
    last_trick_winner: Optional[str] = None
    last_trick: Optional[TrickRecord] = None
    is_vueltas: bool = False
    vueltas_baseline: Optional[List[TeamValueRecord]] = None
    vueltas_card_baseline: Optional[List[TeamValueRecord]] = None
    match_score: MatchScoreRecord
    partida_winner: Optional[int] = None
    rules: RuleSet = DEFAULT_RULES

    @model_validator(mode="after")
    def check_keys(self) -> "StateRecord":
        player_ids = [player.id for player in self.players]
        team_ids = [team.id for team in self.teams]
        if [record.player_id for record in self.hands] != player_ids:
            raise ValueError("Hand records must list every player once, in seat order.")
        if [record.player_id for record in self.collected_tricks] != player_ids:
            raise ValueError("Collected-trick records must list every player once, in seat order.")
        for name in ("vueltas_baseline", "vueltas_card_baseline"):
            values = getattr(self, name)
            if values is not None and [record.team_id for record in values] != team_ids:
                raise ValueError(f"{name} records must list every team once, in team order.")
        for name in ("partidas", "cotos"):
            values = getattr(self.match_score, name)
            if [record.team_id for record in values] != team_ids:
                raise ValueError(f"match_score.{name} records must list every team once, in team order.")
        return self


# Encoding ------------------------------------------------------------------


def _encode_trick(trick: Trick) -> TrickRecord:
    return TrickRecord(
        leader=trick.leader,
        plays=[PlayRecord(player_id=player, card=card.id) for player, card in trick.plays],
    )


def _team_values(teams: Sequence[Team], values: Sequence[int]) -> List[TeamValueRecord]:
    return [TeamValueRecord(team_id=team.id, value=value) for team, value in zip(teams, values)]


def encode_state(state: GameState) -> StateRecord:
    players = [
        PlayerRecord(id=p.id, name=p.name, team_id=p.team_id, is_bot=p.is_bot) for p in state.players
    ]
    teams = [
        TeamRecord(
            id=team.id,
            player_ids=list(team.player_ids),
            score=team.score,
            card_points=team.card_points,
            melds=[
                MeldRecord(team_id=m.team_id, player_id=m.player_id, suit=m.suit, points=m.points)
                for m in team.melds
            ],
        )
        for team in state.teams
    ]
    return StateRecord(
        phase=state.phase,
        players=players,
        teams=teams,
        draw_pile=[card.id for card in state.draw_pile],
        hands=[
            HandRecord(player_id=player.id, cards=[card.id for card in hand])
            for player, hand in zip(state.players, state.hands)
        ],
        current_trick=_encode_trick(state.current_trick),
        trump_suit=state.trump_suit,
        trump_card=state.trump_card.id,
        current_player_index=state.current_player_index,
        dealer_index=state.dealer_index,
        trick_count=state.trick_count,
        collected_tricks=[
            CollectedRecord(player_id=player.id, tricks=[_encode_trick(t) for t in pile])
            for player, pile in zip(state.players, state.collected_tricks)
        ],
        team_trick_piles=[
            TeamPileRecord(team_id=team.id, tricks=[_encode_trick(t) for t in pile])
            for team, pile in zip(state.teams, state.team_trick_piles)
        ],
        last_trick_winner=state.last_trick_winner,
        last_trick=_encode_trick(state.last_trick) if state.last_trick is not None else None,
        is_vueltas=state.is_vueltas,
        vueltas_baseline=(
            _team_values(state.teams, state.vueltas_baseline) if state.vueltas_baseline is not None else None
        ),
        vueltas_card_baseline=(
            _team_values(state.teams, state.vueltas_card_baseline)
            if state.vueltas_card_baseline is not None
            else None
        ),
        match_score=MatchScoreRecord(
            partidas=_team_values(state.teams, state.match_score.partidas),
            cotos=_team_values(state.teams, state.match_score.cotos),
        ),
        partida_winner=state.partida_winner,
        rules=state.rules,
    )


# Decoding ------------------------------------------------------------------


def _cards(ids: Sequence[str]) -> Tuple[Card, ...]:
    return tuple(card_from_id(card_id) for card_id in ids)


def _decode_trick(record: TrickRecord) -> Trick:
    return Trick(
        leader=record.leader,
        plays=tuple((play.player_id, card_from_id(play.card)) for play in record.plays),
    )


def _pair(values: Sequence[TeamValueRecord]) -> Tuple[int, int]:
    return (values[0].value, values[1].value)


def decode_state(payload: Union[StateRecord, Mapping[str, Any]]) -> GameState:
    record = payload if isinstance(payload, StateRecord) else StateRecord.model_validate(payload)
    players = tuple(
        Player(id=p.id, name=p.name, team_id=p.team_id, is_bot=p.is_bot) for p in record.players
    )
    teams = tuple(
        Team(
            id=t.id,
            player_ids=tuple(t.player_ids),
            score=t.score,
            card_points=t.card_points,
            melds=tuple(
                Meld(team_id=m.team_id, player_id=m.player_id, suit=m.suit, points=m.points) for m in t.melds
            ),
        )
        for t in record.teams
    )
    return GameState(
        phase=record.phase,
        players=players,
        teams=teams,
        draw_pile=_cards(record.draw_pile),
        hands=tuple(_cards(hand.cards) for hand in record.hands),
        current_trick=_decode_trick(record.current_trick),
        trump_suit=record.trump_suit,
        trump_card=card_from_id(record.trump_card),
        current_player_index=record.current_player_index,
        dealer_index=record.dealer_index,
        trick_count=record.trick_count,
        collected_tricks=tuple(
            tuple(_decode_trick(t) for t in pile.tricks) for pile in record.collected_tricks
        ),
        last_trick_winner=record.last_trick_winner,
        last_trick=_decode_trick(record.last_trick) if record.last_trick is not None else None,
        is_vueltas=record.is_vueltas,
        vueltas_baseline=_pair(record.vueltas_baseline) if record.vueltas_baseline is not None else None,
        vueltas_card_baseline=(
            _pair(record.vueltas_card_baseline) if record.vueltas_card_baseline is not None else None
        ),
        match_score=MatchScore(
            partidas=_pair(record.match_score.partidas),
            cotos=_pair(record.match_score.cotos),
        ),
        partida_winner=record.partida_winner,
        rules=record.rules,
    )


def to_dict(state: GameState) -> Dict[str, Any]:
    return encode_state(state).model_dump(mode="json")


def dumps(state: GameState) -> str:
    return encode_state(state).model_dump_json()


def loads(text: Union[str, bytes]) -> GameState:
    return decode_state(StateRecord.model_validate_json(text))
