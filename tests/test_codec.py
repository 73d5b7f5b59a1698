import json
from dataclasses import replace

import pytest
from pydantic import ValidationError

from bots.base import BotStrategy
from bots.bot_arena import play_hand
from guinote.codec import decode_state, dumps, encode_state, loads, to_dict
from guinote.session import GameSession
from guinote.state import Phase


@pytest.fixture(scope="module")
def played_session():
    session = GameSession(seed=21)
    play_hand(session, [BotStrategy(), BotStrategy()])
    session.next_hand()
    session.begin_play()
    return session


def test_round_trip_preserves_every_state(played_session):
    for state in played_session.history[::7] + [played_session.state]:
        assert decode_state(encode_state(state)) == state
        assert loads(dumps(state)) == state


def test_mappings_are_written_as_ordered_records(played_session):
    payload = json.loads(dumps(played_session.history[-1]))
    assert [record["player_id"] for record in payload["hands"]] == ["p0", "p1", "p2", "p3"]
    assert [record["team_id"] for record in payload["match_score"]["partidas"]] == ["team1", "team2"]
    assert payload["phase"] == "playing"
    assert isinstance(payload["draw_pile"][0], str)


def test_decode_rejects_missing_player_records(played_session):
    payload = to_dict(played_session.state)
    payload["hands"] = payload["hands"][:3]
    with pytest.raises(ValidationError):
        decode_state(payload)


def test_decode_rejects_unknown_card_ids(played_session):
    payload = to_dict(played_session.state)
    payload["draw_pile"] = ["oros_9"] + payload["draw_pile"][1:]
    with pytest.raises(ValidationError):
        decode_state(payload)


def test_finished_match_phase_is_written_as_game_over(played_session):
    finished = replace(played_session.state, phase=Phase.GAME_OVER, partida_winner=0)
    payload = to_dict(finished)
    assert payload["phase"] == "gameOver"
    assert decode_state(payload) == finished
