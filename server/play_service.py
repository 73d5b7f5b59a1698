"""REST service to play Guiñote against bot partners and opponents."""

from __future__ import annotations

import logging
import threading
import uuid
from dataclasses import asdict, dataclass, field
from typing import Dict, List, Optional

from fastapi import FastAPI, HTTPException
from fastapi.middleware.cors import CORSMiddleware
from pydantic import BaseModel, Field

from bots.base import BotStrategy
from bots.bot_arena import advance_bots
from bots.random_bot import RandomBot
from guinote.codec import to_dict
from guinote.game import GameRuleError, make_players
from guinote.rules_schema import DEFAULT_RULES, RuleSet
from guinote.service import TableService
from guinote.session import GameSession

logger = logging.getLogger(__name__)


class StartRequest(BaseModel):
    seed: Optional[int] = None
    dealer_index: int = Field(0, ge=0, le=3)
    names: Optional[List[str]] = None
    human_seats: List[int] = Field(default_factory=lambda: [0])
    bot_seed: Optional[int] = None
    rules: Optional[RuleSet] = None


class PlayRequest(BaseModel):
    player_id: str
    card: Dict[str, object]


class MeldRequest(BaseModel):
    player_id: str
    suit: str


class PlayerRequest(BaseModel):
    player_id: str


@dataclass
class TableEntry:
    table: TableService
    human_ids: List[str]
    bots: List[BotStrategy] = field(default_factory=list)
    lock: threading.Lock = field(default_factory=threading.Lock, repr=False, compare=False)

    def advance(self) -> None:
        if self.bots:
            advance_bots(self.table.session, self.bots, self.human_ids)

    def view(self, perspective: Optional[str] = None) -> Dict[str, object]:
        if perspective is None and self.human_ids:
            perspective = self.human_ids[0]
        return asdict(self.table.get_table_view(perspective))


class SessionManager:
    """Owns the live tables for one app instance."""

    def __init__(self) -> None:
        self._entries: Dict[str, TableEntry] = {}
        self._lock = threading.Lock()

    def __len__(self) -> int:
        return len(self._entries)

    def create(self, request: StartRequest) -> tuple[str, TableEntry]:
        players = make_players(request.names)
        bad_seats = [seat for seat in request.human_seats if not 0 <= seat < len(players)]
        if bad_seats:
            raise ValueError(f"Unknown seats {bad_seats}; seats are 0-{len(players) - 1}")
        human_ids = [players[seat].id for seat in dict.fromkeys(request.human_seats)]
        session = GameSession(
            players=players,
            seed=request.seed,
            dealer_index=request.dealer_index,
            rules=request.rules or DEFAULT_RULES,
        )
        bot = RandomBot(request.bot_seed)
        entry = TableEntry(table=TableService(session), human_ids=human_ids, bots=[bot] * len(players))
        session_id = uuid.uuid4().hex
        with self._lock:
            self._entries[session_id] = entry
        logger.info(f"Created session {session_id} (humans={human_ids})")
        return session_id, entry

    def get(self, session_id: str) -> TableEntry:
        with self._lock:
            entry = self._entries.get(session_id)
        if entry is None:
            raise KeyError(session_id)
        return entry

    def remove(self, session_id: str) -> None:
        with self._lock:
            self._entries.pop(session_id, None)


def create_app(manager: Optional[SessionManager] = None) -> FastAPI:
    manager = manager or SessionManager()
    app = FastAPI(title="Guiñote Play Service")
    app.state.manager = manager
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    def ensure_session(session_id: str) -> TableEntry:
        try:
            return manager.get(session_id)
        except KeyError:
            raise HTTPException(status_code=404, detail="Session not found")

    def run_action(entry: TableEntry, action, perspective: Optional[str] = None) -> Dict[str, object]:
        with entry.lock:
            try:
                action()
                entry.advance()
            except (GameRuleError, KeyError, ValueError) as exc:
                raise HTTPException(status_code=400, detail=str(exc))
            return {"state": entry.view(perspective)}

    @app.post("/session/start")
    def start_session(request: StartRequest) -> Dict[str, object]:
        try:
            session_id, entry = manager.create(request)
        except ValueError as exc:
            raise HTTPException(status_code=400, detail=str(exc))
        return {"session_id": session_id, "state": entry.view()}

    @app.get("/session/{session_id}")
    def get_view(session_id: str, perspective: Optional[str] = None) -> Dict[str, object]:
        entry = ensure_session(session_id)
        try:
            with entry.lock:
                return {"state": entry.view(perspective)}
        except KeyError:
            raise HTTPException(status_code=404, detail="Player not found")

    @app.get("/session/{session_id}/snapshot")
    def snapshot(session_id: str) -> Dict[str, object]:
        entry = ensure_session(session_id)
        with entry.lock:
            return {"snapshot": to_dict(entry.table.state)}

    @app.post("/session/{session_id}/begin")
    def begin(session_id: str) -> Dict[str, object]:
        entry = ensure_session(session_id)
        return run_action(entry, entry.table.begin_play)

    @app.post("/session/{session_id}/play")
    def play(session_id: str, request: PlayRequest) -> Dict[str, object]:
        entry = ensure_session(session_id)
        return run_action(
            entry, lambda: entry.table.play_card(request.player_id, request.card), request.player_id
        )

    @app.post("/session/{session_id}/meld")
    def meld(session_id: str, request: MeldRequest) -> Dict[str, object]:
        entry = ensure_session(session_id)
        return run_action(
            entry, lambda: entry.table.declare_meld(request.player_id, request.suit), request.player_id
        )

    @app.post("/session/{session_id}/exchange")
    def exchange(session_id: str, request: PlayerRequest) -> Dict[str, object]:
        entry = ensure_session(session_id)
        return run_action(
            entry, lambda: entry.table.exchange_trump_seven(request.player_id), request.player_id
        )

    @app.post("/session/{session_id}/next-hand")
    def next_hand(session_id: str) -> Dict[str, object]:
        entry = ensure_session(session_id)
        return run_action(entry, entry.table.next_hand)

    @app.post("/session/{session_id}/hints/ack")
    def acknowledge(session_id: str) -> Dict[str, object]:
        entry = ensure_session(session_id)
        with entry.lock:
            entry.table.acknowledge_hints()
            return {"state": entry.view()}

    @app.delete("/session/{session_id}")
    def close(session_id: str) -> Dict[str, object]:
        ensure_session(session_id)
        manager.remove(session_id)
        return {"closed": session_id}

    return app


app = create_app()
