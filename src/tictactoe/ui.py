"""FastAPI JSON interface that drives a tic-tac-toe game against the engine."""

from __future__ import annotations

import logging
import random
import threading
import time
import uuid
from dataclasses import dataclass, field
from typing import Dict, List, Literal, Optional, Tuple

from fastapi import BackgroundTasks, FastAPI, HTTPException
from pydantic import BaseModel, ConfigDict, Field, field_validator

from .ai import UNLIMITED_DEPTH, SearchEngine
from .game import Board, Mark, X, other

logger = logging.getLogger(__name__)

CENTER = 4


@dataclass
class GameSession:
    """Container for an active game and, in single player mode, its engine."""

    board: Board
    engine: Optional[SearchEngine]
    game_type: str
    current_player: Mark = X
    human_mark: Optional[Mark] = None
    move_log: List[Dict[str, int | str]] = field(default_factory=list)
    ai_pending: bool = False
    lock: threading.Lock = field(default_factory=threading.Lock, repr=False)

    @property
    def engine_mark(self) -> Optional[Mark]:
        if self.engine is None or self.human_mark is None:
            return None
        return other(self.human_mark)


SESSIONS: Dict[str, GameSession] = {}
app = FastAPI(title="Tic-Tac-Toe", description="Tic-tac-toe against a minimax engine")


ALLOWED_DEPTHS: Tuple[int, ...] = (UNLIMITED_DEPTH, 1, 2, 3, 4, 5, 6, 7, 8, 9)
AI_THINK_DELAY: Tuple[float, float] = (0.3, 0.8)


class NewGameRequest(BaseModel):
    """Request payload for starting a new game."""

    model_config = ConfigDict(populate_by_name=True)

    depth: int = Field(
        default=UNLIMITED_DEPTH,
        ge=-1,
        le=9,
        description="Search depth limit; -1 searches to the end of the game",
    )
    starting_player: Literal["human", "computer"] = Field(
        default="human", alias="startingPlayer"
    )
    game_type: Literal["single", "multi"] = Field(default="single", alias="gameType")

    @field_validator("depth")
    @classmethod
    def ensure_supported_depth(cls, value: int) -> int:
        if value not in ALLOWED_DEPTHS:
            raise ValueError(
                f"Unsupported search depth {value}. "
                f"Choose one of {', '.join(map(str, ALLOWED_DEPTHS))}."
            )
        return value


class MoveRequest(BaseModel):
    """Request payload for submitting a move on an existing game."""

    model_config = ConfigDict(populate_by_name=True)

    cell_index: int = Field(alias="cellIndex", ge=0, le=8)


def _record_move(session: GameSession, player: Mark, cell_index: int) -> None:
    session.move_log.append({"player": player, "cellIndex": cell_index})
    session.current_player = other(player)


def _create_session(request: NewGameRequest) -> Tuple[str, GameSession]:
    """Create a new game session and register it for later access."""

    board = Board()
    if request.game_type == "multi":
        session = GameSession(board=board, engine=None, game_type="multi")
    else:
        # The side that moves first plays x, the maximizer.
        human_starts = request.starting_player == "human"
        session = GameSession(
            board=board,
            engine=SearchEngine(max_depth=request.depth),
            game_type="single",
            human_mark=X if human_starts else other(X),
        )
        if not human_starts:
            board.insert(X, CENTER)
            _record_move(session, X, CENTER)

    session_id = uuid.uuid4().hex
    SESSIONS[session_id] = session
    logger.info(
        "Created %s player game %s (depth %d, human plays %s)",
        session.game_type,
        session_id,
        request.depth,
        session.human_mark or "both",
    )
    return session_id, session


def _get_session(game_id: str) -> GameSession:
    try:
        return SESSIONS[game_id]
    except KeyError as exc:
        raise HTTPException(status_code=404, detail="Game not found") from exc


def _run_ai_turn(game_id: str) -> None:
    session = SESSIONS.get(game_id)
    if not session:
        return

    time.sleep(max(0.0, random.uniform(*AI_THINK_DELAY)))

    with session.lock:
        try:
            mark = session.engine_mark
            if session.engine is None or mark is None:
                return
            if session.board.terminal_state():
                return
            if session.current_player != mark:
                return

            def apply(index: int) -> None:
                board = session.board
                if not board.insert(mark, index):
                    # The pair shortcut can name a taken cell; play the
                    # lowest free cell instead.
                    fallback = board.available_moves()[0]
                    logger.warning(
                        "Engine chose occupied cell %d in game %s; playing %d instead",
                        index,
                        game_id,
                        fallback,
                    )
                    index = fallback
                    board.insert(mark, index)
                _record_move(session, mark, index)
                logger.info("Engine played %s at %d in game %s", mark, index, game_id)

            session.engine.best_move(session.board, mark == X, apply)
        finally:
            session.ai_pending = False


def _serialize_session(game_id: str, session: GameSession) -> Dict[str, object]:
    with session.lock:
        board = session.board
        result = board.terminal_state()

        state: Dict[str, object] = {
            "id": game_id,
            "gameType": session.game_type,
            "depth": session.engine.max_depth if session.engine else None,
            "cells": list(board.cells),
            "currentPlayer": session.current_player,
            "humanMark": session.human_mark,
            "engineMark": session.engine_mark,
            "result": result.to_dict(),
            "availableMoves": [] if result else board.available_moves(),
            "moveLog": list(session.move_log),
            "aiPending": session.ai_pending,
        }
        if session.move_log:
            state["lastMove"] = session.move_log[-1]
        return state


def _reject(game_id: str, detail: str) -> HTTPException:
    logger.warning("Rejected move in game %s: %s", game_id, detail)
    return HTTPException(status_code=400, detail=detail)


def _apply_player_move(
    game_id: str,
    session: GameSession,
    cell_index: int,
    background_tasks: Optional[BackgroundTasks] = None,
) -> None:
    should_schedule_ai = False
    with session.lock:
        board = session.board
        if board.terminal_state():
            raise _reject(game_id, "Game already finished")

        if session.ai_pending:
            raise _reject(game_id, "Engine is completing its move")

        player = session.current_player
        if session.human_mark is not None and player != session.human_mark:
            raise _reject(game_id, "It is not your turn")

        if not board.insert(player, cell_index):
            raise _reject(game_id, "Cell is already occupied")

        _record_move(session, player, cell_index)
        logger.info("Player %s played %d in game %s", player, cell_index, game_id)

        should_schedule_ai = bool(
            session.engine
            and not board.terminal_state()
            and session.current_player == session.engine_mark
        )
        if should_schedule_ai:
            session.ai_pending = True

    if should_schedule_ai and background_tasks is not None:
        background_tasks.add_task(_run_ai_turn, game_id)


@app.post("/api/game")
def create_game(request: NewGameRequest) -> Dict[str, object]:
    game_id, session = _create_session(request)
    return _serialize_session(game_id, session)


@app.get("/api/game/{game_id}")
def get_game(game_id: str) -> Dict[str, object]:
    session = _get_session(game_id)
    return _serialize_session(game_id, session)


@app.post("/api/game/{game_id}/move")
def make_move(
    game_id: str, request: MoveRequest, background_tasks: BackgroundTasks
) -> Dict[str, object]:
    session = _get_session(game_id)
    _apply_player_move(game_id, session, request.cell_index, background_tasks)
    return _serialize_session(game_id, session)
