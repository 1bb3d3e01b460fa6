from __future__ import annotations

import logging
import math
from typing import Dict, List, Optional

from fastapi import FastAPI, HTTPException
from fastapi.exceptions import RequestValidationError
from pydantic import BaseModel, Field

from ...economy.market import Market
from ...engine.board import Board, IllegalMoveError
from ...engine.game import Game
from ...engine.geometry import Color
from ...engine.move import MoveParseError, parse_move
from ...engine.perft import perft as perft_nodes
from ...search.engine import DEFAULT_DEPTH
from ...search.service import ENGINES, SearchService
from .error import (
    exception_handler,
    game_rule_exception_handler,
    http_exception_handler,
    request_validation_exception_handler,
)
from .logging_middleware import RequestIDLoggingMiddleware
from .session import InMemorySessionStore


logger = logging.getLogger(__name__)

MAX_SEARCH_DEPTH = 4


class CreateGameResponse(BaseModel):
    game_id: str
    fen: str


class SetPositionRequest(BaseModel):
    fen: str = Field(..., description="FEN string")


class MoveRequest(BaseModel):
    move: str = Field(..., description="Move text, e.g. e2e4, Nf3, $Qe8, O-O or 'e4 d4'")


class SearchRequest(BaseModel):
    depth: int = Field(default=2, ge=1, le=MAX_SEARCH_DEPTH)
    engine: str = Field(default="simple", description=f"One of {sorted(ENGINES)}")


class SearchResponse(BaseModel):
    best_move: Optional[str]
    score: Optional[float]
    terminal: bool
    nodes: int
    depth: int
    time_ms: int
    engine: str


class PerftRequest(BaseModel):
    fen: str
    depth: int = Field(default=1, ge=0, le=DEFAULT_DEPTH)


class GameState(BaseModel):
    game_id: str
    fen: str
    turn: str
    legal_moves: List[str]
    in_check: bool
    checkmate: bool
    stalemate: bool
    winner: Optional[str]
    balances: Dict[str, int]
    controlled_sectors: Dict[str, List[bool]]
    last_move: Optional[str]
    move_history: List[str]


def create_app(market: Optional[Market] = None) -> FastAPI:
    app = FastAPI(title="Economic Chess API", version="0.1.0")

    # Basic logging setup
    logging.basicConfig(level=logging.INFO)

    # Middleware & error handling
    app.add_middleware(RequestIDLoggingMiddleware)
    app.add_exception_handler(HTTPException, http_exception_handler)
    app.add_exception_handler(RequestValidationError, request_validation_exception_handler)
    app.add_exception_handler(IllegalMoveError, game_rule_exception_handler)
    app.add_exception_handler(MoveParseError, game_rule_exception_handler)
    app.add_exception_handler(Exception, exception_handler)

    store = InMemorySessionStore(market)
    service = SearchService()

    @app.get("/healthz")
    async def healthz() -> Dict[str, str]:
        return {"status": "ok"}

    @app.post("/api/games", response_model=CreateGameResponse)
    async def create_game() -> CreateGameResponse:
        game_id = store.create()
        game = _require_game(store, game_id)
        return CreateGameResponse(game_id=game_id, fen=game.to_fen())

    @app.get("/api/games/{game_id}/state", response_model=GameState)
    async def get_state(game_id: str) -> GameState:
        return _game_state(game_id, _require_game(store, game_id))

    @app.delete("/api/games/{game_id}")
    async def delete_game(game_id: str) -> Dict[str, str]:
        if not store.delete(game_id):
            raise HTTPException(status_code=404, detail="game not found")
        return {"status": "deleted"}

    @app.post("/api/games/{game_id}/position", response_model=GameState)
    async def set_position(game_id: str, req: SetPositionRequest) -> GameState:
        _require_game(store, game_id)
        try:
            game = Game.from_fen(req.fen, market)
        except ValueError as e:
            raise HTTPException(status_code=400, detail=f"invalid FEN: {e}")
        store.set(game_id, game)
        return _game_state(game_id, game)

    @app.post("/api/games/{game_id}/move", response_model=GameState)
    def make_move(game_id: str, req: MoveRequest) -> GameState:
        game = _require_game(store, game_id)
        move = parse_move(req.move)
        with store.lock_for(game_id):
            game.apply_move(move)
        logger.info("game %s: played %s", game_id, move)
        return _game_state(game_id, game)

    @app.post("/api/games/{game_id}/search", response_model=SearchResponse)
    def search(game_id: str, req: SearchRequest) -> SearchResponse:
        game = _require_game(store, game_id)
        if req.engine not in ENGINES:
            raise HTTPException(status_code=400, detail=f"unknown engine: {req.engine}")
        with store.lock_for(game_id):
            res = service.search(game.state.copy(), depth=req.depth, engine=req.engine)
        finite = math.isfinite(res.score)
        return SearchResponse(
            best_move=str(res.best_move) if res.best_move is not None else None,
            score=res.score if finite else None,
            terminal=not finite,
            nodes=res.nodes,
            depth=res.depth,
            time_ms=res.time_ms,
            engine=req.engine,
        )

    @app.post("/api/games/{game_id}/undo", response_model=GameState)
    def undo(game_id: str) -> GameState:
        game = _require_game(store, game_id)
        with store.lock_for(game_id):
            try:
                game.undo_move()
            except ValueError as e:
                raise HTTPException(status_code=400, detail=str(e))
        return _game_state(game_id, game)

    @app.post("/api/perft")
    def perft(req: PerftRequest) -> Dict[str, int]:
        try:
            board = Board.from_fen(req.fen)
        except ValueError:
            raise HTTPException(status_code=400, detail="invalid FEN")
        return {"nodes": perft_nodes(board, req.depth), "depth": req.depth}

    return app


def _require_game(store: InMemorySessionStore, game_id: str) -> Game:
    game = store.get(game_id)
    if game is None:
        raise HTTPException(status_code=404, detail="game not found")
    return game


def _game_state(game_id: str, game: Game) -> GameState:
    history = game.move_history_text()
    board = game.board
    winner = game.winner()
    return GameState(
        game_id=game_id,
        fen=game.to_fen(),
        turn=game.turn().value,
        legal_moves=[str(m) for m in game.legal_moves()],
        in_check=game.in_check(),
        checkmate=game.checkmate(),
        stalemate=game.stalemate(),
        winner=winner.value if winner is not None else None,
        balances={c.value: game.state.get_balance(c).amount for c in Color},
        controlled_sectors={c.value: board.get_controlled_sectors(c) for c in Color},
        last_move=history[-1] if history else None,
        move_history=history,
    )


# Default app for non-factory servers
app = create_app()
