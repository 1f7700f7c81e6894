'''
Picas y Famas API

Endpoints (prefix /api/game/v1):
POST /register                  -> register a player
POST /start                     -> start a game for a player
POST /guess                     -> submit a guess, get famas/picas feedback

Extras:
GET  /games/{id}                -> game state & attempt history
GET  /players/{id}              -> player details
GET  /players/{id}/games        -> all games of a player

Storage is picked with STORE_BACKEND: "db" (SQLAlchemy, default) or "memory".
'''

import random
from typing import List, Optional, Union

from fastapi import APIRouter, FastAPI, HTTPException, Depends
from fastapi.middleware.cors import CORSMiddleware
from loguru import logger

from . import config
from .logger import configure_logging
from .db import get_db, SessionLocal     # SQLAlchemy Session dependency
from .repository import DBGameStore      # DB-backed store
from .store import MemoryGameStore       # in-memory store
from .bootstrap_db import create_all, database_summary

from .schemas import (
    GameState,
    GuessNumberRequest,
    GuessNumberResponse,
    PlayerOut,
    RegisterPlayerRequest,
    RegisterPlayerResponse,
    StartGameRequest,
    StartGameResponse,
)

configure_logging()

app = FastAPI(title="Picas y Famas API", version="1.0.0")

# Allow everything so the docs and any front-end work easily
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"]
)

@app.on_event("startup")
def _startup():
    logger.info("Starting Picas y Famas API (env={}, store={})", config.APP_ENV, config.STORE_BACKEND)
    if config.STORE_BACKEND != "db":
        return
    # --- Dev convenience: auto-create tables locally ---
    if config.APP_ENV == "local":
        create_all()
        with SessionLocal() as session:
            counts = database_summary(session)
        logger.info(
            "Database ready: {} player(s), {} game(s), {} attempt(s)",
            counts["players"], counts["games"], counts["attempts"],
        )

GameStoreT = Union[DBGameStore, MemoryGameStore]

_memory_store = MemoryGameStore()

# Secret source for new games. None -> system randomness; tests override with a seeded Random.
def get_rng() -> Optional[random.Random]:
    return None

# Small factory so routes get a per-request store (bound to the current DB session)
def get_store(session = Depends(get_db), rng = Depends(get_rng)) -> GameStoreT:
    if config.STORE_BACKEND == "memory":
        return _memory_store
    return DBGameStore(session, rng=rng)

# ---------------- Routes ----------------

router = APIRouter(prefix="/api/game/v1")

@router.post("/register", response_model=RegisterPlayerResponse, summary="Register a new player")
def register_player(
    payload: RegisterPlayerRequest,
    store: GameStoreT = Depends(get_store),
) -> RegisterPlayerResponse:
    try:
        return store.register_player(payload.first_name, payload.last_name, payload.age)
    except ValueError as ve:
        raise HTTPException(status_code=400, detail=str(ve))

@router.post("/start", response_model=StartGameResponse, summary="Start a new game")
def start_game(
    payload: StartGameRequest,
    store: GameStoreT = Depends(get_store),
) -> StartGameResponse:
    try:
        started = store.start_game(payload.player_id)
    except ValueError as ve:
        raise HTTPException(status_code=400, detail=str(ve))
    if not started:
        raise HTTPException(status_code=404, detail=f"Player {payload.player_id} does not exist")
    return started

@router.post("/guess", response_model=GuessNumberResponse, summary="Submit a guess")
def guess_number(
    payload: GuessNumberRequest,
    store: GameStoreT = Depends(get_store),
) -> GuessNumberResponse:
    # the store re-checks the format, rejects finished games and records the attempt
    try:
        result = store.guess(payload.game_id, payload.attempted_number)
    except ValueError as ve:
        raise HTTPException(status_code=400, detail=str(ve))
    if not result:
        raise HTTPException(status_code=404, detail=f"Game {payload.game_id} does not exist")
    return result

@router.get("/games/{game_id}", response_model=GameState, summary="Get game state and attempts")
def get_game(
    game_id: int,
    store: GameStoreT = Depends(get_store),
) -> GameState:
    game_state = store.get_game(game_id)
    if not game_state:
        raise HTTPException(status_code=404, detail="Game not found")
    return game_state

@router.get("/players/{player_id}", response_model=PlayerOut, summary="Get a player")
def get_player(
    player_id: int,
    store: GameStoreT = Depends(get_store),
) -> PlayerOut:
    player = store.get_player(player_id)
    if not player:
        raise HTTPException(status_code=404, detail="Player not found")
    return player

@router.get("/players/{player_id}/games", response_model=List[GameState], summary="List a player's games")
def list_player_games(
    player_id: int,
    store: GameStoreT = Depends(get_store),
) -> List[GameState]:
    games = store.list_games(player_id)
    if games is None:
        raise HTTPException(status_code=404, detail="Player not found")
    return games

app.include_router(router)
