"""
DB-backed store (SQLAlchemy). Same public API as the in-memory MemoryGameStore.

Public methods:
- register_player(first_name, last_name, age) -> RegisterPlayerResponse
- get_player(player_id) -> PlayerOut | None
- start_game(player_id) -> StartGameResponse | None
- guess(game_id, attempted_number) -> GuessNumberResponse | None
- get_game(game_id) -> GameState | None
- list_games(player_id) -> list[GameState] | None

None means "not found"; rule violations raise ValueError subclasses (see errors.py).
"""

from __future__ import annotations

import random
from typing import Optional

from loguru import logger
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session, selectinload

from .models import Attempt as AttemptORM, Game as GameORM, Player as PlayerORM, utcnow
from .evaluator import evaluate, validate_sequence
from .errors import ActiveGameError, DuplicatePlayerError, GameFinishedError
from .secret import generate_secret
from .schemas import (
    AttemptOut,
    GameState,
    GuessNumberResponse,
    PlayerOut,
    RegisterPlayerResponse,
    StartGameResponse,
)

# --- DTO builders: ORM rows -> API responses ---

def _to_attempt_out(a: AttemptORM) -> AttemptOut:
    return AttemptOut(
        attempted_number=a.attempted_number,
        exact_matches=a.exact_matches,
        partial_matches=a.partial_matches,
        message=a.message,
        attempted_at=a.attempted_at,
    )

def _to_game_state(game: GameORM) -> GameState:
    return GameState(
        game_id=game.id,
        player_id=game.player_id,
        is_finished=game.is_finished,
        created_at=game.created_at,
        finished_at=game.finished_at,
        secret=game.secret if game.is_finished else None,
        attempts=[_to_attempt_out(a) for a in game.attempts],  # ordered by Attempt.id
    )

def _to_player_out(player: PlayerORM) -> PlayerOut:
    return PlayerOut(
        player_id=player.id,
        first_name=player.first_name,
        last_name=player.last_name,
        age=player.age,
        registered_at=player.registered_at,
    )


class DBGameStore:
    """One instance per request, bound to that request's session."""

    def __init__(self, db: Session, rng: Optional[random.Random] = None):
        self.db = db
        self.rng = rng

    # --- Players ---

    def register_player(self, first_name: str, last_name: str, age: int) -> RegisterPlayerResponse:
        logger.info("Registering player {} {} (age {})", first_name, last_name, age)

        existing = self.db.execute(
            select(PlayerORM.id).where(PlayerORM.first_name == first_name, PlayerORM.last_name == last_name)
        ).first()
        if existing:
            logger.warning("Duplicate registration for {} {}", first_name, last_name)
            raise DuplicatePlayerError("A player with that first and last name is already registered.")

        player = PlayerORM(first_name=first_name, last_name=last_name, age=age, registered_at=utcnow())
        self.db.add(player)
        try:
            self.db.commit()
        except IntegrityError:
            # uq_player_name: someone registered the same name after our check
            self.db.rollback()
            logger.warning("Duplicate registration for {} {} (caught on insert)", first_name, last_name)
            raise DuplicatePlayerError("A player with that first and last name is already registered.")
        self.db.refresh(player)

        logger.info("Player registered: {} {} (player_id={})", first_name, last_name, player.id)
        return RegisterPlayerResponse(player_id=player.id)

    def get_player(self, player_id: int) -> Optional[PlayerOut]:
        player = self.db.get(PlayerORM, player_id)
        if not player:
            return None
        return _to_player_out(player)

    # --- Games ---

    def start_game(self, player_id: int) -> Optional[StartGameResponse]:
        logger.info("Starting game for player_id={}", player_id)

        # Lock the player row so two concurrent starts can't both pass the active-game check.
        # SQLite ignores FOR UPDATE; it serializes writers on its own.
        player = self.db.get(PlayerORM, player_id, with_for_update=True)
        if not player:
            logger.warning("Cannot start game: player_id={} does not exist", player_id)
            return None

        active = self.db.execute(
            select(GameORM.id).where(GameORM.player_id == player_id, GameORM.is_finished.is_(False))
        ).first()
        if active:
            logger.warning("Cannot start game: player_id={} already has game_id={} in progress", player_id, active.id)
            raise ActiveGameError("You already have an active game. Finish it before starting a new one.")

        game = GameORM(
            player_id=player_id,
            secret=generate_secret(self.rng),
            is_finished=False,
            created_at=utcnow(),
        )
        self.db.add(game)
        self.db.commit()
        self.db.refresh(game)

        logger.info("Game created: game_id={} player_id={}", game.id, player_id)
        return StartGameResponse(game_id=game.id, player_id=game.player_id, created_at=game.created_at)

    def guess(self, game_id: int, attempted_number: str) -> Optional[GuessNumberResponse]:
        logger.info("Processing guess for game_id={}: {}", game_id, attempted_number)

        # Format check comes first so a bad guess is rejected even for unknown games
        validate_sequence(attempted_number)

        game = self.db.get(GameORM, game_id)
        if not game:
            logger.warning("Guess for unknown game_id={}", game_id)
            return None

        if game.is_finished:
            logger.warning("Guess for finished game_id={}", game_id)
            raise GameFinishedError(f"Game {game_id} has already finished.")

        result = evaluate(game.secret, attempted_number)

        game.attempts.append(AttemptORM(
            game_id=game.id,
            attempted_number=attempted_number,
            exact_matches=result.exact_matches,
            partial_matches=result.partial_matches,
            message=result.message,
            attempted_at=utcnow(),
        ))

        if result.won:
            game.is_finished = True
            game.finished_at = utcnow()

        self.db.commit()

        if result.won:
            logger.info("Game completed: game_id={} after {} attempt(s)", game.id, len(game.attempts))
        logger.info("Guess processed for game_id={}: {}", game.id, result.message)

        return GuessNumberResponse(
            game_id=game.id,
            attempted_number=attempted_number,
            exact_matches=result.exact_matches,
            partial_matches=result.partial_matches,
            won=result.won,
            message=result.message,
        )

    def get_game(self, game_id: int) -> Optional[GameState]:
        game = self.db.get(GameORM, game_id)
        if not game:
            return None
        return _to_game_state(game)

    def list_games(self, player_id: int) -> Optional[list[GameState]]:
        if not self.db.get(PlayerORM, player_id):
            return None
        games = (
            self.db.execute(
                select(GameORM)
                .options(selectinload(GameORM.attempts))
                .where(GameORM.player_id == player_id)
                .order_by(GameORM.id.asc())
            )
            .scalars()
            .all()
        )
        return [_to_game_state(g) for g in games]
