"""
In-memory store
Holds players, games and attempts in memory. Same public API as DBGameStore,
so STORE_BACKEND=memory runs the service without a database.
"""

import random
from dataclasses import dataclass, field
from datetime import datetime
from itertools import count
from threading import RLock
from typing import Dict, List, Optional

from loguru import logger

from .evaluator import evaluate, validate_sequence
from .errors import ActiveGameError, DuplicatePlayerError, GameFinishedError
from .models import utcnow
from .secret import generate_secret
from .types import DigitSequence
from .schemas import (
    AttemptOut,
    GameState,
    GuessNumberResponse,
    PlayerOut,
    RegisterPlayerResponse,
    StartGameResponse,
)


@dataclass
class Player:
    id: int
    first_name: str
    last_name: str
    age: int
    registered_at: datetime = field(default_factory=utcnow)


@dataclass
class Attempt:
    attempted_number: DigitSequence
    exact_matches: int
    partial_matches: int
    message: str
    attempted_at: datetime = field(default_factory=utcnow)


@dataclass
class Game:
    id: int
    player_id: int
    secret: DigitSequence
    is_finished: bool = False
    created_at: datetime = field(default_factory=utcnow)
    finished_at: Optional[datetime] = None
    attempts: List[Attempt] = field(default_factory=list)

    def to_state(self) -> GameState:
        return GameState(
            game_id=self.id,
            player_id=self.player_id,
            is_finished=self.is_finished,
            created_at=self.created_at,
            finished_at=self.finished_at,
            secret=self.secret if self.is_finished else None,
            attempts=[AttemptOut(**vars(a)) for a in self.attempts],
        )


class MemoryGameStore:
    def __init__(self, rng: Optional[random.Random] = None) -> None:
        self.rng = rng
        self._players: Dict[int, Player] = {}
        self._games: Dict[int, Game] = {}
        self._player_ids = count(1)
        self._game_ids = count(1)
        self._lock = RLock()

    def register_player(self, first_name: str, last_name: str, age: int) -> RegisterPlayerResponse:
        with self._lock:
            for p in self._players.values():
                if p.first_name == first_name and p.last_name == last_name:
                    logger.warning("Duplicate registration for {} {}", first_name, last_name)
                    raise DuplicatePlayerError("A player with that first and last name is already registered.")

            player = Player(id=next(self._player_ids), first_name=first_name, last_name=last_name, age=age)
            self._players[player.id] = player

        logger.info("Player registered: {} {} (player_id={})", first_name, last_name, player.id)
        return RegisterPlayerResponse(player_id=player.id)

    def get_player(self, player_id: int) -> Optional[PlayerOut]:
        with self._lock:
            player = self._players.get(player_id)
        if player is None:
            return None
        return PlayerOut(
            player_id=player.id,
            first_name=player.first_name,
            last_name=player.last_name,
            age=player.age,
            registered_at=player.registered_at,
        )

    def start_game(self, player_id: int) -> Optional[StartGameResponse]:
        with self._lock:
            if player_id not in self._players:
                logger.warning("Cannot start game: player_id={} does not exist", player_id)
                return None

            for g in self._games.values():
                if g.player_id == player_id and not g.is_finished:
                    logger.warning("Cannot start game: player_id={} already has game_id={} in progress", player_id, g.id)
                    raise ActiveGameError("You already have an active game. Finish it before starting a new one.")

            game = Game(id=next(self._game_ids), player_id=player_id, secret=generate_secret(self.rng))
            self._games[game.id] = game

        logger.info("Game created: game_id={} player_id={}", game.id, player_id)
        return StartGameResponse(game_id=game.id, player_id=player_id, created_at=game.created_at)

    def guess(self, game_id: int, attempted_number: DigitSequence) -> Optional[GuessNumberResponse]:
        validate_sequence(attempted_number)

        with self._lock:
            game = self._games.get(game_id)
            if game is None:
                logger.warning("Guess for unknown game_id={}", game_id)
                return None

            if game.is_finished:
                logger.warning("Guess for finished game_id={}", game_id)
                raise GameFinishedError(f"Game {game_id} has already finished.")

            result = evaluate(game.secret, attempted_number)
            game.attempts.append(Attempt(
                attempted_number=attempted_number,
                exact_matches=result.exact_matches,
                partial_matches=result.partial_matches,
                message=result.message,
            ))

            if result.won:
                game.is_finished = True
                game.finished_at = utcnow()
                logger.info("Game completed: game_id={} after {} attempt(s)", game.id, len(game.attempts))

        logger.info("Guess processed for game_id={}: {}", game_id, result.message)
        return GuessNumberResponse(
            game_id=game_id,
            attempted_number=attempted_number,
            exact_matches=result.exact_matches,
            partial_matches=result.partial_matches,
            won=result.won,
            message=result.message,
        )

    def get_game(self, game_id: int) -> Optional[GameState]:
        with self._lock:
            game = self._games.get(game_id)
            return game.to_state() if game else None

    def list_games(self, player_id: int) -> Optional[List[GameState]]:
        with self._lock:
            if player_id not in self._players:
                return None
            return [g.to_state() for g in self._games.values() if g.player_id == player_id]
