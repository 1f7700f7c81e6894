"""
Explicit validation & Pydantic models
- Models are used to validate and serialize/deserialize data
  exchanged between the client and server.
- Defines the structure of API requests and responses.
"""

from datetime import datetime
from typing import List, Optional
from pydantic import BaseModel, Field, field_validator

from .evaluator import validate_sequence


# 1. Player registration
class RegisterPlayerRequest(BaseModel):
    first_name: str = Field(..., min_length=1, max_length=100, description="Player's first name")
    last_name: str = Field(..., min_length=1, max_length=100, description="Player's last name")
    age: int = Field(..., ge=1, le=120, description="Age between 1 and 120")

    @field_validator("first_name", "last_name", mode="before")
    @classmethod
    def strip_names(cls, value):
        if isinstance(value, str):
            return value.strip()
        return value

    model_config = {
        "json_schema_extra": {
            "examples": [
                {"first_name": "Ada", "last_name": "Lovelace", "age": 36},
            ]
        }
    }


class RegisterPlayerResponse(BaseModel):
    player_id: int = Field(..., description="ID of the new player")


class PlayerOut(BaseModel):
    player_id: int = Field(..., description="Unique ID for the player")
    first_name: str
    last_name: str
    age: int
    registered_at: datetime = Field(..., description="When the player registered (UTC)")


# 2. Starting a game
class StartGameRequest(BaseModel):
    player_id: int = Field(..., ge=1, description="ID of a registered player")


class StartGameResponse(BaseModel):
    game_id: int = Field(..., description="Unique ID for the game; secret is never returned")
    player_id: int = Field(..., description="Owner of the game")
    created_at: datetime = Field(..., description="When the game started (UTC)")


# 3. Guessing
class GuessNumberRequest(BaseModel):
    game_id: int = Field(..., ge=1, description="ID of an unfinished game")
    attempted_number: str = Field(
        ..., description="4 distinct digits. Send a string to keep leading zeros; integers are zero-padded."
    )

    @field_validator("attempted_number", mode="before")
    @classmethod
    def pad_integers(cls, value):
        """
        Older clients send the guess as a JSON number, which loses the leading zero
        (0123 -> 123). Pad it back to 4 digits; anything longer stays invalid.
        """
        if isinstance(value, int) and not isinstance(value, bool):
            return f"{value:04d}"
        return value

    @field_validator("attempted_number")
    @classmethod
    def validate_digits(cls, value: str) -> str:
        return validate_sequence(value)

    model_config = {
        "json_schema_extra": {
            "examples": [
                {"game_id": 1, "attempted_number": "0123"},
                {"game_id": 1, "attempted_number": 5694},
            ]
        }
    }


class GuessNumberResponse(BaseModel):
    game_id: int
    attempted_number: str = Field(..., description="The guess, always 4 characters")
    exact_matches: int = Field(..., description="Famas: right digit in the right place")
    partial_matches: int = Field(..., description="Picas: right digit in the wrong place")
    won: bool = Field(..., description="True when all 4 digits are in place")
    message: str = Field(..., description="Feedback message")


# 4. Reading games back
class AttemptOut(BaseModel):
    attempted_number: str
    exact_matches: int
    partial_matches: int
    message: str
    attempted_at: datetime


class GameState(BaseModel):
    game_id: int = Field(..., description="Unique ID for the game")
    player_id: int
    is_finished: bool
    created_at: datetime
    finished_at: Optional[datetime] = None
    secret: Optional[str] = Field(None, description="Only revealed once the game is finished")
    attempts: List[AttemptOut] = Field(..., description="All guesses made so far with feedback")
