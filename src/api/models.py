"""Requests and Response models"""

from typing import Optional, Self

from pydantic import BaseModel, Field, field_validator, model_validator

from src.core.exceptions import GameError, InvalidRequestError
from src.core.shared_types import MoveKind
from src.tanks.keys import parse_verifying_key
from src.tanks.range_policy import ArrayRange, parse_range_policy
from src.tanks.settings import MAX_SEED

UserId = int
GameId = int

# ids are 32 bit signed, coordinates 32 bit unsigned
MIN_ID = -(2**31)
MAX_ID = 2**31 - 1
MAX_COORDINATE = 2**32 - 1


# --- SHARED MODELS ---
class MoveLineSchema(BaseModel):
    """A signed move line as it travels over the wire."""

    kind: MoveKind
    authorizer: UserId = Field(ge=MIN_ID, le=MAX_ID)
    x: Optional[int] = Field(default=None, ge=0, le=MAX_COORDINATE)
    y: Optional[int] = Field(default=None, ge=0, le=MAX_COORDINATE)
    target: Optional[UserId] = Field(default=None, ge=MIN_ID, le=MAX_ID)
    signature: str


class SettingsSchema(BaseModel):
    seed: int = Field(default=0, ge=0, le=MAX_SEED)
    width: int = Field(default=5, gt=0)
    height: int = Field(default=5, gt=0)
    health: int = Field(default=3, gt=0)
    max_level: int = Field(default=2, ge=0)
    max_players: int = Field(default=10, gt=0)
    vote_threshold: int = Field(default=3, ge=0)
    range_policy: str = "L"
    upgrade_spends_point: bool = False

    @field_validator("range_policy")
    @classmethod
    def validate_range_policy(cls, value: str) -> str:
        try:
            parse_range_policy(value)
        except GameError as exc:
            raise InvalidRequestError(f"Malformed range policy: {value!r}") from exc
        return value

    @model_validator(mode="after")
    def validate_range_covers_levels(self) -> Self:
        policy = parse_range_policy(self.range_policy)
        if isinstance(policy, ArrayRange) and not policy.covers(self.max_level):
            raise InvalidRequestError(
                f"Range table {self.range_policy!r} has no entry for every level up to {self.max_level}."
            )
        return self


# --- REQUEST MODELS ---
class RegisterUserRequest(BaseModel):
    public_key: str

    @field_validator("public_key")
    @classmethod
    def validate_public_key(cls, value: str) -> str:
        try:
            parse_verifying_key(value)
        except GameError as exc:
            raise InvalidRequestError("Malformed public key given.") from exc
        return value


class CreateGameRequest(BaseModel):
    settings: SettingsSchema


class GetGameRequest(BaseModel):
    game_id: GameId


class MoveRequest(BaseModel):
    game_id: GameId
    move: MoveLineSchema


class DeleteGameRequest(BaseModel):
    game_id: GameId


# --- RESPONSE MODELS ---
class UserResponse(BaseModel):
    id: UserId
    public_key: str


class GameResponse(BaseModel):
    game_id: GameId
    settings: SettingsSchema


class HeadResponse(BaseModel):
    game_id: GameId
    head: str  # empty for a game without moves


class MoveResponse(BaseModel):
    game_id: GameId
    index: int
    head: str


class PlayerState(BaseModel):
    user: UserId
    x: int
    y: int
    level: int
    points: int
    health: int


class GameStateResponse(BaseModel):
    game_id: GameId
    settings: SettingsSchema
    players: list[PlayerState]
    votes: dict[UserId, UserId]
    next_spawn: Optional[tuple[int, int]]  # None once the board is full
    move_count: int
    head: str
