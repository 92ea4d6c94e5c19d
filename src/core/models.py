"""
Boundary layer data model(s).

These objects can be used to communicate with the Service.
Hence, both the API layer (higher) and domain/db layers (lower) will use model(s) defined here to send to/receive from the Service
(Decouples the data model specific to the DB layer, API layer, or domain layer from the information needed to send across boundaries)
"""

from dataclasses import dataclass, field
from typing import Optional

# Type aliases to make the models easier to read
UserId = int
GameId = int


@dataclass
class UserModel:
    """A registered user: the id assigned by the registry and the public key (url-safe base64)."""

    id: UserId
    public_key: str


@dataclass
class SettingsModel:
    """Settings of a single game, as stored. The range policy stays in its text form."""

    seed: int
    width: int
    height: int
    health: int
    max_level: int
    max_players: int
    vote_threshold: int
    range_policy: str
    upgrade_spends_point: bool = False


@dataclass
class MoveModel:
    """Transport-safe representation of a signed move line."""

    kind: str
    authorizer: UserId
    signature: str
    x: Optional[int] = None
    y: Optional[int] = None
    target: Optional[UserId] = None


@dataclass
class GameModel:
    """Everything needed to rebuild a game: its settings and the ordered chain of moves (oldest first)."""

    id: GameId
    settings: SettingsModel
    moves: list[MoveModel] = field(default_factory=list)
