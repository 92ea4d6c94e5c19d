"""Protocol repository (can implement later for SQL Alchemy / simple Excel table etc.)"""

from typing import Protocol

from src.core.models import GameId, GameModel, MoveModel, SettingsModel, UserId, UserModel


class GameRepository(Protocol):
    """Persistence layer orchestration"""

    def create_user(self, public_key: str) -> UserModel:
        """Register a public key and return the user with its newly assigned ID."""
        ...

    def get_user(self, user_id: UserId) -> UserModel | None:
        """Get user by ID, if record exists."""
        ...

    def get_game_users(self, game_id: GameId) -> list[UserModel]:
        """All users that authored at least one move in the game."""
        ...

    def create_game(self, settings: SettingsModel) -> GameModel:
        """Store a new (empty) game and return it with its newly created ID."""
        ...

    def get_game(self, game_id: GameId) -> GameModel | None:
        """Get game by ID (settings + ordered moves), if record exists."""
        ...

    def list_games(self) -> list[GameModel]:
        """All games. NOTE the move lists are left empty."""
        ...

    def append_move(self, game_id: GameId, index: int, move: MoveModel) -> None:
        """Store a move at position `index` of the game's chain. Raises ChainConflictError if the slot is taken."""
        ...

    def delete_game(self, game_id: GameId) -> GameModel | None:
        """Remove a game's record (and its moves)."""
        ...
