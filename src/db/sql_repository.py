"""Implementation of (Game)Repository using SQLAlchemy"""

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from src.core.exceptions import ChainConflictError
from src.core.models import GameId, GameModel, MoveModel, SettingsModel, UserId, UserModel
from src.db.schema import DBGame, DBMove, DBUser


class SQLGameRepository:
    """Data stored using SQL / methods implemented using SQLAlchemy"""

    def __init__(self, db_session: Session) -> None:
        self.db = db_session

    # -- USERS --
    def create_user(self, public_key: str) -> UserModel:
        """Register a public key and return the user with its newly assigned ID."""
        user_db = DBUser(public_key=public_key)
        self.db.add(user_db)
        self.db.commit()
        self.db.refresh(user_db)
        return self._user_to_model(user_db)

    def get_user(self, user_id: UserId) -> UserModel | None:
        """Get user by ID, if record exists."""
        user_db = self.db.get(DBUser, user_id)
        if user_db:
            return self._user_to_model(user_db)
        return None

    def get_game_users(self, game_id: GameId) -> list[UserModel]:
        """All users that authored at least one move in the game."""
        query = (
            select(DBUser)
            .join(DBMove, DBMove.user_id == DBUser.id)
            .where(DBMove.game_id == game_id)
            .distinct()
            .order_by(DBUser.id)
        )
        return [self._user_to_model(user_db) for user_db in self.db.scalars(query)]

    # -- GAMES --
    def create_game(self, settings: SettingsModel) -> GameModel:
        """Store a new (empty) game and return it with its newly created ID."""
        game_db = DBGame(
            seed=str(settings.seed),
            width=settings.width,
            height=settings.height,
            health=settings.health,
            max_level=settings.max_level,
            max_players=settings.max_players,
            vote_threshold=settings.vote_threshold,
            range_policy=settings.range_policy,
            upgrade_spends_point=settings.upgrade_spends_point,
        )
        self.db.add(game_db)
        self.db.commit()
        self.db.refresh(game_db)
        return self._game_to_model(game_db)

    def get_game(self, game_id: GameId) -> GameModel | None:
        """Get game by ID (settings + ordered moves), if record exists."""
        game_db = self._fetch_game(game_id)
        if game_db:
            return self._game_to_model(game_db, with_moves=True)
        return None

    def list_games(self) -> list[GameModel]:
        """All games. NOTE the move lists are left empty."""
        query = select(DBGame).order_by(DBGame.id)
        return [self._game_to_model(game_db) for game_db in self.db.scalars(query)]

    def append_move(self, game_id: GameId, index: int, move: MoveModel) -> None:
        """Store a move at position `index` of the game's chain. Raises ChainConflictError if the slot is taken."""
        move_db = DBMove(
            game_id=game_id,
            index=index,
            user_id=move.authorizer,
            kind=move.kind,
            x=move.x,
            y=move.y,
            target=move.target,
            signature=move.signature,
        )
        self.db.add(move_db)
        try:
            self.db.commit()
        except IntegrityError as exc:
            self.db.rollback()
            raise ChainConflictError(
                f"Cannot store move {index} of game ({game_id}): slot already taken."
            ) from exc

    def delete_game(self, game_id: GameId) -> GameModel | None:
        """Remove a game's record (and its moves)."""
        game_db = self._fetch_game(game_id)
        if not game_db:
            return None
        game_model = self._game_to_model(game_db, with_moves=True)
        self.db.delete(game_db)
        self.db.commit()
        return game_model

    def _fetch_game(self, game_id: GameId) -> DBGame | None:
        query = select(DBGame).where(DBGame.id == game_id)
        return self.db.scalar(query)

    def _game_to_model(self, game_db: DBGame, with_moves: bool = False) -> GameModel:
        """Convert SQLAlchemy model to data transfer model."""
        settings = SettingsModel(
            seed=int(game_db.seed),
            width=game_db.width,
            height=game_db.height,
            health=game_db.health,
            max_level=game_db.max_level,
            max_players=game_db.max_players,
            vote_threshold=game_db.vote_threshold,
            range_policy=game_db.range_policy,
            upgrade_spends_point=game_db.upgrade_spends_point,
        )
        moves = [self._move_to_model(move_db) for move_db in game_db.moves] if with_moves else []
        return GameModel(id=game_db.id, settings=settings, moves=moves)

    def _move_to_model(self, move_db: DBMove) -> MoveModel:
        return MoveModel(
            kind=move_db.kind,
            authorizer=move_db.user_id,
            signature=move_db.signature,
            x=move_db.x,
            y=move_db.y,
            target=move_db.target,
        )

    def _user_to_model(self, user_db: DBUser) -> UserModel:
        return UserModel(id=user_db.id, public_key=user_db.public_key)
