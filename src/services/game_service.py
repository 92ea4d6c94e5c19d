"""Orchestration of communication from API router to business logic and persistence layers (and the reverse direction)."""

import logging
from dataclasses import asdict

from src.api.models import (
    CreateGameRequest,
    DeleteGameRequest,
    GameResponse,
    GameStateResponse,
    GetGameRequest,
    HeadResponse,
    MoveLineSchema,
    MoveRequest,
    MoveResponse,
    PlayerState,
    RegisterUserRequest,
    SettingsSchema,
    UserResponse,
)
from src.core.exceptions import (
    CorruptedGameError,
    GameError,
    MalformedKeyError,
    OutOfRangeError,
    RepositoryError,
)
from src.core.models import GameId, GameModel, MoveModel, SettingsModel, UserModel
from src.db.repository import GameRepository
from src.services.locks import GAME_LOCKS, GameLocks
from src.tanks.chain import KeyDirectory, build_key_directory
from src.tanks.game import Game
from src.tanks.moves import MoveLine

logger = logging.getLogger(__name__)


class TankTacticsService:
    """Orchestration of layers for the tank tactics game."""

    def __init__(self, repository: GameRepository, locks: GameLocks = GAME_LOCKS) -> None:
        self.repo = repository
        self.locks = locks

    # -- API routes logic ---
    def register_user(self, request: RegisterUserRequest) -> UserResponse:
        """Store a (validated) public key. The registry hands out the user id."""
        user = self.repo.create_user(request.public_key)
        logger.info("registered user %s", user.id)
        return UserResponse(id=user.id, public_key=user.public_key)

    def create_game(self, request: CreateGameRequest) -> GameResponse:
        """Store the settings of a new game. The chain starts empty."""
        settings_model = SettingsModel(**request.settings.model_dump())
        stored_game = self.repo.create_game(settings_model)
        logger.info("created game %s", stored_game.id)
        return self._create_game_response(stored_game)

    def list_games(self) -> list[GameResponse]:
        """Show all recorded games (settings only)."""
        return [self._create_game_response(game) for game in self.repo.list_games()]

    def get_head(self, request: GetGameRequest) -> HeadResponse:
        """Signature the next move has to be chained onto ("" for the first move)."""
        stored_game = self._fetch_game(request.game_id)
        head = stored_game.moves[-1].signature if stored_game.moves else ""
        return HeadResponse(game_id=request.game_id, head=head)

    def get_moves(self, request: GetGameRequest) -> list[MoveLineSchema]:
        """The full chain, oldest first. Enough (together with the users) for anyone to replay the game."""
        stored_game = self._fetch_game(request.game_id)
        return [MoveLineSchema.model_validate(asdict(move)) for move in stored_game.moves]

    def get_users(self, request: GetGameRequest) -> list[UserResponse]:
        """Public keys of everybody who moved in this game."""
        self._fetch_game(request.game_id)
        return [
            UserResponse(id=user.id, public_key=user.public_key)
            for user in self.repo.get_game_users(request.game_id)
        ]

    def get_game_state(self, request: GetGameRequest) -> GameStateResponse:
        """Replay the stored chain and report the resulting state."""
        stored_game = self._fetch_game(request.game_id)
        keys = self._key_directory(request.game_id, self.repo.get_game_users(request.game_id))
        game = self._replay(stored_game, keys)
        return self._create_state_response(game)

    def make_move(self, request: MoveRequest) -> MoveResponse:
        """
        Append a signed move to a game.
        ----

        Runs under the game's lock:
        1. rebuild the game from the stored chain
        2. verify + check + commit the new move on top of it
        3. persist the move at the next index
        """
        game_id = request.game_id
        move = MoveLine.from_model(MoveModel(**request.move.model_dump()))

        with self.locks.hold(game_id):
            stored_game = self._fetch_game(game_id)
            users = self.repo.get_game_users(game_id)
            if move.authorizer not in {user.id for user in users}:
                authorizer = self.repo.get_user(move.authorizer)
                if authorizer is not None:
                    users.append(authorizer)
            keys = self._key_directory(game_id, users)
            game = self._replay(stored_game, keys)

            try:
                game.load(move, keys)
            except GameError as exc:
                logger.warning(
                    "game %s: rejected %s by user %s: %s", game_id, move.kind, move.authorizer, exc
                )
                raise

            index = len(stored_game.moves)
            self.repo.append_move(game_id, index, move.to_model())

        logger.info("game %s: appended move %d (%s by %s)", game_id, index, move.kind, move.authorizer)
        return MoveResponse(game_id=game_id, index=index, head=move.signature)

    def delete_game(self, request: DeleteGameRequest) -> None:
        """Handle a request to delete a Game record."""
        with self.locks.hold(request.game_id):
            deleted = self.repo.delete_game(request.game_id)
        if deleted is None:
            raise RepositoryError(f"Game with game_id={request.game_id} not found.")
        self.locks.forget(request.game_id)
        logger.info("deleted game %s", request.game_id)

    # -- Internal helpers --
    def _fetch_game(self, game_id: GameId) -> GameModel:
        """Attempt to find the game in the repository and raise error if it fails."""
        game_model = self.repo.get_game(game_id)
        if game_model is None:
            raise RepositoryError(f"Game with {game_id=} not found.")
        return game_model

    def _key_directory(self, game_id: GameId, users: list[UserModel]) -> KeyDirectory:
        """Registration validates keys, so a stored key that does not parse means the records are corrupted."""
        try:
            return build_key_directory(users)
        except MalformedKeyError as exc:
            logger.error("game %s: stored user key does not parse: %s", game_id, exc)
            raise CorruptedGameError(game_id, exc) from exc

    def _replay(self, stored_game: GameModel, keys: KeyDirectory) -> Game:
        """Every stored move was accepted once. If the chain no longer replays, the records are corrupted."""
        try:
            return Game.from_model(stored_game, keys)
        except GameError as exc:
            logger.error("game %s: stored chain does not replay: %s", stored_game.id, exc)
            raise CorruptedGameError(stored_game.id, exc) from exc

    def _create_game_response(self, model: GameModel) -> GameResponse:
        return GameResponse(
            game_id=model.id,
            settings=SettingsSchema.model_validate(asdict(model.settings)),
        )

    def _create_state_response(self, game: Game) -> GameStateResponse:
        try:
            next_spawn = game.preview_spawn()
        except OutOfRangeError:
            next_spawn = None
        return GameStateResponse(
            game_id=game.id,
            settings=SettingsSchema.model_validate(asdict(game.settings.to_model())),
            players=[
                PlayerState.model_validate(asdict(player))
                for player in sorted(game.players.values(), key=lambda p: p.user)
            ],
            votes=dict(game.votes),
            next_spawn=next_spawn,
            move_count=len(game.lines),
            head=game.head or "",
        )
