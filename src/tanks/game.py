"""
The Game class will be the entrypoint into the domain layer for the service layer.

A game's state is never stored: it is the fold of its settings through the chain of signed move lines.
For every move line:
1. verify its signature on top of the previous move's signature (src/tanks/chain.py)
2. check the rules for its kind (side-effect free, repeatable)
3. commit it (the only place state mutates)
4. append it to the chain
"""

import logging
from collections import Counter
from dataclasses import dataclass, field
from typing import Callable, Iterable, Optional, Self

from src.core.exceptions import (
    GameError,
    NotFoundError,
    OutOfRangeError,
    ReplayError,
    UnauthorizedError,
)
from src.core.models import GameModel
from src.core.shared_types import MoveKind
from src.tanks.board import Board
from src.tanks.chain import KeyDirectory, verify_signature
from src.tanks.moves import MoveLine, Position
from src.tanks.player import Player
from src.tanks.settings import Settings
from src.tanks.spawn import SpawnStream

logger = logging.getLogger(__name__)

STARTING_LEVEL = 0
STARTING_POINTS = 1


@dataclass
class Game:
    # --- DOMAIN LAYER API CALLED BY SERVICE---

    id: int
    settings: Settings
    board: Board
    spawn: SpawnStream
    players: dict[int, Player] = field(default_factory=dict)
    votes: dict[int, int] = field(default_factory=dict)  # voter -> target
    lines: list[MoveLine] = field(default_factory=list)

    @classmethod
    def new_game(cls, settings: Settings, game_id: int = 0) -> Self:
        """Empty game: no players, spawn stream at its start."""
        return cls(
            id=game_id,
            settings=settings,
            board=Board(settings.width, settings.height),
            spawn=SpawnStream(settings.seed, settings.width, settings.height),
        )

    @classmethod
    def from_model(cls, model: GameModel, keys: KeyDirectory) -> Self:
        """Rebuild a game from what the Service layer has: stored settings and the stored chain."""
        settings = Settings.from_model(model.settings)
        moves = [MoveLine.from_model(move_model) for move_model in model.moves]
        return replay(settings, moves, keys, model.id)

    def to_model(self) -> GameModel:
        return GameModel(
            id=self.id,
            settings=self.settings.to_model(),
            moves=[line.to_model() for line in self.lines],
        )

    @property
    def head(self) -> Optional[str]:
        """Signature of the last committed move, None for a game without moves."""
        return self.lines[-1].signature if self.lines else None

    def preview_spawn(self) -> Position:
        """The exact cell the next Join has to claim."""
        return self.spawn.preview(self.board)

    def load(self, move: MoveLine, keys: KeyDirectory) -> None:
        """Verify, check and commit a single move on top of the current chain."""
        verify_signature(move, self.head, keys)
        self.check(move)
        self.handle(move)

    def check(self, move: MoveLine) -> None:
        """Raise a GameError if the move breaks a rule. Never changes state."""
        move.assert_well_formed()
        CHECK_RULES[move.kind](self, move)

    def handle(self, move: MoveLine) -> None:
        """Commit a move that already passed `check()` (and signature verification)."""
        COMMIT_RULES[move.kind](self, move)
        self.lines.append(move)
        logger.debug("game %s: committed move %d (%s)", self.id, len(self.lines) - 1, move.kind)

    # -- PRIVATE HELPERS ---
    def _get_player(self, user: int) -> Player:
        player = self.players.get(user)
        if player is None:
            raise NotFoundError(f"player ({user})")
        return player

    # -- RULES: CHECKS ---
    def _check_join(self, move: MoveLine) -> None:
        """Join only once, and only on the cell the spawn stream hands out."""
        if move.authorizer in self.players:
            raise UnauthorizedError(move.authorizer)
        spawn = self.preview_spawn()
        if move.position != spawn:
            raise OutOfRangeError("Position", f"({spawn[0]}, {spawn[1]})")

    def _check_drive(self, move: MoveLine) -> None:
        """A single step (diagonals included) onto a free cell of the board."""
        destination = move.position
        player = self._get_player(move.authorizer)
        player.require_alive()
        player.require_points()
        if not self.board.is_within_bounds(destination):
            raise OutOfRangeError(
                "Position",
                f"0 <= x < {self.settings.width} and 0 <= y < {self.settings.height}",
            )
        if self.board.is_occupied(destination):
            raise NotFoundError("free tile")
        player.require_in_range(destination, 1)

    def _check_shoot(self, move: MoveLine) -> None:
        """The reach depends on the shooter's level, via the range policy."""
        target = self._get_player(move.target_id)
        player = self._get_player(move.authorizer)
        target.require_alive()
        player.require_alive()
        player.require_points()
        reach = self.settings.range_policy.get_range(player.level)
        player.require_in_range(target.position, reach)

    def _check_gift(self, move: MoveLine) -> None:
        """NOTE the target does not need to be alive: gifting to the dead is allowed."""
        self._get_player(move.target_id)
        player = self._get_player(move.authorizer)
        player.require_alive()
        player.require_points()

    def _check_vote(self, move: MoveLine) -> None:
        """Only the dead vote, and only for the living."""
        target = self._get_player(move.target_id)
        player = self._get_player(move.authorizer)
        target.require_alive()
        player.require_dead()

    def _check_handle_votes(self, move: MoveLine) -> None:
        """Anyone may call the vote count."""

    def _check_upgrade(self, move: MoveLine) -> None:
        player = self._get_player(move.authorizer)
        player.require_alive()
        player.require_upgradable(self.settings.max_level)
        player.require_points()

    # -- RULES: COMMITS ---
    def _commit_join(self, move: MoveLine) -> None:
        position = self.spawn.consume(self.board)
        self.players[move.authorizer] = Player(
            user=move.authorizer,
            x=position[0],
            y=position[1],
            level=STARTING_LEVEL,
            points=STARTING_POINTS,
            health=self.settings.health,
        )
        self.board.place(move.authorizer, position)

    def _commit_drive(self, move: MoveLine) -> None:
        player = self.players[move.authorizer]
        player.spend_point()
        self.board.move_player(move.authorizer, player.position, move.position)
        player.move_to(move.position)

    def _commit_shoot(self, move: MoveLine) -> None:
        """
        A kill hands the victim's whole point stockpile to the shooter.

        NOTE the shooter pays before the hit lands, so shooting yourself can never underflow.
        """
        player = self.players[move.authorizer]
        target = self.players[move.target_id]
        player.spend_point()
        target.take_hit()
        if not target.is_alive:
            player.gain_points(target.surrender_points())

    def _commit_gift(self, move: MoveLine) -> None:
        self.players[move.authorizer].spend_point()
        self.players[move.target_id].gain_points(1)

    def _commit_vote(self, move: MoveLine) -> None:
        self.votes[move.authorizer] = move.target_id

    def _commit_handle_votes(self, move: MoveLine) -> None:
        """
        Every player, dead or alive, gets a point.
        Living players with at least `vote_threshold` votes get one more. All votes are cleared.
        """
        for player in self.players.values():
            player.gain_points(1)

        tally = Counter(self.votes.values())
        for target, count in tally.items():
            if count < self.settings.vote_threshold:
                continue
            player = self.players.get(target)
            if player is not None and player.is_alive:
                player.gain_points(1)

        self.votes.clear()

    def _commit_upgrade(self, move: MoveLine) -> None:
        """NOTE the level up is free unless the game was created with `upgrade_spends_point`."""
        player = self.players[move.authorizer]
        if self.settings.upgrade_spends_point:
            player.spend_point()
        player.level_up()


# --- STRATEGY PATTERN: RULES PER MOVE KIND ---
RuleFn = Callable[[Game, MoveLine], None]
CHECK_RULES: dict[MoveKind, RuleFn] = {
    MoveKind.JOIN: Game._check_join,
    MoveKind.DRIVE: Game._check_drive,
    MoveKind.SHOOT: Game._check_shoot,
    MoveKind.GIFT: Game._check_gift,
    MoveKind.VOTE: Game._check_vote,
    MoveKind.HANDLE_VOTES: Game._check_handle_votes,
    MoveKind.UPGRADE: Game._check_upgrade,
}
COMMIT_RULES: dict[MoveKind, RuleFn] = {
    MoveKind.JOIN: Game._commit_join,
    MoveKind.DRIVE: Game._commit_drive,
    MoveKind.SHOOT: Game._commit_shoot,
    MoveKind.GIFT: Game._commit_gift,
    MoveKind.VOTE: Game._commit_vote,
    MoveKind.HANDLE_VOTES: Game._commit_handle_votes,
    MoveKind.UPGRADE: Game._commit_upgrade,
}


# --- FUNCTIONAL API ---
def replay(
    settings: Settings,
    moves: Iterable[MoveLine],
    keys: KeyDirectory,
    game_id: int = 0,
) -> Game:
    """
    Build a game from scratch out of an ordered chain (oldest first).

    Stops at the first invalid move with a ReplayError. The half-built game is dropped, never returned.
    """
    game = Game.new_game(settings, game_id)
    for index, move in enumerate(moves):
        try:
            game.load(move, keys)
        except GameError as exc:
            raise ReplayError(index, exc) from exc
    return game


def validate(game: Game, move: MoveLine) -> None:
    """Non-mutating rule check (signatures are checked by `verify_signature`)."""
    game.check(move)


def commit(game: Game, move: MoveLine) -> None:
    """Mutate the game. Only call after `validate` and `verify_signature` both passed."""
    game.handle(move)
