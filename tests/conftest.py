"""
Pytest will auto-discover / import this file called 'conftest.py'. ]
This file defines fixtures/variables required for testing multiple layers.
"""

from typing import Generator, Optional

import pytest
from sqlalchemy import StaticPool, create_engine
from sqlalchemy.orm import Session, sessionmaker

from src.core.shared_types import MoveKind
from src.db.schema import Base
from src.tanks.chain import KeyDirectory, sign_move
from src.tanks.game import Game
from src.tanks.keys import KeyPair, generate_keys, parse_verifying_key
from src.tanks.moves import MoveLine
from src.tanks.settings import Settings

# Setup an in-memory SQLite database for testing
DATABASE_URL = "sqlite:///:memory:"
engine = create_engine(
    DATABASE_URL,
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)

TestingSessionLocal = sessionmaker(autoflush=False, bind=engine)

USER_IDS = (1, 2, 3, 4, 5)


@pytest.fixture
def db_session_repo() -> Generator[Session, None, None]:
    """Connection to a test database. Tables are removed at teardown to make unit tests of repository independent of each other."""
    Base.metadata.create_all(bind=engine)
    db = TestingSessionLocal()
    try:
        yield db
    finally:
        db.close()
        Base.metadata.drop_all(bind=engine)


# --- SIGNING HELPERS ---
@pytest.fixture(scope="session")
def user_keys() -> dict[int, KeyPair]:
    """Key generation is slow-ish in pure python: one key pair per user for the whole session."""
    return {user: generate_keys() for user in USER_IDS}


@pytest.fixture
def key_directory(user_keys: dict[int, KeyPair]) -> KeyDirectory:
    return {user: parse_verifying_key(pair.verifying_key) for user, pair in user_keys.items()}


class ChainPlayer:
    """Plays signed moves on a live game and records the resulting chain."""

    def __init__(self, settings: Settings, user_keys: dict[int, KeyPair], keys: KeyDirectory) -> None:
        self.user_keys = user_keys
        self.keys = keys
        self.game = Game.new_game(settings)
        self.chain: list[MoveLine] = []

    def sign(self, move: MoveLine, previous_signature: Optional[str]) -> MoveLine:
        return sign_move(move, previous_signature, self.user_keys[move.authorizer].signing_key)

    def play(
        self,
        kind: MoveKind,
        user: int,
        x: Optional[int] = None,
        y: Optional[int] = None,
        target: Optional[int] = None,
    ) -> MoveLine:
        """Sign on top of the current head and load. A Join without position claims the previewed cell."""
        if kind == MoveKind.JOIN and x is None and y is None:
            x, y = self.game.preview_spawn()
        move = self.sign(MoveLine(kind, user, x=x, y=y, target=target), self.game.head)
        self.game.load(move, self.keys)
        self.chain.append(move)
        return move


@pytest.fixture
def settings() -> Settings:
    """seed 0, 5x5 board, health 3, max level 2, vote threshold 3, linear range"""
    return Settings()


@pytest.fixture
def chain_player(
    settings: Settings, user_keys: dict[int, KeyPair], key_directory: KeyDirectory
) -> ChainPlayer:
    return ChainPlayer(settings, user_keys, key_directory)
