"""Database tables / schema"""

from datetime import datetime, timezone
from typing import Optional

from sqlalchemy import ForeignKey, String
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column, relationship


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


class Base(DeclarativeBase):
    pass


class DBUser(Base):
    __tablename__ = "users"
    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    public_key: Mapped[str]
    created_at: Mapped[datetime] = mapped_column(default=utc_now)


class DBGame(Base):
    __tablename__ = "games"
    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    # unsigned 64 bit does not fit a signed BIGINT column
    seed: Mapped[str] = mapped_column(String(20))
    width: Mapped[int]
    height: Mapped[int]
    health: Mapped[int]
    max_level: Mapped[int]
    max_players: Mapped[int]
    vote_threshold: Mapped[int]
    range_policy: Mapped[str]
    upgrade_spends_point: Mapped[bool] = mapped_column(default=False)
    created_at: Mapped[datetime] = mapped_column(default=utc_now)

    moves: Mapped[list["DBMove"]] = relationship(
        back_populates="game",
        order_by="DBMove.index",
        cascade="all, delete-orphan",
    )


class DBMove(Base):
    """One signed move line. (game_id, index) is the primary key: two appends can never claim the same slot."""

    __tablename__ = "moves"
    game_id: Mapped[int] = mapped_column(ForeignKey("games.id"), primary_key=True)
    index: Mapped[int] = mapped_column(primary_key=True)
    user_id: Mapped[int] = mapped_column(ForeignKey("users.id"))
    kind: Mapped[str]
    x: Mapped[Optional[int]]
    y: Mapped[Optional[int]]
    target: Mapped[Optional[int]]
    signature: Mapped[str]

    game: Mapped[DBGame] = relationship(back_populates="moves")
