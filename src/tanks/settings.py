"""Per-game settings. Created once with the game and never mutated."""

from dataclasses import dataclass, field
from typing import Self

from src.core.exceptions import OutOfRangeError
from src.core.models import SettingsModel
from src.tanks.range_policy import LinearRange, RangePolicy, parse_range_policy

MAX_SEED = 2**64 - 1


@dataclass(frozen=True)
class Settings:
    seed: int = 0
    width: int = 5
    height: int = 5
    health: int = 3
    max_level: int = 2
    max_players: int = 10  # advisory: moves never check it
    vote_threshold: int = 3
    range_policy: RangePolicy = field(default_factory=LinearRange)
    upgrade_spends_point: bool = False

    def __post_init__(self) -> None:
        if not 0 <= self.seed <= MAX_SEED:
            raise OutOfRangeError("Seed", f"0 <= seed <= {MAX_SEED}")
        if self.width <= 0 or self.height <= 0:
            raise OutOfRangeError("Board size", "width > 0 and height > 0")
        for name in ("health", "max_level", "max_players", "vote_threshold"):
            if getattr(self, name) < 0:
                raise OutOfRangeError(name.replace("_", " ").capitalize(), ">= 0")

    @classmethod
    def from_model(cls, model: SettingsModel) -> Self:
        """The range policy is stored as text. A text that does not parse raises PolicyMalformedError."""
        return cls(
            seed=model.seed,
            width=model.width,
            height=model.height,
            health=model.health,
            max_level=model.max_level,
            max_players=model.max_players,
            vote_threshold=model.vote_threshold,
            range_policy=parse_range_policy(model.range_policy),
            upgrade_spends_point=model.upgrade_spends_point,
        )

    def to_model(self) -> SettingsModel:
        return SettingsModel(
            seed=self.seed,
            width=self.width,
            height=self.height,
            health=self.health,
            max_level=self.max_level,
            max_players=self.max_players,
            vote_threshold=self.vote_threshold,
            range_policy=self.range_policy.to_text(),
            upgrade_spends_point=self.upgrade_spends_point,
        )
