"""
A player (tank) on the board.

The `require_*` methods are the building blocks of move validation: they do nothing when the condition holds
and raise OutOfRangeError otherwise. The mutating methods are only called by Game when committing a move.
"""

from dataclasses import dataclass

from src.core.exceptions import InvariantViolation, OutOfRangeError
from src.tanks.moves import Position


def chebyshev_distance(a: Position, b: Position) -> int:
    """Diagonal steps count as a distance of 1"""
    return max(abs(a[0] - b[0]), abs(a[1] - b[1]))


@dataclass
class Player:
    user: int
    x: int
    y: int
    level: int
    points: int
    health: int

    @property
    def position(self) -> Position:
        return self.x, self.y

    @property
    def is_alive(self) -> bool:
        return self.health > 0

    # --- PRECONDITIONS ---
    def require_alive(self) -> None:
        if not self.is_alive:
            raise OutOfRangeError("Health", "> 0")

    def require_dead(self) -> None:
        if self.is_alive:
            raise OutOfRangeError("Health", "== 0")

    def require_points(self) -> None:
        if self.points == 0:
            raise OutOfRangeError("Points", "> 0")

    def require_in_range(self, position: Position, distance: int) -> None:
        if chebyshev_distance(self.position, position) > distance:
            raise OutOfRangeError("Position", f"distance <= {distance}")

    def require_upgradable(self, max_level: int) -> None:
        if self.level >= max_level:
            raise OutOfRangeError("Level", f"< {max_level}")

    # --- MUTATIONS ---
    def spend_point(self) -> None:
        if self.points < 1:
            raise InvariantViolation(f"Player ({self.user}) would go below zero points.")
        self.points -= 1

    def gain_points(self, amount: int) -> None:
        self.points += amount

    def take_hit(self) -> None:
        if self.health < 1:
            raise InvariantViolation(f"Player ({self.user}) is already dead.")
        self.health -= 1

    def surrender_points(self) -> int:
        """Empty the point stockpile and hand it over (to the killer)."""
        points, self.points = self.points, 0
        return points

    def move_to(self, position: Position) -> None:
        self.x, self.y = position

    def level_up(self) -> None:
        self.level += 1
