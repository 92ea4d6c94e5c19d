"""The Board keeps track of which player stands on which cell. It is the inverse of every Player's position."""

from dataclasses import dataclass, field

from src.core.exceptions import InvariantViolation
from src.tanks.moves import Position


@dataclass
class Board:
    width: int
    height: int
    cells: dict[Position, int] = field(default_factory=dict)

    def occupant(self, position: Position) -> int | None:
        return self.cells.get(position)

    def is_occupied(self, position: Position) -> bool:
        return position in self.cells

    def occupied_count(self) -> int:
        return len(self.cells)

    def is_within_bounds(self, position: Position) -> bool:
        x, y = position
        return (0 <= x < self.width) and (0 <= y < self.height)

    def place(self, player: int, position: Position) -> None:
        if self.is_occupied(position):
            raise InvariantViolation(
                f"Cell {position} already taken by player ({self.cells[position]})."
            )
        self.cells[position] = player

    def move_player(self, player: int, from_position: Position, to_position: Position) -> None:
        """Vacate the old cell and occupy the new one."""
        if self.cells.get(from_position) != player:
            raise InvariantViolation(f"Player ({player}) is not standing on {from_position}.")
        del self.cells[from_position]
        self.place(player, to_position)
