"""
Deterministic spawn positions for joining players.

Every client must be able to recompute the next spawn cell from the public seed and the current board,
so the stream is counter based: draw `i` is the first 8 bytes (little-endian) of SHA-256(seed || i).
The low 32 bits (mod width) give x, the high 32 bits (mod height) give y. Occupied candidates are skipped.

* `preview()` walks the stream from the stored counter WITHOUT storing anything: repeatable.
* `consume()` does the same walk and then stores the counter after the accepted draw.
"""

import hashlib
from dataclasses import dataclass
from typing import Iterator, Protocol

from src.core.exceptions import OutOfRangeError
from src.tanks.moves import Position

UINT32_MASK = 0xFFFF_FFFF


class Board(Protocol):
    """Just the parts the spawn stream needs"""

    def is_occupied(self, position: Position) -> bool: ...
    def occupied_count(self) -> int: ...


def draw(seed: int, index: int) -> int:
    """64 bit value number `index` of the stream seeded with `seed`."""
    data = seed.to_bytes(8, "little") + index.to_bytes(8, "little")
    return int.from_bytes(hashlib.sha256(data).digest()[:8], "little")


@dataclass
class SpawnStream:
    seed: int
    width: int
    height: int
    counter: int = 0  # index of the next unused draw

    def preview(self, board: Board) -> Position:
        """Next free spawn cell. Does not advance the stream."""
        _, position = self._next_free(board)
        return position

    def consume(self, board: Board) -> Position:
        """Next free spawn cell. Advances the stream past the accepted draw."""
        index, position = self._next_free(board)
        self.counter = index + 1
        return position

    def _next_free(self, board: Board) -> tuple[int, Position]:
        # without a free cell the walk below would never end
        cells = self.width * self.height
        if board.occupied_count() >= cells:
            raise OutOfRangeError("Players", f"<= {cells} (board is full)")
        for index, position in self._candidates():
            if not board.is_occupied(position):
                return index, position
        raise AssertionError("unreachable: the candidate stream is infinite")

    def _candidates(self) -> Iterator[tuple[int, Position]]:
        index = self.counter
        while True:
            value = draw(self.seed, index)
            low = value & UINT32_MASK
            high = value >> 32
            yield index, (low % self.width, high % self.height)
            index += 1
