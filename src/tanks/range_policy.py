"""
Range policy: how far a player can reach (shoot) at a given level.

Closed set of two policies, each with a short text form used in the stored settings:
* Linear: range = level + 1. Text: `L`
* Array: explicit lookup table indexed by level. Text: `A<v0>,<v1>,...,<vn>|`
"""

from dataclasses import dataclass
from typing import Self

from src.core.exceptions import OutOfRangeError, PolicyMalformedError

LINEAR_PREFIX = "L"
ARRAY_PREFIX = "A"
ARRAY_SEPARATOR = ","
ARRAY_END = "|"


@dataclass(frozen=True)
class LinearRange:
    def get_range(self, level: int) -> int:
        return level + 1

    def to_text(self) -> str:
        return LINEAR_PREFIX


@dataclass(frozen=True)
class ArrayRange:
    table: tuple[int, ...]

    @classmethod
    def from_text(cls, text: str) -> Self:
        body = text.removeprefix(ARRAY_PREFIX).removesuffix(ARRAY_END)
        elements = body.split(ARRAY_SEPARATOR)
        if not all(element.isascii() and element.isdigit() for element in elements):
            raise PolicyMalformedError(f"Malformed range table: {text!r}")
        return cls(tuple(int(element) for element in elements))

    def get_range(self, level: int) -> int:
        """Levels outside the table are a rule violation, not a crash."""
        if not 0 <= level < len(self.table):
            raise OutOfRangeError("Level", f"0 <= level < {len(self.table)}")
        return self.table[level]

    def to_text(self) -> str:
        return f"{ARRAY_PREFIX}{ARRAY_SEPARATOR.join(str(v) for v in self.table)}{ARRAY_END}"

    def covers(self, max_level: int) -> bool:
        """True if every level a player can reach has a range"""
        return max_level < len(self.table)


RangePolicy = LinearRange | ArrayRange


def parse_range_policy(text: str) -> RangePolicy:
    """Parse the stored text form. Anything else than the two grammars is a PolicyMalformedError."""
    if text == LINEAR_PREFIX:
        return LinearRange()
    if text.startswith(ARRAY_PREFIX):
        return ArrayRange.from_text(text)
    raise PolicyMalformedError(f"Unknown range policy: {text!r}")
