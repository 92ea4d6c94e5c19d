"""
A move line: the atomic signed command of the game, and its canonical encoding.

The canonical encoding is the exact text that gets signed. It is NOT a serialization of the dataclass,
but a fixed compact grammar, so independent implementations sign and verify identically:

    <authorizer><tag><payload>|

* Join: `J<x>,<y>` / Drive: `D<x>,<y>`
* Shoot: `S<target>` / Gift: `G<target>` / Vote: `V<target>`
* HandleVotes: `H` / Upgrade: `U`

The trailing `|` marks where the signature would start. The signature itself is never part of the payload.
"""

from dataclasses import dataclass, replace
from typing import Optional, Self

from src.core.exceptions import MalformedMoveError
from src.core.models import MoveModel
from src.core.shared_types import POSITIONAL_KINDS, TARGETED_KINDS, MoveKind

Position = tuple[int, int]

KIND_TO_TAG: dict[MoveKind, str] = {
    MoveKind.JOIN: "J",
    MoveKind.DRIVE: "D",
    MoveKind.SHOOT: "S",
    MoveKind.GIFT: "G",
    MoveKind.VOTE: "V",
    MoveKind.HANDLE_VOTES: "H",
    MoveKind.UPGRADE: "U",
}

PAYLOAD_END = "|"


@dataclass(frozen=True)
class MoveLine:
    kind: MoveKind
    authorizer: int
    x: Optional[int] = None
    y: Optional[int] = None
    target: Optional[int] = None
    signature: str = ""

    @classmethod
    def from_model(cls, model: MoveModel) -> Self:
        """Parse the transport model. Unknown kinds are malformed moves."""
        if model.kind not in {kind.value for kind in MoveKind}:
            raise MalformedMoveError(f"Unknown move kind: {model.kind!r}")
        return cls(
            kind=MoveKind(model.kind),
            authorizer=model.authorizer,
            x=model.x,
            y=model.y,
            target=model.target,
            signature=model.signature,
        )

    def to_model(self) -> MoveModel:
        return MoveModel(
            kind=str(self.kind),
            authorizer=self.authorizer,
            signature=self.signature,
            x=self.x,
            y=self.y,
            target=self.target,
        )

    @property
    def position(self) -> Position:
        """Claimed cell of a Join / destination of a Drive."""
        if self.x is None or self.y is None:
            raise MalformedMoveError(f"{self.kind} requires both x and y.")
        return self.x, self.y

    @property
    def target_id(self) -> int:
        if self.target is None:
            raise MalformedMoveError(f"{self.kind} requires a target.")
        return self.target

    def with_signature(self, signature: str) -> "MoveLine":
        return replace(self, signature=signature)

    def assert_well_formed(self) -> None:
        """
        Every field the kind requires is present, every field it does not use is absent, numbers are plain ints.

        An unused field would sit outside the signed payload, so it could be changed without breaking the signature.
        """
        _assert_int("authorizer", self.authorizer)

        if self.kind in POSITIONAL_KINDS:
            x, y = self.position
            _assert_int("x", x, non_negative=True)
            _assert_int("y", y, non_negative=True)
        elif self.x is not None or self.y is not None:
            raise MalformedMoveError(f"{self.kind} does not take a position.")

        if self.kind in TARGETED_KINDS:
            _assert_int("target", self.target_id)
        elif self.target is not None:
            raise MalformedMoveError(f"{self.kind} does not take a target.")


def canonical_encoding(move: MoveLine) -> str:
    """The text that gets signed (without the previous signature the chain appends to it)."""
    move.assert_well_formed()
    tag = KIND_TO_TAG[move.kind]
    if move.kind in POSITIONAL_KINDS:
        x, y = move.position
        payload = f"{x},{y}"
    elif move.kind in TARGETED_KINDS:
        payload = f"{move.target_id}"
    else:
        payload = ""
    return f"{move.authorizer}{tag}{payload}{PAYLOAD_END}"


def _assert_int(name: str, value: object, non_negative: bool = False) -> None:
    # bool is an int subclass, but True/False would encode as text that is not base-10
    if isinstance(value, bool) or not isinstance(value, int):
        raise MalformedMoveError(f"{name} must be an integer, got {value!r}")
    if non_negative and value < 0:
        raise MalformedMoveError(f"{name} must not be negative, got {value}")
