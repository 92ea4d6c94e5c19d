"""
Custom exceptions shared by all layers.

Every rule violation is a GameError, so the service and API layers can catch the whole family at once
and leave the specific type to the layer that raised it.
"""

from typing import Optional


class GameError(Exception):
    """Top level exception for anything the rules or the request layer reject."""


class NotFoundError(GameError):
    """A referenced player (or user) does not exist."""

    def __init__(self, what: str) -> None:
        self.what = what
        super().__init__(f"Could not find {what}.")


class OutOfRangeError(GameError):
    """A numeric or positional precondition failed. Carries the quantity and the valid range."""

    def __init__(self, quantity: str, valid_range: str) -> None:
        self.quantity = quantity
        self.valid_range = valid_range
        super().__init__(f"{quantity} out of range: {valid_range}.")


class UnauthorizedError(GameError):
    """The authorizer is not permitted to perform the move (ex. joining twice)."""

    def __init__(self, user_id: int) -> None:
        self.user_id = user_id
        super().__init__(f"Player ({user_id}) is unauthorized.")


class MalformedMoveError(GameError):
    """A field required by the move kind is missing, or a field it does not use is present."""


class SignatureInvalidError(GameError):
    """Chain signature verification failed."""


class MalformedKeyError(SignatureInvalidError):
    """Key text does not decode into a secp256k1 key."""


class PolicyMalformedError(GameError):
    """Range policy text did not parse."""


class ReplayError(GameError):
    """Replaying a move chain stopped at the first invalid move."""

    def __init__(self, index: int, cause: GameError) -> None:
        self.index = index
        self.cause = cause
        super().__init__(f"Move {index} rejected: {cause}")


class InvalidRequestError(GameError):
    """Request model failed validation."""


class RepositoryError(GameError):
    """Record missing or could not be written."""


class ChainConflictError(RepositoryError):
    """Another move was stored at the same chain index first."""


class CorruptedGameError(RepositoryError):
    """A stored move chain no longer replays."""

    def __init__(self, game_id: int, cause: Optional[GameError] = None) -> None:
        self.game_id = game_id
        self.cause = cause
        super().__init__(f"Corrupted game ({game_id}): {cause}")


class InvariantViolation(RuntimeError):
    """
    Commit found the state in a shape validation should have made impossible.

    NOT a GameError: this is a programming fault and should never be handled as a rejected move.
    """
