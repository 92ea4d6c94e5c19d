"""
Type definitions used across layers
"""

from enum import StrEnum


class MoveKind(StrEnum):
    JOIN = "Join"
    DRIVE = "Drive"
    SHOOT = "Shoot"
    GIFT = "Gift"
    VOTE = "Vote"
    HANDLE_VOTES = "HandleVotes"
    UPGRADE = "Upgrade"


# Kinds that place the player on a cell / kinds that act on another player.
# NOTE every other field must be absent, since it would not be covered by the signature.
POSITIONAL_KINDS = frozenset({MoveKind.JOIN, MoveKind.DRIVE})
TARGETED_KINDS = frozenset({MoveKind.SHOOT, MoveKind.GIFT, MoveKind.VOTE})
