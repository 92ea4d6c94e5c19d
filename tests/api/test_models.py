import pytest
from pydantic import ValidationError

from src.api.models import (
    CreateGameRequest,
    MoveLineSchema,
    MoveRequest,
    RegisterUserRequest,
    SettingsSchema,
)
from src.core.exceptions import InvalidRequestError
from src.core.shared_types import MoveKind
from src.tanks.keys import KeyPair


# -- Validation - SettingsSchema --
def test_default_settings() -> None:
    settings = SettingsSchema()
    assert (settings.width, settings.height, settings.health) == (5, 5, 3)
    assert settings.range_policy == "L"
    assert settings.upgrade_spends_point is False


@pytest.mark.parametrize("range_policy", ["L", "A1,1,3|", "A1,2,3"])
def test_valid_range_policy(range_policy: str) -> None:
    request = CreateGameRequest(settings=SettingsSchema(range_policy=range_policy))
    assert request.settings.range_policy == range_policy


@pytest.mark.parametrize("range_policy", ["", "X", "A", "A1.2.3|", "A1,,3|"])
def test_invalid_range_policy(range_policy: str) -> None:
    """Custom exception passes straight through pydantic."""
    with pytest.raises(InvalidRequestError):
        SettingsSchema(range_policy=range_policy)


def test_range_table_must_cover_every_level() -> None:
    with pytest.raises(InvalidRequestError):
        SettingsSchema(range_policy="A1,2|", max_level=2)
    assert SettingsSchema(range_policy="A1,2|", max_level=1).max_level == 1


@pytest.mark.parametrize(
    "field, value",
    [("seed", -1), ("seed", 2**64), ("width", 0), ("height", 0), ("health", 0), ("max_level", -1)],
)
def test_settings_out_of_bounds(field: str, value: int) -> None:
    with pytest.raises(ValidationError):
        SettingsSchema(**{field: value})


def test_largest_seed() -> None:
    assert SettingsSchema(seed=2**64 - 1).seed == 2**64 - 1


# -- Validation - RegisterUserRequest --
def test_valid_public_key(user_keys: dict[int, KeyPair]) -> None:
    request = RegisterUserRequest(public_key=user_keys[1].verifying_key)
    assert request.public_key == user_keys[1].verifying_key


@pytest.mark.parametrize("public_key", ["", "definitely not a key", "A" * 44])
def test_invalid_public_key(public_key: str) -> None:
    with pytest.raises(InvalidRequestError):
        RegisterUserRequest(public_key=public_key)


def test_private_key_is_not_a_public_key(user_keys: dict[int, KeyPair]) -> None:
    with pytest.raises(InvalidRequestError):
        RegisterUserRequest(public_key=user_keys[1].signing_key)


# -- Validation - MoveRequest --
def test_move_request() -> None:
    request = MoveRequest(
        game_id=1,
        move={"kind": "Drive", "authorizer": 3, "x": 1, "y": 2, "signature": "AB"},
    )
    assert request.move.kind == MoveKind.DRIVE
    assert request.move.target is None


def test_unknown_move_kind() -> None:
    with pytest.raises(ValidationError):
        MoveLineSchema(kind="Teleport", authorizer=1, signature="AB")


def test_negative_coordinates() -> None:
    with pytest.raises(ValidationError):
        MoveLineSchema(kind="Drive", authorizer=1, x=-1, y=0, signature="AB")


@pytest.mark.parametrize(
    "field, value",
    [("authorizer", 2**31), ("authorizer", -(2**31) - 1), ("target", 2**31), ("x", 2**32), ("y", 2**32)],
)
def test_move_numbers_out_of_bounds(field: str, value: int) -> None:
    move = {"kind": "Drive", "authorizer": 1, "x": 0, "y": 0, "signature": "AB", field: value}
    with pytest.raises(ValidationError):
        MoveLineSchema(**move)


def test_move_numbers_at_bounds() -> None:
    move = MoveLineSchema(kind="Drive", authorizer=2**31 - 1, x=2**32 - 1, y=0, signature="AB")
    assert move.x == 2**32 - 1
