"""
Signature chaining of move lines.

Each signature covers the canonical encoding of its move followed directly by the signature text of the
previous move in the same game (nothing for the first move). Every accepted move therefore commits to the
whole chain before it: moves cannot be reordered, replayed into another game or dropped without breaking
every later signature.
"""

from typing import Iterable, Mapping, Optional

from ecdsa import VerifyingKey

from src.core.exceptions import SignatureInvalidError
from src.core.models import UserModel
from src.tanks.keys import parse_signing_key, parse_verifying_key, sign, verify
from src.tanks.moves import MoveLine, canonical_encoding

KeyDirectory = Mapping[int, VerifyingKey]


def signing_payload(move: MoveLine, previous_signature: Optional[str]) -> bytes:
    data = canonical_encoding(move)
    if previous_signature:
        data += previous_signature
    return data.encode("utf-8")


def sign_move(
    move: MoveLine, previous_signature: Optional[str], signing_key: str
) -> MoveLine:
    """Return a copy of the move carrying the chained signature of `signing_key` (text form)."""
    key = parse_signing_key(signing_key)
    return move.with_signature(sign(key, signing_payload(move, previous_signature)))


def verify_signature(
    move: MoveLine, previous_signature: Optional[str], keys: KeyDirectory
) -> None:
    """Raise SignatureInvalidError unless the authorizer signed this move on top of `previous_signature`."""
    key = keys.get(move.authorizer)
    if key is None:
        raise SignatureInvalidError(f"No public key known for user ({move.authorizer}).")
    verify(key, signing_payload(move, previous_signature), move.signature)


def build_key_directory(users: Iterable[UserModel]) -> dict[int, VerifyingKey]:
    """Parse the stored public keys. A key that does not parse raises MalformedKeyError."""
    return {user.id: parse_verifying_key(user.public_key) for user in users}
