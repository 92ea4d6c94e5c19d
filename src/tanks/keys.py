"""
Key and signature primitives (thin wrapper over `ecdsa`).

Wire contract shared with the key generation / registration collaborators:
* verifying key: url-safe base64 (no padding) of the compressed secp256k1 point (33 bytes)
* signing key: url-safe base64 (no padding) of the raw scalar (32 bytes)
* signature: uppercase hex of the 64 byte `r || s` form, SHA-256 digest, low-S
"""

import base64
import binascii
import hashlib
from typing import NamedTuple

from ecdsa import SECP256k1, BadSignatureError, SigningKey, VerifyingKey
from ecdsa.errors import MalformedPointError
from ecdsa.util import sigdecode_string, sigencode_string_canonize

from src.core.exceptions import MalformedKeyError, SignatureInvalidError

CURVE = SECP256k1
HASH_FUNCTION = hashlib.sha256
SIGNATURE_BYTES = 64


class KeyPair(NamedTuple):
    signing_key: str
    verifying_key: str


def b64encode(data: bytes) -> str:
    return base64.urlsafe_b64encode(data).decode("ascii").rstrip("=")


def b64decode(text: str) -> bytes:
    """Decoding accepts both the padded and the unpadded form."""
    padded = text + "=" * (-len(text) % 4)
    try:
        return base64.urlsafe_b64decode(padded.encode("ascii"))
    except (binascii.Error, UnicodeEncodeError, ValueError) as exc:
        raise MalformedKeyError(f"Not url-safe base64: {text!r}") from exc


def generate_keys() -> KeyPair:
    """Fresh (signing key, verifying key) pair in their text forms."""
    signing_key = SigningKey.generate(curve=CURVE, hashfunc=HASH_FUNCTION)
    return KeyPair(
        signing_key=b64encode(signing_key.to_string()),
        verifying_key=encode_verifying_key(signing_key.get_verifying_key()),
    )


def encode_verifying_key(key: VerifyingKey) -> str:
    return b64encode(key.to_string("compressed"))


def parse_verifying_key(text: str) -> VerifyingKey:
    try:
        return VerifyingKey.from_string(
            b64decode(text), curve=CURVE, hashfunc=HASH_FUNCTION
        )
    except (MalformedPointError, ValueError) as exc:
        raise MalformedKeyError("Malformed public key.") from exc


def parse_signing_key(text: str) -> SigningKey:
    try:
        return SigningKey.from_string(
            b64decode(text), curve=CURVE, hashfunc=HASH_FUNCTION
        )
    except (MalformedPointError, ValueError) as exc:
        raise MalformedKeyError("Malformed private key.") from exc


def sign(key: SigningKey, payload: bytes) -> str:
    """Deterministic (RFC 6979) signature, normalised to low-S."""
    signature = key.sign_deterministic(
        payload, hashfunc=HASH_FUNCTION, sigencode=sigencode_string_canonize
    )
    return signature.hex().upper()


def parse_signature(text: str) -> bytes:
    """Signature text -> raw `r || s`. High-S signatures are rejected so a signature has a single valid form."""
    try:
        raw = bytes.fromhex(text)
    except ValueError as exc:
        raise SignatureInvalidError("Signature is not hex encoded.") from exc
    if len(raw) != SIGNATURE_BYTES:
        raise SignatureInvalidError(
            f"Signature must be {SIGNATURE_BYTES} bytes, got {len(raw)}."
        )
    if raw.hex().upper() != text:
        raise SignatureInvalidError("Signature is not in canonical form (uppercase hex, no separators).")
    _, s = sigdecode_string(raw, CURVE.order)
    if s > CURVE.order // 2:
        raise SignatureInvalidError("Signature is not in low-S form.")
    return raw


def verify(key: VerifyingKey, payload: bytes, signature: str) -> None:
    raw = parse_signature(signature)
    try:
        key.verify(raw, payload, hashfunc=HASH_FUNCTION, sigdecode=sigdecode_string)
    except BadSignatureError as exc:
        raise SignatureInvalidError("Invalid signature.") from exc
