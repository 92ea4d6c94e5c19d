"""Unit tests for /src/tanks/keys.py"""

import pytest
from ecdsa.util import sigdecode_string, sigencode_string

from src.core.exceptions import MalformedKeyError, SignatureInvalidError
from src.tanks.keys import (
    CURVE,
    KeyPair,
    b64decode,
    encode_verifying_key,
    parse_signing_key,
    parse_verifying_key,
    sign,
    verify,
)

PAYLOAD = b"1J4,0|"


@pytest.fixture
def key_pair(user_keys: dict[int, KeyPair]) -> KeyPair:
    return user_keys[1]


def test_key_text_forms(key_pair: KeyPair) -> None:
    """Url-safe, unpadded base64 of the 32 byte scalar / 33 byte compressed point."""
    assert "=" not in key_pair.signing_key
    assert "=" not in key_pair.verifying_key
    assert len(b64decode(key_pair.signing_key)) == 32
    assert len(b64decode(key_pair.verifying_key)) == 33
    assert b64decode(key_pair.verifying_key)[0] in (2, 3)


def test_verifying_key_belongs_to_signing_key(key_pair: KeyPair) -> None:
    signing_key = parse_signing_key(key_pair.signing_key)
    assert encode_verifying_key(signing_key.get_verifying_key()) == key_pair.verifying_key


def test_padded_key_is_accepted(key_pair: KeyPair) -> None:
    padded = key_pair.verifying_key + "=" * (-len(key_pair.verifying_key) % 4)
    key = parse_verifying_key(padded)
    assert encode_verifying_key(key) == key_pair.verifying_key


@pytest.mark.parametrize("text", ["", "not base64 at all!", "AAAA", "A" * 44])
def test_malformed_verifying_key(text: str) -> None:
    with pytest.raises(MalformedKeyError):
        parse_verifying_key(text)


def test_malformed_signing_key() -> None:
    with pytest.raises(MalformedKeyError):
        parse_signing_key("AAAA")


def test_sign_and_verify(key_pair: KeyPair) -> None:
    signature = sign(parse_signing_key(key_pair.signing_key), PAYLOAD)
    assert len(signature) == 128
    assert signature == signature.upper()
    verify(parse_verifying_key(key_pair.verifying_key), PAYLOAD, signature)


def test_signing_is_deterministic(key_pair: KeyPair) -> None:
    key = parse_signing_key(key_pair.signing_key)
    assert sign(key, PAYLOAD) == sign(key, PAYLOAD)


def test_tampered_payload_fails(key_pair: KeyPair) -> None:
    signature = sign(parse_signing_key(key_pair.signing_key), PAYLOAD)
    with pytest.raises(SignatureInvalidError):
        verify(parse_verifying_key(key_pair.verifying_key), b"1J4,1|", signature)


def test_other_key_fails(user_keys: dict[int, KeyPair]) -> None:
    signature = sign(parse_signing_key(user_keys[1].signing_key), PAYLOAD)
    with pytest.raises(SignatureInvalidError):
        verify(parse_verifying_key(user_keys[2].verifying_key), PAYLOAD, signature)


@pytest.mark.parametrize("signature", ["", "XYZ", "00" * 63, "00" * 65])
def test_unparsable_signature(key_pair: KeyPair, signature: str) -> None:
    with pytest.raises(SignatureInvalidError):
        verify(parse_verifying_key(key_pair.verifying_key), PAYLOAD, signature)


def test_high_s_signature_is_rejected(key_pair: KeyPair) -> None:
    """(r, n - s) verifies mathematically, but would give the same move a second valid signature."""
    signature = sign(parse_signing_key(key_pair.signing_key), PAYLOAD)
    r, s = sigdecode_string(bytes.fromhex(signature), CURVE.order)
    high_s = sigencode_string(r, CURVE.order - s, CURVE.order).hex().upper()
    with pytest.raises(SignatureInvalidError):
        verify(parse_verifying_key(key_pair.verifying_key), PAYLOAD, high_s)


@pytest.mark.parametrize(
    "respell",
    [
        str.lower,
        lambda text: " ".join(text[i : i + 2] for i in range(0, len(text), 2)),
        lambda text: " ".join(text[i : i + 2] for i in range(0, len(text), 2)).lower(),
    ],
    ids=["lowercase", "spaced", "spaced-lowercase"],
)
def test_non_canonical_signature_text_is_rejected(key_pair: KeyPair, respell) -> None:
    """The next move signs over this exact text: the same bytes spelled differently are not the same signature."""
    signature = sign(parse_signing_key(key_pair.signing_key), PAYLOAD)
    variant = respell(signature)
    assert variant != signature
    assert bytes.fromhex(variant) == bytes.fromhex(signature)
    with pytest.raises(SignatureInvalidError):
        verify(parse_verifying_key(key_pair.verifying_key), PAYLOAD, variant)
