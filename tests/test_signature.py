"""Tests for GitHub webhook HMAC signing and verification."""

import hashlib
import hmac

from changelog_sync.signature import sign_payload, verify_signature

SECRET = "s3cret"
BODY = b'{"ref": "refs/heads/main", "commits": []}'


def test_sign_payload_format():
    """Signatures use GitHub's sha256=<hex> format."""
    expected = hmac.new(SECRET.encode(), BODY, hashlib.sha256).hexdigest()
    assert sign_payload(BODY, SECRET) == f"sha256={expected}"


def test_verify_valid_signature():
    assert verify_signature(BODY, sign_payload(BODY, SECRET), SECRET) is True


def test_verify_round_trip_various_bodies():
    for secret, body in [("a", b""), ("another secret", b"\x00\xff"), ("k", "ünïcode".encode())]:
        assert verify_signature(body, sign_payload(body, secret), secret)


def test_verify_rejects_every_single_byte_body_mutation():
    signature = sign_payload(BODY, SECRET)
    for i in range(len(BODY)):
        mutated = bytearray(BODY)
        mutated[i] ^= 0x01
        assert verify_signature(bytes(mutated), signature, SECRET) is False


def test_verify_rejects_every_single_char_signature_mutation():
    signature = sign_payload(BODY, SECRET)
    for i in range(len(signature)):
        replacement = "0" if signature[i] != "0" else "1"
        mutated = signature[:i] + replacement + signature[i + 1:]
        assert verify_signature(BODY, mutated, SECRET) is False


def test_verify_rejects_wrong_secret():
    assert verify_signature(BODY, sign_payload(BODY, "other"), SECRET) is False


def test_verify_rejects_missing_signature():
    assert verify_signature(BODY, None, SECRET) is False
    assert verify_signature(BODY, "", SECRET) is False


def test_verify_rejects_empty_secret():
    assert verify_signature(BODY, sign_payload(BODY, ""), "") is False


def test_reserialized_body_does_not_verify():
    """Whitespace differences change the digest, so the raw bytes must be used."""
    signature = sign_payload(BODY, SECRET)
    compact = b'{"ref":"refs/heads/main","commits":[]}'
    assert verify_signature(compact, signature, SECRET) is False
