"""Unit tests for bcrypt password hashing."""

from src.hb_gateway.auth.password import hash_password, verify_password


def test_hash_is_not_plain() -> None:
    hashed = hash_password("Warden2026")
    assert hashed != "Warden2026"
    assert hashed.startswith("$2")


def test_verify_round_trip() -> None:
    hashed = hash_password("Warden2026")
    assert verify_password("Warden2026", hashed) is True
    assert verify_password("warden2026", hashed) is False


def test_salted() -> None:
    assert hash_password("Warden2026") != hash_password("Warden2026")


def test_malformed_stored_hash_is_a_failed_login() -> None:
    assert verify_password("Warden2026", "not-a-bcrypt-hash") is False
