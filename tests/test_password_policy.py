"""Tests for the password strength policy and hashing helpers."""

from mwmgr.services.password_policy import (
    PasswordRequirements,
    check_password,
    hash_password,
    validate_password,
)


class TestValidatePassword:
    """Test password strength validation."""

    def test_missing_uppercase_fails(self) -> None:
        """abc123 has no uppercase letter."""
        valid, errors = validate_password("abc123")
        assert valid is False
        assert errors == ["Password must contain at least one uppercase letter"]

    def test_strong_password_passes(self) -> None:
        valid, errors = validate_password("Abc123")
        assert valid is True
        assert errors == []

    def test_too_short(self) -> None:
        valid, errors = validate_password("Ab1")
        assert valid is False
        assert any("at least 6 characters" in e for e in errors)

    def test_reports_every_failure(self) -> None:
        valid, errors = validate_password("")
        assert valid is False
        assert len(errors) == 4

    def test_custom_requirements(self) -> None:
        relaxed = PasswordRequirements(min_length=4, require_uppercase=False, require_digit=False)
        assert validate_password("abcd", relaxed) == (True, [])


class TestHashing:
    """Test bcrypt helpers."""

    def test_hash_and_check(self) -> None:
        password_hash = hash_password("Abc123", rounds=4)
        assert password_hash != "Abc123"
        assert check_password("Abc123", password_hash)
        assert not check_password("abc123", password_hash)

    def test_malformed_hash_does_not_verify(self) -> None:
        assert check_password("Abc123", "not-a-bcrypt-hash") is False

    def test_longer_than_bcrypt_limit_fails(self) -> None:
        valid, errors = validate_password("Aa1" + "x" * 80)
        assert not valid
        assert errors == ["Password must be at most 72 bytes long"]

    def test_limit_counts_utf8_bytes(self) -> None:
        # 38 characters, 73 bytes
        valid, _ = validate_password("Aa1" + "é" * 35)
        assert not valid
        assert validate_password("Aa1" + "x" * 69)[0]
