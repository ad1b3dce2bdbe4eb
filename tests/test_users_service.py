"""Tests for UsersService."""

import pytest

from mwmgr.config import Config
from mwmgr.models import ErrorKind, UserRole

from .conftest import PASSWORD


class TestCreateUser:
    """Test user creation rules."""

    @pytest.mark.asyncio
    async def test_admin_creates_user_with_hashed_password(self, engine, admin) -> None:
        result = await engine.users_service.create_user(
            admin, "mrossi", "m.rossi@example.com", "Mario", "Rossi", PASSWORD, UserRole.REVIEWER
        )

        assert result.success
        user = result.data
        assert user.role == UserRole.REVIEWER
        assert user.is_active
        stored_hash = await engine.users_service.get_password_hash(user.id)
        assert stored_hash and stored_hash != PASSWORD

    @pytest.mark.asyncio
    async def test_non_admin_cannot_create(self, engine, writer) -> None:
        result = await engine.users_service.create_user(
            writer, "other", "other@example.com", "O", "T", PASSWORD
        )
        assert not result.success
        assert result.kind == ErrorKind.PERMISSION_DENIED

    @pytest.mark.asyncio
    async def test_duplicate_username_is_case_insensitive(self, engine, admin, alice) -> None:
        result = await engine.users_service.create_user(
            admin, "ALICE", "new@example.com", "Alice", "Two", PASSWORD
        )
        assert not result.success
        assert result.kind == ErrorKind.CONFLICT

    @pytest.mark.asyncio
    async def test_duplicate_email_counts_inactive_users(self, engine, admin, alice) -> None:
        await engine.users_service.deactivate_user(admin, alice.id)

        result = await engine.users_service.create_user(
            admin, "alice2", "Alice@Example.com", "Alice", "Two", PASSWORD
        )
        assert not result.success
        assert result.error == "Email already registered"

    @pytest.mark.asyncio
    async def test_validation_errors(self, engine, admin) -> None:
        service = engine.users_service
        assert (await service.create_user(admin, "", "x@example.com", "X", "Y", PASSWORD)).kind == ErrorKind.VALIDATION
        assert (await service.create_user(admin, "xuser", "not-an-email", "X", "Y", PASSWORD)).kind == ErrorKind.VALIDATION
        weak = await service.create_user(admin, "xuser", "x@example.com", "X", "Y", "abc123")
        assert weak.kind == ErrorKind.VALIDATION
        assert "uppercase" in weak.error

    @pytest.mark.asyncio
    async def test_overlong_password_is_a_validation_error(self, engine, admin) -> None:
        result = await engine.users_service.create_user(
            admin, "longpw", "longpw@example.com", "Long", "Pw", "Aa1" + "x" * 80
        )
        assert result.kind == ErrorKind.VALIDATION
        assert await engine.users_service.get_user_by_username("longpw") is None

    @pytest.mark.asyncio
    async def test_username_must_be_ascii(self, engine, admin) -> None:
        result = await engine.users_service.create_user(admin, "élise", "elise@example.com", "Elise", "T", PASSWORD)
        assert result.kind == ErrorKind.VALIDATION

    @pytest.mark.asyncio
    async def test_bootstrap_admin_only_on_empty_store(self, engine, admin) -> None:
        assert admin.role == UserRole.ADMIN
        assert await engine.users_service.bootstrap_admin("second", "s@example.com", PASSWORD) is None


class TestRegistration:
    """Test self-registration."""

    @pytest.mark.asyncio
    async def test_disabled_by_default(self, engine) -> None:
        result = await engine.users_service.register("newbie", "n@example.com", "New", "Bie", PASSWORD)
        assert result.kind == ErrorKind.PERMISSION_DENIED

    @pytest.mark.asyncio
    async def test_creates_writer_when_enabled(self, engine, monkeypatch) -> None:
        monkeypatch.setattr(Config, "ENABLE_REGISTRATION", True)
        result = await engine.users_service.register("newbie", "n@example.com", "New", "Bie", PASSWORD)
        assert result.success
        assert result.data.role == UserRole.WRITER


class TestUpdateUser:
    """Test profile and role updates."""

    @pytest.mark.asyncio
    async def test_user_edits_own_profile(self, engine, alice) -> None:
        result = await engine.users_service.update_user(alice, alice.id, {"first_name": "Alicia"})
        assert result.success
        assert (await engine.users_service.get_user(alice.id)).first_name == "Alicia"

    @pytest.mark.asyncio
    async def test_user_cannot_change_own_role(self, engine, alice) -> None:
        result = await engine.users_service.update_user(alice, alice.id, {"role": "admin"})
        assert result.kind == ErrorKind.PERMISSION_DENIED

    @pytest.mark.asyncio
    async def test_user_cannot_edit_others(self, engine, alice, bob) -> None:
        result = await engine.users_service.update_user(alice, bob.id, {"first_name": "X"})
        assert result.kind == ErrorKind.PERMISSION_DENIED

    @pytest.mark.asyncio
    async def test_admin_changes_role(self, engine, admin, alice) -> None:
        result = await engine.users_service.update_user(admin, alice.id, {"role": UserRole.REVIEWER})
        assert result.success
        assert (await engine.users_service.get_user(alice.id)).role == UserRole.REVIEWER

    @pytest.mark.asyncio
    async def test_email_conflict_on_update(self, engine, admin, alice, bob) -> None:
        result = await engine.users_service.update_user(admin, bob.id, {"email": "ALICE@example.com"})
        assert result.kind == ErrorKind.CONFLICT


class TestActivationAndDeletion:
    """Test soft and hard deletion."""

    @pytest.mark.asyncio
    async def test_deactivate_and_activate(self, engine, admin, alice) -> None:
        result = await engine.users_service.deactivate_user(admin, alice.id)
        assert result.success and result.data.is_active is False

        result = await engine.users_service.activate_user(admin, alice.id)
        assert result.success and result.data.is_active is True

    @pytest.mark.asyncio
    async def test_admin_cannot_deactivate_or_delete_self(self, engine, admin) -> None:
        assert not (await engine.users_service.deactivate_user(admin, admin.id)).success
        assert not (await engine.users_service.delete_user(admin, admin.id)).success

    @pytest.mark.asyncio
    async def test_delete_removes_password(self, engine, admin, alice) -> None:
        result = await engine.users_service.delete_user(admin, alice.id)

        assert result.success
        assert await engine.users_service.get_user(alice.id) is None
        assert await engine.users_service.get_password_hash(alice.id) is None

    @pytest.mark.asyncio
    async def test_unknown_user(self, engine, admin) -> None:
        result = await engine.users_service.delete_user(admin, "00000000-0000-0000-0000-000000000000")
        assert result.kind == ErrorKind.NOT_FOUND


class TestLookups:
    """Test queries."""

    @pytest.mark.asyncio
    async def test_lookup_by_username_and_email(self, engine, alice) -> None:
        assert (await engine.users_service.get_user_by_username("Alice")).id == alice.id
        assert (await engine.users_service.get_user_by_email("ALICE@EXAMPLE.COM")).id == alice.id
        assert await engine.users_service.get_user_by_username("nobody") is None

    @pytest.mark.asyncio
    async def test_role_counts(self, engine, admin, writer, reviewer, alice) -> None:
        assert await engine.users_service.role_counts() == {"writer": 2, "reviewer": 1, "admin": 1}

    @pytest.mark.asyncio
    async def test_list_active_only(self, engine, admin, alice, bob) -> None:
        await engine.users_service.deactivate_user(admin, bob.id)
        usernames = {u.username for u in await engine.users_service.list_users(active_only=True)}
        assert usernames == {"admin", "alice"}
