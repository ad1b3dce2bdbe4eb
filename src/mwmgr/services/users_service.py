"""
Users Service

Identity store: user records, roles, activation and password hashes.
"""
import logging
import re
from datetime import datetime
from typing import Dict, List, Optional, Union
from uuid import UUID

from ..config import Config
from ..models.result import ServiceResult, ErrorKind
from ..models.user import User, UserRole
from ..storage.base import BaseStorage
from .password_policy import validate_password, hash_password

logger = logging.getLogger("mwmgr.services.users")

UserId = Union[UUID, str]

# Fields a user may change on their own profile
SELF_EDITABLE_FIELDS = {"first_name", "last_name", "email", "avatar_url"}
ADMIN_EDITABLE_FIELDS = SELF_EDITABLE_FIELDS | {"username", "role", "is_active"}


class UsersService:
    """Service for user management"""

    def __init__(self, storage: BaseStorage):
        self.storage = storage

    # ============================================
    # Lookups
    # ============================================

    async def get_user(self, user_id: UserId) -> Optional[User]:
        """Get user by ID"""
        record = await self.storage.find("users", str(user_id))
        return User.from_dict(record) if record else None

    async def get_user_by_username(self, username: str) -> Optional[User]:
        """Get user by username (case-insensitive)"""
        username = username.strip().lower()
        for user in await self.list_users():
            if user.username.lower() == username:
                return user
        return None

    async def get_user_by_email(self, email: str) -> Optional[User]:
        """Get user by email (case-insensitive)"""
        email = email.strip().lower()
        for user in await self.list_users():
            if user.email.lower() == email:
                return user
        return None

    async def list_users(self, active_only: bool = False) -> List[User]:
        """List users, optionally only active ones"""
        users = [User.from_dict(r) for r in await self.storage.list("users")]
        if active_only:
            users = [u for u in users if u.is_active]
        return users

    async def role_counts(self) -> Dict[str, int]:
        """Number of users per role"""
        counts = {role.value: 0 for role in UserRole}
        for user in await self.list_users():
            counts[user.role.value] += 1
        return counts

    # ============================================
    # Creation
    # ============================================

    async def create_user(
        self,
        actor: User,
        username: str,
        email: str,
        first_name: str,
        last_name: str,
        password: str,
        role: UserRole = UserRole.WRITER,
        avatar_url: Optional[str] = None,
    ) -> ServiceResult:
        """
        Create a new user (admin only).

        Returns:
            ServiceResult with the created User in data
        """
        if not actor.is_admin or not actor.is_active:
            return ServiceResult.denied("Only admins can create users")

        return await self._create(username, email, first_name, last_name, password, role, avatar_url)

    async def register(
        self,
        username: str,
        email: str,
        first_name: str,
        last_name: str,
        password: str,
    ) -> ServiceResult:
        """Self-registration; always creates a writer"""
        if not Config.ENABLE_REGISTRATION:
            return ServiceResult.denied("Registration is disabled")

        return await self._create(username, email, first_name, last_name, password, UserRole.WRITER)

    async def bootstrap_admin(self, username: str, email: str, password: str) -> Optional[User]:
        """Create the first admin when the store has no users yet"""
        if await self.storage.list("users"):
            return None

        result = await self._create(username, email, "Admin", "", password, UserRole.ADMIN)
        if not result.success:
            logger.error(f"Could not bootstrap admin: {result.error}")
            return None
        return result.data

    async def _create(
        self,
        username: str,
        email: str,
        first_name: str,
        last_name: str,
        password: str,
        role: UserRole,
        avatar_url: Optional[str] = None,
    ) -> ServiceResult:
        username = (username or "").strip()
        email = (email or "").strip()
        first_name = (first_name or "").strip()
        last_name = (last_name or "").strip()

        if not username or not email or not first_name:
            return ServiceResult.invalid("Username, email and name are required")

        if not self._is_valid_username(username):
            return ServiceResult.invalid(f"Invalid username format: {username}")

        if not self._is_valid_email(email):
            return ServiceResult.invalid(f"Invalid email format: {email}")

        if await self.get_user_by_username(username):
            return ServiceResult.fail(ErrorKind.CONFLICT, "Username already in use")

        if await self.get_user_by_email(email):
            return ServiceResult.fail(ErrorKind.CONFLICT, "Email already registered")

        valid, errors = validate_password(password or "")
        if not valid:
            return ServiceResult.invalid("; ".join(errors))

        user = User(
            username=username,
            email=email,
            first_name=first_name,
            last_name=last_name,
            role=UserRole(role),
            avatar_url=avatar_url,
        )

        await self.set_password_hash(user.id, hash_password(password))
        await self.storage.insert("users", user.to_dict())
        logger.info(f"Created user: {user.display_name} (@{user.username}, {user.role.value})")

        return ServiceResult.ok(user)

    # ============================================
    # Updates
    # ============================================

    async def update_user(self, actor: User, user_id: UserId, changes: dict) -> ServiceResult:
        """
        Update a user.

        Admins may change any profile field, the role and the active flag.
        Other users may only edit their own name, email and avatar.
        """
        user = await self.get_user(user_id)
        if not user:
            return ServiceResult.not_found("User not found")

        changes = {k: v for k, v in changes.items() if v is not None}

        if actor.is_admin:
            allowed = ADMIN_EDITABLE_FIELDS
        elif actor.id == user.id:
            allowed = SELF_EDITABLE_FIELDS
        else:
            return ServiceResult.denied("You can only edit your own profile")

        forbidden = set(changes) - allowed
        if forbidden:
            return ServiceResult.denied(f"Cannot change: {', '.join(sorted(forbidden))}")

        if "is_active" in changes and not changes["is_active"] and actor.id == user.id:
            return ServiceResult.invalid("You cannot deactivate your own account")

        if "username" in changes:
            username = changes["username"].strip()
            if not self._is_valid_username(username):
                return ServiceResult.invalid(f"Invalid username format: {username}")
            existing = await self.get_user_by_username(username)
            if existing and existing.id != user.id:
                return ServiceResult.fail(ErrorKind.CONFLICT, "Username already in use")
            user.username = username

        if "email" in changes:
            email = changes["email"].strip()
            if not self._is_valid_email(email):
                return ServiceResult.invalid(f"Invalid email format: {email}")
            existing = await self.get_user_by_email(email)
            if existing and existing.id != user.id:
                return ServiceResult.fail(ErrorKind.CONFLICT, "Email already registered")
            user.email = email

        if "first_name" in changes:
            user.first_name = changes["first_name"].strip()
        if "last_name" in changes:
            user.last_name = changes["last_name"].strip()
        if "avatar_url" in changes:
            user.avatar_url = changes["avatar_url"]
        if "role" in changes:
            user.role = UserRole(changes["role"])
        if "is_active" in changes:
            user.is_active = bool(changes["is_active"])

        await self.storage.update("users", str(user.id), user.to_dict())
        logger.info(f"Updated user: @{user.username}")
        return ServiceResult.ok(user)

    async def activate_user(self, actor: User, user_id: UserId) -> ServiceResult:
        """Re-enable a user account (admin only)"""
        return await self._set_active(actor, user_id, True)

    async def deactivate_user(self, actor: User, user_id: UserId) -> ServiceResult:
        """Soft-delete a user account (admin only)"""
        return await self._set_active(actor, user_id, False)

    async def _set_active(self, actor: User, user_id: UserId, active: bool) -> ServiceResult:
        if not actor.is_admin:
            return ServiceResult.denied("Only admins can change account status")
        if not active and str(actor.id) == str(user_id):
            return ServiceResult.invalid("You cannot deactivate your own account")

        record = await self.storage.update("users", str(user_id), {"is_active": active})
        if record is None:
            return ServiceResult.not_found("User not found")

        logger.info(f"{'Activated' if active else 'Deactivated'} user: {user_id}")
        return ServiceResult.ok(User.from_dict(record))

    async def delete_user(self, actor: User, user_id: UserId) -> ServiceResult:
        """Hard-delete a user and their password (admin only)"""
        if not actor.is_admin:
            return ServiceResult.denied("Only admins can delete users")
        if str(actor.id) == str(user_id):
            return ServiceResult.invalid("You cannot delete your own account")

        if not await self.storage.delete("users", str(user_id)):
            return ServiceResult.not_found("User not found")

        await self.storage.delete("users_pwd", str(user_id))
        logger.info(f"Deleted user: {user_id}")
        return ServiceResult.ok()

    async def update_last_login(self, user_id: UserId, when: Optional[datetime] = None) -> None:
        """Record a successful login"""
        when = when or datetime.utcnow()
        await self.storage.update("users", str(user_id), {"last_login": when.isoformat()})

    # ============================================
    # Password side table
    # ============================================

    async def get_password_hash(self, user_id: UserId) -> Optional[str]:
        record = await self.storage.find("users_pwd", str(user_id))
        return record["password_hash"] if record else None

    async def set_password_hash(self, user_id: UserId, password_hash: str) -> None:
        record = {"user_id": str(user_id), "password_hash": password_hash}
        if await self.storage.update("users_pwd", str(user_id), record) is None:
            await self.storage.insert("users_pwd", record)

    # ============================================
    # Validation
    # ============================================

    def _is_valid_email(self, email: str) -> bool:
        """Validate email format"""
        pattern = r'^[a-zA-Z0-9._%+-]+@[a-zA-Z0-9.-]+\.[a-zA-Z]{2,}$'
        return bool(re.match(pattern, email))

    def _is_valid_username(self, username: str) -> bool:
        """Validate username format (letters, digits, underscores, 3-30 chars)"""
        return bool(re.fullmatch(r'\w{3,30}', username, re.ASCII))
