"""
Auth Service

Session manager: password login, the persisted session blob, bearer
token verification and password changes.
"""
import logging
from datetime import datetime, timedelta
from typing import Callable, Optional, Union
from uuid import UUID

import jwt

from ..config import Config
from ..models.result import ServiceResult, ErrorKind
from ..models.session import Session
from ..models.user import User
from ..storage.base import BaseStorage
from .password_policy import validate_password, hash_password, check_password
from .users_service import UsersService

logger = logging.getLogger("mwmgr.services.auth")

SESSION_COLLECTION = "auth"


class AuthService:
    """Service for authentication and sessions"""

    def __init__(
        self,
        storage: BaseStorage,
        users: UsersService,
        clock: Callable[[], datetime] = datetime.utcnow,
    ):
        """
        Initialize auth service.

        Args:
            storage: Persistence port holding the session blob
            users: Identity store
            clock: Returns the current UTC time
        """
        self.storage = storage
        self.users = users
        self.clock = clock

    # ============================================
    # Tokens
    # ============================================

    def create_token(self, user: User, expires_at: datetime) -> str:
        """Create JWT token for user"""
        payload = {
            "user_id": str(user.id),
            "username": user.username,
            "role": user.role.value,
            "exp": expires_at,
        }
        return jwt.encode(payload, Config.JWT_SECRET, algorithm=Config.JWT_ALGORITHM)

    def decode_token(self, token: str) -> Optional[dict]:
        """Verify and decode JWT token"""
        try:
            return jwt.decode(token, Config.JWT_SECRET, algorithms=[Config.JWT_ALGORITHM])
        except jwt.ExpiredSignatureError:
            return None
        except jwt.InvalidTokenError:
            return None

    async def verify_token(self, token: str) -> Optional[User]:
        """Resolve a bearer token to an active user"""
        payload = self.decode_token(token)
        if not payload:
            return None

        user = await self.users.get_user(payload["user_id"])
        if not user or not user.is_active:
            return None
        return user

    # ============================================
    # Sessions
    # ============================================

    async def login(self, username: str, password: str) -> ServiceResult:
        """
        Authenticate with username and password.

        On success updates last_login, persists the session and returns
        {"token", "expires_at", "user"} in data.
        """
        user = await self.users.get_user_by_username(username or "")
        if not user:
            logger.info(f"Login failed: user not found for {username}")
            return ServiceResult.fail(ErrorKind.AUTHENTICATION, "User not found")

        if not user.is_active:
            logger.info(f"Login failed: account disabled for @{user.username}")
            return ServiceResult.fail(ErrorKind.AUTHENTICATION, "Account disabled")

        password_hash = await self.users.get_password_hash(user.id)
        if not password_hash:
            logger.warning(f"Login failed: no password set for @{user.username}")
            return ServiceResult.fail(ErrorKind.AUTHENTICATION, "Password not set")

        if not check_password(password or "", password_hash):
            logger.info(f"Login failed: invalid password for @{user.username}")
            return ServiceResult.fail(ErrorKind.AUTHENTICATION, "Password incorrect")

        now = self.clock()
        expires_at = now + timedelta(hours=Config.SESSION_TIMEOUT_HOURS)
        token = self.create_token(user, expires_at)

        await self.users.update_last_login(user.id, now)
        user.last_login = now

        session = Session(user_id=user.id, token=token, expires_at=expires_at)
        await self.storage.set(SESSION_COLLECTION, session.to_dict())

        logger.info(f"User logged in: @{user.username}")
        return ServiceResult.ok({
            "token": token,
            "expires_at": expires_at.isoformat(),
            "user": user,
        })

    async def logout(self) -> None:
        """Tear down the persisted session"""
        await self.storage.remove(SESSION_COLLECTION)
        logger.info("Session closed")

    async def get_session(self) -> Optional[Session]:
        record = await self.storage.get(SESSION_COLLECTION)
        if not record:
            return None
        try:
            return Session.from_dict(record)
        except (KeyError, TypeError, ValueError) as e:
            logger.error(f"Corrupt session blob: {e}")
            return None

    async def check_session(self) -> ServiceResult:
        """
        Validate the persisted session.

        An absent or expired session, or one pointing at a missing or
        inactive user, is torn down. Returns the user in data otherwise.
        """
        session = await self.get_session()
        if session is None:
            return ServiceResult.fail(ErrorKind.AUTHENTICATION, "Not authenticated")

        if session.is_expired(self.clock()):
            logger.info("Session expired")
            await self.logout()
            return ServiceResult.fail(ErrorKind.AUTHENTICATION, "Not authenticated")

        user = await self.users.get_user(session.user_id)
        if not user or not user.is_active:
            logger.info(f"Session user {session.user_id} missing or inactive")
            await self.logout()
            return ServiceResult.fail(ErrorKind.AUTHENTICATION, "Not authenticated")

        return ServiceResult.ok(user)

    # ============================================
    # Passwords
    # ============================================

    async def change_password(self, user: User, old_password: str, new_password: str) -> ServiceResult:
        """Change own password after verifying the current one"""
        password_hash = await self.users.get_password_hash(user.id)
        if not password_hash or not check_password(old_password or "", password_hash):
            return ServiceResult.fail(ErrorKind.AUTHENTICATION, "Password incorrect")

        valid, errors = validate_password(new_password or "")
        if not valid:
            return ServiceResult.invalid("; ".join(errors))

        await self.users.set_password_hash(user.id, hash_password(new_password))
        logger.info(f"Password changed for @{user.username}")
        return ServiceResult.ok()

    async def reset_password(
        self,
        actor: User,
        user_id: Union[UUID, str],
        new_password: str,
    ) -> ServiceResult:
        """Set another user's password (admin only, no old password)"""
        if not actor.is_admin:
            return ServiceResult.denied("Only admins can reset passwords")

        user = await self.users.get_user(user_id)
        if not user:
            return ServiceResult.not_found("User not found")

        valid, errors = validate_password(new_password or "")
        if not valid:
            return ServiceResult.invalid("; ".join(errors))

        await self.users.set_password_hash(user.id, hash_password(new_password))
        logger.info(f"Password reset for @{user.username} by @{actor.username}")
        return ServiceResult.ok()
