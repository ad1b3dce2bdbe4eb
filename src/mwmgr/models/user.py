"""
User Model

Represents a newsroom member: writer, reviewer or admin.
"""
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Optional
from uuid import UUID, uuid4

from .fields import parse_uuid, parse_datetime, iso


class UserRole(str, Enum):
    """Roles in the editorial workflow"""
    WRITER = "writer"        # Drafts and submits articles
    REVIEWER = "reviewer"    # Approves/rejects articles, manages tasks
    ADMIN = "admin"          # Full access, publishes articles


@dataclass
class User:
    """
    User entity.

    Username and email are unique case-insensitively across active and
    inactive users. Passwords are kept out of this record, in the
    users_pwd side table keyed by user id.
    """
    id: UUID = field(default_factory=uuid4)
    username: str = ""                               # Unique login name: "mrossi"
    email: str = ""
    first_name: str = ""
    last_name: str = ""
    role: UserRole = UserRole.WRITER
    avatar_url: Optional[str] = None
    is_active: bool = True
    created_at: datetime = field(default_factory=datetime.utcnow)
    last_login: Optional[datetime] = None

    @property
    def display_name(self) -> str:
        return f"{self.first_name} {self.last_name}".strip() or self.username

    @property
    def is_admin(self) -> bool:
        return self.role == UserRole.ADMIN

    def has_role(self, *roles: UserRole) -> bool:
        return self.role in roles

    def to_dict(self) -> dict:
        """Convert to dictionary for storage and API response"""
        return {
            "id": str(self.id),
            "username": self.username,
            "email": self.email,
            "first_name": self.first_name,
            "last_name": self.last_name,
            "role": self.role.value,
            "avatar_url": self.avatar_url,
            "is_active": self.is_active,
            "created_at": self.created_at.isoformat(),
            "last_login": iso(self.last_login),
        }

    @classmethod
    def from_dict(cls, data: dict) -> "User":
        """Create from dictionary"""
        return cls(
            id=parse_uuid(data.get("id")) or uuid4(),
            username=data.get("username", ""),
            email=data.get("email", ""),
            first_name=data.get("first_name", ""),
            last_name=data.get("last_name", ""),
            role=UserRole(data.get("role", UserRole.WRITER.value)),
            avatar_url=data.get("avatar_url"),
            is_active=data.get("is_active", True),
            created_at=parse_datetime(data.get("created_at")) or datetime.utcnow(),
            last_login=parse_datetime(data.get("last_login")),
        )
