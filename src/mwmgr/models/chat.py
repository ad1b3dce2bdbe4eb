"""
Chat Model

A message in the newsroom team chat. The chat is a single shared room.
"""
from dataclasses import dataclass, field
from datetime import datetime
from typing import Optional
from uuid import UUID, uuid4

from .fields import parse_uuid, parse_datetime
from .user import UserRole


@dataclass
class ChatMessage:
    """Append-only chat message with a snapshot of its author"""
    id: UUID = field(default_factory=uuid4)
    author_id: UUID = field(default_factory=uuid4)
    author_name: str = ""
    author_role: UserRole = UserRole.WRITER
    author_avatar: Optional[str] = None
    text: str = ""
    created_at: datetime = field(default_factory=datetime.utcnow)

    def to_dict(self) -> dict:
        """Convert to dictionary for storage and API response"""
        return {
            "id": str(self.id),
            "author_id": str(self.author_id),
            "author_name": self.author_name,
            "author_role": self.author_role.value,
            "author_avatar": self.author_avatar,
            "text": self.text,
            "created_at": self.created_at.isoformat(),
        }

    @classmethod
    def from_dict(cls, data: dict) -> "ChatMessage":
        """Create from dictionary"""
        return cls(
            id=parse_uuid(data.get("id")) or uuid4(),
            author_id=parse_uuid(data.get("author_id")),
            author_name=data.get("author_name", ""),
            author_role=UserRole(data.get("author_role", UserRole.WRITER.value)),
            author_avatar=data.get("author_avatar"),
            text=data.get("text", ""),
            created_at=parse_datetime(data.get("created_at")) or datetime.utcnow(),
        )
