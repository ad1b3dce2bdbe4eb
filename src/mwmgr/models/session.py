"""
Session Model

Persisted login session: the issued token and its absolute expiry.
"""
from dataclasses import dataclass
from datetime import datetime
from uuid import UUID

from .fields import parse_uuid, parse_datetime


@dataclass
class Session:
    user_id: UUID
    token: str
    expires_at: datetime

    def is_expired(self, now: datetime) -> bool:
        return now > self.expires_at

    def to_dict(self) -> dict:
        return {
            "user_id": str(self.user_id),
            "token": self.token,
            "expires_at": self.expires_at.isoformat(),
        }

    @classmethod
    def from_dict(cls, data: dict) -> "Session":
        return cls(
            user_id=parse_uuid(data["user_id"]),
            token=data["token"],
            expires_at=parse_datetime(data["expires_at"]),
        )
