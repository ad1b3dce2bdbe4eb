"""
Base Sender

Abstract interface for delivery-hint channels (desktop alert, sound).
"""
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from datetime import datetime
from typing import Optional


@dataclass
class SendResult:
    """Result of a send attempt"""
    success: bool
    error: Optional[str] = None


@dataclass
class DeliveryHint:
    """
    Instruction to the client to surface a stored notification.

    channel is "desktop" (system alert) or "sound" (play sound at volume).
    """
    channel: str
    user_id: str
    notification_id: str
    title: str = ""
    message: str = ""
    sound: Optional[str] = None
    volume: Optional[float] = None
    created_at: datetime = field(default_factory=datetime.utcnow)

    def to_dict(self) -> dict:
        return {
            "channel": self.channel,
            "user_id": self.user_id,
            "notification_id": self.notification_id,
            "title": self.title,
            "message": self.message,
            "sound": self.sound,
            "volume": self.volume,
            "created_at": self.created_at.isoformat(),
        }


class BaseSender(ABC):
    """Abstract delivery-hint sender"""

    @abstractmethod
    async def send(self, hint: DeliveryHint) -> SendResult:
        """
        Deliver a hint.

        Returns:
            SendResult with success flag and optional error message
        """
        ...

    @abstractmethod
    async def close(self):
        """Cleanup resources"""
        ...
