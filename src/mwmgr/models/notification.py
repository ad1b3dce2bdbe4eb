"""
Notification Models

Notification: in-app record delivered to one recipient.
NotificationSettings: per-user channel toggles, event toggles and quiet hours.
"""
from dataclasses import dataclass, field, fields
from datetime import datetime, time
from enum import Enum
from typing import Optional
from uuid import UUID, uuid4

from .fields import parse_uuid, parse_datetime, iso


class NotificationType(str, Enum):
    """Domain events that produce notifications"""
    CHAT_MENTION = "chat_mention"
    CHAT_MESSAGE = "chat_message"
    ARTICLE_APPROVED = "article_approved"
    ARTICLE_REJECTED = "article_rejected"
    ARTICLE_PUBLISHED = "article_published"
    ARTICLE_COMMENT = "article_comment"
    TASK_ASSIGNED = "task_assigned"
    TASK_COMPLETED = "task_completed"
    SYSTEM = "system"

    @property
    def setting_field(self) -> Optional[str]:
        """NotificationSettings toggle that gates this type (None = always on)"""
        return _SETTING_FIELDS.get(self)

    @property
    def default_priority(self) -> "NotificationPriority":
        if self in _HIGH_PRIORITY:
            return NotificationPriority.HIGH
        return NotificationPriority.NORMAL


class NotificationPriority(str, Enum):
    LOW = "low"
    NORMAL = "normal"
    HIGH = "high"


_SETTING_FIELDS = {
    NotificationType.CHAT_MENTION: "notify_chat_mentions",
    NotificationType.CHAT_MESSAGE: "notify_chat_messages",
    NotificationType.ARTICLE_APPROVED: "notify_article_status",
    NotificationType.ARTICLE_REJECTED: "notify_article_status",
    NotificationType.ARTICLE_PUBLISHED: "notify_article_status",
    NotificationType.ARTICLE_COMMENT: "notify_article_comments",
    NotificationType.TASK_ASSIGNED: "notify_task_assigned",
    NotificationType.TASK_COMPLETED: "notify_task_completed",
}

_HIGH_PRIORITY = {
    NotificationType.CHAT_MENTION,
    NotificationType.TASK_ASSIGNED,
    NotificationType.ARTICLE_APPROVED,
    NotificationType.ARTICLE_REJECTED,
}


@dataclass
class Notification:
    """
    Notification entity.

    Invariant: read_at is set if and only if read is true.
    data carries ids and previews used by the client for deep links.
    """
    id: UUID = field(default_factory=uuid4)
    user_id: UUID = field(default_factory=uuid4)     # Recipient
    type: NotificationType = NotificationType.SYSTEM
    title: str = ""
    message: str = ""
    priority: NotificationPriority = NotificationPriority.NORMAL
    read: bool = False
    read_at: Optional[datetime] = None
    created_at: datetime = field(default_factory=datetime.utcnow)
    data: dict = field(default_factory=dict)

    def mark_read(self, when: Optional[datetime] = None):
        self.read = True
        self.read_at = when or datetime.utcnow()

    def to_dict(self) -> dict:
        """Convert to dictionary for storage and API response"""
        return {
            "id": str(self.id),
            "user_id": str(self.user_id),
            "type": self.type.value,
            "title": self.title,
            "message": self.message,
            "priority": self.priority.value,
            "read": self.read,
            "read_at": iso(self.read_at),
            "created_at": self.created_at.isoformat(),
            "data": dict(self.data),
        }

    @classmethod
    def from_dict(cls, data: dict) -> "Notification":
        """Create from dictionary"""
        return cls(
            id=parse_uuid(data.get("id")) or uuid4(),
            user_id=parse_uuid(data.get("user_id")),
            type=NotificationType(data.get("type", NotificationType.SYSTEM.value)),
            title=data.get("title", ""),
            message=data.get("message", ""),
            priority=NotificationPriority(data.get("priority", NotificationPriority.NORMAL.value)),
            read=data.get("read", False),
            read_at=parse_datetime(data.get("read_at")),
            created_at=parse_datetime(data.get("created_at")) or datetime.utcnow(),
            data=dict(data.get("data") or {}),
        )


def _parse_hhmm(value: str) -> time:
    hours, minutes = value.split(":")
    return time(int(hours), int(minutes))


@dataclass
class NotificationSettings:
    """
    Per-user notification preferences.

    Created lazily with these defaults on first access. Only mentions are
    notified from chat by default.
    """
    user_id: UUID = field(default_factory=uuid4)
    # Channels
    enable_desktop: bool = True
    enable_in_app: bool = True
    enable_sound: bool = True
    # Event types
    notify_chat_mentions: bool = True
    notify_chat_messages: bool = False
    notify_article_status: bool = True
    notify_article_comments: bool = True
    notify_task_assigned: bool = True
    notify_task_completed: bool = True
    # Sound
    sound_volume: float = 0.5
    # Quiet hours, local time "HH:MM"
    quiet_hours_enabled: bool = False
    quiet_hours_start: str = "22:00"
    quiet_hours_end: str = "08:00"

    def allows(self, notification_type: NotificationType) -> bool:
        """Check the per-event toggle for a notification type"""
        setting = notification_type.setting_field
        if setting is None:
            return True
        return bool(getattr(self, setting))

    def in_quiet_hours(self, now: datetime) -> bool:
        """
        Check whether local time `now` falls inside the quiet-hours window.

        A window with start < end is active for start <= t < end. Otherwise
        it crosses midnight and is active for t >= start or t < end, so an
        equal start and end covers the whole day.
        """
        if not self.quiet_hours_enabled:
            return False

        current = now.hour * 60 + now.minute
        start = _parse_hhmm(self.quiet_hours_start)
        end = _parse_hhmm(self.quiet_hours_end)
        start_minutes = start.hour * 60 + start.minute
        end_minutes = end.hour * 60 + end.minute

        if start_minutes < end_minutes:
            return start_minutes <= current < end_minutes
        return current >= start_minutes or current < end_minutes

    def apply(self, changes: dict):
        """Apply a partial update; unknown keys and user_id are ignored"""
        allowed = {f.name for f in fields(self)} - {"user_id"}
        for key, value in changes.items():
            if key in allowed and value is not None:
                setattr(self, key, value)

    def to_dict(self) -> dict:
        result = {f.name: getattr(self, f.name) for f in fields(self)}
        result["user_id"] = str(self.user_id)
        return result

    @classmethod
    def from_dict(cls, data: dict) -> "NotificationSettings":
        settings = cls(user_id=parse_uuid(data.get("user_id")))
        settings.apply(data)
        return settings
