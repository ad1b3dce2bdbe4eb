"""
Notification Service

Dispatcher that turns domain events into per-recipient notification
records, filtered by the recipient's settings and quiet hours, and hands
delivery hints (desktop alert, sound) to the registered senders.
"""
import logging
from datetime import datetime
from typing import Callable, Dict, List, Optional, Union
from uuid import UUID

from ..config import Config
from ..models.notification import (
    Notification,
    NotificationType,
    NotificationPriority,
    NotificationSettings,
)
from ..models.fields import parse_datetime
from ..models.result import ServiceResult
from ..models.user import User
from ..notifications.base_sender import BaseSender, DeliveryHint
from ..storage.base import BaseStorage

logger = logging.getLogger("mwmgr.services.notification")

UserId = Union[UUID, str]

PERMISSIONS = ("default", "granted", "denied")

CHAT_PREVIEW_LENGTH = 100
COMMENT_PREVIEW_LENGTH = 80


def _preview(text: str, length: int) -> str:
    return text[:length] + ("..." if len(text) > length else "")


class NotificationService:
    """
    Notification dispatcher.

    For each event:
    1. Loads the recipient's settings; a disabled event toggle suppresses it
    2. Suppresses everything inside the recipient's quiet hours
    3. Stores the notification, evicting the oldest read one at the cap
    4. Emits desktop/sound delivery hints through the senders
    """

    def __init__(
        self,
        storage: BaseStorage,
        max_stored: int = Config.NOTIFICATIONS_MAX_STORED,
        clock: Callable[[], datetime] = datetime.now,
    ):
        """
        Initialize notification service.

        Args:
            storage: Persistence port
            max_stored: Per-user cap on stored notifications
            clock: Returns the current local time (quiet hours)
        """
        self.storage = storage
        self.max_stored = max_stored
        self.clock = clock
        # channel ("desktop" / "sound") -> senders
        self._senders: Dict[str, List[BaseSender]] = {}
        # user_id -> app currently visible/focused
        self._visible: Dict[str, bool] = {}

    def register_sender(self, channel: str, sender: BaseSender):
        """Register a sender for a delivery channel"""
        self._senders.setdefault(channel, []).append(sender)
        logger.info(f"Registered notification sender: {channel} ({type(sender).__name__})")

    # ============================================
    # Settings, permission, visibility
    # ============================================

    async def get_settings(self, user_id: UserId) -> NotificationSettings:
        """Get a user's settings, creating the defaults on first access"""
        record = await self.storage.find("notification_settings", str(user_id))
        if record:
            return NotificationSettings.from_dict(record)

        settings = NotificationSettings(user_id=UUID(str(user_id)))
        await self.storage.insert("notification_settings", settings.to_dict())
        logger.debug(f"Created default notification settings for user {user_id}")
        return settings

    async def update_settings(self, user_id: UserId, changes: dict) -> ServiceResult:
        """Merge a partial update into a user's settings"""
        settings = await self.get_settings(user_id)
        settings.apply(changes)

        if not 0.0 <= float(settings.sound_volume) <= 1.0:
            return ServiceResult.invalid("Sound volume must be between 0 and 1")
        for value in (settings.quiet_hours_start, settings.quiet_hours_end):
            if not self._is_valid_hhmm(value):
                return ServiceResult.invalid(f"Invalid time, expected HH:MM: {value}")

        await self.storage.update("notification_settings", str(user_id), settings.to_dict())
        logger.info(f"Updated notification settings for user {user_id}")
        return ServiceResult.ok(settings)

    async def get_permission(self, user_id: UserId) -> str:
        """Desktop notification permission recorded for a user"""
        permissions = await self.storage.get("notification_permission", {}) or {}
        return permissions.get(str(user_id), "default")

    async def set_permission(self, user_id: UserId, permission: str) -> ServiceResult:
        if permission not in PERMISSIONS:
            return ServiceResult.invalid(f"Invalid permission: {permission}")

        permissions = await self.storage.get("notification_permission", {}) or {}
        permissions[str(user_id)] = permission
        await self.storage.set("notification_permission", permissions)
        return ServiceResult.ok(permission)

    @staticmethod
    def _is_valid_hhmm(value: str) -> bool:
        try:
            hours, minutes = str(value).split(":")
            return 0 <= int(hours) < 24 and 0 <= int(minutes) < 60
        except ValueError:
            return False

    def set_visibility(self, user_id: UserId, visible: bool):
        """Record whether the user's app window is currently visible"""
        self._visible[str(user_id)] = visible

    def is_visible(self, user_id: UserId) -> bool:
        return self._visible.get(str(user_id), False)

    # ============================================
    # Dispatch
    # ============================================

    async def notify(
        self,
        user_id: UserId,
        notification_type: NotificationType,
        title: str,
        message: str,
        data: Optional[dict] = None,
        priority: Optional[NotificationPriority] = None,
    ) -> Optional[Notification]:
        """
        Dispatch one event to one recipient.

        Returns the stored notification, or None when suppressed.
        """
        settings = await self.get_settings(user_id)

        if not settings.allows(notification_type):
            logger.debug(f"Suppressed {notification_type.value} for {user_id}: disabled in settings")
            return None

        if settings.in_quiet_hours(self.clock()):
            logger.debug(f"Suppressed {notification_type.value} for {user_id}: quiet hours")
            return None

        notification = Notification(
            user_id=UUID(str(user_id)),
            type=notification_type,
            title=title,
            message=message,
            priority=priority or notification_type.default_priority,
            data=data or {},
        )

        await self._store(notification)
        logger.info(f"Notification {notification_type.value} stored for user {user_id}")

        await self._deliver(notification, settings)
        return notification

    async def _store(self, notification: Notification):
        """Insert, evicting the recipient's oldest read notification at the cap"""
        user_id = str(notification.user_id)
        own = [n for n in await self.storage.list("notifications") if n.get("user_id") == user_id]

        if len(own) >= self.max_stored:
            read = [n for n in own if n.get("read")]
            if read:
                oldest = min(read, key=lambda n: parse_datetime(n["created_at"]))
                await self.storage.delete("notifications", oldest["id"])
                logger.debug(f"Evicted read notification {oldest['id']} for user {user_id}")
            else:
                logger.warning(f"User {user_id} has {len(own)} unread notifications, cap exceeded")

        await self.storage.insert("notifications", notification.to_dict())

    async def _deliver(self, notification: Notification, settings: NotificationSettings):
        user_id = str(notification.user_id)

        if (
            settings.enable_desktop
            and await self.get_permission(user_id) == "granted"
            and not self.is_visible(user_id)
        ):
            await self._send("desktop", DeliveryHint(
                channel="desktop",
                user_id=user_id,
                notification_id=str(notification.id),
                title=notification.title,
                message=notification.message,
            ))

        if settings.enable_sound:
            await self._send("sound", DeliveryHint(
                channel="sound",
                user_id=user_id,
                notification_id=str(notification.id),
                sound=Config.NOTIFICATION_SOUND,
                volume=settings.sound_volume,
            ))

    async def _send(self, channel: str, hint: DeliveryHint):
        for sender in self._senders.get(channel, []):
            result = await sender.send(hint)
            if not result.success:
                logger.warning(f"Failed to send {channel} hint for user {hint.user_id}: {result.error}")

    # ============================================
    # Event helpers
    # ============================================

    async def notify_chat_mention(
        self, user_id: UserId, sender_name: str, message_text: str, message_id: UserId
    ) -> Optional[Notification]:
        return await self.notify(
            user_id,
            NotificationType.CHAT_MENTION,
            title=f"{sender_name} mentioned you",
            message=_preview(message_text, CHAT_PREVIEW_LENGTH),
            data={
                "sender_name": sender_name,
                "chat_message_id": str(message_id),
                "chat_message_preview": message_text,
                "url": "/chat",
            },
        )

    async def notify_chat_message(
        self, user_id: UserId, sender_name: str, message_text: str, message_id: UserId
    ) -> Optional[Notification]:
        return await self.notify(
            user_id,
            NotificationType.CHAT_MESSAGE,
            title=f"New message from {sender_name}",
            message=_preview(message_text, CHAT_PREVIEW_LENGTH),
            data={
                "sender_name": sender_name,
                "chat_message_id": str(message_id),
                "chat_message_preview": message_text,
                "url": "/chat",
            },
        )

    async def notify_article_approved(
        self, user_id: UserId, article_title: str, article_id: UserId
    ) -> Optional[Notification]:
        return await self.notify(
            user_id,
            NotificationType.ARTICLE_APPROVED,
            title="Article approved!",
            message=f'"{article_title}" has been approved',
            data={"article_id": str(article_id), "article_title": article_title, "url": "/articles"},
        )

    async def notify_article_rejected(
        self, user_id: UserId, article_title: str, reason: Optional[str], article_id: UserId
    ) -> Optional[Notification]:
        message = f'"{article_title}" has been rejected'
        if reason:
            message += f": {reason}"
        return await self.notify(
            user_id,
            NotificationType.ARTICLE_REJECTED,
            title="Article rejected",
            message=message,
            data={"article_id": str(article_id), "article_title": article_title, "url": "/articles"},
        )

    async def notify_article_published(
        self, user_id: UserId, article_title: str, article_id: UserId
    ) -> Optional[Notification]:
        return await self.notify(
            user_id,
            NotificationType.ARTICLE_PUBLISHED,
            title="Article published!",
            message=f'"{article_title}" has been published',
            data={"article_id": str(article_id), "article_title": article_title, "url": "/articles"},
        )

    async def notify_article_comment(
        self,
        user_id: UserId,
        commenter_name: str,
        article_title: str,
        comment_text: str,
        article_id: UserId,
        comment_id: UserId,
    ) -> Optional[Notification]:
        return await self.notify(
            user_id,
            NotificationType.ARTICLE_COMMENT,
            title=f'New comment on "{article_title}"',
            message=f"{commenter_name}: {_preview(comment_text, COMMENT_PREVIEW_LENGTH)}",
            data={
                "sender_name": commenter_name,
                "article_id": str(article_id),
                "article_title": article_title,
                "comment_id": str(comment_id),
                "comment_preview": comment_text,
                "url": "/articles",
            },
        )

    async def notify_task_assigned(
        self, user_id: UserId, task_title: str, assigned_by: str, task_id: UserId
    ) -> Optional[Notification]:
        return await self.notify(
            user_id,
            NotificationType.TASK_ASSIGNED,
            title="New task assigned",
            message=f'"{task_title}" assigned by {assigned_by}',
            data={"todo_id": str(task_id), "todo_title": task_title, "sender_name": assigned_by, "url": "/todo"},
        )

    async def notify_task_completed(
        self, user_id: UserId, task_title: str, completed_by: str, task_id: UserId
    ) -> Optional[Notification]:
        return await self.notify(
            user_id,
            NotificationType.TASK_COMPLETED,
            title="Task completed",
            message=f'"{task_title}" completed by {completed_by}',
            data={"todo_id": str(task_id), "todo_title": task_title, "sender_name": completed_by, "url": "/todo"},
        )

    async def notify_system(self, user_id: UserId, title: str, message: str) -> Optional[Notification]:
        return await self.notify(user_id, NotificationType.SYSTEM, title=title, message=message)

    # ============================================
    # Recipient operations
    # ============================================

    async def list_notifications(self, user_id: UserId) -> List[Notification]:
        """A user's notifications, newest first"""
        user_id = str(user_id)
        notifications = [
            Notification.from_dict(n)
            for n in await self.storage.list("notifications")
            if n.get("user_id") == user_id
        ]
        notifications.sort(key=lambda n: n.created_at, reverse=True)
        return notifications

    async def unread_notifications(self, user_id: UserId) -> List[Notification]:
        return [n for n in await self.list_notifications(user_id) if not n.read]

    async def unread_count(self, user_id: UserId) -> int:
        return len(await self.unread_notifications(user_id))

    async def mark_read(self, user: User, notification_id: UserId) -> ServiceResult:
        """Mark one of the user's notifications as read"""
        record = await self.storage.find("notifications", str(notification_id))
        if not record or record.get("user_id") != str(user.id):
            return ServiceResult.not_found("Notification not found")

        notification = Notification.from_dict(record)
        if not notification.read:
            notification.mark_read()
            await self.storage.update("notifications", str(notification.id), {
                "read": True,
                "read_at": notification.read_at.isoformat(),
            })
        return ServiceResult.ok(notification)

    async def mark_all_read(self, user_id: UserId) -> int:
        """Mark every unread notification of a user; returns how many changed"""
        user_id = str(user_id)
        now = datetime.utcnow().isoformat()
        records = await self.storage.list("notifications")
        changed = 0
        for record in records:
            if record.get("user_id") == user_id and not record.get("read"):
                record["read"] = True
                record["read_at"] = now
                changed += 1

        if changed:
            await self.storage.set("notifications", records)
        return changed

    async def delete_notification(self, user: User, notification_id: UserId) -> ServiceResult:
        record = await self.storage.find("notifications", str(notification_id))
        if not record or record.get("user_id") != str(user.id):
            return ServiceResult.not_found("Notification not found")

        await self.storage.delete("notifications", str(notification_id))
        return ServiceResult.ok()

    async def delete_all(self, user_id: UserId) -> int:
        """Delete every notification of a user; returns how many were removed"""
        user_id = str(user_id)
        records = await self.storage.list("notifications")
        remaining = [r for r in records if r.get("user_id") != user_id]
        removed = len(records) - len(remaining)
        if removed:
            await self.storage.set("notifications", remaining)
        return removed

    # ============================================
    # Lifecycle
    # ============================================

    async def close(self):
        """Cleanup sender resources"""
        for senders in self._senders.values():
            for sender in senders:
                await sender.close()
