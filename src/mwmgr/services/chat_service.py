"""
Chat Service

Team chat log: a single shared room of append-only messages.
"""
import logging
from typing import List, Optional, Union
from uuid import UUID

from ..models.chat import ChatMessage
from ..models.result import ServiceResult
from ..models.user import User
from ..storage.base import BaseStorage
from .mention_service import MentionService
from .notification_service import NotificationService
from .users_service import UsersService

logger = logging.getLogger("mwmgr.services.chat")

MAX_MESSAGE_LENGTH = 2000


class ChatService:
    """Service for chat operations"""

    def __init__(
        self,
        storage: BaseStorage,
        users: UsersService,
        mentions: MentionService,
        notifications: NotificationService,
    ):
        self.storage = storage
        self.users = users
        self.mentions = mentions
        self.notifications = notifications

    async def list_messages(self, limit: Optional[int] = None) -> List[ChatMessage]:
        """Messages in chronological order; with limit, the most recent ones"""
        messages = [ChatMessage.from_dict(r) for r in await self.storage.list("chat")]
        messages.sort(key=lambda m: m.created_at)
        if limit:
            messages = messages[-limit:]
        return messages

    async def get_message(self, message_id: Union[UUID, str]) -> Optional[ChatMessage]:
        record = await self.storage.find("chat", str(message_id))
        return ChatMessage.from_dict(record) if record else None

    async def send_message(self, actor: User, text: str) -> ServiceResult:
        """
        Append a message and notify every mentioned user.

        Each resolved @username token other than the sender produces one
        chat_mention notification.
        """
        text = (text or "").strip()
        if not text:
            return ServiceResult.invalid("Message cannot be empty")
        if len(text) > MAX_MESSAGE_LENGTH:
            return ServiceResult.invalid(f"Message is longer than {MAX_MESSAGE_LENGTH} characters")

        message = ChatMessage(
            author_id=actor.id,
            author_name=actor.display_name,
            author_role=actor.role,
            author_avatar=actor.avatar_url,
            text=text,
        )
        await self.storage.insert("chat", message.to_dict())
        logger.info(f"Chat message {message.id} from @{actor.username}")

        for mention in await self.mentions.resolve_mentions(text):
            if mention.user.id == actor.id:
                continue
            await self.notifications.notify_chat_mention(
                mention.user.id, actor.display_name, text, message.id
            )

        return ServiceResult.ok(message)

    async def broadcast_message(self, message: ChatMessage) -> int:
        """
        Send a chat_message notification to every other active user.

        Recipients with the chat-message toggle off are skipped by the
        dispatcher. Returns the number of notifications stored.
        """
        delivered = 0
        for user in await self.users.list_users(active_only=True):
            if user.id == message.author_id:
                continue
            notification = await self.notifications.notify_chat_message(
                user.id, message.author_name, message.text, message.id
            )
            if notification:
                delivered += 1
        return delivered

    async def delete_message(self, actor: User, message_id: Union[UUID, str]) -> ServiceResult:
        """Delete a message (its author or an admin)"""
        message = await self.get_message(message_id)
        if not message:
            return ServiceResult.not_found("Message not found")

        if not (actor.is_admin or actor.id == message.author_id):
            return ServiceResult.denied("Only the author or an admin can delete this message")

        await self.storage.delete("chat", str(message.id))
        logger.info(f"Chat message {message.id} deleted by @{actor.username}")
        return ServiceResult.ok()
