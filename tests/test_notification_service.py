"""Tests for NotificationService: filtering, quiet hours, cap and delivery hints."""

from datetime import datetime
from uuid import uuid4

import pytest

from mwmgr.models import ErrorKind
from mwmgr.models.notification import NotificationPriority, NotificationType
from mwmgr.notifications import QueueSender
from mwmgr.services.notification_service import NotificationService


@pytest.fixture
def hints():
    return QueueSender()


@pytest.fixture
def service(storage, clock, hints):
    """Notification service with a small cap and an in-memory hint queue"""
    service = NotificationService(storage, max_stored=3, clock=clock)
    service.register_sender("desktop", hints)
    service.register_sender("sound", hints)
    return service


@pytest.fixture
def user_id():
    return str(uuid4())


class TestSettings:
    """Test lazily created settings and partial updates."""

    @pytest.mark.asyncio
    async def test_defaults_created_on_first_access(self, service, storage, user_id) -> None:
        settings = await service.get_settings(user_id)

        assert settings.notify_chat_mentions is True
        assert settings.notify_chat_messages is False
        assert await storage.find("notification_settings", user_id) is not None

    @pytest.mark.asyncio
    async def test_update_merges(self, service, user_id) -> None:
        result = await service.update_settings(user_id, {"sound_volume": 0.8, "unknown": 1})

        assert result.success
        settings = await service.get_settings(user_id)
        assert settings.sound_volume == 0.8
        assert settings.enable_desktop is True

    @pytest.mark.asyncio
    async def test_update_rejects_bad_values(self, service, user_id) -> None:
        assert (await service.update_settings(user_id, {"sound_volume": 1.5})).kind == ErrorKind.VALIDATION
        assert (await service.update_settings(user_id, {"quiet_hours_start": "25:00"})).kind == ErrorKind.VALIDATION
        assert (await service.get_settings(user_id)).sound_volume == 0.5


class TestFiltering:
    """Test event toggles and quiet hours."""

    @pytest.mark.asyncio
    async def test_chat_messages_off_by_default(self, service, user_id) -> None:
        result = await service.notify_chat_message(user_id, "Bob", "hello", uuid4())

        assert result is None
        assert await service.list_notifications(user_id) == []

    @pytest.mark.asyncio
    async def test_disabled_toggle_suppresses(self, service, user_id) -> None:
        await service.update_settings(user_id, {"notify_article_status": False})

        assert await service.notify_article_approved(user_id, "Gita", uuid4()) is None
        assert await service.notify_article_comment(user_id, "Rev", "Gita", "ok", uuid4(), uuid4()) is not None

    @pytest.mark.asyncio
    async def test_system_always_allowed(self, service, user_id) -> None:
        assert await service.notify_system(user_id, "Maintenance", "Tonight") is not None

    @pytest.mark.asyncio
    async def test_quiet_hours_overnight(self, service, clock, user_id) -> None:
        await service.update_settings(user_id, {
            "quiet_hours_enabled": True,
            "quiet_hours_start": "22:00",
            "quiet_hours_end": "08:00",
        })

        clock.now = datetime(2024, 3, 4, 23, 30)
        assert await service.notify_system(user_id, "Late", "x") is None

        clock.now = datetime(2024, 3, 5, 9, 0)
        assert await service.notify_system(user_id, "Morning", "x") is not None

    @pytest.mark.asyncio
    async def test_priority_follows_type(self, service, user_id) -> None:
        mention = await service.notify_chat_mention(user_id, "Bob", "hey", uuid4())
        published = await service.notify_article_published(user_id, "Gita", uuid4())

        assert mention.priority == NotificationPriority.HIGH
        assert published.priority == NotificationPriority.NORMAL


class TestStorageCap:
    """Test the per-user cap."""

    @pytest.mark.asyncio
    async def test_evicts_oldest_read(self, service, user_id) -> None:
        first = await service.notify_system(user_id, "one", "1")
        await service.notify_system(user_id, "two", "2")
        await service.notify_system(user_id, "three", "3")
        await service.mark_all_read(user_id)

        await service.notify_system(user_id, "four", "4")

        titles = {n.title for n in await service.list_notifications(user_id)}
        assert titles == {"two", "three", "four"}
        assert first.title not in titles

    @pytest.mark.asyncio
    async def test_cap_exceeded_when_all_unread(self, service, user_id) -> None:
        for i in range(4):
            await service.notify_system(user_id, f"n{i}", "x")

        assert len(await service.list_notifications(user_id)) == 4

    @pytest.mark.asyncio
    async def test_cap_is_per_user(self, service, user_id) -> None:
        other = str(uuid4())
        for i in range(3):
            await service.notify_system(other, f"n{i}", "x")
        await service.mark_all_read(other)

        await service.notify_system(user_id, "mine", "x")
        assert len(await service.list_notifications(other)) == 3


class TestDeliveryHints:
    """Test desktop and sound hints."""

    @pytest.mark.asyncio
    async def test_sound_only_without_permission(self, service, hints, user_id) -> None:
        await service.notify_system(user_id, "Hi", "x")

        channels = [h.channel for h in hints.drain(user_id)]
        assert channels == ["sound"]

    @pytest.mark.asyncio
    async def test_desktop_when_granted_and_hidden(self, service, hints, user_id) -> None:
        await service.set_permission(user_id, "granted")

        await service.notify_system(user_id, "Hi", "x")
        hint_list = hints.drain(user_id)

        assert [h.channel for h in hint_list] == ["desktop", "sound"]
        assert hint_list[0].title == "Hi"
        assert hint_list[1].volume == 0.5

    @pytest.mark.asyncio
    async def test_no_desktop_while_visible(self, service, hints, user_id) -> None:
        await service.set_permission(user_id, "granted")
        service.set_visibility(user_id, True)

        await service.notify_system(user_id, "Hi", "x")
        assert [h.channel for h in hints.drain(user_id)] == ["sound"]

    @pytest.mark.asyncio
    async def test_sound_disabled(self, service, hints, user_id) -> None:
        await service.update_settings(user_id, {"enable_sound": False})

        await service.notify_system(user_id, "Hi", "x")
        assert hints.pending(user_id) == 0

    @pytest.mark.asyncio
    async def test_invalid_permission(self, service, user_id) -> None:
        assert not (await service.set_permission(user_id, "maybe")).success
        assert await service.get_permission(user_id) == "default"


class TestRecipientOperations:
    """Test read state and deletion."""

    @pytest.mark.asyncio
    async def test_mark_read_sets_read_at(self, service, alice) -> None:
        notification = await service.notify_system(alice.id, "Hi", "x")

        result = await service.mark_read(alice, notification.id)

        assert result.success
        assert result.data.read and result.data.read_at is not None
        assert await service.unread_count(alice.id) == 0

    @pytest.mark.asyncio
    async def test_cannot_touch_others_notifications(self, service, alice, bob) -> None:
        notification = await service.notify_system(alice.id, "Hi", "x")

        assert (await service.mark_read(bob, notification.id)).kind == ErrorKind.NOT_FOUND
        assert (await service.delete_notification(bob, notification.id)).kind == ErrorKind.NOT_FOUND
        assert await service.unread_count(alice.id) == 1

    @pytest.mark.asyncio
    async def test_mark_all_read_and_delete_all(self, service, alice, bob) -> None:
        await service.notify_system(alice.id, "a", "x")
        await service.notify_system(alice.id, "b", "x")
        await service.notify_system(bob.id, "c", "x")

        assert await service.mark_all_read(alice.id) == 2
        assert await service.mark_all_read(alice.id) == 0
        assert all(n.read_at for n in await service.list_notifications(alice.id))

        assert await service.delete_all(alice.id) == 2
        assert await service.list_notifications(alice.id) == []
        assert await service.unread_count(bob.id) == 1

    @pytest.mark.asyncio
    async def test_message_text(self, service, user_id) -> None:
        rejected = await service.notify_article_rejected(user_id, "Gita", "Too long", uuid4())
        comment = await service.notify_article_comment(user_id, "Rev", "Gita", "x" * 100, uuid4(), uuid4())

        assert rejected.message == '"Gita" has been rejected: Too long'
        assert rejected.type == NotificationType.ARTICLE_REJECTED
        assert comment.message == "Rev: " + "x" * 80 + "..."
