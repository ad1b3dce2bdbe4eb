"""Tests for TodoService."""

import pytest

from mwmgr.models import ErrorKind, NotificationType, TodoPriority


class TestTodos:
    """Test task management and completion."""

    @pytest.mark.asyncio
    async def test_assign_notifies_assignee(self, engine, reviewer, alice) -> None:
        result = await engine.todo_service.add_todo(reviewer, "Intervista preside", assignee_id=alice.id)

        assert result.success
        assert result.data.assignee_name == "Alice Test"
        notifications = await engine.notification_service.list_notifications(alice.id)
        assert [n.type for n in notifications] == [NotificationType.TASK_ASSIGNED]
        assert notifications[0].message == '"Intervista preside" assigned by Reviewer Test'

    @pytest.mark.asyncio
    async def test_writer_cannot_add(self, engine, alice) -> None:
        result = await engine.todo_service.add_todo(alice, "Mine")
        assert result.kind == ErrorKind.PERMISSION_DENIED

    @pytest.mark.asyncio
    async def test_validation(self, engine, admin) -> None:
        assert (await engine.todo_service.add_todo(admin, "  ")).kind == ErrorKind.VALIDATION
        unknown = await engine.todo_service.add_todo(admin, "T", assignee_id="00000000-0000-0000-0000-000000000000")
        assert unknown.kind == ErrorKind.NOT_FOUND

    @pytest.mark.asyncio
    async def test_assignee_completes_and_creator_is_notified(self, engine, reviewer, alice) -> None:
        todo = (await engine.todo_service.add_todo(reviewer, "Foto evento", assignee_id=alice.id)).data

        done = (await engine.todo_service.toggle_complete(alice, todo.id)).data
        assert done.completed and done.completed_at is not None
        types = [n.type for n in await engine.notification_service.list_notifications(reviewer.id)]
        assert types == [NotificationType.TASK_COMPLETED]

        undone = (await engine.todo_service.toggle_complete(alice, todo.id)).data
        assert not undone.completed and undone.completed_at is None

    @pytest.mark.asyncio
    async def test_other_writer_cannot_complete(self, engine, reviewer, alice, bob) -> None:
        todo = (await engine.todo_service.add_todo(reviewer, "Foto", assignee_id=alice.id)).data
        assert (await engine.todo_service.toggle_complete(bob, todo.id)).kind == ErrorKind.PERMISSION_DENIED

    @pytest.mark.asyncio
    async def test_ordering_and_filters(self, engine, admin, alice) -> None:
        service = engine.todo_service
        low = (await service.add_todo(admin, "low", priority=TodoPriority.LOW)).data
        high = (await service.add_todo(admin, "high", priority=TodoPriority.HIGH, assignee_id=alice.id)).data
        medium = (await service.add_todo(admin, "medium")).data
        await service.toggle_complete(admin, low.id)

        assert [t.id for t in await service.list_todos()] == [high.id, medium.id, low.id]
        assert [t.id for t in await service.list_pending()] == [high.id, medium.id]
        assert [t.id for t in await service.list_completed()] == [low.id]
        assert [t.id for t in await service.list_assigned_to(alice.id)] == [high.id]

    @pytest.mark.asyncio
    async def test_update_and_delete(self, engine, admin, alice) -> None:
        todo = (await engine.todo_service.add_todo(admin, "Bozza", assignee_id=alice.id)).data

        updated = await engine.todo_service.update_todo(admin, todo.id, {"title": "Finale", "assignee_id": None})
        assert updated.data.title == "Finale"
        assert updated.data.assignee_id is None

        assert (await engine.todo_service.delete_todo(alice, todo.id)).kind == ErrorKind.PERMISSION_DENIED
        assert (await engine.todo_service.delete_todo(admin, todo.id)).success
        assert await engine.todo_service.get_todo(todo.id) is None
