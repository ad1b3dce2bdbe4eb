"""
Todo Service

Newsroom task list: assignable items with priority and completion.
"""
import logging
from datetime import datetime
from typing import Callable, List, Optional, Union
from uuid import UUID

from ..models.result import ServiceResult
from ..models.todo import TodoItem, TodoPriority
from ..models.user import User, UserRole
from ..storage.base import BaseStorage
from .notification_service import NotificationService
from .users_service import UsersService

logger = logging.getLogger("mwmgr.services.todos")

TodoId = Union[UUID, str]

MANAGER_ROLES = (UserRole.ADMIN, UserRole.REVIEWER)

PRIORITY_ORDER = {TodoPriority.HIGH: 0, TodoPriority.MEDIUM: 1, TodoPriority.LOW: 2}


class TodoService:
    """Service for task operations"""

    def __init__(
        self,
        storage: BaseStorage,
        users: UsersService,
        notifications: NotificationService,
        clock: Callable[[], datetime] = datetime.utcnow,
    ):
        self.storage = storage
        self.users = users
        self.notifications = notifications
        self.clock = clock

    # ============================================
    # Queries
    # ============================================

    async def get_todo(self, todo_id: TodoId) -> Optional[TodoItem]:
        record = await self.storage.find("todos", str(todo_id))
        return TodoItem.from_dict(record) if record else None

    async def list_todos(self) -> List[TodoItem]:
        """All tasks, by priority then creation time"""
        todos = [TodoItem.from_dict(r) for r in await self.storage.list("todos")]
        todos.sort(key=lambda t: (PRIORITY_ORDER[t.priority], t.created_at))
        return todos

    async def list_pending(self) -> List[TodoItem]:
        return [t for t in await self.list_todos() if not t.completed]

    async def list_completed(self) -> List[TodoItem]:
        return [t for t in await self.list_todos() if t.completed]

    async def list_assigned_to(self, user_id: TodoId) -> List[TodoItem]:
        return [t for t in await self.list_todos() if str(t.assignee_id) == str(user_id)]

    # ============================================
    # Mutations
    # ============================================

    async def add_todo(
        self,
        actor: User,
        title: str,
        description: Optional[str] = None,
        assignee_id: Optional[TodoId] = None,
        priority: TodoPriority = TodoPriority.MEDIUM,
    ) -> ServiceResult:
        """
        Create a task (admins and reviewers).

        The assignee, when it is not the creator, gets a task_assigned
        notification.
        """
        if not actor.has_role(*MANAGER_ROLES):
            return ServiceResult.denied("Only admins and reviewers can manage tasks")

        title = (title or "").strip()
        if not title:
            return ServiceResult.invalid("Task title is required")

        todo = TodoItem(
            title=title,
            description=description,
            priority=TodoPriority(priority),
            created_by=actor.id,
            created_by_name=actor.display_name,
            created_at=self.clock(),
        )

        if assignee_id:
            assignee = await self.users.get_user(assignee_id)
            if not assignee:
                return ServiceResult.not_found("Assignee not found")
            todo.assignee_id = assignee.id
            todo.assignee_name = assignee.display_name

        await self.storage.insert("todos", todo.to_dict())
        logger.info(f"Task created: '{todo.title}' by @{actor.username}")

        if todo.assignee_id and todo.assignee_id != actor.id:
            await self.notifications.notify_task_assigned(
                todo.assignee_id, todo.title, actor.display_name, todo.id
            )

        return ServiceResult.ok(todo)

    async def update_todo(self, actor: User, todo_id: TodoId, changes: dict) -> ServiceResult:
        """Edit title, description, assignee or priority (admins and reviewers)"""
        if not actor.has_role(*MANAGER_ROLES):
            return ServiceResult.denied("Only admins and reviewers can manage tasks")

        todo = await self.get_todo(todo_id)
        if not todo:
            return ServiceResult.not_found("Task not found")

        if "title" in changes:
            title = (changes["title"] or "").strip()
            if not title:
                return ServiceResult.invalid("Task title is required")
            todo.title = title
        if "description" in changes:
            todo.description = changes["description"]
        if "priority" in changes and changes["priority"]:
            todo.priority = TodoPriority(changes["priority"])
        if "assignee_id" in changes:
            if changes["assignee_id"]:
                assignee = await self.users.get_user(changes["assignee_id"])
                if not assignee:
                    return ServiceResult.not_found("Assignee not found")
                todo.assignee_id = assignee.id
                todo.assignee_name = assignee.display_name
            else:
                todo.assignee_id = None
                todo.assignee_name = None

        await self.storage.update("todos", str(todo.id), todo.to_dict())
        logger.info(f"Task updated: '{todo.title}' by @{actor.username}")
        return ServiceResult.ok(todo)

    async def delete_todo(self, actor: User, todo_id: TodoId) -> ServiceResult:
        if not actor.has_role(*MANAGER_ROLES):
            return ServiceResult.denied("Only admins and reviewers can manage tasks")

        if not await self.storage.delete("todos", str(todo_id)):
            return ServiceResult.not_found("Task not found")

        logger.info(f"Task deleted: {todo_id} by @{actor.username}")
        return ServiceResult.ok()

    async def toggle_complete(self, actor: User, todo_id: TodoId) -> ServiceResult:
        """
        Flip the completion flag (admins, reviewers and the assignee).

        Completing someone else's task notifies its creator.
        """
        todo = await self.get_todo(todo_id)
        if not todo:
            return ServiceResult.not_found("Task not found")

        if not (actor.has_role(*MANAGER_ROLES) or actor.id == todo.assignee_id):
            return ServiceResult.denied("Only managers or the assignee can complete this task")

        todo.completed = not todo.completed
        todo.completed_at = self.clock() if todo.completed else None

        await self.storage.update("todos", str(todo.id), todo.to_dict())
        logger.info(
            f"Task '{todo.title}' marked {'done' if todo.completed else 'pending'} by @{actor.username}"
        )

        if todo.completed and todo.created_by and todo.created_by != actor.id:
            await self.notifications.notify_task_completed(
                todo.created_by, todo.title, actor.display_name, todo.id
            )

        return ServiceResult.ok(todo)
