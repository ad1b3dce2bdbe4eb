"""
Todo Model

Assignable newsroom task.
"""
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Optional
from uuid import UUID, uuid4

from .fields import parse_uuid, parse_datetime, iso


class TodoPriority(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


@dataclass
class TodoItem:
    """
    Task entity.

    Invariant: completed_at is set if and only if completed is true.
    """
    id: UUID = field(default_factory=uuid4)
    title: str = ""
    description: Optional[str] = None
    assignee_id: Optional[UUID] = None
    assignee_name: Optional[str] = None
    priority: TodoPriority = TodoPriority.MEDIUM
    completed: bool = False
    completed_at: Optional[datetime] = None
    created_by: UUID = field(default_factory=uuid4)
    created_by_name: str = ""
    created_at: datetime = field(default_factory=datetime.utcnow)

    def to_dict(self) -> dict:
        """Convert to dictionary for storage and API response"""
        return {
            "id": str(self.id),
            "title": self.title,
            "description": self.description,
            "assignee_id": str(self.assignee_id) if self.assignee_id else None,
            "assignee_name": self.assignee_name,
            "priority": self.priority.value,
            "completed": self.completed,
            "completed_at": iso(self.completed_at),
            "created_by": str(self.created_by),
            "created_by_name": self.created_by_name,
            "created_at": self.created_at.isoformat(),
        }

    @classmethod
    def from_dict(cls, data: dict) -> "TodoItem":
        """Create from dictionary"""
        return cls(
            id=parse_uuid(data.get("id")) or uuid4(),
            title=data.get("title", ""),
            description=data.get("description"),
            assignee_id=parse_uuid(data.get("assignee_id")),
            assignee_name=data.get("assignee_name"),
            priority=TodoPriority(data.get("priority", TodoPriority.MEDIUM.value)),
            completed=data.get("completed", False),
            completed_at=parse_datetime(data.get("completed_at")),
            created_by=parse_uuid(data.get("created_by")),
            created_by_name=data.get("created_by_name", ""),
            created_at=parse_datetime(data.get("created_at")) or datetime.utcnow(),
        )
