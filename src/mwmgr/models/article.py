"""
Article Model

An article moves through the review workflow:

    DRAFT -> IN_REVIEW -> APPROVED -> PUBLISHED
                       -> REJECTED

Review comments are an append-only log attached to the article.
"""
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import List, Optional
from uuid import UUID, uuid4

from .fields import parse_uuid, parse_datetime, iso
from .user import UserRole


class ArticleStatus(str, Enum):
    """Workflow states of an article"""
    DRAFT = "DRAFT"
    IN_REVIEW = "IN_REVIEW"
    APPROVED = "APPROVED"
    REJECTED = "REJECTED"
    PUBLISHED = "PUBLISHED"


# Allowed workflow edges
TRANSITIONS = {
    ArticleStatus.DRAFT: {ArticleStatus.IN_REVIEW},
    ArticleStatus.IN_REVIEW: {ArticleStatus.APPROVED, ArticleStatus.REJECTED},
    ArticleStatus.APPROVED: {ArticleStatus.PUBLISHED},
    ArticleStatus.REJECTED: set(),
    ArticleStatus.PUBLISHED: set(),
}


@dataclass
class ReviewComment:
    """Comment left on an article, with a snapshot of its author"""
    id: UUID = field(default_factory=uuid4)
    article_id: UUID = field(default_factory=uuid4)
    author_id: UUID = field(default_factory=uuid4)
    author_name: str = ""
    author_role: UserRole = UserRole.WRITER
    text: str = ""
    created_at: datetime = field(default_factory=datetime.utcnow)

    def to_dict(self) -> dict:
        return {
            "id": str(self.id),
            "article_id": str(self.article_id),
            "author_id": str(self.author_id),
            "author_name": self.author_name,
            "author_role": self.author_role.value,
            "text": self.text,
            "created_at": self.created_at.isoformat(),
        }

    @classmethod
    def from_dict(cls, data: dict) -> "ReviewComment":
        return cls(
            id=parse_uuid(data.get("id")) or uuid4(),
            article_id=parse_uuid(data.get("article_id")),
            author_id=parse_uuid(data.get("author_id")),
            author_name=data.get("author_name", ""),
            author_role=UserRole(data.get("author_role", UserRole.WRITER.value)),
            text=data.get("text", ""),
            created_at=parse_datetime(data.get("created_at")) or datetime.utcnow(),
        )


@dataclass
class Article:
    """
    Article entity.

    Invariant: published_at is set if and only if status is PUBLISHED.
    """
    id: UUID = field(default_factory=uuid4)
    title: str = ""
    subtitle: Optional[str] = None
    body: str = ""
    author_id: UUID = field(default_factory=uuid4)
    author_name: str = ""                            # Denormalized display name
    category: str = ""
    tags: List[str] = field(default_factory=list)
    status: ArticleStatus = ArticleStatus.DRAFT
    cover_image: Optional[str] = None
    created_at: datetime = field(default_factory=datetime.utcnow)
    updated_at: datetime = field(default_factory=datetime.utcnow)
    published_at: Optional[datetime] = None
    comments: List[ReviewComment] = field(default_factory=list)

    @property
    def is_published(self) -> bool:
        return self.status == ArticleStatus.PUBLISHED

    def can_transition_to(self, target: ArticleStatus) -> bool:
        return target in TRANSITIONS[self.status]

    def to_dict(self) -> dict:
        """Convert to dictionary for storage and API response"""
        return {
            "id": str(self.id),
            "title": self.title,
            "subtitle": self.subtitle,
            "body": self.body,
            "author_id": str(self.author_id),
            "author_name": self.author_name,
            "category": self.category,
            "tags": list(self.tags),
            "status": self.status.value,
            "cover_image": self.cover_image,
            "created_at": self.created_at.isoformat(),
            "updated_at": self.updated_at.isoformat(),
            "published_at": iso(self.published_at),
            "comments": [c.to_dict() for c in self.comments],
        }

    @classmethod
    def from_dict(cls, data: dict) -> "Article":
        """Create from dictionary"""
        return cls(
            id=parse_uuid(data.get("id")) or uuid4(),
            title=data.get("title", ""),
            subtitle=data.get("subtitle"),
            body=data.get("body", ""),
            author_id=parse_uuid(data.get("author_id")),
            author_name=data.get("author_name", ""),
            category=data.get("category", ""),
            tags=list(data.get("tags") or []),
            status=ArticleStatus(data.get("status", ArticleStatus.DRAFT.value)),
            cover_image=data.get("cover_image"),
            created_at=parse_datetime(data.get("created_at")) or datetime.utcnow(),
            updated_at=parse_datetime(data.get("updated_at")) or datetime.utcnow(),
            published_at=parse_datetime(data.get("published_at")),
            comments=[ReviewComment.from_dict(c) for c in data.get("comments") or []],
        )
