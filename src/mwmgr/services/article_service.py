"""
Article Service

Article workflow engine: drafting, the review state machine, review
comments and the notifications they trigger for the author.
"""
import logging
from collections import Counter
from datetime import datetime, timedelta
from typing import Callable, Dict, List, Optional, Union
from uuid import UUID

from ..config import Config
from ..models.article import Article, ArticleStatus, ReviewComment
from ..models.result import ServiceResult
from ..models.user import User, UserRole
from ..storage.base import BaseStorage
from .notification_service import NotificationService

logger = logging.getLogger("mwmgr.services.articles")

ArticleId = Union[UUID, str]

EDITABLE_FIELDS = ("title", "subtitle", "body", "category", "tags", "cover_image")

# Role allowed to move an article into each target state (authors also submit)
TRANSITION_ROLES = {
    ArticleStatus.IN_REVIEW: (UserRole.ADMIN,),
    ArticleStatus.APPROVED: (UserRole.REVIEWER, UserRole.ADMIN),
    ArticleStatus.REJECTED: (UserRole.REVIEWER, UserRole.ADMIN),
    ArticleStatus.PUBLISHED: (UserRole.ADMIN,),
}


def normalize_tags(tags) -> List[str]:
    """Trim tags, dropping empty ones and duplicates"""
    result: List[str] = []
    for tag in tags or []:
        tag = str(tag).strip()
        if tag and tag not in result:
            result.append(tag)
    return result


class ArticleService:
    """
    Article workflow engine.

    States: DRAFT -> IN_REVIEW -> APPROVED | REJECTED, APPROVED -> PUBLISHED.
    All role and ownership checks happen here.
    """

    def __init__(
        self,
        storage: BaseStorage,
        notifications: NotificationService,
        clock: Callable[[], datetime] = datetime.utcnow,
    ):
        self.storage = storage
        self.notifications = notifications
        self.clock = clock

    def _touch(self, article: Article) -> datetime:
        """Advance updated_at, strictly later than its previous value"""
        now = max(self.clock(), article.updated_at + timedelta(microseconds=1))
        article.updated_at = now
        return now

    async def _save(self, article: Article):
        await self.storage.update("articles", str(article.id), article.to_dict())

    # ============================================
    # Queries
    # ============================================

    async def get_article(self, article_id: ArticleId) -> Optional[Article]:
        """Get article by ID"""
        record = await self.storage.find("articles", str(article_id))
        return Article.from_dict(record) if record else None

    async def list_articles(self) -> List[Article]:
        """All articles, newest first"""
        articles = [Article.from_dict(r) for r in await self.storage.list("articles")]
        articles.sort(key=lambda a: a.created_at, reverse=True)
        return articles

    async def list_by_author(self, author_id: ArticleId) -> List[Article]:
        return [a for a in await self.list_articles() if str(a.author_id) == str(author_id)]

    async def list_by_status(self, status: ArticleStatus) -> List[Article]:
        return [a for a in await self.list_articles() if a.status == status]

    async def status_counts(self) -> Dict[str, int]:
        """Number of articles per status, for the dashboard"""
        counts = Counter(a.status.value for a in await self.list_articles())
        return {status.value: counts.get(status.value, 0) for status in ArticleStatus}

    # ============================================
    # Drafting
    # ============================================

    async def create_article(
        self,
        actor: User,
        title: str,
        body: str,
        category: str,
        subtitle: Optional[str] = None,
        tags: Optional[List[str]] = None,
        cover_image: Optional[str] = None,
    ) -> ServiceResult:
        """
        Create a draft article authored by the actor.

        Returns:
            ServiceResult with the new Article in data
        """
        if not actor.has_role(UserRole.WRITER, UserRole.ADMIN):
            return ServiceResult.denied("Only writers and admins can create articles")

        error = self._validate(title, body, category)
        if error:
            return ServiceResult.invalid(error)

        now = self.clock()
        article = Article(
            title=title.strip(),
            subtitle=subtitle,
            body=body,
            author_id=actor.id,
            author_name=actor.display_name,
            category=category,
            tags=normalize_tags(tags),
            cover_image=cover_image,
            created_at=now,
            updated_at=now,
        )

        await self.storage.insert("articles", article.to_dict())
        logger.info(f"Article created: '{article.title}' by @{actor.username}")
        return ServiceResult.ok(article)

    async def update_article(self, actor: User, article_id: ArticleId, changes: dict) -> ServiceResult:
        """
        Edit title, subtitle, body, category, tags or cover image.

        Only the author or an admin may edit, and never once published.
        Editing an approved or rejected article sends it back to DRAFT.
        """
        article = await self.get_article(article_id)
        if not article:
            return ServiceResult.not_found("Article not found")

        if not (actor.is_admin or actor.id == article.author_id):
            return ServiceResult.denied("Only the author or an admin can edit this article")

        if article.is_published:
            return ServiceResult.invalid("Published articles cannot be edited")

        changes = {k: v for k, v in changes.items() if k in EDITABLE_FIELDS}

        title = changes.get("title", article.title)
        body = changes.get("body", article.body)
        category = changes.get("category", article.category)
        error = self._validate(title, body, category)
        if error:
            return ServiceResult.invalid(error)

        article.title = title.strip()
        article.body = body
        article.category = category
        if "subtitle" in changes:
            article.subtitle = changes["subtitle"]
        if "tags" in changes:
            article.tags = normalize_tags(changes["tags"])
        if "cover_image" in changes:
            article.cover_image = changes["cover_image"]

        if article.status in (ArticleStatus.APPROVED, ArticleStatus.REJECTED):
            logger.info(f"Article {article.id} edited after review, back to DRAFT")
            article.status = ArticleStatus.DRAFT

        self._touch(article)
        await self._save(article)
        logger.info(f"Article updated: '{article.title}' by @{actor.username}")
        return ServiceResult.ok(article)

    async def delete_article(self, actor: User, article_id: ArticleId) -> ServiceResult:
        """Delete an article with its comments (admin only)"""
        if not actor.is_admin:
            return ServiceResult.denied("Only admins can delete articles")

        if not await self.storage.delete("articles", str(article_id)):
            return ServiceResult.not_found("Article not found")

        logger.info(f"Article deleted: {article_id} by @{actor.username}")
        return ServiceResult.ok()

    # ============================================
    # Workflow
    # ============================================

    async def submit_for_review(self, actor: User, article_id: ArticleId) -> ServiceResult:
        return await self.transition(actor, article_id, ArticleStatus.IN_REVIEW)

    async def approve(self, actor: User, article_id: ArticleId, comment: Optional[str] = None) -> ServiceResult:
        return await self.transition(actor, article_id, ArticleStatus.APPROVED, comment)

    async def reject(self, actor: User, article_id: ArticleId, reason: Optional[str] = None) -> ServiceResult:
        return await self.transition(actor, article_id, ArticleStatus.REJECTED, reason)

    async def publish(self, actor: User, article_id: ArticleId) -> ServiceResult:
        return await self.transition(actor, article_id, ArticleStatus.PUBLISHED)

    async def transition(
        self,
        actor: User,
        article_id: ArticleId,
        target: ArticleStatus,
        comment: Optional[str] = None,
    ) -> ServiceResult:
        """
        Move an article along one workflow edge.

        An optional comment is appended to the review log. When the actor
        is not the author, the author is notified of the new status (and
        of the comment).
        """
        target = ArticleStatus(target)
        article = await self.get_article(article_id)
        if not article:
            return ServiceResult.not_found("Article not found")

        if not self._may_transition(actor, article, target):
            return ServiceResult.denied(
                f"{actor.role.value} cannot move articles to {target.value}"
            )

        if target == ArticleStatus.PUBLISHED and article.is_published:
            # Republish keeps the original published_at
            return ServiceResult.ok(article)

        if not article.can_transition_to(target):
            return ServiceResult.invalid(
                f"Cannot move article from {article.status.value} to {target.value}"
            )

        now = self._touch(article)
        article.status = target
        article.published_at = now if target == ArticleStatus.PUBLISHED else None

        new_comment = None
        if comment and comment.strip():
            new_comment = self._make_comment(actor, article, comment.strip(), now)
            article.comments.append(new_comment)

        await self._save(article)
        logger.info(f"Article {article.id} -> {target.value} by @{actor.username}")

        if article.author_id and actor.id != article.author_id:
            if new_comment:
                await self._notify_comment(actor, article, new_comment)
            await self._notify_status(article, comment)

        return ServiceResult.ok(article)

    def _may_transition(self, actor: User, article: Article, target: ArticleStatus) -> bool:
        if target == ArticleStatus.IN_REVIEW and actor.id == article.author_id:
            return True
        return actor.has_role(*TRANSITION_ROLES.get(target, ()))

    async def _notify_status(self, article: Article, comment: Optional[str]):
        if article.status == ArticleStatus.APPROVED:
            await self.notifications.notify_article_approved(article.author_id, article.title, article.id)
        elif article.status == ArticleStatus.REJECTED:
            await self.notifications.notify_article_rejected(article.author_id, article.title, comment, article.id)
        elif article.status == ArticleStatus.PUBLISHED:
            await self.notifications.notify_article_published(article.author_id, article.title, article.id)

    # ============================================
    # Comments
    # ============================================

    async def add_comment(self, actor: User, article_id: ArticleId, text: str) -> ServiceResult:
        """Append a review comment; the author is notified unless they wrote it"""
        text = (text or "").strip()
        if not text:
            return ServiceResult.invalid("Comment text is required")

        article = await self.get_article(article_id)
        if not article:
            return ServiceResult.not_found("Article not found")

        now = self._touch(article)
        comment = self._make_comment(actor, article, text, now)
        article.comments.append(comment)

        await self._save(article)
        logger.info(f"Comment added to article {article.id} by @{actor.username}")

        if article.author_id and actor.id != article.author_id:
            await self._notify_comment(actor, article, comment)

        return ServiceResult.ok(comment)

    def _make_comment(self, actor: User, article: Article, text: str, now: datetime) -> ReviewComment:
        return ReviewComment(
            article_id=article.id,
            author_id=actor.id,
            author_name=actor.display_name,
            author_role=actor.role,
            text=text,
            created_at=now,
        )

    async def _notify_comment(self, actor: User, article: Article, comment: ReviewComment):
        await self.notifications.notify_article_comment(
            article.author_id,
            actor.display_name,
            article.title,
            comment.text,
            article.id,
            comment.id,
        )

    # ============================================
    # Validation
    # ============================================

    def _validate(self, title: Optional[str], body: Optional[str], category: Optional[str]) -> Optional[str]:
        if not title or not title.strip() or not body or not body.strip():
            return "Title and body are required"
        if category not in Config.CATEGORIES:
            return f"Unknown category: {category}"
        return None
