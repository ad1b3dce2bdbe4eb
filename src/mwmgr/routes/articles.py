"""
Article Routes

Endpoints for drafting, the review workflow and review comments.
"""
import logging
from typing import List, Optional
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel

from ..config import Config
from ..models.article import ArticleStatus
from ..models.user import User
from ..services.engine_service import EngineService
from .deps import get_engine, get_current_user, unwrap

logger = logging.getLogger("mwmgr.routes.articles")
router = APIRouter(prefix="/articles", tags=["articles"])


# ============================================
# Request Models
# ============================================

class CreateArticleRequest(BaseModel):
    title: str
    body: str
    category: str
    subtitle: Optional[str] = None
    tags: List[str] = []
    cover_image: Optional[str] = None


class UpdateArticleRequest(BaseModel):
    title: Optional[str] = None
    subtitle: Optional[str] = None
    body: Optional[str] = None
    category: Optional[str] = None
    tags: Optional[List[str]] = None
    cover_image: Optional[str] = None


class StatusChangeRequest(BaseModel):
    """Workflow transition; comment is the review note or rejection reason"""
    status: ArticleStatus
    comment: Optional[str] = None


class CommentRequest(BaseModel):
    text: str


# ============================================
# Routes
# ============================================

@router.get("")
@router.get("/")
async def list_articles(
    status: Optional[ArticleStatus] = None,
    author_id: Optional[UUID] = None,
    current_user: User = Depends(get_current_user),
    engine: EngineService = Depends(get_engine),
):
    """List articles, newest first, optionally by status or author"""
    if author_id:
        articles = await engine.article_service.list_by_author(author_id)
    else:
        articles = await engine.article_service.list_articles()
    if status:
        articles = [a for a in articles if a.status == status]
    return [a.to_dict() for a in articles]


@router.get("/categories")
async def list_categories():
    return Config.CATEGORIES


@router.get("/stats")
async def article_stats(
    current_user: User = Depends(get_current_user),
    engine: EngineService = Depends(get_engine),
):
    """Number of articles per status"""
    return await engine.article_service.status_counts()


@router.post("", status_code=201)
@router.post("/", status_code=201)
async def create_article(
    request: CreateArticleRequest,
    current_user: User = Depends(get_current_user),
    engine: EngineService = Depends(get_engine),
):
    article = unwrap(await engine.article_service.create_article(
        current_user,
        title=request.title,
        body=request.body,
        category=request.category,
        subtitle=request.subtitle,
        tags=request.tags,
        cover_image=request.cover_image,
    ))
    return article.to_dict()


@router.get("/{article_id}")
async def get_article(
    article_id: UUID,
    current_user: User = Depends(get_current_user),
    engine: EngineService = Depends(get_engine),
):
    article = await engine.article_service.get_article(article_id)
    if not article:
        raise HTTPException(status_code=404, detail="Article not found")
    return article.to_dict()


@router.patch("/{article_id}")
async def update_article(
    article_id: UUID,
    request: UpdateArticleRequest,
    current_user: User = Depends(get_current_user),
    engine: EngineService = Depends(get_engine),
):
    changes = request.model_dump(exclude_unset=True)
    article = unwrap(await engine.article_service.update_article(current_user, article_id, changes))
    return article.to_dict()


@router.delete("/{article_id}")
async def delete_article(
    article_id: UUID,
    current_user: User = Depends(get_current_user),
    engine: EngineService = Depends(get_engine),
):
    unwrap(await engine.article_service.delete_article(current_user, article_id))
    return {"success": True}


@router.post("/{article_id}/status")
async def change_status(
    article_id: UUID,
    request: StatusChangeRequest,
    current_user: User = Depends(get_current_user),
    engine: EngineService = Depends(get_engine),
):
    """Move the article along one workflow edge"""
    article = unwrap(await engine.article_service.transition(
        current_user, article_id, request.status, request.comment
    ))
    return article.to_dict()


@router.post("/{article_id}/comments", status_code=201)
async def add_comment(
    article_id: UUID,
    request: CommentRequest,
    current_user: User = Depends(get_current_user),
    engine: EngineService = Depends(get_engine),
):
    comment = unwrap(await engine.article_service.add_comment(current_user, article_id, request.text))
    return comment.to_dict()
