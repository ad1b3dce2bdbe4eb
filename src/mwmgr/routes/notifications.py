"""
Notification Routes

Endpoints for the current user's notifications, settings, desktop
permission, app visibility and pending delivery hints.
"""
from typing import Literal, Optional
from uuid import UUID

from fastapi import APIRouter, Depends
from pydantic import BaseModel, Field

from ..models.user import User
from ..services.engine_service import EngineService
from .deps import get_engine, get_current_user, unwrap

router = APIRouter(prefix="/notifications", tags=["notifications"])


# ============================================
# Request Models
# ============================================

class UpdateSettingsRequest(BaseModel):
    """Partial settings update"""
    enable_desktop: Optional[bool] = None
    enable_in_app: Optional[bool] = None
    enable_sound: Optional[bool] = None
    notify_chat_mentions: Optional[bool] = None
    notify_chat_messages: Optional[bool] = None
    notify_article_status: Optional[bool] = None
    notify_article_comments: Optional[bool] = None
    notify_task_assigned: Optional[bool] = None
    notify_task_completed: Optional[bool] = None
    sound_volume: Optional[float] = Field(default=None, ge=0.0, le=1.0)
    quiet_hours_enabled: Optional[bool] = None
    quiet_hours_start: Optional[str] = None            # "HH:MM"
    quiet_hours_end: Optional[str] = None


class PermissionRequest(BaseModel):
    permission: Literal["default", "granted", "denied"]


class VisibilityRequest(BaseModel):
    visible: bool


# ============================================
# Notifications
# ============================================

@router.get("")
@router.get("/")
async def list_notifications(
    unread_only: bool = False,
    current_user: User = Depends(get_current_user),
    engine: EngineService = Depends(get_engine),
):
    """Current user's notifications, newest first"""
    service = engine.notification_service
    if unread_only:
        notifications = await service.unread_notifications(current_user.id)
    else:
        notifications = await service.list_notifications(current_user.id)
    return [n.to_dict() for n in notifications]


@router.get("/unread-count")
async def unread_count(
    current_user: User = Depends(get_current_user),
    engine: EngineService = Depends(get_engine),
):
    return {"count": await engine.notification_service.unread_count(current_user.id)}


@router.post("/read-all")
async def mark_all_read(
    current_user: User = Depends(get_current_user),
    engine: EngineService = Depends(get_engine),
):
    changed = await engine.notification_service.mark_all_read(current_user.id)
    return {"success": True, "updated": changed}


@router.delete("")
@router.delete("/")
async def delete_all(
    current_user: User = Depends(get_current_user),
    engine: EngineService = Depends(get_engine),
):
    removed = await engine.notification_service.delete_all(current_user.id)
    return {"success": True, "deleted": removed}


# ============================================
# Settings, permission, visibility, hints
# ============================================

@router.get("/settings")
async def get_settings(
    current_user: User = Depends(get_current_user),
    engine: EngineService = Depends(get_engine),
):
    settings = await engine.notification_service.get_settings(current_user.id)
    return settings.to_dict()


@router.patch("/settings")
async def update_settings(
    request: UpdateSettingsRequest,
    current_user: User = Depends(get_current_user),
    engine: EngineService = Depends(get_engine),
):
    settings = unwrap(await engine.notification_service.update_settings(
        current_user.id, request.model_dump(exclude_none=True)
    ))
    return settings.to_dict()


@router.get("/permission")
async def get_permission(
    current_user: User = Depends(get_current_user),
    engine: EngineService = Depends(get_engine),
):
    return {"permission": await engine.notification_service.get_permission(current_user.id)}


@router.put("/permission")
async def set_permission(
    request: PermissionRequest,
    current_user: User = Depends(get_current_user),
    engine: EngineService = Depends(get_engine),
):
    """Record the browser's answer to the desktop permission prompt"""
    permission = unwrap(await engine.notification_service.set_permission(
        current_user.id, request.permission
    ))
    return {"permission": permission}


@router.put("/visibility")
async def set_visibility(
    request: VisibilityRequest,
    current_user: User = Depends(get_current_user),
    engine: EngineService = Depends(get_engine),
):
    """Report whether the app window is visible (desktop alerts only when hidden)"""
    engine.notification_service.set_visibility(current_user.id, request.visible)
    return {"visible": request.visible}


@router.get("/hints")
async def drain_hints(
    current_user: User = Depends(get_current_user),
    engine: EngineService = Depends(get_engine),
):
    """Pop the pending desktop/sound hints for the current user"""
    return [h.to_dict() for h in engine.hint_queue.drain(str(current_user.id))]


# ============================================
# Single notification
# ============================================

@router.post("/{notification_id}/read")
async def mark_read(
    notification_id: UUID,
    current_user: User = Depends(get_current_user),
    engine: EngineService = Depends(get_engine),
):
    notification = unwrap(await engine.notification_service.mark_read(current_user, notification_id))
    return notification.to_dict()


@router.delete("/{notification_id}")
async def delete_notification(
    notification_id: UUID,
    current_user: User = Depends(get_current_user),
    engine: EngineService = Depends(get_engine),
):
    unwrap(await engine.notification_service.delete_notification(current_user, notification_id))
    return {"success": True}
