"""
Users Routes

Endpoints for user management.
"""
import logging
from typing import Optional
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel, EmailStr

from ..models.user import User, UserRole
from ..services.engine_service import EngineService
from .deps import get_engine, get_current_user, unwrap

logger = logging.getLogger("mwmgr.routes.users")
router = APIRouter(prefix="/users", tags=["users"])


# ============================================
# Request/Response Models
# ============================================

class CreateUserRequest(BaseModel):
    """Create user request (admin only)"""
    username: str
    email: EmailStr
    first_name: str
    last_name: str = ""
    password: str
    role: UserRole = UserRole.WRITER
    avatar_url: Optional[str] = None


class UpdateUserRequest(BaseModel):
    """Update user request"""
    username: Optional[str] = None
    email: Optional[EmailStr] = None
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    avatar_url: Optional[str] = None
    role: Optional[UserRole] = None
    is_active: Optional[bool] = None


class ResetPasswordRequest(BaseModel):
    """Admin password reset"""
    new_password: str


# ============================================
# Routes
# ============================================

@router.get("")
@router.get("/")
async def list_users(
    active_only: bool = False,
    current_user: User = Depends(get_current_user),
    engine: EngineService = Depends(get_engine),
):
    """List users"""
    users = await engine.users_service.list_users(active_only=active_only)
    return [u.to_dict() for u in users]


@router.get("/stats")
async def user_stats(
    current_user: User = Depends(get_current_user),
    engine: EngineService = Depends(get_engine),
):
    """Number of users per role"""
    return await engine.users_service.role_counts()


@router.post("", status_code=201)
@router.post("/", status_code=201)
async def create_user(
    request: CreateUserRequest,
    current_user: User = Depends(get_current_user),
    engine: EngineService = Depends(get_engine),
):
    """Create a new user (admin only)"""
    user = unwrap(await engine.users_service.create_user(
        current_user,
        username=request.username,
        email=request.email,
        first_name=request.first_name,
        last_name=request.last_name,
        password=request.password,
        role=request.role,
        avatar_url=request.avatar_url,
    ))
    return user.to_dict()


@router.get("/{user_id}")
async def get_user(
    user_id: UUID,
    current_user: User = Depends(get_current_user),
    engine: EngineService = Depends(get_engine),
):
    """Get user by ID"""
    user = await engine.users_service.get_user(user_id)
    if not user:
        raise HTTPException(status_code=404, detail="User not found")
    return user.to_dict()


@router.patch("/{user_id}")
async def update_user(
    user_id: UUID,
    request: UpdateUserRequest,
    current_user: User = Depends(get_current_user),
    engine: EngineService = Depends(get_engine),
):
    """Update a user (admin, or the user on their own profile)"""
    changes = request.model_dump(exclude_none=True)
    user = unwrap(await engine.users_service.update_user(current_user, user_id, changes))
    return user.to_dict()


@router.post("/{user_id}/activate")
async def activate_user(
    user_id: UUID,
    current_user: User = Depends(get_current_user),
    engine: EngineService = Depends(get_engine),
):
    user = unwrap(await engine.users_service.activate_user(current_user, user_id))
    return user.to_dict()


@router.post("/{user_id}/deactivate")
async def deactivate_user(
    user_id: UUID,
    current_user: User = Depends(get_current_user),
    engine: EngineService = Depends(get_engine),
):
    user = unwrap(await engine.users_service.deactivate_user(current_user, user_id))
    return user.to_dict()


@router.post("/{user_id}/reset-password")
async def reset_password(
    user_id: UUID,
    request: ResetPasswordRequest,
    current_user: User = Depends(get_current_user),
    engine: EngineService = Depends(get_engine),
):
    """Set another user's password (admin only)"""
    unwrap(await engine.auth_service.reset_password(current_user, user_id, request.new_password))
    return {"success": True}


@router.delete("/{user_id}")
async def delete_user(
    user_id: UUID,
    current_user: User = Depends(get_current_user),
    engine: EngineService = Depends(get_engine),
):
    """Delete a user permanently (admin only)"""
    unwrap(await engine.users_service.delete_user(current_user, user_id))
    return {"success": True}
