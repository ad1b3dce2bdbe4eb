"""
Authentication Routes

Endpoints for login, session and password management.
"""
import logging
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel, EmailStr

from ..models.user import User
from ..services.engine_service import EngineService
from .deps import get_engine, get_current_user, unwrap

logger = logging.getLogger("mwmgr.routes.auth")
router = APIRouter(prefix="/auth", tags=["auth"])


# ============================================
# Request/Response Models
# ============================================

class LoginRequest(BaseModel):
    """Login request body"""
    username: str
    password: str


class LoginResponse(BaseModel):
    """Login response"""
    success: bool
    token: Optional[str] = None
    expires_at: Optional[str] = None
    user: Optional[dict] = None


class RegisterRequest(BaseModel):
    """Self-registration request body"""
    username: str
    email: EmailStr
    first_name: str
    last_name: str = ""
    password: str


class ChangePasswordRequest(BaseModel):
    """Change password request"""
    current_password: str
    new_password: str


# ============================================
# Routes
# ============================================

@router.post("/login", response_model=LoginResponse)
async def login(request: LoginRequest, engine: EngineService = Depends(get_engine)):
    """
    Authenticate user with username and password.

    Returns JWT token on success.
    """
    data = unwrap(await engine.auth_service.login(request.username, request.password))
    return LoginResponse(
        success=True,
        token=data["token"],
        expires_at=data["expires_at"],
        user=data["user"].to_dict(),
    )


@router.post("/logout")
async def logout(
    current_user: User = Depends(get_current_user),
    engine: EngineService = Depends(get_engine),
):
    """Close the persisted session"""
    await engine.auth_service.logout()
    engine.notification_service.set_visibility(current_user.id, False)
    return {"success": True}


@router.get("/session")
async def check_session(
    current_user: User = Depends(get_current_user),
    engine: EngineService = Depends(get_engine),
):
    """Validate the persisted session; only its own user may read it"""
    user = unwrap(await engine.auth_service.check_session())
    if user.id != current_user.id:
        raise HTTPException(status_code=401, detail="Not authenticated")
    return user.to_dict()


@router.post("/register", status_code=201)
async def register(request: RegisterRequest, engine: EngineService = Depends(get_engine)):
    """Register a new writer account (when registration is enabled)"""
    user = unwrap(await engine.users_service.register(
        username=request.username,
        email=request.email,
        first_name=request.first_name,
        last_name=request.last_name,
        password=request.password,
    ))
    logger.info(f"User registered: @{user.username}")
    return user.to_dict()


@router.get("/me")
async def get_current_user_info(current_user: User = Depends(get_current_user)):
    """Get current authenticated user's information"""
    return current_user.to_dict()


@router.post("/change-password")
async def change_password(
    request: ChangePasswordRequest,
    current_user: User = Depends(get_current_user),
    engine: EngineService = Depends(get_engine),
):
    """Change own password"""
    unwrap(await engine.auth_service.change_password(
        current_user, request.current_password, request.new_password
    ))
    return {"success": True}
