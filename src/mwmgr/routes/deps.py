"""
Route Dependencies

Engine access, bearer-token authentication and ServiceResult mapping
shared by every router.
"""
from typing import Any

from fastapi import Depends, Header, HTTPException

from ..models.result import ServiceResult, ErrorKind
from ..models.user import User
from ..services.engine_service import get_engine_service, EngineService

STATUS_CODES = {
    ErrorKind.VALIDATION: 400,
    ErrorKind.AUTHENTICATION: 401,
    ErrorKind.PERMISSION_DENIED: 403,
    ErrorKind.NOT_FOUND: 404,
    ErrorKind.CONFLICT: 409,
}


def get_engine() -> EngineService:
    return get_engine_service()


async def get_current_user(
    authorization: str = Header(None),
    engine: EngineService = Depends(get_engine),
) -> User:
    """Dependency to get current authenticated user"""
    if not authorization:
        raise HTTPException(status_code=401, detail="Authorization header required")

    # Expect "Bearer <token>"
    parts = authorization.split()
    if len(parts) != 2 or parts[0].lower() != "bearer":
        raise HTTPException(status_code=401, detail="Invalid authorization header format")

    user = await engine.auth_service.verify_token(parts[1])
    if not user:
        raise HTTPException(status_code=401, detail="Invalid or expired token")
    return user


def unwrap(result: ServiceResult) -> Any:
    """Return the result data, or raise the HTTP error matching its kind"""
    if result.success:
        return result.data
    status_code = STATUS_CODES.get(result.kind, 400)
    raise HTTPException(status_code=status_code, detail=result.error)
