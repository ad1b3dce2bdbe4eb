"""
Backup Routes

Full export and import of the store (admin only).
"""
import logging
from datetime import datetime

from fastapi import APIRouter, Body, Depends, HTTPException
from fastapi.responses import JSONResponse

from ..config import Config
from ..models.user import User
from ..services.engine_service import EngineService
from .deps import get_engine, get_current_user, unwrap

logger = logging.getLogger("mwmgr.routes.backup")
router = APIRouter(prefix="/backup", tags=["backup"])


@router.get("/export")
async def export_backup(
    current_user: User = Depends(get_current_user),
    engine: EngineService = Depends(get_engine),
):
    """Download every collection as one timestamped JSON document"""
    if not current_user.is_admin:
        raise HTTPException(status_code=403, detail="Only admins can export data")

    data = await engine.backup_service.export_data()
    filename = f"{Config.STORAGE_KEY_PREFIX}backup_{datetime.utcnow().strftime('%Y%m%dT%H%M%SZ')}.json"
    logger.info(f"Export downloaded by @{current_user.username}")
    return JSONResponse(
        content=data,
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )


@router.post("/import")
async def import_backup(
    data: dict = Body(...),
    current_user: User = Depends(get_current_user),
    engine: EngineService = Depends(get_engine),
):
    """Write each collection of an export back verbatim"""
    imported = unwrap(await engine.backup_service.import_data(current_user, data))
    return {"success": True, "imported": imported}
