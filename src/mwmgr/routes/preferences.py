"""
Preferences Routes

Endpoints for UI preferences.
"""
from fastapi import APIRouter, Depends
from pydantic import BaseModel

from ..services.engine_service import EngineService
from .deps import get_engine

router = APIRouter(prefix="/preferences", tags=["preferences"])


class ThemeRequest(BaseModel):
    dark_mode: bool


@router.get("/theme")
async def get_theme(engine: EngineService = Depends(get_engine)):
    return {"dark_mode": await engine.preferences_service.is_dark_mode()}


@router.put("/theme")
async def set_theme(request: ThemeRequest, engine: EngineService = Depends(get_engine)):
    return {"dark_mode": await engine.preferences_service.set_dark_mode(request.dark_mode)}


@router.post("/theme/toggle")
async def toggle_theme(engine: EngineService = Depends(get_engine)):
    return {"dark_mode": await engine.preferences_service.toggle_theme()}
