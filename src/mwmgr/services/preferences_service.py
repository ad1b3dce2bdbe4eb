"""
Preferences Service

UI preferences kept in the shared store (dark mode flag).
"""
import logging

from ..storage.base import BaseStorage

logger = logging.getLogger("mwmgr.services.preferences")


class PreferencesService:
    """Service for UI preferences"""

    def __init__(self, storage: BaseStorage):
        self.storage = storage

    async def is_dark_mode(self) -> bool:
        return bool(await self.storage.get("theme", False))

    async def set_dark_mode(self, enabled: bool) -> bool:
        await self.storage.set("theme", bool(enabled))
        logger.info(f"Theme set to {'dark' if enabled else 'light'}")
        return bool(enabled)

    async def toggle_theme(self) -> bool:
        return await self.set_dark_mode(not await self.is_dark_mode())
