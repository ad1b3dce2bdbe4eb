"""
Engine Service

Main composite service that owns the storage backend and wires every
business service around it.
Singleton pattern - one instance per process.
"""
import logging
from typing import Optional

from ..config import Config
from ..notifications.queue_sender import QueueSender
from ..notifications.webhook_sender import WebhookSender
from ..storage import BaseStorage, create_storage
from .article_service import ArticleService
from .auth_service import AuthService
from .backup_service import BackupService
from .chat_service import ChatService
from .mention_service import MentionService
from .notification_service import NotificationService
from .poller_service import NotificationPoller
from .preferences_service import PreferencesService
from .todo_service import TodoService
from .users_service import UsersService

logger = logging.getLogger("mwmgr.services.engine")

# Singleton instance
_engine_service: Optional["EngineService"] = None


class EngineService:
    """
    Composite engine service.

    Manages:
    - The storage backend (local JSON files or PostgreSQL)
    - Business logic services
    - The notification poller
    - Graceful shutdown
    """

    def __init__(self, storage: Optional[BaseStorage] = None, poll_enabled: Optional[bool] = None):
        """
        Initialize engine service.

        Args:
            storage: Storage backend; built from Config when omitted
            poll_enabled: Override NOTIFICATION_POLL_ENABLED
        """
        self.storage = storage or create_storage()

        # Notification dispatcher and delivery-hint senders
        self.notification_service = NotificationService(self.storage)
        self.hint_queue = QueueSender()
        self.notification_service.register_sender("desktop", self.hint_queue)
        self.notification_service.register_sender("sound", self.hint_queue)

        if Config.DESKTOP_WEBHOOK_URL:
            self.webhook_sender = WebhookSender(Config.DESKTOP_WEBHOOK_URL)
            self.notification_service.register_sender("desktop", self.webhook_sender)
        else:
            self.webhook_sender = None
            logger.info("Desktop webhook disabled (no DESKTOP_WEBHOOK_URL)")

        # Business services
        self.users_service = UsersService(self.storage)
        self.auth_service = AuthService(self.storage, self.users_service)
        self.article_service = ArticleService(self.storage, self.notification_service)
        self.mention_service = MentionService(self.users_service)
        self.chat_service = ChatService(
            self.storage, self.users_service, self.mention_service, self.notification_service
        )
        self.todo_service = TodoService(self.storage, self.users_service, self.notification_service)
        self.preferences_service = PreferencesService(self.storage)
        self.backup_service = BackupService(self.storage)

        # Poller (started in initialize(), stopped in close())
        self.poller = NotificationPoller(
            auth=self.auth_service,
            notifications=self.notification_service,
            poll_interval=Config.NOTIFICATION_POLL_INTERVAL,
            enabled=Config.NOTIFICATION_POLL_ENABLED if poll_enabled is None else poll_enabled,
        )

        self._initialized = False
        logger.info(f"EngineService created ({type(self.storage).__name__})")

    async def initialize(self):
        """Initialize storage, bootstrap the first admin, start the poller"""
        if self._initialized:
            logger.info("EngineService already initialized")
            return

        logger.info("Initializing EngineService...")

        await self.storage.init()

        if Config.ADMIN_PASSWORD:
            admin = await self.users_service.bootstrap_admin(
                Config.ADMIN_USERNAME, Config.ADMIN_EMAIL, Config.ADMIN_PASSWORD
            )
            if admin:
                logger.info(f"Bootstrapped admin account @{admin.username}")

        await self.poller.start()

        self._initialized = True
        logger.info("EngineService initialized successfully")

    async def close(self):
        """Close all connections"""
        logger.info("Closing EngineService...")

        await self.poller.stop()
        await self.notification_service.close()
        await self.storage.close()

        self._initialized = False
        logger.info("EngineService closed")

    @property
    def is_initialized(self) -> bool:
        """Check if service is initialized"""
        return self._initialized


def get_engine_service() -> EngineService:
    """Get or create engine service singleton"""
    global _engine_service
    if _engine_service is None:
        _engine_service = EngineService()
    return _engine_service


async def init_engine_service() -> EngineService:
    """Initialize and return engine service"""
    service = get_engine_service()
    await service.initialize()
    return service
