"""
Notification Poller

Background asyncio task that re-fetches the notifications of the user in
the persisted session every poll_interval seconds.
"""
import asyncio
import logging
from typing import Awaitable, Callable, List, Optional

from ..models.notification import Notification
from ..models.user import User
from .auth_service import AuthService
from .notification_service import NotificationService

logger = logging.getLogger("mwmgr.services.poller")

SnapshotCallback = Callable[[User, List[Notification]], Awaitable[None]]


class NotificationPoller:
    """
    Fixed-interval notification poller.

    Each poll validates the persisted session and publishes the unread
    notifications of its user to the callback. A failed poll is logged
    and the loop carries on.
    """

    def __init__(
        self,
        auth: AuthService,
        notifications: NotificationService,
        callback: Optional[SnapshotCallback] = None,
        poll_interval: int = 5,
        enabled: bool = True,
    ):
        self.auth = auth
        self.notifications = notifications
        self.callback = callback
        self.poll_interval = poll_interval
        self.enabled = enabled
        self.last_snapshot: List[Notification] = []
        self._task: Optional[asyncio.Task] = None
        self._running = False

    async def start(self):
        """Start the poller background task"""
        if not self.enabled:
            logger.info("Notification poller is disabled (NOTIFICATION_POLL_ENABLED=false)")
            return

        if self._running:
            logger.warning("Notification poller is already running")
            return

        self._running = True
        self._task = asyncio.create_task(self._poll_loop())
        logger.info(f"Notification poller started (poll_interval={self.poll_interval}s)")

    async def stop(self):
        """Stop the poller background task"""
        self._running = False
        if self._task and not self._task.done():
            self._task.cancel()
            try:
                await self._task
            except asyncio.CancelledError:
                pass
        self._task = None
        logger.info("Notification poller stopped")

    @property
    def is_running(self) -> bool:
        return self._running

    async def _poll_loop(self):
        """Main polling loop"""
        while self._running:
            try:
                await self.poll_once()
            except Exception as e:
                logger.error(f"Notification poll error: {e}")

            try:
                await asyncio.sleep(self.poll_interval)
            except asyncio.CancelledError:
                break

    async def poll_once(self) -> List[Notification]:
        """Fetch the unread snapshot for the session user"""
        result = await self.auth.check_session()
        if not result.success:
            self.last_snapshot = []
            return []

        user: User = result.data
        unread = await self.notifications.unread_notifications(user.id)
        self.last_snapshot = unread

        if self.callback:
            await self.callback(user, unread)
        return unread
