"""
Queue Sender

In-process delivery: hints are buffered per user until the client
drains them on its next poll.
"""
import logging
from collections import defaultdict, deque
from typing import Deque, Dict, List

from .base_sender import BaseSender, DeliveryHint, SendResult

logger = logging.getLogger("mwmgr.notifications.queue")

MAX_PENDING_HINTS = 50


class QueueSender(BaseSender):
    """Buffer hints in memory, oldest dropped past MAX_PENDING_HINTS"""

    def __init__(self, max_pending: int = MAX_PENDING_HINTS):
        self._queues: Dict[str, Deque[DeliveryHint]] = defaultdict(
            lambda: deque(maxlen=max_pending)
        )

    async def send(self, hint: DeliveryHint) -> SendResult:
        self._queues[hint.user_id].append(hint)
        logger.debug(f"Queued {hint.channel} hint for user {hint.user_id}")
        return SendResult(success=True)

    def pending(self, user_id: str) -> int:
        return len(self._queues.get(str(user_id), ()))

    def drain(self, user_id: str) -> List[DeliveryHint]:
        """Pop every pending hint for a user"""
        queue = self._queues.pop(str(user_id), None)
        return list(queue) if queue else []

    async def close(self):
        self._queues.clear()
