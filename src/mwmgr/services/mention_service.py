"""
Mention Service

Parses @username mentions from chat text and resolves them to users.
"""
import logging
import re
from dataclasses import dataclass
from typing import List, Tuple

from ..models.user import User
from .users_service import UsersService

logger = logging.getLogger("mwmgr.services.mention")


@dataclass
class Mention:
    """A resolved @username token"""
    user: User
    username: str       # As written in the message
    position: int


class MentionService:
    """Service for parsing and resolving mentions"""

    MENTION_PATTERN = re.compile(r'@(\w+)', re.ASCII)

    def __init__(self, users: UsersService):
        self.users = users

    def parse_mentions(self, content: str) -> List[Tuple[str, int]]:
        """
        Parse mentions from message content.

        Returns list of (username, position), one per token, in order.
        """
        return [(m.group(1), m.start()) for m in self.MENTION_PATTERN.finditer(content)]

    async def resolve_mentions(self, content: str) -> List[Mention]:
        """
        Parse and resolve mentions to users (case-insensitive).

        Unknown usernames are skipped.
        """
        mentions = []
        for username, position in self.parse_mentions(content):
            user = await self.users.get_user_by_username(username)
            if user:
                mentions.append(Mention(user=user, username=username, position=position))
            else:
                logger.debug(f"Could not resolve mention @{username}")
        return mentions

    def strip_mentions(self, content: str) -> str:
        """Remove all mentions from content, leaving just the text"""
        return self.MENTION_PATTERN.sub('', content).strip()
