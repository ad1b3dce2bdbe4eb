"""
MW_MGR Services

Business logic services for the newsroom manager.
"""
from .engine_service import EngineService
from .users_service import UsersService
from .auth_service import AuthService
from .article_service import ArticleService
from .chat_service import ChatService
from .mention_service import MentionService
from .todo_service import TodoService
from .notification_service import NotificationService
from .poller_service import NotificationPoller
from .preferences_service import PreferencesService
from .backup_service import BackupService

__all__ = [
    'EngineService',
    'UsersService',
    'AuthService',
    'ArticleService',
    'ChatService',
    'MentionService',
    'TodoService',
    'NotificationService',
    'NotificationPoller',
    'PreferencesService',
    'BackupService',
]
