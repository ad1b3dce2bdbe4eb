"""
MW_MGR Data Models

Domain models for the newsroom manager.
"""
from .user import User, UserRole
from .article import Article, ArticleStatus, ReviewComment, TRANSITIONS
from .chat import ChatMessage
from .todo import TodoItem, TodoPriority
from .notification import (
    Notification,
    NotificationType,
    NotificationPriority,
    NotificationSettings,
)
from .session import Session
from .result import ServiceResult, ErrorKind

__all__ = [
    'User',
    'UserRole',
    'Article',
    'ArticleStatus',
    'ReviewComment',
    'TRANSITIONS',
    'ChatMessage',
    'TodoItem',
    'TodoPriority',
    'Notification',
    'NotificationType',
    'NotificationPriority',
    'NotificationSettings',
    'Session',
    'ServiceResult',
    'ErrorKind',
]
