"""
MW_MGR API Routes

FastAPI route handlers for the newsroom manager.
"""
from .health import router as health_router
from .auth import router as auth_router
from .users import router as users_router
from .articles import router as articles_router
from .chat import router as chat_router
from .todos import router as todos_router
from .notifications import router as notifications_router
from .preferences import router as preferences_router
from .backup import router as backup_router

__all__ = [
    'health_router',
    'auth_router',
    'users_router',
    'articles_router',
    'chat_router',
    'todos_router',
    'notifications_router',
    'preferences_router',
    'backup_router',
]
