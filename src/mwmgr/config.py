"""
MW_MGR Configuration

Configuration class for the MatteiWeekly newsroom manager.
"""
import os
from pathlib import Path
from urllib.parse import quote_plus
from dotenv import load_dotenv

# Load .env file from project root
_env_path = Path(__file__).parent.parent.parent / ".env"
load_dotenv(_env_path)


class Config:
    """Configuration class for the MW_MGR API"""

    APP_NAME = "MW_MGR"
    VERSION = "1.2.0"
    BRAND_NAME = "MatteiWeekly"

    # Base paths
    BASE_DIR = Path(__file__).parent.parent.parent
    DATA_DIR = BASE_DIR / "data"

    # Persistence backend: "local" (JSON files) or "postgres"
    STORAGE_BACKEND = os.getenv("STORAGE_BACKEND", "local").lower()
    LOCAL_STORAGE_DIR = Path(os.getenv("LOCAL_STORAGE_DIR", str(DATA_DIR)))

    # Namespaced storage keys: mw_mgr_<collection>_v1
    STORAGE_KEY_PREFIX = os.getenv("STORAGE_KEY_PREFIX", "mw_mgr_")
    STORAGE_KEY_VERSION = os.getenv("STORAGE_KEY_VERSION", "v1")

    # Database settings
    DB_HOST = os.getenv("DB_HOST", "localhost")
    DB_PORT = os.getenv("DB_PORT", "5432")
    DB_NAME = os.getenv("DB_NAME", "mw_mgr")
    DB_USER = os.getenv("DB_USER", "postgres")
    DB_PASSWORD = os.getenv("DB_PASSWORD", "")

    # API settings
    API_HOST = os.getenv("API_HOST", "127.0.0.1")
    API_PORT = int(os.getenv("API_PORT", "8100"))
    DEBUG = os.getenv("DEBUG", "false").lower() == "true"

    # JWT / session settings
    JWT_SECRET = os.getenv("JWT_SECRET", "mw-mgr-secret-key-change-in-production")
    JWT_ALGORITHM = "HS256"
    SESSION_TIMEOUT_HOURS = int(os.getenv("SESSION_TIMEOUT_HOURS", "24"))

    # Password policy and hashing
    MIN_PASSWORD_LENGTH = int(os.getenv("MIN_PASSWORD_LENGTH", "6"))
    PASSWORD_SALT_ROUNDS = int(os.getenv("PASSWORD_SALT_ROUNDS", "12"))

    # Notifications
    NOTIFICATIONS_MAX_STORED = int(os.getenv("NOTIFICATIONS_MAX_STORED", "100"))
    NOTIFICATION_POLL_INTERVAL = int(os.getenv("NOTIFICATION_POLL_INTERVAL", "5"))
    NOTIFICATION_POLL_ENABLED = os.getenv("NOTIFICATION_POLL_ENABLED", "true").lower() == "true"
    NOTIFICATION_SOUND = os.getenv("NOTIFICATION_SOUND", "/sounds/notification.mp3")
    DESKTOP_WEBHOOK_URL = os.getenv("DESKTOP_WEBHOOK_URL", "")

    # First admin, created on startup when the user store is empty
    ADMIN_USERNAME = os.getenv("ADMIN_USERNAME", "admin")
    ADMIN_EMAIL = os.getenv("ADMIN_EMAIL", "admin@matteiweekly.local")
    ADMIN_PASSWORD = os.getenv("ADMIN_PASSWORD", "")

    # Feature flags
    ENABLE_REGISTRATION = os.getenv("ENABLE_REGISTRATION", "false").lower() == "true"

    # Article categories (fixed list)
    CATEGORIES = [
        "Attualità",
        "Sport",
        "Cultura",
        "Tecnologia",
        "Interviste",
        "Progetti",
    ]

    @staticmethod
    def get_postgres_dsn() -> str:
        """Get PostgreSQL DSN with password handling"""
        dsn = os.getenv("POSTGRES_DSN")
        if dsn:
            return dsn
        if Config.DB_PASSWORD:
            password = quote_plus(Config.DB_PASSWORD)
            return f"postgresql://{Config.DB_USER}:{password}@{Config.DB_HOST}:{Config.DB_PORT}/{Config.DB_NAME}"
        return f"postgresql://{Config.DB_USER}@{Config.DB_HOST}:{Config.DB_PORT}/{Config.DB_NAME}"

    @staticmethod
    def storage_key(collection: str) -> str:
        """Namespaced key for a collection, e.g. mw_mgr_articles_v1"""
        return f"{Config.STORAGE_KEY_PREFIX}{collection}_{Config.STORAGE_KEY_VERSION}"
