"""
Pytest configuration and fixtures for the service and API tests.
"""
import os
import tempfile
from datetime import datetime, timedelta

import pytest

# Set test environment variables before importing config
os.environ["STORAGE_BACKEND"] = "local"
os.environ["LOCAL_STORAGE_DIR"] = tempfile.mkdtemp(prefix="mwmgr-test-")
os.environ["NOTIFICATION_POLL_ENABLED"] = "false"
os.environ["PASSWORD_SALT_ROUNDS"] = "4"
os.environ["JWT_SECRET"] = "test-secret-key-for-testing-only"
os.environ["ADMIN_PASSWORD"] = ""
os.environ["DESKTOP_WEBHOOK_URL"] = ""

from mwmgr.models.user import UserRole  # noqa: E402
from mwmgr.services.engine_service import EngineService  # noqa: E402
from mwmgr.storage.local_storage import LocalStorage  # noqa: E402

PASSWORD = "Secret123"


class FakeClock:
    """Callable clock that only moves when told to"""

    def __init__(self, now: datetime):
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> datetime:
        self.now += timedelta(**kwargs)
        return self.now


@pytest.fixture
def clock():
    return FakeClock(datetime(2024, 3, 4, 10, 0, 0))


@pytest.fixture
async def storage(tmp_path):
    """Fresh local storage in a temporary directory"""
    store = LocalStorage(tmp_path / "data")
    await store.init()
    yield store
    await store.close()


@pytest.fixture
async def engine(storage):
    """Engine wired around the temporary storage, poller off"""
    service = EngineService(storage=storage, poll_enabled=False)
    await service.initialize()
    yield service
    await service.close()


@pytest.fixture
async def admin(engine):
    return await engine.users_service.bootstrap_admin("admin", "admin@example.com", PASSWORD)


async def _create(engine, admin, username: str, role: UserRole, first_name: str = ""):
    result = await engine.users_service.create_user(
        admin,
        username=username,
        email=f"{username}@example.com",
        first_name=first_name or username.capitalize(),
        last_name="Test",
        password=PASSWORD,
        role=role,
    )
    assert result.success, result.error
    return result.data


@pytest.fixture
async def writer(engine, admin):
    return await _create(engine, admin, "writer", UserRole.WRITER)


@pytest.fixture
async def reviewer(engine, admin):
    return await _create(engine, admin, "reviewer", UserRole.REVIEWER)


@pytest.fixture
async def alice(engine, admin):
    return await _create(engine, admin, "alice", UserRole.WRITER)


@pytest.fixture
async def bob(engine, admin):
    return await _create(engine, admin, "bob", UserRole.WRITER)
