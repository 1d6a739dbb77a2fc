"""
Pytest fixtures for the time tracker tests.
Uses a temporary SQLite database and provisions three accounts: an admin, a member who gets
assigned to projects, and an outsider who is never assigned. All managers share one fake clock
so durations are deterministic.
"""
from datetime import datetime, timedelta
from pathlib import Path

import pytest

from database_manager import DatabaseManager

ADMIN_ID = "11111111-aaaa-4000-8000-000000000001"
MEMBER_ID = "22222222-bbbb-4000-8000-000000000002"
OUTSIDER_ID = "33333333-cccc-4000-8000-000000000003"


class FakeClock:
    """Callable clock that only moves when told to."""

    def __init__(self, start: datetime) -> None:
        self.current = start

    def __call__(self) -> datetime:
        return self.current

    def advance(self, **kwargs) -> datetime:
        self.current += timedelta(**kwargs)
        return self.current


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock(datetime(2025, 8, 4, 9, 0, 0))


@pytest.fixture
def db_path(tmp_path: Path) -> Path:
    """A temporary SQLite database path (same path for all managers in a test)."""
    return tmp_path / "test_timetracker.db"


@pytest.fixture
def db_no_user(db_path: Path, clock: FakeClock) -> DatabaseManager:
    """Database manager with no current_user_id (init_db and provisioning)."""
    dm = DatabaseManager(db_path=db_path, clock=clock)
    dm.init_db()
    return dm


@pytest.fixture
def provisioned(db_no_user: DatabaseManager):
    """Admin via create_first_admin; member and outsider via provision_user."""
    admin = db_no_user.create_first_admin(ADMIN_ID, "ada@example.com", "Ada", "Admin")
    assert admin is not None
    db_no_user.provision_user(MEMBER_ID, "mel@example.com", "Mel", "Member")
    db_no_user.provision_user(OUTSIDER_ID, "otto@example.com")
    return db_no_user


@pytest.fixture
def make_db(db_path: Path, clock: FakeClock, provisioned):
    """Factory: manager scoped to the given user id."""

    def _make(user_id: str | None) -> DatabaseManager:
        return DatabaseManager(db_path=db_path, current_user_id=user_id, clock=clock)

    return _make


@pytest.fixture
def db_admin(make_db) -> DatabaseManager:
    return make_db(ADMIN_ID)


@pytest.fixture
def db_member(make_db) -> DatabaseManager:
    return make_db(MEMBER_ID)


@pytest.fixture
def db_outsider(make_db) -> DatabaseManager:
    return make_db(OUTSIDER_ID)


@pytest.fixture
def project(db_admin: DatabaseManager):
    """Active project P with the member assigned to it."""
    p = db_admin.create_project("Apollo", "Client work")
    db_admin.assign_user_to_project(p.id, MEMBER_ID)
    return p
