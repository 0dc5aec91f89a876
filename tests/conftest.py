"""
conftest.py: shared fixtures for the work log test suite.

MongoDB is replaced by mongomock-motor, an in-memory stand-in for Motor, so no
database server is needed. Each test gets a fresh database.

Import-path bootstrapping:
    The service modules live directly under ``app/`` and import each other as
    top-level modules (``from db import ...``), so ``app/`` is put on sys.path.
    Settings without defaults are provided through the environment before any
    app module is imported.
"""

import asyncio
import os
import sys
from datetime import datetime, timedelta

import pytest
from pytz import UTC

_APP_DIR = os.path.join(os.path.dirname(os.path.dirname(os.path.abspath(__file__))), "app")
if _APP_DIR not in sys.path:
    sys.path.insert(0, _APP_DIR)

os.environ.setdefault("MONGODB_URL", "mongodb://localhost:27017")
os.environ.setdefault("SECRET_KEY", "test-secret-key")


# ---------------------------------------------------------------------------
# Test doubles
# ---------------------------------------------------------------------------

class FakeClock:
    """Deterministic write clock; every reading is one second after the previous one."""

    def __init__(self, start: datetime):
        self.now = start

    def __call__(self) -> datetime:
        current = self.now
        self.now = self.now + timedelta(seconds=1)
        return current

    def set(self, value: datetime):
        self.now = value


# ---------------------------------------------------------------------------
# Sample data
# ---------------------------------------------------------------------------

ADMIN = {"email": "boss@acme.test", "company_id": "ACME", "first_name": "Bea", "last_name": "Boss"}
EMPLOYEE = {"email": "ada@acme.test", "company_id": "ACME", "employee_id": "E-001"}
OTHER_COMPANY_ADMIN = {"email": "hank@globex.test", "company_id": "GLOBEX"}


@pytest.fixture
def admin_user():
    return dict(ADMIN)


@pytest.fixture
def employee_user():
    return dict(EMPLOYEE)


@pytest.fixture
def other_company_admin():
    return dict(OTHER_COMPANY_ADMIN)


@pytest.fixture
def employee_documents():
    """
    ACME roster in name order: Ada, Grace, Katherine (Zed is inactive).
    GLOBEX has a single employee.
    """
    from models.employees import Employee

    employees = [
        Employee(company_id="ACME", employee_id="E-002", first_name="Grace", last_name="Hopper",
                 email="grace@acme.test", department="Engineering", thread_color="#10B981"),
        Employee(company_id="ACME", employee_id="E-001", first_name="Ada", last_name="Lovelace",
                 email="ada@acme.test", department="Engineering", thread_color="#3B82F6"),
        Employee(company_id="ACME", employee_id="E-003", first_name="Katherine", last_name="Johnson",
                 email="katherine@acme.test", department="Research", thread_color="#F59E0B"),
        Employee(company_id="ACME", employee_id="E-004", first_name="Zed", last_name="Gone",
                 employment_status="inactive"),
        Employee(company_id="GLOBEX", employee_id="G-001", first_name="Hank", last_name="Scorpio",
                 department="Management"),
    ]
    return [employee.model_dump() for employee in employees]


@pytest.fixture
def today():
    return datetime(2026, 10, 19, tzinfo=UTC).date()


# ---------------------------------------------------------------------------
# Core component fixtures
# ---------------------------------------------------------------------------

@pytest.fixture
def mongo_db():
    from mongomock_motor import AsyncMongoMockClient
    return AsyncMongoMockClient()["strings_test"]


@pytest.fixture
def clock():
    return FakeClock(datetime(2026, 10, 19, 9, 0, tzinfo=UTC))


@pytest.fixture
def notifier():
    from utils.notifier import OrganizationNotifier
    return OrganizationNotifier()


@pytest.fixture
def make_subscriber():
    """Factory for in-memory sessions that record every event they are sent."""
    from utils.notifier import Subscriber

    class RecordingSubscriber(Subscriber):
        def __init__(self, name, fail=False, on_send=None, stall=False):
            super().__init__(session_id=name)
            self.events = []
            self.fail = fail
            self.on_send = on_send
            self.stall = stall

        async def send(self, event):
            if self.on_send is not None:
                self.on_send()
            if self.stall:
                # a client whose socket never drains
                await asyncio.sleep(3600)
            if self.fail:
                raise ConnectionError(f"{self.session_id} is gone")
            self.events.append(event)

    return RecordingSubscriber


@pytest.fixture
async def seeded_db(mongo_db, employee_documents):
    await mongo_db.employees.insert_many(employee_documents)
    return mongo_db


@pytest.fixture
async def store(seeded_db, notifier, clock):
    from utils.employee_directory import EmployeeDirectory
    from utils.worklog_store import WorkLogStore

    work_log_store = WorkLogStore(
        seeded_db.work_logs,
        directory=EmployeeDirectory(seeded_db.employees),
        notifier=notifier,
        clock=clock,
    )
    await work_log_store.ensure_indexes()
    return work_log_store
