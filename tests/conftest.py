from __future__ import annotations

from datetime import datetime, time
from itertools import count

import pytest

from src.presence_core.presence_core.attendance.model import ShiftWindow
from src.presence_core.presence_core.attendance.service import SessionManager
from src.presence_core.presence_core.core.enums import WorkMode
from src.presence_core.presence_core.employees.model import Employee
from src.presence_core.presence_core.identity.service import IdentityBindingService

from tests.fakes import InMemoryDirectory, InMemoryIdentityIndex, InMemorySessions

FACE_A = b"face-of-SRM001"
FACE_B = b"face-of-SRM002"


@pytest.fixture
def fixed_now() -> datetime:
    return datetime(2026, 2, 2, 9, 20, 0)


@pytest.fixture
def directory() -> InMemoryDirectory:
    return InMemoryDirectory(
        [
            Employee(employee_id="SRM001", full_name="Asha"),
            Employee(employee_id="SRM002", full_name="Bala"),
            Employee(employee_id="SRM003", full_name="Chitra", work_mode=WorkMode.FIELD_SALES),
            Employee(employee_id="SRM004", full_name="Dev"),
        ]
    )


@pytest.fixture
def index() -> InMemoryIdentityIndex:
    return InMemoryIdentityIndex(page_size=2, max_batch_delete=2)


@pytest.fixture
def sessions() -> InMemorySessions:
    return InMemorySessions()


@pytest.fixture
def identity(index, directory) -> IdentityBindingService:
    return IdentityBindingService(index, directory)


@pytest.fixture
def enrolled(identity):
    identity.register("SRM001", FACE_A)
    identity.register("SRM002", FACE_B)
    return identity


@pytest.fixture
def manager(sessions, directory, enrolled, fixed_now) -> SessionManager:
    ids = count(1)
    return SessionManager(
        sessions,
        directory,
        enrolled,
        shift=ShiftWindow(start_time=time(9, 0), end_time=time(18, 0)),
        grace_minutes=5,
        clock=lambda: fixed_now,
        id_factory=lambda: f"s-{next(ids)}",
    )
