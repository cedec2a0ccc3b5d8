from __future__ import annotations

import pytest

from src.presence_core.presence_core.attendance.location_policy import LocationPolicy
from src.presence_core.presence_core.attendance.model import Location
from src.presence_core.presence_core.core.enums import CheckInType, WorkMode
from src.presence_core.presence_core.core.exceptions import (
    AuthorizationError,
    OutsideGeofenceError,
    ValidationError,
)
from src.presence_core.presence_core.employees.model import Employee, Geofence

from tests.fakes import InMemoryDirectory

OFFICE = Geofence(latitude=12.9716, longitude=77.5946, radius_meters=200)
BRANCH = Geofence(latitude=13.0827, longitude=80.2707, radius_meters=150)


def _policy(default=OFFICE):
    directory = InMemoryDirectory(geofences={"chennai": BRANCH})
    return LocationPolicy(directory, default_geofence=default)


def test_office_checkin_inside_default_geofence_passes():
    employee = Employee(employee_id="E1", full_name="A")
    _policy().check(employee, CheckInType.OFFICE, Location(12.9717, 77.5947))


def test_office_checkin_outside_geofence_is_rejected():
    employee = Employee(employee_id="E1", full_name="A")
    with pytest.raises(OutsideGeofenceError) as exc:
        _policy().check(employee, CheckInType.OFFICE, Location(12.99, 77.5946))
    assert exc.value.distance_m > 200
    assert exc.value.allowed_radius_m == 200


def test_branch_geofence_overrides_default():
    employee = Employee(employee_id="E1", full_name="A", branch_id="chennai")
    _policy().check(employee, CheckInType.OFFICE, Location(13.0828, 80.2708))
    with pytest.raises(OutsideGeofenceError):
        _policy().check(employee, CheckInType.OFFICE, Location(12.9716, 77.5946))


def test_office_checkin_without_any_geofence_passes():
    employee = Employee(employee_id="E1", full_name="A")
    _policy(default=None).check(employee, CheckInType.OFFICE, Location(0.0, 0.0))


def test_location_required_unless_kiosk():
    employee = Employee(employee_id="E1", full_name="A")
    with pytest.raises(ValidationError):
        _policy().check(employee, CheckInType.OFFICE, None)
    _policy().check(employee, CheckInType.KIOSK, None)


def test_travel_checkin_requires_field_or_remote_work_mode():
    office_worker = Employee(employee_id="E1", full_name="A")
    field_worker = Employee(employee_id="E2", full_name="B", work_mode=WorkMode.FIELD_SALES)
    far_away = Location(28.6139, 77.2090)

    with pytest.raises(AuthorizationError):
        _policy().check(office_worker, CheckInType.TRAVEL, far_away)
    _policy().check(field_worker, CheckInType.TRAVEL, far_away)
