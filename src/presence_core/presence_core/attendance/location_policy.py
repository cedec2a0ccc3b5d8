from __future__ import annotations

import logging
from typing import Optional

from ..common.geo import haversine_meters
from ..core.enums import CheckInType, WorkMode
from ..core.exceptions import AuthorizationError, OutsideGeofenceError, ValidationError
from ..employees.model import Employee, Geofence
from ..employees.repository import DirectoryStore
from .model import Location

logger = logging.getLogger(__name__)

TRAVEL_MODES = {WorkMode.FIELD_SALES, WorkMode.REMOTE}


class LocationPolicy:
    """Where an employee may check in from.

    OFFICE check-ins must fall inside the branch geofence (or the default one);
    TRAVEL is reserved for field and remote staff; KIOSK needs no location.
    """

    def __init__(self, directory: DirectoryStore, default_geofence: Optional[Geofence] = None):
        self._directory = directory
        self._default = default_geofence

    def check(self, employee: Employee, check_in_type: CheckInType, location: Optional[Location]) -> None:
        if check_in_type == CheckInType.KIOSK:
            return

        if location is None:
            raise ValidationError("Location is required")

        if check_in_type == CheckInType.TRAVEL:
            if employee.work_mode not in TRAVEL_MODES:
                raise AuthorizationError("Not authorized for on-duty check-in")
            return

        fence = self._geofence_for(employee)
        if fence is None:
            return
        distance = haversine_meters(location.latitude, location.longitude, fence.latitude, fence.longitude)
        if distance > fence.radius_meters:
            logger.info(
                "Employee %s is %.0fm from the office (allowed %.0fm)",
                employee.employee_id,
                distance,
                fence.radius_meters,
            )
            raise OutsideGeofenceError(distance, fence.radius_meters)

    def _geofence_for(self, employee: Employee) -> Optional[Geofence]:
        if employee.branch_id:
            fence = self._directory.get_branch_geofence(employee.branch_id)
            if fence:
                return fence
        return self._default
