from __future__ import annotations

from enum import Enum


class EmployeeStatus(str, Enum):
    ACTIVE = "active"
    INACTIVE = "inactive"


class WorkMode(str, Enum):
    """How an employee is allowed to check in."""

    OFFICE = "OFFICE"
    FIELD_SALES = "FIELD_SALES"
    REMOTE = "REMOTE"


class CheckInType(str, Enum):
    OFFICE = "OFFICE"
    TRAVEL = "TRAVEL"
    KIOSK = "KIOSK"


class AttendanceStatus(str, Enum):
    """Normalized attendance classification stored with each session."""

    ON_TIME = "ON_TIME"
    LATE = "LATE"
    EARLY_LEAVE = "EARLY_LEAVE"
    UNKNOWN = "UNKNOWN"


class VerificationMethod(str, Enum):
    FACE = "FACE"


class ReconciliationMode(str, Enum):
    """AUDIT only reports drift; ENFORCE also deletes."""

    AUDIT = "audit"
    ENFORCE = "enforce"
