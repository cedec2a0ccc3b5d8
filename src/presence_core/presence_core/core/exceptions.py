from __future__ import annotations

from typing import Optional


class DomainError(Exception):
    """Base exception for business rule violations."""


class ValidationError(DomainError):
    """Raised when input data is invalid or violates domain rules."""


class AuthorizationError(DomainError):
    """Raised when an employee is not allowed to perform an action."""


class NotFoundError(DomainError):
    """Unknown employee, or an employee without any identity binding."""


class DuplicateSessionError(DomainError):
    """The conditional create lost: an open session already exists for today.

    Callers should present this as "already checked in", not as a fault.
    """

    def __init__(self, employee_id: str, day_key: str):
        super().__init__(f"Employee {employee_id} is already checked in for {day_key}")
        self.employee_id = employee_id
        self.day_key = day_key


class NoOpenSessionError(DomainError):
    """Checkout requested while nothing is open."""


class VerificationFailedError(DomainError):
    """The presented sample did not match the claimed employee."""

    def __init__(self, employee_id: str, confidence: float = 0.0):
        super().__init__(f"Biometric sample did not match employee {employee_id}")
        self.employee_id = employee_id
        self.confidence = confidence


class AlreadyRegisteredError(DomainError):
    """The employee already owns an identity binding; reset first."""


class OutsideGeofenceError(DomainError):
    def __init__(self, distance_m: float, allowed_radius_m: float):
        super().__init__(
            f"Too far from the office: {distance_m:.0f}m (allowed {allowed_radius_m:.0f}m)"
        )
        self.distance_m = distance_m
        self.allowed_radius_m = allowed_radius_m


class ExternalServiceError(DomainError):
    """Identity index or a store is unreachable or throttling."""

    def __init__(self, message: str, *, retryable: bool = True, status_code: Optional[int] = None):
        super().__init__(message)
        self.retryable = retryable
        self.status_code = status_code


class ReconciliationConflict(DomainError):
    """State the reconciliation engine cannot resolve without a human."""

    def __init__(self, message: str, *, employee_id: Optional[str] = None, day_key: Optional[str] = None):
        super().__init__(message)
        self.employee_id = employee_id
        self.day_key = day_key
