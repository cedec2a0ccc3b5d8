from __future__ import annotations

import logging
from typing import List, Optional

from ..common.validators import require_non_empty, require_sample
from ..core.exceptions import AlreadyRegisteredError, NotFoundError, ValidationError
from ..employees.repository import DirectoryStore
from .index import IdentityIndex
from .model import IdentityBindingRecord, VerificationResult
from .pagination import bindings_for

logger = logging.getLogger(__name__)


class IdentityBindingService:
    """Registers, verifies and resets the biometric binding of an employee.

    Only this service mutates bindings in the identity index (reconciliation
    aside). Verification is always 1:1 against the claimed employee.
    """

    def __init__(self, index: IdentityIndex, directory: DirectoryStore):
        self._index = index
        self._directory = directory

    def bindings_for(self, employee_id: str) -> List[IdentityBindingRecord]:
        """Every binding tagged with `employee_id`, walking all index pages."""
        return list(bindings_for(self._index, employee_id))

    def register(self, employee_id: str, sample: bytes) -> str:
        employee_id = require_non_empty(employee_id, "employee_id")
        sample = require_sample(sample)

        employee = self._directory.get_employee(employee_id)
        if not employee:
            raise NotFoundError(f"Employee {employee_id} not found")
        if not employee.is_active:
            raise ValidationError(f"Employee {employee_id} is not active")

        # The index is authoritative; the id stored on the employee may be stale.
        existing = next(bindings_for(self._index, employee_id), None)
        if existing:
            raise AlreadyRegisteredError(
                f"Employee {employee_id} already has binding {existing.binding_id}; reset it first"
            )
        if employee.identity_binding_id:
            logger.warning(
                "Employee %s points at binding %s which the index no longer holds; replacing it",
                employee_id,
                employee.identity_binding_id,
            )

        binding_id = self._index.enroll(sample, employee_id)
        self._directory.set_identity_binding(employee_id, binding_id)
        logger.info("Registered binding %s for employee %s", binding_id, employee_id)
        return binding_id

    def verify(self, sample: bytes, expected_employee_id: str) -> VerificationResult:
        """1:1 check of `sample` against the bindings owned by `expected_employee_id`.

        A well-formed non-matching sample yields matched=False. NotFoundError
        is raised only when the employee has no binding at all.
        """
        expected_employee_id = require_non_empty(expected_employee_id, "employee_id")
        sample = require_sample(sample)

        mirrored = self._mirrored_binding_id(expected_employee_id)
        if mirrored:
            try:
                return self._index.verify_1to1(sample, mirrored)
            except NotFoundError:
                logger.warning(
                    "Binding %s mirrored on employee %s is missing from the index; scanning",
                    mirrored,
                    expected_employee_id,
                )

        best: Optional[VerificationResult] = None
        for record in bindings_for(self._index, expected_employee_id):
            result = self._index.verify_1to1(sample, record.binding_id)
            if result.matched:
                return result
            if best is None or result.confidence > best.confidence:
                best = result
        if best is None:
            raise NotFoundError(f"Employee {expected_employee_id} has no identity binding")
        return best

    def verify_standalone(self, employee_id: str, sample: bytes) -> VerificationResult:
        """Pre-check used by kiosks and apps; never touches attendance state."""
        result = self.verify(sample, employee_id)
        logger.info(
            "Standalone verification for %s: matched=%s confidence=%.1f",
            employee_id,
            result.matched,
            result.confidence,
        )
        return result

    def reset(self, employee_id: str) -> int:
        """Delete every binding of the employee, duplicates included. Idempotent."""
        employee_id = require_non_empty(employee_id, "employee_id")

        binding_ids = [r.binding_id for r in bindings_for(self._index, employee_id)]
        removed = 0
        size = max(1, int(self._index.max_batch_delete))
        for start in range(0, len(binding_ids), size):
            chunk = binding_ids[start : start + size]
            deleted = self._index.batch_delete(chunk)
            removed += len(deleted)

        if len(binding_ids) > 1:
            logger.warning("Employee %s had %d duplicate bindings", employee_id, len(binding_ids))
        if removed:
            logger.info("Reset removed %d binding(s) for employee %s", removed, employee_id)

        if self._directory.get_employee(employee_id):
            self._directory.clear_identity_binding(employee_id)
        return removed

    def _mirrored_binding_id(self, employee_id: str) -> Optional[str]:
        employee = self._directory.get_employee(employee_id)
        return employee.identity_binding_id if employee else None
