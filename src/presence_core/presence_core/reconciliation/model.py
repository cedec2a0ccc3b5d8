from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, Optional, Sequence, Tuple

from ..core.enums import ReconciliationMode


@dataclass(frozen=True)
class BatchOutcome:
    batch_no: int
    binding_ids: Tuple[str, ...]
    deleted: Tuple[str, ...] = ()
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.error is None


@dataclass(frozen=True)
class GhostReport:
    mode: ReconciliationMode
    scanned_bindings: int
    active_employees: int
    ghosts: Dict[str, Tuple[str, ...]] = field(default_factory=dict)
    batches: Sequence[BatchOutcome] = ()

    @property
    def ghost_count(self) -> int:
        return sum(len(ids) for ids in self.ghosts.values())

    @property
    def deleted_count(self) -> int:
        return sum(len(b.deleted) for b in self.batches)

    @property
    def failed_batches(self) -> Tuple[BatchOutcome, ...]:
        return tuple(b for b in self.batches if not b.ok)

    def as_dict(self) -> Dict[str, Any]:
        return {
            "mode": self.mode.value,
            "scanned_bindings": self.scanned_bindings,
            "active_employees": self.active_employees,
            "ghost_count": self.ghost_count,
            "ghosts": {k: list(v) for k, v in self.ghosts.items()},
            "deleted_count": self.deleted_count,
            "batches": [
                {"batch_no": b.batch_no, "size": len(b.binding_ids), "deleted": len(b.deleted), "error": b.error}
                for b in self.batches
            ],
        }


@dataclass(frozen=True)
class SessionResolution:
    """Outcome for one employee holding several open sessions on one day."""

    employee_id: str
    day_key: str
    kept: Optional[str]
    stale: Tuple[str, ...] = ()
    removed: Tuple[str, ...] = ()
    conflict: Optional[str] = None


@dataclass(frozen=True)
class DuplicateSessionReport:
    mode: ReconciliationMode
    day_key: str
    resolutions: Sequence[SessionResolution] = ()

    @property
    def duplicate_count(self) -> int:
        return sum(len(r.stale) for r in self.resolutions)

    @property
    def deleted_count(self) -> int:
        return sum(len(r.removed) for r in self.resolutions)

    @property
    def conflicts(self) -> Tuple[SessionResolution, ...]:
        return tuple(r for r in self.resolutions if r.conflict)

    def as_dict(self) -> Dict[str, Any]:
        return {
            "mode": self.mode.value,
            "day_key": self.day_key,
            "duplicate_count": self.duplicate_count,
            "deleted_count": self.deleted_count,
            "resolutions": [
                {
                    "employee_id": r.employee_id,
                    "kept": r.kept,
                    "stale": list(r.stale),
                    "removed": list(r.removed),
                    "conflict": r.conflict,
                }
                for r in self.resolutions
            ],
        }
