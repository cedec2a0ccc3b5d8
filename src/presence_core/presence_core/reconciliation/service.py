from __future__ import annotations

import logging
from collections import defaultdict
from typing import Dict, List, Optional

from ..attendance.repository import SessionStore
from ..core.enums import ReconciliationMode
from ..core.exceptions import ReconciliationConflict
from ..employees.repository import DirectoryStore
from ..identity.index import IdentityIndex
from ..identity.pagination import IndexScan
from .batching import BatchDeleter
from .model import DuplicateSessionReport, GhostReport, SessionResolution

logger = logging.getLogger(__name__)


class ReconciliationEngine:
    """Detects and repairs drift between the directory, the identity index and
    the session store.

    Both routines are idempotent and may run as often as needed. The engine
    only ever deletes; it never creates records.
    """

    def __init__(
        self,
        directory: DirectoryStore,
        index: IdentityIndex,
        sessions: SessionStore,
        *,
        deleter: Optional[BatchDeleter] = None,
    ):
        self._directory = directory
        self._index = index
        self._sessions = sessions
        self._deleter = deleter or BatchDeleter(index)

    def find_and_purge_ghost_bindings(self, mode: ReconciliationMode = ReconciliationMode.AUDIT) -> GhostReport:
        # Index first, directory second: an employee created while we scan is
        # then already in the directory snapshot and cannot look like a ghost.
        by_external_id: Dict[str, List[str]] = defaultdict(list)
        scanned = 0
        for record in IndexScan(self._index):
            by_external_id[record.external_id].append(record.binding_id)
            scanned += 1

        active_ids = self._directory.list_active_employee_ids()
        ghosts = {
            external_id: tuple(ids)
            for external_id, ids in sorted(by_external_id.items())
            if external_id not in active_ids
        }

        logger.info(
            "Ghost scan: %d bindings, %d active employees, %d ghost bindings for %d ids",
            scanned,
            len(active_ids),
            sum(len(v) for v in ghosts.values()),
            len(ghosts),
        )
        for external_id, ids in ghosts.items():
            logger.warning("Ghost binding(s) for %r: %s", external_id, ", ".join(ids))

        if mode != ReconciliationMode.ENFORCE or not ghosts:
            return GhostReport(mode=mode, scanned_bindings=scanned, active_employees=len(active_ids), ghosts=ghosts)

        if not active_ids:
            raise ReconciliationConflict(
                f"Directory reports no active employees while the index holds {scanned} bindings; "
                "refusing to purge the whole index"
            )

        to_delete = [binding_id for ids in ghosts.values() for binding_id in ids]
        batches = self._deleter.delete_all(to_delete)
        report = GhostReport(
            mode=mode,
            scanned_bindings=scanned,
            active_employees=len(active_ids),
            ghosts=ghosts,
            batches=tuple(batches),
        )
        logger.info(
            "Ghost purge deleted %d/%d bindings (%d failed batches)",
            report.deleted_count,
            len(to_delete),
            len(report.failed_batches),
        )
        return report

    def find_and_resolve_duplicate_open_sessions(
        self, day_key: str, mode: ReconciliationMode = ReconciliationMode.AUDIT
    ) -> DuplicateSessionReport:
        """Keep the latest open session per employee for `day_key`, delete the rest.

        Keeping the latest check-in is inherited policy from the legacy cleanup
        scripts, not a verified business rule. Two open sessions with the same
        check-in time are left alone and reported as a conflict.
        """
        by_employee = defaultdict(list)
        for s in self._sessions.list_open_for_day(day_key):
            by_employee[s.employee_id].append(s)

        resolutions: List[SessionResolution] = []
        for employee_id in sorted(by_employee):
            open_sessions = sorted(by_employee[employee_id], key=lambda s: s.check_in_time)
            if len(open_sessions) <= 1:
                continue

            keep, stale = open_sessions[-1], open_sessions[:-1]
            stale_ids = tuple(s.session_id for s in stale)
            if stale[-1].check_in_time == keep.check_in_time:
                message = (
                    f"{len(open_sessions)} open sessions for {employee_id} on {day_key} "
                    f"share the latest check-in time {keep.check_in_time}"
                )
                logger.warning("Manual review needed: %s", message)
                resolutions.append(
                    SessionResolution(
                        employee_id=employee_id, day_key=day_key, kept=None, stale=stale_ids, conflict=message
                    )
                )
                continue

            removed: List[str] = []
            for s in stale:
                if mode != ReconciliationMode.ENFORCE:
                    logger.info(
                        "[audit] Would delete stale session %s of %s (checked in %s), keeping %s",
                        s.session_id, employee_id, s.check_in_time, keep.session_id,
                    )
                    continue
                if self._sessions.delete_if_open(s.session_id):
                    logger.info(
                        "Deleted stale session %s of %s (checked in %s), kept %s (checked in %s)",
                        s.session_id, employee_id, s.check_in_time, keep.session_id, keep.check_in_time,
                    )
                    removed.append(s.session_id)
                else:
                    logger.info("Session %s closed or vanished before deletion; skipped", s.session_id)

            resolutions.append(
                SessionResolution(
                    employee_id=employee_id,
                    day_key=day_key,
                    kept=keep.session_id,
                    stale=stale_ids,
                    removed=tuple(removed),
                )
            )

        report = DuplicateSessionReport(mode=mode, day_key=day_key, resolutions=tuple(resolutions))
        logger.info(
            "Duplicate session scan for %s: %d stale, %d deleted, %d conflicts",
            day_key,
            report.duplicate_count,
            report.deleted_count,
            len(report.conflicts),
        )
        return report
