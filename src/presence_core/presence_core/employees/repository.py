from __future__ import annotations

from typing import Optional, Protocol, Set

from .model import Employee, Geofence


class DirectoryStore(Protocol):
    """Port onto the employee directory.

    This core never creates or deletes employees; it reads membership and
    mirrors the identity binding id.
    """

    def get_employee(self, employee_id: str) -> Optional[Employee]:
        raise NotImplementedError

    def list_active_employee_ids(self) -> Set[str]:
        raise NotImplementedError

    def set_identity_binding(self, employee_id: str, binding_id: str) -> bool:
        raise NotImplementedError

    def clear_identity_binding(self, employee_id: str) -> bool:
        raise NotImplementedError

    def get_branch_geofence(self, branch_id: str) -> Optional[Geofence]:
        raise NotImplementedError
