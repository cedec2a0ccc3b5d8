from __future__ import annotations

from typing import Optional, Protocol, Sequence

from .model import IndexPage, VerificationResult


class IdentityIndex(Protocol):
    """Port onto the external biometric matching service.

    Implementations raise NotFoundError when a binding id is unknown and
    ExternalServiceError when the service is unreachable or throttling.
    """

    max_batch_delete: int

    def enroll(self, sample: bytes, external_id: str) -> str:
        raise NotImplementedError

    def verify_1to1(self, sample: bytes, binding_id: str) -> VerificationResult:
        raise NotImplementedError

    def list_page(self, cursor: Optional[str] = None) -> IndexPage:
        raise NotImplementedError

    def batch_delete(self, binding_ids: Sequence[str]) -> Sequence[str]:
        """Delete at most `max_batch_delete` bindings; return the ids deleted."""

        raise NotImplementedError
