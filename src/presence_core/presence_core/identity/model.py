from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional, Sequence


@dataclass(frozen=True)
class IdentityBindingRecord:
    """One enrolled template in the identity index.

    `external_id` must equal the owning employee id.
    """

    binding_id: str
    external_id: str
    created_at: Optional[str] = None


@dataclass(frozen=True)
class VerificationResult:
    matched: bool
    confidence: float
    binding_id: Optional[str] = None


@dataclass(frozen=True)
class IndexPage:
    entries: Sequence[IdentityBindingRecord] = field(default_factory=tuple)
    next_cursor: Optional[str] = None

    @property
    def is_last(self) -> bool:
        return not self.next_cursor
