from __future__ import annotations

from typing import Any, Optional

from ..core.exceptions import ValidationError


def require_non_empty(value: Optional[str], field_name: str) -> str:
    if not value or not str(value).strip():
        raise ValidationError(f"{field_name} is required")
    return str(value).strip()


def require_sample(sample: Optional[bytes]) -> bytes:
    if not sample:
        raise ValidationError("Biometric sample is required")
    return sample


def parse_coordinate(value: Any, field_name: str, *, limit: float) -> float:
    try:
        number = float(value)
    except (TypeError, ValueError):
        raise ValidationError(f"{field_name} must be a number") from None
    if not -limit <= number <= limit:
        raise ValidationError(f"{field_name} out of range")
    return number
