from __future__ import annotations

import base64
import binascii
import re
from functools import wraps
from typing import Any, Optional

from flask import current_app, jsonify, request

from ..attendance.model import Location
from ..core.exceptions import ValidationError
from .validators import parse_coordinate

_DATA_URL_PREFIX = re.compile(r"^data:image/\w+;base64,")


def payload() -> dict:
    if request.is_json:
        return request.get_json(silent=True) or {}
    return request.form.to_dict()


def read_sample(data: dict) -> bytes:
    """Biometric sample from an uploaded `image` file or a base64 `image` field."""
    upload = request.files.get("image")
    if upload:
        sample = upload.read()
        if sample:
            return sample
    encoded = data.get("image") or data.get("imageBase64")
    if not encoded:
        raise ValidationError("Image is required")
    try:
        return base64.b64decode(_DATA_URL_PREFIX.sub("", str(encoded)), validate=True)
    except (binascii.Error, ValueError):
        raise ValidationError("Image is not valid base64") from None


def read_location(data: dict) -> Optional[Location]:
    lat, lng = data.get("latitude"), data.get("longitude")
    if lat in (None, "") and lng in (None, ""):
        return None
    return Location(
        latitude=parse_coordinate(lat, "latitude", limit=90),
        longitude=parse_coordinate(lng, "longitude", limit=180),
    )


def fail(code: str, message: str, status: int, **extra: Any):
    body = {"success": False, "error_code": code, "message": message}
    body.update(extra)
    return jsonify(body), status


def admin_required(view):
    """Reject the call unless X-Admin-Token matches ADMIN_TOKEN (when configured)."""

    @wraps(view)
    def wrapper(*args, **kwargs):
        expected = current_app.config.get("ADMIN_TOKEN")
        if expected and request.headers.get("X-Admin-Token") != expected:
            return fail("FORBIDDEN", "Administrator token required", 403)
        return view(*args, **kwargs)

    return wrapper
