from __future__ import annotations

import base64
import logging
from typing import Any, Dict, Optional, Sequence

import requests
from tenacity import Retrying, retry_if_exception, stop_after_attempt, wait_exponential

from ..core.constants import (
    DEFAULT_MATCH_THRESHOLD,
    DEFAULT_RETRY_ATTEMPTS,
    IDENTITY_INDEX_MAX_BATCH_DELETE,
    IDENTITY_INDEX_PAGE_SIZE,
)
from ..core.exceptions import ExternalServiceError, NotFoundError
from .index import IdentityIndex
from .model import IdentityBindingRecord, IndexPage, VerificationResult

logger = logging.getLogger(__name__)

RETRYABLE_STATUS = {429, 500, 502, 503, 504}


def _is_retryable(exc: BaseException) -> bool:
    return isinstance(exc, ExternalServiceError) and exc.retryable


class HttpIdentityIndex(IdentityIndex):
    """REST client for a face collection hosted by an external matching service."""

    def __init__(
        self,
        *,
        base_url: str,
        collection_id: str,
        api_key: str = "",
        timeout_seconds: float = 10.0,
        max_batch_delete: int = IDENTITY_INDEX_MAX_BATCH_DELETE,
        page_size: int = IDENTITY_INDEX_PAGE_SIZE,
        match_threshold: float = DEFAULT_MATCH_THRESHOLD,
        retry_attempts: int = DEFAULT_RETRY_ATTEMPTS,
        session: Optional[requests.Session] = None,
        wait=None,
    ):
        self._base = f"{base_url.rstrip('/')}/collections/{collection_id}"
        self._timeout = float(timeout_seconds)
        self.max_batch_delete = int(max_batch_delete)
        self._page_size = int(page_size)
        self._threshold = float(match_threshold)
        self._http = session or requests.Session()
        if api_key:
            self._http.headers["Authorization"] = f"Bearer {api_key}"
        self._retrying = Retrying(
            retry=retry_if_exception(_is_retryable),
            stop=stop_after_attempt(max(1, int(retry_attempts))),
            wait=wait if wait is not None else wait_exponential(multiplier=1, min=1, max=10),
            reraise=True,
        )

    def enroll(self, sample: bytes, external_id: str) -> str:
        body = self._call("POST", "/faces", json={"externalId": external_id, "image": _b64(sample)})
        face_id = body.get("faceId")
        if not face_id:
            raise ExternalServiceError("Identity index did not return a face id", retryable=False)
        return str(face_id)

    def verify_1to1(self, sample: bytes, binding_id: str) -> VerificationResult:
        body = self._call("POST", f"/faces/{binding_id}/compare", json={"image": _b64(sample)})
        similarity = float(body.get("similarity") or 0.0)
        return VerificationResult(matched=similarity >= self._threshold, confidence=similarity, binding_id=binding_id)

    def list_page(self, cursor: Optional[str] = None) -> IndexPage:
        params: Dict[str, Any] = {"maxResults": self._page_size}
        if cursor:
            params["nextToken"] = cursor
        body = self._call("GET", "/faces", params=params)
        entries = tuple(
            IdentityBindingRecord(
                binding_id=str(face["faceId"]),
                external_id=str(face.get("externalId") or ""),
                created_at=face.get("createdAt"),
            )
            for face in body.get("faces") or []
        )
        return IndexPage(entries=entries, next_cursor=body.get("nextToken") or None)

    def batch_delete(self, binding_ids: Sequence[str]) -> Sequence[str]:
        if len(binding_ids) > self.max_batch_delete:
            raise ValueError(f"batch of {len(binding_ids)} exceeds limit {self.max_batch_delete}")
        if not binding_ids:
            return []
        body = self._call("POST", "/faces:batchDelete", json={"faceIds": list(binding_ids)})
        return [str(i) for i in body.get("deletedFaces") or []]

    def _call(self, method: str, path: str, **kwargs) -> Dict[str, Any]:
        return self._retrying(self._send, method, path, **kwargs)

    def _send(self, method: str, path: str, **kwargs) -> Dict[str, Any]:
        url = f"{self._base}{path}"
        try:
            resp = self._http.request(method, url, timeout=self._timeout, **kwargs)
        except (requests.ConnectionError, requests.Timeout) as exc:
            logger.warning("Identity index unreachable: %s %s (%s)", method, path, exc)
            raise ExternalServiceError(f"Identity index unreachable: {exc}") from exc

        if resp.status_code == 404:
            raise NotFoundError(f"Identity index has no resource at {path}")
        if resp.status_code in RETRYABLE_STATUS:
            logger.warning("Identity index returned %s for %s %s", resp.status_code, method, path)
            raise ExternalServiceError(
                f"Identity index returned {resp.status_code}", status_code=resp.status_code
            )
        if resp.status_code >= 400:
            raise ExternalServiceError(
                f"Identity index rejected {method} {path}: {resp.status_code}",
                retryable=False,
                status_code=resp.status_code,
            )
        if not resp.content:
            return {}
        try:
            return resp.json()
        except ValueError as exc:
            raise ExternalServiceError("Identity index returned malformed JSON", retryable=False) from exc


def _b64(sample: bytes) -> str:
    return base64.b64encode(sample).decode("ascii")
