from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor, as_completed
from typing import Iterator, List, Sequence

from tenacity import Retrying, retry_if_exception, stop_after_attempt, wait_exponential

from ..core.constants import DEFAULT_DELETE_WORKERS, DEFAULT_RETRY_ATTEMPTS
from ..core.exceptions import ExternalServiceError, NotFoundError
from ..identity.index import IdentityIndex
from .model import BatchOutcome

logger = logging.getLogger(__name__)


def chunked(items: Sequence[str], size: int) -> Iterator[List[str]]:
    if size < 1:
        raise ValueError("batch size must be positive")
    for start in range(0, len(items), size):
        yield list(items[start : start + size])


def _throttled(exc: BaseException) -> bool:
    return isinstance(exc, ExternalServiceError) and exc.retryable


class BatchDeleter:
    """Deletes bindings in size-limited batches on a small worker pool.

    Each batch retries on its own; a batch that still fails is reported and
    the others carry on.
    """

    def __init__(self, index: IdentityIndex, *, workers: int = DEFAULT_DELETE_WORKERS,
                 retry_attempts: int = DEFAULT_RETRY_ATTEMPTS, wait=None):
        self._index = index
        self._workers = max(1, int(workers))
        self._retry_attempts = max(1, int(retry_attempts))
        self._wait = wait if wait is not None else wait_exponential(multiplier=1, min=1, max=10)

    def delete_all(self, binding_ids: Sequence[str]) -> List[BatchOutcome]:
        batches = list(chunked(binding_ids, int(self._index.max_batch_delete)))
        if not batches:
            return []

        outcomes: List[BatchOutcome] = []
        with ThreadPoolExecutor(max_workers=min(self._workers, len(batches))) as pool:
            futures = [pool.submit(self._delete_batch, n, batch) for n, batch in enumerate(batches, start=1)]
            for future in as_completed(futures):
                outcomes.append(future.result())
        return sorted(outcomes, key=lambda o: o.batch_no)

    def _delete_batch(self, batch_no: int, batch: List[str]) -> BatchOutcome:
        retrying = Retrying(
            retry=retry_if_exception(_throttled),
            stop=stop_after_attempt(self._retry_attempts),
            wait=self._wait,
            reraise=True,
        )
        try:
            deleted = retrying(self._index.batch_delete, batch)
        except (ExternalServiceError, NotFoundError) as exc:
            logger.error("Batch %d (%d bindings) failed: %s", batch_no, len(batch), exc)
            return BatchOutcome(batch_no=batch_no, binding_ids=tuple(batch), error=str(exc))

        logger.info("Batch %d deleted %d/%d bindings", batch_no, len(deleted), len(batch))
        return BatchOutcome(batch_no=batch_no, binding_ids=tuple(batch), deleted=tuple(deleted))
