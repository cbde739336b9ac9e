from __future__ import annotations


class BizscoutError(Exception):
    """Base class for errors raised by bizscout components."""


class FetchError(BizscoutError):
    """Network, timeout or non-2xx failure while fetching a page."""

    def __init__(self, url: str, reason: str, status: int | None = None) -> None:
        super().__init__(f"{url}: {reason}")
        self.url = url
        self.reason = reason
        self.status = status


class ExtractionError(BizscoutError):
    """The metadata extractor (LLM call) failed."""


class SyncError(BizscoutError):
    """Embedding or index write failure during a sync batch."""

    def __init__(self, index_uid: str, batch_number: int, reason: str) -> None:
        super().__init__(f"{index_uid} batch {batch_number}: {reason}")
        self.index_uid = index_uid
        self.batch_number = batch_number
        self.reason = reason
        self.result = None  # partial IndexSyncResult, set by the sync engine


class ValidationError(BizscoutError):
    """Bad search query parameters; surfaced to the caller as a client error."""
