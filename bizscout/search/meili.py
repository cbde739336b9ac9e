"""
Minimal Meilisearch REST client (requests).

Only the calls the sync engine and the query surface need. Meilisearch runs
writes as asynchronous tasks; every write here waits for its task so callers
know a batch has landed (or explicitly failed) before moving on.
"""

from __future__ import annotations

import logging
import time
from typing import Any, Callable, Dict, List, Optional, Sequence

import requests

from ..errors import BizscoutError

logger = logging.getLogger(__name__)

_TERMINAL_TASK_STATES = ("succeeded", "failed", "canceled")


class MeiliError(BizscoutError):
    def __init__(self, message: str, code: Optional[str] = None, status: Optional[int] = None) -> None:
        super().__init__(f"{code or 'meilisearch_error'}: {message}")
        self.code = code
        self.status = status


class MeiliClient:
    def __init__(
        self,
        host: str = "http://127.0.0.1:7700",
        api_key: Optional[str] = None,
        timeout_s: float = 30.0,
        task_timeout_s: float = 300.0,
        poll_interval_s: float = 0.25,
        session: Optional[requests.Session] = None,
        sleep: Optional[Callable[[float], None]] = None,
    ) -> None:
        self.host = host.rstrip("/")
        self.timeout_s = timeout_s
        self.task_timeout_s = task_timeout_s
        self.poll_interval_s = poll_interval_s
        self._sleep = sleep or time.sleep
        self._owns_session = session is None
        self._session = session or requests.Session()
        self._session.headers.update({"Content-Type": "application/json"})
        if api_key:
            self._session.headers.update({"Authorization": f"Bearer {api_key}"})

    # -----------------------------
    # transport
    # -----------------------------
    def _request(self, method: str, path: str, **kwargs) -> Any:
        url = f"{self.host}{path}"
        try:
            resp = self._session.request(method, url, timeout=self.timeout_s, **kwargs)
        except requests.RequestException as exc:
            raise MeiliError(f"{method} {path} failed: {type(exc).__name__}: {exc}", code="transport_error") from exc

        if resp.status_code >= 400:
            code = None
            message = resp.text[:300]
            try:
                body = resp.json()
                code = body.get("code")
                message = body.get("message") or message
            except ValueError:
                pass
            raise MeiliError(message, code=code, status=resp.status_code)

        if not resp.content:
            return {}
        return resp.json()

    def wait_for_task(self, task_uid: int) -> Dict[str, Any]:
        deadline = time.monotonic() + self.task_timeout_s
        while True:
            task = self._request("GET", f"/tasks/{task_uid}")
            status = task.get("status")
            if status in _TERMINAL_TASK_STATES:
                if status != "succeeded":
                    err = task.get("error") or {}
                    raise MeiliError(
                        err.get("message") or f"task {task_uid} {status}",
                        code=err.get("code") or f"task_{status}",
                    )
                return task
            if time.monotonic() >= deadline:
                raise MeiliError(f"task {task_uid} still {status} after {self.task_timeout_s}s", code="task_timeout")
            self._sleep(self.poll_interval_s)

    def _wait(self, enqueued: Dict[str, Any]) -> Dict[str, Any]:
        task_uid = enqueued.get("taskUid")
        if task_uid is None:
            return enqueued
        return self.wait_for_task(task_uid)

    # -----------------------------
    # index operations
    # -----------------------------
    def create_index(self, uid: str, primary_key: str = "id") -> bool:
        """Create the index; returns False if it already existed."""
        try:
            self._wait(self._request("POST", "/indexes", json={"uid": uid, "primaryKey": primary_key}))
        except MeiliError as exc:
            if exc.code == "index_already_exists":
                return False
            raise
        return True

    def update_settings(self, uid: str, settings: Dict[str, Any]) -> Dict[str, Any]:
        return self._wait(self._request("PATCH", f"/indexes/{uid}/settings", json=settings))

    def get_documents(
        self,
        uid: str,
        *,
        offset: int = 0,
        limit: int = 1000,
        fields: Optional[Sequence[str]] = None,
    ) -> List[Dict[str, Any]]:
        params: Dict[str, Any] = {"offset": offset, "limit": limit}
        if fields:
            params["fields"] = ",".join(fields)
        body = self._request("GET", f"/indexes/{uid}/documents", params=params)
        return list(body.get("results") or [])

    def add_documents(self, uid: str, documents: List[Dict[str, Any]], primary_key: str = "id") -> Dict[str, Any]:
        return self._wait(
            self._request("POST", f"/indexes/{uid}/documents", params={"primaryKey": primary_key}, json=documents)
        )

    def search(self, uid: str, query: str, **params: Any) -> Dict[str, Any]:
        body = {"q": query}
        body.update({k: v for k, v in params.items() if v is not None})
        return self._request("POST", f"/indexes/{uid}/search", json=body)

    def stats(self, uid: str) -> Dict[str, Any]:
        return self._request("GET", f"/indexes/{uid}/stats")

    def close(self) -> None:
        if self._owns_session:
            self._session.close()
