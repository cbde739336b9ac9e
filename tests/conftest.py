"""Shared fixtures: in-memory SQLite store and in-process fakes for the network edges."""

import json
import threading
from typing import Any, Dict, List, Optional

import pytest
from sqlalchemy.pool import StaticPool

from bizscout.db import make_engine, make_session_factory
from bizscout.enrich.extractor import PAGE_SYSTEM_TEXT
from bizscout.errors import FetchError
from bizscout.integrations.llm_provider import EmbeddingProvider, LLMProvider
from bizscout.pacing import Pacer
from bizscout.schema import create_schema
from bizscout.search.meili import MeiliError
from bizscout.store import CrawlStore


class FakeFetcher:
    """url -> html, or url -> Exception instance to raise. Unknown urls 404."""

    def __init__(self, pages: Optional[Dict[str, Any]] = None):
        self.pages = dict(pages or {})
        self.calls: List[str] = []

    def fetch(self, url: str) -> str:
        self.calls.append(url)
        page = self.pages.get(url)
        if page is None:
            raise FetchError(url, "HTTP 404", status=404)
        if isinstance(page, Exception):
            raise page
        return page

    def close(self) -> None:
        pass


class FakeLLM(LLMProvider):
    def __init__(self, page: Any = None, footer: Any = None, error: Optional[Exception] = None):
        self.page = page if page is not None else {}
        self.footer = footer if footer is not None else {}
        self.error = error
        self.calls: List[Dict[str, str]] = []

    def generate(self, prompt: str, system: str, **kwargs: Any) -> str:
        self.calls.append({"prompt": prompt, "system": system})
        if self.error is not None:
            raise self.error
        payload = self.page if system == PAGE_SYSTEM_TEXT else self.footer
        return payload if isinstance(payload, str) else json.dumps(payload)


class FakeEmbedder(EmbeddingProvider):
    def __init__(self, dimensions: int = 3, fail_on: Optional[str] = None):
        self.dimensions = dimensions
        self.fail_on = fail_on
        self.texts: List[str] = []
        self._lock = threading.Lock()

    @property
    def calls(self) -> int:
        return len(self.texts)

    def embed(self, text: str) -> List[float]:
        with self._lock:
            self.texts.append(text)
        if self.fail_on is not None and self.fail_on in text:
            raise RuntimeError("embedding backend unavailable")
        return [float(len(text))] + [0.0] * (self.dimensions - 1)


class FakeIndex:
    """In-memory stand-in for MeiliClient with the same method surface."""

    def __init__(self, fail_add_on_call: Optional[int] = None):
        self.indexes: Dict[str, Dict[str, Dict[str, Any]]] = {}
        self.settings: Dict[str, Dict[str, Any]] = {}
        self.add_calls: List[Dict[str, Any]] = []
        self.search_calls: List[Dict[str, Any]] = []
        self.fail_add_on_call = fail_add_on_call
        self.search_response: Dict[str, Any] = {
            "hits": [{"id": "n1"}],
            "estimatedTotalHits": 1,
            "limit": 20,
            "offset": 0,
            "processingTimeMs": 3,
            "query": "coffee",
        }

    def create_index(self, uid: str, primary_key: str = "id") -> bool:
        if uid in self.indexes:
            return False
        self.indexes[uid] = {}
        return True

    def update_settings(self, uid: str, settings: Dict[str, Any]) -> Dict[str, Any]:
        self.settings[uid] = settings
        return {"status": "succeeded"}

    def get_documents(self, uid, *, offset=0, limit=1000, fields=None):
        docs = list(self.indexes.get(uid, {}).values())
        page = docs[offset : offset + limit]
        if fields:
            page = [{k: d[k] for k in fields if k in d} for d in page]
        return page

    def add_documents(self, uid, documents, primary_key="id"):
        self.add_calls.append({"uid": uid, "count": len(documents)})
        if self.fail_add_on_call is not None and len(self.add_calls) == self.fail_add_on_call:
            raise MeiliError("disk full", code="internal")
        bucket = self.indexes.setdefault(uid, {})
        for doc in documents:
            bucket[str(doc[primary_key])] = doc
        return {"status": "succeeded"}

    def search(self, uid, query, **params):
        self.search_calls.append({"uid": uid, "query": query, **params})
        return dict(self.search_response)

    def stats(self, uid):
        return {"numberOfDocuments": len(self.indexes.get(uid, {}))}


@pytest.fixture
def engine():
    eng = make_engine("sqlite://", poolclass=StaticPool, connect_args={"check_same_thread": False})
    create_schema(eng)
    yield eng
    eng.dispose()


@pytest.fixture
def store(engine):
    return CrawlStore(make_session_factory(engine))


@pytest.fixture
def pacer():
    return Pacer(0)


@pytest.fixture
def fake_index():
    return FakeIndex()


@pytest.fixture
def embedder():
    return FakeEmbedder()
