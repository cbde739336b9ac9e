"""
Delta sync: relational store -> Meilisearch.

For each index (properties, then nodes):
1. page through the index collecting known document ids
2. load every source record from the store
3. keep records whose id the index has never seen
4. in batches: embed each record's text (parallel within the batch), then one
   add_documents call per batch, waiting for it before starting the next

Append-only: ids already in the index are never re-embedded or
re-sent, so repeated runs cost nothing when the store has not grown. Updates
to records that were already synced are not propagated.

A failed batch stops that index's sync for this run; batches already sent
stay in the index.
"""

from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor
from dataclasses import asdict, dataclass, field
from typing import Any, Callable, Dict, List, Optional, Sequence, Set

from ..errors import SyncError
from ..integrations.llm_provider import EmbeddingProvider
from ..store import CrawlStore
from .documents import (
    NODES_INDEX,
    PROPERTIES_INDEX,
    node_document,
    node_embedding_text,
    node_settings,
    property_document,
    property_embedding_text,
    property_settings,
)

logger = logging.getLogger(__name__)


@dataclass
class IndexSyncResult:
    index_uid: str
    existing: int = 0
    source: int = 0
    pending: int = 0
    synced: int = 0
    batches: int = 0
    error: Optional[str] = None

    def as_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass
class SyncReport:
    results: Dict[str, IndexSyncResult] = field(default_factory=dict)
    documents: Dict[str, int] = field(default_factory=dict)

    @property
    def ok(self) -> bool:
        return all(r.error is None for r in self.results.values())

    def as_dict(self) -> Dict[str, Any]:
        return {
            "ok": self.ok,
            "results": {k: v.as_dict() for k, v in self.results.items()},
            "documents": dict(self.documents),
        }


class IndexSyncEngine:
    def __init__(
        self,
        store: CrawlStore,
        index,
        embedder: EmbeddingProvider,
        *,
        batch_size: int = 100,
        page_size: int = 1000,
        embed_workers: int = 4,
        embedding_dimensions: Optional[int] = 1536,
    ) -> None:
        self.store = store
        self.index = index
        self.embedder = embedder
        self.batch_size = max(1, int(batch_size))
        self.page_size = max(1, int(page_size))
        self.embed_workers = max(1, int(embed_workers))
        self.embedding_dimensions = embedding_dimensions

    # -----------------------------
    # setup
    # -----------------------------
    def setup_indexes(self) -> None:
        for uid, settings in (
            (PROPERTIES_INDEX, property_settings(self.embedding_dimensions)),
            (NODES_INDEX, node_settings(self.embedding_dimensions)),
        ):
            if self.index.create_index(uid, primary_key="id"):
                logger.info("Created index: %s", uid)
            else:
                logger.info("Index already exists: %s", uid)
            self.index.update_settings(uid, settings)
        logger.info("Indexes configured successfully")

    # -----------------------------
    # delta computation
    # -----------------------------
    def existing_ids(self, uid: str) -> Set[str]:
        ids: Set[str] = set()
        offset = 0
        while True:
            page = self.index.get_documents(uid, offset=offset, limit=self.page_size, fields=["id"])
            for doc in page:
                if doc.get("id") is not None:
                    ids.add(str(doc["id"]))
            if len(page) < self.page_size:
                break
            offset += self.page_size
        return ids

    def _embed_all(self, texts: Sequence[str]) -> List[List[float]]:
        if self.embed_workers == 1 or len(texts) <= 1:
            return [self.embedder.embed(t) for t in texts]
        with ThreadPoolExecutor(max_workers=min(self.embed_workers, len(texts))) as pool:
            # map keeps input order and re-raises the first failure
            return list(pool.map(self.embedder.embed, texts))

    def _sync(
        self,
        uid: str,
        records: Sequence[Any],
        text_for: Callable[[Any], str],
        document_for: Callable[[Any, List[float]], Dict[str, Any]],
    ) -> IndexSyncResult:
        result = IndexSyncResult(index_uid=uid)
        known = self.existing_ids(uid)
        result.existing = len(known)
        result.source = len(records)
        logger.info("Found %d existing documents in %s", len(known), uid)
        logger.info("Found %d %s in database", len(records), uid)

        fresh = [r for r in records if str(r.id) not in known]
        result.pending = len(fresh)
        logger.info("%d new %s to sync", len(fresh), uid)
        if not fresh:
            return result

        for batch_number, start in enumerate(range(0, len(fresh), self.batch_size), start=1):
            batch = fresh[start : start + self.batch_size]
            try:
                vectors = self._embed_all([text_for(r) for r in batch])
                documents = [document_for(r, v) for r, v in zip(batch, vectors)]
                self.index.add_documents(uid, documents)
            except Exception as exc:
                err = SyncError(uid, batch_number, f"{type(exc).__name__}: {exc}")
                result.error = str(err)
                err.result = result
                raise err from exc

            result.batches += 1
            result.synced += len(documents)
            logger.info("Synced batch %d: %d %s", batch_number, len(documents), uid)

        logger.info("Synced %d new %s", result.synced, uid)
        return result

    def sync_properties(self) -> IndexSyncResult:
        return self._sync(
            PROPERTIES_INDEX,
            self.store.load_properties(),
            property_embedding_text,
            property_document,
        )

    def sync_nodes(self) -> IndexSyncResult:
        return self._sync(
            NODES_INDEX,
            self.store.load_nodes(),
            node_embedding_text,
            node_document,
        )

    def run(self, *, setup: bool = True) -> SyncReport:
        """Setup indexes, then sync properties and nodes independently."""
        if setup:
            self.setup_indexes()

        report = SyncReport()
        for uid, step in ((PROPERTIES_INDEX, self.sync_properties), (NODES_INDEX, self.sync_nodes)):
            try:
                report.results[uid] = step()
            except SyncError as exc:
                logger.error("Sync aborted for %s: %s", uid, exc)
                report.results[uid] = exc.result or IndexSyncResult(index_uid=uid, error=str(exc))

        for uid in (PROPERTIES_INDEX, NODES_INDEX):
            try:
                stats = self.index.stats(uid)
                report.documents[uid] = int(stats.get("numberOfDocuments") or 0)
            except Exception as exc:
                logger.warning("Could not read stats for %s: %s", uid, exc)
        return report
