"""
Relational store for bizscout.

Every public method runs in its own short transaction so a run can be stopped
between any two queue items / domains without leaving half-written state.

Find-or-create and insert-or-update keyed on the unique columns (crawl_queue.url,
properties.hostname, nodes.url) are single INSERT ... ON CONFLICT statements, not
read-then-write pairs.
"""

from __future__ import annotations

from typing import Any, Dict, Iterable, List, Mapping, Optional

from sqlalchemy import delete, func, select, update
from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.orm import Session, selectinload, sessionmaker

from .db import session_scope
from .schema import (
    NODE_CONTENT_FIELDS,
    PROPERTY_ADDRESS_FIELDS,
    PROPERTY_SOCIAL_FIELDS,
    CrawlQueueItem,
    CrawlStatus,
    Media,
    Node,
    Property,
    utcnow,
)

_PROPERTY_FIELDS = PROPERTY_ADDRESS_FIELDS + PROPERTY_SOCIAL_FIELDS


def _insert_for(session: Session, model):
    """Dialect-specific INSERT so we can use ON CONFLICT."""
    dialect = session.get_bind().dialect.name
    table = model.__table__
    if dialect == "postgresql":
        return postgresql.insert(table)
    if dialect == "sqlite":
        return sqlite.insert(table)
    raise RuntimeError(f"Unsupported database dialect for upserts: {dialect}")


class CrawlStore:
    def __init__(self, session_factory: sessionmaker) -> None:
        self._factory = session_factory

    # -----------------------------
    # crawl queue
    # -----------------------------
    def seed_queue(self, urls: Iterable[str]) -> int:
        """Insert depth-0 seed items; existing URLs are left untouched. Returns rows inserted."""
        inserted = 0
        with session_scope(self._factory) as s:
            for url in urls:
                stmt = (
                    _insert_for(s, CrawlQueueItem)
                    .values(url=url, depth=0, is_seed_domain=True, status=CrawlStatus.PENDING.value)
                    .on_conflict_do_nothing(index_elements=["url"])
                )
                inserted += int(s.execute(stmt).rowcount or 0)
        return inserted

    def enqueue(self, url: str, depth: int) -> bool:
        """Create a pending, non-seed item unless the URL was ever queued before."""
        with session_scope(self._factory) as s:
            stmt = (
                _insert_for(s, CrawlQueueItem)
                .values(url=url, depth=depth, is_seed_domain=False, status=CrawlStatus.PENDING.value)
                .on_conflict_do_nothing(index_elements=["url"])
            )
            return bool(s.execute(stmt).rowcount)

    def get_queue_item(self, url: str) -> Optional[CrawlQueueItem]:
        with session_scope(self._factory) as s:
            return s.execute(select(CrawlQueueItem).where(CrawlQueueItem.url == url)).scalar_one_or_none()

    def next_pending(self) -> Optional[CrawlQueueItem]:
        """Oldest pending item by (depth, created_at, id): breadth-first order."""
        with session_scope(self._factory) as s:
            stmt = (
                select(CrawlQueueItem)
                .where(CrawlQueueItem.status == CrawlStatus.PENDING.value)
                .order_by(CrawlQueueItem.depth.asc(), CrawlQueueItem.created_at.asc(), CrawlQueueItem.id.asc())
                .limit(1)
            )
            return s.execute(stmt).scalar_one_or_none()

    def _set_status(self, item_id: int, status: CrawlStatus, *, processed: bool) -> None:
        values: Dict[str, Any] = {"status": status.value}
        if processed:
            values["processed_at"] = utcnow()
        with session_scope(self._factory) as s:
            s.execute(
                update(CrawlQueueItem)
                .where(CrawlQueueItem.id == item_id)
                .values(**values)
                .execution_options(synchronize_session=False)
            )

    def mark_processing(self, item_id: int) -> None:
        self._set_status(item_id, CrawlStatus.PROCESSING, processed=False)

    def mark_completed(self, item_id: int) -> None:
        self._set_status(item_id, CrawlStatus.COMPLETED, processed=True)

    def mark_failed(self, item_id: int) -> None:
        self._set_status(item_id, CrawlStatus.FAILED, processed=True)

    def queue_summary(self) -> Dict[str, int]:
        with session_scope(self._factory) as s:
            rows = s.execute(
                select(CrawlQueueItem.status, func.count()).group_by(CrawlQueueItem.status)
            ).all()
        return {status: int(count) for status, count in rows}

    # -----------------------------
    # properties / media / nodes
    # -----------------------------
    def ensure_property(self, hostname: str) -> bool:
        """Create a bare stub Property for hostname if none exists. Returns True if created."""
        with session_scope(self._factory) as s:
            stmt = (
                _insert_for(s, Property)
                .values(hostname=hostname)
                .on_conflict_do_nothing(index_elements=["hostname"])
            )
            return bool(s.execute(stmt).rowcount)

    def get_property(self, hostname: str) -> Optional[Property]:
        with session_scope(self._factory) as s:
            return s.execute(select(Property).where(Property.hostname == hostname)).scalar_one_or_none()

    def property_count(self) -> int:
        with session_scope(self._factory) as s:
            return int(s.execute(select(func.count()).select_from(Property)).scalar() or 0)

    def hostnames_without_nodes(self) -> List[str]:
        """Discovered-but-unvisited domains, oldest first."""
        with session_scope(self._factory) as s:
            stmt = select(Property.hostname).where(~Property.nodes.any()).order_by(Property.created_at, Property.hostname)
            return list(s.execute(stmt).scalars())

    def add_media(self, url: str) -> str:
        """New Media row per call (no dedup by URL). Returns its id."""
        with session_scope(self._factory) as s:
            media = Media(url=url)
            s.add(media)
            s.flush()
            return media.id

    def upsert_property(
        self,
        hostname: str,
        fields: Mapping[str, Optional[str]],
        *,
        favicon_id: Optional[str] = None,
        og_image_id: Optional[str] = None,
    ) -> str:
        """
        Insert or enrich-in-place the Property keyed by hostname. Returns its id.

        Address/social fields are always overwritten with the extracted values;
        media references only when a new one was recorded.
        """
        values: Dict[str, Any] = {k: fields.get(k) for k in _PROPERTY_FIELDS}
        if favicon_id is not None:
            values["favicon_id"] = favicon_id
        if og_image_id is not None:
            values["og_image_id"] = og_image_id

        with session_scope(self._factory) as s:
            stmt = _insert_for(s, Property).values(hostname=hostname, **values)
            stmt = stmt.on_conflict_do_update(
                index_elements=["hostname"],
                set_={**values, "updated_at": utcnow()},
            )
            s.execute(stmt)
            return s.execute(select(Property.id).where(Property.hostname == hostname)).scalar_one()

    def upsert_node(self, url: str, fields: Mapping[str, Any], property_id: str) -> str:
        """Insert or update the Node keyed by url. Returns its id."""
        values: Dict[str, Any] = {k: fields[k] for k in NODE_CONTENT_FIELDS if k in fields}
        for list_field in ("keywords", "technologies"):
            if list_field in values and values[list_field] is None:
                values[list_field] = []

        with session_scope(self._factory) as s:
            stmt = _insert_for(s, Node).values(url=url, property_id=property_id, **values)
            stmt = stmt.on_conflict_do_update(
                index_elements=["url"],
                set_={**values, "updated_at": utcnow()},
            )
            s.execute(stmt)
            return s.execute(select(Node.id).where(Node.url == url)).scalar_one()

    def delete_property(self, hostname: str) -> int:
        """Delete the Property (and any nodes it owns). Returns properties deleted."""
        with session_scope(self._factory) as s:
            owned = select(Property.id).where(Property.hostname == hostname).scalar_subquery()
            s.execute(delete(Node).where(Node.property_id == owned).execution_options(synchronize_session=False))
            res = s.execute(
                delete(Property).where(Property.hostname == hostname).execution_options(synchronize_session=False)
            )
            return int(res.rowcount or 0)

    # -----------------------------
    # sync sources
    # -----------------------------
    def load_properties(self) -> List[Property]:
        with session_scope(self._factory) as s:
            stmt = (
                select(Property)
                .options(selectinload(Property.favicon), selectinload(Property.og_image))
                .order_by(Property.created_at, Property.id)
            )
            return list(s.execute(stmt).scalars())

    def load_nodes(self) -> List[Node]:
        with session_scope(self._factory) as s:
            stmt = (
                select(Node)
                .options(
                    selectinload(Node.property).selectinload(Property.favicon),
                    selectinload(Node.property).selectinload(Property.og_image),
                )
                .order_by(Node.created_at, Node.id)
            )
            return list(s.execute(stmt).scalars())
