"""
Crawl frontier: the single-worker, breadth-first queue over discovered URLs.

All frontier state lives in the crawl_queue table, so a run can be killed at any
point and the next run simply resumes from the oldest pending item.

Per item:
- blacklisted URL -> completed, nothing fetched
- fetch the page (failure -> failed, terminal, never retried)
- internal links below max_depth -> new pending items at depth + 1
- external links -> bare Property stub per hostname
- completed
followed by the pacer delay.
"""

from __future__ import annotations

import logging
from dataclasses import asdict, dataclass
from typing import Dict, Iterable, List, Optional

from sqlalchemy.exc import SQLAlchemyError

from ..errors import FetchError
from ..pacing import Pacer
from ..schema import CrawlQueueItem
from ..store import CrawlStore
from .fetcher import PageFetcher
from .links import canonical_url, extract_links, hostname, is_blacklisted, is_same_domain

logger = logging.getLogger(__name__)


@dataclass
class CrawlStats:
    processed: int = 0
    completed: int = 0
    failed: int = 0
    skipped: int = 0
    enqueued: int = 0
    properties_created: int = 0

    def as_dict(self) -> Dict[str, int]:
        return asdict(self)


class Frontier:
    def __init__(
        self,
        store: CrawlStore,
        fetcher: PageFetcher,
        pacer: Pacer,
        *,
        max_depth: int = 7,
        blacklist: Optional[Iterable[str]] = None,
    ) -> None:
        self.store = store
        self.fetcher = fetcher
        self.pacer = pacer
        self.max_depth = max_depth
        self.blacklist: List[str] = [b for b in (blacklist or []) if b]
        self.stats = CrawlStats()

    def initialize(self, seed_urls: Iterable[str]) -> int:
        """Queue seeds at depth 0; safe to call on every run."""
        seeds: List[str] = []
        for raw in seed_urls:
            raw = (raw or "").strip()
            if not raw:
                continue
            try:
                url = canonical_url(raw)
            except ValueError:
                logger.warning("Skipping malformed seed url: %s", raw)
                continue
            if url not in seeds:
                seeds.append(url)
        inserted = self.store.seed_queue(seeds)
        logger.info("Initialized %d seed urls (%d new)", len(seeds), inserted)
        return inserted

    def _handle_links(self, item: CrawlQueueItem, links: List[str]) -> None:
        for link in links:
            if is_blacklisted(link, self.blacklist):
                continue

            link_host = hostname(link)
            if not link_host:
                continue

            # internal/external is relative to the page just fetched, not the seed
            if is_same_domain(link, item.url):
                if item.depth < self.max_depth and self.store.enqueue(link, item.depth + 1):
                    self.stats.enqueued += 1
                    logger.debug("  queued %s (depth %d)", link, item.depth + 1)
            elif self.store.ensure_property(link_host):
                self.stats.properties_created += 1
                logger.info("  created property %s", link_host)

    def process(self, item: CrawlQueueItem) -> str:
        """Process one queue item and return its final status."""
        self.stats.processed += 1
        try:
            if is_blacklisted(item.url, self.blacklist):
                logger.info("Skipping blacklisted: %s", item.url)
                self.store.mark_completed(item.id)
                self.stats.skipped += 1
                return "completed"

            logger.info("Processing: %s (depth: %d)", item.url, item.depth)
            try:
                self.store.mark_processing(item.id)
                html = self.fetcher.fetch(item.url)
                links = extract_links(html, item.url)
                logger.info("Found %d links on %s", len(links), item.url)
                self._handle_links(item, links)
            except SQLAlchemyError:
                # store failures are fatal for the run, not per-item failures
                raise
            except FetchError as exc:
                logger.warning("Failed: %s (%s)", item.url, exc.reason)
                self.store.mark_failed(item.id)
                self.stats.failed += 1
                return "failed"
            except Exception:
                logger.exception("Failed: %s", item.url)
                self.store.mark_failed(item.id)
                self.stats.failed += 1
                return "failed"

            self.store.mark_completed(item.id)
            self.stats.completed += 1
            logger.info("Completed: %s", item.url)
            return "completed"
        finally:
            self.pacer.wait()

    def run(self, max_items: Optional[int] = None) -> CrawlStats:
        """
        Drain the frontier one item at a time (or stop after max_items).

        Store errors raised while recording an outcome propagate: those are
        fatal for the run, not per-item failures.
        """
        while max_items is None or max_items <= 0 or self.stats.processed < max_items:
            item = self.store.next_pending()
            if item is None:
                logger.info("No more pending items in queue")
                break
            self.process(item)
        return self.stats
