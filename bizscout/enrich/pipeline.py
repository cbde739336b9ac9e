"""
Enrichment pipeline: visit discovered-but-unvisited properties.

Work list:
- every Property that has no Node yet (bare stubs from the crawler), or
- the configured seed domains when no such Property exists (bootstrap).

Per domain (fetched directly, not through the crawl queue):
1. GET https://{hostname}, parse title / description / favicon / og:image / body / footer
2. LLM: keywords, industry, summary, audience
3. LLM: address + social links from the footer
4. Media rows for favicon / og:image
5. upsert Property (by hostname)
6. upsert homepage Node (by url)

Any error deletes the domain's Property so it is not picked up again as "empty"
next run, and the loop moves on. The pacer delay follows every domain.
"""

from __future__ import annotations

import logging
from dataclasses import asdict, dataclass
from typing import Dict, Iterable, List, Optional

from ..crawler.fetcher import PageFetcher
from ..pacing import Pacer
from ..store import CrawlStore
from .extractor import MetadataExtractor
from .page import parse_homepage

logger = logging.getLogger(__name__)


@dataclass
class EnrichStats:
    attempted: int = 0
    enriched: int = 0
    failed: int = 0
    deleted: int = 0

    def as_dict(self) -> Dict[str, int]:
        return asdict(self)


def homepage_url(hostname: str) -> str:
    return f"https://{hostname}"


class EnrichmentPipeline:
    def __init__(
        self,
        store: CrawlStore,
        fetcher: PageFetcher,
        extractor: MetadataExtractor,
        pacer: Pacer,
    ) -> None:
        self.store = store
        self.fetcher = fetcher
        self.extractor = extractor
        self.pacer = pacer
        self.stats = EnrichStats()

    def domains_to_process(self, seed_domains: Optional[Iterable[str]] = None) -> List[str]:
        pending = self.store.hostnames_without_nodes()
        if pending:
            return pending
        return [d.strip() for d in (seed_domains or []) if d and d.strip()]

    def process_domain(self, hostname: str) -> str:
        """Fetch, extract and persist one domain. Returns the homepage Node id."""
        url = homepage_url(hostname)
        html = self.fetcher.fetch(url)
        page = parse_homepage(html, url)

        metadata = self.extractor.extract_page_metadata(page.body_text, page.title, page.description)
        contact = self.extractor.extract_address_and_social(page.footer_html)

        favicon_id = self.store.add_media(page.favicon_url) if page.favicon_url else None
        og_image_id = self.store.add_media(page.og_image_url) if page.og_image_url else None

        property_id = self.store.upsert_property(
            hostname,
            contact.as_dict(),
            favicon_id=favicon_id,
            og_image_id=og_image_id,
        )

        return self.store.upsert_node(
            url,
            {
                "title": page.title,
                "description": page.description,
                "summary": metadata.summary,
                "keywords": metadata.keywords,
                "industry": metadata.industry,
                "audience": metadata.audience,
            },
            property_id,
        )

    def run(self, seed_domains: Optional[Iterable[str]] = None, max_domains: Optional[int] = None) -> EnrichStats:
        domains = self.domains_to_process(seed_domains)
        if max_domains:
            domains = domains[:max_domains]
        logger.info("Enriching %d domains", len(domains))

        for hostname in domains:
            self.stats.attempted += 1
            try:
                logger.info("Processing domain: %s", hostname)
                self.process_domain(hostname)
                self.stats.enriched += 1
                logger.info("Successfully processed: %s", hostname)
            except Exception as exc:
                self.stats.failed += 1
                logger.error("Error processing %s: %s: %s", hostname, type(exc).__name__, exc)
                # removed so the next run does not retry it as an empty stub
                self.stats.deleted += self.store.delete_property(hostname)
            finally:
                self.pacer.wait()

        logger.info("All domains processed")
        return self.stats
