from __future__ import annotations

import json
from typing import Any, Dict, List, Optional

from prefect import flow, get_run_logger
from prefect.runtime import flow_run  # type: ignore

from bizscout.config import load_settings
from bizscout.crawler.frontier import Frontier
from bizscout.pacing import Pacer
from bizscout.schema import CrawlStatus
from flows.utils.wiring import open_fetcher, open_store


@flow(name="source-crawler", persist_result=False)
def source_crawler(seed_urls: Optional[List[str]] = None, max_items: Optional[int] = None) -> Dict[str, Any]:
    """
    Seed the crawl queue and drain it breadth-first, one URL at a time.

    Resumable: pending items left by an interrupted run are picked up first
    (lowest depth, oldest), seeds already queued are not re-added.
    """
    logger = get_run_logger()
    settings = load_settings()
    seeds = seed_urls if seed_urls is not None else settings.seed_urls
    limit = max_items if max_items is not None else settings.max_items

    logger.info("Source crawler starting (seeds=%d max_depth=%d delay=%.1fs)", len(seeds), settings.max_depth, settings.crawl_delay_s)

    with open_store(settings) as store, open_fetcher(settings) as fetcher:
        frontier = Frontier(
            store,
            fetcher,
            Pacer(settings.crawl_delay_s),
            max_depth=settings.max_depth,
            blacklist=settings.url_blacklist,
        )
        stale = store.queue_summary().get(CrawlStatus.PROCESSING.value, 0)
        if stale:
            # left by an interrupted run; never rescheduled
            logger.warning("%d crawl items are stuck in processing from an earlier run", stale)

        frontier.initialize(seeds)
        stats = frontier.run(max_items=limit or None)

        queue = store.queue_summary()
        total_properties = store.property_count()

    for status, count in sorted(queue.items()):
        logger.info("%s: %d", status, count)
    logger.info("Total properties discovered: %d", total_properties)

    run_id = getattr(flow_run, "id", None)
    summary = {
        "event": "source_crawler_run_complete",
        "run_id": str(run_id) if run_id else None,
        "queue": queue,
        "total_properties": total_properties,
        **stats.as_dict(),
    }
    logger.info(json.dumps(summary, sort_keys=True))
    return summary


if __name__ == "__main__":
    source_crawler()
