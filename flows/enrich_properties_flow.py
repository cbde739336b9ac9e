from __future__ import annotations

import json
from typing import Any, Dict, List, Optional

from prefect import flow, get_run_logger
from prefect.runtime import flow_run  # type: ignore

from bizscout.config import load_settings
from bizscout.enrich.extractor import MetadataExtractor
from bizscout.enrich.pipeline import EnrichmentPipeline
from bizscout.integrations.llm_provider import OpenAIProvider
from bizscout.pacing import Pacer
from flows.utils.wiring import open_fetcher, open_store


@flow(name="enrich-properties", persist_result=False)
def enrich_properties(seed_domains: Optional[List[str]] = None, max_domains: Optional[int] = None) -> Dict[str, Any]:
    """
    Visit every property without a homepage node (or the seed domains when
    there are none) and store AI-extracted metadata.

    Domains that fail are deleted from properties, not retried.
    """
    logger = get_run_logger()
    settings = load_settings()
    seeds = seed_domains if seed_domains is not None else settings.seed_domains

    llm = OpenAIProvider(model=settings.chat_model, api_key=settings.openai_api_key)
    try:
        with open_store(settings) as store, open_fetcher(settings) as fetcher:
            pipeline = EnrichmentPipeline(
                store,
                fetcher,
                MetadataExtractor(llm, body_text_limit=settings.body_text_limit),
                Pacer(settings.crawl_delay_s),
            )
            stats = pipeline.run(seeds, max_domains=max_domains)
    finally:
        llm.close()

    run_id = getattr(flow_run, "id", None)
    summary = {
        "event": "enrich_properties_run_complete",
        "run_id": str(run_id) if run_id else None,
        **stats.as_dict(),
    }
    logger.info(json.dumps(summary, sort_keys=True))
    return summary


if __name__ == "__main__":
    enrich_properties()
