from __future__ import annotations

import json
from typing import Any, Dict

from prefect import flow, get_run_logger
from prefect.runtime import flow_run  # type: ignore

from bizscout.config import load_settings
from bizscout.integrations.llm_provider import OpenAIEmbeddingProvider
from bizscout.search.sync import IndexSyncEngine
from flows.utils.wiring import open_meili, open_store


@flow(name="index-sync", persist_result=False)
def index_sync() -> Dict[str, Any]:
    """
    Push properties and nodes the search index has never seen, with embeddings.

    Safe to re-run at any time: already-indexed ids are skipped, so a run with
    no new records makes no embedding or add-documents calls.
    """
    logger = get_run_logger()
    settings = load_settings()
    logger.info("Starting Meilisearch sync (%s)", settings.meili_host)

    embedder = OpenAIEmbeddingProvider(model=settings.embedding_model, api_key=settings.openai_api_key)
    try:
        with open_store(settings) as store, open_meili(settings) as meili:
            engine = IndexSyncEngine(
                store,
                meili,
                embedder,
                batch_size=settings.sync_batch_size,
                page_size=settings.sync_page_size,
                embed_workers=settings.embed_workers,
                embedding_dimensions=settings.embedding_dimensions,
            )
            report = engine.run(setup=True)
    finally:
        embedder.close()

    for uid, result in report.results.items():
        logger.info(f"[{uid}] existing={result.existing} source={result.source} pending={result.pending} synced={result.synced} batches={result.batches}")
    for uid, count in report.documents.items():
        logger.info("Total %s in Meilisearch: %d", uid, count)

    run_id = getattr(flow_run, "id", None)
    summary = {"event": "index_sync_run_complete", "run_id": str(run_id) if run_id else None, **report.as_dict()}
    logger.info(json.dumps(summary, sort_keys=True))

    if not report.ok:
        failed = {uid: r.error for uid, r in report.results.items() if r.error}
        # already-submitted batches stay indexed; the next run picks up the rest
        raise RuntimeError(f"Index sync incomplete: {failed}")
    return summary


if __name__ == "__main__":
    index_sync()
