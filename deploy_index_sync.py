from prefect.client.schemas.schedules import CronSchedule
from flows.index_sync_flow import index_sync


if __name__ == "__main__":
    index_sync.deploy(
        name="index-sync-nightly",
        work_pool_name="bizscout-managed",
        tags=["search", "meilisearch"],
        schedule=CronSchedule(
            cron="30 2 * * *",  # after the nightly crawl + enrichment
            timezone="America/Detroit",
        ),
        description=(
            "Nightly delta sync of properties and homepage nodes into "
            "Meilisearch, with OpenAI embeddings for hybrid search."
        ),
        # Required by Prefect 3 deploy() to avoid the remote storage check.
        image="bizscout/index-sync:placeholder",
    )
