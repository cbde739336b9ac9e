"""
Construction helpers shared by the flows.

Each flow owns the lifecycle of what it builds here: the engine is disposed and
HTTP sessions are closed when the context exits, including on failure.
"""

from __future__ import annotations

from contextlib import contextmanager
from typing import Iterator

from bizscout.config import Settings
from bizscout.crawler.fetcher import PageFetcher
from bizscout.db import make_engine, make_session_factory
from bizscout.search.meili import MeiliClient
from bizscout.store import CrawlStore


@contextmanager
def open_store(settings: Settings) -> Iterator[CrawlStore]:
    engine = make_engine(settings.require_database_url())
    try:
        yield CrawlStore(make_session_factory(engine))
    finally:
        engine.dispose()


@contextmanager
def open_fetcher(settings: Settings) -> Iterator[PageFetcher]:
    fetcher = PageFetcher(
        timeout_s=settings.fetch_timeout_s,
        follow_redirects=settings.follow_redirects,
        user_agent=settings.user_agent,
    )
    try:
        yield fetcher
    finally:
        fetcher.close()


@contextmanager
def open_meili(settings: Settings) -> Iterator[MeiliClient]:
    client = MeiliClient(
        host=settings.meili_host,
        api_key=settings.meili_api_key,
        timeout_s=settings.meili_timeout_s,
    )
    try:
        yield client
    finally:
        client.close()
