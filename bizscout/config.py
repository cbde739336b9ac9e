"""
Configuration for bizscout.

All knobs are env-driven (optionally from a .env file). Parsing is tolerant:
garbage values fall back to the default instead of crashing a nightly run.

Library code never reads the environment directly; flows call load_settings()
once and pass the values into the components they construct.
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from typing import List, Mapping, Optional

from dotenv import load_dotenv

DEFAULT_SEED_URLS = [
    "https://web.grandrapids.org/search",
    "https://www.crainsgrandrapids.com",
]

DEFAULT_USER_AGENT = (
    "Mozilla/5.0 (X11; Linux x86_64) AppleWebKit/537.36 (KHTML, like Gecko) Chrome/120 Safari/537.36"
)


# -----------------------------
# Env helpers
# -----------------------------
def _env_int(env: Mapping[str, str], name: str, default: int) -> int:
    try:
        return int((env.get(name) or str(default)).strip())
    except Exception:
        return default


def _env_float(env: Mapping[str, str], name: str, default: float) -> float:
    try:
        return float((env.get(name) or str(default)).strip())
    except Exception:
        return default


def _env_bool(env: Mapping[str, str], name: str, default: bool) -> bool:
    raw = env.get(name)
    if raw is None:
        return default
    return raw.strip().lower() in ("1", "true", "yes", "y", "on")


def _env_list(env: Mapping[str, str], name: str, default: List[str]) -> List[str]:
    raw = env.get(name)
    if raw is None:
        return list(default)
    parts = raw.replace(",", ";").split(";")
    return [p.strip() for p in parts if p.strip()]


@dataclass
class Settings:
    database_url: Optional[str] = None

    # crawl frontier
    seed_urls: List[str] = field(default_factory=lambda: list(DEFAULT_SEED_URLS))
    max_depth: int = 7
    crawl_delay_s: float = 5.0
    fetch_timeout_s: float = 10.0
    follow_redirects: bool = True
    url_blacklist: List[str] = field(default_factory=lambda: ["wcpages"])
    user_agent: str = DEFAULT_USER_AGENT
    max_items: int = 0  # 0 = drain the frontier

    # enrichment
    seed_domains: List[str] = field(default_factory=list)
    body_text_limit: int = 3000

    # openai
    openai_api_key: Optional[str] = None
    chat_model: str = "gpt-4o-mini"
    embedding_model: str = "text-embedding-3-small"
    embedding_dimensions: int = 1536

    # meilisearch
    meili_host: str = "http://127.0.0.1:7700"
    meili_api_key: Optional[str] = None
    meili_timeout_s: float = 30.0
    sync_batch_size: int = 100
    sync_page_size: int = 1000
    embed_workers: int = 4
    semantic_ratio: float = 0.5

    def require_database_url(self) -> str:
        if not self.database_url:
            raise RuntimeError(
                "DATABASE_URL is not set in environment. "
                "Export it (or add it to .env) before running flows."
            )
        return self.database_url


def load_settings(env: Optional[Mapping[str, str]] = None, *, use_dotenv: bool = True) -> Settings:
    """
    Build Settings from the environment.

    Pass an explicit mapping (tests) to bypass os.environ and .env loading.
    """
    if env is None:
        if use_dotenv:
            load_dotenv()
        env = os.environ

    ratio = _env_float(env, "BIZSCOUT_SEMANTIC_RATIO", 0.5)

    return Settings(
        database_url=(env.get("DATABASE_URL") or "").strip() or None,
        seed_urls=_env_list(env, "BIZSCOUT_SEED_URLS", DEFAULT_SEED_URLS),
        max_depth=max(0, _env_int(env, "BIZSCOUT_MAX_DEPTH", 7)),
        crawl_delay_s=max(0.0, _env_float(env, "BIZSCOUT_CRAWL_DELAY_S", 5.0)),
        fetch_timeout_s=max(0.1, _env_float(env, "BIZSCOUT_FETCH_TIMEOUT_S", 10.0)),
        follow_redirects=_env_bool(env, "BIZSCOUT_FOLLOW_REDIRECTS", True),
        url_blacklist=_env_list(env, "BIZSCOUT_URL_BLACKLIST", ["wcpages"]),
        user_agent=(env.get("BIZSCOUT_USER_AGENT") or "").strip() or DEFAULT_USER_AGENT,
        max_items=max(0, _env_int(env, "BIZSCOUT_MAX_ITEMS", 0)),
        seed_domains=_env_list(env, "BIZSCOUT_SEED_DOMAINS", []),
        body_text_limit=max(1, _env_int(env, "BIZSCOUT_BODY_TEXT_LIMIT", 3000)),
        openai_api_key=(env.get("OPENAI_API_KEY") or "").strip() or None,
        chat_model=(env.get("BIZSCOUT_CHAT_MODEL") or "").strip() or "gpt-4o-mini",
        embedding_model=(env.get("BIZSCOUT_EMBEDDING_MODEL") or "").strip() or "text-embedding-3-small",
        embedding_dimensions=max(1, _env_int(env, "BIZSCOUT_EMBEDDING_DIMENSIONS", 1536)),
        meili_host=(env.get("MEILISEARCH_HOST") or "").strip() or "http://127.0.0.1:7700",
        meili_api_key=(env.get("MEILISEARCH_API_KEY") or "").strip() or None,
        meili_timeout_s=max(1.0, _env_float(env, "MEILISEARCH_TIMEOUT_S", 30.0)),
        sync_batch_size=max(1, _env_int(env, "BIZSCOUT_SYNC_BATCH_SIZE", 100)),
        sync_page_size=max(1, _env_int(env, "BIZSCOUT_SYNC_PAGE_SIZE", 1000)),
        embed_workers=max(1, _env_int(env, "BIZSCOUT_EMBED_WORKERS", 4)),
        semantic_ratio=min(1.0, max(0.0, ratio)),
    )
