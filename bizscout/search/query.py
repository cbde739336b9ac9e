"""
Search query semantics (what an HTTP /search handler does with its params).

Query parameters:
- q        search text (required)
- type     "nodes" or "properties" (default: "nodes")
- limit    results per page (default: 20)
- offset   pagination offset (default: 0)
- vector   "true" for hybrid keyword + vector search (default: false)
- industry, city, state, country: optional equality filters

Validation happens before any embedding or index call.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, Mapping, Optional

from ..errors import ValidationError
from ..integrations.llm_provider import EmbeddingProvider
from .documents import EMBEDDER_NAME, NODES_INDEX, PROPERTIES_INDEX

DEFAULT_LIMIT = 20
MAX_LIMIT = 1000
SEARCH_TYPES = {"nodes": NODES_INDEX, "properties": PROPERTIES_INDEX}
FILTER_PARAMS = ("industry", "city", "state", "country")

# filter param -> attribute, per index
_FILTER_ATTRIBUTES = {
    NODES_INDEX: {
        "industry": "industry",
        "city": "property.city",
        "state": "property.state",
        "country": "property.country",
    },
    PROPERTIES_INDEX: {
        "city": "city",
        "state": "state",
        "country": "country",
    },
}


def _parse_int(raw: Optional[str], name: str, default: int, minimum: int) -> int:
    if raw is None or str(raw).strip() == "":
        return default
    try:
        value = int(str(raw).strip())
    except ValueError:
        raise ValidationError(f"Query parameter '{name}' must be an integer") from None
    if value < minimum:
        raise ValidationError(f"Query parameter '{name}' must be >= {minimum}")
    return value


@dataclass
class SearchRequest:
    query: str
    type: str = "nodes"
    limit: int = DEFAULT_LIMIT
    offset: int = 0
    vector: bool = False
    filters: Dict[str, str] = field(default_factory=dict)

    @property
    def index_uid(self) -> str:
        return SEARCH_TYPES[self.type]

    @classmethod
    def from_params(cls, params: Mapping[str, Any]) -> "SearchRequest":
        query = str(params.get("q") or "").strip()
        if not query:
            raise ValidationError("Query parameter 'q' is required")

        search_type = str(params.get("type") or "nodes").strip().lower()
        if search_type not in SEARCH_TYPES:
            raise ValidationError("Invalid type. Must be 'nodes' or 'properties'")

        limit = min(_parse_int(params.get("limit"), "limit", DEFAULT_LIMIT, 1), MAX_LIMIT)
        offset = _parse_int(params.get("offset"), "offset", 0, 0)
        vector = str(params.get("vector") or "").strip().lower() == "true"

        filters: Dict[str, str] = {}
        for name in FILTER_PARAMS:
            value = params.get(name)
            if value is None or str(value).strip() == "":
                continue
            if name not in _FILTER_ATTRIBUTES[SEARCH_TYPES[search_type]]:
                raise ValidationError(f"Filter '{name}' is not supported for type={search_type}")
            filters[name] = str(value).strip()

        return cls(query=query, type=search_type, limit=limit, offset=offset, vector=vector, filters=filters)


def _quote(value: str) -> str:
    return '"' + value.replace("\\", "\\\\").replace('"', '\\"') + '"'


def build_filter(request: SearchRequest) -> Optional[str]:
    """Equality predicates joined with AND, or None when no filter was given."""
    attributes = _FILTER_ATTRIBUTES[request.index_uid]
    parts = [f"{attributes[name]} = {_quote(request.filters[name])}" for name in FILTER_PARAMS if name in request.filters]
    return " AND ".join(parts) if parts else None


def run_search(
    request: SearchRequest,
    index,
    embedder: Optional[EmbeddingProvider] = None,
    *,
    semantic_ratio: float = 0.5,
) -> Dict[str, Any]:
    params: Dict[str, Any] = {
        "limit": request.limit,
        "offset": request.offset,
        "filter": build_filter(request),
    }

    if request.vector:
        if embedder is None:
            raise ValidationError("Vector search is not available (no embedding provider configured)")
        params["vector"] = embedder.embed(request.query)
        params["hybrid"] = {"semanticRatio": semantic_ratio, "embedder": EMBEDDER_NAME}

    results = index.search(request.index_uid, request.query, **params)

    return {
        "hits": results.get("hits", []),
        "estimatedTotalHits": results.get("estimatedTotalHits"),
        "limit": results.get("limit", request.limit),
        "offset": results.get("offset", request.offset),
        "processingTimeMs": results.get("processingTimeMs"),
        "query": results.get("query", request.query),
    }


def search(params: Mapping[str, Any], index, embedder: Optional[EmbeddingProvider] = None, **kwargs) -> Dict[str, Any]:
    """Validate raw query params and run the search."""
    return run_search(SearchRequest.from_params(params), index, embedder, **kwargs)
