"""
Search document shapes for the `properties` and `nodes` indexes.

Documents are denormalized, write-once projections of the relational records.
A node document embeds its property's public fields as they were at sync time.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Dict, Iterable, List, Optional

from ..schema import Node, Property

PROPERTIES_INDEX = "properties"
NODES_INDEX = "nodes"
EMBEDDER_NAME = "default"

PROPERTY_SEARCHABLE = ["hostname", "city", "state", "country", "address1", "address2"]
PROPERTY_FILTERABLE = ["city", "state", "country"]

NODE_SEARCHABLE = [
    "title",
    "description",
    "summary",
    "keywords",
    "industry",
    "audience",
    "technologies",
    "propertyHostname",
    "property.hostname",
    "property.city",
    "property.state",
    "property.country",
]
NODE_FILTERABLE = [
    "propertyId",
    "industry",
    "keywords",
    "technologies",
    "propertyHostname",
    "property.city",
    "property.state",
    "property.country",
]

SORTABLE = ["createdAt", "updatedAt"]


def index_settings(searchable: List[str], filterable: List[str], dimensions: Optional[int]) -> Dict[str, Any]:
    settings: Dict[str, Any] = {
        "searchableAttributes": list(searchable),
        "filterableAttributes": list(filterable),
        "sortableAttributes": list(SORTABLE),
    }
    if dimensions:
        # vectors are computed by us and shipped in _vectors.default
        settings["embedders"] = {EMBEDDER_NAME: {"source": "userProvided", "dimensions": int(dimensions)}}
    return settings


def property_settings(dimensions: Optional[int] = 1536) -> Dict[str, Any]:
    return index_settings(PROPERTY_SEARCHABLE, PROPERTY_FILTERABLE, dimensions)


def node_settings(dimensions: Optional[int] = 1536) -> Dict[str, Any]:
    return index_settings(NODE_SEARCHABLE, NODE_FILTERABLE, dimensions)


def to_millis(moment: Optional[datetime]) -> int:
    if moment is None:
        return 0
    if moment.tzinfo is None:
        # SQLite hands back naive datetimes; they were written as UTC
        moment = moment.replace(tzinfo=timezone.utc)
    return int(moment.timestamp() * 1000)


def join_text(parts: Iterable[Any]) -> str:
    """Single-space join of the non-empty parts."""
    out = []
    for p in parts:
        if p is None:
            continue
        s = str(p).strip()
        if s:
            out.append(s)
    return " ".join(out)


def property_embedding_text(prop: Property) -> str:
    return join_text([prop.hostname, prop.address1, prop.address2, prop.city, prop.state, prop.country])


def node_embedding_text(node: Node) -> str:
    text = join_text(
        [
            node.title,
            node.description,
            node.summary,
            join_text(node.keywords or []),
            node.industry,
            node.audience,
            join_text(node.technologies or []),
        ]
    )
    # the embeddings API rejects empty input
    return text or node.url


def _property_public_fields(prop: Property) -> Dict[str, Any]:
    return {
        "id": prop.id,
        "hostname": prop.hostname,
        "address1": prop.address1,
        "address2": prop.address2,
        "city": prop.city,
        "state": prop.state,
        "zip": prop.zip,
        "country": prop.country,
        "facebook": prop.facebook,
        "twitter": prop.twitter,
        "instagram": prop.instagram,
        "linkedin": prop.linkedin,
        "youtube": prop.youtube,
        "tiktok": prop.tiktok,
        "discord": prop.discord,
        "github": prop.github,
        "faviconUrl": prop.favicon.url if prop.favicon else None,
        "ogImageUrl": prop.og_image.url if prop.og_image else None,
    }


def property_document(prop: Property, vector: Optional[List[float]] = None) -> Dict[str, Any]:
    doc = _property_public_fields(prop)
    doc["createdAt"] = to_millis(prop.created_at)
    doc["updatedAt"] = to_millis(prop.updated_at)
    if vector is not None:
        doc["_vectors"] = {EMBEDDER_NAME: list(vector)}
    return doc


def node_document(node: Node, vector: Optional[List[float]] = None) -> Dict[str, Any]:
    prop = node.property
    doc: Dict[str, Any] = {
        "id": node.id,
        "url": node.url,
        "title": node.title,
        "description": node.description,
        "summary": node.summary,
        "keywords": list(node.keywords or []),
        "industry": node.industry,
        "audience": node.audience,
        "technologies": list(node.technologies or []),
        "propertyId": node.property_id,
        "propertyHostname": prop.hostname if prop else None,
        "createdAt": to_millis(node.created_at),
        "updatedAt": to_millis(node.updated_at),
    }
    if prop is not None:
        doc["property"] = _property_public_fields(prop)
    if vector is not None:
        doc["_vectors"] = {EMBEDDER_NAME: list(vector)}
    return doc
