#!/usr/bin/env python
"""
search_once.py

Run one search against Meilisearch and print the response as JSON.

Usage:
    python scripts/search_once.py "coffee roaster" --type nodes --state Michigan
    python scripts/search_once.py "grand rapids" --type properties --vector

Exit code 2 on invalid parameters (same messages an HTTP handler would
return as a 400).
"""

import argparse
import json
import sys

from bizscout.config import load_settings
from bizscout.errors import ValidationError
from bizscout.integrations.llm_provider import OpenAIEmbeddingProvider
from bizscout.search.query import FILTER_PARAMS, search
from flows.utils.wiring import open_meili


def _parse_args(argv=None) -> argparse.Namespace:
    p = argparse.ArgumentParser(description="One-off Meilisearch query")
    p.add_argument("q", nargs="?", default="")
    p.add_argument("--type", default="nodes")
    p.add_argument("--limit")
    p.add_argument("--offset")
    p.add_argument("--vector", action="store_true")
    for name in FILTER_PARAMS:
        p.add_argument(f"--{name}")
    return p.parse_args(argv)


def main(argv=None) -> int:
    args = _parse_args(argv)
    settings = load_settings()

    params = {
        "q": args.q,
        "type": args.type,
        "limit": args.limit,
        "offset": args.offset,
        "vector": "true" if args.vector else None,
    }
    for name in FILTER_PARAMS:
        params[name] = getattr(args, name)

    embedder = OpenAIEmbeddingProvider(model=settings.embedding_model, api_key=settings.openai_api_key)
    try:
        with open_meili(settings) as meili:
            result = search(params, meili, embedder, semantic_ratio=settings.semantic_ratio)
    except ValidationError as e:
        print(json.dumps({"error": str(e)}), file=sys.stderr)
        return 2
    finally:
        embedder.close()

    print(json.dumps(result, indent=2, default=str))
    return 0


if __name__ == "__main__":
    sys.exit(main())
