"""
Search index side of bizscout.

- meili.py: Meilisearch REST client
- documents.py: index settings + document / embedding-text builders
- sync.py: append-only delta sync with batched embeddings
- query.py: search parameter validation, filter building, hybrid search
"""
