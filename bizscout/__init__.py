"""
bizscout package.

Responsible for:
- Crawling outward from seed URLs and recording external business domains ("properties").
- Enriching discovered domains with AI-extracted metadata (homepage "nodes").
- Delta-syncing properties and nodes into Meilisearch with vector embeddings.
"""

__version__ = "0.1.0"
