"""
Metadata enrichment for discovered properties.

- page.py: homepage parsing (title, description, favicon, og:image, body text, footer)
- extractor.py: LLM-backed metadata / address + social extraction with null-safe decoding
- pipeline.py: per-domain orchestration (fetch -> extract -> persist)
"""
