"""
Crawler subsystem for bizscout.

- fetcher.py: HTTP page fetcher (requests)
- links.py: anchor link extraction + same-domain / blacklist classification
- frontier.py: the persistent breadth-first crawl queue worker
"""
