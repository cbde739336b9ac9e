from __future__ import annotations

import urllib.parse
from typing import Iterable, List, Optional

from bs4 import BeautifulSoup


def hostname(url: str) -> Optional[str]:
    """Lower-cased host of an absolute URL (no port), or None if unparseable."""
    try:
        host = urllib.parse.urlparse(url).hostname
    except ValueError:
        return None
    return host or None


def is_same_domain(url: str, reference_url: str) -> bool:
    """Exact hostname equality; subdomains count as different domains."""
    a = hostname(url)
    return a is not None and a == hostname(reference_url)


def is_blacklisted(url: str, blacklist: Iterable[str]) -> bool:
    low = (url or "").lower()
    return any(kw and kw.lower() in low for kw in blacklist)


_DEFAULT_PORTS = {"http": 80, "https": 443}


def canonical_url(url: str) -> str:
    """
    Normalized form used as the queue dedup key.

    Lower-cases scheme and host, turns an empty path into "/" and drops the
    scheme's default port. Raises ValueError on a malformed netloc.
    """
    parts = urllib.parse.urlsplit(url)
    scheme = parts.scheme.lower()
    host = parts.hostname or ""
    port = parts.port
    if ":" in host:
        host = f"[{host}]"
    netloc = host
    if port is not None and port != _DEFAULT_PORTS.get(scheme):
        netloc = f"{host}:{port}"
    if parts.username is not None:
        userinfo = parts.username
        if parts.password is not None:
            userinfo = f"{userinfo}:{parts.password}"
        netloc = f"{userinfo}@{netloc}"
    path = parts.path or "/"
    return urllib.parse.urlunsplit((scheme, netloc, path, parts.query, parts.fragment))


def extract_links(html: str, base_url: str) -> List[str]:
    """
    Absolute http/https URLs from <a href> tags, in canonical form (see
    canonical_url), de-duplicated, in document order.

    Relative hrefs are resolved against base_url. Malformed hrefs are skipped.
    """
    if not html:
        return []

    soup = BeautifulSoup(html, "html.parser")
    seen = set()
    out: List[str] = []

    for a in soup.find_all("a", href=True):
        href = (a.get("href") or "").strip()
        if not href:
            continue
        try:
            # urlsplit / .port raise on some malformed netlocs ("http://[bad")
            abs_url = canonical_url(urllib.parse.urljoin(base_url, href))
            parsed = urllib.parse.urlparse(abs_url)
        except ValueError:
            continue
        if parsed.scheme not in ("http", "https") or not parsed.hostname:
            continue
        if abs_url not in seen:
            seen.add(abs_url)
            out.append(abs_url)

    return out
