from __future__ import annotations

import urllib.parse
from dataclasses import dataclass
from typing import Optional

from bs4 import BeautifulSoup


@dataclass
class HomepageSnapshot:
    url: str
    title: str
    description: str
    favicon_url: Optional[str]
    og_image_url: Optional[str]
    body_text: str
    footer_html: str


def _absolute(base_url: str, ref: Optional[str]) -> Optional[str]:
    ref = (ref or "").strip()
    if not ref:
        return None
    try:
        return urllib.parse.urljoin(base_url, ref)
    except ValueError:
        return None


def _link_href(soup: BeautifulSoup, rel: str) -> Optional[str]:
    # bs4 splits rel into a list, so "shortcut icon" must match the whole list
    wanted = rel.split()
    for link in soup.find_all("link", href=True):
        rels = [r.lower() for r in (link.get("rel") or [])]
        if rels == wanted:
            return link.get("href")
    return None


def parse_homepage(html: str, url: str) -> HomepageSnapshot:
    soup = BeautifulSoup(html or "", "html.parser")

    title = soup.title.get_text() if soup.title else ""

    m_desc = soup.find("meta", attrs={"name": "description"})
    description = (m_desc.get("content") if m_desc and m_desc.get("content") else "") or ""

    favicon = _link_href(soup, "icon") or _link_href(soup, "shortcut icon")

    og = soup.find("meta", attrs={"property": "og:image"})
    og_image = og.get("content") if og and og.get("content") else None

    body = soup.body
    body_text = body.get_text().strip() if body else ""

    footer = soup.find("footer")
    footer_html = footer.decode_contents() if footer else ""

    return HomepageSnapshot(
        url=url,
        title=title,
        description=description,
        favicon_url=_absolute(url, favicon),
        og_image_url=_absolute(url, og_image),
        body_text=body_text,
        footer_html=footer_html,
    )
