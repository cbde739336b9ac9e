"""
Metadata extraction via an LLM in JSON mode.

Two calls per homepage:
- page metadata: keywords / industry / summary / audience from title, description, body text
- address + social links from the footer HTML

Decoding is separate from the network call: decode_json_object() and the
from_payload() normalizers turn whatever the model returned (empty text, prose,
wrong types, missing keys) into fully-defaulted dataclasses. Bad model output
never raises; only a failed provider call does (ExtractionError).
"""

from __future__ import annotations

import json
import logging
import re
from dataclasses import asdict, dataclass, field
from typing import Any, Dict, List, Mapping, Optional

from ..errors import ExtractionError
from ..integrations.llm_provider import LLMProvider
from ..schema import PROPERTY_ADDRESS_FIELDS as ADDRESS_FIELDS
from ..schema import PROPERTY_SOCIAL_FIELDS as SOCIAL_FIELDS

logger = logging.getLogger(__name__)

PAGE_SYSTEM_TEXT = (
    "You are a helpful assistant that analyzes webpage content and extracts metadata in JSON format."
)

FOOTER_SYSTEM_TEXT = (
    "You are a helpful assistant that extracts physical addresses and social media links "
    "from HTML footer content in JSON format."
)


def decode_json_object(text: Optional[str]) -> Dict[str, Any]:
    """Parse a JSON object out of model text; anything unusable becomes {}."""
    text = (text or "").strip()
    if not text:
        return {}
    try:
        data = json.loads(text)
    except ValueError:
        # Try to grab the first {...} block
        m = re.search(r"\{.*\}", text, re.S)
        if not m:
            return {}
        try:
            data = json.loads(m.group(0))
        except ValueError:
            return {}
    return data if isinstance(data, dict) else {}


def _clean_str(value: Any) -> Optional[str]:
    if isinstance(value, str):
        value = value.strip()
        return value or None
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return str(value)
    return None


def _clean_str_list(value: Any) -> List[str]:
    if isinstance(value, str):
        value = value.split(",")
    if not isinstance(value, (list, tuple)):
        return []
    out: List[str] = []
    for v in value:
        s = _clean_str(v)
        if s:
            out.append(s)
    return out


@dataclass
class PageMetadata:
    keywords: List[str] = field(default_factory=list)
    industry: str = ""
    summary: str = ""
    audience: str = ""

    @classmethod
    def from_payload(cls, payload: Mapping[str, Any]) -> "PageMetadata":
        return cls(
            keywords=_clean_str_list(payload.get("keywords")),
            industry=_clean_str(payload.get("industry")) or "",
            summary=_clean_str(payload.get("summary")) or "",
            audience=_clean_str(payload.get("audience")) or "",
        )


@dataclass
class AddressAndSocial:
    address1: Optional[str] = None
    address2: Optional[str] = None
    city: Optional[str] = None
    state: Optional[str] = None
    zip: Optional[str] = None
    country: Optional[str] = None
    facebook: Optional[str] = None
    twitter: Optional[str] = None
    instagram: Optional[str] = None
    linkedin: Optional[str] = None
    youtube: Optional[str] = None
    tiktok: Optional[str] = None
    discord: Optional[str] = None
    github: Optional[str] = None

    @classmethod
    def from_payload(cls, payload: Mapping[str, Any]) -> "AddressAndSocial":
        return cls(**{k: _clean_str(payload.get(k)) for k in ADDRESS_FIELDS + SOCIAL_FIELDS})

    def as_dict(self) -> Dict[str, Optional[str]]:
        return asdict(self)


class MetadataExtractor:
    def __init__(self, llm: LLMProvider, body_text_limit: int = 3000) -> None:
        self.llm = llm
        self.body_text_limit = body_text_limit

    def _call(self, prompt: str, system: str) -> str:
        try:
            return self.llm.generate(prompt, system)
        except Exception as exc:
            raise ExtractionError(f"LLM call failed: {type(exc).__name__}: {exc}") from exc

    def build_page_prompt(self, body_text: str, title: str, description: str) -> str:
        return (
            "Analyze this webpage and extract keywords, industry classification, a summary, and "
            "target audience description. Respond with a JSON object with the keys "
            '"keywords" (array of strings), "industry", "summary" and "audience" (strings).\n\n'
            f"Title: {title}\n"
            f"Description: {description}\n\n"
            f"Body text (first {self.body_text_limit} chars):\n"
            f"{(body_text or '')[: self.body_text_limit]}"
        )

    def build_footer_prompt(self, footer_html: str) -> str:
        return (
            "Extract the physical address (in separate fields: address1, address2, city, state, zip, "
            "country) and social media links (facebook, twitter, instagram, linkedin, youtube, tiktok, "
            "discord, github) from this footer HTML. Return null for any field that is not found.\n\n"
            f"{footer_html or ''}"
        )

    def extract_page_metadata(self, body_text: str, title: str, description: str) -> PageMetadata:
        raw = self._call(self.build_page_prompt(body_text, title, description), PAGE_SYSTEM_TEXT)
        payload = decode_json_object(raw)
        if not payload:
            logger.warning("Page metadata response was empty or not a JSON object; using defaults")
        return PageMetadata.from_payload(payload)

    def extract_address_and_social(self, footer_html: str) -> AddressAndSocial:
        raw = self._call(self.build_footer_prompt(footer_html), FOOTER_SYSTEM_TEXT)
        return AddressAndSocial.from_payload(decode_json_object(raw))
