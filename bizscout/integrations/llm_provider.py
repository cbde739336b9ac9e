from __future__ import annotations

import logging
import os
from abc import ABC, abstractmethod
from typing import Any, List, Optional

from openai import OpenAI, OpenAIError

logger = logging.getLogger(__name__)


def build_openai_client(api_key: Optional[str] = None) -> OpenAI:
    """
    Construct the OpenAI client.

    Called lazily by the providers so importing this module never needs
    OPENAI_API_KEY.
    """
    key = api_key or os.getenv("OPENAI_API_KEY")
    if not key:
        raise OpenAIError(
            "OPENAI_API_KEY is not set. "
            "Set it in the environment before running enrichment or index sync."
        )
    return OpenAI(api_key=key)


class LLMProvider(ABC):
    """
    Text-in / text-out language model contract.

    The metadata extractor depends on this interface, not on a vendor SDK, so
    tests can hand it canned responses.
    """

    @abstractmethod
    def generate(self, prompt: str, system: str, **kwargs: Any) -> str:
        raise NotImplementedError


class EmbeddingProvider(ABC):
    """Text -> fixed-length vector contract."""

    @abstractmethod
    def embed(self, text: str) -> List[float]:
        raise NotImplementedError


class _LazyClient:
    def __init__(self, api_key: Optional[str], client: Optional[OpenAI]) -> None:
        self._api_key = api_key
        self._client = client

    @property
    def client(self) -> OpenAI:
        if self._client is None:
            self._client = build_openai_client(self._api_key)
        return self._client

    def close(self) -> None:
        if self._client is not None:
            self._client.close()


class OpenAIProvider(_LazyClient, LLMProvider):
    """
    Chat Completions in JSON mode.

    Callers always get the raw message content (possibly empty); decoding and
    defaulting happen in the extractor so they can be tested without a network.
    """

    def __init__(
        self,
        model: str = "gpt-4o-mini",
        api_key: Optional[str] = None,
        client: Optional[OpenAI] = None,
    ) -> None:
        super().__init__(api_key, client)
        self.model = model

    def generate(self, prompt: str, system: str, **kwargs: Any) -> str:
        params = {"response_format": {"type": "json_object"}}
        params.update(kwargs)
        response = self.client.chat.completions.create(
            model=self.model,
            messages=[
                {"role": "system", "content": system},
                {"role": "user", "content": prompt},
            ],
            **params,
        )
        if not response.choices:
            return ""
        return response.choices[0].message.content or ""


class OpenAIEmbeddingProvider(_LazyClient, EmbeddingProvider):
    def __init__(
        self,
        model: str = "text-embedding-3-small",
        api_key: Optional[str] = None,
        client: Optional[OpenAI] = None,
    ) -> None:
        super().__init__(api_key, client)
        self.model = model

    def embed(self, text: str) -> List[float]:
        response = self.client.embeddings.create(model=self.model, input=text)
        return list(response.data[0].embedding)
