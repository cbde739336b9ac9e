from .llm_provider import (
    EmbeddingProvider,
    LLMProvider,
    OpenAIEmbeddingProvider,
    OpenAIProvider,
    build_openai_client,
)

__all__ = [
    "EmbeddingProvider",
    "LLMProvider",
    "OpenAIEmbeddingProvider",
    "OpenAIProvider",
    "build_openai_client",
]
