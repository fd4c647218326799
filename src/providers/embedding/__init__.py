"""Embedding provider implementations.

Two implementations of IEmbeddingProvider, in selection priority order:
    1. OpenAIEmbeddingProvider — text-embedding-ada-002 (1536 dims).
       Requires an API key; also works with OpenAI-compatible endpoints.
    2. OllamaEmbeddingProvider — nomic-embed-text via Ollama (768 dims).
       Free and local, but requires a running Ollama server.

Pages and questions must be embedded by the same provider: switching
providers after ingestion makes stored vectors incomparable.
"""

from src.providers.embedding.ollama_embedding_provider import OllamaEmbeddingProvider
from src.providers.embedding.openai_embedding_provider import OpenAIEmbeddingProvider

__all__ = ["OpenAIEmbeddingProvider", "OllamaEmbeddingProvider"]
