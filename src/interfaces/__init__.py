"""Public interface definitions for all external service providers.

Every external API or service used by the pipelines is accessed through
the abstract base classes defined here.  Concrete adapters live in
``src/providers/`` and are wired together in ``src/main.py``; tests inject
mocks implementing the same interfaces.

CONCRETE PROVIDER MAP:
    Interface             →  Concrete implementations (in src/providers/)
    ─────────────────────────────────────────────────────────────────
    ILLMProvider          →  OpenAILLMProvider, OllamaLLMProvider
    IEmbeddingProvider    →  OpenAIEmbeddingProvider, OllamaEmbeddingProvider
    IPageStore            →  SQLitePageStore
"""

from src.interfaces.embedding_provider import IEmbeddingProvider
from src.interfaces.llm_provider import ILLMProvider
from src.interfaces.page_store import IPageStore

__all__ = [
    "IEmbeddingProvider",
    "ILLMProvider",
    "IPageStore",
]
