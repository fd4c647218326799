"""Utility modules for pagewise.

- **errors** -- Exception hierarchy rooted at PagewiseError; each class
  carries the HTTP status code the API reports for it.
- **logging** -- structlog setup with a dual-renderer pattern: coloured
  console output in development, structured JSON in production.
- **concurrency** -- semaphore-bounded, all-or-nothing fan-out used for
  per-page embedding.
- **similarity** -- cosine similarity between embedding vectors.
"""

from src.utils.concurrency import bounded_gather
from src.utils.errors import (
    CompositionError,
    ConfigurationError,
    DimensionMismatchError,
    DocumentNotFoundError,
    EmbeddingError,
    ExtractionError,
    LLMError,
    PagewiseError,
    StorageError,
    ValidationError,
)
from src.utils.logging import configure_logging, get_logger
from src.utils.similarity import cosine_similarity

__all__ = [
    "CompositionError",
    "ConfigurationError",
    "DimensionMismatchError",
    "DocumentNotFoundError",
    "EmbeddingError",
    "ExtractionError",
    "LLMError",
    "PagewiseError",
    "StorageError",
    "ValidationError",
    "bounded_gather",
    "configure_logging",
    "cosine_similarity",
    "get_logger",
]
