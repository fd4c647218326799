"""Custom exception hierarchy for pagewise.

All application exceptions inherit from :class:`PagewiseError`, which
carries an optional ``provider_name`` so error handlers can identify which
external service (e.g. "openai", "ollama", "sqlite") caused the failure.

The hierarchy follows the two pipelines:

    PagewiseError  (base -- catch-all for any pagewise error)
    +-- ValidationError          (missing request fields, caught before I/O)
    +-- ExtractionError          (unreadable / malformed PDF bytes)
    +-- EmbeddingError           (embedding provider failure)
    +-- DimensionMismatchError   (stored vectors disagree on length)
    +-- CompositionError         (answer generation failure)
    +-- LLMError                 (any generative-text API call failure)
    +-- StorageError             (page store read/write failure)
    +-- DocumentNotFoundError    (unknown document id on delete)
    +-- ConfigurationError       (startup / missing config)

Each class declares the HTTP ``status_code`` the API middleware uses when
the error escapes a route handler.
"""


class PagewiseError(Exception):
    """Base exception for all pagewise errors.

    Every subclass carries a human-readable ``message`` and an optional
    ``provider_name`` identifying which external service triggered the
    error.  The ``__str__`` method prefixes the provider name in brackets
    for structured log output, e.g. ``[openai] Rate limit exceeded``.
    """

    status_code: int = 500

    def __init__(
        self,
        message: str = "An unexpected error occurred",
        provider_name: str | None = None,
    ) -> None:
        self._message = message
        self._provider_name = provider_name
        super().__init__(self._message)

    @property
    def message(self) -> str:
        return self._message

    @property
    def provider_name(self) -> str | None:
        return self._provider_name

    def __str__(self) -> str:
        if self._provider_name:
            return f"[{self._provider_name}] {self._message}"
        return self._message


# ---------------------------------------------------------------------------
# Request validation
# ---------------------------------------------------------------------------

class ValidationError(PagewiseError):
    """Raised when a required input (question, document id) is missing."""

    status_code = 400

    def __init__(
        self,
        message: str = "Missing required fields",
        provider_name: str | None = None,
    ) -> None:
        super().__init__(message=message, provider_name=provider_name)


class DocumentNotFoundError(PagewiseError):
    """Raised when an operation targets a document id the store does not know."""

    status_code = 404

    def __init__(
        self,
        message: str = "Document not found",
        provider_name: str | None = None,
    ) -> None:
        super().__init__(message=message, provider_name=provider_name)


# ---------------------------------------------------------------------------
# Ingestion errors
# ---------------------------------------------------------------------------

class ExtractionError(PagewiseError):
    """Raised when PDF bytes cannot be opened or their text cannot be read.

    Fatal for the ingestion request; nothing is written to the store.
    """

    status_code = 422

    def __init__(
        self,
        message: str = "Failed to extract text from PDF",
        provider_name: str | None = None,
    ) -> None:
        super().__init__(message=message, provider_name=provider_name)


class EmbeddingError(PagewiseError):
    """Raised when the embedding provider fails or rejects its input.

    Never recovered by substituting a zero vector.
    """

    status_code = 502

    def __init__(
        self,
        message: str = "Embedding generation failed",
        provider_name: str | None = None,
    ) -> None:
        super().__init__(message=message, provider_name=provider_name)


# ---------------------------------------------------------------------------
# Query errors
# ---------------------------------------------------------------------------

class DimensionMismatchError(PagewiseError):
    """Raised when two vectors of different length are compared.

    Indicates corrupted stored data or an embedding model change between
    ingestion and query.
    """

    def __init__(
        self,
        message: str = "Vectors must be the same length for cosine similarity",
        provider_name: str | None = None,
    ) -> None:
        super().__init__(message=message, provider_name=provider_name)


class CompositionError(PagewiseError):
    """Raised when the answer cannot be generated from the relevant pages."""

    status_code = 502

    def __init__(
        self,
        message: str = "Failed to compose an answer",
        provider_name: str | None = None,
    ) -> None:
        super().__init__(message=message, provider_name=provider_name)


# ---------------------------------------------------------------------------
# Provider / infrastructure errors
# ---------------------------------------------------------------------------

class LLMError(PagewiseError):
    """Raised when an LLM API call fails or returns an empty response."""

    status_code = 502

    def __init__(
        self,
        message: str = "LLM API call failed",
        provider_name: str | None = None,
    ) -> None:
        super().__init__(message=message, provider_name=provider_name)


class StorageError(PagewiseError):
    """Raised when the page store cannot read or write its records."""

    def __init__(
        self,
        message: str = "Page store operation failed",
        provider_name: str | None = None,
    ) -> None:
        super().__init__(message=message, provider_name=provider_name)


class ConfigurationError(PagewiseError):
    """Raised when configuration is invalid or missing at startup."""

    def __init__(
        self,
        message: str = "Invalid or missing configuration",
        provider_name: str | None = None,
    ) -> None:
        super().__init__(message=message, provider_name=provider_name)
