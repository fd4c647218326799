"""Unit tests for the pagewise exception hierarchy."""

from __future__ import annotations

import pytest

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


@pytest.mark.parametrize(
    ("error_cls", "status_code"),
    [
        (ValidationError, 400),
        (DocumentNotFoundError, 404),
        (ExtractionError, 422),
        (EmbeddingError, 502),
        (CompositionError, 502),
        (LLMError, 502),
        (DimensionMismatchError, 500),
        (StorageError, 500),
        (ConfigurationError, 500),
    ],
)
def test_status_codes(error_cls: type[PagewiseError], status_code: int) -> None:
    err = error_cls(message="x")
    assert isinstance(err, PagewiseError)
    assert err.status_code == status_code


def test_str_prefixes_provider_name() -> None:
    err = EmbeddingError(message="Rate limit exceeded", provider_name="openai_embedding")
    assert str(err) == "[openai_embedding] Rate limit exceeded"
    assert err.message == "Rate limit exceeded"
    assert err.provider_name == "openai_embedding"


def test_str_without_provider() -> None:
    assert str(ValidationError(message="Missing required fields: question")) == (
        "Missing required fields: question"
    )
