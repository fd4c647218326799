"""Shared pytest fixtures for the pagewise test suite."""

from __future__ import annotations

from pathlib import Path
from typing import Callable
from unittest.mock import AsyncMock, MagicMock

import fitz
import pytest
import structlog

from src.config.settings import Settings
from src.interfaces.embedding_provider import IEmbeddingProvider
from src.interfaces.llm_provider import ILLMProvider
from src.providers.page_store.sqlite_page_store import SQLitePageStore
from src.utils.errors import EmbeddingError
from src.utils.logging import configure_logging


# ---------------------------------------------------------------------------
# Logging
# ---------------------------------------------------------------------------


@pytest.fixture(autouse=True, scope="session")
def _quiet_logging() -> None:
    """Warnings and above only; loggers re-resolve stdout on every call."""
    configure_logging(log_level="WARNING")
    structlog.configure(cache_logger_on_first_use=False)


# ---------------------------------------------------------------------------
# Settings
# ---------------------------------------------------------------------------


def make_settings(**overrides) -> Settings:
    """Build a Settings instance that never reads the developer's .env."""
    defaults = {
        "openai_api_key": "sk-test",
        "openai_base_url": "",
        "openai_text_model": "",
        "openai_embedding_model": "",
        "ollama_base_url": "http://localhost:11434",
    }
    defaults.update(overrides)
    return Settings(_env_file=None, **defaults)


@pytest.fixture
def settings(tmp_path: Path) -> Settings:
    return make_settings(
        database_path=str(tmp_path / "pagewise.db"),
        upload_dir=str(tmp_path / "uploads"),
    )


# ---------------------------------------------------------------------------
# PDF fixtures
# ---------------------------------------------------------------------------


def build_pdf(page_texts: list[str]) -> bytes:
    """Create an in-memory PDF with one page per entry of *page_texts*."""
    doc = fitz.open()
    for text in page_texts:
        page = doc.new_page()
        if text:
            page.insert_text((72, 72), text)
    data = doc.tobytes()
    doc.close()
    return data


@pytest.fixture
def pdf_factory() -> Callable[[list[str]], bytes]:
    return build_pdf


@pytest.fixture
def two_page_pdf() -> bytes:
    """Page 1 mentions Alice, page 2 mentions Bob."""
    return build_pdf(["Alice", "Bob"])


# ---------------------------------------------------------------------------
# Provider doubles
# ---------------------------------------------------------------------------


class StubEmbeddingProvider(IEmbeddingProvider):
    """Deterministic embeddings looked up from a text -> vector table.

    Texts listed in *fail_on* raise ``EmbeddingError`` the way a provider
    outage would.  Every call is recorded in ``calls``.
    """

    def __init__(
        self,
        vectors: dict[str, list[float]] | None = None,
        default: list[float] | None = None,
        fail_on: set[str] | None = None,
        dimension: int = 3,
    ) -> None:
        self._vectors = vectors or {}
        self._default = default or [0.0, 0.0, 1.0]
        self._fail_on = fail_on or set()
        self._dimension = dimension
        self.calls: list[str] = []

    async def embed(self, texts: list[str]) -> list[list[float]]:
        return [await self.embed_single(t) for t in texts]

    async def embed_single(self, text: str) -> list[float]:
        self.calls.append(text)
        if not text.strip():
            raise EmbeddingError(message="Cannot embed empty text", provider_name="stub")
        if text in self._fail_on:
            raise EmbeddingError(message=f"upstream failure for {text!r}", provider_name="stub")
        return list(self._vectors.get(text, self._default))

    def get_dimension(self) -> int:
        return self._dimension

    def get_provider_name(self) -> str:
        return "stub_embedding"

    def is_available(self) -> bool:
        return True


@pytest.fixture
def embedding_factory() -> type[StubEmbeddingProvider]:
    return StubEmbeddingProvider


@pytest.fixture
def alice_bob_embeddings() -> StubEmbeddingProvider:
    """Orthogonal vectors for the two-page fixture and matching questions."""
    return StubEmbeddingProvider(
        vectors={
            "Alice": [1.0, 0.0, 0.0],
            "Bob": [0.0, 1.0, 0.0],
            "Who is Alice?": [1.0, 0.0, 0.0],
            "What about Carol?": [0.0, 0.0, 1.0],
        }
    )


@pytest.fixture
def mock_llm() -> MagicMock:
    """An LLM provider whose ``complete`` returns a fixed answer."""
    llm = MagicMock(spec=ILLMProvider)
    llm.complete = AsyncMock(return_value="Alice appears on the first page [Page 1].")
    llm.get_provider_name.return_value = "mock_llm"
    llm.is_available.return_value = True
    return llm


# ---------------------------------------------------------------------------
# Page store
# ---------------------------------------------------------------------------


@pytest.fixture
async def page_store(tmp_path: Path) -> SQLitePageStore:
    """Initialised SQLite page store in a temp directory."""
    store = SQLitePageStore(db_path=tmp_path / "pages.db")
    await store.initialize()
    return store
