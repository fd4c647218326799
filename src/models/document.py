"""Document, page, and retrieval data models.

Defines Pydantic v2 models for everything that flows through the ingestion
and query pipelines.  All models use frozen config so a page or ranking
result cannot be mutated after it is produced.

Lifecycle:
    1. EXTRACTION: the PDF is split into :class:`ExtractedPage` values,
       one per source page, including pages with no text.
    2. STORAGE: each extracted page gains an embedding and is persisted as
       a :class:`Page` owned by a :class:`Document`.
    3. RETRIEVAL: a question embedding is scored against every stored page,
       producing :class:`RankedPage` values that are never persisted.
    4. GENERATION: relevant pages feed the answer prompt; the outcome is an
       :class:`AnswerResult`.
"""

from __future__ import annotations

from datetime import datetime
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field


class ExtractedPage(BaseModel):
    """One page of text as read from the PDF, before embedding."""

    model_config = ConfigDict(frozen=True)

    page_number: int = Field(ge=1, description="1-based page number matching the source PDF.")
    text: str = Field(default="", description="Extracted text; empty when the page has none.")


class Page(BaseModel):
    """A stored page: text plus its embedding vector."""

    model_config = ConfigDict(frozen=True)

    document_id: str
    page_number: int = Field(ge=1)
    text: str = ""
    embedding: list[float] = Field(default_factory=list)


class RankedPage(BaseModel):
    """A page scored against a question.  Derived per query, not persisted."""

    model_config = ConfigDict(frozen=True)

    page_number: int = Field(ge=1)
    text: str = ""
    similarity: float = Field(ge=-1.0, le=1.0)


class DocumentMetadata(BaseModel):
    """Human-readable title, summary, and keywords generated for a document."""

    model_config = ConfigDict(frozen=True)

    title: str | None = None
    summary: str | None = None
    keywords: list[str] = Field(default_factory=list)


class Document(BaseModel):
    """A stored document.  Metadata fields stay empty when generation failed."""

    model_config = ConfigDict(frozen=True)

    document_id: str
    title: str | None = None
    summary: str | None = None
    keywords: list[str] = Field(default_factory=list)
    source_filename: str | None = None
    page_count: int = Field(default=0, ge=0)
    created_at: datetime | None = None


# ---------------------------------------------------------------------------
# Metadata parse outcome -- a tagged union instead of exception control flow.
# ---------------------------------------------------------------------------
class ParsedMetadata(BaseModel):
    """Model output that parsed into usable metadata."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["parsed"] = "parsed"
    metadata: DocumentMetadata


class UnparsableMetadata(BaseModel):
    """Model output that could not be turned into metadata."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["unparsable"] = "unparsable"
    reason: str
    raw_preview: str = ""


MetadataParseResult = ParsedMetadata | UnparsableMetadata


# ---------------------------------------------------------------------------
# Pipeline results
# ---------------------------------------------------------------------------
class IngestionResult(BaseModel):
    """Outcome of ingesting one PDF."""

    model_config = ConfigDict(frozen=True)

    document_id: str
    title: str | None = None
    summary: str | None = None
    keywords: list[str] = Field(default_factory=list)
    page_count: int = Field(default=0, ge=0)


class AnswerResult(BaseModel):
    """Outcome of answering one question about one document."""

    model_config = ConfigDict(frozen=True)

    document_id: str
    question: str
    answer_text: str
    relevant_pages: list[int] = Field(
        default_factory=list,
        description="Page numbers that passed the relevance threshold, best first.",
    )
