"""Pydantic request/response schemas for the pagewise API.

Request schemas end with "Request", response schemas with "Response".
Chat request fields are optional on purpose: missing values are reported by
the query pipeline as a ``ValidationError`` (HTTP 400) rather than by
FastAPI's generic 422 body validation.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any

from pydantic import BaseModel, Field

from src.models.document import Document, IngestionResult


class DocumentResponse(BaseModel):
    """One stored document as shown in the document list."""

    document_id: str
    title: str | None = None
    summary: str | None = None
    keywords: list[str] = Field(default_factory=list)
    source_filename: str | None = None
    page_count: int = 0
    created_at: datetime | None = None
    url: str

    @classmethod
    def from_document(cls, document: Document) -> DocumentResponse:
        return cls(**document.model_dump(), url=f"/uploads/{document.document_id}")


class DocumentListResponse(BaseModel):
    documents: list[DocumentResponse] = Field(default_factory=list)
    total: int = 0


class UploadResponse(BaseModel):
    """Returned after a PDF has been stored and ingested."""

    message: str = "PDF uploaded and text extracted"
    document_id: str
    title: str | None = None
    summary: str | None = None
    keywords: list[str] = Field(default_factory=list)
    page_count: int = 0
    url: str

    @classmethod
    def from_result(cls, result: IngestionResult) -> UploadResponse:
        return cls(**result.model_dump(), url=f"/uploads/{result.document_id}")


class ChatRequest(BaseModel):
    """A question about one document."""

    question: str | None = Field(default=None, max_length=4000)
    document_id: str | None = None


class ChatResponse(BaseModel):
    answer: str
    document_id: str
    relevant_pages: list[int] = Field(default_factory=list)


class DeleteResponse(BaseModel):
    status: str = "ok"
    document_id: str


class HealthResponse(BaseModel):
    """Application health check response."""

    status: str
    version: str
    providers: dict[str, Any]


class ErrorResponse(BaseModel):
    """Standard error response body."""

    error: str
    detail: str | None = None
