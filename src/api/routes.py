"""FastAPI routes for document upload, listing, deletion, and chat.

# ─── API ROUTE MAP ─────────────────────────────────────────────────────
#
# Endpoint                              Method  Description
# ─────────────────────────────────────────────────────────────────────
# /api/v1/documents                     POST    Upload PDF → extract → embed → store
# /api/v1/documents                     GET     List documents with metadata
# /api/v1/documents/{document_id}       DELETE  Delete pages, metadata, and file
# /api/v1/chat                          POST    Ask a question about one document
# /api/v1/health                        GET     Health check + provider names
#
# Dependencies are read from ``app.state`` (populated by the lifespan in
# main.py) through ``Annotated[T, Depends(helper)]`` aliases, so tests can
# build an app with mocked orchestrators.
# ──────────────────────────────────────────────────────────────────────
"""

from __future__ import annotations

import asyncio
from pathlib import Path
from typing import Annotated, Any

import structlog
from fastapi import APIRouter, Depends, HTTPException, Request, UploadFile

from src.api.schemas import (
    ChatRequest,
    ChatResponse,
    DeleteResponse,
    DocumentListResponse,
    DocumentResponse,
    HealthResponse,
    UploadResponse,
)
from src.config.settings import Settings
from src.interfaces.page_store import IPageStore
from src.pipeline.ingestion_orchestrator import IngestionOrchestrator, generate_document_id
from src.pipeline.query_orchestrator import QueryOrchestrator
from src.utils.errors import DocumentNotFoundError
from src.utils.logging import get_logger

_logger: structlog.BoundLogger = get_logger(__name__)

router = APIRouter(prefix="/api/v1")

_ALLOWED_CONTENT_TYPES = frozenset({"application/pdf", "application/x-pdf"})

# Uploads are read in 64 KB increments so oversized files are rejected
# without buffering the whole body.
_UPLOAD_CHUNK_SIZE = 64 * 1024

_VERSION = "0.1.0"


# ---------------------------------------------------------------------------
# Dependency helpers
# ---------------------------------------------------------------------------


def _get_settings(request: Request) -> Settings:
    return request.app.state.settings


def _get_page_store(request: Request) -> IPageStore:
    return request.app.state.page_store


def _get_ingestion(request: Request) -> IngestionOrchestrator:
    return request.app.state.ingestion_orchestrator


def _get_query(request: Request) -> QueryOrchestrator:
    return request.app.state.query_orchestrator


SettingsDep = Annotated[Settings, Depends(_get_settings)]
PageStoreDep = Annotated[IPageStore, Depends(_get_page_store)]
IngestionDep = Annotated[IngestionOrchestrator, Depends(_get_ingestion)]
QueryDep = Annotated[QueryOrchestrator, Depends(_get_query)]


def _upload_path(settings: Settings, document_id: str) -> Path:
    # Ids are generated server-side, but never let one escape upload_dir.
    return Path(settings.upload_dir) / Path(document_id).name


# ---------------------------------------------------------------------------
# Documents
# ---------------------------------------------------------------------------


@router.post("/documents", response_model=UploadResponse)
async def upload_document(
    pdf: UploadFile,
    settings: SettingsDep,
    ingestion: IngestionDep,
) -> UploadResponse:
    """Accept a PDF upload, ingest it, and keep the file for the viewer."""
    content_type = (pdf.content_type or "").lower()
    is_pdf_name = (pdf.filename or "").lower().endswith(".pdf")
    if content_type not in _ALLOWED_CONTENT_TYPES and not (
        content_type in ("", "application/octet-stream") and is_pdf_name
    ):
        raise HTTPException(
            status_code=400,
            detail=f"Unsupported file type: {content_type or 'unknown'}. Upload a PDF.",
        )

    chunks: list[bytes] = []
    total_size = 0
    while True:
        chunk = await pdf.read(_UPLOAD_CHUNK_SIZE)
        if not chunk:
            break
        total_size += len(chunk)
        if total_size > settings.max_upload_bytes:
            raise HTTPException(
                status_code=413,
                detail=f"File too large. Maximum: {settings.max_upload_bytes} bytes.",
            )
        chunks.append(chunk)
    if total_size == 0:
        raise HTTPException(status_code=400, detail="No file uploaded")
    data = b"".join(chunks)
    del chunks

    document_id = generate_document_id(pdf.filename)
    result = await ingestion.ingest(data, filename=pdf.filename, document_id=document_id)

    path = _upload_path(settings, result.document_id)
    path.parent.mkdir(parents=True, exist_ok=True)
    await asyncio.to_thread(path.write_bytes, data)

    _logger.info(
        "document_uploaded",
        document_id=result.document_id,
        filename=pdf.filename,
        size=total_size,
        pages=result.page_count,
    )
    return UploadResponse.from_result(result)


@router.get("/documents", response_model=DocumentListResponse)
async def list_documents(page_store: PageStoreDep) -> DocumentListResponse:
    documents = await page_store.list_documents()
    return DocumentListResponse(
        documents=[DocumentResponse.from_document(d) for d in documents],
        total=len(documents),
    )


@router.delete("/documents/{document_id}", response_model=DeleteResponse)
async def delete_document(
    document_id: str,
    settings: SettingsDep,
    page_store: PageStoreDep,
) -> DeleteResponse:
    """Delete a document's pages and metadata, then its stored file."""
    deleted = await page_store.delete_document(document_id)
    if not deleted:
        raise DocumentNotFoundError(message=f"Document {document_id!r} not found")

    path = _upload_path(settings, document_id)
    await asyncio.to_thread(path.unlink, missing_ok=True)
    return DeleteResponse(document_id=document_id)


# ---------------------------------------------------------------------------
# Chat
# ---------------------------------------------------------------------------


@router.post("/chat", response_model=ChatResponse)
async def chat(body: ChatRequest, query: QueryDep) -> ChatResponse:
    """Answer a question about one document with ``[Page N]`` citations."""
    result = await query.query(body.document_id, body.question)
    return ChatResponse(
        answer=result.answer_text,
        document_id=result.document_id,
        relevant_pages=result.relevant_pages,
    )


# ---------------------------------------------------------------------------
# Health
# ---------------------------------------------------------------------------


@router.get("/health", response_model=HealthResponse)
async def health(request: Request) -> HealthResponse:
    registry: dict[str, Any] = getattr(request.app.state, "provider_registry", {})
    return HealthResponse(status="ok", version=_VERSION, providers=registry)
