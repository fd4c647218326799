"""Ingestion pipeline: PDF bytes → stored pages + document metadata.

Sequence:
    1. Extract   -- PDFTextExtractor splits the PDF into pages
    2. Embed     -- every non-blank page is embedded, several at a time
    3. Store     -- all pages are written in one page-store transaction
    4. Describe  -- MetadataGenerator derives and stores title/summary/keywords

All-or-nothing: an extraction failure or any single page's embedding
failure aborts before step 3, so a document never exists with missing
pages.  Metadata (step 4) is best effort.
"""

from __future__ import annotations

import asyncio
import secrets
import time
import weakref
from pathlib import PurePath
from typing import TYPE_CHECKING

import structlog

from src.models.document import ExtractedPage, IngestionResult, Page
from src.utils.concurrency import bounded_gather
from src.utils.logging import get_logger

if TYPE_CHECKING:
    from src.interfaces.embedding_provider import IEmbeddingProvider
    from src.interfaces.page_store import IPageStore
    from src.services.metadata_generator import MetadataGenerator
    from src.services.text_extractor import PDFTextExtractor


def generate_document_id(filename: str | None = None) -> str:
    """Return a unique filename-like id, e.g. ``1760870400000-482913377.pdf``.

    The extension of *filename* is kept (``.pdf`` when absent) so the id can
    double as the stored upload's file name.
    """
    suffix = PurePath(filename).suffix.lower() if filename else ""
    return f"{int(time.time() * 1000)}-{secrets.randbelow(10**9)}{suffix or '.pdf'}"


class IngestionOrchestrator:
    """Runs the ingestion pipeline for one uploaded document at a time.

    Concurrent ingestions of *different* documents run in parallel.
    Ingestions of the *same* document id are serialised, and each run
    replaces the pages stored by the previous one.
    """

    def __init__(
        self,
        extractor: PDFTextExtractor,
        embedding_provider: IEmbeddingProvider,
        page_store: IPageStore,
        metadata_generator: MetadataGenerator,
        embedding_concurrency: int = 4,
    ) -> None:
        self._extractor = extractor
        self._embedding_provider = embedding_provider
        self._page_store = page_store
        self._metadata_generator = metadata_generator
        self._embedding_concurrency = embedding_concurrency
        self._document_locks: weakref.WeakValueDictionary[str, asyncio.Lock] = (
            weakref.WeakValueDictionary()
        )
        self._logger: structlog.BoundLogger = get_logger(__name__)

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    async def ingest(
        self,
        data: bytes,
        *,
        filename: str | None = None,
        document_id: str | None = None,
    ) -> IngestionResult:
        """Ingest the PDF in *data*.

        Parameters
        ----------
        data:
            Raw PDF bytes.
        filename:
            Original upload name; stored for display and used for the
            generated id's extension.
        document_id:
            Explicit id to (re-)ingest under.  Generated when omitted.

        Raises
        ------
        ExtractionError
            The bytes are not a readable PDF.  Nothing is stored.
        EmbeddingError
            Any page failed to embed.  Nothing is stored.
        """
        document_id = document_id or generate_document_id(filename)
        lock = self._document_locks.setdefault(document_id, asyncio.Lock())

        async with lock:
            log = self._logger.bind(document_id=document_id)

            # PyMuPDF is synchronous; keep it off the event loop.
            extracted = await asyncio.to_thread(self._extractor.extract, data)
            log.info("ingestion_extracted", pages=len(extracted))

            pages = await self._embed_pages(document_id, extracted)

            # Single transaction: earlier pages of this id are dropped with it.
            await self._page_store.put_document_pages(
                document_id,
                pages,
                source_filename=filename,
                replace=True,
            )

            # Best effort: None when the LLM or the store fails.
            metadata = await self._metadata_generator.generate(document_id, extracted)

            log.info(
                "ingestion_complete",
                pages=len(pages),
                has_metadata=metadata is not None,
            )

        return IngestionResult(
            document_id=document_id,
            title=metadata.title if metadata else None,
            summary=metadata.summary if metadata else None,
            keywords=list(metadata.keywords) if metadata else [],
            page_count=len(pages),
        )

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    async def _embed_pages(
        self,
        document_id: str,
        extracted: list[ExtractedPage],
    ) -> list[Page]:
        """Embed every page; the first failure cancels the rest and propagates.

        Blank pages are not sent to the provider (it rejects empty input).
        They are stored with an empty embedding, which the ranker scores as 0.
        """
        to_embed = [p for p in extracted if p.text]
        vectors = await bounded_gather(
            [self._embedding_provider.embed_single(p.text) for p in to_embed],
            limit=self._embedding_concurrency,
        )
        by_number = {p.page_number: v for p, v in zip(to_embed, vectors)}

        return [
            Page(
                document_id=document_id,
                page_number=p.page_number,
                text=p.text,
                embedding=by_number.get(p.page_number, []),
            )
            for p in extracted
        ]
