"""Abstract base class for document/page persistence.

The page store is the only writer of persisted page and document records.
It is constructed once at startup and handed to the orchestrators, so
business logic never reaches for a global database handle.
"""

from __future__ import annotations

from abc import ABC, abstractmethod

from src.models.document import Document, Page


class IPageStore(ABC):
    """Contract for storing per-page text, embeddings, and document metadata.

    All operations are async to support network-backed stores.  Writes that
    touch several records for one document happen atomically.
    """

    @abstractmethod
    async def initialize(self) -> None:
        """Create tables/indices if they don't exist.  Called at startup."""

    @abstractmethod
    async def put_document_pages(
        self,
        document_id: str,
        pages: list[Page],
        *,
        source_filename: str | None = None,
        replace: bool = False,
    ) -> None:
        """Persist a batch of pages for *document_id* in one transaction.

        Parameters
        ----------
        document_id:
            Owning document.  A document row without metadata is created
            when none exists yet.
        pages:
            Pages with their embeddings.  Every page must belong to
            *document_id*.
        source_filename:
            Original upload name, kept for display.
        replace:
            When ``False`` (default) the batch is appended, so calling twice
            keeps both batches.  When ``True`` any previously stored pages
            of the document are removed, and its title, summary, and
            keywords cleared, in the same transaction.
        """

    @abstractmethod
    async def get_pages(self, document_id: str) -> list[Page]:
        """Return every page of *document_id*, ordered by page number.

        Unknown ids yield an empty list, not an error.
        """

    @abstractmethod
    async def put_document_metadata(
        self,
        document_id: str,
        title: str | None,
        summary: str | None,
        keywords: list[str],
    ) -> None:
        """Store (or overwrite) the title, summary, and keywords of a document."""

    @abstractmethod
    async def get_document(self, document_id: str) -> Document | None:
        """Return the document record, or ``None`` if unknown."""

    @abstractmethod
    async def list_documents(self) -> list[Document]:
        """Return every stored document, newest first."""

    @abstractmethod
    async def delete_document(self, document_id: str) -> bool:
        """Remove all pages and the metadata of *document_id* atomically.

        Returns
        -------
        bool
            ``True`` if any record existed and was removed.
        """

    @abstractmethod
    def get_provider_name(self) -> str:
        """Return a human-readable identifier for this store."""
