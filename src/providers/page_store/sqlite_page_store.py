"""SQLite-backed page store.

Persists per-page text and embeddings plus per-document metadata to a local
SQLite database at ``data/pagewise.db``.  Uses ``aiosqlite`` for async I/O.

Embeddings are serialised as JSON arrays.  Every multi-record write runs in
a single transaction, so a document's pages and its metadata row are
removed together or not at all, and a reader never observes a
half-written ingestion batch.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

import aiosqlite
import structlog

from src.interfaces.page_store import IPageStore
from src.models.document import Document, Page
from src.utils.errors import StorageError

logger = structlog.get_logger(logger_name=__name__)

_DEFAULT_DB_PATH = Path("data/pagewise.db")

# Seconds a connection waits on a locked database before failing.
_BUSY_TIMEOUT = 30.0

_CREATE_DOCUMENTS_SQL = """\
CREATE TABLE IF NOT EXISTS documents (
    document_id      TEXT    PRIMARY KEY,
    title            TEXT,
    summary          TEXT,
    keywords         TEXT    NOT NULL DEFAULT '[]',
    source_filename  TEXT,
    page_count       INTEGER NOT NULL DEFAULT 0,
    created_at       TEXT    NOT NULL DEFAULT (strftime('%Y-%m-%dT%H:%M:%fZ', 'now'))
);
"""

_CREATE_PAGES_SQL = """\
CREATE TABLE IF NOT EXISTS pages (
    id           INTEGER PRIMARY KEY AUTOINCREMENT,
    document_id  TEXT    NOT NULL,
    page_number  INTEGER NOT NULL,
    text         TEXT    NOT NULL DEFAULT '',
    embedding    TEXT    NOT NULL
);
"""

_CREATE_INDICES_SQL = [
    "CREATE INDEX IF NOT EXISTS idx_pages_document ON pages(document_id, page_number);",
    "CREATE INDEX IF NOT EXISTS idx_documents_created ON documents(created_at);",
]

_INSERT_PAGE_SQL = """\
INSERT INTO pages (document_id, page_number, text, embedding)
VALUES (?, ?, ?, ?);
"""

_REGISTER_DOCUMENT_SQL = """\
INSERT INTO documents (document_id, source_filename, page_count)
VALUES (?, ?, (SELECT COUNT(*) FROM pages WHERE document_id = ?))
ON CONFLICT(document_id)
DO UPDATE SET page_count      = excluded.page_count,
              source_filename = COALESCE(excluded.source_filename, documents.source_filename);
"""

# A replaced document is a new version of the file; metadata generated for
# the old pages no longer describes it.
_RESET_METADATA_SQL = """\
UPDATE documents SET title = NULL, summary = NULL, keywords = '[]'
WHERE document_id = ?;
"""

_UPSERT_METADATA_SQL = """\
INSERT INTO documents (document_id, title, summary, keywords)
VALUES (?, ?, ?, ?)
ON CONFLICT(document_id)
DO UPDATE SET title    = excluded.title,
              summary  = excluded.summary,
              keywords = excluded.keywords;
"""

_SELECT_DOCUMENT_COLUMNS = (
    "SELECT document_id, title, summary, keywords, source_filename, page_count, created_at "
    "FROM documents"
)


class SQLitePageStore(IPageStore):
    """SQLite persistence for pages and document metadata."""

    def __init__(self, db_path: str | Path = _DEFAULT_DB_PATH) -> None:
        self._db_path = Path(db_path)

    async def initialize(self) -> None:
        """Create the tables and indices if they don't exist."""
        self._db_path.parent.mkdir(parents=True, exist_ok=True)
        try:
            async with self._connect() as db:
                await db.execute(_CREATE_DOCUMENTS_SQL)
                await db.execute(_CREATE_PAGES_SQL)
                for idx_sql in _CREATE_INDICES_SQL:
                    await db.execute(idx_sql)
                await db.commit()
        except aiosqlite.Error as exc:
            raise self._storage_error("initialize", exc) from exc
        logger.info("page_store_initialized", path=str(self._db_path))

    # ------------------------------------------------------------------
    # Pages
    # ------------------------------------------------------------------

    async def put_document_pages(
        self,
        document_id: str,
        pages: list[Page],
        *,
        source_filename: str | None = None,
        replace: bool = False,
    ) -> None:
        """Insert *pages* and register the document in one transaction."""
        foreign = [p.page_number for p in pages if p.document_id != document_id]
        if foreign:
            msg = f"Pages {foreign} do not belong to document {document_id!r}"
            raise ValueError(msg)

        rows = [
            (document_id, p.page_number, p.text, json.dumps(p.embedding))
            for p in pages
        ]
        try:
            async with self._connect() as db:
                if replace:
                    await db.execute("DELETE FROM pages WHERE document_id = ?", (document_id,))
                    await db.execute(_RESET_METADATA_SQL, (document_id,))
                await db.executemany(_INSERT_PAGE_SQL, rows)
                await db.execute(
                    _REGISTER_DOCUMENT_SQL,
                    (document_id, source_filename, document_id),
                )
                await db.commit()
        except aiosqlite.Error as exc:
            raise self._storage_error("put_document_pages", exc) from exc

        logger.info(
            "document_pages_stored",
            document_id=document_id,
            pages=len(rows),
            replace=replace,
        )

    async def get_pages(self, document_id: str) -> list[Page]:
        """Return the pages of *document_id* ordered by page number."""
        try:
            async with self._connect() as db:
                db.row_factory = aiosqlite.Row
                cursor = await db.execute(
                    "SELECT document_id, page_number, text, embedding FROM pages "
                    "WHERE document_id = ? ORDER BY page_number, id",
                    (document_id,),
                )
                rows = await cursor.fetchall()
        except aiosqlite.Error as exc:
            raise self._storage_error("get_pages", exc) from exc

        return [
            Page(
                document_id=row["document_id"],
                page_number=row["page_number"],
                text=row["text"],
                embedding=json.loads(row["embedding"]),
            )
            for row in rows
        ]

    # ------------------------------------------------------------------
    # Documents
    # ------------------------------------------------------------------

    async def put_document_metadata(
        self,
        document_id: str,
        title: str | None,
        summary: str | None,
        keywords: list[str],
    ) -> None:
        try:
            async with self._connect() as db:
                await db.execute(
                    _UPSERT_METADATA_SQL,
                    (document_id, title, summary, json.dumps(list(keywords))),
                )
                await db.commit()
        except aiosqlite.Error as exc:
            raise self._storage_error("put_document_metadata", exc) from exc

        logger.info("document_metadata_stored", document_id=document_id, title=title)

    async def get_document(self, document_id: str) -> Document | None:
        try:
            async with self._connect() as db:
                db.row_factory = aiosqlite.Row
                cursor = await db.execute(
                    f"{_SELECT_DOCUMENT_COLUMNS} WHERE document_id = ?",
                    (document_id,),
                )
                row = await cursor.fetchone()
        except aiosqlite.Error as exc:
            raise self._storage_error("get_document", exc) from exc
        return self._row_to_document(dict(row)) if row else None

    async def list_documents(self) -> list[Document]:
        try:
            async with self._connect() as db:
                db.row_factory = aiosqlite.Row
                cursor = await db.execute(
                    f"{_SELECT_DOCUMENT_COLUMNS} ORDER BY created_at DESC, rowid DESC"
                )
                rows = await cursor.fetchall()
        except aiosqlite.Error as exc:
            raise self._storage_error("list_documents", exc) from exc
        return [self._row_to_document(dict(r)) for r in rows]

    async def delete_document(self, document_id: str) -> bool:
        """Delete pages and metadata of *document_id* in one transaction."""
        try:
            async with self._connect() as db:
                pages_cursor = await db.execute(
                    "DELETE FROM pages WHERE document_id = ?", (document_id,)
                )
                doc_cursor = await db.execute(
                    "DELETE FROM documents WHERE document_id = ?", (document_id,)
                )
                await db.commit()
                pages_deleted = pages_cursor.rowcount
                documents_deleted = doc_cursor.rowcount
        except aiosqlite.Error as exc:
            raise self._storage_error("delete_document", exc) from exc

        logger.info(
            "document_deleted",
            document_id=document_id,
            pages=pages_deleted,
            documents=documents_deleted,
        )
        return (pages_deleted + documents_deleted) > 0

    def get_provider_name(self) -> str:
        """Return a human-readable identifier for this provider."""
        return "sqlite_page_store"

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _connect(self) -> aiosqlite.Connection:
        return aiosqlite.connect(str(self._db_path), timeout=_BUSY_TIMEOUT)

    def _storage_error(self, operation: str, exc: Exception) -> StorageError:
        logger.error("page_store_error", operation=operation, error=str(exc))
        return StorageError(
            message=f"SQLite {operation} failed: {exc}",
            provider_name=self.get_provider_name(),
        )

    @staticmethod
    def _row_to_document(row: dict[str, Any]) -> Document:
        return Document(
            document_id=row["document_id"],
            title=row["title"],
            summary=row["summary"],
            keywords=json.loads(row["keywords"] or "[]"),
            source_filename=row["source_filename"],
            page_count=row["page_count"],
            created_at=row["created_at"],
        )
