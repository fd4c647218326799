"""Unit tests for SQLitePageStore — pages, document metadata, atomic delete."""

from __future__ import annotations

from pathlib import Path

import pytest

from src.models.document import Page
from src.providers.page_store.sqlite_page_store import SQLitePageStore
from src.utils.errors import StorageError


def _page(document_id: str, number: int, text: str, embedding: list[float]) -> Page:
    return Page(document_id=document_id, page_number=number, text=text, embedding=embedding)


@pytest.fixture
async def store(tmp_path: Path) -> SQLitePageStore:
    provider = SQLitePageStore(db_path=tmp_path / "test_pages.db")
    await provider.initialize()
    return provider


class TestInitialize:
    @pytest.mark.asyncio
    async def test_creates_parent_directory(self, tmp_path: Path) -> None:
        provider = SQLitePageStore(db_path=tmp_path / "nested" / "dir" / "pages.db")
        await provider.initialize()
        assert (tmp_path / "nested" / "dir" / "pages.db").exists()

    @pytest.mark.asyncio
    async def test_is_idempotent(self, store: SQLitePageStore) -> None:
        await store.initialize()
        assert await store.list_documents() == []

    def test_provider_name(self, tmp_path: Path) -> None:
        assert SQLitePageStore(db_path=tmp_path / "pages.db").get_provider_name() == "sqlite_page_store"


class TestPages:
    @pytest.mark.asyncio
    async def test_round_trip_preserves_text_and_embedding(self, store: SQLitePageStore) -> None:
        await store.put_document_pages(
            "doc1",
            [
                _page("doc1", 1, "Alice", [0.1, 0.2, 0.3]),
                _page("doc1", 2, "Bob", [0.4, 0.5, 0.6]),
            ],
        )

        pages = await store.get_pages("doc1")
        assert [(p.page_number, p.text) for p in pages] == [(1, "Alice"), (2, "Bob")]
        assert pages[0].embedding == [0.1, 0.2, 0.3]
        assert pages[1].embedding == [0.4, 0.5, 0.6]

    @pytest.mark.asyncio
    async def test_pages_ordered_by_page_number(self, store: SQLitePageStore) -> None:
        await store.put_document_pages(
            "doc1",
            [_page("doc1", 3, "c", [1.0]), _page("doc1", 1, "a", [1.0]), _page("doc1", 2, "b", [1.0])],
        )
        assert [p.page_number for p in await store.get_pages("doc1")] == [1, 2, 3]

    @pytest.mark.asyncio
    async def test_unknown_document_has_no_pages(self, store: SQLitePageStore) -> None:
        assert await store.get_pages("missing") == []

    @pytest.mark.asyncio
    async def test_documents_are_isolated(self, store: SQLitePageStore) -> None:
        await store.put_document_pages("doc1", [_page("doc1", 1, "Alice", [1.0])])
        await store.put_document_pages("doc2", [_page("doc2", 1, "Bob", [1.0])])

        assert [p.text for p in await store.get_pages("doc1")] == ["Alice"]
        assert [p.text for p in await store.get_pages("doc2")] == ["Bob"]

    @pytest.mark.asyncio
    async def test_second_put_appends_by_default(self, store: SQLitePageStore) -> None:
        await store.put_document_pages("doc1", [_page("doc1", 1, "first", [1.0])])
        await store.put_document_pages("doc1", [_page("doc1", 1, "second", [1.0])])

        assert [p.text for p in await store.get_pages("doc1")] == ["first", "second"]

    @pytest.mark.asyncio
    async def test_replace_swaps_existing_pages(self, store: SQLitePageStore) -> None:
        await store.put_document_pages("doc1", [_page("doc1", 1, "old", [1.0])])
        await store.put_document_pages(
            "doc1",
            [_page("doc1", 1, "new", [1.0]), _page("doc1", 2, "more", [1.0])],
            replace=True,
        )

        assert [p.text for p in await store.get_pages("doc1")] == ["new", "more"]
        document = await store.get_document("doc1")
        assert document is not None
        assert document.page_count == 2

    @pytest.mark.asyncio
    async def test_foreign_page_rejected_and_nothing_written(
        self, store: SQLitePageStore
    ) -> None:
        with pytest.raises(ValueError, match="do not belong"):
            await store.put_document_pages(
                "doc1",
                [_page("doc1", 1, "mine", [1.0]), _page("doc2", 2, "theirs", [1.0])],
            )
        assert await store.get_pages("doc1") == []

    @pytest.mark.asyncio
    async def test_put_registers_document_without_metadata(
        self, store: SQLitePageStore
    ) -> None:
        await store.put_document_pages(
            "doc1",
            [_page("doc1", 1, "Alice", [1.0])],
            source_filename="report.pdf",
        )

        document = await store.get_document("doc1")
        assert document is not None
        assert document.title is None
        assert document.summary is None
        assert document.keywords == []
        assert document.source_filename == "report.pdf"
        assert document.page_count == 1
        assert document.created_at is not None


class TestDocumentMetadata:
    @pytest.mark.asyncio
    async def test_metadata_upsert(self, store: SQLitePageStore) -> None:
        await store.put_document_pages("doc1", [_page("doc1", 1, "Alice", [1.0])])
        await store.put_document_metadata(
            "doc1", title="Title A", summary="Summary A", keywords=["alice", "wonderland"]
        )
        await store.put_document_metadata(
            "doc1", title="Title B", summary=None, keywords=["bob"]
        )

        document = await store.get_document("doc1")
        assert document is not None
        assert document.title == "Title B"
        assert document.summary is None
        assert document.keywords == ["bob"]
        # Registration data survives a metadata update.
        assert document.page_count == 1

    @pytest.mark.asyncio
    async def test_replace_clears_metadata(self, store: SQLitePageStore) -> None:
        await store.put_document_pages("doc1", [_page("doc1", 1, "Alice", [1.0])])
        await store.put_document_metadata(
            "doc1", title="Old Title", summary="Old summary", keywords=["old"]
        )

        await store.put_document_pages(
            "doc1", [_page("doc1", 1, "Bob", [1.0])], replace=True
        )

        document = await store.get_document("doc1")
        assert document is not None
        assert document.title is None
        assert document.summary is None
        assert document.keywords == []

    @pytest.mark.asyncio
    async def test_append_keeps_metadata(self, store: SQLitePageStore) -> None:
        await store.put_document_pages("doc1", [_page("doc1", 1, "Alice", [1.0])])
        await store.put_document_metadata("doc1", title="Kept", summary=None, keywords=[])

        await store.put_document_pages("doc1", [_page("doc1", 2, "Bob", [1.0])])

        document = await store.get_document("doc1")
        assert document is not None
        assert document.title == "Kept"

    @pytest.mark.asyncio
    async def test_get_unknown_document(self, store: SQLitePageStore) -> None:
        assert await store.get_document("missing") is None

    @pytest.mark.asyncio
    async def test_list_documents(self, store: SQLitePageStore) -> None:
        await store.put_document_pages("doc1", [_page("doc1", 1, "Alice", [1.0])])
        await store.put_document_pages("doc2", [_page("doc2", 1, "Bob", [1.0])])
        await store.put_document_metadata("doc2", title="Bob's", summary=None, keywords=[])

        documents = await store.list_documents()
        assert {d.document_id for d in documents} == {"doc1", "doc2"}
        # Most recent first.
        assert documents[0].document_id == "doc2"


class TestDeleteDocument:
    @pytest.mark.asyncio
    async def test_delete_removes_pages_and_metadata(self, store: SQLitePageStore) -> None:
        await store.put_document_pages(
            "doc123",
            [_page("doc123", 1, "Alice", [1.0]), _page("doc123", 2, "Bob", [1.0])],
        )
        await store.put_document_metadata("doc123", title="T", summary="S", keywords=["k"])

        assert await store.delete_document("doc123") is True
        assert await store.get_pages("doc123") == []
        assert await store.get_document("doc123") is None

    @pytest.mark.asyncio
    async def test_delete_leaves_other_documents(self, store: SQLitePageStore) -> None:
        await store.put_document_pages("doc1", [_page("doc1", 1, "Alice", [1.0])])
        await store.put_document_pages("doc2", [_page("doc2", 1, "Bob", [1.0])])

        await store.delete_document("doc1")

        assert [p.text for p in await store.get_pages("doc2")] == ["Bob"]
        assert await store.get_document("doc2") is not None

    @pytest.mark.asyncio
    async def test_delete_unknown_returns_false(self, store: SQLitePageStore) -> None:
        assert await store.delete_document("missing") is False


class TestStorageErrors:
    @pytest.mark.asyncio
    async def test_uninitialised_store_raises_storage_error(self, tmp_path: Path) -> None:
        provider = SQLitePageStore(db_path=tmp_path / "empty.db")
        with pytest.raises(StorageError) as exc_info:
            await provider.get_pages("doc1")
        assert exc_info.value.provider_name == "sqlite_page_store"
