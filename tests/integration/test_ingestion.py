"""Integration tests for the ingestion pipeline.

Runs the real PDF extractor and SQLite page store; only the embedding
provider and the LLM are replaced with in-process doubles.
"""

from __future__ import annotations

import asyncio
from unittest.mock import AsyncMock

import pytest

from src.pipeline.ingestion_orchestrator import IngestionOrchestrator, generate_document_id
from src.pipeline.query_orchestrator import QueryOrchestrator
from src.services.answer_composer import NO_RELEVANT_CONTENT_ANSWER, AnswerComposer
from src.services.metadata_generator import MetadataGenerator
from src.services.retrieval_ranker import RetrievalRanker
from src.services.text_extractor import PDFTextExtractor
from src.utils.errors import EmbeddingError, ExtractionError

_METADATA_JSON = (
    '{"title": "Two People", "summary": "Alice and Bob appear.", "keywords": "alice, bob"}'
)


def _orchestrator(embedding_provider, page_store, llm) -> IngestionOrchestrator:
    return IngestionOrchestrator(
        extractor=PDFTextExtractor(),
        embedding_provider=embedding_provider,
        page_store=page_store,
        metadata_generator=MetadataGenerator(llm=llm, page_store=page_store),
        embedding_concurrency=2,
    )


class TestGenerateDocumentId:
    def test_keeps_pdf_extension(self) -> None:
        assert generate_document_id("Annual Report.PDF").endswith(".pdf")

    def test_defaults_to_pdf_extension(self) -> None:
        assert generate_document_id(None).endswith(".pdf")

    def test_ids_are_unique(self) -> None:
        assert len({generate_document_id("a.pdf") for _ in range(50)}) == 50


class TestIngestionPipeline:
    @pytest.mark.asyncio
    async def test_two_page_document(
        self, two_page_pdf, alice_bob_embeddings, page_store, mock_llm
    ) -> None:
        mock_llm.complete = AsyncMock(return_value=_METADATA_JSON)
        orchestrator = _orchestrator(alice_bob_embeddings, page_store, mock_llm)

        result = await orchestrator.ingest(two_page_pdf, filename="people.pdf", document_id="doc1")

        assert result.document_id == "doc1"
        assert result.page_count == 2
        assert result.title == "Two People"
        assert result.keywords == ["alice", "bob"]

        pages = await page_store.get_pages("doc1")
        assert [(p.page_number, p.text) for p in pages] == [(1, "Alice"), (2, "Bob")]
        assert pages[0].embedding == [1.0, 0.0, 0.0]
        assert pages[1].embedding == [0.0, 1.0, 0.0]

        document = await page_store.get_document("doc1")
        assert document is not None
        assert document.title == "Two People"
        assert document.summary == "Alice and Bob appear."
        assert document.source_filename == "people.pdf"
        assert document.page_count == 2

    @pytest.mark.asyncio
    async def test_generated_id_when_none_given(
        self, two_page_pdf, alice_bob_embeddings, page_store, mock_llm
    ) -> None:
        mock_llm.complete = AsyncMock(return_value=_METADATA_JSON)
        orchestrator = _orchestrator(alice_bob_embeddings, page_store, mock_llm)

        result = await orchestrator.ingest(two_page_pdf, filename="people.pdf")

        assert result.document_id.endswith(".pdf")
        assert len(await page_store.get_pages(result.document_id)) == 2

    @pytest.mark.asyncio
    async def test_embedding_failure_stores_nothing(
        self, two_page_pdf, embedding_factory, page_store, mock_llm
    ) -> None:
        embeddings = embedding_factory(
            vectors={"Alice": [1.0, 0.0, 0.0]},
            fail_on={"Bob"},
        )
        orchestrator = _orchestrator(embeddings, page_store, mock_llm)

        with pytest.raises(EmbeddingError):
            await orchestrator.ingest(two_page_pdf, document_id="doc1")

        assert await page_store.get_pages("doc1") == []
        assert await page_store.get_document("doc1") is None
        mock_llm.complete.assert_not_called()

    @pytest.mark.asyncio
    async def test_unparsable_metadata_still_succeeds(
        self, two_page_pdf, alice_bob_embeddings, page_store, mock_llm
    ) -> None:
        mock_llm.complete = AsyncMock(return_value="Sorry, I cannot help with that.")
        orchestrator = _orchestrator(alice_bob_embeddings, page_store, mock_llm)

        result = await orchestrator.ingest(two_page_pdf, document_id="doc1")

        assert result.page_count == 2
        assert result.title is None
        assert result.summary is None
        assert result.keywords == []
        assert len(await page_store.get_pages("doc1")) == 2

        document = await page_store.get_document("doc1")
        assert document is not None
        assert document.title is None

    @pytest.mark.asyncio
    async def test_invalid_pdf_stores_nothing(
        self, alice_bob_embeddings, page_store, mock_llm
    ) -> None:
        orchestrator = _orchestrator(alice_bob_embeddings, page_store, mock_llm)

        with pytest.raises(ExtractionError):
            await orchestrator.ingest(b"%PDF-broken", document_id="doc1")

        assert alice_bob_embeddings.calls == []
        assert await page_store.list_documents() == []

    @pytest.mark.asyncio
    async def test_blank_page_stored_without_embedding(
        self, pdf_factory, alice_bob_embeddings, page_store, mock_llm
    ) -> None:
        mock_llm.complete = AsyncMock(return_value=_METADATA_JSON)
        orchestrator = _orchestrator(alice_bob_embeddings, page_store, mock_llm)

        result = await orchestrator.ingest(pdf_factory(["Alice", "", "Bob"]), document_id="doc1")

        assert result.page_count == 3
        assert "" not in alice_bob_embeddings.calls
        pages = await page_store.get_pages("doc1")
        assert pages[1].page_number == 2
        assert pages[1].text == ""
        assert pages[1].embedding == []

    @pytest.mark.asyncio
    async def test_reingest_replaces_pages(
        self, pdf_factory, two_page_pdf, alice_bob_embeddings, page_store, mock_llm
    ) -> None:
        mock_llm.complete = AsyncMock(return_value=_METADATA_JSON)
        orchestrator = _orchestrator(alice_bob_embeddings, page_store, mock_llm)

        await orchestrator.ingest(two_page_pdf, document_id="doc1")
        await orchestrator.ingest(pdf_factory(["Alice"]), document_id="doc1")

        pages = await page_store.get_pages("doc1")
        assert [p.text for p in pages] == ["Alice"]

    @pytest.mark.asyncio
    async def test_reingest_with_unparsable_metadata_clears_old_title(
        self, two_page_pdf, alice_bob_embeddings, page_store, mock_llm
    ) -> None:
        mock_llm.complete = AsyncMock(return_value=_METADATA_JSON)
        orchestrator = _orchestrator(alice_bob_embeddings, page_store, mock_llm)
        await orchestrator.ingest(two_page_pdf, document_id="doc1")

        mock_llm.complete = AsyncMock(return_value="garbage")
        result = await orchestrator.ingest(two_page_pdf, document_id="doc1")

        assert result.title is None
        document = await page_store.get_document("doc1")
        assert document is not None
        assert document.title is None
        assert document.summary is None
        assert document.keywords == []

    @pytest.mark.asyncio
    async def test_concurrent_ingestions_of_same_id_do_not_interleave(
        self, two_page_pdf, alice_bob_embeddings, page_store, mock_llm
    ) -> None:
        mock_llm.complete = AsyncMock(return_value=_METADATA_JSON)
        orchestrator = _orchestrator(alice_bob_embeddings, page_store, mock_llm)

        await asyncio.gather(
            orchestrator.ingest(two_page_pdf, document_id="doc1"),
            orchestrator.ingest(two_page_pdf, document_id="doc1"),
        )

        pages = await page_store.get_pages("doc1")
        assert [p.page_number for p in pages] == [1, 2]

    @pytest.mark.asyncio
    async def test_all_blank_document_is_queryable(
        self, pdf_factory, embedding_factory, page_store, mock_llm
    ) -> None:
        # Real vectors have 4 components while get_dimension() reports 3.
        embeddings = embedding_factory(default=[1.0, 0.0, 0.0, 0.0], dimension=3)
        orchestrator = _orchestrator(embeddings, page_store, mock_llm)

        result = await orchestrator.ingest(pdf_factory(["", ""]), document_id="doc1")

        assert result.page_count == 2
        assert embeddings.calls == []
        pages = await page_store.get_pages("doc1")
        assert [p.embedding for p in pages] == [[], []]

        query = QueryOrchestrator(
            embedding_provider=embeddings,
            ranker=RetrievalRanker(page_store=page_store),
            composer=AnswerComposer(llm=mock_llm),
        )
        mock_llm.complete.reset_mock()

        result = await query.query("doc1", "Anything here?")

        assert result.answer_text == NO_RELEVANT_CONTENT_ANSWER
        assert result.relevant_pages == []
        mock_llm.complete.assert_not_called()
