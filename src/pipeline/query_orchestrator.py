"""Query pipeline: question → embedding → ranked pages → cited answer."""

from __future__ import annotations

from typing import TYPE_CHECKING

import structlog

from src.models.document import AnswerResult
from src.utils.errors import ValidationError
from src.utils.logging import get_logger

if TYPE_CHECKING:
    from src.interfaces.embedding_provider import IEmbeddingProvider
    from src.services.answer_composer import AnswerComposer
    from src.services.retrieval_ranker import RetrievalRanker


class QueryOrchestrator:
    """Answers one question about one stored document.

    Every step is awaited in order: answer composition never starts before
    ranking has finished.  Failures propagate unchanged and are not retried.
    """

    def __init__(
        self,
        embedding_provider: IEmbeddingProvider,
        ranker: RetrievalRanker,
        composer: AnswerComposer,
    ) -> None:
        self._embedding_provider = embedding_provider
        self._ranker = ranker
        self._composer = composer
        self._logger: structlog.BoundLogger = get_logger(__name__)

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    async def query(self, document_id: str | None, question: str | None) -> AnswerResult:
        """Answer *question* using the pages of *document_id*.

        Raises
        ------
        ValidationError
            Either input is missing or blank.  Raised before any I/O.
        EmbeddingError
            The question could not be embedded.
        DimensionMismatchError
            Stored page vectors do not match the question vector.
        CompositionError
            The LLM failed while writing the answer.
        """
        document_id = (document_id or "").strip()
        question = (question or "").strip()
        missing = [
            name
            for name, value in (("document_id", document_id), ("question", question))
            if not value
        ]
        if missing:
            raise ValidationError(message=f"Missing required fields: {', '.join(missing)}")

        # Each step needs the previous result; nothing runs concurrently.
        question_embedding = await self._embedding_provider.embed_single(question)
        relevant = await self._ranker.rank(question_embedding, document_id)
        answer = await self._composer.compose(question, relevant)

        self._logger.info(
            "query_answered",
            document_id=document_id,
            relevant_pages=len(relevant),
        )
        return AnswerResult(
            document_id=document_id,
            question=question,
            answer_text=answer,
            relevant_pages=[p.page_number for p in relevant],
        )
