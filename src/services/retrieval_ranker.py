"""Relevance ranking of a document's pages against a question.

Exact linear scan: every stored page of the document is scored with cosine
similarity, sorted best-first, and cut at the relevance threshold.  Single
documents rarely exceed a few hundred pages, so no approximate index is
involved.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

import structlog

from src.models.document import RankedPage
from src.utils.similarity import cosine_similarity

if TYPE_CHECKING:
    from src.interfaces.page_store import IPageStore

logger = structlog.get_logger(logger_name=__name__)

DEFAULT_RELEVANCE_THRESHOLD = 0.8


class RetrievalRanker:
    """Scores, sorts, and filters stored pages for one question.

    Parameters
    ----------
    page_store:
        Source of the document's pages and embeddings.
    relevance_threshold:
        Minimum similarity (inclusive) for a page to be returned.  The
        default of 0.8 favours precision: a question with no strongly
        matching page gets no grounding rather than weak grounding.
    """

    def __init__(
        self,
        page_store: IPageStore,
        relevance_threshold: float = DEFAULT_RELEVANCE_THRESHOLD,
    ) -> None:
        self._page_store = page_store
        self._threshold = relevance_threshold

    @property
    def relevance_threshold(self) -> float:
        return self._threshold

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    async def rank(
        self,
        question_embedding: list[float],
        document_id: str,
    ) -> list[RankedPage]:
        """Return the document's relevant pages, most similar first.

        Ties keep ascending page order.  A document with no stored pages
        yields an empty list.

        Raises
        ------
        DimensionMismatchError
            If a stored embedding differs in length from the question's.
        """
        pages = await self._page_store.get_pages(document_id)
        if not pages:
            logger.info("rank_no_pages", document_id=document_id)
            return []

        scored = [
            RankedPage(
                page_number=page.page_number,
                text=page.text,
                similarity=self._score(question_embedding, page.embedding),
            )
            for page in pages
        ]
        # sorted() is stable with reverse=True, so equal scores stay in page order.
        ranked = sorted(scored, key=lambda p: p.similarity, reverse=True)
        relevant = [p for p in ranked if p.similarity >= self._threshold]

        logger.info(
            "pages_ranked",
            document_id=document_id,
            pages=len(pages),
            relevant=len(relevant),
            threshold=self._threshold,
            top_similarity=round(ranked[0].similarity, 4),
        )
        return relevant

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    @staticmethod
    def _score(question_embedding: list[float], page_embedding: list[float]) -> float:
        # Blank pages are stored without an embedding; they match nothing.
        if not page_embedding:
            return 0.0
        return cosine_similarity(question_embedding, page_embedding)
