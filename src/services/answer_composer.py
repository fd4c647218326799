"""Grounded answer composition with inline page citations.

Builds a prompt from the pages that passed the relevance threshold and
asks the LLM to answer using only that content, citing pages as
``[Page N]``.  The generated text is returned verbatim; turning citations
into links is left to whatever renders the answer.

When no page is relevant the composer answers with a fixed message and
never calls the LLM, so an ungrounded question cannot produce an invented
answer.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

import structlog

from src.models.document import RankedPage
from src.utils.errors import CompositionError, LLMError

if TYPE_CHECKING:
    from src.interfaces.llm_provider import ILLMProvider

logger = structlog.get_logger(logger_name=__name__)

NO_RELEVANT_CONTENT_ANSWER = "No highly relevant pages found for this question."

# Restricts the model to the supplied pages and fixes the citation format.
_SYSTEM_PROMPT = (
    "You are a PDF assistant that answers user questions accurately, using only "
    "the PDF content provided. If the content does not answer the question, say so. "
    "Your responses must contain inline citations referring to the page number "
    "like this: [Page 12]."
)

# {context} is filled by build_page_context().
_USER_PROMPT = """\
Here is the PDF content with page numbers along with a similarity factor calculated \
using vector search, which tells how relevant the page is to the question:

{context}

Answer the following question, embedding inline citations in the format [Page X] \
wherever a statement is drawn from page X: {question}"""


def build_page_context(pages: list[RankedPage]) -> str:
    """Render relevant pages as ``Page N (Relevance: 0.87): text`` blocks."""
    return "\n\n".join(
        f"Page {p.page_number} (Relevance: {p.similarity:.2f}): {p.text}" for p in pages
    )


class AnswerComposer:
    """Turns a question plus relevant pages into a cited answer."""

    def __init__(self, llm: ILLMProvider, temperature: float = 0.3) -> None:
        self._llm = llm
        self._temperature = temperature

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    async def compose(self, question: str, relevant_pages: list[RankedPage]) -> str:
        """Return the model's answer, or the fixed no-content message.

        Raises
        ------
        CompositionError
            If the LLM call fails.  Not retried.
        """
        if not relevant_pages:
            logger.info("compose_skipped_no_relevant_pages")
            return NO_RELEVANT_CONTENT_ANSWER

        # Pages arrive best-first; the prompt keeps that order.

        user_prompt = _USER_PROMPT.format(
            context=build_page_context(relevant_pages),
            question=question,
        )
        try:
            answer = await self._llm.complete(
                system_prompt=_SYSTEM_PROMPT,
                user_prompt=user_prompt,
                temperature=self._temperature,
            )
        except LLMError as exc:
            raise CompositionError(
                message=f"Failed to fetch response from the language model: {exc.message}",
                provider_name=exc.provider_name,
            ) from exc

        logger.info(
            "answer_composed",
            pages=[p.page_number for p in relevant_pages],
            answer_chars=len(answer),
        )
        return answer
