"""LLM-powered title, summary, and keyword generation for documents.

Uses an :class:`~src.interfaces.llm_provider.ILLMProvider` to describe an
uploaded PDF so the document list shows something better than a generated
file id.

The generation flow:
1. Every page is rendered as ``Page N : text`` and the blocks are joined
   with blank lines (capped at ``metadata_max_chars``)
2. The LLM is asked for one JSON object:
   ``{"title": ..., "summary": ..., "keywords": "a, b, c"}``
3. :func:`parse_metadata_response` strips markdown fences and returns a
   tagged :class:`ParsedMetadata` / :class:`UnparsableMetadata` result
4. Parsed metadata is written through the page store

Metadata is an enrichment.  Unparsable output, an LLM failure, or a failed
metadata write is logged and yields ``None``; ingestion still succeeds with
empty metadata fields.
"""

from __future__ import annotations

import json
import re
from typing import TYPE_CHECKING

import structlog

from src.models.document import (
    DocumentMetadata,
    ExtractedPage,
    MetadataParseResult,
    ParsedMetadata,
    UnparsableMetadata,
)
from src.utils.errors import LLMError, StorageError

if TYPE_CHECKING:
    from src.interfaces.llm_provider import ILLMProvider
    from src.interfaces.page_store import IPageStore

logger = structlog.get_logger(logger_name=__name__)

MAX_KEYWORDS = 5

# Sent as the user message with an empty system prompt.  The keyword limit is
# restated in the prompt; parse_metadata_response enforces it regardless.
_METADATA_PROMPT = """\
Extract metadata from the following document snippet:
\"\"\"{snippet}\"\"\"

Provide the response in the following JSON format:
{{
  "title": "Title of the document",
  "summary": "A two-sentence summary of the document",
  "keywords": "Comma-separated list of important keywords, with maximum {max_keywords} keywords"
}}
Return only the JSON object."""

# Markdown code fence, optionally tagged ``json``.
_FENCE_RE = re.compile(r"```(?:json)?\s*\n?(.*?)```", re.DOTALL | re.IGNORECASE)


def build_document_snippet(pages: list[ExtractedPage], max_chars: int) -> str:
    """Render pages as ``Page N : text`` blocks, truncated to *max_chars*."""
    snippet = "\n\n".join(f"Page {p.page_number} : {p.text}" for p in pages)
    return snippet[:max_chars]


def parse_metadata_response(response: str) -> MetadataParseResult:
    """Parse the LLM response into a tagged metadata result.

    Handles the common response shapes:
    1. Clean JSON: ``{"title": ..., ...}``
    2. Markdown-fenced: ``\\`\\`\\`json\\n{...}\\`\\`\\````
    3. JSON embedded in prose: ``Here is the metadata: {...}``

    Never raises.
    """
    cleaned = response.strip()
    preview = cleaned[:200]

    fence_match = _FENCE_RE.search(cleaned)
    if fence_match:
        cleaned = fence_match.group(1).strip()
    else:
        brace_start = cleaned.find("{")
        brace_end = cleaned.rfind("}")
        if brace_start != -1 and brace_end > brace_start:
            cleaned = cleaned[brace_start : brace_end + 1]

    try:
        data = json.loads(cleaned)
    except json.JSONDecodeError as exc:
        return UnparsableMetadata(reason=f"invalid JSON: {exc.msg}", raw_preview=preview)

    if not isinstance(data, dict):
        return UnparsableMetadata(reason="JSON is not an object", raw_preview=preview)

    title = _as_text(data.get("title"))
    summary = _as_text(data.get("summary"))
    keywords = _as_keywords(data.get("keywords"))
    if title is None and summary is None and not keywords:
        return UnparsableMetadata(reason="no metadata fields present", raw_preview=preview)

    return ParsedMetadata(
        metadata=DocumentMetadata(title=title, summary=summary, keywords=keywords)
    )


def _as_text(value: object) -> str | None:
    if value is None:
        return None
    text = str(value).strip()
    return text or None


def _as_keywords(value: object) -> list[str]:
    """Accept a comma-separated string or a list; keep at most five."""
    if isinstance(value, str):
        items = value.split(",")
    elif isinstance(value, list):
        items = [str(v) for v in value if v is not None]
    else:
        return []
    keywords = [k.strip() for k in items if k and k.strip()]
    return keywords[:MAX_KEYWORDS]


class MetadataGenerator:
    """Generates and persists document metadata from extracted page text.

    Parameters
    ----------
    llm:
        The LLM provider used for the extraction prompt.
    page_store:
        Store that receives the parsed metadata.
    max_chars:
        Character budget for the document snippet sent to the LLM.
    temperature:
        Sampling temperature for the extraction call.
    """

    def __init__(
        self,
        llm: ILLMProvider,
        page_store: IPageStore,
        max_chars: int = 24000,
        temperature: float = 0.7,
    ) -> None:
        self._llm = llm
        self._page_store = page_store
        self._max_chars = max_chars
        self._temperature = temperature

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    async def generate(
        self,
        document_id: str,
        pages: list[ExtractedPage],
    ) -> DocumentMetadata | None:
        """Generate metadata for *document_id* and store it.

        Returns
        -------
        DocumentMetadata | None
            The stored metadata, or ``None`` when the model call failed, its
            output could not be used, or the metadata could not be stored.
        """
        prompt = _METADATA_PROMPT.format(
            snippet=build_document_snippet(pages, self._max_chars),
            max_keywords=MAX_KEYWORDS,
        )

        try:
            response = await self._llm.complete(
                system_prompt="",
                user_prompt=prompt,
                temperature=self._temperature,
                max_tokens=500,
            )
        except LLMError as exc:
            logger.warning(
                "metadata_generation_failed",
                document_id=document_id,
                error=str(exc),
                msg="Continuing without metadata.",
            )
            return None

        result = parse_metadata_response(response)
        if isinstance(result, UnparsableMetadata):
            logger.warning(
                "metadata_unparsable",
                document_id=document_id,
                reason=result.reason,
                response_preview=result.raw_preview,
            )
            return None

        metadata = result.metadata
        try:
            await self._page_store.put_document_metadata(
                document_id,
                title=metadata.title,
                summary=metadata.summary,
                keywords=metadata.keywords,
            )
        except StorageError as exc:
            # Pages are already committed; the document stays queryable
            # and is listed without a title.
            logger.warning(
                "metadata_store_failed",
                document_id=document_id,
                error=str(exc),
            )
            return None

        logger.info(
            "metadata_generated",
            document_id=document_id,
            title=metadata.title,
            keywords=len(metadata.keywords),
        )
        return metadata
