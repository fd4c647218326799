"""Per-page text extraction from PDF bytes.

Reads PDFs using PyMuPDF (fitz) straight from memory and returns one
:class:`~src.models.document.ExtractedPage` per source page, in document
order.  Pages without extractable text (scans, blank separators) are kept
with an empty string: citations are ``[Page N]`` against the source
pagination, so numbering must never skip.
"""

from __future__ import annotations

import re

import fitz  # PyMuPDF -- the "fitz" import name is a PyMuPDF convention
import structlog

from src.models.document import ExtractedPage
from src.utils.errors import ExtractionError

logger = structlog.get_logger(logger_name=__name__)

_WHITESPACE_RE = re.compile(r"\s+")


class PDFTextExtractor:
    """Converts raw PDF bytes into an ordered list of page texts."""

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def extract(self, data: bytes) -> list[ExtractedPage]:
        """Extract the text of every page of the PDF in *data*.

        Parameters
        ----------
        data:
            Raw bytes of the uploaded document.

        Returns
        -------
        list[ExtractedPage]
            One entry per page, numbered from 1.  Text runs are joined with
            single spaces; a page with no text yields ``""``.

        Raises
        ------
        ExtractionError
            If *data* is empty, is not a readable PDF, is encrypted, or
            a page cannot be read.
        """
        if not data:
            raise ExtractionError(message="Uploaded document is empty", provider_name="pymupdf")

        # fitz raises RuntimeError, ValueError or its own FileDataError here.
        try:
            doc = fitz.open(stream=data, filetype="pdf")
        except Exception as exc:
            logger.error("pdf_open_failed", size=len(data), error=str(exc))
            raise ExtractionError(
                message=f"Not a readable PDF: {exc}",
                provider_name="pymupdf",
            ) from exc

        try:
            if doc.needs_pass:
                raise ExtractionError(
                    message="PDF is password protected",
                    provider_name="pymupdf",
                )
            pages: list[ExtractedPage] = []
            # Empty pages stay in the list so numbering matches the source.
            for index in range(doc.page_count):
                raw = doc[index].get_text("text")
                pages.append(ExtractedPage(page_number=index + 1, text=self._normalise(raw)))
        except ExtractionError:
            raise
        except Exception as exc:
            logger.error("pdf_page_read_failed", error=str(exc))
            raise ExtractionError(
                message=f"Failed to read PDF pages: {exc}",
                provider_name="pymupdf",
            ) from exc
        finally:
            doc.close()

        if not pages:
            raise ExtractionError(message="PDF has no pages", provider_name="pymupdf")

        logger.info(
            "pdf_extracted",
            pages=len(pages),
            empty_pages=sum(1 for p in pages if not p.text),
        )
        return pages

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    @staticmethod
    def _normalise(text: str) -> str:
        return _WHITESPACE_RE.sub(" ", text).strip()
