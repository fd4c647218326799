"""pagewise domain models — re-exports all public model classes.

Other parts of the codebase import from ``src.models`` rather than from
the individual submodule (``src.models.document``).
"""

from __future__ import annotations

from src.models.document import (
    AnswerResult,
    Document,
    DocumentMetadata,
    ExtractedPage,
    IngestionResult,
    MetadataParseResult,
    Page,
    ParsedMetadata,
    RankedPage,
    UnparsableMetadata,
)

__all__ = [
    "AnswerResult",
    "Document",
    "DocumentMetadata",
    "ExtractedPage",
    "IngestionResult",
    "MetadataParseResult",
    "Page",
    "ParsedMetadata",
    "RankedPage",
    "UnparsableMetadata",
]
