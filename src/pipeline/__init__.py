"""Pipeline orchestration for document ingestion and question answering."""

from src.pipeline.ingestion_orchestrator import IngestionOrchestrator, generate_document_id
from src.pipeline.query_orchestrator import QueryOrchestrator

__all__ = [
    "IngestionOrchestrator",
    "QueryOrchestrator",
    "generate_document_id",
]
