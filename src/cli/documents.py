# =============================================================================
# src/cli/documents.py — Document management and Q&A from the terminal
# =============================================================================
#
# Supported subcommands:
#
#   ingest   — Ingest a PDF file (extract → embed → store → metadata)
#   ask      — Ask a question about an ingested document
#   list     — List ingested documents with their titles
#   delete   — Delete a document's pages and metadata
#
# Providers are chosen exactly like the web app (src/main.py), so documents
# ingested here can be queried through the API and vice versa.
#
# Usage examples:
#   python -m src.cli ingest ./reports/annual-2024.pdf
#   python -m src.cli ask 1760870400000-482913377.pdf "What was the revenue?"
#   python -m src.cli list
#   python -m src.cli delete 1760870400000-482913377.pdf
# =============================================================================

"""Command-line interface for ingesting and querying PDF documents."""

from __future__ import annotations

import argparse
import asyncio
import sys
from pathlib import Path
from typing import Any

from src.config.settings import Settings
from src.utils.errors import PagewiseError


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="python -m src.cli",
        description="Ingest PDFs and ask questions answered with [Page N] citations.",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    ingest = subparsers.add_parser("ingest", help="Ingest a PDF file")
    ingest.add_argument("file", type=Path, help="Path to the PDF")
    ingest.add_argument(
        "--document-id",
        default=None,
        help="Re-ingest under an existing id instead of generating one",
    )

    ask = subparsers.add_parser("ask", help="Ask a question about a document")
    ask.add_argument("document_id", help="Id printed by the ingest command")
    ask.add_argument("question", help="Natural-language question")

    subparsers.add_parser("list", help="List ingested documents")

    delete = subparsers.add_parser("delete", help="Delete a document")
    delete.add_argument("document_id")

    return parser


async def _handle_ingest(args: argparse.Namespace, components: dict[str, Any]) -> int:
    path: Path = args.file
    if not path.is_file():
        print(f"Error: {path} is not a file.", file=sys.stderr)
        return 1

    print(f"Ingesting PDF: {path}")
    result = await components["ingestion_orchestrator"].ingest(
        path.read_bytes(),
        filename=path.name,
        document_id=args.document_id,
    )
    print("\nIngestion complete:")
    print(f"  Document ID: {result.document_id}")
    print(f"  Pages:       {result.page_count}")
    print(f"  Title:       {result.title or '(none)'}")
    print(f"  Summary:     {result.summary or '(none)'}")
    print(f"  Keywords:    {', '.join(result.keywords) or '(none)'}")
    return 0


async def _handle_ask(args: argparse.Namespace, components: dict[str, Any]) -> int:
    result = await components["query_orchestrator"].query(args.document_id, args.question)
    print(result.answer_text)
    if result.relevant_pages:
        print(f"\nRelevant pages: {', '.join(str(n) for n in result.relevant_pages)}")
    return 0


async def _handle_list(components: dict[str, Any]) -> int:
    documents = await components["page_store"].list_documents()
    if not documents:
        print("No documents ingested yet.")
        return 0
    for doc in documents:
        print(f"{doc.document_id}  ({doc.page_count} pages)")
        print(f"  Title:    {doc.title or '(none)'}")
        if doc.keywords:
            print(f"  Keywords: {', '.join(doc.keywords)}")
    return 0


async def _handle_delete(args: argparse.Namespace, components: dict[str, Any]) -> int:
    deleted = await components["page_store"].delete_document(args.document_id)
    if not deleted:
        print(f"Document {args.document_id} not found.", file=sys.stderr)
        return 1
    print(f"Deleted {args.document_id}.")
    return 0


async def _run(args: argparse.Namespace, app_settings: Settings) -> int:
    # Deferred: building providers pulls in the openai SDK and the app factory.
    from src.main import build_components

    components = build_components(app_settings)
    await components["page_store"].initialize()

    if args.command == "ingest":
        return await _handle_ingest(args, components)
    if args.command == "ask":
        return await _handle_ask(args, components)
    if args.command == "list":
        return await _handle_list(components)
    return await _handle_delete(args, components)


def main(argv: list[str] | None = None) -> int:
    """Parse *argv* and run the selected subcommand.  Returns the exit code."""
    args = _build_parser().parse_args(argv)
    try:
        return asyncio.run(_run(args, Settings()))
    except PagewiseError as exc:
        print(f"Error: {type(exc).__name__}: {exc}", file=sys.stderr)
        return 1
