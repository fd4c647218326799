"""Command-line tools for pagewise.

- ``python -m src.cli ingest FILE``      — ingest a PDF
- ``python -m src.cli ask DOC_ID TEXT``  — ask a question about a document
- ``python -m src.cli list``             — list ingested documents
- ``python -m src.cli delete DOC_ID``    — delete a document

Uses argparse and builds its components through ``src.main.build_components``
so the CLI and the API share one database and one provider choice.
"""
