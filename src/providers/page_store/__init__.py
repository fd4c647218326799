"""Page store providers.

SQLitePageStore keeps page text, embeddings, and document metadata in
data/pagewise.db.  It is the only component that writes those records.
"""

from src.providers.page_store.sqlite_page_store import SQLitePageStore

__all__ = ["SQLitePageStore"]
