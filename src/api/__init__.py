"""HTTP API layer — routes, request/response schemas, and middleware.

``router`` is mounted by :func:`src.main.create_app`.
"""

from src.api.routes import router

__all__ = ["router"]
