"""pagewise FastAPI application entry point.

Wires providers, services, and routes together via dependency injection.
Loads configuration from ``.env`` and ``config/config.yaml``, configures
structured logging, and serves stored uploads for the PDF viewer.

``build_components`` is also used by the CLI so both surfaces assemble the
pipelines the same way.
"""

from __future__ import annotations

from contextlib import asynccontextmanager
from pathlib import Path
from typing import Any

import structlog
import uvicorn
from fastapi import FastAPI
from fastapi.staticfiles import StaticFiles

from src.api.middleware import (
    ErrorHandlingMiddleware,
    RequestLoggingMiddleware,
    configure_cors,
)
from src.api.routes import router as api_router
from src.config.loader import load_config
from src.config.settings import Settings
from src.interfaces.embedding_provider import IEmbeddingProvider
from src.interfaces.llm_provider import ILLMProvider
from src.pipeline.ingestion_orchestrator import IngestionOrchestrator
from src.pipeline.query_orchestrator import QueryOrchestrator
from src.providers.embedding.ollama_embedding_provider import OllamaEmbeddingProvider
from src.providers.embedding.openai_embedding_provider import OpenAIEmbeddingProvider
from src.providers.llm.ollama_provider import OllamaLLMProvider
from src.providers.llm.openai_provider import OpenAILLMProvider
from src.providers.page_store.sqlite_page_store import SQLitePageStore
from src.services.answer_composer import AnswerComposer
from src.services.metadata_generator import MetadataGenerator
from src.services.retrieval_ranker import RetrievalRanker
from src.services.text_extractor import PDFTextExtractor
from src.utils.errors import ConfigurationError
from src.utils.logging import configure_logging, get_logger

# ---------------------------------------------------------------------------
# Module-level settings & logging
# ---------------------------------------------------------------------------

settings = Settings()
config = load_config(settings=settings)

configure_logging(
    log_level=settings.log_level,
    json_output=(settings.app_env == "production"),
)
_logger: structlog.BoundLogger = get_logger(__name__)


# ---------------------------------------------------------------------------
# Provider selection
# ---------------------------------------------------------------------------


def _build_llm_provider(app_settings: Settings) -> ILLMProvider:
    """OpenAI when an API key is configured, otherwise the local Ollama server."""
    if app_settings.openai_api_key:
        return OpenAILLMProvider(settings=app_settings)
    if app_settings.ollama_base_url:
        return OllamaLLMProvider(settings=app_settings)
    raise ConfigurationError(
        message="No model provider configured: set OPENAI_API_KEY or OLLAMA_BASE_URL"
    )


def _build_embedding_provider(app_settings: Settings) -> IEmbeddingProvider:
    """Same priority as the LLM: OpenAI with a key, otherwise Ollama.

    The choice must not change between ingestion and query time, otherwise
    stored vectors and question vectors differ in dimension.
    """
    if app_settings.openai_api_key:
        return OpenAIEmbeddingProvider(settings=app_settings)
    if app_settings.ollama_base_url:
        return OllamaEmbeddingProvider(settings=app_settings)
    raise ConfigurationError(
        message="No embedding provider configured: set OPENAI_API_KEY or OLLAMA_BASE_URL"
    )


# ---------------------------------------------------------------------------
# Full DI assembly
# ---------------------------------------------------------------------------


def build_components(app_settings: Settings) -> dict[str, Any]:
    """Construct every provider, service, and orchestrator exactly once."""
    llm = _build_llm_provider(app_settings)
    embedding_provider = _build_embedding_provider(app_settings)
    page_store = SQLitePageStore(db_path=app_settings.database_path)

    metadata_generator = MetadataGenerator(
        llm=llm,
        page_store=page_store,
        max_chars=app_settings.metadata_max_chars,
        temperature=app_settings.metadata_temperature,
    )
    ingestion_orchestrator = IngestionOrchestrator(
        extractor=PDFTextExtractor(),
        embedding_provider=embedding_provider,
        page_store=page_store,
        metadata_generator=metadata_generator,
        embedding_concurrency=app_settings.embedding_concurrency,
    )
    query_orchestrator = QueryOrchestrator(
        embedding_provider=embedding_provider,
        ranker=RetrievalRanker(
            page_store=page_store,
            relevance_threshold=app_settings.relevance_threshold,
        ),
        composer=AnswerComposer(llm=llm, temperature=app_settings.answer_temperature),
    )

    return {
        "settings": app_settings,
        "llm_provider": llm,
        "embedding_provider": embedding_provider,
        "page_store": page_store,
        "ingestion_orchestrator": ingestion_orchestrator,
        "query_orchestrator": query_orchestrator,
        "provider_registry": {
            "llm": llm.get_provider_name(),
            "embedding": embedding_provider.get_provider_name(),
            "embedding_dimension": embedding_provider.get_dimension(),
            "page_store": page_store.get_provider_name(),
            "relevance_threshold": app_settings.relevance_threshold,
        },
    }


# ---------------------------------------------------------------------------
# Application lifespan (startup / shutdown)
# ---------------------------------------------------------------------------


def _make_lifespan(app_settings: Settings):  # noqa: ANN202
    @asynccontextmanager
    async def _lifespan(application: FastAPI):  # noqa: ANN202
        """Build components on startup and create the database tables."""
        components = build_components(app_settings)
        for key, value in components.items():
            setattr(application.state, key, value)

        await components["page_store"].initialize()
        Path(app_settings.upload_dir).mkdir(parents=True, exist_ok=True)

        # Startup continues on failure; uploads and listing need no LLM.
        credentials_valid = await components["llm_provider"].validate_credentials()
        if not credentials_valid:
            _logger.warning(
                "llm_credentials_invalid",
                provider=components["provider_registry"]["llm"],
            )

        _logger.info(
            "app_startup",
            version=config.get("app", {}).get("version", "0.1.0"),
            environment=app_settings.app_env,
            llm_credentials_valid=credentials_valid,
            **components["provider_registry"],
        )
        yield
        _logger.info("app_shutdown")

    return _lifespan


# ---------------------------------------------------------------------------
# FastAPI application factory
# ---------------------------------------------------------------------------


def create_app(app_settings: Settings | None = None) -> FastAPI:
    """Build and configure the FastAPI application."""
    app_settings = app_settings or settings
    application = FastAPI(
        title="pagewise API",
        version="0.1.0",
        description=(
            "Upload a PDF, then ask questions about it. Answers are grounded in "
            "the most relevant pages and cite them inline as [Page N]."
        ),
        lifespan=_make_lifespan(app_settings),
    )

    # -- Middleware (order matters: last added = first executed) --
    application.add_middleware(ErrorHandlingMiddleware)
    application.add_middleware(RequestLoggingMiddleware)
    configure_cors(application)

    application.include_router(api_router)

    # -- Stored PDFs for the viewer --
    application.mount(
        "/uploads",
        StaticFiles(directory=app_settings.upload_dir, check_dir=False),
        name="uploads",
    )

    return application


app = create_app()

# ---------------------------------------------------------------------------
# CLI entry point
# ---------------------------------------------------------------------------

if __name__ == "__main__":
    uvicorn.run(
        "src.main:app",
        host=settings.app_host,
        port=settings.app_port,
        reload=(settings.app_env == "development"),
    )
