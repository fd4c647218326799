"""Application settings loaded from environment variables via pydantic-settings.

Values come from (highest priority first):

    1. Environment variables, e.g. ``OPENAI_API_KEY=sk-abc123``
    2. A ``.env`` file in the working directory
    3. The defaults declared below

Field ``relevance_threshold`` maps to env var ``RELEVANCE_THRESHOLD`` and so
on; pydantic-settings matches names case-insensitively.
"""

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """pagewise application settings."""

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    # === Model providers ===
    # Empty key = "not configured"; provider selection in main.py then falls
    # back to the local Ollama server.
    openai_api_key: str = ""
    openai_base_url: str = ""  # Custom base URL for OpenAI-compatible APIs
    openai_text_model: str = "gpt-4o-mini"
    openai_embedding_model: str = "text-embedding-ada-002"
    ollama_base_url: str = "http://localhost:11434"
    ollama_text_model: str = "llama3.1"
    ollama_embedding_model: str = "nomic-embed-text"
    provider_timeout_seconds: float = 60.0

    # === Storage ===
    database_path: str = "data/pagewise.db"
    upload_dir: str = "uploads"
    max_upload_bytes: int = 25 * 1024 * 1024

    # === Retrieval ===
    # Minimum cosine similarity for a page to count as grounding evidence.
    # Biased toward precision: weakly related pages never reach the prompt.
    relevance_threshold: float = Field(default=0.8, ge=-1.0, le=1.0)

    # === Ingestion ===
    embedding_concurrency: int = Field(default=4, ge=1)
    embedding_max_chars: int = Field(default=24000, gt=0)
    metadata_max_chars: int = Field(default=24000, gt=0)
    metadata_temperature: float = 0.7
    answer_temperature: float = 0.3

    # === App Config ===
    app_host: str = "0.0.0.0"
    app_port: int = 3000
    app_env: str = "development"
    log_level: str = "INFO"

    def get_available_llm_providers(self) -> list[str]:
        """Return the provider names that are configured, in priority order."""
        providers: list[str] = []
        if self.openai_api_key:
            providers.append("openai")
        if self.ollama_base_url:
            providers.append("ollama")
        return providers
