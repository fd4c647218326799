"""YAML configuration loader with environment variable overrides.

Configuration is layered (later layers win):

    1. config/config.yaml  -- static defaults checked into the repo
    2. .env file           -- local developer overrides
    3. Environment vars    -- deployment-time values

``load_config()`` reads the YAML file, then deep-merges the values resolved
by :class:`~src.config.settings.Settings` on top of it.
"""

from pathlib import Path

import yaml

from src.config.settings import Settings


def load_config(path: str = "config/config.yaml", settings: Settings | None = None) -> dict:
    """Load YAML config and merge it with environment-based Settings.

    Args:
        path: Path to the YAML configuration file.  A missing file yields
            an empty base layer.
        settings: Pre-built settings; a fresh ``Settings()`` is read when
            omitted.

    Returns:
        Fully resolved configuration dictionary.
    """
    config_path = Path(path)
    if config_path.exists():
        with open(config_path) as f:
            yaml_config = yaml.safe_load(f) or {}
    else:
        yaml_config = {}

    settings = settings or Settings()
    env_overrides = {
        "app": {
            "host": settings.app_host,
            "port": settings.app_port,
            "env": settings.app_env,
        },
        "providers": {
            "openai_text_model": settings.openai_text_model,
            "openai_embedding_model": settings.openai_embedding_model,
            "ollama_base_url": settings.ollama_base_url,
            "available": settings.get_available_llm_providers(),
        },
        "storage": {
            "database_path": settings.database_path,
            "upload_dir": settings.upload_dir,
        },
        "retrieval": {
            "relevance_threshold": settings.relevance_threshold,
        },
        "ingestion": {
            "embedding_concurrency": settings.embedding_concurrency,
        },
        "logging": {
            "level": settings.log_level,
        },
    }

    _deep_merge(yaml_config, env_overrides)
    return yaml_config


def _deep_merge(base: dict, overrides: dict) -> None:
    """Recursively merge overrides into base dict, mutating base in place."""
    for key, value in overrides.items():
        if key in base and isinstance(base[key], dict) and isinstance(value, dict):
            _deep_merge(base[key], value)
        else:
            base[key] = value
