"""Settings for graph validation runs.

Loaded from environment variables (prefix CREDGRAPH_) or a .env file:

  CREDGRAPH_TRUST_ANCHORS     JSON list of issuer ids trusted a priori
  CREDGRAPH_USE_NAMED_GRAPHS  store each credential in its own graph
  CREDGRAPH_SNAPSHOT_PATH     write an N-Quads snapshot here after inference
  CREDGRAPH_LOG_LEVEL         logging level name
"""

from __future__ import annotations

import logging
from functools import lru_cache

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Validation settings loaded from environment variables."""

    # Issuer ids (DIDs or IRIs) that terminate identity-anchor chains
    trust_anchors: list[str] = []

    # Named graph per credential, keyed by credential id
    use_named_graphs: bool = False

    # Empty disables snapshot export
    snapshot_path: str = ""

    log_level: str = "WARNING"

    model_config = SettingsConfigDict(env_prefix="CREDGRAPH_", env_file=".env", extra="ignore")


@lru_cache
def get_settings() -> Settings:
    """Cached settings instance."""
    return Settings()


def configure_logging(level: str | None = None) -> None:
    """Basic stderr logging at the configured level."""
    name = (level or get_settings().log_level).upper()
    logging.basicConfig(
        level=getattr(logging, name, logging.WARNING),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
