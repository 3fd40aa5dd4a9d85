"""Configuration management for hybrid search.

This module centralizes environment-driven configuration for the fusion
engine and the search orchestrator. It builds on ``pydantic-settings`` so
configuration can be provided via environment variables, ``.env`` files, or
defaults.

Highlights
- Strongly-typed settings with sensible defaults
- One place to discover the environment variables the package reads
- Range checks on the knobs that feed the ranking math

Usage
- Build once at startup: ``config = HybridSearchConfig()``
- Or through the helper: ``config = get_config()``
"""

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class HybridSearchConfig(BaseSettings):
    """Configuration for hybrid search.

    Parameters are read from the process environment under the upper-cased
    field names (``HYBRID_FUSION_K`` and so on). Defaults keep local
    development convenient while still being explicit.

    Notes
    - ``hybrid_fusion_k`` is the RRF damping constant and must be positive.
    - ``hybrid_overfetch_factor`` multiplies the caller's limit for each
      modality so fusion has enough candidates to re-rank.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        case_sensitive=False,
        extra="ignore",
    )

    # Environment
    hybrid_env: str = Field(default="local")

    # Logging
    hybrid_log_level: str = Field(default="INFO")
    hybrid_log_format: str = Field(default="json")

    # Fusion
    hybrid_fusion_k: float = Field(default=60.0, gt=0)
    hybrid_overfetch_factor: int = Field(default=2, ge=1)
    hybrid_default_limit: int = Field(default=10, ge=1)

    # Column defaults
    hybrid_vector_column: str = Field(default="vector")
    hybrid_text_column: str = Field(default="text")

    # Observability
    hybrid_metrics_enabled: bool = Field(default=True)


def get_config() -> HybridSearchConfig:
    """Get a freshly loaded configuration.

    A new instance is returned on every call so tests and long-running
    processes can pick up environment changes.
    """
    return HybridSearchConfig()
