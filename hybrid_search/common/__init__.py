"""Common utilities shared across the package.

Includes:
- ``config``: pydantic-settings configuration from environment variables.
- ``logging``: structured logging setup with structlog.
- ``metrics``: Prometheus metrics helpers.

Import pattern:
- from hybrid_search.common.config import HybridSearchConfig
- from hybrid_search.common.logging import configure_logging
"""
