"""
Configuration layer for turtlegraph.

Configuration is:
- Explicit (passed to the store, not global)
- Typed (validated at construction time)
- Environment-driven when built through ``load_config``
"""

from turtlegraph.config.settings import EmbeddingConfig, StoreConfig
from turtlegraph.config.loader import build_settings, load_config

__all__ = [
    "EmbeddingConfig",
    "StoreConfig",
    "build_settings",
    "load_config",
]
