"""Configuration package exports."""

from .loader import ConfigLocator, ConfigRepository
from .models import DEFAULT_CONCURRENCY, DEFAULT_TIMEOUT_SECONDS, HttpConfig, SearchConfig

__all__ = [
    "ConfigLocator",
    "ConfigRepository",
    "DEFAULT_CONCURRENCY",
    "DEFAULT_TIMEOUT_SECONDS",
    "HttpConfig",
    "SearchConfig",
]
