"""Core schema helpers and error types for pagewatch."""

from .errors import ConfigError, NavigationError, NotifyError, PageWatchError
from .keys import *  # noqa: F401,F403 re-export stable keys

__all__ = [name for name in globals() if name.startswith("K_")] + [
    "ConfigError",
    "NavigationError",
    "NotifyError",
    "PageWatchError",
]
