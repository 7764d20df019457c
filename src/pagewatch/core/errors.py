"""Exception types raised by the pagewatch workflows."""

from __future__ import annotations


class PageWatchError(Exception):
    """Base class for every error pagewatch raises on purpose."""


class ConfigError(PageWatchError):
    """Invocation parameters are missing or inconsistent."""


class NavigationError(PageWatchError):
    """The browser could not load a page."""

    def __init__(self, url: str, detail: str) -> None:
        super().__init__(f"Failed to load {url}: {detail}")
        self.url = url
        self.detail = detail


class NotifyError(PageWatchError):
    """The notification transport rejected or failed to deliver a message."""

    def __init__(self, target: str, detail: str) -> None:
        super().__init__(f"Notification to {target} failed: {detail}")
        self.target = target
        self.detail = detail
