"""Playwright-backed page rendering with one isolated context per URL."""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from dataclasses import dataclass, field
from typing import Any, AsyncIterator, Dict, Optional

from playwright.async_api import Error as PlaywrightError
from playwright.async_api import async_playwright
from playwright_stealth import Stealth

from ..core.errors import NavigationError, PageWatchError
from .watch_config import (
    DEFAULT_TIMEOUT_SECONDS,
    LOCALE,
    PLAYWRIGHT_REMEDY,
    USER_AGENT,
    VIEWPORT,
    WAIT_UNTIL,
)

logger = logging.getLogger(__name__)


_BODY_TEXT_JS = "() => document.body ? document.body.innerText : ''"


@dataclass
class RenderSettings:
    """Browser launch and navigation parameters."""

    timeout: float = DEFAULT_TIMEOUT_SECONDS
    headless: bool = True
    user_agent: str = USER_AGENT
    viewport: Dict[str, int] = field(default_factory=lambda: dict(VIEWPORT))
    locale: str = LOCALE
    wait_until: str = WAIT_UNTIL


class RenderedPage:
    """A loaded page that can report its markup and selector match counts."""

    def __init__(self, page: Any, url: str, status: Optional[int] = None) -> None:
        self._page = page
        self.url = url
        self.status = status

    async def content(self) -> str:
        try:
            return await self._page.content()
        except PlaywrightError as exc:
            # e.g. a challenge page reloading itself after network idle
            raise NavigationError(self.url, str(exc)) from exc

    async def count(self, selector: str) -> int:
        try:
            return await self._page.locator(selector).count()
        except PlaywrightError as exc:
            raise PageWatchError(f"Selector query {selector!r} failed on {self.url}: {exc}") from exc


class PlaywrightRenderer:
    """Async context manager owning one Chromium instance for a whole run.

    ``open_page`` hands out a fresh BrowserContext per URL so cookies and
    storage never leak between pages.
    """

    def __init__(self, settings: Optional[RenderSettings] = None) -> None:
        self.settings = settings or RenderSettings()
        self._playwright: Any = None
        self._browser: Any = None
        self._stealth = Stealth()

    async def __aenter__(self) -> "PlaywrightRenderer":
        await self.start()
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.close()

    async def start(self) -> None:
        self._playwright = await async_playwright().start()
        try:
            self._browser = await self._playwright.chromium.launch(headless=self.settings.headless)
        except PlaywrightError as exc:
            await self._playwright.stop()
            self._playwright = None
            raise PageWatchError(f"Unable to launch Chromium: {exc}. {PLAYWRIGHT_REMEDY}") from exc
        logger.debug("Browser launched (headless=%s)", self.settings.headless)

    async def close(self) -> None:
        browser, self._browser = self._browser, None
        pw, self._playwright = self._playwright, None
        try:
            if browser is not None:
                await browser.close()
                logger.debug("Browser closed")
        finally:
            if pw is not None:
                await pw.stop()

    @asynccontextmanager
    async def open_page(self, url: str) -> AsyncIterator[RenderedPage]:
        if self._browser is None:
            raise PageWatchError("Renderer is not started")
        try:
            context = await self._browser.new_context(
                user_agent=self.settings.user_agent,
                viewport=self.settings.viewport,
                locale=self.settings.locale,
                java_script_enabled=True,
            )
        except PlaywrightError as exc:
            raise NavigationError(url, str(exc)) from exc
        try:
            try:
                page = await context.new_page()
                # Stealth patches must be installed before the first navigation.
                await self._stealth.apply_stealth_async(page)
                response = await page.goto(
                    url,
                    timeout=int(self.settings.timeout * 1000),
                    wait_until=self.settings.wait_until,
                )
                status = response.status if response is not None else None
                body_text = None
                if status is not None and status >= 400:
                    body_text = (await page.evaluate(_BODY_TEXT_JS)) or ""
            except PlaywrightError as exc:
                raise NavigationError(url, str(exc)) from exc
            if body_text is not None and not body_text.strip():
                raise NavigationError(url, f"HTTP {status} with empty page")
            yield RenderedPage(page, url, status)
        finally:
            try:
                await context.close()
            except PlaywrightError as exc:
                logger.warning("Browser context for %s did not close cleanly: %s", url, exc)


__all__ = [
    "PlaywrightRenderer",
    "RenderSettings",
    "RenderedPage",
]
