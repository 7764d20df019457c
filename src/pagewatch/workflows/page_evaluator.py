"""Per-URL validity evaluation for both watch modes."""

from __future__ import annotations

import logging
from typing import Iterable, Optional

from .models import PageResult, SelectorPresence, ValidityMode, WordAbsence

logger = logging.getLogger(__name__)


def find_invalid_word(content: str, words: Iterable[str]) -> Optional[str]:
    """Return the first word that occurs in ``content`` (case-sensitive), if any."""

    for word in words:
        if word in content:
            return word
    return None


def is_valid_content(content: str, words: Iterable[str]) -> bool:
    return find_invalid_word(content, words) is None


async def evaluate_page(url: str, mode: ValidityMode, renderer) -> PageResult:
    """Load ``url`` in a fresh browser context and decide whether it is valid.

    ``renderer`` must provide an ``open_page(url)`` async context manager
    yielding an object with ``content()`` and ``count(selector)`` coroutines.
    NavigationError from the renderer propagates unchanged.
    """

    logger.info("Loading Page: %s", url)
    async with renderer.open_page(url) as page:
        logger.info("Page Loaded")
        if isinstance(mode, WordAbsence):
            content = await page.content()
            logger.debug("Page Content:\n\n%s\n\n", content)
            matched = find_invalid_word(content, mode.words)
            if matched is not None:
                logger.info('Page contained invalid word: "%s"', matched)
            return PageResult(url=url, is_valid=matched is None, matched_word=matched)
        if isinstance(mode, SelectorPresence):
            count = await page.count(mode.selector)
            logger.debug("Selector %r matched %d element(s)", mode.selector, count)
            return PageResult(url=url, is_valid=count > 0, selector_count=count)
    raise TypeError(f"Unsupported validity mode: {mode!r}")


__all__ = ["evaluate_page", "find_invalid_word", "is_valid_content"]
