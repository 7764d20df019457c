from __future__ import annotations

import asyncio
import json
import logging
import secrets
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Callable, Dict, List, Optional

from .core.keys import (
    K_LOCK_WRITTEN,
    K_MESSAGE_ID,
    K_MODE,
    K_NOTIFIED,
    K_RESULTS,
    K_RUN_ID,
    K_SKIPPED,
    K_VALID_URLS,
)
from .workflows.lock_guard import should_run
from .workflows.models import PageResult, RunConfig
from .workflows.notifier import SnsTransport, notify
from .workflows.page_evaluator import evaluate_page
from .workflows.renderer import PlaywrightRenderer, RenderSettings

logger = logging.getLogger(__name__)

SKIPPED_LOCK_PRESENT = "lock_present"

RendererFactory = Callable[[RunConfig], Any]


def generate_run_id(now: Optional[datetime] = None) -> str:
    stamp = (now or datetime.now(timezone.utc)).strftime("%Y%m%dT%H%M%SZ")
    suffix = secrets.token_hex(3)
    return f"{stamp}_{suffix}"


def _iso(ts: datetime) -> str:
    return ts.replace(microsecond=0).isoformat().replace("+00:00", "Z")


@dataclass
class WatchSummary:
    """Everything a single run decided, for logs and ``--json`` output."""

    run_id: str
    mode: str
    started_at: datetime
    finished_at: Optional[datetime] = None
    skipped: Optional[str] = None
    results: List[PageResult] = field(default_factory=list)
    valid_urls: List[str] = field(default_factory=list)
    notified: bool = False
    lock_written: bool = False
    message_id: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        finished = self.finished_at or self.started_at
        return {
            K_RUN_ID: self.run_id,
            K_MODE: self.mode,
            "started_at": _iso(self.started_at),
            "finished_at": _iso(finished),
            "duration_ms": int((finished - self.started_at).total_seconds() * 1000),
            K_SKIPPED: self.skipped,
            K_RESULTS: [result.to_dict() for result in self.results],
            K_VALID_URLS: list(self.valid_urls),
            K_NOTIFIED: self.notified,
            K_LOCK_WRITTEN: self.lock_written,
            K_MESSAGE_ID: self.message_id,
        }

    def to_json(self) -> str:
        return json.dumps(self.to_dict(), ensure_ascii=False)


async def scan_urls(
    config: RunConfig,
    renderer: Any,
    results: Optional[List[PageResult]] = None,
) -> List[str]:
    """Evaluate ``config.urls`` in order and return the valid ones.

    Stops after the first valid URL when the mode's ``stop_on_first_match``
    is set. Each evaluated PageResult is appended to ``results`` if given.
    """

    valid_urls: List[str] = []
    for url in config.urls:
        result = await evaluate_page(url, config.mode, renderer)
        if results is not None:
            results.append(result)
        if not result.is_valid:
            continue
        logger.info("Valid Page: %s", url)
        valid_urls.append(url)
        if config.mode.stop_on_first_match:
            logger.debug("Stopping scan after first valid page")
            break
    return valid_urls


def _default_renderer(config: RunConfig) -> PlaywrightRenderer:
    return PlaywrightRenderer(RenderSettings(timeout=config.timeout, headless=config.headless))


async def _scan_with_renderer(
    config: RunConfig,
    renderer_factory: RendererFactory,
    results: List[PageResult],
) -> List[str]:
    async with renderer_factory(config) as renderer:
        return await scan_urls(config, renderer, results)


def run_watch(
    config: RunConfig,
    *,
    renderer_factory: Optional[RendererFactory] = None,
    transport: Any = None,
) -> WatchSummary:
    """Run one watch cycle: lock gate, scan, notify.

    NavigationError, NotifyError and lock-check OSError propagate; the
    browser is closed before they leave this function.
    """

    summary = WatchSummary(
        run_id=generate_run_id(),
        mode=config.mode.name,
        started_at=datetime.now(timezone.utc),
    )

    if not should_run(config.lock_file):
        logger.info("Exiting, lock file present")
        summary.skipped = SKIPPED_LOCK_PRESENT
        summary.finished_at = datetime.now(timezone.utc)
        return summary

    logger.debug("Args: %s", json.dumps(config.to_dict(), indent=2))

    factory = renderer_factory or _default_renderer
    summary.valid_urls = asyncio.run(_scan_with_renderer(config, factory, summary.results))

    if summary.valid_urls:
        receipt = notify(summary.valid_urls, config, transport or SnsTransport())
        summary.notified = True
        summary.lock_written = receipt.lock_written
        summary.message_id = receipt.message_id
    else:
        logger.info("No valid pages found; nothing to notify")

    summary.finished_at = datetime.now(timezone.utc)
    return summary


__all__ = ["WatchSummary", "generate_run_id", "run_watch", "scan_urls"]
