"""High-level exports for the pagewatch workflows."""

from .lock_guard import mark_sent, should_run
from .models import PageResult, RunConfig, SelectorPresence, WordAbsence, build_run_config
from .notifier import NotificationReceipt, SnsTransport, build_message, notify
from .page_evaluator import evaluate_page, find_invalid_word, is_valid_content
from .renderer import PlaywrightRenderer, RenderSettings

__all__ = [
    "NotificationReceipt",
    "PageResult",
    "PlaywrightRenderer",
    "RenderSettings",
    "RunConfig",
    "SelectorPresence",
    "SnsTransport",
    "WordAbsence",
    "build_message",
    "build_run_config",
    "evaluate_page",
    "find_invalid_word",
    "is_valid_content",
    "mark_sent",
    "notify",
    "should_run",
]
