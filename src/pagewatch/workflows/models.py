"""Typed run configuration and per-page results."""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Iterable, Optional, Tuple, Union

from ..core.errors import ConfigError
from ..core.keys import K_MATCHED_WORD, K_SELECTOR_COUNT, K_URL, K_VALID
from .watch_config import DEFAULT_TIMEOUT_SECONDS, ENV_PLAYWRIGHT_HEADED


@dataclass(frozen=True)
class WordAbsence:
    """A page is valid when none of ``words`` occurs in its rendered markup."""

    words: Tuple[str, ...]
    stop_on_first_match: bool = False

    @property
    def name(self) -> str:
        return "word_absence"


@dataclass(frozen=True)
class SelectorPresence:
    """A page is valid when ``selector`` matches at least one element."""

    selector: str
    stop_on_first_match: bool = True

    @property
    def name(self) -> str:
        return "selector_presence"


ValidityMode = Union[WordAbsence, SelectorPresence]


@dataclass(frozen=True)
class RunConfig:
    """Immutable configuration for a single pagewatch invocation."""

    urls: Tuple[str, ...]
    mode: ValidityMode
    notification_target: str
    subject: str
    lock_file: Optional[Path] = None
    verbose: bool = False
    timeout: float = DEFAULT_TIMEOUT_SECONDS
    headless: bool = True

    def to_dict(self) -> Dict[str, Any]:
        payload: Dict[str, Any] = {
            "urls": list(self.urls),
            "mode": self.mode.name,
            "notification_target": self.notification_target,
            "subject": self.subject,
            "lock_file": str(self.lock_file) if self.lock_file else None,
            "verbose": self.verbose,
            "timeout": self.timeout,
            "headless": self.headless,
        }
        if isinstance(self.mode, WordAbsence):
            payload["invalid_words"] = list(self.mode.words)
        else:
            payload["valid_css_selector"] = self.mode.selector
        return payload


@dataclass(frozen=True)
class PageResult:
    """Outcome of evaluating one URL."""

    url: str
    is_valid: bool
    matched_word: Optional[str] = None
    selector_count: Optional[int] = field(default=None)

    def to_dict(self) -> Dict[str, Any]:
        payload: Dict[str, Any] = {K_URL: self.url, K_VALID: self.is_valid}
        if self.matched_word is not None:
            payload[K_MATCHED_WORD] = self.matched_word
        if self.selector_count is not None:
            payload[K_SELECTOR_COUNT] = self.selector_count
        return payload


def _clean_tokens(values: Optional[Iterable[str]]) -> Tuple[str, ...]:
    tokens = [str(v) for v in (values or []) if str(v).strip()]
    return tuple(dict.fromkeys(tokens))


def _headless_from_env() -> bool:
    raw = os.getenv(ENV_PLAYWRIGHT_HEADED, "0")
    return str(raw).strip().lower() in {"0", "false", "no", "off", ""}


def build_run_config(
    *,
    urls: Optional[Iterable[str]],
    invalid_words: Optional[Iterable[str]] = None,
    valid_css_selector: Optional[str] = None,
    aws_sns_arn: Optional[str] = None,
    subject: Optional[str] = None,
    lock_file: Optional[Union[str, Path]] = None,
    debug: bool = False,
    timeout: Optional[float] = None,
    headless: Optional[bool] = None,
) -> RunConfig:
    """Validate raw invocation values and freeze them into a RunConfig.

    Raises ConfigError when a required value is missing or when both or
    neither of the validity modes are requested.
    """

    url_list = tuple(u.strip() for u in (urls or []) if u and u.strip())
    if not url_list:
        raise ConfigError("At least one URL is required (--urls).")

    raw_words = list(invalid_words or [])
    words = _clean_tokens(raw_words)
    selector = (valid_css_selector or "").strip()
    if raw_words and selector:
        raise ConfigError("Use either --invalidWords or --validCssSelector, not both.")
    if raw_words and not words:
        raise ConfigError("--invalidWords needs at least one non-empty word.")
    if not words and not selector:
        raise ConfigError("One of --invalidWords or --validCssSelector is required.")
    mode: ValidityMode = WordAbsence(words) if words else SelectorPresence(selector)

    target = (aws_sns_arn or "").strip()
    if not target:
        raise ConfigError("An SNS target ARN is required (--awsSnsArn).")
    subject_line = (subject or "").strip()
    if not subject_line:
        raise ConfigError("A notification subject is required (--subject).")

    if timeout is None:
        timeout = DEFAULT_TIMEOUT_SECONDS
    if timeout <= 0:
        raise ConfigError("--timeout must be positive.")

    lock_path = Path(lock_file).expanduser() if lock_file else None

    return RunConfig(
        urls=url_list,
        mode=mode,
        notification_target=target,
        subject=subject_line,
        lock_file=lock_path,
        verbose=debug,
        timeout=float(timeout),
        headless=_headless_from_env() if headless is None else headless,
    )
