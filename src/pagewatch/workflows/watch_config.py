"""Pagewatch defaults (browser profile, timeouts, message layout, env names).

Centralizes static defaults so the renderer and notifier have no embedded
magic strings. Callers can inject their own RenderSettings to override the
browser-facing ones.
"""

from __future__ import annotations

# Notification layout
MESSAGE_HEADER = "Web Page Matches Found:\n\n"
MESSAGE_SEPARATOR = "\n"

# Navigation
DEFAULT_TIMEOUT_SECONDS = 30.0
WAIT_UNTIL = "networkidle"

# Browser profile
USER_AGENT = (
    "Mozilla/5.0 (X11; Linux x86_64) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/124.0 Safari/537.36"
)
VIEWPORT = {"width": 1920, "height": 1080}
LOCALE = "en-US"

# Environment variables
ENV_SNS_ARN = "PAGEWATCH_SNS_ARN"
ENV_SUBJECT = "PAGEWATCH_SUBJECT"
ENV_LOCK_FILE = "PAGEWATCH_LOCK_FILE"
ENV_NAV_TIMEOUT = "PAGEWATCH_NAV_TIMEOUT"
ENV_PLAYWRIGHT_HEADED = "PAGEWATCH_PLAYWRIGHT_HEADED"

PLAYWRIGHT_REMEDY = "Install Playwright and run `playwright install --with-deps chromium`."
