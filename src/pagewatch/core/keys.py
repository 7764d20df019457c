"""Shared summary keys to avoid magic strings across pagewatch modules."""

from __future__ import annotations

# Per-page result keys
K_URL = "url"
K_VALID = "valid"
K_MATCHED_WORD = "matched_word"
K_SELECTOR_COUNT = "selector_count"

# Run summary keys
K_RUN_ID = "run_id"
K_MODE = "mode"
K_SKIPPED = "skipped"
K_RESULTS = "results"
K_VALID_URLS = "valid_urls"
K_NOTIFIED = "notified"
K_LOCK_WRITTEN = "lock_written"
K_MESSAGE_ID = "message_id"
