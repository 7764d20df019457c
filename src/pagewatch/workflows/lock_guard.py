"""Lock-file gate that suppresses repeat notifications across runs."""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Optional, Union

logger = logging.getLogger(__name__)

PathLike = Union[str, Path]


def should_run(lock_file: Optional[PathLike]) -> bool:
    """Return False when a lock marker exists at ``lock_file``.

    Only "not found" style errors count as an absent marker; anything else
    (permission denied, I/O error) propagates to the caller.
    """

    if not lock_file:
        return True
    try:
        os.lstat(lock_file)
    except (FileNotFoundError, NotADirectoryError):
        return True
    return False


def mark_sent(lock_file: Optional[PathLike]) -> bool:
    """Create (or truncate) the lock marker. Returns True when a file was written."""

    if not lock_file:
        return False
    path = Path(lock_file)
    with path.open("w", encoding="utf-8"):
        pass
    logger.debug("Lock file written: %s", path)
    return True


__all__ = ["should_run", "mark_sent"]
