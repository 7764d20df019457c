"""Aggregated notification delivery over AWS SNS."""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from typing import Any, Dict, Optional, Sequence

import boto3
from botocore.config import Config as BotoConfig
from botocore.exceptions import BotoCoreError, ClientError

from ..core.errors import NotifyError
from .lock_guard import mark_sent
from .models import RunConfig
from .watch_config import MESSAGE_HEADER, MESSAGE_SEPARATOR

logger = logging.getLogger(__name__)


def build_message(urls: Sequence[str]) -> str:
    return f"{MESSAGE_HEADER}{MESSAGE_SEPARATOR.join(urls)}"


def region_from_arn(arn: str) -> Optional[str]:
    """Extract the region field of an ARN (``arn:partition:service:region:...``)."""

    parts = (arn or "").split(":")
    if len(parts) < 4 or parts[0] != "arn":
        return None
    return parts[3] or None


class SnsTransport:
    """Thin wrapper over the boto3 SNS client that raises NotifyError on failure."""

    def __init__(self, client: Any = None, *, region_name: Optional[str] = None) -> None:
        self._client = client
        self._region_name = region_name

    def _get_client(self, target: str) -> Any:
        if self._client is None:
            session = boto3.Session()
            region = self._region_name or session.region_name or region_from_arn(target)
            cfg = BotoConfig(retries={"max_attempts": 1, "mode": "standard"})
            self._client = session.client("sns", region_name=region, config=cfg)
        return self._client

    def publish(self, target: str, subject: str, message: str) -> Dict[str, Any]:
        try:
            client = self._get_client(target)
            return client.publish(TargetArn=target, Subject=subject, Message=message)
        except ClientError as exc:
            error = exc.response.get("Error", {})
            detail = f"{error.get('Code', 'ClientError')}: {error.get('Message', str(exc))}"
            raise NotifyError(target, detail) from exc
        except BotoCoreError as exc:
            raise NotifyError(target, str(exc)) from exc


@dataclass
class NotificationReceipt:
    message_id: Optional[str]
    lock_written: bool
    response: Dict[str, Any]


def notify(valid_urls: Sequence[str], config: RunConfig, transport: Any) -> NotificationReceipt:
    """Send one message listing ``valid_urls`` and write the lock marker on success.

    A failed marker write is logged but does not fail the run; the message
    has already been delivered.
    """

    if not valid_urls:
        raise ValueError("notify() requires at least one valid URL")
    target = config.notification_target
    logger.info("Valid Urls Found, notifying ARN: %s", target)
    response = transport.publish(target, config.subject, build_message(valid_urls))
    logger.info("Notification Sent: %s", json.dumps(response, default=str))

    lock_written = False
    try:
        lock_written = mark_sent(config.lock_file)
    except OSError as exc:
        logger.warning(
            "Notification sent but lock file %s could not be written (%s); the next run may alert again",
            config.lock_file,
            exc,
        )
    return NotificationReceipt(
        message_id=(response or {}).get("MessageId"),
        lock_written=lock_written,
        response=response or {},
    )


__all__ = ["NotificationReceipt", "SnsTransport", "build_message", "notify", "region_from_arn"]
