from __future__ import annotations

import os
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, List, Optional

import boto3
from botocore.exceptions import BotoCoreError

from .notifier import region_from_arn
from .watch_config import PLAYWRIGHT_REMEDY


def redact_value(value: str, keep: int = 4) -> str:
    """Mask an AWS access key id, keeping its first and last characters."""

    raw = (value or "").strip()
    if len(raw) <= keep * 2:
        return "*" * len(raw)
    return f"{raw[:keep]}...{raw[-keep:]}"


def _check_chromium_installed() -> bool:
    try:
        from playwright.sync_api import sync_playwright

        with sync_playwright() as p:
            return Path(p.chromium.executable_path).exists()
    except Exception:
        return False


def _check_writable(path: Path) -> bool:
    try:
        if path.exists():
            return os.access(path, os.W_OK)
        parent = path.parent
        if not parent.exists():
            return False
        return os.access(parent, os.W_OK)
    except OSError:
        return False


def collect_environment_warnings(*, chromium_ok: Optional[bool] = None) -> List[Dict[str, str]]:
    """Return problems that make every run fail before the first page loads."""

    if chromium_ok is None:
        chromium_ok = _check_chromium_installed()
    warnings: List[Dict[str, str]] = []
    if not chromium_ok:
        warnings.append(
            {
                "code": "chromium_missing",
                "message": "Playwright Chromium is not installed; pages cannot be rendered",
                "remedy": PLAYWRIGHT_REMEDY,
            }
        )
    if os.getenv("AWS_ACCESS_KEY_ID") and not os.getenv("AWS_SECRET_ACCESS_KEY"):
        warnings.append(
            {
                "code": "aws_secret_missing",
                "message": "AWS_ACCESS_KEY_ID is set without AWS_SECRET_ACCESS_KEY",
                "remedy": "Set both variables together or use AWS_PROFILE.",
            }
        )
    return warnings


def _entry(
    name: str,
    ok: bool,
    detail: str,
    *,
    remedy: Optional[str] = None,
    level: str = "warn",
    value: Optional[str] = None,
) -> Dict[str, Any]:
    entry: Dict[str, Any] = {"name": name, "status": "ok" if ok else "missing", "level": level, "detail": detail}
    if remedy and not ok:
        entry["remedy"] = remedy
    if value:
        entry["value"] = value
    return entry


def _aws_checks(target: Optional[str]) -> List[Dict[str, Any]]:
    credentials_remedy = "Set AWS_ACCESS_KEY_ID/AWS_SECRET_ACCESS_KEY, AWS_PROFILE, or attach an instance role."
    region_remedy = "Set AWS_DEFAULT_REGION or pass a regional SNS ARN via --awsSnsArn."
    try:
        session = boto3.Session()
        credentials = session.get_credentials()
        region = session.region_name
    except BotoCoreError as exc:
        # a broken AWS_PROFILE fails every boto3 lookup the same way
        detail = f"AWS configuration could not be loaded: {exc}"
        return [
            _entry("AWS_ACCESS_KEY_ID", False, detail, remedy=credentials_remedy),
            _entry("AWS_DEFAULT_REGION", False, detail, remedy=region_remedy),
        ]

    checks = []
    if credentials is None:
        checks.append(_entry("AWS_ACCESS_KEY_ID", False, "No AWS credentials found", remedy=credentials_remedy))
    else:
        checks.append(
            _entry(
                "AWS_ACCESS_KEY_ID",
                True,
                f"Resolved via {credentials.method}",
                value=redact_value(credentials.access_key),
            )
        )

    source = "AWS config"
    if not region and target:
        region, source = region_from_arn(target), "SNS ARN"
    detail = f"{region} (from {source})" if region else "No region configured"
    checks.append(_entry("AWS_DEFAULT_REGION", bool(region), detail, remedy=region_remedy))
    return checks


def build_doctor_report(
    *,
    lock_file: Optional[Path] = None,
    target: Optional[str] = None,
) -> Dict[str, Any]:
    """Check everything a scheduled run needs before it first touches the network."""

    chromium_ok = _check_chromium_installed()
    checks = [
        _entry(
            "playwright",
            chromium_ok,
            "Chromium installed" if chromium_ok else "Chromium not installed; pages cannot be rendered",
            remedy=PLAYWRIGHT_REMEDY,
        )
    ]
    checks.extend(_aws_checks(target))
    if lock_file is not None:
        checks.append(
            _entry(
                "PAGEWATCH_LOCK_FILE",
                _check_writable(Path(lock_file)),
                str(lock_file),
                remedy="Create the lock file's directory or choose a writable --lockFile path.",
            )
        )
    else:
        checks.append(
            _entry("PAGEWATCH_LOCK_FILE", False, "No lock file; every matching run will notify", level="info")
        )

    return {
        "generated_at": datetime.now(timezone.utc).replace(microsecond=0).isoformat().replace("+00:00", "Z"),
        "ok": all(c["status"] == "ok" for c in checks if c["level"] == "warn"),
        "checks": checks,
        "environment_warnings": collect_environment_warnings(chromium_ok=chromium_ok),
    }


def format_doctor_report(report: Dict[str, Any]) -> str:
    lines = ["Pagewatch doctor", f"Generated: {report.get('generated_at')}", ""]
    for check in report.get("checks", []):
        value = f" ({check['value']})" if check.get("value") else ""
        lines.append(f"- [{check.get('level', 'info')}] {check['name']}: {check['status']}{value}")
        if check.get("detail"):
            lines.append(f"  detail: {check['detail']}")
        if check.get("remedy"):
            lines.append(f"  remedy: {check['remedy']}")
    warnings = report.get("environment_warnings") or []
    if warnings:
        lines += ["", "Environment warnings:"]
        for warning in warnings:
            lines.append(f"- {warning['code']}: {warning['message']}")
            if warning.get("remedy"):
                lines.append(f"  remedy: {warning['remedy']}")
    return "\n".join(lines) + "\n"
