from __future__ import annotations

import logging
import sys
from pathlib import Path
from typing import List, Optional, Sequence

import typer
from dotenv import load_dotenv

from .core.errors import ConfigError, PageWatchError
from .runner import run_watch
from .workflows.doctor import build_doctor_report, format_doctor_report
from .workflows.models import build_run_config
from .workflows.watch_config import (
    DEFAULT_TIMEOUT_SECONDS,
    ENV_LOCK_FILE,
    ENV_NAV_TIMEOUT,
    ENV_SNS_ARN,
    ENV_SUBJECT,
)

load_dotenv()

logger = logging.getLogger(__name__)

app = typer.Typer(add_completion=False, no_args_is_help=False)

# Flags that accept several space-separated values (``--urls a b c``).
MULTI_VALUE_FLAGS = {"--urls", "-u", "--invalidWords", "-i"}

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(message)s"


def _help_full() -> str:
    return """Pagewatch (scheduled page watcher)

Usage:
  pagewatch --urls <URL...> (--invalidWords <WORD...> | --validCssSelector <SELECTOR>)
            --awsSnsArn <ARN> --subject <TEXT> [--lockFile <PATH>] [--debug]
            [--timeout <SECONDS>] [--json]
  pagewatch --doctor [--lockFile <PATH>] [--awsSnsArn <ARN>]

Modes:
  --invalidWords      Page is a match when none of the words appear in its markup.
                      Every URL is scanned.
  --validCssSelector  Page is a match when the selector matches an element.
                      Scanning stops at the first match.

  --urls and --invalidWords take several values after one flag. A value that
  starts with "-" ends that list; pass it as --invalidWords=-50% instead.

Lock file:
  When --lockFile exists the run exits immediately. It is created after a
  notification is delivered; delete it to re-arm alerts.

Important env vars:
  PAGEWATCH_SNS_ARN            Default for --awsSnsArn.
  PAGEWATCH_SUBJECT            Default for --subject.
  PAGEWATCH_LOCK_FILE          Default for --lockFile.
  PAGEWATCH_NAV_TIMEOUT        Default for --timeout (seconds).
  PAGEWATCH_PLAYWRIGHT_HEADED  Set to 1 to watch the browser work.
  AWS_PROFILE                  Standard boto3 settings (a .env file is honoured).
  AWS_DEFAULT_REGION           Falls back to the region in --awsSnsArn.

Exit codes:
  0  Run finished (notified, nothing matched, or lock file present).
  2  Invalid or missing options.
  3  Fatal error (page failed to load, notification failed, lock check failed).

Cron example:
  */15 * * * * pagewatch --urls https://shop.example/item --invalidWords "Out of stock" \\
      --awsSnsArn arn:aws:sns:us-west-2:111111111111:Alert --subject "IN STOCK ALERT" \\
      --lockFile /var/tmp/pagewatch.lock
"""


def expand_multi_value_flags(argv: Sequence[str]) -> List[str]:
    """Rewrite ``--urls a b`` into ``--urls a --urls b`` for click's repeated options."""

    expanded: List[str] = []
    flag: Optional[str] = None
    seen_value = False
    for idx, token in enumerate(argv):
        if token == "--":
            expanded.extend(argv[idx:])
            break
        if token in MULTI_VALUE_FLAGS:
            flag = token
            seen_value = False
            expanded.append(token)
            continue
        if token.startswith("-"):
            flag = None
            expanded.append(token)
            continue
        if flag is not None:
            if seen_value:
                expanded.append(flag)
            seen_value = True
        expanded.append(token)
    return expanded


def configure_logging(debug: bool) -> None:
    level = logging.DEBUG if debug else logging.INFO
    logging.basicConfig(level=level, format=LOG_FORMAT)
    logging.getLogger().setLevel(level)
    # boto's debug output includes signed request headers
    for noisy in ("botocore", "boto3", "urllib3", "asyncio"):
        logging.getLogger(noisy).setLevel(logging.WARNING)


@app.command()
def main(
    urls: Optional[List[str]] = typer.Option(
        None, "--urls", "-u", help="Web pages to scan. Each URL provided will be processed."
    ),
    invalid_words: Optional[List[str]] = typer.Option(
        None, "--invalidWords", "-i", help="If all the provided words are missing from a page, it matches."
    ),
    valid_css_selector: Optional[str] = typer.Option(
        None, "--validCssSelector", "-c", help="If the selector matches an element on a page, it matches."
    ),
    aws_sns_arn: Optional[str] = typer.Option(
        None, "--awsSnsArn", "-a", envvar=ENV_SNS_ARN, help="SNS ARN notified when matches are found."
    ),
    subject: Optional[str] = typer.Option(
        None, "--subject", "-s", envvar=ENV_SUBJECT, help="Subject line of the notification."
    ),
    lock_file: Optional[Path] = typer.Option(
        None,
        "--lockFile",
        "-l",
        envvar=ENV_LOCK_FILE,
        help="If this file exists the run is skipped; it is created once a notification has been sent.",
    ),
    debug: bool = typer.Option(False, "--debug", "-d", help="Print debug logs."),
    timeout: float = typer.Option(
        DEFAULT_TIMEOUT_SECONDS, "--timeout", envvar=ENV_NAV_TIMEOUT, help="Navigation timeout in seconds."
    ),
    json_out: bool = typer.Option(False, "--json", help="Print the run summary JSON to stdout."),
    help_full: bool = typer.Option(False, "--help-full", is_eager=True, help="Show expanded help."),
    doctor: bool = typer.Option(False, "--doctor", is_eager=True, help="Run environment diagnostics and exit."),
) -> None:
    if help_full:
        typer.echo(_help_full())
        raise typer.Exit(code=0)

    configure_logging(debug)

    if doctor:
        report = build_doctor_report(lock_file=lock_file, target=aws_sns_arn)
        typer.echo(format_doctor_report(report))
        raise typer.Exit(code=0 if report.get("ok", True) else 2)

    try:
        config = build_run_config(
            urls=urls,
            invalid_words=invalid_words,
            valid_css_selector=valid_css_selector,
            aws_sns_arn=aws_sns_arn,
            subject=subject,
            lock_file=lock_file,
            debug=debug,
            timeout=timeout,
        )
    except ConfigError as exc:
        raise typer.BadParameter(str(exc)) from exc

    logger.info("Web Page Scanner")
    if debug:
        logger.debug("---DEBUG LOGGING ENABLED---")

    try:
        summary = run_watch(config)
    except (PageWatchError, OSError) as exc:
        typer.echo(f"fatal: {exc}", err=True)
        raise typer.Exit(code=3)
    if json_out:
        sys.stdout.write(summary.to_json() + "\n")
    raise typer.Exit(code=0)


def run(argv: Optional[Sequence[str]] = None) -> None:
    """Console-script entry point."""

    args = expand_multi_value_flags(sys.argv[1:] if argv is None else argv)
    app(args=args, prog_name="pagewatch")
