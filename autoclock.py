#!/usr/bin/env python3
"""
AutoClock: one clock/break transition on the ClockOn web portal per run.

    autoclock on     clock on, or end a break
    autoclock off    clock off, or start a break

What a run does, in order (the first failure stops it):
- cookie: fetch a session id from the portal root.
- login: post the login form and keep the dashboard markup.
- status: read Clocked On / Clocked Off / On Break off the disabled buttons.
- plan: pick the one button the operator's 'on'/'off' allows from that status.
- action: press it, then read the callback response back and make sure the
  portal really did what we asked.

Credentials come from CLOCKON_USERNAME / CLOCKON_PASSWORD (a .env file is read too).
"""

import argparse
import logging
import os
import sys
from typing import Callable, List, Optional, TypeVar

from dotenv import load_dotenv

from clock_errors import ClockError, NoOperator
from clock_portal import Action, confirm_action, plan_action, resolve_status
from clock_session import PortalSession

T = TypeVar("T")

load_dotenv()

# ----------------- CONFIG -----------------
PORTAL_URL = os.getenv("CLOCKON_URL", "https://webportal.clockon.com.au:4465/")
USERNAME = os.getenv("CLOCKON_USERNAME", "")
PASSWORD = os.getenv("CLOCKON_PASSWORD", "")

USER_AGENT = "Mozilla/5.0 (Windows NT 10.0; rv:110.0) Gecko/20100101 Firefox/110.0"
HTTP_TIMEOUT = 30  # seconds

OPERATORS = {"on": True, "off": False}

LOG_FORMAT = "[%(asctime)s] %(levelname)s: %(message)s"
LOG_HANDLER_NAMES = ("autoclock.console", "autoclock.file")
# ------------------------------------------

logger = logging.getLogger("AutoClock")


def configure_logging(verbose: bool = False, log_file: Optional[str] = None) -> None:
    formatter = logging.Formatter(LOG_FORMAT)
    root = logging.getLogger()
    root.setLevel(logging.DEBUG)

    # replace our handlers from an earlier call instead of stacking them
    for handler in [h for h in root.handlers if h.get_name() in LOG_HANDLER_NAMES]:
        root.removeHandler(handler)
        handler.close()

    sh = logging.StreamHandler(sys.stdout)
    sh.set_name("autoclock.console")
    sh.setLevel(logging.DEBUG if verbose else logging.INFO)
    sh.setFormatter(formatter)
    root.addHandler(sh)

    if log_file:
        fh = logging.FileHandler(log_file)
        fh.set_name("autoclock.file")
        fh.setLevel(logging.DEBUG)
        fh.setFormatter(formatter)
        root.addHandler(fh)

    logging.getLogger("urllib3").setLevel(logging.WARNING)


def parse_operator(value: Optional[str]) -> bool:
    if value is None:
        raise NoOperator()
    try:
        return OPERATORS[value]
    except KeyError:
        raise NoOperator(value) from None


def stage(name: str, fn: Callable[..., T], *args) -> T:
    """Run one pipeline stage, attributing any ClockError it raises to ``name``."""
    logger.debug(f"Stage {name} starting")
    try:
        return fn(*args)
    except ClockError as e:
        e.stage = name
        raise


def submit_and_verify(portal: PortalSession, cookie: str, action: Action) -> Action:
    body = portal.submit_action(cookie, action)
    return confirm_action(action, body)


def run(portal: PortalSession, want_active: bool, dry_run: bool = False) -> Action:
    """Perform (or with ``dry_run`` only plan) the single transition for ``want_active``."""
    cookie = stage("cookie", portal.acquire_cookie)
    page = stage("login", portal.login, cookie)
    status = stage("status", resolve_status, page)
    action = stage("plan", plan_action, status, want_active)
    if dry_run:
        logger.info(f"Dry run: would do action {action}")
        return action
    return stage("action", submit_and_verify, portal, cookie, action)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="autoclock", description="Clock on/off the ClockOn web portal.")
    parser.add_argument("operator", nargs="?", help="'on' to clock on or end a break, 'off' to clock off or start a break")
    parser.add_argument("--dry-run", action="store_true", help="work out the action but do not submit it")
    parser.add_argument("--verbose", "-v", action="store_true", help="debug output on the console")
    parser.add_argument("--log-file", default=None, help="also write debug logs to this file")
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    configure_logging(args.verbose, args.log_file)

    try:
        want_active = stage("operator", parse_operator, args.operator)
        if not USERNAME or not PASSWORD:
            logger.warning("CLOCKON_USERNAME / CLOCKON_PASSWORD not set; login will likely fail")
        with PortalSession(PORTAL_URL, USERNAME, PASSWORD, USER_AGENT, timeout=HTTP_TIMEOUT) as portal:
            action = run(portal, want_active, dry_run=args.dry_run)
    except ClockError as e:
        logger.error(f"{e.stage or 'run'} failed: {type(e).__name__}: {e}")
        return 1

    logger.info(f"Done: {action}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
