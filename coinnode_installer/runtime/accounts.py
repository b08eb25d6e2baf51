# Path and File Name : /home/coinnode/installer/coinnode_installer/runtime/accounts.py
# Author: nXxBku0CKFAJCBN3X1g3bQk7OxYQylg8CMw1iGsq7gU
# Details of functionality of this file: Service user lookup, creation, ownership changes and removal

"""
Service account management.

Ownership changes only happen when running as root; an unprivileged test run
leaves files owned by the caller.
"""

import grp
import logging
import os
import pwd
from pathlib import Path

from ..host.runner import HostRunner
from ..tasks import StepContext, StepResult

logger = logging.getLogger(__name__)


def user_exists(user: str) -> bool:
    try:
        pwd.getpwnam(user)
        return True
    except KeyError:
        return False


def group_exists(group: str) -> bool:
    try:
        grp.getgrnam(group)
        return True
    except KeyError:
        return False


def chown_to_user(path: Path, user: str) -> None:
    """chown path to user:user (user's primary group). No-op unless running as root."""
    if os.geteuid() != 0:
        return
    try:
        entry = pwd.getpwnam(user)
    except KeyError:
        raise RuntimeError(f"Service user '{user}' not found; it must be created before {path} is written")
    os.chown(path, entry.pw_uid, entry.pw_gid)


def create_service_user(context: StepContext) -> StepResult:
    """No-op when the user exists; otherwise a no-login system account homed in the data dir."""
    config = context.config
    user = config.service_user
    if user_exists(user):
        return StepResult.skip(f"User '{user}' already exists")

    result = context.runner.run([
        "useradd", "--system", "--shell", "/usr/sbin/nologin",
        "--home-dir", config.paths.data_dir, user,
    ])
    if not result.ok:
        return StepResult.failure(f"useradd failed for '{user}'", log_excerpt=result.tail())
    return StepResult.success(f"User '{user}' created")


def remove_service_user(runner: HostRunner, user: str) -> bool:
    """Kill the user's processes, delete the user, its group and any stray home. Returns True if anything was removed."""
    removed = False
    if user_exists(user):
        runner.run(["pkill", "-u", user])
        result = runner.run(["userdel", "-f", user])
        if result.ok:
            removed = True
        else:
            logger.warning(f"userdel -f {user} failed: {result.tail(5)}")
    if group_exists(user):
        runner.run(["groupdel", user])
        removed = True
    home = Path("/home") / user
    if home.exists():
        runner.run(["rm", "-rf", str(home)])
        removed = True
    return removed
