# Path and File Name : /home/coinnode/installer/coinnode_installer/services/service_control.py
# Author: nXxBku0CKFAJCBN3X1g3bQk7OxYQylg8CMw1iGsq7gU
# Details of functionality of this file: systemctl wrappers for querying, starting and stopping the node service

"""
Service Control: thin systemctl wrappers.
"""

import logging
from pathlib import Path
from typing import Callable

from ..host.runner import HostRunner
from ..tasks import StepContext, StepResult

logger = logging.getLogger(__name__)

START_POLL_ATTEMPTS = 5
START_POLL_INTERVAL = 1.0
STOP_SETTLE_SECONDS = 5


def is_active(runner: HostRunner, service: str) -> bool:
    return runner.run(["systemctl", "is-active", "--quiet", service]).ok


def is_registered(runner: HostRunner, service: str, systemd_dir: Path) -> bool:
    if (Path(systemd_dir) / f"{service}.service").exists():
        return True
    result = runner.run(["systemctl", "list-unit-files", f"{service}.service", "--no-legend"])
    return result.ok and f"{service}.service" in result.output


def stop_service(runner: HostRunner, service: str, sleep: Callable[[float], None]) -> bool:
    """Stop the service if active. Returns True if it was running."""
    if not is_active(runner, service):
        return False
    logger.info(f"Stopping {service}")
    runner.run(["systemctl", "stop", service])
    sleep(STOP_SETTLE_SECONDS)
    return True


def journal_hint(service: str) -> str:
    return f"sudo journalctl -u {service} -n 50"


def start_service(context: StepContext) -> StepResult:
    """Enable at boot, start, then poll is-active briefly. Inactive is advisory."""
    service = context.config.profile.service_name
    runner = context.runner

    runner.run(["systemctl", "enable", service])
    result = runner.run(["systemctl", "start", service])
    if not result.ok:
        return StepResult.failure(f"systemctl start {service} failed", log_excerpt=result.tail(),
                                  remediation=journal_hint(service))

    for _ in range(START_POLL_ATTEMPTS):
        context.sleep(START_POLL_INTERVAL)
        if is_active(runner, service):
            return StepResult.success(f"{service} is running")

    return StepResult.failure(f"{service} is not active yet (it may still be starting)",
                              remediation=journal_hint(service))


def stop_service_step(context: StepContext) -> StepResult:
    service = context.config.profile.service_name
    if stop_service(context.runner, service, context.sleep):
        return StepResult.success(f"{service} stopped")
    return StepResult.skip(f"{service} was not running")
