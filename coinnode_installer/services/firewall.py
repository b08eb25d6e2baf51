# Path and File Name : /home/coinnode/installer/coinnode_installer/services/firewall.py
# Author: nXxBku0CKFAJCBN3X1g3bQk7OxYQylg8CMw1iGsq7gU
# Details of functionality of this file: Idempotent UFW rule management for the node ports

"""
Firewall: UFW allow rules for the node.

P2P is always opened. RPC is opened only for a standard node bound to all
interfaces; a pool backend never exposes RPC, and an RPC rule left from an
earlier public setup is deleted. Rules already listed by `ufw status` are
not added again.
"""

import logging
import re
from typing import Iterable, List

from ..host.runner import HostRunner
from ..tasks import StepContext, StepResult

logger = logging.getLogger(__name__)

NUMBERED_RULE = re.compile(r"^\[\s*(\d+)\]\s+(.*)$")


def ufw_status(runner: HostRunner) -> str:
    result = runner.run(["ufw", "status"])
    return result.output if result.ok else ""


def is_active(status: str) -> bool:
    return "Status: active" in status


def has_port_rule(status: str, port: int) -> bool:
    prefix = f"{port}/tcp"
    for line in status.splitlines():
        fields = line.split()
        if fields and fields[0] == prefix and "ALLOW" in line:
            return True
    return False


def has_ssh_rule(status: str) -> bool:
    for line in status.splitlines():
        fields = line.split()
        if fields and fields[0] in ("22", "22/tcp", "OpenSSH", "ssh") and "ALLOW" in line:
            return True
    return False


def configure_firewall(context: StepContext) -> StepResult:
    config = context.config
    runner = context.runner
    if not config.firewall_enabled:
        return StepResult.skip("Firewall configuration disabled")

    if not runner.which("ufw"):
        return StepResult.failure("ufw is not installed", remediation="sudo apt-get install -y ufw")

    tag = config.profile.firewall_tag
    status = ufw_status(runner)
    if not is_active(status):
        result = runner.run(["ufw", "--force", "enable"])
        if not result.ok:
            return StepResult.failure("Could not enable ufw", log_excerpt=result.tail(),
                                      remediation="sudo ufw --force enable")
        status = ufw_status(runner)

    if not has_ssh_rule(status):
        runner.run(["ufw", "allow", "ssh"])

    wanted = [(config.network.p2p_port, f"{tag} P2P")]
    if config.rpc_opens_publicly:
        wanted.append((config.network.rpc_port, f"{tag} RPC"))
    else:
        logger.info("RPC port not exposed (localhost only)")
        if has_port_rule(status, config.network.rpc_port):
            remove_port_rules(runner, [config.network.rpc_port])
            logger.info(f"Removed stale RPC rule for {config.network.rpc_port}/tcp")

    failed: List[str] = []
    for port, comment in wanted:
        if has_port_rule(status, port):
            logger.info(f"Firewall rule for {port}/tcp already present")
            continue
        result = runner.run(["ufw", "allow", f"{port}/tcp", "comment", comment])
        if not result.ok:
            failed.append(f"{port}/tcp")

    runner.run(["ufw", "reload"])

    if failed:
        return StepResult.failure(f"Could not add firewall rule(s): {', '.join(failed)}",
                                  remediation=" && ".join(f"sudo ufw allow {p}" for p in failed))
    opened = ", ".join(f"{p}/tcp" for p, _ in wanted)
    return StepResult.success(f"Firewall configured (open: ssh, {opened})")


def remove_port_rules(runner: HostRunner, ports: Iterable[int]) -> int:
    """Delete allow rules for each port. Returns how many deletions succeeded."""
    removed = 0
    for port in ports:
        if runner.run(["ufw", "--force", "delete", "allow", f"{port}/tcp"]).ok:
            removed += 1
    return removed


def remove_tagged_rules(runner: HostRunner, tag: str) -> int:
    """
    Delete every numbered rule whose line mentions tag (case-insensitive).

    Numbers are deleted highest first so earlier deletions do not renumber
    rules still to be deleted.
    """
    result = runner.run(["ufw", "status", "numbered"])
    if not result.ok:
        return 0

    numbers = []
    for line in result.output.splitlines():
        match = NUMBERED_RULE.match(line.strip())
        if match and tag.lower() in match.group(2).lower():
            numbers.append(int(match.group(1)))

    removed = 0
    for number in sorted(numbers, reverse=True):
        if runner.run(["ufw", "--force", "delete", str(number)]).ok:
            removed += 1
    return removed
