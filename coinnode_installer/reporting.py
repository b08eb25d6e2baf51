# Path and File Name : /home/coinnode/installer/coinnode_installer/reporting.py
# Author: nXxBku0CKFAJCBN3X1g3bQk7OxYQylg8CMw1iGsq7gU
# Details of functionality of this file: Read-only renderers for configuration summary, completion screen, run report and uninstall summary

"""
Reporting: pure renderers returning lines of text.

Renderers never touch the host. Lines that contain the RPC password are
printed with console.plain() so they stay out of the run log.
"""

from pathlib import Path
from typing import List, Optional

from .config_model import NodeConfig, PoolWalletMode
from .tasks import RunReport, StepState

WIDTH = 72
RULE = "=" * WIDTH
THIN = "-" * WIDTH


def _block(title: str) -> List[str]:
    return ["", THIN, f"  {title}", THIN]


def _row(label: str, value) -> str:
    return f"  {label + ':':<20}{value}"


def render_config_summary(config: NodeConfig, mode: str, warnings: Optional[List[str]] = None) -> List[str]:
    """Whole model for the confirmation gate; the password is masked."""
    net = config.network
    lines = [RULE, "  YOUR CONFIGURATION", RULE,
             _row("Setup Mode", mode.capitalize()),
             _row("Node Type", "Mining Pool Backend" if config.is_pool else "Standard Node"),
             _row("Blockchain Mode", "Pruned" if config.is_pruned else "Full")]
    if config.is_pruned:
        lines.append(_row("Prune Target", f"{config.prune_target_mb} MB"))

    lines += _block("DIRECTORIES")
    lines += [
        _row("Binaries", config.paths.install_dir),
        _row("Blockchain", config.paths.data_dir),
        _row("Wallets", config.paths.wallet_dir),
        _row("Config", config.paths.config_dir),
        _row("Logs", config.paths.log_dir),
        _row("Source", config.paths.source_dir),
    ]

    lines += _block("NETWORK")
    lines += [
        _row("P2P Port", f"{net.p2p_port} (peer connections)"),
        _row("RPC Endpoint", f"{net.rpc_bind}:{net.rpc_port}"),
        _row("RPC Allow", net.rpc_allow),
        _row("RPC Username", config.auth.rpc_user),
        _row("RPC Password", config.auth.rpc_password.masked()),
    ]
    if config.is_pool:
        if config.notification.uses_zmq:
            lines.append(_row("ZMQ Hashblock", f"tcp://127.0.0.1:{net.zmq_hashblock_port}"))
            lines.append(_row("ZMQ Rawblock", f"tcp://127.0.0.1:{net.zmq_rawblock_port}"))
        else:
            lines.append(_row("ZMQ", "Disabled (using RPC polling)"))
        if config.notification.uses_script:
            lines.append(_row("blocknotify", config.blocknotify_cmd))
        lines.append(_row("txindex", "enabled"))
    lines.append(_row("Max Connections", config.max_connections))
    lines.append(_row("Firewall (UFW)", "Yes" if config.firewall_enabled else "No"))

    if config.is_pool:
        lines += _block("POOL WALLET")
        plan = config.pool_wallet
        if plan is None or plan.mode is PoolWalletMode.DEFERRED:
            lines.append(_row("Action", "Configure later"))
        elif plan.mode is PoolWalletMode.CREATE:
            lines.append(_row("Action", "Create new wallet"))
        else:
            lines.append(_row("Address", plan.address))

    lines += _block("BUILD INFO")
    lines += [
        _row(f"{config.profile.display_name} Version", config.software_version),
        _row("Parallel Jobs", f"{config.build_jobs} (based on CPU cores)"),
        _row("Disk Required", "~150GB" if not config.is_pruned else "~20GB"),
        _row("Build Time", "15-60 minutes (depends on CPU)"),
    ]

    if warnings:
        lines += _block("WARNINGS")
        lines += [f"  ⚠ {w}" for w in warnings]
    lines.append(RULE)
    return lines


def render_completion(config: NodeConfig, wallet_address: Optional[str] = None) -> List[str]:
    """Final screen: credentials, endpoints, file locations, ports and useful commands."""
    net = config.network
    profile = config.profile
    cli = f"{profile.cli_binary} -conf={config.config_file}"
    service = profile.service_name
    lines = [RULE, "  SETUP COMPLETE", RULE,
             f"Your {profile.display_name} node has been set up."]

    if config.is_pool:
        lines += _block("MINING POOL BACKEND")
        lines += [
            _row("RPC URL", f"http://127.0.0.1:{net.rpc_port}"),
            _row("RPC User", config.auth.rpc_user),
            _row("RPC Password", config.auth.rpc_password.reveal()),
        ]
        if config.notification.uses_zmq:
            lines.append(_row("ZMQ Hashblock", f"tcp://127.0.0.1:{net.zmq_hashblock_port}"))
            lines.append(_row("ZMQ Rawblock", f"tcp://127.0.0.1:{net.zmq_rawblock_port}"))
        else:
            lines.append("  Block notifications: RPC polling (poll getbestblockhash or getblocktemplate)")
        if config.notification.uses_script:
            lines.append(_row("blocknotify", config.blocknotify_cmd))
        if wallet_address:
            lines.append(_row("Pool Wallet", wallet_address))
        lines += [
            "",
            "  Test commands:",
            f"    {cli} getblockchaininfo",
            f"    {cli} getblocktemplate '{{\"rules\":[\"segwit\"]}}'",
            f"    {cli} getbestblockhash",
        ]

    lines += _block("RPC CREDENTIALS (SAVE THESE!)")
    lines += [_row("Username", config.auth.rpc_user),
              _row("Password", config.auth.rpc_password.reveal())]

    lines += _block("USEFUL COMMANDS")
    lines += [
        f"  sudo systemctl status {service}",
        f"  sudo journalctl -u {service} -f",
        f"  {cli} getblockchaininfo",
        "  sudo coinnode-setup        (update / reconfigure / wallet)",
        "  sudo coinnode-uninstall    (remove the node)",
    ]

    lines += _block("FILE LOCATIONS")
    lines += [
        _row("Binaries", f"{config.paths.install_dir}/bin/"),
        _row("Blockchain", f"{config.paths.data_dir}/"),
        _row("Wallets", f"{config.paths.wallet_dir}/"),
        _row("Config", config.config_file),
        _row("Logs", str(Path(config.paths.log_dir) / "debug.log")),
    ]

    lines += _block("NETWORK PORTS")
    lines.append(f"  P2P:   {net.p2p_port}/tcp (forward this port on your router)")
    if config.rpc_opens_publicly:
        lines.append(f"  RPC:   {net.rpc_port}/tcp ({net.rpc_bind}, forward only for remote wallet access)")
    else:
        lines.append(f"  RPC:   {net.rpc_port}/tcp (localhost only, do not forward)")
    if config.is_pool and config.notification.uses_zmq:
        lines.append(f"  ZMQ:   {net.zmq_hashblock_port}/tcp, {net.zmq_rawblock_port}/tcp (localhost only)")

    lines += _block("IMPORTANT NOTES")
    lines += [
        "  • Initial blockchain sync takes several hours to days",
        "  • The node must be fully synced before mining pool use" if config.is_pool
        else "  • Save your RPC credentials in a secure location",
    ]
    if wallet_address:
        lines.append(f"  • Back up wallet files in: {config.paths.wallet_dir}/")
    lines.append(RULE)
    return lines


def render_run_report(report: RunReport) -> List[str]:
    """Per-step states plus advisory gaps with their manual remediation."""
    lines = _block("STEP RESULTS")
    markers = {
        StepState.SUCCEEDED: "✓",
        StepState.SKIPPED: "-",
        StepState.FAILED: "✗",
        StepState.PENDING: " ",
        StepState.RUNNING: "…",
    }
    for record in report.records:
        suffix = f" ({record.result.reason})" if record.result and record.result.reason else ""
        lines.append(f"  [{markers[record.state]}] {record.step.description}{suffix}")

    failed = report.fatal_failure
    if failed is not None:
        lines += ["", f"  Step '{failed.name}' failed: {failed.result.reason}"]
        if failed.result.log_excerpt:
            lines.append("  Last lines of the log:")
            lines += [f"    {line}" for line in failed.result.log_excerpt.splitlines()]
        if failed.result.log_path:
            lines.append(f"  Full log: {failed.result.log_path}")
        lines.append("  Re-run coinnode-setup after fixing the problem; completed steps are skipped.")

    gaps = report.advisory_failures
    if gaps:
        lines += ["", "  Completed with warnings:"]
        for record in gaps:
            lines.append(f"  ⚠ {record.step.description}: {record.result.reason}")
            if record.result.remediation:
                lines.append(f"      manual step: {record.result.remediation}")
    return lines


def render_uninstall_summary(removed: List[str], kept: List[str], leftovers: List[str]) -> List[str]:
    lines = [RULE, "  UNINSTALL SUMMARY", RULE]
    if removed:
        lines.append("  Removed:")
        lines += [f"    ✓ {item}" for item in removed]
    if kept:
        lines.append("  Kept:")
        lines += [f"    - {item}" for item in kept]
    if leftovers:
        lines.append("  Still present (manual cleanup or a reboot may be required):")
        lines += [f"    ⚠ {item}" for item in leftovers]
    else:
        lines.append("  No leftover artifacts detected.")
    lines.append(RULE)
    return lines

