# Path and File Name : /home/coinnode/installer/coinnode_installer/services/daemon_conf.py
# Author: nXxBku0CKFAJCBN3X1g3bQk7OxYQylg8CMw1iGsq7gU
# Details of functionality of this file: Renders the daemon key=value config from NodeConfig and parses it back into a partial model

"""
Daemon Config File: render and parse.

render_daemon_conf() serializes a NodeConfig into the daemon's key=value
format. parse_daemon_conf() reads an existing file back into a
ParsedDaemonConfig whose unset keys are None, never silently defaulted.
"""

import os
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from typing import Dict, List, Optional

from ..config_model import (
    ChainMode, NodeConfig, NodeRole, Secret, LOOPBACK, WILDCARD, WILDCARD_ALLOW,
)
from ..runtime.accounts import chown_to_user

# Keys whose presence marks a pool backend config
POOL_ONLY_KEYS = ("txindex", "zmqpubhashblock", "zmqpubrawblock", "blocknotify")

RULE = "#" + "-" * 79
BANNER = "#" + "=" * 79


def _section(lines: List[str], title: str, *notes: str) -> None:
    lines.append("")
    lines.append(RULE)
    lines.append(f"# {title}")
    for note in notes:
        lines.append(f"# {note}")
    lines.append(RULE)


def render_daemon_conf(config: NodeConfig, generated_at: Optional[datetime] = None) -> str:
    """Render the daemon config file text for a NodeConfig."""
    generated_at = generated_at or datetime.now()
    net = config.network
    profile = config.profile

    lines = [
        BANNER,
        f"# {profile.display_name.upper()} NODE CONFIGURATION",
        "# Generated by coinnode-setup",
        "#",
        f"# Node Type: {'Pool' if config.is_pool else 'Standard'}",
        f"# Blockchain: {config.chain_mode.value.capitalize()}",
        f"# Generated: {generated_at.strftime('%Y-%m-%d %H:%M:%S')}",
        BANNER,
    ]

    _section(lines, "DATA DIRECTORY")
    lines.append(f"datadir={config.paths.data_dir}")

    _section(lines, "NETWORK SETTINGS")
    lines += [
        "# Enable listening for incoming connections",
        "listen=1",
        "",
        "# P2P port",
        f"port={net.p2p_port}",
    ]

    _section(lines, "RPC SERVER SETTINGS")
    lines += [
        "# Enable RPC server",
        "server=1",
        "",
        "# RPC authentication",
        f"rpcuser={config.auth.rpc_user}",
        f"rpcpassword={config.auth.rpc_password.reveal()}",
        "",
        "# RPC binding",
        f"rpcbind={net.rpc_bind}",
        f"rpcport={net.rpc_port}",
        "",
        "# RPC allowed IPs",
        f"rpcallowip={net.rpc_allow}",
    ]

    if config.is_pool:
        _section(lines, "MINING POOL MODE SETTINGS")
        lines += [
            "# Transaction index (required for pool lookups)",
            "txindex=1",
            "",
            "# Increased connection limits for pool reliability",
            f"maxconnections={config.max_connections}",
        ]

        hashblock = net.zmq_hashblock_port or profile.zmq_hashblock_port
        rawblock = net.zmq_rawblock_port or profile.zmq_rawblock_port
        if config.notification.uses_zmq:
            _section(lines, "ZMQ BLOCK NOTIFICATIONS (ENABLED)",
                     "Pool software can subscribe for instant new block notifications")
            lines += [
                f"zmqpubhashblock=tcp://{LOOPBACK}:{hashblock}",
                f"zmqpubrawblock=tcp://{LOOPBACK}:{rawblock}",
            ]
        else:
            _section(lines, "ZMQ BLOCK NOTIFICATIONS (DISABLED)",
                     "Uncomment to enable; pool software will use RPC polling instead")
            lines += [
                f"# zmqpubhashblock=tcp://{LOOPBACK}:{hashblock}",
                f"# zmqpubrawblock=tcp://{LOOPBACK}:{rawblock}",
            ]

        if config.notification.uses_script and config.blocknotify_cmd:
            _section(lines, "BLOCK NOTIFY SCRIPT",
                     "Runs this command when a new block is found (%s = block hash)")
            lines.append(f"blocknotify={config.blocknotify_cmd}")

        lines += [
            "",
            "# Disable wallet (pool typically uses separate wallet server)",
            "# Uncomment if you don't need local wallet functionality",
            "# disablewallet=1",
        ]
    else:
        _section(lines, "STANDARD NODE SETTINGS")
        lines += [
            "# Maximum connections",
            f"maxconnections={config.max_connections}",
        ]

    _section(lines, "BLOCKCHAIN MODE")
    if config.is_pruned:
        lines += [
            "# Pruned node - stores only recent blockchain data",
            f"prune={config.prune_target_mb}",
        ]
    else:
        lines += [
            "# Full node - stores complete blockchain",
            "# No pruning configured",
        ]

    _section(lines, "LOGGING")
    lines += [
        "# Log timestamps",
        "logtimestamps=1",
        "",
        "# Debug log file",
        f"debuglogfile={Path(config.paths.log_dir) / 'debug.log'}",
    ]

    _section(lines, "PERFORMANCE SETTINGS")
    lines += [
        "# Database cache size (MB)",
        f"dbcache={config.dbcache_mb}",
        "",
        "# Number of script verification threads",
        f"par={config.par}",
    ]

    _section(lines, "SECURITY")
    lines += [
        "# Disable UPnP (recommended for servers)",
        "upnp=0",
    ]

    return "\n".join(lines) + "\n"


def write_daemon_conf(config: NodeConfig) -> Path:
    """
    Write the config file, owned by the service user with mode 0640.

    Returns:
        Path of the written file
    """
    path = Path(config.config_file)
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(render_daemon_conf(config))
    chown_to_user(path, config.service_user)
    os.chmod(path, 0o640)
    return path


@dataclass(frozen=True)
class ParsedDaemonConfig:
    """Partial configuration recovered from an existing file; None means the key was not set."""
    role: NodeRole
    chain_mode: ChainMode
    prune_target_mb: Optional[int] = None
    data_dir: Optional[str] = None
    p2p_port: Optional[int] = None
    rpc_port: Optional[int] = None
    rpc_bind: Optional[str] = None
    rpc_allow: Optional[str] = None
    rpc_user: Optional[str] = None
    rpc_password: Optional[Secret] = None
    zmq_hashblock_port: Optional[int] = None
    zmq_rawblock_port: Optional[int] = None
    blocknotify_cmd: Optional[str] = None
    log_dir: Optional[str] = None


def read_key_values(text: str) -> Dict[str, str]:
    """Active key=value pairs; comments and blank lines ignored, last assignment wins."""
    values: Dict[str, str] = {}
    for raw in text.splitlines():
        line = raw.strip()
        if not line or line.startswith("#") or "=" not in line:
            continue
        key, _, value = line.partition("=")
        values[key.strip()] = value.strip()
    return values


def _port(uri_or_port: Optional[str]) -> Optional[int]:
    if not uri_or_port:
        return None
    tail = uri_or_port.rsplit(":", 1)[-1]
    try:
        return int(tail)
    except ValueError:
        return None


def _int(value: Optional[str]) -> Optional[int]:
    if value is None:
        return None
    try:
        return int(value)
    except ValueError:
        return None


def parse_daemon_conf(text: str) -> ParsedDaemonConfig:
    """Parse daemon config text into a ParsedDaemonConfig."""
    values = read_key_values(text)

    role = NodeRole.POOL_BACKEND if any(k in values for k in POOL_ONLY_KEYS) else NodeRole.STANDARD
    prune = _int(values.get("prune"))
    chain_mode = ChainMode.PRUNED if prune else ChainMode.FULL

    debuglog = values.get("debuglogfile")
    password = values.get("rpcpassword")

    return ParsedDaemonConfig(
        role=role,
        chain_mode=chain_mode,
        prune_target_mb=prune if prune else None,
        data_dir=values.get("datadir"),
        p2p_port=_int(values.get("port")),
        rpc_port=_int(values.get("rpcport")),
        rpc_bind=values.get("rpcbind"),
        rpc_allow=values.get("rpcallowip"),
        rpc_user=values.get("rpcuser"),
        rpc_password=Secret(password) if password else None,
        zmq_hashblock_port=_port(values.get("zmqpubhashblock")),
        zmq_rawblock_port=_port(values.get("zmqpubrawblock")),
        blocknotify_cmd=values.get("blocknotify"),
        log_dir=str(Path(debuglog).parent) if debuglog else None,
    )


def load_daemon_conf(path: Path) -> Optional[ParsedDaemonConfig]:
    """Parse the file at path, or None when it does not exist or cannot be read."""
    try:
        return parse_daemon_conf(Path(path).read_text())
    except OSError:
        return None


def expected_rpc_allow(role: NodeRole, rpc_bind: str) -> str:
    """rpcallowip value that goes with a role and bind address."""
    if role is NodeRole.STANDARD and rpc_bind == WILDCARD:
        return WILDCARD_ALLOW
    return LOOPBACK
