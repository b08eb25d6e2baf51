# Path and File Name : /home/coinnode/installer/coinnode_installer/services/systemd_writer.py
# Author: nXxBku0CKFAJCBN3X1g3bQk7OxYQylg8CMw1iGsq7gU
# Details of functionality of this file: Generates and installs the hardened systemd unit for the node daemon

"""
Systemd Writer: renders the daemon service unit and installs it.

The unit forks (the daemon daemonizes itself), restarts on failure, gets a
long stop timeout for a clean database flush, and may only write to the data
and log directories.
"""

from pathlib import Path

from ..config_model import NodeConfig
from ..tasks import StepContext, StepResult

STOP_TIMEOUT_SEC = 600
RESTART_SEC = 30


def render_unit(config: NodeConfig) -> str:
    """Generate systemd unit content for the node daemon."""
    profile = config.profile
    user = config.service_user
    paths = config.paths
    pid_file = Path(paths.data_dir) / f"{profile.daemon_binary}.pid"

    return f"""[Unit]
Description={profile.display_name} Core Daemon
Documentation=https://{profile.name}.org/
After=network-online.target
Wants=network-online.target

[Service]
Type=forking
User={user}
Group={user}

ExecStart={config.daemon_path} -daemon -conf={config.config_file} -pid={pid_file}
ExecStop={config.cli_path} -conf={config.config_file} stop

# Wait for the daemon to flush its databases
TimeoutStopSec={STOP_TIMEOUT_SEC}

Restart=on-failure
RestartSec={RESTART_SEC}

RuntimeDirectory={profile.name}
RuntimeDirectoryMode=0710

# Security hardening
NoNewPrivileges=true
PrivateTmp=true
ProtectSystem=strict
ProtectHome=true
ReadWritePaths={paths.data_dir} {paths.log_dir}

# Resource limits
LimitNOFILE=65535
Nice=10
IOSchedulingClass=2
IOSchedulingPriority=7

[Install]
WantedBy=multi-user.target
"""


def install_service_unit(context: StepContext) -> StepResult:
    """Write the unit file and reload systemd."""
    config = context.config
    unit_path = Path(config.unit_file)
    try:
        unit_path.parent.mkdir(parents=True, exist_ok=True)
        unit_path.write_text(render_unit(config))
        unit_path.chmod(0o644)
    except OSError as e:
        return StepResult.failure(f"Failed to write {unit_path}: {e}")

    result = context.runner.run(["systemctl", "daemon-reload"])
    if not result.ok:
        return StepResult.failure("systemctl daemon-reload failed", log_excerpt=result.tail())
    return StepResult.success(f"Service unit installed: {unit_path}")
