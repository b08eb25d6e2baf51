# Path and File Name : /home/coinnode/installer/coinnode_installer/system/install_probe.py
# Author: nXxBku0CKFAJCBN3X1g3bQk7OxYQylg8CMw1iGsq7gU
# Details of functionality of this file: Read-only snapshot of an existing node installation on the host

"""
Install Probe: what of a previous installation is on this host.

The snapshot is recomputed every run; it is never persisted.
"""

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional, Tuple

from ..host.runner import HostRunner
from ..install_state.state_record import verify_install_state
from ..runtime.accounts import user_exists
from ..services.daemon_conf import ParsedDaemonConfig, load_daemon_conf
from ..services.service_control import is_active, is_registered
from ..settings import InstallerSettings

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class InstallSnapshot:
    binary_present: bool
    config_present: bool
    service_active: bool
    service_registered: bool
    user_exists: bool
    parsed_config: Optional[ParsedDaemonConfig] = None
    drift: Tuple[str, ...] = field(default_factory=tuple)

    @property
    def installed(self) -> bool:
        """An installation exists when the daemon binary or its config is present."""
        return self.binary_present or self.config_present


def detect_existing_install(settings: InstallerSettings, runner: HostRunner) -> InstallSnapshot:
    """Probe the default layout for an existing installation."""
    profile = settings.profile
    paths = settings.paths
    config_dir = Path(paths.config_dir)
    config_file = config_dir / profile.config_filename
    binary = Path(paths.install_dir) / "bin" / profile.daemon_binary

    parsed = load_daemon_conf(config_file) if config_file.exists() else None
    drift = verify_install_state(config_dir)
    for message in drift:
        logger.warning(f"Install state drift: {message}")

    return InstallSnapshot(
        binary_present=binary.exists(),
        config_present=config_file.exists(),
        service_active=is_active(runner, profile.service_name),
        service_registered=is_registered(runner, profile.service_name, Path(paths.systemd_dir)),
        user_exists=user_exists(profile.service_user),
        parsed_config=parsed,
        drift=tuple(drift),
    )
