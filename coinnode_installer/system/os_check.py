# Path and File Name : /home/coinnode/installer/coinnode_installer/system/os_check.py
# Author: nXxBku0CKFAJCBN3X1g3bQk7OxYQylg8CMw1iGsq7gU
# Details of functionality of this file: Detects privileges and whether the host is a supported Debian-family distribution

"""
OS Check: privilege and distribution detection. Pure reads.
"""

import logging
import os
from dataclasses import dataclass
from pathlib import Path

DEBIAN_VERSION_FILE = Path("/etc/debian_version")
OS_RELEASE_FILE = Path("/etc/os-release")

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class OsInfo:
    is_supported_distro: bool
    version_label: str


def is_root() -> bool:
    return os.geteuid() == 0


def _pretty_name(os_release: Path) -> str:
    try:
        for line in os_release.read_text().splitlines():
            if line.startswith("PRETTY_NAME="):
                return line.split("=", 1)[1].strip().strip('"')
    except OSError as e:
        logger.debug(f"Cannot read {os_release}: {e}")
    return ""


def detect_os(debian_version_file: Path = DEBIAN_VERSION_FILE,
              os_release_file: Path = OS_RELEASE_FILE) -> OsInfo:
    """
    Supported when /etc/debian_version exists (Debian, Ubuntu and derivatives).

    Returns:
        OsInfo with a human readable label, e.g. "Ubuntu 24.04 LTS (trixie/sid)"
    """
    if not debian_version_file.exists():
        label = _pretty_name(os_release_file) or "unknown"
        return OsInfo(is_supported_distro=False, version_label=label)

    try:
        debian_version = debian_version_file.read_text().strip()
    except OSError:
        debian_version = "unknown"

    pretty = _pretty_name(os_release_file)
    label = f"{pretty} ({debian_version})" if pretty else debian_version
    return OsInfo(is_supported_distro=True, version_label=label)
