# Path and File Name : /home/coinnode/installer/coinnode_installer/system/resource_check.py
# Author: nXxBku0CKFAJCBN3X1g3bQk7OxYQylg8CMw1iGsq7gU
# Details of functionality of this file: Reads CPU, RAM, free disk and storage type of the host

"""
Resource Check: CPU cores, RAM, free disk space and rotational storage.

Never raises for host conditions; unknown values degrade to conservative
defaults (rotational unknown => not rotational).
"""

import logging
import os
import shutil
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

MEMINFO = Path("/proc/meminfo")
CPUINFO = Path("/proc/cpuinfo")
MOUNTS = Path("/proc/self/mounts")
SYS_BLOCK = Path("/sys/block")

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class HostResources:
    cpu_cores: int
    ram_mb: int
    disk_free_gb: int
    disk_is_rotational: bool
    cpu_model: str = ""


def cpu_cores() -> int:
    return os.cpu_count() or 1


def cpu_model(cpuinfo: Path = CPUINFO) -> str:
    try:
        for line in cpuinfo.read_text().splitlines():
            if line.startswith("model name"):
                return line.split(":", 1)[1].strip()
    except OSError as e:
        logger.debug(f"CPU model unavailable: {e}")
    return ""


def ram_mb(meminfo: Path = MEMINFO) -> int:
    try:
        for line in meminfo.read_text().splitlines():
            if line.startswith("MemTotal:"):
                return int(line.split()[1]) // 1024
    except (OSError, ValueError, IndexError) as e:
        logger.debug(f"MemTotal unavailable: {e}")
    return 0


def disk_free_gb(path: Path) -> int:
    """Free space (GB, floor) on the filesystem holding path or its nearest existing parent."""
    probe = Path(path)
    while not probe.exists() and probe != probe.parent:
        probe = probe.parent
    try:
        return shutil.disk_usage(str(probe)).free // (1024 ** 3)
    except OSError:
        return 0


def _mount_device(path: Path, mounts: Path = MOUNTS) -> Optional[str]:
    """Block device backing the longest mount point that contains path."""
    target = str(Path(path).resolve())
    best_mount, best_device = "", None
    try:
        lines = mounts.read_text().splitlines()
    except OSError:
        return None
    for line in lines:
        parts = line.split()
        if len(parts) < 2 or not parts[0].startswith("/dev/"):
            continue
        device, mount_point = parts[0], parts[1]
        if (target == mount_point or target.startswith(mount_point.rstrip("/") + "/")) \
                and len(mount_point) >= len(best_mount):
            best_mount, best_device = mount_point, device
    return best_device


def _base_block_device(device_name: str, sys_block: Path) -> str:
    """sda1 -> sda, nvme0n1p2 -> nvme0n1, mmcblk0p1 -> mmcblk0."""
    if (sys_block / device_name).exists():
        return device_name
    for candidate in sys_block.iterdir() if sys_block.exists() else []:
        if device_name.startswith(candidate.name) and (candidate / device_name).exists():
            return candidate.name
    return device_name.rstrip("0123456789")


def is_rotational(path: Path, mounts: Path = MOUNTS, sys_block: Path = SYS_BLOCK) -> bool:
    device = _mount_device(path, mounts)
    if not device:
        return False
    base = _base_block_device(Path(os.path.realpath(device)).name, sys_block)
    try:
        return (sys_block / base / "queue" / "rotational").read_text().strip() == "1"
    except OSError:
        return False


def detect_resources(path: Path = Path("/")) -> HostResources:
    """Snapshot of host resources relevant to the filesystem holding path."""
    return HostResources(
        cpu_cores=cpu_cores(),
        ram_mb=ram_mb(),
        disk_free_gb=disk_free_gb(path),
        disk_is_rotational=is_rotational(path),
        cpu_model=cpu_model(),
    )
