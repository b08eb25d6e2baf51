# Path and File Name : /home/coinnode/installer/coinnode_installer/configurator/gates.py
# Author: nXxBku0CKFAJCBN3X1g3bQk7OxYQylg8CMw1iGsq7gU
# Details of functionality of this file: Resource gates (disk space, disk type, RAM, CPU) deciding pass, warn or block

"""
Resource gates.

Each gate is a pure function of probe values and choices. BLOCK means the
operator must explicitly override to continue; WARN is shown and the run
continues.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import List

from ..config_model import ChainMode, NodeRole

DISK_THRESHOLDS_GB = {
    ChainMode.FULL: (150, 250),
    ChainMode.PRUNED: (20, 50),
}
RAM_MINIMUM_MB = 4096
RAM_RECOMMENDED_MB = 8192
CPU_MINIMUM = 2
CPU_RECOMMENDED = 4


class GateLevel(Enum):
    PASS = "pass"
    WARN = "warn"
    BLOCK = "block"


@dataclass(frozen=True)
class GateOutcome:
    level: GateLevel
    message: str
    details: List[str] = field(default_factory=list)

    @property
    def blocks(self) -> bool:
        return self.level is GateLevel.BLOCK


def disk_space_gate(free_gb: int, chain_mode: ChainMode) -> GateOutcome:
    minimum, recommended = DISK_THRESHOLDS_GB[chain_mode]
    if free_gb < minimum:
        return GateOutcome(GateLevel.BLOCK, f"Insufficient disk space: {free_gb}GB free", [
            f"Minimum: {minimum}GB | Recommended: {recommended}GB",
            "Consider a pruned node if space is limited" if chain_mode is ChainMode.FULL
            else "Pruned chain plus build files need about 20GB",
        ])
    if free_gb < recommended:
        return GateOutcome(GateLevel.WARN, f"Disk space below recommended ({recommended}GB): {free_gb}GB free", [
            "The blockchain grows ~15-20GB per year.",
        ])
    return GateOutcome(GateLevel.PASS, f"Disk space: {free_gb}GB free")


def disk_type_gate(is_rotational: bool, role: NodeRole) -> GateOutcome:
    if not is_rotational:
        return GateOutcome(GateLevel.PASS, "Storage type: SSD/NVMe")
    if role is NodeRole.POOL_BACKEND:
        return GateOutcome(GateLevel.BLOCK, "HDD detected: mining pool nodes require SSD/NVMe", [
            "RPC response times will be too slow on spinning disks.",
        ])
    return GateOutcome(GateLevel.WARN, "Storage type: HDD (initial sync will be slow)")


def ram_gate(ram_mb: int) -> GateOutcome:
    if ram_mb < RAM_MINIMUM_MB:
        return GateOutcome(GateLevel.BLOCK, f"Less than 4GB RAM detected ({ram_mb}MB)", [
            "Compilation requires significant memory. 4GB minimum | 8GB recommended",
            "To add swap space if compilation fails:",
            "  sudo fallocate -l 4G /swapfile && sudo chmod 600 /swapfile",
            "  sudo mkswap /swapfile && sudo swapon /swapfile",
        ])
    if ram_mb < RAM_RECOMMENDED_MB:
        return GateOutcome(GateLevel.WARN, f"Less than 8GB RAM ({ram_mb}MB): compilation may be slower")
    return GateOutcome(GateLevel.PASS, f"RAM: {ram_mb}MB")


def cpu_advisory(cores: int) -> GateOutcome:
    """Never blocks; fewer than 2 cores also means a single build job."""
    if cores < CPU_MINIMUM:
        return GateOutcome(GateLevel.WARN, f"Only {cores} CPU core(s): compilation will be very slow",
                           ["2 cores minimum | 4 cores recommended; building with 1 job"])
    if cores < CPU_RECOMMENDED:
        return GateOutcome(GateLevel.WARN, f"Only {cores} CPU cores: 4 recommended for a mining pool")
    return GateOutcome(GateLevel.PASS, f"CPU cores: {cores}")
