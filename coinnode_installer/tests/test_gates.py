# Path and File Name : /home/coinnode/installer/coinnode_installer/tests/test_gates.py
# Author: nXxBku0CKFAJCBN3X1g3bQk7OxYQylg8CMw1iGsq7gU
# Details of functionality of this file: Tests for disk, storage type, RAM and CPU resource gates

import unittest
from pathlib import Path
import sys

sys.path.insert(0, str(Path(__file__).parent.parent.parent))

from coinnode_installer.config_model import ChainMode, NodeRole
from coinnode_installer.configurator.gates import (
    GateLevel, cpu_advisory, disk_space_gate, disk_type_gate, ram_gate,
)


class TestDiskSpaceGate(unittest.TestCase):

    def test_pruned_threshold(self):
        self.assertIs(disk_space_gate(19, ChainMode.PRUNED).level, GateLevel.BLOCK)
        self.assertIs(disk_space_gate(21, ChainMode.PRUNED).level, GateLevel.WARN)
        self.assertIs(disk_space_gate(50, ChainMode.PRUNED).level, GateLevel.PASS)

    def test_full_threshold(self):
        self.assertIs(disk_space_gate(149, ChainMode.FULL).level, GateLevel.BLOCK)
        self.assertIs(disk_space_gate(151, ChainMode.FULL).level, GateLevel.WARN)
        self.assertIs(disk_space_gate(250, ChainMode.FULL).level, GateLevel.PASS)

    def test_exact_minimum_does_not_block(self):
        self.assertFalse(disk_space_gate(20, ChainMode.PRUNED).blocks)
        self.assertFalse(disk_space_gate(150, ChainMode.FULL).blocks)


class TestOtherGates(unittest.TestCase):

    def test_hdd_blocks_pool_only(self):
        self.assertIs(disk_type_gate(True, NodeRole.POOL_BACKEND).level, GateLevel.BLOCK)
        self.assertIs(disk_type_gate(True, NodeRole.STANDARD).level, GateLevel.WARN)
        self.assertIs(disk_type_gate(False, NodeRole.POOL_BACKEND).level, GateLevel.PASS)

    def test_ram(self):
        self.assertIs(ram_gate(2048).level, GateLevel.BLOCK)
        self.assertIs(ram_gate(6000).level, GateLevel.WARN)
        self.assertIs(ram_gate(16000).level, GateLevel.PASS)

    def test_cpu_never_blocks(self):
        for cores in (1, 2, 3, 4, 16):
            self.assertFalse(cpu_advisory(cores).blocks)
        self.assertIs(cpu_advisory(1).level, GateLevel.WARN)
        self.assertIs(cpu_advisory(8).level, GateLevel.PASS)


if __name__ == '__main__':
    unittest.main()
