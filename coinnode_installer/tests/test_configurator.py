# Path and File Name : /home/coinnode/installer/coinnode_installer/tests/test_configurator.py
# Author: nXxBku0CKFAJCBN3X1g3bQk7OxYQylg8CMw1iGsq7gU
# Details of functionality of this file: Drives the configurator with scripted answers

"""
Tests:
1. Standard node with all defaults
2. Pool backend: forced loopback, script hook default, address re-prompt
3. Declined BLOCK gate aborts, accepted one continues; disk type is checked on the chosen data dir
4. Declined summary cancels
5. Reconfigure seeds defaults from the existing config
"""

import unittest
import tempfile
import shutil
from pathlib import Path
import sys

sys.path.insert(0, str(Path(__file__).parent.parent.parent))

from coinnode_installer import console
from coinnode_installer.config_model import (
    BlockNotification, ChainMode, NodeRole, PoolWalletMode, Secret, LOOPBACK, WILDCARD,
)
from coinnode_installer.configurator import Configurator, ScriptedAnswers
from coinnode_installer.errors import PreconditionError, UserCancelled
from coinnode_installer.services.daemon_conf import ParsedDaemonConfig
from coinnode_installer.system.resource_check import HostResources
from coinnode_installer.tests.fakes import make_config, make_settings

HEALTHY = HostResources(cpu_cores=4, ram_mb=16000, disk_free_gb=500, disk_is_rotational=False)


class TestConfigurator(unittest.TestCase):

    def setUp(self):
        console.set_quiet(True)
        self.test_dir = Path(tempfile.mkdtemp(prefix="coinnode_configurator_test_"))
        self.settings = make_settings(self.test_dir)

    def tearDown(self):
        console.set_quiet(False)
        shutil.rmtree(self.test_dir, ignore_errors=True)

    def configurator(self, answers, resources=HEALTHY, free_gb=500):
        return Configurator(self.settings, resources, ScriptedAnswers(answers), "v0.21.4",
                            disk_free_gb=lambda _path: free_gb)

    def test_standard_defaults(self):
        # role, chain, default paths, rpc bind, user, password, firewall
        conf = self.configurator(["", "", "", "", "", "hunter2pass", ""])
        config = conf.configure_fresh()

        self.assertEqual(config.role, NodeRole.STANDARD)
        self.assertEqual(config.chain_mode, ChainMode.FULL)
        self.assertEqual(config.network.rpc_bind, WILDCARD)
        self.assertEqual(config.network.rpc_allow, "0.0.0.0/0")
        self.assertEqual(config.auth.rpc_user, self.settings.profile.default_rpc_user)
        self.assertEqual(config.auth.rpc_password.reveal(), "hunter2pass")
        self.assertTrue(config.firewall_enabled)
        self.assertIsNone(config.pool_wallet)
        self.assertIsNone(config.network.zmq_hashblock_port)
        self.assertEqual(config.paths.data_dir, self.settings.paths.data_dir)
        self.assertEqual(config.par, 4)
        self.assertEqual(conf.answers.remaining, 0)

    def test_custom_paths(self):
        answers = ["", "2", "n", "relative/path", "/srv/litecoin", "/srv/chain",
                   "2", "", "", "n"]
        conf = self.configurator(answers)
        config = conf.configure_fresh()
        self.assertEqual(config.chain_mode, ChainMode.PRUNED)
        self.assertEqual(config.paths.install_dir, "/srv/litecoin")
        self.assertEqual(config.paths.data_dir, "/srv/chain")
        self.assertEqual(config.network.rpc_bind, LOOPBACK)
        self.assertFalse(config.firewall_enabled)
        self.assertEqual(len(conf.answers.rejections), 1)
        # empty password generates one
        self.assertEqual(len(config.auth.rpc_password.reveal()), 32)

    def test_pool_backend_flow(self):
        answers = ["2", "", "", "3", "", "", "pw", "", "2", "1BitcoinAddr", "ltc1qexampleaddress"]
        conf = self.configurator(answers)
        config = conf.configure_fresh()

        self.assertEqual(config.role, NodeRole.POOL_BACKEND)
        self.assertEqual(config.network.rpc_bind, LOOPBACK)
        self.assertEqual(config.network.rpc_allow, LOOPBACK)
        self.assertEqual(config.notification, BlockNotification.SCRIPT_HOOK)
        self.assertIn("%s", config.blocknotify_cmd)
        self.assertIn("newblocks.log", config.blocknotify_cmd)
        self.assertEqual(config.pool_wallet.mode, PoolWalletMode.EXISTING_ADDRESS)
        self.assertEqual(config.pool_wallet.address, "ltc1qexampleaddress")
        self.assertEqual(len(conf.answers.rejections), 1)
        self.assertIn("Invalid address format", conf.answers.rejections[0])
        self.assertTrue(config.txindex)

    def test_declined_disk_gate_aborts(self):
        conf = self.configurator(["", "", "", "n"], free_gb=10)
        with self.assertRaises(PreconditionError):
            conf.configure_fresh()

    def test_accepted_hdd_gate_for_pool(self):
        hdd = HostResources(cpu_cores=4, ram_mb=16000, disk_free_gb=500, disk_is_rotational=True)
        answers = ["2", "", "", "y", "", "", "pw", "", ""]
        config = self.configurator(answers, resources=hdd).configure_fresh()
        self.assertEqual(config.pool_wallet.mode, PoolWalletMode.CREATE)

    def test_hdd_gate_follows_chosen_data_dir(self):
        checked = []

        def rotational(path):
            checked.append(path)
            return path.startswith("/mnt/hdd")

        answers = ["2", "", "n", "/srv/litecoin", "/mnt/hdd/litecoin", "n"]
        conf = Configurator(self.settings, HEALTHY, ScriptedAnswers(answers), "v0.21.4",
                            disk_free_gb=lambda _path: 500, disk_is_rotational=rotational)
        with self.assertRaises(PreconditionError):
            conf.configure_fresh()
        self.assertEqual(checked, ["/mnt/hdd/litecoin"])
        self.assertEqual(conf.answers.remaining, 0)

    def test_low_ram_gate(self):
        low = HostResources(cpu_cores=1, ram_mb=2000, disk_free_gb=500, disk_is_rotational=False)
        with self.assertRaises(PreconditionError):
            self.configurator([""], resources=low).check_host_resources()
        self.configurator(["y"], resources=low).check_host_resources()

    def test_declined_summary_cancels(self):
        conf = self.configurator(["n"])
        with self.assertRaises(UserCancelled):
            conf.confirm(make_config(self.test_dir, settings=self.settings), "fresh")

    def test_reconfigure_seeded_from_existing(self):
        parsed = ParsedDaemonConfig(
            role=NodeRole.POOL_BACKEND,
            chain_mode=ChainMode.FULL,
            data_dir="/data/litecoin",
            p2p_port=19333,
            rpc_port=19332,
            rpc_bind=LOOPBACK,
            rpc_allow=LOOPBACK,
            rpc_user="olduser",
            rpc_password=Secret("oldpass"),
            zmq_hashblock_port=28332,
            zmq_rawblock_port=28333,
            log_dir="/data/logs",
        )
        # role, chain, notification, user, password, firewall, wallet
        conf = self.configurator(["", "", "", "", "", "", ""])
        config = conf.configure_reconfigure(parsed)

        self.assertEqual(config.role, NodeRole.POOL_BACKEND)
        self.assertEqual(config.notification, BlockNotification.ZMQ)
        self.assertEqual(config.auth.rpc_user, "olduser")
        self.assertEqual(config.auth.rpc_password.reveal(), "oldpass")
        self.assertEqual(config.network.p2p_port, 19333)
        self.assertEqual(config.network.rpc_port, 19332)
        self.assertEqual(config.paths.data_dir, "/data/litecoin")
        self.assertEqual(config.paths.log_dir, "/data/logs")
        self.assertEqual(config.pool_wallet.mode, PoolWalletMode.DEFERRED)

    def test_reconfigure_pool_to_standard(self):
        parsed = ParsedDaemonConfig(role=NodeRole.POOL_BACKEND, chain_mode=ChainMode.FULL,
                                    rpc_user="olduser", rpc_password=Secret("oldpass"))
        conf = self.configurator(["1", "", "2", "", "", ""])
        config = conf.configure_reconfigure(parsed)
        self.assertEqual(config.role, NodeRole.STANDARD)
        self.assertEqual(config.network.rpc_bind, LOOPBACK)
        self.assertIsNone(config.pool_wallet)
        self.assertIsNone(config.network.zmq_rawblock_port)


if __name__ == '__main__':
    unittest.main()
