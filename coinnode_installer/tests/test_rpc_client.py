# Path and File Name : /home/coinnode/installer/coinnode_installer/tests/test_rpc_client.py
# Author: nXxBku0CKFAJCBN3X1g3bQk7OxYQylg8CMw1iGsq7gU
# Details of functionality of this file: Tests for the daemon JSON-RPC client and pool wallet provisioning

import unittest
import tempfile
import shutil
import stat
from pathlib import Path
from unittest import mock
import sys

import requests

sys.path.insert(0, str(Path(__file__).parent.parent.parent))

from coinnode_installer.config_model import NodeRole, PoolWalletMode, PoolWalletPlan
from coinnode_installer.errors import RpcError
from coinnode_installer.tasks import StepContext
from coinnode_installer.wallet.pool_wallet import (
    WALLET_NAME, create_wallet_via_rpc, provision_pool_wallet, read_wallet_conf,
)
from coinnode_installer.wallet.rpc_client import DaemonRpcClient, client_for
from coinnode_installer.tests.fakes import FakeRunner, make_config, no_sleep


def response(body, status_code=200):
    r = mock.Mock()
    r.status_code = status_code
    if isinstance(body, Exception):
        r.json.side_effect = body
    else:
        r.json.return_value = body
    return r


class TestDaemonRpcClient(unittest.TestCase):

    def setUp(self):
        self.session = mock.Mock()
        self.client = DaemonRpcClient("http://127.0.0.1:9332/", "rpcuser", "rpcpass", session=self.session)

    def test_result_returned(self):
        self.session.post.return_value = response({"result": {"blocks": 10}, "error": None, "id": 1})
        self.assertEqual(self.client.getblockchaininfo(), {"blocks": 10})
        args, kwargs = self.session.post.call_args
        self.assertEqual(args[0], "http://127.0.0.1:9332")
        self.assertEqual(kwargs["json"]["method"], "getblockchaininfo")
        self.assertEqual(kwargs["auth"], ("rpcuser", "rpcpass"))

    def test_error_object_raises(self):
        self.session.post.return_value = response(
            {"result": None, "error": {"code": -18, "message": "Requested wallet does not exist"}}, 500)
        with self.assertRaises(RpcError) as ctx:
            self.client.getbalance()
        self.assertIn("-18", str(ctx.exception))
        self.assertIn("does not exist", str(ctx.exception))

    def test_transport_and_body_failures(self):
        self.session.post.side_effect = requests.ConnectionError("refused")
        with self.assertRaises(RpcError):
            self.client.stop()
        self.assertFalse(self.client.is_ready())

        self.session.post.side_effect = None
        self.session.post.return_value = response(ValueError("no json"), 401)
        with self.assertRaises(RpcError) as ctx:
            self.client.stop()
        self.assertIn("401", str(ctx.exception))

    def test_wallet_endpoint_and_params(self):
        self.session.post.return_value = response({"result": "ltc1qnew", "error": None})
        wallet = self.client.for_wallet("pool-wallet")
        self.assertEqual(wallet.getnewaddress(), "ltc1qnew")
        args, kwargs = self.session.post.call_args
        self.assertEqual(args[0], "http://127.0.0.1:9332/wallet/pool-wallet")
        self.assertEqual(kwargs["json"]["params"], ["pool", "bech32"])

        self.client.createwallet("pool-wallet")
        _, kwargs = self.session.post.call_args
        self.assertEqual(kwargs["json"]["params"], ["pool-wallet", False, False, "", False, False])

    def test_client_for_uses_loopback(self):
        with tempfile.TemporaryDirectory() as root:
            config = make_config(Path(root))
        client = client_for(config)
        self.assertEqual(client.url, "http://127.0.0.1:9332")
        self.assertEqual(client.user, "litecoinrpc")


class FakeWalletRpc:
    """Scripted stand-in for the daemon: ready after `ready_after` probes."""

    def __init__(self, ready_after=0, create_error=None, load_error=None, address="ltc1qpool"):
        self.ready_after = ready_after
        self.create_error = create_error
        self.load_error = load_error
        self.address = address
        self.calls = []

    def is_ready(self):
        self.calls.append("is_ready")
        self.ready_after -= 1
        return self.ready_after < 0

    def stop(self):
        self.calls.append("stop")
        raise RpcError("stop: request failed: connection refused")

    def createwallet(self, name):
        self.calls.append(f"createwallet {name}")
        if self.create_error:
            raise RpcError(self.create_error)

    def loadwallet(self, name):
        self.calls.append(f"loadwallet {name}")
        if self.load_error:
            raise RpcError(self.load_error)

    def for_wallet(self, name):
        self.calls.append(f"wallet {name}")
        return self

    def getnewaddress(self, label="pool", address_type="bech32"):
        self.calls.append("getnewaddress")
        return self.address


class TestPoolWallet(unittest.TestCase):

    def setUp(self):
        self.test_dir = Path(tempfile.mkdtemp(prefix="coinnode_wallet_test_"))

    def tearDown(self):
        shutil.rmtree(self.test_dir, ignore_errors=True)

    def context(self, plan, rpc, role=NodeRole.POOL_BACKEND, runner=None):
        config = make_config(self.test_dir, role=role, pool_wallet=plan)
        return StepContext(config, runner or FakeRunner(), no_sleep, rpc_factory=lambda _config: rpc)

    def test_existing_wallet_is_loaded(self):
        rpc = FakeWalletRpc(create_error="createwallet: RPC error -4: Wallet file verification failed. "
                                         "Database already exists.")
        self.assertEqual(create_wallet_via_rpc(rpc), "ltc1qpool")
        self.assertIn(f"loadwallet {WALLET_NAME}", rpc.calls)

        rpc = FakeWalletRpc(create_error="already exists", load_error="Wallet is already loaded")
        self.assertEqual(create_wallet_via_rpc(rpc), "ltc1qpool")

        rpc = FakeWalletRpc(create_error="Insufficient disk space")
        with self.assertRaises(RpcError):
            create_wallet_via_rpc(rpc)

    def test_create_through_isolated_daemon(self):
        rpc = FakeWalletRpc(ready_after=2)
        runner = FakeRunner()
        context = self.context(PoolWalletPlan(PoolWalletMode.CREATE), rpc, runner=runner)
        result = provision_pool_wallet(context)

        self.assertTrue(result.ok, result.reason)
        started = runner.calls[0]
        self.assertIn("-connect=0", started)
        self.assertIn("-listen=0", started)
        self.assertEqual(rpc.calls[-1], "stop")

        path = Path(context.config.wallet_conf_file)
        values = read_wallet_conf(path)
        self.assertEqual(values["WALLET_NAME"], WALLET_NAME)
        self.assertEqual(values["WALLET_ADDRESS"], "ltc1qpool")
        self.assertEqual(stat.S_IMODE(path.stat().st_mode), 0o600)

    def test_existing_wallet_skipped(self):
        context = self.context(PoolWalletPlan(PoolWalletMode.CREATE), FakeWalletRpc())
        config = context.config
        Path(config.paths.wallet_dir, WALLET_NAME).mkdir(parents=True)
        Path(config.wallet_conf_file).parent.mkdir(parents=True, exist_ok=True)
        Path(config.wallet_conf_file).write_text(f"WALLET_NAME={WALLET_NAME}\nWALLET_ADDRESS=ltc1qold\n")

        result = provision_pool_wallet(context)
        self.assertTrue(result.ok)
        self.assertIn("ltc1qold", result.reason)
        self.assertEqual(context.runner.calls, [])

    def test_rpc_never_ready(self):
        rpc = FakeWalletRpc(ready_after=1000)
        result = provision_pool_wallet(self.context(PoolWalletPlan(PoolWalletMode.CREATE), rpc))
        self.assertFalse(result.ok)
        self.assertIn("createwallet", result.remediation)

    def test_failed_daemon_start(self):
        runner = FakeRunner(default_returncode=1)
        result = provision_pool_wallet(self.context(PoolWalletPlan(PoolWalletMode.CREATE),
                                                    FakeWalletRpc(), runner=runner))
        self.assertFalse(result.ok)
        self.assertIn("temporary daemon", result.reason)

    def test_external_address_and_deferred(self):
        context = self.context(PoolWalletPlan(PoolWalletMode.EXISTING_ADDRESS, "Mabc123"), FakeWalletRpc())
        self.assertTrue(provision_pool_wallet(context).ok)
        self.assertEqual(read_wallet_conf(Path(context.config.wallet_conf_file)),
                         {"WALLET_ADDRESS": "Mabc123"})

        deferred = provision_pool_wallet(self.context(PoolWalletPlan(PoolWalletMode.DEFERRED), FakeWalletRpc()))
        self.assertTrue(deferred.ok)
        self.assertTrue(deferred.skipped)

        standard = provision_pool_wallet(self.context(None, FakeWalletRpc(), role=NodeRole.STANDARD))
        self.assertTrue(standard.skipped)


if __name__ == '__main__':
    unittest.main()
