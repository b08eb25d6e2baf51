# Path and File Name : /home/coinnode/installer/coinnode_installer/wallet/rpc_client.py
# Author: nXxBku0CKFAJCBN3X1g3bQk7OxYQylg8CMw1iGsq7gU
# Details of functionality of this file: Minimal JSON-RPC client for the node daemon (wallet and chain queries, shutdown)

"""
Daemon JSON-RPC client.

Only the handful of calls the installer needs. The daemon answers RPC errors
with HTTP 500 and a JSON body, so the body is inspected before the status.
"""

import logging
from typing import Any, Optional

import requests

from ..config_model import NodeConfig
from ..errors import RpcError

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 30


class DaemonRpcClient:
    """
    Usage:
        client = DaemonRpcClient("http://127.0.0.1:9332", "litecoinrpc", password)
        info = client.getblockchaininfo()
    """

    def __init__(self, url: str, user: str, password: str, wallet: Optional[str] = None,
                 timeout: int = DEFAULT_TIMEOUT, session: Optional[requests.Session] = None):
        self.url = url.rstrip("/")
        self.user = user
        self._password = password
        self.wallet = wallet
        self.timeout = timeout
        self.session = session or requests.Session()
        self.id_counter = 0

    @property
    def endpoint(self) -> str:
        return f"{self.url}/wallet/{self.wallet}" if self.wallet else self.url

    def for_wallet(self, wallet: str) -> "DaemonRpcClient":
        return DaemonRpcClient(self.url, self.user, self._password, wallet=wallet,
                               timeout=self.timeout, session=self.session)

    def call(self, method: str, *params) -> Any:
        """
        Make a JSON-RPC call.

        Raises:
            RpcError: On transport failure, invalid JSON, or an error object
        """
        self.id_counter += 1
        payload = {"jsonrpc": "1.0", "id": self.id_counter, "method": method, "params": list(params)}
        logger.debug(f"RPC call: {method} -> {self.endpoint}")

        try:
            response = self.session.post(self.endpoint, json=payload, auth=(self.user, self._password),
                                         timeout=self.timeout)
        except requests.RequestException as e:
            raise RpcError(f"{method}: request failed: {e}") from e

        try:
            body = response.json()
        except ValueError:
            raise RpcError(f"{method}: HTTP {response.status_code}, non-JSON response")

        error = body.get("error") if isinstance(body, dict) else None
        if error:
            message = error.get("message", error) if isinstance(error, dict) else error
            code = error.get("code") if isinstance(error, dict) else None
            raise RpcError(f"{method}: RPC error {code}: {message}")
        if response.status_code >= 400:
            raise RpcError(f"{method}: HTTP {response.status_code}")
        return body.get("result")

    def createwallet(self, name: str):
        # name, disable_private_keys, blank, passphrase, avoid_reuse, descriptors
        return self.call("createwallet", name, False, False, "", False, False)

    def loadwallet(self, name: str):
        return self.call("loadwallet", name)

    def getnewaddress(self, label: str = "pool", address_type: str = "bech32") -> str:
        return self.call("getnewaddress", label, address_type)

    def getbalance(self):
        return self.call("getbalance")

    def getblockchaininfo(self) -> dict:
        return self.call("getblockchaininfo")

    def stop(self):
        return self.call("stop")

    def is_ready(self) -> bool:
        try:
            self.getblockchaininfo()
            return True
        except RpcError:
            return False


def client_for(config: NodeConfig, wallet: Optional[str] = None) -> DaemonRpcClient:
    """Client for the node's own RPC endpoint (always via loopback)."""
    return DaemonRpcClient(f"http://127.0.0.1:{config.network.rpc_port}", config.auth.rpc_user,
                           config.auth.rpc_password.reveal(), wallet=wallet)
