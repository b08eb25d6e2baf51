# Path and File Name : /home/coinnode/installer/coinnode_installer/wallet/wallet_menu.py
# Author: nXxBku0CKFAJCBN3X1g3bQk7OxYQylg8CMw1iGsq7gU
# Details of functionality of this file: Interactive pool wallet management submenu for an installed node

"""
Wallet Management menu.

Talks to the running daemon over RPC. A temporary isolated daemon is only
started when a wallet has to be created while the service is stopped.
"""

import logging
from pathlib import Path
from typing import Callable, Optional

from .. import console
from ..config_model import NodeConfig, is_valid_address
from ..configurator.answers import AnswerSource
from ..configurator.configurator import address_validator
from ..configurator.questions import ChoiceQuestion, TextQuestion
from ..errors import RpcError
from ..host.runner import HostRunner
from ..services.service_control import is_active
from .pool_wallet import (
    create_pool_wallet, create_wallet_via_rpc, read_wallet_conf, write_created_wallet_conf,
    write_external_address_conf,
)
from .rpc_client import DaemonRpcClient, client_for

logger = logging.getLogger(__name__)

CREATE = "create"
EXTERNAL = "external"
BALANCE = "balance"
NEW_ADDRESS = "address"
SYNC = "sync"
BACK = "back"


class WalletMenu:
    def __init__(self, config: NodeConfig, runner: HostRunner, answers: AnswerSource,
                 sleep: Callable[[float], None], client: Optional[DaemonRpcClient] = None):
        self.config = config
        self.runner = runner
        self.answers = answers
        self.sleep = sleep
        self.client = client or client_for(config)

    def show_current(self) -> dict:
        values = read_wallet_conf(Path(self.config.wallet_conf_file))
        console.subsection("CURRENT POOL WALLET")
        if not values:
            console.info(f"No pool wallet configured ({self.config.wallet_conf_file} not found)")
        for key, value in values.items():
            console.info(f"{key}: {value}")
        return values

    def run(self) -> None:
        """Loop until the operator picks Back."""
        while True:
            current = self.show_current()
            choice = self.answers.ask(ChoiceQuestion(
                prompt="Wallet management",
                options=[
                    (CREATE, "Create new pool wallet on this server"),
                    (EXTERNAL, "Set external wallet address"),
                    (BALANCE, "View wallet balance"),
                    (NEW_ADDRESS, "Generate new receiving address"),
                    (SYNC, "Show blockchain sync status"),
                    (BACK, "Back"),
                ],
                default_index=5,
            ))
            if choice == BACK:
                return
            try:
                if choice == CREATE:
                    self.create_wallet()
                elif choice == EXTERNAL:
                    self.set_external_address()
                elif choice == BALANCE:
                    self.show_balance(current)
                elif choice == NEW_ADDRESS:
                    self.new_address(current)
                elif choice == SYNC:
                    self.show_sync_status()
            except RpcError as e:
                console.error(f"RPC call failed: {e}")
                console.info(f"Is {self.config.profile.service_name} running? "
                             f"sudo systemctl status {self.config.profile.service_name}")

    def _service_running(self) -> bool:
        return is_active(self.runner, self.config.profile.service_name)

    def create_wallet(self) -> None:
        if self._service_running():
            address = create_wallet_via_rpc(self.client)
            path = write_created_wallet_conf(self.config, address)
            console.success(f"Pool wallet created: {address} (details in {path})")
            return

        console.info("Service is not running; starting a temporary isolated daemon")
        result = create_pool_wallet(self.config, self.runner, self.sleep, self.client)
        if result.ok:
            console.success(result.reason)
        else:
            console.error(result.reason)
            if result.remediation:
                console.info(f"To finish manually: {result.remediation}")

    def set_external_address(self) -> None:
        prefixes = self.config.profile.address_prefixes
        address = self.answers.ask(TextQuestion(
            prompt="Wallet address",
            help_lines=[f"Valid formats start with: {', '.join(prefixes)}"],
            required=True,
            validator=address_validator(prefixes),
        ))
        path = write_external_address_conf(self.config, address)
        console.success(f"Pool wallet address saved to {path}")

    def _wallet_client(self, current: dict) -> Optional[DaemonRpcClient]:
        name = current.get("WALLET_NAME")
        if not name:
            console.warning("No local wallet on this server (external address or none configured)")
            return None
        return self.client.for_wallet(name)

    def show_balance(self, current: dict) -> None:
        client = self._wallet_client(current)
        if client is None:
            return
        balance = client.getbalance()
        console.info(f"Balance: {balance} {self.config.profile.currency_unit}")

    def new_address(self, current: dict) -> None:
        client = self._wallet_client(current)
        if client is None:
            return
        address = client.getnewaddress("pool", "bech32")
        if not is_valid_address(address, self.config.profile.address_prefixes):
            logger.warning(f"Daemon returned an address with an unexpected prefix: {address}")
        console.success(f"New receiving address: {address}")

    def show_sync_status(self) -> None:
        info = self.client.getblockchaininfo()
        blocks = info.get("blocks", 0)
        headers = info.get("headers", 0)
        progress = float(info.get("verificationprogress", 0.0)) * 100
        console.info(f"Chain:    {info.get('chain', 'unknown')}")
        console.info(f"Blocks:   {blocks} / {headers}")
        console.info(f"Progress: {progress:.2f}%")
        if info.get("initialblockdownload"):
            console.warning("Initial block download in progress; not ready for pool use yet")
        if info.get("pruned"):
            console.info(f"Pruned:   yes (prune height {info.get('pruneheight', 0)})")
