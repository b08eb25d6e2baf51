# Path and File Name : /home/coinnode/installer/coinnode_installer/wallet/pool_wallet.py
# Author: nXxBku0CKFAJCBN3X1g3bQk7OxYQylg8CMw1iGsq7gU
# Details of functionality of this file: Creates the pool wallet through a temporary isolated daemon and persists its credential file

"""
Pool Wallet provisioning.

CREATE starts the daemon without networking (-connect=0 -listen=0) as the
service user, waits for RPC, creates the wallet and a bech32 receiving
address, writes the credential file and stops the daemon again.
EXISTING_ADDRESS only records the external address.
"""

import logging
import os
from datetime import datetime
from pathlib import Path
from typing import Callable, Dict, Optional

from ..config_model import NodeConfig, PoolWalletMode
from ..errors import RpcError
from ..host.runner import HostRunner
from ..runtime.accounts import chown_to_user
from ..tasks import StepContext, StepResult
from .rpc_client import DaemonRpcClient, client_for

logger = logging.getLogger(__name__)

WALLET_NAME = "pool-wallet"
READY_ATTEMPTS = 30
READY_INTERVAL = 1.0
SHUTDOWN_SETTLE_SECONDS = 3


def read_wallet_conf(path: Path) -> Dict[str, str]:
    """KEY=VALUE pairs of a credential file ({} when absent)."""
    values: Dict[str, str] = {}
    try:
        text = Path(path).read_text()
    except OSError:
        return values
    for line in text.splitlines():
        line = line.strip()
        if line and not line.startswith("#") and "=" in line:
            key, _, value = line.partition("=")
            values[key.strip()] = value.strip()
    return values


def _write_private(path: Path, text: str, user: str) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    fd = os.open(str(path), os.O_WRONLY | os.O_CREAT | os.O_TRUNC, 0o600)
    with os.fdopen(fd, 'w') as f:
        f.write(text)
    os.chmod(path, 0o600)
    chown_to_user(path, user)


def write_created_wallet_conf(config: NodeConfig, address: str, wallet_name: str = WALLET_NAME) -> Path:
    path = Path(config.wallet_conf_file)
    wallet_path = Path(config.paths.wallet_dir) / wallet_name
    cli = config.profile.cli_binary
    text = (
        "# Pool Wallet Configuration\n"
        f"# Generated: {datetime.now().strftime('%Y-%m-%d %H:%M:%S')}\n"
        "#\n"
        f"# IMPORTANT: Back up the wallet files in {config.paths.wallet_dir}/\n"
        "\n"
        f"WALLET_NAME={wallet_name}\n"
        f"WALLET_ADDRESS={address}\n"
        f"WALLET_PATH={wallet_path}\n"
        "\n"
        f"# Use {cli} -rpcwallet={wallet_name} to interact with this wallet\n"
        f"# Example: {cli} -rpcwallet={wallet_name} getbalance\n"
    )
    _write_private(path, text, config.service_user)
    return path


def write_external_address_conf(config: NodeConfig, address: str) -> Path:
    path = Path(config.wallet_conf_file)
    text = (
        "# Pool Wallet Configuration\n"
        f"# Generated: {datetime.now().strftime('%Y-%m-%d %H:%M:%S')}\n"
        "\n"
        f"WALLET_ADDRESS={address}\n"
        "\n"
        "# This is an external wallet address; the wallet is managed elsewhere.\n"
    )
    _write_private(path, text, config.service_user)
    return path


def wait_for_rpc(client: DaemonRpcClient, sleep: Callable[[float], None],
                 attempts: int = READY_ATTEMPTS, interval: float = READY_INTERVAL) -> bool:
    for attempt in range(1, attempts + 1):
        if client.is_ready():
            return True
        logger.debug(f"Waiting for daemon RPC ({attempt}/{attempts})")
        sleep(interval)
    return False


def start_isolated_daemon(runner: HostRunner, config: NodeConfig):
    return runner.run([config.daemon_path, f"-conf={config.config_file}", "-daemon",
                       "-connect=0", "-listen=0"], user=config.service_user)


def create_remediation(config: NodeConfig) -> str:
    return f"{config.profile.cli_binary} -conf={config.config_file} createwallet {WALLET_NAME}"


def create_wallet_via_rpc(client: DaemonRpcClient, wallet_name: str = WALLET_NAME) -> str:
    """Create (or load an existing) wallet and return a new bech32 address."""
    try:
        client.createwallet(wallet_name)
    except RpcError as e:
        if "already exists" not in str(e):
            raise
        try:
            client.loadwallet(wallet_name)
        except RpcError as load_error:
            if "already loaded" not in str(load_error):
                raise
    address = client.for_wallet(wallet_name).getnewaddress("pool", "bech32")
    if not address:
        raise RpcError("getnewaddress returned an empty address")
    return address


def create_pool_wallet(config: NodeConfig, runner: HostRunner, sleep: Callable[[float], None],
                       client: Optional[DaemonRpcClient] = None) -> StepResult:
    """Run the temporary-daemon wallet creation flow."""
    client = client or client_for(config)
    remediation = create_remediation(config)

    try:
        client.stop()
        sleep(2)
    except RpcError as e:
        logger.debug(f"No daemon to stop before wallet creation: {e}")

    result = start_isolated_daemon(runner, config)
    if not result.ok:
        return StepResult.failure("Could not start temporary daemon", log_excerpt=result.tail(),
                                  remediation=remediation)
    try:
        if not wait_for_rpc(client, sleep):
            return StepResult.failure(f"Daemon RPC not ready after {READY_ATTEMPTS} attempts",
                                      remediation=remediation)
        try:
            address = create_wallet_via_rpc(client)
        except RpcError as e:
            return StepResult.failure(f"Wallet creation failed: {e}", remediation=remediation)
        path = write_created_wallet_conf(config, address)
    finally:
        try:
            client.stop()
        except RpcError as e:
            logger.warning(f"Temporary daemon stop failed: {e}")
        sleep(SHUTDOWN_SETTLE_SECONDS)

    return StepResult.success(f"Pool wallet created: {address} (details in {path})")


def provision_pool_wallet(context: StepContext) -> StepResult:
    config = context.config
    plan = config.pool_wallet
    if not config.is_pool:
        return StepResult.skip("Not a pool backend")
    if plan is None or plan.mode is PoolWalletMode.DEFERRED:
        return StepResult.skip("Pool wallet deferred")

    if plan.mode is PoolWalletMode.EXISTING_ADDRESS:
        path = write_external_address_conf(config, plan.address)
        return StepResult.success(f"Pool wallet address saved to {path}")

    existing = read_wallet_conf(Path(config.wallet_conf_file))
    if existing.get("WALLET_NAME") == WALLET_NAME and existing.get("WALLET_ADDRESS") \
            and (Path(config.paths.wallet_dir) / WALLET_NAME).exists():
        return StepResult.skip(f"Pool wallet already exists: {existing['WALLET_ADDRESS']}")

    client = context.rpc_factory(config) if context.rpc_factory else None
    return create_pool_wallet(config, context.runner, context.sleep, client)
