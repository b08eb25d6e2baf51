# Path and File Name : /home/coinnode/installer/coinnode_installer/config_model.py
# Author: nXxBku0CKFAJCBN3X1g3bQk7OxYQylg8CMw1iGsq7gU
# Details of functionality of this file: Immutable node configuration model threaded through every installer component

"""
Node Configuration Model.

A NodeConfig is built once per run (profile defaults, optional parse of the
on-disk config, operator answers), validated, confirmed, and then only read.
"""

import secrets
import string
from dataclasses import dataclass, field
from enum import Enum
from pathlib import PurePosixPath
from typing import List, Optional, Sequence, Tuple

from .errors import ConfigurationError
from .settings import DaemonProfile, DefaultPaths

PRUNE_TARGET_MB = 4000
STANDARD_MAX_CONNECTIONS = 125
POOL_MAX_CONNECTIONS = 256
DEFAULT_DBCACHE_MB = 450
LOOPBACK = "127.0.0.1"
WILDCARD = "0.0.0.0"
WILDCARD_ALLOW = "0.0.0.0/0"
GENERATED_PASSWORD_LENGTH = 32

LOOPBACK_ADDRESSES = ("127.0.0.1", "::1", "localhost")


class NodeRole(Enum):
    STANDARD = "standard"
    POOL_BACKEND = "pool"


class ChainMode(Enum):
    FULL = "full"
    PRUNED = "pruned"


class BlockNotification(Enum):
    """How pool software learns about new blocks."""
    NONE = "rpc-poll"
    ZMQ = "zmq"
    SCRIPT_HOOK = "blocknotify"
    BOTH = "zmq+blocknotify"

    @property
    def uses_zmq(self) -> bool:
        return self in (BlockNotification.ZMQ, BlockNotification.BOTH)

    @property
    def uses_script(self) -> bool:
        return self in (BlockNotification.SCRIPT_HOOK, BlockNotification.BOTH)


class PoolWalletMode(Enum):
    CREATE = "create"
    EXISTING_ADDRESS = "existing"
    DEFERRED = "deferred"


class Secret:
    """String wrapper that never shows its value in repr/str."""

    __slots__ = ("_value",)

    def __init__(self, value: str):
        self._value = value

    def reveal(self) -> str:
        return self._value

    def masked(self) -> str:
        if len(self._value) <= 4:
            return "*" * len(self._value)
        return self._value[:2] + "*" * (len(self._value) - 4) + self._value[-2:]

    def __eq__(self, other):
        return isinstance(other, Secret) and secrets.compare_digest(self._value, other._value)

    def __hash__(self):
        return hash(self._value)

    def __bool__(self):
        return bool(self._value)

    def __repr__(self):
        return "Secret('********')"

    __str__ = __repr__


def generate_password(length: int = GENERATED_PASSWORD_LENGTH) -> Secret:
    """Generate an alphanumeric RPC password."""
    alphabet = string.ascii_letters + string.digits
    return Secret("".join(secrets.choice(alphabet) for _ in range(length)))


def is_valid_address(address: str, prefixes: Sequence[str] = DaemonProfile.address_prefixes) -> bool:
    """
    Shallow address format check: non-empty and starting with a known prefix.

    This is not a checksum validation.
    """
    address = (address or "").strip()
    if not address:
        return False
    return any(address.startswith(p) for p in prefixes)


def is_loopback(address: Optional[str]) -> bool:
    return address in LOOPBACK_ADDRESSES


@dataclass(frozen=True)
class NodePaths:
    install_dir: str
    data_dir: str
    config_dir: str
    log_dir: str
    source_dir: str
    bdb_prefix: str = DefaultPaths.bdb_prefix
    bin_link_dir: str = DefaultPaths.bin_link_dir
    systemd_dir: str = DefaultPaths.systemd_dir
    build_log_dir: str = DefaultPaths.build_log_dir

    @property
    def wallet_dir(self) -> str:
        return str(PurePosixPath(self.data_dir) / "wallets")

    @classmethod
    def from_defaults(cls, defaults: DefaultPaths, install_dir: Optional[str] = None,
                      data_dir: Optional[str] = None) -> "NodePaths":
        return cls(
            install_dir=install_dir or defaults.install_dir,
            data_dir=data_dir or defaults.data_dir,
            config_dir=defaults.config_dir,
            log_dir=defaults.log_dir,
            source_dir=defaults.source_dir,
            bdb_prefix=defaults.bdb_prefix,
            bin_link_dir=defaults.bin_link_dir,
            systemd_dir=defaults.systemd_dir,
            build_log_dir=defaults.build_log_dir,
        )

    def all_dirs(self) -> Tuple[str, ...]:
        return (self.install_dir, self.data_dir, self.wallet_dir, self.config_dir,
                self.log_dir, self.source_dir)


@dataclass(frozen=True)
class NetworkSettings:
    p2p_port: int
    rpc_port: int
    rpc_bind: str = LOOPBACK
    rpc_allow: str = LOOPBACK
    zmq_hashblock_port: Optional[int] = None
    zmq_rawblock_port: Optional[int] = None

    @property
    def rpc_url(self) -> str:
        host = LOOPBACK if self.rpc_bind == WILDCARD else self.rpc_bind
        return f"http://{host}:{self.rpc_port}"


@dataclass(frozen=True)
class RpcAuth:
    rpc_user: str
    rpc_password: Secret


@dataclass(frozen=True)
class PoolWalletPlan:
    mode: PoolWalletMode
    address: Optional[str] = None


@dataclass(frozen=True)
class ValidationResult:
    errors: Tuple[str, ...] = ()
    warnings: Tuple[str, ...] = ()

    @property
    def ok(self) -> bool:
        return not self.errors


@dataclass(frozen=True)
class NodeConfig:
    """Everything one installer pass needs to know."""
    profile: DaemonProfile
    role: NodeRole
    chain_mode: ChainMode
    paths: NodePaths
    network: NetworkSettings
    auth: RpcAuth
    software_version: str
    notification: BlockNotification = BlockNotification.NONE
    blocknotify_cmd: Optional[str] = None
    firewall_enabled: bool = True
    pool_wallet: Optional[PoolWalletPlan] = None
    prune_target_mb: int = PRUNE_TARGET_MB
    par: int = 1
    build_jobs: int = 1
    dbcache_mb: int = DEFAULT_DBCACHE_MB

    @property
    def is_pool(self) -> bool:
        return self.role is NodeRole.POOL_BACKEND

    @property
    def is_pruned(self) -> bool:
        return self.chain_mode is ChainMode.PRUNED

    @property
    def txindex(self) -> bool:
        return self.is_pool

    @property
    def max_connections(self) -> int:
        return POOL_MAX_CONNECTIONS if self.is_pool else STANDARD_MAX_CONNECTIONS

    @property
    def service_user(self) -> str:
        return self.profile.service_user

    @property
    def config_file(self) -> str:
        return str(PurePosixPath(self.paths.config_dir) / self.profile.config_filename)

    @property
    def wallet_conf_file(self) -> str:
        return str(PurePosixPath(self.paths.config_dir) / self.profile.wallet_conf_filename)

    @property
    def daemon_path(self) -> str:
        return str(PurePosixPath(self.paths.install_dir) / "bin" / self.profile.daemon_binary)

    @property
    def cli_path(self) -> str:
        return str(PurePosixPath(self.paths.install_dir) / "bin" / self.profile.cli_binary)

    @property
    def unit_file(self) -> str:
        return str(PurePosixPath(self.paths.systemd_dir) / f"{self.profile.service_name}.service")

    @property
    def rpc_opens_publicly(self) -> bool:
        return self.role is NodeRole.STANDARD and self.network.rpc_bind == WILDCARD

    def validate(self) -> ValidationResult:
        """Check model invariants. Errors make the model unusable; warnings are shown to the operator."""
        errors: List[str] = []
        warnings: List[str] = []

        for name in ("install_dir", "data_dir", "config_dir", "log_dir", "source_dir",
                     "bdb_prefix", "bin_link_dir", "systemd_dir"):
            value = getattr(self.paths, name)
            if not PurePosixPath(value).is_absolute():
                errors.append(f"Path '{name}' must be absolute: {value!r}")

        if self.is_pool:
            if not is_loopback(self.network.rpc_bind):
                errors.append(f"Pool backend requires loopback rpcbind, got {self.network.rpc_bind}")
            if not is_loopback(self.network.rpc_allow):
                errors.append(f"Pool backend requires loopback rpcallowip, got {self.network.rpc_allow}")
        elif self.pool_wallet is not None:
            errors.append("Pool wallet plan is only valid for the pool backend role")

        if self.pool_wallet is not None and self.pool_wallet.mode is PoolWalletMode.EXISTING_ADDRESS:
            if not is_valid_address(self.pool_wallet.address or "", self.profile.address_prefixes):
                errors.append(f"Pool wallet address {self.pool_wallet.address!r} does not start with "
                              f"{', '.join(self.profile.address_prefixes)}")

        if self.notification.uses_script and not (self.blocknotify_cmd or "").strip():
            errors.append("Block notification script hook requires a command")
        if self.notification.uses_zmq and not (self.network.zmq_hashblock_port and self.network.zmq_rawblock_port):
            errors.append("ZMQ notification requires hashblock and rawblock ports")

        if not self.auth.rpc_user:
            errors.append("RPC user must not be empty")
        if not self.auth.rpc_password:
            errors.append("RPC password must not be empty")

        if self.is_pruned and self.txindex:
            warnings.append("Pruned mode with txindex=1: many daemon versions refuse to start with both "
                            "enabled. Use a full chain for a pool backend if the daemon rejects it.")
        if self.blocknotify_cmd and "%s" not in self.blocknotify_cmd:
            warnings.append("Block notification command has no %s placeholder for the block hash")

        return ValidationResult(errors=tuple(errors), warnings=tuple(warnings))

    def ensure_valid(self) -> ValidationResult:
        """Raise ConfigurationError if validate() reports errors; return the result otherwise."""
        result = self.validate()
        if not result.ok:
            raise ConfigurationError("Invalid configuration:\n  " + "\n  ".join(result.errors))
        return result


def build_jobs_for(cpu_cores: int) -> int:
    return 1 if cpu_cores < 2 else cpu_cores
