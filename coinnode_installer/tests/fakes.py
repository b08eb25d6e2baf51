# Path and File Name : /home/coinnode/installer/coinnode_installer/tests/fakes.py
# Author: nXxBku0CKFAJCBN3X1g3bQk7OxYQylg8CMw1iGsq7gU
# Details of functionality of this file: Shared test doubles: recording host runner and temp-rooted settings/config builders

"""
Test doubles.

FakeRunner records every argv and answers from a list of (prefix, returncode,
output) responses; the first matching prefix wins. Settings and configs are
rooted in a temporary directory and use the current user as service user so
ownership changes succeed in any environment.
"""

import getpass
import pwd
import os
from dataclasses import replace
from pathlib import Path
from typing import List, Optional, Sequence

from coinnode_installer.config_model import (
    BlockNotification, ChainMode, NetworkSettings, NodeConfig, NodePaths, NodeRole, RpcAuth, Secret,
    WILDCARD, LOOPBACK,
)
from coinnode_installer.host.runner import CommandResult
from coinnode_installer.services.daemon_conf import expected_rpc_allow
from coinnode_installer.settings import DaemonProfile, DefaultPaths, InstallerSettings


def current_user() -> str:
    try:
        return pwd.getpwuid(os.getuid()).pw_name
    except KeyError:
        return getpass.getuser()


class FakeRunner:
    def __init__(self, default_returncode: int = 0, available: Optional[dict] = None):
        self.default_returncode = default_returncode
        self.responses: List[tuple] = []
        self.calls: List[List[str]] = []
        self.users: List[Optional[str]] = []
        self.available = available if available is not None else {}

    def respond(self, prefix: Sequence[str], returncode: int = 0, output: str = "") -> "FakeRunner":
        self.responses.append((tuple(prefix), returncode, output))
        return self

    def run(self, argv, log_file=None, user=None, cwd=None, env=None, timeout=None) -> CommandResult:
        argv = [str(a) for a in argv]
        self.calls.append(argv)
        self.users.append(user)
        returncode, output = self.default_returncode, ""
        for prefix, rc, out in self.responses:
            if tuple(argv[:len(prefix)]) == prefix:
                returncode, output = rc, out
                break
        if log_file is not None:
            log_file = Path(log_file)
            log_file.parent.mkdir(parents=True, exist_ok=True)
            with open(log_file, 'a') as f:
                f.write(f"$ {' '.join(argv)}\n{output}\n")
        return CommandResult(argv=argv, returncode=returncode, output=output)

    def which(self, name: str) -> Optional[str]:
        return self.available.get(name)

    def calls_starting(self, *prefix) -> List[List[str]]:
        return [c for c in self.calls if tuple(c[:len(prefix)]) == prefix]

    def ran(self, *prefix) -> bool:
        return bool(self.calls_starting(*prefix))


def no_sleep(_seconds: float) -> None:
    return None


def make_settings(root: Path, **profile_overrides) -> InstallerSettings:
    root = Path(root)
    profile_overrides.setdefault("service_user", current_user())
    profile = replace(DaemonProfile(), **profile_overrides)
    paths = DefaultPaths(
        install_dir=str(root / "opt" / "litecoin"),
        data_dir=str(root / "var" / "lib" / "litecoin"),
        config_dir=str(root / "etc" / "litecoin"),
        log_dir=str(root / "var" / "log" / "litecoin"),
        source_dir=str(root / "usr" / "local" / "src" / "litecoin"),
        bdb_prefix=str(root / "usr" / "local" / "BerkeleyDB.4.8"),
        bin_link_dir=str(root / "usr" / "local" / "bin"),
        systemd_dir=str(root / "etc" / "systemd" / "system"),
        build_log_dir=str(root / "tmp"),
    )
    return InstallerSettings(profile=profile, paths=paths)


def make_config(root: Path, role: NodeRole = NodeRole.STANDARD, chain_mode: ChainMode = ChainMode.FULL,
                rpc_bind: Optional[str] = None, settings: Optional[InstallerSettings] = None,
                **overrides) -> NodeConfig:
    settings = settings or make_settings(root)
    profile = settings.profile
    is_pool = role is NodeRole.POOL_BACKEND
    if rpc_bind is None:
        rpc_bind = LOOPBACK if is_pool else WILDCARD
    network = NetworkSettings(
        p2p_port=profile.p2p_port,
        rpc_port=profile.rpc_port,
        rpc_bind=rpc_bind,
        rpc_allow=expected_rpc_allow(role, rpc_bind),
        zmq_hashblock_port=profile.zmq_hashblock_port if is_pool else None,
        zmq_rawblock_port=profile.zmq_rawblock_port if is_pool else None,
    )
    values = dict(
        profile=profile,
        role=role,
        chain_mode=chain_mode,
        paths=NodePaths.from_defaults(settings.paths),
        network=network,
        auth=RpcAuth(rpc_user="litecoinrpc", rpc_password=Secret("s3cretPassw0rd")),
        software_version="v0.21.4",
        notification=BlockNotification.NONE,
        par=4,
        build_jobs=4,
    )
    values.update(overrides)
    return NodeConfig(**values)
