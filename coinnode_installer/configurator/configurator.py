# Path and File Name : /home/coinnode/installer/coinnode_installer/configurator/configurator.py
# Author: nXxBku0CKFAJCBN3X1g3bQk7OxYQylg8CMw1iGsq7gU
# Details of functionality of this file: Turns probe results and operator answers into a validated NodeConfig

"""
Interactive Configurator.

Pure decision logic: every operator input comes through an AnswerSource, so
the same code runs against a terminal or a scripted list of answers. Nothing
here mutates the host. A declined resource gate raises PreconditionError; a
declined summary raises UserCancelled.
"""

import logging
from dataclasses import replace
from pathlib import Path
from typing import Callable, List, Optional

from .. import console
from ..config_model import (
    BlockNotification, ChainMode, NetworkSettings, NodeConfig, NodePaths, NodeRole,
    PoolWalletMode, PoolWalletPlan, RpcAuth, Secret, LOOPBACK, WILDCARD,
    build_jobs_for, generate_password, is_valid_address,
)
from ..errors import PreconditionError, UserCancelled
from ..reporting import render_config_summary
from ..services.daemon_conf import ParsedDaemonConfig, expected_rpc_allow
from ..settings import InstallerSettings
from ..system.resource_check import HostResources
from .answers import AnswerSource
from .gates import GateLevel, GateOutcome, cpu_advisory, disk_space_gate, disk_type_gate, ram_gate
from .questions import ChoiceQuestion, TextQuestion, YesNoQuestion, absolute_path_validator

logger = logging.getLogger(__name__)


def address_validator(prefixes) -> Callable[[str], Optional[str]]:
    def validate(value: str) -> Optional[str]:
        if is_valid_address(value, prefixes):
            return None
        return f"Invalid address format: must start with {', '.join(prefixes)}"
    return validate


class Configurator:
    """Builds a NodeConfig from answers."""

    def __init__(self, settings: InstallerSettings, resources: HostResources, answers: AnswerSource,
                 software_version: str, disk_free_gb: Optional[Callable[[str], int]] = None,
                 disk_is_rotational: Optional[Callable[[str], bool]] = None):
        """
        Args:
            settings: Daemon profile and default paths
            resources: Host resource snapshot
            answers: Where operator answers come from
            software_version: Resolved daemon version tag
            disk_free_gb: Free space lookup for a path; defaults to the snapshot value
            disk_is_rotational: Rotational-disk lookup for a path; defaults to the snapshot value
        """
        self.settings = settings
        self.profile = settings.profile
        self.resources = resources
        self.answers = answers
        self.software_version = software_version
        self._disk_free_gb = disk_free_gb or (lambda _path: resources.disk_free_gb)
        self._disk_is_rotational = disk_is_rotational or (lambda _path: resources.disk_is_rotational)

    # -- gates ----------------------------------------------------------

    def apply_gate(self, outcome: GateOutcome, override_prompt: str = "Continue anyway?") -> None:
        """Show a gate outcome; a BLOCK needs an explicit yes or the run aborts."""
        if outcome.level is GateLevel.PASS:
            console.success(outcome.message)
            return
        console.warning(outcome.message)
        for line in outcome.details:
            console.info(line)
        if outcome.level is GateLevel.BLOCK:
            if not self.answers.ask(YesNoQuestion(prompt=override_prompt, default=False)):
                raise PreconditionError(f"Setup aborted: {outcome.message}")
            logger.warning(f"Gate overridden by operator: {outcome.message}")

    def check_host_resources(self) -> None:
        """CPU advisory and RAM gate; run before any configuration question."""
        self.apply_gate(cpu_advisory(self.resources.cpu_cores))
        self.apply_gate(ram_gate(self.resources.ram_mb), "Continue with low memory?")

    def check_storage(self, data_dir: str, role: NodeRole, chain_mode: ChainMode) -> None:
        self.apply_gate(disk_type_gate(self._disk_is_rotational(data_dir), role),
                        "Continue anyway (not recommended)?")
        self.apply_gate(disk_space_gate(self._disk_free_gb(data_dir), chain_mode))

    # -- individual decisions -------------------------------------------

    def ask_role(self, current: Optional[NodeRole] = None) -> NodeRole:
        options = [
            (NodeRole.STANDARD, "Standard Node - Personal wallet use, remote wallet connections"),
            (NodeRole.POOL_BACKEND, "Mining Pool Backend - Optimized for pool software, txindex enabled"),
        ]
        role = self.answers.ask(ChoiceQuestion(
            prompt="Which type of node do you want to set up?",
            options=options,
            default_index=1 if current is NodeRole.POOL_BACKEND else 0,
        ))
        if role is NodeRole.POOL_BACKEND:
            console.success("Selected: Mining Pool Backend")
            console.info("RPC will bind to localhost only (127.0.0.1)")
            console.info("Transaction index enabled (txindex=1), connection limit raised")
        else:
            console.success("Selected: Standard Node")
        return role

    def ask_chain_mode(self, role: NodeRole, current: Optional[ChainMode] = None) -> ChainMode:
        help_lines = []
        if role is NodeRole.POOL_BACKEND:
            help_lines.append("Note: pruned mode with txindex is rejected by some daemon versions.")
        return self.answers.ask(ChoiceQuestion(
            prompt="Which blockchain mode do you want?",
            help_lines=help_lines,
            options=[
                (ChainMode.FULL, "Full Node - Complete blockchain history (~120GB storage required)"),
                (ChainMode.PRUNED, "Pruned Node - Recent data only (~4GB) - Still validates ALL blocks"),
            ],
            default_index=1 if current is ChainMode.PRUNED else 0,
        ))

    def ask_paths(self) -> NodePaths:
        defaults = self.settings.paths
        use_defaults = self.answers.ask(YesNoQuestion(
            prompt="Use default paths?",
            help_lines=[f"Binaries:   {defaults.install_dir}",
                        f"Blockchain: {defaults.data_dir}",
                        f"Wallets:    {defaults.data_dir}/wallets",
                        f"Config:     {defaults.config_dir}",
                        f"Logs:       {defaults.log_dir}",
                        f"Source:     {defaults.source_dir}"],
            default=True,
        ))
        if use_defaults:
            return NodePaths.from_defaults(defaults)

        install_dir = self.answers.ask(TextQuestion(prompt="Binaries directory", default=defaults.install_dir,
                                                    validator=absolute_path_validator))
        data_dir = self.answers.ask(TextQuestion(prompt="Blockchain data directory", default=defaults.data_dir,
                                                 validator=absolute_path_validator))
        return NodePaths.from_defaults(defaults, install_dir=install_dir, data_dir=data_dir)

    def ask_notification(self, log_dir: str, current: Optional[BlockNotification] = None,
                         current_cmd: Optional[str] = None):
        options = [
            (BlockNotification.NONE, "RPC Polling only (RECOMMENDED) - Most compatible, works with all pools"),
            (BlockNotification.ZMQ, "Enable ZMQ - Instant push notifications"),
            (BlockNotification.SCRIPT_HOOK, "Enable blocknotify - Run a custom script when new blocks arrive"),
            (BlockNotification.BOTH, "Enable both ZMQ and blocknotify"),
        ]
        default_index = [o[0] for o in options].index(current) if current else 0
        notification = self.answers.ask(ChoiceQuestion(
            prompt="How should pool software be notified of new blocks?",
            options=options,
            default_index=default_index,
        ))

        command = None
        if notification.uses_script:
            command = self.answers.ask(TextQuestion(
                prompt="blocknotify command",
                help_lines=["Use %s as placeholder for the block hash.",
                            "Examples: curl -s http://localhost:8000/newblock/%s"],
                default=current_cmd or f"echo %s >> {Path(log_dir) / 'newblocks.log'}",
            ))
        return notification, command

    def ask_rpc_bind(self, current: Optional[str] = None) -> str:
        return self.answers.ask(ChoiceQuestion(
            prompt="How should RPC connections be accepted?",
            options=[
                (WILDCARD, "All interfaces (0.0.0.0) - Allows remote wallet connections"),
                (LOOPBACK, "Localhost only (127.0.0.1) - More secure, local access only"),
            ],
            default_index=1 if current == LOOPBACK else 0,
        ))

    def ask_credentials(self, current_user: Optional[str] = None,
                        current_password: Optional[Secret] = None) -> RpcAuth:
        user = self.answers.ask(TextQuestion(
            prompt="RPC username",
            default=current_user or self.profile.default_rpc_user,
        ))
        prompt = "RPC password (Enter keeps the current password)" if current_password \
            else "RPC password (Enter to auto-generate)"
        raw = self.answers.ask(TextQuestion(prompt=prompt, secret=True))
        if raw:
            password = Secret(raw)
        elif current_password:
            password = current_password
        else:
            password = generate_password()
            console.plain(f"  Generated password: {password.reveal()}")
            logger.info("RPC password generated")
        return RpcAuth(rpc_user=user, rpc_password=password)

    def ask_firewall(self, role: NodeRole, rpc_bind: str) -> bool:
        ports = ["22/tcp (SSH, always kept open)", f"{self.profile.p2p_port}/tcp (P2P)"]
        if role is NodeRole.STANDARD and rpc_bind == WILDCARD:
            ports.append(f"{self.profile.rpc_port}/tcp (RPC)")
        return self.answers.ask(YesNoQuestion(
            prompt="Configure UFW firewall?",
            help_lines=["Ports that will be opened:"] + ports,
            default=True,
        ))

    def ask_pool_wallet(self, reconfigure: bool = False) -> PoolWalletPlan:
        skip_label = "Keep current wallet settings" if reconfigure else "Skip for now (configure wallet later)"
        mode = self.answers.ask(ChoiceQuestion(
            prompt="How do you want to configure the pool wallet?",
            options=[
                (PoolWalletMode.CREATE, "Create new wallet on this server (wallet files stored locally)"),
                (PoolWalletMode.EXISTING_ADDRESS, "Use existing wallet address (enter address you already own)"),
                (PoolWalletMode.DEFERRED, skip_label),
            ],
            default_index=2 if reconfigure else 0,
        ))
        if mode is not PoolWalletMode.EXISTING_ADDRESS:
            return PoolWalletPlan(mode=mode)

        prefixes = self.profile.address_prefixes
        address = self.answers.ask(TextQuestion(
            prompt="Wallet address",
            help_lines=[f"Valid formats start with: {', '.join(prefixes)}"],
            required=True,
            validator=address_validator(prefixes),
        ))
        return PoolWalletPlan(mode=mode, address=address)

    # -- assembly -------------------------------------------------------

    def _network(self, role: NodeRole, rpc_bind: str, p2p_port: Optional[int] = None,
                 rpc_port: Optional[int] = None) -> NetworkSettings:
        is_pool = role is NodeRole.POOL_BACKEND
        return NetworkSettings(
            p2p_port=p2p_port or self.profile.p2p_port,
            rpc_port=rpc_port or self.profile.rpc_port,
            rpc_bind=rpc_bind,
            rpc_allow=expected_rpc_allow(role, rpc_bind),
            zmq_hashblock_port=self.profile.zmq_hashblock_port if is_pool else None,
            zmq_rawblock_port=self.profile.zmq_rawblock_port if is_pool else None,
        )

    def _assemble(self, role, chain_mode, paths, network, auth, notification, command,
                  firewall, pool_wallet) -> NodeConfig:
        cores = self.resources.cpu_cores
        config = NodeConfig(
            profile=self.profile,
            role=role,
            chain_mode=chain_mode,
            paths=paths,
            network=network,
            auth=auth,
            software_version=self.software_version,
            notification=notification,
            blocknotify_cmd=command,
            firewall_enabled=firewall,
            pool_wallet=pool_wallet,
            par=max(cores, 1),
            build_jobs=build_jobs_for(cores),
        )
        config.ensure_valid()
        return config

    def configure_fresh(self) -> NodeConfig:
        """Full question flow for a fresh install."""
        console.section("STEP 1: NODE TYPE")
        role = self.ask_role()

        console.section("STEP 2: BLOCKCHAIN MODE")
        chain_mode = self.ask_chain_mode(role)

        console.section("STEP 3: INSTALLATION DIRECTORIES")
        paths = self.ask_paths()
        self.check_storage(paths.data_dir, role, chain_mode)

        console.section("STEP 4: NETWORK CONFIGURATION")
        notification, command = BlockNotification.NONE, None
        if role is NodeRole.POOL_BACKEND:
            rpc_bind = LOOPBACK
            console.info(f"Mining pool mode: RPC is localhost only (http://127.0.0.1:{self.profile.rpc_port})")
            notification, command = self.ask_notification(paths.log_dir)
        else:
            rpc_bind = self.ask_rpc_bind()
        auth = self.ask_credentials()
        firewall = self.ask_firewall(role, rpc_bind)

        pool_wallet = None
        if role is NodeRole.POOL_BACKEND:
            console.section("STEP 5: POOL WALLET CONFIGURATION")
            pool_wallet = self.ask_pool_wallet()

        return self._assemble(role, chain_mode, paths, self._network(role, rpc_bind), auth,
                              notification, command, firewall, pool_wallet)

    def configure_reconfigure(self, parsed: ParsedDaemonConfig) -> NodeConfig:
        """Role/chain/network/wallet subset, seeded from the existing config file."""
        defaults = self.settings.paths
        paths = NodePaths.from_defaults(defaults, data_dir=parsed.data_dir or defaults.data_dir)
        if parsed.log_dir:
            paths = replace(paths, log_dir=parsed.log_dir)

        role = self.ask_role(parsed.role)
        chain_mode = self.ask_chain_mode(role, parsed.chain_mode)

        notification, command = BlockNotification.NONE, None
        if role is NodeRole.POOL_BACKEND:
            rpc_bind = LOOPBACK
            current = None
            if parsed.role is NodeRole.POOL_BACKEND:
                has_zmq = parsed.zmq_hashblock_port is not None
                has_script = parsed.blocknotify_cmd is not None
                current = {
                    (False, False): BlockNotification.NONE,
                    (True, False): BlockNotification.ZMQ,
                    (False, True): BlockNotification.SCRIPT_HOOK,
                    (True, True): BlockNotification.BOTH,
                }[(has_zmq, has_script)]
            notification, command = self.ask_notification(paths.log_dir, current, parsed.blocknotify_cmd)
        else:
            rpc_bind = self.ask_rpc_bind(parsed.rpc_bind)

        auth = self.ask_credentials(parsed.rpc_user, parsed.rpc_password)
        firewall = self.ask_firewall(role, rpc_bind)

        pool_wallet = None
        if role is NodeRole.POOL_BACKEND:
            pool_wallet = self.ask_pool_wallet(reconfigure=True)

        network = self._network(role, rpc_bind, parsed.p2p_port, parsed.rpc_port)
        return self._assemble(role, chain_mode, paths, network, auth, notification, command,
                              firewall, pool_wallet)

    def confirm(self, config: NodeConfig, mode: str) -> None:
        """Show the summary and require an explicit yes; a no cancels the run."""
        warnings: List[str] = list(config.validate().warnings)
        console.section("CONFIGURATION SUMMARY")
        for line in render_config_summary(config, mode, warnings):
            console.plain(line)
        for warning in warnings:
            logger.warning(warning)

        if not self.answers.ask(YesNoQuestion(prompt="Proceed with installation?", default=True)):
            raise UserCancelled("Setup aborted by user")
