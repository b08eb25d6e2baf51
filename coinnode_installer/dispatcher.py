# Path and File Name : /home/coinnode/installer/coinnode_installer/dispatcher.py
# Author: nXxBku0CKFAJCBN3X1g3bQk7OxYQylg8CMw1iGsq7gU
# Details of functionality of this file: Chooses the run mode from the install snapshot and drives configurator and task graph for it

"""
Mode Dispatcher.

Exactly one mode runs per invocation:

- FreshInstall: gates, full configurator, confirm, full task graph
- Update: rebuild and reinstall the daemon, config and data untouched
- Reconfigure: configurator subset seeded from the existing config file
- WalletManagement: pool wallet submenu over RPC
- Exit: nothing is changed
"""

import logging
import time
from dataclasses import replace
from pathlib import Path
from typing import Callable, List, Optional

from . import console
from .build.daemon_build import build_and_install_daemon
from .build.dependencies import install_dependencies
from .build.legacy_db import install_legacy_database
from .build.symlinks import create_symlinks
from .config_model import (
    BlockNotification, NetworkSettings, NodeConfig, NodePaths, NodeRole, RpcAuth, build_jobs_for,
)
from .configurator.answers import AnswerSource
from .configurator.configurator import Configurator
from .configurator.questions import ChoiceQuestion, YesNoQuestion
from .errors import ConfigurationError, StepFailedError, UserCancelled
from .host.runner import HostRunner
from .install_state.state_record import record_install_state
from .reporting import render_completion, render_run_report
from .runtime.accounts import create_service_user
from .runtime.directory_layout import create_directories
from .services.daemon_conf import ParsedDaemonConfig, write_daemon_conf
from .services.firewall import configure_firewall
from .services.service_control import start_service, stop_service_step
from .services.systemd_writer import install_service_unit
from .settings import InstallerSettings
from .system.install_probe import InstallSnapshot
from .system.resource_check import HostResources
from .system.version_resolver import installed_version
from .tasks import RunReport, Severity, Step, StepContext, StepResult, TaskGraph
from .wallet.pool_wallet import provision_pool_wallet, read_wallet_conf
from .wallet.rpc_client import client_for
from .wallet.wallet_menu import WalletMenu

logger = logging.getLogger(__name__)

UPDATE = "update"
RECONFIGURE = "reconfigure"
FRESH = "fresh"
WALLET = "wallet"
EXIT = "exit"


def write_config_file(context: StepContext) -> StepResult:
    path = write_daemon_conf(context.config)
    return StepResult.success(f"Configuration written to {path}")


def fresh_install_steps() -> List[Step]:
    return [
        Step("install_dependencies", "Installing build dependencies", install_dependencies),
        Step("install_legacy_database", "Installing legacy wallet database", install_legacy_database),
        Step("create_service_user", "Creating service user", create_service_user),
        Step("create_directories", "Creating directories", create_directories),
        Step("build_and_install_daemon", "Building and installing the daemon", build_and_install_daemon),
        Step("create_symlinks", "Linking binaries", create_symlinks),
        Step("write_config_file", "Writing daemon configuration", write_config_file),
        Step("provision_pool_wallet", "Configuring pool wallet", provision_pool_wallet, Severity.ADVISORY),
        Step("install_service_unit", "Installing systemd service", install_service_unit),
        Step("configure_firewall", "Configuring firewall", configure_firewall, Severity.ADVISORY),
        Step("start_service", "Starting node service", start_service, Severity.ADVISORY),
        Step("record_install_state", "Recording install state", record_install_state, Severity.ADVISORY),
    ]


def update_steps() -> List[Step]:
    return [
        Step("stop_service", "Stopping node service", stop_service_step),
        Step("install_dependencies", "Installing build dependencies", install_dependencies),
        Step("build_and_install_daemon", "Building and installing the daemon", build_and_install_daemon),
        Step("create_symlinks", "Linking binaries", create_symlinks),
        Step("start_service", "Starting node service", start_service, Severity.ADVISORY),
    ]


def reconfigure_steps() -> List[Step]:
    return [
        Step("stop_service", "Stopping node service", stop_service_step),
        Step("write_config_file", "Writing daemon configuration", write_config_file),
        Step("provision_pool_wallet", "Configuring pool wallet", provision_pool_wallet, Severity.ADVISORY),
        Step("configure_firewall", "Configuring firewall", configure_firewall, Severity.ADVISORY),
        Step("start_service", "Starting node service", start_service, Severity.ADVISORY),
        Step("record_install_state", "Recording install state", record_install_state, Severity.ADVISORY),
    ]


def rehydrate_config(settings: InstallerSettings, parsed: ParsedDaemonConfig, software_version: str,
                     resources: HostResources) -> NodeConfig:
    """
    NodeConfig for an installed node: parsed config values first, profile
    defaults for keys the file does not set.

    Raises:
        ConfigurationError: If the file carries no RPC credentials
    """
    profile = settings.profile
    if parsed.rpc_password is None:
        raise ConfigurationError("Existing config has no rpcpassword; use Reconfigure or Fresh install")

    paths = NodePaths.from_defaults(settings.paths, data_dir=parsed.data_dir)
    if parsed.log_dir:
        paths = replace(paths, log_dir=parsed.log_dir)

    has_zmq = parsed.zmq_hashblock_port is not None
    has_script = parsed.blocknotify_cmd is not None
    if has_zmq and has_script:
        notification = BlockNotification.BOTH
    elif has_zmq:
        notification = BlockNotification.ZMQ
    elif has_script:
        notification = BlockNotification.SCRIPT_HOOK
    else:
        notification = BlockNotification.NONE

    is_pool = parsed.role is NodeRole.POOL_BACKEND
    network = NetworkSettings(
        p2p_port=parsed.p2p_port or profile.p2p_port,
        rpc_port=parsed.rpc_port or profile.rpc_port,
        rpc_bind=parsed.rpc_bind or "127.0.0.1",
        rpc_allow=parsed.rpc_allow or "127.0.0.1",
        zmq_hashblock_port=parsed.zmq_hashblock_port or (profile.zmq_hashblock_port if is_pool else None),
        zmq_rawblock_port=parsed.zmq_rawblock_port or (profile.zmq_rawblock_port if is_pool else None),
    )
    config = NodeConfig(
        profile=profile,
        role=parsed.role,
        chain_mode=parsed.chain_mode,
        paths=paths,
        network=network,
        auth=RpcAuth(rpc_user=parsed.rpc_user or profile.default_rpc_user, rpc_password=parsed.rpc_password),
        software_version=software_version,
        notification=notification,
        blocknotify_cmd=parsed.blocknotify_cmd,
        par=max(resources.cpu_cores, 1),
        build_jobs=build_jobs_for(resources.cpu_cores),
    )
    if parsed.prune_target_mb:
        config = replace(config, prune_target_mb=parsed.prune_target_mb)
    return config


class Dispatcher:
    """Runs one mode against the host."""

    def __init__(self, settings: InstallerSettings, runner: HostRunner, answers: AnswerSource,
                 resources: HostResources, software_version: str, snapshot: InstallSnapshot,
                 sleep: Callable[[float], None] = time.sleep, rpc_factory: Callable = client_for,
                 disk_free_gb: Optional[Callable[[str], int]] = None,
                 disk_is_rotational: Optional[Callable[[str], bool]] = None):
        self.settings = settings
        self.runner = runner
        self.answers = answers
        self.resources = resources
        self.software_version = software_version
        self.snapshot = snapshot
        self.sleep = sleep
        self.rpc_factory = rpc_factory
        self.configurator = Configurator(settings, resources, answers, software_version, disk_free_gb,
                                         disk_is_rotational)

    def choose_mode(self) -> str:
        profile = self.settings.profile
        if not self.snapshot.installed:
            proceed = self.answers.ask(YesNoQuestion(
                prompt=f"No existing {profile.display_name} installation found. Start a fresh install?",
                default=True,
            ))
            return FRESH if proceed else EXIT

        console.section("EXISTING INSTALLATION DETECTED")
        console.info(f"Daemon binary: {'present' if self.snapshot.binary_present else 'missing'}")
        console.info(f"Config file:   {'present' if self.snapshot.config_present else 'missing'}")
        console.info(f"Service:       {'running' if self.snapshot.service_active else 'not running'}")
        for message in self.snapshot.drift:
            console.warning(message)

        return self.answers.ask(ChoiceQuestion(
            prompt="What would you like to do?",
            options=[
                (UPDATE, f"Update - Rebuild {profile.display_name} {self.software_version}, keep config and data"),
                (RECONFIGURE, "Reconfigure - Change node type, network or wallet settings"),
                (FRESH, "Fresh install - Run the full setup again"),
                (WALLET, "Wallet management - Pool wallet, balance, addresses"),
                (EXIT, "Exit"),
            ],
            default_index=4,
        ))

    def run(self) -> Optional[RunReport]:
        mode = self.choose_mode()
        logger.info(f"Selected mode: {mode}")
        if mode == FRESH:
            return self.fresh_install()
        if mode == UPDATE:
            return self.update()
        if mode == RECONFIGURE:
            return self.reconfigure()
        if mode == WALLET:
            self.wallet_management()
            return None
        console.info("Nothing changed")
        return None

    def _context(self, config: NodeConfig) -> StepContext:
        return StepContext(config=config, runner=self.runner, sleep=self.sleep, rpc_factory=self.rpc_factory)

    def _run_graph(self, steps: List[Step], config: NodeConfig) -> RunReport:
        report = TaskGraph(steps).run(self._context(config))
        for line in render_run_report(report):
            console.plain(line)
            logger.info(line)
        if report.fatal_failure is not None:
            raise StepFailedError(report.fatal_failure)
        return report

    def _existing_config(self) -> ParsedDaemonConfig:
        parsed = self.snapshot.parsed_config
        if parsed is None:
            raise ConfigurationError("No readable daemon config found; choose Fresh install instead")
        return parsed

    def fresh_install(self) -> RunReport:
        profile = self.settings.profile
        console.section(f"{profile.display_name.upper()} NODE SETUP")
        console.info(f"This will build {profile.display_name} {self.software_version} from source, "
                     "create a service user, write the configuration and register a systemd service.")
        if self.snapshot.installed:
            console.warning("The existing configuration will be overwritten; blockchain data is kept")
        if not self.answers.ask(YesNoQuestion(prompt="Continue with installation?", default=True)):
            raise UserCancelled("Setup aborted by user")

        self.configurator.check_host_resources()
        config = self.configurator.configure_fresh()
        self.configurator.confirm(config, FRESH)

        report = self._run_graph(fresh_install_steps(), config)
        wallet = read_wallet_conf(Path(config.wallet_conf_file)).get("WALLET_ADDRESS")
        for line in render_completion(config, wallet):
            console.plain(line)
        return report

    def update(self) -> RunReport:
        parsed = self._existing_config()
        config = rehydrate_config(self.settings, parsed, self.software_version, self.resources)
        current = installed_version(self.runner, Path(config.daemon_path))

        console.section(f"UPDATE {self.settings.profile.display_name.upper()}")
        console.info(f"Installed version: {current}")
        console.info(f"Target version:    {self.software_version}")
        console.info("Configuration and blockchain data are not touched")
        if not self.answers.ask(YesNoQuestion(prompt="Proceed with update?", default=True)):
            raise UserCancelled("Update aborted by user")

        report = self._run_graph(update_steps(), config)
        console.success(f"Installed version is now {installed_version(self.runner, Path(config.daemon_path))}")
        return report

    def reconfigure(self) -> RunReport:
        parsed = self._existing_config()
        config = self.configurator.configure_reconfigure(parsed)
        self.configurator.confirm(config, RECONFIGURE)
        report = self._run_graph(reconfigure_steps(), config)
        wallet = read_wallet_conf(Path(config.wallet_conf_file)).get("WALLET_ADDRESS")
        for line in render_completion(config, wallet):
            console.plain(line)
        return report

    def wallet_management(self) -> None:
        parsed = self._existing_config()
        config = rehydrate_config(self.settings, parsed, self.software_version, self.resources)
        if not config.is_pool:
            console.warning("This node is configured as a standard node; a pool wallet is optional")
        WalletMenu(config, self.runner, self.answers, self.sleep, self.rpc_factory(config)).run()
