# Path and File Name : /home/coinnode/installer/coinnode_installer/uninstaller.py
# Author: nXxBku0CKFAJCBN3X1g3bQk7OxYQylg8CMw1iGsq7gU
# Details of functionality of this file: coinnode-uninstall entry point: tolerant reverse teardown of everything the installer created

"""
Uninstaller.

Teardown runs in a fixed order and tolerates missing artifacts: every stage
checks before it removes, so a partial install or a second run is safe.

    stop daemon -> unit -> binaries -> source -> legacy DB -> firewall
    -> config -> logs -> data (gated) -> user/group -> temp files -> verify

Only the data stage asks questions. Leftovers found by the final
verification are reported as warnings; they never change the exit code.
"""

import argparse
import logging
import os
import shutil
import sys
import time
from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import Callable, Iterable, List, Optional

from . import __version__, console
from .build.symlinks import remove_symlinks
from .config_model import NodePaths
from .configurator.answers import AnswerSource, AnswersExhausted, ConsoleAnswers
from .configurator.questions import YesNoQuestion
from .errors import PreconditionError, ProvisioningError, RpcError, UserCancelled
from .host.run_lock import RunLock
from .host.runner import HostRunner
from .logging_setup import configure_logging
from .reporting import render_uninstall_summary
from .runtime.accounts import remove_service_user, user_exists
from .services.daemon_conf import load_daemon_conf
from .services.firewall import is_active as ufw_is_active, remove_port_rules, remove_tagged_rules, ufw_status
from .services.service_control import is_active as service_is_active
from .settings import InstallerSettings, load_settings
from .system.os_check import is_root
from .wallet.rpc_client import DaemonRpcClient

logger = logging.getLogger(__name__)

LD_CONF_FILE = Path("/etc/ld.so.conf.d/berkeleydb.conf")
STOP_SETTLE_SECONDS = 3
KILL_SETTLE_SECONDS = 2

TEARDOWN_STAGES = (
    "stop_daemon", "remove_unit", "remove_binaries", "remove_source", "remove_legacy_database",
    "remove_firewall_rules", "remove_config", "remove_logs", "remove_data", "remove_user", "clean_temp",
)


@dataclass(frozen=True)
class UninstallOptions:
    keep_blockchain: bool = False
    keep_wallets: bool = False
    force: bool = False
    quiet: bool = False


@dataclass
class UninstallReport:
    removed: List[str] = field(default_factory=list)
    kept: List[str] = field(default_factory=list)
    leftovers: List[str] = field(default_factory=list)


def _remove_tree(path: Path) -> bool:
    if path.is_symlink() or path.is_file():
        path.unlink()
        return True
    if path.is_dir():
        shutil.rmtree(path)
        return True
    return False


def _overlaps(path: Path, other: Path) -> bool:
    """True when path equals, contains or sits inside other."""
    path, other = Path(os.path.abspath(path)), Path(os.path.abspath(other))
    return path == other or other in path.parents or path in other.parents


class Uninstaller:
    """
    Usage:
        report = Uninstaller(settings, HostRunner(), ConsoleAnswers(), options).run()
    """

    def __init__(self, settings: InstallerSettings, runner: HostRunner, answers: AnswerSource,
                 options: UninstallOptions, sleep: Callable[[float], None] = time.sleep,
                 ld_conf_file: Path = LD_CONF_FILE, run_dir: Path = Path("/run"),
                 home_roots: Optional[Iterable[Path]] = None,
                 rpc_client: Optional[DaemonRpcClient] = None):
        self.settings = settings
        self.profile = settings.profile
        self.runner = runner
        self.answers = answers
        self.options = options
        self.sleep = sleep
        self.ld_conf_file = Path(ld_conf_file)
        self.run_dir = Path(run_dir)
        self.home_roots = list(home_roots) if home_roots is not None else [Path("/root"), Path("/home")]
        self.report = UninstallReport()

        config_file = Path(settings.paths.config_dir) / self.profile.config_filename
        self.parsed = load_daemon_conf(config_file) if config_file.exists() else None
        self.paths = NodePaths.from_defaults(
            settings.paths, data_dir=self.parsed.data_dir if self.parsed else None)
        if self.parsed and self.parsed.log_dir:
            self.paths = replace(self.paths, log_dir=self.parsed.log_dir)
        self.rpc_client = rpc_client or self._default_rpc_client()

    def _default_rpc_client(self) -> Optional[DaemonRpcClient]:
        if not self.parsed or not self.parsed.rpc_user or not self.parsed.rpc_password:
            return None
        port = self.parsed.rpc_port or self.profile.rpc_port
        return DaemonRpcClient(f"http://127.0.0.1:{port}", self.parsed.rpc_user,
                               self.parsed.rpc_password.reveal(), timeout=10)

    # -- helpers --------------------------------------------------------

    def _removed(self, item: str) -> None:
        self.report.removed.append(item)
        console.success(f"Removed {item}")

    def _kept(self, item: str) -> None:
        self.report.kept.append(item)
        console.warning(f"Keeping {item}")

    def _confirm(self, prompt: str, default: bool = False) -> bool:
        return self.answers.ask(YesNoQuestion(prompt=prompt, default=default))

    def _daemon_running(self) -> bool:
        return self.runner.run(["pgrep", "-x", self.profile.daemon_binary]).ok

    def _user_processes(self) -> bool:
        return self.runner.run(["pgrep", "-u", self.profile.service_user]).ok

    @property
    def unit_file(self) -> Path:
        return Path(self.paths.systemd_dir) / f"{self.profile.service_name}.service"

    def installed_components(self) -> List[str]:
        found = []
        for label, path in (("Binaries", self.paths.install_dir), ("Data", self.paths.data_dir),
                            ("Config", self.paths.config_dir), ("Logs", self.paths.log_dir),
                            ("Source", self.paths.source_dir), ("Berkeley DB", self.paths.bdb_prefix)):
            if Path(path).exists():
                found.append(f"{label}: {path}")
        if self.unit_file.exists():
            found.append(f"Systemd service: {self.unit_file}")
        if (Path(self.paths.bin_link_dir) / self.profile.daemon_binary).is_symlink():
            found.append(f"Symlinks in {self.paths.bin_link_dir}")
        if user_exists(self.profile.service_user):
            found.append(f"System user: {self.profile.service_user}")
        if self._daemon_running():
            found.append(f"Running {self.profile.daemon_binary} process")
        return found

    # -- stages ---------------------------------------------------------

    def stop_daemon(self) -> None:
        console.subsection("Stopping node daemon")
        service = self.profile.service_name
        daemon = self.profile.daemon_binary
        user = self.profile.service_user

        if self.rpc_client is not None and self._daemon_running():
            try:
                self.rpc_client.stop()
                console.info("Graceful shutdown requested over RPC")
                self.sleep(STOP_SETTLE_SECONDS)
            except RpcError as e:
                logger.info(f"RPC stop not possible: {e}")

        if service_is_active(self.runner, service):
            self.runner.run(["systemctl", "stop", service])
            self.sleep(STOP_SETTLE_SECONDS)

        if self._daemon_running():
            console.info(f"Terminating remaining {daemon} processes")
            self.runner.run(["pkill", "-15", "-x", daemon])
            self.sleep(STOP_SETTLE_SECONDS)
            if self._daemon_running():
                console.warning(f"Force killing {daemon}")
                self.runner.run(["pkill", "-9", "-x", daemon])
                self.sleep(KILL_SETTLE_SECONDS)

        if user_exists(user) and self._user_processes():
            self.runner.run(["pkill", "-15", "-u", user])
            self.sleep(KILL_SETTLE_SECONDS)
            self.runner.run(["pkill", "-9", "-u", user])
            self.sleep(1)

        if self._daemon_running():
            console.warning(f"Some {daemon} processes may still be running")
        else:
            console.success(f"All {daemon} processes stopped")

        if self.runner.run(["systemctl", "is-enabled", "--quiet", service]).ok:
            self.runner.run(["systemctl", "disable", service])
            console.success("Service disabled")

    def remove_unit(self) -> None:
        console.subsection("Removing systemd service")
        if self.unit_file.exists():
            self.unit_file.unlink()
            self.runner.run(["systemctl", "daemon-reload"])
            self._removed(str(self.unit_file))
        else:
            console.info("Systemd service not found")

    def remove_binaries(self) -> None:
        console.subsection("Removing binaries")
        count = remove_symlinks(self.profile.binaries, Path(self.paths.bin_link_dir))
        if count:
            self._removed(f"{count} symlink(s) in {self.paths.bin_link_dir}")
        if _remove_tree(Path(self.paths.install_dir)):
            self._removed(self.paths.install_dir)
        else:
            console.info("Binary directory not found")

    def remove_source(self) -> None:
        console.subsection("Removing source code")
        if _remove_tree(Path(self.paths.source_dir)):
            self._removed(self.paths.source_dir)
        else:
            console.info("Source directory not found")

    def remove_legacy_database(self) -> None:
        console.subsection("Removing Berkeley DB")
        if _remove_tree(Path(self.paths.bdb_prefix)):
            self._removed(self.paths.bdb_prefix)
        else:
            console.info("Berkeley DB not found")
        if self.ld_conf_file.exists():
            self.ld_conf_file.unlink()
            self._removed(str(self.ld_conf_file))
        self.runner.run(["ldconfig"])

    def remove_firewall_rules(self) -> None:
        console.subsection("Removing firewall rules")
        if not self.runner.which("ufw"):
            console.info("UFW not installed, skipping")
            return
        if not ufw_is_active(ufw_status(self.runner)):
            console.info("UFW not active, skipping")
            return

        ports = [self.profile.p2p_port, self.profile.rpc_port,
                 self.profile.zmq_hashblock_port, self.profile.zmq_rawblock_port]
        if self.parsed:
            ports += [p for p in (self.parsed.p2p_port, self.parsed.rpc_port) if p and p not in ports]
        by_port = remove_port_rules(self.runner, ports)
        by_tag = remove_tagged_rules(self.runner, self.profile.firewall_tag)
        if by_port or by_tag:
            self._removed(f"{by_port + by_tag} firewall rule(s)")
        else:
            console.info("No matching firewall rules")

    def remove_config(self) -> None:
        console.subsection("Removing configuration")
        if _remove_tree(Path(self.paths.config_dir)):
            self._removed(self.paths.config_dir)
        else:
            console.info("Config directory not found")

    def remove_logs(self) -> None:
        console.subsection("Removing logs")
        if _remove_tree(Path(self.paths.log_dir)):
            self._removed(self.paths.log_dir)
        else:
            console.info("Log directory not found")

    def remove_data(self) -> None:
        """Blockchain data gate; the only stage that can ask the operator."""
        console.subsection("Removing blockchain data")
        data_dir = Path(self.paths.data_dir)
        wallet_dir = Path(self.paths.wallet_dir)
        if not data_dir.exists():
            console.info("Data directory not found")
            return

        if self.options.keep_blockchain:
            self._kept(f"{data_dir} (--keep-blockchain)")
            return

        if self.options.keep_wallets:
            for child in data_dir.iterdir():
                if child.name != wallet_dir.name:
                    _remove_tree(child)
            self._removed(f"blockchain data in {data_dir}")
            self._kept(f"{wallet_dir} (--keep-wallets)")
            return

        wallets_present = wallet_dir.is_dir() and any(wallet_dir.iterdir())
        if not self.options.force:
            console.warning(f"This permanently deletes {data_dir}: blockchain data, wallet files "
                            "and transaction history. This cannot be undone.")
            if wallets_present:
                console.warning(f"WALLET FILES DETECTED in {wallet_dir}; make sure they are backed up")
            if not self._confirm("Delete ALL blockchain data and wallets?"):
                self._kept(f"{data_dir} (declined)")
                console.info("Use --keep-blockchain or --keep-wallets next time")
                return
            if wallets_present and not self._confirm("FINAL WARNING: wallet files will be deleted. "
                                                     "Are you ABSOLUTELY sure?"):
                self._kept(f"{data_dir} (declined)")
                return

        shutil.rmtree(data_dir)
        self._removed(str(data_dir))

    def remove_user(self) -> None:
        console.subsection("Removing system user")
        if remove_service_user(self.runner, self.profile.service_user):
            self._removed(f"user and group {self.profile.service_user}")
        else:
            console.info("User not found")

    def temp_candidates(self) -> List[Path]:
        """
        Bounded set of leftovers from build and runtime; never a free-form glob of /tmp.

        Anything overlapping the data or wallet dir is left to the data stage.
        The stray home-dir sweep is skipped when a keep flag is set.
        """
        name = self.profile.name
        daemon = self.profile.daemon_binary
        build_logs = Path(self.paths.build_log_dir)
        candidates = [
            build_logs / "bdb-build.log",
            build_logs / f"{name}-build.log",
            build_logs / "apt-install.log",
            self.run_dir / name / f"{daemon}.pid",
        ]
        candidates += sorted(build_logs.glob(f"db-{self.profile.bdb_version}*"))
        candidates += sorted(build_logs.glob("coinnode-bdb-*"))
        if not (self.options.keep_blockchain or self.options.keep_wallets):
            for root in self.home_roots:
                if root.name == "home" and root.is_dir():
                    candidates += [home / f".{name}" for home in sorted(root.iterdir())]
                else:
                    candidates.append(root / f".{name}")

        protected = [Path(self.paths.data_dir), Path(self.paths.wallet_dir)]
        return [c for c in candidates if not any(_overlaps(c, p) for p in protected)]

    def clean_temp(self) -> None:
        console.subsection("Cleaning temporary files")
        removed = 0
        for path in self.temp_candidates():
            if path.exists() or path.is_symlink():
                _remove_tree(path)
                logger.info(f"Removed {path}")
                removed += 1
        if removed:
            self._removed(f"{removed} temporary file(s)")
        else:
            console.info("No temporary files found")

    def verify(self) -> List[str]:
        """Re-probe; anything still present is a warning."""
        console.subsection("Verifying removal")
        leftovers = []
        if self._daemon_running():
            leftovers.append(f"{self.profile.daemon_binary} process still running")
        if service_is_active(self.runner, self.profile.service_name):
            leftovers.append(f"{self.profile.service_name} service still active")
        if self.unit_file.exists():
            leftovers.append(f"Systemd unit still exists: {self.unit_file}")
        for binary in self.profile.binaries:
            link = Path(self.paths.bin_link_dir) / binary
            if link.is_symlink() or link.exists():
                leftovers.append(f"{link} still exists")
        for label, path in (("Binaries", self.paths.install_dir), ("Config", self.paths.config_dir),
                            ("Logs", self.paths.log_dir), ("Berkeley DB", self.paths.bdb_prefix),
                            ("Source", self.paths.source_dir)):
            if Path(path).exists():
                leftovers.append(f"{label} still exist at {path}")
        if user_exists(self.profile.service_user):
            leftovers.append(f"System user {self.profile.service_user} still exists")
        if self.runner.which(self.profile.daemon_binary):
            leftovers.append(f"{self.profile.daemon_binary} still found in PATH")

        for item in leftovers:
            console.warning(item)
        if not leftovers:
            console.success("Verification passed - all components removed")
        self.report.leftovers = leftovers
        return leftovers

    # -- driver ---------------------------------------------------------

    def run(self) -> UninstallReport:
        """
        Full teardown.

        Raises:
            UserCancelled: Operator declined the initial confirmation
        """
        console.section(f"{self.profile.display_name.upper()} NODE UNINSTALL")
        found = self.installed_components()
        if found:
            console.info(f"Found {self.profile.display_name} installation components:")
            for item in found:
                console.info(f"  • {item}")
        elif not self.options.force and not self._confirm(
                f"No {self.profile.display_name} installation detected. Continue anyway?"):
            raise UserCancelled("Nothing to uninstall")

        if not self.options.force:
            if self.options.keep_blockchain:
                console.info("Blockchain data will be preserved (--keep-blockchain)")
            if self.options.keep_wallets:
                console.info("Wallet files will be preserved (--keep-wallets)")
            if not self._confirm("Continue with uninstall?"):
                raise UserCancelled("Uninstall cancelled")

        for stage in TEARDOWN_STAGES:
            try:
                getattr(self, stage)()
            except OSError as e:
                # Later stages still run; verify() reports what is left
                logger.error(f"Uninstall stage {stage} failed: {e}")
                console.error(f"{stage.replace('_', ' ')} failed: {e}")
        self.verify()
        return self.report


def parse_args(argv=None) -> UninstallOptions:
    parser = argparse.ArgumentParser(
        prog="coinnode-uninstall",
        description="Remove the node and everything coinnode-setup installed",
        epilog="Examples:\n"
               "  sudo coinnode-uninstall                    # Interactive uninstall\n"
               "  sudo coinnode-uninstall --keep-blockchain  # Keep blockchain data\n"
               "  sudo coinnode-uninstall --force --quiet    # Silent complete removal",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument('--keep-blockchain', action='store_true', help="Keep blockchain data (data directory)")
    parser.add_argument('--keep-wallets', action='store_true', help="Keep wallet files only")
    parser.add_argument('--force', action='store_true', help="Skip all confirmations (dangerous!)")
    parser.add_argument('--quiet', action='store_true', help="Minimal output")
    parser.add_argument('--version', action='version', version=f"%(prog)s {__version__}")
    args = parser.parse_args(argv)
    return UninstallOptions(keep_blockchain=args.keep_blockchain, keep_wallets=args.keep_wallets,
                            force=args.force, quiet=args.quiet)


def main(argv=None):
    options = parse_args(argv)
    console.set_quiet(options.quiet)
    configure_logging()

    try:
        if not is_root():
            raise PreconditionError("This uninstaller must be run as root (use: sudo coinnode-uninstall)")
        with RunLock():
            report = Uninstaller(load_settings(), HostRunner(), ConsoleAnswers(), options).run()
    except UserCancelled as e:
        console.info(str(e))
        sys.exit(0)
    except KeyboardInterrupt:
        print("\n\nUninstall cancelled by user.", file=sys.stderr)
        sys.exit(1)
    except AnswersExhausted as e:
        console.error(str(e))
        sys.exit(1)
    except ProvisioningError as e:
        console.error(str(e))
        sys.exit(1)

    for line in render_uninstall_summary(report.removed, report.kept, report.leftovers):
        console.plain(line)
    sys.exit(0)


if __name__ == '__main__':
    main()
