# Path and File Name : /home/coinnode/installer/coinnode_installer/settings.py
# Author: nXxBku0CKFAJCBN3X1g3bQk7OxYQylg8CMw1iGsq7gU
# Details of functionality of this file: Daemon profile and default host layout, optionally overridden from YAML

"""
Installer Settings: built-in daemon profile plus operator overrides.

The built-in profile describes Litecoin Core. Operators may override any
profile field or default path with a YAML file:

    profile:
      version_pin: v0.21.4
      p2p_port: 9333
    paths:
      data_dir: /srv/litecoin

Lookup order for the file: $COINNODE_SETTINGS, then /etc/coinnode/installer.yaml.
The version pin may also be forced with $COINNODE_DAEMON_VERSION.
"""

import os
from dataclasses import dataclass, field, fields, replace
from pathlib import Path
from typing import Dict, Optional, Tuple

import yaml

from .errors import ConfigurationError


DEFAULT_SETTINGS_PATH = Path("/etc/coinnode/installer.yaml")
SETTINGS_ENV = "COINNODE_SETTINGS"
VERSION_ENV = "COINNODE_DAEMON_VERSION"


@dataclass(frozen=True)
class DaemonProfile:
    """Everything the installer needs to know about one coin's node software."""
    name: str = "litecoin"
    display_name: str = "Litecoin"
    daemon_binary: str = "litecoind"
    cli_binary: str = "litecoin-cli"
    extra_binaries: Tuple[str, ...] = ("litecoin-tx", "litecoin-wallet")
    repo_url: str = "https://github.com/litecoin-project/litecoin.git"
    release_api_url: str = "https://api.github.com/repos/litecoin-project/litecoin/releases/latest"
    version_pin: str = "v0.21.4"
    fallback_version: str = "v0.21.4"
    service_name: str = "litecoind"
    service_user: str = "litecoin"
    config_filename: str = "litecoin.conf"
    wallet_conf_filename: str = "pool-wallet.conf"
    address_prefixes: Tuple[str, ...] = ("L", "M", "ltc1")
    currency_unit: str = "LTC"
    p2p_port: int = 9333
    rpc_port: int = 9332
    zmq_hashblock_port: int = 28332
    zmq_rawblock_port: int = 28333
    bdb_version: str = "4.8.30"
    bdb_url: str = "http://download.oracle.com/berkeley-db/db-4.8.30.NC.tar.gz"

    @property
    def binaries(self) -> Tuple[str, ...]:
        return (self.daemon_binary, self.cli_binary) + tuple(self.extra_binaries)

    @property
    def default_rpc_user(self) -> str:
        return f"{self.name}rpc"

    @property
    def firewall_tag(self) -> str:
        return self.display_name


@dataclass(frozen=True)
class DefaultPaths:
    """Default host layout used when the operator keeps the default paths."""
    install_dir: str = "/opt/litecoin"
    data_dir: str = "/var/lib/litecoin"
    config_dir: str = "/etc/litecoin"
    log_dir: str = "/var/log/litecoin"
    source_dir: str = "/usr/local/src/litecoin"
    bdb_prefix: str = "/usr/local/BerkeleyDB.4.8"
    bin_link_dir: str = "/usr/local/bin"
    systemd_dir: str = "/etc/systemd/system"
    build_log_dir: str = "/tmp"


@dataclass(frozen=True)
class InstallerSettings:
    profile: DaemonProfile = field(default_factory=DaemonProfile)
    paths: DefaultPaths = field(default_factory=DefaultPaths)
    source: Optional[Path] = None


def _apply_overrides(base, overrides: Dict, section: str):
    """Return a copy of a frozen dataclass with YAML overrides applied."""
    if overrides is None:
        return base
    if not isinstance(overrides, dict):
        raise ConfigurationError(f"Settings section '{section}' must be a mapping")

    known = {f.name: f for f in fields(base)}
    unknown = sorted(set(overrides) - set(known))
    if unknown:
        raise ConfigurationError(f"Unknown key(s) in settings section '{section}': {', '.join(unknown)}")

    coerced = {}
    for key, value in overrides.items():
        current = getattr(base, key)
        if isinstance(current, tuple):
            if not isinstance(value, (list, tuple)):
                raise ConfigurationError(f"Settings key '{section}.{key}' must be a list")
            value = tuple(str(v) for v in value)
        elif isinstance(current, int) and not isinstance(current, bool):
            try:
                value = int(value)
            except (TypeError, ValueError):
                raise ConfigurationError(f"Settings key '{section}.{key}' must be an integer, got {value!r}")
        else:
            value = str(value)
        coerced[key] = value

    return replace(base, **coerced)


def load_settings(path: Optional[Path] = None) -> InstallerSettings:
    """
    Load installer settings.

    Args:
        path: Explicit settings file. When None, $COINNODE_SETTINGS or the
              default location is used if present.

    Returns:
        InstallerSettings (built-in defaults when no file exists)

    Raises:
        ConfigurationError: If the file is unreadable, malformed or has unknown keys
    """
    if path is None:
        env_path = os.environ.get(SETTINGS_ENV, "").strip()
        path = Path(env_path) if env_path else DEFAULT_SETTINGS_PATH
        explicit = bool(env_path)
    else:
        path = Path(path)
        explicit = True

    profile = DaemonProfile()
    paths = DefaultPaths()
    source = None

    if path.exists():
        try:
            with open(path, 'r') as f:
                data = yaml.safe_load(f) or {}
        except (OSError, yaml.YAMLError) as e:
            raise ConfigurationError(f"Failed to read settings file {path}: {e}")

        if not isinstance(data, dict):
            raise ConfigurationError(f"Settings file {path} must contain a mapping")

        unknown = sorted(set(data) - {"profile", "paths"})
        if unknown:
            raise ConfigurationError(f"Unknown settings section(s) in {path}: {', '.join(unknown)}")

        profile = _apply_overrides(profile, data.get("profile"), "profile")
        paths = _apply_overrides(paths, data.get("paths"), "paths")
        source = path
    elif explicit:
        raise ConfigurationError(f"Settings file not found: {path}")

    version_override = os.environ.get(VERSION_ENV, "").strip()
    if version_override:
        profile = replace(profile, version_pin=version_override)

    return InstallerSettings(profile=profile, paths=paths, source=source)
