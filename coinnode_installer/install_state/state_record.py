# Path and File Name : /home/coinnode/installer/coinnode_installer/install_state/state_record.py
# Author: nXxBku0CKFAJCBN3X1g3bQk7OxYQylg8CMw1iGsq7gU
# Details of functionality of this file: Writes and verifies the signed install state record (version, role, artifact hashes)

"""
Install State Record

<config_dir>/install_state.json records what this installer last put on the
host, with the SHA256 of the daemon config and the service unit.
<config_dir>/install_state.sig is its Ed25519 signature.

Verification never fails a run: signature or hash mismatches come back as
drift messages for the operator.
"""

import hashlib
import json
import logging
from datetime import datetime, timezone
from pathlib import Path
from typing import Dict, List

from ..config_model import NodeConfig
from ..errors import InstallStateError
from ..tasks import StepContext, StepResult
from . import state_signer

logger = logging.getLogger(__name__)

STATE_FILE_NAME = "install_state.json"
SIGNATURE_FILE_NAME = "install_state.sig"
SCHEMA_VERSION = 1


def file_sha256(path: Path) -> str:
    digest = hashlib.sha256()
    with open(path, 'rb') as f:
        for chunk in iter(lambda: f.read(65536), b""):
            digest.update(chunk)
    return digest.hexdigest()


def build_record(config: NodeConfig, fingerprint: str) -> Dict:
    artifacts = {}
    for name, path in (("config", Path(config.config_file)), ("unit", Path(config.unit_file))):
        if path.exists():
            artifacts[name] = {"path": str(path), "sha256": file_sha256(path)}

    return {
        "schema": SCHEMA_VERSION,
        "software_version": config.software_version,
        "role": config.role.value,
        "chain_mode": config.chain_mode.value,
        "recorded_at": datetime.now(timezone.utc).isoformat(),
        "artifacts": artifacts,
        "public_key_fingerprint": fingerprint,
    }


def write_install_state(config: NodeConfig) -> Path:
    """
    Write and sign the install state record.

    Raises:
        InstallStateError: If the key, record or signature cannot be written
    """
    config_dir = Path(config.paths.config_dir)
    private_key = state_signer.load_or_create_signing_key(config_dir)
    fingerprint = state_signer.public_key_fingerprint(private_key.public_key())

    record = build_record(config, fingerprint)
    data = json.dumps(record, indent=2, sort_keys=True).encode()

    state_path = config_dir / STATE_FILE_NAME
    sig_path = config_dir / SIGNATURE_FILE_NAME
    try:
        state_path.write_bytes(data)
        sig_path.write_bytes(state_signer.sign_bytes(private_key, data))
    except OSError as e:
        raise InstallStateError(f"Failed to write install state under {config_dir}: {e}")

    logger.info(f"Install state recorded: {state_path} (key {fingerprint[:16]})")
    return state_path


def verify_install_state(config_dir: Path) -> List[str]:
    """
    Check the record's signature and artifact hashes.

    Returns:
        Drift messages; empty when consistent or when no record exists
    """
    config_dir = Path(config_dir)
    state_path = config_dir / STATE_FILE_NAME
    sig_path = config_dir / SIGNATURE_FILE_NAME
    if not state_path.exists():
        return []

    try:
        data = state_path.read_bytes()
        signature = sig_path.read_bytes()
    except OSError as e:
        return [f"install state record unreadable: {e}"]

    try:
        public_key = state_signer.load_public_key(config_dir)
    except InstallStateError as e:
        return [str(e)]

    if not state_signer.verify_bytes(public_key, data, signature):
        return ["install state signature does not match its record"]

    try:
        record = json.loads(data)
    except ValueError as e:
        return [f"install state record is not valid JSON: {e}"]

    drift = []
    for name, artifact in sorted(record.get("artifacts", {}).items()):
        path = Path(artifact.get("path", ""))
        if not path.exists():
            drift.append(f"{name} file {path} is missing")
        elif file_sha256(path) != artifact.get("sha256"):
            drift.append(f"{name} file {path} was modified since installation")
    return drift


def record_install_state(context: StepContext) -> StepResult:
    try:
        path = write_install_state(context.config)
    except InstallStateError as e:
        return StepResult.failure(str(e))
    return StepResult.success(f"Install state recorded in {path}")
