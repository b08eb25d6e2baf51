# Path and File Name : /home/coinnode/installer/coinnode_installer/install_state/state_signer.py
# Author: nXxBku0CKFAJCBN3X1g3bQk7OxYQylg8CMw1iGsq7gU
# Details of functionality of this file: Host-local Ed25519 key handling, signing and verification for the install state record

"""
Install State Signing

Ed25519 keypair kept under <config_dir>/keys/:
- state_signing.pem (0600): PEM PKCS8 private key
- state_signing.pub (0644): PEM public key
"""

import hashlib
import os
from pathlib import Path
from typing import Tuple

from cryptography.exceptions import InvalidSignature
from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric.ed25519 import (
    Ed25519PrivateKey,
    Ed25519PublicKey
)

from ..errors import InstallStateError

PRIVATE_KEY_NAME = "state_signing.pem"
PUBLIC_KEY_NAME = "state_signing.pub"


def key_paths(config_dir: Path) -> Tuple[Path, Path]:
    keys_dir = Path(config_dir) / "keys"
    return keys_dir / PRIVATE_KEY_NAME, keys_dir / PUBLIC_KEY_NAME


def load_or_create_signing_key(config_dir: Path) -> Ed25519PrivateKey:
    """
    Load the host signing key, generating it on first use.

    Raises:
        InstallStateError: If the key cannot be read, written or is not Ed25519
    """
    private_path, public_path = key_paths(config_dir)

    if private_path.exists():
        try:
            with open(private_path, 'rb') as f:
                private_key = serialization.load_pem_private_key(f.read(), password=None)
        except (OSError, ValueError) as e:
            raise InstallStateError(f"Failed to load signing key {private_path}: {e}")
        if not isinstance(private_key, Ed25519PrivateKey):
            raise InstallStateError(f"Signing key {private_path} is not Ed25519")
        return private_key

    private_key = Ed25519PrivateKey.generate()
    try:
        private_path.parent.mkdir(parents=True, exist_ok=True)
        os.chmod(private_path.parent, 0o700)
        with open(private_path, 'wb') as f:
            f.write(private_key.private_bytes(
                encoding=serialization.Encoding.PEM,
                format=serialization.PrivateFormat.PKCS8,
                encryption_algorithm=serialization.NoEncryption()
            ))
        os.chmod(private_path, 0o600)
        with open(public_path, 'wb') as f:
            f.write(private_key.public_key().public_bytes(
                encoding=serialization.Encoding.PEM,
                format=serialization.PublicFormat.SubjectPublicKeyInfo
            ))
        os.chmod(public_path, 0o644)
    except OSError as e:
        raise InstallStateError(f"Failed to write signing key under {private_path.parent}: {e}")
    return private_key


def load_public_key(config_dir: Path) -> Ed25519PublicKey:
    _, public_path = key_paths(config_dir)
    try:
        with open(public_path, 'rb') as f:
            public_key = serialization.load_pem_public_key(f.read())
    except (OSError, ValueError) as e:
        raise InstallStateError(f"Failed to load public key {public_path}: {e}")
    if not isinstance(public_key, Ed25519PublicKey):
        raise InstallStateError(f"Public key {public_path} is not Ed25519")
    return public_key


def public_key_fingerprint(public_key: Ed25519PublicKey) -> str:
    """SHA256 of the raw public key bytes, hex."""
    raw = public_key.public_bytes(
        encoding=serialization.Encoding.Raw,
        format=serialization.PublicFormat.Raw
    )
    return hashlib.sha256(raw).hexdigest()


def sign_bytes(private_key: Ed25519PrivateKey, data: bytes) -> bytes:
    return private_key.sign(data)


def verify_bytes(public_key: Ed25519PublicKey, data: bytes, signature: bytes) -> bool:
    try:
        public_key.verify(signature, data)
        return True
    except InvalidSignature:
        return False
