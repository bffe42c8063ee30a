"""
SSH Key Adapter

Architectural Intent:
- Gives each local VM host its own RSA login key, kept in the host store
- The public half is baked into the VM's userdata disk, so the private half
  must stay stable for the host's whole life

Design Decisions:
- Load-or-create: an existing private key is never regenerated; a missing
  public key is re-derived from it
- Private key PEM/PKCS#1 mode 0600, public key OpenSSH format mode 0644
"""

import logging
from pathlib import Path

from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric import rsa

logger = logging.getLogger(__name__)

KEY_NAME = "id_rsa"
KEY_BITS = 2048


def _openssh_public(key: rsa.RSAPrivateKey) -> bytes:
    return key.public_key().public_bytes(
        encoding=serialization.Encoding.OpenSSH,
        format=serialization.PublicFormat.OpenSSH,
    )


def _new_private_key(path: Path) -> rsa.RSAPrivateKey:
    key = rsa.generate_private_key(public_exponent=65537, key_size=KEY_BITS)
    path.write_bytes(
        key.private_bytes(
            encoding=serialization.Encoding.PEM,
            format=serialization.PrivateFormat.TraditionalOpenSSL,
            encryption_algorithm=serialization.NoEncryption(),
        )
    )
    path.chmod(0o600)
    logger.debug("Generated SSH key %s", path)
    return key


def ensure_ssh_keypair(store_path: Path, key_name: str = KEY_NAME) -> tuple[Path, Path]:
    """Return (private_key_path, public_key_path) for the host at ``store_path``.

    Reuses the key already in the store, creating one only when none exists.
    """
    store_path.mkdir(parents=True, exist_ok=True)
    private_path = store_path / key_name
    public_path = store_path / f"{key_name}.pub"

    if private_path.exists():
        if public_path.exists():
            return private_path, public_path
        key = serialization.load_pem_private_key(private_path.read_bytes(), password=None)
        logger.debug("Re-deriving public key %s", public_path)
    else:
        key = _new_private_key(private_path)

    public_path.write_bytes(_openssh_public(key) + b"\n")
    public_path.chmod(0o644)
    return private_path, public_path
