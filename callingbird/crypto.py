"""
Credential encryption for third-party tokens and API keys
AES-256-GCM with a random 12-byte IV per secret and a single master key
"""

import logging
import os
from typing import NamedTuple, Optional

from cryptography.exceptions import InvalidTag
from cryptography.hazmat.primitives.ciphers.aead import AESGCM

from . import config
from .errors import ConfigurationError, SecretDecryptionError

logger = logging.getLogger(__name__)

IV_LENGTH = 12
TAG_LENGTH = 16

_cipher: Optional[AESGCM] = None


class EncryptedSecret(NamedTuple):
    data: str  # ciphertext, hex
    iv: str  # hex
    tag: str  # hex


def _load_key(raw: Optional[str]) -> bytes:
    if not raw:
        raise ConfigurationError("MASTER_KEY is not set")
    try:
        key = bytes.fromhex(raw.strip())
    except ValueError as e:
        raise ConfigurationError("MASTER_KEY must be hex encoded") from e
    if len(key) != 32:
        raise ConfigurationError(f"MASTER_KEY must be 32 bytes (64 hex chars), got {len(key)} bytes")
    return key


def get_cipher() -> AESGCM:
    """Lazily build the AES-GCM cipher from MASTER_KEY"""
    global _cipher
    if _cipher is None:
        _cipher = AESGCM(_load_key(config.MASTER_KEY))
    return _cipher


def check_master_key() -> None:
    """Validate MASTER_KEY at startup so a bad key fails fast"""
    get_cipher()
    logger.info("✅ Credential encryption key loaded")


def encrypt_secret(plaintext: str) -> EncryptedSecret:
    iv = os.urandom(IV_LENGTH)
    sealed = get_cipher().encrypt(iv, plaintext.encode("utf-8"), None)
    ciphertext, tag = sealed[:-TAG_LENGTH], sealed[-TAG_LENGTH:]
    return EncryptedSecret(data=ciphertext.hex(), iv=iv.hex(), tag=tag.hex())


def decrypt_secret(data: str, iv: str, tag: str) -> str:
    """
    Decrypt a stored secret.

    Raises:
        SecretDecryptionError: the ciphertext was tampered with or the key changed
    """
    try:
        sealed = bytes.fromhex(data) + bytes.fromhex(tag)
        plaintext = get_cipher().decrypt(bytes.fromhex(iv), sealed, None)
    except (InvalidTag, ValueError) as e:
        logger.error("❌ Failed to decrypt stored secret")
        raise SecretDecryptionError("Stored secret could not be decrypted") from e
    return plaintext.decode("utf-8")


def store_secret(obj, prefix: str, plaintext: Optional[str]) -> None:
    """Encrypt ``plaintext`` into the ``{prefix}_data/_iv/_tag`` columns of a model"""
    if plaintext is None:
        setattr(obj, f"{prefix}_data", None)
        setattr(obj, f"{prefix}_iv", None)
        setattr(obj, f"{prefix}_tag", None)
        return
    secret = encrypt_secret(plaintext)
    setattr(obj, f"{prefix}_data", secret.data)
    setattr(obj, f"{prefix}_iv", secret.iv)
    setattr(obj, f"{prefix}_tag", secret.tag)


def load_secret(obj, prefix: str) -> Optional[str]:
    """Decrypt the ``{prefix}_data/_iv/_tag`` columns of a model, None when unset"""
    data = getattr(obj, f"{prefix}_data")
    if not data:
        return None
    return decrypt_secret(data, getattr(obj, f"{prefix}_iv"), getattr(obj, f"{prefix}_tag"))
