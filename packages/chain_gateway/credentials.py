"""
Funding credential loading.
The funding key is given in plain hex or encrypted with a password.
"""

import base64
import binascii
import logging
import secrets
from typing import Optional

from cryptography.fernet import Fernet, InvalidToken
from cryptography.hazmat.primitives import hashes
from cryptography.hazmat.primitives.kdf.pbkdf2 import PBKDF2HMAC
from eth_account import Account
from eth_account.signers.local import LocalAccount

from .errors import NetworkError

logger = logging.getLogger(__name__)


class KeyEncryption:
    """Encrypt/decrypt a private key using Fernet (AES-128-CBC)."""

    SALT_SIZE = 16
    ITERATIONS = 480000  # OWASP recommendation for PBKDF2-SHA256

    @classmethod
    def _derive_key(cls, password: str, salt: bytes) -> bytes:
        """Derive encryption key from password using PBKDF2."""
        kdf = PBKDF2HMAC(
            algorithm=hashes.SHA256(),
            length=32,
            salt=salt,
            iterations=cls.ITERATIONS,
        )
        return base64.urlsafe_b64encode(kdf.derive(password.encode()))

    @classmethod
    def encrypt(cls, private_key: str, password: str) -> bytes:
        """
        Encrypt a private key with a password.

        Returns:
            salt + Fernet token
        """
        salt = secrets.token_bytes(cls.SALT_SIZE)
        fernet = Fernet(cls._derive_key(password, salt))

        pk_clean = private_key.lower().removeprefix("0x")
        return salt + fernet.encrypt(pk_clean.encode())

    @classmethod
    def decrypt(cls, encrypted_data: bytes, password: str) -> str:
        """
        Decrypt an encrypted private key.

        Raises:
            ValueError: Wrong password or corrupted data
        """
        salt = encrypted_data[:cls.SALT_SIZE]
        token = encrypted_data[cls.SALT_SIZE:]
        fernet = Fernet(cls._derive_key(password, salt))

        try:
            return fernet.decrypt(token).decode()
        except InvalidToken as e:
            raise ValueError("Decryption failed. Wrong password?") from e


def _account_from_hex(private_key: str) -> LocalAccount:
    pk_clean = private_key.strip().lower().removeprefix("0x")
    if len(pk_clean) != 64:
        raise NetworkError("funding key is malformed: expected 32 bytes of hex")
    try:
        return Account.from_key("0x" + pk_clean)
    except (ValueError, binascii.Error) as e:
        raise NetworkError("funding key is malformed") from e


def load_funding_account(
    private_key: Optional[str] = None,
    encrypted: Optional[bytes] = None,
    password: Optional[str] = None,
) -> LocalAccount:
    """
    Build the funding account from a plain or encrypted key.

    Raises:
        NetworkError: Key absent, undecryptable or malformed
    """
    if private_key:
        account = _account_from_hex(private_key)
    elif encrypted:
        if not password:
            raise NetworkError("encrypted funding key given without a password")
        try:
            account = _account_from_hex(KeyEncryption.decrypt(encrypted, password))
        except ValueError as e:
            raise NetworkError("cannot decrypt funding key") from e
    else:
        raise NetworkError("funding key not configured")

    logger.debug("Loaded funding account %s", account.address)
    return account


def encrypt_funding_key(private_key: str, password: str) -> str:
    """
    Encrypt a funding key for the FUNDING_KEY_ENCRYPTED setting.

    The key is checked before encryption so a typo is caught now rather
    than at the first transfer.

    Returns:
        base64 of salt + Fernet token
    """
    if not password:
        raise NetworkError("a password is required to encrypt the funding key")
    account = _account_from_hex(private_key)
    blob = KeyEncryption.encrypt(account.key.hex(), password)
    logger.info("Encrypted funding key for %s", account.address)
    return base64.b64encode(blob).decode()
