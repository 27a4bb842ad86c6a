"""
Chain Gateway - Configuration Management
Environment-driven settings, funding credential and logging setup.
"""

import base64
import binascii
import logging
import os
import re
from dataclasses import dataclass, field
from typing import Dict, Mapping, Optional

from dotenv import load_dotenv
from eth_account.signers.local import LocalAccount

from .credentials import load_funding_account
from .errors import ValidationError

logger = logging.getLogger(__name__)

RPC_ENV_PATTERN = re.compile(r"^RPC_URL_(\d+)$")

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


@dataclass
class GatewayConfig:
    """Settings for balance queries and transfers"""
    # Funding credential, never printed
    funding_key: Optional[str] = field(default=None, repr=False)
    funding_key_encrypted: Optional[bytes] = field(default=None, repr=False)
    funding_key_password: Optional[str] = field(default=None, repr=False)

    # chain id -> RPC URL overriding the registry default
    rpc_urls: Dict[int, str] = field(default_factory=dict)

    # Confirmation wait
    receipt_timeout: float = 120.0
    receipt_poll_interval: float = 0.5

    # ClientPool re-handshake interval
    pool_revalidate_seconds: float = 60.0

    log_level: str = "INFO"

    @property
    def has_funding_key(self) -> bool:
        return bool(self.funding_key or self.funding_key_encrypted)

    def funding_account(self) -> LocalAccount:
        """
        Load the funding account.

        Raises:
            NetworkError: Key absent or malformed
        """
        return load_funding_account(
            private_key=self.funding_key,
            encrypted=self.funding_key_encrypted,
            password=self.funding_key_password,
        )

    def rpc_url(self, chain_id: int) -> Optional[str]:
        return self.rpc_urls.get(chain_id)

    @classmethod
    def from_env(
        cls,
        env: Optional[Mapping[str, str]] = None,
        dotenv_path: Optional[str] = None,
    ) -> "GatewayConfig":
        """
        Build config from environment variables.

        Reads a .env file first unless an explicit ``env`` mapping is given.
        """
        if env is None:
            load_dotenv(dotenv_path)
            env = os.environ

        encrypted = None
        if env.get("FUNDING_KEY_ENCRYPTED"):
            try:
                encrypted = base64.b64decode(env["FUNDING_KEY_ENCRYPTED"], validate=True)
            except (binascii.Error, ValueError):
                # Surfaces at transfer time, not at startup
                logger.warning("FUNDING_KEY_ENCRYPTED is not valid base64, ignoring it")

        rpc_urls = {}
        for key, value in env.items():
            match = RPC_ENV_PATTERN.match(key)
            if match and value:
                rpc_urls[int(match.group(1))] = value

        return cls(
            funding_key=env.get("FUNDING_PRIVATE_KEY") or None,
            funding_key_encrypted=encrypted,
            funding_key_password=env.get("FUNDING_KEY_PASSWORD") or None,
            rpc_urls=rpc_urls,
            receipt_timeout=_float(env, "RECEIPT_TIMEOUT", 120.0),
            receipt_poll_interval=_float(env, "RECEIPT_POLL_INTERVAL", 0.5),
            pool_revalidate_seconds=_float(env, "POOL_REVALIDATE_SECONDS", 60.0),
            log_level=env.get("LOG_LEVEL", "INFO").upper(),
        )


def _float(env: Mapping[str, str], key: str, default: float) -> float:
    raw = env.get(key)
    if raw is None or raw == "":
        return default
    try:
        value = float(raw)
    except ValueError:
        raise ValidationError(f"{key} must be a number, got {raw!r}") from None
    if value <= 0:
        raise ValidationError(f"{key} must be positive, got {raw!r}")
    return value


def setup_logging(level: str = "INFO") -> None:
    """Configure root logging for CLI use"""
    logging.basicConfig(level=getattr(logging, level.upper(), logging.INFO), format=LOG_FORMAT)
