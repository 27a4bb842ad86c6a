"""
Chain Gateway - multi-chain EVM balances and token transfers.
Supports Ethereum, Goerli, BNB Smart Chain, Polygon and Berachain bArtio.
"""

from .errors import (
    GatewayError,
    InvalidAddressError,
    InvalidAmountError,
    UnsupportedChainError,
    NetworkError,
    ContractError,
    TokenNotFoundError,
    InsufficientFundsError,
    AccountNotFoundError,
    TransactionFailedError,
    ValidationError,
    InternalError,
)

from .networks import (
    NetworkConfig,
    NETWORKS,
    get_network,
    is_supported,
    native_symbol,
    list_networks,
)

from .units import (
    format_units,
    parse_units,
    validate_address,
)

from .erc20 import ContractMethod, ERC20

from .models import (
    NetworkStatus,
    Transaction,
    TransactionStatus,
    TransferReceipt,
    TransferRequest,
)

from .client import ChainClient, SigningContext
from .pool import ClientPool, open_client

from .balance import (
    BalanceResolver,
    TokenBalance,
    WalletSnapshot,
    get_balance,
    get_token_balance,
    get_all_balances,
)

from .config import GatewayConfig, setup_logging
from .credentials import KeyEncryption, encrypt_funding_key, load_funding_account
from .transfer import TransferExecutor

__all__ = [
    # Errors
    "GatewayError",
    "InvalidAddressError",
    "InvalidAmountError",
    "UnsupportedChainError",
    "NetworkError",
    "ContractError",
    "TokenNotFoundError",
    "InsufficientFundsError",
    "AccountNotFoundError",
    "TransactionFailedError",
    "ValidationError",
    "InternalError",
    # Networks
    "NetworkConfig",
    "NETWORKS",
    "get_network",
    "is_supported",
    "native_symbol",
    "list_networks",
    # Units
    "format_units",
    "parse_units",
    "validate_address",
    # Contracts
    "ContractMethod",
    "ERC20",
    # Models
    "NetworkStatus",
    "Transaction",
    "TransactionStatus",
    "TransferReceipt",
    "TransferRequest",
    # Clients
    "ChainClient",
    "SigningContext",
    "ClientPool",
    "open_client",
    # Balance
    "BalanceResolver",
    "TokenBalance",
    "WalletSnapshot",
    "get_balance",
    "get_token_balance",
    "get_all_balances",
    # Config
    "GatewayConfig",
    "setup_logging",
    "KeyEncryption",
    "encrypt_funding_key",
    "load_funding_account",
    # Transfers
    "TransferExecutor",
]

__version__ = "0.1.0"
