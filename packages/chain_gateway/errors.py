"""
Error taxonomy for chain-gateway operations.

Every failure raised by the package is a GatewayError subclass. Each kind
carries a stable ``code`` and the HTTP ``status_code`` an API layer should
answer with; the core itself never talks HTTP.
"""

from typing import Any, Dict, Optional


class GatewayError(Exception):
    """Base class for all chain-gateway failures."""

    code = "INTERNAL_ERROR"
    status_code = 500
    default_message = "Internal error"

    def __init__(self, message: Optional[str] = None):
        self.message = message or self.default_message
        super().__init__(self.message)

    def to_dict(self) -> Dict[str, Any]:
        """Failure envelope: {status, code, error}."""
        return {
            "status": "FAILURE",
            "code": self.status_code,
            "error": {
                "code": self.code,
                "message": self.message,
            },
        }


class InvalidAddressError(GatewayError):
    """Malformed chain address."""

    code = "INVALID_ADDRESS"
    status_code = 400

    def __init__(self, address: Any):
        self.address = address
        super().__init__(f"Invalid address: {address}")


class InvalidAmountError(GatewayError):
    """Amount is negative, non-integral or out of range."""

    code = "INVALID_AMOUNT"
    status_code = 400

    def __init__(self, detail: str):
        super().__init__(f"Invalid amount: {detail}")


class UnsupportedChainError(GatewayError):
    """Chain id is not in the network registry."""

    code = "UNSUPPORTED_CHAIN"
    status_code = 400

    def __init__(self, chain_id: Any):
        self.chain_id = chain_id
        super().__init__(f"Unsupported chain: {chain_id}")


class NetworkError(GatewayError):
    """Transport or connection-level failure."""

    code = "NETWORK_ERROR"
    status_code = 500

    def __init__(self, detail: str):
        super().__init__(f"Network error: {detail}")


class ContractError(GatewayError):
    """Remote contract call reverted, was rejected, or returned garbage."""

    code = "CONTRACT_ERROR"
    status_code = 500

    def __init__(self, detail: str):
        super().__init__(f"Contract error: {detail}")


class TokenNotFoundError(ContractError):
    """No token contract answers at the given address."""

    code = "TOKEN_NOT_FOUND"
    status_code = 404

    def __init__(self, token_address: str):
        self.token_address = token_address
        GatewayError.__init__(self, f"Token not found: {token_address}")


class InsufficientFundsError(GatewayError):
    code = "INSUFFICIENT_FUNDS"
    status_code = 400
    default_message = "Insufficient funds"


class AccountNotFoundError(GatewayError):
    code = "ACCOUNT_NOT_FOUND"
    status_code = 404
    default_message = "Account not found"


class TransactionFailedError(GatewayError):
    """Transaction was submitted but never confirmed, or reverted on-chain."""

    code = "TRANSACTION_FAILED"
    status_code = 500
    default_message = "Transaction failed"


class ValidationError(GatewayError):
    """Generic input rejection."""

    code = "VALIDATION_ERROR"
    status_code = 400

    def __init__(self, detail: str):
        super().__init__(f"Invalid input: {detail}")


class InternalError(GatewayError):
    code = "INTERNAL_ERROR"
    status_code = 500
