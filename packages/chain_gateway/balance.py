"""
Balance retrieval for EVM wallets.
Supports native currencies (ETH/BNB/MATIC/BERA) and ERC20 tokens.
"""

import asyncio
import logging
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Sequence

from .client import ChainClient
from .erc20 import ERC20
from .networks import native_symbol
from .pool import ClientPool, open_client
from .units import format_units, validate_address

logger = logging.getLogger(__name__)

NATIVE_DECIMALS = 18


@dataclass(frozen=True)
class TokenBalance:
    """Balance of one asset; token_address is None for the native currency."""
    token_address: Optional[str]
    symbol: str
    raw_balance: int
    decimals: int
    formatted_balance: str

    @property
    def is_native(self) -> bool:
        return self.token_address is None

    @property
    def balance_formatted(self) -> str:
        """Return formatted balance string with symbol."""
        return f"{self.formatted_balance} {self.symbol}"

    def to_dict(self) -> Dict[str, Any]:
        return {
            "token_address": self.token_address,
            "symbol": self.symbol,
            # uint256 does not fit a JSON number
            "balance": str(self.raw_balance),
            "decimals": self.decimals,
            "formatted_balance": self.formatted_balance,
        }


@dataclass(frozen=True)
class WalletSnapshot:
    """Native balance and nonce of an address on one chain."""
    address: str
    chain_id: int
    network: str
    native: TokenBalance
    nonce: int

    def to_dict(self) -> Dict[str, Any]:
        return {
            "address": self.address,
            "chain_id": self.chain_id,
            "network": self.network,
            "native": self.native.to_dict(),
            "nonce": self.nonce,
        }


class BalanceResolver:
    """Resolve balances through a connected ChainClient."""

    async def native_balance(self, client: ChainClient, address: str) -> TokenBalance:
        """
        Get native currency balance.

        Args:
            client: Connected chain client
            address: Wallet address (checksummed or not)

        Returns:
            TokenBalance with token_address None and 18 decimals
        """
        raw = await client.native_balance(address)

        return TokenBalance(
            token_address=None,
            symbol=native_symbol(client.chain_id),
            raw_balance=raw,
            decimals=NATIVE_DECIMALS,
            formatted_balance=format_units(raw, NATIVE_DECIMALS),
        )

    async def token_balance(
        self,
        client: ChainClient,
        token_address: str,
        wallet_address: str,
    ) -> TokenBalance:
        """
        Get ERC20 token balance.

        Args:
            client: Connected chain client
            token_address: ERC20 token contract address
            wallet_address: Wallet address to check

        Returns:
            TokenBalance formatted with the token's own decimals

        Raises:
            InvalidAddressError: Either address is malformed
            ContractError: Any of the three contract calls failed
        """
        token_address = validate_address(token_address)
        wallet_address = validate_address(wallet_address)

        decimals = await client.call_method(token_address, ERC20.DECIMALS)
        symbol = await client.call_method(token_address, ERC20.SYMBOL)
        raw = await client.call_method(token_address, ERC20.BALANCE_OF, wallet_address)

        return TokenBalance(
            token_address=token_address,
            symbol=symbol,
            raw_balance=raw,
            decimals=decimals,
            formatted_balance=format_units(raw, decimals),
        )

    async def multiple_balances(
        self,
        client: ChainClient,
        token_addresses: Sequence[str],
        wallet_address: str,
    ) -> List[TokenBalance]:
        """
        Native balance followed by each requested token balance.

        A failing native lookup aborts the call. Token lookups run
        independently; failures are logged and skipped, and the remaining
        entries keep their input order.
        """
        balances = [await self.native_balance(client, wallet_address)]

        results = await asyncio.gather(
            *(self.token_balance(client, token, wallet_address) for token in token_addresses),
            return_exceptions=True,
        )

        for token, result in zip(token_addresses, results):
            if isinstance(result, BaseException):
                if not isinstance(result, Exception):
                    raise result
                logger.warning("Skipping token %s on chain %s: %s", token, client.chain_id, result)
                continue
            balances.append(result)

        return balances

    async def wallet_snapshot(self, client: ChainClient, address: str) -> WalletSnapshot:
        """Native balance plus nonce for an address."""
        native = await self.native_balance(client, address)
        nonce = await client.transaction_count(address)

        return WalletSnapshot(
            address=validate_address(address),
            chain_id=client.chain_id,
            network=client.network.name,
            native=native,
            nonce=nonce,
        )


# Convenience functions
async def get_balance(
    chain_id: int,
    address: str,
    pool: Optional[ClientPool] = None,
) -> TokenBalance:
    """Get native balance for an address."""
    async with open_client(chain_id, pool) as client:
        return await BalanceResolver().native_balance(client, address)


async def get_token_balance(
    chain_id: int,
    token_address: str,
    wallet_address: str,
    pool: Optional[ClientPool] = None,
) -> TokenBalance:
    """Get ERC20 token balance."""
    async with open_client(chain_id, pool) as client:
        return await BalanceResolver().token_balance(client, token_address, wallet_address)


async def get_all_balances(
    chain_id: int,
    address: str,
    token_addresses: Sequence[str] = (),
    pool: Optional[ClientPool] = None,
) -> List[TokenBalance]:
    """Native balance first, then every token that resolved."""
    async with open_client(chain_id, pool) as client:
        return await BalanceResolver().multiple_balances(client, token_addresses, address)
