"""
Per-chain RPC client.

A ChainClient owns one AsyncWeb3 connection to one chain. Connecting always
verifies that the endpoint reports the chain id that was asked for, so a
misconfigured or spoofed RPC URL is rejected before any query runs.
"""
import asyncio
import logging
import time
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Dict, Optional, Type

import aiohttp
from eth_abi.exceptions import DecodingError, EncodingError
from eth_account.signers.local import LocalAccount
from web3 import AsyncHTTPProvider, AsyncWeb3, Web3
from web3.exceptions import TimeExhausted, Web3Exception
from web3.middleware import ExtraDataToPOAMiddleware

from .erc20 import ContractMethod
from .errors import (
    ContractError,
    GatewayError,
    NetworkError,
    TokenNotFoundError,
    TransactionFailedError,
)
from .models import NetworkStatus
from .networks import NetworkConfig, get_network
from .units import validate_address

logger = logging.getLogger(__name__)

# Everything web3 and its aiohttp transport raise for a failed round-trip
RPC_ERRORS = (
    Web3Exception,
    aiohttp.ClientError,
    asyncio.TimeoutError,
    OSError,
    ValueError,
)

Web3Factory = Callable[[NetworkConfig, str], AsyncWeb3]


def default_web3_factory(network: NetworkConfig, endpoint_url: str) -> AsyncWeb3:
    """Build an AsyncWeb3 over HTTP for a network."""
    # Every RPC is single-attempt: no provider-level retries
    w3 = AsyncWeb3(AsyncHTTPProvider(endpoint_url, exception_retry_configuration=None))

    # POA chains put extra bytes in the block header
    if network.poa:
        w3.middleware_onion.inject(ExtraDataToPOAMiddleware, layer=0)

    return w3


class ChainClient:
    """Handle to one EVM chain, created by ``ChainClient.connect``."""

    def __init__(self, network: NetworkConfig, w3: AsyncWeb3, endpoint_url: str):
        self.network = network
        self.w3 = w3
        self.endpoint_url = endpoint_url
        self.verified_at: Optional[float] = None

    @property
    def chain_id(self) -> int:
        return self.network.chain_id

    def __repr__(self) -> str:
        return f"<ChainClient(chain_id={self.chain_id}, endpoint='{self.endpoint_url}')>"

    @classmethod
    async def connect(
        cls,
        chain_id: int,
        endpoint_url: Optional[str] = None,
        web3_factory: Optional[Web3Factory] = None,
    ) -> "ChainClient":
        """
        Open a verified connection to a chain.

        Args:
            chain_id: Requested chain id, must be in the registry
            endpoint_url: Optional RPC URL overriding the registry default
            web3_factory: Optional builder for the AsyncWeb3 instance

        Raises:
            UnsupportedChainError: Unknown chain id
            NetworkError: Endpoint unreachable or reporting another chain id
        """
        network = get_network(chain_id)
        url = endpoint_url or network.endpoint_url
        factory = web3_factory or default_web3_factory

        try:
            w3 = factory(network, url)
        except RPC_ERRORS as e:
            raise NetworkError(f"cannot open connection to {url}: {e}") from e

        client = cls(network, w3, url)
        try:
            await client.verify_chain_id()
        except GatewayError:
            await client.close()
            raise

        logger.info("Connected to %s (chain %s)", network.name, chain_id)
        return client

    async def verify_chain_id(self) -> None:
        """Check that the endpoint still reports our chain id."""
        reported = await self._rpc("eth_chainId", lambda: self.w3.eth.chain_id)
        if reported != self.chain_id:
            logger.error(
                "Endpoint %s reported chain id %s, expected %s",
                self.endpoint_url, reported, self.chain_id,
            )
            raise NetworkError(
                f"chain id mismatch: expected {self.chain_id}, endpoint reported {reported}"
            )
        self.verified_at = time.monotonic()

    async def _rpc(
        self,
        what: str,
        fn: Callable[..., Awaitable[Any]],
        *args: Any,
        error: Type[GatewayError] = NetworkError,
    ) -> Any:
        """Await one RPC round-trip, mapping library failures to ``error``."""
        try:
            return await fn(*args)
        except GatewayError:
            raise
        except RPC_ERRORS as e:
            logger.warning("%s failed on chain %s: %s", what, self.chain_id, e)
            raise error(f"{what} failed: {e}") from e

    # =========================================================================
    # Queries
    # =========================================================================

    async def native_balance(self, address: str) -> int:
        """Raw native balance in wei."""
        checksum = validate_address(address)
        return await self._rpc("eth_getBalance", self.w3.eth.get_balance, checksum)

    async def transaction_count(self, address: str, block_identifier: str = "latest") -> int:
        """Account nonce."""
        checksum = validate_address(address)
        return await self._rpc(
            "eth_getTransactionCount",
            self.w3.eth.get_transaction_count, checksum, block_identifier,
        )

    async def latest_block_number(self) -> int:
        return await self._rpc("eth_blockNumber", lambda: self.w3.eth.block_number)

    async def gas_price(self) -> int:
        return await self._rpc("eth_gasPrice", lambda: self.w3.eth.gas_price)

    async def network_status(self) -> NetworkStatus:
        latest_block = await self.latest_block_number()
        gas_price = await self.gas_price()

        return NetworkStatus(
            chain_id=self.chain_id,
            name=self.network.name,
            latest_block=latest_block,
            gas_price=gas_price,
            symbol=self.network.native_symbol,
            explorer_url=self.network.explorer_url,
        )

    async def call(self, to: str, data: bytes) -> bytes:
        """Read-only eth_call; failures are contract errors."""
        checksum = validate_address(to)
        result = await self._rpc(
            "eth_call",
            self.w3.eth.call, {"to": checksum, "data": Web3.to_hex(data)},
            error=ContractError,
        )
        return bytes(result)

    async def call_method(self, contract: str, method: ContractMethod, *args: Any) -> Any:
        """
        Call a view method and decode its result.

        Raises:
            TokenNotFoundError: The address returned no data at all
            ContractError: The call reverted or returned undecodable data
        """
        try:
            data = method.encode(*args)
        except (EncodingError, TypeError) as e:
            raise ContractError(f"cannot encode {method.signature}: {e}") from e

        raw = await self.call(contract, data)
        if not raw:
            raise TokenNotFoundError(contract)

        try:
            return method.decode(raw)
        except (DecodingError, UnicodeDecodeError) as e:
            raise ContractError(f"cannot decode {method.name}() from {contract}: {e}") from e

    # =========================================================================
    # Transactions
    # =========================================================================

    def signer(self, account: LocalAccount) -> "SigningContext":
        """Bind a funding account to this chain."""
        return SigningContext(client=self, account=account)

    async def wait_for_receipt(
        self,
        tx_hash: str,
        timeout: float = 120.0,
        poll_latency: float = 0.5,
    ) -> Dict[str, Any]:
        """
        Wait until a transaction is included in a block.

        Raises:
            TransactionFailedError: Not mined within ``timeout`` or no block reference
        """
        try:
            receipt = await self.w3.eth.wait_for_transaction_receipt(
                tx_hash, timeout=timeout, poll_latency=poll_latency,
            )
        except TimeExhausted as e:
            raise TransactionFailedError(
                f"transaction {tx_hash} not mined within {timeout}s"
            ) from e
        except RPC_ERRORS as e:
            raise NetworkError(f"receipt lookup for {tx_hash} failed: {e}") from e

        if receipt is None or receipt.get("blockNumber") is None:
            raise TransactionFailedError(f"transaction {tx_hash} has no confirmed block")
        return receipt

    # =========================================================================
    # Lifecycle
    # =========================================================================

    async def close(self) -> None:
        """Release the underlying HTTP session."""
        try:
            await self.w3.provider.disconnect()
        except RPC_ERRORS as e:
            logger.debug("Error while closing %r: %s", self, e)

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.close()


@dataclass(frozen=True)
class SigningContext:
    """A funding account bound to one ChainClient and its chain id."""
    client: ChainClient
    account: LocalAccount

    @property
    def address(self) -> str:
        return self.account.address

    @property
    def chain_id(self) -> int:
        return self.client.chain_id

    async def send_call(self, to: str, data: bytes) -> str:
        """
        Sign and submit a contract call.

        Nonce, gas limit and gas price come from the connection.

        Returns:
            Transaction hash as 0x-prefixed hex

        Raises:
            ContractError: Gas estimation or submission rejected by the node
        """
        to = validate_address(to)
        client = self.client

        tx = {
            "chainId": self.chain_id,
            "from": self.address,
            "to": to,
            "data": Web3.to_hex(data),
            "value": 0,
            "nonce": await client.transaction_count(self.address, "pending"),
        }

        tx["gas"] = await client._rpc(
            "eth_estimateGas", client.w3.eth.estimate_gas, tx, error=ContractError,
        )
        tx["gasPrice"] = await client.gas_price()

        signed = self.account.sign_transaction(tx)
        tx_hash = await client._rpc(
            "eth_sendRawTransaction",
            client.w3.eth.send_raw_transaction, signed.raw_transaction,
            error=ContractError,
        )

        tx_hash = Web3.to_hex(tx_hash)
        logger.info(
            "Submitted tx %s on chain %s (nonce %s, gas %s)",
            tx_hash, self.chain_id, tx["nonce"], tx["gas"],
        )
        return tx_hash
