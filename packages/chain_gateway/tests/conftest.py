"""
Pytest configuration for chain_gateway tests.

FakeWeb3 stands in for AsyncWeb3: every RPC is counted so tests can assert
that no network call happened.
"""
from collections import Counter
from typing import Dict, Optional
from unittest.mock import MagicMock

import pytest
from eth_abi import decode as abi_decode
from eth_abi import encode as abi_encode
from eth_utils import keccak, to_bytes, to_checksum_address
from hexbytes import HexBytes
from web3.exceptions import ContractLogicError

from chain_gateway.erc20 import ERC20

WALLET = "0x1234567890123456789012345678901234567890"
RECIPIENT = "0x" + "ab" * 20
TOKEN = "0x" + "22" * 20
OTHER_TOKEN = "0x" + "33" * 20
BROKEN_TOKEN = "0x" + "44" * 20


class FakeToken:
    """Minimal ERC20 answering ABI-encoded eth_call data."""

    def __init__(self, symbol: str, decimals: int, balances: Optional[Dict[str, int]] = None,
                 revert: bool = False):
        self.symbol = symbol
        self.decimals = decimals
        self.balances = {to_checksum_address(k): v for k, v in (balances or {}).items()}
        self.revert = revert

    def handle(self, data: bytes) -> bytes:
        if self.revert:
            raise ContractLogicError("execution reverted")

        selector, args = data[:4], data[4:]
        if selector == ERC20.DECIMALS.selector:
            return abi_encode(["uint8"], [self.decimals])
        if selector == ERC20.SYMBOL.selector:
            # raw bytes let a token answer with a symbol that is not valid UTF-8
            if isinstance(self.symbol, bytes):
                return abi_encode(["bytes"], [self.symbol])
            return abi_encode(["string"], [self.symbol])
        if selector == ERC20.BALANCE_OF.selector:
            (owner,) = abi_decode(["address"], args)
            return abi_encode(["uint256"], [self.balances.get(to_checksum_address(owner), 0)])
        raise ContractLogicError("unknown selector")


class FakeEth:
    """Async ``w3.eth`` namespace backed by in-memory state."""

    def __init__(self, chain_id: int = 1):
        self.chain_id_value = chain_id
        self.block_number_value = 19_000_000
        self.gas_price_value = 25 * 10 ** 9
        self.balances: Dict[str, int] = {}
        self.nonces: Dict[str, int] = {}
        self.contracts: Dict[str, FakeToken] = {}
        self.failures: Dict[str, Exception] = {}
        self.receipt: Optional[dict] = {
            "status": 1,
            "blockNumber": 19_000_001,
            "blockHash": HexBytes(b"\x01" * 32),
            "gasUsed": 51_000,
        }
        self.calls = Counter()
        self.estimated = []
        self.sent = []

    async def _answer(self, name, value):
        self.calls[name] += 1
        if name in self.failures:
            raise self.failures[name]
        return value

    def add_token(self, address: str, token: FakeToken) -> None:
        self.contracts[to_checksum_address(address)] = token

    @property
    def chain_id(self):
        return self._answer("chain_id", self.chain_id_value)

    @property
    def block_number(self):
        return self._answer("block_number", self.block_number_value)

    @property
    def gas_price(self):
        return self._answer("gas_price", self.gas_price_value)

    async def get_balance(self, address, block_identifier=None):
        return await self._answer("get_balance", self.balances.get(to_checksum_address(address), 0))

    async def get_transaction_count(self, address, block_identifier=None):
        return await self._answer("get_transaction_count", self.nonces.get(address, 0))

    async def call(self, tx, block_identifier=None):
        await self._answer("call", None)
        token = self.contracts.get(tx["to"])
        if token is None:
            return HexBytes(b"")
        return HexBytes(token.handle(to_bytes(hexstr=tx["data"])))

    async def estimate_gas(self, tx, block_identifier=None):
        self.estimated.append(dict(tx))
        return await self._answer("estimate_gas", 60_000)

    async def send_raw_transaction(self, raw):
        self.sent.append(bytes(raw))
        return await self._answer("send_raw_transaction", HexBytes(keccak(bytes(raw))))

    async def wait_for_transaction_receipt(self, tx_hash, timeout=120, poll_latency=0.1):
        return await self._answer("wait_for_transaction_receipt", self.receipt)


class FakeProvider:
    def __init__(self):
        self.disconnects = 0

    async def disconnect(self):
        self.disconnects += 1


class FakeWeb3:
    def __init__(self, eth: FakeEth):
        self.eth = eth
        self.provider = FakeProvider()
        self.middleware_onion = MagicMock()


class FakeWeb3Factory:
    """Callable handed to ChainClient.connect in place of the HTTP builder."""

    def __init__(self, eth: FakeEth):
        self.eth = eth
        self.created = []

    def __call__(self, network, endpoint_url):
        w3 = FakeWeb3(self.eth)
        self.created.append((network, endpoint_url, w3))
        return w3


@pytest.fixture
def fake_eth():
    """Chain 1 with a funded wallet and one 6-decimal token."""
    eth = FakeEth(chain_id=1)
    eth.balances[to_checksum_address(WALLET)] = 1_500_000_000_000_000_000
    eth.add_token(TOKEN, FakeToken("USDC", 6, {WALLET: 1_234_500_000}))
    return eth


@pytest.fixture
def web3_factory(fake_eth):
    return FakeWeb3Factory(fake_eth)
