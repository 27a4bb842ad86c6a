"""
Explicitly owned cache of verified ChainClients, keyed by chain id.
"""
import asyncio
import logging
import time
from contextlib import asynccontextmanager
from typing import AsyncIterator, Dict, Mapping, Optional

from .client import ChainClient, Web3Factory
from .config import GatewayConfig
from .errors import GatewayError
from .networks import get_network

logger = logging.getLogger(__name__)


class ClientPool:
    """
    Lazily connected ChainClients shared between operations.

    A client is handshaked once when first acquired. After
    ``revalidate_after`` seconds the chain id is verified again before the
    client is handed out; a client failing that check is evicted.
    """

    def __init__(
        self,
        rpc_urls: Optional[Mapping[int, str]] = None,
        revalidate_after: float = 60.0,
        web3_factory: Optional[Web3Factory] = None,
    ):
        self.rpc_urls = dict(rpc_urls or {})
        self.revalidate_after = revalidate_after
        self.web3_factory = web3_factory
        self._clients: Dict[int, ChainClient] = {}
        self._locks: Dict[int, asyncio.Lock] = {}

    @classmethod
    def from_config(cls, config: GatewayConfig, web3_factory: Optional[Web3Factory] = None) -> "ClientPool":
        return cls(
            rpc_urls=config.rpc_urls,
            revalidate_after=config.pool_revalidate_seconds,
            web3_factory=web3_factory,
        )

    def __contains__(self, chain_id: int) -> bool:
        return chain_id in self._clients

    def __len__(self) -> int:
        return len(self._clients)

    def _lock(self, chain_id: int) -> asyncio.Lock:
        if chain_id not in self._locks:
            self._locks[chain_id] = asyncio.Lock()
        return self._locks[chain_id]

    def _is_stale(self, client: ChainClient) -> bool:
        if client.verified_at is None:
            return True
        return time.monotonic() - client.verified_at >= self.revalidate_after

    async def acquire(self, chain_id: int) -> ChainClient:
        """Return a verified client for ``chain_id``, connecting if needed."""
        get_network(chain_id)

        async with self._lock(chain_id):
            client = self._clients.get(chain_id)

            if client is not None and self._is_stale(client):
                try:
                    await client.verify_chain_id()
                    logger.debug("Revalidated pooled client for chain %s", chain_id)
                except GatewayError:
                    logger.warning("Evicting pooled client for chain %s", chain_id)
                    del self._clients[chain_id]
                    await client.close()
                    raise

            if client is None:
                client = await ChainClient.connect(
                    chain_id,
                    endpoint_url=self.rpc_urls.get(chain_id),
                    web3_factory=self.web3_factory,
                )
                self._clients[chain_id] = client

            return client

    async def close(self) -> None:
        """Close every pooled client."""
        clients = list(self._clients.values())
        self._clients.clear()
        for client in clients:
            await client.close()

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.close()


@asynccontextmanager
async def open_client(
    chain_id: int,
    pool: Optional[ClientPool] = None,
    endpoint_url: Optional[str] = None,
    web3_factory: Optional[Web3Factory] = None,
) -> AsyncIterator[ChainClient]:
    """Pooled client when a pool is given, otherwise a fresh one closed on exit."""
    if pool is not None:
        yield await pool.acquire(chain_id)
        return

    client = await ChainClient.connect(
        chain_id, endpoint_url=endpoint_url, web3_factory=web3_factory,
    )
    try:
        yield client
    finally:
        await client.close()
