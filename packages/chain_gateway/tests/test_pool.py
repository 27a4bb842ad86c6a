"""
Tests for ClientPool reuse and revalidation.
"""
import asyncio

import pytest

from chain_gateway.config import GatewayConfig
from chain_gateway.errors import NetworkError, UnsupportedChainError
from chain_gateway.pool import ClientPool, open_client


class TestClientPool:

    @pytest.mark.asyncio
    async def test_reuses_client_without_new_handshake(self, fake_eth, web3_factory):
        pool = ClientPool(revalidate_after=3600, web3_factory=web3_factory)

        first = await pool.acquire(1)
        second = await pool.acquire(1)

        assert first is second
        assert fake_eth.calls["chain_id"] == 1
        assert len(web3_factory.created) == 1
        assert 1 in pool

    @pytest.mark.asyncio
    async def test_revalidates_stale_client(self, fake_eth, web3_factory):
        pool = ClientPool(revalidate_after=0, web3_factory=web3_factory)

        first = await pool.acquire(1)
        second = await pool.acquire(1)

        assert first is second
        assert fake_eth.calls["chain_id"] == 2
        assert len(web3_factory.created) == 1

    @pytest.mark.asyncio
    async def test_evicts_client_failing_revalidation(self, fake_eth, web3_factory):
        pool = ClientPool(revalidate_after=0, web3_factory=web3_factory)
        client = await pool.acquire(1)

        fake_eth.chain_id_value = 56
        with pytest.raises(NetworkError, match="chain id mismatch"):
            await pool.acquire(1)

        assert 1 not in pool
        assert client.w3.provider.disconnects == 1

    @pytest.mark.asyncio
    async def test_concurrent_acquire_connects_once(self, fake_eth, web3_factory):
        pool = ClientPool(revalidate_after=3600, web3_factory=web3_factory)

        clients = await asyncio.gather(*(pool.acquire(1) for _ in range(5)))

        assert all(c is clients[0] for c in clients)
        assert len(web3_factory.created) == 1

    @pytest.mark.asyncio
    async def test_rpc_override(self, web3_factory):
        pool = ClientPool(rpc_urls={1: "http://node.internal:8545"}, web3_factory=web3_factory)
        client = await pool.acquire(1)
        assert client.endpoint_url == "http://node.internal:8545"

    def test_from_config(self):
        config = GatewayConfig(rpc_urls={56: "https://bsc.example"}, pool_revalidate_seconds=15)
        pool = ClientPool.from_config(config)
        assert pool.rpc_urls == {56: "https://bsc.example"}
        assert pool.revalidate_after == 15

    @pytest.mark.asyncio
    async def test_unsupported_chain_not_cached(self, web3_factory):
        pool = ClientPool(web3_factory=web3_factory)
        with pytest.raises(UnsupportedChainError):
            await pool.acquire(999)
        assert len(pool) == 0
        assert 999 not in pool._locks

    @pytest.mark.asyncio
    async def test_close(self, web3_factory):
        pool = ClientPool(web3_factory=web3_factory)
        client = await pool.acquire(1)

        await pool.close()

        assert len(pool) == 0
        assert client.w3.provider.disconnects == 1


class TestOpenClient:

    @pytest.mark.asyncio
    async def test_fresh_client_is_closed(self, web3_factory):
        async with open_client(1, web3_factory=web3_factory) as client:
            w3 = client.w3
        assert w3.provider.disconnects == 1

    @pytest.mark.asyncio
    async def test_pooled_client_stays_open(self, web3_factory):
        pool = ClientPool(web3_factory=web3_factory)
        async with open_client(1, pool=pool) as client:
            w3 = client.w3
        assert w3.provider.disconnects == 0
        assert 1 in pool
