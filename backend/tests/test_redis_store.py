"""Tests for RedisCounterStore against a mocked client."""

from unittest.mock import AsyncMock, MagicMock

import pytest
from redis.exceptions import ConnectionError as RedisConnectionError

from laundry.services.counters import RedisCounterStore, SequenceAllocator
from laundry.services.exceptions import StoreUnavailable


def mock_client(execute_result: list[object]) -> tuple[MagicMock, MagicMock]:
    pipe = MagicMock()
    pipe.execute = AsyncMock(return_value=execute_result)
    pipe.__aenter__ = AsyncMock(return_value=pipe)
    pipe.__aexit__ = AsyncMock(return_value=None)

    client = MagicMock()
    client.pipeline.return_value = pipe
    client.get = AsyncMock()
    return client, pipe


async def test_increment_uses_transactional_pipeline() -> None:
    client, pipe = mock_client([7, 1])
    store = RedisCounterStore(client)

    assert await store.increment_and_get("ticket_260201", prefix="T") == 7

    client.pipeline.assert_called_once_with(transaction=True)
    pipe.incr.assert_called_once_with("counter:ticket_260201")
    meta_key, = pipe.hset.call_args.args
    assert meta_key == "counter:ticket_260201:meta"
    assert pipe.hset.call_args.kwargs["mapping"]["prefix"] == "T"


async def test_get_without_increment() -> None:
    client, _ = mock_client([])
    client.get.return_value = "12"
    store = RedisCounterStore(client)

    assert await store.get_without_increment("customerId") == 12
    client.get.assert_awaited_once_with("counter:customerId")


async def test_get_missing_counter() -> None:
    client, _ = mock_client([])
    client.get.return_value = None

    assert await RedisCounterStore(client).get_without_increment("customerId") is None


async def test_set_unconditionally() -> None:
    client, pipe = mock_client([True, 1])
    store = RedisCounterStore(client, namespace="laundry")

    assert await store.set_unconditionally("order_260201", 0) == 0
    pipe.set.assert_called_once_with("laundry:order_260201", 0)


async def test_redis_outage_is_store_unavailable() -> None:
    client, pipe = mock_client([])
    pipe.execute.side_effect = RedisConnectionError("Connection refused")
    allocator = SequenceAllocator(RedisCounterStore(client))

    with pytest.raises(StoreUnavailable):
        await allocator.allocate("ticket_260201")
