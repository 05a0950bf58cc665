import asyncio
from unittest import mock

import pytest

from rolemesh.caching.cache import Load, Lock, Locked, Remove, Store, Unlock
from rolemesh.caching.cache import run as run_cache
from rolemesh.caching.model import Entry, Response, decode_entry, encode_entry
from rolemesh.channel import ProtocolError, connect


class FakeRedis:
    def __init__(self, data=None, busy=0):
        self.data = dict(data or {})
        self.busy = busy
        self.attempts = 0

    async def set(self, name, value, nx=False):
        if nx:
            self.attempts += 1
            if self.busy:
                self.busy -= 1
                return None
            if name in self.data:
                return None
        self.data[name] = value
        return True

    async def get(self, name):
        return self.data.get(name)

    async def delete(self, *names):
        removed = 0
        for name in names:
            if name in self.data:
                del self.data[name]
                removed += 1
        return removed


ENTRY = Entry(b'"v1"', Response(200, (("ETag", '"v1"'),), b"payload"))


def roles():
    _, proxy, cache, _ = connect("Client", "Proxy", "Cache", "Origin")
    return proxy, cache


async def send_all(proxy, *messages):
    for message in messages:
        await proxy.send("Cache", message)


@pytest.mark.asyncio
async def test_load_of_missing_entry_returns_none_and_releases_lock():
    proxy, cache = roles()
    store = FakeRedis()
    await send_all(proxy, Lock("GET:/"), Load(), Unlock())
    await run_cache(cache, store)
    assert await proxy.receive("Cache") == Locked()
    assert await proxy.receive("Cache") is None
    assert store.data == {}


@pytest.mark.asyncio
async def test_load_returns_stored_entry():
    proxy, cache = roles()
    store = FakeRedis({"GET:/": encode_entry(ENTRY)})
    await send_all(proxy, Lock("GET:/"), Load(), Unlock())
    await run_cache(cache, store)
    assert await proxy.receive("Cache", Locked) == Locked()
    assert await proxy.receive("Cache") == ENTRY
    assert list(store.data) == ["GET:/"]


@pytest.mark.asyncio
async def test_store_is_flushed_on_unlock():
    proxy, cache = roles()
    store = FakeRedis()
    await send_all(proxy, Lock("k"), Load(), Store(ENTRY), Load(), Unlock())
    await run_cache(cache, store)
    assert await proxy.receive("Cache") == Locked()
    assert await proxy.receive("Cache") is None
    assert await proxy.receive("Cache") == ENTRY
    assert decode_entry(store.data["k"]) == ENTRY
    assert "k:lock" not in store.data


@pytest.mark.asyncio
async def test_remove_deletes_entry():
    proxy, cache = roles()
    store = FakeRedis({"k": encode_entry(ENTRY)})
    await send_all(proxy, Lock("k"), Load(), Remove(), Unlock())
    await run_cache(cache, store)
    assert store.data == {}


@pytest.mark.asyncio
async def test_remove_of_missing_entry_fails():
    proxy, cache = roles()
    store = FakeRedis()
    await send_all(proxy, Lock("k"), Remove(), Unlock())
    with pytest.raises(RuntimeError):
        await run_cache(cache, store)


@pytest.mark.asyncio
async def test_unexpected_message_is_a_protocol_error():
    proxy, cache = roles()
    await send_all(proxy, Load())
    with pytest.raises(ProtocolError):
        await run_cache(cache, FakeRedis())


@pytest.mark.asyncio
async def test_busy_lock_is_retried_after_a_delay():
    proxy, cache = roles()
    store = FakeRedis(busy=2)
    await send_all(proxy, Lock("k"), Unlock())
    with mock.patch("asyncio.sleep", new=mock.AsyncMock()) as sleep:
        await run_cache(cache, store)
    assert store.attempts == 3
    assert sleep.await_count == 2
    assert all(0 <= call.args[0] < 1 for call in sleep.await_args_list)
    assert await proxy.receive("Cache") == Locked()
    assert isinstance(asyncio.get_running_loop(), asyncio.AbstractEventLoop)