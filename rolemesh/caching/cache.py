"""The cache role: holds a Redis lock on one entry while the proxy works on it."""

from __future__ import annotations

import asyncio
import logging
import random
from dataclasses import dataclass
from typing import Any

from rolemesh.caching.model import Entry, decode_entry, encode_entry
from rolemesh.channel import Role

MAX_RETRY_DELAY_MS = 1000

_log = logging.getLogger(__name__)
_NOT_LOADED = object()


@dataclass(frozen=True)
class Lock:
    key: str


@dataclass(frozen=True)
class Locked:
    pass


@dataclass(frozen=True)
class Unlock:
    pass


@dataclass(frozen=True)
class Load:
    pass


@dataclass(frozen=True)
class Store:
    entry: Entry


@dataclass(frozen=True)
class Remove:
    pass


async def _acquire(redis: Any, lock: str, rng: random.Random) -> None:
    while not await redis.set(lock, 0, nx=True):
        await asyncio.sleep(rng.randrange(MAX_RETRY_DELAY_MS) / 1000)


async def _flush(redis: Any, key: str, entry: Entry | None) -> None:
    _log.debug("flushing changes to cache")
    if entry is not None:
        if not await redis.set(key, encode_entry(entry)):
            raise RuntimeError(f"could not store cache entry {key!r}")
    elif await redis.delete(key) != 1:
        raise RuntimeError(f"could not remove cache entry {key!r}")


async def _session(role: Role, redis: Any) -> None:
    key = (await role.receive("Proxy", Lock)).key
    lock = f"{key}:lock"
    await _acquire(redis, lock, random.Random())
    await role.send("Proxy", Locked())

    replica: Any = _NOT_LOADED
    dirty = False
    while True:
        command = await role.receive("Proxy", Load, Store, Remove, Unlock)
        if isinstance(command, Load):
            if replica is _NOT_LOADED:
                data = await redis.get(key)
                replica = None if data is None else decode_entry(data)
            await role.send("Proxy", replica)
        elif isinstance(command, Store):
            _log.debug("storing a new cache entry")
            replica, dirty = command.entry, True
        elif isinstance(command, Remove):
            _log.debug("removing a cache entry")
            replica, dirty = None, True
        else:
            if dirty:
                await _flush(redis, key, replica)
            if await redis.delete(lock) != 1:
                raise RuntimeError(f"lock {lock!r} was lost")
            return


async def run(role: Role, redis: Any) -> None:
    """Serve the proxy's lock, load, store and remove requests against Redis."""
    try:
        await _session(role, redis)
    except Exception as err:
        _log.error("%s", err)
        raise