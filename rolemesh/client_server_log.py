"""A client retrying requests against a server that logs accepted data."""

from __future__ import annotations

import asyncio
from dataclasses import dataclass
from typing import Iterable

from rolemesh.channel import ProtocolError, Role, connect, join


@dataclass(frozen=True)
class Request:
    value: int


@dataclass(frozen=True)
class Data:
    value: int


@dataclass(frozen=True)
class K:
    pass


@dataclass(frozen=True)
class O:  # noqa: E742
    value: int


@dataclass(frozen=True)
class Fault:
    pass


@dataclass(frozen=True)
class Log:
    value: int


async def client(role: Role, requests: Iterable[int], data: int) -> O | Fault:
    """Send requests with ``data`` until the server answers other than K."""
    for request in requests:
        await role.send("S", Request(request))
        await role.send("S", Data(data))
        reply = await role.receive("S", Fault, O, K)
        if not isinstance(reply, K):
            return reply
    raise ProtocolError("the server rejected every request")


async def server(role: Role, log_limit: int) -> int:
    """Reject requests until one is 0, then log its data ``log_limit`` times."""
    if log_limit < 0:
        raise ValueError("log_limit must not be negative")
    while True:
        request = await role.receive("C", Request)
        data = await role.receive("C", Data)
        if request.value == 0:
            await role.send("C", O(request.value))
            for _ in range(log_limit):
                await role.send("L", Log(data.value))
            return data.value
        await role.send("C", K())


async def logger(role: Role, count: int) -> list[int]:
    """Collect ``count`` log entries from the server."""
    if count < 0:
        raise ValueError("count must not be negative")
    return [(await role.receive("S", Log)).value for _ in range(count)]


async def _run(requests: list[int], data: int, log_limit: int) -> tuple[O | Fault, list[int]]:
    c, l, s = connect("C", "L", "S")
    reply, _, logs = await join(client(c, requests, data), server(s, log_limit), logger(l, log_limit))
    return reply, logs


def run(requests: Iterable[int], data: int, log_limit: int) -> tuple[O | Fault, list[int]]:
    """Run the protocol; return the client's final reply and the logged values."""
    if log_limit < 0:
        raise ValueError("log_limit must not be negative")
    return asyncio.run(_run(list(requests), data, log_limit))