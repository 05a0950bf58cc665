"""A streaming protocol: a source pushes values to a sink that asks for each one."""

from __future__ import annotations

import asyncio
from dataclasses import dataclass
from typing import Iterable, Iterator, Sequence

from rolemesh.channel import ProtocolError, Role, connect, join

DEFAULT_UNROLLS = 5


@dataclass(frozen=True)
class Ready:
    pass


@dataclass(frozen=True)
class Value:
    value: int


@dataclass(frozen=True)
class Stop:
    pass


async def _stream_rest(role: Role, values: Iterator[int]) -> None:
    await role.receive("T", Ready)
    for value in values:
        await role.send("T", Value(value))
        await role.receive("T", Ready)
    await role.send("T", Stop())


async def source(role: Role, values: Iterable[int], unrolls: int = 0) -> None:
    """Send every value to the sink, each after it is ready, then stop.

    With ``unrolls`` set, the first ``unrolls`` values are sent before any
    readiness is awaited; there must be at least that many values.
    """
    if unrolls < 0:
        raise ValueError("unrolls must not be negative")
    items = iter(values)
    ahead = []
    for _ in range(unrolls):
        try:
            ahead.append(next(items))
        except StopIteration:
            raise ValueError(f"at least {unrolls} values are needed") from None
    for value in ahead:
        await role.send("T", Value(value))
    for _ in ahead:
        await role.receive("T", Ready)
    await _stream_rest(role, items)


async def sink(role: Role) -> list[int]:
    """Signal readiness and collect values until the source stops."""
    output = []
    while True:
        await role.send("S", Ready())
        message = await role.receive("S", Value, Stop)
        if isinstance(message, Stop):
            return output
        output.append(message.value)


async def _run(values: list[int], unrolls: int) -> list[int]:
    s, t = connect("S", "T")
    _, output = await join(source(s, values, unrolls), sink(t))
    if output != values:
        raise ProtocolError("the sink did not receive the values that were sent")
    return output


def run(values: Sequence[int]) -> list[int]:
    """Stream the values from source to sink; return what the sink received."""
    return asyncio.run(_run(list(values), 0))


def run_optimized(values: Sequence[int], unrolls: int = DEFAULT_UNROLLS) -> list[int]:
    """Like :func:`run`, with the source sending ``unrolls`` values ahead."""
    if unrolls < 0:
        raise ValueError("unrolls must not be negative")
    return asyncio.run(_run(list(values), unrolls))