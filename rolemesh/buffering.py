"""Double buffering: a kernel copies data from a source to a sink in two rounds."""

from __future__ import annotations

import asyncio
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Sequence

from rolemesh.channel import ProtocolError, Role, connect, join


@dataclass(frozen=True)
class Ready:
    pass


@dataclass(frozen=True)
class Copy:
    value: Any


async def source(role: Role, chunks: Sequence[Any]) -> None:
    """Send each of two chunks to the kernel once it is ready."""
    if len(chunks) != 2:
        raise ValueError("the source sends exactly two chunks")
    for chunk in chunks:
        await role.receive("K", Ready)
        await role.send("K", Copy(chunk))


async def kernel(role: Role) -> None:
    """Copy two chunks from the source to the sink, one buffer at a time."""
    for _ in range(2):
        await role.send("S", Ready())
        copy = await role.receive("S", Copy)
        await role.receive("T", Ready)
        await role.send("T", Copy(copy.value))


async def kernel_optimized(role: Role) -> None:
    """Copy two chunks, asking the source for both before forwarding any."""
    await role.send("S", Ready())
    await role.send("S", Ready())
    for _ in range(2):
        copy = await role.receive("S", Copy)
        await role.receive("T", Ready)
        await role.send("T", Copy(copy.value))


async def sink(role: Role) -> tuple[Any, Any]:
    """Receive two chunks from the kernel; return them in order."""
    received = []
    for _ in range(2):
        await role.send("K", Ready())
        copy = await role.receive("K", Copy)
        received.append(copy.value)
    return received[0], received[1]


async def _run(
    chunks: tuple[Any, Any], middle: Callable[[Role], Awaitable[None]]
) -> tuple[Any, Any]:
    s, k, t = connect("S", "K", "T")
    _, _, output = await join(source(s, chunks), middle(k), sink(t))
    return output


def _transfer(values: Sequence[int], middle: Callable[[Role], Awaitable[None]]) -> list[int]:
    items = list(values)
    half = len(items) // 2
    first, second = asyncio.run(_run((tuple(items[:half]), tuple(items[half:])), middle))
    output = [*first, *second]
    if output != items:
        raise ProtocolError("the sink did not receive the values that were sent")
    return output


def run(values: Sequence[int]) -> list[int]:
    """Copy the values in two halves through the kernel; return the sink's data."""
    return _transfer(values, kernel)


def run_optimized(values: Sequence[int]) -> list[int]:
    """Like :func:`run`, using the kernel that requests both halves up front."""
    return _transfer(values, kernel_optimized)


def run_pair(pair: Sequence[int]) -> tuple[int, int]:
    """Copy a pair of values through the kernel; return the pair the sink got."""
    if len(pair) != 2:
        raise ValueError("expected exactly two values")
    return asyncio.run(_run((pair[0], pair[1]), kernel))