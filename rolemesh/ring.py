"""Ring protocols: a single pass of values and a ring of repeated choices."""

from __future__ import annotations

import asyncio
from dataclasses import dataclass
from typing import Sequence

from rolemesh.channel import Role, connect, join


@dataclass(frozen=True)
class Value:
    value: int


@dataclass(frozen=True)
class Add:
    value: int


@dataclass(frozen=True)
class Sub:
    value: int


async def ring_a(role: Role, value: int) -> int:
    """Send to B, receive from C, return the sum."""
    await role.send("B", Value(value))
    other = await role.receive("C", Value)
    return value + other.value


async def ring_b(role: Role, value: int) -> int:
    """Receive from A, send to C, return the sum."""
    other = await role.receive("A", Value)
    await role.send("C", Value(value))
    return value + other.value


async def ring_c(role: Role, value: int) -> int:
    """Receive from B, send to A, return the sum."""
    other = await role.receive("B", Value)
    await role.send("A", Value(value))
    return value + other.value


async def _run(values: Sequence[int]) -> tuple[int, int, int]:
    a, b, c = connect("A", "B", "C")
    x, y, z = values
    return await join(ring_a(a, x), ring_b(b, y), ring_c(c, z))


def run(values: Sequence[int]) -> tuple[int, int, int]:
    """Pass three values around the ring once; return each role's sum."""
    if len(values) != 3:
        raise ValueError("the ring has exactly three roles")
    return asyncio.run(_run(tuple(values)))


def _check_rounds(rounds: int) -> None:
    if rounds < 0:
        raise ValueError("rounds must not be negative")


def _record(trace: list[str] | None, name: str, value: int) -> None:
    if trace is not None:
        trace.append(f"{name}: {value}")


async def choice_a(role: Role, value: int, rounds: int, trace: list[str] | None = None) -> int:
    """Send double the value to B; C's choice decides how to combine."""
    _check_rounds(rounds)
    for _ in range(rounds):
        _record(trace, "A", value)
        doubled = value * 2
        await role.send("B", Add(doubled))
        reply = await role.receive("C", Add, Sub)
        value = doubled + reply.value if isinstance(reply, Add) else doubled - reply.value
    return value


async def choice_b(role: Role, value: int, rounds: int, trace: list[str] | None = None) -> int:
    """Choose Add or Sub towards C by the sign of double the value."""
    _check_rounds(rounds)
    for _ in range(rounds):
        _record(trace, "B", value)
        doubled = value * 2
        if doubled > 0:
            await role.send("C", Add(doubled))
            other = await role.receive("A", Add)
            value = other.value + doubled
        else:
            await role.send("C", Sub(doubled))
            other = await role.receive("A", Add)
            value = other.value - doubled
    return value


async def choice_c(role: Role, value: int, rounds: int, trace: list[str] | None = None) -> int:
    """Follow B's choice and pass the same choice on to A."""
    _check_rounds(rounds)
    for _ in range(rounds):
        _record(trace, "C", value)
        doubled = value * 2
        choice = await role.receive("B", Add, Sub)
        if isinstance(choice, Add):
            await role.send("A", Add(doubled))
            value = doubled + choice.value
        else:
            await role.send("A", Sub(doubled))
            value = doubled - choice.value
    return value


async def _run_choice(values: Sequence[int], rounds: int, trace: list[str]) -> tuple[int, int, int]:
    a, b, c = connect("A", "B", "C")
    x, y, z = values
    return await join(
        choice_a(a, x, rounds, trace),
        choice_b(b, y, rounds, trace),
        choice_c(c, z, rounds, trace),
    )


def run_choice(values: Sequence[int], rounds: int) -> tuple[tuple[int, int, int], list[str]]:
    """Run the choice ring for some rounds; return final values and the trace."""
    if len(values) != 3:
        raise ValueError("the ring has exactly three roles")
    trace: list[str] = []
    result = asyncio.run(_run_choice(tuple(values), rounds, trace))
    return result, trace