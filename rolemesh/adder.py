"""Adder protocols: a client/server adder and a three-party adder."""

from __future__ import annotations

import asyncio
from dataclasses import dataclass
from typing import Iterable

from rolemesh.channel import Role, connect, join


@dataclass(frozen=True)
class Add:
    value: int


@dataclass(frozen=True)
class Bye:
    pass


@dataclass(frozen=True)
class Hello:
    value: int


@dataclass(frozen=True)
class Sum:
    value: int


async def client(role: Role, hello: int, pairs: Iterable[tuple[int, int]]) -> list[int]:
    """Greet the server, request one sum per pair, then say goodbye."""
    await role.send("S", Hello(hello))
    sums = []
    for first, second in pairs:
        await role.send("S", Add(first))
        await role.send("S", Add(second))
        total = await role.receive("S", Sum)
        sums.append(total.value)
    await role.send("S", Bye())
    await role.receive("S", Bye)
    return sums


async def server(role: Role) -> int:
    """Serve additions until the client says goodbye; return how many."""
    greeting = await role.receive("C", Hello)
    served = 0
    while True:
        choice = await role.receive("C", Add, Bye)
        if isinstance(choice, Bye):
            await role.send("C", Bye())
            return served
        second = await role.receive("C", Add)
        await role.send("C", Sum(greeting.value + choice.value + second.value))
        served += 1


async def _adder(hello: int, pairs: list[tuple[int, int]]) -> list[int]:
    c, s = connect("C", "S")
    sums, _ = await join(client(c, hello, pairs), server(s))
    return sums


def run_adder(hello: int, pairs: Iterable[tuple[int, int]]) -> list[int]:
    """Run the client/server adder and return the sums the client got."""
    return asyncio.run(_adder(hello, list(pairs)))


async def adder_a(role: Role, x: int) -> int:
    """Swap values with B, forward B's value to C, receive the sum."""
    await role.send("B", Add(x))
    other = await role.receive("B", Add)
    await role.send("C", Add(other.value))
    total = await role.receive("C", Sum)
    return total.value


async def adder_b(role: Role, x: int) -> int:
    """Swap values with A, forward A's value to C, receive the sum."""
    other = await role.receive("A", Add)
    await role.send("A", Add(x))
    await role.send("C", Add(other.value))
    total = await role.receive("C", Sum)
    return total.value


async def adder_c(role: Role) -> int:
    """Add the values from A and B and send the sum to both."""
    first = await role.receive("A", Add)
    second = await role.receive("B", Add)
    total = first.value + second.value
    await role.send("A", Sum(total))
    await role.send("B", Sum(total))
    return total


async def _three_adder(a: int, b: int) -> tuple[int, int, int]:
    ra, rb, rc = connect("A", "B", "C")
    return await join(adder_a(ra, a), adder_b(rb, b), adder_c(rc))


def run_three_adder(a: int, b: int) -> tuple[int, int, int]:
    """Run the three-party adder; return the sum as seen by A, B and C."""
    return asyncio.run(_three_adder(a, b))