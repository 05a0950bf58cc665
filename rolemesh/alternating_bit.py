"""The alternating bit protocol for transmitting a pair of values."""

from __future__ import annotations

import asyncio
from dataclasses import dataclass
from typing import Sequence

from rolemesh.channel import ProtocolError, Role, connect, join

_BITS = (0, 1)


@dataclass(frozen=True)
class Data:
    bit: int
    value: int


@dataclass(frozen=True)
class Ack:
    bit: int


async def sender(role: Role, values: Sequence[int]) -> None:
    """Send two values, retransmitting each until its bit is acknowledged."""
    if len(values) != len(_BITS):
        raise ValueError("the protocol transmits exactly two values")
    for bit, value in zip(_BITS, values):
        while True:
            await role.send("R", Data(bit, value))
            ack = await role.receive("R", Ack)
            if ack.bit not in _BITS:
                raise ProtocolError(f"invalid acknowledgement bit {ack.bit}")
            if ack.bit == bit:
                break


async def receiver(role: Role) -> tuple[int, int]:
    """Acknowledge every frame and keep the first value carrying each bit."""
    received = []
    for expected in _BITS:
        while True:
            data = await role.receive("S", Data)
            if data.bit not in _BITS:
                raise ProtocolError(f"invalid data bit {data.bit}")
            await role.send("S", Ack(data.bit))
            if data.bit == expected:
                received.append(data.value)
                break
    return received[0], received[1]


async def _run(values: Sequence[int]) -> tuple[int, int]:
    s, r = connect("S", "R")
    _, output = await join(sender(s, values), receiver(r))
    return output


def run(values: Sequence[int]) -> tuple[int, int]:
    """Transmit a pair of values and return what the receiver got."""
    return asyncio.run(_run(tuple(values)))