"""An elevator controlling a door on behalf of a user."""

from __future__ import annotations

import asyncio
import random
from enum import Enum, auto
from typing import Collection

from rolemesh.channel import ProtocolError, Role, connect, join

CLOSE = "Close"
CLOSE_DOOR = "CloseDoor"
DOOR_CLOSED = "DoorClosed"
DOOR_OPENED = "DoorOpened"
DOOR_STOPPED = "DoorStopped"
OPEN = "Open"
OPEN_DOOR = "OpenDoor"
RESET = "Reset"
STOP = "Stop"
HANG_UP = "HangUp"

_MAX_DELAY_US = 500


class _State(Enum):
    RESET = auto()
    CLOSED = auto()
    OPENING = auto()
    OPENED = auto()


def _note(log: list[str] | None, line: str) -> None:
    if log is not None:
        log.append(line)


async def _expect(role: Role, peer: str, allowed: Collection[str]) -> str:
    label = await role.receive(peer)
    if label not in allowed:
        raise ProtocolError(f"role {role.name} got unexpected {label!r} from {peer}")
    return label


async def _pause(rng: random.Random) -> None:
    await asyncio.sleep(rng.randrange(_MAX_DELAY_US) / 1_000_000)


async def user(
    role: Role, rng: random.Random, presses: int, log: list[str] | None = None
) -> list[str]:
    """Press ``presses`` random buttons, then hang up; return the presses."""
    if presses < 0:
        raise ValueError("presses must not be negative")
    choices = []
    for _ in range(presses):
        if rng.random() < 0.5:
            _note(log, "user: close")
            choice = CLOSE_DOOR
        else:
            _note(log, "user: open")
            choice = OPEN_DOOR
        await role.send("E", choice)
        choices.append(choice)
        await _pause(rng)
    await role.send("E", HANG_UP)
    return choices


async def _await_reset(role: Role) -> None:
    while await _expect(role, "E", (CLOSE, OPEN, STOP, RESET)) != RESET:
        pass


async def door(role: Role, log: list[str] | None = None) -> int:
    """Obey the elevator until it hangs up; return how often the door opened."""
    opened = 0
    while True:
        command = await _expect(role, "E", (CLOSE, OPEN, RESET, STOP, HANG_UP))
        if command == HANG_UP:
            return opened
        if command == CLOSE:
            _note(log, "door: close")
            await role.send("E", DOOR_CLOSED)
            await _await_reset(role)
        elif command == OPEN:
            _note(log, "door: open")
            opened += 1
            await role.send("E", DOOR_OPENED)
            await _await_reset(role)


async def elevator(role: Role, rng: random.Random, log: list[str] | None = None) -> int:
    """Drive the door from the user's requests; return how often it opened."""
    openings = 0
    state = _State.RESET
    while True:
        if state is _State.RESET:
            await role.send("D", RESET)
            state = _State.CLOSED
        elif state is _State.CLOSED:
            choice = await _expect(role, "U", (CLOSE_DOOR, OPEN_DOOR, HANG_UP))
            if choice == HANG_UP:
                await role.send("D", HANG_UP)
                return openings
            state = _State.OPENING if choice == OPEN_DOOR else _State.CLOSED
        elif state is _State.OPENING:
            await role.send("D", OPEN)
            await _expect(role, "D", (DOOR_OPENED,))
            _note(log, "elevator: open")
            openings += 1
            state = _State.OPENED
        else:
            await role.send("D", RESET)
            await _pause(rng)
            await role.send("D", CLOSE)
            await role.send("D", STOP)
            reply = await _expect(role, "D", (DOOR_STOPPED, DOOR_OPENED, DOOR_CLOSED))
            if reply == DOOR_CLOSED:
                _note(log, "elevator: closed")
            state = {
                DOOR_STOPPED: _State.OPENING,
                DOOR_OPENED: _State.OPENED,
                DOOR_CLOSED: _State.RESET,
            }[reply]


async def _run(presses: int, seed: int | None) -> list[str]:
    rng = random.Random(seed)
    user_rng = random.Random(rng.random())
    elevator_rng = random.Random(rng.random())
    log: list[str] = []
    u, d, e = connect("U", "D", "E")
    await join(user(u, user_rng, presses, log), door(d, log), elevator(e, elevator_rng, log))
    return log


def run(presses: int, seed: int | None = None) -> list[str]:
    """Simulate a user pressing buttons; return the log of all roles."""
    if presses < 0:
        raise ValueError("presses must not be negative")
    return asyncio.run(_run(presses, seed))