"""A three-party authentication protocol between client, server and authority."""

from __future__ import annotations

import asyncio
from dataclasses import dataclass

from rolemesh.channel import Role, connect, join

EXPECTED_CODE = 10


@dataclass(frozen=True)
class Login:
    value: int


@dataclass(frozen=True)
class Cancel:
    value: int


@dataclass(frozen=True)
class Password:
    value: int


@dataclass(frozen=True)
class Again:
    value: int


@dataclass(frozen=True)
class Auth:
    value: int


@dataclass(frozen=True)
class Quit:
    value: int


async def client(role: Role) -> Auth | Again | Cancel:
    """Follow the server's choice; return the final message from the server."""
    choice = await role.receive("S", Cancel, Login)
    if isinstance(choice, Cancel):
        await role.send("A", Quit(choice.value))
        return choice
    await role.send("A", Password(choice.value))
    return await role.receive("S", Auth, Again)


async def auth(role: Role, secret: int) -> Auth | Again | Quit:
    """Check the client's code against ``secret`` and tell the server."""
    message = await role.receive("C", Password, Quit)
    if isinstance(message, Quit):
        return message
    verdict = Auth(message.value) if message.value == secret else Again(message.value)
    await role.send("S", verdict)
    return verdict


async def server(role: Role, password: int, cancel: bool) -> Auth | Again | Cancel:
    """Start a login with ``password`` or cancel; relay the verdict to the client."""
    if cancel:
        message = Cancel(password)
        await role.send("C", message)
        return message
    await role.send("C", Login(password))
    verdict = await role.receive("A", Auth, Again)
    await role.send("C", type(verdict)(verdict.value))
    return verdict


async def _run(password: int, cancel: bool) -> tuple:
    c, s, a = connect("C", "S", "A")
    return await join(client(c), server(s, password, cancel), auth(a, EXPECTED_CODE))


def run(password: int, cancel: bool = False) -> tuple:
    """Run the protocol; return the outcomes of client, server and authority."""
    return asyncio.run(_run(password, cancel))