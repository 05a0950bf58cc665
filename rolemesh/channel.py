"""Point-to-point asynchronous channels between named protocol roles."""

from __future__ import annotations

import asyncio
from itertools import permutations
from typing import Any, Awaitable


class ProtocolError(Exception):
    """Raised when a role sees a message the protocol does not allow."""


class Role:
    """One participant in a multiparty protocol.

    A role owns one FIFO queue towards each peer and one from each peer.
    Roles are created together by :func:`connect`.
    """

    def __init__(self, name: str) -> None:
        self.name = name
        self._outbox: dict[str, asyncio.Queue] = {}
        self._inbox: dict[str, asyncio.Queue] = {}

    def __repr__(self) -> str:
        return f"Role({self.name!r})"

    @property
    def peers(self) -> tuple[str, ...]:
        """Names of the roles this one is connected to."""
        return tuple(self._outbox)

    def _route(self, routes: dict[str, asyncio.Queue], peer: str) -> asyncio.Queue:
        try:
            return routes[peer]
        except KeyError:
            raise ProtocolError(f"role {self.name} has no route to {peer!r}") from None

    async def send(self, peer: str, message: Any) -> None:
        """Send ``message`` to ``peer``."""
        await self._route(self._outbox, peer).put(message)

    async def receive(self, peer: str, *args: type) -> Any:
        """Wait for the next message from ``peer``.

        If message types are given, the message must be an instance of one
        of them, otherwise :class:`ProtocolError` is raised.
        """
        message = await self._route(self._inbox, peer).get()
        if args and not isinstance(message, args):
            expected = ", ".join(kind.__name__ for kind in args)
            raise ProtocolError(
                f"role {self.name} expected {expected} from {peer}, "
                f"got {type(message).__name__}"
            )
        return message


def connect(*args: str) -> tuple[Role, ...]:
    """Create fully connected roles with the given names, in that order."""
    if len(set(args)) != len(args):
        raise ValueError("role names must be unique")
    roles = {name: Role(name) for name in args}
    for left, right in permutations(args, 2):
        queue: asyncio.Queue = asyncio.Queue()
        roles[left]._outbox[right] = queue
        roles[right]._inbox[left] = queue
    return tuple(roles.values())


async def join(*args: Awaitable[Any]) -> tuple[Any, ...]:
    """Run awaitables concurrently and return their results in order.

    The first failure cancels the others and is raised.
    """
    tasks = [asyncio.ensure_future(item) for item in args]
    try:
        return tuple(await asyncio.gather(*tasks))
    except BaseException:
        for task in tasks:
            task.cancel()
        await asyncio.gather(*tasks, return_exceptions=True)
        raise