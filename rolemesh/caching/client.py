"""The client role: hands an incoming request to the proxy and awaits the answer."""

from __future__ import annotations

import logging

from aiohttp import web

from rolemesh.caching.model import Response
from rolemesh.channel import Role

_log = logging.getLogger(__name__)
# The server computes these itself for the buffered body.
_DROPPED = frozenset({"content-length", "transfer-encoding"})


def _to_web(response: Response) -> web.Response:
    headers = [(name, value) for name, value in response.headers if name.lower() not in _DROPPED]
    return web.Response(status=response.status, headers=headers, body=response.body)


async def run(role: Role, request: web.BaseRequest) -> web.Response:
    """Send ``request`` to the proxy and return its response."""
    try:
        await role.send("Proxy", request)
        response = await role.receive("Proxy", Response)
        return _to_web(response)
    except Exception as err:
        _log.error("%s", err)
        raise