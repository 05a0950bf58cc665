"""The origin role: forwards the proxy's request to the remote server."""

from __future__ import annotations

import logging
from typing import Any
from urllib.parse import urlsplit, urlunsplit

from aiohttp import web

from rolemesh.caching.model import Response
from rolemesh.channel import Role

_log = logging.getLogger(__name__)
_FORBIDDEN = frozenset(" \t\r\n/?#")


def _check_authority(authority: str) -> None:
    if not authority or any(char in _FORBIDDEN for char in authority):
        raise ValueError(f"invalid authority {authority!r}")


def set_authority(url: str, authority: str) -> str:
    """Point ``url`` at ``authority``, keeping scheme (default http), path and query."""
    _check_authority(authority)
    parts = urlsplit(url)
    return urlunsplit((parts.scheme or "http", authority, parts.path or "/", parts.query, ""))


async def _session(role: Role, remote: str, session: Any) -> None:
    request = await role.receive("Proxy", web.BaseRequest)
    url = set_authority(request.path_qs, remote)
    body = await request.read()
    async with session.request(
        request.method,
        url,
        headers=list(request.headers.items()),
        data=body or None,
        allow_redirects=False,
    ) as reply:
        response = Response(reply.status, tuple(reply.headers.items()), await reply.read())
    await role.send("Proxy", response)


async def run(role: Role, remote: str, session: Any) -> None:
    """Forward one request to ``remote`` through ``session`` and return the response."""
    try:
        await _session(role, remote, session)
    except Exception as err:
        _log.error("%s", err)
        raise