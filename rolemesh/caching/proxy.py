"""The proxy role: answers client requests from the origin, revalidating cached entries."""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping
from http import HTTPStatus
from typing import Any, Sequence

from aiohttp import web

from rolemesh.caching.cache import Load, Lock, Locked, Remove, Store, Unlock
from rolemesh.caching.model import Entry, Response
from rolemesh.channel import Role

SAFE_METHODS = frozenset({"GET", "HEAD", "OPTIONS", "TRACE"})

_log = logging.getLogger(__name__)


def _header(headers: Any, name: str) -> Any:
    pairs: Iterable = headers.items() if isinstance(headers, Mapping) else headers
    wanted = name.lower()
    for key, value in pairs:
        if key.lower() == wanted:
            return value
    return None


def _text(value: Any) -> str:
    if isinstance(value, (bytes, bytearray)):
        return bytes(value).decode("utf-8", errors="replace")
    return str(value)


def cache_key(method: str, url: str, headers: Any, names: Iterable[str]) -> str:
    """Build the cache key from the method, URL and the named headers' values."""
    parts = [f"{method}:{url}"]
    for name in names:
        value = _header(headers, name)
        parts.append("" if value is None else _text(value))
    return ":".join(parts)


def _etag_value(etag: bytes) -> str:
    if any(byte != 9 and (byte < 32 or byte == 127) for byte in etag):
        raise ValueError(f"invalid ETag value {etag!r}")
    return etag.decode("utf-8", errors="replace")


async def _respond(
    role: Role, request: web.BaseRequest, cached: Response | None, remove: bool
) -> None:
    is_safe = request.method in SAFE_METHODS and not request.body_exists

    await role.send("Origin", request)
    response = await role.receive("Origin", Response)

    if cached is not None and response.status == HTTPStatus.NOT_MODIFIED:
        await role.send("Client", cached)
        return

    etag = _header(response.headers, "ETag")
    if etag is not None and is_safe:
        _log.debug("found a cacheable response")
        await role.send("Client", response)
        await role.send("Cache", Store(Entry(etag.encode("utf-8"), response)))
        return

    await role.send("Client", response)
    if remove:
        await role.send("Cache", Remove())


async def _session(role: Role, names: Sequence[str]) -> None:
    request = await role.receive("Client", web.BaseRequest)
    key = cache_key(request.method, request.path_qs, request.headers, names)

    await role.send("Cache", Lock(key))
    await role.send("Cache", Load())
    await role.receive("Cache", Locked)

    entry = await role.receive("Cache", Entry, type(None))
    if entry is not None:
        etag = _etag_value(entry.etag)
        revalidating = request.clone(headers=[*request.headers.items(), ("If-None-Match", etag)])
        await _respond(role, revalidating, entry.response, True)
    else:
        await _respond(role, request, None, False)

    await role.send("Cache", Unlock())


async def run(role: Role, names: Sequence[str]) -> None:
    """Handle one client request, keying the cache on the headers in ``names``."""
    try:
        await _session(role, names)
    except Exception as err:
        _log.error("%s", err)
        raise