"""An HTTP cache server that runs the caching protocol for every request."""

from __future__ import annotations

import argparse
import asyncio
import ipaddress
import logging
import sys
from dataclasses import dataclass, field
from typing import Any, Sequence
from urllib.parse import urlsplit

import aiohttp
from aiohttp import web
from redis.asyncio import Redis

from rolemesh.caching import cache as cache_role
from rolemesh.caching import client as client_role
from rolemesh.caching import origin as origin_role
from rolemesh.caching import proxy as proxy_role
from rolemesh.caching.origin import set_authority
from rolemesh.channel import connect, join

DEFAULT_HEADERS = ("Cookie", "Host")
DEFAULT_LISTEN = "127.0.0.1"
DEFAULT_PORT = 3000
DEFAULT_REDIS = "127.0.0.1"
DEFAULT_REDIS_PORT = 6379

_log = logging.getLogger(__name__)


@dataclass
class Options:
    """Command-line settings of the cache server."""

    remote: str
    listen: str = DEFAULT_LISTEN
    port: int = DEFAULT_PORT
    headers: list[str] = field(default_factory=lambda: sorted(DEFAULT_HEADERS))
    redis: str = DEFAULT_REDIS


@dataclass
class Context:
    """Shared state every request handler uses."""

    headers: list[str]
    redis: Any
    remote: str
    session: Any


def _address(text: str) -> str:
    try:
        return str(ipaddress.ip_address(text))
    except ValueError as err:
        raise argparse.ArgumentTypeError(str(err)) from None


def _port(text: str) -> int:
    try:
        port = int(text)
    except ValueError:
        raise argparse.ArgumentTypeError(f"invalid port {text!r}") from None
    if not 0 <= port <= 65535:
        raise argparse.ArgumentTypeError(f"port {port} is out of range")
    return port


def _split_authority(authority: str) -> tuple[str, int]:
    parts = urlsplit(f"//{authority}")
    try:
        port = parts.port
    except ValueError as err:
        raise ValueError(f"invalid authority {authority!r}: {err}") from None
    if not parts.hostname:
        raise ValueError(f"invalid authority {authority!r}")
    return parts.hostname, DEFAULT_REDIS_PORT if port is None else port


def _redis(text: str) -> str:
    try:
        _split_authority(text)
    except ValueError as err:
        raise argparse.ArgumentTypeError(str(err)) from None
    return text


def _remote(text: str) -> str:
    try:
        set_authority("/", text)
    except ValueError as err:
        raise argparse.ArgumentTypeError(str(err)) from None
    return text


def parse_options(argv: Sequence[str] | None = None) -> Options:
    """Parse command-line arguments; the default headers are always included."""
    parser = argparse.ArgumentParser(description="An HTTP cache backed by session types.")
    parser.add_argument(
        "-l", "--listen", type=_address, default=DEFAULT_LISTEN,
        help=f"set the IP address to listen on (defaults to {DEFAULT_LISTEN})",
    )
    parser.add_argument(
        "-p", "--port", type=_port, default=DEFAULT_PORT,
        help=f"set the port to listen on (defaults to port {DEFAULT_PORT})",
    )
    parser.add_argument(
        "-H", "--header", action="append", default=[],
        help="add a header's value to the cache key (the values of the 'Cookie' "
        "and 'Host' headers are always included)",
    )
    parser.add_argument(
        "-r", "--redis", type=_redis, default=DEFAULT_REDIS,
        help=f"set the authority to connect to Redis on (defaults to {DEFAULT_REDIS}:{DEFAULT_REDIS_PORT})",
    )
    parser.add_argument(
        "remote", type=_remote, help="set the remote authority for forwarding (e.g. example.com)"
    )
    args = parser.parse_args(argv)
    return Options(
        remote=args.remote,
        listen=args.listen,
        port=args.port,
        headers=sorted(set(args.header) | set(DEFAULT_HEADERS)),
        redis=args.redis,
    )


async def handler(context: Context, request: web.BaseRequest) -> web.Response:
    """Run the caching protocol for one request and return the response."""
    _log.debug("new request from client")
    client, proxy, cache, origin = connect("Client", "Proxy", "Cache", "Origin")
    response, *_ = await join(
        client_role.run(client, request),
        proxy_role.run(proxy, context.headers),
        cache_role.run(cache, context.redis),
        origin_role.run(origin, context.remote, context.session),
    )
    return response


def _format_address(host: str, port: int) -> str:
    return f"[{host}]:{port}" if ":" in host else f"{host}:{port}"


async def _serve(options: Options) -> None:
    host, port = _split_authority(options.redis)
    redis = Redis(host=host, port=port)
    try:
        await redis.ping()
        async with aiohttp.ClientSession(auto_decompress=False) as session:
            context = Context(options.headers, redis, options.remote, session)

            async def endpoint(request: web.Request) -> web.StreamResponse:
                try:
                    return await handler(context, request)
                except Exception:
                    return web.Response(status=500)

            app = web.Application()
            app.router.add_route("*", "/{tail:.*}", endpoint)
            runner = web.AppRunner(app)
            await runner.setup()
            try:
                await web.TCPSite(runner, options.listen, options.port).start()
                _log.info(
                    "listening for connections on http://%s",
                    _format_address(options.listen, options.port),
                )
                await asyncio.Event().wait()
            finally:
                await runner.cleanup()
    finally:
        await redis.aclose()


def main(argv: Sequence[str] | None = None) -> int:
    """Start the cache server; return the process exit status."""
    logging.basicConfig(level=logging.INFO)
    options = parse_options(argv)
    try:
        asyncio.run(_serve(options))
    except KeyboardInterrupt:
        return 0
    except Exception as err:
        print(f"Error: {err}", file=sys.stderr)
        return 1
    return 0