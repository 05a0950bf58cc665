import pytest
from aiohttp.streams import EmptyStreamReader
from aiohttp.test_utils import make_mocked_request

from rolemesh.caching.model import decode_entry
from rolemesh.caching.proxy import cache_key
from rolemesh.caching.server import Context, Options, handler, parse_options


class FakeRedis:
    def __init__(self):
        self.data = {}

    async def set(self, name, value, nx=False):
        if nx and name in self.data:
            return None
        self.data[name] = value
        return True

    async def get(self, name):
        return self.data.get(name)

    async def delete(self, *names):
        removed = [name for name in names if name in self.data]
        for name in removed:
            del self.data[name]
        return len(removed)


class FakeReply:
    def __init__(self, status, headers, body):
        self.status = status
        self.headers = headers
        self.body = body

    async def read(self):
        return self.body

    async def __aenter__(self):
        return self

    async def __aexit__(self, *exc):
        return False


class FakeSession:
    def __init__(self, *replies):
        self.replies = list(replies)
        self.calls = []

    def request(self, method, url, **kwargs):
        self.calls.append((method, url, kwargs))
        return self.replies.pop(0)


def make_request():
    return make_mocked_request(
        "GET", "/page", headers={"Host": "proxy.example.com"}, payload=EmptyStreamReader()
    )


def test_defaults():
    options = parse_options(["example.com"])
    assert options == Options(remote="example.com")
    assert options.headers == ["Cookie", "Host"]
    assert options.port == 3000


def test_headers_are_merged_sorted_and_deduplicated():
    options = parse_options(["-H", "Accept", "-H", "Host", "-p", "8080", "-l", "::1", "example.com"])
    assert options.headers == ["Accept", "Cookie", "Host"]
    assert options.port == 8080
    assert options.listen == "::1"


@pytest.mark.parametrize(
    "argv",
    [
        [],
        ["-p", "70000", "example.com"],
        ["-l", "not-an-ip", "example.com"],
        ["-r", "host:port", "example.com"],
        ["bad/remote"],
    ],
)
def test_invalid_arguments_exit(argv):
    with pytest.raises(SystemExit):
        parse_options(argv)


@pytest.mark.asyncio
async def test_handler_stores_then_revalidates():
    store = FakeRedis()
    session = FakeSession(
        FakeReply(200, {"ETag": '"v1"'}, b"fresh"),
        FakeReply(304, {}, b""),
    )
    context = Context(["Cookie", "Host"], store, "origin.example.com", session)

    first_request = make_request()
    first = await handler(context, first_request)
    assert first.status == 200
    assert first.body == b"fresh"

    key = cache_key("GET", "/page", first_request.headers, context.headers)
    assert list(store.data) == [key]
    assert decode_entry(store.data[key]).etag == b'"v1"'

    second = await handler(context, make_request())
    assert second.status == 200
    assert second.body == b"fresh"
    assert ("If-None-Match", '"v1"') in session.calls[1][2]["headers"]
    assert session.calls[0][1] == "http://origin.example.com/page"
    assert list(store.data) == [key]


@pytest.mark.asyncio
async def test_handler_propagates_origin_failure():
    class BrokenSession:
        def request(self, method, url, **kwargs):
            raise ConnectionError("origin unreachable")

    store = FakeRedis()
    context = Context(["Cookie", "Host"], store, "origin.example.com", BrokenSession())
    with pytest.raises(ConnectionError):
        await handler(context, make_request())