# rolemesh

rolemesh runs multiparty protocols between asynchronous *roles*. A role is
one participant. It sends messages to its peers and receives messages from
them over FIFO queues, one for each direction between each pair of roles.
When a role receives a message of a kind it does not expect, it raises
`ProtocolError`. A protocol runs as one coroutine per role. The coroutines
are joined, and the caller gets back each role's result.

## Installation

```
pip install rolemesh
```

Python 3.10 or later is required. To run the tests, install the `test` extra.

## The core: `rolemesh.channel`

- `connect(*names)` creates one `Role` per name. Every role is connected to
  every other role. Duplicate names raise `ValueError`.
- `Role.send(peer, message)` puts a message on the queue to `peer`.
- `Role.receive(peer, *types)` waits for the next message from `peer`. If
  you give types, the message must be an instance of one of them. Otherwise
  `ProtocolError` is raised. A peer with no route also raises
  `ProtocolError`.
- `Role.peers` gives the names of the connected roles.
- `join(*awaitables)` runs the coroutines together and returns their results
  in order. If one of them fails, `join` cancels the rest and raises that
  failure.

```python
import asyncio
from rolemesh.channel import connect, join

async def ping(role):
    await role.send("B", 1)
    return await role.receive("B", int)

async def pong(role):
    value = await role.receive("A", int)
    await role.send("A", value + 1)

async def main():
    a, b = connect("A", "B")
    return await join(ping(a), pong(b))

print(asyncio.run(main()))  # (2, None)
```

## Protocols included

| Module | Entry points | Protocol |
| --- | --- | --- |
| `rolemesh.adder` | `run_adder(hello, pairs)`, `run_three_adder(a, b)` | A client/server adder, and a three-party adder |
| `rolemesh.alternating_bit` | `run(values)` | The alternating bit protocol, sending a pair of values |
| `rolemesh.ring` | `run(values)`, `run_choice(values, rounds)` | Three values passed around a ring once, and a ring of Add/Sub choices that returns a trace |
| `rolemesh.oauth` | `run(password, cancel=False)` | A login between a client, a server and an authority (the expected code is `10`) |
| `rolemesh.fft` | `run(values)`, `fft8(vector)`, `format_vector(values)` | An eight-point FFT with one role per point, plus a direct DFT for comparison |
| `rolemesh.butterfly` | `run(rows)`, `run_optimized(rows)`, `transpose(columns)` | A column-wise eight-point FFT over eight rows, in plain and send-first orderings |
| `rolemesh.elevator` | `run(presses, seed=None)` | A user, a door and an elevator. Returns the log of all roles. |
| `rolemesh.client_server_log` | `run(requests, data, log_limit)` | A client retrying requests, a server, and a logger |
| `rolemesh.stream` | `run(values)`, `run_optimized(values, unrolls=5)` | A source streaming values to a sink on demand, optionally sending some ahead |
| `rolemesh.buffering` | `run(values)`, `run_optimized(values)`, `run_pair(pair)` | Double buffering through a kernel between a source and a sink |

Each module also exposes the coroutine of every role, for example
`adder.client` and `adder.server`, and the message classes of the protocol.
You can run these coroutines yourself on roles made by `connect`.

Protocols that could go on forever have an explicit bound:

- In `elevator`, the user hangs up after `presses` button presses.
- In `client_server_log`, the server logs `log_limit` entries.
- In `ring.run_choice`, the ring runs for `rounds` rounds.

## An HTTP cache built from roles: `rolemesh.caching`

`rolemesh.caching` splits each HTTP request between four roles, and joins
them in `rolemesh.caching.server.handler`:

- **client** (`caching.client.run`) hands the incoming request to the proxy
  and returns the proxy's response.
- **proxy** (`caching.proxy.run`) does the following:
  - It builds the cache key with `cache_key(method, url, headers, names)`.
  - If an entry is cached, it revalidates it with `If-None-Match`.
  - It decides whether to store or remove the entry.
- **cache** (`caching.cache.run`) takes the lock `<key>:lock` in Redis,
  retrying after random delays. It loads, stores or removes the entry, then
  writes any change and releases the lock.
- **origin** (`caching.origin.run`) rewrites the URL to point at the remote
  authority with `set_authority`, then forwards the request through an
  aiohttp session.

The proxy stores a response only when all of these hold:

- the request method is safe;
- the request had no body;
- the response carries an `ETag`.

If the origin answers `304 Not Modified` to a revalidation, the proxy
returns the cached response. Otherwise it removes the stale entry.

Entries are stored as JSON by `caching.model.encode_entry` and read back by
`decode_entry`. Malformed data raises `ValueError`.

Start the server with the authority of the remote host:

```
rolemesh-cache example.com
```

Options:

- `-l`, `--listen`: the IP address to listen on (default `127.0.0.1`)
- `-p`, `--port`: the port to listen on (default `3000`)
- `-H`, `--header`: a header whose value becomes part of the cache key. It
  can be given more than once. `Cookie` and `Host` are always included.
- `-r`, `--redis`: the Redis authority (default `127.0.0.1`, port `6379`)

The server needs a reachable Redis. If handling a request fails, it
answers `500`.

### What the cache does not do

The cache keeps entries until a revalidation replaces or removes them. It
does not read `Cache-Control` or `Expires`, and it has no expiry or size
limit. Requests to the remote host are always sent over plain HTTP.