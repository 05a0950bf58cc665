import pytest

from rolemesh.buffering import (
    Copy,
    Ready,
    kernel,
    kernel_optimized,
    run,
    run_optimized,
    run_pair,
    sink,
    source,
)
from rolemesh.channel import ProtocolError, connect, join


@pytest.mark.parametrize("size", [5_000, 10_000, 15_000, 20_000, 25_000])
def test_run_copies_input(size):
    values = list(range(size))
    assert run(values) == values


@pytest.mark.parametrize("size", [5_000, 10_000, 15_000, 20_000, 25_000])
def test_run_optimized_copies_input(size):
    values = list(range(size))
    assert run_optimized(values) == values


def test_odd_length():
    assert run([1, 2, 3]) == [1, 2, 3]


def test_empty_input():
    assert run([]) == []


def test_run_pair():
    assert run_pair((1, 2)) == (1, 2)


def test_run_pair_wrong_length():
    with pytest.raises(ValueError):
        run_pair((1, 2, 3))


@pytest.mark.asyncio
async def test_source_requires_two_chunks():
    s, _, _ = connect("S", "K", "T")
    with pytest.raises(ValueError):
        await source(s, [(1,)])


@pytest.mark.asyncio
async def test_optimized_kernel_sends_both_readies_first():
    s, k, t = connect("S", "K", "T")
    _, _, output = await join(source(s, ("a", "b")), kernel_optimized(k), sink(t))
    assert output == ("a", "b")


@pytest.mark.asyncio
async def test_kernel_forwards_to_sink():
    s, k, t = connect("S", "K", "T")
    _, _, output = await join(source(s, (10, 20)), kernel(k), sink(t))
    assert output == (10, 20)


@pytest.mark.asyncio
async def test_sink_rejects_wrong_message():
    _, k, t = connect("S", "K", "T")
    await k.send("T", Ready())
    with pytest.raises(ProtocolError):
        await sink(t)


@pytest.mark.asyncio
async def test_source_messages():
    s, k, _ = connect("S", "K", "T")
    await k.send("S", Ready())
    await k.send("S", Ready())
    await source(s, (1, 2))
    assert await k.receive("S") == Copy(1)
    assert await k.receive("S") == Copy(2)