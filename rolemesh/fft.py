"""An eight-point fast Fourier transform computed by eight communicating roles."""

from __future__ import annotations

import asyncio
import cmath
import math
from typing import Callable, Iterable, Sequence

from rolemesh.channel import Role, connect, join

SIZE = 8
_STAGES = 3
# Role i starts from the input element at the bit-reversed index of i.
_INPUT_ORDER = (0, 4, 2, 6, 1, 5, 3, 7)


def zip_with(
    x: Iterable[complex],
    y: Iterable[complex],
    f: Callable[[complex, complex], complex],
) -> list[complex]:
    """Combine two sequences element by element with ``f``."""
    return [f(a, b) for a, b in zip(x, y)]


def rotate_90(value: complex) -> complex:
    """Rotate a complex number by 90 degrees clockwise."""
    return complex(value.imag, -value.real)


def rotate_45(value: complex) -> complex:
    """Rotate a complex number by 45 degrees clockwise."""
    return (rotate_90(value) + value) * math.sqrt(0.5)


def rotate_135(value: complex) -> complex:
    """Rotate a complex number by 135 degrees clockwise."""
    return (rotate_90(value) - value) * math.sqrt(0.5)


def fft8(vector: Sequence[complex]) -> list[complex]:
    """Forward discrete Fourier transform of eight values."""
    values = [complex(v) for v in vector]
    if len(values) != SIZE:
        raise ValueError(f"expected {SIZE} values, got {len(values)}")
    return [
        sum(x * cmath.exp(-2j * math.pi * k * n / SIZE) for n, x in enumerate(values))
        for k in range(SIZE)
    ]


def _twiddle(k: int) -> complex:
    return cmath.exp(-2j * math.pi * k / SIZE)


async def process(role: Role, index: int, value: complex, peers: Sequence[str]) -> complex:
    """Run the three butterfly stages for role ``index`` against ``peers``."""
    if len(peers) != _STAGES:
        raise ValueError(f"expected {_STAGES} peers, got {len(peers)}")
    angles = (_twiddle(0), _twiddle(2 * (index % 2)), _twiddle(index % 4))
    x = complex(value)
    for stage, (peer, angle) in enumerate(zip(peers, angles)):
        await role.send(peer, x)
        y = await role.receive(peer, complex)
        x = y - angle * x if index & (1 << stage) else x + angle * y
    return x


async def _run(values: list[complex]) -> list[complex]:
    names = [f"P{i}" for i in range(SIZE)]
    roles = connect(*names)
    tasks = (
        process(role, i, values[_INPUT_ORDER[i]], [names[i ^ (1 << j)] for j in range(_STAGES)])
        for i, role in enumerate(roles)
    )
    return list(await join(*tasks))


def run(values: Sequence[complex]) -> list[complex]:
    """Transform eight values with one role per element."""
    vector = [complex(v) for v in values]
    if len(vector) != SIZE:
        raise ValueError(f"expected {SIZE} values, got {len(vector)}")
    return asyncio.run(_run(vector))


def _format_complex(value: complex) -> str:
    if value.imag < 0:
        return f"{value.real:.3f}-{-value.imag:.3f}i"
    return f"{value.real:.3f}+{value.imag:.3f}i"


def format_vector(values: Sequence[complex]) -> str:
    """Render complex values one per line inside brackets."""
    if not values:
        return "[]"
    lines = "".join(f"    {_format_complex(complex(v))},\n" for v in values)
    return f"[\n{lines}]"