"""A vectorised eight-point FFT where each role runs one row of butterflies.

Role ``i`` starts from row ``i`` of the input and meets the roles ``i ^ 4``,
``i ^ 2`` and ``i ^ 1`` in turn. Its final row is the output row at the
bit-reversed index of ``i``.
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass
from typing import Callable, Sequence

from rolemesh.channel import Role, connect, join
from rolemesh.fft import rotate_45, rotate_90, rotate_135, zip_with

SIZE = 8
_OUTPUT_ORDER = (0, 4, 2, 6, 1, 5, 3, 7)

Combine = Callable[[complex, complex], complex]


def _add(x: complex, y: complex) -> complex:
    return x + y


def _sub(x: complex, y: complex) -> complex:
    return y - x


def _sub_90(x: complex, y: complex) -> complex:
    return rotate_90(y - x)


def _add_45(x: complex, y: complex) -> complex:
    return rotate_45(x + y)


def _sub_135(x: complex, y: complex) -> complex:
    return rotate_135(y - x)


@dataclass(frozen=True)
class _Stage:
    peer: str
    receive_first: bool
    combine: Combine


_SCHEDULE: tuple[tuple[_Stage, ...], ...] = (
    (_Stage("R4", False, _add), _Stage("R2", False, _add), _Stage("R1", False, _add)),
    (_Stage("R5", False, _add), _Stage("R3", False, _add), _Stage("R0", True, _sub)),
    (_Stage("R6", False, _add), _Stage("R0", True, _sub), _Stage("R3", False, _add)),
    (_Stage("R7", False, _add), _Stage("R1", True, _sub_90), _Stage("R2", True, _sub)),
    (_Stage("R0", True, _sub), _Stage("R6", False, _add), _Stage("R5", False, _add)),
    (_Stage("R1", True, _sub), _Stage("R7", False, _add_45), _Stage("R4", True, _sub)),
    (_Stage("R2", True, _sub_90), _Stage("R4", True, _sub), _Stage("R7", False, _add)),
    (_Stage("R3", True, _sub_90), _Stage("R5", True, _sub_135), _Stage("R6", True, _sub)),
)


async def butterfly(
    role: Role, index: int, x: Sequence[complex], optimized: bool = False
) -> list[complex]:
    """Run the three butterfly stages of role ``index`` on the row ``x``.

    When ``optimized`` is set every stage sends before it receives, which the
    unbounded channels allow without changing the result.
    """
    if not 0 <= index < SIZE:
        raise ValueError(f"role index must be in 0..{SIZE - 1}, got {index}")
    row = [complex(v) for v in x]
    for stage in _SCHEDULE[index]:
        if stage.receive_first and not optimized:
            other = await role.receive(stage.peer, tuple)
            await role.send(stage.peer, tuple(row))
        else:
            await role.send(stage.peer, tuple(row))
            other = await role.receive(stage.peer, tuple)
        row = zip_with(row, other, stage.combine)
    return row


def _check_rows(rows: Sequence[Sequence[complex]]) -> list[list[complex]]:
    checked = [[complex(v) for v in row] for row in rows]
    if len(checked) != SIZE:
        raise ValueError(f"expected {SIZE} rows, got {len(checked)}")
    return checked


async def _run(rows: list[list[complex]], optimized: bool) -> list[list[complex]]:
    roles = connect(*(f"R{i}" for i in range(SIZE)))
    results = await join(
        *(butterfly(role, i, row, optimized) for i, (role, row) in enumerate(zip(roles, rows)))
    )
    output: list[list[complex]] = [[] for _ in range(SIZE)]
    for i, result in enumerate(results):
        output[_OUTPUT_ORDER[i]] = result
    return output


def run(rows: Sequence[Sequence[complex]]) -> list[list[complex]]:
    """Transform eight rows column by column; return the eight output rows."""
    return asyncio.run(_run(_check_rows(rows), False))


def run_optimized(rows: Sequence[Sequence[complex]]) -> list[list[complex]]:
    """Like :func:`run`, with every role sending before it receives."""
    return asyncio.run(_run(_check_rows(rows), True))


def transpose(columns: Sequence[Sequence[complex]]) -> list[list[complex]]:
    """Turn a sequence of eight-value columns into eight rows."""
    rows: list[list[complex]] = [[] for _ in range(SIZE)]
    for column in columns:
        values = list(column)
        if len(values) != SIZE:
            raise ValueError(f"expected columns of {SIZE} values, got {len(values)}")
        for row, value in zip(rows, values):
            row.append(value)
    return rows