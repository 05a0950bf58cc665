"""Cached HTTP responses and their storage format."""

from __future__ import annotations

import base64
import json
from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from typing import Union

Headers = tuple[tuple[str, str], ...]
HeaderSource = Union[Mapping[str, str], Iterable[tuple[str, str]]]


def _pairs(headers: HeaderSource) -> Headers:
    items = headers.items() if isinstance(headers, Mapping) else headers
    return tuple((str(name), str(value)) for name, value in items)


@dataclass(frozen=True)
class Response:
    """An HTTP response held entirely in memory."""

    status: int
    headers: Headers = ()
    body: bytes = b""

    def __post_init__(self) -> None:
        if isinstance(self.status, bool) or not isinstance(self.status, int):
            raise ValueError(f"status must be an integer, got {self.status!r}")
        if not 100 <= self.status <= 999:
            raise ValueError(f"invalid status code {self.status}")
        object.__setattr__(self, "headers", _pairs(self.headers))
        object.__setattr__(self, "body", bytes(self.body))


@dataclass(frozen=True)
class Entry:
    """A cached response together with the entity tag it was served with."""

    etag: bytes
    response: Response


def _b64(data: bytes) -> str:
    return base64.b64encode(data).decode("ascii")


def _unb64(text: str) -> bytes:
    if not isinstance(text, str):
        raise TypeError("expected base64 text")
    return base64.b64decode(text, validate=True)


def encode_entry(entry: Entry) -> bytes:
    """Serialise a cache entry to bytes for storage."""
    document = {
        "etag": _b64(entry.etag),
        "response": {
            "status": entry.response.status,
            "headers": [list(pair) for pair in entry.response.headers],
            "body": _b64(entry.response.body),
        },
    }
    return json.dumps(document, separators=(",", ":")).encode("utf-8")


def decode_entry(data: bytes) -> Entry:
    """Parse bytes written by :func:`encode_entry`; raise ValueError if malformed."""
    try:
        document = json.loads(data)
        response = document["response"]
        headers = tuple((name, value) for name, value in response["headers"])
        if not all(isinstance(part, str) for pair in headers for part in pair):
            raise TypeError("header names and values must be text")
        return Entry(
            etag=_unb64(document["etag"]),
            response=Response(
                status=response["status"],
                headers=headers,
                body=_unb64(response["body"]),
            ),
        )
    except (ValueError, KeyError, TypeError) as err:
        raise ValueError(f"malformed cache entry: {err}") from err