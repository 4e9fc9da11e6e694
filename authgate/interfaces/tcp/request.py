# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

"""Decoding of the minimal HTTP/1.1 subset spoken on the wire.

One request per connection: a request line, header lines, a blank line and an
optional body sized by ``Content-Length``. No chunked encoding, no keep-alive.
"""

from __future__ import annotations

import socket
from dataclasses import dataclass, field
from enum import Enum

from authgate.shared.errors.base import DecodeError, RequestTooLargeError

HEADER_DELIMITER = "\r\n\r\n"
_HEADER_DELIMITER_BYTES = HEADER_DELIMITER.encode("ascii")


class Method(str, Enum):
    GET = "GET"
    POST = "POST"

    @classmethod
    def parse(cls, value: str) -> Method:
        try:
            return cls(value)
        except ValueError:
            raise DecodeError("unsupported method") from None


@dataclass(slots=True)
class Request:
    method: Method
    path: str
    headers: dict[str, str] = field(default_factory=dict)
    body: str = ""
    protocol: str | None = None

    def header(self, name: str) -> str | None:
        return self.headers.get(name.lower())


def decode_request(raw: bytes | str) -> Request:
    text = raw.decode("utf-8", errors="replace") if isinstance(raw, bytes) else raw

    head, _, body = text.partition(HEADER_DELIMITER)
    lines = head.splitlines()
    if not lines or not lines[0].strip():
        raise DecodeError("empty request")

    parts = lines[0].split()
    method = Method.parse(parts[0])
    if len(parts) < 2:
        raise DecodeError("missing path")
    path = parts[1]
    protocol = parts[2] if len(parts) > 2 else None

    headers: dict[str, str] = {}
    for line in lines[1:]:
        key, sep, value = line.partition(":")
        if not sep:
            continue
        headers[key.strip().lower()] = value.strip()

    return Request(method=method, path=path, headers=headers, body=body, protocol=protocol)


def _content_length(head: bytes) -> int | None:
    for line in head.decode("latin-1").split("\r\n")[1:]:
        key, sep, value = line.partition(":")
        if sep and key.strip().lower() == "content-length":
            try:
                return max(int(value.strip()), 0)
            except ValueError:
                raise DecodeError("invalid content-length") from None
    return None


def read_request(
    sock: socket.socket,
    *,
    buffer_size: int = 1024,
    max_request_size: int = 64 * 1024,
) -> bytes | None:
    """Read one request: headers up to the blank line, then ``Content-Length`` body bytes.

    Without a ``Content-Length`` header the body is whatever arrived with the
    headers. Returns ``None`` when the peer closes before sending anything. Raises
    ``RequestTooLargeError`` once more than ``max_request_size`` bytes would be
    buffered, and lets ``socket.timeout`` propagate to the caller.
    """
    buffer = bytearray()

    while _HEADER_DELIMITER_BYTES not in buffer:
        chunk = sock.recv(buffer_size)
        if not chunk:
            return bytes(buffer) if buffer else None
        buffer += chunk
        if len(buffer) > max_request_size:
            raise RequestTooLargeError(len(buffer), max_request_size)

    header_end = buffer.index(_HEADER_DELIMITER_BYTES)
    body_start = header_end + len(_HEADER_DELIMITER_BYTES)
    content_length = _content_length(bytes(buffer[:header_end]))
    if content_length is None:
        return bytes(buffer)

    expected = body_start + content_length
    if expected > max_request_size:
        raise RequestTooLargeError(expected, max_request_size)

    while len(buffer) < expected:
        chunk = sock.recv(min(buffer_size, expected - len(buffer)))
        if not chunk:
            break
        buffer += chunk

    return bytes(buffer[:expected])
