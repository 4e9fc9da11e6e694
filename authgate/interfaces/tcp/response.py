# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

from __future__ import annotations

import json
from dataclasses import dataclass
from http import HTTPStatus
from typing import Any

JSON_CONTENT_TYPE = "application/json"


@dataclass(slots=True, frozen=True)
class Response:
    status: HTTPStatus
    body: str = ""
    content_type: str | None = None

    @classmethod
    def json(cls, payload: Any, status: HTTPStatus = HTTPStatus.OK) -> Response:
        return cls(status=status, body=json.dumps(payload), content_type=JSON_CONTENT_TYPE)

    @property
    def status_line(self) -> str:
        return f"HTTP/1.1 {int(self.status)} {self.status.phrase}"

    def to_bytes(self) -> bytes:
        head = self.status_line + "\r\n"
        if self.content_type:
            head += f"Content-Type: {self.content_type}\r\n"
        return (head + "\r\n" + self.body).encode("utf-8")


NOT_FOUND = Response(status=HTTPStatus.NOT_FOUND, body="404 Not Found")
