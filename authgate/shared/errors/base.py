# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from http import HTTPStatus
from typing import Any, cast


@dataclass(slots=True)
class AppError(Exception):
    code: str
    status: HTTPStatus
    message: str = ""
    context: Mapping[str, Any] | None = None

    def __post_init__(self) -> None:
        Exception.__init__(self, self.code)


class DomainError(AppError):
    def __init__(
        self,
        *,
        code: str | None = None,
        status: HTTPStatus | None = None,
        message: str | None = None,
        context: Mapping[str, Any] | None = None,
    ) -> None:
        resolved_code = code or cast(str, getattr(self, "code", "domain_error"))
        resolved_status = status or cast(
            HTTPStatus, getattr(self, "status", HTTPStatus.BAD_REQUEST)
        )
        resolved_message = (
            message if message is not None else cast(str, getattr(self, "message", ""))
        )
        super().__init__(
            code=resolved_code,
            status=resolved_status,
            message=resolved_message,
            context=context,
        )


class InfrastructureError(AppError):
    def __init__(
        self,
        code: str = "infrastructure_error",
        *,
        status: HTTPStatus | None = None,
        context: Mapping[str, Any] | None = None,
    ) -> None:
        resolved_status = status or HTTPStatus.INTERNAL_SERVER_ERROR
        super().__init__(code=code, status=resolved_status, context=context)


class DecodeError(AppError):
    """Raised when raw request bytes or a request body cannot be decoded."""

    def __init__(
        self,
        reason: str = "decode_error",
        *,
        status: HTTPStatus = HTTPStatus.BAD_REQUEST,
    ) -> None:
        super().__init__(code="decode_error", status=status, context={"reason": reason})

    @property
    def reason(self) -> str:
        return str((self.context or {}).get("reason", ""))


class InvalidBodyError(DecodeError):
    def __init__(self, reason: str = "body not valid") -> None:
        super().__init__(reason)


class RequestTooLargeError(DecodeError):
    def __init__(self, size: int, limit: int) -> None:
        super().__init__(
            f"request of {size} bytes exceeds {limit} bytes",
            status=HTTPStatus.REQUEST_ENTITY_TOO_LARGE,
        )
