# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

from .base import (
    AppError,
    DecodeError,
    DomainError,
    InfrastructureError,
    InvalidBodyError,
    RequestTooLargeError,
)
from .http import handle_app_error, handle_unexpected_error

__all__ = [
    "AppError",
    "DecodeError",
    "DomainError",
    "InfrastructureError",
    "InvalidBodyError",
    "RequestTooLargeError",
    "handle_app_error",
    "handle_unexpected_error",
]
