# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

from __future__ import annotations

from http import HTTPStatus

from authgate.interfaces.tcp.response import Response
from authgate.shared.logging import logger

from .base import AppError


def handle_app_error(error: AppError) -> Response:
    if error.status >= HTTPStatus.INTERNAL_SERVER_ERROR:
        logger.error(f"Handled application error {error.code} -> {int(error.status)}")
    else:
        logger.info(f"Handled application error {error.code} -> {int(error.status)}")
    return Response(status=error.status, body=error.message)


def handle_unexpected_error(
    exc: Exception,
    *,
    debug_mode: bool = False,
    default_status: HTTPStatus = HTTPStatus.INTERNAL_SERVER_ERROR,
) -> Response:
    if debug_mode:
        logger.exception(f"Unhandled exception: {type(exc).__name__}")
    else:
        logger.error(f"Error: {type(exc).__name__}")
    return Response(status=default_status)
