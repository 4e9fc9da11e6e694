# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

from __future__ import annotations

from typing import Any, NoReturn

from pydantic import ValidationError as PydanticValidationError

from authgate.shared.logging import logger

from .base import InvalidBodyError


def format_pydantic_errors(exc: PydanticValidationError) -> dict[str, Any]:
    errors_list = []
    fields_set = set()

    for error in exc.errors(include_input=False):
        loc = error.get("loc", ())
        field_path = ".".join(str(part) for part in loc if part is not None)

        if field_path:
            fields_set.add(field_path)

        errors_list.append(
            {
                "field": field_path or "unknown",
                "type": error.get("type", "value_error"),
            }
        )

    return {
        "fields": sorted(fields_set),
        "errors": errors_list,
    }


def raise_invalid_body(exc: PydanticValidationError) -> NoReturn:
    context = format_pydantic_errors(exc)
    logger.info(f"request.body: rejected fields={context['fields']}")
    raise InvalidBodyError() from exc


__all__ = [
    "format_pydantic_errors",
    "raise_invalid_body",
]
