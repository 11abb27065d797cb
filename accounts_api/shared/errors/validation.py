# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

from __future__ import annotations

from pydantic import ValidationError as PydanticValidationError

from accounts_api.domain.users.entities import FieldError


def format_field_errors(exc: PydanticValidationError) -> list[FieldError]:
    """Flatten pydantic errors into ordered ``FieldError`` entries.

    The reported field is the alias of the failing input (``usernameOrEmail``
    rather than ``username_or_email``) so clients can map errors back onto
    their form fields.
    """
    errors: list[FieldError] = []
    seen: set[str] = set()

    for error in exc.errors():
        loc = error.get("loc", ())
        field_path = ".".join(str(part) for part in loc if part is not None) or "unknown"
        if field_path in seen:
            continue
        seen.add(field_path)

        message = str(error.get("msg", "Invalid value"))
        if message.startswith("Value error, "):
            message = message[len("Value error, "):]
        errors.append(FieldError(field=field_path, message=message))

    return errors


__all__ = ["format_field_errors"]
