# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

"""Uniform result shape returned by every account mutation."""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass, field
from http import HTTPStatus
from typing import Any

from accounts_api.domain.users.entities import FieldError, User


@dataclass(slots=True, frozen=True)
class MutationResult:
    code: int
    success: bool
    message: str
    errors: tuple[FieldError, ...] = field(default_factory=tuple)
    user: User | None = None

    @classmethod
    def ok(cls, message: str, user: User) -> MutationResult:
        return cls(code=HTTPStatus.OK, success=True, message=message, user=user)

    @classmethod
    def invalid(cls, message: str, errors: Sequence[FieldError]) -> MutationResult:
        return cls(
            code=HTTPStatus.BAD_REQUEST,
            success=False,
            message=message,
            errors=tuple(errors),
        )

    @classmethod
    def field_error(cls, message: str, field_name: str, field_message: str | None = None) -> MutationResult:
        return cls.invalid(message, [FieldError(field=field_name, message=field_message or message)])

    @classmethod
    def internal_error(cls, exc: BaseException) -> MutationResult:
        return cls(
            code=HTTPStatus.INTERNAL_SERVER_ERROR,
            success=False,
            message=f"Internal server error {exc}",
        )

    def to_dict(self) -> dict[str, Any]:
        payload: dict[str, Any] = {
            "code": int(self.code),
            "success": self.success,
            "message": self.message,
        }
        if self.errors:
            payload["errors"] = [error.to_dict() for error in self.errors]
        return payload


__all__ = ["MutationResult"]
