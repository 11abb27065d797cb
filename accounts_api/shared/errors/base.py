# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from http import HTTPStatus
from typing import Any


@dataclass(slots=True)
class AppError(Exception):
    code: str
    status: HTTPStatus
    context: Mapping[str, Any] | None = None

    def __post_init__(self) -> None:
        Exception.__init__(self, self.code)

    def __str__(self) -> str:
        if not self.context:
            return self.code
        details = " ".join(f"{key}={value}" for key, value in self.context.items())
        return f"{self.code} ({details})"

    def to_dict(self) -> dict[str, Any]:
        payload: dict[str, Any] = {"error": self.code}
        if self.context:
            payload["context"] = dict(self.context)
        return payload


class DomainError(AppError):
    """A business rule rejected the operation.

    Subclasses name the failure through ``default_code`` and
    ``default_status`` and only pass per-instance context.
    """

    default_code = "domain_error"
    default_status = HTTPStatus.BAD_REQUEST

    def __init__(self, *, context: Mapping[str, Any] | None = None) -> None:
        super().__init__(code=self.default_code, status=self.default_status, context=context)


class InfrastructureError(AppError):
    def __init__(
        self,
        code: str = "infrastructure_error",
        *,
        status: HTTPStatus = HTTPStatus.INTERNAL_SERVER_ERROR,
        context: Mapping[str, Any] | None = None,
    ) -> None:
        super().__init__(code=code, status=status, context=context)


class ServiceUnavailableError(InfrastructureError):
    def __init__(self, service: str) -> None:
        super().__init__(
            "service_unavailable",
            status=HTTPStatus.SERVICE_UNAVAILABLE,
            context={"service": service},
        )
