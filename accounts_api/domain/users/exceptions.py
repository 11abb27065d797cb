# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

from __future__ import annotations

from http import HTTPStatus

from accounts_api.shared.errors.base import DomainError, InfrastructureError


class UserAlreadyExistsError(DomainError):
    default_code = "user_already_exists"
    default_status = HTTPStatus.CONFLICT

    def __init__(self, field: str) -> None:
        super().__init__(context={"field": field})
        self.field = field


class InvalidCredentialsError(DomainError):
    default_code = "invalid_credentials"
    default_status = HTTPStatus.UNAUTHORIZED

    def __init__(self, field: str) -> None:
        super().__init__(context={"field": field})
        self.field = field


class InvalidResetTokenError(DomainError):
    default_code = "invalid_reset_token"


class SessionStoreError(InfrastructureError):
    def __init__(self, operation: str) -> None:
        super().__init__("session_store_error", context={"operation": operation})


class MailDeliveryError(InfrastructureError):
    def __init__(self, reason: str) -> None:
        super().__init__(
            "mail_delivery_failed",
            status=HTTPStatus.BAD_GATEWAY,
            context={"reason": reason},
        )
