# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

from .users.entities import FieldError, PasswordResetToken, User
from .users.exceptions import (
    InvalidCredentialsError,
    InvalidResetTokenError,
    MailDeliveryError,
    SessionStoreError,
    UserAlreadyExistsError,
)

__all__ = [
    "FieldError",
    "PasswordResetToken",
    "User",
    "InvalidCredentialsError",
    "InvalidResetTokenError",
    "MailDeliveryError",
    "SessionStoreError",
    "UserAlreadyExistsError",
]
