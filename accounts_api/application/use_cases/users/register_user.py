# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

from __future__ import annotations

from datetime import UTC, datetime

from pydantic import ValidationError

from accounts_api.application.results import MutationResult
from accounts_api.application.services.validation import RegisterInput
from accounts_api.domain.users.entities import User
from accounts_api.domain.users.exceptions import UserAlreadyExistsError
from accounts_api.domain.users.repositories import (
    PasswordHasher,
    SessionHandle,
    UserRepository,
)
from accounts_api.shared.errors.validation import format_field_errors
from accounts_api.shared.logging import logger

_TAKEN_MESSAGES = {
    "username": "Username already taken",
    "email": "Email already taken",
}


def _duplicate(field: str) -> MutationResult:
    return MutationResult.field_error(
        "Duplicated username or email", field, _TAKEN_MESSAGES.get(field, "Already taken")
    )


class RegisterUserUseCase:
    def __init__(
        self,
        *,
        users: UserRepository,
        password_hasher: PasswordHasher,
    ) -> None:
        self._users = users
        self._password_hasher = password_hasher

    def execute(
        self, username: str, email: str, password: str, session: SessionHandle
    ) -> MutationResult:
        try:
            data = RegisterInput(username=username, email=email, password=password)
        except ValidationError as exc:
            errors = format_field_errors(exc)
            logger.debug(f"auth.register: rejected input fields={[e.field for e in errors]}")
            return MutationResult.invalid(errors[0].message, errors)

        try:
            existing = self._users.find_by_username_or_email(data.username, data.email)
            if existing:
                field = "username" if existing.username == data.username else "email"
                return _duplicate(field)

            now = datetime.now(UTC)
            hashed = self._password_hasher.hash(data.password)
            user = User(
                id=0,
                username=data.username,
                email=data.email,
                password_hash=hashed,
                created_at=now,
                updated_at=now,
            )
            persisted = self._users.add(user)
        except UserAlreadyExistsError as exc:
            logger.info(f"auth.register: lost insert race on field={exc.field}")
            return _duplicate(exc.field)
        except Exception as exc:
            logger.exception("auth.register: failed")
            return MutationResult.internal_error(exc)

        session.user_id = persisted.id
        logger.info(f"auth.register: ok user_id={persisted.id}")
        return MutationResult.ok("User registration successful", persisted)
