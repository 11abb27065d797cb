# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

from __future__ import annotations

from accounts_api.application.results import MutationResult
from accounts_api.domain.users.exceptions import InvalidCredentialsError
from accounts_api.domain.users.repositories import (
    PasswordHasher,
    SessionHandle,
    UserRepository,
)
from accounts_api.shared.logging import logger


class LoginUserUseCase:
    def __init__(
        self,
        *,
        users: UserRepository,
        password_hasher: PasswordHasher,
    ) -> None:
        self._users = users
        self._password_hasher = password_hasher

    def execute(
        self, username_or_email: str, password: str, session: SessionHandle
    ) -> MutationResult:
        try:
            if "@" in username_or_email:
                user = self._users.find_by_email(username_or_email)
            else:
                user = self._users.find_by_username(username_or_email)

            if user is None:
                raise InvalidCredentialsError("usernameOrEmail")
            if not self._password_hasher.verify(password, user.password_hash):
                raise InvalidCredentialsError("password")
        except InvalidCredentialsError as exc:
            logger.info(f"auth.login: rejected field={exc.field}")
            if exc.field == "usernameOrEmail":
                return MutationResult.field_error(
                    "User not found", "usernameOrEmail", "Username or email incorrect"
                )
            return MutationResult.field_error("Wrong password", "password")
        except Exception as exc:
            logger.exception("auth.login: failed")
            return MutationResult.internal_error(exc)

        session.user_id = user.id
        logger.info(f"auth.login: ok user_id={user.id}")
        return MutationResult.ok("Logged in successfully", user)
