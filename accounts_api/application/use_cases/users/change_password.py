# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

from __future__ import annotations

from accounts_api.application.results import MutationResult
from accounts_api.application.services.validation import MIN_LENGTH_MESSAGE
from accounts_api.domain.users.exceptions import InvalidResetTokenError
from accounts_api.domain.users.repositories import (
    CachedValue,
    PasswordHasher,
    SessionHandle,
    TokenCache,
    UserRepository,
)
from accounts_api.shared.logging import logger

INVALID_TOKEN_MESSAGE = "Invalid or expired password reset token"
MISSING_USER_MESSAGE = "User no longer exists"


def _parse_user_id(raw: str) -> int | None:
    try:
        return int(str(raw).strip())
    except ValueError:
        return None


class ChangePasswordUseCase:
    """Reset a password with a mailed token.

    The token is taken out of the cache before anything else happens, so two
    requests racing on one token cannot both get through. Only a successful
    reset keeps it consumed: every other outcome after the take puts it back
    with the lifetime it had left.
    """

    def __init__(
        self,
        *,
        users: UserRepository,
        tokens: TokenCache,
        password_hasher: PasswordHasher,
        token_prefix: str,
    ) -> None:
        self._users = users
        self._tokens = tokens
        self._password_hasher = password_hasher
        self._token_prefix = token_prefix

    def execute(
        self, token: str, user_id: str, new_password: str, session: SessionHandle
    ) -> MutationResult:
        if len(new_password) <= 2:
            return MutationResult.field_error("Invalid password", "newPassword", MIN_LENGTH_MESSAGE)

        key = f"{self._token_prefix}{token}"
        try:
            taken = self._tokens.take(key)
            if taken is None:
                raise InvalidResetTokenError()
        except InvalidResetTokenError:
            logger.info("auth.change_password: invalid or expired token")
            return MutationResult.field_error(INVALID_TOKEN_MESSAGE, "token")
        except Exception as exc:
            logger.exception("auth.change_password: token lookup failed")
            return MutationResult.internal_error(exc)

        try:
            result = self._reset(taken, user_id, new_password, session)
        except Exception as exc:
            logger.exception("auth.change_password: failed")
            self._put_back(key, taken)
            return MutationResult.internal_error(exc)

        if not result.success:
            self._put_back(key, taken)
        return result

    def _reset(
        self, taken: CachedValue, user_id: str, new_password: str, session: SessionHandle
    ) -> MutationResult:
        target_id = _parse_user_id(user_id)
        if target_id is None or target_id != _parse_user_id(taken.value):
            logger.info(f"auth.change_password: userId does not match token owner user_id={user_id}")
            return MutationResult.field_error(MISSING_USER_MESSAGE, "token")

        user = self._users.find_by_id(target_id)
        if user is None:
            logger.info(f"auth.change_password: token owner no longer exists user_id={target_id}")
            return MutationResult.field_error(MISSING_USER_MESSAGE, "token")

        updated = self._users.update_password(user.id, self._password_hasher.hash(new_password))
        if updated is None:
            logger.info(f"auth.change_password: token owner removed during reset user_id={target_id}")
            return MutationResult.field_error(MISSING_USER_MESSAGE, "token")

        session.user_id = updated.id
        logger.info(f"auth.change_password: ok user_id={updated.id}")
        return MutationResult.ok("User password reset successfully", updated)

    def _put_back(self, key: str, taken: CachedValue) -> None:
        if taken.ttl_seconds <= 0:
            return
        try:
            self._tokens.set(key, taken.value, taken.ttl_seconds)
        except Exception as exc:
            logger.warning(f"auth.change_password: could not return token to cache: {exc!r}")
