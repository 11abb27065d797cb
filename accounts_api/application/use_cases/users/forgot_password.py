# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

from __future__ import annotations

import uuid
from html import escape
from urllib.parse import urlencode

from accounts_api.domain.users.entities import PasswordResetToken
from accounts_api.domain.users.repositories import Mailer, TokenCache, UserRepository
from accounts_api.shared.logging import logger

RESET_SUBJECT = "Reset your password"


def build_reset_link(frontend_url: str, token: PasswordResetToken) -> str:
    query = urlencode({"token": token.token, "userId": token.user_id})
    return f"{frontend_url}/change-password?{query}"


class ForgotPasswordUseCase:
    """Issue a reset token and mail it to the account owner.

    Always answers ``True`` once the user lookup has completed, whether or not
    the address belongs to an account, so the response cannot be used to
    find out which emails are registered. Failures to store the token or to deliver
    the mail are logged and not reported to the caller.
    """

    def __init__(
        self,
        *,
        users: UserRepository,
        tokens: TokenCache,
        mailer: Mailer,
        frontend_url: str,
        token_prefix: str,
        token_ttl_seconds: int,
    ) -> None:
        self._users = users
        self._tokens = tokens
        self._mailer = mailer
        self._frontend_url = frontend_url.rstrip("/")
        self._token_prefix = token_prefix
        self._token_ttl = token_ttl_seconds

    def execute(self, email: str) -> bool:
        user = self._users.find_by_email(email)
        if user is None:
            logger.info("auth.forgot_password: no account for address")
            return True

        reset = PasswordResetToken(
            token=str(uuid.uuid4()), user_id=user.id, ttl_seconds=self._token_ttl
        )
        try:
            self._tokens.set(
                reset.cache_key(self._token_prefix), str(user.id), reset.ttl_seconds
            )
        except Exception as exc:
            logger.warning(f"auth.forgot_password: token store failed user_id={user.id}: {exc!r}")
            return True

        link = build_reset_link(self._frontend_url, reset)
        html = f'<a href="{escape(link)}">Click here to reset your password</a>'
        try:
            self._mailer.send(user.email, RESET_SUBJECT, html)
        except Exception as exc:
            logger.warning(f"auth.forgot_password: mail delivery failed user_id={user.id}: {exc!r}")
            return True

        logger.info(f"auth.forgot_password: reset link sent user_id={user.id}")
        return True
