# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

from __future__ import annotations

from functools import cached_property

import redis

from accounts_api.application.services.password_hashing import \
    WerkzeugPasswordHasher
from accounts_api.application.use_cases.users.change_password import \
    ChangePasswordUseCase
from accounts_api.application.use_cases.users.forgot_password import \
    ForgotPasswordUseCase
from accounts_api.application.use_cases.users.get_current_user import \
    GetCurrentUserUseCase
from accounts_api.application.use_cases.users.login_user import LoginUserUseCase
from accounts_api.application.use_cases.users.logout_user import LogoutUserUseCase
from accounts_api.application.use_cases.users.register_user import \
    RegisterUserUseCase
from accounts_api.domain.users.repositories import (Mailer, PasswordHasher,
                                                    SessionStore, TokenCache,
                                                    UserRepository)
from accounts_api.infrastructure.cache import InMemoryTokenCache, RedisTokenCache
from accounts_api.infrastructure.mail import LoggingMailer, SmtpMailer
from accounts_api.infrastructure.repositories.users.sqlalchemy_user_repository import \
    SqlAlchemyUserRepository
from accounts_api.infrastructure.sessions import (InMemorySessionStore,
                                                  RedisSessionStore,
                                                  ServerSideSessionInterface)
from accounts_api.interfaces.http.controllers.auth_controller import AuthController
from accounts_api.shared.config import AppConfig, load_config
from accounts_api.shared.logging import logger


class Container:
    def __init__(self, config: AppConfig | None = None) -> None:
        self.config = config or load_config()

    @cached_property
    def redis_client(self) -> redis.Redis:
        logger.info("container: connecting redis client")
        return redis.Redis.from_url(self.config.cache.redis_url, decode_responses=True)

    @cached_property
    def password_hasher(self) -> PasswordHasher:
        return WerkzeugPasswordHasher()

    @cached_property
    def user_repository(self) -> UserRepository:
        return SqlAlchemyUserRepository()

    @cached_property
    def token_cache(self) -> TokenCache:
        if self.config.cache.backend == "redis":
            return RedisTokenCache(self.redis_client)
        return InMemoryTokenCache()

    @cached_property
    def session_store(self) -> SessionStore:
        if self.config.session.backend == "redis":
            return RedisSessionStore(self.redis_client, key_prefix=self.config.session.key_prefix)
        return InMemorySessionStore()

    @cached_property
    def session_interface(self) -> ServerSideSessionInterface:
        return ServerSideSessionInterface(self.session_store, max_age=self.config.session.max_age)

    @cached_property
    def mailer(self) -> Mailer:
        mail = self.config.mail
        if mail.backend == "smtp":
            return SmtpMailer(
                host=mail.smtp_host,
                port=mail.smtp_port,
                sender=mail.sender,
                username=mail.smtp_username,
                password=mail.smtp_password,
                use_tls=mail.smtp_use_tls,
                timeout=mail.smtp_timeout,
            )
        return LoggingMailer(mail.sender)

    @cached_property
    def register_user_use_case(self) -> RegisterUserUseCase:
        return RegisterUserUseCase(
            users=self.user_repository,
            password_hasher=self.password_hasher,
        )

    @cached_property
    def login_user_use_case(self) -> LoginUserUseCase:
        return LoginUserUseCase(
            users=self.user_repository,
            password_hasher=self.password_hasher,
        )

    @cached_property
    def logout_user_use_case(self) -> LogoutUserUseCase:
        return LogoutUserUseCase(sessions=self.session_store)

    @cached_property
    def forgot_password_use_case(self) -> ForgotPasswordUseCase:
        return ForgotPasswordUseCase(
            users=self.user_repository,
            tokens=self.token_cache,
            mailer=self.mailer,
            frontend_url=self.config.frontend_url,
            token_prefix=self.config.cache.forget_password_prefix,
            token_ttl_seconds=self.config.cache.reset_token_ttl,
        )

    @cached_property
    def change_password_use_case(self) -> ChangePasswordUseCase:
        return ChangePasswordUseCase(
            users=self.user_repository,
            tokens=self.token_cache,
            password_hasher=self.password_hasher,
            token_prefix=self.config.cache.forget_password_prefix,
        )

    @cached_property
    def get_current_user_use_case(self) -> GetCurrentUserUseCase:
        return GetCurrentUserUseCase(users=self.user_repository)

    @cached_property
    def auth_controller(self) -> AuthController:
        return AuthController(
            register_use_case=self.register_user_use_case,
            login_use_case=self.login_user_use_case,
            logout_use_case=self.logout_user_use_case,
            forgot_password_use_case=self.forgot_password_use_case,
            change_password_use_case=self.change_password_use_case,
            current_user_use_case=self.get_current_user_use_case,
        )
