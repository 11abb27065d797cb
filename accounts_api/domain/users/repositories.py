# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any, Protocol

from .entities import User


@dataclass(slots=True, frozen=True)
class CachedValue:
    """A value removed from the token cache together with the lifetime it had left."""

    value: str
    ttl_seconds: int


class UserRepository(Protocol):
    def find_by_id(self, user_id: int) -> User | None: ...
    def find_by_username(self, username: str) -> User | None: ...
    def find_by_email(self, email: str) -> User | None: ...
    def find_by_username_or_email(self, username: str, email: str) -> User | None: ...
    def add(self, user: User) -> User: ...
    def update_password(self, user_id: int, password_hash: str) -> User | None: ...


class TokenCache(Protocol):
    def set(self, key: str, value: str, ttl_seconds: int) -> None: ...
    def get(self, key: str) -> str | None: ...
    def delete(self, key: str) -> None: ...
    def take(self, key: str) -> CachedValue | None: ...


class SessionStore(Protocol):
    def load(self, session_id: str) -> dict[str, Any] | None: ...
    def save(self, session_id: str, data: Mapping[str, Any], ttl_seconds: int) -> None: ...
    def destroy(self, session_id: str) -> None: ...


class SessionHandle(Protocol):
    """The current request's session as seen by the auth workflow."""

    sid: str
    user_id: int | None

    def invalidate(self) -> None: ...


class PasswordHasher(Protocol):
    def hash(self, password: str) -> str: ...
    def verify(self, password: str, hashed: str) -> bool: ...


class Mailer(Protocol):
    def send(self, to: str, subject: str, html: str) -> None: ...
