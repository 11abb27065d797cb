# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

from __future__ import annotations

from dataclasses import dataclass, replace
from datetime import datetime


@dataclass(slots=True, frozen=True)
class User:

    id: int
    username: str
    email: str
    password_hash: str
    created_at: datetime
    updated_at: datetime

    def with_password(self, password_hash: str, updated_at: datetime) -> User:
        return replace(self, password_hash=password_hash, updated_at=updated_at)


@dataclass(slots=True, frozen=True)
class FieldError:

    field: str
    message: str

    def to_dict(self) -> dict[str, str]:
        return {"field": self.field, "message": self.message}


@dataclass(slots=True, frozen=True)
class PasswordResetToken:
    """A single-use reset credential as stored in the token cache."""

    token: str
    user_id: int
    ttl_seconds: int

    def cache_key(self, prefix: str) -> str:
        return f"{prefix}{self.token}"
