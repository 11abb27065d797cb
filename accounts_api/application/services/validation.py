# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

"""Input models for the account operations."""

from __future__ import annotations

from pydantic import BaseModel, field_validator

MIN_LENGTH_MESSAGE = "Length must be greater than 2"


def _check_length(value: str) -> str:
    if len(value) <= 2:
        raise ValueError(MIN_LENGTH_MESSAGE)
    return value


class RegisterInput(BaseModel):
    username: str
    email: str
    password: str

    @field_validator("username")
    @classmethod
    def validate_username(cls, value: str) -> str:
        _check_length(value)
        if "@" in value:
            raise ValueError("Username cannot include @")
        return value

    @field_validator("email")
    @classmethod
    def validate_email(cls, value: str) -> str:
        if "@" not in value:
            raise ValueError("Invalid email")
        return value

    @field_validator("password")
    @classmethod
    def validate_password(cls, value: str) -> str:
        return _check_length(value)


__all__ = [
    "MIN_LENGTH_MESSAGE",
    "RegisterInput",
]
