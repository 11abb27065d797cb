from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field, field_validator

from accounts_api.domain.users.entities import User


class RegisterRequestDTO(BaseModel):
    username: str
    email: str
    password: str


class LoginRequestDTO(BaseModel):
    model_config = ConfigDict(validate_by_name=True)

    username_or_email: str = Field(alias="usernameOrEmail")
    password: str


class ForgotPasswordRequestDTO(BaseModel):
    email: str


class ChangePasswordRequestDTO(BaseModel):
    model_config = ConfigDict(validate_by_name=True)

    token: str
    user_id: str = Field(alias="userId")
    new_password: str = Field(alias="newPassword")

    @field_validator("user_id", mode="before")
    @classmethod
    def _coerce_user_id(cls, value: object) -> object:
        if isinstance(value, int) and not isinstance(value, bool):
            return str(value)
        return value


class UserDTO(BaseModel):
    id: int
    username: str
    email: str
    created_at: datetime = Field(serialization_alias="createdAt")
    updated_at: datetime = Field(serialization_alias="updatedAt")

    @classmethod
    def from_user(cls, user: User, *, viewer_id: int | None) -> UserDTO:
        # Only the account owner gets to see the address.
        return cls(
            id=user.id,
            username=user.username,
            email=user.email if viewer_id == user.id else "",
            created_at=user.created_at,
            updated_at=user.updated_at,
        )


class OkDTO(BaseModel):
    ok: bool = True
