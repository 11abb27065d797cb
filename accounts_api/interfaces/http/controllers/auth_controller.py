# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

from __future__ import annotations

from typing import TypeVar, cast

from flask import Blueprint, Response, jsonify, request, session
from pydantic import BaseModel, ValidationError

from accounts_api.application.results import MutationResult
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
from accounts_api.domain.users.repositories import SessionHandle
from accounts_api.interfaces.http.dto.auth import (ChangePasswordRequestDTO,
                                                   ForgotPasswordRequestDTO,
                                                   LoginRequestDTO, OkDTO,
                                                   RegisterRequestDTO, UserDTO)
from accounts_api.shared.errors.validation import format_field_errors

DTO = TypeVar("DTO", bound=BaseModel)


def _current_session() -> SessionHandle:
    return cast(SessionHandle, session._get_current_object())  # type: ignore[attr-defined]


def _parse(dto_type: type[DTO]) -> DTO | MutationResult:
    try:
        return dto_type.model_validate(request.get_json(silent=True) or {})
    except ValidationError as exc:
        return MutationResult.invalid("Invalid input", format_field_errors(exc))


def _respond(result: MutationResult) -> tuple[Response, int]:
    payload = result.to_dict()
    if result.user is not None:
        viewer_id = _current_session().user_id
        payload["user"] = UserDTO.from_user(result.user, viewer_id=viewer_id).model_dump(
            mode="json", by_alias=True
        )
    return jsonify(payload), int(result.code)


class AuthController:
    def __init__(
        self,
        *,
        register_use_case: RegisterUserUseCase,
        login_use_case: LoginUserUseCase,
        logout_use_case: LogoutUserUseCase,
        forgot_password_use_case: ForgotPasswordUseCase,
        change_password_use_case: ChangePasswordUseCase,
        current_user_use_case: GetCurrentUserUseCase,
    ) -> None:
        self._register_use_case = register_use_case
        self._login_use_case = login_use_case
        self._logout_use_case = logout_use_case
        self._forgot_password_use_case = forgot_password_use_case
        self._change_password_use_case = change_password_use_case
        self._current_user_use_case = current_user_use_case

    def register(self) -> tuple[Response, int]:
        dto = _parse(RegisterRequestDTO)
        if isinstance(dto, MutationResult):
            return _respond(dto)
        result = self._register_use_case.execute(
            dto.username, dto.email, dto.password, _current_session()
        )
        return _respond(result)

    def login(self) -> tuple[Response, int]:
        dto = _parse(LoginRequestDTO)
        if isinstance(dto, MutationResult):
            return _respond(dto)
        result = self._login_use_case.execute(
            dto.username_or_email, dto.password, _current_session()
        )
        return _respond(result)

    def logout(self) -> tuple[Response, int]:
        ok = self._logout_use_case.execute(_current_session())
        return jsonify(OkDTO(ok=ok).model_dump()), 200

    def forgot_password(self) -> tuple[Response, int]:
        dto = _parse(ForgotPasswordRequestDTO)
        if isinstance(dto, MutationResult):
            return _respond(dto)
        ok = self._forgot_password_use_case.execute(dto.email)
        return jsonify(OkDTO(ok=ok).model_dump()), 200

    def change_password(self) -> tuple[Response, int]:
        dto = _parse(ChangePasswordRequestDTO)
        if isinstance(dto, MutationResult):
            return _respond(dto)
        result = self._change_password_use_case.execute(
            dto.token, dto.user_id, dto.new_password, _current_session()
        )
        return _respond(result)

    def me(self) -> tuple[Response, int]:
        current = _current_session()
        user = self._current_user_use_case.execute(current)
        payload = None
        if user is not None:
            payload = UserDTO.from_user(user, viewer_id=current.user_id).model_dump(
                mode="json", by_alias=True
            )
        return jsonify({"user": payload}), 200

    def as_blueprint(self) -> Blueprint:
        bp = Blueprint("auth", __name__, url_prefix="/api/auth")
        bp.add_url_rule("/register", view_func=self.register, methods=["POST"])
        bp.add_url_rule("/login", view_func=self.login, methods=["POST"])
        bp.add_url_rule("/logout", view_func=self.logout, methods=["POST"])
        bp.add_url_rule("/forgot-password", view_func=self.forgot_password, methods=["POST"])
        bp.add_url_rule("/change-password", view_func=self.change_password, methods=["POST"])
        bp.add_url_rule("/me", view_func=self.me, methods=["GET"])
        return bp
