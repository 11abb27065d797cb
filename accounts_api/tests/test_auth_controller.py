from __future__ import annotations

from datetime import UTC, datetime
from typing import cast
from unittest.mock import MagicMock

import pytest
from flask import Flask

from accounts_api.application.results import MutationResult
from accounts_api.application.use_cases.users.forgot_password import \
    ForgotPasswordUseCase
from accounts_api.application.use_cases.users.get_current_user import \
    GetCurrentUserUseCase
from accounts_api.application.use_cases.users.login_user import LoginUserUseCase
from accounts_api.application.use_cases.users.logout_user import LogoutUserUseCase
from accounts_api.application.use_cases.users.register_user import \
    RegisterUserUseCase
from accounts_api.domain.users.entities import User
from accounts_api.infrastructure.sessions import (InMemorySessionStore,
                                                  ServerSideSessionInterface)
from accounts_api.interfaces.http.controllers.auth_controller import AuthController
from accounts_api.shared.middleware.error_handler import configure_error_handling


def _user(user_id: int = 1, username: str = "alice") -> User:
    now = datetime(2024, 1, 1, tzinfo=UTC)
    return User(
        id=user_id,
        username=username,
        email=f"{username}@example.com",
        password_hash="hash",
        created_at=now,
        updated_at=now,
    )


class StubRegister:
    def __init__(self) -> None:
        self.calls: list[tuple[str, str, str]] = []

    def execute(self, username: str, email: str, password: str, session) -> MutationResult:
        self.calls.append((username, email, password))
        user = _user(username=username)
        session.user_id = user.id
        return MutationResult.ok("User registration successful", user)


class StubLogin:
    """Returns a user without attaching it to the session."""

    def execute(self, username_or_email: str, password: str, session) -> MutationResult:
        return MutationResult.ok("Logged in successfully", _user(user_id=2, username="bob"))


class FailingDestroyStore(InMemorySessionStore):
    def destroy(self, session_id: str) -> None:
        raise RuntimeError("store offline")


@pytest.fixture()
def store() -> InMemorySessionStore:
    return InMemorySessionStore()


@pytest.fixture()
def flask_app(store: InMemorySessionStore) -> Flask:
    app = Flask(__name__)
    app.config.update(SECRET_KEY="test-secret", SESSION_COOKIE_NAME="qid")
    app.session_interface = ServerSideSessionInterface(store, max_age=3600)
    configure_error_handling(app)
    return app


def _controller(**overrides) -> AuthController:
    deps = {
        "register_use_case": MagicMock(),
        "login_use_case": MagicMock(),
        "logout_use_case": MagicMock(),
        "forgot_password_use_case": MagicMock(),
        "change_password_use_case": MagicMock(),
        "current_user_use_case": MagicMock(),
    }
    deps.update(overrides)
    return AuthController(**deps)


def test_register_endpoint_sets_cookie_and_returns_owner_email(flask_app: Flask) -> None:
    register = StubRegister()
    flask_app.register_blueprint(
        _controller(register_use_case=cast(RegisterUserUseCase, register)).as_blueprint()
    )

    with flask_app.test_client() as client:
        response = client.post(
            "/api/auth/register",
            json={"username": "alice", "email": "alice@example.com", "password": "secret123"},
        )

    assert response.status_code == 200
    assert register.calls == [("alice", "alice@example.com", "secret123")]
    assert response.headers["Set-Cookie"].startswith("qid=")
    payload = response.get_json()
    assert payload["success"] is True
    assert payload["message"] == "User registration successful"
    assert "errors" not in payload
    assert payload["user"]["email"] == "alice@example.com"
    assert payload["user"]["createdAt"] == "2024-01-01T00:00:00Z"


def test_user_email_hidden_from_other_viewers(flask_app: Flask) -> None:
    flask_app.register_blueprint(
        _controller(login_use_case=cast(LoginUserUseCase, StubLogin())).as_blueprint()
    )

    with flask_app.test_client() as client:
        response = client.post(
            "/api/auth/login", json={"usernameOrEmail": "bob", "password": "secret123"}
        )

    assert response.status_code == 200
    assert response.get_json()["user"]["email"] == ""


def test_login_invalid_payload_returns_400(flask_app: Flask) -> None:
    login = MagicMock()
    flask_app.register_blueprint(_controller(login_use_case=login).as_blueprint())

    with flask_app.test_client() as client:
        response = client.post("/api/auth/login", json={"usernameOrEmail": "a"})

    assert response.status_code == 400
    assert response.get_json() == {
        "code": 400,
        "success": False,
        "message": "Invalid input",
        "errors": [{"field": "password", "message": "Field required"}],
    }
    login.execute.assert_not_called()


def test_change_password_accepts_numeric_user_id(flask_app: Flask) -> None:
    change = MagicMock()
    change.execute.return_value = MutationResult.field_error(
        "Invalid or expired password reset token", "token"
    )
    flask_app.register_blueprint(_controller(change_password_use_case=change).as_blueprint())

    with flask_app.test_client() as client:
        response = client.post(
            "/api/auth/change-password",
            json={"token": "abc", "userId": 7, "newPassword": "secret123"},
        )

    assert response.status_code == 400
    args = change.execute.call_args.args
    assert args[:3] == ("abc", "7", "secret123")


def test_logout_clears_cookie_even_when_destroy_fails(flask_app: Flask) -> None:
    logout = LogoutUserUseCase(sessions=FailingDestroyStore())
    flask_app.register_blueprint(
        _controller(
            register_use_case=cast(RegisterUserUseCase, StubRegister()),
            logout_use_case=logout,
        ).as_blueprint()
    )

    with flask_app.test_client() as client:
        client.post(
            "/api/auth/register",
            json={"username": "alice", "email": "alice@example.com", "password": "secret123"},
        )
        assert client.get_cookie("qid") is not None

        response = client.post("/api/auth/logout")

        assert response.status_code == 200
        assert response.get_json() == {"ok": False}
        assert client.get_cookie("qid") is None


def test_forgot_password_always_reports_ok(flask_app: Flask) -> None:
    forgot = MagicMock(spec=ForgotPasswordUseCase)
    forgot.execute.return_value = True
    flask_app.register_blueprint(_controller(forgot_password_use_case=forgot).as_blueprint())

    with flask_app.test_client() as client:
        response = client.post("/api/auth/forgot-password", json={"email": "nobody@example.com"})

    assert response.status_code == 200
    assert response.get_json() == {"ok": True}
    forgot.execute.assert_called_once_with("nobody@example.com")


def test_unexpected_failure_maps_to_internal_error(flask_app: Flask) -> None:
    forgot = MagicMock(spec=ForgotPasswordUseCase)
    forgot.execute.side_effect = RuntimeError("db down")
    flask_app.register_blueprint(_controller(forgot_password_use_case=forgot).as_blueprint())

    with flask_app.test_client() as client:
        response = client.post("/api/auth/forgot-password", json={"email": "a@example.com"})

    assert response.status_code == 500
    assert response.get_json() == {"error": "internal_error"}


def test_me_without_session_returns_null(flask_app: Flask) -> None:
    me = GetCurrentUserUseCase(users=MagicMock())
    flask_app.register_blueprint(_controller(current_user_use_case=me).as_blueprint())

    with flask_app.test_client() as client:
        response = client.get("/api/auth/me")

    assert response.status_code == 200
    assert response.get_json() == {"user": None}
    assert "Set-Cookie" not in response.headers


def test_wrong_method_is_reported_as_json(flask_app: Flask) -> None:
    flask_app.register_blueprint(_controller().as_blueprint())

    with flask_app.test_client() as client:
        response = client.get("/api/auth/login")

    assert response.status_code == 405
    assert response.get_json() == {"error": "method_not_allowed"}
