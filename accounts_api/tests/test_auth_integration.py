from __future__ import annotations

import re
from collections.abc import Iterator
from pathlib import Path

import pytest
from flask import Flask
from flask.testing import FlaskClient
from sqlalchemy import create_engine, select

from accounts_api.app import create_app
from accounts_api.domain.users.repositories import Mailer
from accounts_api.infrastructure.container import Container
from accounts_api.infrastructure.db import Base, SessionLocal, bind_engine, get_engine
from accounts_api.infrastructure.db.models import User
from accounts_api.shared.config import DatabaseConfig, load_config


class RecordingMailer(Mailer):
    def __init__(self) -> None:
        self.sent: list[tuple[str, str, str]] = []

    def send(self, to: str, subject: str, html: str) -> None:
        self.sent.append((to, subject, html))


@pytest.fixture(autouse=True)
def reset_database() -> Iterator[None]:
    engine = bind_engine(load_config().database)
    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)
    yield
    Base.metadata.drop_all(bind=get_engine())


@pytest.fixture()
def mailer() -> RecordingMailer:
    return RecordingMailer()


@pytest.fixture()
def app(mailer: RecordingMailer) -> Flask:
    container = Container()
    container.mailer = mailer
    return create_app(container.config, container)


def _register(client: FlaskClient, username: str = "alice", email: str = "alice@example.com"):
    return client.post(
        "/api/auth/register",
        json={"username": username, "email": email, "password": "secret123"},
    )


def test_register_login_logout_flow(app: Flask) -> None:
    with app.test_client() as client:
        register = _register(client)
        assert register.status_code == 200
        assert register.get_json()["user"]["email"] == "alice@example.com"
        assert client.get_cookie("qid")

        me = client.get("/api/auth/me").get_json()
        assert me["user"]["username"] == "alice"

        logout = client.post("/api/auth/logout")
        assert logout.get_json() == {"ok": True}
        assert client.get_cookie("qid") is None
        assert client.get("/api/auth/me").get_json() == {"user": None}

        login = client.post(
            "/api/auth/login",
            json={"usernameOrEmail": "alice@example.com", "password": "secret123"},
        )
        assert login.status_code == 200
        assert login.get_json()["message"] == "Logged in successfully"
        assert client.get("/api/auth/me").get_json()["user"]["username"] == "alice"

    session = SessionLocal()
    try:
        stored = session.query(User).one()
        assert stored.password_hash != "secret123"
    finally:
        session.close()


def test_duplicate_registration_is_rejected(app: Flask) -> None:
    with app.test_client() as client:
        assert _register(client).status_code == 200
        duplicate = _register(client, username="alice2")

    assert duplicate.status_code == 400
    assert duplicate.get_json()["errors"] == [
        {"field": "email", "message": "Email already taken"}
    ]


def test_password_reset_flow(app: Flask, mailer: RecordingMailer) -> None:
    with app.test_client() as client:
        user_id = _register(client).get_json()["user"]["id"]
        client.post("/api/auth/logout")

        forgot = client.post("/api/auth/forgot-password", json={"email": "alice@example.com"})
        assert forgot.get_json() == {"ok": True}
        assert len(mailer.sent) == 1
        to, subject, html = mailer.sent[0]
        assert to == "alice@example.com"
        assert subject == "Reset your password"
        assert "http://localhost:3000/change-password?token=" in html

        token = re.search(r"token=([0-9a-f\-]+)", html).group(1)  # type: ignore[union-attr]
        assert re.search(r"userId=(\d+)", html).group(1) == str(user_id)  # type: ignore[union-attr]

        changed = client.post(
            "/api/auth/change-password",
            json={"token": token, "userId": user_id, "newPassword": "brand-new"},
        )
        assert changed.status_code == 200
        assert changed.get_json()["message"] == "User password reset successfully"
        assert client.get("/api/auth/me").get_json()["user"]["id"] == user_id

        reused = client.post(
            "/api/auth/change-password",
            json={"token": token, "userId": user_id, "newPassword": "another-one"},
        )
        assert reused.status_code == 400
        assert reused.get_json()["errors"] == [
            {"field": "token", "message": "Invalid or expired password reset token"}
        ]

        old = client.post(
            "/api/auth/login", json={"usernameOrEmail": "alice", "password": "secret123"}
        )
        assert old.get_json()["errors"] == [{"field": "password", "message": "Wrong password"}]

        new = client.post(
            "/api/auth/login", json={"usernameOrEmail": "alice", "password": "brand-new"}
        )
        assert new.status_code == 200


def test_request_id_is_echoed(app: Flask) -> None:
    with app.test_client() as client:
        response = client.get("/api/auth/me", headers={"X-Request-ID": "req-42"})

    assert response.headers["X-Request-ID"] == "req-42"
    assert response.headers["X-Content-Type-Options"] == "nosniff"


def test_forgot_password_unknown_email_sends_nothing(app: Flask, mailer: RecordingMailer) -> None:
    with app.test_client() as client:
        response = client.post("/api/auth/forgot-password", json={"email": "ghost@example.com"})

    assert response.get_json() == {"ok": True}
    assert mailer.sent == []


def test_create_app_uses_database_from_given_config(tmp_path: Path, mailer: RecordingMailer) -> None:
    url = f"sqlite:///{tmp_path / 'other.db'}"
    config = load_config().model_copy(update={"database": DatabaseConfig(DATABASE_URL=url)})
    container = Container(config)
    container.mailer = mailer

    try:
        app = create_app(config, container)
        assert get_engine().url.render_as_string(hide_password=False) == url

        with app.test_client() as client:
            assert _register(client).status_code == 200
    finally:
        bind_engine(load_config().database)

    other = create_engine(url)
    try:
        with other.connect() as conn:
            usernames = conn.execute(select(User.username)).scalars().all()
    finally:
        other.dispose()
    assert usernames == ["alice"]
