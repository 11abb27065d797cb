# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

"""Server-side sessions keyed by a signed opaque cookie."""

from __future__ import annotations

import json
import secrets
import time
from collections.abc import Callable, Mapping
from typing import Any

import redis
from flask import Flask, Request, Response
from flask.sessions import SessionInterface, SessionMixin
from itsdangerous import BadSignature, Signer
from werkzeug.datastructures import CallbackDict

from accounts_api.domain.users.exceptions import SessionStoreError
from accounts_api.domain.users.repositories import SessionStore
from accounts_api.infrastructure.cache import InMemoryTTLCache
from accounts_api.shared.logging import logger

_SIGNER_SALT = "accounts-api-session"


class InMemorySessionStore(SessionStore):
    def __init__(self, clock: Callable[[], float] = time.monotonic) -> None:
        self._cache: InMemoryTTLCache[str, dict[str, Any]] = InMemoryTTLCache(clock)

    def load(self, session_id: str) -> dict[str, Any] | None:
        data = self._cache.get(session_id)
        return dict(data) if data is not None else None

    def save(self, session_id: str, data: Mapping[str, Any], ttl_seconds: int) -> None:
        self._cache.set(session_id, dict(data), ttl_seconds)

    def destroy(self, session_id: str) -> None:
        self._cache.invalidate(session_id)


class RedisSessionStore(SessionStore):
    def __init__(self, client: redis.Redis, *, key_prefix: str = "sess:") -> None:
        self._client = client
        self._prefix = key_prefix

    def _key(self, session_id: str) -> str:
        return f"{self._prefix}{session_id}"

    def load(self, session_id: str) -> dict[str, Any] | None:
        try:
            raw = self._client.get(self._key(session_id))
        except redis.exceptions.RedisError as exc:
            raise SessionStoreError("load") from exc
        if raw is None:
            return None
        try:
            data = json.loads(raw)
        except ValueError:
            logger.warning("sessions: dropping undecodable session record")
            return None
        return data if isinstance(data, dict) else None

    def save(self, session_id: str, data: Mapping[str, Any], ttl_seconds: int) -> None:
        try:
            self._client.set(self._key(session_id), json.dumps(dict(data)), ex=ttl_seconds)
        except redis.exceptions.RedisError as exc:
            raise SessionStoreError("save") from exc

    def destroy(self, session_id: str) -> None:
        try:
            self._client.delete(self._key(session_id))
        except redis.exceptions.RedisError as exc:
            raise SessionStoreError("destroy") from exc


class ServerSideSession(CallbackDict, SessionMixin):
    """Flask session whose contents live in a :class:`SessionStore`."""

    def __init__(
        self,
        initial: Mapping[str, Any] | None = None,
        *,
        sid: str,
        new: bool = False,
    ) -> None:
        def on_update(session: ServerSideSession) -> None:
            session.modified = True

        super().__init__(initial, on_update)
        self.sid = sid
        self.new = new
        self.modified = False
        self.destroyed = False

    @property
    def user_id(self) -> int | None:
        value = self.get("user_id")
        return int(value) if value is not None else None

    @user_id.setter
    def user_id(self, value: int | None) -> None:
        if value is None:
            self.pop("user_id", None)
        else:
            self["user_id"] = int(value)

    def invalidate(self) -> None:
        self.destroyed = True
        self.clear()


class ServerSideSessionInterface(SessionInterface):
    """Sessions are created lazily: nothing is stored for a client until the
    session is first written, and records are not refreshed on read.
    """

    session_class = ServerSideSession

    def __init__(self, store: SessionStore, *, max_age: int) -> None:
        self._store = store
        self._max_age = max_age

    def _signer(self, app: Flask) -> Signer:
        return Signer(app.secret_key, salt=_SIGNER_SALT)

    def _new_session(self) -> ServerSideSession:
        return self.session_class(sid=secrets.token_urlsafe(32), new=True)

    def open_session(self, app: Flask, request: Request) -> ServerSideSession:
        signed = request.cookies.get(self.get_cookie_name(app))
        if not signed:
            return self._new_session()
        try:
            sid = self._signer(app).unsign(signed).decode("utf-8")
        except BadSignature:
            logger.info("sessions: rejected cookie with bad signature")
            return self._new_session()

        data = self._store.load(sid)
        if data is None:
            return self._new_session()
        return self.session_class(data, sid=sid)

    def save_session(self, app: Flask, session: SessionMixin, response: Response) -> None:
        if not isinstance(session, ServerSideSession):
            raise TypeError(f"expected ServerSideSession, got {type(session).__name__}")
        name = self.get_cookie_name(app)
        domain = self.get_cookie_domain(app)
        path = self.get_cookie_path(app)

        if session.destroyed or (not session and not session.new and session.modified):
            response.delete_cookie(
                name,
                domain=domain,
                path=path,
                secure=self.get_cookie_secure(app),
                httponly=self.get_cookie_httponly(app),
                samesite=self.get_cookie_samesite(app),
            )
            return

        if not session or not session.modified:
            return

        self._store.save(session.sid, dict(session), self._max_age)
        response.set_cookie(
            name,
            self._signer(app).sign(session.sid).decode("utf-8"),
            max_age=self._max_age,
            domain=domain,
            path=path,
            httponly=self.get_cookie_httponly(app),
            secure=self.get_cookie_secure(app),
            samesite=self.get_cookie_samesite(app),
        )


__all__ = [
    "InMemorySessionStore",
    "RedisSessionStore",
    "ServerSideSession",
    "ServerSideSessionInterface",
]
