# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

from __future__ import annotations

import hashlib
import secrets
import time

from flask import Flask, Response, g, request, session

from accounts_api.shared.config import load_config
from accounts_api.shared.logging import (bind_user_id, clear_correlation_id,
                                         get_correlation_id, logger,
                                         set_correlation_id)

_SENSITIVE_HEADERS = frozenset({"authorization", "cookie"})


def _client_ip() -> str:
    forwarded = request.headers.get("X-Forwarded-For")
    if forwarded:
        return forwarded.split(",")[0].strip()
    return request.remote_addr or "unknown"


def _masked_headers() -> dict[str, str]:
    masked = {}
    for key, value in request.headers.items():
        if key.lower() in _SENSITIVE_HEADERS:
            masked[key] = f"<hashed:{hashlib.sha256(value.encode()).hexdigest()[:8]}>"
        else:
            masked[key] = value
    return masked


def configure_request_logging(app: Flask, *, debug_mode: bool | None = None) -> None:
    if debug_mode is None:
        debug_mode = load_config().debug_logging

    @app.before_request
    def _before_request() -> None:
        set_correlation_id(request.headers.get("X-Request-ID") or secrets.token_urlsafe(8))
        bind_user_id(session.get("user_id"))
        g.request_start_time = time.perf_counter()
        if debug_mode:
            logger.debug(
                f"Request started: {request.method} {request.path} from {_client_ip()} "
                f"headers={_masked_headers()} body_size={len(request.get_data(cache=True))}"
            )

    @app.after_request
    def _after_request(response: Response) -> Response:
        elapsed_ms = (time.perf_counter() - g.get("request_start_time", time.perf_counter())) * 1000
        # Login, registration and logout change the user mid-request.
        bind_user_id(session.get("user_id"))
        logger.info(
            f"{request.method} {request.path} -> {response.status_code} in {elapsed_ms:.1f} ms"
        )
        response.headers.setdefault("X-Request-ID", get_correlation_id())
        return response

    @app.teardown_request
    def _teardown_request(exc: BaseException | None) -> None:
        if exc is not None:
            logger.error(f"Request error: {type(exc).__name__} on {request.method} {request.path}")
        clear_correlation_id()


__all__ = ["configure_request_logging"]
