# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

from __future__ import annotations

from http import HTTPStatus

from flask import Flask, Response, jsonify, request
from werkzeug.exceptions import HTTPException

from accounts_api.shared.config import load_config
from accounts_api.shared.logging import logger

from .base import AppError


def handle_app_error(error: AppError) -> tuple[Response, HTTPStatus]:
    if error.status >= HTTPStatus.INTERNAL_SERVER_ERROR:
        logger.error(f"Application error {error} on {request.method} {request.path}")
    else:
        logger.warning(f"Handled application error {error} on {request.method} {request.path}")
    return jsonify(error.to_dict()), error.status


def handle_http_error(exc: HTTPException) -> tuple[Response, int]:
    # "Method Not Allowed" -> "method_not_allowed"
    code = (exc.name or "http_error").lower().replace(" ", "_")
    return jsonify({"error": code}), exc.code or HTTPStatus.INTERNAL_SERVER_ERROR


def register_error_handler(
    app: Flask,
    *,
    default_status: HTTPStatus = HTTPStatus.INTERNAL_SERVER_ERROR,
    debug_mode: bool | None = None,
) -> None:
    if debug_mode is None:
        debug_mode = load_config().debug_logging

    app.register_error_handler(AppError, handle_app_error)
    app.register_error_handler(HTTPException, handle_http_error)

    @app.errorhandler(Exception)
    def _handle_unexpected(exc: Exception):
        if debug_mode:
            logger.exception(
                f"Unhandled exception: {request.method} {request.path} "
                f"query={dict(request.args)}, body_size={len(request.get_data(cache=True))}"
            )
        else:
            logger.error(f"Error: {type(exc).__name__} on {request.method} {request.path}")

        return jsonify({"error": "internal_error"}), default_status
