# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

from __future__ import annotations

import re
from typing import Any

_REDACTED = "***REDACTED***"

SENSITIVE_PATTERNS: list[tuple[re.Pattern[str], str]] = [
    (re.compile(r"(secret[_-]?key\s*[:=]\s*['\"]?)([\w\-]{20,})"), rf"\1{_REDACTED}"),
    # Reset tokens: cache keys, links and key=value pairs.
    (re.compile(r"(forget-password:)([a-f0-9\-]{36})"), rf"\1{_REDACTED}"),
    (re.compile(r"([?&](?:amp;)?token=)([^&\s\"']+)"), rf"\1{_REDACTED}"),
    (re.compile(r"(\btoken\s*[:=]\s*['\"]?)([\w\-.]{20,})"), rf"\1{_REDACTED}"),
    # Passwords, including ``newPassword`` payload fields.
    (re.compile(r"(?<![\w.])((?:new)?password['\"]?\s*[:=]\s*['\"]?)([^'\"\s,}]{3,})", re.IGNORECASE), rf"\1{_REDACTED}"),
    # Session ids, bare and as redis keys.
    (re.compile(r"(session[_-]?id\s*[:=]\s*['\"]?)([\w\-.]{20,})"), rf"\1{_REDACTED}"),
    (re.compile(r"(sess:)([\w\-]{20,})"), rf"\1{_REDACTED}"),
    (re.compile(r"\b(qid=)([^;\s]+)"), rf"\1{_REDACTED}"),
    # Credentials inside database and redis URLs.
    (re.compile(r"(postgresql|postgres|mysql|rediss?)(\+\w+)?://([^:/@]*):([^@]+)@"), rf"\1\2://\3:{_REDACTED}@"),
    # Email local parts.
    (re.compile(r"([\w.%+-]+)@([\w.-]+\.[a-zA-Z]{2,})"), r"***@\2"),
    (re.compile(r"(authorization\s*:\s*['\"]?)([^'\"]{10,})", re.IGNORECASE), rf"\1{_REDACTED}"),
]


def sanitize_message(message: str) -> str:
    for pattern, replacement in SENSITIVE_PATTERNS:
        message = pattern.sub(replacement, message)
    return message


def sanitize_record(record: dict[str, Any]) -> bool:
    """loguru sink filter: rewrites the message in place and never drops it."""
    if "message" in record:
        record["message"] = sanitize_message(record["message"])
    return True
