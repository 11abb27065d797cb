# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

from __future__ import annotations

import smtplib
from email.message import EmailMessage

from accounts_api.domain.users.exceptions import MailDeliveryError
from accounts_api.domain.users.repositories import Mailer
from accounts_api.shared.logging import logger


def build_message(sender: str, to: str, subject: str, html: str) -> EmailMessage:
    message = EmailMessage()
    message["From"] = sender
    message["To"] = to
    message["Subject"] = subject
    message.set_content("Open this message in an HTML capable mail client.")
    message.add_alternative(html, subtype="html")
    return message


class SmtpMailer(Mailer):
    """Sends mail through an SMTP relay, one connection per message."""

    def __init__(
        self,
        *,
        host: str,
        port: int,
        sender: str,
        username: str | None = None,
        password: str | None = None,
        use_tls: bool = True,
        timeout: float = 10.0,
    ) -> None:
        self._host = host
        self._port = port
        self._sender = sender
        self._username = username
        self._password = password
        self._use_tls = use_tls
        self._timeout = timeout

    def _new_connection(self) -> smtplib.SMTP:
        return smtplib.SMTP(host=self._host, port=self._port, timeout=self._timeout)

    def send(self, to: str, subject: str, html: str) -> None:
        message = build_message(self._sender, to, subject, html)
        try:
            with self._new_connection() as conn:
                if self._use_tls:
                    conn.starttls()
                if self._username:
                    conn.login(self._username, self._password or "")
                conn.send_message(message)
        except (smtplib.SMTPException, OSError) as exc:
            raise MailDeliveryError(type(exc).__name__) from exc
        logger.info(f"mail: sent subject={subject!r} via {self._host}:{self._port}")


class LoggingMailer(Mailer):
    """Development mailer: logs that a message was due instead of sending it."""

    def __init__(self, sender: str) -> None:
        self._sender = sender

    def send(self, to: str, subject: str, html: str) -> None:
        message = build_message(self._sender, to, subject, html)
        logger.info(f"mail: not delivered (log backend) subject={message['Subject']!r}")


__all__ = ["LoggingMailer", "SmtpMailer", "build_message"]
