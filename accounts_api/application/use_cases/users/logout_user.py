"""Use-case for ending a user session."""

from __future__ import annotations

from accounts_api.domain.users.repositories import SessionHandle, SessionStore
from accounts_api.shared.logging import logger


class LogoutUserUseCase:
    def __init__(self, *, sessions: SessionStore) -> None:
        self._sessions = sessions

    def execute(self, session: SessionHandle) -> bool:
        # The cookie is cleared on the response once the handle is invalidated,
        # whatever happens to the server-side record below.
        session.invalidate()
        try:
            self._sessions.destroy(session.sid)
        except Exception as exc:
            logger.warning(f"auth.logout: session destroy failed: {exc!r}")
            return False
        logger.info("auth.logout: ok")
        return True
