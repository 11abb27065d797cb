"""Use-case resolving the user behind the current session."""

from __future__ import annotations

from accounts_api.domain.users.entities import User
from accounts_api.domain.users.repositories import SessionHandle, UserRepository


class GetCurrentUserUseCase:
    def __init__(self, *, users: UserRepository) -> None:
        self._users = users

    def execute(self, session: SessionHandle) -> User | None:
        if not session.user_id:
            return None
        return self._users.find_by_id(session.user_id)
