# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

from __future__ import annotations

from datetime import UTC, datetime

from sqlalchemy import or_, select, update
from sqlalchemy.exc import IntegrityError

from accounts_api.domain.users.entities import User as DomainUser
from accounts_api.domain.users.exceptions import UserAlreadyExistsError
from accounts_api.domain.users.repositories import UserRepository
from accounts_api.infrastructure.db.models import User
from accounts_api.infrastructure.db.session import session_scope

_EMAIL_CONSTRAINT_MARKERS = ("ix_users_email", "users.email")


def _to_domain(row: User) -> DomainUser:
    return DomainUser(
        id=row.id,
        username=row.username,
        email=row.email,
        password_hash=row.password_hash,
        created_at=row.created_at,
        updated_at=row.updated_at,
    )


def _duplicate_field(exc: IntegrityError) -> str:
    text = str(exc.orig).lower()
    if any(marker in text for marker in _EMAIL_CONSTRAINT_MARKERS):
        return "email"
    return "username"


class SqlAlchemyUserRepository(UserRepository):
    def find_by_id(self, user_id: int) -> DomainUser | None:
        with session_scope() as session:
            row = session.get(User, user_id)
            return _to_domain(row) if row else None

    def find_by_username(self, username: str) -> DomainUser | None:
        with session_scope() as session:
            row = session.scalars(select(User).where(User.username == username)).first()
            return _to_domain(row) if row else None

    def find_by_email(self, email: str) -> DomainUser | None:
        with session_scope() as session:
            row = session.scalars(select(User).where(User.email == email)).first()
            return _to_domain(row) if row else None

    def find_by_username_or_email(self, username: str, email: str) -> DomainUser | None:
        with session_scope() as session:
            rows = session.scalars(
                select(User).where(or_(User.username == username, User.email == email))
            ).all()
            # Prefer the username match so collisions on both report "username".
            for row in rows:
                if row.username == username:
                    return _to_domain(row)
            return _to_domain(rows[0]) if rows else None

    def add(self, user: DomainUser) -> DomainUser:
        try:
            with session_scope() as session:
                row = User(
                    username=user.username,
                    email=user.email,
                    password_hash=user.password_hash,
                    created_at=user.created_at,
                    updated_at=user.updated_at,
                )
                session.add(row)
                session.flush()
                session.refresh(row)
                return _to_domain(row)
        except IntegrityError as exc:
            raise UserAlreadyExistsError(_duplicate_field(exc)) from exc

    def update_password(self, user_id: int, password_hash: str) -> DomainUser | None:
        with session_scope() as session:
            result = session.execute(
                update(User)
                .where(User.id == user_id)
                .values(password_hash=password_hash, updated_at=datetime.now(UTC))
            )
            if result.rowcount == 0:
                return None
            row = session.get(User, user_id, populate_existing=True)
            return _to_domain(row) if row else None
