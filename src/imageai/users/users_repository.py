"""User profile repository backed by SQLAlchemy."""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from datetime import datetime

from sqlalchemy import select
from sqlalchemy.orm import Session

from ..db.db_models import UserProfileModel, utcnow
from ..exceptions import handle_sqlalchemy_errors


@dataclass(slots=True)
class UserProfile:
    email: str
    name: str
    avatar_url: str | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None


class UserRepository:
    def __init__(self, session_factory: Callable[[], Session]) -> None:
        self._session_factory = session_factory

    def upsert(self, *, email: str, name: str, avatar_url: str | None) -> UserProfile:
        """Insert the profile or refresh name/avatar for an existing email."""
        now = utcnow()
        with handle_sqlalchemy_errors(entity="user_profile"):
            with self._session_factory() as session, session.begin():
                row = session.scalar(
                    select(UserProfileModel).where(UserProfileModel.email == email)
                )
                if row is None:
                    row = UserProfileModel(email=email, created_at=now)
                    session.add(row)
                row.name = name
                row.avatar_url = avatar_url
                row.updated_at = now
                session.flush()
                return self._to_domain(row)

    def get(self, email: str) -> UserProfile | None:
        with self._session_factory() as session:
            row = session.scalar(
                select(UserProfileModel).where(UserProfileModel.email == email)
            )
            return self._to_domain(row) if row is not None else None

    @staticmethod
    def _to_domain(row: UserProfileModel) -> UserProfile:
        return UserProfile(
            email=row.email,
            name=row.name,
            avatar_url=row.avatar_url,
            created_at=row.created_at,
            updated_at=row.updated_at,
        )


__all__ = ["UserProfile", "UserRepository"]
