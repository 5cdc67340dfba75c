"""
Repository for tenant (user profile) lookups.
"""

from __future__ import annotations

from sqlalchemy import select
from sqlalchemy.orm import Session

from db.models.user_profile import UserProfile
from db.repositories.errors import UserProfileNotFoundError


class UserProfileRepository:
    def __init__(self, session: Session) -> None:
        self._session = session

    def get_by_external_id(self, external_user_id: str) -> UserProfile | None:
        stmt = select(UserProfile).where(UserProfile.external_user_id == external_user_id).limit(1)
        return self._session.scalars(stmt).first()

    def ensure_exists(self, external_user_id: str) -> UserProfile:
        profile = self.get_by_external_id(external_user_id)
        if profile is None:
            raise UserProfileNotFoundError(external_user_id)
        return profile

    def create(self, **attributes: object) -> UserProfile:
        profile = UserProfile(**attributes)
        self._session.add(profile)
        self._session.flush()
        return profile
