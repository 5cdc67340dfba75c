"""
app/services/user_profile_service.py

Resolves authenticated identities to tenant profiles.
"""

from __future__ import annotations

import uuid
from functools import lru_cache

from sqlalchemy.orm import Session

from db.repositories.user_profile_repository import UserProfileRepository


class UserProfileService:
    def get_profile_id(self, *, db: Session, external_user_id: str) -> uuid.UUID:
        """
        Return the profile id for an identity.

        Raises UserProfileNotFoundError when the identity has no profile.
        """

        return UserProfileRepository(db).ensure_exists(external_user_id).id


@lru_cache(maxsize=1)
def get_user_profile_service() -> UserProfileService:
    return UserProfileService()
