"""
Repository-layer exceptions.
"""

from __future__ import annotations


class RepositoryError(Exception):
    """Base exception for repository failures."""


class UserProfileNotFoundError(RepositoryError):
    """Raised when a referenced user profile does not exist."""

    def __init__(self, external_user_id: str) -> None:
        super().__init__(f"User profile not found: {external_user_id}")
        self.external_user_id = external_user_id
