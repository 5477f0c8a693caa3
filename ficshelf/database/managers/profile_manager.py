#!/usr/bin/env python3
"""
profile_manager.py
--------------------
Manages Profile entities.

Usernames are unique regardless of case: "Reader" and "reader" are the
same user. Authentication is not handled here.
"""
from typing import Any, Dict, List, Optional, Union

from sqlalchemy import select

from ficshelf.core.exceptions import ValidationError
from ficshelf.core.validators import DataValidator
from ficshelf.database.decorators import (
    handle_db_errors,
    log_database_operation,
    validate_metadata,
)
from ficshelf.database.models import Profile
from .base_manager import BaseManager


class ProfileManager(BaseManager):
    """Manages Profile table operations."""

    @handle_db_errors
    def get(
        self, username: Optional[str] = None, profile_id: Optional[int] = None
    ) -> Optional[Profile]:
        """
        Retrieve a profile by username (any casing) or id.

        Returns:
            Profile if found, None otherwise
        """
        if profile_id is not None:
            return self.session.get(Profile, profile_id)

        key = DataValidator.normalize_key(username)
        if key is None:
            return None
        return self.session.scalars(
            select(Profile).where(Profile.username_key == key)
        ).first()

    def require(self, user: Union[Profile, int, str]) -> Profile:
        """
        Resolve a Profile, id or username to a Profile.

        Raises:
            ValidationError: If no such user exists
        """
        if isinstance(user, str):
            profile = self.get(username=user)
            if profile is None:
                raise ValidationError(f"No user named '{user}'")
            return profile
        return self._resolve_object(user, Profile)

    def exists(self, username: str) -> bool:
        return self.get(username=username) is not None

    @handle_db_errors
    def get_all(self) -> List[Profile]:
        return list(self.session.scalars(select(Profile).order_by(Profile.username_key)))

    @handle_db_errors
    @log_database_operation("create_profile")
    @validate_metadata(["username"])
    def create(self, metadata: Dict[str, Any]) -> Profile:
        """
        Create a profile.

        Args:
            metadata: Dictionary with required key:
                - username: Unique handle (no whitespace)
                Optional keys:
                - display_name, bio

        Raises:
            ValidationError: If the username contains whitespace or is taken
        """
        username = metadata["username"].strip()
        if any(char.isspace() for char in username):
            raise ValidationError(f"Username cannot contain whitespace: '{username}'")
        if self.exists(username):
            raise ValidationError(f"Username already taken: '{username}'")

        profile = Profile(
            username=username,
            username_key=DataValidator.normalize_key(username),
            display_name=DataValidator.normalize_string(metadata.get("display_name")),
            bio=(metadata.get("bio") or "").strip() or None,
        )
        self.session.add(profile)
        self.session.flush()
        return profile

    @handle_db_errors
    @log_database_operation("update_profile")
    def update(self, profile: Profile, metadata: Dict[str, Any]) -> Profile:
        """Update display name and bio."""
        profile = self._resolve_object(profile, Profile)
        if "display_name" in metadata:
            profile.display_name = DataValidator.normalize_string(metadata["display_name"])
        if "bio" in metadata:
            profile.bio = (metadata["bio"] or "").strip() or None
        self.session.flush()
        return profile
