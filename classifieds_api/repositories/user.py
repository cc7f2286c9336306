"""
User repository for authentication and user management operations.
Provides user persistence with password hashing and case-insensitive email lookup.
"""

from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select
from classifieds_api.repositories.base import BaseRepository
from classifieds_api.models.user import User, UserRole
from classifieds_api.utils.auth import hash_password_async
from classifieds_api.utils.exceptions import DuplicateKeyError
from typing import Optional, Dict, Any
import logging

logger = logging.getLogger(__name__)


class UserRepository(BaseRepository[User]):
    """
    Repository for user accounts.
    Plain passwords never reach the database; they are hashed here.
    """

    def __init__(self, db: AsyncSession):
        super().__init__(User, db)

    async def create_user(self, user_data: Dict[str, Any]) -> User:
        """
        Create a new user with a normalized email and a hashed password.

        Args:
            user_data: Dictionary containing user information
                      Must include: name, email, password
                      Optional: role (defaults to USER), is_active

        Returns:
            Created user instance

        Raises:
            DuplicateKeyError: If the email is already registered
        """
        email = User.normalize_email(user_data["email"])

        if await self.get_by_email(email):
            logger.info(f"Registration rejected, email already in use: {email}")
            raise DuplicateKeyError("email")

        hashed_password = await hash_password_async(user_data["password"])

        created_user = await self.create({
            "name": user_data["name"],
            "email": email,
            "hashed_password": hashed_password,
            "role": user_data.get("role", UserRole.USER),
            "is_active": user_data.get("is_active", True),
        })
        logger.info(f"Created user: {created_user.email} (ID: {created_user.id})")
        return created_user

    async def get_by_email(self, email: str) -> Optional[User]:
        """
        Get user by email address, ignoring case.

        Args:
            email: Email address to search for

        Returns:
            User instance if found, None otherwise
        """
        normalized_email = User.normalize_email(email)

        result = await self.db.execute(select(User).where(User.email == normalized_email))
        user = result.scalar_one_or_none()

        if user:
            logger.debug(f"Retrieved user by email: {normalized_email}")
        else:
            logger.debug(f"User with email {normalized_email} not found")

        return user

    async def email_taken(self, email: str, exclude_id: Optional[str] = None) -> bool:
        """Check whether another account already uses this email."""
        user = await self.get_by_email(email)
        return user is not None and user.id != exclude_id

    async def update_profile(self, user_id: str, changes: Dict[str, Any]) -> Optional[User]:
        """
        Update name and/or email of a user.

        Args:
            user_id: Identifier of the user
            changes: Supplied profile fields

        Returns:
            Updated user instance or None if not found

        Raises:
            DuplicateKeyError: If the new email belongs to another account
        """
        if "email" in changes:
            changes = {**changes, "email": User.normalize_email(changes["email"])}
            if await self.email_taken(changes["email"], exclude_id=user_id):
                raise DuplicateKeyError("email")

        updated_user = await self.update(user_id, changes)
        if updated_user:
            logger.info(f"Profile updated for user: {updated_user.email}")
        return updated_user

    async def update_password(self, user_id: str, new_password: str) -> Optional[User]:
        """
        Replace a user's password. The new value is always rehashed.

        Args:
            user_id: Identifier of the user
            new_password: New plain text password

        Returns:
            Updated user instance or None if not found
        """
        hashed_password = await hash_password_async(new_password)
        updated_user = await self.update(user_id, {"hashed_password": hashed_password})

        if updated_user:
            logger.info(f"Password updated for user: {updated_user.email}")

        return updated_user

    async def update_user_status(self, user_id: str, is_active: bool) -> Optional[User]:
        """
        Update user's active status.

        Args:
            user_id: Identifier of the user
            is_active: New active status

        Returns:
            Updated user instance or None if not found
        """
        updated_user = await self.update(user_id, {"is_active": is_active})

        if updated_user:
            status = "activated" if is_active else "deactivated"
            logger.info(f"User {updated_user.email} {status}")

        return updated_user
