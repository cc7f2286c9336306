"""
Authentication service for registration, login and account management.
Handles credential checks, token issue and profile/password changes.
"""

from typing import Tuple, Dict, Any, List
from sqlalchemy.ext.asyncio import AsyncSession
from classifieds_api.repositories.user import UserRepository
from classifieds_api.models.user import User
from classifieds_api.utils.auth import create_access_token, verify_token, verify_password_async
from classifieds_api.utils.exceptions import (
    InvalidCredentialsError,
    UnauthorizedError,
    UserNotFoundError,
    InsufficientPermissionsError
)
import logging

logger = logging.getLogger(__name__)


class AuthService:
    """
    Authentication service for managing accounts and credentials.
    Every password write goes through the repository, which rehashes it.
    """

    def __init__(self, db_session: AsyncSession):
        self.db = db_session
        self.user_repo = UserRepository(db_session)

    async def register(self, name: str, email: str, password: str) -> Tuple[User, str]:
        """
        Register a new user and issue a token.

        Args:
            name: Display name
            email: Email address, compared case-insensitively
            password: Plain text password

        Returns:
            Tuple of (created user, access token)

        Raises:
            DuplicateKeyError: If the email is already registered
        """
        user = await self.user_repo.create_user({
            "name": name,
            "email": email,
            "password": password,
        })
        token = create_access_token(user.id)

        logger.info(f"New user registered: {user.email}", extra={"user_id": user.id})
        return user, token

    async def authenticate_user(self, email: str, password: str) -> User:
        """
        Check credentials.

        Args:
            email: User's email address
            password: Plain text password

        Returns:
            Authenticated User object

        Raises:
            InvalidCredentialsError: If email is unknown or password is wrong
            UnauthorizedError: If the account is inactive
        """
        user = await self.user_repo.get_by_email(email)

        if not user:
            logger.warning(f"Failed authentication attempt for email: {email}")
            raise InvalidCredentialsError()

        if not await self.verify_user_password(user, password):
            logger.warning(f"Failed authentication attempt for email: {email}")
            raise InvalidCredentialsError()

        if not user.is_active:
            logger.warning(f"Login attempt on inactive account: {email}")
            raise UnauthorizedError("User inactive")

        return user

    async def login(self, email: str, password: str) -> Tuple[User, str]:
        """
        Authenticate user and issue a token.

        Returns:
            Tuple of (user, access token)
        """
        user = await self.authenticate_user(email, password)
        token = create_access_token(user.id)

        logger.info(f"User logged in: {user.email}", extra={"user_id": user.id})
        return user, token

    async def verify_user_password(self, user: User, candidate: str) -> bool:
        """
        Compare a candidate password with the user's stored hash.

        A mismatch returns False. An unreadable stored hash raises
        InternalServerError.
        """
        return await verify_password_async(candidate, user.hashed_password)

    async def get_user_from_token(self, token: str) -> User:
        """
        Resolve a token to an active user.

        Args:
            token: JWT access token

        Returns:
            The active user the token identifies

        Raises:
            InvalidTokenError: If token is malformed or forged
            TokenExpiredError: If token is expired
            UnauthorizedError: If the user no longer exists or is inactive
        """
        payload = verify_token(token)
        user = await self.user_repo.get_by_id(payload.user_id)

        if user is None:
            raise UnauthorizedError("User not found")

        if not user.is_active:
            raise UnauthorizedError("User inactive")

        return user

    async def get_user_by_id(self, user_id: str) -> User:
        user = await self.user_repo.get_by_id(user_id)
        if user is None:
            raise UserNotFoundError()
        return user

    async def update_profile(self, user_id: str, changes: Dict[str, Any]) -> User:
        """
        Apply supplied profile fields.

        Args:
            user_id: Identifier of the user
            changes: Supplied name and/or email

        Returns:
            Updated user

        Raises:
            DuplicateKeyError: If the new email belongs to another account
            UserNotFoundError: If the user no longer exists
        """
        user = await self.user_repo.update_profile(user_id, changes)
        if user is None:
            raise UserNotFoundError()

        logger.info(f"User updated profile: {user.email}", extra={"user_id": user.id})
        return user

    async def change_password(self, user_id: str, current_password: str, new_password: str) -> None:
        """
        Replace the user's password after checking the current one.

        Raises:
            UnauthorizedError: If the current password is incorrect
            UserNotFoundError: If the user no longer exists
        """
        user = await self.get_user_by_id(user_id)

        if not await self.verify_user_password(user, current_password):
            logger.warning(f"Password change rejected for {user.email}: wrong current password")
            raise UnauthorizedError("Current password is incorrect")

        await self.user_repo.update_password(user_id, new_password)
        logger.info(f"User changed password: {user.email}", extra={"user_id": user.id})

    async def list_users(self, page: int, limit: int) -> Tuple[List[User], int]:
        """Page through all accounts, newest first."""
        return await self.user_repo.get_page(page=page, limit=limit)

    async def update_user_status(self, admin_id: str, user_id: str, is_active: bool) -> User:
        """
        Activate or deactivate an account.

        Args:
            admin_id: Identifier of the admin performing the change
            user_id: Identifier of the target user
            is_active: New status

        Raises:
            InsufficientPermissionsError: If an admin tries to deactivate themselves
            UserNotFoundError: If the target user does not exist
        """
        if admin_id == user_id and not is_active:
            raise InsufficientPermissionsError("deactivate your own account")

        user = await self.user_repo.update_user_status(user_id, is_active)
        if user is None:
            raise UserNotFoundError()

        logger.info(
            f"Admin {admin_id} set user {user_id} active={is_active}",
            extra={"user_id": admin_id}
        )
        return user
