"""
Listing service for managing property classifieds.
Handles pagination, lookup, creation, partial update and deletion of listings.
"""

from typing import Any, Dict, Optional, Union
from sqlalchemy.ext.asyncio import AsyncSession
from classifieds_api.config import settings
from classifieds_api.repositories.listing import ListingRepository
from classifieds_api.models.listing import Listing
from classifieds_api.schemas.auth import CurrentUser
from classifieds_api.schemas.listing import ListingCreate, ListingUpdate, parse_listing_payload
from classifieds_api.utils.exceptions import ListingNotFoundError, ValidationFailedError
from classifieds_api.utils.validators import validate_object_id
import logging

logger = logging.getLogger(__name__)


class ListingService:
    """
    Listing service for classifieds CRUD.
    Payloads are validated with the same schemas the routes use, so raw
    dictionaries and parsed models are handled identically.
    """

    def __init__(self, db_session: AsyncSession):
        self.db = db_session
        self.listing_repo = ListingRepository(db_session)

    @staticmethod
    def _check_pagination(page: int, limit: int) -> None:
        errors = []
        if page < 1:
            errors.append({"field": "page", "message": "Input should be greater than or equal to 1"})
        if limit < 1 or limit > settings.max_page_size:
            errors.append({
                "field": "limit",
                "message": f"Input should be between 1 and {settings.max_page_size}"
            })
        if errors:
            raise ValidationFailedError(errors)

    async def list_listings(self, page: int = 1, limit: Optional[int] = None) -> Dict[str, Any]:
        """
        Get one page of listings, newest first.

        Args:
            page: 1-based page number
            limit: Page size, defaults to DEFAULT_PAGE_SIZE

        Returns:
            Dictionary with total, page, limit and listings

        Raises:
            ValidationFailedError: If page or limit is out of range
        """
        if limit is None:
            limit = settings.default_page_size
        self._check_pagination(page, limit)

        listings, total = await self.listing_repo.list_page(page, limit)
        logger.debug(f"Listed page {page} ({len(listings)} of {total} listings)")

        return {
            "total": total,
            "page": page,
            "limit": limit,
            "listings": [listing.to_dict() for listing in listings],
        }

    async def get_listing(self, listing_id: str) -> Listing:
        """
        Get a listing by ID.

        Raises:
            MalformedIdentifierError: If the id is not 24 hex characters
            ListingNotFoundError: If no listing has this id
        """
        listing_id = validate_object_id(listing_id)
        listing = await self.listing_repo.get_by_id(listing_id)
        if listing is None:
            raise ListingNotFoundError()
        return listing

    async def create_listing(
        self,
        payload: Union[ListingCreate, Dict[str, Any]],
        current_user: CurrentUser
    ) -> Listing:
        """
        Create a new listing.

        Args:
            payload: Create-profile model or raw payload
            current_user: Authenticated user publishing the listing

        Returns:
            Created listing with zeroed counters

        Raises:
            ValidationFailedError: If the payload violates the create profile
            DuplicateKeyError: If the reference id is already used
        """
        if not isinstance(payload, ListingCreate):
            payload = parse_listing_payload(payload)

        listing = await self.listing_repo.create_listing(payload.model_dump())
        logger.info(
            f"Listing created by {current_user.email}: {listing.title} (ID: {listing.id})",
            extra={"user_id": current_user.id}
        )
        return listing

    async def update_listing(
        self,
        listing_id: str,
        payload: Union[ListingUpdate, Dict[str, Any]],
        current_user: CurrentUser
    ) -> Listing:
        """
        Apply supplied fields to a listing.

        Args:
            listing_id: Identifier of the listing
            payload: Update-profile model or raw partial payload
            current_user: Authenticated user making the change

        Returns:
            The full updated listing

        Raises:
            MalformedIdentifierError: If the id is not 24 hex characters
            ValidationFailedError: If a supplied field is invalid
            ListingNotFoundError: If no listing has this id
            DuplicateKeyError: If the new reference id is already used
        """
        listing_id = validate_object_id(listing_id)
        if not isinstance(payload, ListingUpdate):
            payload = parse_listing_payload(payload, partial=True)

        listing = await self.listing_repo.update_listing(listing_id, payload.changes())
        if listing is None:
            raise ListingNotFoundError()

        logger.info(
            f"Listing {listing.id} updated by {current_user.email}",
            extra={"user_id": current_user.id}
        )
        return listing

    async def delete_listing(self, listing_id: str, current_user: CurrentUser) -> Listing:
        """
        Delete a listing.

        Returns:
            The deleted listing

        Raises:
            MalformedIdentifierError: If the id is not 24 hex characters
            ListingNotFoundError: If no listing has this id
        """
        listing_id = validate_object_id(listing_id)
        listing = await self.listing_repo.delete_listing(listing_id)
        if listing is None:
            raise ListingNotFoundError()

        logger.info(
            f"Listing {listing_id} deleted by {current_user.email}",
            extra={"user_id": current_user.id}
        )
        return listing
