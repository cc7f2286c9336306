"""
Listing repository for classifieds persistence.
Maps the nested listing payload onto flat columns and back.
"""

from sqlalchemy.ext.asyncio import AsyncSession
from classifieds_api.repositories.base import BaseRepository
from classifieds_api.models.listing import Listing
from typing import Optional, List, Dict, Any, Tuple
import logging

logger = logging.getLogger(__name__)


class ListingRepository(BaseRepository[Listing]):
    """Repository for listings. Counters are server-managed and start at zero."""

    def __init__(self, db: AsyncSession):
        super().__init__(Listing, db)

    async def create_listing(self, payload: Dict[str, Any]) -> Listing:
        """
        Persist a validated listing payload.

        Args:
            payload: Nested listing data using python field names

        Returns:
            Created listing

        Raises:
            DuplicateKeyError: If the reference id is already used
            ValidationFailedError: If a storage constraint rejects a value
        """
        columns = Listing.columns_from_payload(payload)
        columns["favorites"] = 0
        columns["views"] = 0

        listing = await self.create(columns)
        logger.info(f"Created listing {listing.id} (reference {listing.reference_id})")
        return listing

    async def list_page(self, page: int, limit: int) -> Tuple[List[Listing], int]:
        """Newest listings first, with the total count."""
        return await self.get_page(page=page, limit=limit)

    async def update_listing(self, listing_id: str, changes: Dict[str, Any]) -> Optional[Listing]:
        """
        Apply a partial listing payload.

        Only the supplied fields change. A supplied characteristics block is
        merged into the stored one key by key.

        Args:
            listing_id: Identifier of the listing
            changes: Nested partial payload using python field names

        Returns:
            Updated listing or None if not found
        """
        listing = await self.get_by_id(listing_id)
        if listing is None:
            return None

        columns = Listing.columns_from_payload(changes)
        if "characteristics" in columns:
            columns["characteristics"] = {**(listing.characteristics or {}), **columns["characteristics"]}

        if not columns:
            logger.debug(f"No changes supplied for listing {listing_id}")
            return listing

        updated = await self.update(listing_id, columns)
        logger.info(f"Updated listing {listing_id}: {sorted(columns)}")
        return updated

    async def delete_listing(self, listing_id: str) -> Optional[Listing]:
        """Delete a listing and return the removed record, or None if not found."""
        deleted = await self.delete(listing_id)
        if deleted:
            logger.info(f"Deleted listing {listing_id}")
        return deleted
