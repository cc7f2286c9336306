"""
Database models for the classifieds API.
Includes User and Listing models.
"""

from classifieds_api.models.user import User, UserRole
from classifieds_api.models.listing import Listing, OfferType, Currency, ListingStatus

__all__ = [
    "User",
    "UserRole",
    "Listing",
    "OfferType",
    "Currency",
    "ListingStatus",
]
