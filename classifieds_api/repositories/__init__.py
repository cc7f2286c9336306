"""
Repository layer for data access operations.
"""

from .base import BaseRepository, translate_integrity_error
from .user import UserRepository
from .listing import ListingRepository

__all__ = [
    "BaseRepository",
    "translate_integrity_error",
    "UserRepository",
    "ListingRepository",
]
