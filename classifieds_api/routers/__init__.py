"""
API route handlers for the classifieds API.
"""

from .auth import router as auth_router
from .listings import router as listings_router
from .users import router as users_router

__all__ = ["auth_router", "listings_router", "users_router"]
