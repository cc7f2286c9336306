"""
Listing API endpoints for classifieds CRUD.
Reads are public; writes require an authenticated user.
"""

from fastapi import APIRouter, Depends, status, Query
from typing import Optional

from classifieds_api.config import settings
from classifieds_api.services.listing import ListingService
from classifieds_api.schemas.auth import CurrentUser
from classifieds_api.schemas.listing import (
    ListingCreate,
    ListingUpdate,
    ListingResponse,
    ListingListResponse,
    ListingDeleteResponse
)
from classifieds_api.schemas.error import get_error_responses
from classifieds_api.utils.dependencies import (
    get_current_user,
    get_optional_current_user,
    get_listing_service,
    valid_object_id
)


router = APIRouter(prefix="/ads", tags=["Listings"])


@router.get(
    "",
    response_model=ListingListResponse,
    summary="List listings",
    description="Page through listings, newest first",
    responses=get_error_responses(400)
)
async def list_listings(
    page: int = Query(1, ge=1, description="Page number (1-based)"),
    limit: int = Query(
        settings.default_page_size,
        ge=1,
        le=settings.max_page_size,
        description="Number of listings per page"
    ),
    current_user: Optional[CurrentUser] = Depends(get_optional_current_user),
    listing_service: ListingService = Depends(get_listing_service)
) -> ListingListResponse:
    """
    Get one page of listings.

    Pages past the end return an empty list with the real total.
    """
    result = await listing_service.list_listings(page=page, limit=limit)
    return ListingListResponse.model_validate(result)


@router.post(
    "",
    response_model=ListingResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create listing",
    description="Publish a new listing. Every field is required.",
    responses=get_error_responses(400, 401, 409)
)
async def create_listing(
    listing_data: ListingCreate,
    current_user: CurrentUser = Depends(get_current_user),
    listing_service: ListingService = Depends(get_listing_service)
) -> ListingResponse:
    """
    Create a new listing.

    Args:
        listing_data: Listing payload, validated against the create profile
        current_user: Authenticated user
        listing_service: Listing service

    Returns:
        Created listing with id and zeroed counters

    Raises:
        DuplicateKeyError: If property.referenceId is already used
    """
    listing = await listing_service.create_listing(listing_data, current_user)
    return ListingResponse.model_validate(listing.to_dict())


@router.get(
    "/{id}",
    response_model=ListingResponse,
    summary="Get listing",
    description="Get a single listing by its identifier",
    responses=get_error_responses(400, 404)
)
async def get_listing(
    listing_id: str = Depends(valid_object_id),
    current_user: Optional[CurrentUser] = Depends(get_optional_current_user),
    listing_service: ListingService = Depends(get_listing_service)
) -> ListingResponse:
    listing = await listing_service.get_listing(listing_id)
    return ListingResponse.model_validate(listing.to_dict())


@router.put(
    "/{id}",
    response_model=ListingResponse,
    summary="Update listing",
    description="Change supplied fields only; nested objects are merged",
    responses=get_error_responses(400, 401, 404, 409)
)
async def update_listing(
    listing_data: ListingUpdate,
    current_user: CurrentUser = Depends(get_current_user),
    listing_id: str = Depends(valid_object_id),
    listing_service: ListingService = Depends(get_listing_service)
) -> ListingResponse:
    """
    Update a listing.

    Args:
        listing_data: Partial payload, validated against the update profile
        current_user: Authenticated user
        listing_id: Identifier of the listing
        listing_service: Listing service

    Returns:
        The full updated listing

    Raises:
        ListingNotFoundError: If no listing has this id
    """
    listing = await listing_service.update_listing(listing_id, listing_data, current_user)
    return ListingResponse.model_validate(listing.to_dict())


@router.delete(
    "/{id}",
    response_model=ListingDeleteResponse,
    summary="Delete listing",
    description="Delete a listing and return it",
    responses=get_error_responses(400, 401, 404)
)
async def delete_listing(
    current_user: CurrentUser = Depends(get_current_user),
    listing_id: str = Depends(valid_object_id),
    listing_service: ListingService = Depends(get_listing_service)
) -> ListingDeleteResponse:
    listing = await listing_service.delete_listing(listing_id, current_user)
    return ListingDeleteResponse(
        success=True,
        message="Listing deleted",
        listing=ListingResponse.model_validate(listing.to_dict())
    )
