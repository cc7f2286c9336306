"""
Pydantic schemas for listing requests and responses.
Defines the nested listing contract and its create and update profiles.
"""

from pydantic import Field, EmailStr, StringConstraints, AfterValidator, ValidationError
from typing import Annotated, Any, Dict, List, Optional, Union
from datetime import date, datetime
from classifieds_api.models.listing import OfferType, Currency, ListingStatus
from classifieds_api.schemas.base import CamelModel, PartialModel
from classifieds_api.utils.exceptions import ValidationFailedError
from classifieds_api.utils.validators import PHONE_PATTERN, URL_PATTERN, format_violations


def _check_phone(v: str) -> str:
    if not PHONE_PATTERN.match(v):
        raise ValueError("Phone may only contain digits, spaces and + - ( )")
    return v


def _check_url(v: str) -> str:
    if not URL_PATTERN.match(v):
        raise ValueError("Must be a valid http(s) URL")
    return v


def _text(max_length: Optional[int] = None):
    return StringConstraints(strip_whitespace=True, min_length=1, max_length=max_length)


# Field rules, shared verbatim by the create and update profiles.
# Length limits match the listing columns.
NonEmptyStr = Annotated[str, _text()]
Title = Annotated[str, _text(100)]
Description = Annotated[str, _text(2000)]
ReferenceId = Annotated[str, _text(100)]
Address = Annotated[str, _text(255)]
PlaceName = Annotated[str, _text(120)]
ZipCode = Annotated[str, _text(20)]
Phone = Annotated[str, _text(50), AfterValidator(_check_phone)]
Url = Annotated[str, _text(2048), AfterValidator(_check_url)]
Price = Annotated[float, Field(gt=0, allow_inf_nan=False)]
Area = Annotated[float, Field(gt=0, allow_inf_nan=False)]
RoomCount = Annotated[int, Field(ge=0)]
Latitude = Annotated[float, Field(ge=-90, le=90)]
Longitude = Annotated[float, Field(ge=-180, le=180)]
Accuracy = Annotated[float, Field(ge=0)]


class Coordinates(CamelModel):
    """Geolocation of the property."""

    latitude: Latitude
    longitude: Longitude
    accuracy: Accuracy


class Location(CamelModel):
    address: Address
    city: PlaceName
    state: PlaceName
    zip_code: ZipCode
    country: PlaceName
    coordinates: Coordinates


class Characteristics(CamelModel):
    """Physical characteristics of the property."""

    type: NonEmptyStr
    area: Area = Field(..., description="Surface in square metres")
    bedrooms: RoomCount
    bathrooms: RoomCount
    floor: int
    elevator: bool
    year_built: int
    parking_spaces: RoomCount
    furnished: bool
    pool: bool
    garden: bool
    features: List[str]


class PropertyDetails(CamelModel):
    reference_id: ReferenceId = Field(..., description="Agency reference, unique across listings")
    characteristics: Characteristics
    location: Location
    images: List[Url]


class ListingBase(CamelModel):
    """Base listing schema with every client-supplied field."""

    title: Title
    contact_email: EmailStr
    contact_phone: Phone
    offer_type: OfferType
    price: Price
    currency: Currency
    property: PropertyDetails
    description: Description
    available_from: date
    status: ListingStatus
    professional: bool
    logo: Url


class ListingCreate(ListingBase):
    """Schema for creating a listing: every field is required."""

    model_config = {
        "json_schema_extra": {
            "example": {
                "title": "Modern flat in Madrid centre",
                "contactEmail": "contact@example.com",
                "contactPhone": "+34 612 345 678",
                "offerType": "rent",
                "price": 1500,
                "currency": "EUR",
                "property": {
                    "referenceId": "REF-0001",
                    "characteristics": {
                        "type": "apartment",
                        "area": 85,
                        "bedrooms": 2,
                        "bathrooms": 1,
                        "floor": 3,
                        "elevator": True,
                        "yearBuilt": 2020,
                        "parkingSpaces": 1,
                        "furnished": True,
                        "pool": False,
                        "garden": False,
                        "features": ["balcony", "central-heating"]
                    },
                    "location": {
                        "address": "Calle Mayor 10",
                        "city": "Madrid",
                        "state": "Madrid",
                        "zipCode": "28013",
                        "country": "Spain",
                        "coordinates": {"latitude": 40.4168, "longitude": -3.7038, "accuracy": 10}
                    },
                    "images": ["https://example.com/image1.jpg"]
                },
                "description": "Renovated flat right in the centre of Madrid.",
                "availableFrom": "2025-02-01",
                "status": "available",
                "professional": False,
                "logo": "https://example.com/logo.png"
            }
        }
    }


class CoordinatesUpdate(PartialModel):
    latitude: Optional[Latitude] = None
    longitude: Optional[Longitude] = None
    accuracy: Optional[Accuracy] = None


class LocationUpdate(PartialModel):
    address: Optional[Address] = None
    city: Optional[PlaceName] = None
    state: Optional[PlaceName] = None
    zip_code: Optional[ZipCode] = None
    country: Optional[PlaceName] = None
    coordinates: Optional[CoordinatesUpdate] = None


class CharacteristicsUpdate(PartialModel):
    type: Optional[NonEmptyStr] = None
    area: Optional[Area] = None
    bedrooms: Optional[RoomCount] = None
    bathrooms: Optional[RoomCount] = None
    floor: Optional[int] = None
    elevator: Optional[bool] = None
    year_built: Optional[int] = None
    parking_spaces: Optional[RoomCount] = None
    furnished: Optional[bool] = None
    pool: Optional[bool] = None
    garden: Optional[bool] = None
    features: Optional[List[str]] = None


class PropertyDetailsUpdate(PartialModel):
    reference_id: Optional[ReferenceId] = None
    characteristics: Optional[CharacteristicsUpdate] = None
    location: Optional[LocationUpdate] = None
    images: Optional[List[Url]] = None


class ListingUpdate(PartialModel):
    """Schema for updating a listing: only supplied fields are validated and applied."""

    title: Optional[Title] = None
    contact_email: Optional[EmailStr] = None
    contact_phone: Optional[Phone] = None
    offer_type: Optional[OfferType] = None
    price: Optional[Price] = None
    currency: Optional[Currency] = None
    property: Optional[PropertyDetailsUpdate] = None
    description: Optional[Description] = None
    available_from: Optional[date] = None
    status: Optional[ListingStatus] = None
    professional: Optional[bool] = None
    logo: Optional[Url] = None

    def changes(self) -> Dict[str, Any]:
        """Nested dictionary of the fields the client actually sent."""
        return self.model_dump(exclude_unset=True)


class ListingResponse(ListingBase):
    """Schema for listing responses."""

    id: str
    favorites: int = 0
    views: int = 0
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class ListingListResponse(CamelModel):
    """Schema for a page of listings."""

    total: int = Field(..., description="Total number of listings")
    page: int
    limit: int
    listings: List[ListingResponse]


class ListingDeleteResponse(CamelModel):
    success: bool = True
    message: str = "Listing deleted"
    listing: ListingResponse


def validate_listing_payload(payload: Any, partial: bool = False) -> List[Dict[str, str]]:
    """
    Validate an untyped listing payload against the create or update profile.

    Every violation is collected; validation never stops at the first one.

    Args:
        payload: Decoded JSON body
        partial: Use the update profile (all fields optional) when True

    Returns:
        List of ``{field, message}`` violations, empty when the payload is valid
    """
    schema = ListingUpdate if partial else ListingCreate
    try:
        schema.model_validate(payload)
    except ValidationError as e:
        return format_violations(e.errors())
    return []


def parse_listing_payload(payload: Any, partial: bool = False) -> Union[ListingCreate, ListingUpdate]:
    """
    Validate and coerce a listing payload.

    Raises:
        ValidationFailedError: Carrying every violation found
    """
    schema = ListingUpdate if partial else ListingCreate
    try:
        return schema.model_validate(payload)
    except ValidationError as e:
        raise ValidationFailedError(format_violations(e.errors()))
