"""
Listing model for buy, rent and share classifieds.
Handles listing data with nested property details, location and counters.
"""

from sqlalchemy import (
    String, Text, Integer, Float, Boolean, Date, JSON,
    Enum as SQLEnum, Index, CheckConstraint
)
from sqlalchemy.orm import Mapped, mapped_column
from classifieds_api.database import Base
from datetime import date
from typing import Any, Dict, List
import enum


class OfferType(str, enum.Enum):
    """Kind of offer published by the listing."""
    BUY = "buy"
    RENT = "rent"
    SHARE = "share"


class Currency(str, enum.Enum):
    USD = "USD"
    EUR = "EUR"
    GBP = "GBP"


class ListingStatus(str, enum.Enum):
    AVAILABLE = "available"
    SOLD = "sold"
    RENTED = "rented"


def _enum_column(enum_cls, name: str) -> SQLEnum:
    return SQLEnum(enum_cls, values_callable=lambda e: [m.value for m in e], name=name)


# Location fields stored as plain columns, in payload order
LOCATION_FIELDS = ("address", "city", "state", "zip_code", "country")
COORDINATE_FIELDS = ("latitude", "longitude", "accuracy")
TOP_LEVEL_FIELDS = (
    "title", "contact_email", "contact_phone", "offer_type", "price", "currency",
    "description", "available_from", "status", "professional", "logo",
)

# Check constraint name -> client-facing field path
CHECK_CONSTRAINT_FIELDS = {
    "ck_listings_price_positive": ("price", "Price must be greater than 0"),
    "ck_listings_latitude_range": (
        "property.location.coordinates.latitude", "Latitude must be between -90 and 90"
    ),
    "ck_listings_longitude_range": (
        "property.location.coordinates.longitude", "Longitude must be between -180 and 180"
    ),
}

# Unique column -> client-facing field path
UNIQUE_COLUMN_FIELDS = {
    "reference_id": "property.referenceId",
}


class Listing(Base):
    """
    Listing model for property classifieds.
    Scalar location data is kept in columns so it can be indexed; the
    characteristics block and image list are stored as JSON documents.
    """

    __tablename__ = "listings"
    __table_args__ = (
        CheckConstraint("price > 0", name="ck_listings_price_positive"),
        CheckConstraint("latitude >= -90 AND latitude <= 90", name="ck_listings_latitude_range"),
        CheckConstraint("longitude >= -180 AND longitude <= 180", name="ck_listings_longitude_range"),
    )

    title: Mapped[str] = mapped_column(String(100), nullable=False, index=True)
    contact_email: Mapped[str] = mapped_column(String(255), nullable=False)
    contact_phone: Mapped[str] = mapped_column(String(50), nullable=False)

    offer_type: Mapped[OfferType] = mapped_column(
        _enum_column(OfferType, "offer_type"),
        nullable=False,
        index=True
    )

    price: Mapped[float] = mapped_column(
        Float,
        nullable=False,
        index=True,
        comment="Asking price, strictly positive"
    )

    currency: Mapped[Currency] = mapped_column(_enum_column(Currency, "currency"), nullable=False)

    # Property block
    reference_id: Mapped[str] = mapped_column(
        String(100),
        unique=True,
        nullable=False,
        comment="Agency reference, unique across all listings"
    )

    characteristics: Mapped[Dict[str, Any]] = mapped_column(JSON, nullable=False)
    images: Mapped[List[str]] = mapped_column(JSON, nullable=False, default=list)

    address: Mapped[str] = mapped_column(String(255), nullable=False)
    city: Mapped[str] = mapped_column(String(120), nullable=False, index=True)
    state: Mapped[str] = mapped_column(String(120), nullable=False)
    zip_code: Mapped[str] = mapped_column(String(20), nullable=False)
    country: Mapped[str] = mapped_column(String(120), nullable=False)

    latitude: Mapped[float] = mapped_column(Float, nullable=False)
    longitude: Mapped[float] = mapped_column(Float, nullable=False)
    accuracy: Mapped[float] = mapped_column(Float, nullable=False)

    description: Mapped[str] = mapped_column(Text, nullable=False)
    available_from: Mapped[date] = mapped_column(Date, nullable=False)

    status: Mapped[ListingStatus] = mapped_column(
        _enum_column(ListingStatus, "listing_status"),
        nullable=False,
        index=True
    )

    professional: Mapped[bool] = mapped_column(Boolean, nullable=False)
    logo: Mapped[str] = mapped_column(String(2048), nullable=False)

    # Server-managed counters
    favorites: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    views: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    def __repr__(self) -> str:
        return f"<Listing(id={self.id}, reference_id={self.reference_id}, price={self.price})>"

    @staticmethod
    def columns_from_payload(data: Dict[str, Any]) -> Dict[str, Any]:
        """
        Flatten a validated listing payload into column values.

        Only keys present in ``data`` are emitted, so a partial payload
        yields a partial column mapping.

        Args:
            data: Nested payload using python field names

        Returns:
            Dictionary of column name to value
        """
        columns = {key: data[key] for key in TOP_LEVEL_FIELDS if key in data}

        property_data = data.get("property") or {}
        if "reference_id" in property_data:
            columns["reference_id"] = property_data["reference_id"]
        if "characteristics" in property_data:
            columns["characteristics"] = dict(property_data["characteristics"])
        if "images" in property_data:
            columns["images"] = list(property_data["images"])

        location = property_data.get("location") or {}
        for key in LOCATION_FIELDS:
            if key in location:
                columns[key] = location[key]

        coordinates = location.get("coordinates") or {}
        for key in COORDINATE_FIELDS:
            if key in coordinates:
                columns[key] = coordinates[key]

        return columns

    def to_dict(self) -> dict:
        """
        Convert listing to its nested public representation.

        Returns:
            Dictionary representation of the listing
        """
        return {
            "id": self.id,
            "title": self.title,
            "contact_email": self.contact_email,
            "contact_phone": self.contact_phone,
            "offer_type": self.offer_type.value,
            "price": float(self.price),
            "currency": self.currency.value,
            "property": {
                "reference_id": self.reference_id,
                "characteristics": dict(self.characteristics),
                "location": {
                    **{key: getattr(self, key) for key in LOCATION_FIELDS},
                    "coordinates": {key: getattr(self, key) for key in COORDINATE_FIELDS},
                },
                "images": list(self.images or []),
            },
            "description": self.description,
            "available_from": self.available_from,
            "status": self.status.value,
            "professional": self.professional,
            "logo": self.logo,
            "favorites": self.favorites,
            "views": self.views,
            "created_at": self.created_at,
            "updated_at": self.updated_at,
        }


# Default listing order for pagination
created_order_index = Index(
    "idx_listings_created_id",
    Listing.created_at.desc(),
    Listing.id.desc()
)

# Coordinate index for map-based lookups
coordinates_index = Index(
    "idx_listings_coordinates",
    Listing.latitude,
    Listing.longitude
)
