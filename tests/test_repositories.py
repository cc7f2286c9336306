"""
Tests for repository classes.
Covers persistence, constraint translation and pagination.
"""

import pytest
from datetime import date
from sqlalchemy.exc import IntegrityError

from classifieds_api.models.listing import OfferType, Currency, ListingStatus
from classifieds_api.models.user import UserRole
from classifieds_api.repositories.base import translate_integrity_error
from classifieds_api.repositories.listing import ListingRepository
from classifieds_api.repositories.user import UserRepository
from classifieds_api.utils.auth import verify_password
from classifieds_api.utils.exceptions import DuplicateKeyError, ValidationFailedError
from tests.conftest import UserFactory, ListingFactory, TEST_PASSWORD


class TestUserRepository:
    """Test user persistence."""

    @pytest.mark.asyncio
    async def test_create_user_normalizes_email_and_hashes_password(self, user_repository: UserRepository):
        user = await UserFactory.create_user(user_repository, email="  Mixed.Case@Example.COM ")

        assert user.email == "mixed.case@example.com"
        assert user.hashed_password != TEST_PASSWORD
        assert verify_password(TEST_PASSWORD, user.hashed_password)
        assert user.role == UserRole.USER
        assert user.is_active is True
        assert len(user.id) == 24

    @pytest.mark.asyncio
    async def test_duplicate_email_differing_in_case(self, user_repository: UserRepository):
        await UserFactory.create_user(user_repository, email="dup@example.com")

        with pytest.raises(DuplicateKeyError) as exc_info:
            await UserFactory.create_user(user_repository, email="DUP@example.com")

        assert exc_info.value.status_code == 409
        assert exc_info.value.field == "email"
        assert exc_info.value.detail == "email already exists"

    @pytest.mark.asyncio
    async def test_get_by_email_ignores_case(self, user_repository: UserRepository, test_user):
        found = await user_repository.get_by_email("OWNER@EXAMPLE.COM")
        assert found is not None
        assert found.id == test_user.id

    @pytest.mark.asyncio
    async def test_to_dict_never_contains_hash(self, test_user):
        data = test_user.to_dict()

        assert "hashed_password" not in data
        assert "password" not in data
        assert data["role"] == "user"

    @pytest.mark.asyncio
    async def test_update_password_rehashes(self, user_repository: UserRepository, test_user):
        old_hash = test_user.hashed_password

        updated = await user_repository.update_password(test_user.id, TEST_PASSWORD)

        assert updated.hashed_password != old_hash
        assert verify_password(TEST_PASSWORD, updated.hashed_password)

    @pytest.mark.asyncio
    async def test_update_profile_rejects_taken_email(self, user_repository: UserRepository, test_user, test_admin):
        with pytest.raises(DuplicateKeyError):
            await user_repository.update_profile(test_user.id, {"email": "Admin@Example.com"})

    @pytest.mark.asyncio
    async def test_update_profile_keeps_own_email(self, user_repository: UserRepository, test_user):
        updated = await user_repository.update_profile(
            test_user.id, {"email": "OWNER@example.com", "name": "Renamed"}
        )

        assert updated.email == "owner@example.com"
        assert updated.name == "Renamed"

    @pytest.mark.asyncio
    async def test_update_user_status(self, user_repository: UserRepository, test_user):
        updated = await user_repository.update_user_status(test_user.id, False)
        assert updated.is_active is False

    @pytest.mark.asyncio
    async def test_update_missing_user_returns_none(self, user_repository: UserRepository):
        assert await user_repository.update_user_status("0" * 24, False) is None


class TestListingRepository:
    """Test listing persistence."""

    @pytest.mark.asyncio
    async def test_create_listing_starts_with_zero_counters(self, listing_repository: ListingRepository):
        listing = await ListingFactory.create_listing(listing_repository, reference_id="REF-100")

        assert len(listing.id) == 24
        assert listing.favorites == 0
        assert listing.views == 0
        assert listing.reference_id == "REF-100"
        assert listing.created_at is not None

    @pytest.mark.asyncio
    async def test_to_dict_rebuilds_nested_shape(self, test_listing):
        data = test_listing.to_dict()

        assert data["property"]["reference_id"] == "REF-FIXTURE-1"
        assert data["property"]["location"]["city"] == "Madrid"
        assert data["property"]["location"]["coordinates"]["latitude"] == pytest.approx(40.4168)
        assert data["property"]["characteristics"]["year_built"] == 2010
        assert data["price"] == 1200.0
        assert data["offer_type"] == "rent"

    @pytest.mark.asyncio
    async def test_duplicate_reference_id(self, listing_repository: ListingRepository, test_listing):
        with pytest.raises(DuplicateKeyError) as exc_info:
            await ListingFactory.create_listing(listing_repository, reference_id="REF-FIXTURE-1")

        assert exc_info.value.status_code == 409
        assert exc_info.value.field == "property.referenceId"

    @pytest.mark.asyncio
    async def test_check_constraint_backs_up_validator(self, listing_repository: ListingRepository):
        payload = ListingFactory.create_listing_data()
        data = {
            "title": payload["title"],
            "contact_email": payload["contactEmail"],
            "contact_phone": payload["contactPhone"],
            "offer_type": OfferType.RENT,
            "price": -5,
            "currency": Currency.EUR,
            "property": {
                "reference_id": "REF-NEGATIVE",
                "characteristics": {"type": "flat"},
                "location": {
                    "address": "a", "city": "b", "state": "c", "zip_code": "d", "country": "e",
                    "coordinates": {"latitude": 0, "longitude": 0, "accuracy": 1},
                },
                "images": [],
            },
            "description": "d",
            "available_from": date(2025, 1, 1),
            "status": ListingStatus.AVAILABLE,
            "professional": False,
            "logo": "https://example.com/logo.png",
        }

        with pytest.raises(ValidationFailedError) as exc_info:
            await listing_repository.create_listing(data)

        assert exc_info.value.field_errors == [
            {"field": "price", "message": "Price must be greater than 0"}
        ]

    @pytest.mark.asyncio
    async def test_pagination_windows(self, listing_repository: ListingRepository):
        created = [
            await ListingFactory.create_listing(listing_repository, reference_id=f"REF-{i:03d}")
            for i in range(15)
        ]

        first, total = await listing_repository.list_page(1, 10)
        second, _ = await listing_repository.list_page(2, 10)
        third, _ = await listing_repository.list_page(3, 10)

        assert total == 15
        assert len(first) == 10
        assert len(second) == 5
        assert third == []

        ids = [listing.id for listing in first + second]
        assert len(set(ids)) == 15
        assert set(ids) == {listing.id for listing in created}

    @pytest.mark.asyncio
    async def test_newest_listing_comes_first(self, listing_repository: ListingRepository):
        for i in range(3):
            last = await ListingFactory.create_listing(listing_repository, reference_id=f"REF-ORDER-{i}")

        page, _ = await listing_repository.list_page(1, 10)

        assert page[0].id == last.id

    @pytest.mark.asyncio
    async def test_update_applies_only_supplied_fields(self, listing_repository: ListingRepository, test_listing):
        original = test_listing.to_dict()

        updated = await listing_repository.update_listing(test_listing.id, {"title": "Only the title"})
        data = updated.to_dict()

        assert data["title"] == "Only the title"
        for key in ("price", "description", "property", "status", "logo"):
            assert data[key] == original[key]

    @pytest.mark.asyncio
    async def test_update_merges_characteristics(self, listing_repository: ListingRepository, test_listing):
        updated = await listing_repository.update_listing(
            test_listing.id,
            {"property": {"characteristics": {"bedrooms": 5}, "location": {"coordinates": {"latitude": 41.0}}}}
        )

        assert updated.characteristics["bedrooms"] == 5
        assert updated.characteristics["area"] == 85.5
        assert updated.characteristics["features"] == ["balcony", "storage"]
        assert updated.latitude == 41.0
        assert updated.longitude == pytest.approx(-3.7038)

    @pytest.mark.asyncio
    async def test_update_to_taken_reference_id(self, listing_repository: ListingRepository, test_listing):
        other = await ListingFactory.create_listing(listing_repository, reference_id="REF-OTHER")

        with pytest.raises(DuplicateKeyError):
            await listing_repository.update_listing(other.id, {"property": {"reference_id": "REF-FIXTURE-1"}})

    @pytest.mark.asyncio
    async def test_update_missing_listing(self, listing_repository: ListingRepository):
        assert await listing_repository.update_listing("0" * 24, {"title": "x"}) is None

    @pytest.mark.asyncio
    async def test_delete_returns_removed_listing(self, listing_repository: ListingRepository, test_listing):
        listing_id = test_listing.id

        deleted = await listing_repository.delete_listing(listing_id)

        assert deleted.id == listing_id
        assert await listing_repository.get_by_id(listing_id) is None
        assert await listing_repository.delete_listing(listing_id) is None


class TestIntegrityErrorTranslation:
    """Test mapping of driver constraint messages."""

    def _error(self, message: str) -> IntegrityError:
        return IntegrityError("INSERT ...", {}, Exception(message))

    def test_sqlite_unique_violation(self):
        translated = translate_integrity_error(
            self._error("UNIQUE constraint failed: listings.reference_id")
        )
        assert isinstance(translated, DuplicateKeyError)
        assert translated.field == "property.referenceId"

    def test_postgres_unique_violation(self):
        translated = translate_integrity_error(self._error(
            'duplicate key value violates unique constraint "ix_users_email"\n'
            "DETAIL:  Key (email)=(a@example.com) already exists."
        ))
        assert isinstance(translated, DuplicateKeyError)
        assert translated.field == "email"

    def test_postgres_check_violation(self):
        translated = translate_integrity_error(self._error(
            'new row for relation "listings" violates check constraint "ck_listings_longitude_range"'
        ))
        assert isinstance(translated, ValidationFailedError)
        assert translated.field_errors[0]["field"] == "property.location.coordinates.longitude"

    def test_not_null_violation(self):
        translated = translate_integrity_error(self._error("NOT NULL constraint failed: listings.zip_code"))
        assert isinstance(translated, ValidationFailedError)
        assert translated.field_errors == [{"field": "zipCode", "message": "Field required"}]

    def test_unknown_failure_is_returned_unchanged(self):
        error = self._error("FOREIGN KEY constraint failed")
        assert translate_integrity_error(error) is error
