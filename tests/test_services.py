"""
Tests for service classes.
Tests registration, login, account management and listing business logic.
"""

import pytest

from classifieds_api.models.user import User
from classifieds_api.services.auth import AuthService
from classifieds_api.services.listing import ListingService
from classifieds_api.utils.auth import create_access_token, verify_token, verify_password
from classifieds_api.utils.exceptions import (
    DuplicateKeyError,
    ForbiddenError,
    InvalidCredentialsError,
    ListingNotFoundError,
    MalformedIdentifierError,
    UnauthorizedError,
    UserNotFoundError,
    ValidationFailedError
)
from tests.conftest import ListingFactory, TEST_PASSWORD, as_current_user


class TestAuthService:
    """Test AuthService functionality."""

    @pytest.mark.asyncio
    async def test_register_returns_user_and_token(self, auth_service: AuthService):
        user, token = await auth_service.register("New Person", "New.Person@Example.com", "secret1")

        assert user.email == "new.person@example.com"
        assert user.role.value == "user"
        assert user.is_active is True
        assert verify_token(token).user_id == user.id

    @pytest.mark.asyncio
    async def test_register_duplicate_email_case_insensitive(self, auth_service: AuthService, test_user: User):
        with pytest.raises(DuplicateKeyError) as exc_info:
            await auth_service.register("Copy", "Owner@Example.COM", "secret1")

        assert exc_info.value.field == "email"

    @pytest.mark.asyncio
    async def test_login_success(self, auth_service: AuthService, test_user: User):
        user, token = await auth_service.login("owner@example.com", TEST_PASSWORD)

        assert user.id == test_user.id
        assert verify_token(token).user_id == test_user.id

    @pytest.mark.asyncio
    async def test_login_wrong_password(self, auth_service: AuthService, test_user: User):
        with pytest.raises(InvalidCredentialsError) as exc_info:
            await auth_service.login(test_user.email, "wrong-password")

        assert exc_info.value.detail == "Invalid credentials"

    @pytest.mark.asyncio
    async def test_login_unknown_email(self, auth_service: AuthService):
        with pytest.raises(InvalidCredentialsError):
            await auth_service.login("nobody@example.com", TEST_PASSWORD)

    @pytest.mark.asyncio
    async def test_login_inactive_user(self, auth_service: AuthService, test_inactive_user: User):
        with pytest.raises(UnauthorizedError) as exc_info:
            await auth_service.login(test_inactive_user.email, TEST_PASSWORD)

        assert exc_info.value.detail == "User inactive"

    @pytest.mark.asyncio
    async def test_verify_user_password(self, auth_service: AuthService, test_user: User):
        assert await auth_service.verify_user_password(test_user, TEST_PASSWORD) is True
        assert await auth_service.verify_user_password(test_user, "nope-nope") is False

    @pytest.mark.asyncio
    async def test_change_password(self, auth_service: AuthService, test_user: User):
        await auth_service.change_password(test_user.id, TEST_PASSWORD, "brand-new-pass")

        user, _ = await auth_service.login(test_user.email, "brand-new-pass")
        assert verify_password("brand-new-pass", user.hashed_password)

        with pytest.raises(InvalidCredentialsError):
            await auth_service.login(test_user.email, TEST_PASSWORD)

    @pytest.mark.asyncio
    async def test_change_password_wrong_current(self, auth_service: AuthService, test_user: User):
        with pytest.raises(UnauthorizedError) as exc_info:
            await auth_service.change_password(test_user.id, "not-my-password", "brand-new-pass")

        assert exc_info.value.detail == "Current password is incorrect"

    @pytest.mark.asyncio
    async def test_change_password_to_same_value_rehashes(self, auth_service: AuthService, test_user: User):
        old_hash = test_user.hashed_password

        await auth_service.change_password(test_user.id, TEST_PASSWORD, TEST_PASSWORD)

        user = await auth_service.get_user_by_id(test_user.id)
        assert user.hashed_password != old_hash

    @pytest.mark.asyncio
    async def test_update_profile(self, auth_service: AuthService, test_user: User):
        user = await auth_service.update_profile(test_user.id, {"name": "Changed", "email": "Changed@Example.com"})

        assert user.name == "Changed"
        assert user.email == "changed@example.com"

    @pytest.mark.asyncio
    async def test_update_profile_email_taken(self, auth_service: AuthService, test_user: User, test_admin: User):
        with pytest.raises(DuplicateKeyError):
            await auth_service.update_profile(test_user.id, {"email": test_admin.email.upper()})

    @pytest.mark.asyncio
    async def test_get_user_from_token_unknown_user(self, auth_service: AuthService):
        with pytest.raises(UnauthorizedError) as exc_info:
            await auth_service.get_user_from_token(create_access_token("0" * 24))

        assert exc_info.value.detail == "User not found"

    @pytest.mark.asyncio
    async def test_admin_cannot_deactivate_self(self, auth_service: AuthService, test_admin: User):
        with pytest.raises(ForbiddenError):
            await auth_service.update_user_status(test_admin.id, test_admin.id, False)

    @pytest.mark.asyncio
    async def test_update_status_of_missing_user(self, auth_service: AuthService, test_admin: User):
        with pytest.raises(UserNotFoundError):
            await auth_service.update_user_status(test_admin.id, "0" * 24, False)

    @pytest.mark.asyncio
    async def test_list_users(self, auth_service: AuthService, test_user: User, test_admin: User):
        users, total = await auth_service.list_users(page=1, limit=10)

        assert total == 2
        assert {u.id for u in users} == {test_user.id, test_admin.id}


class TestListingService:
    """Test ListingService functionality."""

    @pytest.mark.asyncio
    async def test_create_from_raw_payload(self, listing_service: ListingService, test_user: User):
        listing = await listing_service.create_listing(
            ListingFactory.create_listing_data(reference_id="REF-SVC-1"),
            as_current_user(test_user)
        )

        assert listing.reference_id == "REF-SVC-1"
        assert listing.favorites == 0
        assert listing.views == 0

    @pytest.mark.asyncio
    async def test_create_rejects_invalid_payload(self, listing_service: ListingService, test_user: User):
        with pytest.raises(ValidationFailedError) as exc_info:
            await listing_service.create_listing(
                ListingFactory.create_listing_data(price=0),
                as_current_user(test_user)
            )

        assert exc_info.value.field_errors[0]["field"] == "price"

    @pytest.mark.asyncio
    async def test_get_listing_malformed_id(self, listing_service: ListingService):
        with pytest.raises(MalformedIdentifierError):
            await listing_service.get_listing("invalid-id")

    @pytest.mark.asyncio
    async def test_get_listing_missing(self, listing_service: ListingService):
        with pytest.raises(ListingNotFoundError) as exc_info:
            await listing_service.get_listing("507f1f77bcf86cd799439011")

        assert exc_info.value.status_code == 404
        assert exc_info.value.detail == "Listing not found"

    @pytest.mark.asyncio
    async def test_update_with_invalid_price(self, listing_service: ListingService, test_user: User, test_listing):
        with pytest.raises(ValidationFailedError) as exc_info:
            await listing_service.update_listing(test_listing.id, {"price": -500}, as_current_user(test_user))

        assert exc_info.value.field_errors[0]["field"] == "price"

        unchanged = await listing_service.get_listing(test_listing.id)
        assert float(unchanged.price) == 1200.0

    @pytest.mark.asyncio
    async def test_update_title_only(self, listing_service: ListingService, test_user: User, test_listing):
        before = test_listing.to_dict()

        listing = await listing_service.update_listing(
            test_listing.id, {"title": "Fresh title"}, as_current_user(test_user)
        )
        after = listing.to_dict()

        assert after["title"] == "Fresh title"
        for key in ("price", "currency", "property", "description", "available_from", "logo"):
            assert after[key] == before[key]

    @pytest.mark.asyncio
    async def test_update_missing_listing(self, listing_service: ListingService, test_user: User):
        with pytest.raises(ListingNotFoundError):
            await listing_service.update_listing("0" * 24, {"title": "x"}, as_current_user(test_user))

    @pytest.mark.asyncio
    async def test_delete_listing(self, listing_service: ListingService, test_user: User, test_listing):
        deleted = await listing_service.delete_listing(test_listing.id, as_current_user(test_user))

        assert deleted.reference_id == "REF-FIXTURE-1"
        with pytest.raises(ListingNotFoundError):
            await listing_service.get_listing(test_listing.id)

    @pytest.mark.asyncio
    async def test_list_listings_shape(self, listing_service: ListingService, test_listing):
        result = await listing_service.list_listings(page=1, limit=5)

        assert result["total"] == 1
        assert result["page"] == 1
        assert result["limit"] == 5
        assert result["listings"][0]["id"] == test_listing.id

    @pytest.mark.asyncio
    async def test_list_listings_uses_default_page_size(self, listing_service: ListingService):
        result = await listing_service.list_listings()
        assert result["limit"] == 10
        assert result["listings"] == []

    @pytest.mark.asyncio
    @pytest.mark.parametrize("page,limit,field", [(0, 10, "page"), (1, 0, "limit"), (1, 101, "limit")])
    async def test_list_listings_rejects_bad_pagination(self, listing_service: ListingService, page, limit, field):
        with pytest.raises(ValidationFailedError) as exc_info:
            await listing_service.list_listings(page=page, limit=limit)

        assert exc_info.value.field_errors[0]["field"] == field
