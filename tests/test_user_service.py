"""
Tests for the user registry (registration, lookups, status, passwords).
"""

import pytest
from sqlalchemy import select

from streaming_accounts.exceptions import (
    DuplicateEmailError,
    DuplicateUsernameError,
    InvalidCredentialsError,
    UserNotFoundError,
)
from streaming_accounts.models.account_security import AccountSecurity
from streaming_accounts.models.activity_log import UserAction
from streaming_accounts.models.preferences import UserPreferences, VideoQuality
from streaming_accounts.models.profile import UserProfile
from streaming_accounts.models.user import UserRole, UserStatus
from streaming_accounts.security import verify_password
from streaming_accounts.services import user_service
from streaming_accounts.services.activity_service import list_user_activity

from helpers import TEST_PASSWORD


class TestRegistration:

    async def test_register_creates_all_records(self, db_session, registered_user):
        user = registered_user
        assert user.status == UserStatus.ACTIVE
        assert user.role == UserRole.USER
        assert user.email_verified is False
        assert user.password_hash != TEST_PASSWORD
        assert verify_password(TEST_PASSWORD, user.password_hash)

        security = (await db_session.execute(
            select(AccountSecurity).where(AccountSecurity.user_id == user.id)
        )).scalar_one()
        assert security.failed_login_attempts == 0
        assert security.account_locked_until is None

        profile = (await db_session.execute(
            select(UserProfile).where(UserProfile.user_id == user.id)
        )).scalar_one()
        assert profile.full_name == "Alice Wong"
        assert profile.display_name == "alice"

        preferences = (await db_session.execute(
            select(UserPreferences).where(UserPreferences.user_id == user.id)
        )).scalar_one()
        assert preferences.preferred_quality == VideoQuality.AUTO
        assert preferences.adult_content_enabled is False
        assert preferences.parental_control_enabled is False

    async def test_register_records_activity(self, db_session, registered_user):
        entries = await list_user_activity(db_session, registered_user.id)
        assert [e.action for e in entries] == [UserAction.REGISTER]

    async def test_email_is_stored_lowercase(self, db_session):
        user = await user_service.register_user(
            db_session, username="bob", email="Bob@Example.COM", password=TEST_PASSWORD
        )
        assert user.email == "bob@example.com"

    async def test_duplicate_username_case_insensitive(self, db_session, registered_user):
        with pytest.raises(DuplicateUsernameError):
            await user_service.register_user(
                db_session, username="ALICE", email="other@example.com", password=TEST_PASSWORD
            )

    async def test_duplicate_email_case_insensitive(self, db_session, registered_user):
        with pytest.raises(DuplicateEmailError):
            await user_service.register_user(
                db_session, username="alice2", email="Alice@Example.com", password=TEST_PASSWORD
            )

    async def test_username_and_email_exist(self, db_session, registered_user):
        assert await user_service.username_exists(db_session, "Alice")
        assert await user_service.email_exists(db_session, "ALICE@example.com")
        assert not await user_service.username_exists(db_session, "carol")


class TestLookups:

    async def test_get_user(self, db_session, registered_user):
        user = await user_service.get_user(db_session, registered_user.id)
        assert user.id == registered_user.id

    async def test_get_user_not_found(self, db_session):
        with pytest.raises(UserNotFoundError):
            await user_service.get_user(db_session, 9999)

    async def test_find_by_username_or_email(self, db_session, registered_user):
        by_name = await user_service.find_by_username_or_email(db_session, " ALICE ")
        by_email = await user_service.find_by_username_or_email(db_session, "alice@EXAMPLE.com")
        assert by_name.id == by_email.id == registered_user.id
        assert await user_service.find_by_username_or_email(db_session, "nobody") is None

    async def test_list_and_count_active_users(self, db_session, registered_user):
        bob = await user_service.register_user(
            db_session, username="bob", email="bob@example.com", password=TEST_PASSWORD
        )
        await user_service.update_user_status(db_session, bob.id, UserStatus.BANNED)

        active = await user_service.list_active_users(db_session)
        assert [u.id for u in active] == [registered_user.id]
        assert await user_service.count_active_users(db_session) == 1

    async def test_search_users(self, db_session, registered_user):
        await user_service.register_user(
            db_session, username="bob", email="bob@example.com", password=TEST_PASSWORD,
            display_name="Bobby Tables",
        )

        assert [u.username for u in await user_service.search_users(db_session, "ALI")] == ["alice"]
        assert [u.username for u in await user_service.search_users(db_session, "tables")] == ["bob"]
        assert [u.username for u in await user_service.search_users(db_session, "wong")] == ["alice"]
        assert len(await user_service.search_users(db_session, "example.com")) == 2
        assert await user_service.search_users(db_session, "zzz") == []


class TestAccountChanges:

    async def test_update_user_status(self, db_session, registered_user):
        user = await user_service.update_user_status(
            db_session, registered_user.id, UserStatus.SUSPENDED
        )
        assert user.status == UserStatus.SUSPENDED
        assert user.is_active() is False

    async def test_update_status_unknown_user(self, db_session):
        with pytest.raises(UserNotFoundError):
            await user_service.update_user_status(db_session, 42, UserStatus.ACTIVE)

    async def test_mark_email_verified(self, db_session, registered_user):
        user = await user_service.mark_email_verified(db_session, registered_user.id)
        assert user.email_verified is True

    async def test_change_password(self, db_session, registered_user):
        await user_service.change_password(
            db_session, registered_user.id, TEST_PASSWORD, "BrandNewPass42"
        )
        assert verify_password("BrandNewPass42", registered_user.password_hash)
        assert not verify_password(TEST_PASSWORD, registered_user.password_hash)

        entries = await list_user_activity(
            db_session, registered_user.id, action=UserAction.PASSWORD_CHANGE
        )
        assert len(entries) == 1

    async def test_change_password_wrong_current(self, db_session, registered_user):
        with pytest.raises(InvalidCredentialsError):
            await user_service.change_password(
                db_session, registered_user.id, "NotMyPassword", "BrandNewPass42"
            )
        assert verify_password(TEST_PASSWORD, registered_user.password_hash)
