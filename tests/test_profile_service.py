"""
Tests for profile, preferences and parental-control rules.
"""

from datetime import date

import pytest

from streaming_accounts.exceptions import ParentalControlError, UserNotFoundError
from streaming_accounts.models.activity_log import UserAction
from streaming_accounts.models.preferences import VideoQuality
from streaming_accounts.services import profile_service
from streaming_accounts.services.activity_service import list_user_activity


class TestProfile:

    async def test_get_profile(self, db_session, registered_user):
        profile = await profile_service.get_profile(db_session, registered_user.id)
        assert profile.first_name == "Alice"
        assert profile.language == "id"

    async def test_get_profile_unknown_user(self, db_session):
        with pytest.raises(UserNotFoundError):
            await profile_service.get_profile(db_session, 404)

    async def test_update_profile_records_changed_fields(self, db_session, registered_user):
        profile = await profile_service.update_profile(
            db_session,
            registered_user.id,
            {"first_name": "Alicia", "last_name": "Wong", "birth_date": date(2000, 5, 17)},
        )
        assert profile.full_name == "Alicia Wong"
        assert profile.age(today=date(2026, 5, 16)) == 25
        assert profile.age(today=date(2026, 5, 17)) == 26

        entries = await list_user_activity(
            db_session, registered_user.id, action=UserAction.PROFILE_UPDATE
        )
        assert len(entries) == 1
        # last_name was unchanged, so it isn't listed
        assert entries[0].details == {"changed_fields": ["first_name", "birth_date"]}

    async def test_noop_update_records_nothing(self, db_session, registered_user):
        await profile_service.update_profile(db_session, registered_user.id, {"first_name": "Alice"})
        entries = await list_user_activity(
            db_session, registered_user.id, action=UserAction.PROFILE_UPDATE
        )
        assert entries == []

    async def test_unknown_fields_ignored(self, db_session, registered_user):
        profile = await profile_service.update_profile(
            db_session, registered_user.id, {"user_id": 999, "country": "ID"}
        )
        assert profile.user_id == registered_user.id
        assert profile.country == "ID"


class TestPreferences:

    async def test_update_preferences(self, db_session, registered_user):
        prefs = await profile_service.update_preferences(
            db_session,
            registered_user.id,
            {"preferred_quality": VideoQuality.UHD, "subtitles_enabled": True},
        )
        assert prefs.preferred_quality == VideoQuality.UHD
        assert prefs.subtitles_enabled is True
        assert prefs.autoplay_enabled is True

    async def test_enable_adult_content_without_pin(self, db_session, registered_user):
        prefs = await profile_service.update_preferences(
            db_session, registered_user.id, {"adult_content_enabled": True}
        )
        assert prefs.adult_content_enabled is True


class TestParentalControl:

    async def test_setting_pin_disables_adult_content(self, db_session, registered_user):
        await profile_service.update_preferences(
            db_session, registered_user.id, {"adult_content_enabled": True}
        )
        prefs = await profile_service.set_parental_pin(db_session, registered_user.id, "1234")

        assert prefs.parental_control_enabled is True
        assert prefs.adult_content_enabled is False
        assert prefs.parental_control_pin_hash != "1234"

    async def test_adult_content_blocked_while_pin_set(self, db_session, registered_user):
        await profile_service.set_parental_pin(db_session, registered_user.id, "123456")
        with pytest.raises(ParentalControlError):
            await profile_service.update_preferences(
                db_session, registered_user.id, {"adult_content_enabled": True}
            )

    @pytest.mark.parametrize("pin", ["123", "1234567", "12a4", "", " 1234", "1234\n", "\u0661\u0662\u0663\u0664"])
    async def test_invalid_pin_format(self, db_session, registered_user, pin):
        with pytest.raises(ParentalControlError):
            await profile_service.set_parental_pin(db_session, registered_user.id, pin)

    async def test_verify_pin(self, db_session, registered_user):
        await profile_service.set_parental_pin(db_session, registered_user.id, "4321")
        assert await profile_service.verify_parental_pin(db_session, registered_user.id, "4321")
        assert not await profile_service.verify_parental_pin(db_session, registered_user.id, "1234")

    async def test_verify_without_pin_is_false(self, db_session, registered_user):
        assert not await profile_service.verify_parental_pin(db_session, registered_user.id, "1234")

    async def test_clearing_pin_disables_parental_control(self, db_session, registered_user):
        await profile_service.set_parental_pin(db_session, registered_user.id, "4321")
        prefs = await profile_service.set_parental_pin(db_session, registered_user.id, None)
        assert prefs.parental_control_enabled is False

        prefs = await profile_service.update_preferences(
            db_session, registered_user.id, {"adult_content_enabled": True}
        )
        assert prefs.adult_content_enabled is True
