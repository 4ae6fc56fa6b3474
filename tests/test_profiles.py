"""
Tests for profile and preferences endpoints.

These tests verify:
  - A profile and default preferences exist right after registration
  - PATCH only touches the fields that were sent
  - Parental control: PIN format, adult content forced off, verification
"""

import pytest


class TestProfileEndpoints:

    async def test_get_profile(self, authenticated_client):
        response = await authenticated_client.get("/profiles/me")
        assert response.status_code == 200
        data = response.json()
        assert data["first_name"] == "Test"
        assert data["full_name"] == "Test User"
        assert data["display_name"] == "testuser"
        assert data["language"] == "id"

    async def test_patch_profile(self, authenticated_client):
        response = await authenticated_client.patch(
            "/profiles/me",
            json={"bio": "Documentary fan", "country": "ID", "birth_date": "1995-08-17"},
        )
        assert response.status_code == 200
        data = response.json()
        assert data["bio"] == "Documentary fan"
        assert data["birth_date"] == "1995-08-17"
        # Unsent fields are untouched
        assert data["first_name"] == "Test"

        activity = await authenticated_client.get(
            "/users/me/activity", params={"action": "PROFILE_UPDATE"}
        )
        assert activity.json()[0]["details"]["changed_fields"] == ["bio", "birth_date", "country"]

    async def test_patch_profile_validation(self, authenticated_client):
        response = await authenticated_client.patch("/profiles/me", json={"bio": "x" * 501})
        assert response.status_code == 422

    async def test_null_language_rejected(self, authenticated_client):
        response = await authenticated_client.patch("/profiles/me", json={"language": None})
        assert response.status_code == 422
        assert (await authenticated_client.get("/profiles/me")).json()["language"] == "id"

    async def test_null_clears_optional_field(self, authenticated_client):
        await authenticated_client.patch("/profiles/me", json={"bio": "Documentary fan"})
        response = await authenticated_client.patch("/profiles/me", json={"bio": None})
        assert response.status_code == 200
        assert response.json()["bio"] is None

    async def test_profile_requires_auth(self, client):
        assert (await client.get("/profiles/me")).status_code == 401


class TestPreferenceEndpoints:

    async def test_default_preferences(self, authenticated_client):
        response = await authenticated_client.get("/preferences/me")
        assert response.status_code == 200
        data = response.json()
        assert data["preferred_quality"] == "AUTO"
        assert data["autoplay_enabled"] is True
        assert data["adult_content_enabled"] is False
        assert data["parental_control_enabled"] is False
        assert "parental_control_pin_hash" not in data

    async def test_update_preferences(self, authenticated_client):
        response = await authenticated_client.put(
            "/preferences/me",
            json={"preferred_quality": "FHD", "content_filters": ["horror"]},
        )
        assert response.status_code == 200
        assert response.json()["preferred_quality"] == "FHD"
        assert response.json()["content_filters"] == ["horror"]

    @pytest.mark.parametrize("field", ["autoplay_enabled", "preferred_quality", "subtitle_language"])
    async def test_null_rejected_for_required_preference(self, authenticated_client, field):
        response = await authenticated_client.put("/preferences/me", json={field: None})
        assert response.status_code == 422

        data = (await authenticated_client.get("/preferences/me")).json()
        assert data["autoplay_enabled"] is True
        assert data["preferred_quality"] == "AUTO"

    async def test_null_clears_content_filters(self, authenticated_client):
        await authenticated_client.put("/preferences/me", json={"content_filters": ["horror"]})
        response = await authenticated_client.put("/preferences/me", json={"content_filters": None})
        assert response.status_code == 200
        assert response.json()["content_filters"] is None

    async def test_invalid_quality(self, authenticated_client):
        response = await authenticated_client.put("/preferences/me", json={"preferred_quality": "8K"})
        assert response.status_code == 422


class TestParentalPinEndpoints:

    async def test_set_pin(self, authenticated_client):
        await authenticated_client.put("/preferences/me", json={"adult_content_enabled": True})

        response = await authenticated_client.put("/preferences/me/parental-pin", json={"pin": "2468"})
        assert response.status_code == 200
        assert response.json()["parental_control_enabled"] is True
        assert response.json()["adult_content_enabled"] is False

    async def test_adult_content_blocked(self, authenticated_client):
        await authenticated_client.put("/preferences/me/parental-pin", json={"pin": "2468"})
        response = await authenticated_client.put("/preferences/me", json={"adult_content_enabled": True})
        assert response.status_code == 422
        assert response.json()["error_type"] == "parental_control"

    @pytest.mark.parametrize("pin", ["12", "abcd", "1234567"])
    async def test_bad_pin_format(self, authenticated_client, pin):
        response = await authenticated_client.put("/preferences/me/parental-pin", json={"pin": pin})
        assert response.status_code == 422

    async def test_verify_pin(self, authenticated_client):
        await authenticated_client.put("/preferences/me/parental-pin", json={"pin": "2468"})

        ok = await authenticated_client.post("/preferences/me/parental-pin/verify", json={"pin": "2468"})
        bad = await authenticated_client.post("/preferences/me/parental-pin/verify", json={"pin": "1357"})
        assert ok.json() == {"valid": True}
        assert bad.json() == {"valid": False}

    async def test_clear_pin(self, authenticated_client):
        await authenticated_client.put("/preferences/me/parental-pin", json={"pin": "2468"})
        response = await authenticated_client.put("/preferences/me/parental-pin", json={"pin": None})
        assert response.json()["parental_control_enabled"] is False
