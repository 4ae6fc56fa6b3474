"""
Tests for the caller's own account endpoints (/users/me/*).
"""

from helpers import TEST_PASSWORD, bearer, login


class TestCurrentUser:

    async def test_get_me(self, authenticated_client):
        response = await authenticated_client.get("/users/me")
        assert response.status_code == 200
        data = response.json()
        assert data["username"] == "testuser"
        assert data["email"] == "testuser@example.com"
        assert "password_hash" not in data

    async def test_get_me_requires_auth(self, client):
        response = await client.get("/users/me")
        assert response.status_code == 401


class TestPasswordChange:

    async def test_change_password(self, authenticated_client):
        response = await authenticated_client.put(
            "/users/me/password",
            json={"current_password": TEST_PASSWORD, "new_password": "AnotherPass77"},
        )
        assert response.status_code == 200
        assert response.json()["success"] is True

        # The current session keeps working, the new password logs in, the old doesn't
        assert (await authenticated_client.get("/users/me")).status_code == 200
        assert await login(authenticated_client, "testuser", "AnotherPass77")
        old = await authenticated_client.post(
            "/auth/login",
            json={"username_or_email": "testuser", "password": TEST_PASSWORD},
        )
        assert old.status_code == 401

    async def test_change_password_wrong_current(self, authenticated_client):
        response = await authenticated_client.put(
            "/users/me/password",
            json={"current_password": "NotTheRightOne", "new_password": "AnotherPass77"},
        )
        assert response.status_code == 401

    async def test_change_password_too_short(self, authenticated_client):
        response = await authenticated_client.put(
            "/users/me/password",
            json={"current_password": TEST_PASSWORD, "new_password": "short"},
        )
        assert response.status_code == 422


class TestMySessions:

    async def test_list_sessions(self, authenticated_client):
        second = await login(authenticated_client, "testuser", device_info="Phone")

        response = await authenticated_client.get("/users/me/sessions")
        assert response.status_code == 200
        data = response.json()
        assert data["count"] == 2
        assert len(data["sessions"]) == 2
        assert all("session_token" not in s for s in data["sessions"])
        assert "Phone" in {s["device_info"] for s in data["sessions"]}

        await authenticated_client.post("/auth/logout", headers=bearer(second))
        response = await authenticated_client.get("/users/me/sessions")
        assert response.json()["count"] == 1

    async def test_heartbeat_sets_last_activity(self, authenticated_client):
        response = await authenticated_client.get("/users/me/sessions")
        assert response.json()["sessions"][0]["last_activity"] is not None


class TestMyActivity:

    async def test_activity_history(self, authenticated_client):
        await authenticated_client.post(
            "/auth/login",
            json={"username_or_email": "testuser", "password": "WrongPass000"},
        )

        response = await authenticated_client.get("/users/me/activity")
        assert response.status_code == 200
        actions = [entry["action"] for entry in response.json()]
        # Newest first: failed login, successful login, registration
        assert actions == ["LOGIN", "LOGIN", "REGISTER"]
        assert response.json()[0]["details"]["result"] == "failed"

    async def test_activity_filtered_by_action(self, authenticated_client):
        response = await authenticated_client.get("/users/me/activity", params={"action": "REGISTER"})
        assert response.status_code == 200
        assert [entry["action"] for entry in response.json()] == ["REGISTER"]
