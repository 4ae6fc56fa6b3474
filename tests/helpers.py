"""Request helpers shared by the HTTP test modules."""

TEST_PASSWORD = "SecurePass123!"


async def register(client, username, email, password=TEST_PASSWORD, **extra):
    """Register a user through the API and return the response JSON."""
    response = await client.post(
        "/auth/register",
        json={"username": username, "email": email, "password": password, **extra},
    )
    assert response.status_code == 201, f"Register failed: {response.text}"
    return response.json()


async def login(client, identifier, password=TEST_PASSWORD, **extra):
    """Log in through the API and return the session token."""
    response = await client.post(
        "/auth/login",
        json={"username_or_email": identifier, "password": password, **extra},
    )
    assert response.status_code == 200, f"Login failed: {response.text}"
    return response.json()["session_token"]


def bearer(token):
    return {"Authorization": f"Bearer {token}"}
