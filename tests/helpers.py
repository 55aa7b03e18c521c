"""Test helpers shared across modules."""

from httpx import AsyncClient


class FakeClock:
    """Controllable replacement for ``time.time``."""

    def __init__(self, now: float = 1_700_000_000.0) -> None:
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


async def register_and_login(
    client: AsyncClient,
    email: str,
    password: str = "pw123456",
    name: str = "Tester",
) -> dict:
    """Register ``email`` and return an ``Authorization`` header for it."""
    resp = await client.post("/auth/register", json={"name": name, "email": email, "password": password})
    assert resp.status_code == 201, resp.text
    resp = await client.post("/auth/login", json={"email": email, "password": password})
    assert resp.status_code == 200, resp.text
    return {"Authorization": f"Bearer {resp.json()['data']['accessToken']}"}
