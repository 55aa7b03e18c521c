"""
End-to-end tests through the HTTP surface.
"""

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy import select

from auth.jwt import TokenService
from config.settings import Settings, config
from database.models import User
from database.session import async_session_factory, get_db_session
from tests.helpers import FakeClock, register_and_login
from utils.schemas import MAX_LIMIT, MAX_PAGE


class TestServiceRoutes:
    @pytest.mark.asyncio
    async def test_health(self, client):
        resp = await client.get("/health")
        assert resp.status_code == 200
        assert resp.json()["status"] == "OK"

    @pytest.mark.asyncio
    async def test_unknown_route_uses_envelope(self, client):
        resp = await client.get("/nope")
        assert resp.status_code == 404
        assert resp.json()["success"] is False

    @pytest.mark.asyncio
    async def test_request_id_header(self, client):
        resp = await client.get("/health", headers={"X-Request-ID": "req-123"})
        assert resp.headers["X-Request-ID"] == "req-123"
        assert "X-Process-Time" in resp.headers


class TestAuthRoutes:
    @pytest.mark.asyncio
    async def test_register(self, client):
        resp = await client.post(
            "/auth/register", json={"name": "Alice", "email": "a@x.com", "password": "pw123456"},
        )
        assert resp.status_code == 201
        body = resp.json()
        assert body["success"] is True
        assert body["message"] == "User registered successfully"
        assert set(body["data"]) == {"id", "name", "email", "createdAt"}
        assert "pw123456" not in resp.text

    @pytest.mark.asyncio
    async def test_register_duplicate(self, client):
        payload = {"name": "Alice", "email": "a@x.com", "password": "pw123456"}
        await client.post("/auth/register", json=payload)
        resp = await client.post("/auth/register", json=payload)
        assert resp.status_code == 400
        assert resp.json() == {"success": False, "message": "User with this email already exists"}

    @pytest.mark.asyncio
    async def test_register_validation(self, client):
        resp = await client.post(
            "/auth/register", json={"name": "A", "email": "not-an-email", "password": "123"},
        )
        assert resp.status_code == 400
        body = resp.json()
        assert body["success"] is False
        assert body["message"] == "Validation error"
        assert {e["field"] for e in body["errors"]} == {"name", "email", "password"}

    @pytest.mark.asyncio
    async def test_register_rejects_overlong_password(self, client):
        resp = await client.post(
            "/auth/register", json={"name": "Alice", "email": "a@x.com", "password": "é" * 40},
        )
        assert resp.status_code == 400
        assert resp.json()["errors"][0]["field"] == "password"

    @pytest.mark.asyncio
    async def test_login_failures_are_indistinguishable(self, client):
        await client.post(
            "/auth/register", json={"name": "Alice", "email": "a@x.com", "password": "pw123456"},
        )
        wrong_password = await client.post("/auth/login", json={"email": "a@x.com", "password": "nope-nope"})
        unknown_email = await client.post("/auth/login", json={"email": "b@x.com", "password": "pw123456"})

        assert wrong_password.status_code == unknown_email.status_code == 401
        assert wrong_password.content == unknown_email.content

    @pytest.mark.asyncio
    async def test_login_returns_token_pair(self, client, app):
        await client.post(
            "/auth/register", json={"name": "Alice", "email": "a@x.com", "password": "pw123456"},
        )
        resp = await client.post("/auth/login", json={"email": "a@x.com", "password": "pw123456"})
        data = resp.json()["data"]
        assert set(data) == {"user", "accessToken", "refreshToken"}
        payload = app.state.tokens.verify_access(data["accessToken"])
        assert payload.user_id == data["user"]["id"]
        assert payload.email == "a@x.com"

    @pytest.mark.asyncio
    async def test_refresh(self, client):
        await client.post(
            "/auth/register", json={"name": "Alice", "email": "a@x.com", "password": "pw123456"},
        )
        login = (await client.post("/auth/login", json={"email": "a@x.com", "password": "pw123456"})).json()
        resp = await client.post("/auth/refresh", json={"refreshToken": login["data"]["refreshToken"]})
        assert resp.status_code == 200
        access = resp.json()["data"]["accessToken"]

        tasks = await client.get("/tasks", headers={"Authorization": f"Bearer {access}"})
        assert tasks.status_code == 200

    @pytest.mark.asyncio
    async def test_refresh_failures(self, client):
        missing = await client.post("/auth/refresh", json={})
        assert missing.status_code == 400
        assert missing.json()["errors"][0]["field"] == "refreshToken"

        bad = await client.post("/auth/refresh", json={"refreshToken": "bogus"})
        assert bad.status_code == 401
        assert bad.json()["message"] == "Invalid or expired refresh token"

    @pytest.mark.asyncio
    async def test_logout(self, client):
        resp = await client.post("/auth/logout")
        assert resp.status_code == 200
        assert resp.json() == {"success": True, "message": "Logged out successfully"}

    @pytest.mark.asyncio
    async def test_refresh_rejects_non_ascii_signature(self, client):
        resp = await client.post("/auth/refresh", json={"refreshToken": "YWJj.é"})
        assert resp.status_code == 401
        assert resp.json()["message"] == "Invalid or expired refresh token"

    @pytest.mark.asyncio
    async def test_logout_opens_no_database_session(self, client, app):
        async def _no_session():
            raise AssertionError("logout should not touch the database")
            yield

        app.dependency_overrides[get_db_session] = _no_session
        resp = await client.post("/auth/logout")
        assert resp.status_code == 200

    @pytest.mark.asyncio
    async def test_bcrypt_rounds_follow_app_settings(self, db):
        from main import create_app

        settings = Settings(_env_file=None, jwt_secret="a-secret", refresh_secret="b-secret", bcrypt_rounds=5)
        transport = ASGITransport(app=create_app(settings))
        async with AsyncClient(transport=transport, base_url="http://test") as c:
            resp = await c.post(
                "/auth/register", json={"name": "Alice", "email": "a@x.com", "password": "pw123456"},
            )
        assert resp.status_code == 201

        async with async_session_factory() as s:
            user = await s.scalar(select(User).where(User.email == "a@x.com"))
        assert user.password_hash.startswith("$2b$05$")


class TestAuthGate:
    @pytest.mark.asyncio
    async def test_missing_header(self, client):
        resp = await client.get("/tasks")
        assert resp.status_code == 401
        assert resp.json()["message"] == "No authorization header provided"

    @pytest.mark.asyncio
    async def test_malformed_header(self, client):
        resp = await client.get("/tasks", headers={"Authorization": "Token abc"})
        assert resp.status_code == 401
        assert resp.json()["message"].startswith("Invalid authorization header format")

    @pytest.mark.asyncio
    async def test_invalid_token(self, client):
        resp = await client.get("/tasks", headers={"Authorization": "Bearer abc.def"})
        assert resp.status_code == 401
        assert resp.json()["message"] == "Invalid token"

    @pytest.mark.asyncio
    async def test_non_ascii_signature(self, client):
        resp = await client.get("/tasks", headers={"Authorization": b"Bearer YWJj.\xe9"})
        assert resp.status_code == 401
        assert resp.json()["message"] == "Invalid token"

    @pytest.mark.asyncio
    async def test_expired_token(self, client, app):
        clock = FakeClock()
        app.state.tokens = TokenService(config, clock=clock)
        headers = await register_and_login(client, "a@x.com")

        assert (await client.get("/tasks", headers=headers)).status_code == 200
        clock.advance(15 * 60 + 1)
        resp = await client.get("/tasks", headers=headers)
        assert resp.status_code == 401
        assert resp.json()["message"] == "Token has expired"

    @pytest.mark.asyncio
    async def test_gate_runs_before_body_validation(self, client):
        resp = await client.post("/tasks", json={"title": ""})
        assert resp.status_code == 401


class TestTaskRoutes:
    @pytest.mark.asyncio
    async def test_example_flow(self, client):
        headers = await register_and_login(client, "a@x.com", name="Alice")

        created = await client.post("/tasks", json={"title": "Buy milk"}, headers=headers)
        assert created.status_code == 201
        task = created.json()["data"]
        assert task["status"] == "PENDING"
        assert set(task) == {"id", "title", "description", "status", "userId", "createdAt", "updatedAt"}

        listing = (await client.get("/tasks", headers=headers)).json()["data"]
        assert [t["title"] for t in listing["tasks"]] == ["Buy milk"]
        assert listing["pagination"] == {"page": 1, "limit": 10, "total": 1, "totalPages": 1}

        toggled = await client.patch(f"/tasks/{task['id']}/toggle", headers=headers)
        assert toggled.json()["data"]["status"] == "COMPLETED"

        deleted = await client.delete(f"/tasks/{task['id']}", headers=headers)
        assert deleted.json() == {"success": True, "message": "Task deleted successfully"}

        gone = await client.get(f"/tasks/{task['id']}", headers=headers)
        assert gone.status_code == 404
        assert gone.json() == {"success": False, "message": "Task not found"}

    @pytest.mark.asyncio
    async def test_user_id_comes_from_token(self, client):
        headers = await register_and_login(client, "a@x.com")
        resp = await client.post(
            "/tasks", json={"title": "Mine", "userId": "someone-else"}, headers=headers,
        )
        me = (await client.post("/auth/login", json={"email": "a@x.com", "password": "pw123456"})).json()
        assert resp.json()["data"]["userId"] == me["data"]["user"]["id"]

    @pytest.mark.asyncio
    async def test_cross_user_access_is_not_found(self, client):
        alice = await register_and_login(client, "a@x.com")
        bob = await register_and_login(client, "b@x.com")
        task_id = (await client.post("/tasks", json={"title": "Alice's"}, headers=alice)).json()["data"]["id"]

        responses = [
            await client.get(f"/tasks/{task_id}", headers=bob),
            await client.patch(f"/tasks/{task_id}", json={"title": "x"}, headers=bob),
            await client.patch(f"/tasks/{task_id}/toggle", headers=bob),
            await client.delete(f"/tasks/{task_id}", headers=bob),
        ]
        assert [r.status_code for r in responses] == [404, 404, 404, 404]
        assert (await client.get("/tasks", headers=bob)).json()["data"]["tasks"] == []

    @pytest.mark.asyncio
    async def test_update(self, client):
        headers = await register_and_login(client, "a@x.com")
        task_id = (await client.post(
            "/tasks", json={"title": "Old", "description": "desc"}, headers=headers,
        )).json()["data"]["id"]

        resp = await client.patch(f"/tasks/{task_id}", json={"description": None}, headers=headers)
        assert resp.status_code == 200
        assert resp.json()["data"]["description"] is None
        assert resp.json()["data"]["title"] == "Old"

    @pytest.mark.asyncio
    async def test_update_validation(self, client):
        headers = await register_and_login(client, "a@x.com")
        task_id = (await client.post("/tasks", json={"title": "T"}, headers=headers)).json()["data"]["id"]

        resp = await client.patch(
            f"/tasks/{task_id}", json={"title": None, "status": "DONE"}, headers=headers,
        )
        assert resp.status_code == 400
        assert {e["field"] for e in resp.json()["errors"]} == {"title", "status"}

    @pytest.mark.asyncio
    async def test_create_validation(self, client):
        headers = await register_and_login(client, "a@x.com")
        resp = await client.post(
            "/tasks", json={"title": "", "description": "d" * 1001}, headers=headers,
        )
        assert resp.status_code == 400
        assert {e["field"] for e in resp.json()["errors"]} == {"title", "description"}

        resp = await client.post("/tasks", json={"title": "t" * 201}, headers=headers)
        assert resp.status_code == 400

    @pytest.mark.asyncio
    async def test_list_query_parsing(self, client):
        headers = await register_and_login(client, "a@x.com")
        for title in ("Buy milk", "buy bread", "Walk dog"):
            await client.post("/tasks", json={"title": title}, headers=headers)

        lenient = (await client.get("/tasks?page=abc&limit=-2", headers=headers)).json()["data"]
        assert lenient["pagination"]["page"] == 1
        assert lenient["pagination"]["limit"] == 10

        found = (await client.get("/tasks?search=BUY&limit=1", headers=headers)).json()["data"]
        assert found["pagination"] == {"page": 1, "limit": 1, "total": 2, "totalPages": 2}

        bad_status = await client.get("/tasks?status=DONE", headers=headers)
        assert bad_status.status_code == 400
        assert bad_status.json()["errors"][0]["field"] == "status"

        huge_page = await client.get("/tasks?page=99999999999999999999", headers=headers)
        assert huge_page.status_code == 400
        assert huge_page.json()["errors"][0]["field"] == "page"

        last_page = await client.get(f"/tasks?page={MAX_PAGE}&limit={MAX_LIMIT}", headers=headers)
        assert last_page.status_code == 200
        assert last_page.json()["data"]["tasks"] == []
