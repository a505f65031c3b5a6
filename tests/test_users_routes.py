"""
User routes against a mocked repository
Covers status-code mapping and which repository calls each route makes.
"""

import logging

import pytest

from models.user import User
from services.user_repository import DuplicateEmailError


class TestListUsers:

    @pytest.mark.asyncio
    async def test_returns_users_in_repository_order(self, client, user_repository, john):
        jane = User(id=2, name="Jane Doe", email="jane.doe@example.com")
        user_repository.find_all.return_value = [jane, john]

        response = await client.get("/api/users")

        assert response.status_code == 200
        assert response.json() == [
            {"id": 2, "name": "Jane Doe", "email": "jane.doe@example.com"},
            {"id": 1, "name": "John Doe", "email": "john.doe@example.com"},
        ]

    @pytest.mark.asyncio
    async def test_empty_repository_returns_empty_array(self, client):
        response = await client.get("/api/users")

        assert response.status_code == 200
        assert response.json() == []


class TestGetUser:

    @pytest.mark.asyncio
    async def test_returns_user(self, client, user_repository, john):
        user_repository.find_by_id.return_value = john

        response = await client.get("/api/users/1")

        assert response.status_code == 200
        assert response.json() == {"id": 1, "name": "John Doe", "email": "john.doe@example.com"}
        user_repository.find_by_id.assert_awaited_once_with(1)

    @pytest.mark.asyncio
    async def test_missing_user_returns_not_found(self, client):
        response = await client.get("/api/users/1")

        assert response.status_code == 404
        body = response.json()
        assert body["error"] == "HTTP 404"
        assert body["message"] == "User not found"

    @pytest.mark.asyncio
    async def test_non_integer_id_is_rejected(self, client, user_repository):
        response = await client.get("/api/users/abc")

        assert response.status_code == 422
        user_repository.find_by_id.assert_not_awaited()


class TestCreateUser:

    @pytest.mark.asyncio
    async def test_returns_created_user(self, client, user_repository, john):
        user_repository.save.return_value = john

        response = await client.post("/api/users", json={"name": "John Doe", "email": "john.doe@example.com"})

        assert response.status_code == 201
        assert response.json() == {"id": 1, "name": "John Doe", "email": "john.doe@example.com"}
        user_repository.find_by_email.assert_awaited_once_with("john.doe@example.com")
        user_repository.save.assert_awaited_once_with(User(name="John Doe", email="john.doe@example.com"))

    @pytest.mark.asyncio
    async def test_client_supplied_id_is_ignored(self, client, user_repository, john):
        user_repository.save.return_value = john

        response = await client.post("/api/users", json={"id": 42, "name": "John Doe", "email": "john.doe@example.com"})

        assert response.status_code == 201
        saved = user_repository.save.await_args.args[0]
        assert saved.id is None

    @pytest.mark.asyncio
    async def test_existing_email_returns_conflict(self, client, user_repository, john):
        user_repository.find_by_email.return_value = john

        response = await client.post("/api/users", json={"id": 1, "name": "John Doe", "email": "john.doe@example.com"})

        assert response.status_code == 409
        user_repository.save.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_duplicate_detected_on_save_returns_conflict(self, client, user_repository):
        user_repository.save.side_effect = DuplicateEmailError("john.doe@example.com")

        response = await client.post("/api/users", json={"name": "John Doe", "email": "john.doe@example.com"})

        assert response.status_code == 409

    @pytest.mark.asyncio
    @pytest.mark.parametrize("payload", [
        {"name": "John Doe"},
        {"email": "john.doe@example.com"},
        {"name": "   ", "email": "john.doe@example.com"},
        {"name": "John Doe", "email": ""},
    ])
    async def test_missing_or_blank_fields_are_rejected(self, client, user_repository, payload):
        response = await client.post("/api/users", json=payload)

        assert response.status_code == 422
        body = response.json()
        assert body["error"] == "Validation Error"
        assert body["error_count"] >= 1
        user_repository.save.assert_not_awaited()


class TestUpdateUser:

    @pytest.mark.asyncio
    async def test_updates_and_returns_user(self, client, user_repository, john):
        updated = User(id=1, name="Jane Doe", email="jane.doe@example.com")
        user_repository.find_by_id.return_value = john
        user_repository.save.return_value = updated

        response = await client.put("/api/users/1", json={"id": 1, "name": "Jane Doe", "email": "jane.doe@example.com"})

        assert response.status_code == 200
        assert response.json() == {"id": 1, "name": "Jane Doe", "email": "jane.doe@example.com"}
        user_repository.save.assert_awaited_once_with(updated)

    @pytest.mark.asyncio
    async def test_path_id_wins_over_body_id(self, client, user_repository, john):
        user_repository.find_by_id.return_value = john
        user_repository.save.return_value = john

        await client.put("/api/users/1", json={"id": 99, "name": "John Doe", "email": "john.doe@example.com"})

        assert user_repository.save.await_args.args[0].id == 1

    @pytest.mark.asyncio
    async def test_missing_user_returns_not_found(self, client, user_repository):
        response = await client.put("/api/users/1", json={"name": "Jane Doe", "email": "jane.doe@example.com"})

        assert response.status_code == 404
        user_repository.save.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_email_of_another_user_returns_conflict(self, client, user_repository, john):
        user_repository.find_by_id.return_value = john
        user_repository.find_by_email.return_value = User(id=2, name="Jane Doe", email="jane.doe@example.com")

        response = await client.put("/api/users/1", json={"name": "John Doe", "email": "jane.doe@example.com"})

        assert response.status_code == 409
        user_repository.save.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_keeping_own_email_skips_email_lookup(self, client, user_repository, john):
        user_repository.find_by_id.return_value = john
        user_repository.save.return_value = User(id=1, name="Johnny Doe", email="john.doe@example.com")

        response = await client.put("/api/users/1", json={"name": "Johnny Doe", "email": "john.doe@example.com"})

        assert response.status_code == 200
        assert response.json()["name"] == "Johnny Doe"
        user_repository.find_by_email.assert_not_awaited()


class TestDeleteUser:

    @pytest.mark.asyncio
    async def test_returns_no_content(self, client, user_repository, john):
        user_repository.find_by_id.return_value = john

        response = await client.delete("/api/users/1")

        assert response.status_code == 204
        assert response.content == b""
        user_repository.delete.assert_awaited_once_with(john)

    @pytest.mark.asyncio
    async def test_missing_user_returns_not_found(self, client, user_repository):
        response = await client.delete("/api/users/1")

        assert response.status_code == 404
        user_repository.delete.assert_not_awaited()


class TestRepositoryFailures:

    @pytest.mark.asyncio
    async def test_repository_error_returns_safe_server_error(self, client, user_repository):
        user_repository.find_all.side_effect = RuntimeError(
            "Database query failed: password authentication failed for user admin"
        )

        response = await client.get("/api/users")

        assert response.status_code == 500
        body = response.json()
        assert body["error"] == "HTTP 500"
        assert body["message"] == "Service error"
        assert "trace_id" in body
        assert "password" not in response.text

    @pytest.mark.asyncio
    @pytest.mark.parametrize("method,path,payload", [
        ("GET", "/api/users/1", None),
        ("POST", "/api/users", {"name": "John Doe", "email": "john.doe@example.com"}),
        ("PUT", "/api/users/1", {"name": "John Doe", "email": "john.doe@example.com"}),
        ("DELETE", "/api/users/1", None),
    ])
    async def test_lookup_error_text_is_not_returned(self, client, user_repository, method, path, payload):
        user_repository.find_by_id.side_effect = RuntimeError("Database query failed: secret host db-01")
        user_repository.find_by_email.side_effect = RuntimeError("Database query failed: secret host db-01")

        response = await client.request(method, path, json=payload)

        assert response.status_code == 500
        assert response.json()["message"] == "Service error"
        assert "db-01" not in response.text

    @pytest.mark.asyncio
    async def test_error_text_is_kept_in_logs(self, client, user_repository, caplog):
        user_repository.find_all.side_effect = RuntimeError("Database pool not initialized")

        with caplog.at_level(logging.ERROR, logger="api.routes.users"):
            await client.get("/api/users")

        assert "Database pool not initialized" in caplog.text
