from __future__ import annotations

import pytest
from httpx import Response

from tests.factories import API_BASE
from ytwrapped.errors import AuthError, ProtocolError
from ytwrapped.fetchers import projects, users
from ytwrapped.models import Credential
from ytwrapped.youtrack_client import YouTrackClient


@pytest.mark.asyncio
async def test_fetch_current_user(credential: Credential, respx_mock) -> None:
    """The current user should be read from /users/me."""
    route = respx_mock.get(f"{API_BASE}/users/me").mock(
        return_value=Response(
            200,
            json={
                "id": "1-1",
                "login": "alice",
                "fullName": "Alice Example",
                "email": "alice@example.com",
                "avatarUrl": "/hub/api/rest/avatar/1",
            },
        ),
    )

    async with YouTrackClient(credential) as client:
        user = await users.fetch_current_user(client)

    assert user.login == "alice"
    assert user.display_name == "Alice Example"
    assert user.avatar_url == "/hub/api/rest/avatar/1"
    assert route.calls.last.request.url.params["fields"] == users.USER_FIELDS


@pytest.mark.asyncio
async def test_fetch_current_user_falls_back_to_login(credential: Credential, respx_mock) -> None:
    """The display name should fall back to the login."""
    respx_mock.get(f"{API_BASE}/users/me").mock(return_value=Response(200, json={"id": "1-1", "login": "alice"}))

    async with YouTrackClient(credential) as client:
        user = await users.fetch_current_user(client)

    assert user.display_name == "alice"


@pytest.mark.asyncio
async def test_fetch_current_user_with_bad_token(credential: Credential, respx_mock) -> None:
    """A rejected token should raise AuthError."""
    respx_mock.get(f"{API_BASE}/users/me").mock(return_value=Response(401, text="unauthorized"))

    async with YouTrackClient(credential) as client:
        with pytest.raises(AuthError):
            await users.fetch_current_user(client)


@pytest.mark.asyncio
async def test_fetch_projects_uses_single_request(credential: Credential, respx_mock) -> None:
    """Projects should be listed with one capped request."""
    route = respx_mock.get(f"{API_BASE}/admin/projects").mock(
        return_value=Response(
            200,
            json=[
                {"id": "0-1", "name": "Alpha", "shortName": "AL", "description": None},
                {"id": "0-2", "name": "Knowledge", "shortName": "KB"},
            ],
        ),
    )

    async with YouTrackClient(credential) as client:
        found = await projects.fetch_projects(client)

    assert [project.short_name for project in found] == ["AL", "KB"]
    assert route.call_count == 1
    params = route.calls.last.request.url.params
    assert params["$top"] == "100"
    assert "$skip" not in params


@pytest.mark.asyncio
async def test_fetch_projects_rejects_unexpected_payload(credential: Credential, respx_mock) -> None:
    """A non-list project payload should raise ProtocolError."""
    respx_mock.get(f"{API_BASE}/admin/projects").mock(return_value=Response(200, json={"projects": []}))

    async with YouTrackClient(credential) as client:
        with pytest.raises(ProtocolError):
            await projects.fetch_projects(client)
