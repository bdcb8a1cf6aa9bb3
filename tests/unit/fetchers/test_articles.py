from __future__ import annotations

import logging

import pytest
from httpx import Response

from tests.factories import API_BASE, article_payload
from ytwrapped.errors import ProtocolError
from ytwrapped.fetchers import articles
from ytwrapped.models import Credential
from ytwrapped.youtrack_client import YouTrackClient

CREATED = "2025-05-05T09:00:00Z"


@pytest.mark.asyncio
async def test_fetch_articles_skips_unreadable_projects(
    credential: Credential,
    respx_mock,
    caplog: pytest.LogCaptureFixture,
) -> None:
    """A forbidden project should be skipped while others are kept."""
    respx_mock.get(f"{API_BASE}/admin/projects/A/articles").mock(
        return_value=Response(
            200,
            json=[
                article_payload(1, reporter="alice", created=CREATED, project="A"),
                article_payload(2, reporter="bob", created=CREATED, project="A"),
            ],
        ),
    )
    respx_mock.get(f"{API_BASE}/admin/projects/B/articles").mock(return_value=Response(403, text="forbidden"))
    respx_mock.get(f"{API_BASE}/admin/projects/C/articles").mock(
        return_value=Response(200, json=[article_payload(3, reporter="alice", created=CREATED, project="C")]),
    )
    messages: list[str] = []
    caplog.set_level(logging.WARNING, logger=articles.__name__)

    async with YouTrackClient(credential) as client:
        found = await articles.fetch_articles(client, ["A", "B", "C"], messages.append)

    assert [article.id_readable for article in found] == ["A-A-1", "A-A-2", "C-A-3"]
    assert messages == ["Fetched 2 articles...", "Fetched 3 articles..."]
    assert "Could not fetch articles from project B" in caplog.text


@pytest.mark.asyncio
async def test_fetch_articles_without_projects_makes_no_request(credential: Credential, respx_mock) -> None:
    """No projects should mean no HTTP traffic."""
    async with YouTrackClient(credential) as client:
        found = await articles.fetch_articles(client, [])

    assert found == []
    assert not respx_mock.calls


@pytest.mark.asyncio
async def test_fetch_project_articles_requests_article_fields(credential: Credential, respx_mock) -> None:
    """Project articles should be requested with the article fields."""
    route = respx_mock.get(f"{API_BASE}/admin/projects/KB/articles").mock(return_value=Response(200, json=[]))

    async with YouTrackClient(credential) as client:
        found = await articles.fetch_project_articles(client, "KB")

    assert found == []
    params = route.calls.last.request.url.params
    assert params["fields"] == articles.ARTICLE_FIELDS
    assert params["$skip"] == "0"


@pytest.mark.asyncio
async def test_fetch_project_articles_propagates_errors(credential: Credential, respx_mock) -> None:
    """Single-project fetches should propagate API errors."""
    respx_mock.get(f"{API_BASE}/admin/projects/KB/articles").mock(return_value=Response(500, text="boom"))

    async with YouTrackClient(credential) as client:
        with pytest.raises(ProtocolError):
            await articles.fetch_project_articles(client, "KB")
