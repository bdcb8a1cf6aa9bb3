"""Factories for constructing common domain objects in tests."""

from __future__ import annotations

from typing import Any

import pendulum

from ytwrapped.models import Article, Comment, Issue, IssueRef, ProjectRef, RawYearDataset, User, UserRef

API_BASE = "https://youtrack.example.com/api"


def at(value: str) -> pendulum.DateTime:
    """Parse an ISO-8601 instant."""
    return pendulum.parse(value)  # type: ignore[return-value]


def millis(value: str) -> int:
    """Return the epoch-millisecond form YouTrack uses for an ISO-8601 instant."""
    return at(value).int_timestamp * 1000


def build_user(login: str = "alice", full_name: str | None = "Alice Example") -> User:
    """Create the authenticated user."""
    return User(id=f"1-{login}", login=login, full_name=full_name)


def build_project(name: str = "Alpha", short_name: str = "AL") -> ProjectRef:
    """Create a deterministic project reference."""
    return ProjectRef(id=f"0-{short_name}", name=name, short_name=short_name)


def build_issue(
    number: int,
    *,
    created: str = "2025-03-04T14:00:00Z",
    resolved: str | None = None,
    summary: str | None = "Fix the flaky build",
    project: ProjectRef | None = None,
) -> Issue:
    """Create an issue in the given project (Alpha by default)."""
    return Issue(
        id=f"2-{number}",
        id_readable=f"AL-{number}",
        summary=summary,
        created=at(created),
        resolved=at(resolved) if resolved else None,
        project=project if project is not None else build_project(),
    )


def build_issue_ref(number: int, project: ProjectRef | None = None) -> IssueRef:
    """Create the back-reference attached to collected comments."""
    return IssueRef(
        id=f"2-{number}",
        id_readable=f"AL-{number}",
        summary="Discussed issue",
        project=project if project is not None else build_project(),
    )


def build_comment(
    number: int,
    *,
    created: str = "2025-03-04T14:00:00Z",
    text: str | None = "Looks good to me",
    author: str = "alice",
    issue: IssueRef | None = None,
) -> Comment:
    """Create a comment, linked to issue AL-1 unless told otherwise."""
    return Comment(
        id=f"4-{number}",
        text=text,
        created=at(created),
        author=UserRef(login=author),
        issue=issue if issue is not None else build_issue_ref(1),
    )


def build_article(
    number: int,
    *,
    created: str = "2025-03-04T14:00:00Z",
    content: str | None = "How we deploy",
    reporter: str = "alice",
) -> Article:
    """Create a knowledge base article."""
    return Article(
        id=f"5-{number}",
        id_readable=f"KB-A-{number}",
        summary=f"Article {number}",
        content=content,
        created=at(created),
        reporter=UserRef(login=reporter),
        project=build_project("Knowledge", "KB"),
    )


def build_dataset(**overrides: Any) -> RawYearDataset:
    """Create a dataset for 2025, empty unless collections are supplied."""
    values: dict[str, Any] = {
        "user": build_user(),
        "year": 2025,
        "collected_at": at("2026-01-02T09:00:00Z"),
    }
    values.update(overrides)
    return RawYearDataset(**values)


def issue_payload(number: int, *, created: str = "2025-03-04T14:00:00Z") -> dict[str, Any]:
    """Return an issue as the YouTrack REST API serializes it."""
    return {
        "$type": "Issue",
        "id": f"2-{number}",
        "idReadable": f"AL-{number}",
        "summary": f"Issue {number}",
        "created": millis(created),
        "resolved": None,
        "project": {"$type": "Project", "id": "0-AL", "name": "Alpha", "shortName": "AL"},
        "customFields": [{"name": "Priority", "value": {"name": "Normal"}}],
    }


def comment_payload(number: int, *, author: str | None, created: str) -> dict[str, Any]:
    """Return a comment as embedded in the commenter query response."""
    return {
        "id": f"4-{number}",
        "text": f"Comment {number}",
        "created": millis(created),
        "author": {"id": f"1-{author}", "login": author, "fullName": author.title()} if author else None,
    }


def article_payload(number: int, *, reporter: str, created: str, project: str = "KB") -> dict[str, Any]:
    """Return an article as the YouTrack REST API serializes it."""
    return {
        "id": f"5-{project}-{number}",
        "idReadable": f"{project}-A-{number}",
        "summary": f"Article {number}",
        "content": "Body text",
        "created": millis(created),
        "updated": millis(created),
        "reporter": {"id": f"1-{reporter}", "login": reporter, "fullName": reporter.title()},
        "project": {"id": f"0-{project}", "name": project, "shortName": project},
    }
