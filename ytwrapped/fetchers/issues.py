"""Issue fetchers driven by YouTrack search queries."""

from typing import TYPE_CHECKING, TypeVar

from pydantic import BaseModel

from ytwrapped.fetchers.common import validate_payload
from ytwrapped.models import CommentedIssue, Issue

if TYPE_CHECKING:
    from ytwrapped.progress import ProgressCallback
    from ytwrapped.youtrack_client import YouTrackClient

ISSUE_FIELDS = (
    "id,idReadable,summary,created,resolved,project(id,name,shortName),customFields(name,value(name))"
)
COMMENTED_ISSUE_FIELDS = (
    "id,idReadable,summary,project(id,name,shortName),comments(id,text,created,author(id,login,fullName))"
)

ModelT = TypeVar("ModelT", bound=BaseModel)


async def fetch_issues_created_by(
    client: "YouTrackClient",
    login: str,
    start_date: str,
    end_date: str,
    progress: "ProgressCallback | None" = None,
) -> list[Issue]:
    """Return issues reported by `login` between two `YYYY-MM-DD` dates."""
    return await _search(
        client,
        Issue,
        query=f"created: {start_date} .. {end_date} created by: {login}",
        fields=ISSUE_FIELDS,
        label="created issues",
        progress=progress,
    )


async def fetch_issues_resolved_by(
    client: "YouTrackClient",
    login: str,
    start_date: str,
    end_date: str,
    progress: "ProgressCallback | None" = None,
) -> list[Issue]:
    """Return issues assigned to `login` and resolved between two dates."""
    return await _search(
        client,
        Issue,
        query=f"resolved date: {start_date} .. {end_date} Assignee: {login}",
        fields=ISSUE_FIELDS,
        label="resolved issues",
        progress=progress,
    )


async def fetch_issues_with_comments_by(
    client: "YouTrackClient",
    login: str,
    start_date: str,
    end_date: str,
    progress: "ProgressCallback | None" = None,
) -> list[CommentedIssue]:
    """Return issues `login` commented on between two dates.

    The query matches per issue, so each issue carries its complete comment
    list; narrowing to the user's own comments happens in the collector.
    """
    return await _search(
        client,
        CommentedIssue,
        query=f"commenter: {login} commented: {start_date} .. {end_date}",
        fields=COMMENTED_ISSUE_FIELDS,
        label="issues with comments",
        progress=progress,
    )


async def _search(
    client: "YouTrackClient",
    model: type[ModelT],
    *,
    query: str,
    fields: str,
    label: str,
    progress: "ProgressCallback | None",
) -> list[ModelT]:
    results: list[ModelT] = []
    async for page in client.paginate("/issues", params={"query": query, "fields": fields}):
        results.extend(validate_payload(model, payload) for payload in page)
        if progress is not None:
            progress(f"Fetched {len(results)} {label}...")
    return results
