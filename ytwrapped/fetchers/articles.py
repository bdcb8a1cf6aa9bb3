"""Knowledge base article fetchers."""

import logging
from collections.abc import Sequence
from typing import TYPE_CHECKING
from urllib.parse import quote

from ytwrapped.errors import YouTrackError
from ytwrapped.fetchers.common import validate_payload
from ytwrapped.models import Article

if TYPE_CHECKING:
    from ytwrapped.progress import ProgressCallback
    from ytwrapped.youtrack_client import YouTrackClient

LOGGER = logging.getLogger(__name__)

ARTICLE_FIELDS = (
    "id,idReadable,summary,content,created,updated,reporter(id,login,fullName),project(id,name,shortName)"
)


async def fetch_articles(
    client: "YouTrackClient",
    project_short_names: Sequence[str],
    progress: "ProgressCallback | None" = None,
) -> list[Article]:
    """Return articles from each listed project.

    A project that cannot be read (missing permission, unknown short name) is
    logged and skipped; articles from the other projects are kept.
    """
    collected: list[Article] = []
    for short_name in project_short_names:
        try:
            project_articles = await fetch_project_articles(client, short_name)
        except YouTrackError as exc:
            LOGGER.warning("Could not fetch articles from project %s: %s", short_name, exc)
            continue
        collected.extend(project_articles)
        if progress is not None:
            progress(f"Fetched {len(collected)} articles...")
    return collected


async def fetch_project_articles(client: "YouTrackClient", short_name: str) -> list[Article]:
    """Return every article of a single project."""
    articles: list[Article] = []
    async for page in client.paginate(
        f"/admin/projects/{quote(short_name, safe='')}/articles",
        params={"fields": ARTICLE_FIELDS},
    ):
        articles.extend(validate_payload(Article, payload) for payload in page)
    return articles
