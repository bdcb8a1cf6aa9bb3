"""Data collection orchestration for a user's YouTrack year."""

import asyncio
import logging
import time
from collections.abc import Iterable, Sequence
from datetime import datetime
from typing import TYPE_CHECKING

import pendulum

from ytwrapped.errors import ValidationError
from ytwrapped.fetchers import articles, issues, users
from ytwrapped.models import Article, Comment, CommentedIssue, RawYearDataset
from ytwrapped.progress import ProgressCallback, ProgressObserver, as_callback

if TYPE_CHECKING:
    from ytwrapped.youtrack_client import YouTrackClient

LOGGER = logging.getLogger(__name__)


class YearWindow:
    """Calendar-year boundaries in UTC, as query dates and as instants."""

    def __init__(self, year: int) -> None:
        """Compute the window for the given year."""
        self.year = year
        self.start_date = f"{year}-01-01"
        self.end_date = f"{year}-12-31"
        self.start = pendulum.datetime(year, 1, 1, tz="UTC")
        self.end = pendulum.datetime(year, 12, 31, 23, 59, 59, tz="UTC")

    def __contains__(self, instant: datetime) -> bool:
        """Return True when the instant lies in the closed interval [start, end]."""
        return self.start <= instant <= self.end


class YearDataCollector:
    """Collect created/resolved issues, comments, and articles for one year."""

    def __init__(self, client: "YouTrackClient") -> None:
        """Bind the collector to an already configured client."""
        self._client = client

    async def collect_year_data(
        self,
        year: int,
        article_projects: Sequence[str] = (),
        progress: ProgressObserver | ProgressCallback | None = None,
    ) -> RawYearDataset:
        """Execute the collection workflow and return the raw dataset.

        Any failure fetching the user or one of the four collections aborts the
        run; no partial dataset is returned.
        """
        if not isinstance(year, int) or isinstance(year, bool) or year <= 0:
            msg = f"A positive year is required, got {year!r}"
            raise ValidationError(msg)
        notify = as_callback(progress)
        window = YearWindow(year)
        LOGGER.info("Collecting YouTrack activity for %s (%s .. %s)", year, window.start_date, window.end_date)

        notify("Fetching your user information...")
        user = await users.fetch_current_user(self._client)
        LOGGER.info("Current user: %s (%s)", user.display_name, user.login)

        notify("Fetching your issues, comments, and articles...")
        started = time.perf_counter()
        created, resolved, commented, all_articles = await asyncio.gather(
            issues.fetch_issues_created_by(self._client, user.login, window.start_date, window.end_date, notify),
            issues.fetch_issues_resolved_by(self._client, user.login, window.start_date, window.end_date, notify),
            issues.fetch_issues_with_comments_by(
                self._client,
                user.login,
                window.start_date,
                window.end_date,
                notify,
            ),
            articles.fetch_articles(self._client, list(article_projects), notify),
        )
        LOGGER.info(
            "Fetched %s created, %s resolved, %s commented issues and %s articles in %.0fms",
            len(created),
            len(resolved),
            len(commented),
            len(all_articles),
            (time.perf_counter() - started) * 1000,
        )

        notify("Processing your comments...")
        comments = extract_user_comments(commented, user.login, window)
        LOGGER.debug("Found %s comments by %s", len(comments), user.login)

        notify("Processing your articles...")
        own_articles = filter_user_articles(all_articles, user.login, window)
        LOGGER.debug("Found %s articles by %s", len(own_articles), user.login)

        return RawYearDataset(
            user=user,
            year=year,
            created_issues=tuple(created),
            resolved_issues=tuple(resolved),
            comments=tuple(comments),
            articles=tuple(own_articles),
            collected_at=pendulum.now("UTC"),
        )


def extract_user_comments(
    commented_issues: Iterable[CommentedIssue],
    login: str,
    window: YearWindow,
) -> list[Comment]:
    """Return the user's comments inside the window, each linked to its issue."""
    extracted: list[Comment] = []
    for issue in commented_issues:
        issue_ref = issue.as_ref()
        for comment in issue.comments:
            if comment.author is None or comment.author.login != login:
                continue
            if comment.created not in window:
                continue
            extracted.append(comment.model_copy(update={"issue": issue_ref}))
    return extracted


def filter_user_articles(all_articles: Iterable[Article], login: str, window: YearWindow) -> list[Article]:
    """Return articles reported by the user inside the window."""
    return [
        article
        for article in all_articles
        if article.reporter is not None and article.reporter.login == login and article.created in window
    ]
