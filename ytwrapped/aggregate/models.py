"""Models representing the aggregated year-in-review report."""

from __future__ import annotations

from collections.abc import Mapping
from types import MappingProxyType
from typing import Annotated

from pydantic import AfterValidator, BaseModel, ConfigDict, PlainSerializer
from pydantic.alias_generators import to_camel

from ytwrapped.models import Article, Comment, Issue, IssueRef, User

# Read-only once validated; dumped back as a plain dict
Histogram = Annotated[
    Mapping[int, int],
    AfterValidator(MappingProxyType),
    PlainSerializer(dict, return_type=dict[int, int]),
]


class ReportModel(BaseModel):
    """Immutable base for report sections, serialized with camelCase keys."""

    model_config = ConfigDict(frozen=True, alias_generator=to_camel, populate_by_name=True)


class Summary(ReportModel):
    """Headline counts."""

    total_issues_created: int = 0
    total_issues_resolved: int = 0
    total_comments: int = 0
    total_articles: int = 0
    total_contributions: int = 0


class IssueStats(ReportModel):
    """Resolution time and summary length extremes for created issues."""

    total: int = 0
    resolved: int = 0
    avg_resolution_time_ms: float = 0.0
    avg_resolution_time_days: int = 0
    longest_summary: Issue | None = None
    shortest_summary: Issue | None = None


class MostCommentedIssue(ReportModel):
    """The issue that received the most comments from the user."""

    issue: IssueRef
    count: int


class CommentStats(ReportModel):
    """Comment volume and length figures."""

    total: int = 0
    avg_length: int = 0
    total_characters: int = 0
    longest_comment: Comment | None = None
    shortest_comment: Comment | None = None
    most_commented_issue: MostCommentedIssue | None = None


class ArticleStats(ReportModel):
    """Knowledge base writing figures."""

    total: int = 0
    total_content_length: int = 0
    avg_content_length: int = 0
    longest_article: Article | None = None


class ProjectActivity(ReportModel):
    """Per-project counters, grouped by project display name."""

    name: str
    short_name: str
    issues_created: int = 0
    issues_resolved: int = 0
    comments: int = 0
    total_activity: int = 0


class ProjectStats(ReportModel):
    """Projects ordered by total activity, busiest first."""

    total_projects: int = 0
    projects: tuple[ProjectActivity, ...] = ()
    top_project: ProjectActivity | None = None


class BusiestMonth(ReportModel):
    """Month (1-12) with the most activity."""

    month: int
    month_name: str
    count: int


class BusiestDay(ReportModel):
    """Weekday (0 is Sunday) with the most activity."""

    day: int
    day_name: str
    count: int


class BusiestHour(ReportModel):
    """Hour of day (0-23) with the most activity."""

    hour: int
    count: int


class Streak(ReportModel):
    """Longest run of consecutive active calendar days."""

    days: int = 0
    start_date: str | None = None
    end_date: str | None = None


class TimeStats(ReportModel):
    """Activity histograms by month, weekday and hour, plus the longest streak."""

    total_activities: int = 0
    monthly_activity: Histogram
    day_of_week_activity: Histogram
    hourly_activity: Histogram
    busiest_month: BusiestMonth
    busiest_day_of_week: BusiestDay
    busiest_hour: BusiestHour
    longest_streak: Streak


class FunFact(ReportModel):
    """A generated insight with a playful comparison."""

    icon: str
    text: str
    comparison: str


class Achievement(ReportModel):
    """A badge awarded for crossing a threshold."""

    id: str
    name: str
    description: str
    icon: str


class StatisticsReport(ReportModel):
    """Top-level report handed to presentation."""

    user: User
    year: int
    summary: Summary
    issue_stats: IssueStats
    comment_stats: CommentStats
    article_stats: ArticleStats
    project_stats: ProjectStats
    time_stats: TimeStats
    fun_facts: tuple[FunFact, ...] = ()
    achievements: tuple[Achievement, ...] = ()
