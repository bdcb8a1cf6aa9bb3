"""Aggregation service turning a raw year dataset into the statistics report."""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from itertools import pairwise
from pathlib import Path
from typing import TYPE_CHECKING

import orjson
import pendulum

from ytwrapped.aggregate.models import (
    Achievement,
    ArticleStats,
    BusiestDay,
    BusiestHour,
    BusiestMonth,
    CommentStats,
    FunFact,
    IssueStats,
    MostCommentedIssue,
    ProjectActivity,
    ProjectStats,
    StatisticsReport,
    Streak,
    Summary,
    TimeStats,
)
from ytwrapped.models import IssueRef, ProjectRef, RawYearDataset

if TYPE_CHECKING:
    from collections.abc import Iterable
    from datetime import date, datetime, tzinfo


LOGGER = logging.getLogger(__name__)

MONTH_NAMES = (
    "",
    "January",
    "February",
    "March",
    "April",
    "May",
    "June",
    "July",
    "August",
    "September",
    "October",
    "November",
    "December",
)
DAY_NAMES = ("Sunday", "Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday")
UNKNOWN_PROJECT = "Unknown"
UNKNOWN_SHORT_NAME = "?"
CHARACTERS_PER_PAGE = 3000
MS_PER_DAY = 1000 * 60 * 60 * 24

# (first hour, end hour exclusive, label); anything else is a night owl
HOUR_PERSONALITIES = (
    (5, 9, "Early Bird"),
    (9, 12, "Morning Person"),
    (12, 17, "Afternoon Warrior"),
    (17, 21, "Evening Coder"),
)
NIGHT_OWL = "Night Owl"

# Only the highest tier reached in each ladder is awarded. Tiers run highest first.
ACHIEVEMENT_LADDERS: dict[str, tuple[tuple[int, Achievement], ...]] = {
    "issues_created": (
        (100, Achievement(id="issue_master", name="Issue Master", description="Created 100+ issues", icon="🏆")),
        (50, Achievement(id="issue_expert", name="Issue Expert", description="Created 50+ issues", icon="🥇")),
        (20, Achievement(id="issue_enthusiast", name="Issue Enthusiast", description="Created 20+ issues", icon="🥈")),
        (5, Achievement(id="issue_starter", name="Issue Starter", description="Created 5+ issues", icon="🥉")),
    ),
    "issues_resolved": (
        (100, Achievement(id="bug_crusher", name="Bug Crusher", description="Resolved 100+ issues", icon="🐛")),
        (50, Achievement(id="bug_hunter", name="Bug Hunter", description="Resolved 50+ issues", icon="🔍")),
        (20, Achievement(id="bug_squasher", name="Bug Squasher", description="Resolved 20+ issues", icon="👊")),
    ),
    "comments": (
        (500, Achievement(id="chatterbox", name="Chatterbox", description="Left 500+ comments", icon="💬")),
        (
            200,
            Achievement(id="conversationalist", name="Conversationalist", description="Left 200+ comments", icon="🗣️"),
        ),
        (50, Achievement(id="contributor", name="Contributor", description="Left 50+ comments", icon="✍️")),
    ),
    "articles": (
        (
            20,
            Achievement(
                id="documentation_hero",
                name="Documentation Hero",
                description="Created 20+ articles",
                icon="📚",
            ),
        ),
        (10, Achievement(id="knowledge_sharer", name="Knowledge Sharer", description="Created 10+ articles", icon="📖")),
        (3, Achievement(id="writer", name="Writer", description="Created 3+ articles", icon="✏️")),
    ),
    "streak_days": (
        (30, Achievement(id="unstoppable", name="Unstoppable", description="30+ day streak", icon="🔥")),
        (14, Achievement(id="consistent", name="Consistent", description="14+ day streak", icon="⚡")),
        (7, Achievement(id="dedicated", name="Dedicated", description="7+ day streak", icon="💪")),
    ),
    "projects": (
        (10, Achievement(id="polyglot", name="Polyglot", description="Active in 10+ projects", icon="🌍")),
        (5, Achievement(id="versatile", name="Versatile", description="Active in 5+ projects", icon="🎯")),
    ),
}

ACTIVITY_FLAG_THRESHOLD = 20
WEEKEND_DAYS = (0, 6)
NIGHT_HOURS = (22, 23, 0, 1, 2, 3, 4)
MORNING_HOURS = (5, 6, 7, 8)
WEEKEND_WARRIOR = Achievement(
    id="weekend_warrior",
    name="Weekend Warrior",
    description="Active on weekends",
    icon="🦸",
)
NIGHT_OWL_BADGE = Achievement(id="night_owl", name="Night Owl", description="Active late at night", icon="🦉")
EARLY_BIRD_BADGE = Achievement(id="early_bird", name="Early Bird", description="Active early morning", icon="🐦")


def round_half_up(value: float) -> int:
    """Round to the nearest integer with halves going up."""
    return math.floor(value + 0.5)


class AggregationService:
    """Compute the statistics report for a collected year.

    Calendar derivations (month, weekday, hour, active date) are made in
    ``timezone``; everything else is independent of it.
    """

    def __init__(self, *, timezone: str | tzinfo = "UTC") -> None:
        """Configure the timezone used to place events on the calendar."""
        self._timezone = timezone

    def run(self, *, dataset_path: Path, output_path: Path) -> StatisticsReport:
        """Load a dataset file, aggregate it, and write the report to disk."""
        dataset = load_dataset(dataset_path)
        report = self.calculate_all(dataset)
        write_report(report, output_path)
        return report

    def calculate_all(self, dataset: RawYearDataset) -> StatisticsReport:
        """Return the complete report for the dataset."""
        summary = calculate_summary(dataset)
        comment_stats = calculate_comment_stats(dataset)
        project_stats = calculate_project_stats(dataset)
        time_stats = self.calculate_time_stats(dataset)
        LOGGER.debug(
            "Aggregated %s contributions across %s projects for %s",
            summary.total_contributions,
            project_stats.total_projects,
            dataset.user.login,
        )
        return StatisticsReport(
            user=dataset.user,
            year=dataset.year,
            summary=summary,
            issue_stats=calculate_issue_stats(dataset),
            comment_stats=comment_stats,
            article_stats=calculate_article_stats(dataset),
            project_stats=project_stats,
            time_stats=time_stats,
            fun_facts=tuple(build_fun_facts(summary, comment_stats, time_stats)),
            achievements=tuple(build_achievements(summary, project_stats, time_stats)),
        )

    def calculate_time_stats(self, dataset: RawYearDataset) -> TimeStats:
        """Build month/weekday/hour histograms and the longest streak."""
        monthly = dict.fromkeys(range(1, 13), 0)
        weekdays = dict.fromkeys(range(7), 0)
        hourly = dict.fromkeys(range(24), 0)
        active_days: set[date] = set()
        events = 0
        for timestamp in _activity_timestamps(dataset):
            local = pendulum.instance(timestamp).in_timezone(self._timezone)
            monthly[local.month] += 1
            weekdays[local.isoweekday() % 7] += 1
            hourly[local.hour] += 1
            active_days.add(local.date())
            events += 1

        month, month_count = _busiest(monthly)
        day, day_count = _busiest(weekdays)
        hour, hour_count = _busiest(hourly)
        return TimeStats(
            total_activities=events,
            monthly_activity=monthly,
            day_of_week_activity=weekdays,
            hourly_activity=hourly,
            busiest_month=BusiestMonth(month=month, month_name=MONTH_NAMES[month], count=month_count),
            busiest_day_of_week=BusiestDay(day=day, day_name=DAY_NAMES[day], count=day_count),
            busiest_hour=BusiestHour(hour=hour, count=hour_count),
            longest_streak=longest_streak(active_days),
        )


def calculate_summary(dataset: RawYearDataset) -> Summary:
    """Count each kind of contribution."""
    counts = (
        len(dataset.created_issues),
        len(dataset.resolved_issues),
        len(dataset.comments),
        len(dataset.articles),
    )
    return Summary(
        total_issues_created=counts[0],
        total_issues_resolved=counts[1],
        total_comments=counts[2],
        total_articles=counts[3],
        total_contributions=sum(counts),
    )


def calculate_issue_stats(dataset: RawYearDataset) -> IssueStats:
    """Average resolution time and summary length extremes of created issues."""
    issues = dataset.created_issues
    durations = [
        (issue.resolved - issue.created).total_seconds() * 1000 for issue in issues if issue.resolved is not None
    ]
    average_ms = sum(durations) / len(durations) if durations else 0.0
    by_length = sorted(issues, key=lambda issue: len(issue.summary or ""), reverse=True)
    return IssueStats(
        total=len(issues),
        resolved=len(dataset.resolved_issues),
        avg_resolution_time_ms=average_ms,
        avg_resolution_time_days=round_half_up(average_ms / MS_PER_DAY),
        longest_summary=by_length[0] if by_length else None,
        shortest_summary=by_length[-1] if by_length else None,
    )


def calculate_comment_stats(dataset: RawYearDataset) -> CommentStats:
    """Comment lengths and the issue the user commented on most."""
    comments = dataset.comments
    if not comments:
        return CommentStats()
    total_characters = sum(len(comment.text or "") for comment in comments)
    by_length = sorted(comments, key=lambda comment: len(comment.text or ""), reverse=True)

    per_issue: dict[str, tuple[IssueRef, int]] = {}
    for comment in comments:
        if comment.issue is None:
            continue
        key = comment.issue.id_readable
        issue, count = per_issue.get(key, (comment.issue, 0))
        per_issue[key] = (issue, count + 1)
    most_commented = None
    if per_issue:
        issue, count = max(per_issue.values(), key=lambda entry: entry[1])
        most_commented = MostCommentedIssue(issue=issue, count=count)

    return CommentStats(
        total=len(comments),
        avg_length=round_half_up(total_characters / len(comments)),
        total_characters=total_characters,
        longest_comment=by_length[0],
        shortest_comment=by_length[-1],
        most_commented_issue=most_commented,
    )


def calculate_article_stats(dataset: RawYearDataset) -> ArticleStats:
    """Content length figures for the user's articles."""
    articles = dataset.articles
    if not articles:
        return ArticleStats()
    total_length = sum(len(article.content or "") for article in articles)
    longest = max(articles, key=lambda article: len(article.content or ""))
    return ArticleStats(
        total=len(articles),
        total_content_length=total_length,
        avg_content_length=round_half_up(total_length / len(articles)),
        longest_article=longest,
    )


@dataclass
class _ProjectTally:
    short_name: str
    issues_created: int = 0
    issues_resolved: int = 0
    comments: int = 0


def calculate_project_stats(dataset: RawYearDataset) -> ProjectStats:
    """Group activity by project display name.

    Distinct projects sharing a display name are counted as one group.
    """
    tallies: dict[str, _ProjectTally] = {}

    def tally_for(project: ProjectRef | None) -> _ProjectTally:
        name = (project.name if project else None) or UNKNOWN_PROJECT
        if name not in tallies:
            short_name = (project.short_name if project else None) or UNKNOWN_SHORT_NAME
            tallies[name] = _ProjectTally(short_name=short_name)
        return tallies[name]

    for issue in dataset.created_issues:
        tally_for(issue.project).issues_created += 1
    for issue in dataset.resolved_issues:
        tally_for(issue.project).issues_resolved += 1
    for comment in dataset.comments:
        tally_for(comment.issue.project if comment.issue else None).comments += 1

    projects = sorted(
        (
            ProjectActivity(
                name=name,
                short_name=tally.short_name,
                issues_created=tally.issues_created,
                issues_resolved=tally.issues_resolved,
                comments=tally.comments,
                total_activity=tally.issues_created + tally.issues_resolved + tally.comments,
            )
            for name, tally in tallies.items()
        ),
        key=lambda project: project.total_activity,
        reverse=True,
    )
    return ProjectStats(
        total_projects=len(projects),
        projects=tuple(projects),
        top_project=projects[0] if projects else None,
    )


def longest_streak(active_days: Iterable[date]) -> Streak:
    """Return the longest run of consecutive calendar days."""
    ordered = sorted(set(active_days))
    if not ordered:
        return Streak()
    best_length = run_length = 1
    best_start = best_end = run_start = ordered[0]
    for previous, current in pairwise(ordered):
        if current.toordinal() - previous.toordinal() == 1:
            run_length += 1
            if run_length > best_length:
                best_length = run_length
                best_start, best_end = run_start, current
        else:
            run_length = 1
            run_start = current
    return Streak(days=best_length, start_date=best_start.isoformat(), end_date=best_end.isoformat())


def hour_personality(hour: int) -> str:
    """Label the hour of day the user is most active in."""
    for first, end, label in HOUR_PERSONALITIES:
        if first <= hour < end:
            return label
    return NIGHT_OWL


def build_fun_facts(summary: Summary, comment_stats: CommentStats, time_stats: TimeStats) -> list[FunFact]:
    """Generate up to five insights; facts without qualifying data are left out."""
    facts: list[FunFact] = []

    pages = round_half_up(comment_stats.total_characters / CHARACTERS_PER_PAGE)
    if pages > 0:
        facts.append(
            FunFact(
                icon="📝",
                text=f"You wrote {comment_stats.total_characters:,} characters in comments",
                comparison=f"That's about {pages} page{'s' if pages > 1 else ''} of text!",
            ),
        )

    if time_stats.total_activities > 0:
        busiest_day = time_stats.busiest_day_of_week
        facts.append(
            FunFact(
                icon="📅",
                text=f"{busiest_day.day_name} was your power day",
                comparison=f"{busiest_day.count} activities on {busiest_day.day_name}s",
            ),
        )
        hour = time_stats.busiest_hour.hour
        facts.append(
            FunFact(
                icon="⏰",
                text=f"You're a {hour_personality(hour)}",
                comparison=f"Most active around {hour}:00",
            ),
        )

    streak = time_stats.longest_streak
    if streak.days > 1:
        facts.append(
            FunFact(
                icon="🔥",
                text=f"{streak.days}-day activity streak!",
                comparison=f"From {streak.start_date} to {streak.end_date}",
            ),
        )

    monthly_issues = summary.total_issues_created / 12
    if monthly_issues >= 1:
        facts.append(
            FunFact(
                icon="📊",
                text=f"You created ~{round_half_up(monthly_issues)} issues per month",
                comparison=f"That's one every {round_half_up(30 / monthly_issues)} days on average",
            ),
        )
    return facts


def build_achievements(summary: Summary, project_stats: ProjectStats, time_stats: TimeStats) -> list[Achievement]:
    """Award the highest reached tier of each ladder plus the activity-pattern badges."""
    metrics = {
        "issues_created": summary.total_issues_created,
        "issues_resolved": summary.total_issues_resolved,
        "comments": summary.total_comments,
        "articles": summary.total_articles,
        "streak_days": time_stats.longest_streak.days,
        "projects": project_stats.total_projects,
    }
    achievements: list[Achievement] = []
    for metric, tiers in ACHIEVEMENT_LADDERS.items():
        reached = next((badge for threshold, badge in tiers if metrics[metric] >= threshold), None)
        if reached is not None:
            achievements.append(reached)

    weekdays = time_stats.day_of_week_activity
    hourly = time_stats.hourly_activity
    if sum(weekdays.get(day, 0) for day in WEEKEND_DAYS) > ACTIVITY_FLAG_THRESHOLD:
        achievements.append(WEEKEND_WARRIOR)
    if sum(hourly.get(hour, 0) for hour in NIGHT_HOURS) > ACTIVITY_FLAG_THRESHOLD:
        achievements.append(NIGHT_OWL_BADGE)
    if sum(hourly.get(hour, 0) for hour in MORNING_HOURS) > ACTIVITY_FLAG_THRESHOLD:
        achievements.append(EARLY_BIRD_BADGE)
    return achievements


def load_dataset(path: Path) -> RawYearDataset:
    """Read a dataset previously written by the collect command."""
    path = Path(path)
    if not path.exists():
        msg = f"Collected dataset not found at {path}"
        raise FileNotFoundError(msg)
    return RawYearDataset.model_validate(orjson.loads(path.read_bytes()))


def write_dataset(dataset: RawYearDataset, path: Path) -> None:
    """Persist a dataset using YouTrack's field names and epoch-millisecond instants."""
    _write_json(dataset.model_dump(mode="json", by_alias=True), Path(path))


def write_report(report: StatisticsReport, path: Path) -> None:
    """Persist the report as indented JSON."""
    _write_json(report.model_dump(mode="json", by_alias=True), Path(path))


def _write_json(payload: object, path: Path) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_bytes(orjson.dumps(payload, option=orjson.OPT_INDENT_2 | orjson.OPT_NON_STR_KEYS))


def _activity_timestamps(dataset: RawYearDataset) -> Iterable[datetime]:
    for issue in dataset.created_issues:
        yield issue.created
    for comment in dataset.comments:
        yield comment.created
    for article in dataset.articles:
        yield article.created


def _busiest(histogram: dict[int, int]) -> tuple[int, int]:
    # max() keeps the first maximum, so ties go to the lowest bucket
    return max(histogram.items(), key=lambda item: item[1])
