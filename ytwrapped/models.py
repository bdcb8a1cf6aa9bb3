"""Pydantic models describing YouTrack entities used by the collector."""

from datetime import datetime
from typing import Annotated, Any

import pendulum
from pydantic import BaseModel, BeforeValidator, ConfigDict, PlainSerializer, SecretStr, field_validator
from pydantic.alias_generators import to_camel


def _parse_timestamp(value: Any) -> Any:
    """Turn YouTrack epoch milliseconds into an aware UTC datetime."""
    if isinstance(value, bool):
        return value
    if isinstance(value, int):
        seconds, millis = divmod(value, 1000)
        return pendulum.from_timestamp(seconds, tz="UTC").add(microseconds=millis * 1000)
    if isinstance(value, float):
        return pendulum.from_timestamp(value / 1000, tz="UTC")
    return value


def _to_millis(value: datetime) -> int:
    return round(value.timestamp() * 1000)


Timestamp = Annotated[
    datetime,
    BeforeValidator(_parse_timestamp),
    PlainSerializer(_to_millis, return_type=int, when_used="json"),
]


class YouTrackModel(BaseModel):
    """Immutable base model accepting YouTrack's camelCase field names."""

    model_config = ConfigDict(frozen=True, alias_generator=to_camel, populate_by_name=True)


class Credential(YouTrackModel):
    """Base endpoint and token for one collection run."""

    base_url: str
    token: SecretStr

    @field_validator("base_url")
    @classmethod
    def _strip_trailing_slash(cls, value: str) -> str:
        return value.rstrip("/")


class User(YouTrackModel):
    """The authenticated YouTrack user."""

    id: str
    login: str
    full_name: str | None = None
    email: str | None = None
    avatar_url: str | None = None

    @property
    def display_name(self) -> str:
        """Return the full name, falling back to the login."""
        return self.full_name or self.login


class UserRef(YouTrackModel):
    """Lightweight user reference embedded in comments and articles."""

    id: str | None = None
    login: str
    full_name: str | None = None


class ProjectRef(YouTrackModel):
    """Project reference used as the grouping key for rollups."""

    id: str | None = None
    name: str | None = None
    short_name: str | None = None
    description: str | None = None


class CustomField(YouTrackModel):
    """Issue custom field with an arbitrarily shaped value."""

    name: str | None = None
    value: Any = None


class Issue(YouTrackModel):
    """Issue returned by the created-by and resolved-by queries."""

    id: str
    id_readable: str
    summary: str | None = None
    created: Timestamp
    resolved: Timestamp | None = None
    project: ProjectRef | None = None
    custom_fields: tuple[CustomField, ...] = ()

    @field_validator("custom_fields", mode="before")
    @classmethod
    def _null_custom_fields(cls, value: Any) -> Any:
        return () if value is None else value


class IssueRef(YouTrackModel):
    """Back-reference from a comment to its parent issue."""

    id: str
    id_readable: str
    summary: str | None = None
    project: ProjectRef | None = None


class Comment(YouTrackModel):
    """Issue comment, optionally enriched with its parent issue."""

    id: str
    text: str | None = None
    created: Timestamp
    author: UserRef | None = None
    issue: IssueRef | None = None


class CommentedIssue(YouTrackModel):
    """Issue returned by the commenter query, carrying its full comment list."""

    id: str
    id_readable: str
    summary: str | None = None
    project: ProjectRef | None = None
    comments: tuple[Comment, ...] = ()

    @field_validator("comments", mode="before")
    @classmethod
    def _null_comments(cls, value: Any) -> Any:
        return () if value is None else value

    def as_ref(self) -> IssueRef:
        """Return the lightweight reference attached to extracted comments."""
        return IssueRef(id=self.id, id_readable=self.id_readable, summary=self.summary, project=self.project)


class Article(YouTrackModel):
    """Knowledge base article."""

    id: str
    id_readable: str | None = None
    summary: str | None = None
    content: str | None = None
    created: Timestamp
    updated: Timestamp | None = None
    reporter: UserRef | None = None
    project: ProjectRef | None = None


class RawYearDataset(YouTrackModel):
    """Everything collected for one user and year; the sole aggregation input."""

    user: User
    year: int
    created_issues: tuple[Issue, ...] = ()
    resolved_issues: tuple[Issue, ...] = ()
    comments: tuple[Comment, ...] = ()
    articles: tuple[Article, ...] = ()
    collected_at: Timestamp
