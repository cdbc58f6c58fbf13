"""Outbound payloads and list/search parameters.

Payloads validate at construction: a payload that breaks a domain rule raises
ValidationFailure, so nothing invalid ever reaches the transport.
"""

from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, ValidationError, field_validator, model_validator

from ghrest.errors import ValidationFailure
from ghrest.models import StatusState


class GitHubRequest(BaseModel):
    model_config = ConfigDict(frozen=True, extra="forbid")

    def __init__(self, **data: Any) -> None:
        try:
            super().__init__(**data)
        except ValidationError as exc:
            first = exc.errors()[0]
            field = ".".join(str(part) for part in first["loc"])
            where = f"{field}: " if field else ""
            raise ValidationFailure(f"Invalid {type(self).__name__}: {where}{first['msg']}") from exc


def _not_blank(value: str) -> str:
    if not value.strip():
        raise ValueError("must not be empty")
    return value


class CreatePullRequest(GitHubRequest):
    title: str
    body: str | None = None
    head: str
    base: str
    draft: bool = False

    @field_validator("title", "head", "base")
    @classmethod
    def check_required(cls, value: str) -> str:
        return _not_blank(value)


class UpdatePullRequest(GitHubRequest):
    class State(str, Enum):
        OPEN = "open"
        CLOSED = "closed"

    title: str | None = None
    body: str | None = None
    state: State | None = None

    @model_validator(mode="after")
    def check_has_changes(self) -> "UpdatePullRequest":
        if self.title is None and self.body is None and self.state is None:
            raise ValueError("at least one of title, body or state must be set")
        return self


class CreateIssueRequest(GitHubRequest):
    title: str
    body: str | None = None
    assignees: tuple[str, ...] = ()

    @field_validator("title")
    @classmethod
    def check_title(cls, value: str) -> str:
        return _not_blank(value)


class AddLabels(GitHubRequest):
    labels: tuple[str, ...]

    @field_validator("labels")
    @classmethod
    def check_non_empty(cls, value: tuple[str, ...]) -> tuple[str, ...]:
        if not value:
            raise ValueError("at least one label is required")
        return value


class AddAssignees(GitHubRequest):
    assignees: tuple[str, ...]

    @field_validator("assignees")
    @classmethod
    def check_non_empty(cls, value: tuple[str, ...]) -> tuple[str, ...]:
        if not value:
            raise ValueError("at least one assignee is required")
        return value


class CommentBody(GitHubRequest):
    body: str

    @field_validator("body")
    @classmethod
    def check_body(cls, value: str) -> str:
        return _not_blank(value)


class CreateStatusRequest(GitHubRequest):
    state: StatusState
    target_url: str | None = None
    description: str | None = None
    context: str

    @field_validator("context")
    @classmethod
    def check_context(cls, value: str) -> str:
        return _not_blank(value)


class UpdateReferenceRequest(GitHubRequest):
    sha: str
    force: bool = False

    @field_validator("sha")
    @classmethod
    def check_sha(cls, value: str) -> str:
        if len(value) != 40 or any(c not in "0123456789abcdef" for c in value):
            raise ValueError(f"not a 40 character hex sha: {value}")
        return value


class CreateReleaseRequest(GitHubRequest):
    """A new release. The tag name is mandatory, everything else is refined with ``with_*``."""

    tag_name: str
    name: str | None = None
    body: str | None = None
    target_commitish: str | None = None
    draft: bool | None = None
    prerelease: bool | None = None

    @field_validator("tag_name")
    @classmethod
    def check_tag(cls, value: str) -> str:
        return _not_blank(value)

    def with_name(self, name: str) -> "CreateReleaseRequest":
        return self.model_copy(update={"name": name})

    def with_body(self, body: str) -> "CreateReleaseRequest":
        return self.model_copy(update={"body": body})

    def with_commitish(self, commitish: str) -> "CreateReleaseRequest":
        return self.model_copy(update={"target_commitish": commitish})

    def with_draft(self, draft: bool) -> "CreateReleaseRequest":
        return self.model_copy(update={"draft": draft})

    def with_prerelease(self, prerelease: bool) -> "CreateReleaseRequest":
        return self.model_copy(update={"prerelease": prerelease})


# ---------------------------------------------------------------------------
# Query parameters
# ---------------------------------------------------------------------------


class SortFilter(str, Enum):
    CREATED = "created"
    UPDATED = "updated"
    POPULARITY = "popularity"
    LONG_RUNNING = "long-running"


class DirectionFilter(str, Enum):
    ASC = "asc"
    DESC = "desc"


class PullRequestListParams(BaseModel):
    """Filters for listing pull requests. Unset filters are left out of the query."""

    model_config = ConfigDict(frozen=True)

    head: str | None = None
    base: str | None = None
    sort: SortFilter | None = None
    direction: DirectionFilter | None = None
    state: str | None = None  # "open" | "closed" | "all"

    def with_head(self, head: str) -> "PullRequestListParams":
        return self.model_copy(update={"head": head})

    def with_base(self, base: str) -> "PullRequestListParams":
        return self.model_copy(update={"base": base})

    def with_sort(self, sort: SortFilter) -> "PullRequestListParams":
        return self.model_copy(update={"sort": sort})

    def with_direction(self, direction: DirectionFilter) -> "PullRequestListParams":
        return self.model_copy(update={"direction": direction})

    def with_state(self, state: str) -> "PullRequestListParams":
        return self.model_copy(update={"state": state})

    def query(self) -> list[tuple[str, str]]:
        pairs: list[tuple[str, str]] = []
        if self.head:
            pairs.append(("head", self.head))
        if self.base:
            pairs.append(("base", self.base))
        if self.sort:
            pairs.append(("sort", self.sort.value))
        if self.direction:
            pairs.append(("direction", self.direction.value))
        if self.state:
            pairs.append(("state", self.state))
        return pairs


class IssuesAndPullRequestsSearchRequestParams(BaseModel):
    model_config = ConfigDict(frozen=True)

    class Type(str, Enum):
        PULL_REQUEST = "pr"
        ISSUE = "issue"

    class State(str, Enum):
        OPEN = "open"
        CLOSED = "closed"

    repo: str | None = None
    commit: str | None = None
    type: Type | None = None
    state: State | None = None

    def qualifiers(self) -> list[str]:
        parts = []
        if self.repo:
            parts.append(f"repo:{self.repo}")
        if self.commit:
            parts.append(f"commit:{self.commit}")
        if self.type:
            parts.append(f"is:{self.type.value}")
        if self.state:
            parts.append(f"state:{self.state.value}")
        return parts
