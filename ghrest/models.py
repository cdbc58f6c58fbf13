"""Decoded API resources.

Every entity is a frozen pydantic model: fields the server did not send decode to
``None`` (including list fields, which otherwise decode to tuples in server order)
and fields the model does not declare are ignored.
"""

from enum import Enum
from typing import Any

from pydantic import AwareDatetime, BaseModel, ConfigDict, Field, field_validator, model_validator

REF_PREFIX = "refs/"


class GitHubEntity(BaseModel):
    model_config = ConfigDict(frozen=True, extra="ignore", populate_by_name=True)


class IssueState(str, Enum):
    OPEN = "open"
    CLOSED = "closed"


class StatusState(str, Enum):
    PENDING = "pending"
    SUCCESS = "success"
    ERROR = "error"
    FAILURE = "failure"


class CheckStatus(str, Enum):
    QUEUED = "queued"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"
    WAITING = "waiting"
    REQUESTED = "requested"
    PENDING = "pending"


class CheckConclusion(str, Enum):
    SUCCESS = "success"
    FAILURE = "failure"
    NEUTRAL = "neutral"
    CANCELLED = "cancelled"
    SKIPPED = "skipped"
    TIMED_OUT = "timed_out"
    ACTION_REQUIRED = "action_required"
    STALE = "stale"


class ReviewState(str, Enum):
    APPROVED = "APPROVED"
    CHANGES_REQUESTED = "CHANGES_REQUESTED"
    COMMENTED = "COMMENTED"
    DISMISSED = "DISMISSED"
    PENDING = "PENDING"


class AuthorAssociation(str, Enum):
    COLLABORATOR = "COLLABORATOR"
    CONTRIBUTOR = "CONTRIBUTOR"
    FIRST_TIMER = "FIRST_TIMER"
    FIRST_TIME_CONTRIBUTOR = "FIRST_TIME_CONTRIBUTOR"
    MANNEQUIN = "MANNEQUIN"
    MEMBER = "MEMBER"
    NONE = "NONE"
    OWNER = "OWNER"


class UserPermission(str, Enum):
    ADMIN = "admin"
    MAINTAIN = "maintain"
    WRITE = "write"
    TRIAGE = "triage"
    READ = "read"
    NONE = "none"


class User(GitHubEntity):
    login: str
    id: int | None = None
    type: str | None = None  # "User" | "Organization" | "Bot"


class Organization(GitHubEntity):
    login: str
    id: int | None = None
    name: str | None = None
    two_factor_requirement_enabled: bool | None = None


class Installation(GitHubEntity):
    id: int
    app_id: int | None = None
    app_slug: str | None = None
    target_type: str | None = None
    repository_selection: str | None = None  # "all" | "selected"
    account: User | None = None


class App(GitHubEntity):
    id: int
    slug: str | None = None
    name: str | None = None


class Label(GitHubEntity):
    name: str
    id: int | None = None
    color: str | None = None
    description: str | None = None


class Revision(GitHubEntity):
    """Head or base of a pull request: a branch name, not a fully qualified ref."""

    label: str | None = None
    ref: str
    sha: str
    user: User | None = None


class Ref(GitHubEntity):
    """A git reference as returned by the git/refs endpoints."""

    ref: str
    sha: str = Field(pattern=r"^[0-9a-f]{40}$")
    url: str | None = None
    label: str | None = None

    @model_validator(mode="before")
    @classmethod
    def flatten_object(cls, data: Any) -> Any:
        # The API nests the target as {"object": {"sha": ..., "type": ...}}.
        if isinstance(data, dict) and "sha" not in data and isinstance(data.get("object"), dict):
            return {**data, "sha": data["object"].get("sha")}
        return data

    @field_validator("ref")
    @classmethod
    def check_prefix(cls, value: str) -> str:
        if not value.startswith(REF_PREFIX):
            raise ValueError(f'Ref must start with "{REF_PREFIX}": {value}')
        return value

    def __str__(self) -> str:
        return f"{self.sha} {self.ref}"


class PullRequest(GitHubEntity):
    id: int | None = None
    number: int
    state: IssueState
    title: str
    body: str | None = None
    html_url: str | None = None
    head: Revision
    base: Revision | None = None
    merged: bool | None = None
    draft: bool | None = None
    commits: int | None = None
    user: User | None = None
    assignee: User | None = None
    assignees: tuple[User, ...] | None = None
    requested_reviewers: tuple[User, ...] | None = None
    labels: tuple[Label, ...] | None = None
    created_at: AwareDatetime | None = None
    updated_at: AwareDatetime | None = None
    merged_at: AwareDatetime | None = None


class Issue(GitHubEntity):
    id: int | None = None
    number: int
    state: IssueState
    title: str
    body: str | None = None
    html_url: str | None = None
    user: User | None = None
    assignee: User | None = None
    assignees: tuple[User, ...] | None = None
    labels: tuple[Label, ...] | None = None
    created_at: AwareDatetime | None = None
    updated_at: AwareDatetime | None = None


class Review(GitHubEntity):
    id: int
    user: User | None = None
    state: ReviewState
    body: str | None = None
    commit_id: str | None = None
    submitted_at: AwareDatetime | None = None

    @property
    def approved(self) -> bool:
        return self.state == ReviewState.APPROVED


class IssueComment(GitHubEntity):
    id: int
    body: str | None = None
    user: User | None = None
    html_url: str | None = None
    author_association: AuthorAssociation | None = None
    created_at: AwareDatetime | None = None
    updated_at: AwareDatetime | None = None


class PullRequestComment(IssueComment):
    """Review comment anchored to a diff position."""

    path: str | None = None
    position: int | None = None
    original_position: int | None = None
    commit_id: str | None = None
    original_commit_id: str | None = None
    diff_hunk: str | None = None
    in_reply_to_id: int | None = None


class Status(GitHubEntity):
    id: int | None = None
    context: str | None = None
    target_url: str | None = None
    description: str | None = None
    state: StatusState
    creator: User | None = None
    created_at: AwareDatetime | None = None
    updated_at: AwareDatetime | None = None


class CombinedStatus(GitHubEntity):
    # state is computed by the server and taken as-is
    state: StatusState
    sha: str
    total_count: int
    statuses: tuple[Status, ...]


class CheckRun(GitHubEntity):
    id: int | None = None
    name: str | None = None
    head_sha: str | None = None
    status: CheckStatus
    conclusion: CheckConclusion | None = None  # None until completed
    detail_url: str | None = Field(default=None, alias="details_url")
    app: App | None = None


class CheckSuite(GitHubEntity):
    id: int
    head_sha: str | None = None
    head_branch: str | None = None
    status: CheckStatus | None = None
    conclusion: CheckConclusion | None = None
    app: App | None = None


class CheckRuns(GitHubEntity):
    total_count: int | None = None
    check_runs: tuple[CheckRun, ...]


class CheckSuites(GitHubEntity):
    total_count: int | None = None
    check_suites: tuple[CheckSuite, ...]


class Installations(GitHubEntity):
    total_count: int | None = None
    installations: tuple[Installation, ...]


class CommitAuthor(GitHubEntity):
    name: str | None = None
    email: str | None = None
    date: AwareDatetime | None = None


class CommitDetail(GitHubEntity):
    message: str
    author: CommitAuthor | None = None
    committer: CommitAuthor | None = None


class GitHubCommit(GitHubEntity):
    sha: str
    html_url: str | None = None
    author: User | None = None
    committer: User | None = None
    commit: CommitDetail


class Release(GitHubEntity):
    id: int
    tag_name: str
    name: str | None = None
    body: str | None = None
    target_commitish: str | None = None
    draft: bool | None = None
    prerelease: bool | None = None
    html_url: str | None = None
    tarball_url: str | None = None
    zipball_url: str | None = None


class UserPermissionLevel(GitHubEntity):
    permission: UserPermission
    user: User | None = None


class SearchResults(GitHubEntity):
    total_count: int
    incomplete_results: bool | None = None
    items: tuple[Issue, ...]
