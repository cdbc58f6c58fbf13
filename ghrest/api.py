"""GitHub REST API v3 client: one method per API action."""

import logging
import re
from collections.abc import Collection, Iterable, Iterator
from contextlib import contextmanager
from functools import partial
from typing import TypeVar
from urllib.parse import quote

from pydantic import BaseModel

from ghrest.codec import decode, encode
from ghrest.errors import ApiError, MalformedResponse, ResponseCode, ValidationFailure, raise_for_status
from ghrest.models import (
    REF_PREFIX,
    CheckRun,
    CheckRuns,
    CheckSuite,
    CheckSuites,
    CombinedStatus,
    GitHubCommit,
    Installation,
    Installations,
    Issue,
    IssueComment,
    Label,
    Organization,
    PullRequest,
    PullRequestComment,
    Ref,
    Release,
    Review,
    SearchResults,
    Status,
    User,
    UserPermissionLevel,
)
from ghrest.pagination import DEFAULT_PAGE_SIZE, paginate, with_page_size
from ghrest.requests import (
    AddAssignees,
    AddLabels,
    CommentBody,
    CreateIssueRequest,
    CreatePullRequest,
    CreateReleaseRequest,
    CreateStatusRequest,
    IssuesAndPullRequestsSearchRequestParams,
    PullRequestListParams,
    UpdatePullRequest,
    UpdateReferenceRequest,
)
from ghrest.settings import GhRestSettings
from ghrest.transport import HttpxTransport, Response, Transport

logger = logging.getLogger(__name__)

T = TypeVar("T")

_PROJECT = re.compile(r"[^/\s]+/[^/\s]+")

_OK = frozenset({200})
_CREATED = frozenset({200, 201})
_DELETED = frozenset({200, 202, 204})


def _escape(segment: str | int) -> str:
    return quote(str(segment), safe="")


def _query(pairs: Iterable[tuple[str, str]]) -> str:
    return "&".join(f"{key}={quote(value, safe=':/')}" for key, value in pairs)


def check_project(project: str) -> str:
    if not _PROJECT.fullmatch(project):
        raise ValidationFailure(f"Project must be in the form 'owner/name': '{project}'")
    return project


def check_ref(ref: str) -> str:
    if not ref.startswith(REF_PREFIX):
        raise ValidationFailure(f'Ref must start with "{REF_PREFIX}", but was {ref}')
    return ref


@contextmanager
def not_found_as_invalid(message: str) -> Iterator[None]:
    """Turn a 404 raised inside the block into ValidationFailure, keeping the ApiError as cause."""
    try:
        yield
    except ApiError as exc:
        if exc.response_code == ResponseCode.NOT_FOUND:
            raise ValidationFailure(message, cause=exc) from exc
        raise


class GitHubApi:
    def __init__(self, transport: Transport, per_page: int = DEFAULT_PAGE_SIZE) -> None:
        self._transport = transport
        self._per_page = per_page

    @classmethod
    def from_settings(cls, settings: GhRestSettings, transport: Transport | None = None) -> "GitHubApi":
        """Build a client whose page size comes from settings; defaults to an HttpxTransport."""
        return cls(transport or HttpxTransport(settings), per_page=settings.per_page)

    # -----------------------------------------------------------------------
    # Plumbing
    # -----------------------------------------------------------------------

    def _get(self, path: str, target: type[T]) -> T:
        response = self._transport.get(path, {})
        raise_for_status(response.status, response.body, "GET", path)
        return decode(response.body, target)

    def _get_or_invalid(self, path: str, target: type[T], not_found: str) -> T:
        """GET where a 404 means the caller asked for something that does not exist."""
        with not_found_as_invalid(not_found):
            return self._get(path, target)

    def _check_expected(self, response: Response, method: str, path: str, expected: Collection[int]) -> None:
        raise_for_status(response.status, response.body, method, path)
        if response.status not in expected:
            raise MalformedResponse(
                f"{method} {path}", f"unexpected status {response.status}, expected one of {sorted(expected)}"
            )

    def _post(self, path: str, request: BaseModel, target: type[T], expected: Collection[int]) -> T:
        response = self._transport.post(path, encode(request), {})
        self._check_expected(response, "POST", path, expected)
        return decode(response.body, target)

    def _delete(self, path: str, expected: Collection[int]) -> None:
        response = self._transport.delete(path, {})
        self._check_expected(response, "DELETE", path, expected)

    def _list(self, path: str, target: type[T]) -> list[T]:
        decode_page = partial(decode, target=tuple[target, ...])
        return paginate(self._transport, with_page_size(path, self._per_page), decode_page)

    # -----------------------------------------------------------------------
    # Pull requests
    # -----------------------------------------------------------------------

    def get_pull_requests(
        self, project: str, params: PullRequestListParams = PullRequestListParams()
    ) -> list[PullRequest]:
        path = f"/repos/{check_project(project)}/pulls"
        if query := _query(params.query()):
            path = f"{path}?{query}"
        return self._list(path, PullRequest)

    def get_pull_request(self, project: str, number: int) -> PullRequest:
        return self._get_or_invalid(
            f"/repos/{check_project(project)}/pulls/{number}",
            PullRequest,
            f"Pull Request not found: {project}#{number}",
        )

    def create_pull_request(self, project: str, request: CreatePullRequest) -> PullRequest:
        return self._post(f"/repos/{check_project(project)}/pulls", request, PullRequest, _CREATED)

    def update_pull_request(self, project: str, number: int, request: UpdatePullRequest) -> PullRequest:
        return self._post(f"/repos/{check_project(project)}/pulls/{number}", request, PullRequest, _OK)

    def get_reviews(self, project: str, number: int) -> list[Review]:
        return self._list(f"/repos/{check_project(project)}/pulls/{number}/reviews", Review)

    def get_pull_request_comment(self, project: str, comment_id: int) -> PullRequestComment:
        return self._get_or_invalid(
            f"/repos/{check_project(project)}/pulls/comments/{comment_id}",
            PullRequestComment,
            f"Pull Request Comment not found: {project} comment {comment_id}",
        )

    def get_pull_request_comments(self, project: str, number: int) -> list[PullRequestComment]:
        path = f"/repos/{check_project(project)}/pulls/{number}/comments"
        with not_found_as_invalid(f"Pull Request not found: {project}#{number}"):
            return self._list(path, PullRequestComment)

    # -----------------------------------------------------------------------
    # Issues and comments
    # -----------------------------------------------------------------------

    def get_issue(self, project: str, number: int) -> Issue:
        return self._get_or_invalid(
            f"/repos/{check_project(project)}/issues/{number}",
            Issue,
            f"Issue not found: {project}#{number}",
        )

    def create_issue(self, project: str, request: CreateIssueRequest) -> Issue:
        return self._post(f"/repos/{check_project(project)}/issues", request, Issue, _CREATED)

    def list_issue_comments(self, project: str, number: int) -> list[IssueComment]:
        return self._list(f"/repos/{check_project(project)}/issues/{number}/comments", IssueComment)

    def post_comment(self, project: str, number: int, body: str) -> IssueComment:
        return self._post(
            f"/repos/{check_project(project)}/issues/{number}/comments",
            CommentBody(body=body),
            IssueComment,
            _CREATED,
        )

    def add_labels(self, project: str, number: int, labels: Iterable[str]) -> list[Label]:
        request = AddLabels(labels=tuple(labels))
        return list(
            self._post(f"/repos/{check_project(project)}/issues/{number}/labels", request, tuple[Label, ...], _OK)
        )

    def add_assignees(self, project: str, number: int, request: AddAssignees) -> Issue:
        return self._post(f"/repos/{check_project(project)}/issues/{number}/assignees", request, Issue, _CREATED)

    # -----------------------------------------------------------------------
    # Git references
    # -----------------------------------------------------------------------

    def _ref_path(self, project: str, ref: str) -> str:
        name = check_ref(ref).removeprefix(REF_PREFIX)
        return f"/repos/{check_project(project)}/git/refs/{quote(name, safe='/')}"

    def get_references(self, project: str) -> list[Ref]:
        """All references of the repository; an empty repository has none."""
        try:
            return self._list(f"/repos/{check_project(project)}/git/refs", Ref)
        except ApiError as exc:
            if exc.is_empty_repository():
                logger.info("Repository %s is empty, returning no references", project)
                return []
            raise

    def get_ls_remote(self, project: str) -> list[Ref]:
        return self.get_references(project)

    def get_reference(self, project: str, ref: str) -> Ref:
        return self._get(self._ref_path(project, ref), Ref)

    def update_reference(self, project: str, ref: str, request: UpdateReferenceRequest) -> Ref:
        return self._post(self._ref_path(project, ref), request, Ref, _OK)

    def delete_reference(self, project: str, ref: str) -> None:
        self._delete(self._ref_path(project, ref), _DELETED)

    # -----------------------------------------------------------------------
    # Commits, statuses and checks
    # -----------------------------------------------------------------------

    def get_commit(self, project: str, sha: str) -> GitHubCommit:
        return self._get(f"/repos/{check_project(project)}/commits/{_escape(sha)}", GitHubCommit)

    def get_combined_status(self, project: str, ref: str) -> CombinedStatus:
        path = f"/repos/{check_project(project)}/commits/{_escape(ref)}/status"
        return self._get(with_page_size(path, self._per_page), CombinedStatus)

    def create_status(self, project: str, sha: str, request: CreateStatusRequest) -> Status:
        return self._post(f"/repos/{check_project(project)}/statuses/{_escape(sha)}", request, Status, _CREATED)

    def get_check_runs(self, project: str, ref: str) -> list[CheckRun]:
        path = with_page_size(f"/repos/{check_project(project)}/commits/{_escape(ref)}/check-runs", self._per_page)
        return paginate(self._transport, path, lambda body: decode(body, CheckRuns).check_runs)

    def get_check_suites(self, project: str, ref: str) -> list[CheckSuite]:
        path = with_page_size(f"/repos/{check_project(project)}/commits/{_escape(ref)}/check-suites", self._per_page)
        return paginate(self._transport, path, lambda body: decode(body, CheckSuites).check_suites)

    # -----------------------------------------------------------------------
    # Releases and search
    # -----------------------------------------------------------------------

    def create_release(self, project: str, request: CreateReleaseRequest) -> Release:
        return self._post(f"/repos/{check_project(project)}/releases", request, Release, _CREATED)

    def get_issues_or_pull_requests_search_results(
        self, params: IssuesAndPullRequestsSearchRequestParams
    ) -> SearchResults:
        qualifiers = params.qualifiers()
        if not qualifiers:
            raise ValidationFailure("Search needs at least one qualifier")
        query = "+".join(quote(q, safe=":/") for q in qualifiers)
        return self._get(f"/search/issues?q={query}", SearchResults)

    # -----------------------------------------------------------------------
    # Users and organizations
    # -----------------------------------------------------------------------

    def get_user_permission_level(self, project: str, user: str) -> UserPermissionLevel:
        return self._get(
            f"/repos/{check_project(project)}/collaborators/{_escape(user)}/permission", UserPermissionLevel
        )

    def get_authenticated_user(self) -> User:
        return self._get("/user", User)

    def get_organization(self, org: str) -> Organization:
        return self._get(f"/orgs/{_escape(org)}", Organization)

    def get_installations(self, org: str) -> list[Installation]:
        path = with_page_size(f"/orgs/{_escape(org)}/installations", self._per_page)
        return paginate(self._transport, path, lambda body: decode(body, Installations).installations)
