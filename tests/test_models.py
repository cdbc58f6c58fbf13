"""Tests for ghrest.models and ghrest.codec."""

import json
from collections.abc import Callable

import pytest

from ghrest.codec import decode
from ghrest.errors import MalformedResponse
from ghrest.models import (
    CheckConclusion,
    CheckRun,
    CheckRuns,
    CheckStatus,
    CheckSuite,
    Issue,
    IssueState,
    PullRequest,
    Ref,
    Review,
    ReviewState,
    User,
    UserPermission,
    UserPermissionLevel,
)

Resource = Callable[[str], bytes]


def test_entity_frozen(resource: Resource) -> None:
    issue = decode(resource("issues_12345_testdata.json"), Issue)
    with pytest.raises(Exception):  # ValidationError or TypeError depending on pydantic version
        issue.title = "changed"  # type: ignore[misc]


def test_list_fields_decode_to_tuples(resource: Resource) -> None:
    pr = decode(resource("pulls_12345_testdata.json"), PullRequest)
    assert isinstance(pr.assignees, tuple)
    assert isinstance(pr.requested_reviewers, tuple)


def test_absent_is_distinct_from_empty() -> None:
    empty = decode(b'{"number": 1, "state": "open", "title": "t", "assignees": []}', Issue)
    absent = decode(b'{"number": 1, "state": "open", "title": "t"}', Issue)
    assert empty.assignees == ()
    assert absent.assignees is None
    assert absent.body is None
    assert absent.labels is None


def test_unknown_fields_ignored() -> None:
    user = decode(b'{"login": "octocat", "id": 1, "site_admin": false, "gravatar_id": ""}', User)
    assert user == User(login="octocat", id=1)


def test_large_ids_survive() -> None:
    user = decode(b'{"login": "octocat", "id": 9007199254740993}', User)
    assert user.id == 9007199254740993


def test_decode_is_deterministic(resource: Resource) -> None:
    body = resource("pulls_testdata.json")
    assert decode(body, tuple[PullRequest, ...]) == decode(body, tuple[PullRequest, ...])


def test_enum_values() -> None:
    issue = decode(b'{"number": 1, "state": "closed", "title": "t"}', Issue)
    assert issue.state is IssueState.CLOSED
    level = decode(b'{"permission": "write"}', UserPermissionLevel)
    assert level.permission is UserPermission.WRITE


def test_review_approved(resource: Resource) -> None:
    (review,) = decode(resource("pulls_12345_reviews_testdata.json"), tuple[Review, ...])
    assert review.state is ReviewState.APPROVED
    assert review.approved
    assert not review.model_copy(update={"state": ReviewState.COMMENTED}).approved


def test_check_run_details_url_alias(resource: Resource) -> None:
    runs = decode(resource("get_check_runs_testdata.json"), CheckRuns)
    assert runs.check_runs[0].detail_url == "https://example.com"
    assert runs.check_runs[0].status is CheckStatus.COMPLETED
    assert runs.check_runs[0].conclusion is CheckConclusion.NEUTRAL


class TestMalformed:
    def test_unknown_enum_names_field(self) -> None:
        with pytest.raises(MalformedResponse) as excinfo:
            decode(b'{"permission": "superuser"}', UserPermissionLevel)
        assert excinfo.value.field == "permission"
        assert excinfo.value.value == "superuser"
        assert "UserPermissionLevel" in str(excinfo.value)

    @pytest.mark.parametrize("target", [CheckRun, CheckSuite])
    def test_unknown_check_conclusion_names_field(self, target: type) -> None:
        with pytest.raises(MalformedResponse) as excinfo:
            decode(b'{"id": 1, "status": "completed", "conclusion": "bogus_token"}', target)
        assert excinfo.value.field == "conclusion"
        assert excinfo.value.value == "bogus_token"

    def test_unknown_check_status_names_field(self) -> None:
        with pytest.raises(MalformedResponse) as excinfo:
            decode(b'{"status": "exploded"}', CheckRun)
        assert excinfo.value.field == "status"

    def test_pending_check_has_no_conclusion(self) -> None:
        run = decode(b'{"status": "in_progress", "conclusion": null}', CheckRun)
        assert run.status is CheckStatus.IN_PROGRESS
        assert run.conclusion is None

    def test_missing_required_field(self) -> None:
        with pytest.raises(MalformedResponse) as excinfo:
            decode(b'{"state": "open", "title": "t"}', Issue)
        assert excinfo.value.field == "number"

    def test_nested_field_path(self) -> None:
        body = json.dumps([{"number": 1, "state": "open", "title": "t", "user": {"id": 3}}]).encode()
        with pytest.raises(MalformedResponse) as excinfo:
            decode(body, tuple[Issue, ...])
        assert excinfo.value.field == "0.user.login"

    def test_not_json(self) -> None:
        with pytest.raises(MalformedResponse) as excinfo:
            decode(b"<html>oops</html>", Issue)
        assert excinfo.value.field is None

    def test_wrong_top_level_shape(self) -> None:
        with pytest.raises(MalformedResponse):
            decode(b'{"number": 1}', tuple[Issue, ...])


class TestRef:
    def test_flattens_object_sha(self) -> None:
        ref = decode(
            b'{"ref": "refs/heads/main", "url": "u", "object": {"sha": "' + b"a" * 40 + b'", "type": "commit"}}', Ref
        )
        assert ref.sha == "a" * 40
        assert str(ref) == f"{'a' * 40} refs/heads/main"

    def test_requires_refs_prefix(self) -> None:
        with pytest.raises(MalformedResponse) as excinfo:
            decode(b'{"ref": "heads/main", "sha": "' + b"a" * 40 + b'"}', Ref)
        assert excinfo.value.field == "ref"

    def test_rejects_short_sha(self) -> None:
        with pytest.raises(MalformedResponse) as excinfo:
            decode(b'{"ref": "refs/heads/main", "sha": "abc"}', Ref)
        assert excinfo.value.field == "sha"
