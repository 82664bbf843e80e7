"""Unit tests for the GitHub client wrapper (mocked PyGithub and requests)."""

from __future__ import annotations

from typing import Any
from unittest.mock import Mock

import pytest
import requests
from github import GithubException

from challenge_setup.provisioning.errors import RepositoryAlreadyExistsError
from challenge_setup.provisioning.github.client import GitHubClient


def _response(payload: Any, status_code: int = 200) -> Mock:
    resp = Mock()
    resp.status_code = status_code
    resp.json.return_value = payload
    return resp


def _client(*, github_api: Mock | None = None, session: Mock | None = None) -> GitHubClient:
    return GitHubClient(
        token="test-token",
        base_url="https://api.github.com/",
        github_api=github_api or Mock(),
        session=session or Mock(),
    )


def test_token_is_required() -> None:
    with pytest.raises(ValueError):
        GitHubClient(token="", github_api=Mock(), session=Mock())


def test_session_carries_bearer_token() -> None:
    session = Mock()
    _client(session=session)

    headers = session.headers.update.call_args.args[0]
    assert headers["Authorization"] == "Bearer test-token"


def test_list_issues_skips_pull_requests_and_sorts() -> None:
    session = Mock()
    session.get.return_value = _response(
        [
            {
                "number": 7,
                "title": "Add feature",
                "body": None,
                "labels": [],
                "assignees": [],
            },
            {"number": 5, "title": "A PR", "body": "", "pull_request": {"url": "x"}},
            {
                "number": 3,
                "title": "Fix bug",
                "body": "It breaks",
                "labels": [{"name": "bug"}],
                "assignees": [{"login": "alice"}],
            },
        ]
    )

    issues = _client(session=session).list_issues("o/template", state="all")

    assert [i.number for i in issues] == [3, 7]
    assert issues[0].labels == ("bug",)
    assert issues[0].assignees == ("alice",)
    assert issues[1].body == ""

    url = session.get.call_args.args[0]
    params = session.get.call_args.kwargs["params"]
    assert url == "https://api.github.com/repos/o/template/issues"
    assert params["state"] == "all"
    assert params["page"] == 1


def test_list_issues_follows_pages() -> None:
    session = Mock()
    full_page = [{"number": n, "title": str(n)} for n in range(1, 101)]
    session.get.side_effect = [_response(full_page), _response([{"number": 101, "title": "x"}])]

    issues = _client(session=session).list_issues("o/template")

    assert len(issues) == 101
    assert [c.kwargs["params"]["page"] for c in session.get.call_args_list] == [1, 2]


def test_list_pull_requests_reads_head_ref() -> None:
    session = Mock()
    session.get.return_value = _response(
        [
            {"number": 4, "title": "B", "body": "b", "head": {"ref": "feature-b"}},
            {"number": 2, "title": "A", "body": "a", "head": {"ref": "feature-a"}},
        ]
    )

    pulls = _client(session=session).list_pull_requests("o/template")

    assert [(p.number, p.head_branch) for p in pulls] == [(2, "feature-a"), (4, "feature-b")]
    assert session.get.call_args.kwargs["params"]["state"] == "open"


def test_list_pull_requests_rejects_missing_head() -> None:
    session = Mock()
    session.get.return_value = _response([{"number": 1, "title": "A", "head": {}}])

    with pytest.raises(ValueError):
        _client(session=session).list_pull_requests("o/template")


def test_repository_exists() -> None:
    session = Mock()
    session.get.side_effect = [_response({}, status_code=200), _response({}, status_code=404)]
    client = _client(session=session)

    assert client.repository_exists("o/present") is True
    assert client.repository_exists("o/missing") is False


def test_default_branch_falls_back_to_main() -> None:
    session = Mock()
    session.get.side_effect = [_response({"default_branch": "trunk"}), _response({})]
    client = _client(session=session)

    assert client.get_repository_default_branch("o/r") == "trunk"
    assert client.get_repository_default_branch("o/r") == "main"


def test_create_repository_under_organisation() -> None:
    github_api = Mock()
    github_api.get_user.return_value.login = "operator"
    github_api.get_organization.return_value.create_repo.return_value.full_name = "org/c-alice"

    full_name = _client(github_api=github_api).create_repository(owner="org", name="c-alice")

    assert full_name == "org/c-alice"
    github_api.get_organization.assert_called_once_with("org")
    github_api.get_organization.return_value.create_repo.assert_called_once_with(
        "c-alice", private=True
    )


def test_create_repository_under_authenticated_user() -> None:
    github_api = Mock()
    github_api.get_user.return_value.login = "operator"
    github_api.get_user.return_value.create_repo.return_value.full_name = "operator/c-alice"

    _client(github_api=github_api).create_repository(owner="operator", name="c-alice")

    github_api.get_user.return_value.create_repo.assert_called_once_with("c-alice", private=True)
    github_api.get_organization.assert_not_called()


def test_create_repository_name_collision() -> None:
    github_api = Mock()
    github_api.get_user.return_value.login = "operator"
    github_api.get_organization.return_value.create_repo.side_effect = GithubException(
        422,
        {
            "message": "Repository creation failed.",
            "errors": [{"message": "name already exists on this account"}],
        },
        None,
    )

    with pytest.raises(RepositoryAlreadyExistsError) as exc_info:
        _client(github_api=github_api).create_repository(owner="org", name="c-alice")

    assert exc_info.value.repository == "org/c-alice"


def test_create_repository_other_errors_propagate() -> None:
    github_api = Mock()
    github_api.get_user.return_value.login = "operator"
    github_api.get_organization.side_effect = GithubException(404, {"message": "Not Found"}, None)

    with pytest.raises(GithubException):
        _client(github_api=github_api).create_repository(owner="nope", name="c-alice")


def test_create_issue_passes_labels_and_assignees() -> None:
    github_api = Mock()
    repo = github_api.get_repo.return_value
    repo.create_issue.return_value.number = 1

    number = _client(github_api=github_api).create_issue(
        "o/c-alice", title="Fix bug", body="b", labels=["bug"], assignees=["alice"]
    )

    assert number == 1
    github_api.get_repo.assert_called_once_with("o/c-alice")
    repo.create_issue.assert_called_once_with(
        title="Fix bug", body="b", labels=["bug"], assignees=["alice"]
    )


def test_create_issue_requires_title() -> None:
    with pytest.raises(ValueError):
        _client().create_issue("o/r", title=" ", body="", labels=[], assignees=[])


def test_create_pull_request_posts_head_and_base() -> None:
    session = Mock()
    session.post.return_value = _response({"number": 3})

    number = _client(session=session).create_pull_request(
        "o/c-alice", title="T", body="B", head="feature-x", base="main"
    )

    assert number == 3
    assert session.post.call_args.args[0] == "https://api.github.com/repos/o/c-alice/pulls"
    assert session.post.call_args.kwargs["json"] == {
        "title": "T",
        "body": "B",
        "head": "feature-x",
        "base": "main",
    }


def test_http_errors_keep_github_message() -> None:
    session = Mock()
    resp = _response(
        {"message": "Validation Failed", "errors": [{"field": "head", "code": "invalid"}]},
        status_code=422,
    )
    resp.raise_for_status.side_effect = requests.HTTPError("422 Client Error")
    session.post.return_value = resp

    with pytest.raises(requests.HTTPError) as exc_info:
        _client(session=session).create_pull_request(
            "o/r", title="T", body="", head="missing", base="main"
        )

    assert "Validation Failed" in str(exc_info.value)
    assert "head" in str(exc_info.value)


def test_add_collaborator_uses_permission() -> None:
    github_api = Mock()

    _client(github_api=github_api).add_collaborator("o/r", "alice", permission="push")

    github_api.get_repo.return_value.add_to_collaborators.assert_called_once_with(
        "alice", permission="push"
    )


def test_authenticated_login_is_cached() -> None:
    github_api = Mock()
    github_api.get_user.return_value.login = "operator"
    client = _client(github_api=github_api)

    assert client.authenticated_login() == "operator"
    assert client.authenticated_login() == "operator"
    assert github_api.get_user.call_count == 1
