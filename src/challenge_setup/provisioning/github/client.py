"""GitHub API client wrapper.

This wraps PyGithub (writes) and the REST API via `requests` (paginated reads)
to keep GitHub calls out of orchestration code and make tests easy.
"""

from __future__ import annotations

import logging
from typing import Any

import requests
from github import Auth, Github, GithubException
from github.Repository import Repository

from challenge_setup.provisioning.errors import RepositoryAlreadyExistsError
from challenge_setup.provisioning.models import IssueRecord, PullRequestRecord

logger = logging.getLogger(__name__)


class GitHubClient:
    """Small wrapper around PyGithub and the REST API for repository setup."""

    def __init__(
        self,
        *,
        token: str,
        base_url: str = "https://api.github.com",
        github_api: Github | None = None,
        session: requests.Session | None = None,
    ) -> None:
        if not token:
            raise ValueError("GitHub token is required")

        self._rest_base_url = base_url.rstrip("/")
        self._session = session or requests.Session()
        self._session.headers.update(
            {
                "Authorization": f"Bearer {token}",
                "Accept": "application/vnd.github+json",
                "X-GitHub-Api-Version": "2022-11-28",
                "User-Agent": "challenge-setup",
            }
        )
        self._github = github_api or Github(auth=Auth.Token(token), base_url=base_url)
        self._repos: dict[str, Repository] = {}
        self._login: str | None = None

    def _repo_url(self, *, repository: str, path: str = "") -> str:
        path = path.lstrip("/")
        url = f"{self._rest_base_url}/repos/{repository}"
        return f"{url}/{path}" if path else url

    def _repo(self, repository: str) -> Repository:
        repo = self._repos.get(repository)
        if repo is None:
            repo = self._github.get_repo(repository)
            self._repos[repository] = repo
        return repo

    @staticmethod
    def _raise_for_status(resp: requests.Response) -> None:
        """Like `raise_for_status`, but keeps GitHub's own error message."""

        try:
            resp.raise_for_status()
        except requests.HTTPError as e:
            try:
                data = resp.json()
            except ValueError:
                raise e from None
            message = data.get("message") if isinstance(data, dict) else None
            errors = data.get("errors") if isinstance(data, dict) else None
            if errors:
                message = f"{message}: {errors}"
            if not message:
                raise
            raise requests.HTTPError(f"{e} ({message})", response=resp) from e

    def authenticated_login(self) -> str:
        """Return the login of the token's owner; raises if the token is rejected."""

        if self._login is None:
            self._login = self._github.get_user().login
            logger.info("Authenticated with GitHub", extra={"login": self._login})
        return self._login

    def repository_exists(self, repository: str) -> bool:
        resp = self._session.get(self._repo_url(repository=repository), timeout=30)
        if resp.status_code == 404:
            return False
        self._raise_for_status(resp)
        return True

    def get_repository_default_branch(self, repository: str) -> str:
        resp = self._session.get(self._repo_url(repository=repository), timeout=30)
        self._raise_for_status(resp)
        data: dict[str, Any] = resp.json()
        default_branch = data.get("default_branch")
        if not isinstance(default_branch, str) or not default_branch.strip():
            return "main"
        return default_branch

    def create_repository(self, *, owner: str, name: str, private: bool = True) -> str:
        """Create an empty repository under a user or organisation.

        Returns:
            The new repository's full name.

        Raises:
            RepositoryAlreadyExistsError if the name is taken.
        """

        full_name = f"{owner}/{name}"
        try:
            if owner == self.authenticated_login():
                repo = self._github.get_user().create_repo(name, private=private)
            else:
                repo = self._github.get_organization(owner).create_repo(name, private=private)
        except GithubException as e:
            if e.status == 422 and "already exists" in str(e.data).lower():
                raise RepositoryAlreadyExistsError(full_name) from e
            raise

        self._repos[repo.full_name] = repo
        logger.info("Repository created", extra={"repo": repo.full_name, "private": private})
        return repo.full_name

    def _get_paginated_json_list(
        self, url: str, *, params: dict[str, str] | None = None
    ) -> list[dict[str, Any]]:
        """Fetch a REST endpoint that returns a JSON list, following page numbers."""

        items: list[dict[str, Any]] = []
        per_page = 100
        page = 1
        while True:
            resp = self._session.get(
                url,
                params={**(params or {}), "per_page": per_page, "page": page},
                timeout=30,
            )
            self._raise_for_status(resp)
            payload = resp.json()
            if not isinstance(payload, list):
                break

            items.extend(p for p in payload if isinstance(p, dict))

            if len(payload) < per_page:
                break
            page += 1
        return items

    @staticmethod
    def _names(value: object, key: str) -> tuple[str, ...]:
        if not isinstance(value, list):
            return ()
        names: list[str] = []
        for item in value:
            if isinstance(item, dict):
                name = item.get(key)
                if isinstance(name, str) and name.strip():
                    names.append(name)
        return tuple(names)

    @staticmethod
    def _text(data: dict[str, Any], key: str) -> str:
        value = data.get(key)
        return value if isinstance(value, str) else ""

    def list_issues(self, repository: str, *, state: str = "all") -> list[IssueRecord]:
        """List issues (never pull requests) in ascending number order."""

        url = self._repo_url(repository=repository, path="issues")
        raw = self._get_paginated_json_list(
            url, params={"state": state, "sort": "created", "direction": "asc"}
        )

        issues: list[IssueRecord] = []
        for item in raw:
            # The issues endpoint also returns pull requests.
            if "pull_request" in item:
                continue
            number = item.get("number")
            if not isinstance(number, int) or number <= 0:
                raise ValueError("Invalid issue response: missing number")
            issues.append(
                IssueRecord(
                    number=number,
                    title=self._text(item, "title"),
                    body=self._text(item, "body"),
                    labels=self._names(item.get("labels"), "name"),
                    assignees=self._names(item.get("assignees"), "login"),
                )
            )
        issues.sort(key=lambda i: i.number)
        logger.info(
            "Issues listed", extra={"repo": repository, "state": state, "count": len(issues)}
        )
        return issues

    def list_pull_requests(
        self, repository: str, *, state: str = "open"
    ) -> list[PullRequestRecord]:
        url = self._repo_url(repository=repository, path="pulls")
        raw = self._get_paginated_json_list(
            url, params={"state": state, "sort": "created", "direction": "asc"}
        )

        pulls: list[PullRequestRecord] = []
        for item in raw:
            number = item.get("number")
            if not isinstance(number, int) or number <= 0:
                raise ValueError("Invalid pull request response: missing number")
            head = item.get("head")
            head_ref = head.get("ref") if isinstance(head, dict) else None
            if not isinstance(head_ref, str) or not head_ref.strip():
                raise ValueError("Invalid pull request response: missing head.ref")
            pulls.append(
                PullRequestRecord(
                    number=number,
                    title=self._text(item, "title"),
                    body=self._text(item, "body"),
                    head_branch=head_ref,
                )
            )
        pulls.sort(key=lambda p: p.number)
        logger.info(
            "Pull requests listed", extra={"repo": repository, "state": state, "count": len(pulls)}
        )
        return pulls

    def create_issue(
        self,
        repository: str,
        *,
        title: str,
        body: str,
        labels: list[str],
        assignees: list[str],
    ) -> int:
        if not title.strip():
            raise ValueError("Issue title is required")

        issue = self._repo(repository).create_issue(
            title=title, body=body, labels=labels, assignees=assignees
        )
        return issue.number

    def create_pull_request(
        self,
        repository: str,
        *,
        title: str,
        body: str,
        head: str,
        base: str,
    ) -> int:
        url = self._repo_url(repository=repository, path="pulls")
        payload = {"title": title, "body": body, "head": head, "base": base}
        resp = self._session.post(url, json=payload, timeout=30)
        self._raise_for_status(resp)
        data: dict[str, Any] = resp.json()
        number = data.get("number")
        if not isinstance(number, int) or number <= 0:
            raise ValueError("Unexpected create PR response: missing number")
        return number

    def add_collaborator(self, repository: str, username: str, *, permission: str) -> None:
        self._repo(repository).add_to_collaborators(username, permission=permission)

    def close(self) -> None:
        self._session.close()
        self._github.close()
