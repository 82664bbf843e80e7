"""Hosting capability surface consumed by the setup procedure.

`HostingClient` is what the replicator, transcribers and inviter depend on.
`GitHubHostingClient` implements it with the GitHub API and the `git` CLI.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Protocol

from challenge_setup.provisioning.git import GitCli, basic_auth_header
from challenge_setup.provisioning.github.client import GitHubClient
from challenge_setup.provisioning.models import IssueRecord, PullRequestRecord, RepositoryRef

logger = logging.getLogger(__name__)


class HostingClient(Protocol):
    """Repository, issue, pull request and collaborator operations."""

    def repository_exists(self, repository: RepositoryRef) -> bool: ...

    def clone_full_history(
        self, repository: RepositoryRef, destination: Path, *, auth_token: str | None = None
    ) -> None: ...

    def configure_push_authentication(self, source_path: Path, token: str) -> None: ...

    def create_repository(
        self,
        repository: RepositoryRef,
        *,
        private: bool,
        source_path: Path,
        remote_name: str,
    ) -> str: ...

    def push_branch(
        self, source_path: Path, local_ref: str, remote_name: str, remote_branch: str
    ) -> None: ...

    def list_open_pull_request_head_branches(self, repository: RepositoryRef) -> list[str]: ...

    def list_issues(self, repository: RepositoryRef, *, state: str) -> list[IssueRecord]: ...

    def list_pull_requests(self, repository: RepositoryRef) -> list[PullRequestRecord]: ...

    def get_default_branch(self, repository: RepositoryRef) -> str: ...

    def create_issue(
        self,
        repository: RepositoryRef,
        *,
        title: str,
        body: str,
        labels: list[str],
        assignees: list[str],
    ) -> int: ...

    def create_pull_request(
        self,
        repository: RepositoryRef,
        *,
        title: str,
        body: str,
        head: str,
        base: str,
    ) -> int: ...

    def add_collaborator(
        self, repository: RepositoryRef, username: str, *, permission: str
    ) -> None: ...


class GitHubHostingClient:
    """`HostingClient` backed by GitHub."""

    def __init__(self, *, github: GitHubClient, git: GitCli) -> None:
        self._github = github
        self._git = git

    def repository_exists(self, repository: RepositoryRef) -> bool:
        return self._github.repository_exists(repository.full_name)

    def clone_full_history(
        self, repository: RepositoryRef, destination: Path, *, auth_token: str | None = None
    ) -> None:
        header = basic_auth_header(auth_token) if auth_token else None
        url = self._git.remote_url(repository.full_name)
        self._git.clone(url, destination, auth_header=header)
        logger.info("Template cloned", extra={"repo": repository.full_name})

    def configure_push_authentication(self, source_path: Path, token: str) -> None:
        self._git.set_auth_header(source_path, basic_auth_header(token))

    def create_repository(
        self,
        repository: RepositoryRef,
        *,
        private: bool,
        source_path: Path,
        remote_name: str,
    ) -> str:
        """Create the repository, register it as a remote and push the current branch.

        Returns:
            The name of the branch pushed, which becomes the default branch.
        """

        full_name = self._github.create_repository(
            owner=repository.owner, name=repository.name, private=private
        )
        self._git.add_remote(source_path, remote_name, self._git.remote_url(full_name))

        branch = self._git.current_branch(source_path)
        self._git.push(source_path, remote_name, f"refs/heads/{branch}:refs/heads/{branch}")
        logger.info("Default branch pushed", extra={"repo": full_name, "branch": branch})
        return branch

    def push_branch(
        self, source_path: Path, local_ref: str, remote_name: str, remote_branch: str
    ) -> None:
        self._git.push(source_path, remote_name, f"{local_ref}:refs/heads/{remote_branch}")

    def list_open_pull_request_head_branches(self, repository: RepositoryRef) -> list[str]:
        branches: list[str] = []
        for pr in self._github.list_pull_requests(repository.full_name, state="open"):
            if pr.head_branch not in branches:
                branches.append(pr.head_branch)
        return branches

    def list_issues(self, repository: RepositoryRef, *, state: str) -> list[IssueRecord]:
        return self._github.list_issues(repository.full_name, state=state)

    def list_pull_requests(self, repository: RepositoryRef) -> list[PullRequestRecord]:
        return self._github.list_pull_requests(repository.full_name, state="open")

    def get_default_branch(self, repository: RepositoryRef) -> str:
        return self._github.get_repository_default_branch(repository.full_name)

    def create_issue(
        self,
        repository: RepositoryRef,
        *,
        title: str,
        body: str,
        labels: list[str],
        assignees: list[str],
    ) -> int:
        return self._github.create_issue(
            repository.full_name, title=title, body=body, labels=labels, assignees=assignees
        )

    def create_pull_request(
        self,
        repository: RepositoryRef,
        *,
        title: str,
        body: str,
        head: str,
        base: str,
    ) -> int:
        return self._github.create_pull_request(
            repository.full_name, title=title, body=body, head=head, base=base
        )

    def add_collaborator(
        self, repository: RepositoryRef, username: str, *, permission: str
    ) -> None:
        self._github.add_collaborator(repository.full_name, username, permission=permission)

    def close(self) -> None:
        self._github.close()
