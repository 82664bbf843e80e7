"""Test configuration and fixtures."""

from __future__ import annotations

import logging
from collections.abc import Iterator
from dataclasses import dataclass, field
from pathlib import Path

import pytest

from challenge_setup.provisioning.errors import GitCommandError, RepositoryAlreadyExistsError
from challenge_setup.provisioning.models import IssueRecord, PullRequestRecord, RepositoryRef

DEFAULT_LABELS = frozenset(
    {
        "bug",
        "documentation",
        "duplicate",
        "enhancement",
        "good first issue",
        "help wanted",
        "invalid",
        "question",
        "wontfix",
    }
)


class FakeProviderError(Exception):
    """Stands in for an error returned by the hosting provider."""


@dataclass
class FakeRepo:
    default_branch: str = "main"
    branches: set[str] = field(default_factory=set)
    issues: list[IssueRecord] = field(default_factory=list)
    pulls: list[PullRequestRecord] = field(default_factory=list)
    closed_issue_numbers: set[int] = field(default_factory=set)
    collaborators: dict[str, str] = field(default_factory=dict)
    private: bool = False
    next_number: int = 1

    def allocate_number(self) -> int:
        # Issues and pull requests share one numbering space on GitHub.
        number = self.next_number
        self.next_number += 1
        return number


class FakeHostingClient:
    """In-memory `HostingClient` that records every call in order."""

    def __init__(self, *, users: set[str] | None = None) -> None:
        self.repos: dict[str, FakeRepo] = {}
        self.users: set[str] = set(users or set())
        self.calls: list[tuple[str, ...]] = []
        self.clone_paths: list[Path] = []
        self.auth_configured: list[tuple[Path, str]] = []
        self._clones: dict[Path, str] = {}
        self._remotes: dict[tuple[Path, str], str] = {}

    def add_template(
        self,
        full_name: str,
        *,
        issues: list[IssueRecord] | None = None,
        pulls: list[PullRequestRecord] | None = None,
        closed: set[int] | None = None,
        default_branch: str = "main",
    ) -> FakeRepo:
        pulls = pulls or []
        repo = FakeRepo(
            default_branch=default_branch,
            branches={default_branch, *(p.head_branch for p in pulls)},
            issues=list(issues or []),
            pulls=list(pulls),
            closed_issue_numbers=set(closed or set()),
        )
        self.repos[full_name] = repo
        return repo

    def repository_exists(self, repository: RepositoryRef) -> bool:
        self.calls.append(("repository_exists", repository.full_name))
        return repository.full_name in self.repos

    def clone_full_history(
        self, repository: RepositoryRef, destination: Path, *, auth_token: str | None = None
    ) -> None:
        self.calls.append(("clone_full_history", repository.full_name))
        if repository.full_name not in self.repos:
            raise GitCommandError(["clone"], 128, "fatal: repository not found")
        destination.mkdir(parents=True)
        (destination / "README.md").write_text("template\n", encoding="utf-8")
        self.clone_paths.append(destination)
        self._clones[destination] = repository.full_name

    def configure_push_authentication(self, source_path: Path, token: str) -> None:
        self.calls.append(("configure_push_authentication",))
        self.auth_configured.append((source_path, token))

    def create_repository(
        self,
        repository: RepositoryRef,
        *,
        private: bool,
        source_path: Path,
        remote_name: str,
    ) -> str:
        self.calls.append(("create_repository", repository.full_name))
        if repository.full_name in self.repos:
            raise RepositoryAlreadyExistsError(repository.full_name)
        assert source_path.exists()
        source = self.repos[self._clones[source_path]]
        self.repos[repository.full_name] = FakeRepo(
            default_branch=source.default_branch,
            branches={source.default_branch},
            private=private,
        )
        self._remotes[(source_path, remote_name)] = repository.full_name
        return source.default_branch

    def push_branch(
        self, source_path: Path, local_ref: str, remote_name: str, remote_branch: str
    ) -> None:
        self.calls.append(("push_branch", remote_branch))
        assert source_path.exists()
        source = self.repos[self._clones[source_path]]
        assert local_ref == f"refs/remotes/origin/{remote_branch}"
        if remote_branch not in source.branches:
            raise GitCommandError(["push"], 1, f"error: src refspec {local_ref} does not match any")
        self.repos[self._remotes[(source_path, remote_name)]].branches.add(remote_branch)

    def list_open_pull_request_head_branches(self, repository: RepositoryRef) -> list[str]:
        self.calls.append(("list_open_pull_request_head_branches", repository.full_name))
        branches: list[str] = []
        for pr in self.repos[repository.full_name].pulls:
            if pr.head_branch not in branches:
                branches.append(pr.head_branch)
        return branches

    def list_issues(self, repository: RepositoryRef, *, state: str) -> list[IssueRecord]:
        self.calls.append(("list_issues", repository.full_name, state))
        repo = self.repos[repository.full_name]
        if state == "open":
            return [i for i in repo.issues if i.number not in repo.closed_issue_numbers]
        return list(repo.issues)

    def list_pull_requests(self, repository: RepositoryRef) -> list[PullRequestRecord]:
        self.calls.append(("list_pull_requests", repository.full_name))
        return list(self.repos[repository.full_name].pulls)

    def get_default_branch(self, repository: RepositoryRef) -> str:
        self.calls.append(("get_default_branch", repository.full_name))
        return self.repos[repository.full_name].default_branch

    def create_issue(
        self,
        repository: RepositoryRef,
        *,
        title: str,
        body: str,
        labels: list[str],
        assignees: list[str],
    ) -> int:
        self.calls.append(("create_issue", title))
        repo = self.repos[repository.full_name]
        unknown = [label for label in labels if label not in DEFAULT_LABELS]
        if unknown:
            raise FakeProviderError(f"Validation Failed: unknown labels {unknown}")
        number = repo.allocate_number()
        repo.issues.append(
            IssueRecord(
                number=number,
                title=title,
                body=body,
                labels=tuple(labels),
                assignees=tuple(assignees),
            )
        )
        return number

    def create_pull_request(
        self,
        repository: RepositoryRef,
        *,
        title: str,
        body: str,
        head: str,
        base: str,
    ) -> int:
        self.calls.append(("create_pull_request", title, head, base))
        repo = self.repos[repository.full_name]
        if head not in repo.branches:
            raise FakeProviderError(f"Validation Failed: head {head!r} does not exist")
        if base != repo.default_branch:
            raise FakeProviderError(f"Validation Failed: base {base!r} is not the default branch")
        number = repo.allocate_number()
        repo.pulls.append(
            PullRequestRecord(number=number, title=title, body=body, head_branch=head)
        )
        return number

    def add_collaborator(
        self, repository: RepositoryRef, username: str, *, permission: str
    ) -> None:
        self.calls.append(("add_collaborator", username, permission))
        if username not in self.users:
            raise FakeProviderError("Not Found")
        self.repos[repository.full_name].collaborators[username] = permission

    def call_names(self) -> list[str]:
        return [c[0] for c in self.calls]


@pytest.fixture(autouse=True)
def _restore_root_logging() -> Iterator[None]:
    """`configure_logging` replaces root handlers; put pytest's back afterwards."""
    root = logging.getLogger()
    handlers = list(root.handlers)
    level = root.level
    yield
    root.handlers[:] = handlers
    root.setLevel(level)


@pytest.fixture
def template() -> RepositoryRef:
    return RepositoryRef(owner="MetaMaskHiring", name="technical-challenge-shared-libraries")


@pytest.fixture
def hosting() -> FakeHostingClient:
    return FakeHostingClient(users={"alice", "candidate-1"})
