"""Typed records read from (and written to) the hosting provider."""

from __future__ import annotations

from dataclasses import dataclass

from challenge_setup.provisioning.errors import PreconditionError


@dataclass(frozen=True, slots=True)
class RepositoryRef:
    """An "owner/name" repository identifier."""

    owner: str
    name: str

    @classmethod
    def parse(cls, value: str) -> RepositoryRef:
        try:
            owner, name = value.strip().split("/", 1)
        except ValueError as e:
            raise PreconditionError(
                f"Repository must be in the form 'owner/repo', got {value!r}"
            ) from e
        if not owner.strip() or not name.strip() or "/" in name:
            raise PreconditionError(f"Repository must be in the form 'owner/repo', got {value!r}")
        return cls(owner=owner.strip(), name=name.strip())

    @property
    def full_name(self) -> str:
        return f"{self.owner}/{self.name}"

    def __str__(self) -> str:
        return self.full_name


def candidate_repository_name(
    *, owner: str, template: RepositoryRef, username: str
) -> RepositoryRef:
    """Return `<owner>/<template-name>-<username>`.

    The username is used verbatim: GitHub compares logins case-sensitively for
    invitations, so no normalisation happens here.
    """

    if not owner.strip():
        raise PreconditionError("Destination owner is required")
    if not username.strip():
        raise PreconditionError("Candidate username is required")
    return RepositoryRef(owner=owner, name=f"{template.name}-{username}")


@dataclass(frozen=True, slots=True)
class IssueRecord:
    """Snapshot of a template issue."""

    number: int
    title: str
    body: str
    labels: tuple[str, ...] = ()
    assignees: tuple[str, ...] = ()


@dataclass(frozen=True, slots=True)
class PullRequestRecord:
    """Snapshot of a template pull request."""

    number: int
    title: str
    body: str
    head_branch: str


@dataclass(frozen=True, slots=True)
class TranscribedRecord:
    """Mapping between a template record and the one created in the candidate repo."""

    source_number: int
    target_number: int
    title: str
