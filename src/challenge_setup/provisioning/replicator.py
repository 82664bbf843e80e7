"""Copy a template repository, with its pull request branches, into a new private repo."""

from __future__ import annotations

import logging
import tempfile
from dataclasses import dataclass
from pathlib import Path

from challenge_setup.provisioning.errors import TemplateNotFoundError
from challenge_setup.provisioning.hosting import HostingClient
from challenge_setup.provisioning.models import RepositoryRef

logger = logging.getLogger(__name__)

# Arbitrary remote name that does not conflict with 'origin'.
TARGET_REMOTE = "clone"


@dataclass(frozen=True, slots=True)
class ReplicationResult:
    target: RepositoryRef
    default_branch: str
    pushed_branches: tuple[str, ...]


class RepositoryReplicator:
    """Clone the template and push it, plus every open PR head branch, to the target.

    The temporary clone lives only for the duration of `replicate` and is
    removed on every exit path. When `push_token` is set, git is given an
    explicit basic-auth header instead of relying on an interactive
    credential helper.
    """

    def __init__(self, *, hosting: HostingClient, push_token: str | None = None) -> None:
        self._hosting = hosting
        self._push_token = push_token

    def replicate(self, *, template: RepositoryRef, target: RepositoryRef) -> ReplicationResult:
        if not self._hosting.repository_exists(template):
            raise TemplateNotFoundError(template.full_name)

        with tempfile.TemporaryDirectory(prefix="challenge-setup-") as tmp:
            clone_path = Path(tmp) / template.name
            return self._replicate_into(clone_path, template=template, target=target)

    def _replicate_into(
        self, clone_path: Path, *, template: RepositoryRef, target: RepositoryRef
    ) -> ReplicationResult:
        self._hosting.clone_full_history(template, clone_path, auth_token=self._push_token)
        if self._push_token:
            self._hosting.configure_push_authentication(clone_path, self._push_token)

        default_branch = self._hosting.create_repository(
            target, private=True, source_path=clone_path, remote_name=TARGET_REMOTE
        )

        branches = self._hosting.list_open_pull_request_head_branches(template)
        pushed: list[str] = []
        for branch in branches:
            self._hosting.push_branch(
                clone_path, f"refs/remotes/origin/{branch}", TARGET_REMOTE, branch
            )
            pushed.append(branch)
            logger.info("Branch pushed", extra={"repo": target.full_name, "branch": branch})

        logger.info(
            "Template replicated",
            extra={
                "template": template.full_name,
                "repo": target.full_name,
                "default_branch": default_branch,
                "branch_count": len(pushed),
            },
        )
        return ReplicationResult(
            target=target, default_branch=default_branch, pushed_branches=tuple(pushed)
        )
