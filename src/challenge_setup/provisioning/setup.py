"""The end-to-end candidate repository setup.

Steps run strictly in this order, each blocking until done:

    start -> replicated -> (invited) -> issues_transcribed -> prs_transcribed -> done

Issues go before pull requests because bodies may reference issue numbers
that must already exist in the candidate repository. Any failure moves the
run to `failed`; nothing already created is rolled back and nothing is
retried. Running twice for the same candidate fails at repository creation.

With `invite_last` the invitation moves after pull request transcription, so a
bad username only surfaces once the repository is otherwise complete.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, replace

from challenge_setup.provisioning.errors import SetupFailedError
from challenge_setup.provisioning.hosting import HostingClient
from challenge_setup.provisioning.invite import WRITE_PERMISSION, CollaboratorInviter
from challenge_setup.provisioning.models import RepositoryRef, candidate_repository_name
from challenge_setup.provisioning.replicator import RepositoryReplicator
from challenge_setup.provisioning.transcription import IssueTranscriber, PullRequestTranscriber
from challenge_setup.provisioning.workflow.state_machine import (
    SetupSnapshot,
    SetupState,
    fail,
    transition,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class SetupOptions:
    """Static configuration, fixed before a run starts."""

    template: RepositoryRef
    owner: str
    invite: bool = True
    invite_last: bool = False
    issue_state: str = "all"
    invite_permission: str = WRITE_PERMISSION
    push_token: str | None = None


class ChallengeSetup:
    def __init__(self, *, hosting: HostingClient, options: SetupOptions) -> None:
        self._options = options
        self._replicator = RepositoryReplicator(hosting=hosting, push_token=options.push_token)
        self._inviter = CollaboratorInviter(hosting=hosting, permission=options.invite_permission)
        self._issues = IssueTranscriber(hosting=hosting, state=options.issue_state)
        self._pull_requests = PullRequestTranscriber(hosting=hosting)

    def target_for(self, username: str) -> RepositoryRef:
        return candidate_repository_name(
            owner=self._options.owner, template=self._options.template, username=username
        )

    def run(self, username: str) -> SetupSnapshot:
        """Set up the repository for `username`.

        Returns:
            The `done` snapshot.

        Raises:
            SetupFailedError carrying the `failed` snapshot; the original
            exception is chained as its cause.
        """

        template = self._options.template
        target = self.target_for(username)
        snapshot = SetupSnapshot(state=SetupState.START, target=target)
        logger.info(
            "Setup started",
            extra={"template": template.full_name, "repo": target.full_name, "username": username},
        )

        try:
            result = self._replicator.replicate(template=template, target=target)
            snapshot = transition(
                current=snapshot,
                to=SetupState.REPLICATED,
                default_branch=result.default_branch,
                pushed_branches=result.pushed_branches,
            )

            if self._options.invite and not self._options.invite_last:
                snapshot = self._invite(snapshot, username)

            for record in self._issues.iter_transcribe(template=template, target=target):
                snapshot = replace(snapshot, issues=(*snapshot.issues, record))
            snapshot = transition(current=snapshot, to=SetupState.ISSUES_TRANSCRIBED)

            for record in self._pull_requests.iter_transcribe(template=template, target=target):
                snapshot = replace(snapshot, pull_requests=(*snapshot.pull_requests, record))
            snapshot = transition(current=snapshot, to=SetupState.PRS_TRANSCRIBED)

            if self._options.invite and self._options.invite_last:
                snapshot = self._invite(snapshot, username)
        except Exception as e:
            failed = fail(current=snapshot, error=e)
            logger.error(
                "Setup failed",
                extra={"repo": target.full_name, "snapshot": failed.to_json()},
            )
            raise SetupFailedError(failed, e) from e

        snapshot = transition(current=snapshot, to=SetupState.DONE)
        logger.info("Setup complete", extra={"snapshot": snapshot.to_json()})
        return snapshot

    def _invite(self, snapshot: SetupSnapshot, username: str) -> SetupSnapshot:
        self._inviter.invite(target=snapshot.target, username=username)
        return transition(current=snapshot, to=SetupState.INVITED, invited=True)
