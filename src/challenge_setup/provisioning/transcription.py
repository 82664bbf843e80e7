"""Recreate template issues and pull requests in the candidate repository.

Records are sorted by source number before the first creation call and then
created one at a time, so destination numbers increase in the same relative
order. Source numbers themselves are not preserved. Comments and reviews are
not copied.
"""

from __future__ import annotations

import logging
from collections.abc import Iterator

from challenge_setup.provisioning.hosting import HostingClient
from challenge_setup.provisioning.models import RepositoryRef, TranscribedRecord

logger = logging.getLogger(__name__)


class IssueTranscriber:
    """Copy title, body, labels and assignees of every template issue.

    Labels must already exist in the target and assignees must already have
    access to it; GitHub rejects the creation otherwise and the run stops.
    """

    def __init__(self, *, hosting: HostingClient, state: str = "all") -> None:
        if state not in {"all", "open", "closed"}:
            raise ValueError(f"Unsupported issue state filter: {state!r}")
        self._hosting = hosting
        self._state = state

    def transcribe(
        self, *, template: RepositoryRef, target: RepositoryRef
    ) -> list[TranscribedRecord]:
        return list(self.iter_transcribe(template=template, target=target))

    def iter_transcribe(
        self, *, template: RepositoryRef, target: RepositoryRef
    ) -> Iterator[TranscribedRecord]:
        """Yield each record as soon as it has been created in the target."""

        issues = sorted(
            self._hosting.list_issues(template, state=self._state), key=lambda i: i.number
        )

        for issue in issues:
            number = self._hosting.create_issue(
                target,
                title=issue.title,
                body=issue.body,
                labels=list(issue.labels),
                assignees=list(issue.assignees),
            )
            logger.info(
                "Issue transcribed",
                extra={"repo": target.full_name, "source_number": issue.number, "number": number},
            )
            yield TranscribedRecord(
                source_number=issue.number, target_number=number, title=issue.title
            )


class PullRequestTranscriber:
    """Copy title and body of every open template pull request.

    Head branches must already have been pushed to the target; the base is
    always the target's default branch.
    """

    def __init__(self, *, hosting: HostingClient) -> None:
        self._hosting = hosting

    def transcribe(
        self, *, template: RepositoryRef, target: RepositoryRef
    ) -> list[TranscribedRecord]:
        return list(self.iter_transcribe(template=template, target=target))

    def iter_transcribe(
        self, *, template: RepositoryRef, target: RepositoryRef
    ) -> Iterator[TranscribedRecord]:
        pulls = sorted(self._hosting.list_pull_requests(template), key=lambda p: p.number)
        if not pulls:
            return

        base = self._hosting.get_default_branch(target)

        for pr in pulls:
            number = self._hosting.create_pull_request(
                target, title=pr.title, body=pr.body, head=pr.head_branch, base=base
            )
            logger.info(
                "Pull request transcribed",
                extra={
                    "repo": target.full_name,
                    "source_number": pr.number,
                    "number": number,
                    "head": pr.head_branch,
                    "base": base,
                },
            )
            yield TranscribedRecord(source_number=pr.number, target_number=number, title=pr.title)
