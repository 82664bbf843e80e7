from __future__ import annotations

from dataclasses import dataclass, replace
from enum import Enum

from challenge_setup.provisioning.models import RepositoryRef, TranscribedRecord


class SetupState(str, Enum):
    START = "start"
    REPLICATED = "replicated"
    INVITED = "invited"
    ISSUES_TRANSCRIBED = "issues_transcribed"
    PRS_TRANSCRIBED = "prs_transcribed"
    DONE = "done"
    FAILED = "failed"


ALLOWED_TRANSITIONS: dict[SetupState, set[SetupState]] = {
    SetupState.START: {SetupState.REPLICATED, SetupState.FAILED},
    # INVITED is skipped when invitation is disabled.
    SetupState.REPLICATED: {
        SetupState.INVITED,
        SetupState.ISSUES_TRANSCRIBED,
        SetupState.FAILED,
    },
    SetupState.INVITED: {SetupState.ISSUES_TRANSCRIBED, SetupState.DONE, SetupState.FAILED},
    SetupState.ISSUES_TRANSCRIBED: {SetupState.PRS_TRANSCRIBED, SetupState.FAILED},
    # INVITED comes last when the invitation is deferred until everything else exists.
    SetupState.PRS_TRANSCRIBED: {SetupState.INVITED, SetupState.DONE, SetupState.FAILED},
    SetupState.DONE: set(),
    SetupState.FAILED: set(),
}


class IllegalTransitionError(ValueError):
    pass


@dataclass(frozen=True, slots=True)
class SetupSnapshot:
    """Where a run got to, and what it created on the way.

    Nothing here is persisted; a failed snapshot is handed back to the caller
    so partially created resources can be inspected by hand.
    """

    state: SetupState
    target: RepositoryRef
    default_branch: str | None = None
    pushed_branches: tuple[str, ...] = ()
    issues: tuple[TranscribedRecord, ...] = ()
    pull_requests: tuple[TranscribedRecord, ...] = ()
    failed_from: SetupState | None = None
    error: str | None = None
    invited: bool = False

    def to_json(self) -> dict[str, object]:
        out: dict[str, object] = {
            "state": self.state.value,
            "target": self.target.full_name,
            "pushed_branches": list(self.pushed_branches),
            "issues": [
                {"source": r.source_number, "target": r.target_number} for r in self.issues
            ],
            "pull_requests": [
                {"source": r.source_number, "target": r.target_number} for r in self.pull_requests
            ],
            "invited": self.invited,
        }
        if self.default_branch is not None:
            out["default_branch"] = self.default_branch
        if self.failed_from is not None:
            out["failed_from"] = self.failed_from.value
        if self.error is not None:
            out["error"] = self.error
        return out


def transition(*, current: SetupSnapshot, to: SetupState, **changes: object) -> SetupSnapshot:
    allowed = ALLOWED_TRANSITIONS.get(current.state, set())
    if to not in allowed:
        raise IllegalTransitionError(f"Illegal transition: {current.state.value} -> {to.value}")
    return replace(current, state=to, **changes)  # type: ignore[arg-type]


def fail(*, current: SetupSnapshot, error: BaseException) -> SetupSnapshot:
    return transition(
        current=current,
        to=SetupState.FAILED,
        failed_from=current.state,
        error=str(error) or type(error).__name__,
    )
