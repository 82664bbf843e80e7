"""Error types raised while setting up a candidate repository.

Every error is fatal to the run. Nothing here is retried or rolled back.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from challenge_setup.provisioning.workflow.state_machine import SetupSnapshot


class ChallengeSetupError(Exception):
    """Base class for errors raised by this package."""


class PreconditionError(ChallengeSetupError):
    """Arguments or environment are unusable; raised before any mutating call."""


class TemplateNotFoundError(ChallengeSetupError):
    def __init__(self, repository: str, message: str = "") -> None:
        self.repository = repository
        super().__init__(message or f"Template repository not found: {repository}")


class RepositoryAlreadyExistsError(ChallengeSetupError):
    def __init__(self, repository: str, message: str = "") -> None:
        self.repository = repository
        super().__init__(message or f"Repository already exists: {repository}")


class GitCommandError(ChallengeSetupError):
    """A `git` invocation exited non-zero."""

    def __init__(self, args: list[str], returncode: int, stderr: str) -> None:
        self.args_list = args
        self.returncode = returncode
        self.stderr = stderr
        detail = stderr.strip() or f"exit status {returncode}"
        super().__init__(f"git {' '.join(args)} failed: {detail}")


class SetupFailedError(ChallengeSetupError):
    """Raised by the orchestrator once the run has entered the `failed` state.

    The original exception is available as `__cause__`; its message is kept
    verbatim so provider errors reach the operator untranslated.
    """

    def __init__(self, snapshot: SetupSnapshot, cause: BaseException) -> None:
        self.snapshot = snapshot
        super().__init__(str(cause) or type(cause).__name__)
