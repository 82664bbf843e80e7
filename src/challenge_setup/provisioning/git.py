"""Thin wrapper around the `git` command line.

Only the handful of operations needed to copy a template repository are
exposed: clone, remote configuration and push.
"""

from __future__ import annotations

import base64
import logging
import subprocess
from pathlib import Path

from challenge_setup.provisioning.errors import GitCommandError

logger = logging.getLogger(__name__)

_REDACTED = "AUTHORIZATION: basic ***"


def basic_auth_header(token: str) -> str:
    """Build the header git sends when a credential helper is unavailable."""

    if not token.strip():
        raise ValueError("token is required")
    encoded = base64.b64encode(f"x-access-token:{token}".encode()).decode("ascii")
    return f"AUTHORIZATION: basic {encoded}"


def _redact(arg: str) -> str:
    if arg.startswith("AUTHORIZATION:"):
        return _REDACTED
    key, sep, value = arg.partition("=")
    if sep and value.startswith("AUTHORIZATION:"):
        return f"{key}={_REDACTED}"
    return arg


class GitCli:
    """Run git subcommands with captured output.

    Failures raise `GitCommandError` carrying git's stderr. Authorization
    headers are redacted from the recorded command line.
    """

    def __init__(self, *, server_url: str = "https://github.com", executable: str = "git") -> None:
        self._server_url = server_url.rstrip("/")
        self._executable = executable

    @property
    def server_url(self) -> str:
        return self._server_url

    def remote_url(self, full_name: str) -> str:
        return f"{self._server_url}/{full_name}.git"

    def _extraheader_key(self) -> str:
        return f"http.{self._server_url}/.extraheader"

    def _run(self, args: list[str], *, cwd: Path | None = None) -> str:
        cmd = [self._executable, *args]
        shown = [_redact(a) for a in args]
        logger.debug("Running git", extra={"git_args": shown, "cwd": str(cwd) if cwd else None})
        try:
            result = subprocess.run(
                cmd,
                cwd=cwd,
                capture_output=True,
                text=True,
                check=True,
            )
        except subprocess.CalledProcessError as e:
            raise GitCommandError(shown, e.returncode, e.stderr or "") from None
        return result.stdout

    def clone(self, url: str, destination: Path, *, auth_header: str | None = None) -> None:
        """Clone the full history (no depth limit) of `url` into `destination`."""

        args: list[str] = []
        if auth_header is not None:
            args += ["-c", f"{self._extraheader_key()}={auth_header}"]
        args += ["clone", "--no-single-branch", url, str(destination)]
        self._run(args)

    def set_auth_header(self, repo: Path, auth_header: str) -> None:
        self._run(["config", "--local", self._extraheader_key(), auth_header], cwd=repo)

    def current_branch(self, repo: Path) -> str:
        return self._run(["rev-parse", "--abbrev-ref", "HEAD"], cwd=repo).strip()

    def add_remote(self, repo: Path, name: str, url: str) -> None:
        self._run(["remote", "add", name, url], cwd=repo)

    def push(self, repo: Path, remote: str, refspec: str) -> None:
        self._run(["push", remote, refspec], cwd=repo)
