"""CLI entrypoint for candidate repository setup."""

from __future__ import annotations

import argparse
import json
import logging
import sys

from github import GithubException
from pydantic import ValidationError

from challenge_setup import __version__
from challenge_setup.provisioning.config import SetupSettings
from challenge_setup.provisioning.errors import PreconditionError, SetupFailedError
from challenge_setup.provisioning.git import GitCli
from challenge_setup.provisioning.github.client import GitHubClient
from challenge_setup.provisioning.hosting import GitHubHostingClient
from challenge_setup.provisioning.logging import configure_logging
from challenge_setup.provisioning.models import RepositoryRef
from challenge_setup.provisioning.setup import ChallengeSetup, SetupOptions

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="challenge-setup",
        description=(
            "Create a private technical challenge repository for a candidate: copy the "
            "template with its pull request branches, recreate its issues and pull "
            "requests, then invite the candidate as a collaborator."
        ),
    )
    parser.add_argument("--version", action="version", version=f"challenge-setup {__version__}")
    parser.add_argument("username", help="The GitHub username of the candidate (case-sensitive)")
    parser.add_argument(
        "--template",
        default=None,
        help=(
            "Template repository in the form 'owner/repo' "
            "(default: CHALLENGE_TEMPLATE_REPOSITORY)"
        ),
    )
    parser.add_argument(
        "--owner",
        default=None,
        help="Owner of the new repository (default: CHALLENGE_ORGANIZATION)",
    )
    parser.add_argument(
        "--skip-invite",
        action="store_true",
        help="Do not add the candidate as a collaborator",
    )
    parser.add_argument(
        "--invite-last",
        action="store_true",
        help="Invite the candidate only after issues and pull requests have been created",
    )
    parser.add_argument(
        "--open-issues-only",
        action="store_true",
        help="Only recreate open issues (default: open and closed)",
    )
    parser.add_argument(
        "--unattended",
        action="store_true",
        default=None,
        help=(
            "Authenticate git pushes with the configured token instead of a credential helper "
            "(default: CHALLENGE_UNATTENDED)"
        ),
    )
    return parser


def _build_options(args: argparse.Namespace, settings: SetupSettings) -> SetupOptions:
    template_value = args.template or settings.template_repository
    owner = args.owner or settings.organization
    if not template_value:
        raise PreconditionError("A template repository is required (--template)")
    if not owner:
        raise PreconditionError("A destination owner is required (--owner)")

    unattended = settings.unattended if args.unattended is None else args.unattended
    return SetupOptions(
        template=RepositoryRef.parse(template_value),
        owner=owner,
        invite=not args.skip_invite,
        invite_last=args.invite_last,
        issue_state="open" if args.open_issues_only else "all",
        invite_permission=settings.invite_permission,
        push_token=settings.github_token if unattended else None,
    )


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    try:
        settings = SetupSettings()
    except ValidationError as e:
        # Logging isn't configured yet; keep it simple and actionable.
        print("Configuration error (check your .env):", file=sys.stderr)
        print(e, file=sys.stderr)
        return 2

    configure_logging(settings.log_level)

    github = GitHubClient(token=settings.github_token, base_url=settings.github_base_url)
    try:
        try:
            options = _build_options(args, settings)
            github.authenticated_login()
        except PreconditionError as e:
            print(str(e), file=sys.stderr)
            return 2
        except GithubException as e:
            logger.error("GitHub authentication failed", extra={"status": e.status})
            print(f"GitHub authentication failed: {e}", file=sys.stderr)
            return 2

        git = GitCli(server_url=settings.github_server_url)
        hosting = GitHubHostingClient(github=github, git=git)
        setup = ChallengeSetup(hosting=hosting, options=options)

        try:
            snapshot = setup.run(args.username)
        except PreconditionError as e:
            print(str(e), file=sys.stderr)
            return 2
        except SetupFailedError as e:
            print(f"Setup failed: {e}", file=sys.stderr)
            print(json.dumps(e.snapshot.to_json(), indent=2), file=sys.stderr)
            return 1

        print(
            f"Created {snapshot.target.full_name}: {len(snapshot.issues)} issue(s), "
            f"{len(snapshot.pull_requests)} pull request(s)"
            + (f", invited {args.username}" if snapshot.invited else "")
        )
        return 0

    except Exception:
        logger.exception("Command failed")
        return 1
    finally:
        github.close()


if __name__ == "__main__":
    raise SystemExit(main())
