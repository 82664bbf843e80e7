#!/usr/bin/env python3
"""Programmatic candidate setup example.

This drives the setup components directly instead of going through the CLI:

* load settings from `.env`
* build the GitHub and git clients
* run the setup for one candidate and print the resulting snapshot

Invitation is skipped here so the example can be pointed at a scratch
organization without emailing anyone.
"""

from __future__ import annotations

import argparse
import json
from typing import Sequence

from challenge_setup.provisioning.config import SetupSettings
from challenge_setup.provisioning.errors import SetupFailedError
from challenge_setup.provisioning.git import GitCli
from challenge_setup.provisioning.github.client import GitHubClient
from challenge_setup.provisioning.hosting import GitHubHostingClient
from challenge_setup.provisioning.logging import configure_logging
from challenge_setup.provisioning.models import RepositoryRef
from challenge_setup.provisioning.setup import ChallengeSetup, SetupOptions


def _parse_args(argv: Sequence[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Set up a candidate repository (example).")
    parser.add_argument("username", help="Candidate GitHub username")
    parser.add_argument("--owner", required=True, help="Owner of the new repository")
    parser.add_argument("--template", help='Template repository in the form "owner/repo"')
    return parser.parse_args(argv)


def main(argv: Sequence[str] | None = None) -> int:
    args = _parse_args(argv)

    settings = SetupSettings()
    configure_logging(settings.log_level)

    options = SetupOptions(
        template=RepositoryRef.parse(args.template or settings.template_repository),
        owner=args.owner,
        invite=False,
    )

    github = GitHubClient(token=settings.github_token, base_url=settings.github_base_url)
    try:
        hosting = GitHubHostingClient(
            github=github, git=GitCli(server_url=settings.github_server_url)
        )
        try:
            snapshot = ChallengeSetup(hosting=hosting, options=options).run(args.username)
        except SetupFailedError as exc:
            print(str(exc))
            print(json.dumps(exc.snapshot.to_json(), indent=2))
            return 1
    finally:
        github.close()

    print(json.dumps(snapshot.to_json(), indent=2))
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
