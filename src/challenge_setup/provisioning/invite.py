from __future__ import annotations

import logging

from challenge_setup.provisioning.hosting import HostingClient
from challenge_setup.provisioning.models import RepositoryRef

logger = logging.getLogger(__name__)

# GitHub's REST name for the "write" role.
WRITE_PERMISSION = "push"


class CollaboratorInviter:
    """Grant the candidate write access to their repository."""

    def __init__(self, *, hosting: HostingClient, permission: str = WRITE_PERMISSION) -> None:
        self._hosting = hosting
        self._permission = permission

    def invite(self, *, target: RepositoryRef, username: str) -> None:
        self._hosting.add_collaborator(target, username, permission=self._permission)
        logger.info(
            "Collaborator invited",
            extra={"repo": target.full_name, "username": username, "permission": self._permission},
        )
