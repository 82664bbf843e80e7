"""Candidate challenge repository setup.

Creates a private, per-candidate copy of a template repository:
- full history plus every branch referenced by an open pull request
- issues and pull requests recreated in their original order
- the candidate invited as a collaborator
"""

__version__ = "0.1.0"

from challenge_setup.provisioning.config import SetupSettings

__all__ = ["__version__", "SetupSettings"]
