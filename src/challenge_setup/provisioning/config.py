"""Configuration for candidate repository setup.

Configuration is loaded from:
- environment variables
- and a local `.env` file (if present)

To avoid collisions with other tools that may also use `GITHUB_TOKEN`, this
project uses a dedicated token variable: `CHALLENGE_GITHUB_TOKEN`.
"""

from __future__ import annotations

from pydantic import Field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class SetupSettings(BaseSettings):
    """Settings for the setup run.

    Environment variables:
    - CHALLENGE_GITHUB_TOKEN
    - GITHUB_BASE_URL                (optional)
    - GITHUB_SERVER_URL              (optional)
    - CHALLENGE_ORGANIZATION         (optional)
    - CHALLENGE_TEMPLATE_REPOSITORY  (optional)
    - CHALLENGE_UNATTENDED           (optional)
    - CHALLENGE_INVITE_PERMISSION    (optional)
    - LOG_LEVEL                      (optional)

    Notes:
        Pydantic-settings supports overriding the env file in tests via:
        `SetupSettings(_env_file=path_to_env)`.
    """

    github_token: str = Field(
        default="",
        validation_alias="CHALLENGE_GITHUB_TOKEN",
        description="GitHub token used for API authentication (and git pushes when unattended)",
    )
    github_base_url: str = Field(
        default="https://api.github.com",
        validation_alias="GITHUB_BASE_URL",
        description="GitHub API base URL (useful for GitHub Enterprise)",
    )
    github_server_url: str = Field(
        default="https://github.com",
        validation_alias="GITHUB_SERVER_URL",
        description="Base URL used to build git clone/push remotes",
    )

    organization: str = Field(
        default="MetaMaskHiring",
        validation_alias="CHALLENGE_ORGANIZATION",
        description="Owner under which candidate repositories are created",
    )
    template_repository: str = Field(
        default="MetaMaskHiring/technical-challenge-shared-libraries",
        validation_alias="CHALLENGE_TEMPLATE_REPOSITORY",
        description="Template repository in the form 'owner/repo'",
    )

    unattended: bool = Field(
        default=False,
        validation_alias="CHALLENGE_UNATTENDED",
        description=(
            "Set when no interactive git credential helper is available (e.g. CI). "
            "The token is then passed to git explicitly as a basic-auth header."
        ),
    )
    invite_permission: str = Field(
        default="push",
        validation_alias="CHALLENGE_INVITE_PERMISSION",
        description="Permission granted to the candidate ('push' is GitHub's write role)",
    )

    log_level: str = Field(
        default="INFO",
        validation_alias="LOG_LEVEL",
        description="Root logging level",
    )

    model_config = SettingsConfigDict(
        env_prefix="",
        env_file=".env",
        extra="ignore",
    )

    @model_validator(mode="after")
    def _require_github_auth(self) -> SetupSettings:
        if not self.github_token.strip():
            raise ValueError("CHALLENGE_GITHUB_TOKEN is required")
        return self
