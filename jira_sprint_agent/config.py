"""Configuration for the Jira sprint agent.

Values come from the process environment (optionally seeded from a `.env`
file) and are collected into a single `JiraConfig` that is handed to the
session and orchestrator.
"""

import logging
import os

import dotenv
from pydantic import BaseModel, Field, field_validator

logger: logging.Logger = logging.getLogger(__name__)

# Environment variable -> JiraConfig attribute.
REQUIRED_ENV_VARS: dict[str, str] = {
    "JIRA_URL": "base_url",
    "JIRA_USERNAME": "username",
    "JIRA_API_TOKEN": "api_token",
    "JIRA_ASSIGNEE_ACCOUNT_ID": "assignee_account_id",
}

DEFAULT_TIMEOUT_SECONDS: float = 30.0


class JiraConfig(BaseModel):
    """Connection parameters for the Jira instance."""

    base_url: str = Field(description="Jira base URL, e.g. https://acme.atlassian.net.")
    username: str = Field(description="Account email used for basic auth.")
    api_token: str = Field(description="API token paired with the username.")
    assignee_account_id: str = Field(
        description="Account id new tickets are assigned to."
    )
    story_points_field: str | None = Field(
        default=None,
        description="Custom field id holding story points (e.g. customfield_10016).",
    )
    timeout_seconds: float = Field(
        default=DEFAULT_TIMEOUT_SECONDS,
        gt=0,
        description="Per-request timeout in seconds.",
    )

    @field_validator("base_url")
    @classmethod
    def _strip_trailing_slash(cls, value: str) -> str:
        return value.rstrip("/")

    @field_validator("story_points_field")
    @classmethod
    def _blank_field_is_unset(cls, value: str | None) -> str | None:
        if value is None or not value.strip():
            return None
        return value.strip()

    def browse_url(self, ticket_key: str) -> str:
        """Return the web URL of a ticket."""
        return f"{self.base_url}/browse/{ticket_key}"

    @classmethod
    def from_env(cls, load_dotenv: bool = True) -> "JiraConfig":
        """Build the configuration from environment variables.

        Args:
            load_dotenv: Whether to load a `.env` file first.

        Returns:
            The populated JiraConfig.

        Raises:
            ValueError: If any required variable is missing or empty.
        """
        if load_dotenv:
            dotenv.load_dotenv()

        missing: list[str] = [
            name for name in REQUIRED_ENV_VARS if not os.getenv(name)
        ]
        if missing:
            raise ValueError(
                f"{', '.join(missing)} must be set to reach Jira. "
                "See .env.example for the recognized options."
            )

        values: dict[str, str | float | None] = {
            attr: os.environ[name] for name, attr in REQUIRED_ENV_VARS.items()
        }
        values["story_points_field"] = os.getenv("JIRA_STORY_POINTS_FIELD_ID")

        timeout = os.getenv("JIRA_TIMEOUT_SECONDS")
        if timeout:
            values["timeout_seconds"] = float(timeout)

        config = cls(**values)
        if config.story_points_field is None:
            logger.info("JIRA_STORY_POINTS_FIELD_ID not set; story points will be omitted.")
        return config
