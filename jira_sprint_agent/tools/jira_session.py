"""Authenticated HTTP access to the Jira REST APIs.

The session performs no retries and no caching. Non-2xx responses are
returned to the caller as an `ApiResponse`; only transport faults raise.
"""

import logging
from typing import Any

import requests
from pydantic import BaseModel, Field
from requests.auth import HTTPBasicAuth

from jira_sprint_agent.config import JiraConfig

logger: logging.Logger = logging.getLogger(__name__)

# Classic issue API and agile (board/sprint) API roots.
ISSUE_API: str = "/rest/api/3"
AGILE_API: str = "/rest/agile/1.0"

DEFAULT_HEADERS: dict[str, str] = {
    "Accept": "application/json",
    "Content-Type": "application/json",
}


class JiraTransportError(Exception):
    """Jira could not be reached (connection error, timeout, ...)."""


class ApiResponse(BaseModel):
    """Result of a Jira REST call."""

    status_code: int = Field(description="HTTP status code.")
    body: Any = Field(default=None, description="Decoded JSON body, if any.")
    text: str = Field(default="", description="Raw response text.")

    @property
    def ok(self) -> bool:
        return 200 <= self.status_code < 300

    def summary(self, limit: int = 300) -> str:
        """Short status/body description for error messages."""
        if not self.text:
            return f"HTTP {self.status_code}"
        return f"HTTP {self.status_code}: {self.text[:limit]}"


class JiraSession:
    """Issues authenticated requests against one Jira instance."""

    def __init__(
        self, config: JiraConfig, http: requests.Session | None = None
    ) -> None:
        self.config = config
        self.http: requests.Session = http or requests.Session()
        self.http.auth = HTTPBasicAuth(config.username, config.api_token)
        self.http.headers.update(DEFAULT_HEADERS)

    def request(
        self,
        method: str,
        path: str,
        params: dict[str, Any] | None = None,
        payload: Any = None,
    ) -> ApiResponse:
        """Send a request to `base_url + path`.

        Args:
            method: HTTP verb.
            path: Path starting with ISSUE_API or AGILE_API.
            params: Optional query parameters.
            payload: Optional JSON body.

        Returns:
            ApiResponse with status and decoded body.

        Raises:
            JiraTransportError: If the request could not be completed.
        """
        url = f"{self.config.base_url}{path}"
        logger.debug("Jira %s %s params=%s", method, path, params)

        try:
            response: requests.Response = self.http.request(
                method,
                url,
                params=params,
                json=payload,
                timeout=self.config.timeout_seconds,
            )
        except requests.RequestException as e:
            raise JiraTransportError(f"{method} {path} failed: {e}") from e

        body: Any = None
        if response.content:
            try:
                body = response.json()
            except ValueError:
                body = None

        result = ApiResponse(
            status_code=response.status_code, body=body, text=response.text or ""
        )
        logger.debug("Jira %s %s -> %d", method, path, result.status_code)
        return result

    def get(self, path: str, params: dict[str, Any] | None = None) -> ApiResponse:
        return self.request("GET", path, params=params)

    def post(self, path: str, payload: Any = None) -> ApiResponse:
        return self.request("POST", path, payload=payload)

    def put(self, path: str, payload: Any = None) -> ApiResponse:
        return self.request("PUT", path, payload=payload)
