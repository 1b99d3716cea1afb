"""Shared pytest fixtures for jira-sprint-agent tests."""

from typing import Any, Callable
from unittest.mock import MagicMock, patch

import pytest
from jira_sprint_agent.config import JiraConfig
from jira_sprint_agent.models.jira_tickets import TicketDraft
from jira_sprint_agent.tools.jira_session import ApiResponse, JiraSession
from jira_sprint_agent.tools.sprint_resolver import SprintResolver
from jira_sprint_agent.tools.ticket_orchestrator import TicketOrchestrator


@pytest.fixture
def make_response() -> Callable[..., ApiResponse]:
    """Factory for ApiResponse objects as JiraSession returns them."""

    def _make(status_code: int = 200, body: Any = None) -> ApiResponse:
        text = "" if body is None else str(body)
        return ApiResponse(status_code=status_code, body=body, text=text)

    return _make


@pytest.fixture
def jira_config() -> JiraConfig:
    """Create a config with a story points field configured."""
    return JiraConfig(
        base_url="https://jira.example.com",
        username="bot@example.com",
        api_token="test-token",
        assignee_account_id="acc-123",
        story_points_field="customfield_10016",
    )


@pytest.fixture
def jira_config_without_points() -> JiraConfig:
    """Create a config without a story points field."""
    return JiraConfig(
        base_url="https://jira.example.com",
        username="bot@example.com",
        api_token="test-token",
        assignee_account_id="acc-123",
    )


@pytest.fixture
def mock_session() -> MagicMock:
    """Mock JiraSession; set `request.side_effect` to script responses."""
    return MagicMock(spec=JiraSession)


@pytest.fixture
def mock_resolver() -> MagicMock:
    """Mock SprintResolver resolving sprint 42 by default."""
    resolver = MagicMock(spec=SprintResolver)
    resolver.resolve_active_sprint.return_value = 42
    return resolver


@pytest.fixture
def orchestrator(
    jira_config: JiraConfig, mock_session: MagicMock, mock_resolver: MagicMock
) -> TicketOrchestrator:
    """Create an orchestrator wired to mocks."""
    return TicketOrchestrator(jira_config, session=mock_session, resolver=mock_resolver)


@pytest.fixture
def sample_draft() -> TicketDraft:
    """Create a sample TicketDraft for testing."""
    return TicketDraft(
        project="BFA",
        issue_type="Story",
        summary="Add checkout button",
        description="# Goal\n- [ ] Design\nShip it **fast**",
        priority="High",
        story_points=5,
    )


@pytest.fixture
def mock_http() -> MagicMock:
    """Mock requests.Session used by JiraSession."""
    http = MagicMock()
    http.headers = {}
    return http


@pytest.fixture
def mock_env_vars():
    """Mock environment variables for testing."""
    with patch.dict(
        "os.environ",
        {
            "JIRA_URL": "https://jira.example.com/",
            "JIRA_USERNAME": "bot@example.com",
            "JIRA_API_TOKEN": "test-token",
            "JIRA_ASSIGNEE_ACCOUNT_ID": "acc-123",
        },
        clear=True,
    ):
        yield
