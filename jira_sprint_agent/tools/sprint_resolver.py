"""Active sprint discovery for a project."""

import logging
from typing import Any

from pydantic import ValidationError

from jira_sprint_agent.models.jira_tickets import Sprint
from jira_sprint_agent.tools.jira_session import (
    AGILE_API,
    ApiResponse,
    JiraSession,
    JiraTransportError,
)

logger: logging.Logger = logging.getLogger(__name__)


def _values(response: ApiResponse) -> list[Any]:
    """Return the `values` list of an agile listing, or [] for any other shape."""
    values = (response.body or {}).get("values")
    return values if isinstance(values, list) else []


class SprintResolver:
    """Finds the active sprint of a project via its board.

    Nothing is cached: the active sprint can change between requests.
    """

    def __init__(self, session: JiraSession) -> None:
        self.session = session

    def _find_board_id(self, project_key: str) -> int | None:
        response: ApiResponse = self.session.get(
            f"{AGILE_API}/board", params={"projectKeyOrId": project_key}
        )
        if not response.ok:
            logger.warning(
                "Board lookup for %s failed: %s", project_key, response.summary()
            )
            return None

        # Exact key match only, first one wins.
        board = next(
            (
                b
                for b in _values(response)
                if (b.get("location") or {}).get("projectKey") == project_key
            ),
            None,
        )
        if board is None:
            logger.info("No board found for project %s", project_key)
            return None
        return board.get("id") or None

    def _first_active_sprint(self, board_id: int) -> Sprint | None:
        response: ApiResponse = self.session.get(
            f"{AGILE_API}/board/{board_id}/sprint", params={"state": "active"}
        )
        if not response.ok:
            logger.warning(
                "Sprint lookup for board %s failed: %s", board_id, response.summary()
            )
            return None

        sprints = _values(response)
        if not sprints:
            return None
        sprint = Sprint.model_validate(sprints[0])
        return sprint if sprint.id else None

    def resolve_active_sprint(self, project_key: str) -> int | None:
        """Return the id of the project's active sprint.

        Args:
            project_key: Jira project key (e.g., BFA).

        Returns:
            The sprint id, or None when there is no board, no active sprint,
            or the lookup failed.
        """
        try:
            board_id = self._find_board_id(project_key)
            if board_id is None:
                return None

            sprint = self._first_active_sprint(board_id)
        except (JiraTransportError, ValidationError, AttributeError, TypeError) as e:
            logger.error("Error resolving active sprint for %s: %s", project_key, e)
            return None

        if sprint is None:
            logger.info("No active sprint on board %s for %s", board_id, project_key)
            return None
        logger.debug("Active sprint for %s is %s (%s)", project_key, sprint.id, sprint.name)
        return sprint.id
