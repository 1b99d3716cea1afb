"""Main entry point for the Jira sprint agent MCP server.

Point your LLM client to this file to use the MCP server.
"""

import argparse
import logging
import sys
from datetime import date
from typing import Annotated

import dotenv
from mcp.server.fastmcp import FastMCP
from pydantic import ValidationError

from jira_sprint_agent.config import JiraConfig
from jira_sprint_agent.models.jira_actions import ListSprintTicketsResult
from jira_sprint_agent.models.jira_tickets import TicketDraft, TicketPatch
from jira_sprint_agent.tools.ticket_orchestrator import TicketOrchestrator

dotenv.load_dotenv()

logger: logging.Logger = logging.getLogger(__name__)

# Create the MCP server instance.
mcp: FastMCP = FastMCP("Jira Sprint Agent")

_orchestrator: TicketOrchestrator | None = None


def setup_logging(debug: bool = False) -> None:
    """Configure logging for the MCP server."""
    level: int = logging.DEBUG if debug else logging.INFO
    logging.basicConfig(
        level=level,
        format="[%(asctime)s]%(filename)s:%(levelname)s: %(message)s",
        # Use stderr to avoid corrupting stdout (used for MCP protocol).
        stream=sys.stderr,
    )


def get_orchestrator() -> TicketOrchestrator:
    """Return the shared orchestrator, building it from the environment once.

    Raises:
        ValueError: If required configuration is missing.
    """
    global _orchestrator
    if _orchestrator is None:
        _orchestrator = TicketOrchestrator(JiraConfig.from_env(load_dotenv=False))
    return _orchestrator


def _format_sprint_tickets(result: ListSprintTicketsResult) -> str:
    if not result.success:
        return f"{result.message}: {result.error}"
    if result.sprint_id is None:
        return result.message
    if not result.tickets:
        return f"No tickets found in sprint {result.sprint_id}."

    ticket_list: list[str] = []
    for t in result.tickets:
        ticket_list.append(
            f"{t.key}: {t.summary}\n"
            f"  Status: {t.status} | Assignee: {t.assignee or 'Unassigned'}"
            f" | Time spent: {t.time_spent or 'No time logged'}"
        )
    return f"Sprint {result.sprint_id}:\n\n" + "\n\n".join(ticket_list)


@mcp.tool(
    name="create_ticket",
    title="Create a Jira ticket in the active sprint.",
    description="Create a Jira ticket assigned to the configured user and add it to the project's active sprint. The description supports '# ' headings, '- [ ] ' checklist items and **bold** text.",
)
def create_ticket_tool(
    project: Annotated[str, "Jira project key (e.g., BFA)."],
    issue_type: Annotated[str, "Issue type: Story, Bug, Task or Sub-task."],
    summary: Annotated[str, "Ticket title, at most 100 characters."],
    description: Annotated[str, "Ticket description, at most 2000 characters."],
    priority: Annotated[str, "Priority: High, Medium or Low."],
    story_points: Annotated[
        int | None, "Estimated story points (1, 2, 3, 5, 8, 13)."
    ] = None,
    parent_key: Annotated[
        str | None, "Parent ticket key, required for sub-tasks."
    ] = None,
) -> str:
    """Create a Jira ticket."""
    try:
        draft = TicketDraft(
            project=project,
            issue_type=issue_type,
            summary=summary,
            description=description,
            priority=priority,
            story_points=story_points,
            parent_key=parent_key,
        )
    except ValidationError as e:
        return f"Invalid ticket details: {e}"

    try:
        result = get_orchestrator().create_ticket(draft)
    except Exception as e:
        logger.error("Error creating ticket: %s", e)
        return f"Error creating ticket: {e}"

    if not result.success:
        return f"Failed to create ticket: {result.error}"

    message = f"{result.message}\nURL: {result.ticket_url}"
    if result.error:
        message += f"\nSprint assignment error: {result.error}"
    return message


@mcp.tool(
    name="update_ticket",
    title="Update fields and/or status of a Jira ticket.",
    description="Update an existing Jira ticket. Only the given fields change. A status change is applied after the field changes and only if the ticket's workflow currently allows moving to that status (e.g. To Do, In Progress, In Code Review, In Stage, On Live).",
)
def update_ticket_tool(
    ticket_key: Annotated[
        str, "Jira ticket key to update; use the last ticket created or updated."
    ],
    summary: Annotated[str | None, "New ticket title."] = None,
    description: Annotated[str | None, "New ticket description."] = None,
    priority: Annotated[str | None, "New priority: High, Medium or Low."] = None,
    assignee: Annotated[str | None, "Account id of the new assignee."] = None,
    story_points: Annotated[int | None, "New story points (1-13)."] = None,
    status: Annotated[str | None, "Status to move the ticket to."] = None,
) -> str:
    """Update an existing Jira ticket."""
    try:
        patch = TicketPatch(
            ticket_key=ticket_key,
            summary=summary,
            description=description,
            priority=priority,
            assignee=assignee,
            story_points=story_points,
            status=status,
        )
    except ValidationError as e:
        return f"Invalid update for {ticket_key}: {e}"

    try:
        result = get_orchestrator().update_ticket(patch)
    except Exception as e:
        logger.error("Error updating ticket %s: %s", ticket_key, e)
        return f"Error updating ticket {ticket_key}: {e}"

    if not result.success:
        detail = f" ({result.error})" if result.error else ""
        return f"Failed to update ticket {ticket_key}: {result.message}{detail}"
    return result.message


@mcp.tool(
    name="log_work",
    title="Log time spent on a Jira ticket.",
    description="Add a worklog entry with the time spent (in seconds) and an optional comment to a Jira ticket.",
)
def log_work_tool(
    ticket_key: Annotated[str, "Jira ticket key (e.g., BFA-101)."],
    time_spent_seconds: Annotated[int, "Time spent in seconds (3600 = 1 hour)."],
    comment: Annotated[str | None, "Optional worklog comment."] = None,
) -> str:
    """Log time spent on a Jira ticket."""
    try:
        result = get_orchestrator().log_work(ticket_key, time_spent_seconds, comment)
    except Exception as e:
        logger.error("Error logging time on %s: %s", ticket_key, e)
        return f"Error logging time on {ticket_key}: {e}"

    if not result.success:
        return f"Failed to log time to {ticket_key}: {result.error}"
    return result.message


@mcp.tool(
    name="list_sprint_tickets",
    title="List tickets in the active sprint.",
    description="List all tickets in the project's current active sprint with status, assignee and time spent.",
)
def list_sprint_tickets_tool(
    project_key: Annotated[str, "Jira project key (e.g., BFA)."],
) -> str:
    """List all tickets in the active sprint."""
    try:
        result = get_orchestrator().list_sprint_tickets(project_key)
    except Exception as e:
        logger.error("Error listing sprint tickets for %s: %s", project_key, e)
        return f"Error listing sprint tickets: {e}"
    return _format_sprint_tickets(result)


@mcp.tool(
    name="list_my_sprint_tickets",
    title="List my tickets in the active sprint.",
    description="List tickets in the project's current active sprint assigned to the current user, or to the given assignee.",
)
def list_my_sprint_tickets_tool(
    project_key: Annotated[str, "Jira project key (e.g., BFA)."],
    assignee: Annotated[
        str | None, "Account id to filter by; defaults to the current user."
    ] = None,
) -> str:
    """List the user's tickets in the active sprint."""
    try:
        result = get_orchestrator().list_my_sprint_tickets(project_key, assignee)
    except Exception as e:
        logger.error("Error listing sprint tickets for %s: %s", project_key, e)
        return f"Error listing sprint tickets: {e}"
    return _format_sprint_tickets(result)


@mcp.tool(
    name="daily_time_summary",
    title="Summarize time logged on a day.",
    description="Get a summary of the time the current user logged on a specific date (defaults to today).",
)
def daily_time_summary_tool(
    day: Annotated[str | None, "Date in YYYY-MM-DD format; today if omitted."] = None,
) -> str:
    """Summarize time logged on a day."""
    try:
        target: date | None = date.fromisoformat(day) if day else None
    except ValueError:
        return f"Invalid date '{day}', expected YYYY-MM-DD."

    try:
        result = get_orchestrator().daily_time_summary(target)
    except Exception as e:
        logger.error("Error fetching time log summary: %s", e)
        return f"Error fetching time log summary: {e}"

    if not result.success:
        return f"Failed to fetch time log summary for {result.day}: {result.error}"
    if not result.entries:
        return f"No time logged on {result.day}."

    lines: list[str] = []
    for e in result.entries:
        line = f"- {e.ticket_key} {e.ticket_summary}: {e.time_spent_seconds / 3600:.2f}h (started {e.started})"
        if e.comment:
            line += f"\n  {e.comment}"
        lines.append(line)
    lines.append(f"Total on {result.day}: {result.total_hours:.2f} hours")
    return "\n".join(lines)


def main() -> None:
    """Main entry point for the MCP server."""
    parser: argparse.ArgumentParser = argparse.ArgumentParser(
        description="Jira Sprint Agent: ticket create/update, sprint and time tracking tools for LLM clients."
    )
    parser.add_argument("--debug", action="store_true", help="Enable debug logging.")

    args: argparse.Namespace = parser.parse_args()

    setup_logging(args.debug)

    # Missing credentials are fatal here, before any tool is served.
    get_orchestrator()

    logger.info("Starting Jira Sprint Agent MCP server...")
    mcp.run(transport="stdio")


if __name__ == "__main__":
    main()
