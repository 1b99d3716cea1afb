"""Ticket workflows as ordered sequences of Jira calls.

Each public operation runs its remote steps strictly in order, stops at the
first hard failure and always returns a result model. Absence outcomes (no
active sprint) are branches, not failures.
"""

import logging
from datetime import date
from typing import Any

from jira_sprint_agent.config import JiraConfig
from jira_sprint_agent.models.jira_actions import (
    CreateTicketResult,
    DailyTimeSummaryResult,
    ListSprintTicketsResult,
    LogWorkResult,
    StepOutcome,
    StepStatus,
    UpdateTicketResult,
)
from jira_sprint_agent.models.jira_tickets import (
    SprintTicket,
    TicketDraft,
    TicketPatch,
    TransitionOption,
    WorklogEntry,
)
from jira_sprint_agent.tools.adf_converter import adf_to_text, markup_to_adf, text_to_adf
from jira_sprint_agent.tools.jira_session import (
    AGILE_API,
    ISSUE_API,
    ApiResponse,
    JiraSession,
    JiraTransportError,
)
from jira_sprint_agent.tools.sprint_resolver import SprintResolver

logger: logging.Logger = logging.getLogger(__name__)

SECONDS_PER_HOUR: int = 3600
SPRINT_TICKET_FIELDS: str = "summary,status,assignee,timetracking"
MAX_RESULTS: int = 100


class TicketOrchestrator:
    """Create, update, log time on and list Jira tickets."""

    def __init__(
        self,
        config: JiraConfig,
        session: JiraSession | None = None,
        resolver: SprintResolver | None = None,
    ) -> None:
        self.config = config
        self.session: JiraSession = session or JiraSession(config)
        self.resolver: SprintResolver = resolver or SprintResolver(self.session)

    def _call(
        self,
        action: str,
        method: str,
        path: str,
        params: dict[str, Any] | None = None,
        payload: Any = None,
        expected: tuple[int, ...] | None = None,
    ) -> StepOutcome:
        """Run one remote step and tag its outcome.

        Args:
            action: Human-readable step name used in logs and errors.
            method: HTTP verb.
            path: API path.
            params: Optional query parameters.
            payload: Optional JSON body.
            expected: Accepted status codes; any 2xx when omitted.

        Returns:
            StepOutcome carrying the response body on success.
        """
        try:
            response: ApiResponse = self.session.request(
                method, path, params=params, payload=payload
            )
        except JiraTransportError as e:
            logger.error("%s failed: %s", action, e)
            return StepOutcome.failure(f"{action} failed: {e}")

        accepted = (
            response.status_code in expected if expected is not None else response.ok
        )
        if not accepted:
            logger.error("%s rejected: %s", action, response.summary())
            return StepOutcome.failure(
                f"{action} rejected by Jira ({response.summary()})"
            )

        return StepOutcome.success(response.body)

    def _get_all_pages(
        self, action: str, path: str, items_key: str, params: dict[str, Any]
    ) -> StepOutcome:
        """GET a `startAt`/`total` paginated listing until every page is read.

        Returns:
            StepOutcome carrying the concatenated `items_key` lists, or the
            first failed page.
        """
        items: list[dict[str, Any]] = []
        while True:
            page = self._call(
                action, "GET", path, params={**params, "startAt": len(items)}
            )
            if page.failed:
                return page

            body: dict[str, Any] = page.value or {}
            batch: list[dict[str, Any]] = body.get(items_key) or []
            items.extend(batch)
            if not batch or len(items) >= body.get("total", 0):
                return StepOutcome.success(items)
            logger.debug("%s: read %d of %s", action, len(items), body.get("total"))

    def _resolve_sprint(self, project_key: str) -> StepOutcome:
        sprint_id = self.resolver.resolve_active_sprint(project_key)
        if sprint_id is None:
            return StepOutcome.absent()
        return StepOutcome.success(sprint_id)

    def _story_points_field(self, story_points: int | None) -> dict[str, int]:
        if story_points is None or self.config.story_points_field is None:
            return {}
        return {self.config.story_points_field: story_points}

    def _creation_fields(self, draft: TicketDraft) -> dict[str, Any]:
        fields: dict[str, Any] = {
            "project": {"key": draft.project},
            "summary": draft.summary,
            "description": markup_to_adf(draft.description).to_payload(),
            "issuetype": {"name": draft.issue_type},
            "priority": {"name": draft.priority},
            "assignee": {"accountId": self.config.assignee_account_id},
        }
        fields.update(self._story_points_field(draft.story_points))
        if draft.parent_key:
            fields["parent"] = {"key": draft.parent_key}
        return fields

    def create_ticket(self, draft: TicketDraft) -> CreateTicketResult:
        """Create a ticket and schedule it in the project's active sprint.

        Sprint resolution happens first and never aborts the creation. When
        no sprint is active the ticket is created unscheduled, which is a
        success.

        Args:
            draft: Ticket details.

        Returns:
            CreateTicketResult; `sprint_assigned` tells whether scheduling
            happened.
        """
        sprint = self._resolve_sprint(draft.project)

        created = self._call(
            f"Create ticket in {draft.project}",
            "POST",
            f"{ISSUE_API}/issue",
            payload={"fields": self._creation_fields(draft)},
            expected=(201,),
        )
        if created.failed:
            return CreateTicketResult(
                success=False,
                message=f"Failed to create ticket in {draft.project}",
                error=created.error,
            )

        ticket_key: str | None = (created.value or {}).get("key")
        if not ticket_key:
            return CreateTicketResult(
                success=False,
                message=f"Failed to create ticket in {draft.project}",
                error="Jira did not return an issue key",
            )

        ticket_url = self.config.browse_url(ticket_key)
        logger.info("Created %s: %s", ticket_key, draft.summary)

        if sprint.status is StepStatus.ABSENT:
            return CreateTicketResult(
                success=True,
                ticket_key=ticket_key,
                ticket_url=ticket_url,
                message=f"Created {ticket_key}, but no active sprint found to assign it to.",
            )

        sprint_id: int = sprint.value
        assigned = self._call(
            f"Add {ticket_key} to sprint {sprint_id}",
            "POST",
            f"{AGILE_API}/sprint/{sprint_id}/issue",
            payload={"issues": [ticket_key]},
        )
        if assigned.failed:
            return CreateTicketResult(
                success=True,
                ticket_key=ticket_key,
                ticket_url=ticket_url,
                sprint_id=sprint_id,
                message=f"Created {ticket_key}, but could not add it to sprint {sprint_id}.",
                error=assigned.error,
            )

        logger.info("Moved %s to sprint %s", ticket_key, sprint_id)
        return CreateTicketResult(
            success=True,
            ticket_key=ticket_key,
            ticket_url=ticket_url,
            sprint_id=sprint_id,
            sprint_assigned=True,
            message=f"Created {ticket_key} and added it to sprint {sprint_id}.",
        )

    def _update_fields(self, patch: TicketPatch) -> tuple[dict[str, Any], list[str]]:
        fields: dict[str, Any] = {}
        names: list[str] = []

        if patch.summary:
            fields["summary"] = patch.summary
            names.append("summary")
        if patch.description:
            fields["description"] = markup_to_adf(patch.description).to_payload()
            names.append("description")
        if patch.priority:
            fields["priority"] = {"name": patch.priority}
            names.append("priority")
        if patch.assignee:
            fields["assignee"] = {"accountId": patch.assignee}
            names.append("assignee")
        story_points = self._story_points_field(patch.story_points)
        if story_points:
            fields.update(story_points)
            names.append("story points")

        return fields, names

    def update_ticket(self, patch: TicketPatch) -> UpdateTicketResult:
        """Apply field changes, then move the ticket to the requested status.

        Fields are written before any transition. The legal transitions are
        fetched right before the move; if none leads to the requested status
        the update fails even when fields were already written.

        Args:
            patch: The changes to apply.

        Returns:
            UpdateTicketResult listing what was applied.
        """
        key = patch.ticket_key
        issue_path = f"{ISSUE_API}/issue/{key}"
        fields, names = self._update_fields(patch)

        if not fields and not patch.status:
            return UpdateTicketResult(
                success=False,
                ticket_key=key,
                message=f"No fields specified to update for {key}",
            )

        if fields:
            written = self._call(
                f"Update {key}", "PUT", issue_path, payload={"fields": fields}
            )
            if written.failed:
                return UpdateTicketResult(
                    success=False,
                    ticket_key=key,
                    message=f"Failed to update {key}",
                    error=written.error,
                )
            logger.info("Updated %s: %s", key, ", ".join(names))

        if not patch.status:
            return UpdateTicketResult(
                success=True,
                ticket_key=key,
                message=f"Successfully updated {key}: {', '.join(names)}",
                updated_fields=names,
            )

        listed = self._call(
            f"List transitions for {key}", "GET", f"{issue_path}/transitions"
        )
        if listed.failed:
            return UpdateTicketResult(
                success=False,
                ticket_key=key,
                message=f"Failed to change status of {key}",
                updated_fields=names,
                error=listed.error,
            )

        options: list[TransitionOption] = [
            TransitionOption.from_api(t)
            for t in (listed.value or {}).get("transitions", [])
        ]
        logger.debug(
            "Transitions for %s: %s", key, [(o.id, o.to_status) for o in options]
        )
        target = next((o for o in options if o.matches(patch.status)), None)

        if target is None:
            available = ", ".join(o.to_status for o in options) or "none"
            message = (
                f"Status transition to '{patch.status}' not available for {key} "
                f"(available: {available})"
            )
            if names:
                message += f". Already updated: {', '.join(names)}"
            logger.warning(message)
            return UpdateTicketResult(
                success=False,
                ticket_key=key,
                message=message,
                updated_fields=names,
                error=f"Status transition to '{patch.status}' not available",
            )

        moved = self._call(
            f"Transition {key} to {target.to_status}",
            "POST",
            f"{issue_path}/transitions",
            payload={"transition": {"id": target.id}},
        )
        if moved.failed:
            return UpdateTicketResult(
                success=False,
                ticket_key=key,
                message=f"Failed to change status of {key}",
                updated_fields=names,
                error=moved.error,
            )

        logger.info("Transitioned %s to %s via %s", key, target.to_status, target.id)
        changes = names + [f"status -> {target.to_status}"]
        return UpdateTicketResult(
            success=True,
            ticket_key=key,
            message=f"Successfully updated {key}: {', '.join(changes)}",
            updated_fields=names,
            transitioned_to=target.to_status,
        )

    def log_work(
        self, ticket_key: str, seconds: int, comment: str | None = None
    ) -> LogWorkResult:
        """Add a worklog entry to a ticket.

        Args:
            ticket_key: Jira ticket key (e.g., BFA-101).
            seconds: Time spent in seconds.
            comment: Optional comment, stored as a single paragraph.

        Returns:
            LogWorkResult with the hours logged.
        """
        if seconds <= 0:
            return LogWorkResult(
                success=False,
                ticket_key=ticket_key,
                message=f"Failed to log time on {ticket_key}",
                error="Time spent must be a positive number of seconds",
            )

        payload: dict[str, Any] = {"timeSpentSeconds": seconds}
        if comment:
            payload["comment"] = text_to_adf(comment).to_payload()

        logged = self._call(
            f"Log work on {ticket_key}",
            "POST",
            f"{ISSUE_API}/issue/{ticket_key}/worklog",
            payload=payload,
            expected=(201,),
        )
        if logged.failed:
            return LogWorkResult(
                success=False,
                ticket_key=ticket_key,
                message=f"Failed to log time on {ticket_key}",
                error=logged.error,
            )

        hours = seconds / SECONDS_PER_HOUR
        logger.info("Logged %ss on %s", seconds, ticket_key)
        return LogWorkResult(
            success=True,
            ticket_key=ticket_key,
            hours_logged=hours,
            message=f"Logged {hours:g} hour(s) on {ticket_key}",
        )

    def list_sprint_tickets(
        self, project_key: str, assignee: str | None = None
    ) -> ListSprintTicketsResult:
        """List the tickets in the project's active sprint.

        Args:
            project_key: Jira project key.
            assignee: Optional account id; filters server-side when given.

        Returns:
            ListSprintTicketsResult; `sprint_id` is None when no sprint is
            active.
        """
        sprint = self._resolve_sprint(project_key)
        if sprint.status is StepStatus.ABSENT:
            return ListSprintTicketsResult(
                success=True,
                project_key=project_key,
                message=f"No active sprint found for {project_key}",
            )

        sprint_id: int = sprint.value
        params: dict[str, Any] = {
            "fields": SPRINT_TICKET_FIELDS,
            "maxResults": MAX_RESULTS,
        }
        if assignee:
            params["jql"] = f'assignee = "{assignee}"'

        listed = self._get_all_pages(
            f"List tickets of sprint {sprint_id}",
            f"{AGILE_API}/sprint/{sprint_id}/issue",
            "issues",
            params,
        )
        if listed.failed:
            return ListSprintTicketsResult(
                success=False,
                project_key=project_key,
                sprint_id=sprint_id,
                message=f"Failed to list tickets of sprint {sprint_id}",
                error=listed.error,
            )

        tickets = [SprintTicket.from_api(issue) for issue in listed.value]
        return ListSprintTicketsResult(
            success=True,
            project_key=project_key,
            sprint_id=sprint_id,
            tickets=tickets,
            message=f"{len(tickets)} ticket(s) in sprint {sprint_id}",
        )

    def list_my_sprint_tickets(
        self, project_key: str, assignee: str | None = None
    ) -> ListSprintTicketsResult:
        """List active-sprint tickets of one assignee, the configured one by default."""
        return self.list_sprint_tickets(
            project_key, assignee or self.config.assignee_account_id
        )

    def _current_account_id(self) -> StepOutcome:
        """Look up the account id of the authenticated user."""
        me = self._call("Look up current user", "GET", f"{ISSUE_API}/myself")
        if me.failed:
            return me
        account_id: str | None = (me.value or {}).get("accountId")
        if not account_id:
            return StepOutcome.failure("Jira did not return the current account id")
        return StepOutcome.success(account_id)

    def _search_worklog_issues(self, day: date) -> StepOutcome:
        """Find every issue the current user logged time on during `day`."""
        jql = f'worklogAuthor = currentUser() AND worklogDate = "{day.isoformat()}"'
        issues: list[dict[str, Any]] = []
        next_page: str | None = None

        while True:
            payload: dict[str, Any] = {
                "jql": jql,
                "fields": ["summary"],
                "maxResults": MAX_RESULTS,
            }
            if next_page:
                payload["nextPageToken"] = next_page

            found = self._call(
                f"Search worklogs on {day}",
                "POST",
                f"{ISSUE_API}/search/jql",
                payload=payload,
            )
            if found.failed:
                return found

            body: dict[str, Any] = found.value or {}
            issues.extend(body.get("issues") or [])
            next_page = body.get("nextPageToken")
            if not next_page or body.get("isLast"):
                return StepOutcome.success(issues)

    def _worklog_entries(
        self, issue: dict[str, Any], day: date, account_id: str
    ) -> StepOutcome:
        key: str = issue.get("key", "")
        summary: str = (issue.get("fields") or {}).get("summary", "")

        fetched = self._get_all_pages(
            f"Fetch worklog of {key}",
            f"{ISSUE_API}/issue/{key}/worklog",
            "worklogs",
            {},
        )
        if fetched.failed:
            return fetched

        entries: list[WorklogEntry] = []
        for worklog in fetched.value:
            started: str = worklog.get("started", "")
            if not started.startswith(day.isoformat()):
                continue
            # Tickets are shared; keep only the caller's own entries.
            if (worklog.get("author") or {}).get("accountId") != account_id:
                continue

            comment = worklog.get("comment")
            if isinstance(comment, dict):
                comment = adf_to_text(comment)

            entries.append(
                WorklogEntry(
                    ticket_key=key,
                    ticket_summary=summary,
                    started=started,
                    time_spent_seconds=int(worklog.get("timeSpentSeconds", 0)),
                    comment=comment or None,
                )
            )
        return StepOutcome.success(entries)

    def daily_time_summary(self, day: date | None = None) -> DailyTimeSummaryResult:
        """Summarize the time the current user logged on one day.

        The authenticated user is looked up first so that worklogs other
        people added to the same tickets are left out of the total.

        Args:
            day: The day to summarize; today when omitted.

        Returns:
            DailyTimeSummaryResult with one entry per worklog and the total
            rounded to two decimals of an hour.
        """
        day = day or date.today()

        def failed(step: StepOutcome) -> DailyTimeSummaryResult:
            return DailyTimeSummaryResult(
                success=False,
                day=day,
                message=f"Failed to fetch time log summary for {day}",
                error=step.error,
            )

        me = self._current_account_id()
        if me.failed:
            return failed(me)

        found = self._search_worklog_issues(day)
        if found.failed:
            return failed(found)

        entries: list[WorklogEntry] = []
        for issue in found.value:
            collected = self._worklog_entries(issue, day, me.value)
            if collected.failed:
                return failed(collected)
            entries.extend(collected.value)

        total_seconds = sum(e.time_spent_seconds for e in entries)
        total_hours = round(total_seconds / SECONDS_PER_HOUR, 2)
        return DailyTimeSummaryResult(
            success=True,
            day=day,
            entries=entries,
            total_seconds=total_seconds,
            total_hours=total_hours,
            message=f"{len(entries)} worklog entries on {day}, {total_hours:.2f} hours total",
        )
