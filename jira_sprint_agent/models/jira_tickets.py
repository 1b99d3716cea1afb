"""Jira ticket models.

Note: status names are flexible strings. The statuses a ticket can move to
depend on the project's workflow and are always read from Jira, never
assumed locally.
"""

from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field

IssueType = Literal["Story", "Bug", "Task", "Sub-task"]
Priority = Literal["High", "Medium", "Low"]

MAX_SUMMARY_LENGTH: int = 100
MAX_DESCRIPTION_LENGTH: int = 2000
MAX_STORY_POINTS: int = 13


class TicketDraft(BaseModel):
    """Everything needed to create a ticket."""

    model_config = ConfigDict(frozen=True)

    project: str = Field(min_length=1, description="Jira project key (e.g., BFA).")
    issue_type: IssueType = Field(description="Issue type.")
    summary: str = Field(
        min_length=1,
        max_length=MAX_SUMMARY_LENGTH,
        description="Ticket summary/title.",
    )
    description: str = Field(
        default="",
        max_length=MAX_DESCRIPTION_LENGTH,
        description="Ticket description in lightweight markup.",
    )
    priority: Priority = Field(description="Priority level.")
    story_points: int | None = Field(
        default=None,
        ge=1,
        le=MAX_STORY_POINTS,
        description="Estimated story points (1-13).",
    )
    parent_key: str | None = Field(
        default=None, description="Parent ticket key when creating a sub-task."
    )


class TicketPatch(BaseModel):
    """A partial update. Only fields that are set are sent to Jira."""

    model_config = ConfigDict(frozen=True)

    ticket_key: str = Field(min_length=1, description="Jira ticket key (e.g., BFA-101).")
    summary: str | None = Field(
        default=None, min_length=1, max_length=MAX_SUMMARY_LENGTH
    )
    description: str | None = Field(default=None, max_length=MAX_DESCRIPTION_LENGTH)
    priority: Priority | None = None
    assignee: str | None = Field(default=None, description="Assignee account id.")
    story_points: int | None = Field(default=None, ge=1, le=MAX_STORY_POINTS)
    status: str | None = Field(default=None, description="Target status name.")


class Sprint(BaseModel):
    """Jira sprint information."""

    id: int
    state: str = "active"
    name: str | None = None


class TransitionOption(BaseModel):
    """A workflow move Jira currently offers for a ticket."""

    id: str
    to_status: str

    @classmethod
    def from_api(cls, raw: dict[str, Any]) -> "TransitionOption":
        return cls(
            id=str(raw.get("id", "")),
            to_status=(raw.get("to") or {}).get("name", ""),
        )

    def matches(self, status: str) -> bool:
        """Case-insensitive comparison against the destination status."""
        return self.to_status.lower() == status.lower()


class SprintTicket(BaseModel):
    """Ticket summary as listed on a sprint."""

    key: str
    summary: str
    status: str
    assignee: str | None = None
    time_spent: str | None = Field(
        default=None, description="Jira's formatted time spent, e.g. '3h 30m'."
    )

    @classmethod
    def from_api(cls, raw: dict[str, Any]) -> "SprintTicket":
        fields: dict[str, Any] = raw.get("fields") or {}
        return cls(
            key=raw.get("key", ""),
            summary=fields.get("summary", ""),
            status=(fields.get("status") or {}).get("name", ""),
            assignee=(fields.get("assignee") or {}).get("displayName"),
            time_spent=(fields.get("timetracking") or {}).get("timeSpent"),
        )


class WorklogEntry(BaseModel):
    """A single worklog line in a daily summary."""

    ticket_key: str
    ticket_summary: str = ""
    started: str = Field(description="ISO timestamp the work started.")
    time_spent_seconds: int
    comment: str | None = None
