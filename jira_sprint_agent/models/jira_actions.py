"""Models for the outcome of Jira operations."""

from datetime import date
from enum import Enum
from typing import Any

from pydantic import BaseModel, Field

from jira_sprint_agent.models.jira_tickets import SprintTicket, WorklogEntry


class StepStatus(str, Enum):
    """Outcome of one remote step inside an operation."""

    OK = "ok"
    ABSENT = "absent"
    FAILED = "failed"


class StepOutcome(BaseModel):
    """Tagged result of a single pipeline step."""

    status: StepStatus
    value: Any = None
    error: str | None = None

    @property
    def ok(self) -> bool:
        return self.status is StepStatus.OK

    @property
    def failed(self) -> bool:
        return self.status is StepStatus.FAILED

    @classmethod
    def success(cls, value: Any = None) -> "StepOutcome":
        return cls(status=StepStatus.OK, value=value)

    @classmethod
    def absent(cls) -> "StepOutcome":
        return cls(status=StepStatus.ABSENT)

    @classmethod
    def failure(cls, error: str) -> "StepOutcome":
        return cls(status=StepStatus.FAILED, error=error)


class CreateTicketResult(BaseModel):
    """Result of creating a ticket.

    `success` reports the creation itself. Sprint scheduling is reported
    separately by `sprint_assigned`, so a ticket can exist without being
    in a sprint.
    """

    success: bool
    ticket_key: str | None = None
    ticket_url: str | None = None
    sprint_id: int | None = None
    sprint_assigned: bool = False
    message: str
    error: str | None = None


class UpdateTicketResult(BaseModel):
    """Result of updating ticket fields and/or status."""

    success: bool
    ticket_key: str
    message: str
    updated_fields: list[str] = Field(default_factory=list)
    transitioned_to: str | None = None
    error: str | None = None


class LogWorkResult(BaseModel):
    """Result of logging time on a ticket."""

    success: bool
    ticket_key: str
    hours_logged: float = 0.0
    message: str
    error: str | None = None


class ListSprintTicketsResult(BaseModel):
    """Result of listing tickets in the active sprint."""

    success: bool
    project_key: str
    sprint_id: int | None = None
    tickets: list[SprintTicket] = Field(default_factory=list)
    message: str
    error: str | None = None


class DailyTimeSummaryResult(BaseModel):
    """Time logged by the current user on one day."""

    success: bool
    day: date
    entries: list[WorklogEntry] = Field(default_factory=list)
    total_seconds: int = 0
    total_hours: float = 0.0
    message: str
    error: str | None = None
