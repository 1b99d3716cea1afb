"""Tests for jira_tickets module."""

import pytest
from jira_sprint_agent.models.jira_tickets import (
    Sprint,
    SprintTicket,
    TicketDraft,
    TicketPatch,
    TransitionOption,
)
from pydantic import ValidationError


def _draft(**overrides) -> TicketDraft:
    values = {
        "project": "BFA",
        "issue_type": "Task",
        "summary": "Do the thing",
        "description": "Details",
        "priority": "Medium",
    }
    values.update(overrides)
    return TicketDraft(**values)


class TestTicketDraft:
    """Tests for TicketDraft model."""

    def test_minimal_draft(self) -> None:
        """Test optional fields default to None."""
        draft = _draft()

        assert draft.story_points is None
        assert draft.parent_key is None

    @pytest.mark.parametrize("issue_type", ["Story", "Bug", "Task", "Sub-task"])
    def test_issue_types(self, issue_type: str) -> None:
        """Test every supported issue type is accepted."""
        assert _draft(issue_type=issue_type).issue_type == issue_type

    @pytest.mark.parametrize(
        "overrides",
        [
            {"issue_type": "Epic"},
            {"priority": "Urgent"},
            {"summary": ""},
            {"summary": "x" * 101},
            {"description": "x" * 2001},
            {"story_points": 0},
            {"story_points": 14},
            {"project": ""},
        ],
    )
    def test_invalid_values(self, overrides: dict) -> None:
        """Test out-of-range values are rejected."""
        with pytest.raises(ValidationError):
            _draft(**overrides)

    @pytest.mark.parametrize("points", [1, 13])
    def test_story_point_bounds(self, points: int) -> None:
        """Test the story point range is inclusive."""
        assert _draft(story_points=points).story_points == points

    def test_immutable(self) -> None:
        """Test drafts cannot be modified."""
        draft = _draft()

        with pytest.raises(ValidationError):
            draft.summary = "changed"


class TestTicketPatch:
    """Tests for TicketPatch model."""

    def test_invalid_priority(self) -> None:
        """Test priority is restricted."""
        with pytest.raises(ValidationError):
            TicketPatch(ticket_key="BFA-1", priority="Blocker")

    def test_immutable(self) -> None:
        """Test patches cannot be modified."""
        patch = TicketPatch(ticket_key="BFA-1", status="Done")

        with pytest.raises(ValidationError):
            patch.status = "To Do"


class TestSprint:
    """Tests for Sprint model."""

    def test_from_agile_payload(self) -> None:
        """Test extra keys of an agile sprint entry are ignored."""
        sprint = Sprint.model_validate(
            {"id": 42, "state": "active", "name": "Sprint 7", "originBoardId": 7}
        )

        assert (sprint.id, sprint.state, sprint.name) == (42, "active", "Sprint 7")

    def test_id_required(self) -> None:
        """Test an entry without an id is rejected."""
        with pytest.raises(ValidationError):
            Sprint.model_validate({"name": "No id"})


class TestTransitionOption:
    """Tests for TransitionOption model."""

    def test_from_api(self) -> None:
        """Test building from a transitions payload entry."""
        option = TransitionOption.from_api(
            {"id": 31, "name": "Start progress", "to": {"name": "In Progress"}}
        )

        assert option.id == "31"
        assert option.to_status == "In Progress"

    @pytest.mark.parametrize("status", ["In Progress", "in progress", "IN PROGRESS"])
    def test_matches_case_insensitive(self, status: str) -> None:
        """Test destination matching ignores case."""
        assert TransitionOption(id="2", to_status="In Progress").matches(status)

    @pytest.mark.parametrize("status", ["Progress", "In Progress ", "Done"])
    def test_no_partial_match(self, status: str) -> None:
        """Test only equal names match."""
        assert not TransitionOption(id="2", to_status="In Progress").matches(status)

    def test_missing_destination(self) -> None:
        """Test a malformed entry never matches a real status."""
        option = TransitionOption.from_api({"id": "9"})

        assert option.to_status == ""
        assert not option.matches("Done")


class TestSprintTicket:
    """Tests for SprintTicket model."""

    def test_from_api_minimal(self) -> None:
        """Test missing fields fall back to defaults."""
        ticket = SprintTicket.from_api({"key": "BFA-3", "fields": {}})

        assert ticket.key == "BFA-3"
        assert ticket.summary == ""
        assert ticket.status == ""
        assert ticket.assignee is None
        assert ticket.time_spent is None
