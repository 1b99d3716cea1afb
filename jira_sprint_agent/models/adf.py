"""Atlassian Document Format (ADF) node models.

Only the subset produced by the markup converter is modelled: headings,
paragraphs, and task lists holding text spans with an optional bold mark.
"""

from typing import Any, Literal, Union

from pydantic import BaseModel, Field


class Mark(BaseModel):
    """Inline formatting mark."""

    type: Literal["strong"] = "strong"


class TextSpan(BaseModel):
    """A run of text, optionally bold."""

    type: Literal["text"] = "text"
    text: str
    marks: list[Mark] | None = None

    @property
    def bold(self) -> bool:
        return bool(self.marks) and any(m.type == "strong" for m in self.marks)

    @classmethod
    def plain(cls, text: str) -> "TextSpan":
        return cls(text=text)

    @classmethod
    def strong(cls, text: str) -> "TextSpan":
        return cls(text=text, marks=[Mark()])


class HeadingAttrs(BaseModel):
    level: int = Field(default=1, ge=1, le=6)


class HeadingNode(BaseModel):
    type: Literal["heading"] = "heading"
    attrs: HeadingAttrs = Field(default_factory=HeadingAttrs)
    content: list[TextSpan] = Field(default_factory=list)


class ParagraphNode(BaseModel):
    type: Literal["paragraph"] = "paragraph"
    content: list[TextSpan] = Field(default_factory=list)


class TaskItemAttrs(BaseModel):
    state: Literal["TODO", "DONE"] = "TODO"


class TaskItemNode(BaseModel):
    type: Literal["taskItem"] = "taskItem"
    attrs: TaskItemAttrs = Field(default_factory=TaskItemAttrs)
    content: list[TextSpan] = Field(default_factory=list)


class TaskListNode(BaseModel):
    """Checklist block. The converter emits one item per list."""

    type: Literal["taskList"] = "taskList"
    content: list[TaskItemNode] = Field(default_factory=list)


DocumentNode = Union[HeadingNode, ParagraphNode, TaskListNode]


class AdfDocument(BaseModel):
    """Root container sent as a rich-text field value."""

    type: Literal["doc"] = "doc"
    version: Literal[1] = 1
    content: list[DocumentNode] = Field(default_factory=list)

    def to_payload(self) -> dict[str, Any]:
        """Serialize into the JSON shape Jira expects."""
        return self.model_dump(exclude_none=True)
