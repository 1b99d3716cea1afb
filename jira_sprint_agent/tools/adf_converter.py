"""Conversion between lightweight markup and Atlassian Document Format.

`markup_to_adf` turns ticket text written by the agent into the document
tree Jira requires for rich-text fields. `adf_to_text` goes the other way
for display, e.g. worklog comments in a time summary.
"""

import logging
from typing import Any

from jira_sprint_agent.models.adf import (
    AdfDocument,
    DocumentNode,
    HeadingNode,
    ParagraphNode,
    TaskItemNode,
    TaskListNode,
    TextSpan,
)

logger: logging.Logger = logging.getLogger(__name__)

HEADING_PREFIX: str = "# "
CHECKLIST_PREFIX: str = "- [ ] "
BOLD_DELIMITER: str = "**"


def parse_bold_spans(line: str) -> list[TextSpan]:
    """Split a line into plain and bold spans.

    Each opening `**` pairs with the next `**`; there is no nesting. An
    unmatched `**` stays in the text literally. Empty pairs (`****`) are
    consumed without producing a span.

    Args:
        line: A single line of markup.

    Returns:
        Spans in their original order.
    """
    spans: list[TextSpan] = []
    pos = 0

    while True:
        start = line.find(BOLD_DELIMITER, pos)
        if start == -1:
            break
        end = line.find(BOLD_DELIMITER, start + len(BOLD_DELIMITER))
        if end == -1:
            break

        if start > pos:
            spans.append(TextSpan.plain(line[pos:start]))
        inner = line[start + len(BOLD_DELIMITER) : end]
        if inner:
            spans.append(TextSpan.strong(inner))
        pos = end + len(BOLD_DELIMITER)

    if pos < len(line):
        spans.append(TextSpan.plain(line[pos:]))

    return spans


def _convert_line(line: str) -> DocumentNode:
    if line.startswith(HEADING_PREFIX):
        text = line[len(HEADING_PREFIX) :]
        return HeadingNode(content=[TextSpan.plain(text)] if text else [])

    if line.startswith(CHECKLIST_PREFIX):
        text = line[len(CHECKLIST_PREFIX) :]
        item = TaskItemNode(content=[TextSpan.plain(text)] if text else [])
        return TaskListNode(content=[item])

    return ParagraphNode(content=parse_bold_spans(line))


def markup_to_adf(markup: str) -> AdfDocument:
    """Convert markup text to an ADF document.

    Every non-blank line becomes exactly one block: `# ` lines become level 1
    headings, `- [ ] ` lines become single-item checklists, and anything else
    becomes a paragraph with `**bold**` spans. Blank lines are dropped.

    Args:
        markup: Markup text, possibly multi-line.

    Returns:
        The document tree.
    """
    blocks: list[DocumentNode] = [
        _convert_line(line)
        for line in markup.replace("\r\n", "\n").split("\n")
        if line.strip()
    ]
    logger.debug("Converted markup into %d ADF blocks", len(blocks))
    return AdfDocument(content=blocks)


def text_to_adf(text: str) -> AdfDocument:
    """Wrap text in a single-paragraph document without parsing markup."""
    return AdfDocument(content=[ParagraphNode(content=[TextSpan.plain(text)])])


def _render_inline(nodes: list[dict[str, Any]]) -> str:
    rendered: list[str] = []
    for node in nodes:
        node_type = node.get("type")
        if node_type == "text":
            text = node.get("text", "")
            for mark in node.get("marks", []):
                if mark.get("type") == "strong":
                    text = f"**{text}**"
                elif mark.get("type") == "code":
                    text = f"`{text}`"
            rendered.append(text)
        elif node_type == "hardBreak":
            rendered.append("\n")
    return "".join(rendered)


def _render_list_items(items: list[dict[str, Any]], marker: str) -> list[str]:
    lines: list[str] = []
    for item in items:
        parts = [
            _render_inline(p.get("content", []))
            for p in item.get("content", [])
            if p.get("type") == "paragraph"
        ]
        if parts:
            lines.append(f"{marker}{' '.join(parts)}")
    return lines


def adf_to_text(adf: dict[str, Any] | None) -> str:
    """Render an ADF document as markup-ish plain text.

    Unknown block types are skipped.

    Args:
        adf: ADF document as a dictionary.

    Returns:
        Text with one block per paragraph, separated by blank lines.
    """
    if not adf:
        return ""

    parts: list[str] = []
    for block in adf.get("content", []):
        block_type = block.get("type")
        block_content: list[dict[str, Any]] = block.get("content", [])

        if block_type == "paragraph":
            text = _render_inline(block_content)
            if text:
                parts.append(text)

        elif block_type == "heading":
            level = block.get("attrs", {}).get("level", 1)
            parts.append(f"{'#' * level} {_render_inline(block_content)}")

        elif block_type == "taskList":
            lines = []
            for item in block_content:
                done = item.get("attrs", {}).get("state") == "DONE"
                box = "- [x] " if done else CHECKLIST_PREFIX
                lines.append(f"{box}{_render_inline(item.get('content', []))}")
            if lines:
                parts.append("\n".join(lines))

        elif block_type == "bulletList":
            lines = _render_list_items(block_content, "- ")
            if lines:
                parts.append("\n".join(lines))

        elif block_type == "orderedList":
            start = block.get("attrs", {}).get("order", 1)
            lines = [
                f"{start + idx}. {line}"
                for idx, line in enumerate(_render_list_items(block_content, ""))
            ]
            if lines:
                parts.append("\n".join(lines))

    return "\n\n".join(parts)
