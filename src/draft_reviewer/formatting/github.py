"""
GitHub Review Body Formatter

Builds the top-level body of a pending review: the operator summary plus
the findings that could not be anchored to a diff line.
"""

import logging
from typing import List, Sequence

from ..models.review import UnmappedComment


logger = logging.getLogger(__name__)


class ReviewBodyFormatter:
    """
    Formats the review body sent with the create-review request.
    """

    def __init__(self, notes_heading: str = "**Additional Notes:**", max_body_length: int = 65536):
        """
        Initialize review body formatter.

        Args:
            notes_heading: Heading placed above unmapped findings
            max_body_length: GitHub's body length limit
        """
        self.notes_heading = notes_heading
        self.max_body_length = max_body_length

    def format_body(self, summary: str, unmapped: Sequence[UnmappedComment] = ()) -> str:
        """
        Format the review body.

        Args:
            summary: Overall review summary
            unmapped: Findings outside the diff, listed as notes

        Returns:
            Markdown body, truncated to the platform limit if needed
        """
        sections = []

        if summary and summary.strip():
            sections.append(summary.strip())

        if unmapped:
            notes = [self._format_note(item) for item in unmapped]
            sections.append(self.notes_heading + "\n\n" + "\n".join(notes))

        body = "\n\n".join(sections)

        if len(body) > self.max_body_length:
            logger.warning(f"Review body is {len(body)} characters, truncating to {self.max_body_length}")
            body = self._truncate_body(body)

        return body

    def _format_note(self, item: UnmappedComment) -> str:
        lines = item.comment.body.strip().splitlines() or ['']
        first, rest = lines[0], lines[1:]
        note = f"- **{item.comment.location}**: {first}"
        # Continuation lines stay inside the list item
        for line in rest:
            note += f"\n  {line}" if line else "\n"
        return note

    def _truncate_body(self, body: str) -> str:
        """Truncate body to fit GitHub limits."""
        truncation_msg = "\n\n---\n*Review body truncated due to length limit.*"

        truncate_at = self.max_body_length - len(truncation_msg)
        truncated = body[:truncate_at]

        # Prefer a line boundary if one is reasonably close
        last_newline = truncated.rfind('\n')
        if last_newline > truncate_at - 500:
            truncated = truncated[:last_newline]

        return truncated + truncation_msg


def format_notes_count(unmapped: List[UnmappedComment]) -> str:
    """Short human-readable summary of unmapped findings by reason."""
    line_level = sum(1 for item in unmapped if item.file_in_diff)
    file_level = len(unmapped) - line_level
    return f"{len(unmapped)} notes ({file_level} outside changed files, {line_level} outside changed lines)"
