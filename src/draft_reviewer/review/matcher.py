"""
Comment Matcher

Decides whether a previously drafted review comment and a freshly
suggested one describe the same finding, using location and token
overlap of the comment text.
"""

import logging
from typing import FrozenSet

from ..models.review import Comment


logger = logging.getLogger(__name__)


def tokenize(text: str) -> FrozenSet[str]:
    """
    Normalize comment text into a set of unique tokens.

    Lowercases, strips every character that is neither alphanumeric nor
    whitespace, and splits on whitespace. Single-character tokens ("a", "i")
    are ignored unless the text consists of nothing else.
    """
    normalized = ''.join(
        ch for ch in (text or '').lower()
        if ch.isalnum() or ch.isspace()
    )
    tokens = frozenset(normalized.split())
    significant = frozenset(token for token in tokens if len(token) > 1)
    return significant or tokens


def similarity(a: str, b: str) -> float:
    """
    Jaccard similarity of two comment texts on a 0-100 scale.

    Both texts empty counts as identical (100), exactly one empty as
    unrelated (0).
    """
    tokens_a = tokenize(a)
    tokens_b = tokenize(b)

    if not tokens_a and not tokens_b:
        return 100.0
    if not tokens_a or not tokens_b:
        return 0.0

    return len(tokens_a & tokens_b) * 100 / len(tokens_a | tokens_b)


class CommentMatcher:
    """
    Matches an existing comment against a new one.

    A match requires all three of: same path, line distance within
    `line_tolerance`, and text similarity of at least
    `similarity_threshold` percent.
    """

    def __init__(self, line_tolerance: int = 5, similarity_threshold: float = 60.0):
        """
        Initialize comment matcher.

        Args:
            line_tolerance: Maximum line distance between matching comments
            similarity_threshold: Minimum similarity (0-100) between matching bodies
        """
        if line_tolerance < 0:
            raise ValueError("Line tolerance must be non-negative")
        if not 0.0 <= similarity_threshold <= 100.0:
            raise ValueError("Similarity threshold must be between 0 and 100")

        self.line_tolerance = line_tolerance
        self.similarity_threshold = similarity_threshold

    def similarity(self, a: str, b: str) -> float:
        return similarity(a, b)

    def matches(self, existing: Comment, new: Comment) -> bool:
        """
        Check whether two comments refer to the same finding.

        Args:
            existing: Comment from the current pending review
            new: Freshly suggested comment

        Returns:
            True if path, line proximity and text similarity all agree
        """
        if existing.path != new.path:
            return False

        if abs(existing.line - new.line) > self.line_tolerance:
            return False

        score = similarity(existing.body, new.body)
        if score < self.similarity_threshold:
            return False

        logger.debug(
            f"Matched {existing.location} with {new.location} "
            f"(similarity {score:.1f})"
        )
        return True
