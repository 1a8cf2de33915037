"""
Review Reconciler

Merges the comments of an existing pending review with a freshly
generated set so that repeated runs neither duplicate findings nor
keep stale ones.
"""

import logging
from typing import List, Optional, Sequence, Union

from ..models.review import Comment, MappedComment, MatchResult
from .matcher import CommentMatcher


logger = logging.getLogger(__name__)


FreshComment = Union[Comment, MappedComment]


def _as_comment(item: FreshComment) -> Comment:
    return item.comment if isinstance(item, MappedComment) else item


class ReviewReconciler:
    """
    Partitions (existing, fresh) comment sets into kept / added / dropped.

    Fresh comments are matched greedily in order against the existing
    comments; the first existing comment that matches wins and the fresh
    wording is kept. In exclusive mode an existing comment can be consumed
    by at most one fresh comment. `dropped` always lists the existing
    comments no fresh comment matched.
    """

    def __init__(self, matcher: Optional[CommentMatcher] = None, exclusive: bool = True):
        """
        Initialize review reconciler.

        Args:
            matcher: CommentMatcher instance (default thresholds if omitted)
            exclusive: Remove an existing comment from the candidate pool once matched
        """
        self.matcher = matcher or CommentMatcher()
        self.exclusive = exclusive

    def reconcile(self, existing: Sequence[Comment], fresh: Sequence[FreshComment]) -> MatchResult:
        """
        Reconcile existing pending-review comments with fresh suggestions.

        Args:
            existing: Comments currently on the pending review
            fresh: Newly suggested comments (plain or already position-mapped)

        Returns:
            MatchResult whose `outgoing` list is the comment set to post
        """
        result = MatchResult()
        candidates: List[Comment] = list(existing)
        matched_ids = set()

        for item in fresh:
            new_comment = _as_comment(item)
            match = self._first_match(candidates, new_comment)

            if match is None:
                result.added.append(item)
                continue

            result.kept.append(item)
            matched_ids.add(id(match))
            if self.exclusive:
                candidates = [c for c in candidates if c is not match]

        result.dropped = [comment for comment in existing if id(comment) not in matched_ids]

        logger.info(
            f"Reconciled {len(existing)} existing with {len(fresh)} fresh comments: "
            f"kept={len(result.kept)}, added={len(result.added)}, dropped={len(result.dropped)}"
        )
        return result

    def _first_match(self, candidates: Sequence[Comment], new_comment: Comment) -> Optional[Comment]:
        for candidate in candidates:
            if self.matcher.matches(candidate, new_comment):
                return candidate
        return None
