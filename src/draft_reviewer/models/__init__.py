"""
Data Models

Draft Reviewer 시스템의 핵심 데이터 모델들
"""

from .pr_diff import (
    LineKind,
    Side,
    DiffLine,
    Hunk,
    FileDiff,
    DiffDocument,
    PositionEntry,
    PositionIndex,
)
from .review import (
    ReviewState,
    Comment,
    MappedComment,
    UnmappedComment,
    MatchResult,
    PendingReview,
    ReviewOutcome,
    ReviewCommentPayload,
    CreateReviewPayload,
)

__all__ = [
    "LineKind",
    "Side",
    "DiffLine",
    "Hunk",
    "FileDiff",
    "DiffDocument",
    "PositionEntry",
    "PositionIndex",
    "ReviewState",
    "Comment",
    "MappedComment",
    "UnmappedComment",
    "MatchResult",
    "PendingReview",
    "ReviewOutcome",
    "ReviewCommentPayload",
    "CreateReviewPayload",
]
