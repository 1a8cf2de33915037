"""
Review Data Models

리뷰 코멘트, pending 리뷰, 리뷰 생성 요청 관련 데이터 모델들
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, field_validator

from .pr_diff import PositionEntry


class ReviewState(Enum):
    """GitHub 리뷰 상태"""
    PENDING = "PENDING"
    APPROVED = "APPROVED"
    CHANGES_REQUESTED = "CHANGES_REQUESTED"
    COMMENTED = "COMMENTED"
    DISMISSED = "DISMISSED"

    @property
    def is_submitted(self) -> bool:
        """PENDING 이외의 상태는 모두 제출된 것으로 본다"""
        return self != ReviewState.PENDING

    @classmethod
    def parse(cls, value: Optional[str]) -> "ReviewState":
        try:
            return cls(str(value).upper())
        except ValueError:
            raise ValueError(f"Unknown review state: {value}")


@dataclass
class Comment:
    """
    파일 라인 단위 리뷰 코멘트

    기존 pending 리뷰에서 가져온 코멘트는 `id`를 가지며,
    새로 제안된 코멘트는 생성 전까지 `id`가 없다.
    """
    path: str
    line: int
    body: str
    author: Optional[str] = None
    id: Optional[int] = None

    def __post_init__(self):
        """데이터 검증"""
        if not self.path:
            raise ValueError("Comment path cannot be empty")
        if self.line <= 0:
            raise ValueError("Line number must be positive")

    @property
    def location(self) -> str:
        return f"{self.path}:{self.line}"

    @classmethod
    def from_api(cls, data: Dict[str, Any]) -> "Comment":
        """GitHub 리뷰 코멘트 응답에서 생성 (line -> original_line -> position 순)"""
        line = data.get('line') or data.get('original_line') or data.get('position')
        if not line:
            raise ValueError(f"Review comment {data.get('id')} has no line information")

        user = data.get('user') or {}
        return cls(
            path=data['path'],
            line=int(line),
            body=data.get('body') or '',
            author=user.get('login'),
            id=data.get('id'),
        )


@dataclass
class MappedComment:
    """diff 좌표가 확인된 코멘트"""
    comment: Comment
    entry: PositionEntry

    @property
    def path(self) -> str:
        return self.comment.path

    @property
    def line(self) -> int:
        return self.comment.line

    @property
    def body(self) -> str:
        return self.comment.body


@dataclass
class UnmappedComment:
    """diff 좌표로 변환하지 못한 코멘트 (리뷰 본문 요약으로 이동)"""
    comment: Comment
    reason: Exception

    @property
    def file_in_diff(self) -> bool:
        """파일은 diff에 있지만 라인만 벗어난 경우 True"""
        from ..review.positions import LineNotInDiff
        return isinstance(self.reason, LineNotInDiff)


@dataclass
class MatchResult:
    """기존 코멘트와 새 코멘트의 비교 결과"""
    kept: List[MappedComment] = field(default_factory=list)
    added: List[MappedComment] = field(default_factory=list)
    dropped: List[Comment] = field(default_factory=list)

    @property
    def outgoing(self) -> List[MappedComment]:
        """새 리뷰로 전송할 코멘트 (kept + added)"""
        return self.kept + self.added

    def summary(self) -> Dict[str, int]:
        return {
            'kept': len(self.kept),
            'added': len(self.added),
            'dropped': len(self.dropped),
        }


@dataclass
class PendingReview:
    """리뷰어가 소유한 제출 전(pending) 리뷰"""
    review_id: int
    body: str
    comments: List[Comment] = field(default_factory=list)
    author: Optional[str] = None
    state: ReviewState = ReviewState.PENDING

    def __post_init__(self):
        """데이터 검증"""
        if self.state != ReviewState.PENDING:
            raise ValueError(f"Pending review {self.review_id} is in state {self.state.value}")


@dataclass
class ReviewOutcome:
    """pending 리뷰 생성 결과"""
    review_id: int
    review_url: str
    state: Optional[ReviewState]  # 응답에서 상태를 읽을 수 없으면 None
    inline_count: int
    summary_count: int
    replaced_existing: bool
    delete_failed: bool = False
    kept: int = 0
    added: int = 0
    dropped: int = 0
    skipped: int = 0

    @property
    def is_pending(self) -> bool:
        return self.state == ReviewState.PENDING

    def to_dict(self) -> Dict[str, Any]:
        return {
            'success': True,
            'review_id': self.review_id,
            'review_url': self.review_url,
            'state': self.state.value if self.state else None,
            'inline_count': self.inline_count,
            'summary_count': self.summary_count,
            'replaced_existing': self.replaced_existing,
            'delete_failed': self.delete_failed,
            'kept': self.kept,
            'added': self.added,
            'dropped': self.dropped,
            'skipped': self.skipped,
        }


# Pydantic models for outbound API validation
class ReviewCommentPayload(BaseModel):
    """리뷰 생성 요청의 인라인 코멘트"""
    path: str
    position: int
    body: str

    @field_validator('path', 'body')
    @classmethod
    def validate_non_empty(cls, v):
        if not v.strip():
            raise ValueError('Field cannot be empty')
        return v

    @field_validator('position')
    @classmethod
    def validate_position(cls, v):
        if v < 1:
            raise ValueError('Position must be positive')
        return v


class CreateReviewPayload(BaseModel):
    """
    리뷰 생성 요청 본문

    `comments`는 비어 있어도 반드시 포함해야 한다. 필드가 없으면
    GitHub가 리뷰를 즉시 COMMENTED 상태로 제출한다.
    `event` 필드는 의도적으로 존재하지 않는다.
    """
    body: str
    comments: List[ReviewCommentPayload]

    def to_request(self) -> Dict[str, Any]:
        return {
            'body': self.body,
            'comments': [comment.model_dump() for comment in self.comments],
        }
