"""
Draft Reviewer

GitHub Pull Request 리뷰 결과를 pending(draft) 리뷰로 게시하는 코어 라이브러리
"""

__version__ = "1.0.0"

from .api import DraftReviewAPI, ReviewRequest

__all__ = ["DraftReviewAPI", "ReviewRequest"]
