"""
Review Lifecycle

This module provides diff position resolution, comment matching,
reconciliation, and pending review management.
"""

from .positions import PositionResolver, PositionNotFound, FileNotInDiff, LineNotInDiff
from .matcher import CommentMatcher
from .reconciler import ReviewReconciler
from .manager import PendingReviewManager, RemoteDeleteFailed, RemoteCreateFailed

__all__ = [
    'PositionResolver',
    'PositionNotFound',
    'FileNotInDiff',
    'LineNotInDiff',
    'CommentMatcher',
    'ReviewReconciler',
    'PendingReviewManager',
    'RemoteDeleteFailed',
    'RemoteCreateFailed',
]
