"""
GitHub Integration Layer

This module provides GitHub API integration for pull request reviews
and unified diff parsing.
"""

from .client import GitHubClient, GitHubAPIError, RateLimitExceeded
from .parser import UnifiedDiffParser

__all__ = ['GitHubClient', 'GitHubAPIError', 'RateLimitExceeded', 'UnifiedDiffParser']
