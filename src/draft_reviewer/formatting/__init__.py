"""
Review Formatting

This module builds the review body posted alongside inline comments.
"""

from .github import ReviewBodyFormatter

__all__ = ['ReviewBodyFormatter']
