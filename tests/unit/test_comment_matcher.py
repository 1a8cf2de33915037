"""
Unit tests for comment similarity and matching.
"""

import pytest

from draft_reviewer.models.review import Comment
from draft_reviewer.review.matcher import CommentMatcher, similarity, tokenize


class TestSimilarity:
    """Unit tests for the Jaccard similarity score."""

    def test_identical_text(self):
        assert similarity("fix the bug", "fix the bug") == 100

    def test_both_empty(self):
        assert similarity("", "") == 100

    def test_one_empty(self):
        assert similarity("abc", "") == 0
        assert similarity("", "abc") == 0

    def test_case_and_punctuation_ignored(self):
        """Test normalization removes case and punctuation."""
        assert similarity("Fix the bug!", "fix, the BUG") == 100

    def test_repeated_words_counted_once(self):
        assert similarity("null null check", "null check") == 100

    def test_partial_overlap(self):
        """Test |intersection| / |union| on the 0-100 scale."""
        assert similarity("rename this variable", "rename this function") == 50

    def test_single_letter_words_ignored(self):
        """
        Test articles like 'a' do not dilute the score.

        The drafted "consider null check" and the reworded "consider adding a
        null check here" two lines below must count as the same finding:
        3 shared of 5 distinct words reaches the 60 threshold, while counting
        "a" as a word would give 3 of 6 (50) and drop the drafted comment.
        """
        score = similarity("consider null check", "consider adding a null check here")

        assert score == 60

    def test_single_letter_text_is_not_empty(self):
        assert similarity("a", "") == 0
        assert similarity("a", "a") == 100

    def test_tokenize(self):
        assert tokenize("Don't use `eval()` here.") == frozenset({'dont', 'use', 'eval', 'here'})


class TestCommentMatcher:
    """Unit tests for CommentMatcher.matches."""

    def setup_method(self):
        """Set up test fixtures."""
        self.matcher = CommentMatcher()

    def test_defaults(self):
        assert self.matcher.line_tolerance == 5
        assert self.matcher.similarity_threshold == 60.0

    def test_match_all_conditions(self):
        existing = Comment(path='file.py', line=10, body='consider null check')
        new = Comment(path='file.py', line=12, body='consider adding a null check here')

        assert self.matcher.matches(existing, new) is True

    def test_different_path_never_matches(self):
        """Test identical bodies on different files do not match."""
        existing = Comment(path='a.py', line=5, body='rename variable')
        new = Comment(path='b.py', line=5, body='rename variable')

        assert self.matcher.matches(existing, new) is False

    def test_line_distance_beyond_tolerance(self):
        """Test distance > 5 fails even at 100% similarity."""
        existing = Comment(path='a.py', line=10, body='rename variable')

        assert self.matcher.matches(existing, Comment(path='a.py', line=16, body='rename variable')) is False
        assert self.matcher.matches(existing, Comment(path='a.py', line=4, body='rename variable')) is False

    def test_line_distance_at_tolerance(self):
        existing = Comment(path='a.py', line=10, body='rename variable')

        assert self.matcher.matches(existing, Comment(path='a.py', line=15, body='rename variable')) is True
        assert self.matcher.matches(existing, Comment(path='a.py', line=5, body='rename variable')) is True

    def test_low_similarity_at_same_line(self):
        """Test similarity < 60% fails even at distance 0."""
        existing = Comment(path='a.py', line=10, body='rename this variable')
        new = Comment(path='a.py', line=10, body='rename this function')

        assert self.matcher.matches(existing, new) is False

    def test_custom_thresholds(self):
        matcher = CommentMatcher(line_tolerance=0, similarity_threshold=50.0)
        existing = Comment(path='a.py', line=10, body='rename this variable')

        assert matcher.matches(existing, Comment(path='a.py', line=10, body='rename this function')) is True
        assert matcher.matches(existing, Comment(path='a.py', line=11, body='rename this variable')) is False

    def test_invalid_thresholds(self):
        with pytest.raises(ValueError):
            CommentMatcher(line_tolerance=-1)
        with pytest.raises(ValueError):
            CommentMatcher(similarity_threshold=120)
