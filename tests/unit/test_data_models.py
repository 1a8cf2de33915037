"""
Unit tests for data models and configuration.
"""

import pytest
from pydantic import ValidationError

from draft_reviewer.config import AppConfig, ConfigManager, GitHubConfig, ReviewConfig
from draft_reviewer.models.pr_diff import DiffLine, Hunk, LineKind, PositionEntry, Side
from draft_reviewer.models.review import (
    Comment,
    CreateReviewPayload,
    PendingReview,
    ReviewCommentPayload,
    ReviewState,
)


class TestPRDiffModels:
    """Unit tests for diff data models."""

    def test_position_entry_defaults_to_right(self):
        entry = PositionEntry(position=3, line=12)

        assert entry.side == Side.RIGHT

    def test_position_entry_validation(self):
        with pytest.raises(ValueError):
            PositionEntry(position=0, line=1)
        with pytest.raises(ValueError):
            PositionEntry(position=1, line=0)

    def test_diff_line_validation(self):
        with pytest.raises(ValueError):
            DiffLine(kind=LineKind.REMOVED, content='x', position=1, old_line=1, new_line=1)
        with pytest.raises(ValueError):
            DiffLine(kind=LineKind.ADDED, content='x', position=1, old_line=1, new_line=1)

    def test_hunk_validation(self):
        with pytest.raises(ValueError):
            Hunk(old_start=-1, old_lines=1, new_start=1, new_lines=1, header_position=0)

    def test_models_are_frozen(self):
        entry = PositionEntry(position=3, line=12)

        with pytest.raises(AttributeError):
            entry.position = 4


class TestReviewModels:
    """Unit tests for review data models."""

    def test_comment_validation(self):
        with pytest.raises(ValueError):
            Comment(path='', line=1, body='x')
        with pytest.raises(ValueError):
            Comment(path='a.py', line=0, body='x')

    def test_comment_from_api(self):
        comment = Comment.from_api({
            'id': 501,
            'path': 'src/app.py',
            'line': 14,
            'original_line': 12,
            'body': 'consider null check',
            'user': {'login': 'octocat'},
        })

        assert comment == Comment(path='src/app.py', line=14, body='consider null check', author='octocat', id=501)

    def test_comment_from_api_line_fallbacks(self):
        outdated = Comment.from_api({'id': 1, 'path': 'a.py', 'line': None, 'original_line': 7, 'body': 'x'})
        legacy = Comment.from_api({'id': 2, 'path': 'a.py', 'position': 3, 'body': 'x'})

        assert outdated.line == 7
        assert legacy.line == 3

    def test_comment_from_api_without_line(self):
        with pytest.raises(ValueError):
            Comment.from_api({'id': 1, 'path': 'a.py', 'body': 'x'})

    def test_review_state(self):
        assert ReviewState.parse('pending') == ReviewState.PENDING
        assert ReviewState.PENDING.is_submitted is False
        assert ReviewState.COMMENTED.is_submitted is True
        assert ReviewState.APPROVED.is_submitted is True
        with pytest.raises(ValueError):
            ReviewState.parse('DRAFTED')

    def test_pending_review_must_be_pending(self):
        with pytest.raises(ValueError):
            PendingReview(review_id=1, body='', state=ReviewState.APPROVED)


class TestReviewPayloads:
    """Unit tests for outbound review payload models."""

    def test_empty_comments_are_sent(self):
        """Test an empty comment list still appears in the request body."""
        payload = CreateReviewPayload(body='Summary', comments=[])

        assert payload.to_request() == {'body': 'Summary', 'comments': []}

    def test_comments_field_is_required(self):
        with pytest.raises(ValidationError):
            CreateReviewPayload(body='Summary')

    def test_payload_has_no_event(self):
        request = CreateReviewPayload(body='', comments=[]).to_request()

        assert 'event' not in request

    def test_comment_payload(self):
        payload = CreateReviewPayload(
            body='',
            comments=[ReviewCommentPayload(path='a.py', position=2, body='nit')],
        )

        assert payload.to_request()['comments'] == [{'path': 'a.py', 'position': 2, 'body': 'nit'}]

    def test_comment_payload_validation(self):
        with pytest.raises(ValidationError):
            ReviewCommentPayload(path='a.py', position=0, body='nit')
        with pytest.raises(ValidationError):
            ReviewCommentPayload(path='a.py', position=1, body='   ')
        with pytest.raises(ValidationError):
            ReviewCommentPayload(path='', position=1, body='nit')


class TestConfig:
    """Unit tests for configuration."""

    def test_defaults(self):
        config = AppConfig()

        assert config.review.line_tolerance == 5
        assert config.review.similarity_threshold == 60.0
        assert config.review.exclusive_matching is True

    def test_from_env(self, monkeypatch):
        monkeypatch.setenv('GITHUB_TOKEN', 'ghp_test')
        monkeypatch.setenv('GITHUB_REVIEWER', 'octocat')
        monkeypatch.setenv('LINE_TOLERANCE', '3')
        monkeypatch.setenv('EXCLUSIVE_MATCHING', 'false')

        config = AppConfig.from_env()

        assert config.github.token == 'ghp_test'
        assert config.github.reviewer == 'octocat'
        assert config.review.line_tolerance == 3
        assert config.review.exclusive_matching is False

    def test_from_yaml(self, tmp_path):
        config_file = tmp_path / 'config.yaml'
        config_file.write_text(
            "github:\n"
            "  token: ghp_yaml\n"
            "review:\n"
            "  similarity_threshold: 75\n"
            "debug: true\n",
            encoding='utf-8',
        )

        config = AppConfig.from_yaml(str(config_file))

        assert config.github.token == 'ghp_yaml'
        assert config.review.similarity_threshold == 75
        assert config.review.line_tolerance == 5
        assert config.debug is True

    def test_from_yaml_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            AppConfig.from_yaml(str(tmp_path / 'nope.yaml'))

    def test_validate_collects_errors(self):
        config = AppConfig(review=ReviewConfig(line_tolerance=-1, similarity_threshold=150))

        with pytest.raises(ValueError) as exc_info:
            config.validate()

        message = str(exc_info.value)
        assert 'GitHub token is required' in message
        assert 'Line tolerance' in message
        assert 'Similarity threshold' in message

    def test_to_dict_omits_token(self):
        config = AppConfig(github=GitHubConfig(token='secret'))

        assert 'token' not in config.to_dict()['github']

    def test_config_manager_update(self):
        manager = ConfigManager(AppConfig(github=GitHubConfig(token='ghp_test')))

        manager.update_config(**{'review.line_tolerance': 2})

        assert manager.config.review.line_tolerance == 2
        assert manager.config.github.token == 'ghp_test'

    def test_config_manager_rejects_invalid_update(self):
        manager = ConfigManager(AppConfig(github=GitHubConfig(token='ghp_test')))

        with pytest.raises(ValueError):
            manager.update_config(**{'review.similarity_threshold': -5})

        assert manager.config.review.similarity_threshold == 60.0
