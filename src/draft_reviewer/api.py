"""
Main Draft Reviewer API

Main interface that runs one review run end to end: from the diff and
the suggested findings to a reconciled pending review on GitHub.
"""

import logging
from typing import Dict, List, Optional, Sequence, Tuple
from dataclasses import dataclass, field

from .github.client import GitHubClient
from .github.parser import UnifiedDiffParser
from .review.matcher import CommentMatcher
from .review.reconciler import ReviewReconciler
from .review.positions import PositionResolver
from .review.manager import PendingReviewManager
from .formatting.github import ReviewBodyFormatter
from .models.pr_diff import PositionIndex
from .models.review import Comment, ReviewOutcome
from .config import AppConfig


logger = logging.getLogger(__name__)


@dataclass
class ReviewRequest:
    """Request for one pending review run."""
    repository: str
    pr_number: int
    comments: List[Comment] = field(default_factory=list)
    summary: str = ""
    diff: Optional[str] = None
    reviewer: Optional[str] = None

    def __post_init__(self):
        if self.pr_number <= 0:
            raise ValueError("PR number must be positive")
        if self.repository.count('/') != 1 or not all(self.repository.split('/')):
            raise ValueError("Repository must be in format 'owner/repo'")

    @property
    def owner_repo(self) -> Tuple[str, str]:
        owner, repo = self.repository.split('/')
        return owner, repo

    @classmethod
    def from_dict(cls, data: Dict) -> "ReviewRequest":
        """Build a request from the JSON shape upstream collaborators emit."""
        comments = [
            Comment(path=c['path'], line=int(c['line']), body=c['body'])
            for c in data.get('comments', [])
        ]
        repository = data.get('repository') or f"{data['owner']}/{data['repo']}"
        return cls(
            repository=repository,
            pr_number=int(data['pr_number']),
            comments=comments,
            summary=data.get('summary', ''),
            diff=data.get('diff'),
            reviewer=data.get('reviewer_username') or data.get('reviewer'),
        )


class DraftReviewAPI:
    """
    Main Draft Reviewer API interface.

    Runs the review pipeline:
    1. Parse the diff once into a position index
    2. Map every suggested comment to a diff position (or a note)
    3. Reconcile with the reviewer's existing pending review
    4. Replace the pending review on GitHub
    """

    def __init__(self, config: Optional[AppConfig] = None, client: Optional[GitHubClient] = None):
        """
        Initialize Draft Reviewer API.

        Args:
            config: Optional configuration object
            client: Optional GitHubClient (built from config if omitted)
        """
        self.config = config or AppConfig.from_env()

        logger.info("Initializing Draft Reviewer API components...")

        self.client = client or GitHubClient(
            token=self.config.github.token,
            base_url=self.config.github.api_base_url,
        )
        self.diff_parser = UnifiedDiffParser()
        self.matcher = CommentMatcher(
            line_tolerance=self.config.review.line_tolerance,
            similarity_threshold=self.config.review.similarity_threshold,
        )
        self.reconciler = ReviewReconciler(
            matcher=self.matcher,
            exclusive=self.config.review.exclusive_matching,
        )
        self.formatter = ReviewBodyFormatter(
            notes_heading=self.config.review.notes_heading,
            max_body_length=self.config.review.max_body_length,
        )

    def build_index(self, request: ReviewRequest) -> PositionIndex:
        """Parse the request diff, fetching it from GitHub when not supplied."""
        diff_text = request.diff
        if diff_text is None:
            owner, repo = request.owner_repo
            diff_text = self.client.get_pull_request_diff(owner, repo, request.pr_number)

        return self.diff_parser.index(diff_text)

    def resolve_reviewer(self, request: ReviewRequest) -> str:
        reviewer = request.reviewer or self.config.github.reviewer
        if reviewer:
            return reviewer
        return self.client.get_authenticated_user()['login']

    def review_pr(self, request: ReviewRequest) -> ReviewOutcome:
        """
        Post the suggested comments as the reviewer's pending review.

        Args:
            request: ReviewRequest with the PR, diff and suggested comments

        Returns:
            ReviewOutcome of the created pending review

        Raises:
            RemoteCreateFailed: The review could not be created
        """
        owner, repo = request.owner_repo
        logger.info(f"Starting pending review run for {request.repository}#{request.pr_number}")

        index = self.build_index(request)
        mapped, unmapped = PositionResolver(index).map_comments(request.comments)

        manager = PendingReviewManager(
            client=self.client,
            owner=owner,
            repo=repo,
            pr_number=request.pr_number,
            reviewer=self.resolve_reviewer(request),
            reconciler=self.reconciler,
            formatter=self.formatter,
        )
        return manager.publish(mapped, summary=request.summary, unmapped=unmapped)

    def map_positions(self, diff_text: str, targets: Sequence[Comment]) -> List[Dict]:
        """
        Map (path, line) targets to diff coordinates without touching GitHub.

        Returns:
            One dict per target: `position`/`line`/`side` or an `error`
        """
        resolver = PositionResolver(self.diff_parser.index(diff_text))
        mapped, unmapped = resolver.map_comments(targets)

        by_comment = {id(m.comment): m for m in mapped}
        errors = {id(u.comment): u for u in unmapped}

        mappings = []
        for target in targets:
            entry = by_comment.get(id(target))
            if entry is not None:
                mappings.append({
                    'path': target.path,
                    'line': target.line,
                    'position': entry.entry.position,
                    'side': entry.entry.side.value,
                })
            else:
                mappings.append({
                    'path': target.path,
                    'line': target.line,
                    'error': str(errors[id(target)].reason).split(':')[0],
                })
        return mappings
