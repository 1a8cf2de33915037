"""
Pending Review Manager

Owns the reviewer's pending (draft) review on a pull request: finds an
existing one, reconciles its comments with the fresh set, deletes it and
creates the replacement.

The manager only ever lists, creates and deletes reviews. Submitting a
review (APPROVE / REQUEST_CHANGES / COMMENT) is not reachable from here.
"""

import logging
from typing import Dict, List, Optional, Sequence, Tuple

from pydantic import ValidationError

from ..github.client import GitHubAPIError, GitHubClient
from ..models.review import (
    Comment,
    CreateReviewPayload,
    MappedComment,
    MatchResult,
    PendingReview,
    ReviewCommentPayload,
    ReviewOutcome,
    ReviewState,
    UnmappedComment,
)
from ..formatting.github import ReviewBodyFormatter, format_notes_count
from .reconciler import ReviewReconciler


logger = logging.getLogger(__name__)


class RemoteDeleteFailed(Exception):
    """Deleting the previous pending review failed (non-fatal)"""
    def __init__(self, review_id: int, cause: Exception):
        super().__init__(f"Failed to delete existing pending review {review_id}: {cause}")
        self.review_id = review_id
        self.cause = cause


class RemoteCreateFailed(Exception):
    """Creating the pending review failed; the review was not posted"""
    def __init__(
        self,
        message: str,
        payload: Dict,
        status_code: Optional[int] = None,
        response_data: Optional[Dict] = None,
    ):
        super().__init__(
            f"{message}. The review was NOT posted; post it manually. "
            f"Request body: {payload}"
        )
        self.payload = payload
        self.status_code = status_code
        self.response_data = response_data


class PendingReviewManager:
    """
    Pending review lifecycle for one (reviewer, pull request) pair.

    - No pending review: create one directly from the fresh comments.
    - Pending review exists: fetch its comments, reconcile, delete it,
      create the replacement from kept + added.
    """

    def __init__(
        self,
        client: GitHubClient,
        owner: str,
        repo: str,
        pr_number: int,
        reviewer: str,
        reconciler: Optional[ReviewReconciler] = None,
        formatter: Optional[ReviewBodyFormatter] = None,
    ):
        """
        Initialize pending review manager.

        Args:
            client: GitHubClient instance
            owner: Repository owner
            repo: Repository name
            pr_number: Pull request number
            reviewer: Login of the reviewer who owns the pending review
            reconciler: ReviewReconciler instance
            formatter: ReviewBodyFormatter instance
        """
        if pr_number <= 0:
            raise ValueError("PR number must be positive")
        if not reviewer:
            raise ValueError("Reviewer login is required")

        self.client = client
        self.owner = owner
        self.repo = repo
        self.pr_number = pr_number
        self.reviewer = reviewer
        self.reconciler = reconciler or ReviewReconciler()
        self.formatter = formatter or ReviewBodyFormatter()

    @property
    def pr_label(self) -> str:
        return f"{self.owner}/{self.repo}#{self.pr_number}"

    def review_url(self, review_id: int) -> str:
        return f"https://github.com/{self.owner}/{self.repo}/pull/{self.pr_number}#pullrequestreview-{review_id}"

    def find_pending_review(self) -> Optional[PendingReview]:
        """
        Find the reviewer's pending review and load its comments.

        Returns:
            PendingReview, or None if the reviewer has none
        """
        reviews = self.client.list_reviews(self.owner, self.repo, self.pr_number)

        pending = None
        for review in reviews:
            author = (review.get('user') or {}).get('login')
            if review.get('state') == ReviewState.PENDING.value and author == self.reviewer:
                pending = review
                break

        if pending is None:
            logger.info(f"No pending review by {self.reviewer} on {self.pr_label}")
            return None

        review_id = pending['id']
        comments_data = self.client.list_review_comments(self.owner, self.repo, self.pr_number, review_id)

        comments = []
        for data in comments_data:
            try:
                comments.append(Comment.from_api(data))
            except (KeyError, ValueError) as e:
                logger.warning(f"Skipping unreadable comment {data.get('id')} on review {review_id}: {e}")

        logger.info(f"Found pending review {review_id} by {self.reviewer} with {len(comments)} comments")
        return PendingReview(
            review_id=review_id,
            body=pending.get('body') or '',
            comments=comments,
            author=self.reviewer,
        )

    def delete_review(self, review: PendingReview) -> None:
        """
        Delete a pending review.

        Raises:
            RemoteDeleteFailed: The platform refused or the call failed
        """
        try:
            self.client.delete_review(self.owner, self.repo, self.pr_number, review.review_id)
        except GitHubAPIError as e:
            raise RemoteDeleteFailed(review.review_id, e)

    def postable_comments(self, comments: Sequence[MappedComment]) -> Tuple[List[MappedComment], List[MappedComment]]:
        """
        Split comments into those GitHub will accept and those it would reject.

        A comment with an empty path or body, or a position below 1, is
        dropped with a warning instead of failing the whole review.

        Returns:
            Tuple of (valid, invalid) in input order
        """
        valid: List[MappedComment] = []
        invalid: List[MappedComment] = []

        for comment in comments:
            try:
                ReviewCommentPayload(path=comment.path, position=comment.entry.position, body=comment.body)
            except ValidationError as e:
                logger.debug(f"Rejected comment at {comment.comment.location}: {e}")
                invalid.append(comment)
            else:
                valid.append(comment)

        if invalid:
            locations = ', '.join(c.comment.location for c in invalid)
            logger.warning(f"Skipping {len(invalid)} invalid comments on {self.pr_label}: {locations}")

        return valid, invalid

    def build_payload(self, body: str, comments: Sequence[MappedComment]) -> Dict:
        """
        Build the create-review request body from the postable comments.

        `comments` is always present, even when empty; without it GitHub
        submits the review immediately instead of leaving it pending.
        """
        valid, _ = self.postable_comments(comments)
        payload = CreateReviewPayload(
            body=body,
            comments=[
                ReviewCommentPayload(path=c.path, position=c.entry.position, body=c.body)
                for c in valid
            ],
        )
        return payload.to_request()

    def create_review(self, body: str, comments: Sequence[MappedComment]) -> Dict:
        """
        Create the pending review. Never retried, never downgraded to a
        plain comment.

        Returns:
            Created review data

        Raises:
            RemoteCreateFailed: The review was not created
        """
        return self._post_payload(self.build_payload(body, comments))

    def _post_payload(self, payload: Dict) -> Dict:
        try:
            return self.client.create_review(self.owner, self.repo, self.pr_number, payload)
        except GitHubAPIError as e:
            logger.error(
                f"Failed to create pending review on {self.pr_label}: {e} "
                f"(status={e.status_code}, response={e.response_data}, request={payload})"
            )
            raise RemoteCreateFailed(
                f"Failed to create review on {self.pr_label}: {e}",
                payload=payload,
                status_code=e.status_code,
                response_data=e.response_data,
            )

    def _created_state(self, created: Dict) -> Optional[ReviewState]:
        review_id = created.get('id')
        try:
            state = ReviewState.parse(created.get('state'))
        except ValueError as e:
            # The review exists at this point; report rather than fail
            logger.error(f"Review {review_id} on {self.pr_label} has an unreadable state: {e}")
            return None

        if state.is_submitted:
            logger.error(
                f"Review {review_id} on {self.pr_label} came back as {state.value}, "
                f"not PENDING; it is already visible to the author"
            )
        return state

    def publish(
        self,
        comments: Sequence[MappedComment],
        summary: str = "",
        unmapped: Sequence[UnmappedComment] = (),
    ) -> ReviewOutcome:
        """
        Replace the reviewer's pending review with one built from `comments`.

        Args:
            comments: Fresh, position-mapped inline comments
            summary: Overall review summary
            unmapped: Findings outside the diff, added to the review body

        Returns:
            ReviewOutcome describing the created review

        Raises:
            RemoteCreateFailed: Creation failed; nothing was posted
        """
        fresh, skipped = self.postable_comments(comments)
        existing = self.find_pending_review()

        if existing is None:
            result = MatchResult(added=list(fresh))
        else:
            result = self.reconciler.reconcile(existing.comments, fresh)

        outgoing: List[MappedComment] = result.outgoing
        body = self.formatter.format_body(summary, unmapped)
        if unmapped:
            logger.info(f"Review body carries {format_notes_count(list(unmapped))}")

        payload = self.build_payload(body, outgoing)

        delete_failed = False
        if existing is not None:
            try:
                self.delete_review(existing)
            except RemoteDeleteFailed as e:
                # A stray pending review may remain; keep going so the new one is posted
                delete_failed = True
                logger.warning(f"{e}. Proceeding without deleting existing review")

        created = self._post_payload(payload)

        review_id = created.get('id')
        outcome = ReviewOutcome(
            review_id=review_id,
            review_url=self.review_url(review_id),
            state=self._created_state(created),
            inline_count=len(payload['comments']),
            summary_count=len(unmapped),
            replaced_existing=existing is not None,
            delete_failed=delete_failed,
            kept=len(result.kept),
            added=len(result.added),
            dropped=len(result.dropped),
            skipped=len(skipped),
        )
        logger.info(
            f"Pending review {review_id} ready on {self.pr_label}: "
            f"{outcome.inline_count} inline, {outcome.summary_count} notes, "
            f"kept={outcome.kept}, added={outcome.added}, dropped={outcome.dropped}, "
            f"skipped={outcome.skipped}"
        )
        return outcome
