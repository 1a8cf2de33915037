"""
GitHub API Client

Handles GitHub API authentication, rate limit tracking, and communication.
Provides the pull request review operations the pending review lifecycle
depends on. Requests are never retried: a failed call is surfaced as a
GitHubAPIError for the caller to handle.
"""

import time
import logging
from typing import Any, Dict, List, Optional
from datetime import datetime
import requests


logger = logging.getLogger(__name__)


class GitHubAPIError(Exception):
    """GitHub API related errors"""
    def __init__(self, message: str, status_code: Optional[int] = None, response_data: Optional[Dict] = None):
        super().__init__(message)
        self.status_code = status_code
        self.response_data = response_data


class RateLimitExceeded(GitHubAPIError):
    """GitHub API rate limit exceeded"""
    def __init__(self, reset_time: datetime):
        super().__init__(f"Rate limit exceeded. Resets at {reset_time}", status_code=429)
        self.reset_time = reset_time


class GitHubClient:
    """
    GitHub API client for pull request reviews.

    Provides methods for:
    - Listing reviews and review comments
    - Creating and deleting pending reviews
    - Fetching the unified diff of a pull request

    There is deliberately no method that submits a review.
    """

    DIFF_MEDIA_TYPE = 'application/vnd.github.v3.diff'

    def __init__(self, token: str, base_url: str = "https://api.github.com", per_page: int = 100):
        """
        Initialize GitHub client.

        Args:
            token: GitHub personal access token
            base_url: GitHub API base URL (default: https://api.github.com)
            per_page: Page size for paginated list endpoints
        """
        if not token or not str(token).strip():
            raise ValueError("GitHub token is required")

        self.token = token
        self.base_url = base_url.rstrip('/')
        self.per_page = per_page
        self.session = self._create_session()
        self.rate_limit_remaining = 5000
        self.rate_limit_reset = datetime.now()

    @property
    def headers(self) -> Dict[str, str]:
        return dict(self.session.headers)

    def _create_session(self) -> requests.Session:
        """Create requests session with authentication headers."""
        session = requests.Session()

        session.headers.update({
            'Authorization': f'token {self.token}',
            'Accept': 'application/vnd.github.v3+json',
            'User-Agent': 'Draft-Reviewer/1.0'
        })

        return session

    def _check_rate_limit(self) -> None:
        """Refuse to call the API while the known rate limit is exhausted."""
        if self.rate_limit_remaining <= 0 and datetime.now() < self.rate_limit_reset:
            logger.warning(f"Rate limit exhausted until {self.rate_limit_reset}")
            raise RateLimitExceeded(self.rate_limit_reset)

    def _update_rate_limit(self, response: requests.Response) -> None:
        """Update rate limit information from response headers."""
        if 'X-RateLimit-Remaining' in response.headers:
            self.rate_limit_remaining = int(response.headers['X-RateLimit-Remaining'])

        if 'X-RateLimit-Reset' in response.headers:
            reset_timestamp = int(response.headers['X-RateLimit-Reset'])
            self.rate_limit_reset = datetime.fromtimestamp(reset_timestamp)

    @staticmethod
    def _error_data(response: requests.Response) -> Dict:
        if not response.content:
            return {}
        try:
            data = response.json()
        except ValueError:
            return {'message': response.text}
        return data if isinstance(data, dict) else {'message': str(data)}

    def _make_request(self, method: str, endpoint: str, **kwargs) -> requests.Response:
        """
        Make authenticated request to GitHub API.

        Args:
            method: HTTP method (GET, POST, etc.)
            endpoint: API endpoint (without base URL)
            **kwargs: Additional arguments for requests

        Returns:
            Response object

        Raises:
            GitHubAPIError: For API and transport errors
            RateLimitExceeded: When rate limit is exceeded
        """
        self._check_rate_limit()

        url = f"{self.base_url}/{endpoint.lstrip('/')}"

        try:
            response = self.session.request(method, url, **kwargs)
        except requests.RequestException as e:
            logger.error(f"Request failed: {method} {url}: {e}")
            raise GitHubAPIError(f"Request failed: {str(e)}")

        self._update_rate_limit(response)

        rate_limited = (
            response.status_code == 403
            and response.headers.get('X-RateLimit-Remaining') == '0'
        )
        if response.status_code == 429 or rate_limited:
            reset_time = datetime.fromtimestamp(int(response.headers.get('X-RateLimit-Reset', time.time() + 3600)))
            raise RateLimitExceeded(reset_time)

        if not response.ok:
            error_data = self._error_data(response)
            raise GitHubAPIError(
                f"GitHub API error: {response.status_code} - {error_data.get('message', 'Unknown error')}",
                status_code=response.status_code,
                response_data=error_data
            )

        return response

    def _get_paginated(self, endpoint: str) -> List[Dict]:
        """Collect every page of a list endpoint."""
        items = []
        page = 1

        while True:
            response = self._make_request(
                'GET',
                endpoint,
                params={'page': page, 'per_page': self.per_page}
            )

            page_items = response.json()
            if not page_items:
                break

            items.extend(page_items)

            if len(page_items) < self.per_page:
                break

            page += 1

        return items

    def _reviews_endpoint(self, owner: str, repo: str, pr_number: int) -> str:
        return f'/repos/{owner}/{repo}/pulls/{pr_number}/reviews'

    def list_reviews(self, owner: str, repo: str, pr_number: int) -> List[Dict]:
        """
        Get all reviews on a pull request.

        Args:
            owner: Repository owner
            repo: Repository name
            pr_number: Pull request number

        Returns:
            List of review data (`id`, `state`, `user`, `body`, ...)
        """
        logger.info(f"Fetching reviews for {owner}/{repo}#{pr_number}")

        reviews = self._get_paginated(self._reviews_endpoint(owner, repo, pr_number))
        logger.info(f"Found {len(reviews)} reviews")
        return reviews

    def list_review_comments(self, owner: str, repo: str, pr_number: int, review_id: int) -> List[Dict]:
        """
        Get the inline comments that belong to a review.

        Args:
            owner: Repository owner
            repo: Repository name
            pr_number: Pull request number
            review_id: Review identifier

        Returns:
            List of review comment data (`id`, `path`, `line`, `body`, ...)
        """
        logger.info(f"Fetching comments for review {review_id} on {owner}/{repo}#{pr_number}")

        endpoint = f"{self._reviews_endpoint(owner, repo, pr_number)}/{review_id}/comments"
        return self._get_paginated(endpoint)

    def delete_review(self, owner: str, repo: str, pr_number: int, review_id: int) -> Dict:
        """
        Delete a pending review. GitHub rejects this for submitted reviews.

        Args:
            owner: Repository owner
            repo: Repository name
            pr_number: Pull request number
            review_id: Review identifier

        Returns:
            The deleted review data
        """
        logger.info(f"Deleting pending review {review_id} on {owner}/{repo}#{pr_number}")

        response = self._make_request(
            'DELETE',
            f"{self._reviews_endpoint(owner, repo, pr_number)}/{review_id}"
        )
        return response.json() if response.content else {}

    def create_review(self, owner: str, repo: str, pr_number: int, payload: Dict[str, Any]) -> Dict:
        """
        Create a review. The payload is sent exactly as given.

        Args:
            owner: Repository owner
            repo: Repository name
            pr_number: Pull request number
            payload: Request body (`body`, `comments`)

        Returns:
            Created review data (`id`, `state`, ...)
        """
        logger.info(
            f"Creating review on {owner}/{repo}#{pr_number} "
            f"with {len(payload.get('comments', []))} inline comments"
        )

        response = self._make_request(
            'POST',
            self._reviews_endpoint(owner, repo, pr_number),
            json=payload
        )
        return response.json()

    def get_pull_request_diff(self, owner: str, repo: str, pr_number: int) -> str:
        """
        Get the unified diff of a pull request.

        Args:
            owner: Repository owner
            repo: Repository name
            pr_number: Pull request number

        Returns:
            Raw unified diff text
        """
        logger.info(f"Fetching diff for {owner}/{repo}#{pr_number}")

        response = self._make_request(
            'GET',
            f'/repos/{owner}/{repo}/pulls/{pr_number}',
            headers={'Accept': self.DIFF_MEDIA_TYPE}
        )
        return response.text

    def get_authenticated_user(self) -> Dict:
        """
        Get the user the token belongs to.

        Returns:
            User data (`login`, `id`, ...)
        """
        response = self._make_request('GET', '/user')
        user_data = response.json()
        logger.info(f"Authenticated as: {user_data.get('login')}")
        return user_data
