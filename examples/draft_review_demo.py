#!/usr/bin/env python3
"""
Draft Review Demo

Demonstrates posting review findings as a pending (draft) review.
Reads a findings file, maps every finding onto the PR diff, reconciles
with any pending review you already have, and replaces it.

Usage:
    python examples/draft_review_demo.py <owner> <repo> <pr_number> <findings.json>

Findings file:
    {
      "summary": "Overall review summary...",
      "comments": [{"path": "src/auth.py", "line": 42, "body": "Consider..."}]
    }

The review stays pending; submit it yourself from the GitHub UI.
"""

import sys
import json
import logging

from draft_reviewer.api import DraftReviewAPI, ReviewRequest
from draft_reviewer.config import get_config
from draft_reviewer.github.client import GitHubAPIError
from draft_reviewer.review.manager import RemoteCreateFailed


def main():
    """Main demo function."""
    if len(sys.argv) != 5:
        print("Usage: python draft_review_demo.py <owner> <repo> <pr_number> <findings.json>")
        sys.exit(1)

    owner, repo, pr_number, findings_path = sys.argv[1:]

    try:
        config = get_config()
    except ValueError as e:
        print(f"Error: {e}. Set GITHUB_TOKEN.")
        sys.exit(1)

    logger = logging.getLogger(__name__)

    with open(findings_path, 'r', encoding='utf-8') as f:
        findings = json.load(f)

    request = ReviewRequest.from_dict({
        'owner': owner,
        'repo': repo,
        'pr_number': pr_number,
        'summary': findings.get('summary', ''),
        'comments': findings.get('comments', []),
    })

    try:
        outcome = DraftReviewAPI(config=config).review_pr(request)
    except RemoteCreateFailed as e:
        logger.error(f"Review creation failed: {e}")
        print("❌ The review was NOT posted. Post it manually.")
        print(f"   Status: {e.status_code}")
        print(f"   Response: {e.response_data}")
        print(f"   Request body: {json.dumps(e.payload)}")
        sys.exit(1)
    except GitHubAPIError as e:
        logger.error(f"GitHub API error: {e}")
        print(f"Error: {e}")
        sys.exit(1)

    print(f"✓ Pending review ready: {outcome.review_url}")
    print(f"   Inline comments: {outcome.inline_count}")
    print(f"   Summary notes: {outcome.summary_count}")
    print(f"   Kept / added / dropped: {outcome.kept} / {outcome.added} / {outcome.dropped}")
    if outcome.replaced_existing:
        print("   Replaced your previous pending review")
    if outcome.delete_failed:
        print("⚠️  The previous pending review could not be deleted; remove it manually")
    if outcome.skipped:
        print(f"⚠️  {outcome.skipped} invalid comments were skipped")
    if outcome.state is None:
        print("⚠️  GitHub returned no readable review state; check the PR")
    elif not outcome.is_pending:
        print(f"⚠️  GitHub reports the review as {outcome.state.value}, not PENDING")


if __name__ == '__main__':
    main()
