"""
Finding the pull requests a pushed commit came from.

When a branch is pushed to staging or production, GitHub tells us about
commits, not pull requests.  There are three ways to get from one to the
other, tried in order, and the first that finds anything wins:

1.  Ask GitHub which pull requests it links to the commit.
2.  Read the merge commit message: "Merge pull request #123 from ...",
    "Merge branch 'feature-x'", "Auto-merge of #123".
3.  Look through the commits of recently updated open pull requests.

The last is expensive: one request per open pull request.
"""

import re
from typing import Callable, Dict, List, Optional

import arrow

from pr_lifecycle_labels import logger
from pr_lifecycle_labels.github_api import GitHubRepo
from pr_lifecycle_labels.types import Commit, PullRequest
from pr_lifecycle_labels.utils import RequestFailed

MERGE_MARKERS = (
    "Merge pull request",
    "Merge branch",
    "Merge remote-tracking branch",
    "Auto-merge of #",
)

PR_NUMBER_PATTERNS = [
    re.compile(r"Merge pull request #(\d+)"),
    re.compile(r"Auto-merge of #(\d+)"),
]

BRANCH_PATTERN = re.compile(r"Merge branch '([^']+)'")

# How far back a closed pull request can have merged and still count.
RECENT_MERGE_DAYS = 30
RECENT_CLOSED_LIMIT = 10

# The open-pull-request scan looks at this many, newest first.
OPEN_SCAN_LIMIT = 50
COMMITS_PER_PR_LIMIT = 100

# A strategy returns the pull requests it found.  An empty list means
# "nothing here, try the next one".
Strategy = Callable[[GitHubRepo, Commit], List[PullRequest]]


def looks_like_merge(message: str) -> bool:
    return any(marker in message for marker in MERGE_MARKERS)


def pr_number_from_message(message: str) -> Optional[int]:
    for pattern in PR_NUMBER_PATTERNS:
        if match := pattern.search(message):
            return int(match[1])
    return None


def branch_from_message(message: str) -> Optional[str]:
    if match := BRANCH_PATTERN.search(message):
        return match[1]
    return None


def by_linked_pull_requests(repo: GitHubRepo, commit: Commit) -> List[PullRequest]:
    """
    Ask GitHub which pull requests contain this commit.
    """
    if not commit.sha:
        return []
    try:
        numbers = repo.commit_pull_request_numbers(commit.sha)
    except RequestFailed as exc:
        logger.info(f"Couldn't get linked pull requests for {commit.sha}: {exc}")
        return []

    prs = []
    for number in numbers:
        try:
            prs.append(repo.get_pull_request(number))
        except RequestFailed as exc:
            logger.info(f"Couldn't get pull request #{number}: {exc}")
    return prs


def _merged_pull_request(repo: GitHubRepo, number: int) -> List[PullRequest]:
    """Pull request `number`, but only if it has really been merged."""
    try:
        pr = repo.get_pull_request(number)
    except RequestFailed as exc:
        logger.info(f"Couldn't get pull request #{number}: {exc}")
        return []
    if pr.is_merged:
        logger.info(f"Pull request #{number} was merged, including it")
        return [pr]
    logger.info(f"Pull request #{number} is not merged, skipping it")
    return []


def pull_requests_for_branch(repo: GitHubRepo, branch: str) -> List[PullRequest]:
    """
    Open pull requests from `branch`, plus ones from it merged recently.
    """
    try:
        open_prs = repo.list_pull_requests(state="open", head=branch)
        closed_prs = repo.list_pull_requests(
            state="closed", head=branch, sort="updated", direction="desc",
            limit=RECENT_CLOSED_LIMIT, per_page=RECENT_CLOSED_LIMIT,
        )
    except RequestFailed as exc:
        logger.info(f"Couldn't list pull requests for branch {branch}: {exc}")
        return []

    cutoff = arrow.utcnow().shift(days=-RECENT_MERGE_DAYS)
    merged_prs = [pr for pr in closed_prs if pr.merged_at and pr.merged_at > cutoff]
    return open_prs + merged_prs


def by_merge_message(repo: GitHubRepo, commit: Commit) -> List[PullRequest]:
    """
    Work out the pull request from a merge commit's message.
    """
    message = commit.message
    if not looks_like_merge(message):
        return []

    number = pr_number_from_message(message)
    if number is not None:
        logger.info(f"Found pull request #{number} in commit message")
        return _merged_pull_request(repo, number)

    branch = branch_from_message(message)
    if branch is not None:
        prs = pull_requests_for_branch(repo, branch)
        logger.info(f"Found {len(prs)} pull requests for branch {branch}")
        return prs

    logger.info("No pull request patterns found in commit message")
    return []


def by_open_pull_request_commits(repo: GitHubRepo, commit: Commit) -> List[PullRequest]:
    """
    Look for the commit in each recently updated open pull request.
    """
    if not commit.sha:
        return []
    try:
        open_prs = repo.list_pull_requests(
            state="open", sort="updated", direction="desc",
            limit=OPEN_SCAN_LIMIT, per_page=OPEN_SCAN_LIMIT,
        )
    except RequestFailed as exc:
        logger.info(f"Couldn't list open pull requests: {exc}")
        return []

    matching = []
    for pr in open_prs:
        try:
            shas = repo.list_commit_shas(pr.number, limit=COMMITS_PER_PR_LIMIT)
        except RequestFailed as exc:
            logger.info(f"Couldn't check commits of #{pr.number}: {exc}")
            continue
        if commit.sha in shas:
            matching.append(pr)
    return matching


STRATEGIES: List[Strategy] = [
    by_linked_pull_requests,
    by_merge_message,
    by_open_pull_request_commits,
]


def resolve(repo: GitHubRepo, commit: Commit, strategies: Optional[List[Strategy]] = None) -> List[PullRequest]:
    """
    The pull requests `commit` belongs to, using the first strategy that finds any.
    """
    if not commit.sha:
        logger.info("No valid sha for commit, only checking its message")
    for strategy in (STRATEGIES if strategies is None else strategies):
        prs = strategy(repo, commit)
        if prs:
            logger.info(f"{strategy.__name__} found {', '.join(str(pr) for pr in prs)} for commit {commit.sha}")
            return _unique(prs)
    logger.info(f"No pull requests found for commit {commit.sha}: {commit.message[:60]!r}")
    return []


def _unique(prs: List[PullRequest]) -> List[PullRequest]:
    seen: Dict[int, PullRequest] = {}
    for pr in prs:
        seen.setdefault(pr.number, pr)
    return list(seen.values())
