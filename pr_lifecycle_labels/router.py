"""
Send each event to the policy function that handles it.
"""

from typing import List, Optional

from pr_lifecycle_labels import logger
from pr_lifecycle_labels import policy
from pr_lifecycle_labels.effects import Effect
from pr_lifecycle_labels.events import (
    CommentEvent,
    Event,
    PullRequestEvent,
    PushEvent,
    ReviewEvent,
    ScheduledTick,
)
from pr_lifecycle_labels.github_api import GitHubRepo
from pr_lifecycle_labels.types import LabelerConfig


def route(event: Optional[Event], repo: GitHubRepo, config: LabelerConfig) -> List[Effect]:
    """
    Decide the effects of `event`.  Events we don't act on have none.
    """
    match event:
        case PullRequestEvent(action="opened", pr=pr):
            return policy.pull_request_opened(pr, repo)
        case PullRequestEvent(action="synchronize", pr=pr):
            return policy.pull_request_synchronized(pr, repo)
        case PullRequestEvent(action="closed", pr=pr):
            return policy.pull_request_closed(pr)
        case PullRequestEvent(action="converted_to_draft", pr=pr):
            return policy.pull_request_converted_to_draft(pr)
        case PullRequestEvent(action="ready_for_review", pr=pr):
            return policy.pull_request_ready_for_review(pr, repo)
        case PullRequestEvent(action="edited", pr=pr, title_changed=title_changed):
            return policy.pull_request_edited(pr, repo, title_changed)

        case ReviewEvent(action="submitted", pr=pr, review=review):
            return policy.review_submitted(pr, review)
        case ReviewEvent(action="dismissed", pr=pr):
            return policy.review_dismissed(pr)

        case PushEvent():
            return policy.branch_pushed(event, repo, config)

        case ScheduledTick():
            return policy.scheduled_tick(repo, config)

        case CommentEvent(action="created", is_on_pr=True):
            return policy.comment_created(event, config)
        case CommentEvent(is_on_pr=False, issue_number=number):
            logger.info(f"Comment on issue #{number}, which isn't a pull request")
            return []

        case None:
            return []

    logger.info(f"Nothing to do for {type(event).__name__} {getattr(event, 'action', '')!r}")
    return []
