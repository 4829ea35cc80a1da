"""
The events the bot reacts to, parsed out of GitHub webhook payloads.

The event name is what GitHub sends as ``X-GitHub-Event`` (or what Actions
exposes as ``GITHUB_EVENT_NAME``), and the payload is the JSON body.
"""

from __future__ import annotations

import dataclasses
from typing import Dict, List, Optional, Union

from glom import glom

from pr_lifecycle_labels import logger
from pr_lifecycle_labels.types import Commit, PullRequest, Review


@dataclasses.dataclass(frozen=True)
class PullRequestEvent:
    action: str
    pr: PullRequest
    # For "edited": did the title change?
    title_changed: bool = False


@dataclasses.dataclass(frozen=True)
class ReviewEvent:
    action: str
    pr: PullRequest
    review: Review


@dataclasses.dataclass(frozen=True)
class PushEvent:
    branch: str
    commits: List[Commit] = dataclasses.field(default_factory=list)


@dataclasses.dataclass(frozen=True)
class ScheduledTick:
    pass


@dataclasses.dataclass(frozen=True)
class CommentEvent:
    action: str
    issue_number: int
    # Issue comment events fire for plain issues too.
    is_on_pr: bool
    comment_body: str
    author: str


Event = Union[PullRequestEvent, ReviewEvent, PushEvent, ScheduledTick, CommentEvent]

SUPPORTED_EVENTS = {"pull_request", "pull_request_review", "push", "schedule", "issue_comment"}


def branch_from_ref(ref: str) -> str:
    return ref.removeprefix("refs/heads/")


def parse_event(event_name: str, payload: Dict) -> Optional[Event]:
    """
    Make an Event from a webhook payload.

    Returns None for events we don't handle.  A payload missing fields we
    need raises an exception: that's a malformed event, not a quiet no-op.
    """
    match event_name:
        case "pull_request":
            return PullRequestEvent(
                action=payload["action"],
                pr=PullRequest.from_pr_dict(payload["pull_request"]),
                title_changed=bool(glom(payload, "changes.title", default=None)),
            )

        case "pull_request_review":
            return ReviewEvent(
                action=payload["action"],
                pr=PullRequest.from_pr_dict(payload["pull_request"]),
                review=Review.from_review_dict(payload["review"]),
            )

        case "push":
            commits = payload.get("commits")
            if not isinstance(commits, list):
                logger.info("No commits found in push payload")
                commits = []
            return PushEvent(
                branch=branch_from_ref(payload["ref"]),
                commits=[Commit.from_commit_dict(c) for c in commits],
            )

        case "schedule":
            return ScheduledTick()

        case "issue_comment":
            return CommentEvent(
                action=payload["action"],
                issue_number=glom(payload, "issue.number"),
                is_on_pr=bool(glom(payload, "issue.pull_request", default=None)),
                comment_body=glom(payload, "comment.body", default="") or "",
                author=glom(payload, "comment.user.login", default=""),
            )

    return None


def repo_from_payload(payload: Dict, default: str = "") -> str:
    """The "owner/repo" full name an event is about."""
    return glom(payload, "repository.full_name", default=None) or default
