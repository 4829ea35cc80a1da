"""
The labeling policy: what each kind of event does to a pull request.

Every function here returns an ordered list of effects and changes nothing
itself.  Reads from GitHub go through a GitHubRepo, and are done fresh on
each run: the labels on a pull request are the only memory the bot has.
"""

from __future__ import annotations

from typing import Iterable, List, Optional, Set

import arrow

from pr_lifecycle_labels import logger
from pr_lifecycle_labels.bot_comments import DISMISSAL_MESSAGE, unique_mentions
from pr_lifecycle_labels.classifier import (
    branch_labels,
    classify_in_order,
    is_feature_base_title,
    revalidate,
)
from pr_lifecycle_labels.correlator import resolve
from pr_lifecycle_labels.effects import (
    Audience,
    Effect,
    NotificationEffect,
    ReviewDismissEffect,
    ReviewerRequestEffect,
    add_label,
    add_labels,
    remove_label,
    transition_effects,
)
from pr_lifecycle_labels.events import CommentEvent, PushEvent
from pr_lifecycle_labels.github_api import GitHubRepo
from pr_lifecycle_labels.labels import Label, Transition
from pr_lifecycle_labels.types import LabelerConfig, PullRequest, Review
from pr_lifecycle_labels.utils import RequestFailed

# Comment commands: (trigger, label, reason to ping the team or None).
COMMENT_COMMANDS = [
    ("!action_required", Label.MERGE_BLOCK_ACTION_REQUIRED, "action_required"),
    ("!urgent", Label.URGENT, None),
    ("!breaking", Label.BREAKING_CHANGE, None),
    ("!security", Label.SECURITY, None),
]


def fetch_reviews(repo: GitHubRepo, pr_number: int) -> List[Review]:
    """The reviews on a pull request.  If GitHub won't say, assume none."""
    try:
        return repo.list_reviews(pr_number)
    except RequestFailed as exc:
        logger.error(f"Error listing reviews for #{pr_number}: {exc}")
        return []


def approvals(reviews: Iterable[Review]) -> List[Review]:
    """The reviews that are approving right now."""
    return [r for r in reviews if r.is_approval]


def team_notification(pr_number: int, reason: str, config: LabelerConfig, **params) -> List[Effect]:
    """A ping for the configured team, or nothing if there isn't one."""
    if not config.team_id:
        return []
    return [NotificationEffect(pr_number, Audience.TEAM, reason, dict(team_id=config.team_id, **params))]


# Pull request events

def find_pull_request_from_branch(repo: GitHubRepo, branch: str) -> Optional[PullRequest]:
    """The open pull request whose head is `branch`, if there is one."""
    try:
        prs = repo.list_pull_requests(state="open", head=branch)
    except RequestFailed as exc:
        logger.info(f"Error finding pull request for branch {branch}: {exc}")
        return None
    return prs[0] if prs else None


def feature_labels(pr: PullRequest, repo: GitHubRepo) -> List[Label]:
    """
    A pull request whose title says "base" is the base of a feature.  Pull
    requests that target the branch of a feature base are parts of it.
    """
    labels = []
    if is_feature_base_title(pr.title):
        labels.append(Label.FEATURE_BASE)
    if pr.base_ref:
        target = find_pull_request_from_branch(repo, pr.base_ref)
        if target is not None and is_feature_base_title(target.title):
            labels.append(Label.FEATURE_PART)
    return labels


def pull_request_opened(pr: PullRequest, repo: GitHubRepo) -> List[Effect]:
    transition = Transition.OPENED_AS_DRAFT if pr.draft else Transition.OPENED_FOR_REVIEW
    effects: List[Effect] = []
    effects.extend(transition_effects(pr.number, transition))
    effects.extend(add_labels(pr.number, feature_labels(pr, repo)))
    effects.extend(add_labels(pr.number, branch_labels(pr.head_ref)))
    effects.extend(add_labels(pr.number, classify_in_order(pr.title, pr.body)))
    return effects


def rereview_effects(pr_number: int, approving_reviews: List[Review]) -> List[Effect]:
    """
    Undo approvals that new commits have made stale, and ask for new ones.
    """
    approvers = unique_mentions(r.author for r in approving_reviews)
    effects: List[Effect] = [
        ReviewDismissEffect(pr_number, r.id, r.author, DISMISSAL_MESSAGE)
        for r in approving_reviews
    ]
    effects.append(ReviewerRequestEffect(pr_number, tuple(approvers)))
    effects.append(NotificationEffect(pr_number, Audience.APPROVERS, "rereview", {"users": approvers}))
    return effects


def pull_request_synchronized(pr: PullRequest, repo: GitHubRepo) -> List[Effect]:
    """
    New commits were pushed to the pull request.

    Approvals were given to the old commits, so they don't count any more.
    Without an approval, this is just a nudge to the reviewers.
    """
    reviews = fetch_reviews(repo, pr.number)
    approving = approvals(reviews)
    if approving:
        logger.info(f"#{pr.number} had an approval, asking for re-review")
        effects = transition_effects(pr.number, Transition.NEW_COMMITS_AFTER_APPROVAL)
        return effects + rereview_effects(pr.number, approving)

    logger.info(f"#{pr.number} had no approval")
    effects: List[Effect] = []
    effects.extend(transition_effects(pr.number, Transition.NEW_COMMITS))
    reviewers = unique_mentions(r.author for r in reviews)
    if reviewers:
        effects.append(NotificationEffect(pr.number, Audience.REVIEWERS, "new_commits", {"users": reviewers}))
    return effects


def pull_request_closed(pr: PullRequest) -> List[Effect]:
    if pr.merged:
        return transition_effects(pr.number, Transition.MERGED)
    return []


def pull_request_converted_to_draft(pr: PullRequest) -> List[Effect]:
    return transition_effects(pr.number, Transition.CONVERTED_TO_DRAFT)


def pull_request_ready_for_review(pr: PullRequest, repo: GitHubRepo) -> List[Effect]:
    # A review can be approved while the pull request is still a draft.
    if approvals(fetch_reviews(repo, pr.number)):
        return transition_effects(pr.number, Transition.UNDRAFTED_WITH_APPROVAL)
    return transition_effects(pr.number, Transition.UNDRAFTED)


def pull_request_edited(pr: PullRequest, repo: GitHubRepo, title_changed: bool) -> List[Effect]:
    """
    Re-check content labels when the title changes.
    """
    if not title_changed:
        return []
    logger.info(f"Title of #{pr.number} edited, revalidating content labels")
    current: Set[Label] = set()
    for name in repo.list_issue_labels(pr.number):
        if (label := Label.from_name(name)) is not None:
            current.add(label)
    to_remove, to_add = revalidate(current, pr.title, pr.body)
    effects: List[Effect] = [remove_label(pr.number, label) for label in to_remove]
    effects.extend(add_labels(pr.number, to_add))
    return effects


# Review events

def review_submitted(pr: PullRequest, review: Review) -> List[Effect]:
    match review.state:
        case "CHANGES_REQUESTED":
            return transition_effects(pr.number, Transition.CHANGES_REQUESTED)
        case "APPROVED":
            return transition_effects(pr.number, Transition.APPROVED)
        case "COMMENTED":
            return transition_effects(pr.number, Transition.REVIEW_COMMENTED)
    logger.info(f"Review state {review.state!r} on #{pr.number}, nothing to do")
    return []


def review_dismissed(pr: PullRequest) -> List[Effect]:
    return transition_effects(pr.number, Transition.REVIEW_DISMISSED)


# Pushes

def deployment_effects(pr: PullRequest, environment: str, config: LabelerConfig) -> List[Effect]:
    if environment == "staging":
        return transition_effects(pr.number, Transition.DEPLOYED_TO_STAGING)

    effects: List[Effect] = []
    effects.extend(transition_effects(pr.number, Transition.DEPLOYED_TO_PRODUCTION))
    effects.append(NotificationEffect(pr.number, Audience.AUTHOR, "production", {"author": pr.author}))
    effects.extend(team_notification(pr.number, "production", config))
    return effects


def branch_pushed(event: PushEvent, repo: GitHubRepo, config: LabelerConfig) -> List[Effect]:
    """
    Commits landed on the staging or production branch: the pull requests
    they came from are now deployed there.
    """
    if event.branch == config.staging_branch:
        environment = "staging"
    elif event.branch == config.production_branch:
        environment = "production"
    else:
        logger.info(f"Push to {event.branch}, not a deployment branch")
        return []

    logger.info(f"Handling {environment} deployment of {len(event.commits)} commits")
    effects: List[Effect] = []
    deployed: Set[int] = set()
    for commit in event.commits:
        logger.info(f"Processing commit {commit.sha}: {commit.message[:60]!r}")
        for pr in resolve(repo, commit):
            # Several commits of one pull request get one set of changes.
            if pr.number in deployed:
                continue
            deployed.add(pr.number)
            logger.info(f"Marking #{pr.number} ({pr.title}) as deployed to {environment}")
            effects.extend(deployment_effects(pr, environment, config))
    return effects


# Scheduled checks

def abandoned_effects(
    prs: List[PullRequest],
    config: LabelerConfig,
    now: Optional[arrow.Arrow] = None,
) -> List[Effect]:
    """
    Open pull requests with no activity for too long are abandoned.
    """
    cutoff = (now or arrow.utcnow()).shift(days=-config.abandoned_timeout)
    effects: List[Effect] = []
    for pr in prs:
        if pr.updated_at is not None and pr.updated_at < cutoff:
            logger.info(f"#{pr.number} last updated {pr.updated_at.humanize()}, marking abandoned")
            effects.extend(transition_effects(pr.number, Transition.ABANDONED))
            effects.append(NotificationEffect(
                pr.number, Audience.AUTHOR, "abandoned",
                {"author": pr.author, "abandoned_timeout": config.abandoned_timeout},
            ))
    return effects


def conflict_effects(prs: List[PullRequest], repo: GitHubRepo) -> List[Effect]:
    """
    Keep the merge conflict label in step with GitHub's idea of mergeability.

    Listed pull requests don't include `mergeable`, so each is fetched again.
    While GitHub is still computing it (None), the label is left alone.
    """
    effects: List[Effect] = []
    for listed in prs:
        try:
            pr = repo.get_pull_request(listed.number)
        except RequestFailed as exc:
            logger.error(f"Error checking mergeability of #{listed.number}: {exc}")
            continue
        if pr.mergeable is False:
            effects.extend(transition_effects(pr.number, Transition.CONFLICTED))
        elif pr.mergeable is True:
            effects.extend(transition_effects(pr.number, Transition.CONFLICT_RESOLVED))
        else:
            logger.info(f"Mergeability of #{pr.number} not known yet, leaving its label alone")
    return effects


def scheduled_tick(repo: GitHubRepo, config: LabelerConfig, now: Optional[arrow.Arrow] = None) -> List[Effect]:
    logger.info("Running scheduled checks")
    try:
        open_prs = repo.list_pull_requests(state="open")
    except RequestFailed as exc:
        logger.error(f"Error listing open pull requests: {exc}")
        return []

    effects = abandoned_effects(open_prs, config, now=now)
    if config.check_conflicts:
        effects.extend(conflict_effects(open_prs, repo))
    return effects


# Comments

def comment_created(event: CommentEvent, config: LabelerConfig) -> List[Effect]:
    """
    Comment commands like "!urgent" label the pull request.  Each command in
    the comment works on its own.
    """
    body = event.comment_body.lower()
    effects: List[Effect] = []
    for trigger, label, team_reason in COMMENT_COMMANDS:
        if trigger not in body:
            continue
        effects.append(add_label(event.issue_number, label))
        if team_reason is not None:
            effects.extend(team_notification(event.issue_number, team_reason, config, commenter=event.author))
    return effects
