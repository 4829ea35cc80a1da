"""
The label taxonomy, and the label changes each lifecycle transition makes.

Labels are the only state the bot keeps: the lifecycle phase of a pull
request is whatever its labels say.  Each transition below lists the labels
it must leave present and the labels it must leave absent.
"""

from __future__ import annotations

import dataclasses
from enum import Enum, auto
from typing import Dict, Tuple


class Label(Enum):
    """
    Every label the bot manages.  The value is the label's name on GitHub.
    """
    DRAFT = "Status: Draft"
    READY_FOR_REVIEW = "Status: Ready for review"
    REQUEST_CHANGES = "Code review: Request Changes"
    IN_PROGRESS = "Code review: In progress"
    APPROVED = "Code review: Approved"
    READY_FOR_STAGING = "Status: Ready for Staging"
    DEPLOYED_STAGING = "Deployed: Staging"
    DEPLOYED_PRODUCTION = "Deployed: Production"
    MERGE_CONFLICT = "Merge Conflict"
    MERGED = "Status: Merged"
    ABANDONED = "Status: Abandoned"
    FEATURE_BASE = "Feature: Base"
    FEATURE_PART = "Feature: Part"
    FIX_HOTFIX = "Fix: Hotfix"
    FIX_BUG = "Fix: Bug"
    MERGE_BLOCK_ACTION_REQUIRED = "Merge Block: Action Required"
    URGENT = "Priority: Urgent"
    BREAKING_CHANGE = "Type: Breaking Change"
    DOCUMENTATION = "Type: Documentation"
    REFACTOR = "Type: Refactor"
    PERFORMANCE = "Type: Performance"
    SECURITY = "Type: Security"

    def __str__(self):
        return self.value

    @property
    def color(self) -> str:
        return LABEL_COLORS[self]

    @property
    def description(self) -> str:
        return LABEL_DESCRIPTIONS[self]

    @classmethod
    def from_name(cls, name: str) -> Label | None:
        """The Label with GitHub name `name`, or None for labels we don't manage."""
        try:
            return cls(name)
        except ValueError:
            return None


LABEL_COLORS: Dict[Label, str] = {
    Label.DRAFT: "f9d71c",
    Label.READY_FOR_REVIEW: "0e8a16",
    Label.REQUEST_CHANGES: "d73a49",
    Label.IN_PROGRESS: "fbca04",
    Label.APPROVED: "0e8a16",
    Label.READY_FOR_STAGING: "1d76db",
    Label.DEPLOYED_STAGING: "7057ff",
    Label.DEPLOYED_PRODUCTION: "28a745",
    Label.MERGE_CONFLICT: "d73a49",
    Label.MERGED: "6f42c1",
    Label.ABANDONED: "6a737d",
    Label.FEATURE_BASE: "0075ca",
    Label.FEATURE_PART: "0075ca",
    Label.FIX_HOTFIX: "d73a49",
    Label.FIX_BUG: "ff6b6b",
    Label.MERGE_BLOCK_ACTION_REQUIRED: "b60205",
    Label.URGENT: "ff0000",
    Label.BREAKING_CHANGE: "b60205",
    Label.DOCUMENTATION: "0075ca",
    Label.REFACTOR: "7057ff",
    Label.PERFORMANCE: "00d4aa",
    Label.SECURITY: "ff6b6b",
}

# Only used when a label has to be created in a repo.
LABEL_DESCRIPTIONS: Dict[Label, str] = {
    Label.DRAFT: "Pull request is still being worked on.",
    Label.READY_FOR_REVIEW: "Ready for code review.",
    Label.REQUEST_CHANGES: "Reviewers have requested changes before merging.",
    Label.IN_PROGRESS: "Review is ongoing and not yet finalized.",
    Label.APPROVED: "All reviewers have approved the changes.",
    Label.READY_FOR_STAGING: "Pull request is ready to be deployed to the staging environment for testing.",
    Label.DEPLOYED_STAGING: "Pull request has been deployed to the staging environment for testing.",
    Label.DEPLOYED_PRODUCTION: "Pull request has been deployed to the production environment.",
    Label.MERGE_CONFLICT: "Indicates that this pull request has merge conflicts that must be resolved before merging.",
    Label.MERGED: "Pull request has been merged.",
    Label.ABANDONED: "Closed without being merged.",
    Label.FEATURE_BASE: "Establishes the initial structure or foundation for a new feature.",
    Label.FEATURE_PART: "Implements a specific part of a larger feature.",
    Label.FIX_HOTFIX: "Urgent production fix applied directly to the main branch.",
    Label.FIX_BUG: "Fixes a functional bug or error.",
    Label.MERGE_BLOCK_ACTION_REQUIRED: "Signifies that action or changes are required before this pull request can be merged.",
    Label.URGENT: "Requires immediate attention and priority handling.",
    Label.BREAKING_CHANGE: "Contains breaking changes that may affect existing functionality.",
    Label.DOCUMENTATION: "Pull requests that update documentation, README files, or code comments.",
    Label.REFACTOR: "Code refactoring without changing functionality.",
    Label.PERFORMANCE: "Improves performance, optimization, or efficiency.",
    Label.SECURITY: "Addresses security vulnerabilities or implements security improvements.",
}

# The labels, grouped by what they describe.

REVIEW_STATUS_LABELS = {
    Label.DRAFT,
    Label.READY_FOR_REVIEW,
    Label.REQUEST_CHANGES,
    Label.IN_PROGRESS,
    Label.APPROVED,
    Label.MERGED,
    Label.ABANDONED,
}

DEPLOYMENT_STATUS_LABELS = {
    Label.READY_FOR_STAGING,
    Label.DEPLOYED_STAGING,
    Label.DEPLOYED_PRODUCTION,
}

MERGE_HEALTH_LABELS = {
    Label.MERGE_CONFLICT,
    Label.MERGE_BLOCK_ACTION_REQUIRED,
}

FEATURE_ROLE_LABELS = {
    Label.FEATURE_BASE,
    Label.FEATURE_PART,
}

FIX_URGENCY_LABELS = {
    Label.FIX_HOTFIX,
    Label.FIX_BUG,
    Label.URGENT,
}

# These are derived from the title and body text, so the bot may take them
# away again when the text changes.  See classifier.py.
CONTENT_LABELS = {
    Label.BREAKING_CHANGE,
    Label.DOCUMENTATION,
    Label.REFACTOR,
    Label.PERFORMANCE,
    Label.SECURITY,
    Label.URGENT,
}


class Transition(Enum):
    """
    The lifecycle moves a pull request can make.
    """
    OPENED_AS_DRAFT = auto()
    OPENED_FOR_REVIEW = auto()
    NEW_COMMITS = auto()
    NEW_COMMITS_AFTER_APPROVAL = auto()
    CHANGES_REQUESTED = auto()
    APPROVED = auto()
    REVIEW_COMMENTED = auto()
    REVIEW_DISMISSED = auto()
    UNDRAFTED = auto()
    UNDRAFTED_WITH_APPROVAL = auto()
    CONVERTED_TO_DRAFT = auto()
    MERGED = auto()
    DEPLOYED_TO_STAGING = auto()
    DEPLOYED_TO_PRODUCTION = auto()
    ABANDONED = auto()
    CONFLICTED = auto()
    CONFLICT_RESOLVED = auto()


@dataclasses.dataclass(frozen=True)
class LabelDelta:
    """
    The labels a transition leaves on a pull request, and the ones it takes off.

    Both are ordered: removals are applied first, in order, then additions.
    """
    present: Tuple[Label, ...] = ()
    absent: Tuple[Label, ...] = ()


TRANSITION_LABELS: Dict[Transition, LabelDelta] = {
    Transition.OPENED_AS_DRAFT: LabelDelta(
        present=(Label.DRAFT,),
    ),
    Transition.OPENED_FOR_REVIEW: LabelDelta(
        present=(Label.READY_FOR_REVIEW,),
    ),
    Transition.NEW_COMMITS: LabelDelta(
        present=(Label.READY_FOR_REVIEW,),
        absent=(Label.REQUEST_CHANGES,),
    ),
    Transition.NEW_COMMITS_AFTER_APPROVAL: LabelDelta(
        present=(Label.READY_FOR_REVIEW,),
        absent=(Label.APPROVED, Label.READY_FOR_STAGING, Label.DEPLOYED_STAGING, Label.DEPLOYED_PRODUCTION),
    ),
    Transition.CHANGES_REQUESTED: LabelDelta(
        present=(Label.REQUEST_CHANGES,),
        absent=(Label.READY_FOR_REVIEW, Label.IN_PROGRESS, Label.APPROVED, Label.READY_FOR_STAGING),
    ),
    Transition.APPROVED: LabelDelta(
        present=(Label.APPROVED, Label.READY_FOR_STAGING),
        absent=(Label.READY_FOR_REVIEW, Label.REQUEST_CHANGES, Label.IN_PROGRESS),
    ),
    # A comment review doesn't settle anything, so nothing is taken away.
    Transition.REVIEW_COMMENTED: LabelDelta(
        present=(Label.IN_PROGRESS,),
    ),
    Transition.REVIEW_DISMISSED: LabelDelta(
        absent=(Label.REQUEST_CHANGES, Label.IN_PROGRESS),
    ),
    Transition.UNDRAFTED: LabelDelta(
        present=(Label.READY_FOR_REVIEW,),
        absent=(Label.DRAFT,),
    ),
    Transition.UNDRAFTED_WITH_APPROVAL: LabelDelta(
        present=(Label.APPROVED, Label.READY_FOR_STAGING),
        absent=(Label.DRAFT,),
    ),
    Transition.CONVERTED_TO_DRAFT: LabelDelta(
        present=(Label.DRAFT,),
        absent=(Label.READY_FOR_REVIEW,),
    ),
    # Deployment labels stay on merged pull requests as a record.
    Transition.MERGED: LabelDelta(
        present=(Label.MERGED,),
    ),
    Transition.DEPLOYED_TO_STAGING: LabelDelta(
        present=(Label.DEPLOYED_STAGING,),
        absent=(Label.READY_FOR_STAGING,),
    ),
    Transition.DEPLOYED_TO_PRODUCTION: LabelDelta(
        present=(Label.DEPLOYED_PRODUCTION,),
        absent=(Label.READY_FOR_STAGING, Label.DEPLOYED_STAGING),
    ),
    Transition.ABANDONED: LabelDelta(
        present=(Label.ABANDONED,),
    ),
    Transition.CONFLICTED: LabelDelta(
        present=(Label.MERGE_CONFLICT,),
    ),
    Transition.CONFLICT_RESOLVED: LabelDelta(
        absent=(Label.MERGE_CONFLICT,),
    ),
}


def project_labels(labels: set[Label], transition: Transition) -> set[Label]:
    """
    The labels a pull request will have after `transition`, starting from `labels`.
    """
    delta = TRANSITION_LABELS[transition]
    return (set(labels) - set(delta.absent)) | set(delta.present)
