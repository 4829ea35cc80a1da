"""
The changes the policy decides to make.

The policy never touches GitHub itself: it returns an ordered list of these,
and tasks/pr_labeling.py carries them out one by one.
"""

from __future__ import annotations

import dataclasses
from enum import Enum
from typing import Dict, Iterable, List, Tuple, Union

from pr_lifecycle_labels.labels import TRANSITION_LABELS, Label, Transition


class LabelChange(Enum):
    ADD = "add"
    REMOVE = "remove"


class Audience(Enum):
    """Who a notification is aimed at."""
    REVIEWERS = "reviewers"
    APPROVERS = "approvers"
    AUTHOR = "author"
    TEAM = "team"


@dataclasses.dataclass(frozen=True)
class LabelEffect:
    kind: LabelChange
    pr_number: int
    label: Label

    def __str__(self):
        return f"{self.kind.value} {self.label.value!r} on #{self.pr_number}"


@dataclasses.dataclass(frozen=True)
class NotificationEffect:
    pr_number: int
    audience: Audience
    template: str
    params: Dict = dataclasses.field(default_factory=dict, hash=False)

    def __str__(self):
        return f"notify {self.audience.value} ({self.template}) on #{self.pr_number}"


@dataclasses.dataclass(frozen=True)
class ReviewerRequestEffect:
    pr_number: int
    reviewers: Tuple[str, ...]

    def __str__(self):
        return f"request review from {', '.join(self.reviewers)} on #{self.pr_number}"


@dataclasses.dataclass(frozen=True)
class ReviewDismissEffect:
    """
    Dismiss an approval.  If GitHub won't, ask the reviewer to review again instead.
    """
    pr_number: int
    review_id: int
    reviewer: str
    message: str

    def __str__(self):
        return f"dismiss review {self.review_id} by {self.reviewer} on #{self.pr_number}"


Effect = Union[LabelEffect, NotificationEffect, ReviewerRequestEffect, ReviewDismissEffect]


def add_label(pr_number: int, label: Label) -> LabelEffect:
    return LabelEffect(LabelChange.ADD, pr_number, label)


def remove_label(pr_number: int, label: Label) -> LabelEffect:
    return LabelEffect(LabelChange.REMOVE, pr_number, label)


def add_labels(pr_number: int, labels: Iterable[Label]) -> List[LabelEffect]:
    return [add_label(pr_number, label) for label in labels]


def transition_effects(pr_number: int, transition: Transition) -> List[LabelEffect]:
    """
    The label changes for a transition: removals first, then additions.
    """
    delta = TRANSITION_LABELS[transition]
    effects = [remove_label(pr_number, label) for label in delta.absent]
    effects.extend(add_label(pr_number, label) for label in delta.present)
    return effects
