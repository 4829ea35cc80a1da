"""
Carrying out the effects the policy decided on.

Each effect is applied on its own.  If one fails, the failure is logged and
recorded, and the rest still happen: a missing comment shouldn't stop a
label from changing.
"""

from __future__ import annotations

import contextlib
from dataclasses import dataclass, field
from typing import Iterable, List, Tuple

from pr_lifecycle_labels.bot_comments import notification_body
from pr_lifecycle_labels.effects import (
    Effect,
    LabelChange,
    LabelEffect,
    NotificationEffect,
    ReviewDismissEffect,
    ReviewerRequestEffect,
)
from pr_lifecycle_labels.github_api import GitHubRepo
from pr_lifecycle_labels.labels import Label
from pr_lifecycle_labels.tasks import logger
from pr_lifecycle_labels.utils import RequestFailed


@dataclass
class ApplyResult:
    """
    What happened when a list of effects was applied.
    """
    # Descriptions of the effects that worked.
    applied: List[str] = field(default_factory=list)
    # (description, error message) for the effects that didn't.
    failures: List[Tuple[str, str]] = field(default_factory=list)


class LabelingActions:
    """
    Implementation of the changes the bot makes on GitHub.

    All arguments must be JSON-serializable so that dry-runs can report on
    the actions.
    """

    def __init__(self, repo: GitHubRepo):
        self.repo = repo

    def add_label(self, *, pr_number: int, label: str) -> None:
        # The label might not exist in the repo yet.
        self.repo.ensure_label_exists(Label(label))
        self.repo.add_labels(pr_number, [label])

    def remove_label(self, *, pr_number: int, label: str) -> None:
        self.repo.remove_label(pr_number, label)

    def add_comment(self, *, pr_number: int, comment_body: str) -> None:
        self.repo.create_comment(pr_number, comment_body)

    def request_reviewers(self, *, pr_number: int, reviewers: List[str]) -> None:
        self.repo.request_reviewers(pr_number, reviewers)

    def dismiss_review(self, *, pr_number: int, review_id: int, message: str) -> None:
        self.repo.dismiss_review(pr_number, review_id, message)


class DryRunLabelingActions:
    """
    Implementation of actions for dry runs.
    """

    def __init__(self):
        self.action_calls = []

    def __getattr__(self, name):
        def fn(**kwargs):
            self.action_calls.append((name, kwargs))
        return fn


class EffectApplier:
    """
    Apply effects in order, one at a time.
    """

    def __init__(self, effects: Iterable[Effect], actions) -> None:
        self.effects = list(effects)
        self.actions = actions
        self.result = ApplyResult()

    @contextlib.contextmanager
    def saved_exceptions(self, effect: Effect):
        """
        A context manager to wrap around each effect.

        An exception raised in the with-block is logged and recorded in the
        result, and doesn't stop the other effects.
        """
        try:
            yield
        except Exception as exc:    # pylint: disable=broad-exception-caught
            logger.error(f"Failed to {effect}: {exc}")
            self.result.failures.append((str(effect), str(exc)))
        else:
            self.result.applied.append(str(effect))

    def apply(self) -> ApplyResult:
        for effect in self.effects:
            with self.saved_exceptions(effect):
                self._apply_one(effect)
        return self.result

    def _apply_one(self, effect: Effect) -> None:
        match effect:
            case LabelEffect(kind=LabelChange.ADD):
                self.actions.add_label(pr_number=effect.pr_number, label=effect.label.value)
            case LabelEffect(kind=LabelChange.REMOVE):
                self.actions.remove_label(pr_number=effect.pr_number, label=effect.label.value)
            case NotificationEffect():
                self.actions.add_comment(pr_number=effect.pr_number, comment_body=notification_body(effect))
            case ReviewerRequestEffect():
                if effect.reviewers:
                    self.actions.request_reviewers(pr_number=effect.pr_number, reviewers=list(effect.reviewers))
            case ReviewDismissEffect():
                self._dismiss_review(effect)
            case _:
                raise TypeError(f"Don't know how to apply {effect!r}")

    def _dismiss_review(self, effect: ReviewDismissEffect) -> None:
        """
        Dismiss an approval.  Repos can forbid that, so if GitHub refuses,
        ask the reviewer to look again instead.
        """
        try:
            self.actions.dismiss_review(
                pr_number=effect.pr_number, review_id=effect.review_id, message=effect.message,
            )
        except RequestFailed as exc:
            logger.warning(f"Couldn't dismiss review {effect.review_id} on #{effect.pr_number}: {exc}")
            self.actions.request_reviewers(pr_number=effect.pr_number, reviewers=[effect.reviewer])


def apply_effects(effects: Iterable[Effect], actions) -> ApplyResult:
    return EffectApplier(effects, actions).apply()
