"""
Handling one GitHub event from start to finish.
"""

from __future__ import annotations

import dataclasses
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Tuple

from pr_lifecycle_labels import celery, settings
from pr_lifecycle_labels.auth import get_github_session
from pr_lifecycle_labels.events import parse_event, repo_from_payload
from pr_lifecycle_labels.github_api import GitHubRepo
from pr_lifecycle_labels.router import route
from pr_lifecycle_labels.tasks import logger
from pr_lifecycle_labels.tasks.pr_labeling import (
    DryRunLabelingActions,
    LabelingActions,
    apply_effects,
)
from pr_lifecycle_labels.types import LabelerConfig
from pr_lifecycle_labels.utils import log_rate_limit, sentry_extra_context


@dataclass
class RunResult:
    """
    The outcome of handling an event.  Everything here is JSON-friendly so
    it can be a Celery result.
    """
    event_name: str
    repo: str
    applied: List[str] = field(default_factory=list)
    failures: List[Tuple[str, str]] = field(default_factory=list)
    # Set if the run as a whole failed.
    error: Optional[str] = None
    dry_run_actions: List = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return self.error is None


@celery.task(bind=True)
def handle_event_task(_, event_name, payload):
    """A bound Celery task to call handle_event."""
    try:
        result = handle_event(event_name, payload)
        log_rate_limit(get_github_session())
    except Exception:
        logger.exception("Couldn't handle_event_task")
        raise
    return dataclasses.asdict(result)


def handle_event(
    event_name: str,
    payload: Dict,
    repo_name: Optional[str] = None,
    actions=None,
    config: Optional[LabelerConfig] = None,
) -> RunResult:
    """
    Decide what an event means for the repo's pull requests, and do it.

    Errors applying single changes are recorded in the result.  Anything
    else (a malformed payload, GitHub refusing a read the decision depends
    on) is raised.
    """
    repo_name = repo_from_payload(payload, default=repo_name or settings.GITHUB_REPOSITORY)
    sentry_extra_context({"event_name": event_name, "repo": repo_name})
    logger.info(f"Handling {event_name!r} event for {repo_name}")

    result = RunResult(event_name=event_name, repo=repo_name)
    event = parse_event(event_name, payload)
    if event is None:
        logger.info(f"Unsupported event {event_name!r}, nothing to do")
        return result

    if not repo_name:
        raise ValueError("No repository in the event payload, and GITHUB_REPOSITORY isn't set")
    repo = GitHubRepo(repo_name)
    config = config or LabelerConfig.from_settings()
    effects = route(event, repo, config)
    logger.info(f"{len(effects)} changes to make: {', '.join(str(e) for e in effects) or 'none'}")

    actions = actions or LabelingActions(repo)
    applied = apply_effects(effects, actions)
    result.applied = applied.applied
    result.failures = applied.failures
    if isinstance(actions, DryRunLabelingActions):
        result.dry_run_actions = actions.action_calls
    return result


def run_event(event_name: str, payload: Dict, dry_run: bool = False) -> RunResult:
    """
    Handle an event, turning any failure into a failed result.
    """
    actions = DryRunLabelingActions() if dry_run else None
    try:
        return handle_event(event_name, payload, actions=actions)
    except Exception as exc:    # pylint: disable=broad-except
        logger.error(f"Handling {event_name!r} event failed: {exc}")
        return RunResult(
            event_name=event_name,
            repo=repo_from_payload(payload, default=settings.GITHUB_REPOSITORY),
            error=str(exc),
        )
