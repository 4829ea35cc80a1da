"""
Views that receive GitHub webhooks, and the scheduled-check trigger.

Nothing is handled in the request: events are checked and queued for a
Celery worker, which does the GitHub reads and writes.
"""

import logging

from flask import current_app as app
from flask import Blueprint, request

from pr_lifecycle_labels import settings
from pr_lifecycle_labels.events import SUPPORTED_EVENTS
from pr_lifecycle_labels.tasks.github import handle_event_task
from pr_lifecycle_labels.utils import (
    is_valid_signature, queue_task, request_signature, requires_auth, sentry_extra_context,
)

github_bp = Blueprint('github_views', __name__)
logger = logging.getLogger(__name__)


@github_bp.route('/hook-receiver', methods=('POST',))
def hook_receiver():
    """
    Accept a GitHub webhook delivery.

    Deliveries not signed with GITHUB_WEBHOOKS_SECRET get a 403.  Pings get
    "PONG".  Events we act on are queued, with a 202 pointing at the task
    status.  Everything else gets a 202 and is dropped.
    """
    secret = app.config.get('GITHUB_WEBHOOKS_SECRET') or ""
    if not is_valid_signature(secret, request_signature(request.headers), request.data):
        logger.info("Rejecting webhook delivery with a bad signature")
        return "Signature doesn't match", 403

    event_name = request.headers.get("X-GitHub-Event", "")
    payload = request.get_json()
    repo = (payload.get("repository") or {}).get("full_name")
    logger.info(
        f"GitHub {event_name!r} event for {repo}: action={payload.get('action')!r}, "
        f"sender={(payload.get('sender') or {}).get('login')!r}"
    )
    sentry_extra_context({"event_name": event_name, "event": payload})

    match payload:
        case {"zen": _, "hook": _}:
            logger.info(f"Ping for {repo}")
            return "PONG"

    if event_name not in SUPPORTED_EVENTS:
        return "Thank you", 202

    return queue_task(handle_event_task, event_name, payload)


@github_bp.route("/tick", methods=("POST",))
@requires_auth
def tick():
    """
    Queue the scheduled checks (abandoned pull requests, merge conflicts)
    for a repo.

    A scheduler should POST here every so often.  The repo is the "repo"
    form field, or GITHUB_REPOSITORY.
    """
    repo = request.form.get("repo") or settings.GITHUB_REPOSITORY
    if not repo:
        return "No repo to check", 400
    return queue_task(handle_event_task, "schedule", {"repository": {"full_name": repo}})
