"""
The bot makes comments on pull requests. This is stuff needed to do it well.
"""

from typing import Dict, Iterable, List, Tuple

from flask import render_template

from pr_lifecycle_labels.effects import Audience, NotificationEffect

# The message GitHub records on approvals we dismiss.
DISMISSAL_MESSAGE = "Dismissed due to new commits - re-review required"

# Templates for comments aimed at one or more people.
NOTIFICATION_TEMPLATES: Dict[Tuple[Audience, str], str] = {
    (Audience.AUTHOR, "production"): "author_production.md.j2",
    (Audience.AUTHOR, "abandoned"): "author_abandoned.md.j2",
    (Audience.APPROVERS, "rereview"): "approvers_rereview.md.j2",
    (Audience.REVIEWERS, "new_commits"): "reviewers_new_commits.md.j2",
}

# Team pings are keyed by the reason for the ping.  Anything else gets the
# generic template.
TEAM_TEMPLATES: Dict[str, str] = {
    "action_required": "team_action_required.md.j2",
    "urgent": "team_urgent.md.j2",
    "breaking": "team_breaking.md.j2",
    "security": "team_security.md.j2",
    "production": "team_production.md.j2",
}
TEAM_GENERIC_TEMPLATE = "team_generic.md.j2"


class UnknownNotification(Exception):
    """There's no template for this notification."""


def unique_mentions(users: Iterable[str]) -> List[str]:
    """
    De-duplicate user handles, keeping the first-seen order.

    Handles are compared exactly, without folding case.
    """
    return list(dict.fromkeys(u for u in users if u))


def mention_line(users: Iterable[str]) -> str:
    return " ".join(f"@{user}" for user in unique_mentions(users))


def template_for(note: NotificationEffect) -> str:
    if note.audience == Audience.TEAM:
        return TEAM_TEMPLATES.get(note.template, TEAM_GENERIC_TEMPLATE)
    try:
        return NOTIFICATION_TEMPLATES[(note.audience, note.template)]
    except KeyError:
        raise UnknownNotification(f"No template for {note.audience.value} {note.template!r}") from None


def notification_body(note: NotificationEffect) -> str:
    """
    Render the comment text for a notification.
    """
    params = dict(note.params)
    params.setdefault("pr_number", note.pr_number)
    if "users" in params:
        params["mentions"] = mention_line(params["users"])
    return render_template(template_for(note), **params)
