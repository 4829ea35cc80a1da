"""Helpers for tests."""

import random
import re
from typing import Dict, List, Optional


def check_good_markdown(text: str) -> None:
    """
    Make some checks of Markdown text.

    These are meant to catch mistakes in templates or code producing Markdown.

    Returns:
        Nothing.  Will raise an exception with a failure message if something
        is wrong.
    """
    if text.startswith((" ", "\n", "\t")):
        raise ValueError(f"Markdown shouldn't start with whitespace: {text!r}")

    # An unfilled template variable renders as nothing, leaving a bare "@".
    if re.search(r"@(\s|$)", text):
        raise ValueError(f"Markdown has an empty mention: {text!r}")

    if "None" in text:
        raise ValueError(f"Markdown mentions None: {text!r}")


def random_text() -> str:
    """
    Generate a random text string.
    """
    alphabet = "abcdefghijklmnopqrstuvwxyz"
    words = []
    for _ in range(random.randint(4, 10)):
        words.append("".join(random.choice(alphabet) for _ in range(random.randrange(1, 6))))
    return " ".join(words)


# Webhook payloads, shaped like GitHub's.

def pull_request_payload(pr, action: str, changes: Optional[Dict] = None) -> Dict:
    """A "pull_request" event about a FakeGitHub pull request."""
    payload = {
        "action": action,
        "number": pr.number,
        "pull_request": pr.as_json(),
        "repository": pr.repo.as_json(),
        "sender": {"login": pr.user.login},
    }
    if changes is not None:
        payload["changes"] = changes
    return payload


def review_payload(pr, review, action: str = "submitted") -> Dict:
    """A "pull_request_review" event."""
    return {
        "action": action,
        "pull_request": pr.as_json(),
        "review": review.as_json(),
        "repository": pr.repo.as_json(),
    }


def push_payload(repo, branch: str, commits: List[Dict]) -> Dict:
    """A "push" event.  `commits` are dicts with "id" and "message"."""
    return {
        "ref": f"refs/heads/{branch}",
        "commits": commits,
        "repository": repo.as_json(),
    }


def comment_payload(pr, body: str, user: str = "commenter", on_pr: bool = True) -> Dict:
    """An "issue_comment" event, on a pull request unless `on_pr` is False."""
    issue = {"number": pr.number, "title": pr.title}
    if on_pr:
        issue["pull_request"] = {"url": f"https://api.github.com/repos/{pr.repo.full_name}/pulls/{pr.number}"}
    return {
        "action": "created",
        "issue": issue,
        "comment": {"body": body, "user": {"login": user}},
        "repository": pr.repo.as_json(),
    }
