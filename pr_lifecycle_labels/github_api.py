"""
Reading and writing one repository on GitHub, over the REST API.

This is the only place that knows GitHub URLs.  Reads return the types from
types.py; writes return nothing useful and raise RequestFailed when GitHub
says no.
"""

from typing import Dict, Iterable, List, Optional
from urllib.parse import quote

from urlobject import URLObject

from pr_lifecycle_labels import logger
from pr_lifecycle_labels.auth import get_github_session
from pr_lifecycle_labels.labels import Label
from pr_lifecycle_labels.types import PullRequest, Review
from pr_lifecycle_labels.utils import (
    log_check_response,
    paginated_get,
    retry_get,
    text_summary,
)


class GitHubRepo:
    """
    The GitHub operations the bot needs, for a single "owner/repo".
    """

    def __init__(self, full_name: str, session=None):
        self.full_name = full_name
        self.session = session or get_github_session()

    def __repr__(self):
        return f"<GitHubRepo {self.full_name}>"

    @property
    def owner(self) -> str:
        owner, _, _ = self.full_name.partition("/")
        return owner

    def _url(self, path: str) -> str:
        return f"/repos/{self.full_name}{path}"

    # Pull requests

    def list_pull_requests(
        self,
        state: str = "open",
        head: Optional[str] = None,
        sort: Optional[str] = None,
        direction: Optional[str] = None,
        limit: Optional[int] = None,
        per_page: int = 100,
    ) -> List[PullRequest]:
        """
        List pull requests.  `head` is a branch name in this repo's owner.
        """
        params: Dict[str, str] = {"state": state}
        if head:
            params["head"] = f"{self.owner}:{head}"
        if sort:
            params["sort"] = sort
        if direction:
            params["direction"] = direction
        url = URLObject(self._url("/pulls")).set_query_params(**params)
        return [
            PullRequest.from_pr_dict(pr)
            for pr in paginated_get(url, session=self.session, limit=limit, per_page=per_page)
        ]

    def get_pull_request(self, number: int) -> PullRequest:
        resp = retry_get(self.session, self._url(f"/pulls/{number}"))
        log_check_response(resp)
        return PullRequest.from_pr_dict(resp.json())

    def list_reviews(self, number: int) -> List[Review]:
        url = self._url(f"/pulls/{number}/reviews")
        return [Review.from_review_dict(r) for r in paginated_get(url, session=self.session)]

    def list_commit_shas(self, number: int, limit: int = 100) -> List[str]:
        url = self._url(f"/pulls/{number}/commits")
        return [c["sha"] for c in paginated_get(url, session=self.session, limit=limit, per_page=limit)]

    def commit_pull_request_numbers(self, sha: str) -> List[int]:
        """
        The numbers of the pull requests GitHub links to a commit.

        Not every commit has this information, and GitHub doesn't always
        compute it in time.  An empty list means "don't know".
        """
        url = self._url(f"/commits/{sha}/pulls")
        return [pr["number"] for pr in paginated_get(url, session=self.session)]

    # Labels

    def list_issue_labels(self, number: int) -> List[str]:
        url = self._url(f"/issues/{number}/labels")
        return [lbl["name"] for lbl in paginated_get(url, session=self.session)]

    def list_repo_labels(self) -> Dict[str, Dict]:
        """Get a dict mapping label names to full label info."""
        return {lbl["name"]: lbl for lbl in paginated_get(self._url("/labels"), session=self.session)}

    def get_label(self, name: str) -> Optional[Dict]:
        """The repo's label called `name`, or None if it doesn't exist."""
        resp = self.session.get(self._url(f"/labels/{quote(name)}"))
        if resp.status_code == 404:
            return None
        log_check_response(resp)
        return resp.json()

    def create_label(self, label: Label) -> None:
        resp = self.session.post(
            self._url("/labels"),
            json={"name": label.value, "color": label.color, "description": label.description},
        )
        if resp.status_code == 422:
            # Someone else made it in the meantime.
            logger.debug(f"Label {label.value!r} already exists in {self.full_name}")
            return
        log_check_response(resp)
        logger.info(f"Created label {label.value!r} with color {label.color} in {self.full_name}")

    def update_label(self, label: Label) -> None:
        resp = self.session.patch(
            self._url(f"/labels/{quote(label.value)}"),
            json={"color": label.color, "description": label.description},
        )
        log_check_response(resp)
        logger.info(f"Updated label {label.value!r} in {self.full_name}")

    def ensure_label_exists(self, label: Label) -> None:
        if self.get_label(label.value) is None:
            self.create_label(label)

    def add_labels(self, number: int, names: Iterable[str]) -> None:
        names = list(names)
        resp = self.session.post(self._url(f"/issues/{number}/labels"), json={"labels": names})
        log_check_response(resp)
        logger.info(f"Added labels {names} to #{number}")

    def remove_label(self, number: int, name: str) -> bool:
        """
        Remove a label from an issue or pull request.

        Returns False if the label wasn't there, which is fine.
        """
        resp = self.session.delete(self._url(f"/issues/{number}/labels/{quote(name)}"))
        if resp.status_code == 404:
            logger.debug(f"Label {name!r} wasn't on #{number}")
            return False
        log_check_response(resp)
        logger.info(f"Removed label {name!r} from #{number}")
        return True

    # Conversation

    def create_comment(self, number: int, body: str) -> None:
        logger.info(f"Commenting on #{number}: {text_summary(body, 90)!r}")
        resp = self.session.post(self._url(f"/issues/{number}/comments"), json={"body": body})
        log_check_response(resp)

    def request_reviewers(self, number: int, reviewers: Iterable[str]) -> None:
        reviewers = list(reviewers)
        resp = self.session.post(
            self._url(f"/pulls/{number}/requested_reviewers"),
            json={"reviewers": reviewers},
        )
        log_check_response(resp)
        logger.info(f"Requested review from {reviewers} on #{number}")

    def dismiss_review(self, number: int, review_id: int, message: str) -> None:
        resp = self.session.put(
            self._url(f"/pulls/{number}/reviews/{review_id}/dismissals"),
            json={"message": message, "event": "DISMISS"},
        )
        log_check_response(resp)
        logger.info(f"Dismissed review {review_id} on #{number}")

