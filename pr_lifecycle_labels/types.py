"""Types specific to pr_lifecycle_labels."""

from __future__ import annotations

import dataclasses
from typing import Dict, Optional

import arrow

from pr_lifecycle_labels import settings

# A pull request as described by a JSON object.
PrDict = Dict

# A pull request review as described by a JSON object.
ReviewDict = Dict

# A commit from a push event payload, or from a pull request's commit list.
CommitDict = Dict


def _timestamp(value: Optional[str]) -> Optional[arrow.Arrow]:
    return arrow.get(value) if value else None


@dataclasses.dataclass(frozen=True)
class PullRequest:
    """
    A snapshot of a pull request, as GitHub reported it during this run.
    """
    number: int
    title: str = ""
    body: str = ""
    author: str = ""
    state: str = "open"
    draft: bool = False
    merged: bool = False
    merged_at: Optional[arrow.Arrow] = None
    updated_at: Optional[arrow.Arrow] = None
    head_ref: str = ""
    base_ref: str = ""
    # True, False, or None while GitHub is still computing it.
    mergeable: Optional[bool] = None

    @classmethod
    def from_pr_dict(cls, pr: PrDict) -> PullRequest:
        return cls(
            number=pr["number"],
            title=pr.get("title") or "",
            body=pr.get("body") or "",
            author=(pr.get("user") or {}).get("login", ""),
            state=pr.get("state", "open"),
            draft=bool(pr.get("draft", False)),
            merged=bool(pr.get("merged", False)),
            merged_at=_timestamp(pr.get("merged_at")),
            updated_at=_timestamp(pr.get("updated_at")),
            head_ref=(pr.get("head") or {}).get("ref", ""),
            base_ref=(pr.get("base") or {}).get("ref", ""),
            mergeable=pr.get("mergeable"),
        )

    def __str__(self):
        return f"#{self.number}"

    @property
    def is_merged(self) -> bool:
        """Closed and merged.  List endpoints don't send `merged`, only `merged_at`."""
        return self.state == "closed" and (self.merged or self.merged_at is not None)


@dataclasses.dataclass(frozen=True)
class Review:
    id: int
    author: str
    # APPROVED, CHANGES_REQUESTED, COMMENTED, or DISMISSED.
    state: str
    dismissed_at: Optional[arrow.Arrow] = None

    @classmethod
    def from_review_dict(cls, review: ReviewDict) -> Review:
        return cls(
            id=review["id"],
            author=(review.get("user") or {}).get("login", ""),
            state=(review.get("state") or "").upper(),
            dismissed_at=_timestamp(review.get("dismissed_at")),
        )

    @property
    def is_approval(self) -> bool:
        """Does this review count as an approval right now?"""
        return self.state == "APPROVED" and self.dismissed_at is None


@dataclasses.dataclass(frozen=True)
class Commit:
    """
    A pushed commit.  Malformed payloads can leave out the sha.
    """
    sha: Optional[str]
    message: str = ""

    @classmethod
    def from_commit_dict(cls, commit: CommitDict) -> Commit:
        # Push payloads call the sha "id", the REST API calls it "sha".
        sha = commit.get("sha") or commit.get("id")
        if sha == "unknown":
            sha = None
        return cls(sha=sha, message=commit.get("message") or "")


@dataclasses.dataclass(frozen=True)
class LabelerConfig:
    """The thresholds and branch names the policy runs with."""
    staging_branch: str = "staging"
    production_branch: str = "main"
    abandoned_timeout: int = 30
    check_conflicts: bool = False
    conflict_check_interval: int = 60
    team_id: str = ""

    @classmethod
    def from_settings(cls) -> LabelerConfig:
        return cls(
            staging_branch=settings.STAGING_BRANCH,
            production_branch=settings.PRODUCTION_BRANCH,
            abandoned_timeout=settings.ABANDONED_TIMEOUT,
            check_conflicts=settings.CHECK_CONFLICTS,
            conflict_check_interval=settings.CONFLICT_CHECK_INTERVAL,
            team_id=settings.TEAM_ID or "",
        )
