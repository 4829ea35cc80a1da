"""
Deciding labels from what a pull request says about itself.

Content labels come from phrases in the title and body.  Branch labels come
from the head branch's naming convention.  Both are simple tables, matched
by one function each.
"""

from typing import Iterable, List, Set, Tuple

from pr_lifecycle_labels.labels import Label

# (label, phrases): the label applies if any phrase appears in the
# lower-cased title and body.
CONTENT_RULES: List[Tuple[Label, Tuple[str, ...]]] = [
    (Label.BREAKING_CHANGE, ("breaking change", "breaking:", "[breaking]")),
    (Label.DOCUMENTATION, ("docs:", "documentation", "readme", "doc/")),
    (Label.REFACTOR, ("refactor:", "refactoring", "cleanup", "restructure")),
    (Label.PERFORMANCE, ("perf:", "performance", "optimize", "optimization")),
    (Label.SECURITY, ("security:", "security", "vulnerability", "cve-", "auth", "permission")),
    (Label.URGENT, ("urgent", "asap", "critical", "emergency")),
]

# (prefix, labels): head branches starting with prefix get the labels.
BRANCH_RULES: List[Tuple[str, Tuple[Label, ...]]] = [
    ("hotfix/", (Label.FIX_HOTFIX, Label.URGENT)),
    ("fix/", (Label.FIX_BUG,)),
    ("rc/", (Label.READY_FOR_STAGING,)),
]

# A pull request whose title says this is the base of a feature.
FEATURE_BASE_WORD = "base"


def content_text(title: str, body: str) -> str:
    return f"{title or ''} {body or ''}".lower()


def classify(title: str, body: str) -> Set[Label]:
    """
    The content labels that `title` and `body` call for.
    """
    text = content_text(title, body)
    return {label for label, phrases in CONTENT_RULES if any(phrase in text for phrase in phrases)}


def classify_in_order(title: str, body: str) -> List[Label]:
    """Like `classify`, but in rule-table order, for making effects."""
    matched = classify(title, body)
    return [label for label, _ in CONTENT_RULES if label in matched]


def revalidate(current: Iterable[Label], title: str, body: str) -> Tuple[List[Label], List[Label]]:
    """
    Re-check content labels after the text changed.

    Only labels from the content table are ever taken away: a label someone
    applied by hand for another reason is none of our business.

    Returns (labels to remove, labels to add).
    """
    current = set(current)
    matched = classify(title, body)
    to_remove = [
        label for label, _ in CONTENT_RULES
        if label in current and label not in matched
    ]
    return to_remove, classify_in_order(title, body)


def branch_labels(head_ref: str) -> List[Label]:
    """The labels called for by the naming of the head branch."""
    branch = (head_ref or "").lower()
    labels: List[Label] = []
    for prefix, rule_labels in BRANCH_RULES:
        if branch.startswith(prefix):
            labels.extend(rule_labels)
    return labels


def is_feature_base_title(title: str) -> bool:
    return FEATURE_BASE_WORD in (title or "").lower()
