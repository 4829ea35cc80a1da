"""
Operations on GitHub data.
"""

from typing import Dict, List

from pr_lifecycle_labels.github_api import GitHubRepo
from pr_lifecycle_labels.labels import Label
from pr_lifecycle_labels.tasks import logger


def label_needs_update(label: Label, repo_label: Dict) -> bool:
    color = (repo_label.get("color") or "").lower()
    description = repo_label.get("description") or ""
    return color != label.color.lower() or description != label.description


def synchronize_labels(repo: GitHubRepo, dry_run: bool = False) -> Dict[str, List[str]]:
    """
    Make sure the repo has every label we manage, with the right color and
    description.

    Labels we don't manage are left alone, and nothing is ever deleted.
    Returns the names of the labels created and updated.
    """
    repo_labels = repo.list_repo_labels()
    created = []
    updated = []
    for label in Label:
        repo_label = repo_labels.get(label.value)
        if repo_label is None:
            created.append(label.value)
            if not dry_run:
                repo.create_label(label)
        elif label_needs_update(label, repo_label):
            updated.append(label.value)
            if not dry_run:
                repo.update_label(label)

    logger.info(f"Synchronized labels in {repo.full_name}: {len(created)} created, {len(updated)} updated")
    return {"created": created, "updated": updated}
