"""Settings for how the labeler should behave.

Each setting can come from a GitHub Actions input (``INPUT_STAGINGBRANCH``,
the way the runner exposes ``with: stagingBranch: ...``) or from a plain
environment variable (``STAGING_BRANCH``).  The action input wins.
"""

import os
from typing import Optional

from pr_lifecycle_labels import logger


def read_input(input_name: str, env_name: str, default: Optional[str] = None) -> Optional[str]:
    """Read an action input, falling back to an environment variable, then `default`."""
    value = os.environ.get(f"INPUT_{input_name.upper()}") or os.environ.get(env_name)
    return value if value else default


def read_int_input(input_name: str, env_name: str, default: int) -> int:
    """Like `read_input`, for a whole number.  Junk gets a warning and `default`."""
    value = read_input(input_name, env_name)
    if value is None:
        return default
    try:
        return int(value)
    except ValueError:
        logger.warning(f"Setting {input_name} should be a whole number, not {value!r}: using {default}")
        return default


GITHUB_TOKEN = read_input("token", "GITHUB_TOKEN")

# Actions sets this for GitHub Enterprise Server.
GITHUB_API_URL = os.environ.get("GITHUB_API_URL") or "https://api.github.com"

# The "owner/repo" to act on when an event payload doesn't say.
GITHUB_REPOSITORY = os.environ.get("GITHUB_REPOSITORY", "")

STAGING_BRANCH = read_input("stagingBranch", "STAGING_BRANCH", "staging")
PRODUCTION_BRANCH = read_input("productionBranch", "PRODUCTION_BRANCH", "main")

# Days without activity before an open pull request is marked abandoned.
ABANDONED_TIMEOUT = read_int_input("abandonedTimeout", "ABANDONED_TIMEOUT", 30)

CHECK_CONFLICTS = read_input("checkConflicts", "CHECK_CONFLICTS", "false") == "true"

# Minutes between conflict checks.  Only the external scheduler uses this.
CONFLICT_CHECK_INTERVAL = read_int_input("conflictCheckInterval", "CONFLICT_CHECK_INTERVAL", 60)

# The team to @-mention, like "my-org/reviewers".  Empty means no team pings.
TEAM_ID = read_input("teamId", "TEAM_ID", "")
