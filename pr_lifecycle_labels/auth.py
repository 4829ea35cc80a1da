"""
The authenticated HTTP session for GitHub's REST API.
"""

import requests
from urlobject import URLObject

from pr_lifecycle_labels import __version__, settings


class BaseUrlSession(requests.Session):
    """
    A requests Session that resolves relative URLs against `base_url`.

    Absolute URLs, like the "next" links GitHub paginates with, are used as
    they are.
    """
    def __init__(self, base_url):
        super().__init__()
        self.base_url = URLObject(base_url)

    def request(self, method, url, *args, **kwargs):     # pylint: disable=arguments-differ
        return super().request(method, self.base_url.relative(url), *args, **kwargs)


def get_github_session():
    """
    A session for the GitHub API, authenticated with GITHUB_TOKEN.
    """
    session = BaseUrlSession(base_url=settings.GITHUB_API_URL)
    session.headers.update({
        "Authorization": f"token {settings.GITHUB_TOKEN}",
        "Accept": "application/vnd.github+json",
        "User-Agent": f"pr-lifecycle-labels/{__version__}",
    })
    session.trust_env = False   # don't let a local .netrc override the token
    return session
