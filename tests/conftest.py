"""Automatically run by pytest to set up test infrastructure."""

import pytest
import requests_mock

import pr_lifecycle_labels
from pr_lifecycle_labels.github_api import GitHubRepo
from pr_lifecycle_labels.types import LabelerConfig

from . import settings as test_settings
from .fake_github import FakeGitHub


@pytest.fixture
def requests_mocker():
    """Make requests_mock available as a fixture."""
    mocker = requests_mock.Mocker(real_http=False, case_sensitive=True)
    mocker.start()
    try:
        yield mocker
    finally:
        mocker.stop()


def pytest_addoption(parser):
    parser.addoption(
        "--percent-404",
        action="store",
        help="What percent of HTTP requests should fail with a 404",
        default="0",
    )


@pytest.fixture(autouse=True)
def settings_for_tests(mocker):
    for name, value in vars(test_settings).items():
        if name.isupper():
            mocker.patch(f"pr_lifecycle_labels.settings.{name}", value)


@pytest.fixture(autouse=True)
def no_retry_sleep(mocker):
    """Make the retry sleep a no-op so it won't slow the tests."""
    mocker.patch("pr_lifecycle_labels.utils.retry_sleep", lambda x: None)


@pytest.fixture
def fake_github(pytestconfig, requests_mocker):
    fraction_404 = float(pytestconfig.getoption("percent_404")) / 100.0
    the_fake_github = FakeGitHub(login="labeler-bot", fraction_404=fraction_404)
    the_fake_github.install_mocks(requests_mocker)
    return the_fake_github


@pytest.fixture
def fake_repo(fake_github):
    """The repo most tests work in."""
    return fake_github.make_repo("an-org", "a-repo")


@pytest.fixture
def repo(fake_repo):
    """A GitHubRepo talking to `fake_repo`."""
    return GitHubRepo(fake_repo.full_name)


@pytest.fixture
def config():
    return LabelerConfig(
        staging_branch="staging",
        production_branch="main",
        abandoned_timeout=30,
        check_conflicts=True,
        team_id="an-org/reviewers",
    )


@pytest.fixture(autouse=True)
def configure_flask_app():
    """
    Have Flask initialized properly, so that comment templates can render.
    """
    app = pr_lifecycle_labels.create_app(config="testing")
    with app.test_request_context('/', base_url="https://pr-labels.example.com"):
        yield
