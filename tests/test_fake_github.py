"""Tests of FakeGithub."""

import pytest
import requests

from freezegun import freeze_time

from .fake_github import DoesNotExist


# pylint: disable=missing-timeout

class TestUsers:
    def test_get_me(self, fake_github):
        resp = requests.get("https://api.github.com/user")
        assert resp.status_code == 200
        assert resp.json() == {"login": "labeler-bot"}


class TestRepos:
    def test_make_repo(self, fake_github):
        repo = fake_github.make_repo("an-org", "a-repo")
        assert repo.owner == "an-org"
        assert repo.repo == "a-repo"
        repo2 = fake_github.get_repo("an-org", "a-repo")
        assert repo == repo2

    def test_missing_repo(self, fake_github):
        with pytest.raises(DoesNotExist):
            fake_github.get_repo("an-org", "nope")


class TestPullRequests:
    def test_get_pull_request(self, fake_github):
        with freeze_time("2026-01-15 12:34:56"):
            pr = fake_github.make_pull_request(user="alice", title="Hi", number=5, head_ref="fix/x")
        resp = requests.get("https://api.github.com/repos/an-org/a-repo/pulls/5")
        assert resp.status_code == 200
        prj = resp.json()
        assert prj["number"] == 5
        assert prj["user"]["login"] == "alice"
        assert prj["head"]["ref"] == "fix/x"
        assert prj["head"]["sha"] == pr.commits[-1]
        assert prj["updated_at"] == "2026-01-15T12:34:56Z"
        assert prj["merged"] is False
        assert prj["mergeable"] is True

    def test_missing_pull_request(self, fake_github):
        fake_github.make_repo("an-org", "a-repo")
        resp = requests.get("https://api.github.com/repos/an-org/a-repo/pulls/99")
        assert resp.status_code == 404

    def test_list_by_head(self, fake_github):
        repo = fake_github.make_repo("an-org", "a-repo")
        repo.make_pull_request(number=1, head_ref="one")
        repo.make_pull_request(number=2, head_ref="two")
        resp = requests.get("https://api.github.com/repos/an-org/a-repo/pulls?state=open&head=an-org:two")
        assert [p["number"] for p in resp.json()] == [2]
        assert "merged" not in resp.json()[0]

    def test_close_and_merge(self, fake_github):
        pr = fake_github.make_pull_request(number=5)
        pr.close(merge=True)
        prj = requests.get("https://api.github.com/repos/an-org/a-repo/pulls/5").json()
        assert prj["state"] == "closed"
        assert prj["merged"] is True
        assert prj["merged_at"] == prj["closed_at"]


class TestLabels:
    def test_add_and_remove(self, fake_github):
        pr = fake_github.make_pull_request(number=5)
        url = "https://api.github.com/repos/an-org/a-repo/issues/5/labels"
        resp = requests.post(url, json={"labels": ["Status: Draft"]})
        assert resp.status_code == 200
        assert pr.labels == {"Status: Draft"}
        resp = requests.delete(url + "/Status%3A%20Draft")
        assert resp.status_code == 200
        assert pr.labels == set()
        resp = requests.delete(url + "/Status%3A%20Draft")
        assert resp.status_code == 404

    def test_create_existing_label(self, fake_github):
        fake_github.make_repo("an-org", "a-repo")
        resp = requests.post("https://api.github.com/repos/an-org/a-repo/labels", json={"name": "bug"})
        assert resp.status_code == 422


class TestReviews:
    def test_dismiss(self, fake_github):
        pr = fake_github.make_pull_request(number=5)
        review = pr.add_review("bob", "APPROVED")
        url = f"https://api.github.com/repos/an-org/a-repo/pulls/5/reviews/{review.id}/dismissals"
        resp = requests.put(url, json={"message": "Stale", "event": "DISMISS"})
        assert resp.status_code == 200
        assert review.state == "DISMISSED"


class TestFailingRequests:
    def test_fail_requests(self, fake_github):
        fake_github.make_pull_request(number=5)
        fake_github.fail_requests("GET", r"/pulls/5$", 503)
        assert requests.get("https://api.github.com/repos/an-org/a-repo/pulls/5").status_code == 503
        assert requests.get("https://api.github.com/repos/an-org/a-repo/pulls").status_code == 200
