"""Tests of github_views.py"""

import base64
import json

import pytest
from flask import current_app

from pr_lifecycle_labels.utils import signature_for


def signed_post(client, event_name, payload, secret="webhook-test-secret", algorithm="sha256"):
    data = json.dumps(payload).encode("utf8")
    header = "X-Hub-Signature-256" if algorithm == "sha256" else "X-Hub-Signature"
    return client.post(
        "/github/hook-receiver",
        data=data,
        content_type="application/json",
        headers={header: signature_for(secret, data, algorithm), "X-GitHub-Event": event_name},
    )


@pytest.fixture
def client():
    return current_app.test_client()


@pytest.fixture
def delay(mocker):
    """The task that views queue, with its `delay` mocked."""
    task = mocker.patch("pr_lifecycle_labels.github_views.handle_event_task")
    task.delay.return_value.id = "task-123"
    return task.delay


def test_bad_signature(client, delay):
    resp = signed_post(client, "pull_request", {"action": "opened"}, secret="wrong")
    assert resp.status_code == 403
    delay.assert_not_called()


def test_missing_signature(client, delay):
    resp = client.post("/github/hook-receiver", json={"action": "opened"}, headers={"X-GitHub-Event": "push"})
    assert resp.status_code == 403
    delay.assert_not_called()


def test_ping(client, delay):
    resp = signed_post(client, "ping", {"zen": "Keep it logically awesome.", "hook": {}})
    assert resp.status_code == 200
    assert resp.text == "PONG"
    delay.assert_not_called()


def test_event_is_queued(client, delay):
    payload = {"action": "opened", "pull_request": {"number": 1}, "repository": {"full_name": "an-org/a-repo"}}
    resp = signed_post(client, "pull_request", payload)
    assert resp.status_code == 202
    assert resp.json["message"] == "queued"
    assert resp.json["status_url"].endswith("/tasks/status/task-123")
    delay.assert_called_once_with("pull_request", payload)


def test_sha1_signature_is_accepted(client, delay):
    payload = {"action": "created", "issue": {"number": 3}, "repository": {"full_name": "an-org/a-repo"}}
    resp = signed_post(client, "issue_comment", payload, algorithm="sha1")
    assert resp.status_code == 202
    delay.assert_called_once_with("issue_comment", payload)


def test_unsupported_event_is_ignored(client, delay):
    resp = signed_post(client, "workflow_run", {"action": "completed"})
    assert resp.status_code == 202
    delay.assert_not_called()


def basic_auth(user, password):
    return {"Authorization": "Basic " + base64.b64encode(f"{user}:{password}".encode()).decode()}


def test_tick_needs_auth(client, delay):
    resp = client.post("/github/tick")
    assert resp.status_code == 401
    delay.assert_not_called()


def test_tick(monkeypatch, client, delay):
    monkeypatch.setenv("HTTP_BASIC_AUTH_USERNAME", "cron")
    monkeypatch.setenv("HTTP_BASIC_AUTH_PASSWORD", "s3cret")
    resp = client.post("/github/tick", data={"repo": "an-org/other-repo"}, headers=basic_auth("cron", "s3cret"))
    assert resp.status_code == 202
    delay.assert_called_once_with("schedule", {"repository": {"full_name": "an-org/other-repo"}})


def test_tick_uses_configured_repo(monkeypatch, client, delay):
    monkeypatch.setenv("HTTP_BASIC_AUTH_USERNAME", "cron")
    monkeypatch.setenv("HTTP_BASIC_AUTH_PASSWORD", "s3cret")
    resp = client.post("/github/tick", headers=basic_auth("cron", "s3cret"))
    assert resp.status_code == 202
    delay.assert_called_once_with("schedule", {"repository": {"full_name": "an-org/a-repo"}})
